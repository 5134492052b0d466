"""
HTTP client for EdgeGrid protected APIs

This module provides a thin ``requests`` based client that signs every
request with EdgeGrid credentials, with optional retry handling and
structured errors for non-success responses.
"""

import time
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, Optional, Union
from urllib.parse import urljoin

import requests

from .version import __version__
from .config.edgerc import EdgeGridConfig, DEFAULT_EDGERC_PATH, DEFAULT_SECTION, validate_config
from .exceptions import HttpStatusError, ServerCommunicationError, ValidationError
from .signing.integration import EdgeGridAuth

logger = logging.getLogger(__name__)

RETRY_STATUS_CODES = frozenset([429, 500, 502, 503, 504])

ACCOUNT_SWITCH_KEY_PARAM = 'accountSwitchKey'


@dataclass
class ClientSettings:
    """Transport settings for EdgeGridHttpClient."""
    timeout: float = 30.0
    verify_ssl: bool = True
    retry_attempts: int = 0
    retry_backoff_factor: float = 0.3
    max_retry_delay: float = 10.0
    user_agent: str = f"EdgeGrid-Python-SDK/{__version__}"

    def __post_init__(self):
        """Validate client settings."""
        if self.timeout <= 0:
            raise ValidationError("Timeout must be positive")

        if self.retry_attempts < 0:
            raise ValidationError("Retry attempts must be non-negative")

        if self.retry_backoff_factor < 0:
            raise ValidationError("Retry backoff factor must be non-negative")

        if self.max_retry_delay < 0:
            raise ValidationError("Max retry delay must be non-negative")


class EdgeGridHttpClient:
    """
    HTTP client for EdgeGrid protected APIs.

    Requests are built relative to the credential host and signed by
    EdgeGridAuth while being prepared. Retries re-prepare the request, so
    each attempt carries its own timestamp and nonce.
    """

    def __init__(
        self,
        config: EdgeGridConfig,
        settings: Optional[ClientSettings] = None,
        headers_to_sign: Iterable[str] = (),
        session: Optional[requests.Session] = None
    ):
        """
        Initialize the HTTP client.

        Args:
            config: Credential set
            settings: Optional transport settings
            headers_to_sign: Names of headers to include in the signature
            session: Optional existing requests session to use

        Raises:
            MissingCredentialError: If a credential field is empty
        """
        self.config = validate_config(config)
        self.settings = settings or ClientSettings()
        self.base_url = self.config.host.rstrip('/') + '/'
        self.auth = EdgeGridAuth(self.config, headers_to_sign)
        self.session = session or self._create_session()

        logger.info(f"Initialized EdgeGrid HTTP client for host: {self.config.host}")

    @classmethod
    def from_edgerc(
        cls,
        path: str = DEFAULT_EDGERC_PATH,
        section: str = DEFAULT_SECTION,
        **kwargs
    ) -> 'EdgeGridHttpClient':
        """Create a client from an ``.edgerc`` section."""
        return cls(EdgeGridConfig.from_edgerc(path, section), **kwargs)

    @classmethod
    def from_env(cls, section: str = DEFAULT_SECTION, **kwargs) -> 'EdgeGridHttpClient':
        """Create a client from ``AKAMAI_*`` environment variables."""
        return cls(EdgeGridConfig.from_env(section), **kwargs)

    def _create_session(self) -> requests.Session:
        session = requests.Session()
        session.headers.update({
            'Accept': 'application/json',
            'User-Agent': self.settings.user_agent,
        })
        return session

    def build_url(self, path: str) -> str:
        """Resolve a path against the credential host."""
        if path.startswith(('http://', 'https://')):
            return path
        return urljoin(self.base_url, path.lstrip('/'))

    def _build_params(self, params: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        merged = dict(params or {})
        if self.config.account_switch_key and ACCOUNT_SWITCH_KEY_PARAM not in merged:
            merged[ACCOUNT_SWITCH_KEY_PARAM] = self.config.account_switch_key
        return merged

    def _retry_delay(self, attempt: int) -> float:
        delay = self.settings.retry_backoff_factor * (2 ** attempt)
        return min(delay, self.settings.max_retry_delay)

    def request(
        self,
        method: str,
        path: str,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        json: Any = None,
        data: Optional[Union[str, bytes, Mapping[str, Any]]] = None,
        **kwargs
    ) -> requests.Response:
        """
        Send a signed request.

        Args:
            method: HTTP method
            path: Path relative to the credential host, or an absolute URL
            params: Query parameters
            headers: Extra request headers
            json: JSON body
            data: Raw body
            **kwargs: Additional arguments for requests

        Returns:
            requests.Response: HTTP response

        Raises:
            ServerCommunicationError: On network errors
        """
        url = self.build_url(path)
        request = requests.Request(
            method=method.upper(),
            url=url,
            params=self._build_params(params),
            headers=dict(headers or {}),
            json=json,
            data=data,
            auth=self.auth,
        )

        kwargs.setdefault('timeout', self.settings.timeout)
        kwargs.setdefault('verify', self.settings.verify_ssl)

        attempt = 0
        while True:
            # Each preparation runs EdgeGridAuth again
            prepared = self.session.prepare_request(request)
            try:
                logger.debug(f"Making {prepared.method} request to {prepared.url}")
                response = self.session.send(prepared, **kwargs)
            except requests.exceptions.Timeout:
                if attempt < self.settings.retry_attempts:
                    attempt = self._wait_before_retry(attempt, "timeout")
                    continue
                raise ServerCommunicationError(
                    f"Request timeout after {self.settings.timeout} seconds",
                    "TIMEOUT"
                )
            except requests.exceptions.ConnectionError as e:
                if attempt < self.settings.retry_attempts:
                    attempt = self._wait_before_retry(attempt, "connection error")
                    continue
                raise ServerCommunicationError(f"Connection error: {e}", "CONNECTION_ERROR")
            except requests.exceptions.RequestException as e:
                raise ServerCommunicationError(f"Request failed: {e}")

            if response.status_code in RETRY_STATUS_CODES and attempt < self.settings.retry_attempts:
                response.close()
                attempt = self._wait_before_retry(attempt, f"HTTP {response.status_code}")
                continue

            return response

    def _wait_before_retry(self, attempt: int, reason: str) -> int:
        delay = self._retry_delay(attempt)
        logger.warning(
            f"Retrying request after {reason} "
            f"(attempt {attempt + 1}/{self.settings.retry_attempts}, delay {delay:.2f}s)"
        )
        time.sleep(delay)
        return attempt + 1

    def get(self, path: str, **kwargs) -> requests.Response:
        """Make GET request."""
        return self.request('GET', path, **kwargs)

    def post(self, path: str, **kwargs) -> requests.Response:
        """Make POST request."""
        return self.request('POST', path, **kwargs)

    def put(self, path: str, **kwargs) -> requests.Response:
        """Make PUT request."""
        return self.request('PUT', path, **kwargs)

    def delete(self, path: str, **kwargs) -> requests.Response:
        """Make DELETE request."""
        return self.request('DELETE', path, **kwargs)

    def patch(self, path: str, **kwargs) -> requests.Response:
        """Make PATCH request."""
        return self.request('PATCH', path, **kwargs)

    def send_json(self, method: str, path: str, **kwargs) -> Any:
        """
        Send a signed request and decode the JSON response.

        Raises:
            HttpStatusError: If the response status is not a success
            ServerCommunicationError: If the response is not valid JSON
        """
        response = self.request(method, path, **kwargs)
        raise_for_status(response)

        try:
            return response.json()
        except ValueError as e:
            raise ServerCommunicationError(
                f"Invalid JSON response: {e}",
                "INVALID_RESPONSE",
                http_status=response.status_code
            )

    def send_text(self, method: str, path: str, **kwargs) -> str:
        """Send a signed request and return the response body as text."""
        return self.request(method, path, **kwargs).text

    def send_bytes(self, method: str, path: str, **kwargs) -> bytes:
        """Send a signed request and return the response body as bytes."""
        return self.request(method, path, **kwargs).content

    def close(self) -> None:
        """Close the underlying session."""
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


def raise_for_status(response: requests.Response) -> None:
    """
    Raise HttpStatusError for a non-success response.

    Args:
        response: Response to check
    """
    if response.ok:
        return

    try:
        body = response.text
    except (UnicodeDecodeError, requests.exceptions.RequestException):
        body = ""

    raise HttpStatusError(response.status_code, response.reason or "", body)


def create_client(
    config: EdgeGridConfig,
    timeout: float = 30.0,
    retry_attempts: int = 0,
    headers_to_sign: Iterable[str] = ()
) -> EdgeGridHttpClient:
    """
    Create an EdgeGrid HTTP client.

    Args:
        config: Credential set
        timeout: Request timeout in seconds
        retry_attempts: Number of retries for transient failures
        headers_to_sign: Names of headers to include in the signature

    Returns:
        EdgeGridHttpClient: Configured client
    """
    settings = ClientSettings(timeout=timeout, retry_attempts=retry_attempts)
    return EdgeGridHttpClient(config, settings=settings, headers_to_sign=headers_to_sign)
