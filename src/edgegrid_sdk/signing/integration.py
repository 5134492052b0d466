"""
HTTP client integration for request signing

This module plugs the EdgeGrid signer into the ``requests`` library so
that outbound requests are signed as they are prepared.
"""

import logging
from typing import Iterable, Optional, Union

import requests
from requests.auth import AuthBase
from requests.models import PreparedRequest

from ..config.edgerc import EdgeGridConfig
from .types import SignableRequest
from .edgegrid_signer import EdgeGridSigner

logger = logging.getLogger(__name__)


class EdgeGridAuth(AuthBase):
    """
    ``requests`` authentication hook that adds an EdgeGrid Authorization header.

    ``requests`` applies auth while preparing a request, so every
    preparation (including each retry issued by EdgeGridHttpClient) is
    signed with a fresh timestamp and nonce.

    Example:
        >>> session = requests.Session()
        >>> session.auth = EdgeGridAuth(EdgeGridConfig.from_edgerc())
    """

    def __init__(self, config: EdgeGridConfig, headers_to_sign: Iterable[str] = ()):
        """
        Initialize the auth hook.

        Args:
            config: Credential set
            headers_to_sign: Names of headers to include in the signature

        Raises:
            MissingCredentialError: If a credential field is empty
        """
        self.signer = EdgeGridSigner(config, headers_to_sign)

    @property
    def config(self) -> EdgeGridConfig:
        return self.signer.config

    @classmethod
    def from_edgerc(cls, path: str = "~/.edgerc", section: str = "default",
                    headers_to_sign: Iterable[str] = ()) -> 'EdgeGridAuth':
        """Create an auth hook from an ``.edgerc`` section."""
        return cls(EdgeGridConfig.from_edgerc(path, section), headers_to_sign)

    def __call__(self, request: PreparedRequest) -> PreparedRequest:
        signable_request = SignableRequest(
            method=request.method,
            url=request.url,
            headers=dict(request.headers) if request.headers else {},
            body=_signable_body(request),
        )

        result = self.signer.sign_request(signable_request)
        request.headers['Authorization'] = result.authorization

        logger.debug(f"Signed {request.method} request to {request.url}")
        return request


def _signable_body(request: PreparedRequest) -> Optional[Union[str, bytes]]:
    body = request.body
    if body is None or isinstance(body, (str, bytes, bytearray, memoryview)):
        return body

    # Streamed bodies (files, generators) cannot be read without consuming them
    logger.debug(
        f"Body of type {type(body).__name__} is streamed, signing {request.method} "
        f"request to {request.url} with an empty content hash"
    )
    return None


def sign_prepared_request(
    prepared_request: PreparedRequest,
    config: EdgeGridConfig,
    headers_to_sign: Iterable[str] = ()
) -> PreparedRequest:
    """
    Sign a prepared request in place.

    Args:
        prepared_request: Prepared request to sign
        config: Credential set
        headers_to_sign: Names of headers to include in the signature

    Returns:
        PreparedRequest: The same request with the Authorization header set
    """
    return EdgeGridAuth(config, headers_to_sign)(prepared_request)


def create_signing_session(
    config: EdgeGridConfig,
    headers_to_sign: Iterable[str] = (),
    **session_kwargs
) -> requests.Session:
    """
    Create a requests session that signs every request.

    Args:
        config: Credential set
        headers_to_sign: Names of headers to include in the signature
        **session_kwargs: Attributes to set on the session (e.g. verify)

    Returns:
        requests.Session: Session with EdgeGridAuth installed
    """
    session = requests.Session()

    for key, value in session_kwargs.items():
        if hasattr(session, key):
            setattr(session, key, value)
        else:
            logger.warning(f"Ignoring unknown session attribute: {key}")

    session.auth = EdgeGridAuth(config, headers_to_sign)
    return session
