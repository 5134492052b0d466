"""
Canonical message construction for EdgeGrid request signing

This module builds the tab-separated string-to-sign and the
Authorization header value. Both the server and the client derive the
same byte sequence from a request, so every field order and separator
here is part of the wire contract.
"""

import logging
from typing import Dict, Iterable, Mapping

from ..exceptions import SigningError, SigningErrorCodes
from .types import EDGEGRID_AUTH_SCHEME, SignableRequest
from .utils import (
    parse_url,
    normalize_method,
    normalize_header_name,
    normalize_header_value,
)

logger = logging.getLogger(__name__)


def canonicalize_headers(headers: Mapping[str, str]) -> str:
    """
    Render headers for the string-to-sign.

    Each header becomes ``name:value`` with a lower-cased name and a trimmed
    value; entries are sorted by name and joined with tabs.

    Args:
        headers: Headers selected for signing

    Returns:
        str: Canonical header block ('' when there are no headers)
    """
    entries = sorted(
        (normalize_header_name(name), normalize_header_value(value))
        for name, value in headers.items()
    )
    return '\t'.join(f"{name}:{value}" for name, value in entries)


def select_headers_to_sign(headers: Mapping[str, str], header_names: Iterable[str]) -> Dict[str, str]:
    """
    Pick the designated headers out of a request's headers.

    Matching is case-insensitive. Names that are not present on the request
    are skipped.

    Args:
        headers: All request headers
        header_names: Header names designated for signing

    Returns:
        dict: Selected headers keyed by lower-cased name
    """
    wanted = [normalize_header_name(name) for name in header_names]
    if not wanted:
        return {}

    by_name = {normalize_header_name(name): value for name, value in headers.items()}
    selected = {}
    for name in wanted:
        if name in by_name:
            selected[name] = by_name[name]
        else:
            logger.debug(f"Header designated for signing not present on request: {name}")
    return selected


def build_auth_header_prefix(client_token: str, access_token: str, timestamp: str, nonce: str) -> str:
    """
    Build the Authorization value without the signature.

    The result ends with ``;`` so that appending ``signature=...`` yields
    the final header.
    """
    return (
        f"{EDGEGRID_AUTH_SCHEME} "
        f"client_token={client_token};"
        f"access_token={access_token};"
        f"timestamp={timestamp};"
        f"nonce={nonce};"
    )


def assemble_authorization_header(
    client_token: str,
    access_token: str,
    timestamp: str,
    nonce: str,
    signature: str
) -> str:
    """
    Assemble the final Authorization header value.

    Returns:
        str: ``EG1-HMAC-SHA256 client_token=..;access_token=..;timestamp=..;nonce=..;signature=..``
    """
    prefix = build_auth_header_prefix(client_token, access_token, timestamp, nonce)
    return f"{prefix}signature={signature}"


def build_data_to_sign(
    method: str,
    scheme: str,
    host: str,
    path: str,
    headers_to_sign: Mapping[str, str],
    content_hash: str,
    auth_header_prefix: str
) -> str:
    """
    Build the string-to-sign.

    Args:
        method: HTTP method (upper-cased here)
        scheme: URL scheme
        host: Request host
        path: Path including '?query' when present
        headers_to_sign: Headers selected for signing
        content_hash: Content hash ('' when not applicable)
        auth_header_prefix: Authorization value without signature

    Returns:
        str: Seven tab-separated fields
    """
    return '\t'.join([
        normalize_method(method),
        scheme,
        host,
        path,
        canonicalize_headers(headers_to_sign),
        content_hash,
        auth_header_prefix,
    ])


class CanonicalMessageBuilder:
    """
    Canonical message builder for a single request
    """

    def __init__(
        self,
        request: SignableRequest,
        header_names: Iterable[str],
        content_hash: str,
        auth_header_prefix: str
    ):
        """
        Initialize canonical message builder.

        Args:
            request: Request being signed
            header_names: Header names designated for signing
            content_hash: Content hash for the request body
            auth_header_prefix: Authorization value without signature
        """
        self.request = request
        self.header_names = tuple(header_names)
        self.content_hash = content_hash
        self.auth_header_prefix = auth_header_prefix

    def build(self) -> str:
        """
        Build the string-to-sign for the request.

        Raises:
            SigningError: If the request URL cannot be used
        """
        url_parts = parse_url(self.request.url)
        headers_to_sign = select_headers_to_sign(self.request.headers, self.header_names)

        try:
            return build_data_to_sign(
                self.request.method,
                url_parts['scheme'],
                url_parts['host'],
                url_parts['path_and_query'],
                headers_to_sign,
                self.content_hash,
                self.auth_header_prefix,
            )
        except (TypeError, AttributeError) as e:
            raise SigningError(
                f"Canonical message construction failed: {e}",
                SigningErrorCodes.CANONICAL_MESSAGE_FAILED,
                {"original_error": str(e)}
            )
