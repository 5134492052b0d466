"""
Utility functions for request signing

This module provides utility functions for EdgeGrid request signing,
including nonce generation, timestamp handling, content hash calculation,
and URL parsing.
"""

import time
import uuid
import hashlib
import base64
import logging
import re
from typing import Dict, Optional
from urllib.parse import urlsplit

from ..exceptions import SigningError, SigningErrorCodes
from .types import HttpMethod, RequestBody

logger = logging.getLogger(__name__)

# EdgeGrid timestamp layout: always UTC, always a literal +0000 offset
TIMESTAMP_FORMAT = '%Y%m%dT%H:%M:%S+0000'
TIMESTAMP_LENGTH = 22

_TIMESTAMP_PATTERN = re.compile(r'^\d{8}T\d{2}:\d{2}:\d{2}\+0000$')
_NONCE_PATTERN = re.compile(
    r'^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$',
    re.IGNORECASE
)
_WHITESPACE_RUN = re.compile(r'\s+')


def generate_nonce() -> str:
    """
    Generate a UUID v4 nonce for replay protection.

    Returns:
        str: UUID v4 string for use as nonce
    """
    return str(uuid.uuid4())


def generate_timestamp(timestamp: Optional[float] = None) -> str:
    """
    Format a Unix time as an EdgeGrid timestamp.

    Args:
        timestamp: Unix timestamp (uses current time if None)

    Returns:
        str: Timestamp such as ``20140321T19:34:21+0000``
    """
    if timestamp is None:
        timestamp = time.time()

    return time.strftime(TIMESTAMP_FORMAT, time.gmtime(timestamp))


def validate_nonce(nonce: str) -> bool:
    """
    Validate nonce format (should be UUID v4).

    Args:
        nonce: Nonce string to validate

    Returns:
        bool: True if nonce is valid UUID v4 format
    """
    if not isinstance(nonce, str):
        return False

    return bool(_NONCE_PATTERN.match(nonce))


def validate_timestamp(timestamp: str) -> bool:
    """
    Validate EdgeGrid timestamp format.

    Args:
        timestamp: Timestamp string to validate

    Returns:
        bool: True if timestamp matches yyyyMMddTHH:mm:ss+0000
    """
    if not isinstance(timestamp, str):
        return False

    return len(timestamp) == TIMESTAMP_LENGTH and bool(_TIMESTAMP_PATTERN.match(timestamp))


def parse_url(url: str) -> Dict[str, str]:
    """
    Parse URL to extract components needed for signing.

    The path and query are taken verbatim; nothing is percent-decoded or
    re-encoded. Path parameters (`;v=1`) stay part of the path.

    Args:
        url: URL string to parse

    Returns:
        dict: Dictionary with parsed URL components:
            - scheme: URL scheme
            - host: host name without port
            - path: path component ('/' when empty)
            - query: raw query string (without ?)
            - path_and_query: path plus '?query' when a query is present

    Raises:
        SigningError: If URL format is invalid
    """
    try:
        parsed = urlsplit(url)
    except ValueError as e:
        raise SigningError(
            f"Failed to parse URL: {e}",
            SigningErrorCodes.INVALID_URL,
            {"url": url, "original_error": str(e)}
        )

    if not parsed.scheme or not parsed.netloc:
        raise SigningError(
            f"Invalid URL format: {url}",
            SigningErrorCodes.INVALID_URL,
            {"url": url}
        )

    if parsed.scheme not in ('http', 'https'):
        raise SigningError(
            f"Unsupported URL scheme: {parsed.scheme}",
            SigningErrorCodes.INVALID_URL,
            {"url": url, "scheme": parsed.scheme}
        )

    path = parsed.path or "/"
    path_and_query = f"{path}?{parsed.query}" if parsed.query else path

    return {
        "scheme": parsed.scheme,
        "host": parsed.hostname or "",
        "path": path,
        "query": parsed.query,
        "path_and_query": path_and_query,
    }


def normalize_method(method) -> str:
    """Upper-cased method name for an HttpMethod or plain string."""
    if isinstance(method, HttpMethod):
        return method.value
    return str(method).upper()


def normalize_header_name(name: str) -> str:
    """
    Normalize header name to lowercase for consistent processing.

    Args:
        name: Header name to normalize

    Returns:
        str: Lowercase header name
    """
    return name.lower().strip()


def normalize_header_value(value: str) -> str:
    """Trim a header value and collapse inner whitespace runs to one space."""
    return _WHITESPACE_RUN.sub(' ', str(value).strip())


def body_to_bytes(body: RequestBody) -> bytes:
    """
    Coerce a request body to bytes.

    Raises:
        SigningError: If the body is not str, bytes or None
    """
    if body is None:
        return b""
    if isinstance(body, bytes):
        return body
    if isinstance(body, (bytearray, memoryview)):
        return bytes(body)
    if isinstance(body, str):
        return body.encode('utf-8')

    raise SigningError(
        f"Body must be string, bytes, or None, got {type(body)}",
        SigningErrorCodes.INVALID_BODY,
        {"body_type": str(type(body))}
    )


def calculate_content_hash(method: str, body: RequestBody, max_body: int) -> str:
    """
    Calculate the EdgeGrid content hash for a request body.

    Only POST bodies are hashed. A body longer than ``max_body`` is hashed
    over its first ``max_body`` bytes and a warning is logged; the request
    is still signed.

    Args:
        method: HTTP method
        body: Request body (string, bytes, or None)
        max_body: Maximum number of body bytes covered by the hash

    Returns:
        str: Base64 SHA-256 digest, or '' when nothing is hashed
    """
    if normalize_method(method) != HttpMethod.POST.value:
        return ""

    content = body_to_bytes(body)
    if not content:
        return ""

    if len(content) > max_body:
        logger.warning(
            f"Request body size ({len(content)}) exceeds max_body ({max_body}), truncating for signing"
        )
        content = content[:max_body]

    digest = hashlib.sha256(content).digest()
    return base64.b64encode(digest).decode('ascii')
