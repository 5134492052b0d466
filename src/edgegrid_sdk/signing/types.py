"""
Type definitions for request signing functionality

This module provides type definitions and data classes for the EdgeGrid
EG1-HMAC-SHA256 request signing protocol.
"""

from typing import Dict, Optional, Union, Callable, Tuple
from dataclasses import dataclass, field
from enum import Enum


class HttpMethod(str, Enum):
    """HTTP methods supported for signing"""
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"


# Authorization scheme name carried at the front of every header
EDGEGRID_AUTH_SCHEME = "EG1-HMAC-SHA256"


@dataclass
class SignableRequest:
    """
    Request to be signed according to the EdgeGrid protocol

    Attributes:
        method: HTTP method (GET, POST, etc.)
        url: Complete request URL, including any query string
        headers: Request headers as key-value pairs
        body: Optional request body (string or bytes)
    """
    method: Union[HttpMethod, str]
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[Union[str, bytes]] = None

    def __post_init__(self):
        """Validate request after initialization"""
        if not self.url:
            raise ValueError("Request URL cannot be empty")

        if not self.method:
            raise ValueError("Request method cannot be empty")

        if self.headers is None:
            self.headers = {}

        if not isinstance(self.headers, dict):
            self.headers = dict(self.headers)



@dataclass(frozen=True)
class SigningContext:
    """
    Per-request signing context

    Attributes:
        timestamp: EdgeGrid timestamp (yyyyMMddTHH:mm:ss+0000, UTC)
        nonce: UUID v4 nonce for replay protection
    """
    timestamp: str
    nonce: str

    def __post_init__(self):
        if not self.timestamp:
            raise ValueError("Timestamp cannot be empty")

        if not self.nonce:
            raise ValueError("Nonce cannot be empty")


@dataclass
class EdgeGridSignatureResult:
    """
    Generated EdgeGrid signature

    Attributes:
        authorization: Complete Authorization header value
        data_to_sign: Tab-separated string the signature was computed over
        content_hash: Base64 SHA-256 of the signed body ('' when not hashed)
        timestamp: Timestamp used for this signature
        nonce: Nonce used for this signature
        headers: Headers that should be added to the request
    """
    authorization: str
    data_to_sign: str
    content_hash: str
    timestamp: str
    nonce: str
    headers: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        if not self.authorization:
            raise ValueError("Authorization value cannot be empty")

        if not self.headers:
            self.headers = {'Authorization': self.authorization}


# Type aliases for convenience
NonceGenerator = Callable[[], str]
TimestampGenerator = Callable[[], str]
HeaderDict = Dict[str, str]
HeaderNames = Tuple[str, ...]
RequestBody = Union[str, bytes, None]
