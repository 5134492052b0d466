"""
EdgeGrid EG1-HMAC-SHA256 signer

This module provides the main signer implementation: per-timestamp
signing-key derivation from the client secret, HMAC-SHA256 over the
canonical string-to-sign, and assembly of the Authorization header.
"""

import base64
import binascii
import logging
from typing import Iterable, Optional

from cryptography.hazmat.primitives import hashes, hmac

from ..config.edgerc import EdgeGridConfig, validate_config
from ..exceptions import AuthError, SigningError, SigningErrorCodes
from .types import (
    SignableRequest,
    SigningContext,
    EdgeGridSignatureResult,
    NonceGenerator,
    TimestampGenerator,
)
from .utils import (
    calculate_content_hash,
    generate_nonce,
    generate_timestamp,
    normalize_header_name,
    validate_nonce,
    validate_timestamp,
)
from .canonical_message import (
    CanonicalMessageBuilder,
    assemble_authorization_header,
    build_auth_header_prefix,
)

logger = logging.getLogger(__name__)


def _hmac_sha256(key: bytes, message: bytes) -> bytes:
    try:
        mac = hmac.HMAC(key, hashes.SHA256())
        mac.update(message)
        return mac.finalize()
    except (TypeError, ValueError) as e:
        raise AuthError(f"HMAC-SHA256 failed: {e}", {"original_error": str(e)})


def derive_signing_key(client_secret: str, timestamp: str) -> str:
    """
    Derive the signing key for a timestamp.

    Args:
        client_secret: Client secret
        timestamp: EdgeGrid timestamp of the request

    Returns:
        str: Base64 HMAC-SHA256(client_secret, timestamp)

    Raises:
        AuthError: If the HMAC primitive fails
    """
    digest = _hmac_sha256(client_secret.encode('utf-8'), timestamp.encode('utf-8'))
    return base64.b64encode(digest).decode('ascii')


def sign_data(data: str, signing_key: str) -> str:
    """
    Sign the string-to-sign with a derived signing key.

    Args:
        data: String-to-sign
        signing_key: Base64 signing key from derive_signing_key

    Returns:
        str: Base64 HMAC-SHA256 signature

    Raises:
        AuthError: If the key is not valid base64 or the HMAC fails
    """
    try:
        key_bytes = base64.b64decode(signing_key, validate=True)
    except (binascii.Error, ValueError) as e:
        raise AuthError(f"Invalid signing key encoding: {e}", {"original_error": str(e)})

    digest = _hmac_sha256(key_bytes, data.encode('utf-8'))
    return base64.b64encode(digest).decode('ascii')


class EdgeGridSigner:
    """
    EdgeGrid EG1-HMAC-SHA256 request signer

    A signer holds a credential set and the names of headers that take
    part in the signature. It keeps no per-request state, so one instance
    can sign requests from many threads.
    """

    def __init__(
        self,
        config: EdgeGridConfig,
        headers_to_sign: Iterable[str] = (),
        nonce_generator: Optional[NonceGenerator] = None,
        timestamp_generator: Optional[TimestampGenerator] = None
    ):
        """
        Initialize the signer.

        Args:
            config: Credential set
            headers_to_sign: Names of headers to include in the signature
            nonce_generator: Optional custom nonce generator
            timestamp_generator: Optional custom timestamp generator

        Raises:
            MissingCredentialError: If a credential field is empty
        """
        self.config = validate_config(config)
        self.headers_to_sign = tuple(normalize_header_name(name) for name in headers_to_sign)
        self.nonce_generator = nonce_generator or generate_nonce
        self.timestamp_generator = timestamp_generator or generate_timestamp

    def sign_request(self, request: SignableRequest) -> EdgeGridSignatureResult:
        """
        Sign a request.

        Every call uses a fresh timestamp and nonce, so a retried request
        must be signed again.

        Args:
            request: Request to sign

        Returns:
            EdgeGridSignatureResult: Authorization header and signing details

        Raises:
            SigningError: If the request cannot be canonicalized
            AuthError: If a cryptographic primitive fails
        """
        context = self._create_signing_context()

        content_hash = calculate_content_hash(request.method, request.body, self.config.max_body)

        auth_header_prefix = build_auth_header_prefix(
            self.config.client_token,
            self.config.access_token,
            context.timestamp,
            context.nonce,
        )

        data_to_sign = CanonicalMessageBuilder(
            request,
            self.headers_to_sign,
            content_hash,
            auth_header_prefix,
        ).build()
        logger.debug(f"EdgeGrid data to sign: {data_to_sign!r}")

        signing_key = derive_signing_key(self.config.client_secret, context.timestamp)
        signature = sign_data(data_to_sign, signing_key)

        authorization = assemble_authorization_header(
            self.config.client_token,
            self.config.access_token,
            context.timestamp,
            context.nonce,
            signature,
        )

        return EdgeGridSignatureResult(
            authorization=authorization,
            data_to_sign=data_to_sign,
            content_hash=content_hash,
            timestamp=context.timestamp,
            nonce=context.nonce,
        )

    def _create_signing_context(self) -> SigningContext:
        """
        Generate timestamp and nonce for one request.

        Raises:
            SigningError: If a custom generator returns a malformed value
        """
        timestamp = self.timestamp_generator()
        nonce = self.nonce_generator()

        if not validate_timestamp(timestamp):
            raise SigningError(
                f"Invalid timestamp: {timestamp}",
                SigningErrorCodes.INVALID_REQUEST,
                {"timestamp": timestamp}
            )

        if not validate_nonce(nonce):
            raise SigningError(
                f"Invalid nonce format: {nonce}",
                SigningErrorCodes.INVALID_REQUEST,
                {"nonce": nonce}
            )

        return SigningContext(timestamp=timestamp, nonce=nonce)


def create_signer(config: EdgeGridConfig, headers_to_sign: Iterable[str] = ()) -> EdgeGridSigner:
    """
    Create a new EdgeGrid signer.

    Args:
        config: Credential set
        headers_to_sign: Names of headers to include in the signature

    Returns:
        EdgeGridSigner: Configured signer instance
    """
    return EdgeGridSigner(config, headers_to_sign)


def sign_request(
    request: SignableRequest,
    config: EdgeGridConfig,
    headers_to_sign: Iterable[str] = ()
) -> EdgeGridSignatureResult:
    """
    Sign a request with the given credentials.

    Args:
        request: Request to sign
        config: Credential set
        headers_to_sign: Names of headers to include in the signature

    Returns:
        EdgeGridSignatureResult: Signing result
    """
    signer = create_signer(config, headers_to_sign)
    return signer.sign_request(request)
