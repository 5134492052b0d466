"""
EdgeGrid Python SDK - Request Signing Module

EG1-HMAC-SHA256 request signing. This module provides the signing engine
and its ``requests`` integration for authenticating with EdgeGrid
protected APIs.
"""

from .types import (
    SignableRequest,
    SigningContext,
    EdgeGridSignatureResult,
    HttpMethod,
    EDGEGRID_AUTH_SCHEME,
)

from .edgegrid_signer import (
    EdgeGridSigner,
    create_signer,
    sign_request,
    derive_signing_key,
    sign_data,
)

from .canonical_message import (
    CanonicalMessageBuilder,
    canonicalize_headers,
    select_headers_to_sign,
    build_auth_header_prefix,
    build_data_to_sign,
    assemble_authorization_header,
)

from .utils import (
    generate_nonce,
    generate_timestamp,
    calculate_content_hash,
    validate_nonce,
    validate_timestamp,
    parse_url,
    normalize_header_name,
    TIMESTAMP_FORMAT,
)

from .integration import (
    EdgeGridAuth,
    sign_prepared_request,
    create_signing_session,
)

# Public API exports
__all__ = [
    # Core signing functionality
    'EdgeGridSigner',
    'create_signer',
    'sign_request',
    'derive_signing_key',
    'sign_data',
    # Types
    'SignableRequest',
    'SigningContext',
    'EdgeGridSignatureResult',
    'HttpMethod',
    'EDGEGRID_AUTH_SCHEME',
    # Canonicalization
    'CanonicalMessageBuilder',
    'canonicalize_headers',
    'select_headers_to_sign',
    'build_auth_header_prefix',
    'build_data_to_sign',
    'assemble_authorization_header',
    # Utilities
    'generate_nonce',
    'generate_timestamp',
    'calculate_content_hash',
    'validate_nonce',
    'validate_timestamp',
    'parse_url',
    'normalize_header_name',
    'TIMESTAMP_FORMAT',
    # HTTP Integration
    'EdgeGridAuth',
    'sign_prepared_request',
    'create_signing_session',
]
