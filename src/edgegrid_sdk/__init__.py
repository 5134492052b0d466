"""
EdgeGrid Python SDK
EG1-HMAC-SHA256 request signing for EdgeGrid protected APIs
"""

from .version import __version__
from .exceptions import (
    EdgeGridSDKError,
    ValidationError,
    MissingCredentialError,
    AuthError,
    SigningError,
    SigningErrorCodes,
    ConfigError,
    InvalidSectionError,
    EnvironmentConfigError,
    ServerCommunicationError,
    HttpStatusError,
)
from .config import (
    EdgeGridConfig,
    MAX_BODY,
    validate_config,
    parse_edgerc,
)
from .signing import (
    # Core signing functionality
    EdgeGridSigner,
    create_signer,
    sign_request,
    derive_signing_key,
    sign_data,
    # Types
    SignableRequest,
    SigningContext,
    EdgeGridSignatureResult,
    HttpMethod,
    # Canonicalization
    canonicalize_headers,
    build_data_to_sign,
    assemble_authorization_header,
    # Utilities
    generate_nonce,
    generate_timestamp,
    calculate_content_hash,
    validate_nonce,
    validate_timestamp,
    # HTTP Integration
    EdgeGridAuth,
    sign_prepared_request,
    create_signing_session,
)
from .http_client import (
    EdgeGridHttpClient,
    ClientSettings,
    create_client,
    raise_for_status,
)


def initialize_sdk():
    """
    Check that the cryptography backend can compute HMAC-SHA256.

    Returns:
        dict: Compatibility information with 'compatible' (bool) and 'warnings' (list)
    """
    warnings = []
    compatible = True

    try:
        signing_key = derive_signing_key("compatibility-check", generate_timestamp(0))
        sign_data("compatibility-check", signing_key)
    except AuthError as e:
        warnings.append(f'HMAC-SHA256 not available from cryptography backend: {e}')
        compatible = False

    return {
        'compatible': compatible,
        'warnings': warnings
    }


# Public API exports
__all__ = [
    '__version__',
    'initialize_sdk',
    # Exceptions
    'EdgeGridSDKError',
    'ValidationError',
    'MissingCredentialError',
    'AuthError',
    'SigningError',
    'SigningErrorCodes',
    'ConfigError',
    'InvalidSectionError',
    'EnvironmentConfigError',
    'ServerCommunicationError',
    'HttpStatusError',
    # Configuration
    'EdgeGridConfig',
    'MAX_BODY',
    'validate_config',
    'parse_edgerc',
    # Request Signing - Core
    'EdgeGridSigner',
    'create_signer',
    'sign_request',
    'derive_signing_key',
    'sign_data',
    # Request Signing - Types
    'SignableRequest',
    'SigningContext',
    'EdgeGridSignatureResult',
    'HttpMethod',
    # Request Signing - Canonicalization
    'canonicalize_headers',
    'build_data_to_sign',
    'assemble_authorization_header',
    # Request Signing - Utilities
    'generate_nonce',
    'generate_timestamp',
    'calculate_content_hash',
    'validate_nonce',
    'validate_timestamp',
    # Request Signing - HTTP Integration
    'EdgeGridAuth',
    'sign_prepared_request',
    'create_signing_session',
    # HTTP Client
    'EdgeGridHttpClient',
    'ClientSettings',
    'create_client',
    'raise_for_status',
]
