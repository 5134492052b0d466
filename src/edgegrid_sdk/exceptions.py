"""
Exception classes for EdgeGrid Python SDK
"""

from typing import Optional, Dict, Any


class EdgeGridSDKError(Exception):
    """Base exception for all EdgeGrid SDK errors"""

    def __init__(self, message: str, error_code: str = "UNKNOWN_ERROR", details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(message='{self.message}', error_code='{self.error_code}', details={self.details})"


class ValidationError(EdgeGridSDKError):
    """Exception raised for validation failures"""

    def __init__(self, message: str, error_code: str = "VALIDATION_ERROR", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)


class MissingCredentialError(EdgeGridSDKError):
    """Exception raised when a required credential field is empty"""

    def __init__(self, field: str):
        super().__init__(f"Missing credential: {field}", "MISSING_CREDENTIAL", {"field": field})
        self.field = field


class AuthError(EdgeGridSDKError):
    """Exception raised when a cryptographic primitive fails during signing"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "AUTH_ERROR", details)


class SigningError(EdgeGridSDKError):
    """
    Exception raised when a request cannot be signed

    Attributes:
        message: Error message
        error_code: Error code for programmatic handling (see SigningErrorCodes)
        details: Optional additional error details
    """

    def __init__(self, message: str, error_code: str = "SIGNING_FAILED", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (code: {self.error_code}, details: {self.details})"
        return f"{self.message} (code: {self.error_code})"


class SigningErrorCodes:
    """Standard error codes for signing operations"""

    INVALID_REQUEST = "INVALID_REQUEST"
    INVALID_URL = "INVALID_URL"
    INVALID_METHOD = "INVALID_METHOD"
    INVALID_BODY = "INVALID_BODY"
    SIGNING_FAILED = "SIGNING_FAILED"
    CANONICAL_MESSAGE_FAILED = "CANONICAL_MESSAGE_FAILED"


class ConfigError(EdgeGridSDKError):
    """Exception raised for unreadable or malformed credential configuration"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "CONFIG_ERROR", details)


class InvalidSectionError(ConfigError):
    """Exception raised when a requested .edgerc section does not exist"""

    def __init__(self, section: str, available: Optional[list] = None):
        super().__init__(
            f"Invalid section '{section}' in .edgerc file",
            {"section": section, "available_sections": available or []}
        )
        self.error_code = "INVALID_SECTION"
        self.section = section


class EnvironmentConfigError(ConfigError):
    """Exception raised when a required environment variable is not set"""

    def __init__(self, variable: str):
        super().__init__(f"{variable} not set", {"variable": variable})
        self.error_code = "ENV_ERROR"
        self.variable = variable


class ServerCommunicationError(EdgeGridSDKError):
    """Exception raised for server communication errors"""

    def __init__(self, message: str, error_code: str = "SERVER_ERROR",
                 http_status: int = 0, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)
        self.http_status = http_status


class HttpStatusError(ServerCommunicationError):
    """
    Exception raised when the API answers with a non-success status

    Attributes:
        status_code: HTTP status code of the response
        reason: HTTP reason phrase
        body: Leading part of the response body
    """

    BODY_SNIPPET_LENGTH = 1024

    def __init__(self, status_code: int, reason: str = "", body: str = ""):
        snippet = body[:self.BODY_SNIPPET_LENGTH] if body else ""
        super().__init__(
            f"HTTP {status_code}: {reason}" if reason else f"HTTP {status_code}",
            "HTTP_ERROR",
            http_status=status_code,
            details={"status_code": status_code, "reason": reason, "body": snippet}
        )
        self.status_code = status_code
        self.reason = reason
        self.body = snippet
