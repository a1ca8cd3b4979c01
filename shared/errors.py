"""
Shared error handling for oauthtoy.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Internal error description, logged alongside the public envelope."""

    code: str
    message: str
    status_code: int
    details: Dict[str, Any] = {}


class OAuthToyException(Exception):
    """Base exception for oauthtoy services and clients."""

    status_code: int = 500
    public_message: str = "server error"

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            code=self.code,
            message=self.message,
            status_code=self.status_code,
            details=self.details,
        )


class ConfigurationError(OAuthToyException):
    """Invalid configuration values."""

    def __init__(self, message: str = "Invalid configuration", details: Optional[Dict[str, Any]] = None):
        super().__init__("CONFIGURATION_ERROR", message, details)


class AuthenticationFailure(OAuthToyException):
    """Bad grant type or bad client credentials."""

    status_code = 401
    public_message = "unauthorized"

    def __init__(self, message: str = "Authentication failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("AUTHENTICATION_FAILURE", message, details)


class TokenValidationFailure(OAuthToyException):
    """A presented bearer token is not acceptable."""

    status_code = 401
    public_message = "unauthorized"
    error_code = "TOKEN_VALIDATION_FAILURE"

    def __init__(self, message: str = "Token validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(self.error_code, message, details)


class MalformedTokenError(TokenValidationFailure):
    """Token cannot be parsed into header, claims and signature."""

    error_code = "MALFORMED_TOKEN"


class SignatureMismatchError(TokenValidationFailure):
    """Token signature does not match the shared secret."""

    error_code = "SIGNATURE_MISMATCH"


class ExpiredTokenError(TokenValidationFailure):
    """Token expiry is in the past."""

    error_code = "EXPIRED_TOKEN"


class SigningError(OAuthToyException):
    """The signing capability rejected the key."""

    def __init__(self, message: str = "Token signing failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("SIGNING_ERROR", message, details)


class SerializationError(OAuthToyException):
    """A claim set or response body could not be encoded."""

    def __init__(self, message: str = "Serialization failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("SERIALIZATION_ERROR", message, details)


class BodyReadError(OAuthToyException):
    """Request body could not be read."""

    def __init__(self, message: str = "Request body read failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("BODY_READ_ERROR", message, details)


class TokenRequestError(OAuthToyException):
    """Token endpoint refused or returned an unusable response."""

    status_code = 401
    public_message = "unauthorized"

    def __init__(self, message: str = "Token request failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("TOKEN_REQUEST_ERROR", message, details)


class PollError(OAuthToyException):
    """A polling cycle failed while running in fail-fast mode."""

    def __init__(self, message: str = "Poll failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("POLL_ERROR", message, details)
