"""Exception types raised by the connector."""
from enum import Enum


class AuthErrorKind(str, Enum):
    """Why a login attempt was rejected."""

    MISSING_EMAIL = "missing_email"
    INVALID_EMAIL = "invalid_email"
    MISSING_PASSWORD = "missing_password"
    INVALID_PASSWORD = "invalid_password"
    AUTHENTICATION_FAILED = "authentication_failed"
    UNKNOWN = "unknown_error"
    # A later request was bounced back to the login form
    SESSION_EXPIRED = "session_expired"


class CageotsError(Exception):
    """Base class for connector errors."""


class ConfigError(CageotsError, ValueError):
    """Raised when the environment does not allow a run."""


class AuthenticationError(CageotsError):
    """The vendor site refused the credentials. Fatal to the run."""

    def __init__(self, kind: AuthErrorKind, message: str | None = None):
        self.kind = kind
        super().__init__(message or f"Authentication failed: {kind.value}")


class ExtractionFieldError(CageotsError):
    """A single order row could not be normalized. The row is skipped."""

    def __init__(self, field: str, value, reason: str = "unparseable"):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid {field} {value!r}: {reason}")
