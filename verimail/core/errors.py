"""Error Hierarchy - typed, categorized exceptions for every verimail failure mode.

Invariants:
    - Every error has a code (http status), i18n key, category and severity
    - to_response() produces the action envelope {code, i18n, data}
    - DownstreamError renders the collaborator envelope verbatim
    - No secret (smtp password, jwt secret, token) is ever placed in data

Design Decisions:
    - Single hierarchy with VerimailError base: FastAPI global handler catches all
      (ADR: uniform envelope shape across actions)
    - InvalidTokenError does not distinguish expiry from forgery (ADR: open question,
      kept undifferentiated at the API layer, reason logged server-side)
"""

from enum import Enum
from typing import Any

from verimail.core.envelope import Envelope


class ErrorSeverity(str, Enum):
    """Error severity for observability."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and logging."""
    VALIDATION = "validation"
    AUTH = "auth"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DOWNSTREAM = "downstream"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"


class VerimailError(Exception):
    """Base exception for all verimail errors."""

    def __init__(
        self,
        message: str,
        i18n: str | None,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        http_status: int = 400,
        data: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.i18n = i18n
        self.category = category
        self.severity = severity
        self.http_status = http_status
        self.data = data

    def to_envelope(self) -> Envelope:
        return Envelope(code=self.http_status, i18n=self.i18n, data=self.data)

    def to_response(self) -> dict:
        """Convert to the action response envelope."""
        return self.to_envelope().to_dict()


# ─── Validation Errors ──────────────────────────────────────────

class MissingConfigKeyError(VerimailError):
    """Merged config bundle lacks one or more required keys."""
    def __init__(self, missing: list[str]):
        super().__init__(
            f"Missing config keys: {', '.join(missing)}",
            "NEED_KEY_IN_CONFIGS", ErrorCategory.VALIDATION,
            data={"key": missing[0], "keys": missing},
        )
        self.missing = missing


class InvalidConfigValueError(VerimailError):
    """Config keys are present but hold values of the wrong type."""
    def __init__(self, keys: list[str]):
        super().__init__(
            f"Invalid config values: {', '.join(keys)}",
            "NEED_VALID_CONFIG_VALUE", ErrorCategory.VALIDATION,
            data={"keys": keys},
        )
        self.keys = keys


class InvalidExpiresInError(VerimailError):
    """Token lifetime literal is outside the whitelist."""
    def __init__(self, value: Any, valid: list[str]):
        super().__init__(
            f"Invalid email_jwt_expiresIn: {value!r}",
            "NEED_VALID_EXPIRES_IN", ErrorCategory.VALIDATION,
            data={"valid": valid, "value": value},
        )


class TemplateRenderError(VerimailError):
    """Email template could not be parsed or rendered."""
    def __init__(self, message: str):
        super().__init__(
            f"Template render failed: {message}",
            "INVALID_TEMPLATE", ErrorCategory.VALIDATION,
        )


class CreatorRequiredError(VerimailError):
    """Caller did not present a creator identity."""
    def __init__(self):
        super().__init__(
            "Creator identity is required",
            "CREATOR_REQUIRED", ErrorCategory.VALIDATION,
        )


# ─── Domain Errors ──────────────────────────────────────────────

class ConfigNotFoundError(VerimailError):
    """A named config entry does not exist."""
    def __init__(self, key: str):
        super().__init__(
            f"Config '{key}' not found",
            "CONFIG_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            data={"key": key},
        )
        self.key = key


class UserNotFoundError(VerimailError):
    """No user matches the given email."""
    def __init__(self, email: str):
        super().__init__(
            "User not found for email",
            "USER_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            data={"email": email},
        )


class EmailAlreadyVerifiedError(VerimailError):
    """User is in the terminal Verified state."""
    def __init__(self):
        super().__init__(
            "Email already verified",
            "EMAIL_ALREADY_VERIFIED", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.INFO,
        )


class InvalidTokenError(VerimailError):
    """Token is malformed, forged or expired."""
    def __init__(self):
        super().__init__(
            "Invalid verification token",
            "INVALID_TOKEN", ErrorCategory.AUTH, ErrorSeverity.WARNING,
        )


class BadCreatorError(VerimailError):
    """Token is valid but bound to a different creator."""
    def __init__(self):
        super().__init__(
            "Token creator does not match caller",
            "BAD_CREATOR", ErrorCategory.AUTH, ErrorSeverity.WARNING,
        )


# ─── Downstream / Infrastructure Errors ─────────────────────────

class DownstreamError(VerimailError):
    """A collaborator answered with a non-success envelope.

    The envelope is forwarded unchanged so callers several hops away see the
    original code, i18n and data.
    """
    def __init__(self, envelope: Envelope, source: str):
        super().__init__(
            f"{source} returned {envelope.code}",
            envelope.i18n, ErrorCategory.DOWNSTREAM,
            http_status=envelope.code if 100 <= envelope.code < 600 else 502,
            data=envelope.data,
        )
        self.envelope = envelope
        self.source = source

    def to_envelope(self) -> Envelope:
        return self.envelope


class MailTransportError(VerimailError):
    """Mail transport failed to talk to the SMTP server."""
    def __init__(self, message: str, fault_type: str):
        super().__init__(
            f"Mail transport error ({fault_type}): {message}",
            "EMAIL_NOT_SENT", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.ERROR, 502,
        )
        self.fault_type = fault_type


class DatabaseError(VerimailError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, 503,
        )
        self.operation = operation
