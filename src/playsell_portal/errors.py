"""Portal error hierarchy.

Errors carry a human-readable message, a machine-readable error code and a
details mapping for logging. None of them ever carries a secret or an
enrollment identifier: variants are referred to by label only.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional


class AuthErrorKind(Enum):
    """Machine-readable reasons for a failed portal operation."""

    MALFORMED_IDENTIFIER = "malformed_identifier"
    EMPTY_SECRET = "empty_secret"
    ALL_VARIANTS_REJECTED = "all_variants_rejected"
    PROVIDER_UNAVAILABLE = "provider_unavailable"
    PROFILE_NOT_FOUND = "profile_not_found"
    ROLE_NOT_FOUND = "role_not_found"
    INVALID_FORM = "invalid_form"
    PASSWORD_MATCHES_ENROLLMENT = "password_matches_enrollment"
    SESSION_EXPIRED = "session_expired"
    INVALID_LINK = "invalid_link"
    NOT_CONFIGURED = "not_configured"
    PROVIDER_ERROR = "provider_error"


class PortalError(Exception):
    """Base exception for all portal errors."""

    kind: AuthErrorKind = AuthErrorKind.PROVIDER_ERROR

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_code = self.kind.value
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for responses and logs."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class MalformedIdentifier(PortalError):
    """The identifier is not an email address."""

    kind = AuthErrorKind.MALFORMED_IDENTIFIER

    def __init__(self, message: str = "Invalid email"):
        super().__init__(message)


class EmptySecret(PortalError):
    """No password or enrollment number was supplied."""

    kind = AuthErrorKind.EMPTY_SECRET

    def __init__(self, message: str = "Password or enrollment number is required"):
        super().__init__(message)


class AllVariantsRejected(PortalError):
    """Every credential variant was refused by the provider."""

    kind = AuthErrorKind.ALL_VARIANTS_REJECTED

    def __init__(self, attempted: List[str], last_reason: Optional[str] = None):
        self.attempted = list(attempted)
        self.last_reason = last_reason
        message = f"Invalid login credentials (tried: {', '.join(self.attempted)})"
        if last_reason:
            message += f": {last_reason}"
        super().__init__(message, {"attempted": self.attempted})


class ProviderError(PortalError):
    """The identity provider refused or failed a request."""

    kind = AuthErrorKind.PROVIDER_ERROR

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        details = {"status_code": status_code} if status_code is not None else None
        super().__init__(message, details)


class ProviderUnavailable(ProviderError):
    """The identity provider could not be reached or answered with a server error."""

    kind = AuthErrorKind.PROVIDER_UNAVAILABLE


class ProfileNotFound(PortalError):
    """No enrollment identifier is available for the user."""

    kind = AuthErrorKind.PROFILE_NOT_FOUND

    def __init__(self, user_id: str, reason: Optional[str] = None):
        message = f"Profile not found for user {user_id}"
        if reason:
            message += f": {reason}"
        super().__init__(message, {"user_id": user_id})


class RoleNotFound(PortalError):
    """No role is available for the user."""

    kind = AuthErrorKind.ROLE_NOT_FOUND

    def __init__(self, user_id: str, reason: Optional[str] = None):
        message = f"Role not found for user {user_id}"
        if reason:
            message += f": {reason}"
        super().__init__(message, {"user_id": user_id})
