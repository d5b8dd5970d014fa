"""Authentication outcome enums and models."""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from ..errors import AuthErrorKind
from ..provider.models import SessionUser
from ..roles import UserRole
from .variants import CredentialVariant


class AuthStatus(Enum):
    """Enumeration of credential resolution outcomes."""

    AUTHENTICATED = "authenticated"
    FIRST_ACCESS = "first_access"  # Signed in with the enrollment number, must change password
    REJECTED = "rejected"


class AuthenticationOutcome(BaseModel):
    """Result of resolving a typed credential against the identity provider."""

    status: AuthStatus
    user: Optional[SessionUser] = None
    role: Optional[UserRole] = None
    authenticated_variant: Optional[CredentialVariant] = Field(default=None, exclude=True, repr=False)
    attempted_variants: List[str] = Field(default_factory=list)
    error: Optional[AuthErrorKind] = None
    error_message: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.status != AuthStatus.REJECTED

    @property
    def first_access(self) -> bool:
        return self.status == AuthStatus.FIRST_ACCESS

    @classmethod
    def rejected(cls, error: AuthErrorKind, message: str, attempted: Optional[List[str]] = None) -> AuthenticationOutcome:
        return cls(status=AuthStatus.REJECTED, error=error, error_message=message, attempted_variants=attempted or [])
