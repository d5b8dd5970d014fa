"""Pydantic models for identity provider responses."""

from __future__ import annotations

from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class ProviderStatus(Enum):
    """Enum representing identity provider call outcomes."""

    SUCCESS = "success"
    REJECTED = "rejected"  # Provider answered and refused (4xx)
    UNAVAILABLE = "unavailable"  # Network error or 5xx


class SessionUser(BaseModel):
    """Authenticated user as reported by the identity provider."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    id: str = Field(..., min_length=1, description="Provider user identifier")
    email: Optional[str] = Field(None, description="User email address")


class ProviderResponse(BaseModel):
    """Response model for identity provider calls."""

    status: ProviderStatus
    message: str = ""
    user: Optional[SessionUser] = None
    status_code: Optional[int] = None

    @property
    def success(self) -> bool:
        return self.status == ProviderStatus.SUCCESS


class AuthSession(BaseModel):
    """Provider-issued session tokens held for the follow-up calls."""

    access_token: str = Field(..., min_length=1)
    refresh_token: Optional[str] = None
    token_type: str = "bearer"
    expires_at: Optional[datetime] = None
    user: Optional[SessionUser] = None

    @classmethod
    def from_token_response(cls, data: Dict[str, Any]) -> AuthSession:
        """Create from a ``/token`` response body."""
        expires_in = data.get("expires_in")
        expires_at = datetime.now() + timedelta(seconds=int(expires_in)) if expires_in else None
        user_data = data.get("user")
        return cls(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token"),
            token_type=data.get("token_type", "bearer"),
            expires_at=expires_at,
            user=SessionUser.model_validate(user_data) if user_data else None,
        )

    def is_expired(self, margin_seconds: int = 0) -> bool:
        """Check if the session is expired (with optional margin)."""
        if self.expires_at is None:
            return False
        return datetime.now() >= (self.expires_at - timedelta(seconds=margin_seconds))

    def to_header(self) -> str:
        """Get authorization header value."""
        return f"Bearer {self.access_token}"
