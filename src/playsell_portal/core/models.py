"""Pydantic models for portal forms and flow responses."""

from __future__ import annotations

import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, ValidationInfo, field_validator, model_validator

from ..errors import AuthErrorKind
from ..roles import UserRole

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


def _check_email(value: str) -> str:
    if not value:
        raise ValueError("Email is required")
    if not re.match(EMAIL_PATTERN, value):
        raise ValueError("Invalid email")
    return value.lower()


class LoginForm(BaseModel):
    """Login form: email plus password or enrollment number."""

    model_config = ConfigDict(extra="forbid")

    email: str
    secret: str

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return _check_email(v.strip())

    @field_validator("secret")
    @classmethod
    def validate_secret(cls, v: str) -> str:
        # No minimum length: enrollment numbers can be shorter than a password
        if not v:
            raise ValueError("Password or enrollment number is required")
        return v


class PasswordResetRequestForm(BaseModel):
    """Forgot-password form."""

    model_config = ConfigDict(extra="forbid")

    email: str

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return _check_email(v.strip())


class ResetPasswordForm(BaseModel):
    """New password form. Pass ``context={"min_length": n}`` to override the minimum."""

    model_config = ConfigDict(extra="forbid")

    password: str
    confirm_password: str

    @field_validator("password")
    @classmethod
    def validate_length(cls, v: str, info: ValidationInfo) -> str:
        min_length = (info.context or {}).get("min_length", 6)
        if len(v) < min_length:
            raise ValueError(f"Password must be at least {min_length} characters")
        return v

    @field_validator("confirm_password")
    @classmethod
    def validate_confirmation(cls, v: str) -> str:
        if not v:
            raise ValueError("Password confirmation is required")
        return v

    @model_validator(mode="after")
    def passwords_match(self) -> ResetPasswordForm:
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


def first_error(exc: ValidationError) -> str:
    """Human-readable message of the first validation error."""
    errors = exc.errors()
    if not errors:
        return "Invalid form"
    error = errors[0]
    ctx_error = (error.get("ctx") or {}).get("error")
    if ctx_error is not None:
        return str(ctx_error)
    return error.get("msg", "Invalid form")


class LoginResponse(BaseModel):
    """Response model for the login flow."""

    success: bool
    role: Optional[UserRole] = None
    requires_password_reset: bool = False
    redirect_url: Optional[str] = Field(None, description="External application to open")
    next_location: Optional[str] = Field(None, description="Portal page to open next")
    message: Optional[str] = None
    error: Optional[str] = None
    error_kind: Optional[AuthErrorKind] = None


class PasswordResetResponse(BaseModel):
    """Response model for password reset request and password change."""

    success: bool
    message: Optional[str] = None
    error: Optional[str] = None
    error_kind: Optional[AuthErrorKind] = None
    redirect_url: Optional[str] = None


class ResetPageState(BaseModel):
    """Whether the reset page may be shown, and where to go otherwise."""

    valid: bool
    first_access: bool = False
    error: Optional[str] = None
    error_kind: Optional[AuthErrorKind] = None
    redirect_url: Optional[str] = None
