"""Portal flows and their form and response models."""

from .models import LoginForm, LoginResponse, PasswordResetRequestForm, PasswordResetResponse, ResetPageState, ResetPasswordForm
from .portal import LoginPortal, create_login_portal

__all__ = [
    # Forms
    "LoginForm",
    "PasswordResetRequestForm",
    "ResetPasswordForm",
    # Responses
    "LoginResponse",
    "PasswordResetResponse",
    "ResetPageState",
    # Portal
    "LoginPortal",
    "create_login_portal",
]
