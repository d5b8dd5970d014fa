"""Login portal flows.

The portal has three pages: login, forgot password, and reset password. The
reset page serves both the link from a password reset email and the
mandatory password change after a first access. This module implements what
those pages do once a form is submitted, independent of how they are
rendered.
"""

from __future__ import annotations

from typing import Optional, Union

from loguru import logger
from pydantic import ValidationError

from ..config import PortalConfig, get_config_manager
from ..credential import CredentialResolver
from ..errors import AuthErrorKind
from ..provider import IdentityProvider, create_identity_provider
from ..roles import UserRole, create_role_router
from .models import (
    LoginForm,
    LoginResponse,
    PasswordResetRequestForm,
    PasswordResetResponse,
    ResetPageState,
    ResetPasswordForm,
    first_error,
)

NOT_CONFIGURED_MESSAGE = "Identity backend not configured. Check the environment variables."


class LoginPortal:
    """Login, password recovery and first-access password change."""

    def __init__(
        self,
        config: Optional[PortalConfig] = None,
        provider: Optional[IdentityProvider] = None,
    ):
        """Initialize the portal.

        Args:
            config: Portal configuration (defaults to the global configuration)
            provider: Identity provider (defaults to a Supabase client built from config)
        """
        if config is None:
            manager = get_config_manager()
            config = manager.get_config() or manager.load_config()

        self.config = config
        self.provider = provider if provider is not None else create_identity_provider(config)
        self.role_router = create_role_router(config)
        self.resolver = CredentialResolver(self.provider, self.role_router) if self.provider is not None else None

        logger.info(f"Initialized login portal at {config.portal_url}")

    @property
    def reset_location(self) -> str:
        return f"{self.config.reset_path}?first_access=true"

    def login(self, email: str, secret: str) -> LoginResponse:
        """Authenticate and decide where the user goes next."""
        if self.resolver is None:
            return LoginResponse(success=False, error=NOT_CONFIGURED_MESSAGE, error_kind=AuthErrorKind.NOT_CONFIGURED)

        try:
            form = LoginForm(email=email, secret=secret)
        except ValidationError as e:
            return LoginResponse(success=False, error=first_error(e), error_kind=AuthErrorKind.INVALID_FORM)

        outcome = self.resolver.resolve(form.email, form.secret)

        if not outcome.success:
            return LoginResponse(success=False, error=outcome.error_message, error_kind=outcome.error)

        if outcome.first_access:
            return LoginResponse(
                success=True,
                role=outcome.role,
                requires_password_reset=True,
                next_location=self.reset_location,
                message="First access detected. Set a new password to continue.",
            )

        return LoginResponse(
            success=True,
            role=outcome.role,
            redirect_url=self.resolver.destination_for(outcome.role),
            message="Login successful!",
        )

    def request_password_reset(self, email: str) -> PasswordResetResponse:
        """Send the password reset email."""
        if self.provider is None:
            return PasswordResetResponse(success=False, error=NOT_CONFIGURED_MESSAGE, error_kind=AuthErrorKind.NOT_CONFIGURED)

        try:
            form = PasswordResetRequestForm(email=email)
        except ValidationError as e:
            return PasswordResetResponse(success=False, error=first_error(e), error_kind=AuthErrorKind.INVALID_FORM)

        response = self.provider.request_password_reset(form.email, self.config.reset_redirect_url)
        if not response.success:
            logger.warning(f"Password reset request failed for {form.email}: {response.message}")
            return PasswordResetResponse(
                success=False,
                error=response.message or "Failed to request password reset",
                error_kind=AuthErrorKind.PROVIDER_ERROR,
            )

        logger.info(f"Password reset email requested for {form.email}")
        return PasswordResetResponse(
            success=True,
            message="Password reset email sent! Check your inbox.",
        )

    def open_reset_page(self, access_token: Optional[str] = None, first_access: bool = False) -> ResetPageState:
        """Check whether the reset page can be used.

        A reset link carries an access token; a first access relies on the
        session opened by the login that detected it.
        """
        if self.provider is None:
            return ResetPageState(valid=False, error=NOT_CONFIGURED_MESSAGE, error_kind=AuthErrorKind.NOT_CONFIGURED)

        if not first_access and not access_token:
            return ResetPageState(
                valid=False,
                error="Invalid or expired link",
                error_kind=AuthErrorKind.INVALID_LINK,
                redirect_url=self.config.login_path,
            )

        if access_token:
            self.provider.set_session(access_token)

        if first_access and self.provider.get_current_user() is None:
            return ResetPageState(
                valid=False,
                first_access=True,
                error="Session expired. Please log in again.",
                error_kind=AuthErrorKind.SESSION_EXPIRED,
                redirect_url=self.config.login_path,
            )

        return ResetPageState(valid=True, first_access=first_access)

    def reset_password(self, new_password: str, confirm_password: str, first_access: bool = False) -> PasswordResetResponse:
        """Change the password of the current session's user."""
        if self.resolver is None:
            return PasswordResetResponse(success=False, error=NOT_CONFIGURED_MESSAGE, error_kind=AuthErrorKind.NOT_CONFIGURED)

        try:
            form = ResetPasswordForm.model_validate(
                {"password": new_password, "confirm_password": confirm_password},
                context={"min_length": self.config.min_password_length},
            )
        except ValidationError as e:
            return PasswordResetResponse(success=False, error=first_error(e), error_kind=AuthErrorKind.INVALID_FORM)

        user = None
        if first_access:
            user = self.provider.get_current_user()
            if user is None:
                return PasswordResetResponse(
                    success=False,
                    error="Session expired. Please log in again.",
                    error_kind=AuthErrorKind.SESSION_EXPIRED,
                    redirect_url=self.config.login_path,
                )

            if not self.resolver.validate_new_password_against_enrollment(user.id, form.password):
                return PasswordResetResponse(
                    success=False,
                    error="The new password cannot be your enrollment number. Choose a different password.",
                    error_kind=AuthErrorKind.PASSWORD_MATCHES_ENROLLMENT,
                )

        response = self.provider.update_password(form.password)
        if not response.success:
            logger.warning(f"Password update failed: {response.message}")
            return PasswordResetResponse(
                success=False,
                error=response.message or "Failed to reset password",
                error_kind=AuthErrorKind.PROVIDER_ERROR,
            )

        if user is not None:
            role = self.resolver.resolve_role(user.id)
            logger.info(f"First-access password set for user {user.id}, routing to {role.value}")
            return PasswordResetResponse(
                success=True,
                message="Password reset successfully!",
                redirect_url=self.resolver.destination_for(role),
            )

        logger.info("Password reset completed")
        return PasswordResetResponse(
            success=True,
            message="Password reset successfully!",
            redirect_url=self.config.login_path,
        )

    def destination_for(self, role: Union[UserRole, str, None]) -> str:
        return self.role_router.destination_for(role)


def create_login_portal(config: Optional[PortalConfig] = None, **kwargs) -> LoginPortal:
    """Create a login portal with default configuration.

    Args:
        config: Portal configuration
        **kwargs: Additional arguments for LoginPortal

    Returns:
        Configured login portal
    """
    return LoginPortal(config=config, **kwargs)
