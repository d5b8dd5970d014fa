"""Identity provider protocol.

The portal never talks to the hosted backend directly: everything goes
through an object satisfying :class:`IdentityProvider`, so tests can
substitute a fake.
"""

from typing import Optional, Protocol, runtime_checkable

from .models import ProviderResponse, SessionUser


@runtime_checkable
class IdentityProvider(Protocol):
    """Remote authentication and profile data capability."""

    def sign_in(self, identifier: str, secret: str) -> ProviderResponse:
        """Password sign-in. ``user`` is set on success and the session is kept."""
        ...

    def request_password_reset(self, identifier: str, redirect_to: str) -> ProviderResponse:
        """Send a password reset email pointing at ``redirect_to``."""
        ...

    def update_password(self, new_secret: str) -> ProviderResponse:
        """Change the password of the user owning the current session."""
        ...

    def get_current_user(self) -> Optional[SessionUser]:
        """Return the user of the current session, or None when there is none."""
        ...

    def lookup_enrollment_identifier(self, user_id: str) -> Optional[str]:
        """Return the stored enrollment number. Raises ProviderError on failure."""
        ...

    def lookup_role(self, user_id: str) -> Optional[str]:
        """Return the stored role string. Raises ProviderError on failure."""
        ...

    def set_session(self, access_token: str, refresh_token: Optional[str] = None) -> None:
        """Adopt a session handed over by a password recovery link."""
        ...
