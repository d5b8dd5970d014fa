"""Shared fixtures: an in-memory identity provider and portal configuration."""

import os
from typing import Dict, List, Optional

import pytest

from playsell_portal.config import PortalConfig
from playsell_portal.errors import ProviderError, ProviderUnavailable
from playsell_portal.provider import ProviderResponse, ProviderStatus, SessionUser
from playsell_portal.roles import RoleRouter

USER_ID = "7c1e2d3a-0000-4000-8000-000000000001"


class FakeIdentityProvider:
    """Identity provider double that records every call."""

    def __init__(
        self,
        passwords: Optional[Dict[str, str]] = None,
        enrollments: Optional[Dict[str, Optional[str]]] = None,
        roles: Optional[Dict[str, Optional[str]]] = None,
    ):
        self.passwords = passwords or {}
        self.enrollments = enrollments or {}
        self.roles = roles or {}
        self.sign_in_attempts: List[str] = []
        self.reset_requests: List[tuple] = []
        self.updated_passwords: List[str] = []
        self.current_user: Optional[SessionUser] = None
        self.session_token: Optional[str] = None
        self.unavailable_secrets: set = set()
        self.raising_secrets: set = set()
        self.enrollment_error: Optional[Exception] = None
        self.role_error: Optional[Exception] = None
        self.update_response: Optional[ProviderResponse] = None

    def sign_in(self, identifier: str, secret: str) -> ProviderResponse:
        self.sign_in_attempts.append(secret)
        if secret in self.raising_secrets:
            raise ProviderUnavailable("connection reset")
        if secret in self.unavailable_secrets:
            return ProviderResponse(status=ProviderStatus.UNAVAILABLE, message="Network error: timed out")
        if self.passwords.get(identifier) == secret:
            self.current_user = SessionUser(id=USER_ID, email=identifier)
            return ProviderResponse(status=ProviderStatus.SUCCESS, user=self.current_user)
        return ProviderResponse(status=ProviderStatus.REJECTED, message="Invalid login credentials", status_code=400)

    def request_password_reset(self, identifier: str, redirect_to: str) -> ProviderResponse:
        self.reset_requests.append((identifier, redirect_to))
        return ProviderResponse(status=ProviderStatus.SUCCESS)

    def update_password(self, new_secret: str) -> ProviderResponse:
        if self.update_response is not None:
            return self.update_response
        if self.current_user is None:
            return ProviderResponse(status=ProviderStatus.REJECTED, message="No active session")
        self.updated_passwords.append(new_secret)
        self.passwords[self.current_user.email] = new_secret
        return ProviderResponse(status=ProviderStatus.SUCCESS, user=self.current_user)

    def get_current_user(self) -> Optional[SessionUser]:
        return self.current_user

    def lookup_enrollment_identifier(self, user_id: str) -> Optional[str]:
        if self.enrollment_error is not None:
            raise self.enrollment_error
        return self.enrollments.get(user_id)

    def lookup_role(self, user_id: str) -> Optional[str]:
        if self.role_error is not None:
            raise self.role_error
        return self.roles.get(user_id)

    def set_session(self, access_token: str, refresh_token: Optional[str] = None) -> None:
        self.session_token = access_token
        self.current_user = SessionUser(id=USER_ID, email="a@b.com")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep host PLAYSELL_* variables out of every test."""
    for name in list(os.environ):
        if name.startswith("PLAYSELL_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def provider():
    return FakeIdentityProvider(
        passwords={"a@b.com": "001001"},
        enrollments={USER_ID: "001001"},
        roles={USER_ID: "user"},
    )


@pytest.fixture
def config():
    return PortalConfig(supabase_url="https://example.supabase.co", supabase_key="anon-key")


@pytest.fixture
def router(config):
    return RoleRouter(config.destinations, config.role_aliases)


@pytest.fixture
def provider_error():
    return ProviderError("permission denied for table profiles", status_code=401)
