"""Supabase identity provider client.

This module talks to the hosted Supabase project over HTTPS: the GoTrue
auth endpoints for sign-in, password recovery and password updates, and the
PostgREST endpoints for the ``profiles`` and ``user_roles`` tables.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Optional, Tuple
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

from loguru import logger

from ..errors import ProviderError, ProviderUnavailable
from .models import AuthSession, ProviderResponse, ProviderStatus, SessionUser

USER_AGENT = "PlaySell-Portal/1.0.0"


class SupabaseIdentityProvider:
    """Client for authenticating users and reading profile data from Supabase."""

    def __init__(self, base_url: str, api_key: str, timeout_seconds: int = 30):
        """Initialize the provider client.

        Args:
            base_url: Project URL, e.g. ``https://xyz.supabase.co``
            api_key: Publishable (anon) key of the project
            timeout_seconds: Request timeout for every call
        """
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds
        self.token_endpoint = "/auth/v1/token"
        self.recover_endpoint = "/auth/v1/recover"
        self.user_endpoint = "/auth/v1/user"
        self.profiles_endpoint = "/rest/v1/profiles"
        self.roles_endpoint = "/rest/v1/user_roles"
        self._session: Optional[AuthSession] = None

    @property
    def session(self) -> Optional[AuthSession]:
        return self._session

    def sign_in(self, identifier: str, secret: str) -> ProviderResponse:
        try:
            _, data = self._send(
                "POST",
                self.token_endpoint,
                query={"grant_type": "password"},
                payload={"email": identifier, "password": secret},
                authenticated=False,
            )
            session = AuthSession.from_token_response(data or {})
        except ProviderError as e:
            return self._failure(e)
        except (KeyError, ValueError) as e:
            return ProviderResponse(status=ProviderStatus.REJECTED, message=f"Unexpected sign-in response: {e}")

        if session.user is None:
            return ProviderResponse(status=ProviderStatus.REJECTED, message="User not found")

        self._session = session
        logger.debug(f"Signed in user {session.user.id}")
        return ProviderResponse(status=ProviderStatus.SUCCESS, message="Signed in", user=session.user)

    def request_password_reset(self, identifier: str, redirect_to: str) -> ProviderResponse:
        try:
            self._send(
                "POST",
                self.recover_endpoint,
                query={"redirect_to": redirect_to},
                payload={"email": identifier},
                authenticated=False,
            )
        except ProviderError as e:
            return self._failure(e)

        return ProviderResponse(status=ProviderStatus.SUCCESS, message="Password reset email sent")

    def update_password(self, new_secret: str) -> ProviderResponse:
        if self._active_session() is None:
            return ProviderResponse(status=ProviderStatus.REJECTED, message="No active session")

        try:
            _, data = self._send("PUT", self.user_endpoint, payload={"password": new_secret})
        except ProviderError as e:
            return self._failure(e)

        try:
            user = SessionUser.model_validate(data) if data else None
        except ValueError:
            user = None
        return ProviderResponse(status=ProviderStatus.SUCCESS, message="Password updated", user=user)

    def get_current_user(self) -> Optional[SessionUser]:
        if self._active_session() is None:
            return None

        try:
            _, data = self._send("GET", self.user_endpoint)
        except ProviderUnavailable as e:
            logger.warning(f"Could not fetch current user: {e.message}")
            return None
        except ProviderError as e:
            # Token expired or revoked
            logger.debug(f"Session no longer valid: {e.message}")
            self._session = None
            return None

        if not data:
            return None
        try:
            return SessionUser.model_validate(data)
        except ValueError as e:
            logger.warning(f"Unexpected user response: {e}")
            return None

    def lookup_enrollment_identifier(self, user_id: str) -> Optional[str]:
        row = self._select_one(self.profiles_endpoint, "enrollment_number", "id", user_id)
        if row is None or row.get("enrollment_number") is None:
            return None
        # Stored as a number in some projects
        return str(row["enrollment_number"])

    def lookup_role(self, user_id: str) -> Optional[str]:
        row = self._select_one(self.roles_endpoint, "role", "user_id", user_id)
        if row is None or row.get("role") is None:
            return None
        return str(row["role"])

    def set_session(self, access_token: str, refresh_token: Optional[str] = None) -> None:
        self._session = AuthSession(access_token=access_token, refresh_token=refresh_token)

    def _active_session(self) -> Optional[AuthSession]:
        """Current session, dropped once its access token has expired."""
        if self._session is not None and self._session.is_expired():
            logger.debug("Session expired")
            self._session = None
        return self._session

    def _select_one(self, endpoint: str, column: str, key_column: str, key: str) -> Optional[Dict[str, Any]]:
        """Fetch at most one row of ``column`` where ``key_column`` equals ``key``."""
        _, rows = self._send(
            "GET",
            endpoint,
            query={"select": column, key_column: f"eq.{key}", "limit": 1},
        )
        if not rows:
            return None
        if not isinstance(rows, list) or not isinstance(rows[0], dict):
            raise ProviderError(f"Unexpected response from {endpoint}")
        return rows[0]

    def _headers(self, authenticated: bool) -> Dict[str, str]:
        headers = {
            "apikey": self.api_key,
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
        }
        if authenticated and self._session is not None:
            headers["Authorization"] = self._session.to_header()
        else:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _send(
        self,
        method: str,
        path: str,
        query: Optional[Dict[str, Any]] = None,
        payload: Optional[Dict[str, Any]] = None,
        authenticated: bool = True,
    ) -> Tuple[int, Any]:
        """Send a single HTTP request.

        Returns:
            Tuple of (status_code, decoded_json_body)

        Raises:
            ProviderUnavailable: network errors and 5xx responses
            ProviderError: any other non-2xx response
        """
        url = f"{self.base_url}{path}"
        if query:
            url = f"{url}?{urlencode(query)}"

        data = json.dumps(payload).encode("utf-8") if payload is not None else None
        req = Request(url, data=data, headers=self._headers(authenticated), method=method)

        try:
            with urlopen(req, timeout=self.timeout_seconds) as response:
                body = response.read().decode("utf-8")
                return response.status, json.loads(body) if body.strip() else None

        except HTTPError as e:
            message = _error_message(e)
            if e.code >= 500:
                raise ProviderUnavailable(f"Server error: {e.code} {message}", status_code=e.code) from e
            raise ProviderError(message, status_code=e.code) from e

        except URLError as e:
            raise ProviderUnavailable(f"Network error: {e.reason}") from e

        except OSError as e:
            raise ProviderUnavailable(f"Network error: {e}") from e

        except ValueError as e:
            raise ProviderError(f"Invalid JSON response: {e}") from e

    @staticmethod
    def _failure(error: ProviderError) -> ProviderResponse:
        status = ProviderStatus.UNAVAILABLE if isinstance(error, ProviderUnavailable) else ProviderStatus.REJECTED
        return ProviderResponse(status=status, message=error.message, status_code=error.status_code)


def _error_message(error: HTTPError) -> str:
    """Extract the message from a GoTrue/PostgREST error body."""
    try:
        body = json.loads(error.read().decode("utf-8"))
    except (ValueError, OSError, AttributeError):
        return f"HTTP {error.code} {error.reason}"

    if isinstance(body, dict):
        for key in ("error_description", "msg", "message", "error"):
            if body.get(key):
                return str(body[key])
    return f"HTTP {error.code} {error.reason}"


def create_identity_provider(config) -> Optional[SupabaseIdentityProvider]:
    """Create a provider client from a PortalConfig, or None when not configured."""
    if not config.is_backend_configured():
        logger.warning("Supabase is not configured. Check PLAYSELL_SUPABASE_URL and PLAYSELL_SUPABASE_PUBLISHABLE_KEY.")
        return None
    return SupabaseIdentityProvider(**config.get_provider_config())
