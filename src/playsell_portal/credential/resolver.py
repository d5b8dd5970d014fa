"""Credential resolution against the identity provider.

Users log in either with their own password or, on first access, with the
enrollment number they were issued. The resolver probes the provider with
each credential variant in turn, remembers which literal string
authenticated, and compares that string with the stored enrollment number
to decide whether the account still has to change its password.

Secondary lookups (enrollment number and role) never block a login: when
they fail the outcome degrades to "normal access" and the least-privileged
role.
"""

from __future__ import annotations

from typing import List, Optional, Union

from loguru import logger

from ..errors import (
    AllVariantsRejected,
    AuthErrorKind,
    EmptySecret,
    MalformedIdentifier,
    ProfileNotFound,
    ProviderError,
    ProviderUnavailable,
    RoleNotFound,
)
from ..provider.models import ProviderResponse, ProviderStatus
from ..provider.protocols import IdentityProvider
from ..roles import LEAST_PRIVILEGED_ROLE, RoleRouter, UserRole
from .validation import AuthenticationOutcome, AuthStatus
from .variants import CredentialVariant, build_variants, matches_enrollment


class CredentialResolver:
    """Resolves which credential variant authenticates and classifies the access."""

    def __init__(self, provider: IdentityProvider, role_router: RoleRouter):
        """Initialize the resolver.

        Args:
            provider: Identity provider used for sign-in and profile lookups
            role_router: Role resolution and destination table
        """
        self.provider = provider
        self.role_router = role_router

    def resolve(self, identifier: str, supplied_secret: str) -> AuthenticationOutcome:
        """Authenticate ``identifier`` with the first variant of ``supplied_secret`` that works.

        Returns:
            AuthenticationOutcome; never raises for provider or lookup failures
        """
        if not identifier or "@" not in identifier:
            error = MalformedIdentifier()
            return AuthenticationOutcome.rejected(error.kind, error.message)

        if not supplied_secret or not supplied_secret.strip():
            error = EmptySecret()
            return AuthenticationOutcome.rejected(error.kind, error.message)

        email = identifier.strip().lower()
        variants = build_variants(supplied_secret)
        attempted: List[str] = []
        last_response: Optional[ProviderResponse] = None
        winner: Optional[CredentialVariant] = None

        for variant in variants:
            attempted.append(variant.label)
            logger.debug(f"Sign-in attempt {len(attempted)}/{len(variants)} for {email} ({variant.label})")

            response = self._attempt(email, variant)
            if response.success and response.user is not None:
                winner = variant
                last_response = response
                break

            logger.debug(f"Variant '{variant.label}' failed: {response.message}")
            last_response = response

        if winner is None:
            return self._reject(email, attempted, last_response)

        user = last_response.user
        logger.info(f"User {user.id} authenticated after {len(attempted)} attempt(s)")

        enrollment = self._lookup_enrollment(user.id)
        first_access = enrollment is not None and matches_enrollment(winner.value, enrollment)
        if first_access:
            logger.info(f"First access detected for user {user.id}")

        role = self._lookup_role(user.id)

        return AuthenticationOutcome(
            status=AuthStatus.FIRST_ACCESS if first_access else AuthStatus.AUTHENTICATED,
            user=user,
            role=role,
            authenticated_variant=winner,
            attempted_variants=attempted,
        )

    def validate_new_password_against_enrollment(self, user_id: str, candidate_secret: str) -> bool:
        """Return False when the new password still equals the enrollment number."""
        enrollment = self._lookup_enrollment(user_id)
        if enrollment is None:
            return True

        if matches_enrollment(candidate_secret, enrollment):
            logger.warning(f"Rejected new password for user {user_id}: matches enrollment number")
            return False
        return True

    def destination_for(self, role: Union[UserRole, str, None]) -> str:
        return self.role_router.destination_for(role)

    def resolve_role(self, user_id: str) -> UserRole:
        """Role of ``user_id``, falling back to the least-privileged role."""
        return self._lookup_role(user_id)

    def _attempt(self, email: str, variant: CredentialVariant) -> ProviderResponse:
        try:
            return self.provider.sign_in(email, variant.value)
        except ProviderUnavailable as e:
            return ProviderResponse(status=ProviderStatus.UNAVAILABLE, message=e.message, status_code=e.status_code)
        except ProviderError as e:
            return ProviderResponse(status=ProviderStatus.REJECTED, message=e.message, status_code=e.status_code)
        except OSError as e:
            return ProviderResponse(status=ProviderStatus.UNAVAILABLE, message=f"Network error: {e}")

    def _reject(self, email: str, attempted: List[str], last_response: Optional[ProviderResponse]) -> AuthenticationOutcome:
        last_reason = last_response.message if last_response else None
        error = AllVariantsRejected(attempted, last_reason)

        kind = error.kind
        if last_response is not None and last_response.status == ProviderStatus.UNAVAILABLE:
            kind = AuthErrorKind.PROVIDER_UNAVAILABLE

        logger.warning(f"Login rejected for {email} after {len(attempted)} attempt(s) ({kind.value})")
        return AuthenticationOutcome.rejected(kind, error.message, attempted)

    def _lookup_enrollment(self, user_id: str) -> Optional[str]:
        try:
            enrollment = self.provider.lookup_enrollment_identifier(user_id)
        except (ProviderError, OSError) as e:
            reason = e.message if isinstance(e, ProviderError) else str(e)
            logger.warning(ProfileNotFound(user_id, reason).message)
            return None

        if enrollment is None or not str(enrollment).strip():
            logger.info(ProfileNotFound(user_id).message)
            return None
        return str(enrollment)

    def _lookup_role(self, user_id: str) -> UserRole:
        try:
            raw_role = self.provider.lookup_role(user_id)
        except (ProviderError, OSError) as e:
            reason = e.message if isinstance(e, ProviderError) else str(e)
            logger.warning(f"{RoleNotFound(user_id, reason).message}, using '{LEAST_PRIVILEGED_ROLE.value}'")
            return LEAST_PRIVILEGED_ROLE

        if raw_role is None:
            logger.info(f"{RoleNotFound(user_id).message}, using '{LEAST_PRIVILEGED_ROLE.value}'")
            return LEAST_PRIVILEGED_ROLE

        return self.role_router.resolve_role(raw_role)
