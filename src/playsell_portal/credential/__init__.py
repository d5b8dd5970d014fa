"""Credential resolution for the login portal.

This module decides which variant of a typed password or enrollment number
authenticates with the identity provider, and whether the login is a first
access that must be followed by a password change.
"""

from .resolver import CredentialResolver
from .validation import AuthenticationOutcome, AuthStatus
from .variants import CredentialVariant, build_variants, enrollment_forms, matches_enrollment, normalize_secret

__all__ = [
    "AuthStatus",
    "AuthenticationOutcome",
    "CredentialResolver",
    "CredentialVariant",
    "build_variants",
    "enrollment_forms",
    "matches_enrollment",
    "normalize_secret",
]
