"""Tests for credential resolution and first-access detection."""

import pytest
from loguru import logger

from playsell_portal.credential import AuthStatus, CredentialResolver
from playsell_portal.errors import AuthErrorKind, ProviderUnavailable
from playsell_portal.roles import UserRole

from .conftest import USER_ID, FakeIdentityProvider


@pytest.fixture
def resolver(provider, router):
    return CredentialResolver(provider, router)


def test_enrollment_number_without_leading_zeros_is_first_access(provider, resolver):
    """Typing 1001 for enrollment 001001 signs in with the padded variant."""
    outcome = resolver.resolve("a@b.com", "1001")

    assert outcome.status == AuthStatus.FIRST_ACCESS
    assert outcome.first_access
    assert provider.sign_in_attempts == ["1001", "001001"]
    assert outcome.authenticated_variant.value == "001001"
    assert outcome.attempted_variants == ["original", "zero-padded to 6"]
    logger.info("✓ Padded enrollment number detected as first access")


def test_personal_password_is_normal_access(provider, resolver):
    provider.passwords["a@b.com"] = "mySecretPw1"

    outcome = resolver.resolve("a@b.com", "mySecretPw1")

    assert outcome.status == AuthStatus.AUTHENTICATED
    assert not outcome.first_access
    assert provider.sign_in_attempts == ["mySecretPw1"]
    assert outcome.role == UserRole.USER


def test_all_variants_rejected(provider, resolver):
    outcome = resolver.resolve("a@b.com", "bad")

    assert not outcome.success
    assert outcome.error == AuthErrorKind.ALL_VARIANTS_REJECTED
    assert outcome.role is None
    assert outcome.user is None
    assert provider.sign_in_attempts == ["bad", "000bad"]
    assert outcome.attempted_variants == ["original", "zero-padded to 6"]
    assert "original" in outcome.error_message
    assert "zero-padded to 6" in outcome.error_message


def test_error_message_never_contains_enrollment_number(provider, resolver):
    provider.passwords["a@b.com"] = "somethingElse"

    outcome = resolver.resolve("a@b.com", "1001")

    assert not outcome.success
    assert "001001" not in outcome.error_message


def test_leading_zeros_stripped_after_original_fails(provider, resolver):
    provider.passwords["a@b.com"] = "4567"

    outcome = resolver.resolve("a@b.com", "004567")

    assert outcome.success
    assert provider.sign_in_attempts == ["004567", "4567"]
    # Authenticated with "4567", enrollment is 001001
    assert not outcome.first_access


def test_wider_padding_is_tried_in_order(provider, resolver):
    provider.passwords["a@b.com"] = "00001001"
    provider.enrollments[USER_ID] = "00001001"

    outcome = resolver.resolve("a@b.com", "1001")

    assert outcome.first_access
    assert provider.sign_in_attempts == ["1001", "001001", "0001001", "00001001"]


def test_first_access_compares_authenticating_variant_not_typed_input(provider, resolver):
    provider.passwords["a@b.com"] = "001001"
    provider.enrollments[USER_ID] = "1001"

    outcome = resolver.resolve("a@b.com", "1001")

    # "001001" equals the padded form of the stored "1001"
    assert outcome.first_access


def test_first_access_is_case_insensitive(provider, resolver):
    provider.passwords["a@b.com"] = "AB1234"
    provider.enrollments[USER_ID] = "ab1234"

    assert resolver.resolve("a@b.com", "AB1234").first_access


def test_identifier_is_normalized(provider, resolver):
    outcome = resolver.resolve("  A@B.com ", "001001")

    assert outcome.success


@pytest.mark.parametrize("identifier", ["", "ab.com", "user"])
def test_malformed_identifier_makes_no_provider_call(provider, resolver, identifier):
    outcome = resolver.resolve(identifier, "001001")

    assert outcome.error == AuthErrorKind.MALFORMED_IDENTIFIER
    assert provider.sign_in_attempts == []


@pytest.mark.parametrize("secret", ["", "   "])
def test_empty_secret_makes_no_provider_call(provider, resolver, secret):
    outcome = resolver.resolve("a@b.com", secret)

    assert outcome.error == AuthErrorKind.EMPTY_SECRET
    assert provider.sign_in_attempts == []


def test_transport_error_moves_to_next_variant(provider, resolver):
    provider.raising_secrets.add("1001")

    outcome = resolver.resolve("a@b.com", "1001")

    assert outcome.first_access
    assert provider.sign_in_attempts == ["1001", "001001"]


def test_last_variant_transport_failure_is_surfaced(provider, resolver):
    provider.passwords["a@b.com"] = "unrelated"
    provider.unavailable_secrets.add("000bad")

    outcome = resolver.resolve("a@b.com", "bad")

    assert outcome.error == AuthErrorKind.PROVIDER_UNAVAILABLE
    assert outcome.attempted_variants == ["original", "zero-padded to 6"]


def test_missing_profile_defaults_to_normal_access(provider, resolver):
    provider.enrollments.clear()

    outcome = resolver.resolve("a@b.com", "1001")

    assert outcome.success
    assert not outcome.first_access


def test_profile_lookup_failure_does_not_block_login(provider, resolver, provider_error):
    provider.enrollment_error = provider_error

    outcome = resolver.resolve("a@b.com", "001001")

    assert outcome.status == AuthStatus.AUTHENTICATED


def test_missing_role_defaults_to_user(provider, resolver):
    provider.roles.clear()

    outcome = resolver.resolve("a@b.com", "001001")

    assert outcome.role == UserRole.USER


def test_role_lookup_failure_defaults_to_user(provider, resolver):
    provider.roles[USER_ID] = "admin"
    provider.role_error = ProviderUnavailable("Server error: 503")

    outcome = resolver.resolve("a@b.com", "001001")

    assert outcome.success
    assert outcome.role == UserRole.USER


def test_unknown_stored_role_defaults_to_user(provider, resolver):
    provider.roles[USER_ID] = "superuser"

    assert resolver.resolve("a@b.com", "001001").role == UserRole.USER


def test_leader_role_routes_to_its_own_destination(provider, resolver, config):
    provider.roles[USER_ID] = "leader"

    outcome = resolver.resolve("a@b.com", "001001")
    destination = resolver.destination_for(outcome.role)

    assert outcome.role == UserRole.LEADER
    assert destination == config.destinations["leader"]
    assert destination != resolver.destination_for(UserRole.ADMIN)
    assert destination != resolver.destination_for(UserRole.USER)


def test_new_password_equal_to_padded_enrollment_is_rejected(provider, resolver):
    provider.enrollments[USER_ID] = "1001"

    assert not resolver.validate_new_password_against_enrollment(USER_ID, "001001")
    assert not resolver.validate_new_password_against_enrollment(USER_ID, " 1001 ")
    assert resolver.validate_new_password_against_enrollment(USER_ID, "newSecret9")


def test_new_password_allowed_when_enrollment_unknown(provider_error, router):
    provider = FakeIdentityProvider()
    provider.enrollment_error = provider_error
    resolver = CredentialResolver(provider, router)

    assert resolver.validate_new_password_against_enrollment(USER_ID, "001001")


def test_outcome_serialization_hides_authenticating_variant(resolver):
    outcome = resolver.resolve("a@b.com", "1001")

    dumped = outcome.model_dump()
    assert "authenticated_variant" not in dumped
    assert "001001" not in repr(outcome)
