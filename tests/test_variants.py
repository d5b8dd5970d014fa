"""Tests for credential variant generation and enrollment normalization."""

from playsell_portal.credential import build_variants, enrollment_forms, matches_enrollment


def values(secret):
    return [v.value for v in build_variants(secret)]


def test_short_digit_secret_tries_original_then_padded():
    assert values("1001") == ["1001", "001001", "0001001", "00001001", "000001001", "0000001001"]


def test_short_non_digit_secret_is_padded_once():
    assert values("bad") == ["bad", "000bad"]


def test_long_password_is_tried_as_typed_only():
    assert values("mySecretPw1") == ["mySecretPw1"]


def test_leading_zero_secret_is_stripped_after_original():
    result = values("000123")
    assert result[:2] == ["000123", "123"]
    assert result[2:] == ["0000123", "00000123", "000000123", "0000000123"]


def test_all_zero_secret_keeps_one_character():
    assert values("000000")[1] == "0"


def test_secret_is_trimmed():
    assert values("  mySecretPw1 ") == ["mySecretPw1"]


def test_long_digit_secret_only_pads_wider_widths():
    assert values("12345678") == ["12345678", "012345678", "0012345678"]


def test_ten_digit_secret_has_no_padding():
    assert values("1234567890") == ["1234567890"]


def test_variants_are_unique():
    for secret in ["1", "01", "0001", "123456", "0123456", "abc", "99999"]:
        result = values(secret)
        assert len(result) == len(set(result)), secret


def test_labels_do_not_contain_the_secret():
    for variant in build_variants("4242"):
        assert "4242" not in variant.label
        assert "4242" not in repr(variant)


def test_enrollment_forms_include_padded_value():
    assert enrollment_forms("1001") == {"1001", "001001"}
    assert enrollment_forms(" AB12 ") == {"ab12", "00ab12"}
    assert enrollment_forms("") == set()
    assert enrollment_forms(None) == set()


def test_matches_enrollment_is_case_insensitive():
    assert matches_enrollment("001001", "1001")
    assert matches_enrollment(" 1001 ", "1001")
    assert matches_enrollment("ab1234", "AB1234")
    assert not matches_enrollment("mySecretPw1", "001001")
    assert not matches_enrollment("001001", None)
