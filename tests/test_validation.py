"""Tests for credential/profile format rules."""

import pytest

from store_ratings.auth.validation import (
    check_new_password,
    check_registration,
    validate_address,
    validate_email,
    validate_name,
    validate_password,
)
from store_ratings.errors import InvalidEmailFormat, ValidationError, WeakPassword


class TestName:
    def test_short_name_rejected(self):
        assert not validate_name("Jane Doe")

    def test_bounds_inclusive(self):
        assert validate_name("a" * 20)
        assert validate_name("a" * 60)
        assert not validate_name("a" * 19)
        assert not validate_name("a" * 61)

    @pytest.mark.parametrize("value", [None, "", 12345678901234567890123])
    def test_non_text_rejected(self, value):
        assert not validate_name(value)


class TestEmail:
    @pytest.mark.parametrize("value", ["a@b.co", "jane.doe+tag@mail.example.org"])
    def test_valid(self, value):
        assert validate_email(value)

    @pytest.mark.parametrize("value", ["", None, "plainaddress", "a@b", "a b@c.com", "@c.com"])
    def test_invalid(self, value):
        assert not validate_email(value)


class TestPassword:
    def test_examples(self):
        assert not validate_password("abcdefgh")
        assert validate_password("Abcdef1!")

    def test_needs_uppercase_and_special(self):
        assert not validate_password("abcdef1!")  # no uppercase
        assert not validate_password("Abcdefg1")  # no special char

    def test_length_bounds(self):
        assert not validate_password("Ab!4567")  # 7
        assert validate_password("Ab!45678")  # 8
        assert validate_password("Ab!4567890123456")  # 16
        assert not validate_password("Ab!45678901234567")  # 17


class TestAddress:
    def test_optional(self):
        assert validate_address(None)
        assert validate_address("")

    def test_max_length(self):
        assert validate_address("x" * 400)
        assert not validate_address("x" * 401)


class TestCheckRegistration:
    def test_reports_first_failing_field(self):
        with pytest.raises(ValidationError) as exc:
            check_registration(name="Jane Doe", email="bad", password="abcdefgh")
        assert exc.value.field == "name"

    def test_email_error_type(self):
        with pytest.raises(InvalidEmailFormat):
            check_registration(name="a" * 25, email="not-an-email", password="Abcdef1!")

    def test_password_error_type(self):
        with pytest.raises(WeakPassword) as exc:
            check_registration(name="a" * 25, email="a@b.co", password="abcdefgh")
        assert exc.value.field == "password"

    def test_address_error(self):
        with pytest.raises(ValidationError) as exc:
            check_registration(name="a" * 25, email="a@b.co", password="Abcdef1!", address="x" * 401)
        assert exc.value.field == "address"

    def test_missing_fields(self):
        with pytest.raises(ValidationError) as exc:
            check_registration(name=None, email="a@b.co", password="Abcdef1!")
        assert exc.value.message == "Missing required fields"

    def test_valid_input_passes(self):
        check_registration(name="a" * 25, email="a@b.co", password="Abcdef1!", address=None)


def test_check_new_password():
    with pytest.raises(ValidationError):
        check_new_password("")
    with pytest.raises(WeakPassword):
        check_new_password("weakpass")
    check_new_password("Str0ng#Pass")
