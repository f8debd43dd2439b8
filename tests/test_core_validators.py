import pytest

from user_storage.core import validators


class TestValidateUsername:
    def test_trims_and_keeps_case(self):
        assert validators.validate_username("  Alice.Example  ") == "Alice.Example"

    def test_allows_email_like_usernames(self):
        assert validators.validate_username("alice_smith-2@corp") == "alice_smith-2@corp"

    @pytest.mark.parametrize(
        "raw, message",
        [
            ("", "Username is required"),
            ("   ", "Username is required"),
            ("a" * 256, "Username must not exceed 255 characters"),
            ("alice smith", "Username contains invalid characters"),
            ("alice<script>", "Username contains invalid characters"),
            (None, "Username must be a string"),
        ],
    )
    def test_invalid_cases(self, raw, message):
        with pytest.raises(ValueError, match=message):
            validators.validate_username(raw)


class TestValidateEmail:
    def test_returns_trimmed_email(self):
        assert validators.validate_email("  user@Example.com ") == "user@Example.com"

    @pytest.mark.parametrize(
        "email",
        ["", "no-at-symbol", "user@", "@domain.com", "user@example", "a" * 255 + "@example.com", 42],
    )
    def test_invalid_email_formats(self, email):
        with pytest.raises(ValueError):
            validators.validate_email(email)


class TestValidateName:
    def test_valid_name_passes(self):
        assert validators.validate_name(" Alice ", "First name") == "Alice"

    @pytest.mark.parametrize(
        "name, message",
        [
            ("", "First name is required"),
            ("a" * 256, "First name exceeds maximum length"),
            ("Alice<script>", "First name contains invalid characters"),
            (7, "First name must be a string"),
        ],
    )
    def test_invalid_names(self, name, message):
        with pytest.raises(ValueError, match=message):
            validators.validate_name(name, "First name")
