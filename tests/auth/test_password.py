"""Tests for password hashing and validation."""

import pytest

from chronolog.auth.password import (
    PasswordStrengthError,
    check_needs_rehash,
    hash_password,
    validate_password_strength,
    verify_password,
)


class TestPasswordHashing:
    def test_hash_and_verify(self):
        hashed = hash_password("correct horse")
        assert verify_password("correct horse", hashed) is True

    def test_wrong_password_rejected(self):
        hashed = hash_password("correct horse")
        assert verify_password("battery staple", hashed) is False

    def test_garbage_hash_rejected(self):
        assert verify_password("anything", "not-a-hash") is False

    def test_hash_is_argon2id(self):
        assert hash_password("secret1").startswith("$argon2id$")

    def test_check_needs_rehash(self):
        assert check_needs_rehash(hash_password("secret1")) is False


class TestPasswordStrength:
    def test_minimum_length_accepted(self):
        validate_password_strength("abcdef")  # Should not raise

    def test_empty_password_rejected(self):
        with pytest.raises(PasswordStrengthError):
            validate_password_strength("")

    def test_whitespace_only_rejected(self):
        with pytest.raises(PasswordStrengthError):
            validate_password_strength("        ")

    def test_short_password_rejected(self):
        with pytest.raises(PasswordStrengthError, match="at least 6"):
            validate_password_strength("abcde")

    def test_too_long_password_rejected(self):
        with pytest.raises(PasswordStrengthError):
            validate_password_strength("a" * 129)
