"""
Unit tests for core.security module.
Tests password hashing, JWT tokens, and encryption/masking of stored API keys.
"""
import datetime as dt

import jwt
import pytest

from minutes.core.security import (
    ACCESS_TOKEN_EXPIRE_MINUTES,
    MASK,
    InvalidToken,
    create_access_token,
    decode_access_token,
    decrypt,
    encrypt,
    hash_password,
    mask_api_key,
    verify_password,
)


class TestPasswordHashing:
    """Tests for password hashing and verification."""

    def test_hash_password_returns_different_hash_each_time(self):
        password = "TestPassword123"
        assert hash_password(password) != hash_password(password)  # Different salts

    def test_verify_password_correct_password(self):
        hashed = hash_password("TestPassword123")
        assert hashed != "TestPassword123"
        assert verify_password("TestPassword123", hashed) is True

    def test_verify_password_incorrect_password(self):
        hashed = hash_password("TestPassword123")
        assert verify_password("WrongPassword456", hashed) is False


class TestJWTTokens:
    """Tests for JWT token creation and validation."""

    def test_token_carries_user_id_and_role(self):
        payload = decode_access_token(create_access_token("user-1", "admin"))
        assert payload["sub"] == "user-1"
        assert payload["role"] == "admin"

    def test_token_has_future_expiration(self):
        payload = decode_access_token(create_access_token("user-1", "user"))
        assert payload["exp"] > dt.datetime.now(dt.timezone.utc).timestamp()
        assert abs((payload["exp"] - payload["iat"]) / 60 - ACCESS_TOKEN_EXPIRE_MINUTES) < 1

    def test_decode_access_token_invalid_token(self):
        with pytest.raises(jwt.InvalidTokenError):
            decode_access_token("invalid.token.here")

    def test_decode_with_wrong_secret_fails(self):
        token = create_access_token("user-1", "user")
        with pytest.raises(jwt.InvalidSignatureError):
            jwt.decode(token, "wrong-secret", algorithms=["HS256"])


class TestSecretEncryption:
    """Tests for encryption of API keys at rest."""

    def test_encrypt_does_not_store_plain_value(self):
        token = encrypt("sk-live-1234567890")
        assert "sk-live" not in token
        assert decrypt(token) == "sk-live-1234567890"

    def test_encrypt_is_randomized(self):
        assert encrypt("same-value") != encrypt("same-value")

    def test_decrypt_with_other_secret_fails(self):
        token = encrypt("value", secret="secret-one")
        with pytest.raises(InvalidToken):
            decrypt(token, secret="secret-two")

    def test_decrypt_tampered_token_fails(self):
        token = encrypt("value")
        tampered = token[:-4] + ("AAAA" if not token.endswith("AAAA") else "BBBB")
        with pytest.raises(InvalidToken):
            decrypt(tampered)


class TestMaskApiKey:
    def test_short_value_fully_masked(self):
        assert mask_api_key("12345678") == MASK
        assert mask_api_key("abc") == MASK

    def test_long_value_shows_first_and_last_four(self):
        assert mask_api_key("abcd1234efgh5678") == "abcd••••5678"

    def test_nine_characters_is_long_enough(self):
        assert mask_api_key("123456789") == "1234••••6789"
