"""
Unit tests for core.security module.
Tests password hashing, session token creation/validation.
"""
import pytest
import datetime as dt
import jwt
from app.core.errors import TokenError, TokenExpired, TokenInvalid
from app.core.security import (
    hash_password,
    verify_password,
    create_access_token,
    decode_access_token,
    ACCESS_TOKEN_EXPIRE_MINUTES,
    JWT_ALG,
)

SECRET = "unit-test-secret-0123456789abcdef"


class TestPasswordHashing:
    """Tests for password hashing and verification."""

    def test_hash_password_returns_different_hash_each_time(self):
        """Password hashing should produce different hashes (salt included)."""
        password = "TestPassword123"
        assert hash_password(password) != hash_password(password)

    def test_hash_password_is_not_plain_text(self):
        password = "TestPassword123"
        hashed = hash_password(password)
        assert isinstance(hashed, str)
        assert hashed != password
        assert hashed.startswith("$argon2")

    def test_verify_password_correct_password(self):
        hashed = hash_password("pw1")
        assert verify_password("pw1", hashed) is True

    def test_verify_password_incorrect_password(self):
        hashed = hash_password("pw1")
        assert verify_password("wrong", hashed) is False

    def test_verify_password_garbage_hash(self):
        """A stored value that is not a hash never verifies."""
        assert verify_password("pw1", "pw1") is False


class TestSessionTokens:
    """Tests for session token creation and validation."""

    def test_token_round_trip_claims(self):
        token = create_access_token("user-123", "Alice", SECRET)
        payload = decode_access_token(token, SECRET)
        assert payload["sub"] == "user-123"
        assert payload["name"] == "Alice"
        assert "iat" in payload and "exp" in payload

    def test_token_expires_after_one_hour_by_default(self):
        token = create_access_token("user-1", "A", SECRET)
        payload = decode_access_token(token, SECRET)
        diff_minutes = (payload["exp"] - payload["iat"]) / 60
        assert ACCESS_TOKEN_EXPIRE_MINUTES == 60
        assert abs(diff_minutes - 60) < 1

    def test_custom_lifetime(self):
        token = create_access_token("user-1", "A", SECRET, expire_minutes=5)
        payload = decode_access_token(token, SECRET)
        assert abs((payload["exp"] - payload["iat"]) / 60 - 5) < 1

    def test_expired_token_rejected_even_with_valid_signature(self):
        token = create_access_token("user-1", "A", SECRET, expire_minutes=-1)
        with pytest.raises(TokenExpired):
            decode_access_token(token, SECRET)

    def test_wrong_secret_rejected(self):
        token = create_access_token("user-1", "A", SECRET)
        with pytest.raises(TokenInvalid):
            decode_access_token(token, "another-secret-0123456789abcdef")

    def test_malformed_token_rejected(self):
        with pytest.raises(TokenInvalid):
            decode_access_token("invalid.token.here", SECRET)

    def test_token_without_subject_rejected(self):
        now = dt.datetime.now(dt.timezone.utc)
        token = jwt.encode({"name": "A", "exp": now + dt.timedelta(minutes=5)}, SECRET, algorithm=JWT_ALG)
        with pytest.raises(TokenInvalid):
            decode_access_token(token, SECRET)

    def test_both_failures_share_a_base_class(self):
        assert issubclass(TokenExpired, TokenError)
        assert issubclass(TokenInvalid, TokenError)
