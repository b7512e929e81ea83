"""
Unit tests for password hashing and JWT encoding.
"""

from datetime import timedelta

import pytest
from jose import jwt

from newsroom.core.config import settings
from newsroom.core.errors import Expired, Malformed
from newsroom.core.security import (
    ALGORITHM,
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)


class TestPasswordHashing:
    def test_hash_is_not_plaintext_and_verifies(self):
        hashed = get_password_hash("secret1")
        assert hashed != "secret1"
        assert hashed.startswith("$2b$12$")
        assert verify_password("secret1", hashed) is True
        assert verify_password("secret2", hashed) is False

    def test_salted(self):
        assert get_password_hash("secret1") != get_password_hash("secret1")

    def test_missing_or_garbage_hash_never_matches(self):
        assert verify_password("secret1", None) is False
        assert verify_password("secret1", "not-a-bcrypt-hash") is False


class TestTokens:
    def test_claims(self):
        token = create_access_token("user-1", expires_delta=timedelta(minutes=5))
        payload = jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
        assert payload["sub"] == "user-1"
        assert payload["is_guest"] is False
        assert payload["exp"] > payload["iat"]

    def test_round_trip_guest(self):
        data = decode_access_token(create_access_token("guest_1", is_guest=True))
        assert data.user_id == "guest_1"
        assert data.is_guest is True
        assert data.exp is not None

    def test_expired(self):
        token = create_access_token("user-1", expires_delta=timedelta(seconds=-5))
        with pytest.raises(Expired):
            decode_access_token(token)

    def test_wrong_signature(self):
        token = jwt.encode({"sub": "user-1"}, "x" * 40, algorithm=ALGORITHM)
        with pytest.raises(Malformed):
            decode_access_token(token)

    def test_garbage(self):
        with pytest.raises(Malformed):
            decode_access_token("not-a-token")

    def test_missing_subject(self):
        token = jwt.encode({"is_guest": False}, settings.secret_key, algorithm=ALGORITHM)
        with pytest.raises(Malformed):
            decode_access_token(token)
