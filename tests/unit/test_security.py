# tests/unit/test_security.py

import time

import jwt
import pytest

from sitegen.auth.security import create_access_token, decode_access_token, hash_password, verify_password
from sitegen.config import settings
from sitegen.middleware.error_handler import AuthError


def test_password_hash_round_trip():
    hashed = hash_password("rahasia123")

    assert hashed != "rahasia123"
    assert verify_password("rahasia123", hashed)
    assert not verify_password("salah", hashed)


def test_malformed_hash_does_not_verify():
    assert verify_password("anything", "not-a-bcrypt-hash") is False


def test_token_carries_identity():
    token = create_access_token(7, "Sari", "sari@example.com")

    claims = decode_access_token(token)

    assert claims["user_id"] == 7
    assert claims["name"] == "Sari"
    assert claims["email"] == "sari@example.com"


def test_expired_token_is_rejected():
    token = create_access_token(7, "Sari", "sari@example.com", expires_in=-10)

    with pytest.raises(AuthError, match="expired"):
        decode_access_token(token)


def test_token_signed_with_other_secret_is_rejected():
    token = create_access_token(7, "Sari", "sari@example.com", secret="someone-else")

    with pytest.raises(AuthError, match="invalid"):
        decode_access_token(token)


def test_garbage_token_is_rejected():
    with pytest.raises(AuthError):
        decode_access_token("not.a.token")


def test_token_without_subject_is_rejected():
    token = jwt.encode({"exp": int(time.time()) + 60}, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)

    with pytest.raises(AuthError):
        decode_access_token(token)
