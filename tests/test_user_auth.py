"""Tests for password hashing, access tokens and the ownership scope."""

import uuid
from types import SimpleNamespace

import pytest
from jose import JWTError, jwt

from app.api.v1.deps import owner_scope
from app.domain.services.user_auth import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)


def test_password_round_trip():
    hashed = hash_password("s3cret-pass")
    assert hashed != "s3cret-pass"
    assert verify_password("s3cret-pass", hashed) is True
    assert verify_password("wrong-pass", hashed) is False


def test_access_token_claims():
    user_id = str(uuid.uuid4())
    token, expires_in = create_access_token(user_id, "admin")
    payload = decode_access_token(token)

    assert payload["sub"] == user_id
    assert payload["role"] == "admin"
    assert payload["type"] == "user_access"
    assert expires_in > 0


def test_token_signed_with_other_secret_rejected():
    token = jwt.encode({"sub": str(uuid.uuid4()), "type": "user_access"}, "not-our-secret", algorithm="HS256")
    with pytest.raises(JWTError):
        decode_access_token(token)


def test_owner_scope():
    admin = SimpleNamespace(id=uuid.uuid4(), role="admin")
    ca = SimpleNamespace(id=uuid.uuid4(), role="ca")
    assert owner_scope(admin) == admin.id
    assert owner_scope(ca) is None
