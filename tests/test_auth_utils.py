import pytest
from jose import jwt

from lms_backend.auth.auth_utils import (
    create_access_token, decode_access_token, hash_password, verify_bearer_token, verify_password
)
from lms_backend.config import JWT_ALGORITHM
from lms_backend.errors import AuthenticationError


def test_password_hash_round_trip():
    hashed = hash_password("secret123")

    assert hashed != "secret123"
    assert verify_password("secret123", hashed)
    assert not verify_password("wrong", hashed)


def test_verify_password_against_non_bcrypt_value():
    assert verify_password("secret123", "plain-text") is False


def test_token_carries_identity():
    payload = decode_access_token(create_access_token("STU_1", "student", "ada@campus.org"))

    assert payload["sub"] == "STU_1"
    assert payload["role"] == "student"
    assert payload["email"] == "ada@campus.org"


def test_token_signed_with_other_key_rejected():
    forged = jwt.encode({"sub": "STU_1", "role": "student"}, "not-the-key", algorithm=JWT_ALGORITHM)

    with pytest.raises(AuthenticationError):
        decode_access_token(forged)


@pytest.mark.parametrize("header", [None, "", "Token abc", "Bearer "])
def test_bearer_header_required(header):
    with pytest.raises(AuthenticationError):
        verify_bearer_token(header)
