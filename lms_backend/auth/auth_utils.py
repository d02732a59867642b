from datetime import datetime, timedelta

import bcrypt
from fastapi import Header
from jose import jwt, JWTError

from lms_backend.config import (
    JWT_SECRET_KEY, JWT_ALGORITHM, JWT_EXPIRE_MINUTES, BCRYPT_ROUNDS
)
from lms_backend.errors import AuthenticationError


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def create_access_token(identity_id: str, role: str, email: str) -> str:
    payload = {
        "sub": identity_id,
        "role": role,
        "email": email,
        "exp": datetime.utcnow() + timedelta(minutes=JWT_EXPIRE_MINUTES),
    }
    return jwt.encode(payload, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    try:
        return jwt.decode(token, JWT_SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except JWTError:
        raise AuthenticationError("Invalid or Expired Token")


def verify_bearer_token(authorization: str = Header(None)) -> dict:
    if not authorization or not authorization.startswith("Bearer "):
        raise AuthenticationError("No token provided, authorization denied")

    token = authorization.split(" ", 1)[1].strip()
    if not token:
        raise AuthenticationError("No token provided, authorization denied")
    return decode_access_token(token)
