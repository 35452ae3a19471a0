# sitegen/auth/security.py
# Password hashing and signed session tokens

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from passlib.hash import bcrypt

from sitegen.config import settings
from sitegen.middleware.error_handler import AuthError


def hash_password(password: str) -> str:
    return bcrypt.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.verify(password, password_hash)
    except ValueError:
        # Malformed stored hash
        return False


def create_access_token(
    user_id: int,
    name: str,
    email: str,
    expires_in: Optional[int] = None,
    secret: Optional[str] = None,
) -> str:
    now = datetime.now(timezone.utc)
    lifetime = expires_in if expires_in is not None else settings.JWT_EXPIRES_SECONDS
    claims = {
        "sub": str(user_id),
        "name": name,
        "email": email,
        "iat": now,
        "exp": now + timedelta(seconds=lifetime),
    }
    return jwt.encode(claims, secret or settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str, secret: Optional[str] = None) -> Dict[str, Any]:
    """Verify signature and expiry; any failure is an AuthError."""
    try:
        claims = jwt.decode(
            token,
            secret or settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError as e:
        raise AuthError("Access denied: token expired") from e
    except jwt.InvalidTokenError as e:
        raise AuthError("Access denied: invalid token") from e

    try:
        claims["user_id"] = int(claims["sub"])
    except (TypeError, ValueError) as e:
        raise AuthError("Access denied: invalid token") from e
    return claims
