"""Security utilities for JWT auth and password hashing.

Passwords are hashed with passlib's pbkdf2_sha256 scheme, which needs no
native extension. Tokens are compact HS256 JWTs from python-jose whose
subject is the user id.

PySecure-4-Minimal controls:
- Use constant-time comparisons where applicable (passlib verify).
- Avoid logging secrets.
- Deterministic, validated token generation.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import jwt  # python-jose (fastapi-compatible)
from passlib.context import CryptContext

from impact_tracker.core.config import get_settings

_pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


# PUBLIC_INTERFACE
def hash_password(password: str) -> str:
    """
    PUBLIC_INTERFACE
    Hash a password securely.

    Surrounding whitespace is stripped before hashing, matching verify_password.

    Raises:
        ValueError: If password policy fails.
    """
    if not isinstance(password, str) or len(password.strip()) < 8:
        raise ValueError("Password must be at least 8 characters.")
    return _pwd_context.hash(password.strip())


# PUBLIC_INTERFACE
def verify_password(password: str, hashed: str) -> bool:
    """
    PUBLIC_INTERFACE
    Verify a password against a stored hash. Unknown or corrupt hashes verify as False.
    """
    if not hashed or not isinstance(password, str):
        return False
    try:
        return _pwd_context.verify(password.strip(), hashed)
    except (ValueError, TypeError):
        return False


# PUBLIC_INTERFACE
def create_access_token(subject: str, expires_minutes: Optional[int] = None, claims: Optional[dict[str, Any]] = None) -> str:
    """
    PUBLIC_INTERFACE
    Create a signed JWT access token.

    Args:
        subject: The subject/user identifier.
        expires_minutes: TTL override; if None, use settings.
        claims: Additional claims to include.

    Returns:
        A compact JWT string.
    """
    settings = get_settings()
    exp_minutes = expires_minutes if isinstance(expires_minutes, int) and expires_minutes > 0 else settings.access_token_expire_minutes
    now = datetime.now(timezone.utc)
    to_encode: dict[str, Any] = {
        "sub": subject,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=exp_minutes)).timestamp()),
    }
    if isinstance(claims, dict):
        for k, v in claims.items():
            if k not in {"sub", "iat", "exp"}:
                to_encode[k] = v
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


# PUBLIC_INTERFACE
def decode_token(token: str) -> dict[str, Any]:
    """
    PUBLIC_INTERFACE
    Decode and validate a JWT token, returning claims.

    Raises:
        JWTError: If token is invalid or expired.
    """
    settings = get_settings()
    return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
