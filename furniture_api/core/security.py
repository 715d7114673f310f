"""
Password hashing and JWT helpers.

Two token kinds are issued: short-lived access tokens carrying the user's role
and long-lived refresh tokens that can only be traded for a new pair.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from furniture_api.core.settings import get_app_settings

ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"

_pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


# PUBLIC_INTERFACE
def get_password_hash(password: str) -> str:
    """Hash a password for storage."""
    return _pwd_context.hash(password)


# PUBLIC_INTERFACE
def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a login password against the stored hash."""
    return _pwd_context.verify(plain_password, hashed_password)


def _encode(claims: Dict[str, Any], lifetime: timedelta, token_type: str) -> str:
    settings = get_app_settings()
    issued = datetime.now(tz=timezone.utc)
    body = {**claims, "type": token_type, "iat": issued, "exp": issued + lifetime}
    return jwt.encode(body, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


# PUBLIC_INTERFACE
def create_access_token(subject: str, role: str, expires_minutes: Optional[int] = None) -> str:
    """Access token for the user id ``subject`` with its ``role`` claim."""
    minutes = expires_minutes or get_app_settings().ACCESS_TOKEN_EXPIRE_MINUTES
    return _encode({"sub": subject, "role": role}, timedelta(minutes=minutes), ACCESS_TOKEN)


# PUBLIC_INTERFACE
def create_refresh_token(subject: str, expires_minutes: Optional[int] = None) -> str:
    """Refresh token for the user id ``subject``."""
    minutes = expires_minutes or get_app_settings().REFRESH_TOKEN_EXPIRE_MINUTES
    return _encode({"sub": subject}, timedelta(minutes=minutes), REFRESH_TOKEN)


# PUBLIC_INTERFACE
def decode_token(token: str, expected_type: Optional[str] = None) -> Dict[str, Any]:
    """
    Verify signature and expiry and return the claims.

    Raises:
        JWTError: the token is malformed, expired, or not of ``expected_type``.
    """
    settings = get_app_settings()
    claims = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    if expected_type is not None and claims.get("type") != expected_type:
        raise JWTError(f"expected a {expected_type} token")
    return claims
