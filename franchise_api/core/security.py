"""
Password hashing (passlib/bcrypt) and JWT issuance (python-jose).

Access tokens carry the user's email, role and organization ids for clients
that want them; the API itself only trusts ``sub`` and reloads the user.
Refresh tokens carry ``sub`` alone.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from franchise_api.core.settings import get_app_settings

ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"

_pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class InvalidTokenError(ValueError):
    """A token that is malformed, expired, of the wrong type or without a usable subject."""


# PUBLIC_INTERFACE
def verify_password(plain_password: str, hashed_password: str) -> bool:
    return _pwd_context.verify(plain_password, hashed_password)


# PUBLIC_INTERFACE
def get_password_hash(password: str) -> str:
    return _pwd_context.hash(password)


def _encode(subject: str, token_type: str, lifetime_minutes: int, claims: Optional[Dict[str, Any]] = None) -> str:
    settings = get_app_settings()
    now = datetime.now(tz=timezone.utc)
    payload: Dict[str, Any] = dict(claims or {})
    payload.update(
        {
            "sub": subject,
            "type": token_type,
            "iat": now,
            "exp": now + timedelta(minutes=lifetime_minutes),
        }
    )
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


# PUBLIC_INTERFACE
def create_access_token(
    subject: str,
    claims: Optional[Dict[str, Any]] = None,
    expires_minutes: Optional[int] = None,
) -> str:
    """
    Create a signed access token.

    Parameters:
        subject: user id placed in the 'sub' claim
        claims: extra claims (email, role and organizational ids)
        expires_minutes: override of ACCESS_TOKEN_EXPIRE_MINUTES
    """
    lifetime = expires_minutes or get_app_settings().ACCESS_TOKEN_EXPIRE_MINUTES
    return _encode(subject, ACCESS_TOKEN, lifetime, claims)


# PUBLIC_INTERFACE
def create_refresh_token(subject: str, expires_minutes: Optional[int] = None) -> str:
    lifetime = expires_minutes or get_app_settings().REFRESH_TOKEN_EXPIRE_MINUTES
    return _encode(subject, REFRESH_TOKEN, lifetime)


# PUBLIC_INTERFACE
def decode_token(token: str) -> Dict[str, Any]:
    """Decode and verify a JWT; raises JWTError if invalid or expired."""
    settings = get_app_settings()
    return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])


# PUBLIC_INTERFACE
def token_user_id(token: str, expected_type: str) -> int:
    """Return the user id from a verified token of ``expected_type`` or raise InvalidTokenError."""
    try:
        payload = decode_token(token)
    except JWTError as exc:
        raise InvalidTokenError("Invalid token") from exc
    if payload.get("type") != expected_type:
        raise InvalidTokenError("Invalid token type")
    try:
        return int(payload["sub"])
    except (KeyError, TypeError, ValueError) as exc:
        raise InvalidTokenError("Invalid token") from exc
