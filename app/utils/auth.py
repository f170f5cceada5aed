"""Bearer token utilities.

Users sign in with the external identity provider, which issues JWTs signed
with the shared secret. This service only verifies them and reads the
subject; issuing tokens here is for scripts and tests.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from app.config import settings


def create_access_token(
    user_id: str, expires_delta: Optional[timedelta] = None
) -> str:
    """
    Create a JWT access token for a user.

    Args:
        user_id: Identity provider subject to encode in token
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token string

    Example:
        >>> token = create_access_token(user_id="user123")
        >>> isinstance(token, str)
        True
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.jwt_expiration_minutes)

    to_encode = {
        "sub": user_id,
        "exp": datetime.now(timezone.utc) + expires_delta,
    }

    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_access_token(token: str) -> str:
    """
    Verify and decode a JWT access token.

    Args:
        token: JWT token string to verify

    Returns:
        User ID (the token subject)

    Raises:
        JWTError: If token is invalid, expired or has no subject

    Example:
        >>> token = create_access_token(user_id="user123")
        >>> verify_access_token(token)
        'user123'
    """
    payload = jwt.decode(
        token,
        settings.jwt_secret,
        algorithms=[settings.jwt_algorithm],
        options={"verify_aud": False},
    )
    user_id = payload.get("sub")

    if not user_id:
        raise JWTError("Token payload missing 'sub' claim")

    return user_id
