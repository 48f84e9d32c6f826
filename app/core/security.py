"""
Security Module
===============

Locally signed JWT access tokens.

Used as the identity provider in development and tests, where a
Firebase project is not available.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import JWTError, jwt

from app.config import settings


def create_access_token(
    user_id: str,
    expires_delta: Optional[timedelta] = None,
    **claims: Any,
) -> str:
    """
    Create a JWT access token for a user.

    Args:
        user_id: Identity placed in the ``sub`` claim
        expires_delta: Custom expiration time (optional)
        claims: Extra claims to include

    Returns:
        Encoded JWT token string
    """
    to_encode: dict[str, Any] = dict(claims)

    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(
            minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES
        )

    to_encode.update({
        "sub": user_id,
        "exp": expire,
        "iat": datetime.now(timezone.utc),
        "type": "access",
    })

    return jwt.encode(
        to_encode,
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )


def decode_token(token: str) -> Optional[dict[str, Any]]:
    """
    Decode and validate a JWT token.

    Args:
        token: JWT token string

    Returns:
        Decoded payload if valid, None otherwise
    """
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except JWTError:
        return None
