"""
core/security.py
----------------
JWT token utilities for the admin API.

Design decisions:
  - JWT payload contains sub (user_id) and role so the admin check can
    reject non-admin tokens before any store round-trip.
  - Tokens are signed with HS256; swap to RS256 for multi-service setups.
  - Sign-in itself happens in the identity provider; this service only
    verifies tokens it (or an operator script) minted.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import jwt

from chathub_admin.core.config import settings

ADMIN_ROLE = "admin"


def create_access_token(
    subject: str,
    role: str = ADMIN_ROLE,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Mint a JWT access token.

    Args:
        subject: User id (stored in 'sub' claim).
        role: 'admin' | 'user'
        expires_delta: Optional custom expiry; defaults to settings value.

    Returns:
        Signed JWT string.
    """
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    payload: Dict[str, Any] = {
        "sub": subject,
        "role": role,
        "exp": expire,
        "iat": datetime.now(timezone.utc),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Decode and validate a JWT access token.

    Raises:
        JWTError: If the token is invalid, expired, or tampered with.

    Returns:
        Raw payload dict.
    """
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
