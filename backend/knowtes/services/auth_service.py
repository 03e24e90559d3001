"""JWT authentication service.

Provides token creation, verification, and a FastAPI dependency
for extracting the current user from the Authorization header.

Token types:
- **access**: Short-lived token (default 30 min) for API access.
- **refresh**: Long-lived token (default 7 days) for obtaining new access tokens.

The subject (``sub``) claim is the user's UUID.
"""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime, timedelta

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt

from knowtes.config import Settings, get_settings
from knowtes.errors import AuthenticationError

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=True)


def _encode(data: dict, token_type: str, expires_delta: timedelta, settings: Settings) -> str:
    to_encode = data.copy()
    to_encode.update({"exp": datetime.now(UTC) + expires_delta, "type": token_type})
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def create_access_token(
    data: dict,
    expires_delta: timedelta | None = None,
    *,
    settings: Settings | None = None,
) -> str:
    """Create a JWT access token.

    Args:
        data: Claims to encode in the token (must include ``sub`` for subject).
        expires_delta: Custom expiration timedelta. Falls back to config default.
        settings: Optional settings override (useful for testing).

    Returns:
        Encoded JWT string.
    """
    if settings is None:
        settings = get_settings()
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES)
    return _encode(data, "access", expires_delta, settings)


def create_refresh_token(
    data: dict,
    *,
    settings: Settings | None = None,
) -> str:
    """Create a JWT refresh token."""
    if settings is None:
        settings = get_settings()
    return _encode(data, "refresh", timedelta(days=settings.JWT_REFRESH_TOKEN_EXPIRE_DAYS), settings)


def verify_token(
    token: str,
    *,
    settings: Settings | None = None,
) -> dict:
    """Decode and verify a JWT token.

    Raises:
        JWTError: If the token is invalid, expired, or tampered with.
    """
    if settings is None:
        settings = get_settings()

    return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])


def subject_from_payload(payload: dict, expected_type: str) -> uuid.UUID:
    """Return the user id carried by a decoded token of the given type.

    Raises:
        AuthenticationError: On a wrong token type or a missing/malformed subject.
    """
    if payload.get("type") != expected_type:
        raise AuthenticationError("Could not validate credentials")
    try:
        return uuid.UUID(str(payload.get("sub")))
    except ValueError:
        raise AuthenticationError("Could not validate credentials") from None


async def get_current_user(
    token: str = Depends(oauth2_scheme),
) -> dict:
    """FastAPI dependency that extracts the current user from a Bearer token.

    Returns a dict with user context:
    - user_id: UUID of the authenticated user
    - email: user email
    """
    try:
        payload = verify_token(token)
    except JWTError:
        raise AuthenticationError("Could not validate credentials") from None

    user_id = subject_from_payload(payload, "access")
    return {
        "user_id": user_id,
        "email": payload.get("email", ""),
    }
