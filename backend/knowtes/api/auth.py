"""Authentication API endpoints.

- POST /auth/register       -- Create an account (email/password)
- POST /auth/login          -- Email/password login, returns JWT pair
- POST /auth/token/refresh  -- Exchange refresh token for new access token
- POST /auth/logout         -- End the session (tokens are discarded client-side)
- GET  /auth/me             -- Return current user info (requires auth)
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Response
from jose import JWTError

from knowtes.api.deps import CurrentUser, DbSession
from knowtes.errors import AuthenticationError, AuthorizationError, ConflictError
from knowtes.schemas import (
    AccessTokenResponse,
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)
from knowtes.services.auth_service import (
    create_access_token,
    create_refresh_token,
    subject_from_payload,
    verify_token,
)
from knowtes.services.user_service import (
    create_user,
    get_user_by_email,
    get_user_by_id,
    verify_password,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", status_code=201)
async def register(request: RegisterRequest, db: DbSession) -> UserResponse:
    """Create a new account. Emails are unique (case-insensitive)."""
    if await get_user_by_email(db, request.email):
        raise ConflictError("Email is already registered")

    user = await create_user(db, request.email, request.password)
    await db.commit()
    logger.info("Registered user %s", user.id)
    return UserResponse.model_validate(user)


@router.post("/login")
async def login(request: LoginRequest, db: DbSession) -> TokenResponse:
    """Authenticate with email/password and return an access/refresh token pair."""
    user = await get_user_by_email(db, request.email)
    if not user or not verify_password(request.password, user.password_hash):
        logger.warning("Login failed for email=%s", request.email)
        raise AuthenticationError("Invalid credentials")
    if not user.is_active:
        raise AuthorizationError("Account is disabled")

    token_data = {"sub": str(user.id), "email": user.email}
    return TokenResponse(
        access_token=create_access_token(token_data),
        refresh_token=create_refresh_token(token_data),
        user_id=user.id,
        email=user.email,
    )


@router.post("/token/refresh")
async def refresh_token(request: RefreshRequest, db: DbSession) -> AccessTokenResponse:
    try:
        payload = verify_token(request.refresh_token)
    except JWTError:
        raise AuthenticationError("Invalid refresh token") from None

    user = await get_user_by_id(db, subject_from_payload(payload, "refresh"))
    if not user or not user.is_active:
        raise AuthenticationError("Invalid refresh token")

    return AccessTokenResponse(
        access_token=create_access_token({"sub": str(user.id), "email": user.email}),
    )


@router.post("/logout", status_code=204)
async def logout(current_user: CurrentUser) -> Response:
    """Acknowledge a logout.

    Tokens are stateless JWTs, so there is nothing to revoke server-side;
    the client drops its access and refresh tokens.
    """
    logger.info("User %s logged out", current_user["user_id"])
    return Response(status_code=204)


@router.get("/me")
async def me(current_user: CurrentUser, db: DbSession) -> UserResponse:
    user = await get_user_by_id(db, current_user["user_id"])
    if not user:
        raise AuthenticationError("Could not validate credentials")
    return UserResponse.model_validate(user)
