"""Authentication routes."""

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.deps import CurrentUser
from app.core.exceptions import AuthenticationError, AuthorizationError
from app.core.security import create_access_token, create_refresh_token, decode_access_token
from app.models.user import User
from app.schemas.auth import LoginRequest, RefreshRequest, Token
from app.schemas.user import UserResponse
from app.services.auth import authenticate_user
from app.services.user import get_user_by_id

router = APIRouter(prefix="/auth", tags=["Authentication"])


def issue_tokens(user: User | None) -> Token:
    if not user:
        raise AuthenticationError("Incorrect email or password")

    if not user.is_active:
        raise AuthorizationError("Inactive user")

    access_token = create_access_token(data={"sub": user.id, "role": user.role})
    refresh_token = create_refresh_token(data={"sub": user.id})
    return Token(access_token=access_token, refresh_token=refresh_token)


@router.post("/login", response_model=Token)
async def login(
    login_data: LoginRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Token:
    """Login with email and password."""
    user = await authenticate_user(db, login_data.email, login_data.password)
    return issue_tokens(user)


@router.post("/login/form", response_model=Token)
async def login_form(
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Token:
    """Login with OAuth2 form (for Swagger UI). Username = email."""
    user = await authenticate_user(db, form_data.username, form_data.password)
    return issue_tokens(user)


@router.post("/refresh", response_model=Token)
async def refresh_tokens(
    refresh_data: RefreshRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Token:
    """Get new access and refresh tokens using a valid refresh token."""
    payload = decode_access_token(refresh_data.refresh_token)

    if payload is None or payload.get("type") != "refresh" or not payload.get("sub"):
        raise AuthenticationError("Invalid refresh token")

    user = await get_user_by_id(db, payload["sub"])
    if user is None or not user.is_active:
        raise AuthenticationError("User not found or inactive")

    return issue_tokens(user)


@router.get("/me", response_model=UserResponse)
async def read_me(current_user: CurrentUser):
    """The session user."""
    return current_user
