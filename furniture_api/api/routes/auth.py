"""
Account endpoints. Login uses the OAuth2 password form with the email as
``username`` so the interactive docs can authorize requests.
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from furniture_api.core.deps import get_current_active_user, get_session
from furniture_api.core.security import (
    REFRESH_TOKEN,
    create_access_token,
    create_refresh_token,
    decode_token,
    get_password_hash,
    verify_password,
)
from furniture_api.db.models.users import ROLE_CUSTOMER, User
from furniture_api.repositories.users import UserRepository
from furniture_api.schemas.auth import RefreshRequest, RegisterRequest, TokenPair, UserRead
from furniture_api.schemas.common import MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


def _token_pair(user: User) -> TokenPair:
    subject = str(user.id)
    return TokenPair(
        access_token=create_access_token(subject, user.role),
        refresh_token=create_refresh_token(subject),
    )


# PUBLIC_INTERFACE
@router.post(
    "/register",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    summary="Register customer",
)
async def register_user(payload: RegisterRequest, session: AsyncSession = Depends(get_session)) -> UserRead:
    """Open a customer account. Emails are unique regardless of case."""
    users = UserRepository(session)
    if await users.get_user_by_email(payload.email) is not None:
        raise HTTPException(status_code=400, detail="User with this email already exists")

    user = await users.create_user(
        name=payload.name,
        email=payload.email,
        hashed_password=get_password_hash(payload.password),
        role=ROLE_CUSTOMER,
    )
    logger.info("Customer account %s registered", user.id)
    return UserRead.model_validate(user)


# PUBLIC_INTERFACE
@router.post("/login", response_model=TokenPair, summary="Login")
async def login_for_tokens(
    form_data: OAuth2PasswordRequestForm = Depends(),
    session: AsyncSession = Depends(get_session),
) -> TokenPair:
    """Exchange email and password for an access/refresh token pair."""
    user = await UserRepository(session).get_user_by_email(form_data.username)
    if user is None or not verify_password(form_data.password, user.hashed_password):
        logger.info("Failed login for %s", form_data.username)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    if not user.is_active:
        raise HTTPException(status_code=400, detail="User is inactive")
    return _token_pair(user)


# PUBLIC_INTERFACE
@router.post("/refresh", response_model=TokenPair, summary="Refresh tokens")
async def refresh_token(payload: RefreshRequest, session: AsyncSession = Depends(get_session)) -> TokenPair:
    """Trade a refresh token for a new pair. Access tokens are refused."""
    try:
        claims = decode_token(payload.refresh_token)
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid refresh token")
    if claims.get("type") != REFRESH_TOKEN:
        raise HTTPException(status_code=401, detail="Invalid token type")

    try:
        user_id = int(claims["sub"])
    except (KeyError, TypeError, ValueError):
        raise HTTPException(status_code=401, detail="Invalid refresh token")

    user = await UserRepository(session).get_user_by_id(user_id)
    if user is None or not user.is_active:
        raise HTTPException(status_code=401, detail="User not found or inactive")
    return _token_pair(user)


# PUBLIC_INTERFACE
@router.post("/logout", response_model=MessageResponse, summary="Logout")
async def logout() -> MessageResponse:
    """Tokens are stateless; the client simply drops them."""
    return MessageResponse(message="Logged out")


# PUBLIC_INTERFACE
@router.get("/me", response_model=UserRead, summary="Current user")
async def read_current_user(user: User = Depends(get_current_active_user)) -> UserRead:
    return UserRead.model_validate(user)
