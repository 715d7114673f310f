"""
FastAPI dependencies shared by the routers: database session, the
authenticated user, role guards and payment gateways.
"""
from __future__ import annotations

import logging
from typing import Callable, NoReturn

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from furniture_api.core.logging import user_id_var
from furniture_api.core.security import ACCESS_TOKEN, decode_token
from furniture_api.db.models.users import User
from furniture_api.db.session import get_async_session
from furniture_api.integrations.maya_client import MayaGateway
from furniture_api.integrations.stripe_client import StripeGateway
from furniture_api.repositories.users import UserRepository

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")

# Routers depend on this name; tests override get_async_session.
get_session = get_async_session


def _unauthorized(detail: str) -> NoReturn:
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


# PUBLIC_INTERFACE
async def get_current_user(
    token: str = Depends(oauth2_scheme),
    session: AsyncSession = Depends(get_session),
) -> User:
    """
    Resolve the bearer access token to a User.

    Refresh tokens, expired or tampered tokens and unknown subjects all give 401.
    The user id is bound to the logging context for the rest of the request.
    """
    try:
        claims = decode_token(token, expected_type=ACCESS_TOKEN)
        user_id = int(claims["sub"])
    except (JWTError, KeyError, TypeError, ValueError):
        _unauthorized("Invalid token")

    user = await UserRepository(session).get_user_by_id(user_id)
    if user is None:
        _unauthorized("User not found")
    user_id_var.set(str(user.id))
    return user


# PUBLIC_INTERFACE
async def get_current_active_user(user: User = Depends(get_current_user)) -> User:
    """Authenticated user whose account has not been disabled (403 otherwise)."""
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Inactive user")
    return user


# PUBLIC_INTERFACE
def require_roles(*allowed: str) -> Callable[..., object]:
    """Dependency factory: the active user must hold one of ``allowed`` roles."""

    async def _guard(user: User = Depends(get_current_active_user)) -> User:
        if user.role not in allowed:
            logger.info("Denied %s role for user %s (needs %s)", user.role, user.id, "/".join(allowed))
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient role")
        return user

    return _guard


# PUBLIC_INTERFACE
def get_stripe_gateway() -> StripeGateway:
    return StripeGateway()


# PUBLIC_INTERFACE
def get_maya_gateway() -> MayaGateway:
    return MayaGateway()
