from __future__ import annotations

from typing import Optional

from sqlalchemy import func, select

from furniture_api.db.models.users import ROLE_CUSTOMER, User
from .base import BaseRepository


class UserRepository(BaseRepository):
    """Repository for shop accounts."""

    async def get_user_by_email(self, email: str) -> Optional[User]:
        stmt = select(User).where(func.lower(User.email) == email.lower())
        return await self.fetch_one(stmt)

    async def get_user_by_id(self, user_id: int) -> Optional[User]:
        stmt = select(User).where(User.id == user_id)
        return await self.fetch_one(stmt)

    async def create_user(
        self,
        *,
        name: str,
        email: str,
        hashed_password: str,
        role: str = ROLE_CUSTOMER,
        is_active: bool = True,
    ) -> User:
        user = User(
            name=name,
            email=email,
            hashed_password=hashed_password,
            role=role,
            is_active=is_active,
        )
        await self.add(user)
        await self.commit()
        return user
