from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession


class BaseService:
    """
    Base class for services: business rules over one shared session.

    Several repositories are built on the same session so a service can span
    them with a single transaction via `atomic`.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @asynccontextmanager
    async def atomic(self) -> AsyncIterator[AsyncSession]:
        """Commit when the block succeeds, roll back and re-raise otherwise."""
        try:
            yield self.session
        except BaseException:
            await self.session.rollback()
            raise
        await self.session.commit()
