from __future__ import annotations

from typing import Any, Iterable, List, Optional

from sqlalchemy import Executable
from sqlalchemy.engine import Result
from sqlalchemy.ext.asyncio import AsyncSession


class BaseRepository:
    """
    Shared session helpers for repositories.

    Write methods either commit themselves (single-row CRUD) or only stage
    changes with `add`/`flush`. Staging methods are named ``stage_*`` or say so
    in their docstring; the service that calls them owns the commit.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def execute(self, statement: Executable) -> Result[Any]:
        return await self.session.execute(statement)

    async def fetch_all(self, statement: Executable) -> List[Any]:
        """First column of every row, as a list of ORM objects or values."""
        result = await self.session.scalars(statement)
        return list(result.all())

    async def fetch_one(self, statement: Executable) -> Optional[Any]:
        """Single ORM object or None; more than one row is an error."""
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def add(self, entity: Any) -> None:
        self.session.add(entity)

    async def add_all(self, entities: Iterable[Any]) -> None:
        self.session.add_all(list(entities))

    async def delete(self, entity: Any) -> None:
        await self.session.delete(entity)

    async def flush(self) -> None:
        """Send pending changes so generated ids become available."""
        await self.session.flush()

    async def commit(self) -> None:
        await self.session.commit()
