from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from sqlalchemy import Select, func, select

from furniture_api.db.models.production import Production
from .base import BaseRepository


@dataclass(frozen=True)
class ProductionFilters:
    """Filters shared by the job list, analytics and the production report."""
    stage: Optional[str] = None
    status: Optional[str] = None
    order_id: Optional[int] = None
    date_from: Optional[dt.date] = None
    date_to: Optional[dt.date] = None

    def apply(self, stmt: Select[Any]) -> Select[Any]:
        if self.stage:
            stmt = stmt.where(Production.stage == self.stage)
        if self.status:
            stmt = stmt.where(Production.status == self.status)
        if self.order_id:
            stmt = stmt.where(Production.order_id == self.order_id)
        if self.date_from:
            stmt = stmt.where(Production.date >= self.date_from)
        if self.date_to:
            stmt = stmt.where(Production.date <= self.date_to)
        return stmt


NO_FILTERS = ProductionFilters()


class ProductionRepository(BaseRepository):
    """Repository for production jobs."""

    async def list_productions(
        self,
        filters: ProductionFilters = NO_FILTERS,
        *,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[Production]:
        stmt = filters.apply(select(Production))
        stmt = stmt.order_by(Production.date.desc(), Production.id.desc()).offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        return await self.fetch_all(stmt)

    async def list_for_order(self, order_id: int) -> List[Production]:
        stmt = select(Production).where(Production.order_id == order_id).order_by(Production.id)
        return await self.fetch_all(stmt)

    async def get_production(self, production_id: int) -> Optional[Production]:
        stmt = select(Production).where(Production.id == production_id)
        return await self.fetch_one(stmt)

    async def stage_production(self, production: Production) -> Production:
        await self.add(production)
        return production

    async def create_production(self, production: Production) -> Production:
        await self.add(production)
        await self.commit()
        return production

    async def update_production(self, production: Production, **values) -> Production:
        for key, value in values.items():
            setattr(production, key, value)
        await self.commit()
        return production

    async def count_by(self, column, filters: ProductionFilters = NO_FILTERS) -> List[Tuple[str, int]]:
        stmt = filters.apply(select(column, func.count(Production.id)))
        res = await self.execute(stmt.group_by(column).order_by(column))
        return [(key, int(count)) for key, count in res.all()]

    async def totals(self, filters: ProductionFilters = NO_FILTERS) -> Tuple[int, int]:
        stmt = filters.apply(
            select(func.count(Production.id), func.coalesce(func.sum(Production.quantity), 0))
        )
        res = await self.execute(stmt)
        count, qty = res.one()
        return int(count), int(qty)
