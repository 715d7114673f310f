from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import Iterable, List, Optional

from sqlalchemy import select

from furniture_api.db.models.inventory import InventoryItem, InventoryUsage
from furniture_api.schemas.inventory import InventoryItemCreate
from .base import BaseRepository


class InventoryItemRepository(BaseRepository):
    """Repository for stocked inventory items."""

    async def list_items(
        self, *, category: Optional[str], low_stock: bool, search: Optional[str], limit: int, offset: int
    ) -> List[InventoryItem]:
        stmt = select(InventoryItem)
        if category:
            stmt = stmt.where(InventoryItem.category == category)
        if low_stock:
            stmt = stmt.where(InventoryItem.quantity_on_hand <= InventoryItem.reorder_point)
        if search:
            like = f"%{search}%"
            stmt = stmt.where(InventoryItem.sku.ilike(like) | InventoryItem.name.ilike(like))
        stmt = stmt.order_by(InventoryItem.sku).offset(offset).limit(limit)
        return await self.fetch_all(stmt)

    async def get_item(self, item_id: int) -> Optional[InventoryItem]:
        stmt = select(InventoryItem).where(InventoryItem.id == item_id)
        return await self.fetch_one(stmt)

    async def get_item_by_sku(self, sku: str) -> Optional[InventoryItem]:
        stmt = select(InventoryItem).where(InventoryItem.sku == sku)
        return await self.fetch_one(stmt)

    async def get_items(self, item_ids: Iterable[int]) -> dict[int, InventoryItem]:
        ids = sorted(set(item_ids))
        if not ids:
            return {}
        res = await self.fetch_all(select(InventoryItem).where(InventoryItem.id.in_(ids)))
        return {i.id: i for i in res}

    async def get_items_for_update(self, item_ids: Iterable[int]) -> dict[int, InventoryItem]:
        """Load and row-lock inventory items, refreshing any stale identity-map copies."""
        ids = sorted(set(item_ids))
        if not ids:
            return {}
        stmt = (
            select(InventoryItem)
            .where(InventoryItem.id.in_(ids))
            .order_by(InventoryItem.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        res = await self.fetch_all(stmt)
        return {i.id: i for i in res}

    async def create_item(self, payload: InventoryItemCreate) -> InventoryItem:
        data = payload.model_dump()
        for key in ("unit_cost", "quantity_on_hand", "safety_stock", "reorder_point", "max_level"):
            if data[key] is not None:
                data[key] = Decimal(str(data[key]))
        row = InventoryItem(**data)
        await self.add(row)
        await self.commit()
        return row


class InventoryUsageRepository(BaseRepository):
    """Repository for the material usage log."""

    async def list_usage(
        self, *, inventory_item_id: Optional[int], order_id: Optional[int], limit: int, offset: int
    ) -> List[InventoryUsage]:
        stmt = select(InventoryUsage)
        if inventory_item_id:
            stmt = stmt.where(InventoryUsage.inventory_item_id == inventory_item_id)
        if order_id:
            stmt = stmt.where(InventoryUsage.order_id == order_id)
        stmt = stmt.order_by(InventoryUsage.id.desc()).offset(offset).limit(limit)
        return await self.fetch_all(stmt)

    async def log_usage(
        self, *, inventory_item_id: int, qty_used: Decimal, order_id: Optional[int] = None, on: Optional[dt.date] = None
    ) -> InventoryUsage:
        """Stage a usage row; the caller owns the transaction."""
        row = InventoryUsage(
            inventory_item_id=inventory_item_id,
            order_id=order_id,
            date=on or dt.date.today(),
            qty_used=qty_used,
        )
        await self.add(row)
        return row
