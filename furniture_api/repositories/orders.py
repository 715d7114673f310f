from __future__ import annotations

from typing import List, Optional

from sqlalchemy import select

from furniture_api.db.models.sales import Order, OrderItem
from .base import BaseRepository


class OrderRepository(BaseRepository):
    """Repository for orders and their lines. Items and products load eagerly (selectin)."""

    async def list_orders(
        self, *, status: Optional[str], limit: Optional[int] = None, offset: int = 0
    ) -> List[Order]:
        stmt = select(Order)
        if status:
            stmt = stmt.where(Order.status == status)
        stmt = stmt.order_by(Order.id.desc()).offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        return await self.fetch_all(stmt)

    async def list_for_user(self, user_id: int) -> List[Order]:
        stmt = select(Order).where(Order.user_id == user_id).order_by(Order.id.desc())
        return await self.fetch_all(stmt)

    async def get_order(self, order_id: int, *, refresh: bool = False) -> Optional[Order]:
        stmt = select(Order).where(Order.id == order_id)
        if refresh:
            stmt = stmt.execution_options(populate_existing=True)
        return await self.fetch_one(stmt)

    async def get_order_for_user(self, order_id: int, user_id: int) -> Optional[Order]:
        stmt = select(Order).where(Order.id == order_id, Order.user_id == user_id)
        return await self.fetch_one(stmt)

    async def get_order_by_transaction_ref(self, transaction_ref: str) -> Optional[Order]:
        stmt = select(Order).where(Order.transaction_ref == transaction_ref)
        return await self.fetch_one(stmt)

    async def stage_order(self, order: Order) -> Order:
        """Add the order header and flush so its id can be referenced."""
        await self.add(order)
        await self.flush()
        return order

    async def stage_item(self, *, order_id: int, product_id: int, quantity: int, price) -> OrderItem:
        item = OrderItem(order_id=order_id, product_id=product_id, quantity=quantity, price=price)
        await self.add(item)
        return item

    async def update_order(self, order: Order, **values) -> Order:
        for key, value in values.items():
            setattr(order, key, value)
        await self.commit()
        return order
