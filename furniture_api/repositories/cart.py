from __future__ import annotations

from typing import List, Optional

from sqlalchemy import delete, select

from furniture_api.db.models.sales import Cart
from .base import BaseRepository


class CartRepository(BaseRepository):
    """Repository for shopping cart lines."""

    async def list_for_user(self, user_id: int) -> List[Cart]:
        stmt = (
            select(Cart)
            .where(Cart.user_id == user_id)
            .order_by(Cart.id)
            .execution_options(populate_existing=True)
        )
        return await self.fetch_all(stmt)

    async def get_line(self, user_id: int, line_id: int) -> Optional[Cart]:
        stmt = select(Cart).where(Cart.id == line_id, Cart.user_id == user_id)
        return await self.fetch_one(stmt)

    async def get_line_for_product(self, user_id: int, product_id: int) -> Optional[Cart]:
        stmt = select(Cart).where(Cart.user_id == user_id, Cart.product_id == product_id)
        return await self.fetch_one(stmt)

    async def add_product(self, user_id: int, product_id: int, quantity: int) -> Cart:
        """Add to the cart, merging with an existing line for the same product."""
        line = await self.get_line_for_product(user_id, product_id)
        if line is None:
            line = Cart(user_id=user_id, product_id=product_id, quantity=quantity)
            await self.add(line)
        else:
            line.quantity += quantity
        await self.commit()
        await self.session.refresh(line, ["product"])
        return line

    async def set_quantity(self, line: Cart, quantity: int) -> Cart:
        line.quantity = quantity
        await self.commit()
        return line

    async def remove_line(self, line: Cart) -> None:
        await self.delete(line)
        await self.commit()

    async def clear_for_user(self, user_id: int) -> None:
        """Stage deletion of every cart line of the user; the caller commits."""
        await self.execute(delete(Cart).where(Cart.user_id == user_id))
