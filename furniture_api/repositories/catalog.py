from __future__ import annotations

from decimal import Decimal
from typing import Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import delete, or_, select

from furniture_api.db.models.catalog import Product, ProductMaterial
from furniture_api.schemas.catalog import ProductCreate, ProductUpdate
from .base import BaseRepository


class ProductRepository(BaseRepository):
    """Repository for finished products."""

    async def list_products(
        self, *, category: Optional[str], search: Optional[str], limit: int, offset: int
    ) -> List[Product]:
        stmt = select(Product)
        if category:
            stmt = stmt.where(Product.category == category)
        if search:
            like = f"%{search}%"
            stmt = stmt.where(or_(Product.name.ilike(like), Product.description.ilike(like)))
        stmt = stmt.order_by(Product.name).offset(offset).limit(limit)
        return await self.fetch_all(stmt)

    async def get_product(self, product_id: int) -> Optional[Product]:
        stmt = select(Product).where(Product.id == product_id)
        return await self.fetch_one(stmt)

    async def get_products_for_update(self, product_ids: Iterable[int]) -> dict[int, Product]:
        """Load and row-lock products (ordered by id to keep lock order stable)."""
        ids = sorted(set(product_ids))
        if not ids:
            return {}
        stmt = (
            select(Product)
            .where(Product.id.in_(ids))
            .order_by(Product.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        res = await self.fetch_all(stmt)
        return {p.id: p for p in res}

    async def create_product(self, payload: ProductCreate) -> Product:
        row = Product(
            name=payload.name,
            description=payload.description,
            category=payload.category,
            price=Decimal(str(payload.price)),
            stock=payload.stock,
            image_url=payload.image_url,
        )
        await self.add(row)
        await self.commit()
        return row

    async def update_product(self, product: Product, payload: ProductUpdate) -> Product:
        values = payload.model_dump(exclude_unset=True, exclude_none=True)
        if "price" in values:
            values["price"] = Decimal(str(values["price"]))
        for key, value in values.items():
            setattr(product, key, value)
        await self.commit()
        return product


class ProductMaterialRepository(BaseRepository):
    """Repository for bill-of-materials lines."""

    async def list_for_product(self, product_id: int) -> List[ProductMaterial]:
        stmt = (
            select(ProductMaterial)
            .where(ProductMaterial.product_id == product_id)
            .order_by(ProductMaterial.id)
            .execution_options(populate_existing=True)
        )
        return await self.fetch_all(stmt)

    async def replace_for_product(
        self, product: Product, lines: Sequence[Tuple[int, Decimal]]
    ) -> List[ProductMaterial]:
        """Replace every BOM line of a product with (inventory_item_id, qty_per_unit) pairs."""
        await self.execute(delete(ProductMaterial).where(ProductMaterial.product_id == product.id))
        await self.flush()
        await self.add_all(
            ProductMaterial(product_id=product.id, inventory_item_id=item_id, qty_per_unit=qty)
            for item_id, qty in lines
        )
        await self.commit()
        await self.session.refresh(product, ["materials"])
        return await self.list_for_product(product.id)
