from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from sqlalchemy import ForeignKey, Integer, Numeric, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from furniture_api.db.base import Base, IntPkMixin, TimestampMixin


class Product(IntPkMixin, TimestampMixin, Base):
    """Finished furniture product sold in the shop."""
    __tablename__ = "products"

    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    stock: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    image_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    materials: Mapped[List["ProductMaterial"]] = relationship(
        "ProductMaterial",
        back_populates="product",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class ProductMaterial(IntPkMixin, TimestampMixin, Base):
    """Bill-of-materials line: raw material quantity needed per unit of product."""
    __tablename__ = "product_materials"
    __table_args__ = (
        UniqueConstraint("product_id", "inventory_item_id", name="uq_product_materials_product_item"),
    )

    product_id: Mapped[int] = mapped_column(ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    inventory_item_id: Mapped[int] = mapped_column(
        ForeignKey("inventory_items.id", ondelete="RESTRICT"), nullable=False
    )
    qty_per_unit: Mapped[Decimal] = mapped_column(Numeric(18, 4), nullable=False)

    product: Mapped["Product"] = relationship("Product", back_populates="materials")
    inventory_item: Mapped["InventoryItem"] = relationship("InventoryItem", lazy="selectin")  # noqa: F821
