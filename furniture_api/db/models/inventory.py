from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import Optional

from sqlalchemy import Date, ForeignKey, Integer, Numeric, Text
from sqlalchemy.orm import Mapped, mapped_column

from furniture_api.db.base import Base, IntPkMixin, TimestampMixin


class InventoryItem(IntPkMixin, TimestampMixin, Base):
    """Stocked material (raw boards, hardware, packing supplies) tracked by SKU."""
    __tablename__ = "inventory_items"

    sku: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(Text, nullable=False, default="raw", server_default="raw")
    unit: Mapped[Optional[str]] = mapped_column(Text, nullable=True)  # piece/sheet/box/roll/etc.
    location: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    unit_cost: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    supplier: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    quantity_on_hand: Mapped[Decimal] = mapped_column(Numeric(18, 4), nullable=False, default=0, server_default="0")
    safety_stock: Mapped[Decimal] = mapped_column(Numeric(18, 4), nullable=False, default=0, server_default="0")
    reorder_point: Mapped[Decimal] = mapped_column(Numeric(18, 4), nullable=False, default=0, server_default="0")
    max_level: Mapped[Decimal] = mapped_column(Numeric(18, 4), nullable=False, default=0, server_default="0")
    lead_time_days: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")


class InventoryUsage(IntPkMixin, TimestampMixin, Base):
    """Consumption log row written whenever material is deducted."""
    __tablename__ = "inventory_usage"

    inventory_item_id: Mapped[int] = mapped_column(
        ForeignKey("inventory_items.id", ondelete="CASCADE"), nullable=False, index=True
    )
    order_id: Mapped[Optional[int]] = mapped_column(ForeignKey("orders.id", ondelete="SET NULL"), nullable=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    qty_used: Mapped[Decimal] = mapped_column(Numeric(18, 4), nullable=False)
