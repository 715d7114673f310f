from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from furniture_api.db.base import Base, IntPkMixin, TimestampMixin

ORDER_PENDING = "pending"
ORDER_COMPLETED = "completed"

PAYMENT_COD = "cod"
PAYMENT_GCASH = "gcash"
PAYMENT_MAYA = "maya"

PAYMENT_STATUS_COD_PENDING = "cod_pending"
PAYMENT_STATUS_UNPAID = "unpaid"
PAYMENT_STATUS_PAID = "paid"
PAYMENT_STATUS_FAILED = "failed"


class Cart(IntPkMixin, TimestampMixin, Base):
    """One product line in a user's shopping cart."""
    __tablename__ = "carts"
    __table_args__ = (
        UniqueConstraint("user_id", "product_id", name="uq_carts_user_product"),
    )

    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id: Mapped[int] = mapped_column(ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    product: Mapped[Optional["Product"]] = relationship("Product", lazy="selectin")  # noqa: F821


class Order(IntPkMixin, TimestampMixin, Base):
    """Customer order header created at checkout."""
    __tablename__ = "orders"

    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    total_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    status: Mapped[str] = mapped_column(Text, nullable=False, default=ORDER_PENDING)
    checkout_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    payment_method: Mapped[str] = mapped_column(Text, nullable=False, default=PAYMENT_COD)
    payment_status: Mapped[str] = mapped_column(Text, nullable=False, default=PAYMENT_STATUS_COD_PENDING)
    transaction_ref: Mapped[Optional[str]] = mapped_column(Text, nullable=True, index=True)
    shipping_address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    contact_phone: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    user: Mapped["User"] = relationship("User", lazy="selectin")  # noqa: F821
    items: Mapped[List["OrderItem"]] = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="OrderItem.id",
    )


class OrderItem(IntPkMixin, TimestampMixin, Base):
    """Order line; price is the unit price captured at checkout."""
    __tablename__ = "order_items"

    order_id: Mapped[int] = mapped_column(ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id: Mapped[Optional[int]] = mapped_column(ForeignKey("products.id", ondelete="SET NULL"), nullable=True)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    order: Mapped["Order"] = relationship("Order", back_populates="items")
    product: Mapped[Optional["Product"]] = relationship("Product", lazy="selectin")  # noqa: F821

    @property
    def product_name(self) -> str:
        return self.product.name if self.product is not None else "Unknown Product"
