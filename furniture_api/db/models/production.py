from __future__ import annotations

import datetime as dt
from typing import Any, Optional

from sqlalchemy import Date, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from furniture_api.db.base import Base, IntPkMixin, JSONType, TimestampMixin

# Workshop stages in the order a piece moves through them.
STAGES = ("Design", "Preparation", "Cutting", "Assembly", "Finishing", "Quality Control")

STATUS_PENDING = "Pending"
STATUS_IN_PROGRESS = "In Progress"
STATUS_COMPLETED = "Completed"
STATUS_HOLD = "Hold"


class Production(IntPkMixin, TimestampMixin, Base):
    """Production job for one ordered product line (or a manual job)."""
    __tablename__ = "productions"

    order_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("orders.id", ondelete="CASCADE"), nullable=True, index=True
    )
    user_id: Mapped[Optional[int]] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    product_id: Mapped[Optional[int]] = mapped_column(ForeignKey("products.id", ondelete="SET NULL"), nullable=True)
    product_name: Mapped[str] = mapped_column(Text, nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    stage: Mapped[str] = mapped_column(Text, nullable=False, default="Preparation")
    status: Mapped[str] = mapped_column(Text, nullable=False, default=STATUS_PENDING)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    resources_used: Mapped[Any] = mapped_column(JSONType, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
