from __future__ import annotations

from sqlalchemy import Boolean, Text, true
from sqlalchemy.orm import Mapped, mapped_column

from furniture_api.db.base import Base, IntPkMixin, TimestampMixin

ROLE_CUSTOMER = "customer"
ROLE_EMPLOYEE = "employee"


class User(IntPkMixin, TimestampMixin, Base):
    """Shop account: customers place orders, employees run the workshop."""
    __tablename__ = "users"

    name: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    hashed_password: Mapped[str] = mapped_column(Text, nullable=False)
    role: Mapped[str] = mapped_column(Text, nullable=False, default=ROLE_CUSTOMER, server_default=ROLE_CUSTOMER)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=true())
