"""
Tests for reference data seeding.
"""
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from furniture_api.db.models.catalog import Product
from furniture_api.db.models.inventory import InventoryItem
from furniture_api.db.models.users import User
from furniture_api.db.seed import RAW_MATERIALS, SAMPLE_PRODUCTS, seed_all


@pytest.mark.asyncio
async def test_seed_is_idempotent(session_maker, monkeypatch) -> None:
    monkeypatch.setenv("SEED_EMPLOYEE_EMAIL", "workshop@furnishop.ph")
    monkeypatch.setenv("SEED_EMPLOYEE_PASSWORD", "change-me-now")

    async with session_maker() as session:
        await seed_all(session)

    async with session_maker() as session:
        pine = await session.scalar(select(InventoryItem).where(InventoryItem.sku == "PW-1x4x8"))
        pine.quantity_on_hand = Decimal("3")
        await session.commit()
        await seed_all(session)

    async with session_maker() as session:
        items = await session.scalar(select(func.count()).select_from(InventoryItem))
        products = (await session.scalars(select(Product).order_by(Product.name))).all()
        staff = (await session.scalars(select(User))).all()
        pine = await session.scalar(select(InventoryItem).where(InventoryItem.sku == "PW-1x4x8"))

        assert items == len(RAW_MATERIALS)
        assert [p.name for p in products] == sorted(name for name, *_ in SAMPLE_PRODUCTS)
        bookshelf = next(p for p in products if p.name == "Pinewood Bookshelf")
        assert {m.inventory_item.sku for m in bookshelf.materials} == {
            "PW-1x4x8",
            "PLY-4.2-4x8",
            "PN-F30",
            "BS-1.5",
            "STKW-250",
        }
        assert [(u.email, u.role) for u in staff] == [("workshop@furnishop.ph", "employee")]
        assert pine.quantity_on_hand == Decimal("3")


@pytest.mark.asyncio
async def test_seed_without_staff_settings(session_maker, monkeypatch) -> None:
    monkeypatch.delenv("SEED_EMPLOYEE_EMAIL", raising=False)
    monkeypatch.delenv("SEED_EMPLOYEE_PASSWORD", raising=False)

    async with session_maker() as session:
        await seed_all(session)

    async with session_maker() as session:
        assert await session.scalar(select(func.count()).select_from(User)) == 0
