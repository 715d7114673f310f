"""
Database seeding utilities for reference data.

Seeds:
- Raw materials and packing supplies (inventory items, keyed by SKU)
- Sample furniture products with their bills of materials
- Optional staff account (SEED_EMPLOYEE_EMAIL / SEED_EMPLOYEE_PASSWORD)

Seeding is idempotent: existing SKUs, products (by name) and users (by email)
are left untouched, so on-hand quantities are never reset.

Usage:
  python -m furniture_api.db.run_migrations upgrade head
  python -m furniture_api.db.seed
"""

from __future__ import annotations

import asyncio
import logging
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from furniture_api.core.security import get_password_hash
from furniture_api.core.settings import get_app_settings
from furniture_api.db.models.catalog import Product, ProductMaterial
from furniture_api.db.models.inventory import InventoryItem
from furniture_api.db.models.users import ROLE_EMPLOYEE, User
from furniture_api.db.session import session_scope

logger = logging.getLogger(__name__)

# sku, name, unit, description, opening quantity, reorder point
RAW_MATERIALS: List[Tuple[str, str, str, str, str, str]] = [
    ("PW-1x4x8", "Pinewood 1x4x8ft", "piece", "Pine wood board 1x4x8 ft", "200", "40"),
    ("PLY-4.2-4x8", "Plywood 4.2mm 4x8ft", "sheet", "Plywood sheet 4.2mm thickness 4x8 ft", "80", "15"),
    ("ACR-1.5-4x8", "Acrylic 1.5mm 4x8ft", "sheet", "Acrylic sheet 1.5mm thickness 4x8 ft", "30", "5"),
    ("PN-F30", "Pin Nail F30", "box", "F30 pin nails", "50", "10"),
    ("BS-1.5", "Black Screw 1 1/2", "box", "Black screw 1.5 inch", "50", "10"),
    ("STKW-250", "Stikwell 250", "tube", "Stikwell adhesive 250", "60", "12"),
    ("GRP-4-120", "Grinder pad 4inch 120 grit", "piece", "Grinding pad 4 inch, 120 grit", "40", "8"),
    ("STK-24-W", "Sticker 24 inch Car Decals - White", "roll", "White sticker roll, 24 inch for car decals", "10", "2"),
    ("STK-24-B", "Sticker 24 inch Car Decals - Black", "roll", "Black sticker roll, 24 inch for car decals", "10", "2"),
    ("TFT-24", "Transfer Tape 24 inch", "roll", "Transfer tape, 24 inch width", "10", "2"),
    ("TAPE-2-300", "TAPE 2 inch 300m", "roll", "General packing tape, 2 inch x 300 m", "25", "5"),
    ("FRAG-2-300", "Fragile Tape 2inch 300m", "roll", "Fragile printed packing tape, 2 inch x 300 m", "25", "5"),
    ("BWRAP-40-100", "Bubble Wrap 40 inch x 100 m", "roll", "Bubble wrap roll 40 inch width x 100 m length", "12", "3"),
    ("INS-8-40-100", "Insulation 8mm 40 inch x 100 m", "roll", "Insulation foam 8mm, 40 inch width x 100 m length", "12", "3"),
]

# name, category, price, stock, description, [(sku, qty per unit)]
SAMPLE_PRODUCTS: List[Tuple[str, str, str, int, str, List[Tuple[str, str]]]] = [
    (
        "Pinewood Bookshelf",
        "Shelves",
        "3499.00",
        10,
        "Five-tier pinewood bookshelf with plywood back panel.",
        [("PW-1x4x8", "6"), ("PLY-4.2-4x8", "1"), ("PN-F30", "0.1"), ("BS-1.5", "0.2"), ("STKW-250", "0.5")],
    ),
    (
        "Acrylic Display Case",
        "Display",
        "2299.00",
        8,
        "Collectible display case with acrylic front and pinewood frame.",
        [("ACR-1.5-4x8", "0.5"), ("PW-1x4x8", "2"), ("STKW-250", "0.25"), ("GRP-4-120", "0.5")],
    ),
    (
        "Plywood Study Table",
        "Tables",
        "4999.00",
        5,
        "Compact study table with plywood top and pine legs.",
        [("PLY-4.2-4x8", "2"), ("PW-1x4x8", "4"), ("BS-1.5", "0.3"), ("BWRAP-40-100", "0.05")],
    ),
]


# PUBLIC_INTERFACE
async def seed_all(session: Optional[AsyncSession] = None) -> None:
    """
    Seed the database with reference data.

    This function:
      - Creates missing raw-material inventory items
      - Creates missing sample products and their BOM lines
      - Creates the staff account when configured
    """
    if session is not None:
        await _seed(session)
        return
    async with session_scope() as own_session:
        await _seed(own_session)


async def _seed(session: AsyncSession) -> None:
    items = await _seed_inventory_items(session)
    await _seed_products(session, items)
    await _seed_employee(session)
    await session.commit()


async def _seed_inventory_items(session: AsyncSession) -> Dict[str, InventoryItem]:
    """
    Seed raw materials and return a mapping SKU -> item.
    """
    existing = {i.sku: i for i in (await session.scalars(select(InventoryItem))).all()}
    created = 0
    for sku, name, unit, description, opening, reorder in RAW_MATERIALS:
        if sku in existing:
            continue
        item = InventoryItem(
            sku=sku,
            name=name,
            category="raw",
            unit=unit,
            description=description,
            quantity_on_hand=Decimal(opening),
            reorder_point=Decimal(reorder),
            safety_stock=Decimal(0),
            max_level=Decimal(0),
            lead_time_days=0,
        )
        session.add(item)
        existing[sku] = item
        created += 1
    await session.flush()
    logger.info("Seeded %d inventory item(s)", created)
    return existing


async def _seed_products(session: AsyncSession, items: Dict[str, InventoryItem]) -> None:
    """
    Seed sample products with BOM lines referencing the seeded raw materials.
    """
    names = set((await session.scalars(select(Product.name))).all())
    for name, category, price, stock, description, bom in SAMPLE_PRODUCTS:
        if name in names:
            continue
        product = Product(
            name=name,
            category=category,
            price=Decimal(price),
            stock=stock,
            description=description,
        )
        product.materials = [
            ProductMaterial(inventory_item_id=items[sku].id, qty_per_unit=Decimal(qty)) for sku, qty in bom
        ]
        session.add(product)
        logger.info("Seeded product %s with %d BOM line(s)", name, len(bom))
    await session.flush()


async def _seed_employee(session: AsyncSession) -> None:
    """
    Create the staff account from settings if it does not exist yet.
    """
    settings = get_app_settings()
    email = settings.SEED_EMPLOYEE_EMAIL
    password = settings.SEED_EMPLOYEE_PASSWORD
    if not email or not password:
        return
    found = await session.scalar(select(User).where(User.email == email))
    if found is not None:
        return
    session.add(
        User(
            name="Workshop Staff",
            email=email,
            hashed_password=get_password_hash(password),
            role=ROLE_EMPLOYEE,
            is_active=True,
        )
    )
    logger.info("Seeded employee account %s", email)


if __name__ == "__main__":
    from furniture_api.core.logging import configure_logging

    configure_logging()
    asyncio.run(seed_all())
