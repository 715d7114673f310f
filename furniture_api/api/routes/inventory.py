from __future__ import annotations

import logging
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from furniture_api.core.deps import get_session, require_roles
from furniture_api.db.models.users import ROLE_EMPLOYEE
from furniture_api.repositories.inventory import InventoryItemRepository, InventoryUsageRepository
from furniture_api.schemas.inventory import (
    InventoryItemCreate,
    InventoryItemRead,
    InventoryUsageRead,
    StockAdjustment,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/inventory",
    tags=["Inventory"],
    dependencies=[Depends(require_roles(ROLE_EMPLOYEE))],
)


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[InventoryItemRead],
    summary="List inventory items",
    description="Inventory items ordered by SKU. low_stock=true keeps items at or below their reorder point.",
)
async def list_items(
    session: AsyncSession = Depends(get_session),
    category: Optional[str] = Query(None, description="Filter by category (raw, finished, ...)"),
    low_stock: bool = Query(False, description="Only items at or below the reorder point"),
    search: Optional[str] = Query(None, description="Search SKU or name"),
    limit: int = Query(100, ge=1, le=1000, description="Max records"),
    offset: int = Query(0, ge=0, description="Records to skip"),
) -> List[InventoryItemRead]:
    """
    Return inventory items.

    Returns:
        List[InventoryItemRead]: Items ordered by SKU.
    """
    repo = InventoryItemRepository(session)
    records = await repo.list_items(
        category=category, low_stock=low_stock, search=search, limit=limit, offset=offset
    )
    return [InventoryItemRead.model_validate(r) for r in records]


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=InventoryItemRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create inventory item",
    description="Create an inventory item. SKUs are unique.",
)
async def create_item(
    payload: InventoryItemCreate,
    session: AsyncSession = Depends(get_session),
) -> InventoryItemRead:
    repo = InventoryItemRepository(session)
    if await repo.get_item_by_sku(payload.sku):
        raise HTTPException(status_code=409, detail=f"SKU {payload.sku} already exists")
    created = await repo.create_item(payload)
    logger.info("Inventory item %s created (%s)", created.id, created.sku)
    return InventoryItemRead.model_validate(created)


# PUBLIC_INTERFACE
@router.patch(
    "/{item_id}/adjust",
    response_model=InventoryItemRead,
    summary="Adjust on-hand quantity",
    description="Add a signed delta to the quantity on hand. The result may not go below zero.",
)
async def adjust_item(
    payload: StockAdjustment,
    item_id: int = Path(...),
    session: AsyncSession = Depends(get_session),
) -> InventoryItemRead:
    repo = InventoryItemRepository(session)
    item = await repo.get_item(item_id)
    if not item:
        raise HTTPException(status_code=404, detail="Inventory item not found")

    new_qty = Decimal(item.quantity_on_hand) + Decimal(str(payload.delta))
    if new_qty < 0:
        raise HTTPException(status_code=422, detail="Quantity on hand cannot go below zero")
    item.quantity_on_hand = new_qty
    await repo.commit()
    logger.info("Inventory %s adjusted by %s (%s): now %s", item.sku, payload.delta, payload.reason or "-", new_qty)
    return InventoryItemRead.model_validate(item)


# PUBLIC_INTERFACE
@router.get(
    "/usage",
    response_model=List[InventoryUsageRead],
    summary="List material usage",
    description="Material consumption log, newest first, optionally for one item or order.",
)
async def list_usage(
    session: AsyncSession = Depends(get_session),
    inventory_item_id: Optional[int] = Query(None, description="Filter by inventory item id"),
    order_id: Optional[int] = Query(None, description="Filter by order id"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[InventoryUsageRead]:
    repo = InventoryUsageRepository(session)
    rows = await repo.list_usage(
        inventory_item_id=inventory_item_id, order_id=order_id, limit=limit, offset=offset
    )
    return [InventoryUsageRead.model_validate(r) for r in rows]
