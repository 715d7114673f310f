from __future__ import annotations

import logging
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from furniture_api.core.deps import get_session, require_roles
from furniture_api.db.models.users import ROLE_EMPLOYEE
from furniture_api.repositories.catalog import ProductMaterialRepository, ProductRepository
from furniture_api.repositories.inventory import InventoryItemRepository
from furniture_api.schemas.catalog import (
    ProductCreate,
    ProductMaterialRead,
    ProductMaterialsUpdate,
    ProductRead,
    ProductUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/products", tags=["Products"])


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[ProductRead],
    summary="List products",
    description="Public catalog listing with optional category and name/description search.",
)
async def list_products(
    session: AsyncSession = Depends(get_session),
    category: Optional[str] = Query(None, description="Filter by category"),
    search: Optional[str] = Query(None, description="Search in name and description"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[ProductRead]:
    repo = ProductRepository(session)
    items = await repo.list_products(category=category, search=search, limit=limit, offset=offset)
    return [ProductRead.model_validate(x) for x in items]


# PUBLIC_INTERFACE
@router.get(
    "/{product_id}",
    response_model=ProductRead,
    summary="Get product",
)
async def get_product(
    product_id: int = Path(...),
    session: AsyncSession = Depends(get_session),
) -> ProductRead:
    product = await ProductRepository(session).get_product(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return ProductRead.model_validate(product)


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=ProductRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create product",
    dependencies=[Depends(require_roles(ROLE_EMPLOYEE))],
)
async def create_product(
    payload: ProductCreate,
    session: AsyncSession = Depends(get_session),
) -> ProductRead:
    created = await ProductRepository(session).create_product(payload)
    logger.info("Product %s created: %s", created.id, created.name)
    return ProductRead.model_validate(created)


# PUBLIC_INTERFACE
@router.put(
    "/{product_id}",
    response_model=ProductRead,
    summary="Update product",
    description="Partial update; omitted fields are left unchanged.",
    dependencies=[Depends(require_roles(ROLE_EMPLOYEE))],
)
async def update_product(
    payload: ProductUpdate,
    product_id: int = Path(...),
    session: AsyncSession = Depends(get_session),
) -> ProductRead:
    repo = ProductRepository(session)
    product = await repo.get_product(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    updated = await repo.update_product(product, payload)
    return ProductRead.model_validate(updated)


# PUBLIC_INTERFACE
@router.get(
    "/{product_id}/materials",
    response_model=List[ProductMaterialRead],
    summary="Get bill of materials",
    description="Raw materials consumed per finished unit of the product.",
    dependencies=[Depends(require_roles(ROLE_EMPLOYEE))],
)
async def get_product_materials(
    product_id: int = Path(...),
    session: AsyncSession = Depends(get_session),
) -> List[ProductMaterialRead]:
    product = await ProductRepository(session).get_product(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    lines = await ProductMaterialRepository(session).list_for_product(product.id)
    return [ProductMaterialRead.from_line(x) for x in lines]


# PUBLIC_INTERFACE
@router.put(
    "/{product_id}/materials",
    response_model=List[ProductMaterialRead],
    summary="Replace bill of materials",
    description="Replace every BOM line of the product. Each inventory item may appear once.",
    dependencies=[Depends(require_roles(ROLE_EMPLOYEE))],
)
async def replace_product_materials(
    payload: ProductMaterialsUpdate,
    product_id: int = Path(...),
    session: AsyncSession = Depends(get_session),
) -> List[ProductMaterialRead]:
    product = await ProductRepository(session).get_product(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    item_ids = [m.inventory_item_id for m in payload.materials]
    if len(set(item_ids)) != len(item_ids):
        raise HTTPException(status_code=422, detail="Each inventory item may appear only once")
    known = await InventoryItemRepository(session).get_items(item_ids)
    missing = [i for i in item_ids if i not in known]
    if missing:
        raise HTTPException(status_code=404, detail=f"Inventory item not found: {missing[0]}")

    lines = await ProductMaterialRepository(session).replace_for_product(
        product, [(m.inventory_item_id, Decimal(str(m.qty_per_unit))) for m in payload.materials]
    )
    logger.info("BOM of product %s replaced with %d line(s)", product.id, len(lines))
    return [ProductMaterialRead.from_line(x) for x in lines]
