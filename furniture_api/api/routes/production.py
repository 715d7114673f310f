from __future__ import annotations

import datetime as dt
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from furniture_api.core.deps import get_session, require_roles
from furniture_api.db.models.users import ROLE_EMPLOYEE, User
from furniture_api.repositories.production import ProductionFilters, ProductionRepository
from furniture_api.schemas.production import (
    ProductionAnalytics,
    ProductionCreate,
    ProductionRead,
    ProductionUpdate,
    Stage,
    Status,
)
from furniture_api.services.production import ProductionService

router = APIRouter(
    prefix="/productions",
    tags=["Production"],
    dependencies=[Depends(require_roles(ROLE_EMPLOYEE))],
)


def production_filters(
    stage: Optional[Stage] = Query(None, description="Filter by stage"),
    status: Optional[Status] = Query(None, description="Filter by status"),
    order_id: Optional[int] = Query(None, description="Filter by order id"),
    date_from: Optional[dt.date] = Query(None, description="Jobs dated on or after this day"),
    date_to: Optional[dt.date] = Query(None, description="Jobs dated on or before this day"),
) -> ProductionFilters:
    return ProductionFilters(
        stage=stage, status=status, order_id=order_id, date_from=date_from, date_to=date_to
    )


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[ProductionRead],
    summary="List production jobs",
    description="Production jobs ordered by date desc, with optional stage/status/order/date filters.",
)
async def list_productions(
    session: AsyncSession = Depends(get_session),
    filters: ProductionFilters = Depends(production_filters),
    limit: Optional[int] = Query(None, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[ProductionRead]:
    repo = ProductionRepository(session)
    items = await repo.list_productions(filters, limit=limit, offset=offset)
    return [ProductionRead.model_validate(x) for x in items]


# PUBLIC_INTERFACE
@router.get(
    "/analytics",
    response_model=ProductionAnalytics,
    summary="Production analytics",
    description="Job counts by stage and by status plus the total quantity, over the jobs matching the filters.",
)
async def production_analytics(
    session: AsyncSession = Depends(get_session),
    filters: ProductionFilters = Depends(production_filters),
) -> ProductionAnalytics:
    return await ProductionService(session).analytics(filters)


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=ProductionRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create production job",
    description="Record a manual production job (jobs for orders are created at checkout).",
)
async def create_production(
    payload: ProductionCreate,
    user: User = Depends(require_roles(ROLE_EMPLOYEE)),
    session: AsyncSession = Depends(get_session),
) -> ProductionRead:
    created = await ProductionService(session).create_production(payload, user)
    return ProductionRead.model_validate(created)


# PUBLIC_INTERFACE
@router.patch(
    "/{production_id}",
    response_model=ProductionRead,
    summary="Update production job",
    description="Move a job to another stage or change its status, quantity or notes.",
)
async def update_production(
    payload: ProductionUpdate,
    production_id: int = Path(...),
    session: AsyncSession = Depends(get_session),
) -> ProductionRead:
    updated = await ProductionService(session).update_production(production_id, payload)
    return ProductionRead.model_validate(updated)
