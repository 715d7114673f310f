from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from furniture_api.core.deps import get_current_active_user, get_session, require_roles
from furniture_api.db.models.sales import ORDER_COMPLETED
from furniture_api.db.models.users import ROLE_EMPLOYEE, User
from furniture_api.repositories.orders import OrderRepository
from furniture_api.schemas.production import (
    ProductionRead,
    StageSummary,
    TrackingOverall,
    TrackingResponse,
)
from furniture_api.schemas.sales import OrderRead, OrderWithUserRead, PaymentStatusRead
from furniture_api.services.tracking import TrackingService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Orders"])


# PUBLIC_INTERFACE
@router.get(
    "/orders",
    response_model=List[OrderWithUserRead],
    summary="List all orders",
    description="Staff view of every order with its customer and items, newest first.",
    dependencies=[Depends(require_roles(ROLE_EMPLOYEE))],
)
async def list_orders(
    session: AsyncSession = Depends(get_session),
    status: Optional[str] = Query(None, description="Filter by order status"),
    limit: Optional[int] = Query(None, ge=1, le=1000, description="Page size; every order when omitted"),
    offset: int = Query(0, ge=0),
) -> List[OrderWithUserRead]:
    repo = OrderRepository(session)
    items = await repo.list_orders(status=status, limit=limit, offset=offset)
    return [OrderWithUserRead.model_validate(x) for x in items]


# PUBLIC_INTERFACE
@router.get(
    "/my-orders",
    response_model=List[OrderRead],
    summary="List my orders",
    description="The caller's orders with items and products, newest first.",
)
async def list_my_orders(
    user: User = Depends(get_current_active_user),
    session: AsyncSession = Depends(get_session),
) -> List[OrderRead]:
    repo = OrderRepository(session)
    items = await repo.list_for_user(user.id)
    return [OrderRead.model_validate(x) for x in items]


# PUBLIC_INTERFACE
@router.get(
    "/orders/{order_id}",
    response_model=OrderWithUserRead,
    summary="Get order",
    description="Staff view of one order. Items whose product was removed show 'Unknown Product'.",
    dependencies=[Depends(require_roles(ROLE_EMPLOYEE))],
)
async def get_order(
    order_id: int = Path(...),
    session: AsyncSession = Depends(get_session),
) -> OrderWithUserRead:
    order = await OrderRepository(session).get_order(order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return OrderWithUserRead.model_validate(order)


# PUBLIC_INTERFACE
@router.put(
    "/orders/{order_id}/complete",
    response_model=OrderRead,
    summary="Complete order",
    description="Mark an order as completed.",
)
async def complete_order(
    order_id: int = Path(...),
    user: User = Depends(require_roles(ROLE_EMPLOYEE)),
    session: AsyncSession = Depends(get_session),
) -> OrderRead:
    repo = OrderRepository(session)
    order = await repo.get_order(order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    updated = await repo.update_order(order, status=ORDER_COMPLETED)
    logger.info("Order %s marked completed by %s", order_id, user.id)
    return OrderRead.model_validate(updated)


# PUBLIC_INTERFACE
@router.get(
    "/orders/{order_id}/payment-status",
    response_model=PaymentStatusRead,
    summary="Payment status",
    description="Payment fields of one of the caller's orders; polled while a provider checkout is open.",
)
async def get_payment_status(
    order_id: int = Path(...),
    user: User = Depends(get_current_active_user),
    session: AsyncSession = Depends(get_session),
) -> PaymentStatusRead:
    order = await OrderRepository(session).get_order_for_user(order_id, user.id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return PaymentStatusRead(
        order_id=order.id,
        payment_method=order.payment_method,
        payment_status=order.payment_status,
        transaction_ref=order.transaction_ref,
    )


# PUBLIC_INTERFACE
@router.get(
    "/orders/{order_id}/tracking",
    response_model=TrackingResponse,
    summary="Track order",
    description="Production progress per stage, overall completion and estimated completion date.",
)
async def track_order(
    order_id: int = Path(...),
    user: User = Depends(get_current_active_user),
    session: AsyncSession = Depends(get_session),
) -> TrackingResponse:
    view = await TrackingService(session).track_order(user, order_id)
    return TrackingResponse(
        order=OrderRead.model_validate(view["order"]),
        stage_summary=[StageSummary(**s) for s in view["stage_summary"]],
        productions=[ProductionRead.model_validate(p) for p in view["productions"]],
        overall=TrackingOverall(**view["overall"]),
    )
