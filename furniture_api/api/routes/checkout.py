from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from furniture_api.core.deps import get_current_active_user, get_session
from furniture_api.db.models.users import User
from furniture_api.schemas.common import ErrorResponse
from furniture_api.schemas.sales import CheckoutRequest, CheckoutResponse, OrderRead
from furniture_api.services.checkout import CheckoutService

router = APIRouter(tags=["Checkout"])


# PUBLIC_INTERFACE
@router.post(
    "/checkout",
    response_model=CheckoutResponse,
    summary="Checkout cart",
    description=(
        "Turn the caller's cart into an order. Stock and raw materials are checked first; "
        "the order, stock and material deductions, usage log and production jobs are then "
        "written in one transaction and the cart is cleared. Material shortages are returned "
        "in error.details.shortages."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Cart is empty or stock unavailable"},
        409: {"model": ErrorResponse, "description": "Stock ran out while placing the order"},
        422: {"model": ErrorResponse, "description": "Insufficient raw materials or invalid payload"},
    },
)
async def checkout(
    payload: CheckoutRequest,
    user: User = Depends(get_current_active_user),
    session: AsyncSession = Depends(get_session),
) -> CheckoutResponse:
    order = await CheckoutService(session).checkout(user, payload)
    return CheckoutResponse(
        message="Checkout successful",
        order_id=order.id,
        order=OrderRead.model_validate(order),
    )
