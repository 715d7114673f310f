from __future__ import annotations

import logging

import stripe
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from furniture_api.core.deps import (
    get_current_active_user,
    get_maya_gateway,
    get_session,
    get_stripe_gateway,
)
from furniture_api.db.models.users import User
from furniture_api.integrations.maya_client import MayaGateway
from furniture_api.integrations.stripe_client import StripeGateway
from furniture_api.schemas.common import ErrorResponse, MessageResponse
from furniture_api.schemas.payments import (
    PaymentConfirmRequest,
    PaymentInitRequest,
    PaymentInitResponse,
    PaymentResult,
    PaymentVerifyRequest,
)
from furniture_api.schemas.sales import OrderRead
from furniture_api.services.payments import PaymentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/payments", tags=["Payments"])


def get_payment_service(
    session: AsyncSession = Depends(get_session),
    stripe_gateway: StripeGateway = Depends(get_stripe_gateway),
    maya_gateway: MayaGateway = Depends(get_maya_gateway),
) -> PaymentService:
    return PaymentService(session, stripe_gateway, maya_gateway)


# PUBLIC_INTERFACE
@router.post(
    "/init",
    response_model=PaymentInitResponse,
    summary="Start online payment",
    description=(
        "Open a hosted checkout for one of the caller's orders: GCash through a Stripe "
        "Checkout Session, or Maya Checkout. The provider reference is stored on the order."
    ),
    responses={502: {"model": ErrorResponse, "description": "Payment provider request failed"}},
)
async def init_payment(
    payload: PaymentInitRequest,
    user: User = Depends(get_current_active_user),
    service: PaymentService = Depends(get_payment_service),
) -> PaymentInitResponse:
    checkout = await service.init_payment(user, payload.order_id, payload.provider)
    return PaymentInitResponse(checkout_url=checkout.checkout_url, transaction_ref=checkout.reference)


# PUBLIC_INTERFACE
@router.post(
    "/verify",
    response_model=PaymentResult,
    summary="Verify payment",
    description="Set the payment status after checking the transaction reference stored on the order.",
)
async def verify_payment(
    payload: PaymentVerifyRequest,
    user: User = Depends(get_current_active_user),
    service: PaymentService = Depends(get_payment_service),
) -> PaymentResult:
    order = await service.verify_payment(user, payload.order_id, payload.transaction_ref, payload.status)
    return PaymentResult(message="Payment status updated", order=OrderRead.model_validate(order))


# PUBLIC_INTERFACE
@router.post(
    "/confirm",
    response_model=PaymentResult,
    summary="Confirm payment",
    description="Mark the order paid on return from the provider, unless it already is.",
)
async def confirm_payment(
    payload: PaymentConfirmRequest,
    user: User = Depends(get_current_active_user),
    service: PaymentService = Depends(get_payment_service),
) -> PaymentResult:
    message, order = await service.confirm_payment(user, payload.order_id)
    return PaymentResult(message=message, order=OrderRead.model_validate(order))


# PUBLIC_INTERFACE
@router.post(
    "/webhook/stripe",
    response_model=MessageResponse,
    summary="Stripe webhook",
    description="Receive signed Stripe events; completed checkout sessions mark their order paid.",
)
async def stripe_webhook(
    request: Request,
    stripe_gateway: StripeGateway = Depends(get_stripe_gateway),
    service: PaymentService = Depends(get_payment_service),
) -> MessageResponse:
    payload = await request.body()
    signature = request.headers.get("Stripe-Signature")
    try:
        event = stripe_gateway.construct_event(payload, signature)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid payload")
    except stripe.SignatureVerificationError:
        logger.warning("Rejected Stripe webhook with invalid signature")
        raise HTTPException(status_code=400, detail="Invalid signature")

    order = await service.handle_stripe_event(event)
    if order is None:
        return MessageResponse(message="Event ignored", details={"type": event["type"]})
    return MessageResponse(message="Event processed", details={"type": event["type"], "order_id": order.id})
