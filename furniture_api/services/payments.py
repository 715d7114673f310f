from __future__ import annotations

import logging
import time
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Mapping, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from furniture_api.core.exceptions import InvalidTransactionError, NotFoundError
from furniture_api.core.settings import AppSettings, get_app_settings
from furniture_api.db.models.sales import (
    PAYMENT_GCASH,
    PAYMENT_STATUS_FAILED,
    PAYMENT_STATUS_PAID,
    PAYMENT_STATUS_UNPAID,
    Order,
)
from furniture_api.db.models.users import User
from furniture_api.integrations import HostedCheckout
from furniture_api.integrations.maya_client import MayaGateway
from furniture_api.integrations.stripe_client import StripeGateway
from furniture_api.repositories.orders import OrderRepository
from furniture_api.services.base import BaseService

logger = logging.getLogger(__name__)

STRIPE_SESSION_COMPLETED = "checkout.session.completed"


def to_minor_units(amount: Decimal) -> int:
    """Convert a currency amount to its minor unit (e.g. pesos to centavos)."""
    return int((Decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class PaymentService(BaseService):
    """
    Online payment flow for orders placed with gcash or maya.

    init() opens a hosted checkout and stores its reference on the order;
    verify() and confirm() settle the payment status afterwards, and Stripe
    webhooks mark sessions paid when they complete.
    """

    def __init__(
        self,
        session: AsyncSession,
        stripe_gateway: StripeGateway,
        maya_gateway: MayaGateway,
        settings: Optional[AppSettings] = None,
    ) -> None:
        super().__init__(session)
        self.orders = OrderRepository(session)
        self.stripe = stripe_gateway
        self.maya = maya_gateway
        self.settings = settings or get_app_settings()

    async def _get_own_order(self, user: User, order_id: int) -> Order:
        order = await self.orders.get_order_for_user(order_id, user.id)
        if order is None:
            raise NotFoundError("Order", order_id)
        return order

    # PUBLIC_INTERFACE
    async def init_payment(self, user: User, order_id: int, provider: str) -> HostedCheckout:
        """
        Start a hosted checkout with the provider and record its reference.

        Raises:
            NotFoundError: order missing or not the caller's.
            PaymentProviderError: the provider call failed (502).
        """
        order = await self._get_own_order(user, order_id)
        if provider == PAYMENT_GCASH:
            checkout = await self._init_stripe_gcash(user, order)
        else:
            checkout = await self._init_maya(user, order)

        await self.orders.update_order(
            order,
            payment_method=provider,
            payment_status=PAYMENT_STATUS_UNPAID,
            transaction_ref=checkout.reference,
        )
        logger.info("Payment for order %s started with %s (ref %s)", order.id, provider, checkout.reference)
        return checkout

    async def _init_stripe_gcash(self, user: User, order: Order) -> HostedCheckout:
        app_url = self.settings.APP_URL.rstrip("/")
        return await self.stripe.create_gcash_checkout(
            amount_minor=to_minor_units(order.total_price),
            currency=self.settings.PAYMENT_CURRENCY,
            name=f"Order #{order.id}",
            success_url=f"{app_url}/payment/success?session_id={{CHECKOUT_SESSION_ID}}",
            cancel_url=f"{app_url}/payment/failed",
            metadata={"order_id": order.id, "user_id": user.id},
        )

    async def _init_maya(self, user: User, order: Order) -> HostedCheckout:
        reference = f"ORD-{order.id}-{int(time.time())}"
        amount = float(Decimal(order.total_price).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))
        frontend = self.settings.FRONTEND_URL.rstrip("/")
        back = f"{frontend}/cart?payment={{}}&provider=maya&order_id={order.id}"
        payload: Dict[str, Any] = {
            "totalAmount": {"value": amount, "currency": self.settings.PAYMENT_CURRENCY},
            "buyer": {
                "firstName": user.name or "Customer",
                "contact": {"email": user.email},
            },
            "items": [
                {
                    "name": f"Order #{order.id}",
                    "quantity": 1,
                    "amount": {"value": amount},
                    "totalAmount": {"value": amount},
                }
            ],
            "requestReferenceNumber": reference,
            "redirectUrl": {
                "success": back.format("success"),
                "failure": back.format("failed"),
                "cancel": back.format("cancel"),
            },
            "metadata": {"order_id": order.id, "user_id": user.id},
        }
        return await self.maya.create_checkout(payload)

    # PUBLIC_INTERFACE
    async def verify_payment(self, user: User, order_id: int, transaction_ref: str, status: str) -> Order:
        """
        Reconcile a provider result against the reference stored on the order.

        Raises:
            InvalidTransactionError: the reference does not match (422).
        """
        order = await self._get_own_order(user, order_id)
        if order.transaction_ref != transaction_ref:
            logger.warning("Reference mismatch verifying order %s", order.id)
            raise InvalidTransactionError()
        new_status = PAYMENT_STATUS_PAID if status == "paid" else PAYMENT_STATUS_FAILED
        await self.orders.update_order(order, payment_status=new_status)
        logger.info("Order %s payment verified as %s", order.id, new_status)
        return order

    # PUBLIC_INTERFACE
    async def confirm_payment(self, user: User, order_id: int) -> Tuple[str, Order]:
        """Optimistically mark the order paid when the customer returns from the provider."""
        order = await self._get_own_order(user, order_id)
        if order.payment_status == PAYMENT_STATUS_PAID:
            return "Already paid", order
        await self.orders.update_order(order, payment_status=PAYMENT_STATUS_PAID)
        logger.info("Order %s payment confirmed on return from provider", order.id)
        return "Payment confirmed", order

    # PUBLIC_INTERFACE
    async def handle_stripe_event(self, event: Mapping[str, Any]) -> Optional[Order]:
        """
        Apply a verified Stripe event. Only completed checkout sessions change state.

        Returns the order marked paid, or None when the event was ignored.
        """
        event_type = event["type"]
        if event_type != STRIPE_SESSION_COMPLETED:
            logger.debug("Ignoring Stripe event %s", event_type)
            return None

        session_id = event["data"]["object"]["id"]
        order = await self.orders.get_order_by_transaction_ref(session_id)
        if order is None:
            logger.warning("Stripe session %s matches no order", session_id)
            return None
        if order.payment_status != PAYMENT_STATUS_PAID:
            await self.orders.update_order(order, payment_status=PAYMENT_STATUS_PAID)
            logger.info("Order %s marked paid by Stripe webhook", order.id)
        return order
