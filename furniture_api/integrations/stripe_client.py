"""
Stripe gateway for GCash checkout sessions and webhook verification.

Transient failures (connection problems, rate limiting, Stripe 5xx) are retried
with exponential backoff; anything else is reported as a provider error.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

import stripe
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from furniture_api.core.exceptions import PaymentProviderError, ProviderUnavailableError
from furniture_api.core.settings import AppSettings, get_app_settings
from furniture_api.integrations import HostedCheckout

logger = logging.getLogger(__name__)

PROVIDER = "Stripe"

_TRANSIENT_ERRORS = (
    stripe.APIConnectionError,
    stripe.RateLimitError,
    stripe.APIError,
)


class StripeGateway:
    """Thin wrapper over the Stripe SDK used by the payment service."""

    def __init__(self, settings: Optional[AppSettings] = None) -> None:
        self.settings = settings or get_app_settings()

    def _require_api_key(self) -> str:
        if not self.settings.STRIPE_SECRET_KEY:
            raise PaymentProviderError(PROVIDER, "STRIPE_SECRET_KEY is not configured")
        return self.settings.STRIPE_SECRET_KEY

    # PUBLIC_INTERFACE
    @retry(
        retry=retry_if_exception_type(ProviderUnavailableError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
        reraise=True,
    )
    async def create_gcash_checkout(
        self,
        *,
        amount_minor: int,
        currency: str,
        name: str,
        success_url: str,
        cancel_url: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> HostedCheckout:
        """
        Create a Checkout Session paid with GCash.

        Parameters:
            amount_minor: amount in the currency's minor unit (centavos for PHP)
            currency: ISO currency code
            name: line item label shown on the hosted page
        Returns:
            HostedCheckout with the session id as reference.
        Raises:
            ProviderUnavailableError: transient failure after retries.
            PaymentProviderError: Stripe rejected the request.
        """
        api_key = self._require_api_key()

        def _create() -> stripe.checkout.Session:
            return stripe.checkout.Session.create(
                api_key=api_key,
                mode="payment",
                payment_method_types=["gcash"],
                line_items=[
                    {
                        "price_data": {
                            "currency": currency.lower(),
                            "product_data": {"name": name},
                            "unit_amount": amount_minor,
                        },
                        "quantity": 1,
                    }
                ],
                success_url=success_url,
                cancel_url=cancel_url,
                metadata={k: str(v) for k, v in (metadata or {}).items()},
            )

        try:
            session = await asyncio.to_thread(_create)
        except _TRANSIENT_ERRORS as exc:
            logger.warning("Stripe transient error creating checkout session: %s", exc)
            raise ProviderUnavailableError(PROVIDER, str(exc)) from exc
        except stripe.StripeError as exc:
            logger.error("Stripe rejected checkout session (%s): %s", getattr(exc, "code", None), exc)
            raise PaymentProviderError(PROVIDER, str(exc)) from exc

        logger.info("Stripe checkout session %s created for %s", session.id, name)
        return HostedCheckout(reference=session.id, checkout_url=session.url)

    # PUBLIC_INTERFACE
    def construct_event(self, payload: bytes, signature: Optional[str]) -> stripe.Event:
        """
        Verify a webhook payload against the Stripe-Signature header.

        Raises:
            ValueError: payload is not valid JSON.
            stripe.SignatureVerificationError: signature missing or invalid.
            PaymentProviderError: no webhook secret configured.
        """
        secret = self.settings.STRIPE_WEBHOOK_SECRET
        if not secret:
            raise PaymentProviderError(PROVIDER, "STRIPE_WEBHOOK_SECRET is not configured")
        return stripe.Webhook.construct_event(payload, signature or "", secret)
