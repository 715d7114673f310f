"""
Maya (PayMaya) hosted checkout gateway over HTTP.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from furniture_api.core.exceptions import PaymentProviderError, ProviderUnavailableError
from furniture_api.core.settings import AppSettings, get_app_settings
from furniture_api.integrations import HostedCheckout

logger = logging.getLogger(__name__)

PROVIDER = "Maya"
CHECKOUT_PATH = "/checkout/v1/checkouts"


class MayaGateway:
    """
    Creates Maya Checkout sessions.

    Requests authenticate with HTTP basic auth using the public key as the
    username and an empty password. A custom httpx transport may be injected
    (tests use httpx.MockTransport).
    """

    def __init__(
        self,
        settings: Optional[AppSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.settings = settings or get_app_settings()
        self._transport = transport

    # PUBLIC_INTERFACE
    @retry(
        retry=retry_if_exception_type(ProviderUnavailableError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
        reraise=True,
    )
    async def create_checkout(self, payload: Dict[str, Any]) -> HostedCheckout:
        """
        POST a checkout to Maya and return its hosted page.

        The reference is the payload's requestReferenceNumber; the URL is taken
        from ``redirectUrl`` or, failing that, ``checkoutUrl`` in the response.
        """
        public_key = self.settings.MAYA_PUBLIC_KEY
        if not public_key:
            raise PaymentProviderError(PROVIDER, "MAYA_PUBLIC_KEY is not configured")

        async with httpx.AsyncClient(
            base_url=self.settings.MAYA_BASE_URL,
            auth=(public_key, ""),
            timeout=self.settings.PAYMENT_TIMEOUT_SECONDS,
            transport=self._transport,
        ) as client:
            try:
                response = await client.post(CHECKOUT_PATH, json=payload)
                response.raise_for_status()
            except httpx.TransportError as exc:
                logger.warning("Maya transport error: %s", exc)
                raise ProviderUnavailableError(PROVIDER, str(exc)) from exc
            except httpx.HTTPStatusError as exc:
                code = exc.response.status_code
                detail = f"HTTP {code}: {exc.response.text[:200]}"
                if code >= 500 or code == 429:
                    logger.warning("Maya unavailable (%s)", code)
                    raise ProviderUnavailableError(PROVIDER, detail) from exc
                logger.error("Maya rejected checkout: %s", detail)
                raise PaymentProviderError(PROVIDER, detail) from exc

        try:
            data = response.json()
        except ValueError as exc:
            raise PaymentProviderError(PROVIDER, "response is not JSON") from exc

        reference = payload.get("requestReferenceNumber") or data.get("checkoutId") or ""
        checkout_url = data.get("redirectUrl") or data.get("checkoutUrl")
        logger.info("Maya checkout %s created (%s)", data.get("checkoutId"), reference)
        return HostedCheckout(reference=reference, checkout_url=checkout_url)
