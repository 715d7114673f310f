from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field

from furniture_api.schemas.sales import OrderRead


class PaymentInitRequest(BaseModel):
    """Start an online payment for an order."""
    order_id: int = Field(..., description="Order to pay")
    provider: Literal["gcash", "maya"] = Field(..., description="gcash (via Stripe) or maya")


class PaymentInitResponse(BaseModel):
    """Hosted checkout URL and the reference stored on the order."""
    checkout_url: Optional[str] = Field(None)
    transaction_ref: Optional[str] = Field(None)


class PaymentVerifyRequest(BaseModel):
    """Manual reconciliation of a provider result against the stored reference."""
    order_id: int = Field(...)
    transaction_ref: str = Field(..., min_length=1)
    status: Literal["paid", "failed"] = Field(...)


class PaymentConfirmRequest(BaseModel):
    """Confirmation sent by the client on return from the provider."""
    order_id: int = Field(...)
    provider: Literal["gcash", "maya"] = Field(...)


class PaymentResult(BaseModel):
    """Message plus the updated order."""
    message: str = Field(...)
    order: OrderRead = Field(...)
