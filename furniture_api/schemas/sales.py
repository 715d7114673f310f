from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from furniture_api.schemas.auth import UserRead
from furniture_api.schemas.catalog import ProductRead


class CartItemRead(BaseModel):
    """Cart line read model."""
    id: int = Field(..., description="Cart line ID")
    product_id: int = Field(..., description="Product ID")
    quantity: int = Field(..., description="Requested quantity")
    product: Optional[ProductRead] = Field(None, description="Product details")

    class Config:
        from_attributes = True


class CartItemAdd(BaseModel):
    """Add a product to the cart."""
    product_id: int = Field(..., description="Product ID")
    quantity: int = Field(1, ge=1, description="Quantity to add")


class CartItemUpdate(BaseModel):
    """Set the quantity of a cart line."""
    quantity: int = Field(..., ge=1, description="New quantity")


class OrderItemRead(BaseModel):
    """Order line read model."""
    id: int = Field(..., description="Order line ID")
    product_id: Optional[int] = Field(None)
    product_name: str = Field(..., description="Product name at read time")
    quantity: int = Field(...)
    price: float = Field(..., description="Unit price captured at checkout")
    product: Optional[ProductRead] = Field(None)

    class Config:
        from_attributes = True


class OrderRead(BaseModel):
    """Order read model."""
    id: int = Field(..., description="Order ID")
    user_id: int = Field(...)
    total_price: float = Field(...)
    status: str = Field(..., description="pending or completed")
    checkout_date: Optional[datetime] = Field(None)
    payment_method: str = Field(...)
    payment_status: str = Field(...)
    transaction_ref: Optional[str] = Field(None)
    shipping_address: Optional[str] = Field(None)
    contact_phone: Optional[str] = Field(None)
    items: List[OrderItemRead] = Field(default_factory=list)
    created_at: datetime = Field(...)
    updated_at: datetime = Field(...)

    class Config:
        from_attributes = True


class OrderWithUserRead(OrderRead):
    """Order read model including the ordering user (staff views)."""
    user: Optional[UserRead] = Field(None)


class CheckoutRequest(BaseModel):
    """Checkout payload; everything is optional and COD is the default."""
    payment_method: Optional[Literal["cod", "gcash", "maya"]] = Field(None)
    shipping_address: Optional[str] = Field(None, max_length=500)
    contact_phone: Optional[str] = Field(None, max_length=64)
    transaction_ref: Optional[str] = Field(None, max_length=128)


class CheckoutResponse(BaseModel):
    """Result of a successful checkout."""
    message: str = Field("Checkout successful")
    order_id: int = Field(...)
    order: OrderRead = Field(...)


class PaymentStatusRead(BaseModel):
    """Payment fields polled by the client while a provider checkout is open."""
    order_id: int
    payment_method: str
    payment_status: str
    transaction_ref: Optional[str] = None
