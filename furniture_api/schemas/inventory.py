from __future__ import annotations

import datetime as dt
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class InventoryItemRead(BaseModel):
    """Read model for a stocked inventory item."""
    id: int = Field(..., description="Inventory item ID")
    sku: str = Field(..., description="Stock keeping unit")
    name: str = Field(..., description="Item name")
    category: str = Field(..., description="raw, finished, packing, ...")
    unit: Optional[str] = Field(None, description="Unit of measure")
    location: Optional[str] = Field(None)
    unit_cost: Optional[float] = Field(None)
    supplier: Optional[str] = Field(None)
    description: Optional[str] = Field(None)
    quantity_on_hand: float = Field(..., description="Quantity on hand")
    safety_stock: float = Field(0)
    reorder_point: float = Field(0)
    max_level: float = Field(0)
    lead_time_days: int = Field(0)
    created_at: datetime = Field(..., description="Created timestamp")
    updated_at: datetime = Field(..., description="Updated timestamp")

    class Config:
        from_attributes = True


class InventoryItemCreate(BaseModel):
    """Create inventory item payload."""
    sku: str = Field(..., min_length=1, description="SKU (unique)")
    name: str = Field(..., min_length=1)
    category: str = Field("raw")
    unit: Optional[str] = Field(None)
    location: Optional[str] = Field(None)
    unit_cost: Optional[float] = Field(None, ge=0)
    supplier: Optional[str] = Field(None)
    description: Optional[str] = Field(None)
    quantity_on_hand: float = Field(0, ge=0)
    safety_stock: float = Field(0, ge=0)
    reorder_point: float = Field(0, ge=0)
    max_level: float = Field(0, ge=0)
    lead_time_days: int = Field(0, ge=0)


class StockAdjustment(BaseModel):
    """Signed on-hand adjustment (receipts positive, write-offs negative)."""
    delta: float = Field(..., description="Quantity to add (negative to remove)")
    reason: Optional[str] = Field(None, max_length=255)


class InventoryUsageRead(BaseModel):
    """Read model for a material usage log row."""
    id: int = Field(..., description="Usage row ID")
    inventory_item_id: int = Field(..., description="Inventory item ID")
    order_id: Optional[int] = Field(None, description="Order that consumed the material")
    date: dt.date = Field(..., description="Usage date")
    qty_used: float = Field(..., description="Quantity consumed")
    created_at: datetime = Field(..., description="Created timestamp")

    class Config:
        from_attributes = True
