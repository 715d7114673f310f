from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class ProductRead(BaseModel):
    """Product read model."""
    id: int = Field(..., description="Product ID")
    name: str = Field(..., description="Product name")
    description: Optional[str] = Field(None)
    category: Optional[str] = Field(None)
    price: float = Field(..., description="Unit price")
    stock: int = Field(..., description="Finished units in stock")
    image_url: Optional[str] = Field(None)
    created_at: datetime = Field(..., description="Created timestamp")
    updated_at: datetime = Field(..., description="Updated timestamp")

    class Config:
        from_attributes = True


class ProductCreate(BaseModel):
    """Create product payload."""
    name: str = Field(..., min_length=1, description="Name")
    description: Optional[str] = Field(None)
    category: Optional[str] = Field(None)
    price: float = Field(..., ge=0, description="Unit price")
    stock: int = Field(0, ge=0, description="Initial stock")
    image_url: Optional[str] = Field(None)


class ProductUpdate(BaseModel):
    """Partial product update; omitted fields are left unchanged."""
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = Field(None)
    category: Optional[str] = Field(None)
    price: Optional[float] = Field(None, ge=0)
    stock: Optional[int] = Field(None, ge=0)
    image_url: Optional[str] = Field(None)


class ProductMaterialRead(BaseModel):
    """BOM line read model."""
    id: int = Field(..., description="BOM line ID")
    product_id: int = Field(..., description="Product ID")
    inventory_item_id: int = Field(..., description="Raw material inventory item ID")
    sku: Optional[str] = Field(None, description="Raw material SKU")
    material_name: Optional[str] = Field(None, description="Raw material name")
    qty_per_unit: float = Field(..., description="Quantity consumed per finished unit")

    @classmethod
    def from_line(cls, line) -> "ProductMaterialRead":
        item = line.inventory_item
        return cls(
            id=line.id,
            product_id=line.product_id,
            inventory_item_id=line.inventory_item_id,
            sku=item.sku if item is not None else None,
            material_name=item.name if item is not None else None,
            qty_per_unit=line.qty_per_unit,
        )


class ProductMaterialIn(BaseModel):
    """One BOM line in a replace-materials request."""
    inventory_item_id: int = Field(..., description="Raw material inventory item ID")
    qty_per_unit: float = Field(..., gt=0, description="Quantity consumed per finished unit")


class ProductMaterialsUpdate(BaseModel):
    """Full replacement of a product's bill of materials."""
    materials: List[ProductMaterialIn] = Field(default_factory=list)
