from __future__ import annotations

import datetime as dt
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from furniture_api.schemas.sales import OrderRead

Stage = Literal["Design", "Preparation", "Cutting", "Assembly", "Finishing", "Quality Control"]
Status = Literal["Pending", "In Progress", "Completed", "Hold"]


class ProductionRead(BaseModel):
    """Production job read model."""
    id: int = Field(..., description="Production id")
    order_id: Optional[int] = Field(None)
    user_id: Optional[int] = Field(None)
    product_id: Optional[int] = Field(None)
    product_name: str = Field(...)
    date: dt.date = Field(...)
    stage: str = Field(...)
    status: str = Field(...)
    quantity: int = Field(...)
    resources_used: Optional[Any] = Field(None)
    notes: Optional[str] = Field(None)
    created_at: datetime = Field(..., description="Created at")
    updated_at: datetime = Field(..., description="Updated at")

    class Config:
        from_attributes = True


class ProductionCreate(BaseModel):
    """Manual production job payload."""
    product_name: str = Field(..., min_length=1)
    product_id: Optional[int] = Field(None)
    order_id: Optional[int] = Field(None)
    date: Optional[dt.date] = Field(None, description="Defaults to today")
    stage: Stage = Field("Design")
    status: Status = Field("Pending")
    quantity: int = Field(0, ge=0)
    resources_used: Optional[Any] = Field(None)
    notes: Optional[str] = Field(None)


class ProductionUpdate(BaseModel):
    """Move a job between stages or change its status."""
    stage: Optional[Stage] = Field(None)
    status: Optional[Status] = Field(None)
    quantity: Optional[int] = Field(None, ge=0)
    notes: Optional[str] = Field(None)


class StageSummary(BaseModel):
    """Job counts per status for one stage."""
    stage: str
    in_progress: int
    completed: int
    pending: int


class TrackingOverall(BaseModel):
    """Overall progress and estimated completion date of an order."""
    total: int
    completed: int
    pending: int
    in_progress: int
    progress_pct: int
    eta: dt.date


class TrackingResponse(BaseModel):
    """Order tracking view for the customer."""
    order: OrderRead
    stage_summary: List[StageSummary]
    productions: List[ProductionRead]
    overall: TrackingOverall


class ProductionAnalytics(BaseModel):
    """Aggregated job counts for the workshop dashboard."""
    total: int = Field(..., description="Number of production jobs")
    total_quantity: int = Field(..., description="Sum of job quantities")
    by_stage: Dict[str, int] = Field(default_factory=dict)
    by_status: Dict[str, int] = Field(default_factory=dict)
