from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class TokenPair(BaseModel):
    """Returned by register, login and refresh."""
    token_type: str = Field("bearer")
    access_token: str = Field(..., description="Short-lived JWT sent as the Bearer credential")
    refresh_token: str = Field(..., description="Long-lived JWT accepted only by /auth/refresh")


class RefreshRequest(BaseModel):
    refresh_token: str


class RegisterRequest(BaseModel):
    """New customer account. Staff accounts are never created through this form."""
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=6, description="At least six characters")


class UserRead(BaseModel):
    """Public view of an account (no password hash)."""
    id: int
    name: str
    email: EmailStr
    role: str = Field(..., description="customer or employee")
    is_active: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
