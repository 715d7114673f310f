"""
Payment provider gateways (Stripe for GCash, Maya hosted checkout).
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class HostedCheckout:
    """A provider-hosted checkout page the customer is redirected to."""

    reference: str
    checkout_url: Optional[str]
