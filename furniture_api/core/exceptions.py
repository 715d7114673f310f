"""
Domain exceptions raised by services.

Each exception carries the HTTP status and machine-readable error type used by
the global exception handler in furniture_api.api.main to build the standard
ErrorResponse envelope.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional


class ShopError(Exception):
    """Base class for business rule violations."""

    status_code: int = 400
    error_type: str = "shop_error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class NotFoundError(ShopError):
    status_code = 404
    error_type = "not_found"

    def __init__(self, entity: str, entity_id: Any = None) -> None:
        super().__init__(f"{entity} not found", {"id": entity_id} if entity_id is not None else None)


class EmptyCartError(ShopError):
    error_type = "empty_cart"

    def __init__(self) -> None:
        super().__init__("Cart is empty")


class StockUnavailableError(ShopError):
    error_type = "stock_unavailable"

    def __init__(self, product_name: str, product_id: Optional[int] = None) -> None:
        super().__init__(f"Stock unavailable for {product_name}", {"product_id": product_id})


class InsufficientMaterialsError(ShopError):
    status_code = 422
    error_type = "insufficient_materials"

    def __init__(self, shortages: List[Dict[str, Any]]) -> None:
        super().__init__("Insufficient raw materials for this order", {"shortages": shortages})
        self.shortages = shortages


class StockDeductionError(ShopError):
    """Stock or material ran out between the pre-check and the locked write."""

    status_code = 409
    error_type = "deduction_failed"


class InvalidTransactionError(ShopError):
    status_code = 422
    error_type = "invalid_transaction"

    def __init__(self) -> None:
        super().__init__("Invalid transaction")


class PaymentProviderError(ShopError):
    status_code = 502
    error_type = "payment_provider_error"

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(f"{provider} request failed: {message}", {"provider": provider})
        self.provider = provider


class ProviderUnavailableError(PaymentProviderError):
    """Transient provider failure (network, rate limit, 5xx); safe to retry."""
