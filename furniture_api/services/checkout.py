from __future__ import annotations

import datetime as dt
import logging
from decimal import Decimal
from typing import Any, Dict, List, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from furniture_api.core.exceptions import (
    EmptyCartError,
    InsufficientMaterialsError,
    StockDeductionError,
    StockUnavailableError,
)
from furniture_api.db.base import utcnow
from furniture_api.db.models.production import STATUS_PENDING, Production
from furniture_api.db.models.sales import (
    ORDER_PENDING,
    PAYMENT_COD,
    PAYMENT_STATUS_COD_PENDING,
    PAYMENT_STATUS_UNPAID,
    Cart,
    Order,
)
from furniture_api.db.models.users import User
from furniture_api.repositories.cart import CartRepository
from furniture_api.repositories.catalog import ProductRepository
from furniture_api.repositories.inventory import InventoryItemRepository, InventoryUsageRepository
from furniture_api.repositories.orders import OrderRepository
from furniture_api.repositories.production import ProductionRepository
from furniture_api.schemas.sales import CheckoutRequest
from furniture_api.services.base import BaseService

logger = logging.getLogger(__name__)

# Stage a freshly ordered item starts in.
INITIAL_STAGE = "Preparation"


def find_material_shortages(lines: Sequence[Cart]) -> List[Dict[str, Any]]:
    """
    Compare each cart line's bill of materials with inventory on hand.

    Every line is checked on its own: a material shared by two lines is
    reported only if one line alone exceeds the stock. Lines whose combined
    demand is too high are caught by the locked re-check during the write.
    BOM rows pointing at a missing inventory item are skipped.
    """
    shortages: List[Dict[str, Any]] = []
    for line in lines:
        product = line.product
        if product is None:
            continue
        for material in product.materials:
            inv = material.inventory_item
            if inv is None:
                continue
            required = Decimal(material.qty_per_unit) * line.quantity
            on_hand = Decimal(inv.quantity_on_hand)
            if on_hand < required:
                shortages.append(
                    {
                        "product_id": product.id,
                        "product_name": product.name,
                        "sku": inv.sku,
                        "material_name": inv.name,
                        "on_hand": float(on_hand),
                        "required": float(required),
                        "deficit": float(max(Decimal(0), required - on_hand)),
                    }
                )
    return shortages


class CheckoutService(BaseService):
    """
    Turns a user's cart into an order.

    Validation and the BOM pre-check run before anything is written. The write
    phase (order, items, stock and material deduction, usage log, production
    jobs, cart clearing) runs in a single transaction that is rolled back on
    any error.
    """

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.carts = CartRepository(session)
        self.products = ProductRepository(session)
        self.inventory = InventoryItemRepository(session)
        self.usage = InventoryUsageRepository(session)
        self.orders = OrderRepository(session)
        self.productions = ProductionRepository(session)

    # PUBLIC_INTERFACE
    async def checkout(self, user: User, request: CheckoutRequest) -> Order:
        """
        Place an order for everything in the user's cart.

        Raises:
            EmptyCartError: the cart has no lines.
            StockUnavailableError: a product cannot cover the requested quantity.
            InsufficientMaterialsError: raw materials are short (with the shortage list).
            StockDeductionError: stock ran out while the order was being written.
        Returns:
            The committed Order with its items loaded.
        """
        lines = await self.carts.list_for_user(user.id)
        if not lines:
            raise EmptyCartError()

        total = Decimal("0")
        for line in lines:
            product = line.product
            if product is None or product.stock < line.quantity:
                name = product.name if product is not None else f"product #{line.product_id}"
                raise StockUnavailableError(name, line.product_id)
            total += Decimal(product.price) * line.quantity

        shortages = find_material_shortages(lines)
        if shortages:
            logger.info("Checkout blocked for user %s: %d material shortage(s)", user.id, len(shortages))
            raise InsufficientMaterialsError(shortages)

        payment_method = request.payment_method or PAYMENT_COD
        payment_status = PAYMENT_STATUS_COD_PENDING if payment_method == PAYMENT_COD else PAYMENT_STATUS_UNPAID

        # A rollback expires every loaded instance; log with plain values only.
        user_id = user.id
        line_count = len(lines)
        try:
            async with self.atomic():
                order = await self._place_order(user, lines, total, payment_method, payment_status, request)
        except StockDeductionError as exc:
            logger.warning("Checkout rolled back for user %s: %s", user_id, exc.message)
            raise
        except Exception:
            logger.exception("Checkout failed for user %s; transaction rolled back", user_id)
            raise

        logger.info(
            "Order %s placed by user %s: %d line(s), total=%s, payment=%s",
            order.id,
            user_id,
            line_count,
            total,
            payment_method,
        )
        placed = await self.orders.get_order(order.id, refresh=True)
        assert placed is not None
        return placed

    async def _place_order(
        self,
        user: User,
        lines: Sequence[Cart],
        total: Decimal,
        payment_method: str,
        payment_status: str,
        request: CheckoutRequest,
    ) -> Order:
        today = dt.date.today()
        order = await self.orders.stage_order(
            Order(
                user_id=user.id,
                total_price=total,
                status=ORDER_PENDING,
                checkout_date=utcnow(),
                payment_method=payment_method,
                payment_status=payment_status,
                transaction_ref=request.transaction_ref,
                shipping_address=request.shipping_address,
                contact_phone=request.contact_phone,
            )
        )

        # Capture quantities before the locked reload refreshes the cart's products.
        wanted = [(line.product_id, line.quantity) for line in lines]
        products = await self.products.get_products_for_update(pid for pid, _ in wanted)
        material_ids = {m.inventory_item_id for p in products.values() for m in p.materials}
        items = await self.inventory.get_items_for_update(material_ids)

        for product_id, quantity in wanted:
            product = products.get(product_id)
            if product is None or product.stock < quantity:
                name = product.name if product is not None else f"product #{product_id}"
                raise StockDeductionError(f"Insufficient stock for {name}", {"product_id": product_id})

            await self.orders.stage_item(
                order_id=order.id, product_id=product.id, quantity=quantity, price=product.price
            )
            product.stock -= quantity

            resources: List[Dict[str, Any]] = []
            for material in product.materials:
                required = Decimal(material.qty_per_unit) * quantity
                resources.append({"inventory_item_id": material.inventory_item_id, "qty": float(required)})
                inv = items.get(material.inventory_item_id)
                if inv is None:
                    continue
                if Decimal(inv.quantity_on_hand) < required:
                    raise StockDeductionError(
                        f"Insufficient stock for SKU {inv.sku}", {"sku": inv.sku, "product_id": product.id}
                    )
                inv.quantity_on_hand = Decimal(inv.quantity_on_hand) - required
                await self.usage.log_usage(
                    inventory_item_id=inv.id, qty_used=required, order_id=order.id, on=today
                )

            await self.productions.stage_production(
                Production(
                    order_id=order.id,
                    user_id=user.id,
                    product_id=product.id,
                    product_name=product.name,
                    date=today,
                    stage=INITIAL_STAGE,
                    status=STATUS_PENDING,
                    quantity=quantity,
                    resources_used=resources,
                    notes=f"Generated from Order #{order.id}",
                )
            )

        await self.carts.clear_for_user(user.id)
        return order
