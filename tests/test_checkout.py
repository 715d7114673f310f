"""
Tests for checkout: stock and raw material checks, deductions, usage log,
production jobs and transaction rollback.
"""
import logging
from decimal import Decimal

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from furniture_api.db.models.catalog import Product
from furniture_api.db.models.inventory import InventoryItem, InventoryUsage
from furniture_api.db.models.production import Production
from furniture_api.db.models.sales import Cart, Order
from furniture_api.services.checkout import find_material_shortages


async def add_to_cart(client: AsyncClient, headers, product_id: int, quantity: int) -> None:
    response = await client.post("/api/v1/cart", json={"product_id": product_id, "quantity": quantity}, headers=headers)
    assert response.status_code == 201


async def count_rows(session_maker, model) -> int:
    async with session_maker() as session:
        return int(await session.scalar(select(func.count()).select_from(model)))


class TestCheckoutSuccess:
    """A cart that can be fulfilled becomes an order."""

    @pytest.mark.asyncio
    async def test_checkout_places_order(self, client: AsyncClient, catalog, customer, customer_headers) -> None:
        await add_to_cart(client, customer_headers, catalog["bookshelf"], 3)

        response = await client.post("/api/v1/checkout", json={}, headers=customer_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Checkout successful"
        order = body["order"]
        assert body["order_id"] == order["id"]
        assert order["user_id"] == customer.id
        assert order["total_price"] == pytest.approx(10497.0)
        assert order["status"] == "pending"
        assert order["payment_method"] == "cod"
        assert order["payment_status"] == "cod_pending"
        assert order["checkout_date"] is not None
        assert [(i["product_name"], i["quantity"], i["price"]) for i in order["items"]] == [
            ("Pinewood Bookshelf", 3, pytest.approx(3499.0))
        ]

    @pytest.mark.asyncio
    async def test_checkout_deducts_stock_and_materials(
        self, client: AsyncClient, session_maker, catalog, customer_headers
    ) -> None:
        await add_to_cart(client, customer_headers, catalog["bookshelf"], 3)

        response = await client.post("/api/v1/checkout", json={}, headers=customer_headers)
        order_id = response.json()["order_id"]

        async with session_maker() as session:
            product = await session.get(Product, catalog["bookshelf"])
            pine = await session.get(InventoryItem, catalog["pine"])
            screws = await session.get(InventoryItem, catalog["screws"])
            usage = (
                await session.scalars(select(InventoryUsage).order_by(InventoryUsage.inventory_item_id))
            ).all()

        assert product.stock == 7
        assert pine.quantity_on_hand == Decimal("2")
        assert screws.quantity_on_hand == Decimal("3.5")
        assert [(u.inventory_item_id, u.qty_used, u.order_id) for u in usage] == [
            (catalog["pine"], Decimal("18"), order_id),
            (catalog["screws"], Decimal("1.5"), order_id),
        ]

    @pytest.mark.asyncio
    async def test_checkout_creates_production_jobs_and_clears_cart(
        self, client: AsyncClient, session_maker, catalog, customer, customer_headers
    ) -> None:
        await add_to_cart(client, customer_headers, catalog["bookshelf"], 1)
        await add_to_cart(client, customer_headers, catalog["case"], 1)

        response = await client.post("/api/v1/checkout", json={}, headers=customer_headers)
        order_id = response.json()["order_id"]

        async with session_maker() as session:
            jobs = (await session.scalars(select(Production).order_by(Production.id))).all()

        assert [(j.product_name, j.stage, j.status, j.quantity) for j in jobs] == [
            ("Pinewood Bookshelf", "Preparation", "Pending", 1),
            ("Acrylic Display Case", "Preparation", "Pending", 1),
        ]
        assert all(j.order_id == order_id and j.user_id == customer.id for j in jobs)
        assert jobs[0].notes == f"Generated from Order #{order_id}"
        assert {r["inventory_item_id"] for r in jobs[0].resources_used} == {catalog["pine"], catalog["screws"]}
        assert jobs[1].resources_used == []

        cart = await client.get("/api/v1/cart", headers=customer_headers)
        assert cart.json() == []

    @pytest.mark.asyncio
    async def test_online_payment_method_starts_unpaid(
        self, client: AsyncClient, catalog, customer_headers
    ) -> None:
        await add_to_cart(client, customer_headers, catalog["case"], 1)

        response = await client.post(
            "/api/v1/checkout",
            json={
                "payment_method": "gcash",
                "shipping_address": "12 Narra St, Quezon City",
                "contact_phone": "+63 917 000 0000",
            },
            headers=customer_headers,
        )

        order = response.json()["order"]
        assert order["payment_method"] == "gcash"
        assert order["payment_status"] == "unpaid"
        assert order["shipping_address"] == "12 Narra St, Quezon City"
        assert order["contact_phone"] == "+63 917 000 0000"


class TestCheckoutRejected:
    """Nothing is written when the cart cannot be fulfilled."""

    @pytest.mark.asyncio
    async def test_empty_cart(self, client: AsyncClient, customer_headers) -> None:
        response = await client.post("/api/v1/checkout", json={}, headers=customer_headers)

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["type"] == "empty_cart"
        assert error["message"] == "Cart is empty"

    @pytest.mark.asyncio
    async def test_product_stock_unavailable(
        self, client: AsyncClient, session_maker, catalog, customer_headers
    ) -> None:
        await add_to_cart(client, customer_headers, catalog["case"], 2)

        response = await client.post("/api/v1/checkout", json={}, headers=customer_headers)

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["type"] == "stock_unavailable"
        assert error["message"] == "Stock unavailable for Acrylic Display Case"
        assert await count_rows(session_maker, Order) == 0

    @pytest.mark.asyncio
    async def test_material_shortage_lists_deficits(
        self, client: AsyncClient, session_maker, catalog, customer_headers
    ) -> None:
        await add_to_cart(client, customer_headers, catalog["bookshelf"], 4)

        response = await client.post("/api/v1/checkout", json={}, headers=customer_headers)

        assert response.status_code == 422
        error = response.json()["error"]
        assert error["type"] == "insufficient_materials"
        assert error["details"]["shortages"] == [
            {
                "product_id": catalog["bookshelf"],
                "product_name": "Pinewood Bookshelf",
                "sku": "PW-1x4x8",
                "material_name": "Pinewood 1x4x8ft",
                "on_hand": 20.0,
                "required": 24.0,
                "deficit": 4.0,
            }
        ]
        assert await count_rows(session_maker, Order) == 0
        assert await count_rows(session_maker, Cart) == 1

    @pytest.mark.asyncio
    async def test_combined_demand_rolls_back(
        self, client: AsyncClient, session_maker, catalog, customer_headers
    ) -> None:
        # 18 + 4 pine boards wanted, 20 on hand: each line passes alone.
        await add_to_cart(client, customer_headers, catalog["bookshelf"], 3)
        await add_to_cart(client, customer_headers, catalog["table"], 1)

        response = await client.post("/api/v1/checkout", json={}, headers=customer_headers)

        assert response.status_code == 409
        assert response.json()["error"]["type"] == "deduction_failed"

        async with session_maker() as session:
            bookshelf = await session.get(Product, catalog["bookshelf"])
            pine = await session.get(InventoryItem, catalog["pine"])
        assert bookshelf.stock == 10
        assert pine.quantity_on_hand == Decimal("20")
        assert await count_rows(session_maker, Order) == 0
        assert await count_rows(session_maker, InventoryUsage) == 0
        assert await count_rows(session_maker, Production) == 0
        assert await count_rows(session_maker, Cart) == 2

    @pytest.mark.asyncio
    async def test_rollback_is_logged_with_user(
        self, client: AsyncClient, catalog, customer, customer_headers, caplog
    ) -> None:
        await add_to_cart(client, customer_headers, catalog["bookshelf"], 3)
        await add_to_cart(client, customer_headers, catalog["table"], 1)

        with caplog.at_level(logging.WARNING, logger="furniture_api.services.checkout"):
            response = await client.post("/api/v1/checkout", json={}, headers=customer_headers)

        assert response.status_code == 409
        assert response.json()["error"]["message"] == "Insufficient stock for SKU PW-1x4x8"
        assert f"Checkout rolled back for user {customer.id}" in caplog.text

    @pytest.mark.asyncio
    async def test_requires_authentication(self, client: AsyncClient) -> None:
        response = await client.post("/api/v1/checkout", json={})

        assert response.status_code == 401


class TestFindMaterialShortages:
    """The pre-check compares each line on its own."""

    @pytest.mark.asyncio
    async def test_exact_stock_is_enough(self, session_maker, catalog, customer) -> None:
        async with session_maker() as session:
            session.add(Cart(user_id=customer.id, product_id=catalog["table"], quantity=5))
            await session.commit()

        async with session_maker() as session:
            lines = (await session.scalars(select(Cart).order_by(Cart.id))).all()

            assert find_material_shortages(lines) == []

    @pytest.mark.asyncio
    async def test_lines_checked_independently(self, session_maker, catalog, customer) -> None:
        async with session_maker() as session:
            session.add_all(
                [
                    Cart(user_id=customer.id, product_id=catalog["bookshelf"], quantity=3),
                    Cart(user_id=customer.id, product_id=catalog["table"], quantity=1),
                ]
            )
            await session.commit()

        async with session_maker() as session:
            lines = (await session.scalars(select(Cart).order_by(Cart.id))).all()

            assert find_material_shortages(lines) == []
