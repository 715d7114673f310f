"""
Tests for order listing, completion, payment status polling and tracking.
"""
import datetime as dt
from types import SimpleNamespace

import pytest
from httpx import AsyncClient

from furniture_api.services.tracking import round_half_up, summarize_tracking

from .conftest import auth_headers

TODAY = dt.date(2024, 3, 1)


def job(stage: str, status: str) -> SimpleNamespace:
    return SimpleNamespace(stage=stage, status=status)


async def checkout(client: AsyncClient, headers, product_id: int, quantity: int = 1) -> dict:
    await client.post("/api/v1/cart", json={"product_id": product_id, "quantity": quantity}, headers=headers)
    response = await client.post("/api/v1/checkout", json={}, headers=headers)
    assert response.status_code == 200
    return response.json()["order"]


class TestOrders:
    """Customer and staff order views."""

    @pytest.mark.asyncio
    async def test_my_orders_only_lists_own(
        self, client: AsyncClient, catalog, customer_headers, other_customer
    ) -> None:
        mine = await checkout(client, customer_headers, catalog["bookshelf"])
        await checkout(client, auth_headers(other_customer), catalog["table"])

        response = await client.get("/api/v1/my-orders", headers=customer_headers)

        assert response.status_code == 200
        assert [o["id"] for o in response.json()] == [mine["id"]]
        assert response.json()[0]["items"][0]["product"]["name"] == "Pinewood Bookshelf"

    @pytest.mark.asyncio
    async def test_employee_lists_all_with_user(
        self, client: AsyncClient, catalog, customer, customer_headers, employee_headers
    ) -> None:
        first = await checkout(client, customer_headers, catalog["bookshelf"])
        second = await checkout(client, customer_headers, catalog["table"])

        response = await client.get("/api/v1/orders", headers=employee_headers)

        assert response.status_code == 200
        orders = response.json()
        assert [o["id"] for o in orders] == [second["id"], first["id"]]
        assert orders[0]["user"]["email"] == customer.email

    @pytest.mark.asyncio
    async def test_employee_list_is_unbounded_unless_paged(
        self, client: AsyncClient, customer, employee_headers, place_order
    ) -> None:
        ids = [await place_order(customer) for _ in range(105)]

        everything = await client.get("/api/v1/orders", headers=employee_headers)
        page = await client.get(
            "/api/v1/orders", params={"limit": 2, "offset": 1}, headers=employee_headers
        )

        assert len(everything.json()) == 105
        assert [o["id"] for o in page.json()] == [ids[-2], ids[-3]]

    @pytest.mark.asyncio
    async def test_employee_gets_single_order(
        self, client: AsyncClient, catalog, customer_headers, employee_headers
    ) -> None:
        order = await checkout(client, customer_headers, catalog["case"])

        found = await client.get(f"/api/v1/orders/{order['id']}", headers=employee_headers)
        missing = await client.get("/api/v1/orders/999", headers=employee_headers)

        assert found.status_code == 200
        assert found.json()["items"][0]["product_name"] == "Acrylic Display Case"
        assert missing.status_code == 404

    @pytest.mark.asyncio
    async def test_complete_order(
        self, client: AsyncClient, catalog, customer_headers, employee_headers
    ) -> None:
        order = await checkout(client, customer_headers, catalog["case"])

        forbidden = await client.put(f"/api/v1/orders/{order['id']}/complete", headers=customer_headers)
        response = await client.put(f"/api/v1/orders/{order['id']}/complete", headers=employee_headers)

        assert forbidden.status_code == 403
        assert response.status_code == 200
        assert response.json()["status"] == "completed"

    @pytest.mark.asyncio
    async def test_payment_status(
        self, client: AsyncClient, customer, customer_headers, other_customer, place_order
    ) -> None:
        order_id = await place_order(customer, transaction_ref="cs_test_1")

        response = await client.get(f"/api/v1/orders/{order_id}/payment-status", headers=customer_headers)
        foreign = await client.get(
            f"/api/v1/orders/{order_id}/payment-status", headers=auth_headers(other_customer)
        )

        assert response.json() == {
            "order_id": order_id,
            "payment_method": "gcash",
            "payment_status": "unpaid",
            "transaction_ref": "cs_test_1",
        }
        assert foreign.status_code == 404


class TestSummarizeTracking:
    """Progress and ETA arithmetic."""

    def test_no_jobs(self) -> None:
        summary = summarize_tracking([], today=TODAY)

        assert summary["overall"] == {
            "total": 0,
            "completed": 0,
            "pending": 0,
            "in_progress": 0,
            "progress_pct": 0,
            "eta": TODAY + dt.timedelta(days=12),
        }
        assert [s["stage"] for s in summary["stage_summary"]] == [
            "Design",
            "Preparation",
            "Cutting",
            "Assembly",
            "Finishing",
            "Quality Control",
        ]

    def test_in_progress_counts_half(self) -> None:
        summary = summarize_tracking(
            [job("Assembly", "Completed"), job("Cutting", "In Progress")],
            today=TODAY,
        )

        assert summary["overall"]["progress_pct"] == 75
        assert summary["overall"]["eta"] == TODAY + dt.timedelta(days=3)

    def test_rounds_half_up(self) -> None:
        summary = summarize_tracking(
            [job("Cutting", "In Progress")] + [job("Preparation", "Pending")] * 3,
            today=TODAY,
        )

        # ratio 0.125: 12.5% and 10.5 days remaining
        assert summary["overall"]["progress_pct"] == 13
        assert summary["overall"]["eta"] == TODAY + dt.timedelta(days=11)

    def test_exact_half_percentage_rounds_up(self) -> None:
        summary = summarize_tracking(
            [job("Assembly", "Completed")] * 3 + [job("Cutting", "In Progress")] * 17,
            today=TODAY,
        )

        # ratio 23/40: 57.5%
        assert summary["overall"]["progress_pct"] == 58

    def test_exact_half_day_rounds_up(self) -> None:
        summary = summarize_tracking(
            [job("Quality Control", "Completed")] * 11 + [job("Finishing", "In Progress")],
            today=TODAY,
        )

        # ratio 23/24: 0.5 days remaining
        assert summary["overall"]["progress_pct"] == 96
        assert summary["overall"]["eta"] == TODAY + dt.timedelta(days=1)

    def test_all_completed(self) -> None:
        summary = summarize_tracking([job("Quality Control", "Completed")] * 2, today=TODAY)

        assert summary["overall"]["progress_pct"] == 100
        assert summary["overall"]["eta"] == TODAY

    def test_hold_counts_toward_total_only(self) -> None:
        summary = summarize_tracking([job("Finishing", "Hold"), job("Finishing", "Completed")], today=TODAY)

        overall = summary["overall"]
        assert (overall["total"], overall["completed"], overall["pending"], overall["in_progress"]) == (2, 1, 0, 0)
        assert overall["progress_pct"] == 50
        finishing = next(s for s in summary["stage_summary"] if s["stage"] == "Finishing")
        assert finishing == {"stage": "Finishing", "in_progress": 0, "completed": 1, "pending": 0}

    def test_round_half_up(self) -> None:
        assert round_half_up(2.5) == 3
        assert round_half_up(0.5) == 1
        assert round_half_up(2.4) == 2


class TestTrackingEndpoint:
    """Customers follow their orders through the workshop."""

    @pytest.mark.asyncio
    async def test_new_order_is_pending(self, client: AsyncClient, catalog, customer_headers) -> None:
        order = await checkout(client, customer_headers, catalog["bookshelf"], 2)

        response = await client.get(f"/api/v1/orders/{order['id']}/tracking", headers=customer_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["order"]["id"] == order["id"]
        assert len(body["productions"]) == 1
        preparation = next(s for s in body["stage_summary"] if s["stage"] == "Preparation")
        assert preparation["pending"] == 1
        overall = body["overall"]
        assert overall["total"] == 1
        assert overall["progress_pct"] == 0
        assert dt.date.fromisoformat(overall["eta"]) == dt.date.today() + dt.timedelta(days=12)

    @pytest.mark.asyncio
    async def test_progress_follows_production_updates(
        self, client: AsyncClient, catalog, customer_headers, employee_headers
    ) -> None:
        order = await checkout(client, customer_headers, catalog["bookshelf"])
        tracking = await client.get(f"/api/v1/orders/{order['id']}/tracking", headers=customer_headers)
        job_id = tracking.json()["productions"][0]["id"]

        updated = await client.patch(
            f"/api/v1/productions/{job_id}",
            json={"stage": "Quality Control", "status": "Completed"},
            headers=employee_headers,
        )
        assert updated.status_code == 200

        response = await client.get(f"/api/v1/orders/{order['id']}/tracking", headers=customer_headers)

        overall = response.json()["overall"]
        assert overall["progress_pct"] == 100
        assert dt.date.fromisoformat(overall["eta"]) == dt.date.today()

    @pytest.mark.asyncio
    async def test_other_users_order_is_not_found(
        self, client: AsyncClient, catalog, customer_headers, other_customer
    ) -> None:
        order = await checkout(client, customer_headers, catalog["case"])

        response = await client.get(
            f"/api/v1/orders/{order['id']}/tracking", headers=auth_headers(other_customer)
        )

        assert response.status_code == 404
        assert response.json()["error"]["type"] == "not_found"
