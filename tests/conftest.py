"""
Pytest configuration and fixtures.

Every test gets a fresh in-memory SQLite database; the app's session
dependency is overridden to use it and payment gateways are replaced by fakes.
"""
import json
import os
from decimal import Decimal
from typing import Any, AsyncGenerator, Dict, List, Optional

os.environ.setdefault("RUN_MIGRATIONS_ON_STARTUP", "false")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")

import pytest
import pytest_asyncio
import stripe
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from furniture_api.api.main import app
from furniture_api.core.deps import get_maya_gateway, get_stripe_gateway
from furniture_api.core.security import create_access_token, get_password_hash
from furniture_api.db.base import Base
from furniture_api.db.models.catalog import Product, ProductMaterial
from furniture_api.db.models.inventory import InventoryItem
from furniture_api.db.models.sales import (
    ORDER_PENDING,
    PAYMENT_GCASH,
    PAYMENT_STATUS_UNPAID,
    Order,
)
from furniture_api.db.models.users import ROLE_CUSTOMER, ROLE_EMPLOYEE, User
from furniture_api.db.session import get_async_session
from furniture_api.integrations import HostedCheckout

PASSWORD = "secret123"


class FakeStripeGateway:
    """Records checkout requests; accepts webhooks signed with 'valid'."""

    def __init__(self) -> None:
        self.calls: List[Dict[str, Any]] = []
        self.error: Optional[Exception] = None

    async def create_gcash_checkout(self, **kwargs: Any) -> HostedCheckout:
        if self.error is not None:
            raise self.error
        self.calls.append(kwargs)
        return HostedCheckout(reference="cs_test_123", checkout_url="https://checkout.stripe.test/cs_test_123")

    def construct_event(self, payload: bytes, signature: Optional[str]) -> Dict[str, Any]:
        if signature != "valid":
            raise stripe.SignatureVerificationError("No signatures found", signature)
        return json.loads(payload)


class FakeMayaGateway:
    """Records checkout payloads and echoes the request reference."""

    def __init__(self) -> None:
        self.payloads: List[Dict[str, Any]] = []

    async def create_checkout(self, payload: Dict[str, Any]) -> HostedCheckout:
        self.payloads.append(payload)
        return HostedCheckout(
            reference=payload["requestReferenceNumber"],
            checkout_url="https://pay.maya.test/chk-1",
        )


@pytest_asyncio.fixture
async def session_maker() -> AsyncGenerator[async_sessionmaker[AsyncSession], Any]:
    """Session factory bound to a fresh in-memory database."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)

    await engine.dispose()


@pytest.fixture
def stripe_gateway() -> FakeStripeGateway:
    return FakeStripeGateway()


@pytest.fixture
def maya_gateway() -> FakeMayaGateway:
    return FakeMayaGateway()


@pytest_asyncio.fixture
async def client(
    session_maker: async_sessionmaker[AsyncSession],
    stripe_gateway: FakeStripeGateway,
    maya_gateway: FakeMayaGateway,
) -> AsyncGenerator[AsyncClient, Any]:
    """HTTP client talking to the app in-process."""

    async def _session_override() -> AsyncGenerator[AsyncSession, None]:
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_async_session] = _session_override
    app.dependency_overrides[get_stripe_gateway] = lambda: stripe_gateway
    app.dependency_overrides[get_maya_gateway] = lambda: maya_gateway

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def create_user(
    session_maker: async_sessionmaker[AsyncSession],
    *,
    email: str,
    role: str = ROLE_CUSTOMER,
    name: str = "Juan Dela Cruz",
    is_active: bool = True,
) -> User:
    async with session_maker() as session:
        user = User(
            name=name,
            email=email,
            hashed_password=get_password_hash(PASSWORD),
            role=role,
            is_active=is_active,
        )
        session.add(user)
        await session.commit()
        return user


def auth_headers(user: User) -> Dict[str, str]:
    token = create_access_token(subject=str(user.id), role=user.role)
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def customer(session_maker) -> User:
    return await create_user(session_maker, email="juan@furnishop.ph")


@pytest_asyncio.fixture
async def other_customer(session_maker) -> User:
    return await create_user(session_maker, email="maria@furnishop.ph", name="Maria Santos")


@pytest_asyncio.fixture
async def employee(session_maker) -> User:
    return await create_user(session_maker, email="staff@furnishop.ph", role=ROLE_EMPLOYEE, name="Workshop Staff")


@pytest.fixture
def customer_headers(customer: User) -> Dict[str, str]:
    return auth_headers(customer)


@pytest.fixture
def employee_headers(employee: User) -> Dict[str, str]:
    return auth_headers(employee)


@pytest_asyncio.fixture
async def catalog(session_maker) -> Dict[str, int]:
    """
    Two raw materials and three products.

    - bookshelf: 3499.00, stock 10, BOM 6 pine boards + 0.5 box of screws
    - table: 4999.00, stock 5, BOM 4 pine boards
    - display case: 2299.00, stock 1, no BOM
    Pine boards: 20 on hand (reorder point 25). Screws: 5 boxes (reorder point 1).
    """
    async with session_maker() as session:
        pine = InventoryItem(
            sku="PW-1x4x8",
            name="Pinewood 1x4x8ft",
            unit="piece",
            quantity_on_hand=Decimal("20"),
            reorder_point=Decimal("25"),
        )
        screws = InventoryItem(
            sku="BS-1.5",
            name="Black Screw 1 1/2",
            unit="box",
            quantity_on_hand=Decimal("5"),
            reorder_point=Decimal("1"),
        )
        session.add_all([pine, screws])
        await session.flush()

        bookshelf = Product(name="Pinewood Bookshelf", category="Shelves", price=Decimal("3499.00"), stock=10)
        bookshelf.materials = [
            ProductMaterial(inventory_item_id=pine.id, qty_per_unit=Decimal("6")),
            ProductMaterial(inventory_item_id=screws.id, qty_per_unit=Decimal("0.5")),
        ]
        table = Product(name="Plywood Study Table", category="Tables", price=Decimal("4999.00"), stock=5)
        table.materials = [ProductMaterial(inventory_item_id=pine.id, qty_per_unit=Decimal("4"))]
        case = Product(
            name="Acrylic Display Case",
            category="Display",
            description="Collectible display case",
            price=Decimal("2299.00"),
            stock=1,
        )
        session.add_all([bookshelf, table, case])
        await session.commit()

        return {
            "pine": pine.id,
            "screws": screws.id,
            "bookshelf": bookshelf.id,
            "table": table.id,
            "case": case.id,
        }


@pytest.fixture
def place_order(session_maker):
    """Factory inserting an order directly (payment flows do not need a real checkout)."""

    async def _place(user: User, **values: Any) -> int:
        data: Dict[str, Any] = {
            "user_id": user.id,
            "total_price": Decimal("3499.00"),
            "status": ORDER_PENDING,
            "payment_method": PAYMENT_GCASH,
            "payment_status": PAYMENT_STATUS_UNPAID,
        }
        data.update(values)
        async with session_maker() as session:
            order = Order(**data)
            session.add(order)
            await session.commit()
            return order.id

    return _place
