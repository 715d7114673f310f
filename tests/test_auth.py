"""
Tests for registration, login, token refresh and role checks.
"""
import pytest
from httpx import AsyncClient

from furniture_api.core.security import create_refresh_token, decode_token

from .conftest import PASSWORD, auth_headers, create_user


class TestRegistration:
    """Customer self-registration."""

    @pytest.mark.asyncio
    async def test_register_creates_customer(self, client: AsyncClient) -> None:
        response = await client.post(
            "/api/v1/auth/register",
            json={"name": "Ana Reyes", "email": "ana@furnishop.ph", "password": "hunter22"},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["email"] == "ana@furnishop.ph"
        assert body["role"] == "customer"
        assert body["is_active"] is True
        assert "hashed_password" not in body

    @pytest.mark.asyncio
    async def test_register_rejects_duplicate_email(self, client: AsyncClient, customer) -> None:
        response = await client.post(
            "/api/v1/auth/register",
            json={"name": "Someone", "email": customer.email, "password": "hunter22"},
        )

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "User with this email already exists"

    @pytest.mark.asyncio
    async def test_register_validates_payload(self, client: AsyncClient) -> None:
        response = await client.post(
            "/api/v1/auth/register",
            json={"name": "Ana", "email": "not-an-email", "password": "x"},
        )

        assert response.status_code == 422
        body = response.json()
        assert body["error"]["type"] == "validation_error"
        fields = {tuple(e["loc"])[-1] for e in body["error"]["details"]}
        assert {"email", "password"} <= fields


class TestLogin:
    """OAuth2 password login and token refresh."""

    @pytest.mark.asyncio
    async def test_login_returns_token_pair(self, client: AsyncClient, customer) -> None:
        response = await client.post(
            "/api/v1/auth/login",
            data={"username": customer.email, "password": PASSWORD},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["token_type"] == "bearer"
        claims = decode_token(body["access_token"])
        assert claims["sub"] == str(customer.id)
        assert claims["role"] == "customer"
        assert claims["type"] == "access"
        assert decode_token(body["refresh_token"])["type"] == "refresh"

    @pytest.mark.asyncio
    async def test_login_email_is_case_insensitive(self, client: AsyncClient, customer) -> None:
        response = await client.post(
            "/api/v1/auth/login",
            data={"username": customer.email.upper(), "password": PASSWORD},
        )

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_login_wrong_password(self, client: AsyncClient, customer) -> None:
        response = await client.post(
            "/api/v1/auth/login",
            data={"username": customer.email, "password": "wrong-password"},
        )

        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Invalid credentials"

    @pytest.mark.asyncio
    async def test_login_inactive_user(self, client: AsyncClient, session_maker) -> None:
        user = await create_user(session_maker, email="gone@furnishop.ph", is_active=False)

        response = await client.post(
            "/api/v1/auth/login",
            data={"username": user.email, "password": PASSWORD},
        )

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "User is inactive"

    @pytest.mark.asyncio
    async def test_refresh_issues_new_pair(self, client: AsyncClient, customer) -> None:
        response = await client.post(
            "/api/v1/auth/refresh",
            json={"refresh_token": create_refresh_token(str(customer.id))},
        )

        assert response.status_code == 200
        assert decode_token(response.json()["access_token"])["sub"] == str(customer.id)

    @pytest.mark.asyncio
    async def test_refresh_rejects_access_token(self, client: AsyncClient, customer) -> None:
        access = auth_headers(customer)["Authorization"].split(" ", 1)[1]

        response = await client.post("/api/v1/auth/refresh", json={"refresh_token": access})

        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Invalid token type"

    @pytest.mark.asyncio
    async def test_refresh_rejects_garbage(self, client: AsyncClient) -> None:
        response = await client.post("/api/v1/auth/refresh", json={"refresh_token": "not-a-jwt"})

        assert response.status_code == 401


class TestCurrentUser:
    """Bearer authentication and role enforcement."""

    @pytest.mark.asyncio
    async def test_me(self, client: AsyncClient, customer, customer_headers) -> None:
        response = await client.get("/api/v1/auth/me", headers=customer_headers)

        assert response.status_code == 200
        assert response.json()["id"] == customer.id

    @pytest.mark.asyncio
    async def test_me_requires_token(self, client: AsyncClient) -> None:
        response = await client.get("/api/v1/auth/me")

        assert response.status_code == 401
        assert response.json()["error"]["type"] == "http_error"

    @pytest.mark.asyncio
    async def test_refresh_token_is_not_a_bearer_token(self, client: AsyncClient, customer) -> None:
        token = create_refresh_token(str(customer.id))

        response = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Invalid token"

    @pytest.mark.asyncio
    async def test_inactive_user_is_forbidden(self, client: AsyncClient, session_maker) -> None:
        user = await create_user(session_maker, email="off@furnishop.ph", is_active=False)

        response = await client.get("/api/v1/auth/me", headers=auth_headers(user))

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_employee_route_rejects_customer(self, client: AsyncClient, customer_headers) -> None:
        response = await client.get("/api/v1/orders", headers=customer_headers)

        assert response.status_code == 403
        assert response.json()["error"]["message"] == "Insufficient role"

    @pytest.mark.asyncio
    async def test_logout(self, client: AsyncClient) -> None:
        response = await client.post("/api/v1/auth/logout")

        assert response.status_code == 200
        assert response.json()["message"] == "Logged out"


class TestEnvelope:
    """Health check and error envelope metadata."""

    @pytest.mark.asyncio
    async def test_health(self, client: AsyncClient) -> None:
        response = await client.get("/api/v1/health")

        assert response.status_code == 200
        assert response.json()["message"] == "Healthy"
        assert response.headers["X-Correlation-ID"]

    @pytest.mark.asyncio
    async def test_error_carries_correlation_id(self, client: AsyncClient) -> None:
        response = await client.get("/api/v1/auth/me", headers={"X-Correlation-ID": "abc-123"})

        body = response.json()
        assert body["correlation_id"] == "abc-123"
        assert body["path"] == "/api/v1/auth/me"
        assert body["method"] == "GET"
        assert response.headers["X-Correlation-ID"] == "abc-123"
