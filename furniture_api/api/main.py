"""
ASGI entry point: ``uvicorn furniture_api.api.main:app``.

Every error leaving the API, whether raised by a route, a service or request
validation, is rendered as the same ErrorResponse envelope carrying the
request's correlation id.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, List
from uuid import uuid4

from fastapi import APIRouter, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from furniture_api.api.routes import (
    auth,
    cart,
    checkout,
    inventory,
    orders,
    payments,
    production,
    products,
    reports,
)
from furniture_api.core.exceptions import ShopError
from furniture_api.core.logging import configure_logging, correlation_id_var, user_id_var
from furniture_api.core.settings import get_app_settings
from furniture_api.db.run_migrations import main as run_alembic
from furniture_api.db.seed import seed_all
from furniture_api.db.session import dispose_engine
from furniture_api.schemas.common import ErrorResponse, MessageResponse

configure_logging()
logger = logging.getLogger(__name__)

settings = get_app_settings()

CORRELATION_HEADER = "X-Correlation-ID"

openapi_tags = [
    {"name": "Health", "description": "Liveness check."},
    {"name": "Auth", "description": "Registration, login and token endpoints."},
    {"name": "Products", "description": "Catalog and bills of materials."},
    {"name": "Cart", "description": "Shopping cart of the current user."},
    {"name": "Checkout", "description": "Turn the cart into an order."},
    {"name": "Orders", "description": "Order listing, completion, payment status and tracking."},
    {"name": "Payments", "description": "GCash (Stripe) and Maya hosted checkout."},
    {"name": "Inventory", "description": "Raw materials, stock adjustments and usage log."},
    {"name": "Production", "description": "Workshop production jobs and analytics."},
    {"name": "Reports", "description": "Production report exports (CSV/Excel/PDF)."},
]

app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    openapi_tags=openapi_tags,
)

origins = settings.cors_origins
allow_credentials = settings.CORS_ALLOW_CREDENTIALS
if "*" in origins and allow_credentials:
    # Browsers reject credentialed responses for a wildcard origin.
    logger.warning("CORS credentials disabled: origins contain '*'")
    allow_credentials = False

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[CORRELATION_HEADER],
)


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    """Bind a correlation id to the request's log records and echo it back."""
    corr = request.headers.get(CORRELATION_HEADER) or request.headers.get("X-Request-ID") or uuid4().hex
    corr_token = correlation_id_var.set(corr)
    user_token = user_id_var.set(None)
    request.state.correlation_id = corr

    logger.info("%s %s", request.method, request.url.path)
    try:
        response = await call_next(request)
    finally:
        correlation_id_var.reset(corr_token)
        user_id_var.reset(user_token)

    response.headers[CORRELATION_HEADER] = corr
    return response


def _error_response(
    request: Request,
    status_code: int,
    error_type: str,
    message: str,
    details: Any = None,
) -> JSONResponse:
    body = ErrorResponse.build(
        status_code,
        error_type,
        message,
        details,
        correlation_id=getattr(request.state, "correlation_id", None),
        path=request.url.path,
        method=request.method,
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    if isinstance(exc.detail, str):
        message, details = exc.detail, None
    else:
        message, details = "HTTP Error", exc.detail
    response = _error_response(request, exc.status_code, "http_error", message, details)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


@app.exception_handler(ShopError)
async def shop_error_handler(request: Request, exc: ShopError):
    """Business rule violations raised by services (cart, checkout, payments)."""
    if exc.status_code >= 500:
        logger.error("%s: %s", exc.error_type, exc.message)
    return _error_response(request, exc.status_code, exc.error_type, exc.message, exc.details)


def _jsonable_errors(exc: RequestValidationError) -> List[dict]:
    errors = []
    for err in exc.errors():
        item = dict(err)
        item.pop("url", None)
        # ctx may hold the raised ValueError itself
        if "ctx" in item:
            item["ctx"] = {key: str(value) for key, value in item["ctx"].items()}
        errors.append(item)
    return errors


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return _error_response(request, 422, "validation_error", "Request validation failed", _jsonable_errors(exc))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Log the traceback and answer with an opaque 500."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error_response(request, 500, "internal_error", "An unexpected error occurred")


@app.on_event("startup")
async def on_startup() -> None:
    """
    Bring the schema to head and optionally load reference data.

    Failures are logged and the API still starts so the health endpoint stays
    reachable while the database is down.
    """
    startup_settings = get_app_settings()
    if startup_settings.RUN_MIGRATIONS_ON_STARTUP:
        try:
            # env.py drives its own event loop, so run it off the server loop.
            await asyncio.to_thread(run_alembic, ["upgrade", "head"])
            logger.info("Migrations applied")
        except Exception:
            logger.exception("alembic upgrade head failed")

    if startup_settings.AUTO_SEED:
        try:
            await seed_all()
            logger.info("Reference data seeded")
        except Exception:
            logger.exception("Seeding failed")


@app.on_event("shutdown")
async def on_shutdown() -> None:
    """Release pooled database connections."""
    await dispose_engine()


api_v1 = APIRouter(prefix="/api/v1")


# PUBLIC_INTERFACE
@api_v1.get("/health", response_model=MessageResponse, summary="Health Check", tags=["Health"])
def health_check() -> MessageResponse:
    """Liveness check; does not touch the database."""
    return MessageResponse(message="Healthy")


for module in (auth, products, cart, checkout, orders, payments, inventory, production, reports):
    api_v1.include_router(module.router)

app.include_router(api_v1)
