"""ASGI entry point for the MaxGen API.

run: uvicorn maxgen.main:create_app --factory --host 127.0.0.1 --port 8000 --reload
"""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .app.auth.tokens import AccessTokenVerifier
from .app.billing.provider import PaymentProvider, StripePaymentProvider
from .app.errors import DataLayerError
from .app.pricing.registry import PriceRegistry, load_price_registry
from .app.pricing.resolver import PriceResolver
from .app.routes.billing import router as billing_router
from .app.routes.ops import router as ops_router
from .app.routes.qr import router as qr_router
from .config import Settings, get_settings
from .db import ConnectionFactory, connection_factory

logger = logging.getLogger("maxgen")

APP_LOGGERS = ("maxgen", "auth", "billing", "entitlements", "ops")


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    message = str(first.get("msg") or "Invalid request")
    if message.startswith("Value error, "):
        return message[len("Value error, "):]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    return f"{location}: {message}" if location else message


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(DataLayerError)
    async def _data_layer_error(request: Request, exc: DataLayerError) -> JSONResponse:
        if not exc.caller_fault:
            logger.error("Data layer failure on %s %s: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": _validation_message(exc)},
        )

    @app.exception_handler(Exception)
    async def _unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Server error"},
        )


def create_app(
    *,
    settings: Optional[Settings] = None,
    price_registry: Optional[PriceRegistry] = None,
    payment_provider: Optional[PaymentProvider] = None,
    conn_factory: Optional[ConnectionFactory] = None,
) -> FastAPI:
    """Build the API; missing configuration or price ids fail here, before serving."""

    settings = settings or get_settings()
    price_registry = price_registry or load_price_registry()

    for name in APP_LOGGERS:
        logging.getLogger(name).setLevel(settings.log_level)

    app = FastAPI(title="MaxGen API")
    app.state.settings = settings
    app.state.price_registry = price_registry
    app.state.price_resolver = PriceResolver(price_registry)
    app.state.connection_factory = conn_factory or connection_factory(settings)
    app.state.token_verifier = AccessTokenVerifier(
        settings.auth_jwt_secret,
        audience=settings.auth_jwt_audience,
    )
    app.state.payment_provider = payment_provider or StripePaymentProvider(
        settings.stripe_secret_key,
        settings.stripe_webhook_secret,
    )

    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(settings.cors_origins),
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    _register_exception_handlers(app)

    app.include_router(billing_router)
    app.include_router(ops_router)
    app.include_router(qr_router)

    @app.get("/healthz")
    def healthz() -> dict:
        return {"ok": True}

    logger.info("API ready with %d configured prices", len(app.state.price_resolver))
    return app
