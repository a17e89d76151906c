"""Application wiring: FastAPI dependency providers for repositories and services.

Process-wide objects (settings, the price registry and resolver, the token
verifier, the payment provider) are built once by the app factory and stored on
``app.state``. Repositories are cheap and created per request around the shared
connection factory. Tests swap any of these through ``app.dependency_overrides``.
"""
from __future__ import annotations

from fastapi import Depends, Request

from ...config import Settings
from ...db import ConnectionFactory
from ..auth.repository import PostgresProfileRepository, ProfileRepository
from ..auth.tokens import AccessTokenVerifier
from ..billing.provider import PaymentProvider
from ..billing.repository import PostgresBillingRepository
from ..billing.service import BillingRepository, BillingService
from ..entitlements.repository import PostgresEntitlementRepository
from ..entitlements.service import EntitlementReader, EntitlementRepository
from ..ops.repository import OpsRepository, PostgresOpsRepository
from ..pricing.registry import PriceRegistry
from ..pricing.resolver import PriceResolver
from ..qr.repository import PostgresQrProjectRepository, QrProjectRepository


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_price_registry(request: Request) -> PriceRegistry:
    return request.app.state.price_registry


def get_price_resolver(request: Request) -> PriceResolver:
    return request.app.state.price_resolver


def get_connection_factory(request: Request) -> ConnectionFactory:
    return request.app.state.connection_factory


def get_token_verifier(request: Request) -> AccessTokenVerifier:
    return request.app.state.token_verifier


def get_payment_provider(request: Request) -> PaymentProvider:
    return request.app.state.payment_provider


def get_profile_repository(
    conn_factory: ConnectionFactory = Depends(get_connection_factory),
) -> ProfileRepository:
    return PostgresProfileRepository(conn_factory)


def get_entitlement_repository(
    conn_factory: ConnectionFactory = Depends(get_connection_factory),
) -> EntitlementRepository:
    return PostgresEntitlementRepository(conn_factory)


def get_entitlement_reader(
    repository: EntitlementRepository = Depends(get_entitlement_repository),
) -> EntitlementReader:
    return EntitlementReader(repository)


def get_ops_repository(
    conn_factory: ConnectionFactory = Depends(get_connection_factory),
) -> OpsRepository:
    return PostgresOpsRepository(conn_factory)


def get_qr_project_repository(
    conn_factory: ConnectionFactory = Depends(get_connection_factory),
) -> QrProjectRepository:
    return PostgresQrProjectRepository(conn_factory)


def get_billing_repository(
    conn_factory: ConnectionFactory = Depends(get_connection_factory),
) -> BillingRepository:
    return PostgresBillingRepository(conn_factory)


def get_billing_service(
    settings: Settings = Depends(get_settings),
    repository: BillingRepository = Depends(get_billing_repository),
    entitlements: EntitlementRepository = Depends(get_entitlement_repository),
    provider: PaymentProvider = Depends(get_payment_provider),
    resolver: PriceResolver = Depends(get_price_resolver),
) -> BillingService:
    return BillingService(
        repository=repository,
        entitlements=entitlements,
        provider=provider,
        resolver=resolver,
        site_url=settings.site_url,
    )


__all__ = [
    "get_billing_repository",
    "get_billing_service",
    "get_connection_factory",
    "get_entitlement_reader",
    "get_entitlement_repository",
    "get_ops_repository",
    "get_payment_provider",
    "get_price_registry",
    "get_price_resolver",
    "get_profile_repository",
    "get_qr_project_repository",
    "get_settings",
    "get_token_verifier",
]
