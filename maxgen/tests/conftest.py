from __future__ import annotations

import json
import time
from typing import Any, Dict, List, Mapping, Optional, Sequence, Set, Tuple

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from maxgen.app.auth.models import UserRole
from maxgen.app.billing.models import CheckoutMode, ProviderSubscription
from maxgen.app.billing.provider import WebhookVerificationError
from maxgen.app.entitlements.models import Entitlement
from maxgen.app.errors import DataLayerError
from maxgen.app.ops.constants import BankAccountStatus, PresenceOrderStatus
from maxgen.app.ops.models import (
    BankAccount,
    CalendarItem,
    LedgerEntry,
    ManualSale,
    ManualSaleReceipt,
    ReserveBucket,
    TaxProfile,
)
from maxgen.app.pricing.models import PresenceTier, ProductKey
from maxgen.app.pricing.registry import load_price_registry
from maxgen.app.services import providers
from maxgen.config import Settings
from maxgen.main import create_app

JWT_SECRET = "test-jwt-secret"

PRICE_ENV = {
    "PRICE_PRESENCE_BASIC_ONETIME": "price_basic_once",
    "PRICE_PRESENCE_BASIC_MONTHLY": "price_basic_month",
    "PRICE_PRESENCE_BOOKING_ONETIME": "price_booking_once",
    "PRICE_PRESENCE_BOOKING_MONTHLY": "price_booking_month",
    "PRICE_PRESENCE_SEO_ONETIME": "price_seo_once",
    "PRICE_PRESENCE_SEO_MONTHLY": "price_seo_month",
    "PRICE_QR_STUDIO_MONTHLY": "price_qr_month",
    "PRICE_QR_STUDIO_ONETIME": "price_qr_once",
    "PRICE_QR_PRINT_PACK_ONETIME": "price_print_pack",
    "PRICE_EXPERIMENTAL_EUR1_ONETIME": "price_eur1",
}


class InMemoryEntitlementRepository:
    def __init__(self) -> None:
        self.rows: Dict[Tuple[str, ProductKey, str], Entitlement] = {}
        self.fail_with: Optional[Exception] = None

    def list_active(
        self,
        user_id: str,
        product_key: ProductKey,
        *,
        limit: Optional[int] = None,
    ) -> Sequence[Entitlement]:
        if self.fail_with is not None:
            raise self.fail_with
        matching = sorted(
            (
                row
                for row in self.rows.values()
                if row.user_id == user_id and row.product_key == product_key and row.is_active
            ),
            key=lambda row: row.updated_at,
            reverse=True,
        )
        return matching[:limit] if limit is not None else matching

    def upsert(self, entitlement: Entitlement) -> Entitlement:
        key = (entitlement.user_id, entitlement.product_key, entitlement.plan.value)
        self.rows[key] = entitlement
        return entitlement


class InMemoryProfileRepository:
    def __init__(self) -> None:
        self.roles: Dict[str, UserRole] = {}
        self.super_admins: Set[str] = set()
        self.fail_with: Optional[Exception] = None

    def get_role(self, user_id: str) -> Optional[UserRole]:
        if self.fail_with is not None:
            raise self.fail_with
        return self.roles.get(user_id)

    def is_super_admin(self, user_id: str) -> bool:
        if self.fail_with is not None:
            raise self.fail_with
        return user_id in self.super_admins


class InMemoryOpsRepository:
    def __init__(self) -> None:
        self.presence_orders: Dict[str, PresenceOrderStatus] = {}
        self.bank_accounts: Dict[str, BankAccount] = {}
        self.calendar_items: Dict[str, CalendarItem] = {}
        self.reserve_buckets: Dict[str, ReserveBucket] = {}
        self.tax_profiles: Dict[str, TaxProfile] = {}
        self.ledger_entries: Dict[str, LedgerEntry] = {}
        self.manual_sales: Dict[str, ManualSale] = {}
        self.fail_with: Optional[Exception] = None
        self._counter = 0

    def _next_id(self, prefix: str) -> str:
        self._counter += 1
        return f"{prefix}-{self._counter}"

    def _check(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with

    def update_presence_order_status(self, order_id: str, status: PresenceOrderStatus) -> bool:
        self._check()
        if order_id not in self.presence_orders:
            return False
        self.presence_orders[order_id] = status
        return True

    def create_bank_account(self, account: BankAccount) -> str:
        self._check()
        account_id = self._next_id("bank")
        self.bank_accounts[account_id] = account
        return account_id

    def update_bank_account_status(self, account_id: str, status: BankAccountStatus) -> bool:
        self._check()
        account = self.bank_accounts.get(account_id)
        if account is None:
            return False
        self.bank_accounts[account_id] = account.model_copy(update={"status": status})
        return True

    def save_calendar_item(self, item: CalendarItem) -> Optional[str]:
        self._check()
        if item.id:
            if item.id not in self.calendar_items:
                return None
            self.calendar_items[item.id] = item
            return item.id
        item_id = self._next_id("cal")
        self.calendar_items[item_id] = item.model_copy(update={"id": item_id})
        return item_id

    def calendar_enums(self) -> Dict[str, List[str]]:
        self._check()
        return {
            "business_lines": ["company", "supplies"],
            "frequencies": ["none", "monthly"],
            "statuses": ["upcoming", "done"],
        }

    def save_reserve_bucket(self, bucket: ReserveBucket) -> Optional[str]:
        self._check()
        if bucket.id:
            if bucket.id not in self.reserve_buckets:
                return None
            self.reserve_buckets[bucket.id] = bucket
            return bucket.id
        bucket_id = self._next_id("reserve")
        self.reserve_buckets[bucket_id] = bucket.model_copy(update={"id": bucket_id})
        return bucket_id

    def upsert_tax_profile(self, profile: TaxProfile) -> None:
        self._check()
        self.tax_profiles[profile.business_line.value] = profile

    def record_manual_sale(self, ledger_entry: LedgerEntry, sale: ManualSale) -> ManualSaleReceipt:
        self._check()
        if ledger_entry.related_entity_id is not None and any(
            existing.related_entity_id == ledger_entry.related_entity_id
            for existing in self.ledger_entries.values()
        ):
            raise DataLayerError(
                'duplicate key value violates unique constraint "ops_ledger_entries_related_entity_key"',
                caller_fault=True,
            )
        ledger_entry_id = self._next_id("ledger")
        sale_id = self._next_id("sale")
        self.ledger_entries[ledger_entry_id] = ledger_entry
        self.manual_sales[sale_id] = sale
        return ManualSaleReceipt(ledger_entry_id=ledger_entry_id, manual_sale_id=sale_id)


class InMemoryBillingRepository:
    def __init__(self) -> None:
        self.customers: Dict[str, str] = {}
        self.presence_orders: Dict[str, Dict[str, Any]] = {}

    def get_customer_id(self, user_id: str) -> Optional[str]:
        return self.customers.get(user_id)

    def save_customer(self, user_id: str, customer_id: str) -> None:
        self.customers[user_id] = customer_id

    def get_user_id_for_customer(self, customer_id: str) -> Optional[str]:
        for user_id, existing in self.customers.items():
            if existing == customer_id:
                return user_id
        return None

    def upsert_presence_order(
        self,
        *,
        user_id: str,
        tier: PresenceTier,
        checkout_session_id: str,
    ) -> None:
        self.presence_orders[checkout_session_id] = {
            "user_id": user_id,
            "package_key": tier.value,
            "status": PresenceOrderStatus.PAID.value,
            "onboarding": {},
        }


class FakePaymentProvider:
    VALID_SIGNATURE = "t=1,v1=valid"

    def __init__(self) -> None:
        self.customers: List[Dict[str, Any]] = []
        self.checkout_sessions: List[Dict[str, Any]] = []
        self.portal_sessions: List[Dict[str, Any]] = []
        self.line_items: Dict[str, List[str]] = {}
        self.subscriptions: Dict[str, ProviderSubscription] = {}

    def create_customer(self, *, user_id: str, email: Optional[str]) -> str:
        customer_id = f"cus_{len(self.customers) + 1}"
        self.customers.append({"id": customer_id, "user_id": user_id, "email": email})
        return customer_id

    def create_checkout_session(
        self,
        *,
        customer_id: str,
        mode: CheckoutMode,
        price_ids: Sequence[str],
        success_url: str,
        cancel_url: str,
        metadata: Mapping[str, str],
        idempotency_key: Optional[str] = None,
    ) -> str:
        self.checkout_sessions.append(
            {
                "customer_id": customer_id,
                "mode": mode,
                "price_ids": list(price_ids),
                "success_url": success_url,
                "cancel_url": cancel_url,
                "metadata": dict(metadata),
                "idempotency_key": idempotency_key,
            }
        )
        return f"https://checkout.stripe.test/session/{len(self.checkout_sessions)}"

    def create_portal_session(self, *, customer_id: str, return_url: str) -> str:
        self.portal_sessions.append({"customer_id": customer_id, "return_url": return_url})
        return "https://billing.stripe.test/portal"

    def verify_event(self, payload: bytes, signature: str) -> Dict[str, Any]:
        if signature != self.VALID_SIGNATURE:
            raise WebhookVerificationError("No signatures found matching the expected signature")
        return json.loads(payload)

    def list_line_item_price_ids(self, session_id: str) -> List[str]:
        return list(self.line_items.get(session_id, []))

    def retrieve_subscription(self, subscription_id: str) -> ProviderSubscription:
        return self.subscriptions[subscription_id]


class InMemoryQrProjectRepository:
    def __init__(self) -> None:
        self.projects: Dict[str, str] = {}
        self.deleted: List[str] = []

    def get_owner_id(self, project_id: str) -> Optional[str]:
        return self.projects.get(project_id)

    def delete_project(self, project_id: str) -> None:
        self.projects.pop(project_id, None)
        self.deleted.append(project_id)


def make_access_token(
    user_id: str,
    *,
    secret: str = JWT_SECRET,
    audience: str = "authenticated",
    expires_in: int = 3600,
    email: Optional[str] = None,
) -> str:
    claims: Dict[str, Any] = {"sub": user_id, "aud": audience, "exp": int(time.time()) + expires_in}
    if email:
        claims["email"] = email
    return jwt.encode(claims, secret, algorithm="HS256")


@pytest.fixture
def price_env() -> Dict[str, str]:
    return dict(PRICE_ENV)


@pytest.fixture
def price_registry(price_env):
    return load_price_registry(price_env)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        database_url="postgresql://localhost/maxgen_test",
        db_connect_timeout=5,
        auth_jwt_secret=JWT_SECRET,
        auth_jwt_audience="authenticated",
        stripe_secret_key="sk_test_123",
        stripe_webhook_secret="whsec_test",
        site_url="https://maxgen.test",
        cors_origins=(),
        log_level="INFO",
    )


@pytest.fixture
def entitlement_repository() -> InMemoryEntitlementRepository:
    return InMemoryEntitlementRepository()


@pytest.fixture
def profile_repository() -> InMemoryProfileRepository:
    return InMemoryProfileRepository()


@pytest.fixture
def ops_repository() -> InMemoryOpsRepository:
    return InMemoryOpsRepository()


@pytest.fixture
def billing_repository() -> InMemoryBillingRepository:
    return InMemoryBillingRepository()


@pytest.fixture
def payment_provider() -> FakePaymentProvider:
    return FakePaymentProvider()


@pytest.fixture
def qr_repository() -> InMemoryQrProjectRepository:
    return InMemoryQrProjectRepository()


def _unreachable_connection():
    raise AssertionError("tests must not open database connections")


@pytest.fixture
def app(
    settings,
    price_registry,
    payment_provider,
    entitlement_repository,
    profile_repository,
    ops_repository,
    billing_repository,
    qr_repository,
):
    application = create_app(
        settings=settings,
        price_registry=price_registry,
        payment_provider=payment_provider,
        conn_factory=_unreachable_connection,
    )
    application.dependency_overrides[providers.get_entitlement_repository] = lambda: entitlement_repository
    application.dependency_overrides[providers.get_profile_repository] = lambda: profile_repository
    application.dependency_overrides[providers.get_ops_repository] = lambda: ops_repository
    application.dependency_overrides[providers.get_billing_repository] = lambda: billing_repository
    application.dependency_overrides[providers.get_qr_project_repository] = lambda: qr_repository
    return application


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def auth_headers():
    def _headers(user_id: str, **kwargs: Any) -> Dict[str, str]:
        return {"Authorization": f"Bearer {make_access_token(user_id, **kwargs)}"}

    return _headers
