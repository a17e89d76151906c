from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

import pytest

from maxgen.app.entitlements import Entitlement, EntitlementReader, EntitlementStatus
from maxgen.app.errors import DataLayerError
from maxgen.app.pricing import Plan, ProductKey


def _grant(plan: Plan, status: EntitlementStatus = EntitlementStatus.ACTIVE, **overrides) -> Entitlement:
    return Entitlement(
        user_id=overrides.pop("user_id", "user-1"),
        product_key=overrides.pop("product_key", ProductKey.QR_STUDIO),
        plan=plan,
        status=status,
        **overrides,
    )


@pytest.fixture
def reader(entitlement_repository) -> EntitlementReader:
    return EntitlementReader(entitlement_repository)


def test_has_entitlement_false_without_rows(reader):
    assert reader.has_entitlement("user-1", ProductKey.QR_STUDIO) is False
    assert reader.active_plan("user-1", ProductKey.QR_STUDIO) is None


def test_has_entitlement_tracks_status_changes(reader, entitlement_repository):
    entitlement_repository.upsert(_grant(Plan.MONTHLY))
    assert reader.has_entitlement("user-1", ProductKey.QR_STUDIO) is True

    entitlement_repository.upsert(_grant(Plan.MONTHLY, EntitlementStatus.CANCELED))
    assert reader.has_entitlement("user-1", ProductKey.QR_STUDIO) is False


def test_has_entitlement_is_scoped_to_user_and_product(reader, entitlement_repository):
    entitlement_repository.upsert(_grant(Plan.ONETIME, product_key=ProductKey.QR_PRINT_PACK))
    entitlement_repository.upsert(_grant(Plan.ONETIME, user_id="user-2"))

    assert reader.has_entitlement("user-1", ProductKey.QR_STUDIO) is False
    assert reader.has_entitlement("user-1", ProductKey.QR_PRINT_PACK) is True


def test_reader_fails_closed_on_storage_errors(reader, entitlement_repository, caplog):
    entitlement_repository.upsert(_grant(Plan.MONTHLY))
    entitlement_repository.fail_with = DataLayerError("connection refused")

    with caplog.at_level(logging.ERROR, logger="entitlements"):
        assert reader.has_entitlement("user-1", ProductKey.QR_STUDIO) is False
        assert reader.active_plan("user-1", ProductKey.QR_STUDIO) is None

    assert "Entitlement check failed" in caplog.text


def test_active_plan_prefers_monthly_over_newer_onetime(reader, entitlement_repository):
    now = datetime.now(timezone.utc)
    entitlement_repository.upsert(_grant(Plan.MONTHLY, updated_at=now - timedelta(days=30)))
    entitlement_repository.upsert(_grant(Plan.ONETIME, updated_at=now))

    assert reader.active_plan("user-1", ProductKey.QR_STUDIO) == Plan.MONTHLY


def test_active_plan_falls_back_to_onetime(reader, entitlement_repository):
    entitlement_repository.upsert(_grant(Plan.MONTHLY, EntitlementStatus.EXPIRED))
    entitlement_repository.upsert(_grant(Plan.ONETIME))

    assert reader.active_plan("user-1", ProductKey.QR_STUDIO) == Plan.ONETIME
