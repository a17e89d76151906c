from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from maxgen.app.errors import DataLayerError
from maxgen.app.idempotency import derive_idempotency_key
from maxgen.app.ops import BusinessLine, prepare_manual_sale, sale_at_from_day


def _prepare(**overrides):
    params = dict(
        day=date(2024, 3, 31),
        business_line=BusinessLine.QR_STUDIO,
        bank_account_id="bank-1",
        amount_cents=12345,
        currency=" EUR ",
        payment_method=None,
        notes=None,
        tags=[],
        actor_id="admin-1",
    )
    params.update(overrides)
    return prepare_manual_sale(**params)


def test_manual_sale_derives_ledger_and_sale_rows():
    ledger, sale = _prepare(idempotency_token=" form-7 ")

    assert ledger.effective_date == date(2024, 3, 31)
    assert ledger.amount == Decimal("123.45")
    assert ledger.entry_type == "customer_payment"
    assert ledger.category == "general"
    assert ledger.counterparty is None
    assert ledger.payment_method == "cash"
    assert ledger.tags == ("sales", "manual")
    assert ledger.related_entity_type == "manual_sale"
    assert ledger.related_entity_id == "manual_sale:form-7"
    assert ledger.notes == "Manual sale (qr_studio)"
    assert ledger.created_by == "admin-1"

    assert sale.sale_at == datetime(2024, 3, 31, 12, 0, tzinfo=timezone.utc)
    assert sale.amount_cents == 12345
    assert sale.currency == "eur"
    assert sale.notes == ""
    assert sale.tags == ("sales", "manual")


def test_manual_sale_keeps_caller_values():
    ledger, sale = _prepare(
        currency=None,
        payment_method="card",
        notes="Market stall",
        tags=[" fair ", "", "cash-box"],
    )

    assert sale.currency == "unknown"
    assert sale.payment_method == ledger.payment_method == "card"
    assert ledger.notes == sale.notes == "Market stall"
    assert ledger.tags == sale.tags == ("fair", "cash-box")
    assert ledger.related_entity_id is None


@pytest.mark.parametrize("amount_cents", [0, -5])
def test_manual_sale_rejects_non_positive_amounts(amount_cents):
    with pytest.raises(ValueError, match="amount_cents must be > 0"):
        _prepare(amount_cents=amount_cents)


def test_sale_at_is_midday_utc():
    assert sale_at_from_day(date(2024, 1, 1)).isoformat() == "2024-01-01T12:00:00+00:00"


@pytest.mark.parametrize("token", [None, "", "   "])
def test_blank_idempotency_token_derives_nothing(token):
    assert derive_idempotency_key("manual_sale", token) is None


def test_same_token_collides_on_second_write(ops_repository):
    first = _prepare(idempotency_token="abc")
    second = _prepare(idempotency_token="abc", amount_cents=999)

    ops_repository.record_manual_sale(*first)
    with pytest.raises(DataLayerError) as excinfo:
        ops_repository.record_manual_sale(*second)

    assert excinfo.value.caller_fault is True
    assert len(ops_repository.manual_sales) == 1


def test_requests_without_token_never_collide(ops_repository):
    ops_repository.record_manual_sale(*_prepare())
    ops_repository.record_manual_sale(*_prepare())

    assert len(ops_repository.manual_sales) == 2
