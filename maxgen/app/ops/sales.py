"""Derivation of the ledger entry and sale row for a manual sale."""
from __future__ import annotations

from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Iterable, Optional, Tuple

from ..idempotency import derive_idempotency_key
from .constants import (
    DEFAULT_PAYMENT_METHOD,
    DEFAULT_SALE_TAGS,
    UNKNOWN_CURRENCY,
    BusinessLine,
)
from .models import LedgerEntry, ManualSale

RELATED_ENTITY_TYPE = "manual_sale"


def sale_at_from_day(day: date) -> datetime:
    """Anchor a calendar day at midday UTC so the derived local date stays put."""

    return datetime.combine(day, time(12, 0), tzinfo=timezone.utc)


def _clean_tags(tags: Iterable[str]) -> Tuple[str, ...]:
    cleaned = tuple(tag.strip() for tag in tags if tag and tag.strip())
    return cleaned or DEFAULT_SALE_TAGS


def prepare_manual_sale(
    *,
    day: date,
    business_line: BusinessLine,
    bank_account_id: str,
    amount_cents: int,
    currency: Optional[str],
    payment_method: Optional[str],
    notes: Optional[str],
    tags: Iterable[str],
    actor_id: str,
    idempotency_token: Optional[str] = None,
) -> Tuple[LedgerEntry, ManualSale]:
    """Build both records written for one manual sale."""

    if amount_cents <= 0:
        raise ValueError("amount_cents must be > 0")

    normalized_currency = (currency or "").strip().lower() or UNKNOWN_CURRENCY
    method = (payment_method or "").strip() or DEFAULT_PAYMENT_METHOD
    note_text = notes or ""
    tag_values = _clean_tags(tags)

    ledger_entry = LedgerEntry(
        effective_date=day,
        bank_account_id=bank_account_id,
        amount=(Decimal(amount_cents) / 100).quantize(Decimal("0.01")),
        business_line=business_line,
        payment_method=method,
        tags=tag_values,
        related_entity_type=RELATED_ENTITY_TYPE,
        related_entity_id=derive_idempotency_key(RELATED_ENTITY_TYPE, idempotency_token),
        notes=note_text or f"Manual sale ({business_line.value})",
        created_by=actor_id,
    )
    sale = ManualSale(
        sale_at=sale_at_from_day(day),
        business_line=business_line,
        bank_account_id=bank_account_id,
        amount_cents=amount_cents,
        currency=normalized_currency,
        payment_method=method,
        notes=note_text,
        tags=tag_values,
        created_by=actor_id,
    )
    return ledger_entry, sale
