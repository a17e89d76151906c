"""Domain records written by the ops settings handlers."""
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict

from .constants import (
    BankAccountStatus,
    BusinessLine,
    CalendarStatus,
    OpsFrequency,
    ReserveKind,
    VatFilingFrequency,
    VatStatus,
)


class BankAccount(BaseModel):
    name: str
    currency: str
    status: BankAccountStatus = BankAccountStatus.ACTIVE
    opening_balance_amount: Decimal = Decimal("0")
    opening_balance_date: date
    created_by: str

    model_config = ConfigDict(frozen=True)


class CalendarItem(BaseModel):
    """Entry in the regulatory calendar; ``id`` is set when updating."""

    id: Optional[str] = None
    title: str
    category: str = ""
    business_line: BusinessLine
    due_date: date
    frequency: OpsFrequency = OpsFrequency.NONE
    amount_estimate: Optional[Decimal] = None
    status: CalendarStatus = CalendarStatus.UPCOMING
    notes: str = ""
    created_by: str

    model_config = ConfigDict(frozen=True)


class ReserveBucket(BaseModel):
    id: Optional[str] = None
    name: str
    business_line: BusinessLine
    kind: ReserveKind
    percentage: Optional[Decimal] = None
    fixed_amount: Optional[Decimal] = None
    notes: str = ""
    created_by: str

    model_config = ConfigDict(frozen=True)


class TaxProfile(BaseModel):
    """One row per business line."""

    business_line: BusinessLine
    vat_status: VatStatus = VatStatus.NOT_REGISTERED
    vat_filing_frequency: VatFilingFrequency = VatFilingFrequency.UNKNOWN
    vat_effective_from: Optional[date] = None
    corp_tax_rate: Decimal = Decimal("0")
    notes: str = ""
    updated_by: str

    model_config = ConfigDict(frozen=True)


class LedgerEntry(BaseModel):
    """Append-only money movement in ``ops_ledger_entries``."""

    effective_date: date
    bank_account_id: str
    amount: Decimal
    entry_type: str = "customer_payment"
    category: str = "general"
    business_line: BusinessLine
    counterparty: Optional[str] = None
    payment_method: str
    tags: Tuple[str, ...]
    related_entity_type: Optional[str] = None
    related_entity_id: Optional[str] = None
    notes: str = ""
    created_by: str

    model_config = ConfigDict(frozen=True)


class ManualSale(BaseModel):
    """Sale row linked to its ledger entry; the day column is derived from ``sale_at``."""

    sale_at: datetime
    business_line: BusinessLine
    bank_account_id: str
    amount_cents: int
    currency: str
    payment_method: str
    notes: str = ""
    tags: Tuple[str, ...]
    created_by: str

    model_config = ConfigDict(frozen=True)


class ManualSaleReceipt(BaseModel):
    ledger_entry_id: str
    manual_sale_id: str

    model_config = ConfigDict(frozen=True)
