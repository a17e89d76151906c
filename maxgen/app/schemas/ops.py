"""API schemas for the admin ops endpoints."""
from __future__ import annotations

import re
from datetime import date
from decimal import Decimal
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator

from ..ops.constants import (
    SALE_BUSINESS_LINES,
    BankAccountStatus,
    BusinessLine,
    CalendarStatus,
    OpsFrequency,
    PresenceOrderStatus,
    ReserveKind,
    VatFilingFrequency,
    VatStatus,
)
from ..ops.models import BankAccount, CalendarItem, ManualSaleReceipt, ReserveBucket, TaxProfile
from .common import OkResponse, require_text

_ISO_DAY = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _require_present(value: Any, message: str) -> Any:
    if _blank_to_none(value) is None:
        raise ValueError(message)
    return value


def _notes(value: Optional[str]) -> str:
    return value or ""


class PresenceStatusUpdateRequest(BaseModel):
    order_id: Optional[str] = Field(default=None, validate_default=True)
    status: Optional[PresenceOrderStatus] = Field(default=None, validate_default=True)

    @field_validator("order_id")
    @classmethod
    def _order_id(cls, value: Optional[str]) -> str:
        return require_text(value, "Invalid request")

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, value: Any) -> Any:
        if not isinstance(value, str) or value not in {member.value for member in PresenceOrderStatus}:
            raise ValueError("Invalid request")
        return value


class BankAccountCreateRequest(BaseModel):
    name: Optional[str] = Field(default=None, validate_default=True)
    currency: Optional[str] = Field(default=None, validate_default=True)
    opening_balance_amount: Decimal = Decimal("0")
    opening_balance_date: Optional[date] = Field(default=None, validate_default=True)

    @field_validator("name")
    @classmethod
    def _name(cls, value: Optional[str]) -> str:
        return require_text(value, "Name required")

    @field_validator("currency")
    @classmethod
    def _currency(cls, value: Optional[str]) -> str:
        return require_text(value, "Currency required")

    @field_validator("opening_balance_date", mode="before")
    @classmethod
    def _opening_balance_date(cls, value: Any) -> Any:
        return _require_present(value, "Opening balance date required")

    @field_validator("opening_balance_amount", mode="before")
    @classmethod
    def _opening_balance_amount(cls, value: Any) -> Any:
        return _blank_to_none(value) or Decimal("0")

    def to_account(self, actor_id: str) -> BankAccount:
        return BankAccount(
            name=self.name,
            currency=self.currency,
            status=BankAccountStatus.ACTIVE,
            opening_balance_amount=self.opening_balance_amount,
            opening_balance_date=self.opening_balance_date,
            created_by=actor_id,
        )


class BankAccountArchiveRequest(BaseModel):
    id: Optional[str] = Field(default=None, validate_default=True)
    status: Optional[BankAccountStatus] = Field(default=None, validate_default=True)

    @field_validator("id")
    @classmethod
    def _id(cls, value: Optional[str]) -> str:
        return require_text(value, "id required")

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, value: Any) -> Any:
        return _require_present(value, "status required")


class CalendarItemUpsertRequest(BaseModel):
    id: Optional[str] = None
    title: Optional[str] = Field(default=None, validate_default=True)
    category: str = ""
    business_line: BusinessLine
    due_date: date
    frequency: OpsFrequency = OpsFrequency.NONE
    amount_estimate: Optional[Decimal] = None
    status: CalendarStatus = CalendarStatus.UPCOMING
    notes: Optional[str] = None

    @field_validator("title")
    @classmethod
    def _title(cls, value: Optional[str]) -> str:
        return require_text(value, "Title required")

    @field_validator("id", "amount_estimate", mode="before")
    @classmethod
    def _optional(cls, value: Any) -> Any:
        return _blank_to_none(value)

    def to_item(self, actor_id: str) -> CalendarItem:
        return CalendarItem(
            id=self.id,
            title=self.title,
            category=self.category.strip(),
            business_line=self.business_line,
            due_date=self.due_date,
            frequency=self.frequency,
            amount_estimate=self.amount_estimate,
            status=self.status,
            notes=_notes(self.notes),
            created_by=actor_id,
        )


class CalendarEnumsResponse(BaseModel):
    business_lines: List[str]
    frequencies: List[str]
    statuses: List[str]


class ReserveBucketUpsertRequest(BaseModel):
    id: Optional[str] = None
    name: Optional[str] = Field(default=None, validate_default=True)
    business_line: Optional[BusinessLine] = Field(default=None, validate_default=True)
    kind: Optional[ReserveKind] = Field(default=None, validate_default=True)
    percentage: Optional[Decimal] = None
    fixed_amount: Optional[Decimal] = None
    notes: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _name(cls, value: Optional[str]) -> str:
        return require_text(value, "Name is required")

    @field_validator("business_line", mode="before")
    @classmethod
    def _business_line(cls, value: Any) -> Any:
        return _require_present(value, "business_line is required")

    @field_validator("kind", mode="before")
    @classmethod
    def _kind(cls, value: Any) -> Any:
        return _require_present(value, "kind is required")

    @field_validator("id", "percentage", "fixed_amount", mode="before")
    @classmethod
    def _optional(cls, value: Any) -> Any:
        return _blank_to_none(value)

    def to_bucket(self, actor_id: str) -> ReserveBucket:
        return ReserveBucket(
            id=self.id,
            name=self.name,
            business_line=self.business_line,
            kind=self.kind,
            percentage=self.percentage,
            fixed_amount=self.fixed_amount,
            notes=_notes(self.notes),
            created_by=actor_id,
        )


class TaxProfileUpsertRequest(BaseModel):
    business_line: Optional[BusinessLine] = Field(default=None, validate_default=True)
    vat_status: VatStatus = VatStatus.NOT_REGISTERED
    vat_filing_frequency: VatFilingFrequency = VatFilingFrequency.UNKNOWN
    vat_effective_from: Optional[date] = None
    corp_tax_rate: Decimal = Decimal("0")
    notes: Optional[str] = None

    @field_validator("business_line", mode="before")
    @classmethod
    def _business_line(cls, value: Any) -> Any:
        return _require_present(value, "business_line is required")

    @field_validator("vat_effective_from", mode="before")
    @classmethod
    def _optional(cls, value: Any) -> Any:
        return _blank_to_none(value)

    def to_profile(self, actor_id: str) -> TaxProfile:
        return TaxProfile(
            business_line=self.business_line,
            vat_status=self.vat_status,
            vat_filing_frequency=self.vat_filing_frequency,
            vat_effective_from=self.vat_effective_from,
            corp_tax_rate=self.corp_tax_rate,
            notes=_notes(self.notes),
            updated_by=actor_id,
        )


class ManualSaleCreateRequest(BaseModel):
    day: Optional[date] = Field(default=None, validate_default=True)
    business_line: Optional[BusinessLine] = Field(default=None, validate_default=True)
    bank_account_id: Optional[str] = Field(default=None, validate_default=True)
    currency: Optional[str] = None
    amount_cents: int = Field(default=0, validate_default=True)
    payment_method: Optional[str] = None
    notes: Optional[str] = None
    tags: List[str] = Field(default_factory=list)

    @field_validator("day", mode="before")
    @classmethod
    def _day(cls, value: Any) -> Any:
        if not isinstance(value, str) or not _ISO_DAY.match(value):
            raise ValueError("Invalid day")
        try:
            return date.fromisoformat(value)
        except ValueError as exc:
            raise ValueError("Invalid day") from exc

    @field_validator("business_line", mode="before")
    @classmethod
    def _business_line(cls, value: Any) -> Any:
        if not isinstance(value, str) or value not in {line.value for line in SALE_BUSINESS_LINES}:
            raise ValueError("Invalid business_line")
        return value

    @field_validator("bank_account_id", mode="before")
    @classmethod
    def _bank_account_id(cls, value: Any) -> Any:
        if not isinstance(value, str) or not value:
            raise ValueError("Invalid bank_account_id")
        return value

    @field_validator("amount_cents", mode="before")
    @classmethod
    def _amount_cents(cls, value: Any) -> int:
        cents = 0
        if isinstance(value, (int, float, str)) and not isinstance(value, bool):
            try:
                cents = int(float(value))
            except (ValueError, OverflowError):
                cents = 0
        if cents <= 0:
            raise ValueError("amount_cents must be > 0")
        return cents

    @field_validator("tags", mode="before")
    @classmethod
    def _tags(cls, value: Any) -> List[str]:
        if not isinstance(value, list):
            return []
        return [item.strip() for item in value if isinstance(item, str) and item.strip()]

    @field_validator("currency", "payment_method", "notes", mode="before")
    @classmethod
    def _text_only(cls, value: Any) -> Any:
        return value if isinstance(value, str) else None


class ManualSaleCreateResponse(OkResponse):
    ledger_entry_id: str
    manual_sale_id: str

    @classmethod
    def from_receipt(cls, receipt: ManualSaleReceipt) -> "ManualSaleCreateResponse":
        return cls(ledger_entry_id=receipt.ledger_entry_id, manual_sale_id=receipt.manual_sale_id)
