"""Internal operations tooling: ledger, settings, and order handling."""

from .constants import (
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
from .models import (
    BankAccount,
    CalendarItem,
    LedgerEntry,
    ManualSale,
    ManualSaleReceipt,
    ReserveBucket,
    TaxProfile,
)
from .repository import OpsRepository, PostgresOpsRepository
from .sales import prepare_manual_sale, sale_at_from_day

__all__ = [
    "SALE_BUSINESS_LINES",
    "BankAccount",
    "BankAccountStatus",
    "BusinessLine",
    "CalendarItem",
    "CalendarStatus",
    "LedgerEntry",
    "ManualSale",
    "ManualSaleReceipt",
    "OpsFrequency",
    "OpsRepository",
    "PostgresOpsRepository",
    "PresenceOrderStatus",
    "ReserveBucket",
    "ReserveKind",
    "TaxProfile",
    "VatFilingFrequency",
    "VatStatus",
    "prepare_manual_sale",
    "sale_at_from_day",
]
