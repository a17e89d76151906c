"""Enumerations backing the ops tables.

Values must match the database enum labels.
"""
from __future__ import annotations

from enum import Enum


class BusinessLine(str, Enum):
    COMPANY = "company"
    SUPPLIES = "supplies"
    QR_STUDIO = "qr_studio"
    ONLINE_PRESENCE = "online_presence"


# Manual sales are only recorded against these lines.
SALE_BUSINESS_LINES = frozenset({BusinessLine.COMPANY, BusinessLine.QR_STUDIO, BusinessLine.SUPPLIES})


class ReserveKind(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class BankAccountStatus(str, Enum):
    ACTIVE = "active"
    ARCHIVED = "archived"


class VatStatus(str, Enum):
    NOT_REGISTERED = "not_registered"
    PENDING = "pending"
    REGISTERED = "registered"


class VatFilingFrequency(str, Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    ANNUALLY = "annually"
    UNKNOWN = "unknown"


class OpsFrequency(str, Enum):
    NONE = "none"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    ANNUALLY = "annually"


class CalendarStatus(str, Enum):
    UPCOMING = "upcoming"
    DUE = "due"
    OVERDUE = "overdue"
    DONE = "done"


class PresenceOrderStatus(str, Enum):
    PAID = "paid"
    ONBOARDING_RECEIVED = "onboarding_received"
    IN_PROGRESS = "in_progress"
    DELIVERED = "delivered"
    CANCELED = "canceled"


DEFAULT_SALE_TAGS = ("sales", "manual")
DEFAULT_PAYMENT_METHOD = "cash"
UNKNOWN_CURRENCY = "unknown"
