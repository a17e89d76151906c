"""Entitlement models, storage, and the fail-closed reader."""

from .models import Entitlement, EntitlementStatus
from .repository import PostgresEntitlementRepository
from .service import PLAN_PREFERENCE, EntitlementReader, EntitlementRepository

__all__ = [
    "PLAN_PREFERENCE",
    "Entitlement",
    "EntitlementReader",
    "EntitlementRepository",
    "EntitlementStatus",
    "PostgresEntitlementRepository",
]
