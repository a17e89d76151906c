"""Read-side checks answering whether an account holds a product."""
from __future__ import annotations

import logging
from typing import Optional, Protocol, Sequence, Tuple

from ..pricing.models import Plan, ProductKey
from .models import Entitlement

logger = logging.getLogger("entitlements")

# When several grants for one product are active at once the subscription wins.
PLAN_PREFERENCE: Tuple[Plan, ...] = (Plan.MONTHLY, Plan.ONETIME)


class EntitlementRepository(Protocol):
    """Data access layer for entitlement rows."""

    def list_active(
        self,
        user_id: str,
        product_key: ProductKey,
        *,
        limit: Optional[int] = None,
    ) -> Sequence[Entitlement]:
        ...

    def upsert(self, entitlement: Entitlement) -> Entitlement:
        ...


class EntitlementReader:
    """Answers entitlement questions, failing closed on storage errors."""

    def __init__(self, repository: EntitlementRepository) -> None:
        self._repository = repository

    def has_entitlement(self, user_id: str, product_key: ProductKey) -> bool:
        """Return ``True`` iff at least one active grant exists."""

        try:
            rows = self._repository.list_active(user_id, product_key, limit=1)
        except Exception:
            logger.exception(
                "Entitlement check failed user=%s product=%s", user_id, product_key.value
            )
            return False
        return len(rows) > 0

    def active_plan(self, user_id: str, product_key: ProductKey) -> Optional[Plan]:
        """Return the preferred active plan, or ``None`` when nothing is active."""

        try:
            rows = self._repository.list_active(user_id, product_key)
        except Exception:
            logger.exception(
                "Entitlement plan lookup failed user=%s product=%s", user_id, product_key.value
            )
            return None

        active_plans = {row.plan for row in rows if row.is_active}
        for plan in PLAN_PREFERENCE:
            if plan in active_plans:
                return plan
        return None
