"""Domain models for product entitlements."""
from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..pricing.models import Plan, ProductKey


class EntitlementStatus(str, Enum):
    """Lifecycle state of a grant; transitions are driven by payment webhooks."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    CANCELED = "canceled"
    EXPIRED = "expired"


class Entitlement(BaseModel):
    """A record granting an account access to a product.

    Rows are unique on ``(user_id, product_key, plan)``.
    """

    user_id: str
    product_key: ProductKey
    plan: Plan
    status: EntitlementStatus
    stripe_customer_id: Optional[str] = None
    stripe_subscription_id: Optional[str] = None
    stripe_payment_intent_id: Optional[str] = None
    expires_at: Optional[datetime] = None
    metadata: Dict[str, str] = Field(default_factory=dict)
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = ConfigDict(frozen=True)

    @property
    def is_active(self) -> bool:
        return self.status == EntitlementStatus.ACTIVE
