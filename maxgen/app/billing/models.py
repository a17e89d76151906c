"""Domain models for checkout and payment reconciliation."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Optional, Tuple

from ..entitlements.models import EntitlementStatus
from ..pricing.models import Plan, ProductKey


class CheckoutMode(str, Enum):
    PAYMENT = "payment"
    SUBSCRIPTION = "subscription"


class StripeEventType(str, Enum):
    """Webhook event types the reconciliation reacts to."""

    CHECKOUT_SESSION_COMPLETED = "checkout.session.completed"
    SUBSCRIPTION_UPDATED = "customer.subscription.updated"
    SUBSCRIPTION_DELETED = "customer.subscription.deleted"


@dataclass(frozen=True)
class CheckoutPlan:
    """What a checkout session sells: the mode, the prices, and the grant it implies."""

    mode: CheckoutMode
    price_ids: Tuple[str, ...]
    product_key: ProductKey
    plan: Plan

    def metadata(self, user_id: str) -> Dict[str, str]:
        return {
            "supabase_user_id": user_id,
            "product_key": self.product_key.value,
            "plan": self.plan.value,
        }


@dataclass(frozen=True)
class ProviderSubscription:
    """Subscription state as reported by the payment provider."""

    id: str
    status: str
    current_period_end: Optional[datetime] = None
    price_ids: Tuple[str, ...] = field(default_factory=tuple)


def map_subscription_status(provider_status: str, event_type: str) -> EntitlementStatus:
    """Translate a provider subscription status into an entitlement status."""

    if provider_status in {"active", "trialing"}:
        return EntitlementStatus.ACTIVE
    if provider_status == "canceled":
        return EntitlementStatus.CANCELED
    if event_type == StripeEventType.SUBSCRIPTION_DELETED.value:
        return EntitlementStatus.CANCELED
    return EntitlementStatus.INACTIVE
