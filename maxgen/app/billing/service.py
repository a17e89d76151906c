"""Core service coordinating checkout, portal, and webhook reconciliation."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Protocol

from ..auth.models import AuthenticatedUser
from ..entitlements.models import Entitlement, EntitlementStatus
from ..entitlements.service import EntitlementRepository
from ..idempotency import derive_idempotency_key
from ..pricing.models import PRESENCE_TIER_BY_PRODUCT, Plan, PresenceTier, ResolvedPrice
from ..pricing.resolver import PriceResolver
from .models import CheckoutPlan, StripeEventType, map_subscription_status
from .provider import PaymentProvider

logger = logging.getLogger("billing")

PORTAL_RETURN_PATH = "/qr-studio/dashboard"


class BillingRepository(Protocol):
    """Persistence operations required by the billing service."""

    def get_customer_id(self, user_id: str) -> Optional[str]:
        ...

    def save_customer(self, user_id: str, customer_id: str) -> None:
        ...

    def get_user_id_for_customer(self, customer_id: str) -> Optional[str]:
        ...

    def upsert_presence_order(
        self,
        *,
        user_id: str,
        tier: PresenceTier,
        checkout_session_id: str,
    ) -> None:
        ...


def _str_or_none(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


@dataclass
class BillingService:
    """Opens Stripe sessions and folds webhook events into entitlements."""

    repository: BillingRepository
    entitlements: EntitlementRepository
    provider: PaymentProvider
    resolver: PriceResolver
    site_url: str

    def ensure_customer(self, user: AuthenticatedUser) -> str:
        """Return the user's Stripe customer, creating and recording it on first use."""

        existing = self.repository.get_customer_id(user.id)
        if existing:
            return existing

        customer_id = self.provider.create_customer(user_id=user.id, email=user.email)
        self.repository.save_customer(user.id, customer_id)
        logger.info("Created Stripe customer %s for user=%s", customer_id, user.id)
        return customer_id

    def create_checkout_session(
        self,
        user: AuthenticatedUser,
        plan: CheckoutPlan,
        *,
        idempotency_token: Optional[str] = None,
    ) -> str:
        customer_id = self.ensure_customer(user)
        return self.provider.create_checkout_session(
            customer_id=customer_id,
            mode=plan.mode,
            price_ids=plan.price_ids,
            success_url=f"{self.site_url}/billing/success?session_id={{CHECKOUT_SESSION_ID}}",
            cancel_url=f"{self.site_url}/billing/cancel",
            metadata=plan.metadata(user.id),
            idempotency_key=derive_idempotency_key(f"checkout:{user.id}", idempotency_token),
        )

    def create_portal_session(self, user: AuthenticatedUser) -> str:
        customer_id = self.ensure_customer(user)
        return self.provider.create_portal_session(
            customer_id=customer_id,
            return_url=f"{self.site_url}{PORTAL_RETURN_PATH}",
        )

    def handle_event(self, event: Mapping[str, Any]) -> None:
        """Apply one verified webhook event; unhandled types are ignored."""

        event_type = event.get("type")
        data = event.get("data") or {}
        payload = data.get("object") if isinstance(data, Mapping) else None
        if not isinstance(payload, Mapping):
            logger.warning("Webhook event %s carried no object", event.get("id"))
            return

        if event_type == StripeEventType.CHECKOUT_SESSION_COMPLETED.value:
            self._handle_checkout_completed(payload, event_type)
        elif event_type in {
            StripeEventType.SUBSCRIPTION_UPDATED.value,
            StripeEventType.SUBSCRIPTION_DELETED.value,
        }:
            self._handle_subscription_change(payload, event_type)
        else:
            logger.debug("Ignoring webhook event type %s", event_type)

    def _resolve_user(self, payload: Mapping[str, Any], customer_id: str) -> Optional[str]:
        metadata = payload.get("metadata") or {}
        user_id = _str_or_none(metadata.get("supabase_user_id")) if isinstance(metadata, Mapping) else None
        return user_id or self.repository.get_user_id_for_customer(customer_id)

    def _handle_checkout_completed(self, session: Mapping[str, Any], event_type: str) -> None:
        session_id = _str_or_none(session.get("id"))
        customer_id = _str_or_none(session.get("customer"))
        if not session_id or not customer_id:
            logger.warning("Checkout session missing id or customer; skipping")
            return

        user_id = self._resolve_user(session, customer_id)
        if not user_id:
            logger.warning("No user found for customer %s; skipping session %s", customer_id, session_id)
            return

        subscription_id = _str_or_none(session.get("subscription"))
        payment_intent_id = _str_or_none(session.get("payment_intent"))
        presence_tier: Optional[PresenceTier] = None

        for price_id in self.provider.list_line_item_price_ids(session_id):
            resolved = self.resolver.resolve(price_id)
            if resolved is None:
                logger.warning("Unknown price %s on session %s; skipping", price_id, session_id)
                continue

            if presence_tier is None:
                presence_tier = PRESENCE_TIER_BY_PRODUCT.get(resolved.product_key)

            is_monthly = resolved.plan == Plan.MONTHLY
            self.entitlements.upsert(
                Entitlement(
                    user_id=user_id,
                    product_key=resolved.product_key,
                    plan=resolved.plan,
                    status=EntitlementStatus.ACTIVE,
                    stripe_customer_id=customer_id,
                    stripe_subscription_id=subscription_id if is_monthly else None,
                    stripe_payment_intent_id=None if is_monthly else payment_intent_id,
                    metadata=self._grant_metadata(event_type, price_id, checkout_session_id=session_id),
                )
            )

        if presence_tier is not None:
            self.repository.upsert_presence_order(
                user_id=user_id,
                tier=presence_tier,
                checkout_session_id=session_id,
            )

    def _handle_subscription_change(self, payload: Mapping[str, Any], event_type: str) -> None:
        subscription_id = _str_or_none(payload.get("id"))
        customer_id = _str_or_none(payload.get("customer"))
        if not subscription_id or not customer_id:
            logger.warning("Subscription event missing id or customer; skipping")
            return

        user_id = self._resolve_user(payload, customer_id)
        if not user_id:
            logger.warning("No user found for customer %s; skipping subscription %s", customer_id, subscription_id)
            return

        subscription = self.provider.retrieve_subscription(subscription_id)
        status = map_subscription_status(subscription.status, event_type)

        for price_id in subscription.price_ids:
            resolved: Optional[ResolvedPrice] = self.resolver.resolve(price_id)
            if resolved is None:
                logger.warning("Unknown price %s on subscription %s; skipping", price_id, subscription_id)
                continue
            if resolved.plan != Plan.MONTHLY:
                continue

            self.entitlements.upsert(
                Entitlement(
                    user_id=user_id,
                    product_key=resolved.product_key,
                    plan=Plan.MONTHLY,
                    status=status,
                    stripe_customer_id=customer_id,
                    stripe_subscription_id=subscription.id,
                    expires_at=subscription.current_period_end,
                    metadata=self._grant_metadata(event_type, price_id),
                )
            )

    @staticmethod
    def _grant_metadata(event_type: str, price_id: str, **extra: str) -> Dict[str, str]:
        return {"source": "stripe_webhook", "event": event_type, "price_id": price_id, **extra}


__all__ = ["BillingRepository", "BillingService", "PORTAL_RETURN_PATH"]
