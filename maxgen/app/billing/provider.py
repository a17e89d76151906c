"""Payment provider integration backed by the Stripe SDK."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence

import stripe

from .models import CheckoutMode, ProviderSubscription


class PaymentProviderError(Exception):
    """Raised when a provider API call fails."""


class WebhookVerificationError(Exception):
    """Raised when a webhook payload cannot be authenticated or parsed."""


class PaymentProvider(Protocol):
    """External payment processor integration."""

    def create_customer(self, *, user_id: str, email: Optional[str]) -> str:
        ...

    def create_checkout_session(
        self,
        *,
        customer_id: str,
        mode: CheckoutMode,
        price_ids: Sequence[str],
        success_url: str,
        cancel_url: str,
        metadata: Mapping[str, str],
        idempotency_key: Optional[str] = None,
    ) -> str:
        """Create a checkout session and return its redirect URL."""

    def create_portal_session(self, *, customer_id: str, return_url: str) -> str:
        """Create a billing portal session and return its redirect URL."""

    def verify_event(self, payload: bytes, signature: str) -> Dict[str, Any]:
        """Authenticate a webhook payload and return the decoded event."""

    def list_line_item_price_ids(self, session_id: str) -> List[str]:
        ...

    def retrieve_subscription(self, subscription_id: str) -> ProviderSubscription:
        ...


def _field(obj: Any, name: str) -> Any:
    if obj is None:
        return None
    try:
        return obj[name]
    except (KeyError, TypeError, AttributeError):
        return None


def _from_timestamp(value: Any) -> Optional[datetime]:
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    return None


class StripePaymentProvider:
    """Stripe implementation of :class:`PaymentProvider`."""

    def __init__(self, secret_key: str, webhook_secret: str, *, max_network_retries: int = 2) -> None:
        if not secret_key:
            raise PaymentProviderError("STRIPE_SECRET_KEY not configured")
        if not webhook_secret:
            raise PaymentProviderError("STRIPE_WEBHOOK_SECRET not configured")
        self._webhook_secret = webhook_secret
        stripe.api_key = secret_key
        stripe.max_network_retries = max_network_retries

    def create_customer(self, *, user_id: str, email: Optional[str]) -> str:
        params: Dict[str, Any] = {"metadata": {"supabase_user_id": user_id}}
        if email:
            params["email"] = email
        try:
            customer = stripe.Customer.create(**params)
        except stripe.StripeError as exc:
            raise PaymentProviderError(f"Stripe customer creation failed: {exc}") from exc
        return customer.id

    def create_checkout_session(
        self,
        *,
        customer_id: str,
        mode: CheckoutMode,
        price_ids: Sequence[str],
        success_url: str,
        cancel_url: str,
        metadata: Mapping[str, str],
        idempotency_key: Optional[str] = None,
    ) -> str:
        params: Dict[str, Any] = {
            "mode": mode.value,
            "customer": customer_id,
            "line_items": [{"price": price_id, "quantity": 1} for price_id in price_ids],
            "success_url": success_url,
            "cancel_url": cancel_url,
            "metadata": dict(metadata),
        }
        if idempotency_key:
            params["idempotency_key"] = idempotency_key
        try:
            session = stripe.checkout.Session.create(**params)
        except stripe.StripeError as exc:
            raise PaymentProviderError(f"Stripe checkout session creation failed: {exc}") from exc
        return session.url

    def create_portal_session(self, *, customer_id: str, return_url: str) -> str:
        try:
            session = stripe.billing_portal.Session.create(customer=customer_id, return_url=return_url)
        except stripe.StripeError as exc:
            raise PaymentProviderError(f"Stripe portal session creation failed: {exc}") from exc
        return session.url

    def verify_event(self, payload: bytes, signature: str) -> Dict[str, Any]:
        try:
            event = stripe.Webhook.construct_event(payload, signature, self._webhook_secret)
        except ValueError as exc:
            raise WebhookVerificationError(f"Invalid payload: {exc}") from exc
        except stripe.SignatureVerificationError as exc:
            raise WebhookVerificationError(f"Invalid signature: {exc}") from exc
        return event.to_dict()

    def list_line_item_price_ids(self, session_id: str) -> List[str]:
        try:
            items = stripe.checkout.Session.list_line_items(session_id, limit=100)
            price_ids = []
            for item in items.auto_paging_iter():
                price_id = _field(_field(item, "price"), "id")
                if price_id:
                    price_ids.append(str(price_id))
        except stripe.StripeError as exc:
            raise PaymentProviderError(f"Stripe line item lookup failed: {exc}") from exc
        return price_ids

    def retrieve_subscription(self, subscription_id: str) -> ProviderSubscription:
        try:
            subscription = stripe.Subscription.retrieve(subscription_id, expand=["items.data.price"])
        except stripe.StripeError as exc:
            raise PaymentProviderError(f"Stripe subscription lookup failed: {exc}") from exc

        items = _field(_field(subscription, "items"), "data") or []
        price_ids = []
        period_end = _from_timestamp(_field(subscription, "current_period_end"))
        for item in items:
            price_id = _field(_field(item, "price"), "id")
            if price_id:
                price_ids.append(str(price_id))
            # Newer API versions report the billing period per item.
            if period_end is None:
                period_end = _from_timestamp(_field(item, "current_period_end"))

        return ProviderSubscription(
            id=str(_field(subscription, "id") or subscription_id),
            status=str(_field(subscription, "status") or ""),
            current_period_end=period_end,
            price_ids=tuple(price_ids),
        )


__all__ = [
    "PaymentProvider",
    "PaymentProviderError",
    "StripePaymentProvider",
    "WebhookVerificationError",
]
