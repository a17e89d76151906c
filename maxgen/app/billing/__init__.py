"""Stripe checkout, billing portal, and webhook reconciliation."""

from .checkout import plan_presence_checkout, plan_qr_print_pack_checkout, plan_qr_studio_checkout
from .models import (
    CheckoutMode,
    CheckoutPlan,
    ProviderSubscription,
    StripeEventType,
    map_subscription_status,
)
from .provider import (
    PaymentProvider,
    PaymentProviderError,
    StripePaymentProvider,
    WebhookVerificationError,
)
from .repository import PostgresBillingRepository
from .service import PORTAL_RETURN_PATH, BillingRepository, BillingService

__all__ = [
    "BillingRepository",
    "BillingService",
    "CheckoutMode",
    "CheckoutPlan",
    "PORTAL_RETURN_PATH",
    "PaymentProvider",
    "PaymentProviderError",
    "PostgresBillingRepository",
    "ProviderSubscription",
    "StripeEventType",
    "StripePaymentProvider",
    "WebhookVerificationError",
    "map_subscription_status",
    "plan_presence_checkout",
    "plan_qr_print_pack_checkout",
    "plan_qr_studio_checkout",
]
