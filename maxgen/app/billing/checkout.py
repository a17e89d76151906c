"""Maps a checkout selection onto Stripe mode and line items."""
from __future__ import annotations

from ..pricing.models import Plan, PresenceTier, ProductKey
from ..pricing.registry import PriceRegistry
from .models import CheckoutMode, CheckoutPlan


def plan_presence_checkout(
    registry: PriceRegistry,
    tier: PresenceTier,
    *,
    with_monthly: bool = False,
) -> CheckoutPlan:
    """Presence always charges the setup fee; SEO always adds the monthly plan."""

    onetime = registry.presence_price(tier, Plan.ONETIME)
    if tier == PresenceTier.SEO or with_monthly:
        return CheckoutPlan(
            mode=CheckoutMode.SUBSCRIPTION,
            price_ids=(onetime, registry.presence_price(tier, Plan.MONTHLY)),
            product_key=tier.product_key,
            plan=Plan.MONTHLY,
        )
    return CheckoutPlan(
        mode=CheckoutMode.PAYMENT,
        price_ids=(onetime,),
        product_key=tier.product_key,
        plan=Plan.ONETIME,
    )


def plan_qr_studio_checkout(registry: PriceRegistry, plan: Plan) -> CheckoutPlan:
    mode = CheckoutMode.SUBSCRIPTION if plan == Plan.MONTHLY else CheckoutMode.PAYMENT
    return CheckoutPlan(
        mode=mode,
        price_ids=(registry.qr_studio_price(plan),),
        product_key=ProductKey.QR_STUDIO,
        plan=plan,
    )


def plan_qr_print_pack_checkout(registry: PriceRegistry) -> CheckoutPlan:
    return CheckoutPlan(
        mode=CheckoutMode.PAYMENT,
        price_ids=(registry.qr_print_pack_price(),),
        product_key=ProductKey.QR_PRINT_PACK,
        plan=Plan.ONETIME,
    )
