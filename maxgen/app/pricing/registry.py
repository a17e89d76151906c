"""Single source of truth for Stripe price identifiers.

The registry is read once from the environment when the application starts.
Every price listed in :data:`PRICE_SLOTS` is required; a missing one aborts
startup with :class:`~maxgen.config.MissingConfigurationError` naming the
variable.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

from ...config import require_env
from .models import Plan, PresenceTier, ProductKey


@dataclass(frozen=True)
class PriceSlot:
    """Binds an environment variable to the (product, plan) it configures."""

    env_var: str
    product_key: ProductKey
    plan: Plan


@dataclass(frozen=True)
class PriceEntry:
    """A concrete price identifier issued by the registry."""

    price_id: str
    product_key: ProductKey
    plan: Plan
    env_var: str


PRICE_SLOTS: Tuple[PriceSlot, ...] = (
    PriceSlot("PRICE_PRESENCE_BASIC_ONETIME", ProductKey.PRESENCE_BASIC, Plan.ONETIME),
    PriceSlot("PRICE_PRESENCE_BASIC_MONTHLY", ProductKey.PRESENCE_BASIC, Plan.MONTHLY),
    PriceSlot("PRICE_PRESENCE_BOOKING_ONETIME", ProductKey.PRESENCE_BOOKING, Plan.ONETIME),
    PriceSlot("PRICE_PRESENCE_BOOKING_MONTHLY", ProductKey.PRESENCE_BOOKING, Plan.MONTHLY),
    PriceSlot("PRICE_PRESENCE_SEO_ONETIME", ProductKey.PRESENCE_SEO, Plan.ONETIME),
    PriceSlot("PRICE_PRESENCE_SEO_MONTHLY", ProductKey.PRESENCE_SEO, Plan.MONTHLY),
    PriceSlot("PRICE_QR_STUDIO_MONTHLY", ProductKey.QR_STUDIO, Plan.MONTHLY),
    PriceSlot("PRICE_QR_STUDIO_ONETIME", ProductKey.QR_STUDIO, Plan.ONETIME),
    PriceSlot("PRICE_QR_PRINT_PACK_ONETIME", ProductKey.QR_PRINT_PACK, Plan.ONETIME),
    PriceSlot("PRICE_EXPERIMENTAL_EUR1_ONETIME", ProductKey.EXPERIMENTAL_EUR1, Plan.ONETIME),
)


@dataclass(frozen=True)
class PlanPrices:
    """Price identifiers for one product, keyed by plan."""

    onetime: Optional[str] = None
    monthly: Optional[str] = None

    def for_plan(self, plan: Plan) -> str:
        value = getattr(self, plan.value)
        if not value:
            raise KeyError(f"No {plan.value} price configured")
        return value


@dataclass(frozen=True)
class PresencePrices:
    basic: PlanPrices
    booking: PlanPrices
    seo: PlanPrices

    def for_tier(self, tier: PresenceTier) -> PlanPrices:
        return getattr(self, tier.value)


@dataclass(frozen=True)
class QrPrices:
    studio: PlanPrices
    print_pack: PlanPrices


@dataclass(frozen=True)
class ExperimentalPrices:
    eur1: PlanPrices


@dataclass(frozen=True)
class PriceRegistry:
    """Immutable price identifiers grouped by product family and plan."""

    presence: PresencePrices
    qr: QrPrices
    experimental: ExperimentalPrices

    def presence_price(self, tier: PresenceTier, plan: Plan) -> str:
        return self.presence.for_tier(tier).for_plan(plan)

    def qr_studio_price(self, plan: Plan) -> str:
        return self.qr.studio.for_plan(plan)

    def qr_print_pack_price(self) -> str:
        return self.qr.print_pack.for_plan(Plan.ONETIME)

    def experimental_eur1_price(self) -> str:
        return self.experimental.eur1.for_plan(Plan.ONETIME)

    def price_for(self, product_key: ProductKey, plan: Plan) -> str:
        for entry in self.entries():
            if entry.product_key == product_key and entry.plan == plan:
                return entry.price_id
        raise KeyError(f"No price configured for {product_key.value}/{plan.value}")

    def entries(self) -> Tuple[PriceEntry, ...]:
        """Every configured identifier with the slot it was loaded from."""

        products = {
            ProductKey.PRESENCE_BASIC: self.presence.basic,
            ProductKey.PRESENCE_BOOKING: self.presence.booking,
            ProductKey.PRESENCE_SEO: self.presence.seo,
            ProductKey.QR_STUDIO: self.qr.studio,
            ProductKey.QR_PRINT_PACK: self.qr.print_pack,
            ProductKey.EXPERIMENTAL_EUR1: self.experimental.eur1,
        }
        entries = []
        for slot in PRICE_SLOTS:
            price_id = getattr(products[slot.product_key], slot.plan.value)
            if price_id:
                entries.append(
                    PriceEntry(
                        price_id=price_id,
                        product_key=slot.product_key,
                        plan=slot.plan,
                        env_var=slot.env_var,
                    )
                )
        return tuple(entries)


def load_price_registry(env: Optional[Mapping[str, str]] = None) -> PriceRegistry:
    """Load every required price identifier, failing fast on absent values."""

    env_mapping = os.environ if env is None else env
    values = require_env(env_mapping, [slot.env_var for slot in PRICE_SLOTS], scope="stripe-prices")

    return PriceRegistry(
        presence=PresencePrices(
            basic=PlanPrices(
                onetime=values["PRICE_PRESENCE_BASIC_ONETIME"],
                monthly=values["PRICE_PRESENCE_BASIC_MONTHLY"],
            ),
            booking=PlanPrices(
                onetime=values["PRICE_PRESENCE_BOOKING_ONETIME"],
                monthly=values["PRICE_PRESENCE_BOOKING_MONTHLY"],
            ),
            seo=PlanPrices(
                onetime=values["PRICE_PRESENCE_SEO_ONETIME"],
                monthly=values["PRICE_PRESENCE_SEO_MONTHLY"],
            ),
        ),
        qr=QrPrices(
            studio=PlanPrices(
                onetime=values["PRICE_QR_STUDIO_ONETIME"],
                monthly=values["PRICE_QR_STUDIO_MONTHLY"],
            ),
            print_pack=PlanPrices(onetime=values["PRICE_QR_PRINT_PACK_ONETIME"]),
        ),
        experimental=ExperimentalPrices(
            eur1=PlanPrices(onetime=values["PRICE_EXPERIMENTAL_EUR1_ONETIME"]),
        ),
    )
