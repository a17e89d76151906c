"""Enumerations describing purchasable products and billing cadences."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ProductKey(str, Enum):
    """Stable identifiers for purchasable capabilities."""

    PRESENCE_BASIC = "presence_basic"
    PRESENCE_BOOKING = "presence_booking"
    PRESENCE_SEO = "presence_seo"
    QR_STUDIO = "qr_studio"
    QR_PRINT_PACK = "qr_print_pack"
    EXPERIMENTAL_EUR1 = "experimental_eur1"


class Plan(str, Enum):
    """Billing cadence for a product."""

    MONTHLY = "monthly"
    ONETIME = "onetime"


class PresenceTier(str, Enum):
    """Online presence packages sold through checkout."""

    BASIC = "basic"
    BOOKING = "booking"
    SEO = "seo"

    @property
    def product_key(self) -> ProductKey:
        return _PRESENCE_PRODUCTS[self]


_PRESENCE_PRODUCTS = {
    PresenceTier.BASIC: ProductKey.PRESENCE_BASIC,
    PresenceTier.BOOKING: ProductKey.PRESENCE_BOOKING,
    PresenceTier.SEO: ProductKey.PRESENCE_SEO,
}

PRESENCE_TIER_BY_PRODUCT = {product: tier for tier, product in _PRESENCE_PRODUCTS.items()}


@dataclass(frozen=True)
class ResolvedPrice:
    """The (product, plan) pair a price identifier stands for."""

    product_key: ProductKey
    plan: Plan
