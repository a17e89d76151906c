"""Price registry and price-to-product resolution."""

from .models import PRESENCE_TIER_BY_PRODUCT, Plan, PresenceTier, ProductKey, ResolvedPrice
from .registry import (
    PRICE_SLOTS,
    PlanPrices,
    PriceEntry,
    PriceRegistry,
    PriceSlot,
    load_price_registry,
)
from .resolver import PriceConflictError, PriceResolver

__all__ = [
    "PRESENCE_TIER_BY_PRODUCT",
    "PRICE_SLOTS",
    "Plan",
    "PlanPrices",
    "PresenceTier",
    "PriceConflictError",
    "PriceEntry",
    "PriceRegistry",
    "PriceResolver",
    "PriceSlot",
    "ProductKey",
    "ResolvedPrice",
    "load_price_registry",
]
