"""Reverse lookup from Stripe price identifiers to products and plans."""
from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional

from .models import Plan, ProductKey, ResolvedPrice
from .registry import PriceRegistry


class PriceConflictError(ValueError):
    """Raised when one price identifier is configured for two products or plans."""


class PriceResolver:
    """Read-only price table built once from a :class:`PriceRegistry`.

    Lookups are pure: identifiers issued by the registry always resolve to the
    same pair, anything else resolves to ``None``. Product or plan is never
    inferred from how an identifier is spelled.
    """

    def __init__(self, registry: PriceRegistry) -> None:
        table: Dict[str, ResolvedPrice] = {}
        sources: Dict[str, str] = {}
        for entry in registry.entries():
            resolved = ResolvedPrice(product_key=entry.product_key, plan=entry.plan)
            existing = table.get(entry.price_id)
            if existing is not None and existing != resolved:
                raise PriceConflictError(
                    f"Price {entry.price_id} is configured by both {sources[entry.price_id]}"
                    f" and {entry.env_var}"
                )
            table[entry.price_id] = resolved
            sources.setdefault(entry.price_id, entry.env_var)
        self._table: Mapping[str, ResolvedPrice] = MappingProxyType(table)

    def resolve(self, price_id: Optional[str]) -> Optional[ResolvedPrice]:
        if not price_id:
            return None
        return self._table.get(price_id)

    def resolve_product(self, price_id: Optional[str]) -> Optional[ProductKey]:
        resolved = self.resolve(price_id)
        return resolved.product_key if resolved else None

    def resolve_plan(self, price_id: Optional[str]) -> Optional[Plan]:
        resolved = self.resolve(price_id)
        return resolved.plan if resolved else None

    def __contains__(self, price_id: object) -> bool:
        return price_id in self._table

    def __iter__(self) -> Iterator[str]:
        return iter(self._table)

    def __len__(self) -> int:
        return len(self._table)
