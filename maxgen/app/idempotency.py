"""Derived identifiers for caller-supplied idempotency tokens."""
from __future__ import annotations

from typing import Optional


def derive_idempotency_key(scope: str, token: Optional[str]) -> Optional[str]:
    """Return ``"<scope>:<token>"`` or ``None`` when no usable token was sent.

    The same token always derives the same identifier, so a replayed request
    collides with the first one on the column or provider key it is stored in.
    """

    if token is None:
        return None
    cleaned = token.strip()
    if not cleaned:
        return None
    return f"{scope}:{cleaned}"
