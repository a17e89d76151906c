"""Response envelopes shared by several routers."""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class OkResponse(BaseModel):
    ok: bool = True


class MutationResponse(OkResponse):
    id: Optional[str] = None


def require_text(value: Optional[str], message: str) -> str:
    """Return ``value`` stripped, raising ``ValueError(message)`` when blank."""

    if not isinstance(value, str) or not value.strip():
        raise ValueError(message)
    return value.strip()
