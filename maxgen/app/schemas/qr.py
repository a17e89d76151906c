"""API schemas for QR Studio endpoints."""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from ..pricing.models import Plan


class QrEntitlementResponse(BaseModel):
    active: bool
    plan: Optional[Plan] = None
