"""Identity models resolved from bearer credentials."""
from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class UserRole(str, Enum):
    """Roles stored on the ``profiles`` table."""

    USER = "user"
    B2B_PENDING = "b2b_pending"
    B2B_APPROVED = "b2b_approved"
    ADMIN = "admin"


class AuthenticatedUser(BaseModel):
    """Caller identity established from a verified access token."""

    id: str
    email: Optional[str] = None
    role: Optional[UserRole] = None

    model_config = ConfigDict(frozen=True)
