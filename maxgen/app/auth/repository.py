"""Profile lookups used for role checks."""
from __future__ import annotations

import logging
from typing import Optional, Protocol

from ...db import PostgresRepository
from .models import UserRole

logger = logging.getLogger("auth")


class ProfileRepository(Protocol):
    """Read access to caller profiles."""

    def get_role(self, user_id: str) -> Optional[UserRole]:
        ...

    def is_super_admin(self, user_id: str) -> bool:
        ...


class PostgresProfileRepository(PostgresRepository):
    """Profiles stored in ``profiles`` and ``ops_super_admins``."""

    def get_role(self, user_id: str) -> Optional[UserRole]:
        with self._cursor() as cursor:
            cursor.execute(
                "SELECT role FROM profiles WHERE user_id = %s LIMIT 1",
                (user_id,),
            )
            row = cursor.fetchone()
        if not row or row.get("role") is None:
            return None
        try:
            return UserRole(row["role"])
        except ValueError:
            logger.warning("Unknown role %r on profile %s", row["role"], user_id)
            return None

    def is_super_admin(self, user_id: str) -> bool:
        with self._cursor() as cursor:
            cursor.execute(
                "SELECT 1 FROM ops_super_admins WHERE user_id = %s LIMIT 1",
                (user_id,),
            )
            row = cursor.fetchone()
        return row is not None


__all__ = ["PostgresProfileRepository", "ProfileRepository"]
