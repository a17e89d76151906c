"""Persistence for QR Studio projects."""
from __future__ import annotations

from typing import Optional, Protocol

from ...db import PostgresRepository


class QrProjectRepository(Protocol):
    def get_owner_id(self, project_id: str) -> Optional[str]:
        """Return the owning user id, or ``None`` when the project does not exist."""

    def delete_project(self, project_id: str) -> None:
        ...


class PostgresQrProjectRepository(PostgresRepository):
    def get_owner_id(self, project_id: str) -> Optional[str]:
        with self._cursor() as cursor:
            cursor.execute(
                "SELECT user_id FROM qr_projects WHERE id = %s LIMIT 1",
                (project_id,),
            )
            row = cursor.fetchone()
        return str(row["user_id"]) if row else None

    def delete_project(self, project_id: str) -> None:
        with self._cursor() as cursor:
            cursor.execute("DELETE FROM qr_projects WHERE id = %s", (project_id,))


__all__ = ["PostgresQrProjectRepository", "QrProjectRepository"]
