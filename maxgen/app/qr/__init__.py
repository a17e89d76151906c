"""QR Studio project storage."""

from .repository import PostgresQrProjectRepository, QrProjectRepository

__all__ = ["PostgresQrProjectRepository", "QrProjectRepository"]
