"""Persistence for Stripe customers and paid presence orders."""
from __future__ import annotations

from typing import Optional

import psycopg2.extras

from ...db import PostgresRepository
from ..ops.constants import PresenceOrderStatus
from ..pricing.models import PresenceTier


class PostgresBillingRepository(PostgresRepository):
    """Concrete repository for the ``stripe_customers`` and ``presence_orders`` tables."""

    def get_customer_id(self, user_id: str) -> Optional[str]:
        with self._cursor() as cursor:
            cursor.execute(
                "SELECT stripe_customer_id FROM stripe_customers WHERE user_id = %s LIMIT 1",
                (user_id,),
            )
            row = cursor.fetchone()
        return row["stripe_customer_id"] if row else None

    def save_customer(self, user_id: str, customer_id: str) -> None:
        with self._cursor() as cursor:
            cursor.execute(
                "INSERT INTO stripe_customers (user_id, stripe_customer_id) VALUES (%s, %s)",
                (user_id, customer_id),
            )

    def get_user_id_for_customer(self, customer_id: str) -> Optional[str]:
        with self._cursor() as cursor:
            cursor.execute(
                "SELECT user_id FROM stripe_customers WHERE stripe_customer_id = %s LIMIT 1",
                (customer_id,),
            )
            row = cursor.fetchone()
        return str(row["user_id"]) if row else None

    def upsert_presence_order(
        self,
        *,
        user_id: str,
        tier: PresenceTier,
        checkout_session_id: str,
    ) -> None:
        """Create the paid order once per checkout session."""

        with self._cursor() as cursor:
            cursor.execute(
                """
                INSERT INTO presence_orders (
                    user_id, package_key, status, onboarding,
                    stripe_checkout_session_id, updated_at
                )
                VALUES (%(user_id)s, %(package_key)s, %(status)s, %(onboarding)s,
                        %(checkout_session_id)s, NOW())
                ON CONFLICT (stripe_checkout_session_id) DO UPDATE SET
                    user_id = EXCLUDED.user_id,
                    package_key = EXCLUDED.package_key,
                    status = EXCLUDED.status,
                    onboarding = EXCLUDED.onboarding,
                    updated_at = NOW()
                """,
                {
                    "user_id": user_id,
                    "package_key": tier.value,
                    "status": PresenceOrderStatus.PAID.value,
                    "onboarding": psycopg2.extras.Json({}),
                    "checkout_session_id": checkout_session_id,
                },
            )


__all__ = ["PostgresBillingRepository"]
