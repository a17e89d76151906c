"""Persistence layer for entitlement rows."""
from __future__ import annotations

from typing import Optional, Sequence

import psycopg2.extras

from ...db import PostgresRepository
from ..pricing.models import Plan, ProductKey
from .models import Entitlement, EntitlementStatus


def _row_to_entitlement(row: dict) -> Entitlement:
    return Entitlement(
        user_id=str(row["user_id"]),
        product_key=ProductKey(row["product_key"]),
        plan=Plan(row["plan"]),
        status=EntitlementStatus(row["status"]),
        stripe_customer_id=row.get("stripe_customer_id"),
        stripe_subscription_id=row.get("stripe_subscription_id"),
        stripe_payment_intent_id=row.get("stripe_payment_intent_id"),
        expires_at=row.get("expires_at"),
        metadata={str(k): str(v) for k, v in (row.get("metadata") or {}).items()},
        updated_at=row["updated_at"],
    )


class PostgresEntitlementRepository(PostgresRepository):
    """Entitlement storage backed by the ``entitlements`` table."""

    def list_active(
        self,
        user_id: str,
        product_key: ProductKey,
        *,
        limit: Optional[int] = None,
    ) -> Sequence[Entitlement]:
        with self._cursor() as cursor:
            cursor.execute(
                """
                SELECT *
                FROM entitlements
                WHERE user_id = %(user_id)s
                  AND product_key = %(product_key)s
                  AND status = %(status)s
                ORDER BY updated_at DESC
                LIMIT %(limit)s
                """,
                {
                    "user_id": user_id,
                    "product_key": product_key.value,
                    "status": EntitlementStatus.ACTIVE.value,
                    "limit": limit,
                },
            )
            rows = cursor.fetchall()
        return [_row_to_entitlement(row) for row in rows]

    def upsert(self, entitlement: Entitlement) -> Entitlement:
        with self._cursor() as cursor:
            cursor.execute(
                """
                INSERT INTO entitlements (
                    user_id,
                    product_key,
                    plan,
                    status,
                    stripe_customer_id,
                    stripe_subscription_id,
                    stripe_payment_intent_id,
                    expires_at,
                    metadata,
                    updated_at
                )
                VALUES (%(user_id)s, %(product_key)s, %(plan)s, %(status)s,
                        %(stripe_customer_id)s, %(stripe_subscription_id)s,
                        %(stripe_payment_intent_id)s, %(expires_at)s, %(metadata)s,
                        %(updated_at)s)
                ON CONFLICT (user_id, product_key, plan) DO UPDATE SET
                    status = EXCLUDED.status,
                    stripe_customer_id = EXCLUDED.stripe_customer_id,
                    stripe_subscription_id = EXCLUDED.stripe_subscription_id,
                    stripe_payment_intent_id = EXCLUDED.stripe_payment_intent_id,
                    expires_at = EXCLUDED.expires_at,
                    metadata = EXCLUDED.metadata,
                    updated_at = EXCLUDED.updated_at
                RETURNING *
                """,
                {
                    "user_id": entitlement.user_id,
                    "product_key": entitlement.product_key.value,
                    "plan": entitlement.plan.value,
                    "status": entitlement.status.value,
                    "stripe_customer_id": entitlement.stripe_customer_id,
                    "stripe_subscription_id": entitlement.stripe_subscription_id,
                    "stripe_payment_intent_id": entitlement.stripe_payment_intent_id,
                    "expires_at": entitlement.expires_at,
                    "metadata": psycopg2.extras.Json(entitlement.metadata),
                    "updated_at": entitlement.updated_at,
                },
            )
            row = cursor.fetchone()
        if not row:
            raise RuntimeError("Failed to persist entitlement")
        return _row_to_entitlement(row)


__all__ = ["PostgresEntitlementRepository"]
