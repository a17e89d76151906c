"""Persistence for ops settings and operational orders."""
from __future__ import annotations

from typing import Dict, List, Optional, Protocol

from ...db import PostgresRepository
from .constants import BankAccountStatus, PresenceOrderStatus
from .models import (
    BankAccount,
    CalendarItem,
    LedgerEntry,
    ManualSale,
    ManualSaleReceipt,
    ReserveBucket,
    TaxProfile,
)


class OpsRepository(Protocol):
    """Mutations available to the admin ops handlers.

    Update methods return ``None``/``False`` when the targeted row does not exist.
    """

    def update_presence_order_status(self, order_id: str, status: PresenceOrderStatus) -> bool:
        ...

    def create_bank_account(self, account: BankAccount) -> str:
        ...

    def update_bank_account_status(self, account_id: str, status: BankAccountStatus) -> bool:
        ...

    def save_calendar_item(self, item: CalendarItem) -> Optional[str]:
        ...

    def calendar_enums(self) -> Dict[str, List[str]]:
        ...

    def save_reserve_bucket(self, bucket: ReserveBucket) -> Optional[str]:
        ...

    def upsert_tax_profile(self, profile: TaxProfile) -> None:
        ...

    def record_manual_sale(self, ledger_entry: LedgerEntry, sale: ManualSale) -> ManualSaleReceipt:
        ...


def _as_list(value: object) -> List[str]:
    if isinstance(value, list):
        return [str(item) for item in value]
    return []


class PostgresOpsRepository(PostgresRepository):
    """Concrete repository writing the ``ops_*`` and ``presence_orders`` tables."""

    def update_presence_order_status(self, order_id: str, status: PresenceOrderStatus) -> bool:
        with self._cursor() as cursor:
            cursor.execute(
                """
                UPDATE presence_orders
                SET status = %s, updated_at = NOW()
                WHERE id = %s
                """,
                (status.value, order_id),
            )
            return cursor.rowcount > 0

    def create_bank_account(self, account: BankAccount) -> str:
        with self._cursor() as cursor:
            cursor.execute(
                """
                INSERT INTO ops_bank_accounts (
                    name, currency, status, opening_balance_amount,
                    opening_balance_date, created_by
                )
                VALUES (%(name)s, %(currency)s, %(status)s, %(opening_balance_amount)s,
                        %(opening_balance_date)s, %(created_by)s)
                RETURNING id
                """,
                account.model_dump(mode="json"),
            )
            row = cursor.fetchone()
        return str(row["id"])

    def update_bank_account_status(self, account_id: str, status: BankAccountStatus) -> bool:
        with self._cursor() as cursor:
            cursor.execute(
                "UPDATE ops_bank_accounts SET status = %s WHERE id = %s",
                (status.value, account_id),
            )
            return cursor.rowcount > 0

    def save_calendar_item(self, item: CalendarItem) -> Optional[str]:
        params = item.model_dump(mode="json")
        with self._cursor() as cursor:
            if item.id:
                cursor.execute(
                    """
                    UPDATE ops_regulatory_calendar
                    SET title = %(title)s,
                        category = %(category)s,
                        business_line = %(business_line)s,
                        due_date = %(due_date)s,
                        frequency = %(frequency)s,
                        amount_estimate = %(amount_estimate)s,
                        status = %(status)s,
                        notes = %(notes)s,
                        created_by = %(created_by)s
                    WHERE id = %(id)s
                    RETURNING id
                    """,
                    params,
                )
            else:
                cursor.execute(
                    """
                    INSERT INTO ops_regulatory_calendar (
                        title, category, business_line, due_date, frequency,
                        amount_estimate, status, notes, created_by
                    )
                    VALUES (%(title)s, %(category)s, %(business_line)s, %(due_date)s,
                            %(frequency)s, %(amount_estimate)s, %(status)s, %(notes)s,
                            %(created_by)s)
                    RETURNING id
                    """,
                    params,
                )
            row = cursor.fetchone()
        return str(row["id"]) if row else None

    def calendar_enums(self) -> Dict[str, List[str]]:
        with self._cursor() as cursor:
            cursor.execute("SELECT ops_calendar_enums() AS payload")
            row = cursor.fetchone()
        payload = (row or {}).get("payload") or {}
        return {
            "business_lines": _as_list(payload.get("business_lines")),
            "frequencies": _as_list(payload.get("frequencies")),
            "statuses": _as_list(payload.get("statuses")),
        }

    def save_reserve_bucket(self, bucket: ReserveBucket) -> Optional[str]:
        params = bucket.model_dump(mode="json")
        with self._cursor() as cursor:
            if bucket.id:
                cursor.execute(
                    """
                    UPDATE ops_reserve_buckets
                    SET name = %(name)s,
                        business_line = %(business_line)s,
                        kind = %(kind)s,
                        percentage = %(percentage)s,
                        fixed_amount = %(fixed_amount)s,
                        notes = %(notes)s,
                        created_by = %(created_by)s
                    WHERE id = %(id)s
                    RETURNING id
                    """,
                    params,
                )
            else:
                cursor.execute(
                    """
                    INSERT INTO ops_reserve_buckets (
                        name, business_line, kind, percentage, fixed_amount, notes, created_by
                    )
                    VALUES (%(name)s, %(business_line)s, %(kind)s, %(percentage)s,
                            %(fixed_amount)s, %(notes)s, %(created_by)s)
                    RETURNING id
                    """,
                    params,
                )
            row = cursor.fetchone()
        return str(row["id"]) if row else None

    def upsert_tax_profile(self, profile: TaxProfile) -> None:
        with self._cursor() as cursor:
            cursor.execute(
                """
                INSERT INTO ops_tax_profile (
                    business_line, vat_status, vat_filing_frequency,
                    vat_effective_from, corp_tax_rate, notes, updated_by
                )
                VALUES (%(business_line)s, %(vat_status)s, %(vat_filing_frequency)s,
                        %(vat_effective_from)s, %(corp_tax_rate)s, %(notes)s, %(updated_by)s)
                ON CONFLICT (business_line) DO UPDATE SET
                    vat_status = EXCLUDED.vat_status,
                    vat_filing_frequency = EXCLUDED.vat_filing_frequency,
                    vat_effective_from = EXCLUDED.vat_effective_from,
                    corp_tax_rate = EXCLUDED.corp_tax_rate,
                    notes = EXCLUDED.notes,
                    updated_by = EXCLUDED.updated_by
                """,
                profile.model_dump(mode="json"),
            )

    def record_manual_sale(self, ledger_entry: LedgerEntry, sale: ManualSale) -> ManualSaleReceipt:
        """Write the ledger entry and the linked sale row in one transaction."""

        with self._cursor() as cursor:
            cursor.execute(
                """
                INSERT INTO ops_ledger_entries (
                    effective_date, bank_account_id, amount, entry_type, category,
                    business_line, counterparty, payment_method, tags,
                    related_entity_type, related_entity_id, notes, created_by
                )
                VALUES (%(effective_date)s, %(bank_account_id)s, %(amount)s, %(entry_type)s,
                        %(category)s, %(business_line)s, %(counterparty)s, %(payment_method)s,
                        %(tags)s, %(related_entity_type)s, %(related_entity_id)s, %(notes)s,
                        %(created_by)s)
                RETURNING id
                """,
                ledger_entry.model_dump(mode="json"),
            )
            ledger_row = cursor.fetchone()
            ledger_entry_id = str(ledger_row["id"])

            # The day column is generated from sale_at and must not be written.
            cursor.execute(
                """
                INSERT INTO ops_manual_sales (
                    sale_at, business_line, bank_account_id, amount_cents, currency,
                    payment_method, notes, tags, created_by, ledger_entry_id
                )
                VALUES (%(sale_at)s, %(business_line)s, %(bank_account_id)s, %(amount_cents)s,
                        %(currency)s, %(payment_method)s, %(notes)s, %(tags)s, %(created_by)s,
                        %(ledger_entry_id)s)
                RETURNING id
                """,
                {**sale.model_dump(mode="json"), "ledger_entry_id": ledger_entry_id},
            )
            sale_row = cursor.fetchone()

        return ManualSaleReceipt(ledger_entry_id=ledger_entry_id, manual_sale_id=str(sale_row["id"]))


__all__ = ["OpsRepository", "PostgresOpsRepository"]
