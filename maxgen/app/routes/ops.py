"""Admin-only routes mutating ops settings and presence orders."""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, status

from ..auth.dependencies import require_admin, require_super_admin
from ..auth.models import AuthenticatedUser
from ..ops.repository import OpsRepository
from ..ops.sales import prepare_manual_sale
from ..schemas.common import MutationResponse, OkResponse
from ..schemas.ops import (
    BankAccountArchiveRequest,
    BankAccountCreateRequest,
    CalendarEnumsResponse,
    CalendarItemUpsertRequest,
    ManualSaleCreateRequest,
    ManualSaleCreateResponse,
    PresenceStatusUpdateRequest,
    ReserveBucketUpsertRequest,
    TaxProfileUpsertRequest,
)
from ..services.providers import get_ops_repository

logger = logging.getLogger("ops")

router = APIRouter(prefix="/api/ops", tags=["ops"])


def _not_found(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


@router.post("/presence/update-status", response_model=OkResponse)
def update_presence_status(
    payload: PresenceStatusUpdateRequest,
    *,
    current_user: AuthenticatedUser = Depends(require_admin),
    repository: OpsRepository = Depends(get_ops_repository),
) -> OkResponse:
    if not repository.update_presence_order_status(payload.order_id, payload.status):
        raise _not_found("Order not found")
    logger.info(
        "Presence order %s set to %s by user=%s",
        payload.order_id,
        payload.status.value,
        current_user.id,
    )
    return OkResponse()


@router.post("/settings/bank-accounts/create", response_model=MutationResponse)
def create_bank_account(
    payload: BankAccountCreateRequest,
    *,
    current_user: AuthenticatedUser = Depends(require_super_admin),
    repository: OpsRepository = Depends(get_ops_repository),
) -> MutationResponse:
    account_id = repository.create_bank_account(payload.to_account(current_user.id))
    return MutationResponse(id=account_id)


@router.post("/settings/bank-accounts/archive", response_model=OkResponse)
def archive_bank_account(
    payload: BankAccountArchiveRequest,
    *,
    current_user: AuthenticatedUser = Depends(require_admin),
    repository: OpsRepository = Depends(get_ops_repository),
) -> OkResponse:
    if not repository.update_bank_account_status(payload.id, payload.status):
        raise _not_found("Bank account not found")
    return OkResponse()


@router.post("/settings/calendar/upsert", response_model=MutationResponse)
def upsert_calendar_item(
    payload: CalendarItemUpsertRequest,
    *,
    current_user: AuthenticatedUser = Depends(require_admin),
    repository: OpsRepository = Depends(get_ops_repository),
) -> MutationResponse:
    item_id = repository.save_calendar_item(payload.to_item(current_user.id))
    if item_id is None:
        raise _not_found("Calendar item not found")
    return MutationResponse(id=item_id)


@router.post("/settings/calendar/enums", response_model=CalendarEnumsResponse)
def calendar_enums(
    *,
    current_user: AuthenticatedUser = Depends(require_admin),
    repository: OpsRepository = Depends(get_ops_repository),
) -> CalendarEnumsResponse:
    return CalendarEnumsResponse(**repository.calendar_enums())


@router.post("/settings/reserves/upsert", response_model=MutationResponse)
def upsert_reserve_bucket(
    payload: ReserveBucketUpsertRequest,
    *,
    current_user: AuthenticatedUser = Depends(require_admin),
    repository: OpsRepository = Depends(get_ops_repository),
) -> MutationResponse:
    bucket_id = repository.save_reserve_bucket(payload.to_bucket(current_user.id))
    if bucket_id is None:
        raise _not_found("Reserve bucket not found")
    return MutationResponse(id=bucket_id)


@router.post("/settings/tax/upsert", response_model=OkResponse)
def upsert_tax_profile(
    payload: TaxProfileUpsertRequest,
    *,
    current_user: AuthenticatedUser = Depends(require_admin),
    repository: OpsRepository = Depends(get_ops_repository),
) -> OkResponse:
    repository.upsert_tax_profile(payload.to_profile(current_user.id))
    return OkResponse()


@router.post("/settings/sales/create", response_model=ManualSaleCreateResponse)
def create_manual_sale(
    payload: ManualSaleCreateRequest,
    *,
    idempotency_key: Optional[str] = Header(None, alias="X-Idempotency-Key"),
    current_user: AuthenticatedUser = Depends(require_admin),
    repository: OpsRepository = Depends(get_ops_repository),
) -> ManualSaleCreateResponse:
    try:
        ledger_entry, sale = prepare_manual_sale(
            day=payload.day,
            business_line=payload.business_line,
            bank_account_id=payload.bank_account_id,
            amount_cents=payload.amount_cents,
            currency=payload.currency,
            payment_method=payload.payment_method,
            notes=payload.notes,
            tags=payload.tags,
            actor_id=current_user.id,
            idempotency_token=idempotency_key,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    receipt = repository.record_manual_sale(ledger_entry, sale)
    return ManualSaleCreateResponse.from_receipt(receipt)


__all__ = ["router"]
