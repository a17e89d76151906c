"""QR Studio routes: entitlement status and project deletion."""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ..auth.dependencies import get_current_user
from ..auth.models import AuthenticatedUser
from ..entitlements.service import EntitlementReader
from ..pricing.models import ProductKey
from ..qr.repository import QrProjectRepository
from ..schemas.common import OkResponse
from ..schemas.qr import QrEntitlementResponse
from ..services.providers import get_entitlement_reader, get_qr_project_repository

router = APIRouter(prefix="/api/qr", tags=["qr"])


@router.get("/entitlement", response_model=QrEntitlementResponse)
def get_entitlement(
    *,
    current_user: AuthenticatedUser = Depends(get_current_user),
    reader: EntitlementReader = Depends(get_entitlement_reader),
) -> QrEntitlementResponse:
    plan = reader.active_plan(current_user.id, ProductKey.QR_STUDIO)
    return QrEntitlementResponse(active=plan is not None, plan=plan)


@router.delete("/project", response_model=OkResponse)
def delete_project(
    project_id: Optional[str] = Query(None, alias="id"),
    *,
    current_user: AuthenticatedUser = Depends(get_current_user),
    repository: QrProjectRepository = Depends(get_qr_project_repository),
) -> OkResponse:
    if not project_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing id")

    owner_id = repository.get_owner_id(project_id)
    if owner_id is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    if owner_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")

    repository.delete_project(project_id)
    return OkResponse()


__all__ = ["router"]
