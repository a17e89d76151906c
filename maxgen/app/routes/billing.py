"""API routes exposing Stripe checkout, portal, and webhook handling."""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status
from starlette.concurrency import run_in_threadpool

from ..auth.dependencies import get_current_user
from ..auth.models import AuthenticatedUser
from ..billing.provider import PaymentProvider, PaymentProviderError, WebhookVerificationError
from ..billing.service import BillingService
from ..pricing.registry import PriceRegistry
from ..schemas.billing import CheckoutRequest, SessionUrlResponse, WebhookAck
from ..services.providers import get_billing_service, get_payment_provider, get_price_registry

logger = logging.getLogger("billing")

router = APIRouter(prefix="/api/stripe", tags=["billing"])


@router.post("/checkout", response_model=SessionUrlResponse)
def create_checkout_session(
    payload: CheckoutRequest,
    *,
    idempotency_key: Optional[str] = Header(None, alias="Idempotency-Key"),
    current_user: AuthenticatedUser = Depends(get_current_user),
    registry: PriceRegistry = Depends(get_price_registry),
    service: BillingService = Depends(get_billing_service),
) -> SessionUrlResponse:
    plan = payload.to_checkout_plan(registry)
    try:
        url = service.create_checkout_session(current_user, plan, idempotency_token=idempotency_key)
    except PaymentProviderError as exc:
        logger.exception("Checkout failed for user=%s", current_user.id)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Checkout failed") from exc
    return SessionUrlResponse(url=url)


@router.post("/portal", response_model=SessionUrlResponse)
def create_portal_session(
    *,
    current_user: AuthenticatedUser = Depends(get_current_user),
    service: BillingService = Depends(get_billing_service),
) -> SessionUrlResponse:
    try:
        url = service.create_portal_session(current_user)
    except PaymentProviderError as exc:
        logger.exception("Portal session failed for user=%s", current_user.id)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Portal failed") from exc
    return SessionUrlResponse(url=url)


@router.post("/webhook", response_model=WebhookAck)
async def receive_webhook(
    request: Request,
    *,
    stripe_signature: Optional[str] = Header(None, alias="stripe-signature"),
    provider: PaymentProvider = Depends(get_payment_provider),
    service: BillingService = Depends(get_billing_service),
) -> WebhookAck:
    if not stripe_signature:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing stripe-signature")

    body = await request.body()
    try:
        event = provider.verify_event(body, stripe_signature)
    except WebhookVerificationError as exc:
        logger.warning("Rejected webhook: %s", exc)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid signature") from exc

    try:
        # Blocking Stripe and database calls run in a worker thread.
        await run_in_threadpool(service.handle_event, event)
    except Exception as exc:
        logger.exception("Webhook handler failed for event %s type=%s", event.get("id"), event.get("type"))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Webhook handler failed"
        ) from exc
    return WebhookAck()


__all__ = ["router"]
