"""API schemas for Stripe checkout, portal, and webhook endpoints."""
from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, RootModel

from ..billing.checkout import (
    plan_presence_checkout,
    plan_qr_print_pack_checkout,
    plan_qr_studio_checkout,
)
from ..billing.models import CheckoutPlan
from ..pricing.models import Plan, PresenceTier
from ..pricing.registry import PriceRegistry


class PresenceCheckoutRequest(BaseModel):
    kind: Literal["presence"]
    tier: PresenceTier
    with_monthly: bool = Field(default=False, alias="withMonthly")

    model_config = ConfigDict(populate_by_name=True)

    def to_checkout_plan(self, registry: PriceRegistry) -> CheckoutPlan:
        return plan_presence_checkout(registry, self.tier, with_monthly=self.with_monthly)


class QrStudioCheckoutRequest(BaseModel):
    kind: Literal["qr_studio"]
    billing: Plan

    def to_checkout_plan(self, registry: PriceRegistry) -> CheckoutPlan:
        return plan_qr_studio_checkout(registry, self.billing)


class QrPrintPackCheckoutRequest(BaseModel):
    kind: Literal["qr_print_pack"]

    def to_checkout_plan(self, registry: PriceRegistry) -> CheckoutPlan:
        return plan_qr_print_pack_checkout(registry)


class CheckoutRequest(RootModel):
    """Checkout body; ``kind`` selects the product family."""

    root: Annotated[
        Union[PresenceCheckoutRequest, QrStudioCheckoutRequest, QrPrintPackCheckoutRequest],
        Field(discriminator="kind"),
    ]

    def to_checkout_plan(self, registry: PriceRegistry) -> CheckoutPlan:
        return self.root.to_checkout_plan(registry)


class SessionUrlResponse(BaseModel):
    url: str


class WebhookAck(BaseModel):
    received: bool = True


__all__ = [
    "CheckoutRequest",
    "PresenceCheckoutRequest",
    "QrPrintPackCheckoutRequest",
    "QrStudioCheckoutRequest",
    "SessionUrlResponse",
    "WebhookAck",
]
