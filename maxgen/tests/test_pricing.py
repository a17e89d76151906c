from __future__ import annotations

from dataclasses import replace

import pytest

from maxgen.app.pricing import (
    PRICE_SLOTS,
    Plan,
    PlanPrices,
    PresenceTier,
    PriceConflictError,
    PriceResolver,
    ProductKey,
    ResolvedPrice,
    load_price_registry,
)
from maxgen.config import MissingConfigurationError


def test_registry_exposes_prices_by_product_and_plan(price_registry):
    assert price_registry.presence_price(PresenceTier.BOOKING, Plan.MONTHLY) == "price_booking_month"
    assert price_registry.qr_studio_price(Plan.ONETIME) == "price_qr_once"
    assert price_registry.qr_print_pack_price() == "price_print_pack"
    assert price_registry.experimental_eur1_price() == "price_eur1"
    assert price_registry.price_for(ProductKey.PRESENCE_SEO, Plan.ONETIME) == "price_seo_once"
    assert len(price_registry.entries()) == len(PRICE_SLOTS)


def test_registry_has_no_monthly_print_pack(price_registry):
    with pytest.raises(KeyError):
        price_registry.price_for(ProductKey.QR_PRINT_PACK, Plan.MONTHLY)


@pytest.mark.parametrize("missing", ["PRICE_QR_STUDIO_MONTHLY", "PRICE_EXPERIMENTAL_EUR1_ONETIME"])
def test_registry_startup_names_missing_variable(price_env, missing):
    env = {name: value for name, value in price_env.items() if name != missing}

    with pytest.raises(MissingConfigurationError) as excinfo:
        load_price_registry(env)

    assert excinfo.value.missing == (missing,)
    assert missing in str(excinfo.value)


def test_registry_treats_blank_value_as_missing(price_env):
    with pytest.raises(MissingConfigurationError) as excinfo:
        load_price_registry({**price_env, "PRICE_PRESENCE_BASIC_ONETIME": ""})

    assert excinfo.value.missing == ("PRICE_PRESENCE_BASIC_ONETIME",)


def test_resolver_covers_every_registry_price(price_registry, price_env):
    resolver = PriceResolver(price_registry)

    for slot in PRICE_SLOTS:
        price_id = price_env[slot.env_var]
        assert resolver.resolve(price_id) == ResolvedPrice(slot.product_key, slot.plan)
        assert resolver.resolve_product(price_id) == slot.product_key
        assert resolver.resolve_plan(price_id) == slot.plan

    assert len(resolver) == len(PRICE_SLOTS)


@pytest.mark.parametrize("price_id", ["price_unknown", "", None, "price_basic_once_v2"])
def test_resolver_returns_none_for_unknown_ids(price_registry, price_id):
    resolver = PriceResolver(price_registry)

    assert resolver.resolve(price_id) is None
    assert resolver.resolve_product(price_id) is None
    assert resolver.resolve_plan(price_id) is None


def test_resolver_rejects_price_shared_by_two_products(price_registry):
    conflicting = replace(
        price_registry,
        qr=replace(price_registry.qr, print_pack=PlanPrices(onetime="price_qr_once")),
    )

    with pytest.raises(PriceConflictError, match="PRICE_QR_PRINT_PACK_ONETIME"):
        PriceResolver(conflicting)


def test_resolver_membership(price_registry, price_env):
    resolver = PriceResolver(price_registry)

    assert "price_seo_month" in resolver
    assert "price_nope" not in resolver
    assert set(resolver) == set(price_env.values())
