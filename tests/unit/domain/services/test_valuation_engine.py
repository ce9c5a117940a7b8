# tests/unit/domain/services/test_valuation_engine.py
from __future__ import annotations

from decimal import Decimal

import pytest

from carefin_core.domain.entities.valuation import CapRateBand, PriceRange
from carefin_core.domain.enums.assets import AssetType, MarketTier, Region, ValuationViewKind
from carefin_core.domain.exceptions.underwriting import (
    ReferenceDataError,
    UnknownAssetTypeError,
)
from carefin_core.domain.reference.market_data import MarketData
from carefin_core.domain.services.valuation_engine import ValuationEngine

_NOI = Decimal("1000000")


def test_external_view_uses_regional_band_midpoint() -> None:
    valuation = ValuationEngine().value(_NOI, AssetType.SNF, "tx", 100)
    external = valuation.external

    assert valuation.state == "TX"
    assert external.kind is ValuationViewKind.EXTERNAL
    assert external.band_source == "geographic:southwest"
    assert external.cap_rates == CapRateBand(Decimal("0.07"), Decimal("0.08"), Decimal("0.09"))
    assert external.value_base == Decimal("12500000")
    assert external.value_low == _NOI / Decimal("0.09")
    assert external.value_high == _NOI / Decimal("0.07")
    assert external.price_per_bed == Decimal("125000.00")
    assert external.region is Region.SOUTHWEST
    assert external.market_tier is MarketTier.PREMIUM
    # TX beds trade between 45k and 95k, so 125k per bed is out of range.
    assert external.price_per_bed_in_market_range is False


def test_internal_view_uses_execution_band() -> None:
    internal = ValuationEngine().value(_NOI, "SNF", "TX", 100).internal

    assert internal.kind is ValuationViewKind.INTERNAL
    assert internal.band_source == "execution"
    assert internal.value_low == Decimal("8000000")
    assert internal.value_base == _NOI / Decimal("0.115")
    assert internal.value_high == _NOI / Decimal("0.105")


@pytest.mark.parametrize("noi", ["1000000", "0.01", "0"])
def test_low_value_never_exceeds_base_or_high(noi: str) -> None:
    valuation = ValuationEngine().value(Decimal(noi), AssetType.ALF, "FL", 80)

    for view in (valuation.external, valuation.internal):
        assert view.value_low <= view.value_base <= view.value_high
        assert view.noi == Decimal(noi)


def test_asset_without_regional_band_falls_back_to_national() -> None:
    external = ValuationEngine().value(_NOI, AssetType.ILF, "TX", 100).external

    assert external.band_source == "national"
    assert external.value_base == _NOI / Decimal("0.06")


def test_unknown_state_uses_national_band_and_default_pricing() -> None:
    valuation = ValuationEngine().value(_NOI, AssetType.SNF, "ZZ", 100)

    assert valuation.external.band_source == "national"
    assert valuation.external.value_base == Decimal("8000000")
    assert valuation.external.region is Region.NATIONAL
    assert valuation.external.market_tier is MarketTier.VALUE
    assert valuation.external.market_price_per_bed == PriceRange(
        Decimal("35000"), Decimal("70000")
    )


def test_missing_state_and_zero_beds() -> None:
    valuation = ValuationEngine().value(_NOI, AssetType.SNF, None, 0)

    assert valuation.state == ""
    assert valuation.external.price_per_bed == Decimal("0")
    assert valuation.internal.price_per_bed == Decimal("0")


def test_unknown_asset_type_raises() -> None:
    with pytest.raises(UnknownAssetTypeError):
        ValuationEngine().value(_NOI, "MOB", "TX", 10)


def test_cap_rate_band_must_be_strictly_ordered() -> None:
    with pytest.raises(ReferenceDataError):
        CapRateBand(Decimal("0.08"), Decimal("0.08"), Decimal("0.09"))
    with pytest.raises(ReferenceDataError):
        CapRateBand(Decimal("0"), Decimal("0.05"), Decimal("0.09"))


def test_market_data_must_cover_every_asset_type() -> None:
    with pytest.raises(ReferenceDataError):
        MarketData(execution_cap_rates={})


def test_capex_for_old_unrenovated_snf() -> None:
    capex = ValuationEngine.estimate_capex(AssetType.SNF, 100, 35)

    assert capex.immediate_per_bed == Decimal("2000")
    assert capex.deferred_per_bed == Decimal("8000")
    assert capex.competitive_per_bed == Decimal("5000")
    assert capex.total == Decimal("1500000")
    assert capex.per_bed == Decimal("15000")


def test_capex_uses_renovation_age_for_immediate_needs() -> None:
    capex = ValuationEngine.estimate_capex("ALF", 60, 12, years_since_renovation=5)

    assert capex.immediate == Decimal("0")
    assert capex.deferred == Decimal("180000")
    assert capex.competitive == Decimal("240000")
    assert capex.total == Decimal("420000")
    assert capex.per_bed == Decimal("7000")


def test_capex_tier_thresholds_are_exclusive() -> None:
    capex = ValuationEngine.estimate_capex(AssetType.ILF, 10, 10)

    assert capex.immediate_per_bed == Decimal("0")
    assert capex.deferred_per_bed == Decimal("0")
    assert capex.competitive_per_bed == Decimal("6000")


def test_reimbursement_upside_with_state_program_and_rating() -> None:
    upside = ValuationEngine().estimate_reimbursement_upside(
        medicare_revenue=Decimal("2000000"),
        beds=100,
        state="TX",
        star_rating=3,
    )

    assert upside.pdpm_optimization == PriceRange(Decimal("200000"), Decimal("300000"))
    assert upside.state_supplemental == PriceRange(Decimal("75000"), Decimal("210000"))
    assert upside.state_program_name is not None
    assert upside.state_program_name.startswith("LTCQIP")
    assert upside.quality_improvement == PriceRange(Decimal("80000"), Decimal("150000"))
    assert upside.total == PriceRange(Decimal("355000"), Decimal("660000"))


def test_reimbursement_upside_defaults_without_program_or_rating() -> None:
    upside = ValuationEngine().estimate_reimbursement_upside(
        medicare_revenue=Decimal("-5"),
        beds=100,
        state="FL",
    )

    assert upside.pdpm_optimization == PriceRange(Decimal("0"), Decimal("0"))
    assert upside.state_supplemental == PriceRange(Decimal("50000"), Decimal("200000"))
    assert upside.state_program_name is None
    assert upside.quality_improvement == PriceRange(Decimal("0"), Decimal("0"))
    assert upside.total == PriceRange(Decimal("50000"), Decimal("200000"))
