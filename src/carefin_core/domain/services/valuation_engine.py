# src/carefin_core/domain/services/valuation_engine.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Valuation engine.

Purpose:
    Derive the paired external (lender/market) and internal (execution)
    valuation views from one normalized NOI, estimate CapEx needs from
    building age, and estimate reimbursement upside.

Layer:
    domain/services

Notes:
    - Pure domain logic:
        * No logging.
        * No I/O.
    - Enterprise value is ``NOI / cap rate``. The low value uses the band's
      high rate and the high value uses its low rate.
    - Values are kept at full precision; price per bed and CapEx amounts are
      rounded to cents.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, getcontext
from typing import Final

from carefin_core.domain.entities.valuation import (
    CapExEstimate,
    CapRateBand,
    DualValuation,
    PriceRange,
    ReimbursementUpside,
    ValuationView,
)
from carefin_core.domain.enums.assets import AssetType, ValuationViewKind
from carefin_core.domain.reference.market_data import (
    DEFAULT_SUPPLEMENT_PER_BED,
    PDPM_OPTIMIZATION,
    MarketData,
    default_market_data,
)

getcontext().prec = max(getcontext().prec, 34)

_ZERO = Decimal("0")
_MONEY_QUANTUM = Decimal("0.01")

# (threshold in years, per-bed dollars); first threshold exceeded wins.
IMMEDIATE_CAPEX_TIERS: Final[tuple[tuple[int, Decimal], ...]] = (
    (15, Decimal("2000")),
    (10, Decimal("1000")),
)
DEFERRED_CAPEX_TIERS: Final[tuple[tuple[int, Decimal], ...]] = (
    (30, Decimal("8000")),
    (20, Decimal("5000")),
    (10, Decimal("3000")),
)
COMPETITIVE_CAPEX_PER_BED: Final[dict[AssetType, Decimal]] = {
    AssetType.SNF: Decimal("5000"),
    AssetType.ALF: Decimal("4000"),
}
DEFAULT_COMPETITIVE_CAPEX_PER_BED: Final[Decimal] = Decimal("6000")


def _money(value: Decimal) -> Decimal:
    return value.quantize(_MONEY_QUANTUM, rounding=ROUND_HALF_UP)


def _tier(years: int, tiers: tuple[tuple[int, Decimal], ...]) -> Decimal:
    for threshold, amount in tiers:
        if years > threshold:
            return amount
    return _ZERO


def _scale(per_unit: PriceRange, units: Decimal) -> PriceRange:
    return PriceRange(low=_money(per_unit.low * units), high=_money(per_unit.high * units))


class ValuationEngine:
    """Compute dual valuations, CapEx and reimbursement upside.

    Args:
        market_data:
            Cap-rate and market tables. Defaults to the built-in tables.
    """

    __slots__ = ("_market",)

    def __init__(self, market_data: MarketData | None = None) -> None:
        self._market = market_data or default_market_data()

    @property
    def market_data(self) -> MarketData:
        return self._market

    # ------------------------------------------------------------------ #
    # Dual valuation                                                     #
    # ------------------------------------------------------------------ #

    def value(
        self,
        noi: Decimal,
        asset_type: AssetType | str | None,
        state: str | None,
        beds: int,
    ) -> DualValuation:
        """Value one facility under the external and internal views.

        Args:
            noi: Normalized net operating income.
            asset_type: Asset class (``SNF``/``ALF``/``ILF``/``HOSPICE``).
            state: Two-letter state code. Unknown or missing states use the
                national band for the external view.
            beds: Licensed beds or units.

        Returns:
            Both views, computed from the same NOI.

        Raises:
            MissingFieldError: If ``asset_type`` is missing.
            UnknownAssetTypeError: If ``asset_type`` is not recognized.
        """
        resolved = AssetType.parse(asset_type)
        external_band, source = self.external_band(resolved, state)
        internal_band = self._market.execution_cap_rates[resolved]

        return DualValuation(
            noi=noi,
            asset_type=resolved,
            state=(state or "").strip().upper(),
            beds=beds,
            external=self._view(
                ValuationViewKind.EXTERNAL, noi, external_band, source, state, beds
            ),
            internal=self._view(
                ValuationViewKind.INTERNAL, noi, internal_band, "execution", state, beds
            ),
        )

    def external_band(self, asset_type: AssetType, state: str | None) -> tuple[CapRateBand, str]:
        """Return the lender/market band for ``asset_type`` in ``state`` and its source tag."""
        region = self._market.region_for(state)
        regional = self._market.geographic_cap_rates.get(region, {})
        band = regional.get(asset_type)
        if band is not None:
            return band, f"geographic:{region.value}"
        return self._market.national_cap_rates[asset_type], "national"

    def _view(
        self,
        kind: ValuationViewKind,
        noi: Decimal,
        band: CapRateBand,
        source: str,
        state: str | None,
        beds: int,
    ) -> ValuationView:
        value_base = noi / band.base
        price_per_bed = _money(value_base / Decimal(beds)) if beds > 0 else _ZERO
        region = self._market.region_for(state)
        return ValuationView(
            kind=kind,
            noi=noi,
            cap_rates=band,
            value_low=noi / band.high,
            value_base=value_base,
            value_high=noi / band.low,
            price_per_bed=price_per_bed,
            region=region,
            market_tier=self._market.market_tier_for(state),
            band_source=source,
            market_price_per_bed=self._market.price_per_bed_for(state),
        )

    # ------------------------------------------------------------------ #
    # CapEx                                                              #
    # ------------------------------------------------------------------ #

    @staticmethod
    def estimate_capex(
        asset_type: AssetType | str | None,
        beds: int,
        building_age: int,
        years_since_renovation: int | None = None,
    ) -> CapExEstimate:
        """Estimate capital needs from building age and renovation recency.

        Args:
            asset_type: Asset class; drives the competitive positioning tier.
            beds: Licensed beds or units.
            building_age: Years since construction.
            years_since_renovation: Years since last renovation. Defaults to
                ``building_age`` when unknown.

        Returns:
            Per-driver per-bed tiers, their totals and the blended per-bed figure.
        """
        resolved = AssetType.parse(asset_type)
        reno_age = building_age if years_since_renovation is None else years_since_renovation

        immediate_per_bed = _tier(reno_age, IMMEDIATE_CAPEX_TIERS)
        deferred_per_bed = _tier(building_age, DEFERRED_CAPEX_TIERS)
        competitive_per_bed = COMPETITIVE_CAPEX_PER_BED.get(
            resolved, DEFAULT_COMPETITIVE_CAPEX_PER_BED
        )

        units = Decimal(max(beds, 0))
        immediate = _money(immediate_per_bed * units)
        deferred = _money(deferred_per_bed * units)
        competitive = _money(competitive_per_bed * units)
        total = immediate + deferred + competitive
        per_bed = _money(total / units) if units > 0 else _ZERO

        return CapExEstimate(
            immediate_per_bed=immediate_per_bed,
            deferred_per_bed=deferred_per_bed,
            competitive_per_bed=competitive_per_bed,
            immediate=immediate,
            deferred=deferred,
            competitive=competitive,
            total=total,
            per_bed=per_bed,
        )

    # ------------------------------------------------------------------ #
    # Reimbursement                                                      #
    # ------------------------------------------------------------------ #

    def estimate_reimbursement_upside(
        self,
        *,
        medicare_revenue: Decimal,
        beds: int,
        state: str | None,
        star_rating: int | None = None,
    ) -> ReimbursementUpside:
        """Estimate annual revenue upside from reimbursement levers.

        Args:
            medicare_revenue: Annual Medicare revenue (PDPM applies to it).
            beds: Licensed beds.
            state: Two-letter state code for supplemental programs.
            star_rating: Current CMS overall rating (1-5), when known.

        Returns:
            Low/high ranges for PDPM, state supplemental and quality levers
            plus their total.
        """
        units = Decimal(max(beds, 0))
        base_revenue = max(medicare_revenue, _ZERO)

        pdpm = _scale(PDPM_OPTIMIZATION, base_revenue)

        program = self._market.state_programs.get((state or "").strip().upper())
        supplement_per_bed = program.per_bed if program else DEFAULT_SUPPLEMENT_PER_BED
        supplemental = _scale(supplement_per_bed, units)

        quality_per_bed = (
            self._market.quality_revenue_per_bed.get(star_rating)
            if star_rating is not None
            else None
        )
        quality = (
            _scale(quality_per_bed, units)
            if quality_per_bed is not None
            else PriceRange(low=_ZERO, high=_ZERO)
        )

        return ReimbursementUpside(
            pdpm_optimization=pdpm,
            state_supplemental=supplemental,
            state_program_name=program.name if program else None,
            quality_improvement=quality,
            total=PriceRange(
                low=pdpm.low + supplemental.low + quality.low,
                high=pdpm.high + supplemental.high + quality.high,
            ),
        )


__all__ = [
    "IMMEDIATE_CAPEX_TIERS",
    "DEFERRED_CAPEX_TIERS",
    "COMPETITIVE_CAPEX_PER_BED",
    "DEFAULT_COMPETITIVE_CAPEX_PER_BED",
    "ValuationEngine",
]
