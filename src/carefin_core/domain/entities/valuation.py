# src/carefin_core/domain/entities/valuation.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Valuation entities.

Purpose:
    Represent cap-rate bands, the paired external/internal valuation views,
    CapEx estimates and reimbursement upside ranges.

Layer:
    domain/entities

Notes:
    - A cap-rate band is numerically ``low < base < high``. Because a lower
      cap rate yields a higher value, ``value_low`` is computed with the
      band's *high* rate and ``value_high`` with its *low* rate.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from carefin_core.domain.enums.assets import AssetType, MarketTier, Region, ValuationViewKind
from carefin_core.domain.exceptions.underwriting import ReferenceDataError


@dataclass(frozen=True, slots=True)
class CapRateBand:
    """Low/base/high capitalization rates."""

    low: Decimal
    base: Decimal
    high: Decimal

    def __post_init__(self) -> None:
        if not (Decimal("0") < self.low < self.base < self.high):
            raise ReferenceDataError(
                "Cap-rate band must satisfy 0 < low < base < high.",
                details={"low": str(self.low), "base": str(self.base), "high": str(self.high)},
            )

    @classmethod
    def from_range(cls, low: Decimal, high: Decimal) -> CapRateBand:
        """Build a band whose base is the midpoint of ``low`` and ``high``."""
        return cls(low=low, base=(low + high) / Decimal("2"), high=high)


@dataclass(frozen=True, slots=True)
class PriceRange:
    """Inclusive low/high money range."""

    low: Decimal
    high: Decimal

    def contains(self, value: Decimal) -> bool:
        return self.low <= value <= self.high


@dataclass(frozen=True, slots=True)
class ValuationView:
    """One valuation perspective over a shared NOI.

    Attributes:
        kind:
            External (lender/market) or internal (execution) view.
        noi:
            NOI the view capitalizes.
        cap_rates:
            Band used for this view.
        value_low:
            ``noi / cap_rates.high``.
        value_base:
            ``noi / cap_rates.base``.
        value_high:
            ``noi / cap_rates.low``.
        price_per_bed:
            ``value_base / beds`` (zero when beds is zero).
        region:
            Region the state maps to (``NATIONAL`` when unmapped).
        market_tier:
            Market tier of the state.
        band_source:
            Where the band came from (e.g. ``"geographic:southeast"``).
        market_price_per_bed:
            Typical per-bed pricing range for the state, for sanity checks.
    """

    kind: ValuationViewKind
    noi: Decimal
    cap_rates: CapRateBand
    value_low: Decimal
    value_base: Decimal
    value_high: Decimal
    price_per_bed: Decimal
    region: Region
    market_tier: MarketTier
    band_source: str
    market_price_per_bed: PriceRange

    @property
    def price_per_bed_in_market_range(self) -> bool:
        return self.market_price_per_bed.contains(self.price_per_bed)


@dataclass(frozen=True, slots=True)
class DualValuation:
    """External and internal views computed together from one NOI."""

    noi: Decimal
    asset_type: AssetType
    state: str
    beds: int
    external: ValuationView
    internal: ValuationView


@dataclass(frozen=True, slots=True)
class CapExEstimate:
    """Capital expenditure estimate split by driver."""

    immediate_per_bed: Decimal
    deferred_per_bed: Decimal
    competitive_per_bed: Decimal
    immediate: Decimal
    deferred: Decimal
    competitive: Decimal
    total: Decimal
    per_bed: Decimal


@dataclass(frozen=True, slots=True)
class ReimbursementUpside:
    """Estimated annual revenue upside ranges by lever.

    Attributes:
        pdpm_optimization:
            Medicare revenue uplift from PDPM coding optimization.
        state_supplemental:
            State supplemental/quality program payments.
        state_program_name:
            Name of the state program, when one is known.
        quality_improvement:
            Revenue opportunity from improving the CMS star rating.
        total:
            Sum of the three levers.
    """

    pdpm_optimization: PriceRange
    state_supplemental: PriceRange
    state_program_name: str | None
    quality_improvement: PriceRange
    total: PriceRange


__all__ = [
    "CapRateBand",
    "PriceRange",
    "ValuationView",
    "DualValuation",
    "CapExEstimate",
    "ReimbursementUpside",
]
