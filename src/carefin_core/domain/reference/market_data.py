# src/carefin_core/domain/reference/market_data.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Market reference data used by the valuation engine.

Purpose:
    Hold the cap-rate tables (execution, national and geographic), the
    state→region and state→market-tier maps, per-bed pricing ranges, and the
    reimbursement/quality reference figures.

Layer:
    domain/reference

Notes:
    - Rates and percentages are fractions.
    - ``MarketData`` bundles everything the valuation engine needs so a caller
      can inject alternative tables in tests.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from functools import lru_cache
from types import MappingProxyType
from typing import Final

from carefin_core.domain.entities.valuation import CapRateBand, PriceRange
from carefin_core.domain.enums.assets import AssetType, MarketTier, Region
from carefin_core.domain.exceptions.underwriting import ReferenceDataError


def _band(low: str, base: str, high: str) -> CapRateBand:
    return CapRateBand(low=Decimal(low), base=Decimal(base), high=Decimal(high))


def _range(low: str, high: str) -> PriceRange:
    return PriceRange(low=Decimal(low), high=Decimal(high))


# --------------------------------------------------------------------------- #
# Cap rates                                                                   #
# --------------------------------------------------------------------------- #

EXECUTION_CAP_RATES: Final[Mapping[AssetType, CapRateBand]] = MappingProxyType(
    {
        AssetType.SNF: _band("0.105", "0.115", "0.125"),
        AssetType.ALF: _band("0.06", "0.065", "0.07"),
        AssetType.ILF: _band("0.05", "0.055", "0.06"),
        AssetType.HOSPICE: _band("0.09", "0.095", "0.10"),
    }
)

NATIONAL_CAP_RATES: Final[Mapping[AssetType, CapRateBand]] = MappingProxyType(
    {
        AssetType.SNF: _band("0.12", "0.125", "0.13"),
        AssetType.ALF: _band("0.065", "0.07", "0.075"),
        AssetType.ILF: _band("0.055", "0.06", "0.065"),
        AssetType.HOSPICE: _band("0.10", "0.105", "0.11"),
    }
)

GEOGRAPHIC_CAP_RATES: Final[Mapping[Region, Mapping[AssetType, CapRateBand]]] = MappingProxyType(
    {
        Region.NORTHEAST: {
            AssetType.SNF: CapRateBand.from_range(Decimal("0.085"), Decimal("0.115")),
            AssetType.ALF: CapRateBand.from_range(Decimal("0.055"), Decimal("0.075")),
        },
        Region.SOUTHEAST: {
            AssetType.SNF: CapRateBand.from_range(Decimal("0.075"), Decimal("0.09")),
            AssetType.ALF: CapRateBand.from_range(Decimal("0.055"), Decimal("0.07")),
        },
        Region.MIDWEST: {
            AssetType.SNF: CapRateBand.from_range(Decimal("0.075"), Decimal("0.095")),
            AssetType.ALF: CapRateBand.from_range(Decimal("0.06"), Decimal("0.075")),
        },
        Region.SOUTHWEST: {
            AssetType.SNF: CapRateBand.from_range(Decimal("0.07"), Decimal("0.09")),
            AssetType.ALF: CapRateBand.from_range(Decimal("0.055"), Decimal("0.07")),
        },
        Region.WEST_COAST: {
            AssetType.SNF: CapRateBand.from_range(Decimal("0.055"), Decimal("0.075")),
            AssetType.ALF: CapRateBand.from_range(Decimal("0.04"), Decimal("0.06")),
        },
        Region.NORTHWEST: {
            AssetType.SNF: CapRateBand.from_range(Decimal("0.07"), Decimal("0.09")),
            AssetType.ALF: CapRateBand.from_range(Decimal("0.055"), Decimal("0.07")),
        },
    }
)

# --------------------------------------------------------------------------- #
# Geography                                                                   #
# --------------------------------------------------------------------------- #

_NE, _SE, _MW = Region.NORTHEAST, Region.SOUTHEAST, Region.MIDWEST
_SW, _WC, _NW = Region.SOUTHWEST, Region.WEST_COAST, Region.NORTHWEST

STATE_TO_REGION: Final[Mapping[str, Region]] = MappingProxyType(
    {
        "NY": _NE, "CA": _WC, "IL": _MW, "TX": _SW, "DC": _NE, "MA": _NE,
        "AZ": _SW, "GA": _SE, "FL": _SE, "PA": _NE, "CO": _SW, "WA": _NW,
        "OR": _NW, "VA": _SE, "NJ": _NE, "CT": _NE, "MD": _NE, "MN": _MW,
        "NC": _SE, "TN": _SE, "OH": _MW, "ID": _NW, "MT": _NW, "WY": _NW,
        "ND": _MW, "SD": _MW, "NE": _MW, "KS": _MW, "IA": _MW, "MO": _MW,
        "AR": _SE, "MS": _SE, "AL": _SE, "LA": _SE, "OK": _SW, "NM": _SW,
        "NV": _WC, "UT": _SW, "WI": _MW, "IN": _MW, "MI": _MW, "KY": _SE,
        "WV": _SE, "SC": _SE, "ME": _NE, "NH": _NE, "VT": _NE, "RI": _NE,
        "DE": _NE, "HI": _WC, "AK": _NW,
    }
)  # fmt: skip

PREMIUM_STATES: Final[frozenset[str]] = frozenset({"NY", "CA", "IL", "TX", "DC", "MA"})
GROWTH_STATES: Final[frozenset[str]] = frozenset(
    {"AZ", "GA", "FL", "PA", "CO", "WA", "OR", "VA", "NJ", "CT", "MD", "MN", "NC", "TN", "OH", "HI"}
)

STATE_PRICE_PER_BED: Final[Mapping[str, PriceRange]] = MappingProxyType(
    {
        "NY": _range("75000", "150000"), "CA": _range("80000", "180000"),
        "IL": _range("50000", "100000"), "TX": _range("45000", "95000"),
        "DC": _range("75000", "140000"), "MA": _range("70000", "140000"),
        "AZ": _range("45000", "90000"), "GA": _range("40000", "85000"),
        "FL": _range("45000", "95000"), "PA": _range("55000", "110000"),
        "CO": _range("50000", "95000"), "WA": _range("60000", "120000"),
        "OR": _range("55000", "110000"), "VA": _range("50000", "100000"),
        "NJ": _range("65000", "130000"), "CT": _range("60000", "125000"),
        "MD": _range("60000", "120000"), "MN": _range("40000", "80000"),
        "NC": _range("40000", "85000"), "TN": _range("40000", "80000"),
        "OH": _range("35000", "75000"), "ID": _range("35000", "70000"),
        "MT": _range("30000", "65000"), "WY": _range("30000", "60000"),
        "ND": _range("30000", "60000"), "SD": _range("30000", "60000"),
        "NE": _range("30000", "65000"), "KS": _range("30000", "65000"),
        "IA": _range("30000", "65000"), "MO": _range("35000", "70000"),
        "AR": _range("30000", "65000"), "MS": _range("30000", "60000"),
        "AL": _range("35000", "70000"), "LA": _range("35000", "70000"),
        "OK": _range("30000", "65000"), "NM": _range("35000", "70000"),
        "NV": _range("45000", "90000"), "UT": _range("40000", "80000"),
        "WI": _range("35000", "70000"), "IN": _range("35000", "70000"),
        "MI": _range("35000", "75000"), "KY": _range("35000", "70000"),
        "WV": _range("30000", "60000"), "SC": _range("35000", "75000"),
        "ME": _range("40000", "80000"), "NH": _range("45000", "90000"),
        "VT": _range("40000", "80000"), "RI": _range("50000", "100000"),
        "DE": _range("50000", "95000"), "HI": _range("70000", "140000"),
        "AK": _range("40000", "85000"),
    }
)  # fmt: skip

DEFAULT_PRICE_PER_BED: Final[PriceRange] = _range("35000", "70000")

# --------------------------------------------------------------------------- #
# Reimbursement                                                               #
# --------------------------------------------------------------------------- #

PDPM_OPTIMIZATION: Final[PriceRange] = _range("0.10", "0.15")
DEFAULT_SUPPLEMENT_PER_BED: Final[PriceRange] = _range("500", "2000")


@dataclass(frozen=True, slots=True)
class StateProgram:
    """A state supplemental or quality payment program."""

    name: str
    per_bed: PriceRange
    requirements: str = ""


STATE_PROGRAMS: Final[Mapping[str, StateProgram]] = MappingProxyType(
    {
        "TX": StateProgram(
            "LTCQIP (Long-Term Care Quality Incentive Program)",
            _range("750", "2100"),
            "MDS quality measures, Five-Star rating, infection control, staff retention",
        ),
        "CA": StateProgram(
            "Quality Assurance Fee (QAF)",
            _range("500", "14400"),
            "Nursing hours, staff turnover, satisfaction scores, regulatory compliance",
        ),
        "NY": StateProgram(
            "Quality Pool Distribution",
            _range("600", "1800"),
            "Quality metrics, efficiency measures, patient outcomes",
        ),
        "OH": StateProgram(
            "Quality Incentive Program",
            _range("400", "1500"),
            "MDS quality measures, occupancy thresholds",
        ),
        "IL": StateProgram(
            "Quality Add-on",
            _range("500", "1600"),
            "CMS star rating, staffing levels",
        ),
    }
)

QUALITY_REVENUE_PER_BED: Final[Mapping[int, PriceRange]] = MappingProxyType(
    {
        5: _range("2000", "4000"),
        4: _range("1500", "3000"),
        3: _range("800", "1500"),
        2: _range("4500", "10400"),
        1: _range("6500", "13500"),
    }
)


# --------------------------------------------------------------------------- #
# Bundle                                                                      #
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class MarketData:
    """Injected reference tables for valuation."""

    execution_cap_rates: Mapping[AssetType, CapRateBand] = field(
        default_factory=lambda: EXECUTION_CAP_RATES
    )
    national_cap_rates: Mapping[AssetType, CapRateBand] = field(
        default_factory=lambda: NATIONAL_CAP_RATES
    )
    geographic_cap_rates: Mapping[Region, Mapping[AssetType, CapRateBand]] = field(
        default_factory=lambda: GEOGRAPHIC_CAP_RATES
    )
    state_to_region: Mapping[str, Region] = field(default_factory=lambda: STATE_TO_REGION)
    state_price_per_bed: Mapping[str, PriceRange] = field(
        default_factory=lambda: STATE_PRICE_PER_BED
    )
    default_price_per_bed: PriceRange = DEFAULT_PRICE_PER_BED
    state_programs: Mapping[str, StateProgram] = field(default_factory=lambda: STATE_PROGRAMS)
    quality_revenue_per_bed: Mapping[int, PriceRange] = field(
        default_factory=lambda: QUALITY_REVENUE_PER_BED
    )

    def __post_init__(self) -> None:
        missing = [a.value for a in AssetType if a not in self.execution_cap_rates]
        missing += [a.value for a in AssetType if a not in self.national_cap_rates]
        if missing:
            raise ReferenceDataError(
                "Cap-rate tables must cover every asset type.",
                details={"missing": sorted(set(missing))},
            )

    def region_for(self, state: str | None) -> Region:
        return self.state_to_region.get(_state_key(state), Region.NATIONAL)

    def market_tier_for(self, state: str | None) -> MarketTier:
        key = _state_key(state)
        if key in PREMIUM_STATES:
            return MarketTier.PREMIUM
        if key in GROWTH_STATES:
            return MarketTier.GROWTH
        return MarketTier.VALUE

    def price_per_bed_for(self, state: str | None) -> PriceRange:
        return self.state_price_per_bed.get(_state_key(state), self.default_price_per_bed)


def _state_key(state: str | None) -> str:
    return (state or "").strip().upper()


@lru_cache(maxsize=1)
def default_market_data() -> MarketData:
    """Return the process-wide default market data (built once)."""
    return MarketData()


__all__ = [
    "EXECUTION_CAP_RATES",
    "NATIONAL_CAP_RATES",
    "GEOGRAPHIC_CAP_RATES",
    "STATE_TO_REGION",
    "PREMIUM_STATES",
    "GROWTH_STATES",
    "STATE_PRICE_PER_BED",
    "DEFAULT_PRICE_PER_BED",
    "PDPM_OPTIMIZATION",
    "DEFAULT_SUPPLEMENT_PER_BED",
    "StateProgram",
    "STATE_PROGRAMS",
    "QUALITY_REVENUE_PER_BED",
    "MarketData",
    "default_market_data",
]
