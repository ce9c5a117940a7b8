# src/carefin_core/domain/reference/benchmark_tables.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Industry benchmark tables for SNF, ALF and ILF assets.

Purpose:
    Provide static percentile benchmark sets per asset type and the
    ``BenchmarkLibrary`` container injected into the benchmark comparator.

Layer:
    domain/reference

Notes:
    - Values are an industry composite as of 2024-12-31.
    - Percentages are fractions (0.82 means 82%).
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from decimal import Decimal
from functools import lru_cache
from typing import Final

from carefin_core.domain.entities.benchmark import Benchmark, BenchmarkSet
from carefin_core.domain.enums.analysis import BenchmarkCategory, BenchmarkUnit
from carefin_core.domain.enums.assets import AssetType
from carefin_core.domain.exceptions.underwriting import UnknownAssetTypeError

_FIN = BenchmarkCategory.FINANCIAL
_OPS = BenchmarkCategory.OPERATIONAL
_QUAL = BenchmarkCategory.QUALITY
_STAFF = BenchmarkCategory.STAFFING

_CUR = BenchmarkUnit.CURRENCY
_PCT = BenchmarkUnit.PERCENTAGE
_NUM = BenchmarkUnit.NUMBER

_SOURCE: Final[str] = "Industry Composite 2024"
_EFFECTIVE: Final[str] = "2024-12-31"


def _b(
    metric: str,
    name: str,
    category: BenchmarkCategory,
    unit: BenchmarkUnit,
    anchors: tuple[str, str, str, str, str],
    mean: str,
) -> Benchmark:
    p10, p25, p50, p75, p90 = (Decimal(a) for a in anchors)
    return Benchmark(
        metric=metric,
        name=name,
        category=category,
        unit=unit,
        p10=p10,
        p25=p25,
        p50=p50,
        p75=p75,
        p90=p90,
        mean=Decimal(mean),
    )


SNF_BENCHMARKS: Final[BenchmarkSet] = BenchmarkSet(
    asset_type=AssetType.SNF,
    source=_SOURCE,
    effective_date=_EFFECTIVE,
    benchmarks=(
        # financial
        _b("revenue_per_patient_day", "Revenue Per Patient Day", _FIN, _CUR,
           ("280", "310", "350", "400", "475"), "355"),
        _b("revenue_per_bed", "Revenue Per Bed", _FIN, _CUR,
           ("85000", "95000", "110000", "130000", "160000"), "115000"),
        _b("ebitdar_margin", "EBITDAR Margin", _FIN, _PCT,
           ("0.04", "0.08", "0.12", "0.16", "0.22"), "0.12"),
        _b("noi_margin", "NOI Margin", _FIN, _PCT,
           ("0.02", "0.05", "0.09", "0.13", "0.18"), "0.09"),
        _b("labor_cost_percent", "Labor Cost %", _FIN, _PCT,
           ("0.48", "0.52", "0.56", "0.62", "0.68"), "0.56"),
        _b("agency_percent", "Agency Labor %", _FIN, _PCT,
           ("0.01", "0.02", "0.05", "0.10", "0.18"), "0.06"),
        # operational
        _b("occupancy_rate", "Occupancy Rate", _OPS, _PCT,
           ("0.68", "0.75", "0.82", "0.88", "0.93"), "0.81"),
        _b("medicare_mix", "Medicare Mix %", _OPS, _PCT,
           ("0.08", "0.12", "0.18", "0.25", "0.35"), "0.19"),
        _b("medicaid_mix", "Medicaid Mix %", _OPS, _PCT,
           ("0.35", "0.45", "0.55", "0.65", "0.75"), "0.55"),
        _b("private_pay_mix", "Private Pay Mix %", _OPS, _PCT,
           ("0.05", "0.10", "0.18", "0.28", "0.40"), "0.19"),
        # quality
        _b("cms_overall_rating", "CMS Overall Rating", _QUAL, _NUM,
           ("1", "2", "3", "4", "5"), "3.0"),
        _b("health_inspection_rating", "Health Inspection Rating", _QUAL, _NUM,
           ("1", "2", "3", "4", "5"), "2.9"),
        _b("total_deficiencies", "Total Deficiencies", _QUAL, _NUM,
           ("2", "4", "7", "12", "18"), "8.2"),
        # staffing
        _b("rn_hppd", "RN Hours Per Patient Day", _STAFF, _NUM,
           ("0.30", "0.40", "0.55", "0.75", "1.00"), "0.58"),
        _b("total_nursing_hppd", "Total Nursing HPPD", _STAFF, _NUM,
           ("3.2", "3.6", "4.0", "4.5", "5.2"), "4.1"),
        _b("turnover_rate", "Staff Turnover Rate", _STAFF, _PCT,
           ("0.25", "0.35", "0.50", "0.65", "0.80"), "0.52"),
    ),
)  # fmt: skip

ALF_BENCHMARKS: Final[BenchmarkSet] = BenchmarkSet(
    asset_type=AssetType.ALF,
    source=_SOURCE,
    effective_date=_EFFECTIVE,
    benchmarks=(
        _b("revenue_per_unit", "Revenue Per Unit", _FIN, _CUR,
           ("40000", "48000", "58000", "72000", "90000"), "60000"),
        _b("monthly_rate", "Average Monthly Rate", _FIN, _CUR,
           ("3500", "4200", "5000", "6200", "8000"), "5200"),
        _b("ebitdar_margin", "EBITDAR Margin", _FIN, _PCT,
           ("0.15", "0.20", "0.28", "0.35", "0.42"), "0.28"),
        _b("labor_cost_percent", "Labor Cost %", _FIN, _PCT,
           ("0.35", "0.40", "0.45", "0.52", "0.58"), "0.46"),
        _b("occupancy_rate", "Occupancy Rate", _OPS, _PCT,
           ("0.72", "0.80", "0.87", "0.92", "0.96"), "0.86"),
        _b("average_length_of_stay", "Average Length of Stay (months)", _OPS, _NUM,
           ("18", "24", "30", "38", "48"), "31"),
    ),
)  # fmt: skip

ILF_BENCHMARKS: Final[BenchmarkSet] = BenchmarkSet(
    asset_type=AssetType.ILF,
    source=_SOURCE,
    effective_date=_EFFECTIVE,
    benchmarks=(
        _b("revenue_per_unit", "Revenue Per Unit", _FIN, _CUR,
           ("24000", "30000", "38000", "48000", "65000"), "40000"),
        _b("monthly_rate", "Average Monthly Rate", _FIN, _CUR,
           ("2000", "2500", "3200", "4200", "5500"), "3400"),
        _b("ebitdar_margin", "EBITDAR Margin", _FIN, _PCT,
           ("0.25", "0.32", "0.40", "0.48", "0.55"), "0.40"),
        _b("labor_cost_percent", "Labor Cost %", _FIN, _PCT,
           ("0.18", "0.22", "0.28", "0.35", "0.42"), "0.29"),
        _b("occupancy_rate", "Occupancy Rate", _OPS, _PCT,
           ("0.78", "0.85", "0.91", "0.95", "0.98"), "0.90"),
    ),
)  # fmt: skip


class BenchmarkLibrary:
    """Immutable lookup of benchmark sets by asset type."""

    __slots__ = ("_sets",)

    def __init__(self, sets: Iterable[BenchmarkSet]) -> None:
        self._sets: Mapping[AssetType, BenchmarkSet] = {s.asset_type: s for s in sets}

    def asset_types(self) -> tuple[AssetType, ...]:
        return tuple(self._sets)

    def get(self, asset_type: AssetType | str | None) -> BenchmarkSet:
        """Return the benchmark set for ``asset_type``.

        Raises:
            MissingFieldError: If ``asset_type`` is missing.
            UnknownAssetTypeError: If no set exists for the asset type.
        """
        resolved = AssetType.parse(asset_type)
        try:
            return self._sets[resolved]
        except KeyError as exc:
            raise UnknownAssetTypeError(resolved.value) from exc


@lru_cache(maxsize=1)
def default_benchmark_library() -> BenchmarkLibrary:
    """Return the process-wide default benchmark library (built once)."""
    return BenchmarkLibrary((SNF_BENCHMARKS, ALF_BENCHMARKS, ILF_BENCHMARKS))


__all__ = [
    "ALF_BENCHMARKS",
    "ILF_BENCHMARKS",
    "SNF_BENCHMARKS",
    "BenchmarkLibrary",
    "default_benchmark_library",
]
