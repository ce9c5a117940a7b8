# src/carefin_core/domain/entities/benchmark.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Benchmark entities.

Purpose:
    Represent percentile benchmark distributions per asset type, the optional
    operating/quality inputs a facility can be compared on, and the report
    produced by the benchmark comparator.

Layer:
    domain/entities
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from decimal import Decimal

from carefin_core.domain.enums.analysis import (
    BenchmarkCategory,
    BenchmarkUnit,
    PerformanceRating,
)
from carefin_core.domain.enums.assets import AssetType
from carefin_core.domain.exceptions.underwriting import ReferenceDataError


@dataclass(frozen=True, slots=True)
class Benchmark:
    """Distribution of one metric for one asset type.

    Attributes:
        metric:
            Stable metric key (e.g. ``"occupancy_rate"``).
        name:
            Display name.
        category:
            Report category the metric belongs to.
        unit:
            Display unit.
        p10, p25, p50, p75, p90:
            Percentile anchors. Must be non-decreasing.
        mean:
            Distribution mean.
        description:
            Optional free-text description.
    """

    metric: str
    name: str
    category: BenchmarkCategory
    unit: BenchmarkUnit
    p10: Decimal
    p25: Decimal
    p50: Decimal
    p75: Decimal
    p90: Decimal
    mean: Decimal
    description: str = ""

    def __post_init__(self) -> None:
        anchors = self.anchors
        if any(lower > upper for lower, upper in zip(anchors, anchors[1:], strict=False)):
            raise ReferenceDataError(
                "Benchmark percentile anchors must be non-decreasing.",
                details={"metric": self.metric},
            )

    @property
    def anchors(self) -> tuple[Decimal, Decimal, Decimal, Decimal, Decimal]:
        return (self.p10, self.p25, self.p50, self.p75, self.p90)


@dataclass(frozen=True, slots=True)
class BenchmarkSet:
    """All benchmarks for one asset type."""

    asset_type: AssetType
    source: str
    effective_date: str
    benchmarks: tuple[Benchmark, ...]

    def __iter__(self) -> Iterator[Benchmark]:
        return iter(self.benchmarks)

    def get(self, metric: str) -> Benchmark | None:
        for benchmark in self.benchmarks:
            if benchmark.metric == metric:
                return benchmark
        return None


@dataclass(frozen=True, slots=True)
class OperatingMetrics:
    """Optional operating inputs. Rates and mixes are fractions (0.85, not 85).

    Every field may be ``None`` when the source did not provide it; missing
    values are simply not compared.
    """

    occupancy_rate: Decimal | None = None
    medicare_mix: Decimal | None = None
    medicaid_mix: Decimal | None = None
    private_pay_mix: Decimal | None = None
    average_monthly_rate: Decimal | None = None
    average_length_of_stay: Decimal | None = None
    rn_hppd: Decimal | None = None
    total_nursing_hppd: Decimal | None = None
    turnover_rate: Decimal | None = None


@dataclass(frozen=True, slots=True)
class QualityMetrics:
    """Optional CMS quality inputs."""

    overall_rating: Decimal | None = None
    health_inspection_rating: Decimal | None = None
    total_deficiencies: Decimal | None = None
    rn_hppd: Decimal | None = None
    total_nursing_hppd: Decimal | None = None


@dataclass(frozen=True, slots=True)
class BenchmarkComparison:
    """One metric evaluated against its benchmark.

    Attributes:
        metric:
            Metric key.
        name:
            Display name.
        category:
            Category the benchmark is reported under.
        actual_value:
            Facility value.
        benchmark_p50:
            Benchmark median.
        percentile:
            Direction-adjusted percentile in ``[0, 100]``.
        rating:
            Rating bucket derived from ``percentile``.
        variance:
            ``actual_value - benchmark_p50``.
        variance_percent:
            ``variance / benchmark_p50`` (zero when the median is zero).
    """

    metric: str
    name: str
    category: BenchmarkCategory
    actual_value: Decimal
    benchmark_p50: Decimal
    percentile: Decimal
    rating: PerformanceRating
    variance: Decimal
    variance_percent: Decimal


@dataclass(frozen=True, slots=True)
class FacilityBenchmarkReport:
    """Aggregated benchmark evaluation for one facility."""

    facility_name: str
    asset_type: AssetType
    financial: tuple[BenchmarkComparison, ...]
    operational: tuple[BenchmarkComparison, ...]
    quality: tuple[BenchmarkComparison, ...]
    staffing: tuple[BenchmarkComparison, ...]
    overall_score: Decimal
    overall_rating: PerformanceRating
    strengths: tuple[str, ...]
    weaknesses: tuple[str, ...]
    recommendations: tuple[str, ...]

    @property
    def comparisons(self) -> tuple[BenchmarkComparison, ...]:
        return (*self.financial, *self.operational, *self.quality, *self.staffing)


__all__ = [
    "Benchmark",
    "BenchmarkSet",
    "OperatingMetrics",
    "QualityMetrics",
    "BenchmarkComparison",
    "FacilityBenchmarkReport",
]
