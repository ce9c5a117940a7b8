# src/carefin_core/domain/services/benchmark_comparator.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Benchmark comparator.

Purpose:
    Compare a normalized statement (plus optional operating and quality
    inputs) against percentile benchmark tables and produce per-metric
    ratings, an overall weighted score and narrative insights.

Layer:
    domain/services

Notes:
    - Pure domain logic:
        * No logging.
        * No I/O.
    - Percentiles are piecewise-linear between the p10/p25/p50/p75/p90
      anchors, scaled from zero below p10 and extrapolated above p90 on the
      p75-p90 slope, capped at 100.
    - For lower-is-better metrics the percentile is inverted before rating.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Final

from carefin_core.domain.entities.benchmark import (
    Benchmark,
    BenchmarkComparison,
    BenchmarkSet,
    FacilityBenchmarkReport,
    OperatingMetrics,
    QualityMetrics,
)
from carefin_core.domain.entities.financial_statement import DECIMAL_ZERO, FinancialStatement
from carefin_core.domain.enums.analysis import BenchmarkCategory, PerformanceRating
from carefin_core.domain.enums.assets import AssetType
from carefin_core.domain.reference.benchmark_tables import (
    BenchmarkLibrary,
    default_benchmark_library,
)
from carefin_core.domain.services.financial_normalizer import AGENCY_CATEGORY

_HUNDRED = Decimal("100")
_NINETY = Decimal("90")
_TEN = Decimal("10")
_NEUTRAL_SCORE = Decimal("50")
_SCORE_QUANTUM = Decimal("0.01")
_RATIO_QUANTUM = Decimal("0.000001")

LOWER_IS_BETTER: Final[frozenset[str]] = frozenset(
    {
        "labor_cost_percent",
        "agency_percent",
        "total_deficiencies",
        "turnover_rate",
        "medicaid_mix",
    }
)

CATEGORY_WEIGHTS: Final[Mapping[BenchmarkCategory, Decimal]] = {
    BenchmarkCategory.FINANCIAL: Decimal("0.35"),
    BenchmarkCategory.OPERATIONAL: Decimal("0.30"),
    BenchmarkCategory.QUALITY: Decimal("0.20"),
    BenchmarkCategory.STAFFING: Decimal("0.15"),
}
FALLBACK_WEIGHT: Final[Decimal] = Decimal("0.25")

# Rating thresholds, highest first.
RATING_THRESHOLDS: Final[tuple[tuple[Decimal, PerformanceRating], ...]] = (
    (Decimal("75"), PerformanceRating.EXCELLENT),
    (Decimal("55"), PerformanceRating.GOOD),
    (Decimal("35"), PerformanceRating.AVERAGE),
    (Decimal("15"), PerformanceRating.BELOW_AVERAGE),
)

MAX_INSIGHTS: Final[int] = 5

RECOMMENDATIONS: Final[Mapping[str, str]] = {
    "occupancy_rate": (
        "Focus on census building through enhanced marketing and referral relationships"
    ),
    "labor_cost_percent": (
        "Review staffing patterns and consider operational efficiency improvements"
    ),
    "agency_percent": (
        "Invest in recruitment and retention programs to reduce agency dependency"
    ),
    "ebitdar_margin": "Analyze revenue enhancement opportunities and cost control measures",
    "cms_overall_rating": (
        "Implement quality improvement initiatives to address deficiency patterns"
    ),
    "total_deficiencies": "Conduct mock surveys and enhance compliance monitoring systems",
    "rn_hppd": "Evaluate RN staffing levels against acuity requirements",
    "turnover_rate": "Improve employee engagement and competitive compensation packages",
}

# Metric-name fragments used to infer a category for weighting, checked in order.
_CATEGORY_HINTS: Final[tuple[tuple[BenchmarkCategory, tuple[str, ...]], ...]] = (
    (BenchmarkCategory.FINANCIAL, ("margin", "cost", "revenue")),
    (BenchmarkCategory.QUALITY, ("rating", "deficien")),
    (BenchmarkCategory.STAFFING, ("hppd", "turnover", "agency")),
    (BenchmarkCategory.OPERATIONAL, ("occupancy", "mix", "length_of_stay", "census")),
)


def interpolate_percentile(value: Decimal, benchmark: Benchmark) -> Decimal:
    """Return the raw (not direction-adjusted) percentile of ``value``.

    Args:
        value: Facility value.
        benchmark: Benchmark distribution.

    Returns:
        Percentile in ``[0, 100]``.
    """
    p10, p25, p50, p75, p90 = benchmark.anchors

    if value <= p10:
        if p10 == DECIMAL_ZERO:
            return DECIMAL_ZERO
        return max(DECIMAL_ZERO, _TEN * value / p10)

    segments = (
        (p10, Decimal("10"), p25, Decimal("25")),
        (p25, Decimal("25"), p50, Decimal("50")),
        (p50, Decimal("50"), p75, Decimal("75")),
        (p75, Decimal("75"), p90, Decimal("90")),
    )
    for lower, lower_pct, upper, upper_pct in segments:
        if value <= upper:
            span = upper - lower
            if span == DECIMAL_ZERO:
                return upper_pct
            return lower_pct + (upper_pct - lower_pct) * (value - lower) / span

    slope_span = p90 - p75
    if slope_span == DECIMAL_ZERO:
        return _HUNDRED
    return min(_HUNDRED, _NINETY + _TEN * (value - p90) / slope_span)


def percentile_to_rating(percentile: Decimal) -> PerformanceRating:
    """Map a direction-adjusted percentile to its rating bucket."""
    for threshold, rating in RATING_THRESHOLDS:
        if percentile >= threshold:
            return rating
    return PerformanceRating.POOR


def infer_weight_category(metric: str) -> BenchmarkCategory | None:
    """Infer a weighting category from a metric name, or ``None``."""
    for category, hints in _CATEGORY_HINTS:
        if any(hint in metric for hint in hints):
            return category
    return None


def _q(value: Decimal, quantum: Decimal) -> Decimal:
    return value.quantize(quantum, rounding=ROUND_HALF_UP)


@dataclass(frozen=True, slots=True)
class _Insights:
    strengths: list[str] = field(default_factory=list)
    weaknesses: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)


class BenchmarkComparator:
    """Compare facilities against benchmark tables.

    Args:
        library:
            Benchmark sets by asset type. Defaults to the built-in tables.
    """

    def __init__(self, library: BenchmarkLibrary | None = None) -> None:
        self._library = library if library is not None else default_benchmark_library()

    @property
    def library(self) -> BenchmarkLibrary:
        return self._library

    # ------------------------------------------------------------------ #
    # Public API                                                         #
    # ------------------------------------------------------------------ #

    def report_for(
        self,
        statement: FinancialStatement,
        asset_type: AssetType | str | None,
        *,
        operations: OperatingMetrics | None = None,
        quality: QualityMetrics | None = None,
    ) -> FacilityBenchmarkReport:
        """Resolve the benchmark set for ``asset_type`` and compare.

        Raises:
            MissingFieldError: If ``asset_type`` is missing.
            UnknownAssetTypeError: If no benchmark set exists for it.
        """
        benchmark_set = self._library.get(asset_type)
        return self.compare(statement, benchmark_set, operations=operations, quality=quality)

    def compare(
        self,
        statement: FinancialStatement,
        benchmark_set: BenchmarkSet,
        *,
        operations: OperatingMetrics | None = None,
        quality: QualityMetrics | None = None,
    ) -> FacilityBenchmarkReport:
        """Produce a full benchmark report.

        Metrics with no available actual value are skipped rather than
        compared against zero.
        """
        actuals = extract_actual_values(statement, operations=operations, quality=quality)

        grouped: dict[BenchmarkCategory, list[BenchmarkComparison]] = {
            category: [] for category in BenchmarkCategory
        }
        for benchmark in benchmark_set:
            actual = actuals.get(benchmark.metric)
            if actual is None:
                continue
            grouped[benchmark.category].append(self.compare_metric(actual, benchmark))

        ordered: list[BenchmarkComparison] = [
            comparison for category in BenchmarkCategory for comparison in grouped[category]
        ]
        overall = self.overall_score(ordered)
        insights = self._insights(ordered)

        return FacilityBenchmarkReport(
            facility_name=statement.facility_name,
            asset_type=benchmark_set.asset_type,
            financial=tuple(grouped[BenchmarkCategory.FINANCIAL]),
            operational=tuple(grouped[BenchmarkCategory.OPERATIONAL]),
            quality=tuple(grouped[BenchmarkCategory.QUALITY]),
            staffing=tuple(grouped[BenchmarkCategory.STAFFING]),
            overall_score=overall,
            overall_rating=percentile_to_rating(overall),
            strengths=tuple(insights.strengths[:MAX_INSIGHTS]),
            weaknesses=tuple(insights.weaknesses[:MAX_INSIGHTS]),
            recommendations=tuple(insights.recommendations[:MAX_INSIGHTS]),
        )

    def compare_metric(self, actual: Decimal, benchmark: Benchmark) -> BenchmarkComparison:
        """Evaluate one value against one benchmark."""
        raw = interpolate_percentile(actual, benchmark)
        percentile = _HUNDRED - raw if benchmark.metric in LOWER_IS_BETTER else raw
        percentile = _q(percentile, _SCORE_QUANTUM)
        variance = actual - benchmark.p50
        variance_percent = (
            _q(variance / benchmark.p50, _RATIO_QUANTUM)
            if benchmark.p50 != DECIMAL_ZERO
            else DECIMAL_ZERO
        )
        return BenchmarkComparison(
            metric=benchmark.metric,
            name=benchmark.name,
            category=benchmark.category,
            actual_value=actual,
            benchmark_p50=benchmark.p50,
            percentile=percentile,
            rating=percentile_to_rating(percentile),
            variance=variance,
            variance_percent=variance_percent,
        )

    @staticmethod
    def overall_score(comparisons: Sequence[BenchmarkComparison]) -> Decimal:
        """Weighted average of percentiles; 50 when there is nothing to score.

        Weights come from the category inferred from each metric's name,
        falling back to 0.25 when no category can be inferred.
        """
        if not comparisons:
            return _NEUTRAL_SCORE

        total_weight = DECIMAL_ZERO
        weighted_sum = DECIMAL_ZERO
        for comparison in comparisons:
            category = infer_weight_category(comparison.metric)
            weight = CATEGORY_WEIGHTS[category] if category is not None else FALLBACK_WEIGHT
            total_weight += weight
            weighted_sum += comparison.percentile * weight

        return _q(weighted_sum / total_weight, _SCORE_QUANTUM)

    # ------------------------------------------------------------------ #
    # Internal helpers                                                   #
    # ------------------------------------------------------------------ #

    @staticmethod
    def _insights(comparisons: Sequence[BenchmarkComparison]) -> _Insights:
        insights = _Insights()

        for c in comparisons:
            if c.rating is PerformanceRating.EXCELLENT:
                insights.strengths.append(
                    f"{c.name} performing in top quartile ({c.percentile:.0f}th percentile)"
                )
            elif c.rating is PerformanceRating.GOOD:
                insights.strengths.append(f"{c.name} performing above average")

        for c in comparisons:
            if c.rating is PerformanceRating.POOR:
                sign = "+" if c.variance_percent > DECIMAL_ZERO else ""
                insights.weaknesses.append(
                    f"{c.name} significantly below benchmark "
                    f"({sign}{c.variance_percent * _HUNDRED:.1f}% vs median)"
                )
                recommendation = RECOMMENDATIONS.get(c.metric)
                if recommendation:
                    insights.recommendations.append(recommendation)
            elif c.rating is PerformanceRating.BELOW_AVERAGE:
                insights.weaknesses.append(f"{c.name} below industry average")

        return insights


def extract_actual_values(
    statement: FinancialStatement,
    *,
    operations: OperatingMetrics | None = None,
    quality: QualityMetrics | None = None,
) -> dict[str, Decimal]:
    """Collect the facility's comparable metric values by benchmark key.

    Ratios whose denominator is zero on the statement are omitted so that a
    missing census or bed count is not scored as a zero.
    """
    metrics = statement.metrics
    values: dict[str, Decimal] = {}

    if statement.patient_days > DECIMAL_ZERO:
        values["revenue_per_patient_day"] = metrics.revenue_per_patient_day
    if statement.beds > 0:
        values["revenue_per_bed"] = metrics.revenue_per_bed
        values["revenue_per_unit"] = metrics.revenue_per_bed
    if statement.total_net_revenue > DECIMAL_ZERO:
        values["ebitdar_margin"] = metrics.ebitdar_margin
        values["noi_margin"] = metrics.noi_margin
        values["labor_cost_percent"] = metrics.labor_cost_percent

    if statement.has_expense(AGENCY_CATEGORY) and statement.total_labor_expense > DECIMAL_ZERO:
        values["agency_percent"] = _q(
            statement.expense_amount(AGENCY_CATEGORY) / statement.total_labor_expense,
            _RATIO_QUANTUM,
        )

    if statement.beds > 0 and statement.patient_days > DECIMAL_ZERO:
        values["occupancy_rate"] = metrics.occupancy

    if operations is not None:
        _put(values, "occupancy_rate", operations.occupancy_rate)
        _put(values, "medicare_mix", operations.medicare_mix)
        _put(values, "medicaid_mix", operations.medicaid_mix)
        _put(values, "private_pay_mix", operations.private_pay_mix)
        _put(values, "monthly_rate", operations.average_monthly_rate)
        _put(values, "average_length_of_stay", operations.average_length_of_stay)
        _put(values, "rn_hppd", operations.rn_hppd)
        _put(values, "total_nursing_hppd", operations.total_nursing_hppd)
        _put(values, "turnover_rate", operations.turnover_rate)

    if quality is not None:
        _put(values, "cms_overall_rating", quality.overall_rating)
        _put(values, "health_inspection_rating", quality.health_inspection_rating)
        _put(values, "total_deficiencies", quality.total_deficiencies)
        # Reported CMS staffing takes precedence over operator-reported staffing.
        _put(values, "rn_hppd", quality.rn_hppd)
        _put(values, "total_nursing_hppd", quality.total_nursing_hppd)

    return values


def _put(values: dict[str, Decimal], key: str, value: Decimal | None) -> None:
    if value is not None:
        values[key] = value


__all__ = [
    "BenchmarkComparator",
    "CATEGORY_WEIGHTS",
    "FALLBACK_WEIGHT",
    "LOWER_IS_BETTER",
    "RECOMMENDATIONS",
    "extract_actual_values",
    "infer_weight_category",
    "interpolate_percentile",
    "percentile_to_rating",
]
