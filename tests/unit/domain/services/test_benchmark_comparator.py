# tests/unit/domain/services/test_benchmark_comparator.py
from __future__ import annotations

from decimal import Decimal

import pytest

from carefin_core.domain.entities.benchmark import (
    Benchmark,
    BenchmarkSet,
    OperatingMetrics,
    QualityMetrics,
)
from carefin_core.domain.entities.financial_statement import FinancialStatement, StatementPeriod
from carefin_core.domain.enums.analysis import (
    BenchmarkCategory,
    BenchmarkUnit,
    PerformanceRating,
)
from carefin_core.domain.enums.assets import AssetType
from carefin_core.domain.exceptions.underwriting import (
    MissingFieldError,
    ReferenceDataError,
    UnknownAssetTypeError,
)
from carefin_core.domain.services.benchmark_comparator import (
    BenchmarkComparator,
    extract_actual_values,
    interpolate_percentile,
    percentile_to_rating,
)
from carefin_core.domain.services.financial_normalizer import build_statement


def _make_benchmark(
    metric: str = "ebitdar_margin",
    category: BenchmarkCategory = BenchmarkCategory.FINANCIAL,
) -> Benchmark:
    """Anchors equal to their percentiles so interpolation is easy to read."""
    return Benchmark(
        metric=metric,
        name=metric.replace("_", " ").title(),
        category=category,
        unit=BenchmarkUnit.NUMBER,
        p10=Decimal("10"),
        p25=Decimal("25"),
        p50=Decimal("50"),
        p75=Decimal("75"),
        p90=Decimal("90"),
        mean=Decimal("50"),
    )


def _make_statement(
    *,
    beds: int = 100,
    patient_days: str = "30000",
    revenue: str = "10000000",
    labor: str = "5500000",
    rent: str = "500000",
) -> FinancialStatement:
    return build_statement(
        facility_name="Oak Manor",
        beds=beds,
        patient_days=Decimal(patient_days),
        period=StatementPeriod(),
        revenue=[("medicaid", Decimal(revenue))] if Decimal(revenue) else [],
        expenses=[("nursing_wages", Decimal(labor)), ("rent", Decimal(rent))],
    )


def test_interpolation_hits_anchors_and_segments() -> None:
    benchmark = _make_benchmark()

    assert interpolate_percentile(Decimal("50"), benchmark) == Decimal("50")
    assert interpolate_percentile(Decimal("30"), benchmark) == Decimal("30")
    # Below p10 scales from zero.
    assert interpolate_percentile(Decimal("5"), benchmark) == Decimal("5")
    assert interpolate_percentile(Decimal("-5"), benchmark) == Decimal("0")


def test_interpolation_extrapolates_above_p90_and_caps_at_100() -> None:
    benchmark = _make_benchmark()

    assert interpolate_percentile(Decimal("105"), benchmark) == Decimal("100")
    assert interpolate_percentile(Decimal("96"), benchmark) == Decimal("94")
    assert interpolate_percentile(Decimal("1000"), benchmark) == Decimal("100")


def test_lower_is_better_metrics_are_inverted() -> None:
    comparator = BenchmarkComparator()

    higher = comparator.compare_metric(Decimal("25"), _make_benchmark("ebitdar_margin"))
    lower = comparator.compare_metric(Decimal("25"), _make_benchmark("labor_cost_percent"))

    assert higher.percentile == Decimal("25.00")
    assert higher.rating is PerformanceRating.BELOW_AVERAGE
    assert lower.percentile == Decimal("75.00")
    assert lower.rating is PerformanceRating.EXCELLENT
    assert lower.variance == Decimal("-25")
    assert lower.variance_percent == Decimal("-0.5")


@pytest.mark.parametrize(
    ("percentile", "expected"),
    [
        ("100", PerformanceRating.EXCELLENT),
        ("75", PerformanceRating.EXCELLENT),
        ("74.99", PerformanceRating.GOOD),
        ("55", PerformanceRating.GOOD),
        ("35", PerformanceRating.AVERAGE),
        ("15", PerformanceRating.BELOW_AVERAGE),
        ("14.99", PerformanceRating.POOR),
        ("0", PerformanceRating.POOR),
    ],
)
def test_percentile_to_rating_thresholds(percentile: str, expected: PerformanceRating) -> None:
    assert percentile_to_rating(Decimal(percentile)) is expected


def test_overall_score_is_neutral_without_comparisons() -> None:
    assert BenchmarkComparator.overall_score([]) == Decimal("50")


def test_overall_score_weights_by_inferred_category() -> None:
    comparator = BenchmarkComparator()
    financial = comparator.compare_metric(Decimal("80"), _make_benchmark("ebitdar_margin"))
    operational = comparator.compare_metric(
        Decimal("40"), _make_benchmark("occupancy_rate", BenchmarkCategory.OPERATIONAL)
    )

    # (80 * 0.35 + 40 * 0.30) / 0.65
    assert BenchmarkComparator.overall_score([financial, operational]) == Decimal("61.54")


def test_benchmark_rejects_decreasing_anchors() -> None:
    with pytest.raises(ReferenceDataError):
        Benchmark(
            metric="x",
            name="X",
            category=BenchmarkCategory.FINANCIAL,
            unit=BenchmarkUnit.NUMBER,
            p10=Decimal("10"),
            p25=Decimal("5"),
            p50=Decimal("50"),
            p75=Decimal("75"),
            p90=Decimal("90"),
            mean=Decimal("50"),
        )


def test_extract_actual_values_skips_zero_denominators() -> None:
    empty = _make_statement(beds=0, patient_days="0", revenue="0")

    assert extract_actual_values(empty) == {}


def test_extract_actual_values_prefers_reported_quality_staffing() -> None:
    values = extract_actual_values(
        _make_statement(),
        operations=OperatingMetrics(occupancy_rate=Decimal("0.9"), rn_hppd=Decimal("0.5")),
        quality=QualityMetrics(overall_rating=Decimal("4"), rn_hppd=Decimal("0.7")),
    )

    assert values["occupancy_rate"] == Decimal("0.9")
    assert values["rn_hppd"] == Decimal("0.7")
    assert values["cms_overall_rating"] == Decimal("4")
    assert values["labor_cost_percent"] == Decimal("0.55")


def test_compare_skips_metrics_without_actual_values() -> None:
    benchmark_set = BenchmarkSet(
        asset_type=AssetType.SNF,
        source="test",
        effective_date="2024-12-31",
        benchmarks=(
            _make_benchmark("ebitdar_margin"),
            _make_benchmark("turnover_rate", BenchmarkCategory.STAFFING),
        ),
    )

    report = BenchmarkComparator().compare(_make_statement(), benchmark_set)

    assert [c.metric for c in report.comparisons] == ["ebitdar_margin"]
    assert report.staffing == ()


def test_report_for_default_snf_tables() -> None:
    report = BenchmarkComparator().report_for(
        _make_statement(),
        "snf",
        quality=QualityMetrics(overall_rating=Decimal("1")),
    )

    assert report.asset_type is AssetType.SNF
    assert report.facility_name == "Oak Manor"
    assert Decimal("0") <= report.overall_score <= Decimal("100")
    assert report.overall_rating is percentile_to_rating(report.overall_score)
    rating = next(c for c in report.quality if c.metric == "cms_overall_rating")
    assert rating.rating is PerformanceRating.POOR
    assert any("quality improvement" in r for r in report.recommendations)
    assert len(report.strengths) <= 5
    assert len(report.weaknesses) <= 5


def test_report_with_nothing_to_compare_is_neutral_average() -> None:
    empty = _make_statement(beds=0, patient_days="0", revenue="0")

    report = BenchmarkComparator().report_for(empty, AssetType.ALF)

    assert report.comparisons == ()
    assert report.overall_score == Decimal("50")
    assert report.overall_rating is PerformanceRating.AVERAGE


def test_unknown_or_missing_asset_type_raises() -> None:
    comparator = BenchmarkComparator()

    with pytest.raises(UnknownAssetTypeError):
        comparator.report_for(_make_statement(), AssetType.HOSPICE)
    with pytest.raises(UnknownAssetTypeError):
        comparator.report_for(_make_statement(), "MOB")
    with pytest.raises(MissingFieldError):
        comparator.report_for(_make_statement(), None)
