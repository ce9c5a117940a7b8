# tests/unit/domain/services/test_cross_document_reconciler.py
from __future__ import annotations

from decimal import Decimal

import pytest

from carefin_core.domain.entities.conflict import FacilityRecord, RecordLine
from carefin_core.domain.enums.accounts import LineItemCategory
from carefin_core.domain.enums.analysis import ConflictField, DocumentKind, ResolutionState
from carefin_core.domain.exceptions.underwriting import (
    ConflictAlreadyResolvedError,
    ConflictNotFoundError,
)
from carefin_core.domain.services.cross_document_reconciler import (
    CrossDocumentReconciler,
    ReconcilerConfig,
    classify_document,
    relative_variance,
    validation_score,
)


def _make_record(
    source: str,
    beds: int,
    *,
    name: str = "Oak Manor",
    revenue: str | None = None,
    extra_lines: int = 0,
) -> FacilityRecord:
    lines: list[RecordLine] = []
    if revenue is not None:
        lines.append(RecordLine("Total Revenue", Decimal(revenue), LineItemCategory.REVENUE))
    lines.extend(
        RecordLine(f"Line {i}", Decimal("1"), LineItemCategory.EXPENSE) for i in range(extra_lines)
    )
    return FacilityRecord(facility_name=name, source=source, beds=beds, line_items=tuple(lines))


def test_relative_variance() -> None:
    assert relative_variance(Decimal("100"), Decimal("104")) == Decimal("4") / Decimal("104")
    assert relative_variance(Decimal("0"), Decimal("0")) == Decimal("0")
    assert relative_variance(Decimal("0"), Decimal("5")) == Decimal("1")


def test_small_bed_difference_auto_resolves_to_higher_value() -> None:
    result = CrossDocumentReconciler().reconcile(
        [_make_record("om.pdf", 100), _make_record("census.xlsx", 103)]
    )

    (conflict,) = result.conflicts
    assert conflict.field is ConflictField.BEDS
    assert conflict.state is ResolutionState.AUTO
    assert conflict.resolved_value == Decimal("103")
    assert conflict.first.source == "om.pdf"
    assert conflict.second.source == "census.xlsx"
    assert result.validation_score == 100


def test_variance_exactly_at_threshold_auto_resolves() -> None:
    result = CrossDocumentReconciler().reconcile(
        [_make_record("a.pdf", 97), _make_record("b.pdf", 100)]
    )

    (conflict,) = result.conflicts
    assert conflict.variance == Decimal("0.03")
    assert conflict.state is ResolutionState.AUTO
    assert conflict.resolved_value == Decimal("100")


def test_revenue_variance_just_above_threshold_stays_pending() -> None:
    result = CrossDocumentReconciler().reconcile(
        [
            _make_record("om.pdf", 100, revenue="1000000"),
            _make_record("t12.xlsx", 100, revenue="969900"),
        ]
    )

    (conflict,) = result.conflicts
    assert conflict.field is ConflictField.TOTAL_REVENUE
    assert conflict.variance == Decimal("0.0301")
    assert conflict.state is ResolutionState.PENDING
    assert conflict.resolved_value is None
    assert result.validation_score == 0


def test_material_difference_stays_pending() -> None:
    result = CrossDocumentReconciler().reconcile(
        [_make_record("a.pdf", 100), _make_record("b.pdf", 104)]
    )

    (conflict,) = result.conflicts
    assert conflict.state is ResolutionState.PENDING
    assert conflict.resolved_value is None
    assert conflict.conflict_id == "oak manor:beds:1"
    assert result.pending == (conflict,)
    assert result.validation_score == 0


def test_differences_within_epsilon_are_not_conflicts() -> None:
    result = CrossDocumentReconciler().reconcile(
        [
            _make_record("a.pdf", 100, revenue="1000000"),
            _make_record("b.pdf", 100, revenue="1000500"),
        ]
    )

    assert result.conflicts == ()
    assert result.validation_score == 100


def test_groups_by_trimmed_lowercase_name_and_compares_to_first_member() -> None:
    records = [
        _make_record("a.pdf", 100, name=" Oak Manor ", revenue="1000000"),
        _make_record("b.pdf", 100, name="OAK MANOR", revenue="1020000"),
        _make_record("c.pdf", 120, name="oak manor", revenue="1000000"),
        _make_record("a.pdf", 50, name="Elm Court"),
    ]

    result = CrossDocumentReconciler().reconcile(records)

    assert [c.conflict_id for c in result.conflicts] == [
        "oak manor:total_revenue:1",
        "oak manor:beds:2",
    ]
    revenue, beds = result.conflicts
    assert revenue.state is ResolutionState.AUTO
    assert revenue.resolved_value == Decimal("1020000")
    assert beds.state is ResolutionState.PENDING
    assert result.validation_score == 50

    oak, elm = result.facilities
    assert oak.facility_name == "Oak Manor"
    assert oak.sources == ("a.pdf", "b.pdf", "c.pdf")
    assert oak.has_conflicts is True
    assert elm.has_conflicts is False


def test_manual_resolution_rescores_and_is_terminal() -> None:
    reconciler = CrossDocumentReconciler()
    result = reconciler.reconcile([_make_record("a.pdf", 100), _make_record("b.pdf", 120)])
    (pending,) = result.conflicts

    resolved = reconciler.resolve(result.conflicts, pending.conflict_id, Decimal("110"))

    assert resolved[0].state is ResolutionState.MANUAL
    assert resolved[0].resolved_value == Decimal("110")
    assert validation_score(resolved) == 100
    with pytest.raises(ConflictAlreadyResolvedError):
        reconciler.resolve(resolved, pending.conflict_id, Decimal("120"))


def test_resolving_unknown_conflict_raises() -> None:
    with pytest.raises(ConflictNotFoundError) as excinfo:
        CrossDocumentReconciler().resolve((), "nope:beds:1", Decimal("1"))

    assert excinfo.value.details == {"conflict_id": "nope:beds:1"}


def test_conflict_cannot_be_resolved_back_to_pending() -> None:
    result = CrossDocumentReconciler().reconcile(
        [_make_record("a.pdf", 100), _make_record("b.pdf", 120)]
    )

    with pytest.raises(ValueError):
        result.conflicts[0].resolve(Decimal("100"), state=ResolutionState.PENDING)


def test_custom_threshold_changes_auto_resolution() -> None:
    reconciler = CrossDocumentReconciler(
        ReconcilerConfig(auto_resolve_threshold=Decimal("0.25"), conflict_epsilon=Decimal("0"))
    )

    result = reconciler.reconcile([_make_record("a.pdf", 100), _make_record("b.pdf", 120)])

    assert result.conflicts[0].state is ResolutionState.AUTO


def test_validation_score_rounds_half_up() -> None:
    reconciler = CrossDocumentReconciler()
    result = reconciler.reconcile(
        [
            _make_record("a.pdf", 100, name="A"),
            _make_record("b.pdf", 150, name="A"),
            _make_record("a.pdf", 100, name="B"),
            _make_record("b.pdf", 150, name="B"),
            _make_record("a.pdf", 100, name="C"),
            _make_record("b.pdf", 150, name="C"),
        ]
    )
    resolved = reconciler.resolve(result.conflicts, "a:beds:1", Decimal("100"))
    resolved = reconciler.resolve(resolved, "b:beds:1", Decimal("100"))

    # 2 of 3 settled: 66.67 rounds to 67.
    assert validation_score(resolved) == 67
    assert validation_score(()) == 100


def test_documents_are_summarized_and_classified() -> None:
    result = CrossDocumentReconciler().reconcile(
        [
            _make_record("financials.pdf", 100, extra_lines=21),
            _make_record("summary.pdf", 100, extra_lines=3),
            _make_record("map.pdf", 100),
        ]
    )

    kinds = {d.source: d.kind for d in result.documents}
    assert kinds == {
        "financials.pdf": DocumentKind.FINANCIAL,
        "summary.pdf": DocumentKind.SUMMARY,
        "map.pdf": DocumentKind.REFERENCE,
    }
    assert result.documents[0].facilities == ("Oak Manor",)
    assert result.documents[0].line_item_count == 21
    assert classify_document(20) is DocumentKind.SUMMARY
