# src/carefin_core/domain/services/cross_document_reconciler.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Cross-document reconciler.

Purpose:
    Detect field-level disagreements between extractions of the same
    facility from different source documents, auto-resolve immaterial ones
    and leave material ones pending for a manual decision.

Layer:
    domain/services

Notes:
    - Pure domain logic:
        * No logging.
        * No I/O.
    - Records are grouped by lowercased, trimmed facility name. Every member
      after the first is compared against the first.
    - Variance is ``|a - b| / max(a, b)``. Differences at or below
      ``conflict_epsilon`` are noise. Conflicts at or below
      ``auto_resolve_threshold`` resolve to the higher value.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Final

from carefin_core.domain.entities.conflict import (
    Conflict,
    DocumentSummary,
    FacilityCrossReference,
    FacilityRecord,
    ReconciliationResult,
    SourceValue,
)
from carefin_core.domain.enums.analysis import ConflictField, DocumentKind, ResolutionState
from carefin_core.domain.exceptions.underwriting import ConflictNotFoundError

_ZERO = Decimal("0")
_HUNDRED = Decimal("100")

FINANCIAL_DOCUMENT_MIN_ITEMS: Final[int] = 20


@dataclass(frozen=True, slots=True)
class ReconcilerConfig:
    """Thresholds for conflict detection and auto-resolution.

    Attributes:
        auto_resolve_threshold:
            Variance at or below which a conflict auto-resolves.
        conflict_epsilon:
            Variance at or below which two values are considered equal.
    """

    auto_resolve_threshold: Decimal = Decimal("0.03")
    conflict_epsilon: Decimal = Decimal("0.001")


def relative_variance(a: Decimal, b: Decimal) -> Decimal:
    """Return ``|a - b| / max(|a|, |b|)``, or zero when both are zero."""
    denominator = max(abs(a), abs(b))
    if denominator == 0:
        return _ZERO
    return abs(a - b) / denominator


def validation_score(conflicts: Sequence[Conflict]) -> int:
    """Percent of conflicts no longer pending, rounded half-up (100 when none)."""
    if not conflicts:
        return 100
    settled = sum(1 for c in conflicts if not c.is_pending)
    score = Decimal(settled) * _HUNDRED / Decimal(len(conflicts))
    return int(score.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def classify_document(line_item_count: int) -> DocumentKind:
    if line_item_count > FINANCIAL_DOCUMENT_MIN_ITEMS:
        return DocumentKind.FINANCIAL
    if line_item_count > 0:
        return DocumentKind.SUMMARY
    return DocumentKind.REFERENCE


class CrossDocumentReconciler:
    """Reconcile facility records extracted from multiple documents."""

    __slots__ = ("_config",)

    def __init__(self, config: ReconcilerConfig | None = None) -> None:
        self._config = config or ReconcilerConfig()

    @property
    def config(self) -> ReconcilerConfig:
        return self._config

    def reconcile(self, records: Sequence[FacilityRecord]) -> ReconciliationResult:
        """Detect and triage conflicts across ``records``.

        Args:
            records: Facility records in source order.

        Returns:
            Conflicts (in group then field order), document summaries,
            facility cross-references and the validation score.
        """
        groups = _group_by_facility(records)
        conflicts: list[Conflict] = []
        cross_refs: list[FacilityCrossReference] = []

        for key, members in groups.items():
            group_conflicts = self._group_conflicts(key, members)
            conflicts.extend(group_conflicts)
            cross_refs.append(
                FacilityCrossReference(
                    facility_name=members[0].facility_name.strip(),
                    sources=_unique(m.source for m in members),
                    line_item_count=sum(len(m.line_items) for m in members),
                    has_conflicts=bool(group_conflicts),
                )
            )

        return ReconciliationResult(
            conflicts=tuple(conflicts),
            validation_score=validation_score(conflicts),
            documents=summarize_documents(records),
            facilities=tuple(cross_refs),
        )

    def resolve(
        self,
        conflicts: Sequence[Conflict],
        conflict_id: str,
        value: Decimal,
    ) -> tuple[Conflict, ...]:
        """Manually resolve one pending conflict.

        Args:
            conflicts: Current conflict list.
            conflict_id: Identifier of the conflict to resolve.
            value: Value chosen by the reviewer.

        Returns:
            A new conflict tuple with the target transitioned to ``manual``.

        Raises:
            ConflictNotFoundError: If no conflict has ``conflict_id``.
            ConflictAlreadyResolvedError: If the target is already resolved.
        """
        resolved: list[Conflict] = []
        found = False
        for conflict in conflicts:
            if conflict.conflict_id == conflict_id:
                found = True
                conflict = conflict.resolve(value, state=ResolutionState.MANUAL)
            resolved.append(conflict)
        if not found:
            raise ConflictNotFoundError(
                f"Conflict not found: {conflict_id}",
                details={"conflict_id": conflict_id},
            )
        return tuple(resolved)

    # ------------------------------------------------------------------ #
    # Internals                                                          #
    # ------------------------------------------------------------------ #

    def _group_conflicts(self, key: str, members: Sequence[FacilityRecord]) -> list[Conflict]:
        if len(members) < 2:
            return []
        first = members[0]
        out: list[Conflict] = []
        for index, other in enumerate(members[1:], start=1):
            for field, a, b in (
                (ConflictField.BEDS, Decimal(first.beds), Decimal(other.beds)),
                (ConflictField.TOTAL_REVENUE, first.total_revenue, other.total_revenue),
            ):
                conflict = self._detect(key, first, other, index, field, a, b)
                if conflict is not None:
                    out.append(conflict)
        return out

    def _detect(
        self,
        key: str,
        first: FacilityRecord,
        other: FacilityRecord,
        index: int,
        field: ConflictField,
        a: Decimal,
        b: Decimal,
    ) -> Conflict | None:
        variance = relative_variance(a, b)
        if variance <= self._config.conflict_epsilon:
            return None
        conflict = Conflict(
            conflict_id=f"{key}:{field.value}:{index}",
            facility_name=first.facility_name.strip(),
            field=field,
            first=SourceValue(source=first.source, value=a),
            second=SourceValue(source=other.source, value=b),
            variance=variance,
        )
        if variance <= self._config.auto_resolve_threshold:
            return conflict.resolve(max(a, b), state=ResolutionState.AUTO)
        return conflict


def summarize_documents(records: Iterable[FacilityRecord]) -> tuple[DocumentSummary, ...]:
    """Summarize what each source contributed, in first-seen source order."""
    facilities: dict[str, list[str]] = {}
    counts: dict[str, int] = {}
    for record in records:
        names = facilities.setdefault(record.source, [])
        if record.facility_name.strip() not in names:
            names.append(record.facility_name.strip())
        counts[record.source] = counts.get(record.source, 0) + len(record.line_items)
    return tuple(
        DocumentSummary(
            source=source,
            facilities=tuple(names),
            line_item_count=counts[source],
            kind=classify_document(counts[source]),
        )
        for source, names in facilities.items()
    )


def _group_by_facility(records: Iterable[FacilityRecord]) -> dict[str, list[FacilityRecord]]:
    groups: dict[str, list[FacilityRecord]] = {}
    for record in records:
        groups.setdefault(record.group_key, []).append(record)
    return groups


def _unique(values: Iterable[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(values))


__all__ = [
    "FINANCIAL_DOCUMENT_MIN_ITEMS",
    "ReconcilerConfig",
    "relative_variance",
    "validation_score",
    "classify_document",
    "summarize_documents",
    "CrossDocumentReconciler",
]
