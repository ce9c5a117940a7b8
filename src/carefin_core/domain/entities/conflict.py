# src/carefin_core/domain/entities/conflict.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Cross-document reconciliation entities.

Purpose:
    Represent per-source facility extractions, the field-level conflicts
    detected between them, and the reconciliation result.

Layer:
    domain/entities

Notes:
    - A conflict's only allowed transitions are ``pending -> auto`` and
      ``pending -> manual``. Both set ``resolved_value``; resolved conflicts
      never reopen.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal

from carefin_core.domain.entities.financial_statement import DECIMAL_ZERO
from carefin_core.domain.enums.accounts import LineItemCategory
from carefin_core.domain.enums.analysis import ConflictField, DocumentKind, ResolutionState
from carefin_core.domain.exceptions.underwriting import ConflictAlreadyResolvedError


@dataclass(frozen=True, slots=True)
class RecordLine:
    """One extracted line item with the category assigned during mapping."""

    label: str
    amount: Decimal
    category: LineItemCategory


@dataclass(frozen=True, slots=True)
class FacilityRecord:
    """One facility as extracted from one source document.

    Attributes:
        facility_name:
            Facility name as written in the source.
        source:
            Source document identifier (file name, document id).
        beds:
            Reported bed count.
        line_items:
            Extracted line items.
    """

    facility_name: str
    source: str
    beds: int
    line_items: tuple[RecordLine, ...] = ()

    @property
    def group_key(self) -> str:
        return self.facility_name.strip().lower()

    @property
    def total_revenue(self) -> Decimal:
        return sum(
            (line.amount for line in self.line_items if line.category is LineItemCategory.REVENUE),
            DECIMAL_ZERO,
        )


@dataclass(frozen=True, slots=True)
class SourceValue:
    """A value paired with the source that reported it."""

    source: str
    value: Decimal


@dataclass(frozen=True, slots=True)
class Conflict:
    """Disagreement between two sources on one field of one facility.

    Attributes:
        conflict_id:
            Deterministic identifier (``"<facility key>:<field>:<member index>"``).
        facility_name:
            Display name of the facility (from the first record of the group).
        field:
            Field that disagrees.
        first:
            Value reported by the group's first record.
        second:
            Value reported by the other record.
        variance:
            ``|a - b| / max(a, b)``.
        state:
            Resolution state.
        resolved_value:
            Value chosen on resolution, ``None`` while pending.
    """

    conflict_id: str
    facility_name: str
    field: ConflictField
    first: SourceValue
    second: SourceValue
    variance: Decimal
    state: ResolutionState = ResolutionState.PENDING
    resolved_value: Decimal | None = None

    @property
    def is_pending(self) -> bool:
        return self.state is ResolutionState.PENDING

    def resolve(self, value: Decimal, *, state: ResolutionState) -> Conflict:
        """Return a copy transitioned out of ``pending``.

        Raises:
            ConflictAlreadyResolvedError: If the conflict is already resolved.
            ValueError: If ``state`` is ``pending``.
        """
        if state is ResolutionState.PENDING:
            raise ValueError("Resolution state must be auto or manual.")
        if not self.is_pending:
            raise ConflictAlreadyResolvedError(
                f"Conflict already resolved: {self.conflict_id}",
                details={"conflict_id": self.conflict_id, "state": self.state.value},
            )
        return replace(self, state=state, resolved_value=value)


@dataclass(frozen=True, slots=True)
class DocumentSummary:
    """What one source document contributed."""

    source: str
    facilities: tuple[str, ...]
    line_item_count: int
    kind: DocumentKind


@dataclass(frozen=True, slots=True)
class FacilityCrossReference:
    """Which sources mention a facility, and whether they disagree."""

    facility_name: str
    sources: tuple[str, ...]
    line_item_count: int
    has_conflicts: bool


@dataclass(frozen=True, slots=True)
class ReconciliationResult:
    """Conflicts, per-document summaries, cross-references and the score."""

    conflicts: tuple[Conflict, ...]
    validation_score: int
    documents: tuple[DocumentSummary, ...] = ()
    facilities: tuple[FacilityCrossReference, ...] = ()

    @property
    def pending(self) -> tuple[Conflict, ...]:
        return tuple(c for c in self.conflicts if c.is_pending)


__all__ = [
    "RecordLine",
    "FacilityRecord",
    "SourceValue",
    "Conflict",
    "DocumentSummary",
    "FacilityCrossReference",
    "ReconciliationResult",
]
