# src/carefin_core/application/schemas/dto/reconciliation.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Application DTOs for cross-document reconciliation.

Purpose:
    Input DTOs for facility records extracted from several documents, and
    output DTOs for the conflicts, document summaries and validation score.

Layer:
    application/schemas/dto
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from pydantic import Field, model_validator

from carefin_core.application.schemas.dto.base import BaseDTO, coerce_number
from carefin_core.domain.entities.conflict import FacilityRecord, RecordLine
from carefin_core.domain.enums.accounts import LineItemCategory
from carefin_core.domain.enums.analysis import DocumentKind, ResolutionState


class RecordLineDTO(BaseDTO):
    """One categorized line item from a source document."""

    label: str
    amount: Decimal = Decimal("0")
    category: LineItemCategory = LineItemCategory.OTHER

    @model_validator(mode="before")
    @classmethod
    def _coerce_amount(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        amount, _ = coerce_number(data.get("amount"))
        return {**data, "amount": amount}


class FacilityRecordDTO(BaseDTO):
    """One facility as extracted from one source document."""

    facility_name: str = Field(min_length=1, alias="facilityName")
    source: str = Field(min_length=1)
    beds: int = 0
    line_items: list[RecordLineDTO] = Field(default_factory=list, alias="lineItems")

    @model_validator(mode="before")
    @classmethod
    def _coerce_beds(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "beds" not in data:
            return data
        beds, _ = coerce_number(data["beds"], allow_negative=False)
        return {**data, "beds": int(beds)}

    def to_domain(self) -> FacilityRecord:
        return FacilityRecord(
            facility_name=self.facility_name,
            source=self.source,
            beds=self.beds,
            line_items=tuple(
                RecordLine(label=li.label, amount=li.amount, category=li.category)
                for li in self.line_items
            ),
        )


class ReconcileRequestDTO(BaseDTO):
    """Facility records to reconcile, in source order."""

    records: list[FacilityRecordDTO] = Field(default_factory=list)


# --------------------------------------------------------------------------- #
# Output                                                                      #
# --------------------------------------------------------------------------- #


class SourceValueDTO(BaseDTO):
    source: str
    value: str


class ConflictDTO(BaseDTO):
    """A field-level conflict with its resolution state."""

    conflict_id: str
    facility_name: str
    field: str
    first: SourceValueDTO
    second: SourceValueDTO
    variance: str
    state: ResolutionState
    resolved_value: str | None = None


class DocumentSummaryDTO(BaseDTO):
    source: str
    facilities: list[str]
    line_item_count: int
    kind: DocumentKind


class FacilityCrossReferenceDTO(BaseDTO):
    facility_name: str
    sources: list[str]
    line_item_count: int
    has_conflicts: bool


class ReconciliationResultDTO(BaseDTO):
    """Reconciliation outcome."""

    conflicts: list[ConflictDTO]
    validation_score: int
    pending_count: int
    documents: list[DocumentSummaryDTO]
    facilities: list[FacilityCrossReferenceDTO]


__all__ = [
    "RecordLineDTO",
    "FacilityRecordDTO",
    "ReconcileRequestDTO",
    "SourceValueDTO",
    "ConflictDTO",
    "DocumentSummaryDTO",
    "FacilityCrossReferenceDTO",
    "ReconciliationResultDTO",
]
