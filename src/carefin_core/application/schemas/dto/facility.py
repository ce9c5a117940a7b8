# src/carefin_core/application/schemas/dto/facility.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Application DTOs for raw facility input.

Purpose:
    Validate the loosely shaped facility payloads produced by document
    extraction and convert them into domain inputs. Malformed numbers are
    coerced to zero and every coercion is recorded in ``coercion_warnings``.

Layer:
    application/schemas/dto
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any

from pydantic import Field, model_validator

from carefin_core.application.schemas.dto.base import BaseDTO, coerce_number
from carefin_core.domain.entities.benchmark import OperatingMetrics, QualityMetrics
from carefin_core.domain.entities.financial_statement import (
    RawFinancialData,
    RawLine,
    StatementPeriod,
)

_COUNT_FIELDS: tuple[str, ...] = ("beds", "patient_days")
_OPTIONAL_COUNT_FIELDS: tuple[str, ...] = ("building_age", "years_since_renovation", "star_rating")
_COUNT_ALIASES: dict[str, str] = {
    "patient_days": "patientDays",
    "building_age": "buildingAge",
    "years_since_renovation": "yearsSinceRenovation",
    "star_rating": "starRating",
}


class RawLineDTO(BaseDTO):
    """One extracted ``label``/``amount`` pair.

    Attributes:
        label: Source label as written in the document.
        amount: Parsed amount; zero when the raw value was malformed.
        coerced: Whether ``amount`` was coerced from a malformed value.
    """

    label: str
    amount: Decimal = Decimal("0")
    coerced: bool = False

    @model_validator(mode="before")
    @classmethod
    def _coerce_amount(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        amount, coerced = coerce_number(data.get("amount"))
        return {**data, "amount": amount, "coerced": coerced or bool(data.get("coerced"))}

    def to_domain(self) -> RawLine:
        return RawLine(label=self.label, amount=self.amount)


class PeriodDTO(BaseDTO):
    """Reporting period metadata."""

    start_date: date | None = Field(default=None, alias="startDate")
    end_date: date | None = Field(default=None, alias="endDate")
    months: int | None = Field(default=12, ge=1, le=36)
    is_audited: bool = Field(default=False, alias="isAudited")
    is_projected: bool = Field(default=False, alias="isProjected")

    def to_domain(self) -> StatementPeriod:
        return StatementPeriod(
            start_date=self.start_date,
            end_date=self.end_date,
            months=self.months,
            is_audited=self.is_audited,
            is_projected=self.is_projected,
        )


class OperatingInputsDTO(BaseDTO):
    """Optional operating metrics (fractions, not percentages)."""

    occupancy_rate: Decimal | None = None
    medicare_mix: Decimal | None = None
    medicaid_mix: Decimal | None = None
    private_pay_mix: Decimal | None = None
    average_monthly_rate: Decimal | None = None
    average_length_of_stay: Decimal | None = None
    rn_hppd: Decimal | None = None
    total_nursing_hppd: Decimal | None = None
    turnover_rate: Decimal | None = None

    def to_domain(self) -> OperatingMetrics:
        return OperatingMetrics(**self.model_dump())


class QualityInputsDTO(BaseDTO):
    """Optional CMS quality metrics."""

    overall_rating: Decimal | None = Field(default=None, ge=1, le=5)
    health_inspection_rating: Decimal | None = Field(default=None, ge=1, le=5)
    total_deficiencies: Decimal | None = Field(default=None, ge=0)
    rn_hppd: Decimal | None = None
    total_nursing_hppd: Decimal | None = None

    def to_domain(self) -> QualityMetrics:
        return QualityMetrics(**self.model_dump())


class FacilityInputDTO(BaseDTO):
    """Raw facility payload for one analysis run.

    Attributes:
        facility_name: Display name.
        asset_type: Asset class string (``SNF``, ``ALF``, ``ILF``, ``HOSPICE``).
        state: Two-letter state code, when known.
        beds: Licensed beds or units.
        patient_days: Patient days for the period.
        period: Reporting period metadata.
        revenue_lines: Extracted revenue lines.
        expense_lines: Extracted expense lines.
        operations: Optional operating metrics.
        quality: Optional CMS quality metrics.
        building_age: Years since construction, for CapEx.
        years_since_renovation: Years since last renovation, for CapEx.
        star_rating: Current CMS overall star rating, for reimbursement upside.
        coercion_warnings: Messages for every malformed value coerced to zero.
    """

    facility_name: str = Field(min_length=1, alias="facilityName")
    asset_type: str | None = Field(default=None, alias="assetType")
    state: str | None = None
    beds: int = 0
    patient_days: Decimal = Field(default=Decimal("0"), alias="patientDays")
    period: PeriodDTO = Field(default_factory=PeriodDTO)
    revenue_lines: list[RawLineDTO] = Field(default_factory=list, alias="revenueLines")
    expense_lines: list[RawLineDTO] = Field(default_factory=list, alias="expenseLines")
    operations: OperatingInputsDTO | None = None
    quality: QualityInputsDTO | None = None
    building_age: int | None = Field(default=None, alias="buildingAge")
    years_since_renovation: int | None = Field(default=None, alias="yearsSinceRenovation")
    star_rating: int | None = Field(default=None, alias="starRating")
    coercion_warnings: list[str] = Field(default_factory=list, alias="coercionWarnings")

    @model_validator(mode="before")
    @classmethod
    def _coerce_counts(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        out = dict(data)
        warnings: list[str] = list(
            out.pop("coercionWarnings", None) or out.get("coercion_warnings") or []
        )

        for name in (*_COUNT_FIELDS, *_OPTIONAL_COUNT_FIELDS):
            key = name if name in out else _COUNT_ALIASES.get(name, name)
            if key not in out:
                continue
            raw = out[key]
            if raw is None and name in _OPTIONAL_COUNT_FIELDS:
                continue
            value, coerced = coerce_number(raw, allow_negative=False)
            optional = name in _OPTIONAL_COUNT_FIELDS
            if coerced:
                outcome = "ignored" if optional else "coerced to 0"
                warnings.append(f"{name}: malformed value {raw!r} {outcome}")
            if name == "patient_days":
                out[key] = value
            elif optional and coerced:
                out[key] = None
            else:
                out[key] = int(value)

        out["coercion_warnings"] = warnings
        return out

    @model_validator(mode="after")
    def _collect_line_warnings(self) -> FacilityInputDTO:
        for section, lines in (("revenue", self.revenue_lines), ("expense", self.expense_lines)):
            for index, line in enumerate(lines):
                if line.coerced:
                    self.coercion_warnings.append(
                        f"{section}_lines[{index}] {line.label!r}: malformed amount coerced to 0"
                    )
        return self

    def to_raw_financial_data(self) -> RawFinancialData:
        return RawFinancialData(
            facility_name=self.facility_name,
            beds=self.beds,
            patient_days=self.patient_days,
            period=self.period.to_domain(),
            revenue_lines=tuple(line.to_domain() for line in self.revenue_lines),
            expense_lines=tuple(line.to_domain() for line in self.expense_lines),
        )

    @property
    def coerced_labels(self) -> frozenset[str]:
        return frozenset(
            line.label for line in (*self.revenue_lines, *self.expense_lines) if line.coerced
        )


__all__ = [
    "RawLineDTO",
    "PeriodDTO",
    "OperatingInputsDTO",
    "QualityInputsDTO",
    "FacilityInputDTO",
]
