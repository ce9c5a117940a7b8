# src/carefin_core/domain/entities/financial_statement.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Financial statement entities.

Purpose:
    Represent a single facility's income statement for a single period, the
    raw inputs it is built from, and the normalization audit trail that turns
    an original statement into a normalized one.

Layer:
    domain/entities

Notes:
    - All statements are immutable. Each normalization step produces a new
      statement so original and normalized versions can coexist.
    - Totals and metrics are always derived from line items, beds and patient
      days. They are never edited independently.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from carefin_core.domain.enums.analysis import AdjustmentCategory, ReferenceRating

DECIMAL_ZERO = Decimal("0")


@dataclass(frozen=True, slots=True)
class RawLine:
    """A raw ``label``/``amount`` pair extracted from a source document."""

    label: str
    amount: Decimal


@dataclass(frozen=True, slots=True)
class StatementPeriod:
    """Reporting period metadata.

    Attributes:
        start_date:
            First day of the period, when known.
        end_date:
            Last day of the period, when known.
        months:
            Period length in months. ``None`` means unknown and disables
            annualization.
        is_audited:
            Whether the figures come from audited financials.
        is_projected:
            Whether the figures are a projection rather than actuals.
    """

    start_date: date | None = None
    end_date: date | None = None
    months: int | None = 12
    is_audited: bool = False
    is_projected: bool = False

    @property
    def period_type(self) -> str:
        if self.months == 12:
            return "year"
        if self.months == 3:
            return "quarter"
        if self.months == 1:
            return "month"
        return "trailing_12"


@dataclass(frozen=True, slots=True)
class RawFinancialData:
    """Raw per-facility, per-period inputs to the normalizer.

    Attributes:
        facility_name:
            Display name of the facility.
        beds:
            Licensed/operational bed count.
        patient_days:
            Patient days for the period.
        period:
            Period metadata.
        revenue_lines:
            Raw revenue lines.
        expense_lines:
            Raw expense lines.
    """

    facility_name: str
    beds: int
    patient_days: Decimal
    period: StatementPeriod
    revenue_lines: tuple[RawLine, ...] = ()
    expense_lines: tuple[RawLine, ...] = ()


@dataclass(frozen=True, slots=True)
class RevenueLineItem:
    """One revenue category on a statement with its derived figures."""

    category: str
    amount: Decimal
    percent_of_total: Decimal = DECIMAL_ZERO
    per_bed: Decimal = DECIMAL_ZERO
    per_patient_day: Decimal = DECIMAL_ZERO


@dataclass(frozen=True, slots=True)
class ExpenseLineItem:
    """One expense category on a statement with its derived figures."""

    category: str
    amount: Decimal
    is_labor: bool = False
    percent_of_revenue: Decimal = DECIMAL_ZERO
    per_bed: Decimal = DECIMAL_ZERO
    per_patient_day: Decimal = DECIMAL_ZERO


@dataclass(frozen=True, slots=True)
class StatementMetrics:
    """Derived profitability and efficiency metrics.

    Every ratio is zero when its denominator is zero.
    """

    noi: Decimal
    noi_margin: Decimal
    ebitdar: Decimal
    ebitdar_margin: Decimal
    ebitda: Decimal
    ebitda_margin: Decimal
    net_income: Decimal
    net_income_margin: Decimal
    labor_cost_percent: Decimal
    revenue_per_bed: Decimal
    expense_per_bed: Decimal
    revenue_per_patient_day: Decimal
    expense_per_patient_day: Decimal
    occupancy: Decimal


@dataclass(frozen=True, slots=True)
class FinancialStatement:
    """One facility, one period.

    Attributes:
        facility_name:
            Display name of the facility.
        beds:
            Bed count used for per-bed figures.
        patient_days:
            Patient days used for per-patient-day figures.
        period:
            Reporting period metadata.
        revenue_items:
            Revenue categories in first-seen order.
        expense_items:
            Expense categories in first-seen order.
        total_net_revenue:
            Sum of revenue items.
        total_labor_expense:
            Sum of labor expense items.
        total_non_labor_expense:
            Sum of all other expense items.
        total_operating_expense:
            ``total_labor_expense + total_non_labor_expense``.
        metrics:
            Derived metrics block.
    """

    facility_name: str
    beds: int
    patient_days: Decimal
    period: StatementPeriod
    revenue_items: tuple[RevenueLineItem, ...]
    expense_items: tuple[ExpenseLineItem, ...]
    total_net_revenue: Decimal
    total_labor_expense: Decimal
    total_non_labor_expense: Decimal
    total_operating_expense: Decimal
    metrics: StatementMetrics

    @property
    def total_gross_revenue(self) -> Decimal:
        # No contractual allowances are modelled; gross equals net.
        return self.total_net_revenue

    def revenue_amount(self, category: str) -> Decimal:
        return sum(
            (item.amount for item in self.revenue_items if item.category == category),
            DECIMAL_ZERO,
        )

    def expense_amount(self, category: str) -> Decimal:
        return sum(
            (item.amount for item in self.expense_items if item.category == category),
            DECIMAL_ZERO,
        )

    def has_expense(self, category: str) -> bool:
        return any(item.category == category for item in self.expense_items)


@dataclass(frozen=True, slots=True)
class NormalizationAdjustment:
    """One recorded normalization step.

    Attributes:
        category:
            Kind of step.
        description:
            Human-readable summary.
        original_amount:
            Amount before the step (revenue for annualization, the line
            amount otherwise).
        adjusted_amount:
            Amount after the step.
        adjustment_amount:
            Signed effect of the step.
        reason:
            Human-readable justification.
        factor:
            Scale factor, set only for annualization.
    """

    category: AdjustmentCategory
    description: str
    original_amount: Decimal
    adjusted_amount: Decimal
    adjustment_amount: Decimal
    reason: str
    factor: Decimal | None = None


@dataclass(frozen=True, slots=True)
class ReferencePointComparison:
    """A metric compared against one fixed reference value."""

    value: Decimal
    benchmark: Decimal
    variance: Decimal
    rating: ReferenceRating


@dataclass(frozen=True, slots=True)
class ReferenceComparison:
    """Quick reference-point comparison attached to a normalization result."""

    revenue_per_patient_day: ReferencePointComparison
    labor_cost_percent: ReferencePointComparison
    ebitdar_margin: ReferencePointComparison
    occupancy: ReferencePointComparison


@dataclass(frozen=True, slots=True)
class NormalizedFinancials:
    """Output of the financial normalizer."""

    original: FinancialStatement
    normalized: FinancialStatement
    adjustments: tuple[NormalizationAdjustment, ...]
    reference_comparison: ReferenceComparison
    unmapped_labels: tuple[str, ...] = field(default=())


__all__ = [
    "DECIMAL_ZERO",
    "RawLine",
    "StatementPeriod",
    "RawFinancialData",
    "RevenueLineItem",
    "ExpenseLineItem",
    "StatementMetrics",
    "FinancialStatement",
    "NormalizationAdjustment",
    "ReferencePointComparison",
    "ReferenceComparison",
    "NormalizedFinancials",
]
