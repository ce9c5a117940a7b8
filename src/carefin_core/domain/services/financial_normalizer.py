# src/carefin_core/domain/services/financial_normalizer.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Financial normalizer.

Purpose:
    Turn raw per-facility revenue/expense lines into an original and a
    normalized ``FinancialStatement`` with consistent definitions
    (annualized, management-fee adjusted, agency adjusted, reserve adjusted)
    plus the ordered adjustment trail between them.

Layer:
    domain/services

Notes:
    - Pure domain logic:
        * No logging.
        * No I/O.
    - Statements are never mutated. Every step goes through
      :func:`apply_adjustment`, so ``replay_adjustments(original, trail)``
      reproduces the normalized statement exactly.
    - Totals and metrics are recomputed from line items by
      :func:`build_statement`; recomputing an already built statement is a
      no-op.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, getcontext
from typing import Final

from carefin_core.domain.entities.financial_statement import (
    DECIMAL_ZERO,
    ExpenseLineItem,
    FinancialStatement,
    NormalizationAdjustment,
    NormalizedFinancials,
    RawFinancialData,
    RawLine,
    ReferenceComparison,
    ReferencePointComparison,
    RevenueLineItem,
    StatementMetrics,
    StatementPeriod,
)
from carefin_core.domain.enums.accounts import AccountType
from carefin_core.domain.enums.analysis import AdjustmentCategory, ReferenceRating
from carefin_core.domain.reference.chart_of_accounts import (
    LABOR_CATEGORIES,
    OTHER_EXPENSE_CATEGORY,
    OTHER_REVENUE_CATEGORY,
)
from carefin_core.domain.services.account_matcher import AccountMatcher

getcontext().prec = max(getcontext().prec, 34)

DAYS_PER_YEAR: Final[Decimal] = Decimal("365")
MONTHS_PER_YEAR: Final[int] = 12

MANAGEMENT_FEE_CATEGORY: Final[str] = "management_fee"
AGENCY_CATEGORY: Final[str] = "agency_nursing"
NURSING_WAGES_CATEGORY: Final[str] = "nursing_wages"
CAPITAL_RESERVE_CATEGORY: Final[str] = "capital_reserve"
RENT_CATEGORY: Final[str] = "rent"
DEPRECIATION_CATEGORY: Final[str] = "depreciation"
AMORTIZATION_CATEGORY: Final[str] = "amortization"
INTEREST_CATEGORY: Final[str] = "interest"

# Management fee within this many points of target is left alone.
MANAGEMENT_FEE_TOLERANCE: Final[Decimal] = Decimal("0.01")
# Agency share must exceed target by more than this before it is normalized.
AGENCY_TOLERANCE: Final[Decimal] = Decimal("0.02")
# Regular wages cover the same hours for 70% of the agency cost.
AGENCY_CONVERSION_FACTOR: Final[Decimal] = Decimal("0.7")

_RATIO_QUANTUM = Decimal("0.000001")
_MONEY_QUANTUM = Decimal("0.01")
_HUNDRED = Decimal("100")
_REFERENCE_BAND = Decimal("0.1")

# Fixed reference points for the quick comparison attached to each result.
REFERENCE_REVENUE_PPD: Final[Decimal] = Decimal("350")
REFERENCE_LABOR_COST_PERCENT: Final[Decimal] = Decimal("0.55")
REFERENCE_EBITDAR_MARGIN: Final[Decimal] = Decimal("0.12")
REFERENCE_OCCUPANCY: Final[Decimal] = Decimal("0.85")


@dataclass(frozen=True, slots=True)
class NormalizationOptions:
    """Toggles and targets for the normalization steps.

    Attributes:
        normalize_management_fee:
            Synthesize or re-price the management fee at the target percent.
        target_management_fee_percent:
            Market management fee as a fraction of net revenue.
        normalize_agency:
            Shift excess agency nursing into regular wages.
        target_agency_percent:
            Target agency share of nursing labor (agency + regular wages).
        add_reserves:
            Add a capital reserve expense line.
        reserve_percent:
            Capital reserve as a fraction of net revenue.
        annualize:
            Scale partial-year periods to twelve months.
    """

    normalize_management_fee: bool = True
    target_management_fee_percent: Decimal = Decimal("0.05")
    normalize_agency: bool = True
    target_agency_percent: Decimal = Decimal("0.03")
    add_reserves: bool = True
    reserve_percent: Decimal = Decimal("0.03")
    annualize: bool = True


# ---------------------------------------------------------------------- #
# Numeric helpers                                                        #
# ---------------------------------------------------------------------- #


def _safe_ratio(numerator: Decimal, denominator: Decimal) -> Decimal:
    """Return ``numerator / denominator``, or zero when the denominator is zero."""
    if denominator == DECIMAL_ZERO:
        return DECIMAL_ZERO
    return numerator / denominator


def _ratio(numerator: Decimal, denominator: Decimal) -> Decimal:
    return _safe_ratio(numerator, denominator).quantize(_RATIO_QUANTUM, rounding=ROUND_HALF_UP)


def _money(numerator: Decimal, denominator: Decimal) -> Decimal:
    return _safe_ratio(numerator, denominator).quantize(_MONEY_QUANTUM, rounding=ROUND_HALF_UP)


def _pct(value: Decimal) -> str:
    return f"{value * _HUNDRED:.1f}%"


# ---------------------------------------------------------------------- #
# Statement construction                                                 #
# ---------------------------------------------------------------------- #


def _accumulate(pairs: Iterable[tuple[str, Decimal]]) -> list[tuple[str, Decimal]]:
    """Sum amounts per category, keeping first-seen category order."""
    totals: dict[str, Decimal] = {}
    for category, amount in pairs:
        totals[category] = totals.get(category, DECIMAL_ZERO) + amount
    return list(totals.items())


def build_statement(
    *,
    facility_name: str,
    beds: int,
    patient_days: Decimal,
    period: StatementPeriod,
    revenue: Iterable[tuple[str, Decimal]],
    expenses: Iterable[tuple[str, Decimal]],
) -> FinancialStatement:
    """Build a statement from categorized amounts.

    Totals, per-line derived figures and the metrics block are all derived
    here from the category amounts, ``beds`` and ``patient_days``.

    Args:
        facility_name: Display name of the facility.
        beds: Bed count.
        patient_days: Patient days for the period.
        period: Period metadata.
        revenue: ``(category, amount)`` pairs; repeated categories are summed.
        expenses: ``(category, amount)`` pairs; repeated categories are summed.

    Returns:
        A fully derived statement.
    """
    beds_d = Decimal(beds)
    revenue_pairs = _accumulate(revenue)
    expense_pairs = _accumulate(expenses)

    total_revenue = sum((amount for _, amount in revenue_pairs), DECIMAL_ZERO)

    revenue_items = tuple(
        RevenueLineItem(
            category=category,
            amount=amount,
            percent_of_total=_ratio(amount, total_revenue),
            per_bed=_money(amount, beds_d),
            per_patient_day=_money(amount, patient_days),
        )
        for category, amount in revenue_pairs
    )

    expense_items = tuple(
        ExpenseLineItem(
            category=category,
            amount=amount,
            is_labor=category in LABOR_CATEGORIES,
            percent_of_revenue=_ratio(amount, total_revenue),
            per_bed=_money(amount, beds_d),
            per_patient_day=_money(amount, patient_days),
        )
        for category, amount in expense_pairs
    )

    total_labor = sum((i.amount for i in expense_items if i.is_labor), DECIMAL_ZERO)
    total_non_labor = sum((i.amount for i in expense_items if not i.is_labor), DECIMAL_ZERO)
    total_opex = total_labor + total_non_labor

    def _expense(category: str) -> Decimal:
        return sum(
            (i.amount for i in expense_items if i.category == category),
            DECIMAL_ZERO,
        )

    rent = _expense(RENT_CATEGORY)
    depreciation = _expense(DEPRECIATION_CATEGORY)
    amortization = _expense(AMORTIZATION_CATEGORY)
    interest = _expense(INTEREST_CATEGORY)

    noi = total_revenue - total_opex
    ebitdar = noi + rent
    ebitda = ebitdar - rent + depreciation + amortization
    net_income = ebitda - depreciation - amortization - interest

    metrics = StatementMetrics(
        noi=noi,
        noi_margin=_ratio(noi, total_revenue),
        ebitdar=ebitdar,
        ebitdar_margin=_ratio(ebitdar, total_revenue),
        ebitda=ebitda,
        ebitda_margin=_ratio(ebitda, total_revenue),
        net_income=net_income,
        net_income_margin=_ratio(net_income, total_revenue),
        labor_cost_percent=_ratio(total_labor, total_revenue),
        revenue_per_bed=_money(total_revenue, beds_d),
        expense_per_bed=_money(total_opex, beds_d),
        revenue_per_patient_day=_money(total_revenue, patient_days),
        expense_per_patient_day=_money(total_opex, patient_days),
        occupancy=_ratio(patient_days, beds_d * DAYS_PER_YEAR),
    )

    return FinancialStatement(
        facility_name=facility_name,
        beds=beds,
        patient_days=patient_days,
        period=period,
        revenue_items=revenue_items,
        expense_items=expense_items,
        total_net_revenue=total_revenue,
        total_labor_expense=total_labor,
        total_non_labor_expense=total_non_labor,
        total_operating_expense=total_opex,
        metrics=metrics,
    )


def _rebuild(
    statement: FinancialStatement,
    *,
    revenue: Iterable[tuple[str, Decimal]] | None = None,
    expenses: Iterable[tuple[str, Decimal]] | None = None,
    patient_days: Decimal | None = None,
) -> FinancialStatement:
    return build_statement(
        facility_name=statement.facility_name,
        beds=statement.beds,
        patient_days=statement.patient_days if patient_days is None else patient_days,
        period=statement.period,
        revenue=(
            [(i.category, i.amount) for i in statement.revenue_items]
            if revenue is None
            else revenue
        ),
        expenses=(
            [(i.category, i.amount) for i in statement.expense_items]
            if expenses is None
            else expenses
        ),
    )


def recompute_metrics(statement: FinancialStatement) -> FinancialStatement:
    """Re-derive totals and metrics from the statement's own line items.

    Idempotent: ``recompute_metrics(recompute_metrics(s)) == recompute_metrics(s)``
    and, for statements produced by this module, ``recompute_metrics(s) == s``.
    """
    return _rebuild(statement)


def _set_expense(
    statement: FinancialStatement,
    updates: dict[str, Decimal],
) -> list[tuple[str, Decimal]]:
    """Return expense pairs with ``updates`` applied; new categories are appended."""
    pairs: list[tuple[str, Decimal]] = []
    pending = dict(updates)
    for item in statement.expense_items:
        if item.category in pending:
            pairs.append((item.category, pending.pop(item.category)))
        else:
            pairs.append((item.category, item.amount))
    pairs.extend(pending.items())
    return pairs


# ---------------------------------------------------------------------- #
# Adjustment application (the replayable fold)                           #
# ---------------------------------------------------------------------- #


def apply_adjustment(
    statement: FinancialStatement,
    adjustment: NormalizationAdjustment,
) -> FinancialStatement:
    """Apply one recorded adjustment to a statement, returning a new statement.

    Args:
        statement: Statement to transform.
        adjustment: Adjustment previously produced by :class:`FinancialNormalizer`.

    Returns:
        The transformed statement.

    Raises:
        ValueError: If an annualization adjustment carries no factor.
    """
    category = adjustment.category

    if category is AdjustmentCategory.ANNUALIZATION:
        if adjustment.factor is None:
            raise ValueError("annualization adjustment requires a factor")
        factor = adjustment.factor
        return _rebuild(
            statement,
            revenue=[(i.category, i.amount * factor) for i in statement.revenue_items],
            expenses=[(i.category, i.amount * factor) for i in statement.expense_items],
            patient_days=statement.patient_days * factor,
        )

    if category is AdjustmentCategory.MANAGEMENT_FEE:
        return _rebuild(
            statement,
            expenses=_set_expense(
                statement,
                {MANAGEMENT_FEE_CATEGORY: adjustment.adjusted_amount},
            ),
        )

    if category is AdjustmentCategory.AGENCY_NURSING:
        excess = adjustment.original_amount - adjustment.adjusted_amount
        wages = statement.expense_amount(NURSING_WAGES_CATEGORY)
        return _rebuild(
            statement,
            expenses=_set_expense(
                statement,
                {
                    AGENCY_CATEGORY: adjustment.adjusted_amount,
                    NURSING_WAGES_CATEGORY: wages + excess * AGENCY_CONVERSION_FACTOR,
                },
            ),
        )

    if category is AdjustmentCategory.CAPITAL_RESERVES:
        existing = statement.expense_amount(CAPITAL_RESERVE_CATEGORY)
        return _rebuild(
            statement,
            expenses=_set_expense(
                statement,
                {CAPITAL_RESERVE_CATEGORY: existing + adjustment.adjusted_amount},
            ),
        )

    raise ValueError(f"unsupported adjustment category: {category!r}")


def replay_adjustments(
    original: FinancialStatement,
    adjustments: Sequence[NormalizationAdjustment],
) -> FinancialStatement:
    """Reproduce a normalized statement by folding ``adjustments`` over ``original``."""
    statement = original
    for adjustment in adjustments:
        statement = apply_adjustment(statement, adjustment)
    return recompute_metrics(statement)


# ---------------------------------------------------------------------- #
# Reference-point comparison                                             #
# ---------------------------------------------------------------------- #


def _reference_rating(
    value: Decimal,
    benchmark: Decimal,
    *,
    higher_is_better: bool,
) -> ReferenceRating:
    diff = _safe_ratio(value - benchmark, benchmark)
    if not higher_is_better:
        diff = -diff
    if diff >= _REFERENCE_BAND:
        return ReferenceRating.EXCELLENT
    if diff >= DECIMAL_ZERO:
        return ReferenceRating.GOOD
    if diff >= -_REFERENCE_BAND:
        return ReferenceRating.FAIR
    return ReferenceRating.POOR


def _reference_point(
    value: Decimal,
    benchmark: Decimal,
    *,
    higher_is_better: bool = True,
) -> ReferencePointComparison:
    return ReferencePointComparison(
        value=value,
        benchmark=benchmark,
        variance=value - benchmark,
        rating=_reference_rating(value, benchmark, higher_is_better=higher_is_better),
    )


def compare_to_reference(statement: FinancialStatement) -> ReferenceComparison:
    """Compare a statement to the fixed industry reference points."""
    metrics = statement.metrics
    return ReferenceComparison(
        revenue_per_patient_day=_reference_point(
            metrics.revenue_per_patient_day,
            REFERENCE_REVENUE_PPD,
        ),
        labor_cost_percent=_reference_point(
            metrics.labor_cost_percent,
            REFERENCE_LABOR_COST_PERCENT,
            higher_is_better=False,
        ),
        ebitdar_margin=_reference_point(metrics.ebitdar_margin, REFERENCE_EBITDAR_MARGIN),
        occupancy=_reference_point(metrics.occupancy, REFERENCE_OCCUPANCY),
    )


# ---------------------------------------------------------------------- #
# Normalizer                                                             #
# ---------------------------------------------------------------------- #


class FinancialNormalizer:
    """Normalize raw facility financials.

    Args:
        matcher:
            Account matcher used to categorize raw lines.
        options:
            Normalization toggles and targets. Omitted options use the
            defaults of :class:`NormalizationOptions`.
    """

    def __init__(
        self,
        matcher: AccountMatcher | None = None,
        *,
        options: NormalizationOptions | None = None,
    ) -> None:
        self._matcher = matcher or AccountMatcher()
        self._options = options or NormalizationOptions()

    @property
    def options(self) -> NormalizationOptions:
        return self._options

    def normalize(self, raw: RawFinancialData) -> NormalizedFinancials:
        """Build the original statement, normalize it and record the trail.

        Args:
            raw: Raw facility inputs.

        Returns:
            Original and normalized statements, the ordered adjustments, a
            reference-point comparison of the normalized statement, and the
            labels that could not be matched.
        """
        revenue, unmapped_revenue = self._categorize(raw.revenue_lines, AccountType.REVENUE)
        expenses, unmapped_expense = self._categorize(raw.expense_lines, AccountType.EXPENSE)

        original = build_statement(
            facility_name=raw.facility_name,
            beds=raw.beds,
            patient_days=raw.patient_days,
            period=raw.period,
            revenue=revenue,
            expenses=expenses,
        )

        adjustments: list[NormalizationAdjustment] = []
        statement = original
        for step in (
            self._annualization,
            self._management_fee,
            self._agency,
            self._capital_reserve,
        ):
            adjustment = step(statement)
            if adjustment is None:
                continue
            adjustments.append(adjustment)
            statement = apply_adjustment(statement, adjustment)

        normalized = recompute_metrics(statement)

        return NormalizedFinancials(
            original=original,
            normalized=normalized,
            adjustments=tuple(adjustments),
            reference_comparison=compare_to_reference(normalized),
            unmapped_labels=(*unmapped_revenue, *unmapped_expense),
        )

    # ------------------------------------------------------------------ #
    # Line categorization                                                #
    # ------------------------------------------------------------------ #

    def _categorize(
        self,
        lines: Sequence[RawLine],
        account_type: AccountType,
    ) -> tuple[list[tuple[str, Decimal]], list[str]]:
        fallback = (
            OTHER_REVENUE_CATEGORY
            if account_type is AccountType.REVENUE
            else OTHER_EXPENSE_CATEGORY
        )
        pairs: list[tuple[str, Decimal]] = []
        unmapped: list[str] = []
        for line in lines:
            mapping = self._matcher.match(line.label, account_type=account_type)
            if mapping.account is not None and mapping.account.account_type is account_type:
                pairs.append((mapping.account.category, line.amount))
            else:
                unmapped.append(line.label)
                pairs.append((fallback, line.amount))
        return pairs, unmapped

    # ------------------------------------------------------------------ #
    # Steps: each returns the adjustment to apply, or None to skip       #
    # ------------------------------------------------------------------ #

    def _annualization(self, statement: FinancialStatement) -> NormalizationAdjustment | None:
        months = statement.period.months
        if not self._options.annualize or not months or months == MONTHS_PER_YEAR:
            return None

        factor = Decimal(MONTHS_PER_YEAR) / Decimal(months)
        before = statement.total_net_revenue
        after = before * factor
        return NormalizationAdjustment(
            category=AdjustmentCategory.ANNUALIZATION,
            description=f"Annualized {months}-month financials to 12 months",
            original_amount=before,
            adjusted_amount=after,
            adjustment_amount=after - before,
            reason=f"Multiplied all line items by {factor:.2f} to annualize",
            factor=factor,
        )

    def _management_fee(self, statement: FinancialStatement) -> NormalizationAdjustment | None:
        if not self._options.normalize_management_fee:
            return None

        target = self._options.target_management_fee_percent
        revenue = statement.total_net_revenue
        target_amount = revenue * target

        if not statement.has_expense(MANAGEMENT_FEE_CATEGORY):
            return NormalizationAdjustment(
                category=AdjustmentCategory.MANAGEMENT_FEE,
                description="Added management fee at market rate",
                original_amount=DECIMAL_ZERO,
                adjusted_amount=target_amount,
                adjustment_amount=target_amount,
                reason=f"No management fee found; added {_pct(target)} fee",
            )

        current_amount = statement.expense_amount(MANAGEMENT_FEE_CATEGORY)
        current = _safe_ratio(current_amount, revenue)
        if abs(current - target) <= MANAGEMENT_FEE_TOLERANCE:
            return None

        return NormalizationAdjustment(
            category=AdjustmentCategory.MANAGEMENT_FEE,
            description="Normalized management fee to market rate",
            original_amount=current_amount,
            adjusted_amount=target_amount,
            adjustment_amount=target_amount - current_amount,
            reason=f"Adjusted from {_pct(current)} to {_pct(target)}",
        )

    def _agency(self, statement: FinancialStatement) -> NormalizationAdjustment | None:
        if not self._options.normalize_agency or not statement.has_expense(AGENCY_CATEGORY):
            return None

        target = self._options.target_agency_percent
        agency = statement.expense_amount(AGENCY_CATEGORY)
        nursing_labor = agency + statement.expense_amount(NURSING_WAGES_CATEGORY)
        if nursing_labor == DECIMAL_ZERO:
            return None

        current = agency / nursing_labor
        if current <= target + AGENCY_TOLERANCE:
            return None

        target_amount = nursing_labor * target
        excess = agency - target_amount
        savings = excess * (Decimal("1") - AGENCY_CONVERSION_FACTOR)
        return NormalizationAdjustment(
            category=AdjustmentCategory.AGENCY_NURSING,
            description="Normalized agency costs to market rate",
            original_amount=agency,
            adjusted_amount=target_amount,
            adjustment_amount=-savings,
            reason=(
                f"Reduced agency from {_pct(current)} to {_pct(target)} "
                f"with ${savings:,.0f} savings"
            ),
        )

    def _capital_reserve(self, statement: FinancialStatement) -> NormalizationAdjustment | None:
        percent = self._options.reserve_percent
        if not self._options.add_reserves or percent <= DECIMAL_ZERO:
            return None

        amount = statement.total_net_revenue * percent
        return NormalizationAdjustment(
            category=AdjustmentCategory.CAPITAL_RESERVES,
            description="Added capital reserve allocation",
            original_amount=DECIMAL_ZERO,
            adjusted_amount=amount,
            adjustment_amount=amount,
            reason=f"Added {_pct(percent)} capital reserve for ongoing capex",
        )


__all__ = [
    "FinancialNormalizer",
    "NormalizationOptions",
    "AGENCY_CONVERSION_FACTOR",
    "CAPITAL_RESERVE_CATEGORY",
    "apply_adjustment",
    "build_statement",
    "compare_to_reference",
    "recompute_metrics",
    "replay_adjustments",
]
