# src/carefin_core/application/use_cases/underwriting/analyze_facility.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Use case: Analyze one facility end to end.

Purpose:
    Run the underwriting pipeline for a single facility: match raw labels to
    the chart of accounts, normalize the statement, benchmark it, and value
    it under the external and internal views. CapEx and reimbursement upside
    are added when their inputs are present.

Layer:
    application/use_cases/underwriting
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Final

from carefin_core.application.schemas.dto.facility import FacilityInputDTO
from carefin_core.config.settings import Settings, get_settings
from carefin_core.domain.entities.account import LineItemMapping
from carefin_core.domain.entities.benchmark import FacilityBenchmarkReport
from carefin_core.domain.entities.financial_statement import (
    DECIMAL_ZERO,
    FinancialStatement,
    NormalizedFinancials,
)
from carefin_core.domain.entities.valuation import (
    CapExEstimate,
    DualValuation,
    ReimbursementUpside,
)
from carefin_core.domain.enums.accounts import AccountType
from carefin_core.domain.enums.assets import AssetType
from carefin_core.domain.reference.chart_of_accounts import ChartOfAccounts
from carefin_core.domain.services.account_matcher import AccountMatcher
from carefin_core.domain.services.benchmark_comparator import BenchmarkComparator
from carefin_core.domain.services.financial_normalizer import FinancialNormalizer
from carefin_core.domain.services.valuation_engine import ValuationEngine

logger = logging.getLogger(__name__)

# Confidence ceiling for mappings whose amount had to be coerced at the boundary.
COERCED_LINE_CONFIDENCE: Final[Decimal] = Decimal("0.5")

_MEDICARE_BENCHMARK_CATEGORY: Final[str] = "medicare"


@dataclass(frozen=True)
class AnalyzeFacilityRequest:
    """Request parameters for analyzing one facility.

    Attributes:
        facility:
            Validated facility payload.
    """

    facility: FacilityInputDTO


@dataclass(frozen=True)
class AnalyzeFacilityResult:
    """Outcome of one facility analysis.

    Attributes:
        facility_name:
            Facility display name.
        asset_type:
            Resolved asset class.
        state:
            State code as supplied.
        mappings:
            Label mappings for every revenue and expense line, in input order.
        financials:
            Original and normalized statements with the adjustment trail.
        benchmark:
            Benchmark report, or ``None`` when the asset class has no
            benchmark set.
        valuation:
            External and internal valuation views.
        capex:
            CapEx estimate when building age was supplied.
        reimbursement:
            Reimbursement upside for skilled nursing facilities.
        warnings:
            Data-quality notes (coerced values, skipped steps).
    """

    facility_name: str
    asset_type: AssetType
    state: str | None
    mappings: tuple[LineItemMapping, ...]
    financials: NormalizedFinancials
    benchmark: FacilityBenchmarkReport | None
    valuation: DualValuation
    capex: CapExEstimate | None = None
    reimbursement: ReimbursementUpside | None = None
    warnings: tuple[str, ...] = field(default=())


class AnalyzeFacilityUseCase:
    """Match, normalize, benchmark and value one facility.

    Args:
        settings:
            Settings supplying normalization options and matcher thresholds.
            Defaults to :func:`get_settings`.
        matcher:
            Account matcher. Built from ``settings`` when omitted.
        comparator:
            Benchmark comparator. Uses the default library when omitted.
        valuation_engine:
            Valuation engine. Uses the default market data when omitted.
    """

    def __init__(
        self,
        *,
        settings: Settings | None = None,
        matcher: AccountMatcher | None = None,
        comparator: BenchmarkComparator | None = None,
        valuation_engine: ValuationEngine | None = None,
    ) -> None:
        resolved = settings or get_settings()
        self._matcher = matcher or AccountMatcher(config=resolved.matcher_config())
        self._normalizer = FinancialNormalizer(
            self._matcher, options=resolved.normalization_options()
        )
        self._comparator = comparator or BenchmarkComparator()
        self._valuation = valuation_engine or ValuationEngine()

    def execute(self, req: AnalyzeFacilityRequest) -> AnalyzeFacilityResult:
        """Run the pipeline for one facility.

        Args:
            req:
                Facility payload to analyze.

        Returns:
            An :class:`AnalyzeFacilityResult`.

        Raises:
            MissingFieldError:
                If ``asset_type`` is missing.
            UnknownAssetTypeError:
                If ``asset_type`` is not a supported asset class.
        """
        facility = req.facility
        asset_type = AssetType.parse(facility.asset_type)
        warnings: list[str] = list(facility.coercion_warnings)

        logger.info(
            "underwriting.analyze_facility.start",
            extra={
                "facility_name": facility.facility_name,
                "asset_type": asset_type.value,
                "state": facility.state,
                "beds": facility.beds,
                "revenue_lines": len(facility.revenue_lines),
                "expense_lines": len(facility.expense_lines),
            },
        )

        mappings = self._map_lines(facility)
        financials = self._normalizer.normalize(facility.to_raw_financial_data())
        normalized = financials.normalized

        benchmark: FacilityBenchmarkReport | None = None
        if asset_type in self._comparator.library.asset_types():
            benchmark = self._comparator.report_for(
                normalized,
                asset_type,
                operations=facility.operations.to_domain() if facility.operations else None,
                quality=facility.quality.to_domain() if facility.quality else None,
            )
        else:
            warnings.append(f"No benchmark set for asset type {asset_type.value}; skipped")

        valuation = self._valuation.value(
            normalized.metrics.noi, asset_type, facility.state, facility.beds
        )

        capex: CapExEstimate | None = None
        if facility.building_age is not None:
            capex = self._valuation.estimate_capex(
                asset_type,
                facility.beds,
                facility.building_age,
                facility.years_since_renovation,
            )

        reimbursement: ReimbursementUpside | None = None
        if asset_type is AssetType.SNF:
            reimbursement = self._valuation.estimate_reimbursement_upside(
                medicare_revenue=medicare_revenue(normalized, self._matcher.chart),
                beds=facility.beds,
                state=facility.state,
                star_rating=facility.star_rating,
            )

        if financials.unmapped_labels:
            warnings.append(
                f"{len(financials.unmapped_labels)} line(s) unmapped and rolled into other_*"
            )

        logger.info(
            "underwriting.analyze_facility.done",
            extra={
                "facility_name": facility.facility_name,
                "asset_type": asset_type.value,
                "adjustments": len(financials.adjustments),
                "unmapped": len(financials.unmapped_labels),
                "normalized_noi": str(normalized.metrics.noi),
                "benchmark_score": str(benchmark.overall_score) if benchmark else None,
                "value_base_external": str(valuation.external.value_base),
                "warnings": len(warnings),
            },
        )

        return AnalyzeFacilityResult(
            facility_name=facility.facility_name,
            asset_type=asset_type,
            state=facility.state,
            mappings=mappings,
            financials=financials,
            benchmark=benchmark,
            valuation=valuation,
            capex=capex,
            reimbursement=reimbursement,
            warnings=tuple(warnings),
        )

    def _map_lines(self, facility: FacilityInputDTO) -> tuple[LineItemMapping, ...]:
        out: list[LineItemMapping] = []
        for lines, account_type in (
            (facility.revenue_lines, AccountType.REVENUE),
            (facility.expense_lines, AccountType.EXPENSE),
        ):
            for line in lines:
                mapping = replace(
                    self._matcher.match(line.label, account_type=account_type),
                    amount=line.amount,
                )
                if line.coerced and mapping.confidence > COERCED_LINE_CONFIDENCE:
                    mapping = replace(mapping, confidence=COERCED_LINE_CONFIDENCE)
                out.append(mapping)
        return tuple(out)


def medicare_revenue(statement: FinancialStatement, chart: ChartOfAccounts) -> Decimal:
    """Sum the statement revenue booked to Medicare fee-for-service accounts."""
    categories = {
        account.category
        for account in chart.by_type(AccountType.REVENUE)
        if account.benchmark_category == _MEDICARE_BENCHMARK_CATEGORY
    }
    return sum((statement.revenue_amount(c) for c in sorted(categories)), DECIMAL_ZERO)


__all__ = [
    "COERCED_LINE_CONFIDENCE",
    "AnalyzeFacilityRequest",
    "AnalyzeFacilityResult",
    "AnalyzeFacilityUseCase",
    "medicare_revenue",
]
