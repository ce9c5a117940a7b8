# src/carefin_core/adapters/presenters/analysis_presenter.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Analysis and reconciliation presenter.

Purpose:
    Convert use-case results (domain objects) into JSON-safe application
    DTOs for the CLI and any other outer surface.

Layer:
    adapters/presenters

Notes:
    - Decimals are rendered with ``format(value, "f")`` so no exponent
      notation or float rounding leaks into output.
"""

from __future__ import annotations

from decimal import Decimal

from carefin_core.application.schemas.dto.analysis import (
    AdjustmentDTO,
    BenchmarkComparisonDTO,
    BenchmarkReportDTO,
    CapExDTO,
    FacilityAnalysisDTO,
    LineMappingDTO,
    ReimbursementUpsideDTO,
    StatementSummaryDTO,
    ValuationViewDTO,
)
from carefin_core.application.schemas.dto.reconciliation import (
    ConflictDTO,
    DocumentSummaryDTO,
    FacilityCrossReferenceDTO,
    ReconciliationResultDTO,
    SourceValueDTO,
)
from carefin_core.application.use_cases.underwriting.analyze_facility import (
    AnalyzeFacilityResult,
)
from carefin_core.domain.entities.account import LineItemMapping
from carefin_core.domain.entities.benchmark import FacilityBenchmarkReport
from carefin_core.domain.entities.conflict import Conflict, ReconciliationResult
from carefin_core.domain.entities.financial_statement import FinancialStatement
from carefin_core.domain.entities.valuation import (
    CapExEstimate,
    ReimbursementUpside,
    ValuationView,
)

_VALUE_QUANTUM = Decimal("0.01")


def _decimal_to_str(value: Decimal | None) -> str | None:
    """Convert a Decimal (or None) into a JSON-safe string (or None)."""
    if value is None:
        return None
    return format(value, "f")


def _s(value: Decimal) -> str:
    return format(value, "f")


def _money(value: Decimal) -> str:
    return format(value.quantize(_VALUE_QUANTUM), "f")


def _map_mapping(mapping: LineItemMapping) -> LineMappingDTO:
    return LineMappingDTO(
        label=mapping.label,
        account_code=mapping.account.code if mapping.account else None,
        account_name=mapping.account.name if mapping.account else None,
        match_type=mapping.match_type.value,
        confidence=_s(mapping.confidence),
    )


def _map_statement(statement: FinancialStatement) -> StatementSummaryDTO:
    m = statement.metrics
    return StatementSummaryDTO(
        total_net_revenue=_s(statement.total_net_revenue),
        total_operating_expense=_s(statement.total_operating_expense),
        total_labor_expense=_s(statement.total_labor_expense),
        noi=_s(m.noi),
        noi_margin=_s(m.noi_margin),
        ebitdar=_s(m.ebitdar),
        ebitdar_margin=_s(m.ebitdar_margin),
        ebitda=_s(m.ebitda),
        net_income=_s(m.net_income),
        labor_cost_percent=_s(m.labor_cost_percent),
        revenue_per_patient_day=_s(m.revenue_per_patient_day),
        occupancy=_s(m.occupancy),
    )


def _map_benchmark(report: FacilityBenchmarkReport) -> BenchmarkReportDTO:
    return BenchmarkReportDTO(
        overall_score=_s(report.overall_score),
        overall_rating=report.overall_rating.value,
        comparisons=[
            BenchmarkComparisonDTO(
                metric=c.metric,
                category=c.category.value,
                actual_value=_s(c.actual_value),
                benchmark_p50=_s(c.benchmark_p50),
                percentile=_s(c.percentile),
                rating=c.rating.value,
            )
            for c in report.comparisons
        ],
        strengths=list(report.strengths),
        weaknesses=list(report.weaknesses),
        recommendations=list(report.recommendations),
    )


def _map_view(view: ValuationView) -> ValuationViewDTO:
    return ValuationViewDTO(
        kind=view.kind.value,
        cap_rate_low=_s(view.cap_rates.low),
        cap_rate_base=_s(view.cap_rates.base),
        cap_rate_high=_s(view.cap_rates.high),
        value_low=_money(view.value_low),
        value_base=_money(view.value_base),
        value_high=_money(view.value_high),
        price_per_bed=_s(view.price_per_bed),
        region=view.region.value,
        market_tier=view.market_tier.value,
        band_source=view.band_source,
        price_per_bed_in_market_range=view.price_per_bed_in_market_range,
    )


def _map_capex(capex: CapExEstimate) -> CapExDTO:
    return CapExDTO(
        immediate=_s(capex.immediate),
        deferred=_s(capex.deferred),
        competitive=_s(capex.competitive),
        total=_s(capex.total),
        per_bed=_s(capex.per_bed),
    )


def _map_reimbursement(upside: ReimbursementUpside) -> ReimbursementUpsideDTO:
    return ReimbursementUpsideDTO(
        pdpm_low=_s(upside.pdpm_optimization.low),
        pdpm_high=_s(upside.pdpm_optimization.high),
        state_supplemental_low=_s(upside.state_supplemental.low),
        state_supplemental_high=_s(upside.state_supplemental.high),
        state_program_name=upside.state_program_name,
        quality_low=_s(upside.quality_improvement.low),
        quality_high=_s(upside.quality_improvement.high),
        total_low=_s(upside.total.low),
        total_high=_s(upside.total.high),
    )


def present_facility_analysis(result: AnalyzeFacilityResult) -> FacilityAnalysisDTO:
    """Present one facility analysis as a JSON-safe DTO."""
    financials = result.financials
    return FacilityAnalysisDTO(
        facility_name=result.facility_name,
        asset_type=result.asset_type.value,
        state=result.state,
        beds=financials.normalized.beds,
        mappings=[_map_mapping(m) for m in result.mappings],
        unmapped_labels=list(financials.unmapped_labels),
        original=_map_statement(financials.original),
        normalized=_map_statement(financials.normalized),
        adjustments=[
            AdjustmentDTO(
                category=a.category.value,
                description=a.description,
                original_amount=_s(a.original_amount),
                adjusted_amount=_s(a.adjusted_amount),
                adjustment_amount=_s(a.adjustment_amount),
                reason=a.reason,
            )
            for a in financials.adjustments
        ],
        benchmark=_map_benchmark(result.benchmark) if result.benchmark else None,
        external_valuation=_map_view(result.valuation.external),
        internal_valuation=_map_view(result.valuation.internal),
        capex=_map_capex(result.capex) if result.capex else None,
        reimbursement=_map_reimbursement(result.reimbursement) if result.reimbursement else None,
        warnings=list(result.warnings),
    )


def _map_conflict(conflict: Conflict) -> ConflictDTO:
    return ConflictDTO(
        conflict_id=conflict.conflict_id,
        facility_name=conflict.facility_name,
        field=conflict.field.value,
        first=SourceValueDTO(source=conflict.first.source, value=_s(conflict.first.value)),
        second=SourceValueDTO(source=conflict.second.source, value=_s(conflict.second.value)),
        variance=_s(conflict.variance.quantize(Decimal("0.000001"))),
        state=conflict.state,
        resolved_value=_decimal_to_str(conflict.resolved_value),
    )


def present_reconciliation(result: ReconciliationResult) -> ReconciliationResultDTO:
    """Present a reconciliation result as a JSON-safe DTO."""
    return ReconciliationResultDTO(
        conflicts=[_map_conflict(c) for c in result.conflicts],
        validation_score=result.validation_score,
        pending_count=len(result.pending),
        documents=[
            DocumentSummaryDTO(
                source=d.source,
                facilities=list(d.facilities),
                line_item_count=d.line_item_count,
                kind=d.kind,
            )
            for d in result.documents
        ],
        facilities=[
            FacilityCrossReferenceDTO(
                facility_name=f.facility_name,
                sources=list(f.sources),
                line_item_count=f.line_item_count,
                has_conflicts=f.has_conflicts,
            )
            for f in result.facilities
        ],
    )


__all__ = ["present_facility_analysis", "present_reconciliation"]
