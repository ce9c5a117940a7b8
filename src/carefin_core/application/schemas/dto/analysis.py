# src/carefin_core/application/schemas/dto/analysis.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Application DTOs for facility analysis output.

Purpose:
    JSON-safe read models for one facility's normalized, benchmarked and
    valued result. Decimals are rendered as plain strings so no precision is
    lost in transport.

Layer:
    application/schemas/dto
"""

from __future__ import annotations

from carefin_core.application.schemas.dto.base import BaseDTO


class LineMappingDTO(BaseDTO):
    """How one source label was mapped."""

    label: str
    account_code: str | None
    account_name: str | None
    match_type: str
    confidence: str


class AdjustmentDTO(BaseDTO):
    """One normalization step from the audit trail."""

    category: str
    description: str
    original_amount: str
    adjusted_amount: str
    adjustment_amount: str
    reason: str


class StatementSummaryDTO(BaseDTO):
    """Headline figures for one statement."""

    total_net_revenue: str
    total_operating_expense: str
    total_labor_expense: str
    noi: str
    noi_margin: str
    ebitdar: str
    ebitdar_margin: str
    ebitda: str
    net_income: str
    labor_cost_percent: str
    revenue_per_patient_day: str
    occupancy: str


class BenchmarkComparisonDTO(BaseDTO):
    metric: str
    category: str
    actual_value: str
    benchmark_p50: str
    percentile: str
    rating: str


class BenchmarkReportDTO(BaseDTO):
    """Benchmark evaluation summary."""

    overall_score: str
    overall_rating: str
    comparisons: list[BenchmarkComparisonDTO]
    strengths: list[str]
    weaknesses: list[str]
    recommendations: list[str]


class ValuationViewDTO(BaseDTO):
    """One valuation view."""

    kind: str
    cap_rate_low: str
    cap_rate_base: str
    cap_rate_high: str
    value_low: str
    value_base: str
    value_high: str
    price_per_bed: str
    region: str
    market_tier: str
    band_source: str
    price_per_bed_in_market_range: bool


class CapExDTO(BaseDTO):
    immediate: str
    deferred: str
    competitive: str
    total: str
    per_bed: str


class ReimbursementUpsideDTO(BaseDTO):
    pdpm_low: str
    pdpm_high: str
    state_supplemental_low: str
    state_supplemental_high: str
    state_program_name: str | None
    quality_low: str
    quality_high: str
    total_low: str
    total_high: str


class FacilityAnalysisDTO(BaseDTO):
    """Full analysis read model for one facility."""

    facility_name: str
    asset_type: str
    state: str | None
    beds: int
    mappings: list[LineMappingDTO]
    unmapped_labels: list[str]
    original: StatementSummaryDTO
    normalized: StatementSummaryDTO
    adjustments: list[AdjustmentDTO]
    benchmark: BenchmarkReportDTO | None
    external_valuation: ValuationViewDTO
    internal_valuation: ValuationViewDTO
    capex: CapExDTO | None
    reimbursement: ReimbursementUpsideDTO | None
    warnings: list[str]


__all__ = [
    "LineMappingDTO",
    "AdjustmentDTO",
    "StatementSummaryDTO",
    "BenchmarkComparisonDTO",
    "BenchmarkReportDTO",
    "ValuationViewDTO",
    "CapExDTO",
    "ReimbursementUpsideDTO",
    "FacilityAnalysisDTO",
]
