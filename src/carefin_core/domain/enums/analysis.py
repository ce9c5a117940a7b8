# src/carefin_core/domain/enums/analysis.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Enums for normalization, benchmarking, and reconciliation outcomes.

Layer:
    domain/enums
"""

from __future__ import annotations

from enum import Enum


class AdjustmentCategory(str, Enum):
    """Kinds of normalization steps recorded in the audit trail."""

    ANNUALIZATION = "annualization"
    MANAGEMENT_FEE = "management_fee"
    AGENCY_NURSING = "agency_nursing"
    CAPITAL_RESERVES = "capital_reserves"


class BenchmarkCategory(str, Enum):
    """Category a benchmark metric reports under."""

    FINANCIAL = "financial"
    OPERATIONAL = "operational"
    QUALITY = "quality"
    STAFFING = "staffing"


class BenchmarkUnit(str, Enum):
    """Display unit for a benchmark metric."""

    CURRENCY = "currency"
    PERCENTAGE = "percentage"
    NUMBER = "number"
    RATIO = "ratio"


class PerformanceRating(str, Enum):
    """Percentile-derived rating bucket."""

    EXCELLENT = "excellent"
    GOOD = "good"
    AVERAGE = "average"
    BELOW_AVERAGE = "below_average"
    POOR = "poor"


class ReferenceRating(str, Enum):
    """Rating against a single fixed reference point (+/-10% bands)."""

    EXCELLENT = "Excellent"
    GOOD = "Good"
    FAIR = "Fair"
    POOR = "Poor"


class ResolutionState(str, Enum):
    """Resolution state of a cross-document conflict.

    ``PENDING`` is the only non-terminal state.
    """

    PENDING = "pending"
    AUTO = "auto"
    MANUAL = "manual"


class ConflictField(str, Enum):
    """Fields compared across documents for the same facility."""

    BEDS = "beds"
    TOTAL_REVENUE = "total_revenue"


class DocumentKind(str, Enum):
    """Coarse classification of a source document by extracted volume."""

    FINANCIAL = "financial"
    SUMMARY = "summary"
    REFERENCE = "reference"


__all__ = [
    "AdjustmentCategory",
    "BenchmarkCategory",
    "BenchmarkUnit",
    "PerformanceRating",
    "ReferenceRating",
    "ResolutionState",
    "ConflictField",
    "DocumentKind",
]
