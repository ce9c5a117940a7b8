# src/carefin_core/domain/exceptions/underwriting.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Underwriting domain exceptions.

Purpose:
    Provide the structural/configuration error types raised by the financial
    core. Data-quality problems (unmatched labels, zero denominators,
    conflicting documents) are never raised; they are absorbed and flagged on
    the returned values instead.

Layer:
    domain/exceptions
"""

from __future__ import annotations

from typing import Any

from carefin_core.domain.exceptions.base import DomainError


class MissingFieldError(DomainError):
    """Raised when a required input field is absent or empty."""

    code = "MISSING_FIELD"

    def __init__(self, field: str, *, details: dict[str, Any] | None = None) -> None:
        """Initialize the error for the given missing field.

        Args:
            field: Name of the missing field.
            details: Optional extra diagnostics merged into ``details``.
        """
        super().__init__(
            f"Required field is missing: {field}",
            details={"field": field, **(details or {})},
        )
        self.field = field


class UnknownAssetTypeError(DomainError):
    """Raised when an asset type cannot be resolved to a supported value."""

    code = "UNKNOWN_ASSET_TYPE"

    def __init__(self, value: str, *, field: str = "asset_type") -> None:
        """Initialize the error.

        Args:
            value: The offending raw value.
            field: Name of the input field that carried the value.
        """
        super().__init__(
            f"Unsupported asset type: {value!r}",
            details={"field": field, "value": value},
        )
        self.field = field


class ReferenceDataError(DomainError):
    """Raised when static reference data is structurally invalid."""

    code = "REFERENCE_DATA_ERROR"


class ConflictResolutionError(DomainError):
    """Raised when a manual conflict resolution cannot be applied."""

    code = "CONFLICT_RESOLUTION_ERROR"


class ConflictNotFoundError(ConflictResolutionError):
    """Raised when no conflict carries the requested identifier."""

    code = "CONFLICT_NOT_FOUND"


class ConflictAlreadyResolvedError(ConflictResolutionError):
    """Raised when a resolved conflict would be resolved again."""

    code = "CONFLICT_ALREADY_RESOLVED"


class MappingReviewError(DomainError):
    """Raised when a mapping review operation targets unknown data."""

    code = "MAPPING_REVIEW_ERROR"


__all__ = [
    "MissingFieldError",
    "UnknownAssetTypeError",
    "ReferenceDataError",
    "ConflictResolutionError",
    "ConflictNotFoundError",
    "ConflictAlreadyResolvedError",
    "MappingReviewError",
]
