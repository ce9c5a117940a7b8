# src/carefin_core/domain/exceptions/__init__.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Domain exception types."""

from carefin_core.domain.exceptions.base import DomainError
from carefin_core.domain.exceptions.underwriting import (
    ConflictAlreadyResolvedError,
    ConflictNotFoundError,
    ConflictResolutionError,
    MappingReviewError,
    MissingFieldError,
    ReferenceDataError,
    UnknownAssetTypeError,
)

__all__ = [
    "DomainError",
    "MissingFieldError",
    "UnknownAssetTypeError",
    "ReferenceDataError",
    "ConflictResolutionError",
    "ConflictNotFoundError",
    "ConflictAlreadyResolvedError",
    "MappingReviewError",
]
