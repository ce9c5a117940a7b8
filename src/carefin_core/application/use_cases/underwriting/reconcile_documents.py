# src/carefin_core/application/use_cases/underwriting/reconcile_documents.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Use case: Reconcile facility data across source documents.

Purpose:
    Group facility records extracted from several documents, detect bed-count
    and revenue disagreements, auto-resolve immaterial ones, and apply manual
    resolutions to the rest.

Layer:
    application/use_cases/underwriting
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, replace
from decimal import Decimal

from carefin_core.application.schemas.dto.reconciliation import FacilityRecordDTO
from carefin_core.config.settings import Settings, get_settings
from carefin_core.domain.entities.conflict import ReconciliationResult
from carefin_core.domain.services.cross_document_reconciler import (
    CrossDocumentReconciler,
    validation_score,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReconcileDocumentsRequest:
    """Request parameters for reconciliation.

    Attributes:
        records:
            Facility records in source order.
    """

    records: Sequence[FacilityRecordDTO]


class ReconcileDocumentsUseCase:
    """Reconcile facility records and resolve conflicts.

    Args:
        settings:
            Settings supplying the auto-resolve threshold and noise floor.
            Defaults to :func:`get_settings`.
        reconciler:
            Reconciler to use. Built from ``settings`` when omitted.
    """

    def __init__(
        self,
        *,
        settings: Settings | None = None,
        reconciler: CrossDocumentReconciler | None = None,
    ) -> None:
        if reconciler is None:
            reconciler = CrossDocumentReconciler((settings or get_settings()).reconciler_config())
        self._reconciler = reconciler

    def execute(self, req: ReconcileDocumentsRequest) -> ReconciliationResult:
        """Reconcile the request's records.

        Args:
            req:
                Records to reconcile.

        Returns:
            Conflicts, document summaries, cross-references and score.
        """
        records = [r.to_domain() for r in req.records]
        logger.info(
            "underwriting.reconcile_documents.start",
            extra={
                "records": len(records),
                "sources": len({r.source for r in records}),
            },
        )

        result = self._reconciler.reconcile(records)

        logger.info(
            "underwriting.reconcile_documents.done",
            extra={
                "conflicts": len(result.conflicts),
                "pending": len(result.pending),
                "validation_score": result.validation_score,
            },
        )
        return result

    def resolve(
        self,
        result: ReconciliationResult,
        conflict_id: str,
        value: Decimal,
    ) -> ReconciliationResult:
        """Manually resolve one pending conflict and re-score.

        Raises:
            ConflictNotFoundError: If ``conflict_id`` is unknown.
            ConflictAlreadyResolvedError: If the conflict is already resolved.
        """
        conflicts = self._reconciler.resolve(result.conflicts, conflict_id, value)
        updated = replace(
            result,
            conflicts=conflicts,
            validation_score=validation_score(conflicts),
        )
        logger.info(
            "underwriting.reconcile_documents.resolved",
            extra={
                "conflict_id": conflict_id,
                "resolved_value": str(value),
                "validation_score": updated.validation_score,
            },
        )
        return updated


__all__ = [
    "ReconcileDocumentsRequest",
    "ReconcileDocumentsUseCase",
]
