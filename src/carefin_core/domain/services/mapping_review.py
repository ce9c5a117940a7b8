# src/carefin_core/domain/services/mapping_review.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Mapping review coordinator.

Purpose:
    Track which line-item mappings still need a human decision and apply
    the review operations: explicit account selection, quick
    categorization, bulk keyword auto-mapping and unmapping.

Layer:
    domain/services

Notes:
    - Pure domain logic:
        * No logging.
        * No I/O.
    - One coordinator instance holds one review. Mappings themselves stay
      immutable; each operation swaps in a new mapping value.
    - Explicit selections carry confidence 1.0, keyword auto-mapping 0.7.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace
from decimal import Decimal
from typing import Final

from carefin_core.domain.entities.account import (
    CONFIDENCE_ONE,
    LineItemMapping,
    MappingReviewSummary,
)
from carefin_core.domain.enums.accounts import LineItemCategory, MatchType, QuickCategory
from carefin_core.domain.exceptions.underwriting import MappingReviewError
from carefin_core.domain.reference.chart_of_accounts import (
    ChartOfAccounts,
    default_chart_of_accounts,
)

AUTO_MAP_CONFIDENCE: Final[Decimal] = Decimal("0.7")

QUICK_REVENUE_CODE: Final[str] = "4910"
QUICK_EXPENSE_CODE: Final[str] = "5990"
CENSUS_MARKER_CODE: Final[str] = "C600"
CENSUS_MARKER_NAME: Final[str] = "Census Data"
SKIP_MARKER_CODE: Final[str] = "SKIP"
SKIP_MARKER_NAME: Final[str] = "Skipped"

REVENUE_KEYWORDS: Final[tuple[str, ...]] = ("revenue", "income", "reimburse")
CENSUS_KEYWORDS: Final[tuple[str, ...]] = ("census", "day", "occupancy", "bed")


def auto_category(label: str) -> QuickCategory:
    """Pick a quick category for ``label`` from keyword substrings."""
    lowered = label.lower()
    if any(word in lowered for word in REVENUE_KEYWORDS):
        return QuickCategory.REVENUE
    if any(word in lowered for word in CENSUS_KEYWORDS):
        return QuickCategory.CENSUS
    return QuickCategory.EXPENSE


def target_code(mapping: LineItemMapping) -> str | None:
    """Return the account code or marker code a mapping resolves to."""
    if mapping.account is not None:
        return mapping.account.code
    if mapping.category is LineItemCategory.CENSUS:
        return CENSUS_MARKER_CODE
    if mapping.category is LineItemCategory.SKIPPED:
        return SKIP_MARKER_CODE
    return None


class MappingReviewCoordinator:
    """Drive one review session over a list of mappings.

    Args:
        mappings:
            Mappings produced by the account matcher, in source order.
        chart:
            Chart of accounts used to resolve account codes.
    """

    __slots__ = ("_chart", "_mappings")

    def __init__(
        self,
        mappings: Iterable[LineItemMapping],
        chart: ChartOfAccounts | None = None,
    ) -> None:
        self._chart = chart or default_chart_of_accounts()
        self._mappings: list[LineItemMapping] = list(mappings)

    @property
    def mappings(self) -> tuple[LineItemMapping, ...]:
        return tuple(self._mappings)

    def unmapped_indexes(self) -> tuple[int, ...]:
        return tuple(i for i, m in enumerate(self._mappings) if not m.is_mapped)

    def summary(self) -> MappingReviewSummary:
        mapped = sum(1 for m in self._mappings if m.is_mapped)
        return MappingReviewSummary(
            total=len(self._mappings),
            mapped=mapped,
            unmapped=len(self._mappings) - mapped,
            reviewed=sum(1 for m in self._mappings if m.reviewed),
        )

    # ------------------------------------------------------------------ #
    # Operations                                                         #
    # ------------------------------------------------------------------ #

    def apply_account(self, index: int, code: str) -> LineItemMapping:
        """Map one item to the account with ``code`` at full confidence.

        Raises:
            MappingReviewError: If ``index`` or ``code`` is unknown.
        """
        current = self._get(index)
        account = self._chart.get_by_code(code)
        if account is None:
            raise MappingReviewError(
                f"Unknown account code: {code}",
                details={"code": code, "index": index},
            )
        return self._put(index, current.with_manual_account(account))

    def quick_categorize(self, index: int, category: QuickCategory | str) -> LineItemMapping:
        """Map one item into a quick category at full confidence.

        Raises:
            MappingReviewError: If ``index`` or ``category`` is unknown.
        """
        current = self._get(index)
        bucket = _parse_quick_category(category)
        mapped = self._categorized(
            current, bucket, confidence=CONFIDENCE_ONE, match_type=MatchType.MANUAL
        )
        return self._put(index, mapped)

    def auto_map_all(self) -> int:
        """Keyword-map every unmapped item; return how many were mapped."""
        count = 0
        for index in self.unmapped_indexes():
            current = self._mappings[index]
            bucket = auto_category(current.label)
            mapped = self._categorized(
                current, bucket, confidence=AUTO_MAP_CONFIDENCE, match_type=MatchType.FUZZY
            )
            self._put(index, mapped)
            count += 1
        return count

    def unmap(self, index: int) -> LineItemMapping:
        """Return one item to the unmatched state.

        Raises:
            MappingReviewError: If ``index`` is unknown.
        """
        return self._put(index, self._get(index).cleared())

    # ------------------------------------------------------------------ #
    # Internals                                                          #
    # ------------------------------------------------------------------ #

    def _categorized(
        self,
        mapping: LineItemMapping,
        bucket: QuickCategory,
        *,
        confidence: Decimal,
        match_type: MatchType,
    ) -> LineItemMapping:
        if bucket in (QuickCategory.REVENUE, QuickCategory.EXPENSE):
            code = QUICK_REVENUE_CODE if bucket is QuickCategory.REVENUE else QUICK_EXPENSE_CODE
            account = self._chart.get_by_code(code)
            if account is None:
                raise MappingReviewError(
                    f"Chart of accounts has no quick-category account {code}",
                    details={"code": code, "category": bucket.value},
                )
            return replace(
                mapping,
                account=account,
                confidence=confidence,
                match_type=match_type,
                reviewed=True,
                category=None,
            )
        return replace(
            mapping,
            account=None,
            confidence=confidence,
            match_type=match_type,
            reviewed=True,
            category=(
                LineItemCategory.CENSUS
                if bucket is QuickCategory.CENSUS
                else LineItemCategory.SKIPPED
            ),
        )

    def _get(self, index: int) -> LineItemMapping:
        if not 0 <= index < len(self._mappings):
            raise MappingReviewError(
                f"Unknown mapping index: {index}",
                details={"index": index, "total": len(self._mappings)},
            )
        return self._mappings[index]

    def _put(self, index: int, mapping: LineItemMapping) -> LineItemMapping:
        self._mappings[index] = mapping
        return mapping


def _parse_quick_category(value: QuickCategory | str) -> QuickCategory:
    if isinstance(value, QuickCategory):
        return value
    try:
        return QuickCategory(str(value).strip().lower())
    except ValueError as exc:
        raise MappingReviewError(
            f"Unknown quick category: {value!r}",
            details={"category": str(value)},
        ) from exc


__all__ = [
    "AUTO_MAP_CONFIDENCE",
    "QUICK_REVENUE_CODE",
    "QUICK_EXPENSE_CODE",
    "CENSUS_MARKER_CODE",
    "CENSUS_MARKER_NAME",
    "SKIP_MARKER_CODE",
    "SKIP_MARKER_NAME",
    "auto_category",
    "target_code",
    "MappingReviewCoordinator",
]
