# src/carefin_core/domain/entities/account.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Canonical account and line-item mapping entities.

Purpose:
    Represent a single entry of the fixed chart of accounts and the result of
    matching one raw source label against that chart.

Layer:
    domain/entities

Notes:
    - Accounts are immutable and loaded once; they form the target space of
      the account matcher.
    - A ``LineItemMapping`` is never mutated. Manual overrides and review
      operations produce new mappings.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal

from carefin_core.domain.enums.accounts import (
    AccountSubCategory,
    AccountType,
    LineItemCategory,
    MatchType,
    NormalBalance,
)

CONFIDENCE_ONE = Decimal("1")
CONFIDENCE_ZERO = Decimal("0")


@dataclass(frozen=True, slots=True)
class Account:
    """Canonical ledger entry.

    Attributes:
        code:
            Stable account code (e.g. ``"4010"``).
        name:
            Canonical human-readable name.
        account_type:
            Revenue or expense side.
        category:
            Statement category tag (e.g. ``"medicare_part_a"``). Normalized
            statements aggregate line items by this tag.
        sub_category:
            Grouping below the revenue/expense split.
        aliases:
            Known alternate labels, matched verbatim after normalization.
        is_operating:
            Whether the account participates in operating results.
        description:
            Short description of what the account captures.
        normal_balance:
            Debit or credit. Defaults from the account type.
        benchmark_category:
            Benchmark metric family the account feeds, if any.
    """

    code: str
    name: str
    account_type: AccountType
    category: str
    sub_category: AccountSubCategory
    aliases: tuple[str, ...] = ()
    is_operating: bool = True
    description: str = ""
    normal_balance: NormalBalance | None = None
    benchmark_category: str | None = None

    def __post_init__(self) -> None:
        if self.normal_balance is None:
            balance = (
                NormalBalance.CREDIT
                if self.account_type is AccountType.REVENUE
                else NormalBalance.DEBIT
            )
            object.__setattr__(self, "normal_balance", balance)

    @property
    def is_revenue(self) -> bool:
        return self.account_type is AccountType.REVENUE

    @property
    def is_labor(self) -> bool:
        return self.sub_category is AccountSubCategory.LABOR


@dataclass(frozen=True, slots=True)
class LineItemMapping:
    """Result of matching one raw source label to the chart of accounts.

    Attributes:
        label:
            Original raw label as extracted from the source.
        account:
            Matched account, or ``None`` when nothing matched.
        confidence:
            Match confidence in ``[0, 1]``.
        match_type:
            How the match was obtained.
        amount:
            Optional amount carried alongside the label during review.
        reviewed:
            Whether a human (or bulk auto-map) touched this mapping.
        category:
            Explicit line-item bucket for mappings that resolve to a
            non-account bucket (census, skipped). ``None`` means the bucket is
            derived from the matched account.
    """

    label: str
    account: Account | None
    confidence: Decimal
    match_type: MatchType
    amount: Decimal | None = None
    reviewed: bool = False
    category: LineItemCategory | None = None

    @property
    def is_mapped(self) -> bool:
        if self.match_type is MatchType.NONE:
            return False
        return self.account is not None or self.category is not None

    @property
    def line_category(self) -> LineItemCategory | None:
        """Bucket this mapping resolves to, or ``None`` while unmapped."""
        if self.category is not None:
            return self.category
        if self.account is None:
            return None
        return LineItemCategory.REVENUE if self.account.is_revenue else LineItemCategory.EXPENSE

    def with_manual_account(self, account: Account) -> LineItemMapping:
        """Return a manual override of this mapping at full confidence."""
        return replace(
            self,
            account=account,
            confidence=CONFIDENCE_ONE,
            match_type=MatchType.MANUAL,
            reviewed=True,
            category=None,
        )

    def cleared(self) -> LineItemMapping:
        """Return this mapping reset to the unmatched state."""
        return replace(
            self,
            account=None,
            confidence=CONFIDENCE_ZERO,
            match_type=MatchType.NONE,
            reviewed=True,
            category=None,
        )


@dataclass(frozen=True, slots=True)
class MappingReviewSummary:
    """Progress counters for a mapping review."""

    total: int
    mapped: int
    unmapped: int
    reviewed: int

    @property
    def is_complete(self) -> bool:
        return self.unmapped == 0


__all__ = [
    "Account",
    "LineItemMapping",
    "MappingReviewSummary",
    "CONFIDENCE_ONE",
    "CONFIDENCE_ZERO",
]
