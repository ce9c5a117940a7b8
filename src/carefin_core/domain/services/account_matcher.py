# src/carefin_core/domain/services/account_matcher.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Account matcher.

Purpose:
    Map arbitrary text labels extracted from source documents onto the
    canonical chart of accounts using exact, alias, and fuzzy matching.

Layer:
    domain/services

Notes:
    - Pure domain logic:
        * No logging.
        * No I/O.
    - Never raises for unmatched labels. "No match" is an expected outcome
      and is routed to mapping review.
    - Deterministic: candidates are scanned in chart order and ties keep the
      first account encountered.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from carefin_core.domain.entities.account import (
    CONFIDENCE_ONE,
    CONFIDENCE_ZERO,
    Account,
    LineItemMapping,
)
from carefin_core.domain.enums.accounts import AccountType, MatchType
from carefin_core.domain.reference.chart_of_accounts import (
    ChartOfAccounts,
    default_chart_of_accounts,
)

_NON_ALNUM = re.compile(r"[^a-z0-9\s]")
_WHITESPACE = re.compile(r"\s+")

_PREFIXES: tuple[str, ...] = ("total ",)
_SUFFIXES: tuple[str, ...] = (" expenses", " expense", " revenues", " revenue", " income")

_CONFIDENCE_QUANTUM = Decimal("0.000001")


def normalize_label(label: str) -> str:
    """Normalize a raw label for comparison.

    Lowercases, strips every character that is not ``a-z``, ``0-9`` or
    whitespace, collapses whitespace runs and trims.

    Args:
        label: Raw label text.

    Returns:
        The normalized label (possibly empty).
    """
    lowered = label.lower()
    stripped = _NON_ALNUM.sub("", lowered)
    return _WHITESPACE.sub(" ", stripped).strip()


def fuzzy_score(a: str, b: str) -> Decimal:
    """Return the similarity of two normalized strings in ``[0, 1]``.

    * Identical strings score 1.
    * Either string empty scores 0.
    * Substring containment scores ``len(shorter) / len(longer)``.
    * Otherwise the score is the word-set overlap
      ``|A ∩ B| / |A ∪ B|``.
    """
    if a == b:
        return CONFIDENCE_ONE
    if not a or not b:
        return CONFIDENCE_ZERO

    if a in b or b in a:
        shorter, longer = (a, b) if len(a) < len(b) else (b, a)
        return Decimal(len(shorter)) / Decimal(len(longer))

    words_a = set(a.split(" "))
    words_b = set(b.split(" "))
    union = words_a | words_b
    return Decimal(len(words_a & words_b)) / Decimal(len(union))


def label_variations(label: str) -> tuple[str, ...]:
    """Return the normalized label followed by common simplified variants.

    Variants drop a leading ``total``, a trailing ``expense``/``revenue``/
    ``income`` qualifier, and a trailing plural ``s``. Order is stable and
    duplicates are removed.
    """
    base = normalize_label(label)
    if not base:
        return ()

    variants: list[str] = [base]

    def _add(candidate: str) -> None:
        candidate = candidate.strip()
        if candidate and candidate not in variants:
            variants.append(candidate)

    trimmed = base
    for prefix in _PREFIXES:
        if trimmed.startswith(prefix):
            trimmed = trimmed[len(prefix) :]
            _add(trimmed)
    for suffix in _SUFFIXES:
        if trimmed.endswith(suffix):
            trimmed = trimmed[: -len(suffix)]
            _add(trimmed)
            break
    if len(trimmed) > 3 and trimmed.endswith("s") and not trimmed.endswith("ss"):
        _add(trimmed[:-1])

    return tuple(variants)


def _q(value: Decimal) -> Decimal:
    return value.quantize(_CONFIDENCE_QUANTUM, rounding=ROUND_HALF_UP)


@dataclass(frozen=True, slots=True)
class AccountMatcherConfig:
    """Configuration for :class:`AccountMatcher`.

    Attributes:
        alias_confidence:
            Confidence reported for an exact alias hit.
        min_fuzzy_confidence:
            Minimum fuzzy score (inclusive) for a fuzzy match to be accepted.
        use_label_variations:
            Whether the fuzzy phase also scores simplified label variants.
            Off by default: only the normalized label is scored.
    """

    alias_confidence: Decimal = Decimal("0.95")
    min_fuzzy_confidence: Decimal = Decimal("0.6")
    use_label_variations: bool = False


@dataclass(frozen=True, slots=True)
class _Candidate:
    account: Account
    name: str
    aliases: tuple[str, ...]


class AccountMatcher:
    """Match raw labels to canonical accounts.

    Args:
        chart:
            Chart of accounts to match against. Defaults to the built-in
            healthcare operator chart.
        config:
            Optional matcher configuration.
    """

    def __init__(
        self,
        chart: ChartOfAccounts | None = None,
        *,
        config: AccountMatcherConfig | None = None,
    ) -> None:
        self._chart = chart if chart is not None else default_chart_of_accounts()
        self._config = config or AccountMatcherConfig()
        self._candidates: tuple[_Candidate, ...] = tuple(
            _Candidate(
                account=account,
                name=normalize_label(account.name),
                aliases=tuple(normalize_label(alias) for alias in account.aliases),
            )
            for account in self._chart
        )

    @property
    def chart(self) -> ChartOfAccounts:
        return self._chart

    # ------------------------------------------------------------------ #
    # Public API                                                         #
    # ------------------------------------------------------------------ #

    def match(self, label: str, *, account_type: AccountType | None = None) -> LineItemMapping:
        """Match a single label.

        Args:
            label:
                Raw source label.
            account_type:
                Optional restriction to revenue or expense accounts. Used by
                the normalizer, which already knows which side a line is on.

        Returns:
            The resulting mapping. Unmatched labels yield ``MatchType.NONE``
            with no account and zero confidence.
        """
        normalized = normalize_label(label)
        if not normalized:
            return self._no_match(label)

        candidates = self._candidates_for(account_type)

        for candidate in candidates:
            if candidate.name == normalized:
                return LineItemMapping(
                    label=label,
                    account=candidate.account,
                    confidence=CONFIDENCE_ONE,
                    match_type=MatchType.EXACT,
                )

        for candidate in candidates:
            if normalized in candidate.aliases:
                return LineItemMapping(
                    label=label,
                    account=candidate.account,
                    confidence=self._config.alias_confidence,
                    match_type=MatchType.ALIAS,
                )

        variants = (
            label_variations(label) if self._config.use_label_variations else (normalized,)
        )

        best_account: Account | None = None
        best_score = CONFIDENCE_ZERO
        for candidate in candidates:
            score = max(
                fuzzy_score(variant, target)
                for variant in variants
                for target in (candidate.name, *candidate.aliases)
            )
            if score > best_score:
                best_score = score
                best_account = candidate.account

        if best_account is None or best_score < self._config.min_fuzzy_confidence:
            return self._no_match(label)

        return LineItemMapping(
            label=label,
            account=best_account,
            confidence=_q(best_score),
            match_type=MatchType.FUZZY,
        )

    def match_many(
        self,
        labels: Iterable[str],
        *,
        account_type: AccountType | None = None,
    ) -> list[LineItemMapping]:
        """Match each label in order."""
        return [self.match(label, account_type=account_type) for label in labels]

    def manual_override(self, mapping: LineItemMapping, account: Account) -> LineItemMapping:
        """Return a manual override of ``mapping`` pointing at ``account``."""
        return mapping.with_manual_account(account)

    # ------------------------------------------------------------------ #
    # Internal helpers                                                   #
    # ------------------------------------------------------------------ #

    def _candidates_for(self, account_type: AccountType | None) -> Sequence[_Candidate]:
        if account_type is None:
            return self._candidates
        return tuple(c for c in self._candidates if c.account.account_type is account_type)

    @staticmethod
    def _no_match(label: str) -> LineItemMapping:
        return LineItemMapping(
            label=label,
            account=None,
            confidence=CONFIDENCE_ZERO,
            match_type=MatchType.NONE,
        )


__all__ = [
    "AccountMatcher",
    "AccountMatcherConfig",
    "fuzzy_score",
    "label_variations",
    "normalize_label",
]
