# tests/unit/domain/services/test_account_matcher.py
from __future__ import annotations

from decimal import Decimal

from carefin_core.domain.enums.accounts import AccountType, MatchType
from carefin_core.domain.reference.chart_of_accounts import default_chart_of_accounts
from carefin_core.domain.services.account_matcher import (
    AccountMatcher,
    AccountMatcherConfig,
    fuzzy_score,
    label_variations,
    normalize_label,
)


def test_normalize_label_strips_punctuation_and_collapses_whitespace() -> None:
    assert normalize_label("  Nursing   Wages (RN) ") == "nursing wages rn"
    assert normalize_label("R&M") == "rm"
    assert normalize_label("!!!") == ""


def test_fuzzy_score_rules() -> None:
    assert fuzzy_score("rent", "rent") == Decimal("1")
    assert fuzzy_score("", "rent") == Decimal("0")
    # Containment scores by length ratio.
    assert fuzzy_score("rent", "rent expense") == Decimal(4) / Decimal(12)
    # Otherwise word-set overlap.
    assert fuzzy_score("nursing wages", "nursing salaries") == Decimal(1) / Decimal(3)


def test_label_variations_drop_total_prefix_and_expense_suffix() -> None:
    assert label_variations("Total Dietary Expenses") == (
        "total dietary expenses",
        "dietary expenses",
        "dietary",
    )
    assert label_variations("   ") == ()


def test_exact_name_match_has_full_confidence() -> None:
    mapping = AccountMatcher().match("Medicare Part A Revenue")

    assert mapping.match_type is MatchType.EXACT
    assert mapping.confidence == Decimal("1")
    assert mapping.account is not None
    assert mapping.account.code == "4010"


def test_alias_match_is_case_and_punctuation_insensitive() -> None:
    mapping = AccountMatcher().match("  MEDICAID!! ")

    assert mapping.match_type is MatchType.ALIAS
    assert mapping.confidence == Decimal("0.95")
    assert mapping.account is not None
    assert mapping.account.code == "4110"


def test_fuzzy_match_uses_label_variations_when_enabled() -> None:
    matcher = AccountMatcher(config=AccountMatcherConfig(use_label_variations=True))

    mapping = matcher.match("Total Nursing Wages Expense")

    assert mapping.match_type is MatchType.FUZZY
    assert mapping.account is not None
    assert mapping.account.code == "5020"
    assert mapping.confidence == Decimal("1")


def test_default_matcher_scores_only_the_normalized_label() -> None:
    matcher = AccountMatcher()

    # Best plain scores are 7/13, 12/26 and 9/18, all under the 0.6 floor.
    for label in ("Total Dietary", "Total Housekeeping Expense", "Utilities Expenses"):
        mapping = matcher.match(label)
        assert mapping.match_type is MatchType.NONE
        assert mapping.account is None


def test_unmatched_label_returns_none_mapping_without_raising() -> None:
    matcher = AccountMatcher()

    for label in ("zzqx widget", "", "%%%"):
        mapping = matcher.match(label)
        assert mapping.match_type is MatchType.NONE
        assert mapping.account is None
        assert mapping.confidence == Decimal("0")
        assert mapping.is_mapped is False


def test_ties_break_in_chart_order_and_account_type_restricts_candidates() -> None:
    matcher = AccountMatcher()

    # "Supplies" is an alias of both a revenue and an expense account.
    unrestricted = matcher.match("Supplies")
    expense_only = matcher.match("Supplies", account_type=AccountType.EXPENSE)

    assert unrestricted.account is not None and unrestricted.account.code == "4690"
    assert expense_only.account is not None and expense_only.account.code == "5320"


def test_min_fuzzy_confidence_gates_weak_matches() -> None:
    strict = AccountMatcher(config=AccountMatcherConfig(min_fuzzy_confidence=Decimal("0.5")))
    lenient = AccountMatcher(config=AccountMatcherConfig(min_fuzzy_confidence=Decimal("0.2")))

    # Best candidate shares one word out of four ("nursing").
    assert strict.match("Nursing Bonus Pool").match_type is MatchType.NONE
    assert lenient.match("Nursing Bonus Pool").match_type is MatchType.FUZZY


def test_match_many_preserves_order() -> None:
    mappings = AccountMatcher().match_many(["Rent", "Dietary", "zzqx"])

    assert [m.label for m in mappings] == ["Rent", "Dietary", "zzqx"]
    assert [m.match_type for m in mappings] == [MatchType.EXACT, MatchType.EXACT, MatchType.NONE]


def test_manual_override_sets_full_confidence_and_reviewed() -> None:
    matcher = AccountMatcher()
    original = matcher.match("zzqx widget")
    account = default_chart_of_accounts().get_by_code("5990")
    assert account is not None

    overridden = matcher.manual_override(original, account)

    assert overridden.match_type is MatchType.MANUAL
    assert overridden.confidence == Decimal("1")
    assert overridden.reviewed is True
    assert overridden.account == account
    # The original mapping is untouched.
    assert original.account is None
