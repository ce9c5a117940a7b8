# tests/unit/domain/services/test_mapping_review.py
from __future__ import annotations

from decimal import Decimal

import pytest

from carefin_core.domain.entities.account import LineItemMapping
from carefin_core.domain.enums.accounts import LineItemCategory, MatchType, QuickCategory
from carefin_core.domain.exceptions.underwriting import MappingReviewError
from carefin_core.domain.services import mapping_review
from carefin_core.domain.services.account_matcher import AccountMatcher
from carefin_core.domain.services.mapping_review import (
    AUTO_MAP_CONFIDENCE,
    MappingReviewCoordinator,
    auto_category,
    target_code,
)


def _unmapped(label: str) -> LineItemMapping:
    return LineItemMapping(
        label=label,
        account=None,
        confidence=Decimal("0"),
        match_type=MatchType.NONE,
    )


def _make_coordinator() -> MappingReviewCoordinator:
    matched = AccountMatcher().match("Rent")
    return MappingReviewCoordinator(
        [
            matched,
            _unmapped("Interest Income"),
            _unmapped("Patient Days"),
            _unmapped("Vendor Fees"),
        ]
    )


@pytest.mark.parametrize(
    ("label", "expected"),
    [
        ("Total Patient Revenue", QuickCategory.REVENUE),
        ("Interest Income", QuickCategory.REVENUE),
        ("Reimbursement Adj.", QuickCategory.REVENUE),
        ("Patient Days", QuickCategory.CENSUS),
        ("Licensed Beds", QuickCategory.CENSUS),
        ("Vendor Fees", QuickCategory.EXPENSE),
    ],
)
def test_auto_category_keywords(label: str, expected: QuickCategory) -> None:
    assert auto_category(label) is expected


def test_summary_counts_unmapped_items() -> None:
    coordinator = _make_coordinator()

    summary = coordinator.summary()

    assert coordinator.unmapped_indexes() == (1, 2, 3)
    assert (summary.total, summary.mapped, summary.unmapped, summary.reviewed) == (4, 1, 3, 0)
    assert summary.is_complete is False


def test_auto_map_all_maps_only_unmapped_items() -> None:
    coordinator = _make_coordinator()
    rent = coordinator.mappings[0]

    count = coordinator.auto_map_all()

    assert count == 3
    assert coordinator.summary().is_complete is True
    assert coordinator.mappings[0] == rent
    revenue, census, expense = coordinator.mappings[1:]
    assert target_code(revenue) == "4910"
    assert target_code(census) == "C600"
    assert census.account is None
    assert census.line_category is LineItemCategory.CENSUS
    assert target_code(expense) == "5990"
    for mapping in (revenue, census, expense):
        assert mapping.confidence == AUTO_MAP_CONFIDENCE
        assert mapping.match_type is MatchType.FUZZY
        assert mapping.reviewed is True


def test_apply_account_sets_manual_full_confidence() -> None:
    coordinator = _make_coordinator()

    mapping = coordinator.apply_account(3, "5750")

    assert mapping.account is not None
    assert mapping.account.name == "Professional Fees"
    assert mapping.match_type is MatchType.MANUAL
    assert mapping.confidence == Decimal("1")
    assert coordinator.unmapped_indexes() == (1, 2)


def test_quick_categorize_skip_and_unmap() -> None:
    coordinator = _make_coordinator()

    skipped = coordinator.quick_categorize(2, "Skipped")

    assert target_code(skipped) == "SKIP"
    assert skipped.is_mapped is True
    assert skipped.confidence == Decimal("1")
    assert skipped.match_type is MatchType.MANUAL

    cleared = coordinator.unmap(2)

    assert cleared.is_mapped is False
    assert target_code(cleared) is None
    assert 2 in coordinator.unmapped_indexes()
    assert coordinator.summary().reviewed == 1


def test_invalid_operations_raise_review_error() -> None:
    coordinator = _make_coordinator()

    with pytest.raises(MappingReviewError):
        coordinator.apply_account(99, "5750")
    with pytest.raises(MappingReviewError):
        coordinator.apply_account(1, "0000")
    with pytest.raises(MappingReviewError):
        coordinator.quick_categorize(1, "statistic")
    with pytest.raises(MappingReviewError):
        coordinator.unmap(-1)


def test_auto_map_stays_fuzzy_even_at_full_confidence(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(mapping_review, "AUTO_MAP_CONFIDENCE", Decimal("1"))
    coordinator = _make_coordinator()

    coordinator.auto_map_all()

    for mapping in coordinator.mappings[1:]:
        assert mapping.confidence == Decimal("1")
        assert mapping.match_type is MatchType.FUZZY
