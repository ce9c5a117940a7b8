# tests/unit/config/test_settings.py
from __future__ import annotations

from decimal import Decimal

import pytest
from pydantic import ValidationError

from carefin_core.config.settings import Environment, Settings, get_settings


def test_settings_defaults() -> None:
    s = Settings()

    assert s.environment == Environment.DEVELOPMENT
    assert s.log_level == "INFO"
    assert s.target_management_fee_percent == Decimal("0.05")
    assert s.reserve_percent == Decimal("0.03")
    assert s.auto_resolve_threshold == Decimal("0.03")
    assert s.annualize is True


def test_settings_read_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Settings should hydrate deterministically from environment variables."""
    monkeypatch.setenv("ENVIRONMENT", "test")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("RESERVE_PERCENT", "0.04")
    monkeypatch.setenv("ADD_RESERVES", "false")
    monkeypatch.setenv("MATCH_CONFIDENCE_THRESHOLD", "0.75")

    s = Settings()

    assert s.environment == Environment.TEST
    assert s.log_level == "DEBUG"
    assert s.reserve_percent == Decimal("0.04")
    assert s.add_reserves is False
    assert s.matcher_config().min_fuzzy_confidence == Decimal("0.75")


def test_option_builders_carry_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TARGET_AGENCY_PERCENT", "0.05")
    monkeypatch.setenv("NORMALIZE_MANAGEMENT_FEE", "0")
    monkeypatch.setenv("CONFLICT_EPSILON", "0.002")

    s = Settings()
    options = s.normalization_options()
    reconciler = s.reconciler_config()

    assert options.target_agency_percent == Decimal("0.05")
    assert options.normalize_management_fee is False
    assert reconciler.conflict_epsilon == Decimal("0.002")
    assert reconciler.auto_resolve_threshold == Decimal("0.03")


def test_percent_fields_are_bounded(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RESERVE_PERCENT", "1.5")

    with pytest.raises(ValidationError):
        Settings()


def test_auto_resolve_threshold_cannot_be_below_epsilon(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("AUTO_RESOLVE_THRESHOLD", "0.001")
    monkeypatch.setenv("CONFLICT_EPSILON", "0.01")

    with pytest.raises(ValidationError):
        Settings()


def test_settings_forbid_extra_fields() -> None:
    """Model should reject unexpected fields."""
    with pytest.raises(ValidationError):
        Settings.model_validate({"RESERVE_PERCENT": "0.03", "unexpected_field": "boom"})


def test_get_settings_is_cached_and_wraps_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    assert get_settings() is get_settings()

    get_settings.cache_clear()
    monkeypatch.setenv("LOG_LEVEL", "chatty")

    with pytest.raises(RuntimeError, match="Invalid configuration"):
        get_settings()
