# tests/conftest.py
from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest

from carefin_core.config.settings import get_settings

_SETTINGS_ENV_KEYS: tuple[str, ...] = (
    "ENVIRONMENT",
    "LOG_LEVEL",
    "NORMALIZE_MANAGEMENT_FEE",
    "TARGET_MANAGEMENT_FEE_PERCENT",
    "NORMALIZE_AGENCY",
    "TARGET_AGENCY_PERCENT",
    "ADD_RESERVES",
    "RESERVE_PERCENT",
    "ANNUALIZE",
    "MATCH_CONFIDENCE_THRESHOLD",
    "AUTO_RESOLVE_THRESHOLD",
    "CONFLICT_EPSILON",
    "RUN_ID",
)


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[None]:
    """Run every test against default settings with no stray env or .env file."""
    for key in _SETTINGS_ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def facility_payload() -> dict[str, Any]:
    """A full-year skilled nursing payload in the shape document extraction emits."""
    return {
        "facilityName": "Oak Manor",
        "assetType": "SNF",
        "state": "TX",
        "beds": 100,
        "patientDays": 30000,
        "period": {"months": 12, "isAudited": True},
        "revenueLines": [
            {"label": "Medicare Part A Revenue", "amount": "2,000,000"},
            {"label": "Medicaid", "amount": 5000000},
            {"label": "Private Pay", "amount": "1000000"},
        ],
        "expenseLines": [
            {"label": "Nursing Wages", "amount": 3000000},
            {"label": "Agency Nursing", "amount": 100000},
            {"label": "Dietary", "amount": 600000},
            {"label": "Management Fee", "amount": 400000},
            {"label": "Rent", "amount": 500000},
            {"label": "Utilities", "amount": "$250,000"},
        ],
        "operations": {"occupancy_rate": "0.82"},
        "quality": {"overall_rating": 3},
        "buildingAge": 25,
        "starRating": 3,
    }
