# tests/unit/application/use_cases/test_analyze_facility.py
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any

import pytest

from carefin_core.application.schemas.dto.facility import FacilityInputDTO
from carefin_core.application.use_cases.underwriting.analyze_facility import (
    COERCED_LINE_CONFIDENCE,
    AnalyzeFacilityRequest,
    AnalyzeFacilityUseCase,
    medicare_revenue,
)
from carefin_core.config.settings import Settings
from carefin_core.domain.entities.valuation import PriceRange
from carefin_core.domain.enums.accounts import MatchType
from carefin_core.domain.enums.analysis import AdjustmentCategory
from carefin_core.domain.enums.assets import AssetType
from carefin_core.domain.exceptions.underwriting import MissingFieldError, UnknownAssetTypeError
from carefin_core.domain.reference.chart_of_accounts import default_chart_of_accounts


def _run(payload: dict[str, Any], settings: Settings | None = None) -> Any:
    facility = FacilityInputDTO.model_validate(payload)
    use_case = AnalyzeFacilityUseCase(settings=settings or Settings())
    return use_case.execute(AnalyzeFacilityRequest(facility=facility))


def test_full_pipeline_for_skilled_nursing_facility(facility_payload: dict[str, Any]) -> None:
    result = _run(facility_payload)

    assert result.asset_type is AssetType.SNF
    assert result.warnings == ()
    assert len(result.mappings) == 9
    assert all(m.match_type is not MatchType.NONE for m in result.mappings)

    normalized = result.financials.normalized
    # 5% management fee and 3.2% agency are within tolerance; only reserves apply.
    assert [a.category for a in result.financials.adjustments] == [
        AdjustmentCategory.CAPITAL_RESERVES
    ]
    assert normalized.total_net_revenue == Decimal("8000000")
    assert normalized.metrics.noi == Decimal("2910000")

    assert result.benchmark is not None
    assert result.benchmark.asset_type is AssetType.SNF

    assert result.valuation.noi == normalized.metrics.noi
    assert result.valuation.external.value_base == Decimal("36375000")
    assert result.valuation.external.price_per_bed == Decimal("363750.00")

    assert result.capex is not None
    assert result.capex.total == Decimal("1200000")

    assert result.reimbursement is not None
    assert result.reimbursement.pdpm_optimization == PriceRange(
        Decimal("200000"), Decimal("300000")
    )
    assert result.reimbursement.total == PriceRange(Decimal("355000"), Decimal("660000"))


def test_settings_drive_normalization(facility_payload: dict[str, Any]) -> None:
    settings = Settings.model_validate({"ADD_RESERVES": False})

    result = _run(facility_payload, settings)

    assert result.financials.adjustments == ()
    assert result.financials.normalized.metrics.noi == Decimal("3150000")


def test_hospice_skips_benchmarking_with_warning(facility_payload: dict[str, Any]) -> None:
    facility_payload["assetType"] = "hospice"

    result = _run(facility_payload)

    assert result.asset_type is AssetType.HOSPICE
    assert result.benchmark is None
    assert result.reimbursement is None
    assert "No benchmark set for asset type HOSPICE; skipped" in result.warnings


def test_capex_is_skipped_without_building_age(facility_payload: dict[str, Any]) -> None:
    del facility_payload["buildingAge"]

    assert _run(facility_payload).capex is None


def test_coerced_lines_are_capped_and_warned(facility_payload: dict[str, Any]) -> None:
    facility_payload["expenseLines"][0]["amount"] = "illegible"

    result = _run(facility_payload)

    wages = next(m for m in result.mappings if m.label == "Nursing Wages")
    assert wages.confidence == COERCED_LINE_CONFIDENCE
    assert wages.amount == Decimal("0")
    assert "expense_lines[0] 'Nursing Wages': malformed amount coerced to 0" in result.warnings


def test_unmapped_lines_add_warning(facility_payload: dict[str, Any]) -> None:
    facility_payload["revenueLines"].append({"label": "Zzqx", "amount": 10})

    result = _run(facility_payload)

    assert result.financials.unmapped_labels == ("Zzqx",)
    assert "1 line(s) unmapped and rolled into other_*" in result.warnings


def test_missing_or_unknown_asset_type_raises(facility_payload: dict[str, Any]) -> None:
    facility_payload["assetType"] = None
    with pytest.raises(MissingFieldError):
        _run(facility_payload)

    facility_payload["assetType"] = "MOB"
    with pytest.raises(UnknownAssetTypeError):
        _run(facility_payload)


def test_execute_logs_start_and_done(
    facility_payload: dict[str, Any], caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.INFO):
        _run(facility_payload)

    messages = [r.getMessage() for r in caplog.records]
    assert "underwriting.analyze_facility.start" in messages
    assert "underwriting.analyze_facility.done" in messages
    done = next(r for r in caplog.records if r.getMessage().endswith(".done"))
    assert done.__dict__["facility_name"] == "Oak Manor"


def test_medicare_revenue_sums_part_a_and_part_b(facility_payload: dict[str, Any]) -> None:
    facility_payload["revenueLines"].append({"label": "Medicare Part B", "amount": 250000})

    result = _run(facility_payload)

    assert medicare_revenue(
        result.financials.normalized, default_chart_of_accounts()
    ) == Decimal("2250000")
