# tests/unit/adapters/presenters/test_analysis_presenter.py
from __future__ import annotations

import json
from decimal import Decimal
from typing import Any

from carefin_core.adapters.presenters.analysis_presenter import (
    present_facility_analysis,
    present_reconciliation,
)
from carefin_core.application.schemas.dto.facility import FacilityInputDTO
from carefin_core.application.use_cases.underwriting.analyze_facility import (
    AnalyzeFacilityRequest,
    AnalyzeFacilityUseCase,
)
from carefin_core.config.settings import Settings
from carefin_core.domain.entities.conflict import FacilityRecord
from carefin_core.domain.services.cross_document_reconciler import CrossDocumentReconciler


def test_present_facility_analysis_renders_strings(facility_payload: dict[str, Any]) -> None:
    facility = FacilityInputDTO.model_validate(facility_payload)
    result = AnalyzeFacilityUseCase(settings=Settings()).execute(
        AnalyzeFacilityRequest(facility=facility)
    )

    dto = present_facility_analysis(result)
    payload = json.loads(dto.model_dump_json())

    assert payload["facility_name"] == "Oak Manor"
    assert payload["asset_type"] == "SNF"
    assert payload["beds"] == 100
    assert Decimal(payload["normalized"]["noi"]) == Decimal("2910000")
    assert payload["external_valuation"]["value_base"] == "36375000.00"
    assert payload["external_valuation"]["price_per_bed"] == "363750.00"
    assert payload["adjustments"][0]["category"] == "capital_reserves"
    assert payload["mappings"][0]["account_code"] == "4010"
    assert payload["capex"]["total"] == "1200000.00"
    assert payload["reimbursement"]["total_high"] == "660000.00"
    assert payload["warnings"] == []


def test_present_reconciliation_renders_conflicts() -> None:
    result = CrossDocumentReconciler().reconcile(
        [
            FacilityRecord(facility_name="Oak Manor", source="a.pdf", beds=100),
            FacilityRecord(facility_name="Oak Manor", source="b.pdf", beds=104),
        ]
    )

    payload = json.loads(present_reconciliation(result).model_dump_json())

    (conflict,) = payload["conflicts"]
    assert conflict["conflict_id"] == "oak manor:beds:1"
    assert conflict["first"] == {"source": "a.pdf", "value": "100"}
    assert conflict["variance"] == "0.038462"
    assert conflict["state"] == "pending"
    assert conflict["resolved_value"] is None
    assert payload["pending_count"] == 1
    assert payload["validation_score"] == 0
    assert payload["documents"][0]["kind"] == "reference"
    assert Decimal(conflict["second"]["value"]) == Decimal("104")
