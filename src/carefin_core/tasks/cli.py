# src/carefin_core/tasks/cli.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Carefin CLI: operator commands (match, analyze, reconcile).

Commands:
    match LABEL        Map one raw label to the chart of accounts.
    analyze PATH       Run the full pipeline for one facility JSON payload.
    reconcile PATH     Reconcile facility records extracted from several documents.

Environment:
    LOG_LEVEL                       Root log level (default INFO).
    RUN_ID                          Optional run identifier stamped on every log line.
    NORMALIZE_* / TARGET_* / ...    Normalization options (see config.settings).
"""

from __future__ import annotations

import json
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import typer
from pydantic import ValidationError

from carefin_core.adapters.presenters.analysis_presenter import (
    present_facility_analysis,
    present_reconciliation,
)
from carefin_core.application.schemas.dto.facility import FacilityInputDTO
from carefin_core.application.schemas.dto.reconciliation import ReconcileRequestDTO
from carefin_core.application.use_cases.underwriting.analyze_facility import (
    AnalyzeFacilityRequest,
    AnalyzeFacilityUseCase,
)
from carefin_core.application.use_cases.underwriting.reconcile_documents import (
    ReconcileDocumentsRequest,
    ReconcileDocumentsUseCase,
)
from carefin_core.config.settings import get_settings
from carefin_core.domain.enums.accounts import AccountType
from carefin_core.domain.exceptions.base import DomainError
from carefin_core.domain.services.account_matcher import AccountMatcher
from carefin_core.infrastructure.logging.logger import configure_root_logging, get_json_logger

configure_root_logging()
log = get_json_logger(__name__)

app = typer.Typer(add_completion=False, no_args_is_help=True)

EXIT_DOMAIN_ERROR = 4
EXIT_INVALID_INPUT = 3


def _load_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        log.error("cli.invalid_json", extra={"extra": {"path": str(path), "error": str(exc)}})
        typer.echo(f"error: {path} is not valid JSON: {exc}", err=True)
        raise typer.Exit(code=EXIT_INVALID_INPUT) from exc


def _fail_domain(command: str, exc: DomainError) -> typer.Exit:
    log.error(
        f"{command}.failed",
        extra={"extra": {"code": exc.code, "error": exc.message, "details": exc.details}},
    )
    typer.echo(f"error: {exc.code}: {exc.message}", err=True)
    return typer.Exit(code=EXIT_DOMAIN_ERROR)


def _fail_validation(command: str, exc: ValidationError) -> typer.Exit:
    log.error(f"{command}.invalid_input", extra={"extra": {"errors": exc.error_count()}})
    typer.echo(f"error: invalid input: {exc}", err=True)
    return typer.Exit(code=EXIT_INVALID_INPUT)


def _parse_resolution(raw: str) -> tuple[str, Decimal]:
    conflict_id, sep, value = raw.rpartition("=")
    if not sep or not conflict_id:
        raise typer.BadParameter(f"expected CONFLICT_ID=VALUE, got {raw!r}")
    try:
        parsed = Decimal(value)
    except InvalidOperation as exc:
        raise typer.BadParameter(f"not a number: {value!r}") from exc
    if not parsed.is_finite():
        raise typer.BadParameter(f"not a finite number: {value!r}")
    return conflict_id, parsed


@app.command("match")
def match_label(
    label: str = typer.Argument(..., help="Raw line-item label."),  # noqa: B008
    account_type: AccountType | None = typer.Option(  # noqa: B008
        None, "--type", help="Restrict matching to revenue or expense accounts."
    ),
) -> None:
    """Map one raw label to the chart of accounts and print the mapping as JSON."""
    matcher = AccountMatcher(config=get_settings().matcher_config())
    mapping = matcher.match(label, account_type=account_type)
    payload = {
        "label": mapping.label,
        "account_code": mapping.account.code if mapping.account else None,
        "account_name": mapping.account.name if mapping.account else None,
        "match_type": mapping.match_type.value,
        "confidence": format(mapping.confidence, "f"),
    }
    log.info("match.done", extra={"extra": payload})
    typer.echo(json.dumps(payload, indent=2))


@app.command("analyze")
def analyze(
    path: Path = typer.Argument(  # noqa: B008
        ..., exists=True, dir_okay=False, readable=True, help="Facility JSON payload."
    ),
) -> None:
    """Match, normalize, benchmark and value one facility; print the result as JSON."""
    raw = _load_json(path)
    try:
        facility = FacilityInputDTO.model_validate(raw)
        result = AnalyzeFacilityUseCase(settings=get_settings()).execute(
            AnalyzeFacilityRequest(facility=facility)
        )
    except ValidationError as exc:
        raise _fail_validation("analyze", exc) from exc
    except DomainError as exc:
        raise _fail_domain("analyze", exc) from exc

    dto = present_facility_analysis(result)
    log.info(
        "analyze.done",
        extra={"extra": {"facility_name": dto.facility_name, "warnings": len(dto.warnings)}},
    )
    typer.echo(dto.model_dump_json(indent=2))


@app.command("reconcile")
def reconcile(
    path: Path = typer.Argument(  # noqa: B008
        ...,
        exists=True,
        dir_okay=False,
        readable=True,
        help="JSON list of facility records, or an object with a 'records' list.",
    ),
    resolve: list[str] = typer.Option(  # noqa: B008
        [], "--resolve", help="Manually resolve a conflict: CONFLICT_ID=VALUE (repeatable)."
    ),
) -> None:
    """Reconcile facility records across documents; print conflicts and score as JSON."""
    raw = _load_json(path)
    resolutions = [_parse_resolution(r) for r in resolve]
    try:
        request = ReconcileRequestDTO.model_validate(
            {"records": raw} if isinstance(raw, list) else raw
        )
        use_case = ReconcileDocumentsUseCase(settings=get_settings())
        result = use_case.execute(ReconcileDocumentsRequest(records=request.records))
        for conflict_id, value in resolutions:
            result = use_case.resolve(result, conflict_id, value)
    except ValidationError as exc:
        raise _fail_validation("reconcile", exc) from exc
    except DomainError as exc:
        raise _fail_domain("reconcile", exc) from exc

    dto = present_reconciliation(result)
    log.info(
        "reconcile.done",
        extra={
            "extra": {
                "conflicts": len(dto.conflicts),
                "pending": dto.pending_count,
                "validation_score": dto.validation_score,
            }
        },
    )
    typer.echo(dto.model_dump_json(indent=2))


if __name__ == "__main__":  # pragma: no cover
    app()
