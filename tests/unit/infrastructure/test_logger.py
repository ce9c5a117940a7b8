# tests/unit/infrastructure/test_logger.py
from __future__ import annotations

import json
import logging
import sys
from decimal import Decimal
from typing import Any

import pytest

from carefin_core.infrastructure.logging.logger import (
    _JsonFormatter,  # internal but importable
    configure_root_logging,
    get_json_logger,
)


def _capture_log(record_msg: str, level: int = logging.INFO, **extra: Any) -> dict[str, Any]:
    """Build a record, attach ``extra`` attributes and return the parsed JSON payload."""
    logger = logging.getLogger("test.logger")
    record = logger.makeRecord(
        name=logger.name,
        level=level,
        fn="test_logger",
        lno=123,
        msg=record_msg,
        args=(),
        exc_info=None,
    )
    for k, v in extra.items():
        setattr(record, k, v)
    return json.loads(_JsonFormatter().format(record))


def test_configure_root_logging_installs_json_handler(monkeypatch: pytest.MonkeyPatch) -> None:
    """Root logger should get one JSON handler and respect LOG_LEVEL."""
    monkeypatch.setenv("LOG_LEVEL", "debug")
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    root.handlers.clear()
    try:
        configure_root_logging()
        configure_root_logging()

        json_handlers = [h for h in root.handlers if isinstance(h.formatter, _JsonFormatter)]
        assert root.level == logging.DEBUG
        assert len(json_handlers) == 1
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)


def test_json_formatter_basic_fields() -> None:
    payload = _capture_log("hello-world")

    assert payload["message"] == "hello-world"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "test.logger"
    assert "ts" in payload


def test_json_formatter_merges_extra_fields_and_renders_decimals() -> None:
    payload = _capture_log(
        "underwriting.analyze_facility.done",
        facility_name="Oak Manor",
        normalized_noi=Decimal("2910000.00"),
        extra={"warnings": 2},
    )

    assert payload["facility_name"] == "Oak Manor"
    assert payload["normalized_noi"] == "2910000.00"
    assert payload["warnings"] == 2
    assert "extra" not in payload


def test_json_formatter_includes_run_id_from_record_and_env(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    payload = _capture_log("with-record-id", run_id="run-123")
    assert payload["run_id"] == "run-123"

    monkeypatch.setenv("RUN_ID", "env-run")
    payload = _capture_log("with-env-id")
    assert payload["run_id"] == "env-run"


def test_json_formatter_includes_exception_info() -> None:
    logger = logging.getLogger("test.logger.exc")
    try:
        raise ValueError("boom")
    except ValueError:
        record = logger.makeRecord(
            logger.name, logging.ERROR, "test_logger", 1, "failure", (), sys.exc_info()
        )

    payload = json.loads(_JsonFormatter().format(record))
    assert payload["level"] == "ERROR"
    assert payload["exc_type"] == "ValueError"
    assert payload["exc_message"] == "boom"


def test_get_json_logger_propagates() -> None:
    logger = get_json_logger("carefin_core.test")

    assert logger.name == "carefin_core.test"
    assert logger.propagate is True
