# src/carefin_core/infrastructure/logging/logger.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Structured JSON logging for underwriting runs.

An idempotent root configurator plus a per-module logger factory. Every line
is a single JSON object so analysis runs can be grepped and ingested by log
pipelines.

Features:
    * Stable keys: ``ts``, ``level``, ``logger``, ``message``.
    * Optional ``run_id`` from the record attribute or the ``RUN_ID`` env var.
    * Fields passed through ``extra=`` (and an ``extra`` dict attribute)
      merged into the top-level object.
    * Decimals and other non-JSON values rendered with ``str``.

Typical usage:
    configure_root_logging()
    log = get_json_logger(__name__)
"""

from __future__ import annotations

import json
import logging
import os
from datetime import UTC, datetime
from typing import Any

__all__ = ["configure_root_logging", "get_json_logger"]

_RUN_ID_ENV_KEY = "RUN_ID"

# Attributes every LogRecord carries; anything else arrived via ``extra=``.
_RESERVED_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys() | {"message", "asctime", "run_id"}
)


class _JsonFormatter(logging.Formatter):
    """Render log records as compact JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as a JSON object.

        Args:
            record: Logging record.

        Returns:
            str: JSON-encoded log line.
        """
        payload: dict[str, Any] = {
            "ts": datetime.now(tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        run_id = getattr(record, "run_id", None) or os.getenv(_RUN_ID_ENV_KEY)
        if run_id:
            payload["run_id"] = str(run_id)

        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            if exc_type is not None:
                payload["exc_type"] = exc_type.__name__
            if exc_value is not None:
                payload["exc_message"] = str(exc_value)

        for key, value in vars(record).items():
            if key not in _RESERVED_ATTRS and key != "extra":
                payload[key] = value

        extra = getattr(record, "extra", None)
        if isinstance(extra, dict):
            payload.update(extra)

        return json.dumps(payload, separators=(",", ":"), ensure_ascii=False, default=str)


def configure_root_logging(level: str | int | None = None) -> None:
    """Attach the JSON handler to the root logger (idempotent).

    Args:
        level: Logging level or level name. If ``None``, use env ``LOG_LEVEL``
            or ``INFO``.
    """
    root = logging.getLogger()

    env_level = os.getenv("LOG_LEVEL")
    resolved: int | str = (
        level if level is not None else (env_level.upper() if env_level else "INFO")
    )
    root.setLevel(resolved)

    if any(isinstance(h.formatter, _JsonFormatter) for h in root.handlers):
        return

    handler = logging.StreamHandler()
    handler.setFormatter(_JsonFormatter())
    root.addHandler(handler)


def get_json_logger(name: str) -> logging.Logger:
    """Return a module logger that propagates to the JSON root handler.

    Does not configure the root logger; call :func:`configure_root_logging`
    once at startup.

    Args:
        name: Logger name, typically ``__name__`` of the caller.

    Returns:
        logging.Logger: Module logger.
    """
    logger = logging.getLogger(name)
    logger.propagate = True
    return logger
