# src/carefin_core/application/schemas/dto/base.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Base DTO (Application Layer).

Purpose:
    Canonical Pydantic base for all application-layer DTOs. Transport-agnostic.

Layer: application/schemas/dto
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

from pydantic import BaseModel, ConfigDict


class BaseDTO(BaseModel):
    """Base class for application-layer DTOs.

    Notes:
        - Strict fields (`extra='forbid'`).
        - Inputs may use field names or aliases.
    """

    model_config = ConfigDict(
        extra="forbid",
        populate_by_name=True,
        str_strip_whitespace=True,
    )


def coerce_number(value: object, *, allow_negative: bool = True) -> tuple[Decimal, bool]:
    """Parse a loosely formatted number, falling back to zero.

    Accepts ints, floats, Decimals and strings with ``$``, ``,`` or
    surrounding parentheses (accounting negatives).

    Args:
        value: Raw value from the boundary.
        allow_negative: When false, negative values are coerced to zero.

    Returns:
        The parsed value and whether it was coerced.
    """
    if value is None or isinstance(value, bool):
        return Decimal("0"), True
    try:
        if isinstance(value, str):
            text = value.strip().replace("$", "").replace(",", "")
            negative = text.startswith("(") and text.endswith(")")
            parsed = Decimal(text.strip("()"))
            if negative:
                parsed = -parsed
        elif isinstance(value, float):
            parsed = Decimal(repr(value))
        else:
            parsed = Decimal(value)  # type: ignore[arg-type]
    except (InvalidOperation, TypeError, ValueError):
        return Decimal("0"), True

    if not parsed.is_finite():
        return Decimal("0"), True
    if parsed < 0 and not allow_negative:
        return Decimal("0"), True
    return parsed, False


__all__ = ["BaseDTO", "coerce_number"]
