# src/carefin_core/domain/enums/assets.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Asset and market classification enums.

Purpose:
    Define asset types, geographic regions, and market tiers used by the
    benchmark and valuation services.

Layer:
    domain/enums
"""

from __future__ import annotations

from enum import Enum

from carefin_core.domain.exceptions.underwriting import MissingFieldError, UnknownAssetTypeError


class AssetType(str, Enum):
    """Healthcare real-estate asset classes."""

    SNF = "SNF"  # skilled nursing
    ALF = "ALF"  # assisted living
    ILF = "ILF"  # independent living
    HOSPICE = "HOSPICE"

    @classmethod
    def parse(cls, value: str | AssetType | None, *, field: str = "asset_type") -> AssetType:
        """Resolve a raw asset type string (case-insensitive).

        Raises:
            MissingFieldError: If ``value`` is ``None`` or blank.
            UnknownAssetTypeError: If ``value`` names no supported asset type.
        """
        if isinstance(value, cls):
            return value
        if value is None or not str(value).strip():
            raise MissingFieldError(field)
        key = str(value).strip().upper()
        try:
            return cls(key)
        except ValueError as exc:
            raise UnknownAssetTypeError(str(value), field=field) from exc


class Region(str, Enum):
    """Geographic regions used for cap-rate lookup."""

    NORTHEAST = "northeast"
    SOUTHEAST = "southeast"
    MIDWEST = "midwest"
    SOUTHWEST = "southwest"
    WEST_COAST = "west_coast"
    NORTHWEST = "northwest"
    NATIONAL = "national"


class MarketTier(str, Enum):
    """Coarse investment tier of a state market."""

    PREMIUM = "premium"
    GROWTH = "growth"
    VALUE = "value"


class ValuationViewKind(str, Enum):
    """The two parallel valuation perspectives."""

    EXTERNAL = "external"
    INTERNAL = "internal"


__all__ = ["AssetType", "Region", "MarketTier", "ValuationViewKind"]
