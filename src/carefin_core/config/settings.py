# src/carefin_core/config/settings.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Carefin Configuration (Pydantic Settings, v2)

Summary:
    Typed, validated configuration for the underwriting core. Only the
    application and task layers read it; domain services receive plain option
    objects built from it (see :meth:`Settings.normalization_options`).

Design:
    - Pydantic v2 BaseSettings with `extra='forbid'` to catch unknown env.
    - Explicit field declarations bound to env vars via `validation_alias`.
    - Percent fields constrained to [0, 1].
    - Singleton accessor `get_settings()` with LRU cache.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from enum import Enum
from functools import lru_cache
from typing import Literal

from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from carefin_core.domain.services.account_matcher import AccountMatcherConfig
from carefin_core.domain.services.cross_document_reconciler import ReconcilerConfig
from carefin_core.domain.services.financial_normalizer import NormalizationOptions

logger = logging.getLogger(__name__)

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Environment(str, Enum):
    """Logical deployment environment."""

    DEVELOPMENT = "development"
    TEST = "test"
    CI = "ci"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """Typed configuration for the underwriting core."""

    # ---------------------------
    # Core environment
    # ---------------------------
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Logical deployment environment.",
        validation_alias="ENVIRONMENT",
    )
    log_level: LogLevel = Field(
        default="INFO",
        description="Root log level for the JSON logger.",
        validation_alias="LOG_LEVEL",
    )

    # ---------------------------
    # Normalization
    # ---------------------------
    normalize_management_fee: bool = Field(
        default=True,
        description="Synthesize or normalize the management fee line.",
        validation_alias="NORMALIZE_MANAGEMENT_FEE",
    )
    target_management_fee_percent: Decimal = Field(
        default=Decimal("0.05"),
        ge=0,
        le=1,
        description="Market management fee as a fraction of net revenue.",
        validation_alias="TARGET_MANAGEMENT_FEE_PERCENT",
    )
    normalize_agency: bool = Field(
        default=True,
        description="Shift excess agency nursing into regular wages.",
        validation_alias="NORMALIZE_AGENCY",
    )
    target_agency_percent: Decimal = Field(
        default=Decimal("0.03"),
        ge=0,
        le=1,
        description="Target agency share of total nursing labor.",
        validation_alias="TARGET_AGENCY_PERCENT",
    )
    add_reserves: bool = Field(
        default=True,
        description="Add a capital reserve expense line.",
        validation_alias="ADD_RESERVES",
    )
    reserve_percent: Decimal = Field(
        default=Decimal("0.03"),
        ge=0,
        le=1,
        description="Capital reserve as a fraction of net revenue.",
        validation_alias="RESERVE_PERCENT",
    )
    annualize: bool = Field(
        default=True,
        description="Scale partial-year statements to twelve months.",
        validation_alias="ANNUALIZE",
    )

    # ---------------------------
    # Matching & reconciliation
    # ---------------------------
    match_confidence_threshold: Decimal = Field(
        default=Decimal("0.6"),
        ge=0,
        le=1,
        description="Minimum fuzzy score for the account matcher to accept a match.",
        validation_alias="MATCH_CONFIDENCE_THRESHOLD",
    )
    auto_resolve_threshold: Decimal = Field(
        default=Decimal("0.03"),
        ge=0,
        le=1,
        description="Variance at or below which document conflicts auto-resolve.",
        validation_alias="AUTO_RESOLVE_THRESHOLD",
    )
    conflict_epsilon: Decimal = Field(
        default=Decimal("0.001"),
        ge=0,
        le=1,
        description="Variance at or below which two reported values are equal.",
        validation_alias="CONFLICT_EPSILON",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="forbid",
        case_sensitive=False,
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: object) -> object:
        return value.strip().upper() if isinstance(value, str) else value

    @model_validator(mode="after")
    def _validate_thresholds(self) -> Settings:
        """Ensure the auto-resolve threshold is not below the noise floor.

        Raises:
            ValueError: If ``auto_resolve_threshold < conflict_epsilon``.
        """
        if self.auto_resolve_threshold < self.conflict_epsilon:
            raise ValueError("AUTO_RESOLVE_THRESHOLD must be >= CONFLICT_EPSILON.")
        return self

    # --------------------------------------------------------------------- #
    # Domain option builders
    # --------------------------------------------------------------------- #
    def normalization_options(self) -> NormalizationOptions:
        """Return the normalizer options described by these settings."""
        return NormalizationOptions(
            normalize_management_fee=self.normalize_management_fee,
            target_management_fee_percent=self.target_management_fee_percent,
            normalize_agency=self.normalize_agency,
            target_agency_percent=self.target_agency_percent,
            add_reserves=self.add_reserves,
            reserve_percent=self.reserve_percent,
            annualize=self.annualize,
        )

    def matcher_config(self) -> AccountMatcherConfig:
        """Return the account matcher configuration described by these settings."""
        return AccountMatcherConfig(min_fuzzy_confidence=self.match_confidence_threshold)

    def reconciler_config(self) -> ReconcilerConfig:
        """Return the reconciler thresholds described by these settings."""
        return ReconcilerConfig(
            auto_resolve_threshold=self.auto_resolve_threshold,
            conflict_epsilon=self.conflict_epsilon,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached singleton `Settings` instance.

    Returns:
        Settings: Validated settings.

    Raises:
        RuntimeError: If configuration is invalid.
    """
    try:
        settings = Settings()
        logger.info(
            "Settings initialized",
            extra={
                "environment": settings.environment.value,
                "log_level": settings.log_level,
                "normalization": {
                    "management_fee": settings.normalize_management_fee,
                    "agency": settings.normalize_agency,
                    "reserves": settings.add_reserves,
                    "annualize": settings.annualize,
                },
            },
        )
        return settings
    except ValidationError as exc:
        logger.exception("Invalid configuration")
        raise RuntimeError(f"Invalid configuration: {exc}") from exc
