# src/carefin_core/domain/enums/accounts.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Chart-of-accounts enums.

Purpose:
    Define the closed vocabularies used by canonical accounts and by the
    mappings produced when raw source labels are matched to them.

Layer:
    domain/enums

Notes:
    - Pure domain types:
        * No logging.
        * No I/O or transport concerns.
"""

from __future__ import annotations

from enum import Enum


class AccountType(str, Enum):
    """Top-level ledger side of a canonical account."""

    REVENUE = "revenue"
    EXPENSE = "expense"


class AccountSubCategory(str, Enum):
    """Grouping of accounts below the revenue/expense split."""

    PATIENT_REVENUE = "patient_revenue"
    ANCILLARY_REVENUE = "ancillary_revenue"
    OTHER_REVENUE = "other_revenue"
    LABOR = "labor"
    DEPARTMENTAL = "departmental"
    SUPPLIES = "supplies"
    OCCUPANCY = "occupancy"
    INSURANCE = "insurance"
    TAXES = "taxes"
    ADMINISTRATIVE = "administrative"
    NON_OPERATING = "non_operating"
    OTHER = "other"


class NormalBalance(str, Enum):
    """Side of the ledger on which an account normally carries its balance."""

    DEBIT = "debit"
    CREDIT = "credit"


class MatchType(str, Enum):
    """How a raw label was resolved to a canonical account."""

    EXACT = "exact"
    ALIAS = "alias"
    FUZZY = "fuzzy"
    MANUAL = "manual"
    NONE = "none"


class LineItemCategory(str, Enum):
    """Closed set of buckets a reviewed source line item can land in.

    ``STATISTIC`` and ``OTHER`` are carried for extracted rows that are neither
    money nor census (e.g. ratios printed on a summary page).
    """

    REVENUE = "revenue"
    EXPENSE = "expense"
    CENSUS = "census"
    STATISTIC = "statistic"
    OTHER = "other"
    SKIPPED = "skipped"


class QuickCategory(str, Enum):
    """Buckets offered for one-click categorization during mapping review."""

    REVENUE = "revenue"
    EXPENSE = "expense"
    CENSUS = "census"
    SKIPPED = "skipped"


__all__ = [
    "AccountType",
    "AccountSubCategory",
    "NormalBalance",
    "MatchType",
    "LineItemCategory",
    "QuickCategory",
]
