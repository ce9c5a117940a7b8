# src/carefin_core/domain/reference/chart_of_accounts.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Canonical chart of accounts for healthcare operators.

Purpose:
    Define the fixed, ordered chart of accounts that raw source labels are
    matched against, plus the immutable ``ChartOfAccounts`` container used to
    inject it into the domain services.

Layer:
    domain/reference

Notes:
    - Pure domain module:
        * No logging.
        * No I/O.
    - Iteration order is significant: the account matcher breaks fuzzy ties
      in favour of the first account in chart order.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from functools import lru_cache
from typing import Final

from carefin_core.domain.entities.account import Account
from carefin_core.domain.enums.accounts import AccountSubCategory, AccountType
from carefin_core.domain.exceptions.underwriting import ReferenceDataError

_REV = AccountType.REVENUE
_EXP = AccountType.EXPENSE
_S = AccountSubCategory

# Statement categories that count as labor expense.
LABOR_CATEGORIES: Final[frozenset[str]] = frozenset(
    {
        "nursing_salaries",
        "nursing_wages",
        "agency_nursing",
        "other_salaries",
        "employee_benefits",
        "payroll_taxes",
    }
)

OTHER_REVENUE_CATEGORY: Final[str] = "other_revenue"
OTHER_EXPENSE_CATEGORY: Final[str] = "other_expense"

REVENUE_ACCOUNTS: Final[tuple[Account, ...]] = (
    Account(
        code="4010",
        name="Medicare Part A Revenue",
        account_type=_REV,
        category="medicare_part_a",
        sub_category=_S.PATIENT_REVENUE,
        description="Skilled nursing facility revenue from Medicare Part A",
        aliases=(
            "Medicare A",
            "Medicare Part A",
            "Skilled Nursing Revenue",
            "SNF Revenue",
            "Part A Revenue",
        ),
        benchmark_category="medicare",
    ),
    Account(
        code="4020",
        name="Medicare Part B Revenue",
        account_type=_REV,
        category="medicare_part_b",
        sub_category=_S.PATIENT_REVENUE,
        description="Therapy and ancillary revenue from Medicare Part B",
        aliases=(
            "Medicare B",
            "Medicare Part B",
            "Therapy Revenue",
            "Part B Revenue",
            "Outpatient Therapy",
        ),
        benchmark_category="medicare",
    ),
    Account(
        code="4030",
        name="Medicare Advantage Revenue",
        account_type=_REV,
        category="medicare_advantage",
        sub_category=_S.PATIENT_REVENUE,
        description="Revenue from Medicare Advantage (managed Medicare) plans",
        aliases=(
            "Medicare Advantage",
            "MA Revenue",
            "Managed Medicare",
            "Medicare HMO",
            "Medicare PPO",
        ),
        benchmark_category="managed_medicare",
    ),
    Account(
        code="4110",
        name="Medicaid Revenue",
        account_type=_REV,
        category="medicaid",
        sub_category=_S.PATIENT_REVENUE,
        description="Revenue from state Medicaid programs",
        aliases=("Medicaid", "Medicaid Nursing", "State Medicaid", "Title XIX"),
        benchmark_category="medicaid",
    ),
    Account(
        code="4120",
        name="Medicaid Quality Add-on",
        account_type=_REV,
        category="medicaid_quality_addon",
        sub_category=_S.PATIENT_REVENUE,
        description="Medicaid quality incentive payments",
        aliases=("Quality Add-on", "Medicaid Quality", "Quality Incentive", "QIPP"),
        benchmark_category="medicaid",
    ),
    Account(
        code="4210",
        name="Private Pay Revenue",
        account_type=_REV,
        category="private_pay",
        sub_category=_S.PATIENT_REVENUE,
        description="Revenue from private pay/self-pay residents",
        aliases=("Private Pay", "Self Pay", "Private", "Cash Pay", "Out of Pocket"),
        benchmark_category="private_pay",
    ),
    Account(
        code="4310",
        name="Managed Care Revenue",
        account_type=_REV,
        category="managed_care",
        sub_category=_S.PATIENT_REVENUE,
        description="Revenue from commercial insurance and managed care plans",
        aliases=("Managed Care", "Insurance", "Commercial Insurance", "HMO", "PPO"),
        benchmark_category="managed_care",
    ),
    Account(
        code="4410",
        name="VA Contract Revenue",
        account_type=_REV,
        category="va_contract",
        sub_category=_S.PATIENT_REVENUE,
        description="Revenue from Veterans Affairs contracts",
        aliases=("VA", "Veterans", "VA Contract", "Veterans Affairs"),
        benchmark_category="government",
    ),
    Account(
        code="4510",
        name="Hospice Revenue",
        account_type=_REV,
        category="hospice",
        sub_category=_S.PATIENT_REVENUE,
        description="Room and board revenue for hospice patients",
        aliases=("Hospice", "Hospice R&B", "Hospice Room and Board"),
        benchmark_category="hospice",
    ),
    Account(
        code="4520",
        name="Respite Care Revenue",
        account_type=_REV,
        category="respite",
        sub_category=_S.PATIENT_REVENUE,
        description="Short-term respite care revenue",
        aliases=("Respite", "Respite Care", "Short Stay"),
        benchmark_category="private_pay",
    ),
    Account(
        code="4610",
        name="Therapy Ancillary Revenue",
        account_type=_REV,
        category="therapy_ancillary",
        sub_category=_S.ANCILLARY_REVENUE,
        description="Revenue from therapy services beyond Part A coverage",
        aliases=("Therapy Ancillary", "PT/OT/ST Revenue", "Rehab Revenue"),
        benchmark_category="ancillary",
    ),
    Account(
        code="4620",
        name="Pharmacy Ancillary Revenue",
        account_type=_REV,
        category="pharmacy_ancillary",
        sub_category=_S.ANCILLARY_REVENUE,
        description="Revenue from pharmacy services",
        aliases=("Pharmacy", "Pharmacy Revenue", "Drug Revenue"),
        benchmark_category="ancillary",
    ),
    Account(
        code="4690",
        name="Other Ancillary Revenue",
        account_type=_REV,
        category="other_ancillary",
        sub_category=_S.ANCILLARY_REVENUE,
        description="Other ancillary service revenue",
        aliases=("Other Ancillary", "Lab", "X-Ray", "Supplies"),
        benchmark_category="ancillary",
    ),
    Account(
        code="4910",
        name="Other Operating Revenue",
        account_type=_REV,
        category=OTHER_REVENUE_CATEGORY,
        sub_category=_S.OTHER_REVENUE,
        description="Other operating revenue not classified elsewhere",
        aliases=("Other Revenue", "Miscellaneous Revenue", "Other Operating"),
        benchmark_category="other",
    ),
)

EXPENSE_ACCOUNTS: Final[tuple[Account, ...]] = (
    # ---- labor ---------------------------------------------------------- #
    Account(
        code="5010",
        name="Nursing Salaries",
        account_type=_EXP,
        category="nursing_salaries",
        sub_category=_S.LABOR,
        description="Salaries for nursing management and salaried nursing staff",
        aliases=("Nursing Salaries", "RN Salaries", "DON Salary", "Nursing Management"),
        benchmark_category="nursing_labor",
    ),
    Account(
        code="5020",
        name="Nursing Wages",
        account_type=_EXP,
        category="nursing_wages",
        sub_category=_S.LABOR,
        description="Hourly wages for nursing staff (RN, LPN, CNA)",
        aliases=("Nursing Wages", "RN Wages", "LPN Wages", "CNA Wages", "Aide Wages"),
        benchmark_category="nursing_labor",
    ),
    Account(
        code="5030",
        name="Agency Nursing",
        account_type=_EXP,
        category="agency_nursing",
        sub_category=_S.LABOR,
        description="Contract/agency nursing staff costs",
        aliases=("Agency", "Contract Labor", "Agency Nursing", "Temp Staff", "Registry"),
        benchmark_category="agency",
    ),
    Account(
        code="5110",
        name="Other Salaries & Wages",
        account_type=_EXP,
        category="other_salaries",
        sub_category=_S.LABOR,
        description="Non-nursing salaries and wages",
        aliases=("Other Salaries", "Admin Salaries", "G&A Salaries", "Other Wages"),
        benchmark_category="other_labor",
    ),
    Account(
        code="5120",
        name="Employee Benefits",
        account_type=_EXP,
        category="employee_benefits",
        sub_category=_S.LABOR,
        description="Employee health insurance, 401k, and other benefits",
        aliases=("Benefits", "Employee Benefits", "Health Insurance", "Fringe Benefits"),
        benchmark_category="benefits",
    ),
    Account(
        code="5130",
        name="Payroll Taxes",
        account_type=_EXP,
        category="payroll_taxes",
        sub_category=_S.LABOR,
        description="Employer payroll taxes (FICA, FUTA, SUTA)",
        aliases=("Payroll Taxes", "Employer Taxes", "FICA", "Payroll Tax Expense"),
        benchmark_category="payroll_taxes",
    ),
    # ---- departmental --------------------------------------------------- #
    Account(
        code="5210",
        name="Dietary",
        account_type=_EXP,
        category="dietary",
        sub_category=_S.DEPARTMENTAL,
        description="Food and dietary department costs",
        aliases=("Dietary", "Food", "Food Service", "Raw Food", "Kitchen"),
        benchmark_category="dietary",
    ),
    Account(
        code="5220",
        name="Housekeeping",
        account_type=_EXP,
        category="housekeeping",
        sub_category=_S.DEPARTMENTAL,
        description="Housekeeping and environmental services",
        aliases=("Housekeeping", "Environmental Services", "Cleaning", "Janitorial"),
        benchmark_category="housekeeping",
    ),
    Account(
        code="5230",
        name="Laundry & Linen",
        account_type=_EXP,
        category="laundry",
        sub_category=_S.DEPARTMENTAL,
        description="Laundry and linen services",
        aliases=("Laundry", "Linen", "Laundry & Linen"),
        benchmark_category="laundry",
    ),
    Account(
        code="5240",
        name="Activities",
        account_type=_EXP,
        category="activities",
        sub_category=_S.DEPARTMENTAL,
        description="Recreation and activities department",
        aliases=("Activities", "Recreation", "Activity Department"),
        benchmark_category="activities",
    ),
    Account(
        code="5250",
        name="Social Services",
        account_type=_EXP,
        category="social_services",
        sub_category=_S.DEPARTMENTAL,
        description="Social work and discharge planning",
        aliases=("Social Services", "Social Work", "Discharge Planning"),
        benchmark_category="social_services",
    ),
    # ---- supplies ------------------------------------------------------- #
    Account(
        code="5310",
        name="Medical Supplies",
        account_type=_EXP,
        category="medical_supplies",
        sub_category=_S.SUPPLIES,
        description="Nursing and medical supplies",
        aliases=("Medical Supplies", "Nursing Supplies", "Clinical Supplies"),
        benchmark_category="medical_supplies",
    ),
    Account(
        code="5320",
        name="General Supplies",
        account_type=_EXP,
        category="general_supplies",
        sub_category=_S.SUPPLIES,
        description="General operating supplies",
        aliases=("General Supplies", "Supplies", "Office Supplies", "Operating Supplies"),
        benchmark_category="general_supplies",
    ),
    # ---- occupancy ------------------------------------------------------ #
    Account(
        code="5410",
        name="Utilities",
        account_type=_EXP,
        category="utilities",
        sub_category=_S.OCCUPANCY,
        description="Electric, gas, water, and sewer",
        aliases=("Utilities", "Electric", "Gas", "Water", "Sewer", "Utility Expense"),
        benchmark_category="utilities",
    ),
    Account(
        code="5420",
        name="Telephone & Communications",
        account_type=_EXP,
        category="telephone",
        sub_category=_S.OCCUPANCY,
        description="Telephone and communication services",
        aliases=("Telephone", "Phone", "Communications", "Internet"),
        benchmark_category="telephone",
    ),
    # ---- insurance ------------------------------------------------------ #
    Account(
        code="5510",
        name="Liability Insurance",
        account_type=_EXP,
        category="insurance_liability",
        sub_category=_S.INSURANCE,
        description="General and professional liability insurance",
        aliases=("Liability Insurance", "Professional Liability", "GL Insurance", "Malpractice"),
        benchmark_category="insurance",
    ),
    Account(
        code="5520",
        name="Property Insurance",
        account_type=_EXP,
        category="insurance_property",
        sub_category=_S.INSURANCE,
        description="Property and casualty insurance",
        aliases=("Property Insurance", "P&C Insurance", "Fire Insurance"),
        benchmark_category="insurance",
    ),
    Account(
        code="5530",
        name="Workers Compensation",
        account_type=_EXP,
        category="insurance_workers_comp",
        sub_category=_S.INSURANCE,
        description="Workers compensation insurance",
        aliases=("Workers Comp", "Workers Compensation", "Work Comp"),
        benchmark_category="insurance",
    ),
    # ---- taxes ---------------------------------------------------------- #
    Account(
        code="5610",
        name="Property Tax",
        account_type=_EXP,
        category="property_tax",
        sub_category=_S.TAXES,
        description="Real estate and personal property taxes",
        aliases=("Property Tax", "Real Estate Tax", "Property Taxes", "RE Tax"),
        benchmark_category="property_tax",
    ),
    # ---- administrative ------------------------------------------------- #
    Account(
        code="5710",
        name="Management Fee",
        account_type=_EXP,
        category="management_fee",
        sub_category=_S.ADMINISTRATIVE,
        description="Management company fees",
        aliases=("Management Fee", "Mgmt Fee", "Management Company Fee"),
        benchmark_category="management_fee",
    ),
    Account(
        code="5720",
        name="Marketing & Advertising",
        account_type=_EXP,
        category="marketing",
        sub_category=_S.ADMINISTRATIVE,
        description="Marketing and advertising costs",
        aliases=("Marketing", "Advertising", "Marketing & Advertising", "Promotion"),
        benchmark_category="marketing",
    ),
    Account(
        code="5730",
        name="Maintenance & Repairs",
        account_type=_EXP,
        category="maintenance_repairs",
        sub_category=_S.ADMINISTRATIVE,
        description="Building maintenance and repairs",
        aliases=("Maintenance", "Repairs", "R&M", "Maintenance & Repairs"),
        benchmark_category="maintenance",
    ),
    Account(
        code="5740",
        name="Administration",
        account_type=_EXP,
        category="administration",
        sub_category=_S.ADMINISTRATIVE,
        description="General administrative expenses",
        aliases=("Administration", "Admin", "G&A", "General & Administrative"),
        benchmark_category="administration",
    ),
    Account(
        code="5750",
        name="Professional Fees",
        account_type=_EXP,
        category="professional_fees",
        sub_category=_S.ADMINISTRATIVE,
        description="Legal, accounting, and consulting fees",
        aliases=("Professional Fees", "Legal", "Accounting", "Consulting", "Legal & Accounting"),
        benchmark_category="professional_fees",
    ),
    Account(
        code="5760",
        name="Technology",
        account_type=_EXP,
        category="technology",
        sub_category=_S.ADMINISTRATIVE,
        description="IT and technology costs",
        aliases=("Technology", "IT", "Software", "Computer", "EHR"),
        benchmark_category="technology",
    ),
    Account(
        code="5770",
        name="Bad Debt",
        account_type=_EXP,
        category="bad_debt",
        sub_category=_S.ADMINISTRATIVE,
        description="Provision for bad debts",
        aliases=("Bad Debt", "Provision for Bad Debt", "Doubtful Accounts"),
        benchmark_category="bad_debt",
    ),
    # ---- non-operating -------------------------------------------------- #
    Account(
        code="5810",
        name="Rent",
        account_type=_EXP,
        category="rent",
        sub_category=_S.NON_OPERATING,
        description="Facility rent/lease payments",
        aliases=("Rent", "Lease", "Rent Expense", "Lease Expense", "Building Rent"),
        is_operating=False,
        benchmark_category="rent",
    ),
    Account(
        code="5820",
        name="Depreciation",
        account_type=_EXP,
        category="depreciation",
        sub_category=_S.NON_OPERATING,
        description="Depreciation of fixed assets",
        aliases=("Depreciation", "Depreciation Expense", "D&A"),
        is_operating=False,
        benchmark_category="depreciation",
    ),
    Account(
        code="5830",
        name="Amortization",
        account_type=_EXP,
        category="amortization",
        sub_category=_S.NON_OPERATING,
        description="Amortization of intangible assets",
        aliases=("Amortization", "Amortization Expense"),
        is_operating=False,
        benchmark_category="amortization",
    ),
    Account(
        code="5840",
        name="Interest Expense",
        account_type=_EXP,
        category="interest",
        sub_category=_S.NON_OPERATING,
        description="Interest on debt",
        aliases=("Interest", "Interest Expense", "Debt Service Interest"),
        is_operating=False,
        benchmark_category="interest",
    ),
    # ---- other ---------------------------------------------------------- #
    Account(
        code="5990",
        name="Other Expense",
        account_type=_EXP,
        category=OTHER_EXPENSE_CATEGORY,
        sub_category=_S.OTHER,
        description="Other expenses not classified elsewhere",
        aliases=("Other Expense", "Other", "Miscellaneous", "Other Operating Expense"),
        benchmark_category="other",
    ),
)


class ChartOfAccounts:
    """Immutable, ordered chart of accounts with lookup helpers.

    Args:
        accounts:
            Accounts in match-priority order.

    Raises:
        ReferenceDataError: If the chart is empty or account codes repeat.
    """

    __slots__ = ("_accounts", "_by_code", "_by_category")

    def __init__(self, accounts: Iterable[Account]) -> None:
        ordered = tuple(accounts)
        if not ordered:
            raise ReferenceDataError("Chart of accounts must not be empty.")

        by_code: dict[str, Account] = {}
        by_category: dict[str, Account] = {}
        for account in ordered:
            if account.code in by_code:
                raise ReferenceDataError(
                    "Duplicate account code in chart of accounts.",
                    details={"code": account.code},
                )
            by_code[account.code] = account
            by_category.setdefault(account.category, account)

        self._accounts = ordered
        self._by_code = by_code
        self._by_category = by_category

    def __iter__(self) -> Iterator[Account]:
        return iter(self._accounts)

    def __len__(self) -> int:
        return len(self._accounts)

    @property
    def accounts(self) -> tuple[Account, ...]:
        return self._accounts

    def get_by_code(self, code: str) -> Account | None:
        return self._by_code.get(code)

    def get_by_category(self, category: str) -> Account | None:
        return self._by_category.get(category)

    def by_type(self, account_type: AccountType) -> tuple[Account, ...]:
        return tuple(a for a in self._accounts if a.account_type is account_type)


@lru_cache(maxsize=1)
def default_chart_of_accounts() -> ChartOfAccounts:
    """Return the process-wide default chart (built once)."""
    return ChartOfAccounts((*REVENUE_ACCOUNTS, *EXPENSE_ACCOUNTS))


__all__ = [
    "ChartOfAccounts",
    "REVENUE_ACCOUNTS",
    "EXPENSE_ACCOUNTS",
    "LABOR_CATEGORIES",
    "OTHER_REVENUE_CATEGORY",
    "OTHER_EXPENSE_CATEGORY",
    "default_chart_of_accounts",
]
