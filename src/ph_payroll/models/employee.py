"""Employee record and pay classification."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum

from ph_payroll.config import DEFAULT_PAY_RULES, PayRules


class EmployeeClass(str, Enum):
    """Pay classification, decided once per employee."""

    RANK_AND_FILE = "rank_and_file"
    OFFICE_SUPERVISORY = "office_supervisory"
    CLIENT_BASED = "client_based"
    ACCOUNT_SUPERVISOR = "account_supervisor"

    @property
    def is_client_based(self) -> bool:
        return self in (EmployeeClass.CLIENT_BASED, EmployeeClass.ACCOUNT_SUPERVISOR)

    @property
    def uses_flat_allowances(self) -> bool:
        """Everyone except rank-and-file is paid OT as flat allowances."""
        return self is not EmployeeClass.RANK_AND_FILE


def classify_employee(
    employee_type: str | None,
    position: str | None,
    job_level: str | None,
    rules: PayRules = DEFAULT_PAY_RULES,
) -> EmployeeClass:
    """Resolve an employee's pay classification from HR attributes.

    Title matching is a case-insensitive substring test against a fixed
    list. Account supervisors are recognized by position before the
    employee type is consulted.
    """
    position_upper = (position or "").upper()
    job_level_upper = (job_level or "").strip().upper()

    if rules.account_supervisor_title in position_upper:
        return EmployeeClass.ACCOUNT_SUPERVISOR
    if (employee_type or "").strip().lower() == rules.client_based_type:
        return EmployeeClass.CLIENT_BASED
    if any(title in position_upper for title in rules.supervisory_titles):
        return EmployeeClass.OFFICE_SUPERVISORY
    if job_level_upper in rules.managerial_job_levels:
        return EmployeeClass.OFFICE_SUPERVISORY
    return EmployeeClass.RANK_AND_FILE


@dataclass(frozen=True)
class Employee:
    """Employee attributes the engine reads. Never mutated by calculation."""

    employee_id: str
    rate_per_day: Decimal
    classification: EmployeeClass
    hire_date: date | None = None
    termination_date: date | None = None
    full_name: str = ""
    position: str | None = None
    job_level: str | None = None
    employee_type: str | None = None

    def __post_init__(self) -> None:
        if self.rate_per_day < 0:
            raise ValueError(f"rate_per_day must be non-negative, got {self.rate_per_day}")

    @classmethod
    def from_hr_record(
        cls,
        employee_id: str,
        rate_per_day: Decimal,
        employee_type: str | None = None,
        position: str | None = None,
        job_level: str | None = None,
        hire_date: date | None = None,
        termination_date: date | None = None,
        full_name: str = "",
        rules: PayRules = DEFAULT_PAY_RULES,
    ) -> Employee:
        """Build an employee, deriving the classification from HR attributes."""
        return cls(
            employee_id=employee_id,
            rate_per_day=rate_per_day,
            classification=classify_employee(employee_type, position, job_level, rules),
            hire_date=hire_date,
            termination_date=termination_date,
            full_name=full_name,
            position=position,
            job_level=job_level,
            employee_type=employee_type,
        )

    @property
    def rate_per_hour(self) -> Decimal:
        return self.rate_per_day / Decimal("8")

    @property
    def is_client_based(self) -> bool:
        return self.classification.is_client_based

    def is_employed_on(self, day: date) -> bool:
        """Check whether the day falls within the employment window."""
        if self.hire_date is not None and day < self.hire_date:
            return False
        if self.termination_date is not None and day > self.termination_date:
            return False
        return True
