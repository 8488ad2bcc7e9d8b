"""Type definitions for the attendance and pay calculation pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

ZERO = Decimal("0")


class DayType(str, Enum):
    """Semantic classification of a calendar day."""

    REGULAR = "regular"
    SATURDAY_REGULAR_WORKDAY = "saturday-regular-workday"
    SUNDAY = "sunday"
    REGULAR_HOLIDAY = "regular-holiday"
    NON_WORKING_HOLIDAY = "non-working-holiday"
    SUNDAY_REGULAR_HOLIDAY = "sunday-regular-holiday"
    SUNDAY_SPECIAL_HOLIDAY = "sunday-special-holiday"

    @property
    def is_holiday(self) -> bool:
        return self in (
            DayType.REGULAR_HOLIDAY,
            DayType.NON_WORKING_HOLIDAY,
            DayType.SUNDAY_REGULAR_HOLIDAY,
            DayType.SUNDAY_SPECIAL_HOLIDAY,
        )

    @property
    def is_regular_holiday(self) -> bool:
        return self in (DayType.REGULAR_HOLIDAY, DayType.SUNDAY_REGULAR_HOLIDAY)

    @property
    def is_rest_day(self) -> bool:
        """True for the employee's rest day, alone or combined with a holiday."""
        return self in (
            DayType.SUNDAY,
            DayType.SUNDAY_REGULAR_HOLIDAY,
            DayType.SUNDAY_SPECIAL_HOLIDAY,
        )

    @property
    def is_working_day(self) -> bool:
        return self in (DayType.REGULAR, DayType.SATURDAY_REGULAR_WORKDAY)


class AttendanceStatus(str, Enum):
    """Single status shown for a day on the timesheet."""

    LOG = "LOG"
    INC = "INC"
    ABSENT = "ABSENT"
    LEAVE = "LEAVE"
    LWOP = "LWOP"
    CTO = "CTO"
    OB = "OB"
    OT = "OT"
    RD = "RD"
    RH = "RH"
    SH = "SH"
    NOT_APPLICABLE = "-"


@dataclass(frozen=True)
class AttendanceDay:
    """Derived attendance for one calendar day."""

    date: date
    day_type: DayType
    status: AttendanceStatus
    basic_hours: Decimal = ZERO
    overtime_hours: Decimal = ZERO
    night_diff_hours: Decimal = ZERO
    undertime_minutes: int = 0
    clock_in: datetime | None = None
    clock_out: datetime | None = None
    worked_hours: Decimal = ZERO
    holiday_eligible: bool | None = None
    leave_type: str | None = None
    in_employment: bool = True

    @property
    def is_unworked_rest_day(self) -> bool:
        return self.day_type is DayType.SUNDAY and self.worked_hours == 0


class LineType(str, Enum):
    """Pay line item types."""

    EARNING = "EARNING"
    DEDUCTION = "DEDUCTION"
    TAX = "TAX"
    EMPLOYER_TAX = "EMPLOYER_TAX"


class LineGroup(str, Enum):
    """Payslip section a line is shown under."""

    BASIC = "basic"
    BREAKDOWN = "breakdown"
    OVERTIME = "overtime"
    OTHER_PAY = "other_pay"
    DEDUCTIONS = "deductions"


class PayComponent(str, Enum):
    """Itemized pay and deduction components."""

    BASIC_SALARY = "basic_salary"

    # Display breakdown
    NIGHT_DIFFERENTIAL = "night_differential"
    LEGAL_HOLIDAY = "legal_holiday"
    SPECIAL_HOLIDAY = "special_holiday"
    REST_DAY = "rest_day"
    REST_DAY_NIGHT_DIFF = "rest_day_night_diff"

    # Overtime (earnings for rank-and-file, allowances otherwise)
    REGULAR_OT = "regular_ot"
    REGULAR_ND_OT = "regular_nd_ot"
    LEGAL_HOLIDAY_OT = "legal_holiday_ot"
    LEGAL_HOLIDAY_ND = "legal_holiday_nd"
    SPECIAL_HOLIDAY_OT = "special_holiday_ot"
    SPECIAL_HOLIDAY_ND = "special_holiday_nd"
    REST_DAY_OT = "rest_day_ot"
    SPECIAL_HOLIDAY_ON_REST_DAY_OT = "special_holiday_on_rest_day_ot"
    LEGAL_HOLIDAY_ON_REST_DAY_OT = "legal_holiday_on_rest_day_ot"

    # Deductions
    SSS = "sss"
    PHILHEALTH = "philhealth"
    PAGIBIG = "pagibig"
    WITHHOLDING_TAX = "withholding_tax"
    SSS_EMPLOYER = "sss_employer"
    PHILHEALTH_EMPLOYER = "philhealth_employer"
    PAGIBIG_EMPLOYER = "pagibig_employer"
    OTHER_DEDUCTION = "other_deduction"


@dataclass(frozen=True)
class PayLine:
    """One itemized line.

    ``amount`` is what the payslip displays. ``gross_amount`` is the part
    that adds to gross pay on top of basic salary; for pay already inside
    basic salary it is zero or the premium portion only.
    """

    component: PayComponent
    line_type: LineType
    group: LineGroup
    amount: Decimal
    hours: Decimal = ZERO
    gross_amount: Decimal = ZERO
    explanation: str | None = None

    def combine(self, other: PayLine) -> PayLine:
        """Sum two lines of the same component."""
        if other.component is not self.component:
            raise ValueError(f"Cannot combine {self.component} with {other.component}")
        return replace(
            self,
            amount=self.amount + other.amount,
            hours=self.hours + other.hours,
            gross_amount=self.gross_amount + other.gross_amount,
        )


@dataclass(frozen=True)
class DayContribution:
    """Pay lines produced by a single day, folded into the period breakdown."""

    date: date
    lines: tuple[PayLine, ...] = ()


@dataclass(frozen=True)
class BasePayResult:
    """Guaranteed base hours after absences."""

    base_hours: Decimal
    absences: int
    absence_dates: tuple[date, ...]
    final_base_hours: Decimal

    @property
    def absence_hours(self) -> Decimal:
        return self.base_hours - self.final_base_hours


@dataclass
class PayBreakdown:
    """Period earnings for one employee."""

    days_worked: Decimal
    basic_salary: Decimal
    base_pay: BasePayResult
    actual_total_basic_hours: Decimal
    lines: list[PayLine] = field(default_factory=list)
    total_gross_pay: Decimal = ZERO

    def line(self, component: PayComponent) -> PayLine | None:
        return next((ln for ln in self.lines if ln.component is component), None)

    def amount_of(self, component: PayComponent) -> Decimal:
        found = self.line(component)
        return found.amount if found else ZERO

    def hours_of(self, component: PayComponent) -> Decimal:
        found = self.line(component)
        return found.hours if found else ZERO
