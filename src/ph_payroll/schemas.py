"""Pydantic schemas for request payloads and calculation results."""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ph_payroll.calculators.engine import CalculationResult, PayrollInputs
from ph_payroll.calculators.periods import PayPeriod
from ph_payroll.calculators.types import AttendanceStatus, DayType, LineGroup, LineType, PayComponent
from ph_payroll.config import DEFAULT_PAY_RULES, PayRules
from ph_payroll.models import (
    ClockEntry,
    Employee,
    EmployeeClass,
    Holiday,
    HolidayKind,
    LeaveRequest,
    OvertimeRequest,
    RestDaySchedule,
    ScheduleDay,
    classify_employee,
)


# ============================================================================
# Request schemas
# ============================================================================


class EmployeePayload(BaseModel):
    """Employee attributes. Classification is derived unless given."""

    employee_id: str
    rate_per_day: Decimal = Field(ge=0)
    full_name: str = ""
    employee_type: str | None = None
    position: str | None = None
    job_level: str | None = None
    hire_date: date | None = None
    termination_date: date | None = None
    classification: EmployeeClass | None = None

    def to_employee(self, rules: PayRules = DEFAULT_PAY_RULES) -> Employee:
        classification = self.classification or classify_employee(
            self.employee_type, self.position, self.job_level, rules
        )
        return Employee(
            employee_id=self.employee_id,
            rate_per_day=self.rate_per_day,
            classification=classification,
            hire_date=self.hire_date,
            termination_date=self.termination_date,
            full_name=self.full_name,
            position=self.position,
            job_level=self.job_level,
            employee_type=self.employee_type,
        )


class ClockEntryPayload(BaseModel):
    entry_id: str
    clock_in: datetime
    clock_out: datetime | None = None
    regular_hours: Decimal = Decimal("0")
    night_diff_hours: Decimal = Decimal("0")
    status: str = "clocked_out"


class LeavePayload(BaseModel):
    request_id: str
    leave_type: str
    status: str
    start_date: date | None = None
    end_date: date | None = None
    selected_dates: list[date] = Field(default_factory=list)


class OvertimePayload(BaseModel):
    request_id: str
    ot_date: date
    end_date: date | None = None
    start_time: str
    end_time: str
    total_hours: Decimal = Field(ge=0)
    status: str


class HolidayPayload(BaseModel):
    date: date
    name: str = ""
    kind: HolidayKind


class ScheduleDayPayload(BaseModel):
    date: date
    is_rest_day: bool = False
    start_time: str | None = None
    end_time: str | None = None


class PayrollRequest(BaseModel):
    """One employee's period with all timekeeping records."""

    employee: EmployeePayload
    period_start: date
    period_end: date
    clock_entries: list[ClockEntryPayload] = Field(default_factory=list)
    leave_requests: list[LeavePayload] = Field(default_factory=list)
    overtime_requests: list[OvertimePayload] = Field(default_factory=list)
    holidays: list[HolidayPayload] = Field(default_factory=list)
    schedule: list[ScheduleDayPayload] = Field(default_factory=list)
    prior_cutoff_gross: Decimal = Decimal("0")
    other_deductions: dict[str, Decimal] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _check_period(self) -> "PayrollRequest":
        if self.period_end < self.period_start:
            raise ValueError(f"period_end {self.period_end} is before period_start {self.period_start}")
        return self

    def to_inputs(self, rules: PayRules = DEFAULT_PAY_RULES) -> PayrollInputs:
        employee_id = self.employee.employee_id
        return PayrollInputs(
            employee=self.employee.to_employee(rules),
            period=PayPeriod(start=self.period_start, end=self.period_end),
            clock_entries=[
                ClockEntry(employee_id=employee_id, **entry.model_dump()) for entry in self.clock_entries
            ],
            leave_requests=[
                LeaveRequest(
                    request_id=leave.request_id,
                    employee_id=employee_id,
                    leave_type=leave.leave_type,
                    status=leave.status,
                    start_date=leave.start_date,
                    end_date=leave.end_date,
                    selected_dates=tuple(leave.selected_dates),
                )
                for leave in self.leave_requests
            ],
            overtime_requests=[
                OvertimeRequest(employee_id=employee_id, **ot.model_dump()) for ot in self.overtime_requests
            ],
            holidays=[Holiday(date=h.date, name=h.name, kind=h.kind) for h in self.holidays],
            schedule=RestDaySchedule.from_days(ScheduleDay(**day.model_dump()) for day in self.schedule),
            prior_cutoff_gross=self.prior_cutoff_gross,
            other_deductions=dict(self.other_deductions),
        )


# ============================================================================
# Response schemas
# ============================================================================


class AttendanceDayResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    date: date
    day_type: DayType
    status: AttendanceStatus
    basic_hours: Decimal
    overtime_hours: Decimal
    night_diff_hours: Decimal
    undertime_minutes: int
    clock_in: datetime | None = None
    clock_out: datetime | None = None
    holiday_eligible: bool | None = None


class PayLineResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    component: PayComponent
    line_type: LineType
    group: LineGroup
    hours: Decimal
    amount: Decimal
    gross_amount: Decimal
    explanation: str | None = None


class BasePayResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    base_hours: Decimal
    absences: int
    absence_dates: list[date]
    final_base_hours: Decimal


class BreakdownResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    days_worked: Decimal
    basic_salary: Decimal
    actual_total_basic_hours: Decimal
    base_pay: BasePayResponse
    lines: list[PayLineResponse]
    total_gross_pay: Decimal


class DeductionsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    monthly_salary: Decimal
    withholding_tax: Decimal
    lines: list[PayLineResponse]
    net_pay: Decimal


class CalculationResponse(BaseModel):
    """Serializable view of a calculation result."""

    employee_id: str
    calculation_id: UUID
    period_start: date
    period_end: date
    period_label: str
    today: date
    attendance: list[AttendanceDayResponse]
    breakdown: BreakdownResponse | None = None
    deductions: DeductionsResponse | None = None
    warnings: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    inputs_fingerprint: str

    @classmethod
    def from_result(cls, result: CalculationResult) -> "CalculationResponse":
        return cls(
            employee_id=result.employee_id,
            calculation_id=result.calculation_id,
            period_start=result.period.start,
            period_end=result.period.end,
            period_label=result.period.label(),
            today=result.today,
            attendance=[AttendanceDayResponse.model_validate(d) for d in result.attendance],
            breakdown=BreakdownResponse.model_validate(result.breakdown) if result.breakdown else None,
            deductions=DeductionsResponse.model_validate(result.deductions) if result.deductions else None,
            warnings=result.warnings,
            errors=result.errors,
            inputs_fingerprint=result.inputs_fingerprint,
        )
