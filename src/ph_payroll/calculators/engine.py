"""Payroll calculation engine - main orchestrator."""

from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Iterable, Mapping
from uuid import UUID
from zoneinfo import ZoneInfo

from ph_payroll.calculators.attendance import AttendanceAggregator
from ph_payroll.calculators.base_pay import BasePayCalculator
from ph_payroll.calculators.day_classifier import HolidayCalendar, RestDayResolver
from ph_payroll.calculators.deductions import DeductionCalculator, DeductionResult
from ph_payroll.calculators.pay_components import PayComponentCalculator
from ph_payroll.calculators.periods import PayPeriod
from ph_payroll.calculators.types import ZERO, AttendanceDay, BasePayResult, PayBreakdown
from ph_payroll.config import DEFAULT_PAY_RULES, PayRules, Settings, get_settings
from ph_payroll.models import (
    ClockEntry,
    Employee,
    Holiday,
    LeaveRequest,
    OvertimeRequest,
    RestDaySchedule,
)

logger = logging.getLogger(__name__)


@dataclass
class PayrollInputs:
    """Everything needed to compute one employee's period."""

    employee: Employee
    period: PayPeriod
    clock_entries: list[ClockEntry] = field(default_factory=list)
    leave_requests: list[LeaveRequest] = field(default_factory=list)
    overtime_requests: list[OvertimeRequest] = field(default_factory=list)
    holidays: list[Holiday] = field(default_factory=list)
    schedule: RestDaySchedule = field(default_factory=RestDaySchedule)
    prior_cutoff_gross: Decimal = ZERO
    other_deductions: dict[str, Decimal] = field(default_factory=dict)


@dataclass
class CalculationResult:
    """Result of calculating one employee's period."""

    employee_id: str
    calculation_id: UUID
    period: PayPeriod
    today: date
    attendance: list[AttendanceDay]
    base_pay: BasePayResult | None
    breakdown: PayBreakdown | None
    deductions: DeductionResult | None
    warnings: list[str]
    errors: list[str]
    inputs_fingerprint: str

    @property
    def success(self) -> bool:
        return len(self.errors) == 0

    @property
    def gross(self) -> Decimal:
        return self.breakdown.total_gross_pay if self.breakdown else ZERO

    @property
    def net(self) -> Decimal | None:
        return self.deductions.net_pay if self.deductions else None


@dataclass
class BatchCalculationResult:
    """Result of calculating several employees for the same instant."""

    results: dict[str, CalculationResult]
    total_gross: Decimal = ZERO
    error_count: int = 0


class PayrollEngine:
    """Single entry point for attendance and pay computation.

    Calculation pipeline (stable order per employee):
    1) Classify each day of the period
    2) Aggregate clock entries, leaves and overtime into attendance days
    3) Apply the 104-hour base pay rule
    4) Fold attendance into pay lines by employee classification
    5) Optionally compute statutory deductions and net pay

    The engine holds no per-call state; "now" is passed in and resolved
    once to a local date.
    """

    def __init__(self, settings: Settings | None = None, rules: PayRules = DEFAULT_PAY_RULES):
        self.settings = settings or get_settings()
        self.rules = rules
        self.tz = ZoneInfo(self.settings.timezone)
        self.base_pay_calculator = BasePayCalculator(rules)
        self.pay_component_calculator = PayComponentCalculator(rules)
        self.deduction_calculator = DeductionCalculator(self.settings.working_days_per_month)

    def resolve_today(self, now: datetime | date) -> date:
        if isinstance(now, datetime):
            if now.tzinfo is None:
                return now.date()
            return now.astimezone(self.tz).date()
        return now

    def build_attendance(self, inputs: PayrollInputs, today: date) -> tuple[list[AttendanceDay], list[str]]:
        """Classify and aggregate every day of the period."""
        employee = inputs.employee
        aggregator = AttendanceAggregator(
            employee=employee,
            holidays=HolidayCalendar(inputs.holidays),
            rest_days=RestDayResolver(inputs.schedule, employee.classification),
            tz=self.tz,
            rules=self.rules,
        )
        result = aggregator.aggregate(
            inputs.period,
            inputs.clock_entries,
            inputs.leave_requests,
            inputs.overtime_requests,
            today,
        )
        return result.days, result.warnings

    def calculate(
        self,
        inputs: PayrollInputs,
        now: datetime | date,
        with_deductions: bool = False,
    ) -> CalculationResult:
        """Calculate attendance and pay for one employee."""
        today = self.resolve_today(now)
        employee = inputs.employee
        period = inputs.period

        attendance, warnings = self.build_attendance(inputs, today)
        base_pay = self.base_pay_calculator.calculate(employee, period, attendance, today)
        breakdown = self.pay_component_calculator.calculate(employee, attendance, base_pay, today)

        deductions = None
        if with_deductions:
            deductions = self.deduction_calculator.calculate(
                employee.rate_per_day,
                period,
                breakdown.total_gross_pay,
                prior_cutoff_gross=inputs.prior_cutoff_gross,
                other_deductions=inputs.other_deductions,
            )

        inputs_fingerprint = self._compute_inputs_fingerprint(self._canonical_inputs(inputs))
        calculation_id = self._generate_calculation_id(
            employee.employee_id, period, today, inputs_fingerprint
        )

        logger.info(
            "Calculated %s for %s: gross %s, %d warning(s)",
            employee.employee_id,
            period.label(),
            breakdown.total_gross_pay,
            len(warnings),
        )
        return CalculationResult(
            employee_id=employee.employee_id,
            calculation_id=calculation_id,
            period=period,
            today=today,
            attendance=attendance,
            base_pay=base_pay,
            breakdown=breakdown,
            deductions=deductions,
            warnings=warnings,
            errors=[],
            inputs_fingerprint=inputs_fingerprint,
        )

    def calculate_many(
        self,
        batch: Iterable[PayrollInputs],
        now: datetime | date,
        with_deductions: bool = False,
    ) -> BatchCalculationResult:
        """Calculate several employees; one failure never aborts the rest."""
        today = self.resolve_today(now)
        results: dict[str, CalculationResult] = {}
        total_gross = ZERO
        error_count = 0

        for inputs in batch:
            employee_id = inputs.employee.employee_id
            try:
                result = self.calculate(inputs, today, with_deductions=with_deductions)
                total_gross += result.gross
            except Exception as e:
                logger.exception("Calculation failed for employee %s", employee_id)
                result = self._build_error_result(inputs, today, f"Unexpected error: {e}")
                error_count += 1
            results[employee_id] = result

        return BatchCalculationResult(results=results, total_gross=total_gross, error_count=error_count)

    def _build_error_result(self, inputs: PayrollInputs, today: date, error: str) -> CalculationResult:
        """Build a result with errors."""
        return CalculationResult(
            employee_id=inputs.employee.employee_id,
            calculation_id=self._generate_calculation_id(
                inputs.employee.employee_id, inputs.period, today, ""
            ),
            period=inputs.period,
            today=today,
            attendance=[],
            base_pay=None,
            breakdown=None,
            deductions=None,
            warnings=[],
            errors=[error],
            inputs_fingerprint="",
        )

    def _generate_calculation_id(
        self,
        employee_id: str,
        period: PayPeriod,
        today: date,
        inputs_fingerprint: str,
    ) -> UUID:
        """Generate deterministic calculation ID."""
        data = {
            "employee_id": employee_id,
            "period_start": str(period.start),
            "period_end": str(period.end),
            "today": str(today),
            "engine_version": self.settings.engine_version,
            "inputs_fingerprint": inputs_fingerprint,
        }
        json_str = json.dumps(data, sort_keys=True)
        hash_bytes = hashlib.sha256(json_str.encode()).digest()
        return UUID(bytes=hash_bytes[:16])

    def _compute_inputs_fingerprint(self, inputs_data: Mapping[str, Any]) -> str:
        """Compute fingerprint of all inputs used in calculation."""
        json_str = json.dumps(inputs_data, sort_keys=True, default=str)
        return hashlib.sha256(json_str.encode()).hexdigest()[:32]

    @staticmethod
    def _canonical_inputs(inputs: PayrollInputs) -> dict[str, Any]:
        return {
            "employee": asdict(inputs.employee),
            "period": [str(inputs.period.start), str(inputs.period.end)],
            "clock_entries": [asdict(e) for e in inputs.clock_entries],
            "leave_requests": [asdict(lr) for lr in inputs.leave_requests],
            "overtime_requests": [asdict(o) for o in inputs.overtime_requests],
            "holidays": [asdict(h) for h in inputs.holidays],
            "schedule": [asdict(d) for _, d in sorted(inputs.schedule.days.items())],
            "prior_cutoff_gross": str(inputs.prior_cutoff_gross),
            "other_deductions": {k: str(v) for k, v in inputs.other_deductions.items()},
        }
