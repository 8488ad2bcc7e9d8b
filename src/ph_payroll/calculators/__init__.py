"""Attendance classification and payroll calculation engine."""

from ph_payroll.calculators.attendance import AttendanceAggregator, AttendanceResult
from ph_payroll.calculators.base_pay import BasePayCalculator
from ph_payroll.calculators.day_classifier import HolidayCalendar, RestDayResolver, classify_day
from ph_payroll.calculators.deductions import DeductionCalculator, DeductionResult
from ph_payroll.calculators.engine import (
    BatchCalculationResult,
    CalculationResult,
    PayrollEngine,
    PayrollInputs,
)
from ph_payroll.calculators.line_builder import LineItemBuilder
from ph_payroll.calculators.pay_components import PayComponentCalculator
from ph_payroll.calculators.pay_rules import holiday_allowance, overtime_allowance, rules_for
from ph_payroll.calculators.periods import InvalidPeriodError, PayPeriod, period_for

__all__ = [
    "AttendanceAggregator",
    "AttendanceResult",
    "BasePayCalculator",
    "BatchCalculationResult",
    "CalculationResult",
    "DeductionCalculator",
    "DeductionResult",
    "HolidayCalendar",
    "InvalidPeriodError",
    "LineItemBuilder",
    "PayComponentCalculator",
    "PayPeriod",
    "PayrollEngine",
    "PayrollInputs",
    "RestDayResolver",
    "classify_day",
    "holiday_allowance",
    "overtime_allowance",
    "period_for",
    "rules_for",
]
