"""Base pay: the 104-hour guarantee of a bi-monthly period."""

from __future__ import annotations

import logging
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence

from ph_payroll.calculators.periods import PayPeriod
from ph_payroll.calculators.types import ZERO, AttendanceDay, AttendanceStatus, BasePayResult
from ph_payroll.config import DEFAULT_PAY_RULES, PayRules
from ph_payroll.models import Employee

logger = logging.getLogger(__name__)


class BasePayCalculator:
    """Computes guaranteed base hours net of absences.

    A full period guarantees 13 paid days of 8 hours. When the employee
    was hired or separated inside the period, the guarantee is prorated
    by the share of calendar days employed. Each absence removes one
    full day; the result is clamped to [0, base hours].
    """

    def __init__(self, rules: PayRules = DEFAULT_PAY_RULES):
        self.rules = rules

    def base_hours_for(self, employee: Employee, period: PayPeriod) -> Decimal:
        total_days = len(period)
        active_days = sum(1 for day in period.days() if employee.is_employed_on(day))
        if active_days == total_days:
            return self.rules.base_hours
        prorated = self.rules.base_hours * Decimal(active_days) / Decimal(total_days)
        return prorated.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

    def calculate(
        self,
        employee: Employee,
        period: PayPeriod,
        days: Sequence[AttendanceDay],
        today: date,
    ) -> BasePayResult:
        base_hours = self.base_hours_for(employee, period)
        absence_dates = tuple(
            d.date
            for d in days
            if d.status is AttendanceStatus.ABSENT
            and d.date <= today
            and d.date in period
            and employee.is_employed_on(d.date)
        )
        deducted = base_hours - self.rules.hours_per_day * len(absence_dates)
        final_base_hours = min(max(deducted, ZERO), base_hours)

        logger.debug(
            "Base pay for %s: %s base hours, %d absence(s), %s final",
            employee.employee_id,
            base_hours,
            len(absence_dates),
            final_base_hours,
        )
        return BasePayResult(
            base_hours=base_hours,
            absences=len(absence_dates),
            absence_dates=absence_dates,
            final_base_hours=final_base_hours,
        )
