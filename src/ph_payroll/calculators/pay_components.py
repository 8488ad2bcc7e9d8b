"""Fold a period's attendance into a pay breakdown."""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Sequence

from ph_payroll.calculators.line_builder import LineItemBuilder
from ph_payroll.calculators.pay_rules import rules_for
from ph_payroll.calculators.types import (
    ZERO,
    AttendanceDay,
    AttendanceStatus,
    BasePayResult,
    DayContribution,
    PayBreakdown,
)
from ph_payroll.config import DEFAULT_PAY_RULES, PayRules
from ph_payroll.models import Employee

logger = logging.getLogger(__name__)

_EXCLUDED_FROM_BASIC = frozenset({AttendanceStatus.LWOP, AttendanceStatus.CTO, AttendanceStatus.OB})


def counts_toward_basic(day: AttendanceDay) -> bool:
    """Whether a day's basic hours count toward actual total basic hours."""
    if not day.in_employment:
        return False
    if day.is_unworked_rest_day:
        return False
    return day.status not in _EXCLUDED_FROM_BASIC


class PayComponentCalculator:
    """Computes days worked, basic salary, itemized lines and gross pay.

    Days after ``today`` contribute nothing. Basic salary is always
    ``round(days_worked * round(rate_per_day, 2), 2)``; line amounts that
    basic salary already covers are carried for display with no gross
    portion.
    """

    def __init__(self, rules: PayRules = DEFAULT_PAY_RULES):
        self.rules = rules

    def contributions(
        self,
        employee: Employee,
        days: Sequence[AttendanceDay],
        today: date,
    ) -> list[DayContribution]:
        rule_set = rules_for(employee.classification, self.rules)
        return [
            rule_set.day_contribution(day, employee)
            for day in days
            if day.in_employment and day.date <= today
        ]

    def actual_total_basic_hours(self, days: Sequence[AttendanceDay], today: date) -> Decimal:
        return sum(
            (day.basic_hours for day in days if day.date <= today and counts_toward_basic(day)),
            ZERO,
        )

    def calculate(
        self,
        employee: Employee,
        days: Sequence[AttendanceDay],
        base_pay: BasePayResult,
        today: date,
    ) -> PayBreakdown:
        actual_total_bh = self.actual_total_basic_hours(days, today)
        paid_hours = max(base_pay.final_base_hours, actual_total_bh)
        days_worked = paid_hours / self.rules.hours_per_day
        rate_per_day = LineItemBuilder.round_to_cents(employee.rate_per_day)
        basic_salary = LineItemBuilder.round_to_cents(days_worked * rate_per_day)

        if actual_total_bh >= base_pay.final_base_hours:
            component_total = sum(
                (
                    day.basic_hours * rate_per_day / self.rules.hours_per_day
                    for day in days
                    if day.date <= today and counts_toward_basic(day)
                ),
                ZERO,
            )
            basic_salary = LineItemBuilder.reconcile_basic_salary(component_total, basic_salary)

        contributions = self.contributions(employee, days, today)
        lines = [LineItemBuilder.create_basic_salary_line(basic_salary, days_worked)]
        lines.extend(LineItemBuilder.merge_lines(line for c in contributions for line in c.lines))
        total_gross_pay = LineItemBuilder.calculate_gross(basic_salary, lines)

        logger.debug(
            "Breakdown for %s: %s day(s), basic %s, gross %s",
            employee.employee_id,
            days_worked,
            basic_salary,
            total_gross_pay,
        )
        return PayBreakdown(
            days_worked=days_worked,
            basic_salary=basic_salary,
            base_pay=base_pay,
            actual_total_basic_hours=actual_total_bh,
            lines=lines,
            total_gross_pay=total_gross_pay,
        )
