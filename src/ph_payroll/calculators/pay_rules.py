"""Per-classification pay rules.

Rank-and-file employees are paid premiums by statutory multipliers on the
hourly rate. Every other classification receives the full daily rate for
eligible holidays and worked rest days, plus flat allowances for overtime
on any day.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Protocol

from ph_payroll.calculators.line_builder import LineItemBuilder
from ph_payroll.calculators.types import (
    ZERO,
    AttendanceDay,
    DayContribution,
    DayType,
    LineGroup,
    PayComponent,
    PayLine,
)
from ph_payroll.config import DEFAULT_PAY_RULES, PayRules
from ph_payroll.models import Employee, EmployeeClass

DAY_MULTIPLIER_KEYS = {
    DayType.REGULAR: "regular",
    DayType.SATURDAY_REGULAR_WORKDAY: "regular",
    DayType.SUNDAY: "rest_day",
    DayType.REGULAR_HOLIDAY: "regular_holiday",
    DayType.NON_WORKING_HOLIDAY: "special_holiday",
    DayType.SUNDAY_REGULAR_HOLIDAY: "rest_day_regular_holiday",
    DayType.SUNDAY_SPECIAL_HOLIDAY: "rest_day_special_holiday",
}

OVERTIME_COMPONENTS = {
    DayType.REGULAR: PayComponent.REGULAR_OT,
    DayType.SATURDAY_REGULAR_WORKDAY: PayComponent.REGULAR_OT,
    DayType.SUNDAY: PayComponent.REST_DAY_OT,
    DayType.REGULAR_HOLIDAY: PayComponent.LEGAL_HOLIDAY_OT,
    DayType.NON_WORKING_HOLIDAY: PayComponent.SPECIAL_HOLIDAY_OT,
    DayType.SUNDAY_REGULAR_HOLIDAY: PayComponent.LEGAL_HOLIDAY_ON_REST_DAY_OT,
    DayType.SUNDAY_SPECIAL_HOLIDAY: PayComponent.SPECIAL_HOLIDAY_ON_REST_DAY_OT,
}


def overtime_allowance(hours: Decimal, rules: PayRules = DEFAULT_PAY_RULES) -> Decimal:
    """Flat overtime allowance for one day.

    Nothing below the minimum; the base fee at the minimum; then a fixed
    amount per hour beyond it (3.5h -> 200 + 1.5 x 100).
    """
    if hours < rules.ot_allowance_min_hours:
        return ZERO
    extra = hours - rules.ot_allowance_min_hours
    return LineItemBuilder.round_to_cents(rules.ot_allowance_base + extra * rules.ot_allowance_per_hour)


def holiday_allowance(hours: Decimal, rules: PayRules = DEFAULT_PAY_RULES) -> Decimal:
    """Threshold allowance for overtime hours on a holiday or rest day."""
    for tier in rules.holiday_allowance_tiers:
        if hours >= tier.min_hours:
            return tier.amount
    return ZERO


def _holiday_component(day_type: DayType) -> PayComponent:
    if day_type.is_regular_holiday:
        return PayComponent.LEGAL_HOLIDAY
    return PayComponent.SPECIAL_HOLIDAY


class PayRuleSet(Protocol):
    """Turns one attendance day into pay lines."""

    def day_contribution(self, day: AttendanceDay, employee: Employee) -> DayContribution:
        ...


class MultiplierRules:
    """Rank-and-file: premiums as multiples of the hourly rate."""

    def __init__(self, rules: PayRules = DEFAULT_PAY_RULES):
        self.rules = rules

    def day_contribution(self, day: AttendanceDay, employee: Employee) -> DayContribution:
        rate = employee.rate_per_hour
        day_type = day.day_type
        multiplier = self.rules.multiplier(DAY_MULTIPLIER_KEYS[day_type])
        lines: list[PayLine] = []

        if day_type.is_holiday:
            lines.extend(self._premium_day_lines(day, _holiday_component(day_type), rate, multiplier))
        elif day_type is DayType.SUNDAY:
            lines.extend(self._premium_day_lines(day, PayComponent.REST_DAY, rate, multiplier))

        lines.extend(self._overtime_lines(day, rate, multiplier))
        return DayContribution(date=day.date, lines=tuple(lines))

    def _premium_day_lines(
        self,
        day: AttendanceDay,
        component: PayComponent,
        rate: Decimal,
        multiplier: Decimal,
    ) -> list[PayLine]:
        """Holiday or rest-day line.

        Worked hours are paid at the day multiplier; whatever part of them
        basic salary already covers is left out of gross. An unworked rest
        day is excluded from basic salary, so its full pay enters gross.
        An unworked eligible holiday is paid entirely through basic salary.
        """
        worked = day.worked_hours
        if worked > 0:
            amount = worked * rate * multiplier
            in_basic = min(worked, day.basic_hours) * rate
            return [
                LineItemBuilder.create_earning_line(
                    component,
                    LineGroup.BREAKDOWN,
                    amount,
                    hours=worked,
                    gross_amount=amount - in_basic,
                )
            ]

        if day.basic_hours <= 0:
            return []
        if day.day_type is DayType.SUNDAY:
            return [
                LineItemBuilder.create_earning_line(
                    PayComponent.REST_DAY,
                    LineGroup.BREAKDOWN,
                    day.basic_hours * rate * multiplier,
                    hours=day.basic_hours,
                )
            ]
        return [
            LineItemBuilder.create_display_line(
                component,
                day.basic_hours * rate,
                day.basic_hours,
            )
        ]

    def _overtime_lines(self, day: AttendanceDay, rate: Decimal, multiplier: Decimal) -> list[PayLine]:
        lines: list[PayLine] = []
        day_type = day.day_type
        nd_rate = rate * self.rules.multiplier("night_diff")
        ot = day.overtime_hours
        nd = day.night_diff_hours

        if ot > 0:
            if day_type.is_working_day:
                ot_rate = rate * self.rules.multiplier("regular_ot")
            else:
                ot_rate = rate * multiplier * self.rules.multiplier("ot_premium")
            lines.append(
                LineItemBuilder.create_earning_line(
                    OVERTIME_COMPONENTS[day_type],
                    LineGroup.OVERTIME,
                    ot * ot_rate,
                    hours=ot,
                )
            )

        if nd <= 0:
            return lines

        if day_type.is_holiday:
            component = (
                PayComponent.LEGAL_HOLIDAY_ND
                if day_type.is_regular_holiday
                else PayComponent.SPECIAL_HOLIDAY_ND
            )
            lines.append(
                LineItemBuilder.create_earning_line(component, LineGroup.OVERTIME, nd * nd_rate, hours=nd)
            )
        elif day_type is DayType.SUNDAY:
            lines.append(
                LineItemBuilder.create_earning_line(
                    PayComponent.REST_DAY_NIGHT_DIFF, LineGroup.BREAKDOWN, nd * nd_rate, hours=nd
                )
            )
        else:
            nd_on_ot = min(nd, ot)
            plain_nd = nd - nd_on_ot
            if plain_nd > 0:
                lines.append(
                    LineItemBuilder.create_earning_line(
                        PayComponent.NIGHT_DIFFERENTIAL,
                        LineGroup.BREAKDOWN,
                        plain_nd * nd_rate,
                        hours=plain_nd,
                    )
                )
            if nd_on_ot > 0:
                lines.append(
                    LineItemBuilder.create_earning_line(
                        PayComponent.REGULAR_ND_OT,
                        LineGroup.OVERTIME,
                        nd_on_ot * nd_rate,
                        hours=nd_on_ot,
                    )
                )
        return lines


class FlatAllowanceRules:
    """Supervisory, managerial and client-based staff: daily rate plus flat allowances.

    Holiday and rest-day pay is the daily rate inside basic salary; nothing
    is added to gross for the regular hours worked on those days. The
    threshold allowance applies to overtime filed on them.
    """

    def __init__(self, rules: PayRules = DEFAULT_PAY_RULES):
        self.rules = rules

    def day_contribution(self, day: AttendanceDay, employee: Employee) -> DayContribution:
        day_type = day.day_type
        lines: list[PayLine] = []

        if day.basic_hours > 0:
            if day_type.is_holiday:
                lines.append(self._daily_rate_line(day, _holiday_component(day_type), employee))
            elif day_type is DayType.SUNDAY and day.worked_hours > 0:
                lines.append(self._daily_rate_line(day, PayComponent.REST_DAY, employee))

        ot = day.overtime_hours
        if ot > 0:
            if day_type.is_working_day:
                allowance = overtime_allowance(ot, self.rules)
            else:
                allowance = holiday_allowance(ot, self.rules)
            if allowance > 0:
                lines.append(
                    LineItemBuilder.create_earning_line(
                        OVERTIME_COMPONENTS[day_type],
                        LineGroup.OTHER_PAY,
                        allowance,
                        hours=ot,
                    )
                )
        return DayContribution(date=day.date, lines=tuple(lines))

    @staticmethod
    def _daily_rate_line(day: AttendanceDay, component: PayComponent, employee: Employee) -> PayLine:
        return LineItemBuilder.create_display_line(component, employee.rate_per_day, day.basic_hours)


_RULE_SETS = {
    EmployeeClass.RANK_AND_FILE: MultiplierRules,
    EmployeeClass.OFFICE_SUPERVISORY: FlatAllowanceRules,
    EmployeeClass.CLIENT_BASED: FlatAllowanceRules,
    EmployeeClass.ACCOUNT_SUPERVISOR: FlatAllowanceRules,
}


def rules_for(classification: EmployeeClass, rules: PayRules = DEFAULT_PAY_RULES) -> PayRuleSet:
    """Select the pay rule family for a classification."""
    return _RULE_SETS[classification](rules)
