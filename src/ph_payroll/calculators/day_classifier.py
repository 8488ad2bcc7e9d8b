"""Day-type classification.

A day's type depends only on the date, the holiday calendar, the
employee's rest-day flag and whether the employee is client-based. It
never depends on attendance.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Iterable

from ph_payroll.calculators.periods import week_start
from ph_payroll.calculators.types import DayType
from ph_payroll.models import EmployeeClass, Holiday, HolidayKind, RestDaySchedule

logger = logging.getLogger(__name__)

SATURDAY = 5
SUNDAY = 6


class HolidayCalendar:
    """Holiday lookup by date.

    When two holidays share a date, the regular holiday wins.
    """

    def __init__(self, holidays: Iterable[Holiday] | None = None):
        self._by_date: dict[date, Holiday] = {}
        for holiday in holidays or ():
            existing = self._by_date.get(holiday.date)
            if existing is not None and existing.kind is HolidayKind.REGULAR:
                continue
            self._by_date[holiday.date] = holiday

    def get(self, day: date) -> Holiday | None:
        return self._by_date.get(day)

    def is_holiday(self, day: date) -> bool:
        return day in self._by_date


def classify_day(
    day: date,
    holidays: HolidayCalendar | None,
    is_rest_day: bool,
    is_client_based: bool,
) -> DayType:
    """Classify a calendar day.

    Precedence: holiday (combined with the rest day when both apply),
    then rest day, then regular. Saturdays are paid regular workdays and
    classify as ``regular``. Sunday is an implicit rest day only for
    office-based employees.
    """
    rest = is_rest_day or (not is_client_based and day.weekday() == SUNDAY)
    holiday = holidays.get(day) if holidays is not None else None

    if holiday is not None:
        if holiday.kind is HolidayKind.REGULAR:
            return DayType.SUNDAY_REGULAR_HOLIDAY if rest else DayType.REGULAR_HOLIDAY
        return DayType.SUNDAY_SPECIAL_HOLIDAY if rest else DayType.NON_WORKING_HOLIDAY

    if rest:
        return DayType.SUNDAY
    return DayType.REGULAR


class RestDayResolver:
    """Answers "is this the employee's rest day" for one employee.

    Account supervisors get at most one rest day per Monday-start week:
    only the earliest flagged date in each week is honoured, the rest are
    treated as working days. The normalization happens once here so that
    classification and aggregation see the same answer.
    """

    def __init__(self, schedule: RestDaySchedule | None, classification: EmployeeClass):
        self.classification = classification
        self.schedule = self._normalize(schedule or RestDaySchedule(), classification)

    @staticmethod
    def _normalize(schedule: RestDaySchedule, classification: EmployeeClass) -> RestDaySchedule:
        if classification is not EmployeeClass.ACCOUNT_SUPERVISOR:
            return schedule

        seen_weeks: set[date] = set()
        dropped: dict[date, bool] = {}
        for day in schedule.rest_dates():
            week = week_start(day)
            if week in seen_weeks:
                dropped[day] = False
            else:
                seen_weeks.add(week)

        if dropped:
            logger.info(
                "Ignoring %d extra rest day flag(s) for account supervisor: %s",
                len(dropped),
                ", ".join(d.isoformat() for d in sorted(dropped)),
            )
            return schedule.with_rest_days(dropped)
        return schedule

    @property
    def is_client_based(self) -> bool:
        return self.classification.is_client_based

    def is_flagged(self, day: date) -> bool:
        """Explicit schedule flag after normalization."""
        return self.schedule.is_rest_day(day)

    def is_rest_day(self, day: date) -> bool:
        """Effective rest day, including the implicit Sunday for office-based staff."""
        if self.is_flagged(day):
            return True
        return not self.is_client_based and day.weekday() == SUNDAY

    def classify(self, day: date, holidays: HolidayCalendar | None) -> DayType:
        return classify_day(day, holidays, self.is_flagged(day), self.is_client_based)

    def is_scheduled_workday(self, day: date, holidays: HolidayCalendar | None) -> bool:
        """A non-holiday, non-rest day. Saturdays count: they are paid working days."""
        if holidays is not None and holidays.is_holiday(day):
            return False
        if self.is_rest_day(day):
            return False
        return True
