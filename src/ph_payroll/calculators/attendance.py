"""Attendance aggregation: one AttendanceDay per calendar day of a period."""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, tzinfo
from decimal import Decimal
from typing import Iterable

from ph_payroll.calculators.day_classifier import SATURDAY, HolidayCalendar, RestDayResolver
from ph_payroll.calculators.periods import PayPeriod
from ph_payroll.calculators.time_windows import (
    MalformedTimeError,
    overtime_night_hours,
    scheduled_end,
    undertime_minutes,
)
from ph_payroll.calculators.types import ZERO, AttendanceDay, AttendanceStatus, DayType
from ph_payroll.config import DEFAULT_PAY_RULES, PayRules
from ph_payroll.models import ClockEntry, Employee, LeaveRequest, OvertimeRequest

logger = logging.getLogger(__name__)

_LEAVE_STATUSES = {
    "LWOP": AttendanceStatus.LWOP,
    "CTO": AttendanceStatus.CTO,
    "OB": AttendanceStatus.OB,
}


def leave_status(leave_type: str) -> AttendanceStatus:
    """Map a leave type to its status. Unknown paid types count as LEAVE."""
    return _LEAVE_STATUSES.get(leave_type.strip().upper(), AttendanceStatus.LEAVE)


def to_local(moment: datetime, tz: tzinfo) -> datetime:
    """Convert to the payroll timezone. Naive datetimes are already local."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=tz)
    return moment.astimezone(tz)


@dataclass
class AttendanceResult:
    """Attendance days for a period plus non-fatal warnings."""

    days: list[AttendanceDay]
    warnings: list[str] = field(default_factory=list)


@dataclass
class _DayEntries:
    complete: list[ClockEntry] = field(default_factory=list)
    incomplete: list[ClockEntry] = field(default_factory=list)

    @property
    def worked_hours(self) -> Decimal:
        return sum((e.regular_hours for e in self.complete), ZERO)


class AttendanceAggregator:
    """Builds per-day attendance for one employee.

    Clock entries may extend before the period start; they are used only
    for the holiday eligibility lookback.
    """

    def __init__(
        self,
        employee: Employee,
        holidays: HolidayCalendar,
        rest_days: RestDayResolver,
        tz: tzinfo,
        rules: PayRules = DEFAULT_PAY_RULES,
    ):
        self.employee = employee
        self.holidays = holidays
        self.rest_days = rest_days
        self.tz = tz
        self.rules = rules

    def aggregate(
        self,
        period: PayPeriod,
        clock_entries: Iterable[ClockEntry],
        leave_requests: Iterable[LeaveRequest],
        overtime_requests: Iterable[OvertimeRequest],
        today: date,
    ) -> AttendanceResult:
        """Derive attendance for every day of the period."""
        warnings: list[str] = []
        self._entries = self._index_entries(clock_entries)
        self._leaves = self._index_leaves(leave_requests)
        overtime = self._index_overtime(overtime_requests, period, warnings)
        self._eligibility: dict[date, bool] = {}

        days = [self._build_day(day, overtime.get(day), today, warnings) for day in period.days()]
        return AttendanceResult(days=days, warnings=warnings)

    # === Indexing ===

    def _index_entries(self, clock_entries: Iterable[ClockEntry]) -> dict[date, _DayEntries]:
        by_date: dict[date, _DayEntries] = defaultdict(_DayEntries)
        for entry in clock_entries:
            if entry.employee_id != self.employee.employee_id:
                continue
            if entry.status not in self.rules.valid_clock_statuses:
                logger.debug("Skipping clock entry %s with status %s", entry.entry_id, entry.status)
                continue
            local_day = to_local(entry.clock_in, self.tz).date()
            bucket = by_date[local_day]
            (bucket.complete if entry.is_complete else bucket.incomplete).append(entry)
        return dict(by_date)

    def _index_leaves(self, leave_requests: Iterable[LeaveRequest]) -> dict[date, LeaveRequest]:
        by_date: dict[date, LeaveRequest] = {}
        for leave in leave_requests:
            if leave.employee_id != self.employee.employee_id:
                continue
            if leave.status not in self.rules.approved_leave_statuses:
                continue
            for day in leave.covered_dates():
                by_date.setdefault(day, leave)
        return by_date

    def _index_overtime(
        self,
        overtime_requests: Iterable[OvertimeRequest],
        period: PayPeriod,
        warnings: list[str],
    ) -> dict[date, tuple[Decimal, Decimal]]:
        """Sum approved overtime and its night hours per OT date."""
        totals: dict[date, tuple[Decimal, Decimal]] = {}
        for request in overtime_requests:
            if request.employee_id != self.employee.employee_id:
                continue
            if request.status not in self.rules.approved_overtime_statuses:
                continue
            if request.ot_date not in period:
                continue
            try:
                night = overtime_night_hours(request)
            except MalformedTimeError as e:
                message = f"Overtime {request.request_id} on {request.ot_date}: {e}; night differential set to 0"
                logger.warning(message)
                warnings.append(message)
                night = ZERO
            hours, night_total = totals.get(request.ot_date, (ZERO, ZERO))
            totals[request.ot_date] = (hours + request.total_hours, night_total + night)
        return totals

    # === Per-day derivation ===

    def _build_day(
        self,
        day: date,
        overtime: tuple[Decimal, Decimal] | None,
        today: date,
        warnings: list[str],
    ) -> AttendanceDay:
        day_type = self.rest_days.classify(day, self.holidays)

        if not self.employee.is_employed_on(day):
            return AttendanceDay(
                date=day,
                day_type=day_type,
                status=AttendanceStatus.NOT_APPLICABLE,
                in_employment=False,
            )

        entries = self._entries.get(day, _DayEntries())
        leave = self._leaves.get(day)
        ot_hours, nd_hours = overtime or (ZERO, ZERO)
        worked = entries.worked_hours

        eligible: bool | None = None
        if day_type.is_holiday:
            eligible = self._is_eligible(day)

        status = self._status(day, day_type, entries, leave, overtime is not None, today)
        basic_hours = self._basic_hours(day, day_type, entries, leave, eligible)

        clock_in, clock_out = self._clock_bounds(entries)
        undertime = 0
        if entries.complete:
            undertime = self._undertime(day, clock_out, warnings)

        return AttendanceDay(
            date=day,
            day_type=day_type,
            status=status,
            basic_hours=basic_hours,
            overtime_hours=ot_hours,
            night_diff_hours=nd_hours,
            undertime_minutes=undertime,
            clock_in=clock_in,
            clock_out=clock_out,
            worked_hours=worked,
            holiday_eligible=eligible,
            leave_type=leave.leave_type if leave is not None else None,
        )

    def _status(
        self,
        day: date,
        day_type: DayType,
        entries: _DayEntries,
        leave: LeaveRequest | None,
        has_overtime: bool,
        today: date,
    ) -> AttendanceStatus:
        """First matching rule wins."""
        if day_type.is_holiday:
            return AttendanceStatus.RH if day_type.is_regular_holiday else AttendanceStatus.SH
        if leave is not None:
            return leave_status(leave.leave_type)
        if has_overtime:
            return AttendanceStatus.OT
        if entries.complete:
            return AttendanceStatus.LOG
        if entries.incomplete:
            return AttendanceStatus.INC
        if day_type is DayType.SUNDAY:
            return AttendanceStatus.RD
        if day.weekday() == SATURDAY:
            return AttendanceStatus.LOG
        if day > today:
            return AttendanceStatus.NOT_APPLICABLE
        return AttendanceStatus.ABSENT

    def _basic_hours(
        self,
        day: date,
        day_type: DayType,
        entries: _DayEntries,
        leave: LeaveRequest | None,
        eligible: bool | None,
    ) -> Decimal:
        full_day = self.rules.hours_per_day
        if day_type.is_holiday:
            return full_day if eligible else ZERO
        if leave is not None:
            return ZERO if leave_status(leave.leave_type) is AttendanceStatus.LWOP else full_day

        if day_type is DayType.SUNDAY:
            flat = self.employee.classification.uses_flat_allowances
            if entries.worked_hours > 0:
                return full_day if flat else entries.worked_hours
            return ZERO if flat else full_day
        return self._attended_hours(day, entries)

    def _attended_hours(self, day: date, entries: _DayEntries) -> Decimal:
        """Worked hours on a working day, a dated correction, or the paid Saturday."""
        hours = entries.worked_hours
        if not entries.complete and not entries.incomplete and day in self.rules.basic_hours_corrections:
            hours = self.rules.basic_hours_corrections[day]
        if hours == 0 and day.weekday() == SATURDAY:
            hours = self.rules.hours_per_day
        return hours

    # === Holiday eligibility ===

    def _is_eligible(self, day: date) -> bool:
        if day not in self._eligibility:
            self._eligibility[day] = self._compute_eligibility(day)
        return self._eligibility[day]

    def _compute_eligibility(self, day: date) -> bool:
        """Worked the holiday, followed an eligible holiday, or worked the last scheduled day."""
        full_day = self.rules.hours_per_day
        if self._entries.get(day, _DayEntries()).worked_hours >= full_day:
            return True

        previous = day - timedelta(days=1)
        if self.holidays.is_holiday(previous) and self._is_eligible(previous):
            return True

        for offset in range(1, self.rules.lookback_days + 1):
            prior = day - timedelta(days=offset)
            if not self.rest_days.is_scheduled_workday(prior, self.holidays):
                continue
            return self._prior_day_hours(prior) >= full_day
        return False

    def _prior_day_hours(self, day: date) -> Decimal:
        leave = self._leaves.get(day)
        if leave is not None:
            if leave_status(leave.leave_type) is AttendanceStatus.LWOP:
                return ZERO
            return self.rules.hours_per_day
        return self._attended_hours(day, self._entries.get(day, _DayEntries()))

    # === Clock bounds and undertime ===

    def _clock_bounds(self, entries: _DayEntries) -> tuple[datetime | None, datetime | None]:
        all_entries = entries.complete + entries.incomplete
        if not all_entries:
            return None, None
        clock_in = min(to_local(e.clock_in, self.tz) for e in all_entries)
        clock_outs = [to_local(e.clock_out, self.tz) for e in entries.complete if e.clock_out is not None]
        return clock_in, max(clock_outs) if clock_outs else None

    def _undertime(self, day: date, clock_out: datetime | None, warnings: list[str]) -> int:
        shift = self.rest_days.schedule.shift_for(day)
        try:
            shift_end = scheduled_end(shift, day)
        except MalformedTimeError as e:
            message = f"Schedule on {day}: {e}; undertime set to 0"
            logger.warning(message)
            warnings.append(message)
            return 0
        if shift_end is None:
            return 0
        return undertime_minutes(shift_end.replace(tzinfo=self.tz), clock_out)
