"""Wall-clock parsing, night-differential windows and undertime."""

from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta
from decimal import ROUND_HALF_UP, Decimal

from ph_payroll.models import OvertimeRequest, ScheduleDay

NIGHT_START = time(17, 0)
NIGHT_END = time(6, 0)

_TIME_PATTERN = re.compile(r"^\s*(\d{1,2}):(\d{2})(?::(\d{2}))?\s*$")


class MalformedTimeError(ValueError):
    """Raised when a wall-clock string cannot be parsed."""

    def __init__(self, value: object):
        self.value = value
        super().__init__(f"Malformed time string: {value!r}")


def parse_clock_time(value: str | None) -> time:
    """Parse "HH:MM" or "HH:MM:SS" into a time."""
    if not isinstance(value, str):
        raise MalformedTimeError(value)
    match = _TIME_PATTERN.match(value)
    if match is None:
        raise MalformedTimeError(value)
    hour, minute, second = (int(part) if part else 0 for part in match.groups())
    try:
        return time(hour, minute, second)
    except ValueError as e:
        raise MalformedTimeError(value) from e


def overtime_window(request: OvertimeRequest) -> tuple[datetime, datetime]:
    """Return the absolute start and end of an overtime filing.

    Without an explicit end date, an end at or before the start means the
    overtime ran past midnight.
    """
    start = datetime.combine(request.ot_date, parse_clock_time(request.start_time))
    end = datetime.combine(request.end_date or request.ot_date, parse_clock_time(request.end_time))
    if request.end_date is None and end <= start:
        end += timedelta(days=1)
    if end <= start:
        raise MalformedTimeError(f"{request.start_time}-{request.end_time}")
    return start, end


def night_minutes(start: datetime, end: datetime) -> int:
    """Minutes of [start, end) falling inside any 17:00-06:00 night window."""
    total = timedelta()
    day = start.date() - timedelta(days=1)
    while day <= end.date():
        window_start = datetime.combine(day, NIGHT_START)
        window_end = datetime.combine(day + timedelta(days=1), NIGHT_END)
        overlap = min(end, window_end) - max(start, window_start)
        if overlap > timedelta():
            total += overlap
        day += timedelta(days=1)
    return int(total.total_seconds() // 60)


def minutes_to_hours(minutes: int) -> Decimal:
    return (Decimal(minutes) / Decimal(60)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def overtime_night_hours(request: OvertimeRequest) -> Decimal:
    """Night-differential hours of one overtime filing. Raises MalformedTimeError."""
    start, end = overtime_window(request)
    return minutes_to_hours(night_minutes(start, end))


def scheduled_end(shift: ScheduleDay | None, day: date) -> datetime | None:
    """Scheduled shift end for the day, or None when no shift is known.

    Raises MalformedTimeError when the schedule strings cannot be parsed.
    """
    if shift is None or not shift.end_time:
        return None
    end = datetime.combine(day, parse_clock_time(shift.end_time))
    if shift.start_time:
        start = datetime.combine(day, parse_clock_time(shift.start_time))
        if end <= start:
            end += timedelta(days=1)
    return end


def undertime_minutes(shift_end: datetime | None, last_clock_out: datetime | None) -> int:
    """Minutes the employee left before the scheduled shift end."""
    if shift_end is None or last_clock_out is None:
        return 0
    if last_clock_out >= shift_end:
        return 0
    return int((shift_end - last_clock_out).total_seconds() // 60)
