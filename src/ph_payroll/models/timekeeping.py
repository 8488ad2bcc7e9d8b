"""Timekeeping input records: clock entries, leaves, overtime, holidays, schedules."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import Iterable, Iterator, Mapping


class HolidayKind(str, Enum):
    """Holiday classification under the Philippine calendar."""

    REGULAR = "regular"
    SPECIAL = "special"


@dataclass(frozen=True)
class Holiday:
    """A declared holiday."""

    date: date
    name: str
    kind: HolidayKind


@dataclass(frozen=True)
class ClockEntry:
    """One clock-in/clock-out pair from the time clock."""

    entry_id: str
    employee_id: str
    clock_in: datetime
    clock_out: datetime | None = None
    regular_hours: Decimal = Decimal("0")
    night_diff_hours: Decimal = Decimal("0")
    status: str = "clocked_out"

    @property
    def is_complete(self) -> bool:
        return self.clock_out is not None


@dataclass(frozen=True)
class LeaveRequest:
    """A leave filing covering explicit dates or an inclusive range."""

    request_id: str
    employee_id: str
    leave_type: str
    status: str
    start_date: date | None = None
    end_date: date | None = None
    selected_dates: tuple[date, ...] = ()

    def covered_dates(self) -> Iterator[date]:
        """Yield every date this leave covers."""
        if self.selected_dates:
            yield from self.selected_dates
            return
        if self.start_date is None:
            return
        current = self.start_date
        last = self.end_date or self.start_date
        while current <= last:
            yield current
            current += timedelta(days=1)


@dataclass(frozen=True)
class OvertimeRequest:
    """A filed overtime window.

    ``start_time`` and ``end_time`` are wall-clock strings ("HH:MM" or
    "HH:MM:SS"). Without ``end_date``, an end at or before the start is
    read as the next calendar day.
    """

    request_id: str
    employee_id: str
    ot_date: date
    start_time: str
    end_time: str
    total_hours: Decimal
    status: str
    end_date: date | None = None


@dataclass(frozen=True)
class ScheduleDay:
    """Scheduled shift and rest-day flag for one date."""

    date: date
    is_rest_day: bool = False
    start_time: str | None = None
    end_time: str | None = None


@dataclass
class RestDaySchedule:
    """Per-date schedule lookup. Dates without an entry are not flagged."""

    days: dict[date, ScheduleDay] = field(default_factory=dict)

    @classmethod
    def from_days(cls, days: Iterable[ScheduleDay]) -> RestDaySchedule:
        return cls(days={d.date: d for d in days})

    @classmethod
    def from_rest_dates(cls, dates: Iterable[date]) -> RestDaySchedule:
        return cls.from_days(ScheduleDay(date=d, is_rest_day=True) for d in dates)

    def is_rest_day(self, day: date) -> bool:
        entry = self.days.get(day)
        return entry is not None and entry.is_rest_day

    def shift_for(self, day: date) -> ScheduleDay | None:
        return self.days.get(day)

    def rest_dates(self) -> list[date]:
        return sorted(d for d, entry in self.days.items() if entry.is_rest_day)

    def with_rest_days(self, keep: Mapping[date, bool]) -> RestDaySchedule:
        """Return a copy with the rest-day flag replaced for the given dates."""
        days = dict(self.days)
        for day, flag in keep.items():
            existing = days.get(day) or ScheduleDay(date=day)
            days[day] = ScheduleDay(
                date=day,
                is_rest_day=flag,
                start_time=existing.start_time,
                end_time=existing.end_time,
            )
        return RestDaySchedule(days=days)
