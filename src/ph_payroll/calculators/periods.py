"""Bi-monthly pay period helpers.

Periods run from the 1st to the 15th and from the 16th to the last day
of the month. Every calendar day in the period is part of the working-day
sequence; rest days and holidays are distinguished later by the day
classifier.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterator


class InvalidPeriodError(ValueError):
    """Raised when period boundaries are not a valid date range."""

    def __init__(self, start: date, end: date):
        self.start = start
        self.end = end
        super().__init__(f"Period end {end} is before start {start}")


@dataclass(frozen=True)
class PayPeriod:
    """Inclusive date range of one pay period."""

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise InvalidPeriodError(self.start, self.end)

    def days(self) -> list[date]:
        return list(iter_days(self.start, self.end))

    def __contains__(self, day: object) -> bool:
        return isinstance(day, date) and self.start <= day <= self.end

    def __len__(self) -> int:
        return (self.end - self.start).days + 1

    @property
    def is_second_cutoff(self) -> bool:
        return self.start.day >= 16

    def label(self) -> str:
        return format_period(self)


def iter_days(start: date, end: date) -> Iterator[date]:
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def last_day_of_month(day: date) -> date:
    return day.replace(day=calendar.monthrange(day.year, day.month)[1])


def period_start_for(day: date) -> date:
    return day.replace(day=1 if day.day <= 15 else 16)


def period_end_for(start: date) -> date:
    """End of the period beginning at ``start`` (a 1st or a 16th)."""
    if start.day <= 15:
        return start.replace(day=15)
    return last_day_of_month(start)


def period_for(day: date) -> PayPeriod:
    start = period_start_for(day)
    return PayPeriod(start=start, end=period_end_for(start))


def next_period(period: PayPeriod) -> PayPeriod:
    return period_for(period.end + timedelta(days=1))


def previous_period(period: PayPeriod) -> PayPeriod:
    return period_for(period.start - timedelta(days=1))


def is_in_period(day: date, period: PayPeriod) -> bool:
    return day in period


def week_start(day: date) -> date:
    """Monday of the week containing ``day``."""
    return day - timedelta(days=day.weekday())


def format_period(period: PayPeriod) -> str:
    """Format as "Jan 1 - 15, 2026", spelling out both months when they differ."""
    start, end = period.start, period.end
    if (start.year, start.month) == (end.year, end.month):
        return f"{start:%b} {start.day} - {end.day}, {end.year}"
    if start.year == end.year:
        return f"{start:%b} {start.day} - {end:%b} {end.day}, {end.year}"
    return f"{start:%b} {start.day}, {start.year} - {end:%b} {end.day}, {end.year}"
