"""Pytest fixtures for payroll engine tests."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from decimal import Decimal
from itertools import count
from typing import Callable, Iterable
from zoneinfo import ZoneInfo

import pytest

from ph_payroll.calculators.engine import PayrollEngine, PayrollInputs
from ph_payroll.calculators.periods import PayPeriod
from ph_payroll.config import Settings
from ph_payroll.models import (
    ClockEntry,
    Employee,
    EmployeeClass,
    Holiday,
    HolidayKind,
    LeaveRequest,
    OvertimeRequest,
    RestDaySchedule,
)

MANILA = ZoneInfo("Asia/Manila")

_ids = count(1)


@pytest.fixture
def settings() -> Settings:
    """Settings independent of the environment."""
    return Settings(
        engine_version="test",
        timezone="Asia/Manila",
        working_days_per_month=22,
        log_level="WARNING",
    )


@pytest.fixture
def engine(settings: Settings) -> PayrollEngine:
    return PayrollEngine(settings=settings)


@pytest.fixture
def make_employee() -> Callable[..., Employee]:
    def _make(
        classification: EmployeeClass = EmployeeClass.RANK_AND_FILE,
        rate_per_day: str = "800",
        employee_id: str = "EMP-001",
        hire_date: date | None = None,
        termination_date: date | None = None,
    ) -> Employee:
        return Employee(
            employee_id=employee_id,
            rate_per_day=Decimal(rate_per_day),
            classification=classification,
            hire_date=hire_date,
            termination_date=termination_date,
        )

    return _make


@pytest.fixture
def rank_and_file(make_employee) -> Employee:
    return make_employee()


@pytest.fixture
def account_supervisor(make_employee) -> Employee:
    return make_employee(EmployeeClass.ACCOUNT_SUPERVISOR, rate_per_day="1000", employee_id="AS-001")


@pytest.fixture
def clock_entry() -> Callable[..., ClockEntry]:
    """Factory for a completed shift starting at 08:00 Manila time."""

    def _make(
        day: date,
        hours: str = "8",
        employee_id: str = "EMP-001",
        start: time = time(8, 0),
        complete: bool = True,
        status: str = "clocked_out",
    ) -> ClockEntry:
        clock_in = datetime.combine(day, start, tzinfo=MANILA)
        worked = Decimal(hours)
        clock_out = clock_in + timedelta(hours=float(worked) + 1) if complete else None
        return ClockEntry(
            entry_id=f"CE-{next(_ids)}",
            employee_id=employee_id,
            clock_in=clock_in,
            clock_out=clock_out,
            regular_hours=worked if complete else Decimal("0"),
            status=status,
        )

    return _make


@pytest.fixture
def overtime_request() -> Callable[..., OvertimeRequest]:
    def _make(
        day: date,
        start_time: str = "18:00",
        end_time: str = "20:00",
        hours: str = "2",
        employee_id: str = "EMP-001",
        status: str = "approved",
        end_date: date | None = None,
    ) -> OvertimeRequest:
        return OvertimeRequest(
            request_id=f"OT-{next(_ids)}",
            employee_id=employee_id,
            ot_date=day,
            start_time=start_time,
            end_time=end_time,
            total_hours=Decimal(hours),
            status=status,
            end_date=end_date,
        )

    return _make


@pytest.fixture
def leave_request() -> Callable[..., LeaveRequest]:
    def _make(
        leave_type: str,
        days: Iterable[date],
        employee_id: str = "EMP-001",
        status: str = "approved",
    ) -> LeaveRequest:
        return LeaveRequest(
            request_id=f"LV-{next(_ids)}",
            employee_id=employee_id,
            leave_type=leave_type,
            status=status,
            selected_dates=tuple(days),
        )

    return _make


def regular_holiday(day: date, name: str = "Holiday") -> Holiday:
    return Holiday(date=day, name=name, kind=HolidayKind.REGULAR)


def special_holiday(day: date, name: str = "Special Holiday") -> Holiday:
    return Holiday(date=day, name=name, kind=HolidayKind.SPECIAL)


@pytest.fixture
def make_inputs() -> Callable[..., PayrollInputs]:
    def _make(
        employee: Employee,
        start: date,
        end: date,
        clock_entries: list[ClockEntry] | None = None,
        leave_requests: list[LeaveRequest] | None = None,
        overtime_requests: list[OvertimeRequest] | None = None,
        holidays: list[Holiday] | None = None,
        schedule: RestDaySchedule | None = None,
    ) -> PayrollInputs:
        return PayrollInputs(
            employee=employee,
            period=PayPeriod(start=start, end=end),
            clock_entries=clock_entries or [],
            leave_requests=leave_requests or [],
            overtime_requests=overtime_requests or [],
            holidays=holidays or [],
            schedule=schedule or RestDaySchedule(),
        )

    return _make


def end_of_day(day: date) -> datetime:
    return datetime.combine(day, time(23, 0), tzinfo=MANILA)
