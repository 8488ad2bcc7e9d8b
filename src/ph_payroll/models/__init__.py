"""Domain input records for the payroll engine."""

from ph_payroll.models.employee import Employee, EmployeeClass, classify_employee
from ph_payroll.models.timekeeping import (
    ClockEntry,
    Holiday,
    HolidayKind,
    LeaveRequest,
    OvertimeRequest,
    RestDaySchedule,
    ScheduleDay,
)

__all__ = [
    "ClockEntry",
    "Employee",
    "EmployeeClass",
    "Holiday",
    "HolidayKind",
    "LeaveRequest",
    "OvertimeRequest",
    "RestDaySchedule",
    "ScheduleDay",
    "classify_employee",
]
