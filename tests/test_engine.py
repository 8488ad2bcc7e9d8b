"""Unit tests for PayrollEngine."""

from dataclasses import replace
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest
from hypothesis import HealthCheck, given, settings as hypothesis_settings, strategies as st

from conftest import MANILA, end_of_day, regular_holiday
from ph_payroll.calculators.engine import BatchCalculationResult, CalculationResult, PayrollEngine
from ph_payroll.calculators.periods import PayPeriod
from ph_payroll.calculators.types import AttendanceStatus, LineType, PayComponent
from ph_payroll.config import Settings
from ph_payroll.models import ClockEntry, EmployeeClass

SEPT_1 = date(2025, 9, 1)
SEPT_15 = date(2025, 9, 15)
WEEKDAYS = [d for d in (SEPT_1 + timedelta(days=i) for i in range(15)) if d.weekday() < 5]


@pytest.fixture
def september_inputs(rank_and_file, clock_entry, make_inputs):
    """Rank-and-file, 8h on every weekday of Sept 1-15 2025 except the 3rd."""
    entries = [clock_entry(day) for day in WEEKDAYS if day != date(2025, 9, 3)]
    return make_inputs(rank_and_file, SEPT_1, SEPT_15, clock_entries=entries)


class TestCalculationIdGeneration:
    """Test deterministic calculation ID generation."""

    def test_same_inputs_produce_same_id(self, engine):
        period = PayPeriod(SEPT_1, SEPT_15)
        id1 = engine._generate_calculation_id("EMP-001", period, SEPT_15, "abc123")
        id2 = engine._generate_calculation_id("EMP-001", period, SEPT_15, "abc123")
        assert id1 == id2

    def test_different_inputs_produce_different_id(self, engine):
        period = PayPeriod(SEPT_1, SEPT_15)
        id1 = engine._generate_calculation_id("EMP-001", period, SEPT_15, "abc123")
        id2 = engine._generate_calculation_id("EMP-001", period, SEPT_15, "xyz789")
        assert id1 != id2

    def test_engine_version_affects_id(self, settings):
        period = PayPeriod(SEPT_1, SEPT_15)
        engine1 = PayrollEngine(settings=settings)
        engine2 = PayrollEngine(settings=replace(settings, engine_version="2.0.0"))
        assert engine1._generate_calculation_id("E", period, SEPT_15, "fp") != engine2._generate_calculation_id(
            "E", period, SEPT_15, "fp"
        )


class TestFingerprintGeneration:
    """Test inputs fingerprint computation."""

    def test_inputs_fingerprint_is_deterministic(self, engine):
        inputs = {"employee": "EMP-001", "rate": "800"}
        assert engine._compute_inputs_fingerprint(inputs) == engine._compute_inputs_fingerprint(inputs)

    def test_inputs_fingerprint_order_independent(self, engine):
        fp1 = engine._compute_inputs_fingerprint({"a": 1, "b": 2})
        fp2 = engine._compute_inputs_fingerprint({"b": 2, "a": 1})
        assert fp1 == fp2

    def test_fingerprint_tracks_inputs(self, engine, september_inputs, clock_entry):
        first = engine.calculate(september_inputs, end_of_day(SEPT_15))
        september_inputs.clock_entries.append(clock_entry(date(2025, 9, 3)))
        second = engine.calculate(september_inputs, end_of_day(SEPT_15))
        assert first.inputs_fingerprint != second.inputs_fingerprint
        assert first.calculation_id != second.calculation_id


class TestEndToEnd:
    """Full period scenarios."""

    def test_rank_and_file_half_month(self, engine, september_inputs):
        """Test one absence, paid Saturdays and unworked Sundays."""
        result = engine.calculate(september_inputs, end_of_day(SEPT_15))

        assert result.success
        assert len(result.attendance) == 15
        by_date = {d.date: d for d in result.attendance}
        assert by_date[date(2025, 9, 3)].status is AttendanceStatus.ABSENT
        assert by_date[date(2025, 9, 6)].status is AttendanceStatus.LOG
        assert by_date[date(2025, 9, 7)].status is AttendanceStatus.RD

        assert result.base_pay.absences == 1
        assert result.base_pay.final_base_hours == Decimal("96")
        breakdown = result.breakdown
        assert breakdown.actual_total_basic_hours == Decimal("96")
        assert breakdown.days_worked == Decimal("12")
        assert breakdown.basic_salary == Decimal("9600.00")
        assert breakdown.amount_of(PayComponent.REST_DAY) == Decimal("2080.00")
        assert result.gross == Decimal("11680.00")
        assert result.deductions is None
        assert result.net is None

    def test_with_deductions(self, engine, september_inputs):
        result = engine.calculate(september_inputs, end_of_day(SEPT_15), with_deductions=True)
        assert result.net == Decimal("10922.50")
        assert all(line.line_type is not LineType.TAX for line in result.deductions.lines)

    def test_holiday_block_for_account_supervisor(self, engine, account_supervisor, clock_entry, make_inputs):
        """Test an eligible unworked holiday is paid inside basic salary."""
        holidays = [regular_holiday(date(2025, 12, 25))]
        entries = [clock_entry(date(2025, 12, 24), employee_id="AS-001")]
        inputs = make_inputs(
            account_supervisor, date(2025, 12, 16), date(2025, 12, 31), clock_entries=entries, holidays=holidays
        )
        result = engine.calculate(inputs, end_of_day(date(2025, 12, 31)))
        by_date = {d.date: d for d in result.attendance}
        assert by_date[date(2025, 12, 25)].basic_hours == Decimal("8")
        assert result.breakdown.amount_of(PayComponent.LEGAL_HOLIDAY) == Decimal("1000.00")
        assert result.breakdown.total_gross_pay == result.breakdown.basic_salary

    def test_worked_holiday_for_account_supervisor_adds_nothing(
        self, engine, account_supervisor, clock_entry, make_inputs
    ):
        """Test 8h worked on a regular holiday is paid as the daily rate only."""
        christmas = date(2025, 12, 25)
        inputs = make_inputs(
            account_supervisor,
            date(2025, 12, 16),
            date(2025, 12, 31),
            clock_entries=[clock_entry(christmas, employee_id="AS-001")],
            holidays=[regular_holiday(christmas)],
        )
        result = engine.calculate(inputs, end_of_day(date(2025, 12, 31)))
        breakdown = result.breakdown
        assert {d.date: d for d in result.attendance}[christmas].holiday_eligible is True
        assert breakdown.amount_of(PayComponent.LEGAL_HOLIDAY) == Decimal("1000.00")
        assert breakdown.total_gross_pay == breakdown.basic_salary
        assert result.gross == breakdown.basic_salary

    def test_mid_period_evaluation(self, engine, rank_and_file, clock_entry, make_inputs):
        """Test days after "now" are not absences and earn nothing."""
        now = date(2025, 9, 5)
        entries = [clock_entry(day) for day in WEEKDAYS if day <= now and day != date(2025, 9, 3)]
        inputs = make_inputs(rank_and_file, SEPT_1, SEPT_15, clock_entries=entries)
        result = engine.calculate(inputs, end_of_day(now))
        by_date = {d.date: d for d in result.attendance}
        assert by_date[date(2025, 9, 10)].status is AttendanceStatus.NOT_APPLICABLE
        assert by_date[date(2025, 9, 10)].basic_hours == Decimal("0")
        assert result.base_pay.absences == 1
        assert result.breakdown.amount_of(PayComponent.REST_DAY) == Decimal("0")


class TestResolveToday:
    def test_aware_now_uses_payroll_timezone(self, engine):
        """Test 20:00 UTC on the 15th is already the 16th in Manila."""
        assert engine.resolve_today(datetime(2025, 9, 15, 20, 0, tzinfo=timezone.utc)) == date(2025, 9, 16)

    def test_naive_now_and_dates(self, engine):
        assert engine.resolve_today(datetime(2025, 9, 15, 23, 59)) == SEPT_15
        assert engine.resolve_today(SEPT_15) == SEPT_15


class TestIdempotence:
    def test_repeated_calculation_is_identical(self, engine, september_inputs):
        now = end_of_day(SEPT_15)
        first = engine.calculate(september_inputs, now, with_deductions=True)
        second = engine.calculate(september_inputs, now, with_deductions=True)
        assert first.calculation_id == second.calculation_id
        assert first.attendance == second.attendance
        assert first.breakdown.lines == second.breakdown.lines
        assert first.deductions.lines == second.deductions.lines

    def test_same_local_date_same_result(self, engine, september_inputs):
        morning = datetime(2025, 9, 15, 8, 0, tzinfo=MANILA)
        first = engine.calculate(september_inputs, morning)
        second = engine.calculate(september_inputs, end_of_day(SEPT_15))
        assert first.calculation_id == second.calculation_id


class TestBasicSalaryInvariant:
    @hypothesis_settings(max_examples=40, suppress_health_check=[HealthCheck.function_scoped_fixture])
    @given(
        worked=st.sets(st.sampled_from(WEEKDAYS)),
        rate=st.decimals(min_value=Decimal("400"), max_value=Decimal("3000"), places=2),
        classification=st.sampled_from(list(EmployeeClass)),
    )
    def test_basic_salary_matches_days_worked(self, engine, make_employee, make_inputs, worked, rate, classification):
        """Test basic salary always equals days worked times the daily rate."""
        employee = make_employee(classification, rate_per_day=str(rate))
        entries = [
            ClockEntry(
                entry_id=f"CE-{day}",
                employee_id=employee.employee_id,
                clock_in=datetime(day.year, day.month, day.day, 8, tzinfo=MANILA),
                clock_out=datetime(day.year, day.month, day.day, 17, tzinfo=MANILA),
                regular_hours=Decimal("8"),
            )
            for day in sorted(worked)
        ]
        inputs = make_inputs(employee, SEPT_1, SEPT_15, clock_entries=entries)
        result = engine.calculate(inputs, end_of_day(SEPT_15))
        breakdown = result.breakdown

        expected = (breakdown.days_worked * rate).quantize(Decimal("0.01"))
        assert breakdown.basic_salary == expected
        assert breakdown.days_worked * 8 >= result.base_pay.final_base_hours
        assert Decimal("0") <= result.base_pay.final_base_hours <= Decimal("104")


class TestCalculateMany:
    def test_failure_is_isolated(self, engine, september_inputs, make_employee, make_inputs):
        """Test one bad employee does not abort the batch."""
        broken_employee = make_employee(employee_id="EMP-BAD")
        broken = make_inputs(
            broken_employee,
            SEPT_1,
            SEPT_15,
            clock_entries=[
                ClockEntry(entry_id="CE-bad", employee_id="EMP-BAD", clock_in=None, regular_hours=Decimal("8"))
            ],
        )
        batch = engine.calculate_many([september_inputs, broken], end_of_day(SEPT_15))

        assert isinstance(batch, BatchCalculationResult)
        assert batch.error_count == 1
        assert batch.results["EMP-001"].success
        assert batch.total_gross == Decimal("11680.00")
        failed = batch.results["EMP-BAD"]
        assert not failed.success
        assert failed.breakdown is None
        assert failed.gross == Decimal("0")


class TestCalculationResultDataclass:
    def test_success_when_no_errors(self):
        result = CalculationResult(
            employee_id="EMP-001",
            calculation_id=None,
            period=PayPeriod(SEPT_1, SEPT_15),
            today=SEPT_15,
            attendance=[],
            base_pay=None,
            breakdown=None,
            deductions=None,
            warnings=["minor"],
            errors=[],
            inputs_fingerprint="",
        )
        assert result.success is True
        assert result.gross == Decimal("0")

    def test_settings_timezone_is_used(self):
        engine = PayrollEngine(
            settings=Settings(engine_version="x", timezone="UTC", working_days_per_month=22, log_level="INFO")
        )
        assert engine.resolve_today(datetime(2025, 9, 15, 20, 0, tzinfo=timezone.utc)) == SEPT_15
