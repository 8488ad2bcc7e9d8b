"""Tests for statutory deductions and withholding tax."""

from datetime import date
from decimal import Decimal

import pytest

from ph_payroll.calculators.deductions import DeductionCalculator
from ph_payroll.calculators.periods import PayPeriod
from ph_payroll.calculators.types import LineType, PayComponent

FIRST_CUTOFF = PayPeriod(date(2025, 9, 1), date(2025, 9, 15))
SECOND_CUTOFF = PayPeriod(date(2025, 9, 16), date(2025, 9, 30))


@pytest.fixture
def calculator() -> DeductionCalculator:
    return DeductionCalculator(working_days_per_month=22)


class TestContributions:
    """Test SSS, PhilHealth and Pag-IBIG."""

    def test_rank_and_file_contributions(self, calculator):
        monthly = calculator.monthly_salary(Decimal("800"))
        assert monthly == Decimal("17600.00")

        sss = calculator.sss(monthly)
        assert sss.salary_credit == Decimal("17500")
        assert sss.employee_share == Decimal("875.00")
        assert sss.employer_share == Decimal("1750.00")
        assert sss.wisp_credit == Decimal("0")

        assert calculator.philhealth(monthly).employee_share == Decimal("440.00")
        assert calculator.pagibig(monthly).employee_share == Decimal("200.00")

    @pytest.mark.parametrize(
        "monthly,credit",
        [
            ("3000", "5000"),
            ("5249.99", "5000"),
            ("5250", "5500"),
            ("5749.99", "5500"),
            ("5750", "6000"),
            ("34749.99", "34500"),
            ("34750", "35000"),
            ("90000", "35000"),
        ],
    )
    def test_salary_credit_edges(self, monthly, credit):
        assert DeductionCalculator.sss_salary_credit(Decimal(monthly)) == Decimal(credit)

    def test_wisp_portion(self, calculator):
        """Test shares are charged on the whole credit, WISP part included."""
        sss = calculator.sss(calculator.monthly_salary(Decimal("1500")))
        assert sss.salary_credit == Decimal("33000")
        assert sss.wisp_credit == Decimal("13000")
        assert sss.employee_share == Decimal("1650.00")
        assert sss.employer_share == Decimal("3300.00")

    def test_invalid_working_days(self):
        with pytest.raises(ValueError):
            DeductionCalculator(working_days_per_month=0)


class TestWithholdingTax:
    @pytest.mark.parametrize(
        "taxable,tax",
        [
            ("0", "0.00"),
            ("-500", "0.00"),
            ("20833", "0.00"),
            ("21845", "151.80"),
            ("33332", "1874.85"),
            ("50000", "5208.40"),
            ("100000", "16875.05"),
            ("1000000", "300208.35"),
        ],
    )
    def test_monthly_table(self, taxable, tax):
        assert DeductionCalculator.withholding_tax(Decimal(taxable)) == Decimal(tax)


class TestCutoffDeductions:
    """Test deduction lines and net pay per cutoff."""

    def test_first_cutoff_has_no_tax(self, calculator):
        result = calculator.calculate(Decimal("800"), FIRST_CUTOFF, Decimal("11680.00"))
        amounts = {line.component: line.amount for line in result.lines}

        assert amounts[PayComponent.SSS] == Decimal("-437.50")
        assert amounts[PayComponent.PHILHEALTH] == Decimal("-220.00")
        assert amounts[PayComponent.PAGIBIG] == Decimal("-100.00")
        assert amounts[PayComponent.SSS_EMPLOYER] == Decimal("875.00")
        assert PayComponent.WITHHOLDING_TAX not in amounts
        assert result.withholding_tax == Decimal("0")
        assert result.net_pay == Decimal("10922.50")
        assert result.total_employee_deductions == Decimal("757.50")

    def test_second_cutoff_withholds_monthly_tax(self, calculator):
        result = calculator.calculate(
            Decimal("800"),
            SECOND_CUTOFF,
            Decimal("11680.00"),
            prior_cutoff_gross=Decimal("11680.00"),
        )
        assert result.withholding_tax == Decimal("151.80")
        tax_lines = [line for line in result.lines if line.line_type is LineType.TAX]
        assert len(tax_lines) == 1
        assert tax_lines[0].amount == Decimal("-151.80")
        assert result.net_pay == Decimal("10770.70")

    def test_employer_shares_excluded_from_net(self, calculator):
        result = calculator.calculate(Decimal("800"), FIRST_CUTOFF, Decimal("10000"))
        employer = [line for line in result.lines if line.line_type is LineType.EMPLOYER_TAX]
        assert all(line.amount > 0 for line in employer)
        assert result.net_pay == Decimal("10000") - result.total_employee_deductions

    def test_other_deductions(self, calculator):
        result = calculator.calculate(
            Decimal("800"),
            FIRST_CUTOFF,
            Decimal("11680.00"),
            other_deductions={"Uniform": Decimal("150"), "Cash advance": Decimal("500"), "Nothing": Decimal("0")},
        )
        others = [line for line in result.lines if line.component is PayComponent.OTHER_DEDUCTION]
        assert [line.explanation for line in others] == ["Cash advance", "Uniform"]
        assert result.net_pay == Decimal("10272.50")
