"""Government contributions and withholding tax for a bi-monthly payslip.

Monthly figures follow the 2025 SSS, PhilHealth and Pag-IBIG schedules
and the BIR monthly withholding table effective January 1, 2023. Each
cutoff deducts half of the monthly contributions; withholding tax for the
whole month is deducted on the second cutoff only.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import ROUND_FLOOR, Decimal
from typing import Mapping

from ph_payroll.calculators.line_builder import LineItemBuilder
from ph_payroll.calculators.periods import PayPeriod
from ph_payroll.calculators.types import ZERO, PayComponent, PayLine

logger = logging.getLogger(__name__)

SSS_MIN_MSC = Decimal("5000")
SSS_MAX_MSC = Decimal("35000")
SSS_MSC_STEP = Decimal("500")
SSS_WISP_THRESHOLD = Decimal("20000")
SSS_EMPLOYEE_RATE = Decimal("0.05")
SSS_EMPLOYER_RATE = Decimal("0.10")

PHILHEALTH_EMPLOYEE_RATE = Decimal("0.025")
PHILHEALTH_EMPLOYER_RATE = Decimal("0.025")

PAGIBIG_MONTHLY_EMPLOYEE = Decimal("200.00")


@dataclass(frozen=True)
class TaxBracket:
    """One row of the BIR monthly withholding table."""

    max_amount: Decimal | None  # None = no upper limit
    flat_amount: Decimal
    rate: Decimal
    over: Decimal


BIR_MONTHLY_TABLE: tuple[TaxBracket, ...] = (
    TaxBracket(Decimal("20833"), Decimal("0"), Decimal("0"), Decimal("0")),
    TaxBracket(Decimal("33332"), Decimal("0"), Decimal("0.15"), Decimal("20833")),
    TaxBracket(Decimal("66666"), Decimal("1875.00"), Decimal("0.20"), Decimal("33333")),
    TaxBracket(Decimal("166666"), Decimal("8541.80"), Decimal("0.25"), Decimal("66667")),
    TaxBracket(Decimal("666666"), Decimal("33541.80"), Decimal("0.30"), Decimal("166667")),
    TaxBracket(None, Decimal("183541.80"), Decimal("0.35"), Decimal("666667")),
)


@dataclass(frozen=True)
class Contribution:
    """Monthly employee and employer shares of one agency's contribution."""

    employee_share: Decimal
    employer_share: Decimal
    salary_credit: Decimal = ZERO
    wisp_credit: Decimal = ZERO


@dataclass
class DeductionResult:
    """Deductions for one cutoff."""

    monthly_salary: Decimal
    sss: Contribution
    philhealth: Contribution
    pagibig: Contribution
    withholding_tax: Decimal
    lines: list[PayLine] = field(default_factory=list)
    net_pay: Decimal = ZERO

    @property
    def total_employee_deductions(self) -> Decimal:
        return -sum((ln.amount for ln in self.lines if ln.amount < 0), ZERO)


class DeductionCalculator:
    """Computes statutory deductions from the daily rate and gross pay."""

    def __init__(self, working_days_per_month: int = 22):
        if working_days_per_month <= 0:
            raise ValueError("working_days_per_month must be positive")
        self.working_days_per_month = working_days_per_month

    def monthly_salary(self, rate_per_day: Decimal) -> Decimal:
        return LineItemBuilder.round_to_cents(rate_per_day * self.working_days_per_month)

    @staticmethod
    def sss_salary_credit(monthly_salary: Decimal) -> Decimal:
        """Monthly salary credit: ranges of 500 centred on each credit."""
        if monthly_salary < SSS_MIN_MSC + SSS_MSC_STEP / 2:
            return SSS_MIN_MSC
        if monthly_salary >= SSS_MAX_MSC - SSS_MSC_STEP / 2:
            return SSS_MAX_MSC
        steps = ((monthly_salary - SSS_MIN_MSC - SSS_MSC_STEP / 2) / SSS_MSC_STEP).to_integral_value(
            rounding=ROUND_FLOOR
        )
        return SSS_MIN_MSC + SSS_MSC_STEP * (steps + 1)

    def sss(self, monthly_salary: Decimal) -> Contribution:
        """SSS on the full salary credit.

        Both shares are charged on the whole credit; ``wisp_credit`` reports
        the part above 20,000 that goes to the WISP provident fund.
        """
        msc = self.sss_salary_credit(monthly_salary)
        return Contribution(
            employee_share=LineItemBuilder.round_to_cents(msc * SSS_EMPLOYEE_RATE),
            employer_share=LineItemBuilder.round_to_cents(msc * SSS_EMPLOYER_RATE),
            salary_credit=msc,
            wisp_credit=max(msc - SSS_WISP_THRESHOLD, ZERO),
        )

    def philhealth(self, monthly_salary: Decimal) -> Contribution:
        salary = max(monthly_salary, ZERO)
        return Contribution(
            employee_share=LineItemBuilder.round_to_cents(salary * PHILHEALTH_EMPLOYEE_RATE),
            employer_share=LineItemBuilder.round_to_cents(salary * PHILHEALTH_EMPLOYER_RATE),
        )

    def pagibig(self, monthly_salary: Decimal) -> Contribution:
        return Contribution(employee_share=PAGIBIG_MONTHLY_EMPLOYEE, employer_share=ZERO)

    @staticmethod
    def withholding_tax(monthly_taxable_income: Decimal) -> Decimal:
        """Monthly withholding tax from the BIR table."""
        taxable = max(monthly_taxable_income, ZERO)
        for bracket in BIR_MONTHLY_TABLE:
            if bracket.max_amount is None or taxable <= bracket.max_amount:
                excess = max(taxable - bracket.over, ZERO)
                return LineItemBuilder.round_to_cents(bracket.flat_amount + excess * bracket.rate)
        return ZERO

    def calculate(
        self,
        rate_per_day: Decimal,
        period: PayPeriod,
        gross_pay: Decimal,
        prior_cutoff_gross: Decimal = ZERO,
        other_deductions: Mapping[str, Decimal] | None = None,
    ) -> DeductionResult:
        """Deductions and net pay for one cutoff.

        ``prior_cutoff_gross`` is the first cutoff's gross for the same
        month, needed only on the second cutoff to compute monthly
        taxable income.
        """
        monthly = self.monthly_salary(rate_per_day)
        sss = self.sss(monthly)
        philhealth = self.philhealth(monthly)
        pagibig = self.pagibig(monthly)

        half = Decimal("2")
        lines: list[PayLine] = [
            LineItemBuilder.create_deduction_line(PayComponent.SSS, sss.employee_share / half, "SSS"),
            LineItemBuilder.create_deduction_line(
                PayComponent.PHILHEALTH, philhealth.employee_share / half, "PhilHealth"
            ),
            LineItemBuilder.create_deduction_line(PayComponent.PAGIBIG, pagibig.employee_share / half, "Pag-IBIG"),
            LineItemBuilder.create_employer_tax_line(
                PayComponent.SSS_EMPLOYER, sss.employer_share / half, "SSS employer share"
            ),
            LineItemBuilder.create_employer_tax_line(
                PayComponent.PHILHEALTH_EMPLOYER, philhealth.employer_share / half, "PhilHealth employer share"
            ),
        ]

        tax = ZERO
        if period.is_second_cutoff:
            contributions = sss.employee_share + philhealth.employee_share + pagibig.employee_share
            taxable = prior_cutoff_gross + gross_pay - contributions
            tax = self.withholding_tax(taxable)
            if tax > 0:
                lines.append(
                    LineItemBuilder.create_tax_line(PayComponent.WITHHOLDING_TAX, tax, "Withholding tax")
                )

        for name, amount in sorted((other_deductions or {}).items()):
            if amount:
                lines.append(LineItemBuilder.create_deduction_line(PayComponent.OTHER_DEDUCTION, amount, name))

        errors = LineItemBuilder.validate_line_signs(lines)
        if errors:
            raise ValueError("; ".join(errors))

        net_pay = LineItemBuilder.calculate_net_from_lines(gross_pay, lines)
        logger.debug("Deductions for period %s: net %s from gross %s", period.label(), net_pay, gross_pay)
        return DeductionResult(
            monthly_salary=monthly,
            sss=sss,
            philhealth=philhealth,
            pagibig=pagibig,
            withholding_tax=tax,
            lines=lines,
            net_pay=net_pay,
        )
