"""Pay line builder with rounding and sign conventions."""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from ph_payroll.calculators.types import ZERO, LineGroup, LineType, PayComponent, PayLine

logger = logging.getLogger(__name__)


class LineItemBuilder:
    """Builds pay lines.

    Sign conventions:
    - EARNING: positive
    - DEDUCTION (employee): negative
    - TAX (employee): negative
    - EMPLOYER_TAX: positive (liability, excluded from net)

    Rounding: PHP to 2 decimals on every emitted line.
    """

    OUTPUT_PRECISION = Decimal("0.01")

    @staticmethod
    def round_to_cents(amount: Decimal) -> Decimal:
        """Round amount to 2 decimal places (centavos)."""
        return amount.quantize(LineItemBuilder.OUTPUT_PRECISION, rounding=ROUND_HALF_UP)

    @staticmethod
    def create_earning_line(
        component: PayComponent,
        group: LineGroup,
        amount: Decimal,
        hours: Decimal = ZERO,
        gross_amount: Decimal | None = None,
        explanation: str | None = None,
    ) -> PayLine:
        """Create an earning line (positive amount).

        ``gross_amount`` defaults to the full amount. Pass a smaller value
        when part of the amount is already paid through basic salary.
        """
        rounded = LineItemBuilder.round_to_cents(abs(amount))
        gross = rounded if gross_amount is None else LineItemBuilder.round_to_cents(abs(gross_amount))
        return PayLine(
            component=component,
            line_type=LineType.EARNING,
            group=group,
            amount=rounded,
            hours=hours,
            gross_amount=gross,
            explanation=explanation,
        )

    @staticmethod
    def create_display_line(
        component: PayComponent,
        amount: Decimal,
        hours: Decimal,
        explanation: str | None = None,
    ) -> PayLine:
        """Create a breakdown line whose pay is entirely inside basic salary."""
        return LineItemBuilder.create_earning_line(
            component,
            LineGroup.BREAKDOWN,
            amount,
            hours=hours,
            gross_amount=ZERO,
            explanation=explanation,
        )

    @staticmethod
    def create_basic_salary_line(amount: Decimal, days_worked: Decimal) -> PayLine:
        return PayLine(
            component=PayComponent.BASIC_SALARY,
            line_type=LineType.EARNING,
            group=LineGroup.BASIC,
            amount=LineItemBuilder.round_to_cents(abs(amount)),
            hours=days_worked * Decimal("8"),
            gross_amount=LineItemBuilder.round_to_cents(abs(amount)),
            explanation=f"{days_worked} day(s)",
        )

    @staticmethod
    def create_deduction_line(
        component: PayComponent,
        amount: Decimal,
        explanation: str | None = None,
    ) -> PayLine:
        """Create a deduction line (negative amount)."""
        rounded = -LineItemBuilder.round_to_cents(abs(amount))
        return PayLine(
            component=component,
            line_type=LineType.DEDUCTION,
            group=LineGroup.DEDUCTIONS,
            amount=rounded,
            gross_amount=ZERO,
            explanation=explanation,
        )

    @staticmethod
    def create_tax_line(
        component: PayComponent,
        amount: Decimal,
        explanation: str | None = None,
    ) -> PayLine:
        """Create an employee tax line (negative amount)."""
        return PayLine(
            component=component,
            line_type=LineType.TAX,
            group=LineGroup.DEDUCTIONS,
            amount=-LineItemBuilder.round_to_cents(abs(amount)),
            gross_amount=ZERO,
            explanation=explanation,
        )

    @staticmethod
    def create_employer_tax_line(
        component: PayComponent,
        amount: Decimal,
        explanation: str | None = None,
    ) -> PayLine:
        """Create an employer contribution line (positive amount, liability)."""
        return PayLine(
            component=component,
            line_type=LineType.EMPLOYER_TAX,
            group=LineGroup.DEDUCTIONS,
            amount=LineItemBuilder.round_to_cents(abs(amount)),
            gross_amount=ZERO,
            explanation=explanation,
        )

    @staticmethod
    def merge_lines(lines: Iterable[PayLine]) -> list[PayLine]:
        """Combine lines of the same component, keeping first-seen order."""
        merged: dict[PayComponent, PayLine] = {}
        for line in lines:
            existing = merged.get(line.component)
            merged[line.component] = line if existing is None else existing.combine(line)
        return list(merged.values())

    @staticmethod
    def calculate_gross(basic_salary: Decimal, lines: Iterable[PayLine]) -> Decimal:
        """GROSS = basic salary + Σ(gross portion of EARNING lines)."""
        gross = basic_salary
        for line in lines:
            if line.line_type is LineType.EARNING and line.component is not PayComponent.BASIC_SALARY:
                gross += line.gross_amount
        return LineItemBuilder.round_to_cents(gross)

    @staticmethod
    def calculate_net_from_lines(gross: Decimal, lines: Iterable[PayLine]) -> Decimal:
        """NET = gross + Σ(DEDUCTION) + Σ(TAX).

        EMPLOYER_TAX is excluded (it's a liability).
        """
        net = gross
        for line in lines:
            if line.line_type in (LineType.DEDUCTION, LineType.TAX):
                net += line.amount
        return LineItemBuilder.round_to_cents(net)

    @staticmethod
    def reconcile_basic_salary(component_total: Decimal, authoritative: Decimal) -> Decimal:
        """Return the authoritative basic salary, logging drift beyond a centavo."""
        diff = authoritative - LineItemBuilder.round_to_cents(component_total)
        if abs(diff) > LineItemBuilder.OUTPUT_PRECISION:
            logger.warning(
                "Basic salary components sum to %s, overridden by %s (drift %s)",
                component_total,
                authoritative,
                diff,
            )
        return authoritative

    @staticmethod
    def validate_line_signs(lines: Iterable[PayLine]) -> list[str]:
        """Validate that all lines have correct signs.

        Returns list of error messages (empty if all valid).
        """
        errors: list[str] = []

        for i, line in enumerate(lines):
            if line.line_type in (LineType.EARNING, LineType.EMPLOYER_TAX):
                if line.amount < 0:
                    errors.append(
                        f"Line {i} ({line.component.value}) has negative amount {line.amount}, expected positive"
                    )
            elif line.line_type in (LineType.DEDUCTION, LineType.TAX):
                if line.amount > 0:
                    errors.append(
                        f"Line {i} ({line.component.value}) has positive amount {line.amount}, expected negative"
                    )

        return errors

