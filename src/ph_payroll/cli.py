"""Payroll Command Line Interface.

Provides:
- Period lookup for a date
- Attendance and pay computation from a JSON payload

Usage:
    python -m ph_payroll period --date 2026-01-20
    python -m ph_payroll compute --input payload.json --now 2026-01-31T18:00:00+08:00
    python -m ph_payroll compute --input payload.json --with-deductions --summary
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date, datetime
from pathlib import Path
from typing import Callable

from pydantic import ValidationError

from ph_payroll.calculators.engine import PayrollEngine
from ph_payroll.calculators.periods import format_period, period_for
from ph_payroll.config import get_settings
from ph_payroll.schemas import CalculationResponse, PayrollRequest

logger = logging.getLogger(__name__)


def parse_date(s: str) -> date:
    """Parse ISO date string."""
    return date.fromisoformat(s)


def parse_datetime(s: str) -> datetime:
    """Parse ISO datetime string."""
    return datetime.fromisoformat(s.replace("Z", "+00:00"))


class PayrollCli:
    """Payroll Command Line Interface."""

    def __init__(self, engine: PayrollEngine | None = None) -> None:
        self.engine = engine
        self.parser = self._build_parser()

    def _build_parser(self) -> argparse.ArgumentParser:
        """Build argument parser."""
        parser = argparse.ArgumentParser(
            prog="python -m ph_payroll",
            description="Philippine bi-monthly attendance and payroll engine",
        )
        parser.add_argument(
            "--log-level",
            type=str,
            help="Logging level (default: PAYROLL_LOG_LEVEL or WARNING)",
        )
        subparsers = parser.add_subparsers(dest="command", help="Commands")

        # period command
        period = subparsers.add_parser(
            "period",
            help="Show the bi-monthly period containing a date",
        )
        period.add_argument(
            "--date",
            type=parse_date,
            default=None,
            help="Date to look up (ISO format, default: today)",
        )

        # compute command
        compute = subparsers.add_parser(
            "compute",
            help="Compute attendance and pay from a JSON payload",
        )
        compute.add_argument(
            "--input",
            type=Path,
            required=True,
            help="Path to the JSON request payload ('-' for stdin)",
        )
        compute.add_argument(
            "--now",
            type=parse_datetime,
            default=None,
            help="Evaluation instant (ISO format, default: current time)",
        )
        compute.add_argument(
            "--with-deductions",
            action="store_true",
            help="Also compute government deductions and net pay",
        )
        compute.add_argument(
            "--summary",
            action="store_true",
            help="Print a short text summary instead of JSON",
        )

        return parser

    def run(self, args: list[str] | None = None) -> int:
        """Run the CLI with given arguments."""
        parsed = self.parser.parse_args(args)

        settings = get_settings()
        logging.basicConfig(
            level=(parsed.log_level or settings.log_level).upper(),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

        if not parsed.command:
            self.parser.print_help()
            return 1

        handlers: dict[str, Callable[[argparse.Namespace], int]] = {
            "period": self._cmd_period,
            "compute": self._cmd_compute,
        }
        return handlers[parsed.command](parsed)

    def _cmd_period(self, args: argparse.Namespace) -> int:
        """Print the period containing a date."""
        period = period_for(args.date or date.today())
        print(
            json.dumps(
                {
                    "start": period.start.isoformat(),
                    "end": period.end.isoformat(),
                    "label": format_period(period),
                    "days": [d.isoformat() for d in period.days()],
                },
                indent=2,
            )
        )
        return 0

    def _cmd_compute(self, args: argparse.Namespace) -> int:
        """Compute one employee's period."""
        try:
            raw = sys.stdin.read() if str(args.input) == "-" else args.input.read_text()
            request = PayrollRequest.model_validate_json(raw)
        except OSError as e:
            print(f"Cannot read {args.input}: {e}", file=sys.stderr)
            return 1
        except ValidationError as e:
            print(f"Invalid payload:\n{e}", file=sys.stderr)
            return 1

        engine = self.engine or PayrollEngine()
        now = args.now or datetime.now(tz=engine.tz)
        result = engine.calculate(request.to_inputs(engine.rules), now, with_deductions=args.with_deductions)
        response = CalculationResponse.from_result(result)

        if args.summary:
            self._print_summary(response)
        else:
            print(response.model_dump_json(indent=2))
        return 0 if result.success else 1

    def _print_summary(self, response: CalculationResponse) -> None:
        print(f"Employee: {response.employee_id}")
        print(f"Period:   {response.period_label}")
        print("=" * 40)
        if response.breakdown is not None:
            breakdown = response.breakdown
            print(f"Days worked:  {breakdown.days_worked}")
            print(f"Basic salary: {breakdown.basic_salary}")
            for line in breakdown.lines[1:]:
                print(f"  {line.component.value:<32} {line.hours:>7} h  {line.amount:>10}")
            print(f"Gross pay:    {breakdown.total_gross_pay}")
        if response.deductions is not None:
            for line in response.deductions.lines:
                print(f"  {line.component.value:<32} {line.amount:>10}")
            print(f"Net pay:      {response.deductions.net_pay}")
        for warning in response.warnings:
            print(f"WARNING: {warning}")


def main() -> None:
    """Main entry point."""
    cli = PayrollCli()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
