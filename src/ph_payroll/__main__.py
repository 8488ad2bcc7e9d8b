"""Entry point for running the payroll CLI."""

from ph_payroll.cli import main

if __name__ == "__main__":
    main()
