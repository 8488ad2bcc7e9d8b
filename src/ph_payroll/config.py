"""Configuration management for the payroll engine."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from functools import lru_cache
from types import MappingProxyType
from typing import Mapping

from dotenv import load_dotenv


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment."""

    engine_version: str
    timezone: str
    working_days_per_month: int
    log_level: str

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from environment variables."""
        load_dotenv()

        return cls(
            engine_version=os.getenv("PAYROLL_ENGINE_VERSION", "1.0.0"),
            timezone=os.getenv("PAYROLL_TIMEZONE", "Asia/Manila"),
            working_days_per_month=int(os.getenv("PAYROLL_WORKING_DAYS_PER_MONTH", "22")),
            log_level=os.getenv("PAYROLL_LOG_LEVEL", "WARNING").upper(),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings.from_env()


@dataclass(frozen=True)
class AllowanceTier:
    """Flat allowance paid once overtime hours reach a threshold."""

    min_hours: Decimal
    amount: Decimal


@dataclass(frozen=True)
class PayRules:
    """
    Statutory constants and company policy used by the calculators.

    Attributes:
        multipliers: Premium multipliers for the rank-and-file class, keyed
            by name (regular, regular_ot, rest_day, special_holiday,
            regular_holiday, rest_day_special_holiday,
            rest_day_regular_holiday, ot_premium, night_diff).
        ot_allowance_min_hours: Minimum OT hours before any flat allowance.
        ot_allowance_base: Allowance paid at the minimum.
        ot_allowance_per_hour: Added for every hour beyond the minimum.
        holiday_allowance_tiers: Threshold table for overtime hours on a
            holiday or rest day, checked highest first.
        base_hours: Guaranteed hours for a full bi-monthly period.
        lookback_days: How far back holiday eligibility searches for the
            last scheduled working day.
        basic_hours_corrections: Dated overrides of basic hours for days
            without clock entries. Empty unless configured.
    """

    multipliers: Mapping[str, Decimal] = field(
        default_factory=lambda: MappingProxyType(
            {
                "regular": Decimal("1.0"),
                "regular_ot": Decimal("1.25"),
                "rest_day": Decimal("1.3"),
                "special_holiday": Decimal("1.3"),
                "regular_holiday": Decimal("2.0"),
                "rest_day_special_holiday": Decimal("1.5"),
                "rest_day_regular_holiday": Decimal("2.6"),
                "ot_premium": Decimal("1.3"),
                "night_diff": Decimal("0.1"),
            }
        )
    )
    ot_allowance_min_hours: Decimal = Decimal("2")
    ot_allowance_base: Decimal = Decimal("200")
    ot_allowance_per_hour: Decimal = Decimal("100")
    holiday_allowance_tiers: tuple[AllowanceTier, ...] = (
        AllowanceTier(min_hours=Decimal("8"), amount=Decimal("700")),
        AllowanceTier(min_hours=Decimal("4"), amount=Decimal("350")),
    )
    base_hours: Decimal = Decimal("104")
    hours_per_day: Decimal = Decimal("8")
    lookback_days: int = 7
    valid_clock_statuses: frozenset[str] = frozenset(
        {"auto_approved", "approved", "clocked_out", "clocked_in"}
    )
    approved_leave_statuses: frozenset[str] = frozenset({"approved", "approved_by_hr"})
    approved_overtime_statuses: frozenset[str] = frozenset({"approved"})
    supervisory_titles: tuple[str, ...] = (
        "PAYROLL SUPERVISOR",
        "ACCOUNT RECEIVABLE SUPERVISOR",
        "HR OPERATIONS SUPERVISOR",
        "HR SUPERVISOR",
    )
    managerial_job_levels: tuple[str, ...] = ("MANAGERIAL",)
    account_supervisor_title: str = "ACCOUNT SUPERVISOR"
    client_based_type: str = "client-based"
    basic_hours_corrections: Mapping[date, Decimal] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def __post_init__(self) -> None:
        missing = {
            "regular",
            "regular_ot",
            "rest_day",
            "special_holiday",
            "regular_holiday",
            "rest_day_special_holiday",
            "rest_day_regular_holiday",
            "ot_premium",
            "night_diff",
        } - set(self.multipliers)
        if missing:
            raise ValueError(f"multipliers missing keys: {sorted(missing)}")
        if self.base_hours <= 0 or self.hours_per_day <= 0:
            raise ValueError("base_hours and hours_per_day must be positive")
        if self.lookback_days < 1:
            raise ValueError("lookback_days must be at least 1")
        thresholds = [t.min_hours for t in self.holiday_allowance_tiers]
        if thresholds != sorted(thresholds, reverse=True):
            raise ValueError("holiday_allowance_tiers must be ordered highest threshold first")

    def multiplier(self, name: str) -> Decimal:
        return self.multipliers[name]


DEFAULT_PAY_RULES = PayRules()
