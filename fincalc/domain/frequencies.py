"""Frequency lookup tables shared by the calculators."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Sequence, Tuple

CompoundingFrequency = Literal[
    "annually",
    "semiannually",
    "quarterly",
    "monthly",
    "semimonthly",
    "biweekly",
    "weekly",
    "daily",
]
GrowthCompoundingFrequency = Literal[
    "daily",
    "weekly",
    "monthly",
    "quarterly",
    "semiannually",
    "annually",
]
ContributionFrequency = Literal["none", "weekly", "monthly", "quarterly", "annually"]
PaymentFrequency = Literal["monthly", "biweekly", "weekly", "quarterly", "annually"]
Timing = Literal["beginning", "end"]


@dataclass(frozen=True)
class FrequencyOption:
    value: str
    label: str
    periods_per_year: int


# TVM solver table (includes semimonthly/biweekly)
COMPOUNDING_OPTIONS: Tuple[FrequencyOption, ...] = (
    FrequencyOption("annually", "Annually", 1),
    FrequencyOption("semiannually", "Semiannually", 2),
    FrequencyOption("quarterly", "Quarterly", 4),
    FrequencyOption("monthly", "Monthly", 12),
    FrequencyOption("semimonthly", "Semimonthly", 24),
    FrequencyOption("biweekly", "Bi-Weekly", 26),
    FrequencyOption("weekly", "Weekly", 52),
    FrequencyOption("daily", "Daily", 365),
)

# Growth projector table
GROWTH_COMPOUNDING_OPTIONS: Tuple[FrequencyOption, ...] = (
    FrequencyOption("daily", "Daily", 365),
    FrequencyOption("weekly", "Weekly", 52),
    FrequencyOption("monthly", "Monthly", 12),
    FrequencyOption("quarterly", "Quarterly", 4),
    FrequencyOption("semiannually", "Semiannually", 2),
    FrequencyOption("annually", "Annually", 1),
)

CONTRIBUTION_OPTIONS: Tuple[FrequencyOption, ...] = (
    FrequencyOption("none", "No Additional Contributions", 0),
    FrequencyOption("weekly", "Weekly", 52),
    FrequencyOption("monthly", "Monthly", 12),
    FrequencyOption("quarterly", "Quarterly", 4),
    FrequencyOption("annually", "Annually", 1),
)

PAYMENT_FREQUENCY_OPTIONS: Tuple[FrequencyOption, ...] = (
    FrequencyOption("monthly", "Monthly", 12),
    FrequencyOption("biweekly", "Bi-weekly", 26),
    FrequencyOption("weekly", "Weekly", 52),
    FrequencyOption("quarterly", "Quarterly", 4),
    FrequencyOption("annually", "Annually", 1),
)

TIMING_OPTIONS: Tuple[Tuple[str, str], ...] = (
    ("beginning", "Beginning of Period"),
    ("end", "End of Period"),
)


def _lookup(options: Sequence[FrequencyOption], value: str, default: int) -> int:
    for option in options:
        if option.value == value:
            return option.periods_per_year
    return default


def get_periods_per_year(frequency: str) -> int:
    """Compounding periods per year for the TVM solver; unknown tags fall back to monthly."""
    return _lookup(COMPOUNDING_OPTIONS, frequency, 12)


def get_compounding_periods_per_year(frequency: str) -> int:
    """Compounding periods per year for the growth projector; unknown tags fall back to monthly."""
    return _lookup(GROWTH_COMPOUNDING_OPTIONS, frequency, 12)


def get_contribution_periods_per_year(frequency: str) -> int:
    return _lookup(CONTRIBUTION_OPTIONS, frequency, 0)


def get_payments_per_year(frequency: str) -> int:
    return _lookup(PAYMENT_FREQUENCY_OPTIONS, frequency, 12)


__all__ = [
    "CompoundingFrequency",
    "GrowthCompoundingFrequency",
    "ContributionFrequency",
    "PaymentFrequency",
    "Timing",
    "FrequencyOption",
    "COMPOUNDING_OPTIONS",
    "GROWTH_COMPOUNDING_OPTIONS",
    "CONTRIBUTION_OPTIONS",
    "PAYMENT_FREQUENCY_OPTIONS",
    "TIMING_OPTIONS",
    "get_periods_per_year",
    "get_compounding_periods_per_year",
    "get_contribution_periods_per_year",
    "get_payments_per_year",
]
