"""Compound growth of a principal with optional recurring contributions."""

from __future__ import annotations

import logging
import math
from typing import Callable, List, Sequence, Tuple

from fincalc.core.numeric import ieee_div, ieee_log, ieee_pow
from fincalc.domain.frequencies import (
    get_compounding_periods_per_year,
    get_contribution_periods_per_year,
)
from fincalc.models import CompoundInterestInputs, CompoundInterestResult, YearlyBreakdown

logger = logging.getLogger(__name__)

TARGET_TOLERANCE = 0.01
TARGET_SEARCH_STEP_YEARS = 0.5
TARGET_SEARCH_MAX_YEARS = 100.0
TARGET_REFINE_ITERATIONS = 20


def _grow(
    principal: float,
    annual_rate: float,
    periods_per_year: int,
    contribution_periods: int,
    additional_contributions: float,
    years: float,
    timing: str,
) -> Tuple[float, float]:
    """Closed-form balance after ``years``. Returns (final_amount, total_contributions)."""
    rate = annual_rate / 100 / periods_per_year
    total_periods = periods_per_year * years

    principal_growth = principal * ieee_pow(1 + rate, total_periods)

    contributions_growth = 0.0
    total_contributions = 0.0
    if contribution_periods > 0 and additional_contributions > 0:
        total_contributions = additional_contributions * contribution_periods * years
        # spread each year's contributions evenly over the compounding periods
        per_period = additional_contributions * contribution_periods / periods_per_year

        if rate == 0:
            contributions_growth = total_contributions
        else:
            annuity_factor = ieee_div(ieee_pow(1 + rate, total_periods) - 1, rate)
            contributions_growth = per_period * annuity_factor
            if timing == "beginning":
                contributions_growth *= 1 + rate

    return principal_growth + contributions_growth, total_contributions


def _whole_years(years: float) -> int:
    if not math.isfinite(years) or years < 1:
        return 0
    return int(years)


def calculate_compound_interest(inputs: CompoundInterestInputs) -> CompoundInterestResult:
    """
    A = P(1 + r/n)^(nt) + PMT * [((1 + r/n)^(nt) - 1) / (r/n)]

    PMT is the contribution converted to one compounding period; contributions
    made at the beginning of a period earn one extra period of interest.
    """
    n = get_compounding_periods_per_year(inputs.compounding_frequency)
    final_amount, total_contributions = _grow(
        principal=inputs.principal,
        annual_rate=inputs.annual_rate,
        periods_per_year=n,
        contribution_periods=get_contribution_periods_per_year(inputs.contribution_frequency),
        additional_contributions=inputs.additional_contributions,
        years=inputs.time_in_years,
        timing=inputs.contribution_timing,
    )

    rate = inputs.annual_rate / 100
    effective_annual_rate = 0.0 if rate == 0 else (ieee_pow(1 + rate / n, n) - 1) * 100

    return CompoundInterestResult(
        principal=inputs.principal,
        total_contributions=total_contributions,
        total_interest_earned=final_amount - inputs.principal - total_contributions,
        final_amount=final_amount,
        effective_annual_rate=effective_annual_rate,
        yearly_breakdown=generate_yearly_breakdown(inputs),
    )


def generate_yearly_breakdown(inputs: CompoundInterestInputs) -> List[YearlyBreakdown]:
    """
    Simulate every compounding period and summarise each whole year.

    Order of operations per period:
      - beginning timing: add the contribution, then accrue interest on the new balance
      - end timing: accrue interest, then add the contribution

    A fractional final year is not reported.
    """
    n = get_compounding_periods_per_year(inputs.compounding_frequency)
    contribution_periods = get_contribution_periods_per_year(inputs.contribution_frequency)
    rate = inputs.annual_rate / 100 / n
    per_period = (
        inputs.additional_contributions * contribution_periods / n if contribution_periods > 0 else 0.0
    )
    beginning = inputs.contribution_timing == "beginning"

    balance = inputs.principal
    rows: List[YearlyBreakdown] = []
    for year in range(1, _whole_years(inputs.time_in_years) + 1):
        starting = balance
        contributed = 0.0
        interest = 0.0

        for _ in range(n):
            if beginning and per_period > 0:
                balance += per_period
                contributed += per_period

            period_interest = balance * rate
            balance += period_interest
            interest += period_interest

            if not beginning and per_period > 0:
                balance += per_period
                contributed += per_period

        rows.append(
            YearlyBreakdown(
                year=year,
                starting_balance=starting,
                contributions=contributed,
                interest_earned=interest,
                ending_balance=balance,
            )
        )

    return rows


def _time_to_target_lump_sum(principal: float, target_amount: float, annual_rate: float, n: int) -> float:
    rate = annual_rate / 100
    if rate == 0:
        # principal alone never grows
        return math.inf
    return ieee_div(ieee_log(ieee_div(target_amount, principal)), n * ieee_log(1 + rate / n))


def calculate_time_to_target(
    principal: float,
    target_amount: float,
    annual_rate: float,
    compounding_frequency: str,
    additional_contributions: float = 0,
    contribution_frequency: str = "none",
) -> float:
    """
    Years needed for the balance to reach ``target_amount``.

    Without contributions this is closed form. With end-of-period
    contributions, step forward half a year at a time until the balance
    overshoots, then bisect inside that half-year. Gives up at 100 years.
    """
    if target_amount <= principal:
        return 0.0

    n = get_compounding_periods_per_year(compounding_frequency)
    contribution_periods = get_contribution_periods_per_year(contribution_frequency)
    if contribution_periods == 0 or additional_contributions == 0:
        return _time_to_target_lump_sum(principal, target_amount, annual_rate, n)

    def final_amount(years: float) -> float:
        amount, _ = _grow(
            principal, annual_rate, n, contribution_periods, additional_contributions, years, "end"
        )
        return amount

    years = TARGET_SEARCH_STEP_YEARS
    while years <= TARGET_SEARCH_MAX_YEARS:
        amount = final_amount(years)
        if abs(amount - target_amount) < TARGET_TOLERANCE:
            return years
        if amount > target_amount:
            return _refine_time_to_target(final_amount, target_amount, years - TARGET_SEARCH_STEP_YEARS, years)
        years += TARGET_SEARCH_STEP_YEARS

    logger.debug("target %.2f not reached within %.0f years", target_amount, TARGET_SEARCH_MAX_YEARS)
    return TARGET_SEARCH_MAX_YEARS


def _refine_time_to_target(
    final_amount: Callable[[float], float], target_amount: float, low: float, high: float
) -> float:
    for _ in range(TARGET_REFINE_ITERATIONS):
        mid = (low + high) / 2
        amount = final_amount(mid)
        if abs(amount - target_amount) < TARGET_TOLERANCE:
            return mid
        if amount < target_amount:
            low = mid
        else:
            high = mid
    return (low + high) / 2


def calculate_required_contribution(
    principal: float,
    target_amount: float,
    annual_rate: float,
    time_in_years: float,
    compounding_frequency: str,
    contribution_frequency: str,
    contribution_timing: str = "end",
) -> float:
    """
    Contribution per ``contribution_frequency`` period needed to reach the target.

    Whatever the principal grows to on its own is subtracted first; the rest
    comes from inverting the annuity formula. Returns 0 when no contribution is
    needed or none can be made.
    """
    if time_in_years <= 0:
        return 0.0

    n = get_compounding_periods_per_year(compounding_frequency)
    contribution_periods = get_contribution_periods_per_year(contribution_frequency)
    if contribution_periods == 0:
        return 0.0

    rate = annual_rate / 100 / n
    total_periods = n * time_in_years

    principal_fv = principal * ieee_pow(1 + rate, total_periods)
    needed = target_amount - principal_fv
    if needed <= 0:
        return 0.0

    if rate == 0:
        return needed / (contribution_periods * time_in_years)

    annuity_factor = ieee_div(ieee_pow(1 + rate, total_periods) - 1, rate)
    per_compounding_period = ieee_div(needed, annuity_factor)
    if contribution_timing == "beginning":
        per_compounding_period = ieee_div(per_compounding_period, 1 + rate)

    return per_compounding_period / (contribution_periods / n)


def compare_scenarios(scenarios: Sequence[CompoundInterestInputs]) -> List[CompoundInterestResult]:
    return [calculate_compound_interest(scenario) for scenario in scenarios]


__all__ = [
    "calculate_compound_interest",
    "generate_yearly_breakdown",
    "calculate_time_to_target",
    "calculate_required_contribution",
    "compare_scenarios",
]
