"""Time-value-of-money solver.

Given four of present value, future value, payment, annual rate and number of
periods, solve for the fifth. ``periods`` always counts compounding periods,
not years, and the annual rate is a percentage.

Sign convention: cash flows keep the sign the caller gives them. A payment of
-100 is an outflow and produces a negative future value.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Union

from fincalc.core.numeric import clamp, ieee_div, ieee_log, ieee_pow
from fincalc.domain.frequencies import get_periods_per_year
from fincalc.models import TVMInputs, TVMResult

logger = logging.getLogger(__name__)

RATE_INITIAL_GUESS = 0.10
RATE_DELTA = 0.0001
RATE_TOLERANCE = 0.0001
RATE_MAX_ITERATIONS = 100
RATE_BOUNDS = (-0.99, 10.0)

PERIODS_TOLERANCE = 0.01
PERIODS_MAX_ITERATIONS = 1000
PERIODS_BOUNDS = (0.1, 1000.0)


class TVMCalculationMode(str, Enum):
    PRESENT_VALUE = "present_value"
    FUTURE_VALUE = "future_value"
    PAYMENT = "payment"
    ANNUAL_RATE = "annual_rate"
    PERIODS = "periods"


class CalculationModeError(ValueError):
    """Raised when ``calculate_tvm`` is asked to solve for something it does not know."""

    def __init__(self, mode: object):
        super().__init__(f"Invalid calculation mode: {mode}")
        self.mode = mode


def _rate_per_period(inputs: TVMInputs) -> float:
    n = get_periods_per_year(inputs.compounding_frequency)
    return inputs.annual_rate / 100 / n


def calculate_present_value(inputs: TVMInputs) -> float:
    """PV = FV / (1+i)^n - PMT * [((1+i)^n - 1) / i] / (1+i)^n"""
    rate = _rate_per_period(inputs)
    periods = inputs.periods

    if rate == 0:
        return inputs.future_value - inputs.payment * periods

    compound_factor = ieee_pow(1 + rate, periods)
    annuity_factor = ieee_div(compound_factor - 1, rate)

    pv = ieee_div(inputs.future_value, compound_factor)
    if inputs.payment != 0:
        annuity_pv = ieee_div(inputs.payment * annuity_factor, compound_factor)
        if inputs.payment_timing == "beginning":
            annuity_pv *= 1 + rate
        pv -= annuity_pv

    return pv


def calculate_future_value(inputs: TVMInputs) -> float:
    """FV = PV * (1+i)^n + PMT * [((1+i)^n - 1) / i]"""
    rate = _rate_per_period(inputs)
    periods = inputs.periods

    if rate == 0:
        return inputs.present_value + inputs.payment * periods

    compound_factor = ieee_pow(1 + rate, periods)
    annuity_factor = ieee_div(compound_factor - 1, rate)

    fv = inputs.present_value * compound_factor
    if inputs.payment != 0:
        annuity_fv = inputs.payment * annuity_factor
        if inputs.payment_timing == "beginning":
            annuity_fv *= 1 + rate
        fv += annuity_fv

    return fv


def calculate_payment(inputs: TVMInputs) -> float:
    """PMT = -(PV * i * (1+i)^n - FV * i) / ((1+i)^n - 1), divided by (1+i) when paid up front."""
    rate = _rate_per_period(inputs)
    periods = inputs.periods

    if rate == 0:
        return ieee_div(inputs.future_value - inputs.present_value, periods)

    compound_factor = ieee_pow(1 + rate, periods)
    numerator = inputs.present_value * rate * compound_factor - inputs.future_value * rate
    payment = -ieee_div(numerator, compound_factor - 1)

    if inputs.payment_timing == "beginning":
        payment = ieee_div(payment, 1 + rate)

    return payment


def calculate_annual_rate(inputs: TVMInputs) -> float:
    """
    Solve the annual rate (percent) with Newton-Raphson on FV(rate) - target FV.

    The derivative is a forward difference. Best effort: when the iteration
    budget runs out or the slope flattens, the current estimate is returned.
    """
    target = inputs.future_value
    rate = RATE_INITIAL_GUESS

    for _ in range(RATE_MAX_ITERATIONS):
        fv = calculate_future_value(inputs.model_copy(update={"annual_rate": rate * 100}))
        error = fv - target
        if abs(error) < RATE_TOLERANCE:
            return rate * 100

        fv_plus = calculate_future_value(
            inputs.model_copy(update={"annual_rate": (rate + RATE_DELTA) * 100})
        )
        derivative = (fv_plus - fv) / RATE_DELTA
        if abs(derivative) < RATE_TOLERANCE:
            logger.debug("rate solve stopped on a flat derivative at %.6f", rate)
            break

        rate = clamp(rate - error / derivative, *RATE_BOUNDS)
    else:
        logger.debug("rate solve did not converge in %d iterations", RATE_MAX_ITERATIONS)

    return rate * 100


def calculate_periods(inputs: TVMInputs) -> float:
    """
    Solve the number of compounding periods.

    Lump sums use n = ln(FV/PV) / ln(1+i). With a payment there is no closed
    form, so bisect over PERIODS_BOUNDS. FV is monotone in n but falls as n
    grows when the flows are outflows (a loan, or savings carried as negative
    payments), so the direction is read from FV at the two bounds.
    """
    rate = _rate_per_period(inputs)
    target = inputs.future_value

    if inputs.payment == 0:
        if rate == 0:
            return ieee_div(target - inputs.present_value, inputs.present_value)
        return ieee_div(ieee_log(ieee_div(target, inputs.present_value)), ieee_log(1 + rate))

    def gap(periods: float) -> float:
        return calculate_future_value(inputs.model_copy(update={"periods": periods})) - target

    low, high = PERIODS_BOUNDS
    increasing = gap(high) >= gap(low)
    for _ in range(PERIODS_MAX_ITERATIONS):
        mid = (low + high) / 2
        error = gap(mid)
        if abs(error) < PERIODS_TOLERANCE:
            return mid

        # target lies at more periods
        if (error < 0) == increasing:
            low = mid
        else:
            high = mid

        if high - low < 1e-12:
            logger.debug("periods solve pinned at %.4f without reaching target", mid)
            break

    return (low + high) / 2


def _result(inputs: TVMInputs, **solved: float) -> TVMResult:
    values = inputs.model_dump(include={"present_value", "future_value", "payment", "annual_rate", "periods"})
    values.update(solved)
    total_payments = values["payment"] * values["periods"]
    return TVMResult(
        **values,
        total_interest=values["future_value"] - values["present_value"] - total_payments,
        total_payments=total_payments,
    )


def calculate_tvm(inputs: TVMInputs, mode: Union[TVMCalculationMode, str]) -> TVMResult:
    """Solve for the field named by ``mode`` and return the completed set of values."""
    try:
        mode = TVMCalculationMode(mode)
    except ValueError:
        raise CalculationModeError(mode) from None

    if mode is TVMCalculationMode.PRESENT_VALUE:
        return _result(inputs, present_value=calculate_present_value(inputs))
    if mode is TVMCalculationMode.FUTURE_VALUE:
        return _result(inputs, future_value=calculate_future_value(inputs))
    if mode is TVMCalculationMode.PAYMENT:
        return _result(inputs, payment=calculate_payment(inputs))
    if mode is TVMCalculationMode.ANNUAL_RATE:
        return _result(inputs, annual_rate=calculate_annual_rate(inputs))
    return _result(inputs, periods=calculate_periods(inputs))


__all__ = [
    "TVMCalculationMode",
    "CalculationModeError",
    "calculate_present_value",
    "calculate_future_value",
    "calculate_payment",
    "calculate_annual_rate",
    "calculate_periods",
    "calculate_tvm",
]
