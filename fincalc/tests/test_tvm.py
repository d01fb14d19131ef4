from __future__ import annotations

import math
from math import isclose

import pytest

from fincalc.core.tvm import (
    CalculationModeError,
    TVMCalculationMode,
    calculate_future_value,
    calculate_present_value,
    calculate_tvm,
)
from fincalc.models import TVMInputs


def tvm_inputs(**overrides) -> TVMInputs:
    values = {
        "present_value": 0.0,
        "future_value": 0.0,
        "payment": 0.0,
        "annual_rate": 5.0,
        "periods": 10,
        "compounding_frequency": "monthly",
        "payment_timing": "end",
    }
    values.update(overrides)
    return TVMInputs(**values)


def test_future_value_of_monthly_savings():
    """$100 a month for 10 years at 6%: the annuity table value, carried with the outflow's sign."""
    inputs = tvm_inputs(payment=-100, annual_rate=6, periods=120)

    result = calculate_tvm(inputs, "future_value")

    assert isclose(result.future_value, -16387.93, abs_tol=1.0)
    assert isclose(result.total_payments, -12000.0)
    assert isclose(result.total_interest, result.future_value + 12000.0)


def test_lump_sum_round_trip_through_present_value():
    inputs = tvm_inputs(present_value=1000, annual_rate=5, periods=10)
    fv = calculate_tvm(inputs, "future_value").future_value

    solved = calculate_tvm(tvm_inputs(future_value=fv, annual_rate=5, periods=10), "present_value")

    assert isclose(solved.present_value, 1000.0, rel_tol=1e-6)
    assert isclose(solved.total_interest, fv - solved.present_value)


@pytest.mark.parametrize("timing", ["end", "beginning"])
def test_payment_and_present_value_round_trip(timing):
    known = tvm_inputs(present_value=1000, payment=-50, annual_rate=4, periods=36, payment_timing=timing)
    fv = calculate_future_value(known)

    payment = calculate_tvm(known.model_copy(update={"future_value": fv, "payment": 0.0}), "payment")
    present = calculate_tvm(known.model_copy(update={"future_value": fv, "present_value": 0.0}), "present_value")

    assert isclose(payment.payment, -50.0, rel_tol=1e-6)
    assert isclose(present.present_value, 1000.0, rel_tol=1e-6)


def test_rate_solve_recovers_lump_sum_rate():
    fv = calculate_future_value(
        tvm_inputs(present_value=1000, annual_rate=5, periods=10, compounding_frequency="annually")
    )
    inputs = tvm_inputs(
        present_value=1000, future_value=fv, annual_rate=0, periods=10, compounding_frequency="annually"
    )

    result = calculate_tvm(inputs, TVMCalculationMode.ANNUAL_RATE)

    assert isclose(result.annual_rate, 5.0, rel_tol=1e-6)


def test_rate_solve_with_payments():
    fv = calculate_future_value(tvm_inputs(present_value=1000, payment=100, annual_rate=6, periods=24))

    result = calculate_tvm(
        tvm_inputs(present_value=1000, payment=100, future_value=fv, annual_rate=0, periods=24),
        "annual_rate",
    )

    assert isclose(result.annual_rate, 6.0, abs_tol=1e-4)


def test_periods_solve_with_payments():
    fv = calculate_future_value(tvm_inputs(present_value=1000, payment=100, annual_rate=6, periods=24))

    result = calculate_tvm(
        tvm_inputs(present_value=1000, payment=100, future_value=fv, annual_rate=6, periods=0),
        "periods",
    )

    assert isclose(result.periods, 24.0, abs_tol=0.01)
    assert isclose(result.total_payments, 100 * result.periods)


@pytest.mark.parametrize(
    "present_value, payment, periods",
    [
        (10_000, -200, 60),  # loan paid down by monthly instalments
        (0, -100, 120),  # savings carried as outflows
    ],
)
def test_periods_solve_when_future_value_falls_with_time(present_value, payment, periods):
    known = tvm_inputs(present_value=present_value, payment=payment, annual_rate=6, periods=periods)
    fv = calculate_future_value(known)

    result = calculate_tvm(known.model_copy(update={"future_value": fv, "periods": 0.0}), "periods")

    assert isclose(result.periods, periods, abs_tol=0.01)


def test_periods_solve_lump_sum_is_closed_form():
    result = calculate_tvm(
        tvm_inputs(present_value=1000, future_value=2000, annual_rate=12, periods=0), "periods"
    )

    assert isclose(result.periods, math.log(2) / math.log(1.01), rel_tol=1e-12)


def test_periods_solve_lump_sum_at_zero_rate():
    result = calculate_tvm(tvm_inputs(present_value=100, future_value=150, annual_rate=0), "periods")
    assert result.periods == 0.5


def test_zero_rate_is_plain_addition():
    inputs = tvm_inputs(present_value=1000, payment=50, annual_rate=0, periods=12)

    assert calculate_future_value(inputs) == 1600.0
    assert calculate_tvm(tvm_inputs(future_value=1600, payment=50, annual_rate=0, periods=12), "payment").payment == (
        1600.0 / 12
    )


def test_beginning_timing_adds_one_period_of_interest():
    end = tvm_inputs(payment=250, annual_rate=7.5, periods=48)
    beginning = end.model_copy(update={"payment_timing": "beginning"})
    growth = 1 + 0.075 / 12

    assert isclose(calculate_future_value(beginning), calculate_future_value(end) * growth, rel_tol=1e-12)

    end_pv = end.model_copy(update={"future_value": 0.0})
    beginning_pv = beginning.model_copy(update={"future_value": 0.0})
    assert isclose(calculate_present_value(beginning_pv), calculate_present_value(end_pv) * growth, rel_tol=1e-12)


def test_invalid_mode_raises():
    with pytest.raises(CalculationModeError, match="Invalid calculation mode: interest"):
        calculate_tvm(tvm_inputs(), "interest")

    # still a ValueError for callers that only know the builtin
    with pytest.raises(ValueError):
        calculate_tvm(tvm_inputs(), "presentValue")


def test_degenerate_inputs_do_not_raise():
    lump_sum_from_nothing = calculate_tvm(tvm_inputs(present_value=0, future_value=500), "periods")
    no_periods = calculate_tvm(tvm_inputs(present_value=100, future_value=200, annual_rate=0, periods=0), "payment")

    assert math.isinf(lump_sum_from_nothing.periods)
    assert math.isinf(no_periods.payment)
