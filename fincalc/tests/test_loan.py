from __future__ import annotations

import math
from datetime import date
from math import isclose

import pytest

from fincalc.core.loan import (
    LoanScheduleError,
    calculate_loan,
    calculate_loan_affordability,
    calculate_monthly_payment,
    calculate_refinance_savings,
    compare_loan_scenarios,
    generate_amortization_schedule,
)
from fincalc.models import LoanAffordabilityInputs, LoanInputs


def loan_inputs(**overrides) -> LoanInputs:
    values = {
        "loan_amount": 200_000.0,
        "annual_rate": 6.0,
        "loan_term_years": 30,
        "start_date": date(2024, 1, 1),
    }
    values.update(overrides)
    return LoanInputs(**values)


def test_standard_mortgage_payment():
    result = calculate_loan(loan_inputs())
    schedule = result.amortization_schedule

    assert isclose(result.monthly_payment, 1199.10, abs_tol=0.01)
    assert len(schedule) == 360
    assert schedule[-1].remaining_balance < 0.01
    assert isclose(sum(e.principal_payment for e in schedule), 200_000, abs_tol=0.01)
    assert isclose(result.total_interest, result.total_payments - 200_000, abs_tol=0.01)
    assert result.payoff_date == date(2053, 12, 1)
    assert result.loan_summary.time_saved == "0 months"


def test_extra_payments_shorten_the_loan():
    plain = calculate_loan(loan_inputs())
    extra = calculate_loan(loan_inputs(extra_payment=200))

    assert len(extra.amortization_schedule) < len(plain.amortization_schedule)
    assert extra.payoff_date < plain.payoff_date
    assert extra.loan_summary.interest_saved > 0
    assert isclose(extra.loan_summary.interest_saved, plain.total_interest - extra.total_interest)
    assert extra.loan_summary.total_extra_payments > 0
    assert extra.loan_summary.time_saved != "0 months"


def test_extra_payment_never_overshoots_balance():
    schedule = generate_amortization_schedule(loan_inputs(loan_amount=1_000, loan_term_years=1, extra_payment=5_000))

    assert len(schedule) == 1
    assert isclose(schedule[0].principal_payment + schedule[0].extra_payment, 1_000)
    assert isclose(schedule[0].remaining_balance, 0, abs_tol=1e-6)


def test_principal_only_loan_charges_no_interest():
    schedule = generate_amortization_schedule(
        loan_inputs(loan_amount=12_000, annual_rate=5, loan_term_years=1, payment_structure="principal_only")
    )

    assert len(schedule) == 12
    assert all(entry.interest_payment == 0 for entry in schedule)
    assert all(entry.principal_payment == 1_000 for entry in schedule)


def test_interest_only_window_then_amortizes():
    inputs = loan_inputs(
        loan_amount=100_000,
        annual_rate=5,
        loan_term_years=10,
        payment_structure="interest_only",
        interest_only_period_months=12,
    )

    schedule = generate_amortization_schedule(inputs)

    assert len(schedule) == 120
    assert all(entry.principal_payment == 0 for entry in schedule[:12])
    assert isclose(schedule[0].interest_payment, 100_000 * 0.05 / 12)
    assert schedule[12].principal_payment > 0
    assert schedule[-1].remaining_balance < 0.01


def test_balloon_settles_on_last_payment():
    inputs = loan_inputs(loan_amount=100_000, loan_term_years=5, payment_structure="balloon", balloon_amount=40_000)

    schedule = generate_amortization_schedule(inputs)

    assert len(schedule) == 60
    assert schedule[-1].payment_amount > 40_000
    assert schedule[-2].remaining_balance > 40_000
    assert schedule[-1].remaining_balance == 0


def test_graduated_payments_step_up():
    inputs = loan_inputs(
        loan_amount=100_000,
        payment_structure="graduated",
        graduation_period_years=5,
        payment_increase_rate=7.5,
    )
    standard = calculate_monthly_payment(100_000, 6, 360)

    schedule = generate_amortization_schedule(inputs)

    assert isclose(schedule[0].payment_amount, standard * 0.7)
    assert isclose(schedule[59].payment_amount, schedule[0].payment_amount)
    assert isclose(schedule[60].payment_amount, schedule[0].payment_amount * 1.075)
    # early instalments do not cover the interest
    assert schedule[0].principal_payment < 0


def test_interest_first_then_principal():
    inputs = loan_inputs(loan_amount=12_000, annual_rate=12, loan_term_years=1, payment_structure="interest_first")

    schedule = generate_amortization_schedule(inputs)

    assert len(schedule) == 12
    assert all(entry.principal_payment == 0 for entry in schedule[:6])
    assert all(entry.remaining_balance == 12_000 for entry in schedule[:6])
    assert all(entry.interest_payment == 0 and entry.principal_payment == 2_000 for entry in schedule[6:])
    assert schedule[-1].remaining_balance == 0


def test_payment_dates_clamp_to_month_end_without_drift():
    schedule = generate_amortization_schedule(loan_inputs(start_date=date(2024, 1, 31), loan_term_years=1))

    assert [entry.payment_date for entry in schedule[:4]] == [
        date(2024, 1, 31),
        date(2024, 2, 29),
        date(2024, 3, 31),
        date(2024, 4, 30),
    ]


def test_biweekly_dates():
    schedule = generate_amortization_schedule(loan_inputs(payment_frequency="biweekly", loan_term_years=1))

    assert schedule[1].payment_date == date(2024, 1, 15)
    assert schedule[2].payment_date == date(2024, 1, 29)


def test_zero_loan_cannot_be_scheduled():
    with pytest.raises(LoanScheduleError, match="Unable to generate amortization schedule"):
        calculate_loan(loan_inputs(loan_amount=0))


def test_compare_loan_scenarios():
    results = compare_loan_scenarios([loan_inputs(loan_term_years=15), loan_inputs(loan_term_years=30)])

    assert len(results) == 2
    assert results[0].monthly_payment > results[1].monthly_payment
    assert results[0].total_interest < results[1].total_interest


def affordability_inputs(**overrides) -> LoanAffordabilityInputs:
    values = {
        "monthly_income": 10_000.0,
        "monthly_debts": 500.0,
        "down_payment": 50_000.0,
        "annual_rate": 6.0,
        "loan_term_years": 30,
        "property_tax": 300.0,
        "insurance": 100.0,
    }
    values.update(overrides)
    return LoanAffordabilityInputs(**values)


def test_affordability_inverts_payment_formula():
    result = calculate_loan_affordability(affordability_inputs())

    assert isclose(result.monthly_payment, 2_700)
    assert isclose(calculate_monthly_payment(result.max_loan_amount, 6, 360), 2_700)
    assert isclose(result.max_home_price, result.max_loan_amount + 50_000)
    assert isclose(result.front_end_ratio, 31)
    assert isclose(result.back_end_ratio, 36)
    assert isclose(result.debt_to_income_ratio, 5)


def test_affordability_when_debts_use_the_ceiling():
    result = calculate_loan_affordability(affordability_inputs(monthly_debts=4_000))

    assert result.max_loan_amount == 0
    assert result.max_home_price == 50_000
    assert result.monthly_payment == 0


def test_refinance_to_lower_rate():
    result = calculate_refinance_savings(200_000, 7, 300, 5, 300, 3_000)

    assert result.monthly_savings > 0
    assert isclose(result.break_even_months, 3_000 / result.monthly_savings)
    assert isclose(result.total_savings, result.monthly_savings * 300 - 3_000)
    assert result.total_interest_savings > 0


def test_refinance_without_savings_never_breaks_even():
    result = calculate_refinance_savings(200_000, 5, 300, 7, 300, 3_000)

    assert result.monthly_savings < 0
    assert math.isinf(result.break_even_months)
