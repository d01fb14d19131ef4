"""Loan payments, amortization schedules, affordability and refinancing."""

from __future__ import annotations

import calendar
import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import List, Optional, Sequence, Tuple

from fincalc.core.numeric import ieee_div, ieee_pow
from fincalc.domain.frequencies import get_payments_per_year
from fincalc.models import (
    AmortizationEntry,
    LoanAffordabilityInputs,
    LoanAffordabilityResult,
    LoanInputs,
    LoanResult,
    LoanSummary,
    RefinanceResult,
)

logger = logging.getLogger(__name__)

BALANCE_EPSILON = 0.01
GRADUATED_START_FACTOR = 0.7
DAYS_PER_MONTH = 30.44

_MONTHS_BETWEEN_PAYMENTS = {"monthly": 1, "quarterly": 3, "annually": 12}
_WEEKS_BETWEEN_PAYMENTS = {"weekly": 1, "biweekly": 2}


class LoanScheduleError(ValueError):
    pass


@dataclass(frozen=True)
class PaymentOptions:
    """Structure-specific knobs; which ones matter depends on the payment structure."""

    balloon_amount: Optional[float] = None
    interest_only_period_months: Optional[int] = None
    graduation_period_years: Optional[int] = None
    payment_increase_rate: Optional[float] = None

    @classmethod
    def from_inputs(cls, inputs: LoanInputs) -> "PaymentOptions":
        return cls(
            balloon_amount=inputs.balloon_amount,
            interest_only_period_months=inputs.interest_only_period_months,
            graduation_period_years=inputs.graduation_period_years,
            payment_increase_rate=inputs.payment_increase_rate,
        )


def _annuity_payment(principal: float, period_rate: float, count: float) -> float:
    if period_rate == 0:
        return ieee_div(principal, count)
    growth = ieee_pow(1 + period_rate, count)
    return principal * ieee_div(period_rate * growth, growth - 1)


def calculate_monthly_payment(principal: float, annual_rate: float, total_payments: float) -> float:
    """PMT = P * [r(1 + r)^n] / [(1 + r)^n - 1] with r the monthly rate."""
    if annual_rate == 0:
        return ieee_div(principal, total_payments)
    return _annuity_payment(principal, annual_rate / 100 / 12, total_payments)


def _standard_payment(
    principal: float, annual_rate: float, total_months: int, total_payments: float, payments_per_year: int
) -> float:
    if payments_per_year == 12:
        return calculate_monthly_payment(principal, annual_rate, total_payments)
    # other frequencies: spread the monthly payment over the year
    return calculate_monthly_payment(principal, annual_rate, total_months) * 12 / payments_per_year


def calculate_payment_amount(
    principal: float,
    annual_rate: float,
    loan_term_years: int,
    loan_term_months: int,
    payment_frequency: str,
    payment_structure: str = "standard",
    options: Optional[PaymentOptions] = None,
) -> float:
    """Regular payment for the chosen structure (the first instalment for graduated loans)."""
    options = options or PaymentOptions()
    total_months = loan_term_years * 12 + loan_term_months
    payments_per_year = get_payments_per_year(payment_frequency)
    total_payments = total_months / 12 * payments_per_year

    if payment_structure == "interest_only":
        if options.interest_only_period_months:
            return principal * (annual_rate / 100 / 12)
        return calculate_monthly_payment(principal, annual_rate, total_months)

    if payment_structure == "principal_only":
        return ieee_div(principal, total_payments)

    if payment_structure == "balloon" and options.balloon_amount:
        financed = principal - options.balloon_amount
        return _standard_payment(financed, annual_rate, total_months, total_payments, payments_per_year)

    if payment_structure == "graduated":
        standard = calculate_monthly_payment(principal, annual_rate, total_payments)
        return standard * GRADUATED_START_FACTOR

    if payment_structure == "interest_first":
        standard = calculate_monthly_payment(principal, annual_rate, total_payments)
        total_interest = standard * total_payments - principal
        return ieee_div(total_interest, total_payments / 2)

    return _standard_payment(principal, annual_rate, total_months, total_payments, payments_per_year)


@dataclass(frozen=True)
class _ScheduleTerms:
    structure: str
    period_rate: float
    regular_payment: float
    total_payments: float
    payments_per_year: int
    options: PaymentOptions
    # payment once the interest-only window closes
    amortizing_payment: float
    # principal repaid per instalment in the second half of an interest-first loan
    principal_share: float


def _split_payment(terms: _ScheduleTerms, number: int, balance: float) -> Tuple[float, float]:
    """Return (interest, principal) for payment ``number`` on ``balance``."""
    interest = balance * terms.period_rate
    options = terms.options

    if terms.structure == "interest_only":
        if options.interest_only_period_months and number <= options.interest_only_period_months:
            return interest, 0.0
        return interest, terms.amortizing_payment - interest

    if terms.structure == "principal_only":
        return 0.0, terms.regular_payment

    if terms.structure == "balloon":
        if options.balloon_amount and number >= terms.total_payments:
            # final instalment settles whatever is left
            return interest, balance
        return interest, terms.regular_payment - interest

    if terms.structure == "graduated":
        payment = terms.regular_payment
        if options.graduation_period_years and options.payment_increase_rate:
            step = (number - 1) // (options.graduation_period_years * terms.payments_per_year)
            payment = terms.regular_payment * (1 + options.payment_increase_rate / 100) ** step
        return interest, payment - interest

    if terms.structure == "interest_first":
        if number <= terms.total_payments / 2:
            return terms.regular_payment, 0.0
        return 0.0, terms.principal_share

    return interest, terms.regular_payment - interest


def _add_months(start: date, months: int) -> date:
    index = start.month - 1 + months
    year = start.year + index // 12
    month = index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def _payment_date(start: date, index: int, frequency: str) -> date:
    """Date of the payment ``index`` steps after ``start``, clamped to month end."""
    if frequency in _WEEKS_BETWEEN_PAYMENTS:
        return start + timedelta(weeks=_WEEKS_BETWEEN_PAYMENTS[frequency] * index)
    return _add_months(start, _MONTHS_BETWEEN_PAYMENTS.get(frequency, 1) * index)


def generate_amortization_schedule(inputs: LoanInputs) -> List[AmortizationEntry]:
    """
    Payment-by-payment schedule.

    Runs until the balance is paid down to a cent, capped at twice the
    nominal number of payments for structures that never fully amortize.
    Extra payments go to principal and never overshoot the balance.
    """
    options = PaymentOptions.from_inputs(inputs)
    total_months = inputs.loan_term_years * 12 + inputs.loan_term_months
    payments_per_year = get_payments_per_year(inputs.payment_frequency)
    total_payments = total_months / 12 * payments_per_year
    period_rate = inputs.annual_rate / 100 / payments_per_year

    io_payments = options.interest_only_period_months or 0
    half = total_payments / 2
    terms = _ScheduleTerms(
        structure=inputs.payment_structure,
        period_rate=period_rate,
        regular_payment=calculate_payment_amount(
            inputs.loan_amount,
            inputs.annual_rate,
            inputs.loan_term_years,
            inputs.loan_term_months,
            inputs.payment_frequency,
            inputs.payment_structure,
            options,
        ),
        total_payments=total_payments,
        payments_per_year=payments_per_year,
        options=options,
        amortizing_payment=_annuity_payment(inputs.loan_amount, period_rate, total_payments - io_payments),
        principal_share=ieee_div(inputs.loan_amount, total_payments - half),
    )

    schedule: List[AmortizationEntry] = []
    balance = inputs.loan_amount
    number = 1

    while balance > BALANCE_EPSILON and number <= total_payments * 2:
        interest, principal = _split_payment(terms, number, balance)

        extra = inputs.extra_payment
        if principal + extra > balance:
            extra = max(0.0, balance - principal)
            principal = balance - extra

        balance -= principal + extra

        schedule.append(
            AmortizationEntry(
                payment_number=number,
                payment_date=_payment_date(inputs.start_date, number - 1, inputs.payment_frequency),
                payment_amount=principal + interest + extra,
                principal_payment=principal,
                interest_payment=interest,
                extra_payment=extra,
                remaining_balance=max(0.0, balance),
            )
        )
        number += 1

    if balance > BALANCE_EPSILON and schedule:
        logger.debug("schedule stopped after %d payments with %.2f outstanding", len(schedule), balance)

    return schedule


def _format_time_saved(months: int) -> str:
    if months <= 0:
        return "0 months"
    return f"{months // 12} years, {months % 12} months"


def calculate_loan(inputs: LoanInputs) -> LoanResult:
    """Full loan analysis, including what the extra payments save against the plain loan."""
    schedule = generate_amortization_schedule(inputs)
    if not schedule:
        raise LoanScheduleError("Unable to generate amortization schedule")

    monthly_payment = calculate_payment_amount(
        inputs.loan_amount,
        inputs.annual_rate,
        inputs.loan_term_years,
        inputs.loan_term_months,
        inputs.payment_frequency,
        inputs.payment_structure,
        PaymentOptions.from_inputs(inputs),
    )

    total_payments = sum(entry.payment_amount for entry in schedule)
    total_interest = sum(entry.interest_payment for entry in schedule)
    total_extra = sum(entry.extra_payment for entry in schedule)
    payoff_date = schedule[-1].payment_date

    baseline = generate_amortization_schedule(inputs.model_copy(update={"extra_payment": 0.0}))
    baseline_interest = sum(entry.interest_payment for entry in baseline)
    baseline_payoff = baseline[-1].payment_date if baseline else payoff_date
    months_saved = round((baseline_payoff - payoff_date).days / DAYS_PER_MONTH)

    summary = LoanSummary(
        original_loan_amount=inputs.loan_amount,
        monthly_payment=monthly_payment,
        total_payments=total_payments,
        total_interest=total_interest,
        total_extra_payments=total_extra,
        interest_saved=baseline_interest - total_interest,
        time_saved=_format_time_saved(months_saved),
        payoff_date=payoff_date,
    )

    return LoanResult(
        monthly_payment=monthly_payment,
        total_payments=total_payments,
        total_interest=total_interest,
        total_amount=total_payments,
        payoff_date=payoff_date,
        amortization_schedule=schedule,
        loan_summary=summary,
    )


def calculate_loan_affordability(inputs: LoanAffordabilityInputs) -> LoanAffordabilityResult:
    """
    Largest loan whose payment fits under the debt-to-income ceiling.

    The ceiling covers existing debts plus housing costs; taxes, insurance,
    PMI and HOA fees come out of it before the loan payment does.
    """
    income = inputs.monthly_income
    housing_costs = inputs.property_tax + inputs.insurance + inputs.pmi + inputs.hoa_fees
    max_total_payments = income * (inputs.debt_to_income_ratio / 100)
    max_loan_payment = max_total_payments - inputs.monthly_debts - housing_costs
    current_dti = ieee_div(inputs.monthly_debts, income) * 100

    if max_loan_payment <= 0:
        return LoanAffordabilityResult(
            max_loan_amount=0.0,
            max_home_price=inputs.down_payment,
            monthly_payment=0.0,
            total_monthly_expenses=inputs.monthly_debts + housing_costs,
            remaining_income=income - max_total_payments,
            debt_to_income_ratio=current_dti,
            front_end_ratio=0.0,
            back_end_ratio=current_dti,
        )

    total_months = inputs.loan_term_years * 12
    monthly_rate = inputs.annual_rate / 100 / 12
    if monthly_rate == 0:
        max_loan_amount = max_loan_payment * total_months
    else:
        growth = ieee_pow(1 + monthly_rate, total_months)
        max_loan_amount = max_loan_payment * ieee_div(growth - 1, monthly_rate * growth)

    total_expenses = inputs.monthly_debts + max_loan_payment + housing_costs

    return LoanAffordabilityResult(
        max_loan_amount=max_loan_amount,
        max_home_price=max_loan_amount + inputs.down_payment,
        monthly_payment=max_loan_payment,
        total_monthly_expenses=total_expenses,
        remaining_income=income - total_expenses,
        debt_to_income_ratio=current_dti,
        front_end_ratio=ieee_div(max_loan_payment + housing_costs, income) * 100,
        back_end_ratio=ieee_div(total_expenses, income) * 100,
    )


def calculate_refinance_savings(
    current_loan_balance: float,
    current_rate: float,
    current_remaining_term_months: int,
    new_rate: float,
    new_term_months: int,
    closing_costs: float,
) -> RefinanceResult:
    current_payment = calculate_monthly_payment(current_loan_balance, current_rate, current_remaining_term_months)
    new_payment = calculate_monthly_payment(current_loan_balance, new_rate, new_term_months)

    monthly_savings = current_payment - new_payment
    current_total_interest = current_payment * current_remaining_term_months - current_loan_balance
    new_total_interest = new_payment * new_term_months - current_loan_balance + closing_costs

    return RefinanceResult(
        current_payment=current_payment,
        new_payment=new_payment,
        monthly_savings=monthly_savings,
        total_savings=monthly_savings * new_term_months - closing_costs,
        break_even_months=closing_costs / monthly_savings if monthly_savings > 0 else float("inf"),
        total_interest_savings=current_total_interest - new_total_interest,
    )


def compare_loan_scenarios(scenarios: Sequence[LoanInputs]) -> List[LoanResult]:
    return [calculate_loan(scenario) for scenario in scenarios]


__all__ = [
    "LoanScheduleError",
    "PaymentOptions",
    "calculate_monthly_payment",
    "calculate_payment_amount",
    "generate_amortization_schedule",
    "calculate_loan",
    "calculate_loan_affordability",
    "calculate_refinance_savings",
    "compare_loan_scenarios",
]
