from __future__ import annotations

from datetime import date
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict

from fincalc.domain.frequencies import (
    CompoundingFrequency,
    ContributionFrequency,
    GrowthCompoundingFrequency,
    PaymentFrequency,
    Timing,
)


class _Value(BaseModel):
    """Immutable value object. Floats may carry nan/inf from degenerate inputs."""

    model_config = ConfigDict(extra="forbid", frozen=True, ser_json_inf_nan="null")


# -----------------------------
# Time value of money
# -----------------------------


class TVMInputs(_Value):
    """One of the five numeric fields is the unknown; its value is ignored by the solver."""

    present_value: float = 0.0
    future_value: float = 0.0
    payment: float = 0.0
    annual_rate: float = 0.0  # percent
    periods: float = 0.0  # compounding periods, not years
    compounding_frequency: CompoundingFrequency = "monthly"
    payment_timing: Timing = "end"


class TVMResult(_Value):
    present_value: float
    future_value: float
    payment: float
    annual_rate: float
    periods: float
    total_interest: float
    total_payments: float


# -----------------------------
# Compound growth
# -----------------------------


class CompoundInterestInputs(_Value):
    principal: float
    annual_rate: float  # percent
    compounding_frequency: GrowthCompoundingFrequency = "monthly"
    time_in_years: float
    additional_contributions: float = 0.0
    contribution_frequency: ContributionFrequency = "none"
    contribution_timing: Timing = "end"


class YearlyBreakdown(_Value):
    year: int
    starting_balance: float
    contributions: float
    interest_earned: float
    ending_balance: float


class CompoundInterestResult(_Value):
    principal: float
    total_contributions: float
    total_interest_earned: float
    final_amount: float
    effective_annual_rate: float  # percent
    yearly_breakdown: List[YearlyBreakdown]


# -----------------------------
# Loans
# -----------------------------

PaymentStructure = Literal[
    "standard",
    "interest_only",
    "principal_only",
    "balloon",
    "graduated",
    "interest_first",
]


class LoanInputs(_Value):
    loan_amount: float
    annual_rate: float  # percent
    loan_term_years: int
    loan_term_months: int = 0
    payment_frequency: PaymentFrequency = "monthly"
    extra_payment: float = 0.0
    start_date: date
    payment_structure: PaymentStructure = "standard"
    balloon_amount: Optional[float] = None
    interest_only_period_months: Optional[int] = None
    graduation_period_years: Optional[int] = None
    payment_increase_rate: Optional[float] = None  # percent per graduation step


class AmortizationEntry(_Value):
    payment_number: int
    payment_date: date
    payment_amount: float
    principal_payment: float
    interest_payment: float
    extra_payment: float
    remaining_balance: float


class LoanSummary(_Value):
    original_loan_amount: float
    monthly_payment: float
    total_payments: float
    total_interest: float
    total_extra_payments: float
    interest_saved: float
    time_saved: str
    payoff_date: date


class LoanResult(_Value):
    monthly_payment: float
    total_payments: float
    total_interest: float
    total_amount: float
    payoff_date: date
    amortization_schedule: List[AmortizationEntry]
    loan_summary: LoanSummary


class LoanAffordabilityInputs(_Value):
    monthly_income: float
    monthly_debts: float = 0.0
    down_payment: float = 0.0
    annual_rate: float  # percent
    loan_term_years: int
    property_tax: float = 0.0
    insurance: float = 0.0
    pmi: float = 0.0
    hoa_fees: float = 0.0
    debt_to_income_ratio: float = 36.0  # percent


class LoanAffordabilityResult(_Value):
    max_loan_amount: float
    max_home_price: float
    monthly_payment: float
    total_monthly_expenses: float
    remaining_income: float
    debt_to_income_ratio: float
    front_end_ratio: float
    back_end_ratio: float


class RefinanceResult(_Value):
    current_payment: float
    new_payment: float
    monthly_savings: float
    total_savings: float
    break_even_months: float
    total_interest_savings: float
