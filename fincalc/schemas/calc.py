"""Request and response envelopes for the calculator endpoints."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from fincalc.domain.frequencies import Timing
from fincalc.models import CompoundInterestInputs, LoanInputs, TVMInputs


class _Request(BaseModel):
    model_config = ConfigDict(extra="forbid")


class TVMRequest(_Request):
    """Solve one TVM field from the other four."""

    inputs: TVMInputs
    # Left as a plain string: an unknown mode is the solver's error to raise.
    mode: str = Field(..., description="Field to solve: present_value, future_value, payment, annual_rate or periods.")


class CompareScenariosRequest(_Request):
    scenarios: List[CompoundInterestInputs] = Field(default_factory=list)


class TimeToTargetRequest(_Request):
    principal: float = Field(..., description="Starting balance.")
    target_amount: float = Field(..., description="Balance to reach.")
    annual_rate: float = Field(..., description="Annual rate in percent (e.g. 5 for 5%).")
    compounding_frequency: str = Field("monthly", description="Compounding frequency tag.")
    additional_contributions: float = Field(0.0, description="Amount added every contribution period.")
    contribution_frequency: str = Field("none", description="Contribution frequency tag.")


class TimeToTargetResponse(BaseModel):
    years: Optional[float] = Field(..., description="Years to target; null when unreachable.")


class RequiredContributionRequest(_Request):
    principal: float
    target_amount: float
    annual_rate: float = Field(..., description="Annual rate in percent.")
    time_in_years: float
    compounding_frequency: str = "monthly"
    contribution_frequency: str = "monthly"
    contribution_timing: Timing = "end"


class RequiredContributionResponse(BaseModel):
    contribution: float


class CompareLoansRequest(_Request):
    scenarios: List[LoanInputs] = Field(default_factory=list)


class RefinanceRequest(_Request):
    current_loan_balance: float = Field(..., ge=0)
    current_rate: float = Field(..., description="Current annual rate in percent.")
    current_remaining_term_months: int = Field(..., ge=1)
    new_rate: float = Field(..., description="New annual rate in percent.")
    new_term_months: int = Field(..., ge=1)
    closing_costs: float = Field(0.0, ge=0)
