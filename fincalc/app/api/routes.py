"""HTTP routes for the Flask API."""

import logging
import math
from http import HTTPStatus
from typing import Any, Dict, Sequence

from flask import Blueprint, Response, current_app, jsonify, request
from pydantic import BaseModel, ValidationError

from fincalc.core.compound_interest import (
    calculate_compound_interest,
    calculate_required_contribution,
    calculate_time_to_target,
    compare_scenarios,
)
from fincalc.core.loan import (
    LoanScheduleError,
    calculate_loan,
    calculate_loan_affordability,
    calculate_refinance_savings,
    compare_loan_scenarios,
)
from fincalc.core.ping import get_ping_message
from fincalc.core.tvm import CalculationModeError, calculate_tvm
from fincalc.models import CompoundInterestInputs, LoanAffordabilityInputs, LoanInputs
from fincalc.schemas.calc import (
    CompareLoansRequest,
    CompareScenariosRequest,
    RefinanceRequest,
    RequiredContributionRequest,
    RequiredContributionResponse,
    TimeToTargetRequest,
    TimeToTargetResponse,
    TVMRequest,
)
from fincalc.schemas.ping import PingResponse

logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__)


def _payload() -> Dict[str, Any]:
    return request.get_json(force=True, silent=False)


def _json_response(model: BaseModel) -> Response:
    """Serialise through pydantic so inf/nan results go out as null rather than bare tokens."""
    return current_app.response_class(model.model_dump_json(), mimetype="application/json")


def _json_list_response(models: Sequence[BaseModel]) -> Response:
    body = "[" + ",".join(model.model_dump_json() for model in models) + "]"
    return current_app.response_class(body, mimetype="application/json")


@api_bp.errorhandler(ValidationError)
def _handle_validation_error(exc: ValidationError):
    """Convert Pydantic validation errors into JSON responses."""
    return jsonify({"detail": exc.errors(include_url=False)}), HTTPStatus.UNPROCESSABLE_ENTITY


@api_bp.errorhandler(CalculationModeError)
@api_bp.errorhandler(LoanScheduleError)
def _handle_calculation_error(exc: ValueError):
    logger.warning("rejected calculation: %s", exc)
    return jsonify({"error": str(exc)}), HTTPStatus.BAD_REQUEST


@api_bp.get("/ping")
def ping() -> Any:
    """Health-check endpoint."""
    response = PingResponse(message=get_ping_message())
    return jsonify(response.model_dump())


@api_bp.post("/calc/tvm")
def tvm() -> Any:
    """Solve one time-value-of-money field from the other four."""
    payload = TVMRequest.model_validate(_payload())
    logger.info("tvm solve: mode=%s", payload.mode)
    result = calculate_tvm(payload.inputs, payload.mode)
    return _json_response(result)


@api_bp.post("/calc/compound-interest")
def compound_interest() -> Any:
    inputs = CompoundInterestInputs.model_validate(_payload())
    logger.info("compound interest: %s years", inputs.time_in_years)
    return _json_response(calculate_compound_interest(inputs))


@api_bp.post("/calc/compound-interest/compare")
def compound_interest_compare() -> Any:
    payload = CompareScenariosRequest.model_validate(_payload())
    logger.info("comparing %d growth scenarios", len(payload.scenarios))
    results = compare_scenarios(payload.scenarios)
    return _json_list_response(results)


@api_bp.post("/calc/time-to-target")
def time_to_target() -> Any:
    payload = TimeToTargetRequest.model_validate(_payload())
    years = calculate_time_to_target(
        payload.principal,
        payload.target_amount,
        payload.annual_rate,
        payload.compounding_frequency,
        payload.additional_contributions,
        payload.contribution_frequency,
    )
    response = TimeToTargetResponse(years=years if math.isfinite(years) else None)
    return _json_response(response)


@api_bp.post("/calc/required-contribution")
def required_contribution() -> Any:
    payload = RequiredContributionRequest.model_validate(_payload())
    contribution = calculate_required_contribution(
        payload.principal,
        payload.target_amount,
        payload.annual_rate,
        payload.time_in_years,
        payload.compounding_frequency,
        payload.contribution_frequency,
        payload.contribution_timing,
    )
    return _json_response(RequiredContributionResponse(contribution=contribution))


@api_bp.post("/calc/loan")
def loan() -> Any:
    inputs = LoanInputs.model_validate(_payload())
    logger.info("loan analysis: %s structure", inputs.payment_structure)
    return _json_response(calculate_loan(inputs))


@api_bp.post("/calc/loan/compare")
def loan_compare() -> Any:
    payload = CompareLoansRequest.model_validate(_payload())
    results = compare_loan_scenarios(payload.scenarios)
    return _json_list_response(results)


@api_bp.post("/calc/loan/affordability")
def loan_affordability() -> Any:
    inputs = LoanAffordabilityInputs.model_validate(_payload())
    return _json_response(calculate_loan_affordability(inputs))


@api_bp.post("/calc/loan/refinance")
def loan_refinance() -> Any:
    payload = RefinanceRequest.model_validate(_payload())
    result = calculate_refinance_savings(
        payload.current_loan_balance,
        payload.current_rate,
        payload.current_remaining_term_months,
        payload.new_rate,
        payload.new_term_months,
        payload.closing_costs,
    )
    return _json_response(result)
