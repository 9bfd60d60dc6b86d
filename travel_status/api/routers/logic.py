"""Knowledge base lookup and the per-evaluator checks the voice agent calls directly.

The check endpoints take a raw customer row (as returned by the lookup
endpoints) and report one evaluator's outcome, with the action the agent
should take next. They never write memos themselves; a ``create_memo``
action tells the caller to do so.
"""

from typing import Any, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from travel_status.api.dependencies import Services, get_services
from travel_status.api.models import CustomerDataRequest
from travel_status.engine.booking import evaluate_booking
from travel_status.engine.deposits import evaluate_deposits
from travel_status.engine.travel_rep import evaluate_travel_rep
from travel_status.errors import InputValidationError
from travel_status.schemas.customer_schema import ActivationMethod, CustomerRecord
from travel_status.schemas.status_schema import (
    DepositEvaluation,
    DepositState,
    TravelRepEvaluation,
    TravelRepState,
)
from travel_status.tools.customers import record_from_row

router = APIRouter()


def _record_from(body: CustomerDataRequest) -> CustomerRecord:
    if not body.customer_data:
        raise InputValidationError("Missing customer_data", accepted=["customer_data"])
    return record_from_row(body.customer_data)


def describe_deposits(evaluation: DepositEvaluation) -> tuple[str, Optional[str]]:
    """Message and next action for a deposit evaluation."""
    if evaluation.state == DepositState.UNKNOWN_PACKAGE:
        return "Package deposit amount not configured", None
    if evaluation.state == DepositState.NONE:
        if evaluation.activation_method == ActivationMethod.MAIL:
            return "No deposits received", "ask_if_mailed"
        return "No deposits received", "direct_to_website"
    if evaluation.state == DepositState.COMPLETE:
        return "Deposits complete - ready to schedule travel", "transfer_extension_1"
    return (
        f"Partial payment received. Remaining: ${evaluation.remaining or 0:,.2f}",
        "provide_payment_info",
    )


def describe_travel_rep(evaluation: TravelRepEvaluation) -> tuple[str, str]:
    """Message and next action for a travel-rep evaluation."""
    days = evaluation.days_remaining
    state = evaluation.state
    if state == TravelRepState.NO_DATE:
        return "No travel date assigned yet", "none"
    if state == TravelRepState.PAST_DATE:
        return "Travel date has passed", "none"
    if state == TravelRepState.NOT_CONFIRMED:
        return "Trip not confirmed yet", "none"
    if state == TravelRepState.NEEDS_URGENT:
        return f"Travel date in {days} days - Travel Rep assignment urgent", "create_memo"
    if state == TravelRepState.NORMAL_WINDOW:
        return f"Travel date in {days} days - normal TR assignment window", "none"
    if state == TravelRepState.TOO_EARLY:
        return f"Travel date in {days} days - too early for TR assignment", "none"
    if state == TravelRepState.ASSIGNED_NO_DOCS:
        return f"Travel Rep {evaluation.rep_name} assigned but hasn't sent documents", "create_memo"
    return (
        f"Travel Rep {evaluation.rep_name} assigned and documents sent on "
        f"{evaluation.docs_sent_date.isoformat() if evaluation.docs_sent_date else ''}",
        "contact_tr_directly",
    )


@router.get("/api/kb/package/{certificate_code}")
async def package_lookup(certificate_code: str, services: Services = Depends(get_services)):
    policy = await services.resolver.resolve(certificate_code)
    if policy is None:
        return JSONResponse(
            status_code=404,
            content={
                "found": False,
                "message": f"Package deposit information not found for certificate code: {certificate_code}",
            },
        )
    return {
        "found": True,
        "certificate_code": policy.code,
        "package_info": policy.model_dump(mode="json"),
    }


@router.post("/api/logic/deposits-check")
async def deposits_check(body: CustomerDataRequest, services: Services = Depends(get_services)):
    record = _record_from(body)
    policy = await services.aggregator.resolve_policy(record)
    evaluation = evaluate_deposits(
        record.deposit_validation, record.deposit_confirmation, policy
    )
    message, next_action = describe_deposits(evaluation)
    return {
        "status": evaluation.state.value,
        "message": message,
        "next_action": next_action,
        "package_code": policy.code if policy else None,
        "deposits": evaluation.model_dump(mode="json"),
    }


@router.post("/api/logic/travel-rep-check")
async def travel_rep_check(body: CustomerDataRequest, services: Services = Depends(get_services)):
    record = _record_from(body)
    aggregator = services.aggregator
    evaluation = evaluate_travel_rep(
        record.travel_date,
        record.confirm_status,
        record.travel_rep,
        record.docs_sent_date,
        aggregator.today(),
        urgent_days=aggregator.urgent_days,
        window_end_days=aggregator.window_end_days,
    )
    message, action = describe_travel_rep(evaluation)
    response: dict[str, Any] = {
        "status": evaluation.state.value,
        "message": message,
        "action": action,
        "days_remaining": evaluation.days_remaining,
        "travel_rep_name": evaluation.rep_name,
        "docs_sent_date": evaluation.docs_sent_date.isoformat() if evaluation.docs_sent_date else None,
    }
    if evaluation.follow_up is not None:
        response["memo_type"] = evaluation.follow_up.memo_type
        response["memo_details"] = evaluation.follow_up.details
    return response


@router.post("/api/logic/booking-check")
async def booking_check(body: CustomerDataRequest):
    record = _record_from(body)
    evaluation = evaluate_booking(record.flight_ref, record.hotel_ref)
    if not evaluation.is_booked:
        return {
            "status": evaluation.state.value,
            "message": "Customer has not booked travel yet",
            "action": "none",
        }
    return {
        "status": evaluation.state.value,
        "message": "Customer is booked",
        "booking_refs": {"agency": evaluation.flight_ref, "hotel": evaluation.hotel_ref},
        "action": "ask_about_itinerary",
    }
