"""Evaluation results and the aggregated customer status."""

from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel, computed_field

from travel_status.schemas.customer_schema import ActivationMethod


class DepositState(str, Enum):
    NONE = "none"
    PARTIAL = "partial"
    COMPLETE = "complete"
    UNKNOWN_PACKAGE = "unknown_package"


class TravelRepState(str, Enum):
    NOT_NEEDED = "not_needed"
    NO_DATE = "no_date"
    PAST_DATE = "past_date"
    NOT_CONFIRMED = "not_confirmed"
    NEEDS_URGENT = "needs_urgent"
    NORMAL_WINDOW = "normal_window"
    TOO_EARLY = "too_early"
    ASSIGNED_NO_DOCS = "assigned_no_docs"
    COMPLETE = "complete"


# States where no rep work applies yet; reported as NOT_NEEDED in summaries.
_INACTIVE_REP_STATES = {
    TravelRepState.NO_DATE,
    TravelRepState.PAST_DATE,
    TravelRepState.NOT_CONFIRMED,
}


class BookingState(str, Enum):
    NOT_BOOKED = "not_booked"
    BOOKED = "booked"


class OverallState(str, Enum):
    READY_TO_TRAVEL = "ready_to_travel"
    READY_TO_SCHEDULE = "ready_to_schedule"
    DEPOSITS_COMPLETE = "deposits_complete"
    DEPOSITS_INCOMPLETE = "deposits_incomplete"
    DEPOSITS_PENDING = "deposits_pending"
    UNKNOWN = "unknown"


class RecommendedAction(str, Enum):
    VERIFY_ITINERARY = "verify_itinerary"
    TRANSFER_TO_SCHEDULING = "transfer_to_scheduling"
    OFFER_SCHEDULING = "offer_scheduling"
    COLLECT_PAYMENT = "collect_payment"
    IDENTIFY_CALLER = "identify_caller"


class CustomerCategory(str, Enum):
    ACTIVE_CUSTOMER = "active_customer"
    PENDING_CUSTOMER = "pending_customer"
    NEW_CALLER = "new_caller"


class DepositEvaluation(BaseModel):
    state: DepositState
    total_paid: float
    expected: Optional[float] = None
    remaining: Optional[float] = None
    activation_method: Optional[ActivationMethod] = None


class FollowUp(BaseModel):
    """A note the evaluator asks the caller layer to raise."""

    memo_type: str
    details: str


class TravelRepEvaluation(BaseModel):
    state: TravelRepState
    days_remaining: Optional[int] = None
    rep_name: Optional[str] = None
    docs_sent_date: Optional[date] = None
    follow_up: Optional[FollowUp] = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def summary_state(self) -> TravelRepState:
        if self.state in _INACTIVE_REP_STATES:
            return TravelRepState.NOT_NEEDED
        return self.state


class BookingEvaluation(BaseModel):
    state: BookingState
    flight_ref: Optional[str] = None
    hotel_ref: Optional[str] = None

    @property
    def is_booked(self) -> bool:
        return self.state == BookingState.BOOKED


class CustomerSummary(BaseModel):
    customer_id: str
    full_name: str
    first_name: str
    last_name: str
    phone: str
    email: str
    package_code: str
    certificate_code: str
    confirm_status: str


class StatusResult(BaseModel):
    """Actionable status for one caller, recomputed on every request."""

    found: bool
    overall_state: OverallState
    category: CustomerCategory
    recommended_action: RecommendedAction
    human_message: str
    customer: Optional[CustomerSummary] = None
    matched_package_code: Optional[str] = None
    deposits: Optional[DepositEvaluation] = None
    travel_rep: Optional[TravelRepEvaluation] = None
    booking: Optional[BookingEvaluation] = None
    travel_date: Optional[date] = None
    follow_up_memo_id: Optional[str] = None
