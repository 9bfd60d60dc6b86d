"""
Status aggregation: one actionable answer per caller.

Looks the caller up in the customer store, resolves the package policy,
runs the deposit, travel-rep and booking evaluators, and combines them by
priority. Deposit completeness dominates; booking and scheduling only
matter once deposits are settled:

    complete + booked                 → ready_to_travel     / verify_itinerary
    complete + future travel date     → ready_to_schedule   / transfer_to_scheduling
    complete                          → deposits_complete   / offer_scheduling
    partial                           → deposits_incomplete / collect_payment
    none / unknown package            → deposits_pending    / collect_payment

Nothing is cached: each call reflects the store as of that request.
"""

import logging
from datetime import date, datetime
from typing import Callable, Optional
from zoneinfo import ZoneInfo

from travel_status.engine.booking import evaluate_booking
from travel_status.engine.deposits import evaluate_deposits
from travel_status.engine.knowledge_base import KnowledgeBaseResolver
from travel_status.engine.travel_rep import (
    DEFAULT_URGENT_DAYS,
    DEFAULT_WINDOW_END_DAYS,
    days_until,
    evaluate_travel_rep,
)
from travel_status.errors import CollaboratorFailure, InputValidationError
from travel_status.schemas.customer_schema import ActivationMethod, CustomerRecord, PackagePolicy
from travel_status.schemas.status_schema import (
    BookingEvaluation,
    CustomerCategory,
    CustomerSummary,
    DepositEvaluation,
    DepositState,
    OverallState,
    RecommendedAction,
    StatusResult,
    TravelRepEvaluation,
)
from travel_status.tools.customers import CustomerStore
from travel_status.tools.memos import MemoStore, ensure_memo
from travel_status.utils import is_blank, normalize_phone

logger = logging.getLogger(__name__)

ACCEPTED_KEYS = ("phone", "certificate", "email")

UNKNOWN_CALLER_MESSAGE = (
    "I couldn't find your account. Could you give me the phone number, "
    "certificate number, or email address you used when you purchased?"
)


def _money(amount: float) -> str:
    return f"${amount:,.2f}"


def _summarize(record: CustomerRecord) -> CustomerSummary:
    return CustomerSummary(
        customer_id=record.customer_id,
        full_name=record.full_name,
        first_name=record.first_name,
        last_name=record.last_name,
        phone=normalize_phone(record.phone_primary),
        email=record.email,
        package_code=record.package_code,
        certificate_code=record.certificate_code,
        confirm_status=record.confirm_status,
    )


def combine(
    deposits: DepositEvaluation,
    travel_rep: TravelRepEvaluation,
    booking: BookingEvaluation,
    travel_date: Optional[date],
    today: date,
) -> tuple[OverallState, RecommendedAction, str]:
    """Pick the overall state, the next action, and what the agent should say."""
    if deposits.state == DepositState.COMPLETE:
        if booking.is_booked:
            rep = travel_rep.rep_name or "being assigned"
            return (
                OverallState.READY_TO_TRAVEL,
                RecommendedAction.VERIFY_ITINERARY,
                "Great news! Your deposits are complete and you're booked. "
                f"Your travel rep is {rep}. Do you need your itinerary resent?",
            )
        if travel_date is not None and days_until(travel_date, today) >= 0:
            return (
                OverallState.READY_TO_SCHEDULE,
                RecommendedAction.TRANSFER_TO_SCHEDULING,
                "Your deposits are complete! You're all set to schedule your travel "
                "dates. Would you like me to transfer you to our scheduling team?",
            )
        return (
            OverallState.DEPOSITS_COMPLETE,
            RecommendedAction.OFFER_SCHEDULING,
            "Your deposits are complete! You can now schedule your travel dates. "
            "When would you like to travel?",
        )

    if deposits.state == DepositState.PARTIAL:
        return (
            OverallState.DEPOSITS_INCOMPLETE,
            RecommendedAction.COLLECT_PAYMENT,
            f"I see you've paid {_money(deposits.total_paid)} toward your "
            f"{_money(deposits.expected or 0)} deposit. You have "
            f"{_money(deposits.remaining or 0)} remaining. "
            "Would you like to complete your payment today?",
        )

    # Unknown packages get the online wording; the expected amount is unavailable.
    if deposits.activation_method == ActivationMethod.MAIL:
        message = (
            "Your deposits haven't been received yet. Have you mailed in your "
            f"activation form? The total deposit needed is {_money(deposits.expected or 0)}."
        )
    else:
        message = (
            "Your deposits haven't been received yet. You can activate your "
            "certificate online at our website. Would you like me to send you the link?"
        )
    return OverallState.DEPOSITS_PENDING, RecommendedAction.COLLECT_PAYMENT, message


class StatusAggregator:
    """Resolves a caller to a StatusResult using the injected collaborators.

    Args:
        store: Customer record lookups.
        resolver: Package knowledge base resolver.
        memos: Note collaborator; when None, follow-ups are only logged.
        urgent_days: Travel-rep urgency threshold in days.
        window_end_days: End of the normal travel-rep assignment window.
        timezone: IANA zone whose calendar date counts as "today".
        today_fn: Overrides the clock, mainly for tests.
    """

    def __init__(
        self,
        store: CustomerStore,
        resolver: KnowledgeBaseResolver,
        memos: Optional[MemoStore] = None,
        *,
        urgent_days: int = DEFAULT_URGENT_DAYS,
        window_end_days: int = DEFAULT_WINDOW_END_DAYS,
        timezone: str = "UTC",
        today_fn: Optional[Callable[[], date]] = None,
    ) -> None:
        self.store = store
        self.resolver = resolver
        self.memos = memos
        self.urgent_days = urgent_days
        self.window_end_days = window_end_days
        self._zone = ZoneInfo(timezone)
        self._today_fn = today_fn

    def today(self) -> date:
        if self._today_fn is not None:
            return self._today_fn()
        return datetime.now(self._zone).date()

    async def find_customer(
        self,
        phone: Optional[str] = None,
        certificate: Optional[str] = None,
        email: Optional[str] = None,
    ) -> Optional[CustomerRecord]:
        """Look a caller up by phone, then certificate, then email.

        Every supplied key is tried in that order until one matches.

        Raises:
            InputValidationError: If no usable key was supplied.
            CollaboratorFailure: If the store cannot be reached.
        """
        digits = normalize_phone(phone)
        certificate = None if is_blank(certificate) else certificate.strip()
        email = None if is_blank(email) else email.strip()

        if not (digits or certificate or email):
            raise InputValidationError(
                "Provide a phone number, certificate number, or email address",
                accepted=ACCEPTED_KEYS,
            )

        if digits:
            record = await self.store.find_by_phone(digits)
            if record is not None:
                return record
        if certificate:
            record = await self.store.find_by_certificate(certificate)
            if record is not None:
                return record
        if email:
            return await self.store.find_by_email(email)
        return None

    async def resolve_policy(self, record: CustomerRecord) -> Optional[PackagePolicy]:
        """Package code first; the certificate code only when that fails."""
        for code in (record.package_code, record.certificate_code):
            if not code:
                continue
            policy = await self.resolver.resolve(code)
            if policy is not None:
                return policy
        return None

    async def evaluate(self, record: CustomerRecord) -> StatusResult:
        """Build the status for a record already fetched from the store."""
        today = self.today()
        policy = await self.resolve_policy(record)

        deposits = evaluate_deposits(
            record.deposit_validation, record.deposit_confirmation, policy
        )
        travel_rep = evaluate_travel_rep(
            record.travel_date,
            record.confirm_status,
            record.travel_rep,
            record.docs_sent_date,
            today,
            urgent_days=self.urgent_days,
            window_end_days=self.window_end_days,
        )
        booking = evaluate_booking(record.flight_ref, record.hotel_ref)
        overall, action, message = combine(
            deposits, travel_rep, booking, record.travel_date, today
        )

        memo_id = await self._raise_follow_up(record, travel_rep, today)

        logger.info(
            "Status for customer %s: %s (deposits=%s, travel_rep=%s, booking=%s)",
            record.customer_id or "?", overall.value, deposits.state.value,
            travel_rep.state.value, booking.state.value,
        )
        return StatusResult(
            found=True,
            overall_state=overall,
            category=(
                CustomerCategory.ACTIVE_CUSTOMER
                if deposits.state == DepositState.COMPLETE
                else CustomerCategory.PENDING_CUSTOMER
            ),
            recommended_action=action,
            human_message=message,
            customer=_summarize(record),
            matched_package_code=policy.code if policy else None,
            deposits=deposits,
            travel_rep=travel_rep,
            booking=booking,
            travel_date=record.travel_date,
            follow_up_memo_id=memo_id,
        )

    async def resolve(
        self,
        phone: Optional[str] = None,
        certificate: Optional[str] = None,
        email: Optional[str] = None,
    ) -> StatusResult:
        """Full status for a caller; an unknown caller is a result, not an error."""
        record = await self.find_customer(phone=phone, certificate=certificate, email=email)
        if record is None:
            logger.info("Caller not found in customer store")
            return StatusResult(
                found=False,
                overall_state=OverallState.UNKNOWN,
                category=CustomerCategory.NEW_CALLER,
                recommended_action=RecommendedAction.IDENTIFY_CALLER,
                human_message=UNKNOWN_CALLER_MESSAGE,
            )
        return await self.evaluate(record)

    async def _raise_follow_up(
        self, record: CustomerRecord, travel_rep: TravelRepEvaluation, today: date
    ) -> Optional[str]:
        follow_up = travel_rep.follow_up
        if follow_up is None:
            return None
        if self.memos is None:
            logger.info(
                "Follow-up '%s' for customer %s not recorded (no memo store)",
                follow_up.memo_type, record.customer_id,
            )
            return None
        try:
            memo = await ensure_memo(
                self.memos,
                follow_up.memo_type,
                follow_up.details,
                record.customer_id,
                normalize_phone(record.phone_primary),
                today,
            )
        except CollaboratorFailure as exc:
            logger.warning(
                "Could not record follow-up '%s' for customer %s: %s",
                follow_up.memo_type, record.customer_id, exc,
            )
            return None
        return memo.memo_id
