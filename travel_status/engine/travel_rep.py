"""
Travel-rep assignment window evaluation.

An ordered decision chain; the first matching branch wins:

    blank travel date       → no_date
    date already passed     → past_date
    trip not confirmed      → not_confirmed
    no rep, < 45 days out   → needs_urgent      (raise a note)
    no rep, 45..75 days     → normal_window
    no rep, > 75 days       → too_early
    rep, no documents sent  → assigned_no_docs  (raise a note)
    rep, documents sent     → complete
"""

from datetime import date, datetime
from typing import Any, Optional

from travel_status.schemas.status_schema import FollowUp, TravelRepEvaluation, TravelRepState
from travel_status.utils import is_blank, parse_date

CONFIRMED_STATUS = "confirm"
DEFAULT_URGENT_DAYS = 45
DEFAULT_WINDOW_END_DAYS = 75

NEEDS_TR_ASSIGNMENT = "needs tr assignment"
ASK_TR_TO_CALL = "ask tr to call"


def days_until(travel_date: date, today: date) -> int:
    """Whole calendar days from ``today`` to ``travel_date`` (negative if past)."""
    return (travel_date - today).days


def evaluate_travel_rep(
    travel_date: Any,
    confirm_status: Optional[str],
    rep_name: Optional[str],
    docs_sent_date: Any,
    today: date,
    urgent_days: int = DEFAULT_URGENT_DAYS,
    window_end_days: int = DEFAULT_WINDOW_END_DAYS,
) -> TravelRepEvaluation:
    """Classify travel-rep assignment state for one trip.

    Args:
        travel_date: Assigned travel date; any blank sentinel or an
            unparseable value counts as not set.
        confirm_status: Trip confirmation status, compared to "confirm".
        rep_name: Assigned travel rep, blank if none.
        docs_sent_date: Date the rep sent travel documents, blank if not sent.
        today: Calendar date to count from.
        urgent_days: Below this many days out, an unassigned trip is urgent.
        window_end_days: Above this many days out, assignment is too early.
    """
    if isinstance(today, datetime):
        today = today.date()

    trip_date = parse_date(travel_date)
    if trip_date is None:
        return TravelRepEvaluation(state=TravelRepState.NO_DATE)

    days_remaining = days_until(trip_date, today)
    if days_remaining < 0:
        return TravelRepEvaluation(state=TravelRepState.PAST_DATE, days_remaining=days_remaining)

    if confirm_status != CONFIRMED_STATUS:
        return TravelRepEvaluation(
            state=TravelRepState.NOT_CONFIRMED, days_remaining=days_remaining
        )

    if is_blank(rep_name):
        if days_remaining < urgent_days:
            return TravelRepEvaluation(
                state=TravelRepState.NEEDS_URGENT,
                days_remaining=days_remaining,
                follow_up=FollowUp(
                    memo_type=NEEDS_TR_ASSIGNMENT,
                    details=(
                        f"Travel date: {trip_date.isoformat()}, "
                        f"Days remaining: {days_remaining}"
                    ),
                ),
            )
        if days_remaining <= window_end_days:
            return TravelRepEvaluation(
                state=TravelRepState.NORMAL_WINDOW, days_remaining=days_remaining
            )
        return TravelRepEvaluation(state=TravelRepState.TOO_EARLY, days_remaining=days_remaining)

    rep = str(rep_name).strip()
    sent = parse_date(docs_sent_date)
    if sent is None:
        return TravelRepEvaluation(
            state=TravelRepState.ASSIGNED_NO_DOCS,
            days_remaining=days_remaining,
            rep_name=rep,
            follow_up=FollowUp(
                memo_type=ASK_TR_TO_CALL,
                details=f"Travel Rep: {rep}, Travel date: {trip_date.isoformat()}",
            ),
        )

    return TravelRepEvaluation(
        state=TravelRepState.COMPLETE,
        days_remaining=days_remaining,
        rep_name=rep,
        docs_sent_date=sent,
    )
