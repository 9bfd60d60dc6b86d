"""
Live call session tracking.

Each call moves absent → active → absent:

    on_call_started        creates the session and posts the alert card
    on_transcript_event    counts the line and posts it to the call's thread
    on_call_ended          posts the summary and removes the session
    on_takeover_requested  posts a takeover notice (the transfer itself is
                           handled by the voice platform, not here)

Events that arrive for a call that is not active are logged as warnings
and ignored; webhook senders are never failed for ordering races.
"""

from datetime import datetime, timezone
from typing import Any, Callable, Optional, Union

from travel_status.calls.session_store import CallSessionStore
from travel_status.errors import InputValidationError
from travel_status.logging_context import get_call_logger, set_call_id
from travel_status.schemas.call_schema import (
    CallSession,
    CallSummary,
    CustomerSnapshot,
    LeadInfo,
    Speaker,
    TakeoverResult,
    thread_key_for,
)
from travel_status.tools.notifications import (
    Notifier,
    build_call_alert_card,
    build_call_ended_card,
    build_takeover_message,
    build_transcript_message,
)

logger = get_call_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LiveCallTracker:
    """Tracks active calls and mirrors them into the team's chat space."""

    def __init__(
        self,
        notifier: Notifier,
        store: Optional[CallSessionStore] = None,
        clock: Callable[[], datetime] = _utcnow,
        dashboard_url: str = "https://app.retellai.com",
        default_agent_name: str = "TravelBucks Concierge",
    ) -> None:
        self.notifier = notifier
        self.store = store or CallSessionStore()
        self._clock = clock
        self.dashboard_url = dashboard_url
        self.default_agent_name = default_agent_name

    def elapsed_seconds(self, session: CallSession) -> int:
        return max(0, int((self._clock() - session.started_at).total_seconds()))

    async def on_call_started(
        self,
        call_id: str,
        customer: Optional[CustomerSnapshot] = None,
        lead_info: Optional[LeadInfo] = None,
        agent_name: Optional[str] = None,
    ) -> str:
        """Open a session and return its thread key.

        A duplicate start keeps the original session (and start time) and
        sends no second alert.
        """
        call_id = self._require_call_id(call_id)
        thread_key = thread_key_for(call_id)
        session = CallSession(
            call_id=call_id,
            thread_key=thread_key,
            started_at=self._clock(),
            customer=customer or CustomerSnapshot(),
            lead_info=lead_info or LeadInfo(),
            agent_name=agent_name or self.default_agent_name,
        )

        async with self.store.call_lock(call_id):
            if not await self.store.create(session):
                logger.warning("Duplicate call-started event for %s ignored", call_id)
                return thread_key
            logger.info("Call started (customer: %s)", session.customer.name or "unknown")
            card = build_call_alert_card(
                call_id,
                session.customer,
                session.lead_info,
                session.agent_name,
                self.dashboard_url,
            )
            await self._notify(card, thread_key, "call alert")
        return thread_key

    async def on_transcript_event(
        self,
        call_id: str,
        speaker: Speaker,
        text: str,
        timestamp: Union[str, float, datetime, None] = None,
    ) -> bool:
        """Forward one transcript line. False when the call is not active."""
        call_id = self._require_call_id(call_id)
        async with self.store.call_lock(call_id):
            session = await self.store.get(call_id)
            if session is None:
                logger.warning("Transcript event for inactive call %s ignored", call_id)
                return False
            count = await self.store.increment_transcript(call_id)
            message = build_transcript_message(speaker, text, timestamp)
            await self._notify(message, session.thread_key, "transcript update")
        logger.debug("Transcript line %s forwarded (%s)", count, speaker.value)
        return True

    async def on_call_ended(self, call_id: str, outcome: Optional[str] = None) -> Optional[CallSummary]:
        """Close the session and post the summary; None when the call is not active."""
        call_id = self._require_call_id(call_id)
        async with self.store.call_lock(call_id):
            session = await self.store.get(call_id)
            if session is None:
                logger.warning("Call-ended event for inactive call %s ignored", call_id)
                return None
            summary = CallSummary(
                call_id=call_id,
                thread_key=session.thread_key,
                duration_seconds=self.elapsed_seconds(session),
                outcome=outcome or "completed",
                customer=session.customer,
            )
            card = build_call_ended_card(
                call_id, summary.duration_seconds, summary.outcome, summary.customer
            )
            await self._notify(card, session.thread_key, "call ended")
            await self.store.remove(call_id)
        logger.info(
            "Call ended after %ss (%d transcript lines, outcome: %s)",
            summary.duration_seconds, session.transcript_count, summary.outcome,
        )
        return summary

    async def on_takeover_requested(self, call_id: str, requester: str) -> TakeoverResult:
        call_id = self._require_call_id(call_id)
        requester = requester or "Team Member"
        async with self.store.call_lock(call_id):
            session = await self.store.get(call_id)
            if session is None:
                logger.warning("Takeover requested for inactive call %s", call_id)
                return TakeoverResult(
                    accepted=False, message="Call has already ended or is not active"
                )
            await self._notify(build_takeover_message(requester), session.thread_key, "takeover")
        logger.info("Takeover requested by %s", requester)
        return TakeoverResult(
            accepted=True, message=f"Takeover requested by {requester}. Transferring call..."
        )

    async def active_calls(self) -> list[CallSession]:
        return await self.store.snapshot()

    @staticmethod
    def _require_call_id(call_id: Optional[str]) -> str:
        call_id = (call_id or "").strip()
        if not call_id:
            raise InputValidationError("A call_id is required", accepted=["call_id"])
        set_call_id(call_id)
        return call_id

    async def _notify(self, message: dict[str, Any], thread_key: str, kind: str) -> None:
        if not await self.notifier.send(message, thread_key):
            logger.warning("Chat notification (%s) not delivered", kind)
