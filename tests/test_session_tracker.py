"""Tests for live call session tracking."""

import asyncio

import pytest

from travel_status.calls.session_store import CallSessionStore
from travel_status.calls.tracker import LiveCallTracker
from travel_status.errors import InputValidationError
from travel_status.schemas.call_schema import CustomerSnapshot, LeadInfo, Speaker

from tests.conftest import RecordingNotifier

SARAH = CustomerSnapshot(name="Sarah Johnson", phone="+18182121359")


class TestCallLifecycle:
    @pytest.mark.asyncio
    async def test_start_then_end_removes_session(self, tracker, notifier, clock):
        thread_key = await tracker.on_call_started("abc", SARAH)
        assert thread_key == "call-abc"
        assert len(await tracker.active_calls()) == 1

        clock.advance(125)
        summary = await tracker.on_call_ended("abc", "booked")

        assert summary.duration_seconds == 125
        assert summary.outcome == "booked"
        assert summary.customer == SARAH
        assert await tracker.active_calls() == []
        assert [key for _, key in notifier.sent] == ["call-abc", "call-abc"]
        ended_card = notifier.sent[-1][0]["cardsV2"][0]
        assert ended_card["card"]["header"]["subtitle"] == "Duration: 2m 5s"

    @pytest.mark.asyncio
    async def test_alert_card_content(self, tracker, notifier):
        lead = LeadInfo(source="Facebook", campaign="Spring")
        await tracker.on_call_started("abc", SARAH, lead, agent_name="Concierge")
        card = notifier.sent[0][0]["cardsV2"][0]
        assert card["cardId"] == "call-abc"
        assert card["card"]["header"]["subtitle"] == "Agent: Concierge"
        assert "**Source:** Facebook" in str(card)

    @pytest.mark.asyncio
    async def test_default_agent_name(self, tracker):
        await tracker.on_call_started("abc")
        [session] = await tracker.active_calls()
        assert session.agent_name == "TravelBucks Concierge"

    @pytest.mark.asyncio
    async def test_transcript_counted_and_forwarded(self, tracker, notifier):
        await tracker.on_call_started("abc", SARAH)
        assert await tracker.on_transcript_event("abc", Speaker.CUSTOMER, "Hi there", "2026-03-02T15:00:05Z")
        assert await tracker.on_transcript_event("abc", Speaker.AGENT, "Hello Sarah", None)

        [session] = await tracker.active_calls()
        assert session.transcript_count == 2
        texts = [message["text"] for message, _ in notifier.sent[1:]]
        assert texts[0].startswith("**👤 Customer** (15:00:05)")
        assert "Hello Sarah" in texts[1]

    @pytest.mark.asyncio
    async def test_takeover(self, tracker, notifier):
        await tracker.on_call_started("abc", SARAH)
        result = await tracker.on_takeover_requested("abc", "Dana")
        assert result.accepted
        assert "Dana" in result.message
        assert "**Dana** has requested to take over" in notifier.sent[-1][0]["text"]
        assert notifier.sent[-1][1] == "call-abc"


class TestOutOfOrderEvents:
    @pytest.mark.asyncio
    async def test_transcript_for_unknown_call(self, tracker, notifier):
        assert not await tracker.on_transcript_event("ghost", Speaker.CUSTOMER, "hello")
        assert await tracker.active_calls() == []
        assert notifier.sent == []

    @pytest.mark.asyncio
    async def test_end_for_unknown_call(self, tracker, notifier):
        assert await tracker.on_call_ended("ghost") is None
        assert notifier.sent == []

    @pytest.mark.asyncio
    async def test_takeover_for_ended_call(self, tracker):
        await tracker.on_call_started("abc")
        await tracker.on_call_ended("abc")
        result = await tracker.on_takeover_requested("abc", "Dana")
        assert not result.accepted
        assert "not active" in result.message

    @pytest.mark.asyncio
    async def test_events_for_inactive_calls_leave_no_locks(self, tracker):
        for i in range(200):
            await tracker.on_transcript_event(f"late{i}", Speaker.AGENT, "hi")
            await tracker.on_call_ended(f"late{i}")
            await tracker.on_takeover_requested(f"late{i}", "Dana")
        assert await tracker.store.count() == 0
        assert await tracker.store.lock_count() == 0

    @pytest.mark.asyncio
    async def test_concurrent_inactive_events_leave_no_locks(self, tracker):
        await asyncio.gather(
            *(tracker.on_transcript_event("ghost", Speaker.CUSTOMER, f"line {i}") for i in range(20)),
            *(tracker.on_call_ended("ghost") for _ in range(5)),
        )
        assert await tracker.store.lock_count() == 0

    @pytest.mark.asyncio
    async def test_lock_released_when_call_ends(self, tracker):
        await tracker.on_call_started("abc")
        assert await tracker.store.lock_count() == 1
        await tracker.on_call_ended("abc")
        assert await tracker.store.lock_count() == 0

    @pytest.mark.asyncio
    async def test_duplicate_start_keeps_original(self, tracker, notifier, clock):
        await tracker.on_call_started("abc", SARAH)
        [original] = await tracker.active_calls()

        clock.advance(30)
        thread_key = await tracker.on_call_started("abc", CustomerSnapshot(name="Someone Else"))

        [session] = await tracker.active_calls()
        assert thread_key == "call-abc"
        assert session.started_at == original.started_at
        assert session.customer == SARAH
        assert len(notifier.sent) == 1

    @pytest.mark.asyncio
    async def test_restart_after_end(self, tracker, clock):
        await tracker.on_call_started("abc")
        await tracker.on_call_ended("abc")
        clock.advance(60)
        await tracker.on_call_started("abc")
        [session] = await tracker.active_calls()
        assert session.started_at == clock.now
        assert session.transcript_count == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("call_id", ["", "   ", None])
    async def test_missing_call_id(self, tracker, call_id):
        with pytest.raises(InputValidationError) as exc_info:
            await tracker.on_call_started(call_id)
        assert exc_info.value.accepted == ["call_id"]
        with pytest.raises(InputValidationError):
            await tracker.on_transcript_event(call_id, Speaker.AGENT, "hi")


class TestConcurrency:
    @pytest.mark.asyncio
    async def test_concurrent_transcript_events_all_counted(self, tracker):
        await tracker.on_call_started("abc")
        results = await asyncio.gather(
            *(tracker.on_transcript_event("abc", Speaker.CUSTOMER, f"line {i}") for i in range(50))
        )
        assert all(results)
        [session] = await tracker.active_calls()
        assert session.transcript_count == 50

    @pytest.mark.asyncio
    async def test_concurrent_duplicate_starts(self, tracker, notifier):
        keys = await asyncio.gather(*(tracker.on_call_started("abc") for _ in range(10)))
        assert set(keys) == {"call-abc"}
        assert len(await tracker.active_calls()) == 1
        assert len(notifier.sent) == 1

    @pytest.mark.asyncio
    async def test_independent_calls(self, tracker):
        await asyncio.gather(*(tracker.on_call_started(f"call{i}") for i in range(5)))
        await asyncio.gather(
            *(tracker.on_transcript_event(f"call{i}", Speaker.AGENT, "hi") for i in range(5) for _ in range(3))
        )
        sessions = await tracker.active_calls()
        assert len(sessions) == 5
        assert {s.transcript_count for s in sessions} == {3}

    @pytest.mark.asyncio
    async def test_snapshot_is_a_copy(self, tracker):
        await tracker.on_call_started("abc")
        [session] = await tracker.active_calls()
        session.transcript_count = 99
        [fresh] = await tracker.active_calls()
        assert fresh.transcript_count == 0


class TestNotificationFailures:
    @pytest.mark.asyncio
    async def test_undelivered_notifications_do_not_break_lifecycle(self, clock):
        notifier = RecordingNotifier(delivered=False)
        tracker = LiveCallTracker(notifier, CallSessionStore(), clock=clock)
        await tracker.on_call_started("abc")
        assert await tracker.on_transcript_event("abc", Speaker.AGENT, "hi")
        assert (await tracker.on_takeover_requested("abc", "Dana")).accepted
        assert await tracker.on_call_ended("abc") is not None
        assert len(notifier.sent) == 4
