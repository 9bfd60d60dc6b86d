"""Tests for chat message builders and webhook delivery."""

import json

import httpx
import pytest

from travel_status.schemas.call_schema import CustomerSnapshot, LeadInfo, Speaker
from travel_status.tools.notifications import (
    NO_LEAD_INFO,
    GoogleChatNotifier,
    build_call_alert_card,
    build_call_ended_card,
    build_transcript_message,
    format_duration,
    format_lead_info,
    format_timestamp,
)

WEBHOOK = "https://chat.googleapis.com/v1/spaces/AAA/messages?key=k&token=t"


class TestFormatting:
    @pytest.mark.parametrize("seconds, expected", [(0, "0s"), (None, "0s"), (42, "42s"), (65, "1m 5s"), (600, "10m 0s")])
    def test_format_duration(self, seconds, expected):
        assert format_duration(seconds) == expected

    def test_empty_lead_info(self):
        assert format_lead_info(None) == NO_LEAD_INFO
        assert format_lead_info(LeadInfo()) == NO_LEAD_INFO

    def test_lead_info_lines(self):
        text = format_lead_info(LeadInfo(source="Facebook", notes="Called twice"))
        assert text == "**Source:** Facebook\n**Notes:** Called twice"

    def test_timestamps(self):
        assert format_timestamp("2026-03-02T15:04:05Z") == "15:04:05"
        assert format_timestamp(1772463845) == format_timestamp(1772463845000)


class TestBuilders:
    def test_alert_card_has_takeover_button(self):
        card = build_call_alert_card("c1", CustomerSnapshot(), dashboard_url="https://dash.example/")
        buttons = card["cardsV2"][0]["card"]["sections"][2]["widgets"][0]["buttonList"]["buttons"]
        assert buttons[0]["onClick"]["action"]["parameters"] == [{"key": "call_id", "value": "c1"}]
        assert buttons[1]["onClick"]["openLink"]["url"] == "https://dash.example/call/c1"

    def test_alert_card_defaults(self):
        card = build_call_alert_card("c1", CustomerSnapshot())
        widgets = card["cardsV2"][0]["card"]["sections"][0]["widgets"]
        assert [w["decoratedText"]["text"] for w in widgets] == ["Unknown", "Unknown", "Not provided"]

    def test_transcript_speakers(self):
        assert "🤖 Agent" in build_transcript_message(Speaker.AGENT, "hi", "2026-03-02T15:00:00Z")["text"]
        assert "👤 Customer" in build_transcript_message(Speaker.CUSTOMER, "hi", "2026-03-02T15:00:00Z")["text"]

    def test_ended_card(self):
        card = build_call_ended_card("c1", 65, None, CustomerSnapshot(name="Sarah"))
        assert card["cardsV2"][0]["cardId"] == "call-ended-c1"
        assert "Completed" in str(card)


class TestGoogleChatNotifier:
    @pytest.mark.asyncio
    async def test_posts_to_thread(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"name": "spaces/AAA/messages/1"})

        notifier = GoogleChatNotifier(WEBHOOK, transport=httpx.MockTransport(handler))
        assert await notifier.send({"text": "hello"}, "call-c1")
        await notifier.close()

        params = seen[0].url.params
        assert params["key"] == "k"
        assert params["token"] == "t"
        assert params["threadKey"] == "call-c1"
        assert params["messageReplyOption"] == "REPLY_MESSAGE_FALLBACK_TO_NEW_THREAD"
        assert seen[0].url.path == "/v1/spaces/AAA/messages"

    @pytest.mark.asyncio
    async def test_unthreaded_message_keeps_webhook_credentials(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={})

        notifier = GoogleChatNotifier(WEBHOOK, transport=httpx.MockTransport(handler))
        assert await notifier.send({"text": "hello"})
        await notifier.close()

        assert dict(seen[0].url.params) == {"key": "k", "token": "t"}
        assert json.loads(seen[0].content) == {"text": "hello"}

    @pytest.mark.asyncio
    async def test_rejected_message_returns_false(self):
        notifier = GoogleChatNotifier(WEBHOOK, transport=httpx.MockTransport(lambda r: httpx.Response(400)))
        assert not await notifier.send({"text": "hello"}, "call-c1")

    @pytest.mark.asyncio
    async def test_network_error_returns_false(self):
        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        notifier = GoogleChatNotifier(WEBHOOK, transport=httpx.MockTransport(handler))
        assert not await notifier.send({"text": "hello"})

    @pytest.mark.asyncio
    async def test_unconfigured_webhook(self):
        calls = []
        notifier = GoogleChatNotifier("", transport=httpx.MockTransport(lambda r: calls.append(r)))
        assert not await notifier.send({"text": "hello"})
        assert calls == []
