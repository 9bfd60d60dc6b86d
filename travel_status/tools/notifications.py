"""
Chat space notifications for live call monitoring.

Message builders produce Google Chat card and text payloads; the notifier
posts them to an incoming webhook, threaded per call. Delivery is
best-effort: failures are logged and reported as False, never raised.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional, Protocol, Union

import httpx

from travel_status.schemas.call_schema import (
    CustomerSnapshot,
    LeadInfo,
    Speaker,
    thread_key_for,
)

logger = logging.getLogger(__name__)

NO_LEAD_INFO = "No additional lead information available."
TAKEOVER_ACTION = "requestCallTakeover"
REPLY_OPTION = "REPLY_MESSAGE_FALLBACK_TO_NEW_THREAD"


class Notifier(Protocol):
    async def send(self, message: dict[str, Any], thread_key: Optional[str] = None) -> bool:
        """Deliver a message; True when the chat space accepted it."""
        ...


# --- Message builders ---


def format_duration(seconds: Optional[float]) -> str:
    """Render a duration as ``"2m 5s"`` or ``"42s"``."""
    if not seconds or seconds < 0:
        return "0s"
    total = int(seconds)
    mins, secs = divmod(total, 60)
    if mins > 0:
        return f"{mins}m {secs}s"
    return f"{secs}s"


def format_lead_info(lead_info: Optional[LeadInfo]) -> str:
    if lead_info is None or lead_info.is_empty():
        return NO_LEAD_INFO
    lines = []
    for label, value in (
        ("Source", lead_info.source),
        ("Campaign", lead_info.campaign),
        ("Interests", lead_info.interests),
        ("Notes", lead_info.notes),
    ):
        if value:
            lines.append(f"**{label}:** {value}")
    return "\n".join(lines)


def format_timestamp(timestamp: Union[str, float, datetime, None]) -> str:
    """Render a transcript timestamp as ``HH:MM:SS`` (UTC for epoch values)."""
    if timestamp is None or timestamp == "":
        return datetime.now(timezone.utc).strftime("%H:%M:%S")
    if isinstance(timestamp, datetime):
        return timestamp.strftime("%H:%M:%S")
    if isinstance(timestamp, (int, float)):
        # Epoch values above 1e11 are milliseconds
        value = timestamp / 1000 if timestamp > 1e11 else timestamp
        return datetime.fromtimestamp(value, tz=timezone.utc).strftime("%H:%M:%S")
    try:
        return datetime.fromisoformat(str(timestamp).replace("Z", "+00:00")).strftime("%H:%M:%S")
    except ValueError:
        return str(timestamp)


def _decorated(label: str, text: str, icon: Optional[str] = None) -> dict[str, Any]:
    widget: dict[str, Any] = {"topLabel": label, "text": text}
    if icon:
        widget["startIcon"] = {"knownIcon": icon}
    return {"decoratedText": widget}


def build_call_alert_card(
    call_id: str,
    customer: CustomerSnapshot,
    lead_info: Optional[LeadInfo] = None,
    agent_name: Optional[str] = None,
    dashboard_url: str = "https://app.retellai.com",
) -> dict[str, Any]:
    """Card announcing a live call, with a takeover button."""
    return {
        "cardsV2": [{
            "cardId": thread_key_for(call_id),
            "card": {
                "header": {
                    "title": "🔴 LIVE CALL IN PROGRESS",
                    "subtitle": f"Agent: {agent_name or 'TravelBucks Concierge'}",
                },
                "sections": [
                    {
                        "header": "Customer Information",
                        "widgets": [
                            _decorated("Name", customer.name or "Unknown", "PERSON"),
                            _decorated("Phone", customer.phone or "Unknown", "PHONE"),
                            _decorated("Email", customer.email or "Not provided", "EMAIL"),
                        ],
                    },
                    {
                        "header": "Lead Details",
                        "collapsible": True,
                        "widgets": [{"textParagraph": {"text": format_lead_info(lead_info)}}],
                    },
                    {
                        "header": "Call Controls",
                        "widgets": [{
                            "buttonList": {
                                "buttons": [
                                    {
                                        "text": "🎧 Request Takeover",
                                        "onClick": {
                                            "action": {
                                                "function": TAKEOVER_ACTION,
                                                "parameters": [{"key": "call_id", "value": call_id}],
                                            }
                                        },
                                    },
                                    {
                                        "text": "📝 View Full Details",
                                        "onClick": {
                                            "openLink": {
                                                "url": f"{dashboard_url.rstrip('/')}/call/{call_id}"
                                            }
                                        },
                                    },
                                ]
                            }
                        }],
                    },
                ],
            },
        }]
    }


def build_transcript_message(
    speaker: Speaker, text: str, timestamp: Union[str, float, datetime, None] = None
) -> dict[str, Any]:
    icon, label = ("🤖", "Agent") if speaker == Speaker.AGENT else ("👤", "Customer")
    return {"text": f"**{icon} {label}** ({format_timestamp(timestamp)}):\n{text}"}


def build_call_ended_card(
    call_id: str, duration_seconds: float, outcome: Optional[str], customer: CustomerSnapshot
) -> dict[str, Any]:
    return {
        "cardsV2": [{
            "cardId": f"call-ended-{call_id}",
            "card": {
                "header": {
                    "title": "✅ Call Ended",
                    "subtitle": f"Duration: {format_duration(duration_seconds)}",
                },
                "sections": [{
                    "widgets": [
                        _decorated("Outcome", outcome or "Completed", "STAR"),
                        _decorated("Customer", customer.name or "Unknown"),
                    ]
                }],
            },
        }]
    }


def build_takeover_message(requester: str) -> dict[str, Any]:
    return {
        "text": f"🎧 **{requester}** has requested to take over the call. Transfer initiated..."
    }


# --- Delivery ---


class GoogleChatNotifier:
    """Posts messages to a Google Chat incoming webhook."""

    def __init__(
        self,
        webhook_url: str,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.webhook_url = webhook_url
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def send(self, message: dict[str, Any], thread_key: Optional[str] = None) -> bool:
        if not self.webhook_url:
            logger.warning("Google Chat webhook URL not configured; message dropped")
            return False

        # The webhook URL carries its own key and token in the query string
        url = httpx.URL(self.webhook_url)
        if thread_key:
            url = url.copy_merge_params(
                {"threadKey": thread_key, "messageReplyOption": REPLY_OPTION}
            )
        try:
            response = await self._client.post(url, json=message)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.error(
                "Google Chat rejected message (thread %s): HTTP %s",
                thread_key, exc.response.status_code,
            )
            return False
        except httpx.HTTPError as exc:
            logger.error("Error sending to Google Chat (thread %s): %s", thread_key, exc)
            return False
        return True

    async def close(self) -> None:
        await self._client.aclose()
