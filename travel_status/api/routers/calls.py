"""Voice platform call webhooks and the chat space interaction endpoints.

Webhooks always acknowledge with 200 once the payload names a call; an
event for a call that is not active is acknowledged with ``applied: false``.
"""

import dataclasses
import logging
import uuid

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from travel_status.api.dependencies import Services, get_services
from travel_status.schemas.call_schema import (
    CallEndedPayload,
    CallStartedPayload,
    ChatInteractionPayload,
    CustomerSnapshot,
    LeadInfo,
    Speaker,
    TranscriptUpdatePayload,
)
from travel_status.tools.notifications import TAKEOVER_ACTION, build_call_alert_card

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/webhook/retell/call-started")
async def call_started(payload: CallStartedPayload, services: Services = Depends(get_services)):
    metadata = payload.metadata
    call = payload.call
    customer = CustomerSnapshot(
        name=metadata.get("customer_name"),
        phone=(call.from_number if call else None) or metadata.get("customer_phone"),
        email=metadata.get("customer_email"),
    )
    lead_info = LeadInfo(
        source=metadata.get("lead_source"),
        campaign=metadata.get("campaign"),
        interests=metadata.get("interests"),
        notes=metadata.get("notes"),
    )
    agent_name = (payload.agent.agent_name if payload.agent else None) or metadata.get("agent_name")

    thread_key = await services.tracker.on_call_started(
        payload.resolved_call_id(), customer, lead_info, agent_name
    )
    return {"success": True, "message": "Call alert sent", "thread_key": thread_key}


@router.post("/webhook/retell/transcript-update")
async def transcript_update(
    payload: TranscriptUpdatePayload, services: Services = Depends(get_services)
):
    forwarded = 0
    updates = payload.updates()
    for update in updates:
        speaker = Speaker.AGENT if update.role == "agent" else Speaker.CUSTOMER
        if await services.tracker.on_transcript_event(
            payload.call_id, speaker, update.content, update.timestamp
        ):
            forwarded += 1
    return {
        "success": True,
        "message": "Transcript updates sent",
        "applied": forwarded == len(updates) and forwarded > 0,
        "forwarded": forwarded,
    }


@router.post("/webhook/retell/call-ended")
async def call_ended(payload: CallEndedPayload, services: Services = Depends(get_services)):
    summary = await services.tracker.on_call_ended(payload.call_id, payload.outcome())
    if summary is None:
        return {"success": True, "applied": False, "message": "Call was not active"}
    return {
        "success": True,
        "applied": True,
        "message": "Call ended notification sent",
        "duration_seconds": summary.duration_seconds,
    }


@router.post("/webhook/google-chat/interaction")
async def chat_interaction(
    payload: ChatInteractionPayload, services: Services = Depends(get_services)
):
    """Handle button clicks from the chat space."""
    if not payload.action or payload.action.actionMethodName != TAKEOVER_ACTION:
        return {"text": "Action received"}

    call_id = payload.parameter("call_id")
    if not call_id:
        return {"text": "❌ Error: Call ID not found"}

    result = await services.tracker.on_takeover_requested(call_id, payload.requester())
    if not result.accepted:
        return {"text": f"❌ {result.message}"}
    return {"actionResponse": {"type": "UPDATE_MESSAGE"}, "text": f"✅ {result.message}"}


@router.get("/google-chat/active-calls")
async def active_calls(services: Services = Depends(get_services)):
    tracker = services.tracker
    sessions = await tracker.active_calls()
    calls = [
        {
            "call_id": s.call_id,
            "thread_key": s.thread_key,
            "customer": dataclasses.asdict(s.customer),
            "agent_name": s.agent_name,
            "start_time": s.started_at.isoformat(),
            "transcript_count": s.transcript_count,
            "duration": tracker.elapsed_seconds(s),
        }
        for s in sessions
    ]
    return {"active_call_count": len(calls), "calls": calls}


@router.post("/google-chat/test")
async def send_test_alert(services: Services = Depends(get_services)):
    """Post a sample call alert to check the chat webhook configuration."""
    card = build_call_alert_card(
        f"test-{uuid.uuid4().hex[:8]}",
        CustomerSnapshot(name="John Test", phone="+1234567890", email="test@example.com"),
        LeadInfo(
            source="Test Campaign",
            campaign="Integration Test",
            interests="Travel packages",
            notes="This is a test alert",
        ),
        services.config.notifications.default_agent_name,
        services.config.notifications.dashboard_url,
    )
    if not await services.notifier.send(card, "test-thread"):
        return JSONResponse(
            status_code=503,
            content={"success": False, "message": "Failed to send test alert"},
        )
    return {"success": True, "message": "Test alert sent to Google Chat"}
