"""Live call monitoring state and the voice platform's webhook payloads."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, Field

THREAD_KEY_PREFIX = "call-"


def thread_key_for(call_id: str) -> str:
    """Derive the notification thread key for a call."""
    return f"{THREAD_KEY_PREFIX}{call_id}"


class Speaker(str, Enum):
    AGENT = "agent"
    CUSTOMER = "customer"


@dataclass(frozen=True)
class CustomerSnapshot:
    """Who is on the call, captured once when the call starts."""

    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None


@dataclass(frozen=True)
class LeadInfo:
    source: Optional[str] = None
    campaign: Optional[str] = None
    interests: Optional[str] = None
    notes: Optional[str] = None

    def is_empty(self) -> bool:
        return not any((self.source, self.campaign, self.interests, self.notes))


@dataclass
class CallSession:
    """
    Monitoring state for one active call.

    Lives in the session store from call start to call end and is never
    persisted beyond process memory.
    """

    call_id: str
    thread_key: str
    started_at: datetime
    customer: CustomerSnapshot = field(default_factory=CustomerSnapshot)
    lead_info: LeadInfo = field(default_factory=LeadInfo)
    agent_name: Optional[str] = None
    transcript_count: int = 0


@dataclass(frozen=True)
class CallSummary:
    """What the tracker reports when a call ends."""

    call_id: str
    thread_key: str
    duration_seconds: int
    outcome: str
    customer: CustomerSnapshot


@dataclass(frozen=True)
class TakeoverResult:
    accepted: bool
    message: str


# --- Webhook payloads ---


class RetellCall(BaseModel):
    call_id: Optional[str] = None
    from_number: Optional[str] = None
    to_number: Optional[str] = None


class RetellAgent(BaseModel):
    agent_name: Optional[str] = None


class CallStartedPayload(BaseModel):
    call_id: Optional[str] = None
    call: Optional[RetellCall] = None
    agent: Optional[RetellAgent] = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    def resolved_call_id(self) -> Optional[str]:
        return self.call_id or (self.call.call_id if self.call else None)


class TranscriptUpdate(BaseModel):
    role: Optional[str] = None
    content: str = ""
    timestamp: Optional[Union[str, float]] = None


class TranscriptUpdatePayload(BaseModel):
    call_id: Optional[str] = None
    transcript: Union[list[TranscriptUpdate], TranscriptUpdate, None] = None

    def updates(self) -> list[TranscriptUpdate]:
        if self.transcript is None:
            return []
        if isinstance(self.transcript, list):
            return self.transcript
        return [self.transcript]


class CallEndedPayload(BaseModel):
    call_id: Optional[str] = None
    call_analysis: Optional[dict[str, Any]] = None
    end_reason: Optional[str] = None

    def outcome(self) -> str:
        analysis = self.call_analysis or {}
        return analysis.get("outcome") or self.end_reason or "completed"


class ChatActionParameter(BaseModel):
    key: str
    value: Optional[str] = None


class ChatAction(BaseModel):
    actionMethodName: Optional[str] = None
    parameters: list[ChatActionParameter] = Field(default_factory=list)


class ChatUser(BaseModel):
    name: Optional[str] = None
    displayName: Optional[str] = None


class ChatInteractionPayload(BaseModel):
    """Button click event posted by the chat space."""

    action: Optional[ChatAction] = None
    parameters: list[ChatActionParameter] = Field(default_factory=list)
    user: Optional[ChatUser] = None

    def parameter(self, key: str) -> Optional[str]:
        candidates = list(self.parameters)
        if self.action:
            candidates.extend(self.action.parameters)
        for param in candidates:
            if param.key == key:
                return param.value
        return None

    def requester(self) -> str:
        if self.user:
            return self.user.displayName or self.user.name or "Team Member"
        return "Team Member"
