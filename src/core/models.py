"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any integration-specific types.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Union


class SessionState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    PAIRING = "pairing"
    READY = "ready"
    DISCONNECTED = "disconnected"
    FAILED = "failed"


class MessageKind(str, Enum):
    TEXT = "text"
    MEDIA = "media"
    SYSTEM = "system"


class Phase(str, Enum):
    PLANNING = "planning"
    EXCAVATION = "excavation"
    FOUNDATION = "foundation"
    STRUCTURE = "structure"
    FINISHING = "finishing"


class InspectionType(str, Enum):
    FOUNDATION = "foundation"
    STRUCTURE = "structure"
    ELECTRICAL = "electrical"
    PLUMBING = "plumbing"


class Urgency(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class Group:
    """An external chat resource as reported by the channel adapter."""

    id: Union[int, str]
    display_name: str
    member_count: int = 0


@dataclass(frozen=True)
class RawMessage:
    """Provider-neutral inbound record produced by a channel adapter.

    Adapters fill in whatever the provider exposes; the normalizer decides
    how missing fields fall back.
    """

    timestamp: Union[datetime, int, float]
    sender_id: Optional[str] = None
    contact_name: Optional[str] = None
    push_name: Optional[str] = None
    body: Optional[str] = None
    has_media: bool = False


@dataclass(frozen=True)
class Message:
    """Canonical chat message in display form."""

    timestamp: datetime
    sender: str
    body: str
    kind: MessageKind


@dataclass(frozen=True)
class SentReceipt:
    group_name: str
    sent_at: datetime


@dataclass(frozen=True)
class Project:
    """A tracked construction project."""

    id: str
    name: str
    location: str
    contact: str
    created_at: datetime
    last_updated_at: datetime
    timeline: Optional[str] = None
    budget: Optional[float] = None
    phase: Phase = Phase.PLANNING
    completion_percent: int = 0
    notes: Optional[str] = None


@dataclass(frozen=True)
class Inspection:
    id: str
    project_id: str
    type: InspectionType
    scheduled_date: str
    inspector: Optional[str] = None
    status: str = "scheduled"


@dataclass(frozen=True)
class NotificationRecord:
    """Append-only log entry for every notification the engine dispatches."""

    project_id: str
    target_contact: str
    rendered_body: str
    urgency: Urgency
    dispatched_at: datetime


@dataclass(frozen=True)
class Envelope:
    """Uniform response wrapper: a single text content item."""

    text: str
    is_error: bool = False

    @property
    def content(self) -> list[dict[str, str]]:
        return [{"type": "text", "text": self.text}]
