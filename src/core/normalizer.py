"""Inbound message normalization (core domain)."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, Optional, Union

from core.errors import ValidationFailure
from core.models import Message, MessageKind, RawMessage

DEFAULT_LIMIT = 10
MAX_LIMIT = 50
MEDIA_PLACEHOLDER = "[Media/Attachment]"
SYSTEM_SENDER = "System"


def clamp_limit(limit: Optional[int]) -> int:
    """Apply the default and the hard ceiling to a requested batch size."""

    if limit is None:
        return DEFAULT_LIMIT
    if isinstance(limit, bool) or not isinstance(limit, int):
        raise ValidationFailure(f"limit must be an integer, got {limit!r}")
    if limit < 1:
        raise ValidationFailure(f"limit must be at least 1, got {limit}")
    return min(limit, MAX_LIMIT)


def _to_datetime(value: Union[datetime, int, float]) -> datetime:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
    return datetime.fromtimestamp(float(value), tz=timezone.utc)


def _clean(value: Optional[str]) -> str:
    return value.strip() if isinstance(value, str) else ""


def resolve_sender(raw: RawMessage) -> str:
    """Contact name, then push name, then raw identifier, then "System"."""

    for candidate in (raw.contact_name, raw.push_name, raw.sender_id):
        cleaned = _clean(candidate)
        if cleaned:
            return cleaned
    return SYSTEM_SENDER


def normalize_message(raw: RawMessage) -> Message:
    """Convert one provider record into a canonical Message.

    Attachments are MEDIA even with a caption; the placeholder only stands in
    for a missing body.
    """

    body = _clean(raw.body)
    if not _clean(raw.sender_id) and not _clean(raw.contact_name) and not _clean(raw.push_name):
        kind = MessageKind.SYSTEM
    elif raw.has_media or not body:
        kind = MessageKind.MEDIA
    else:
        kind = MessageKind.TEXT

    return Message(
        timestamp=_to_datetime(raw.timestamp),
        sender=resolve_sender(raw),
        body=raw.body if body else MEDIA_PLACEHOLDER,
        kind=kind,
    )


def normalize_batch(records: Iterable[RawMessage], limit: Optional[int] = None) -> list[Message]:
    """Normalize a newest-first provider batch into display order.

    The first ``limit`` records are kept, reversed to oldest-first and then
    stably sorted by timestamp so the batch is always non-decreasing.
    """

    effective = clamp_limit(limit)
    newest_first = list(records)[:effective]
    messages = [normalize_message(raw) for raw in reversed(newest_first)]
    messages.sort(key=lambda message: message.timestamp)
    return messages


def render_message_line(message: Message) -> str:
    """Render ``[YYYY-MM-DD HH:MM:SS] sender: body`` in local time."""

    timestamp = message.timestamp.astimezone().strftime("%Y-%m-%d %H:%M:%S")
    return f"[{timestamp}] {message.sender}: {message.body}"
