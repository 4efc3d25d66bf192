"""Telegram-to-core mapping adapter.

This keeps Telethon-specific details out of the core.
"""

from __future__ import annotations

from typing import Any, Optional

from telethon.tl.custom import Dialog, Message
from telethon.tl.types import MessageMediaWebPage

from core.models import Group, RawMessage


def _full_name(entity: Any) -> Optional[str]:
    first = getattr(entity, "first_name", None)
    last = getattr(entity, "last_name", None)
    if first or last:
        return " ".join(part for part in [first, last] if part)
    title = getattr(entity, "title", None)
    if title:
        return str(title)
    return None


def _sender_names(sender: Any) -> tuple[Optional[str], Optional[str]]:
    """Return (contact_name, push_name) for a Telethon sender entity.

    Telegram shows the saved contact name in first/last name when the sender
    is in the address book; otherwise those fields are the sender's own
    profile name, which plays the push-name role.
    """

    if sender is None:
        return None, None
    name = _full_name(sender)
    username = getattr(sender, "username", None)
    if getattr(sender, "contact", False):
        return name, f"@{username}" if username else None
    return None, name or (f"@{username}" if username else None)


def _has_attachment(message: Message) -> bool:
    media = getattr(message, "media", None)
    # Link previews ride along with plain text.
    return media is not None and not isinstance(media, MessageMediaWebPage)


def build_raw_message(message: Message) -> RawMessage:
    """Build a core RawMessage from a Telethon Message."""

    # Service messages (joins, title changes, pins) carry an action and no author.
    if getattr(message, "action", None) is not None:
        return RawMessage(timestamp=message.date, body=getattr(message, "raw_text", None) or None)

    contact_name, push_name = _sender_names(getattr(message, "sender", None))
    sender_id = getattr(message, "sender_id", None)
    text = getattr(message, "raw_text", None) or ""

    return RawMessage(
        timestamp=message.date,
        sender_id=str(sender_id) if sender_id is not None else None,
        contact_name=contact_name,
        push_name=push_name,
        body=text or None,
        has_media=_has_attachment(message),
    )


def is_group_dialog(dialog: Dialog) -> bool:
    if getattr(dialog, "is_group", False):
        return True
    entity = getattr(dialog, "entity", None)
    return bool(getattr(dialog, "is_channel", False) and getattr(entity, "megagroup", False))


def build_group(dialog: Dialog) -> Group:
    """Build a core Group from a Telethon Dialog."""

    entity = getattr(dialog, "entity", None)
    title = getattr(entity, "title", None) or getattr(dialog, "name", None) or ""
    members = getattr(entity, "participants_count", None) or 0
    return Group(id=dialog.id, display_name=str(title), member_count=int(members))
