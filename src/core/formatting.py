"""Shared text formatting helpers.

Keeping formatting here prevents drift between tools and keeps notification
bodies consistent regardless of which path produced them.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional

from core.models import Group, Inspection, Message, Phase, Urgency
from core.normalizer import render_message_line

URGENCY_MARKERS = {
    Urgency.LOW: "🟢",
    Urgency.MEDIUM: "🟡",
    Urgency.HIGH: "🔴",
}

DIVIDER = "──────────────"


def format_timestamp(value: datetime) -> str:
    return value.astimezone().strftime("%Y-%m-%d %H:%M:%S")


def render_notification(project_name: str, message: str, urgency: Urgency, at: datetime) -> str:
    """Create the notification body sent to a project contact."""

    label = urgency.value.upper()
    lines = [
        f"{URGENCY_MARKERS[urgency]} [{label}] Project Update: {project_name}",
        DIVIDER,
        "",
        message.strip(),
        "",
        DIVIDER,
        f"Urgency: {label} | {format_timestamp(at)}",
    ]
    return "\n".join(lines)


def inspection_summary(inspection: Inspection) -> str:
    return "\n".join(
        [
            "📋 Inspection Scheduled:",
            "",
            f"Type: {inspection.type.value}",
            f"Date: {inspection.scheduled_date}",
            f"Inspector: {inspection.inspector or 'TBD'}",
            "",
            "Please ensure site is ready!",
        ]
    )


def milestone_summary(phase: Phase, completion: int, notes: Optional[str]) -> str:
    return "\n".join(
        [
            "🎯 Milestone Reached!",
            "",
            f"Phase: {phase.value}",
            f"Progress: {completion}%",
            "",
            f"Notes: {notes or 'On track'}",
        ]
    )


def format_group_list(groups: Iterable[Group]) -> str:
    items = list(groups)
    if not items:
        return "📱 No groups found in your account."
    lines = [f"{index}. {group.display_name} ({group.member_count} members)" for index, group in enumerate(items, start=1)]
    return "📱 Your Groups:\n\n" + "\n".join(lines) + f"\n\n✅ Found {len(items)} groups"


def format_message_batch(group_name: str, messages: list[Message]) -> str:
    if not messages:
        return f'📱 No recent messages found in "{group_name}"'
    body = "\n".join(render_message_line(message) for message in messages)
    return f'📱 Messages from "{group_name}":\n\n{body}\n\n📊 Retrieved {len(messages)} messages'
