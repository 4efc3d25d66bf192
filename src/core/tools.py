"""Tool handlers.

Each handler takes the already schema-validated argument mapping, does its
work against the registry and channel gateway, and returns the response text.
Arguments are re-checked defensively and raise ValidationFailure when
malformed.
"""

from __future__ import annotations

import json
import logging
from enum import Enum
from typing import Any, Optional, Type, TypeVar

from core.addresses import is_valid_contact
from core.channel import ChannelGateway
from core.dispatch import ToolRouter
from core.errors import ValidationFailure
from core.estimates import calculate_materials, check_compliance, estimate_cost
from core.formatting import format_group_list, format_message_batch, format_timestamp
from core.models import InspectionType, Phase, SessionState, Urgency
from core.notifications import NotificationEngine, NotificationOutcome
from core.registry import Registry

LOGGER = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)


def _require_str(args: dict[str, Any], key: str) -> str:
    value = args.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ValidationFailure(f"{key} is required and must be a non-empty string")
    return value.strip()


def _optional_str(args: dict[str, Any], key: str) -> Optional[str]:
    value = args.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationFailure(f"{key} must be a string")
    return value.strip() or None


def _optional_number(args: dict[str, Any], key: str) -> Optional[float]:
    value = args.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationFailure(f"{key} must be a number")
    return value


def _optional_int(args: dict[str, Any], key: str) -> Optional[int]:
    value = _optional_number(args, key)
    if value is None:
        return None
    if isinstance(value, float):
        if not value.is_integer():
            raise ValidationFailure(f"{key} must be a whole number")
        return int(value)
    return value


def _require_enum(args: dict[str, Any], key: str, enum_cls: Type[E], default: Optional[E] = None) -> E:
    value = args.get(key)
    if value is None and default is not None:
        return default
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(item.value for item in enum_cls)
        raise ValidationFailure(f"{key} must be one of: {allowed}") from None


def _outcome_line(outcome: NotificationOutcome, success: str) -> str:
    if outcome.delivered:
        return success
    reason = outcome.error.message if outcome.error else "unknown error"
    return f"⚠️ Notification not delivered: {reason}"


class SiteTools:
    """Handlers for every tool exposed by the server."""

    def __init__(self, registry: Registry, gateway: ChannelGateway, notifier: NotificationEngine) -> None:
        self._registry = registry
        self._gateway = gateway
        self._notifier = notifier

    async def create_project(self, args: dict[str, Any]) -> str:
        name = _require_str(args, "name")
        location = _require_str(args, "location")
        contact = _require_str(args, "contact")
        if not is_valid_contact(contact):
            raise ValidationFailure(
                f"contact {contact!r} is not a usable address",
                hint="Use @username, +phone, chat_id:<id> or group:<name>.",
            )
        budget = _optional_number(args, "budget")
        if budget is not None and budget < 0:
            raise ValidationFailure("budget must not be negative")
        project = self._registry.create_project(
            name=name,
            location=location,
            contact=contact,
            timeline=_optional_str(args, "timeline"),
            budget=budget,
        )
        LOGGER.info("Project %s created (%s)", project.id, project.name)

        lines = [
            f'✅ Project "{project.name}" created with ID: {project.id}',
            f"Location: {project.location}",
            f"Contact: {project.contact}",
        ]
        if project.timeline:
            lines.append(f"Timeline: {project.timeline}")
        if project.budget is not None:
            lines.append(f"Budget: ${project.budget:,.2f}")
        lines.extend(["", "Ready for project updates!"])
        return "\n".join(lines)

    async def track_progress(self, args: dict[str, Any]) -> str:
        project_id = _require_str(args, "projectId")
        phase = _require_enum(args, "phase", Phase)
        completion = _optional_int(args, "completion")
        if completion is None or not 0 <= completion <= 100:
            raise ValidationFailure("completion is required and must be between 0 and 100")
        notes = _optional_str(args, "notes")

        async with self._registry.project_lock(project_id):
            project = self._registry.update_progress(project_id, phase, completion, notes)
            outcome = await self._notifier.notify_progress(project)

        lines = [f"Progress updated: {completion}% complete", f"Phase: {phase.value}"]
        if notes:
            lines.append(f"Notes: {notes}")
        if outcome is not None:
            lines.extend(["", _outcome_line(outcome, "🎉 Milestone notification sent!")])
        return "\n".join(lines)

    async def schedule_inspection(self, args: dict[str, Any]) -> str:
        project_id = _require_str(args, "projectId")
        inspection_type = _require_enum(args, "inspectionType", InspectionType)
        date = _require_str(args, "date")
        inspector = _optional_str(args, "inspector")

        async with self._registry.project_lock(project_id):
            project = self._registry.get_project(project_id)
            inspection = self._registry.add_inspection(project.id, inspection_type, date, inspector)
            outcome = await self._notifier.notify_inspection(project, inspection)

        return "\n".join(
            [
                f"✅ {inspection.type.value} inspection scheduled for {inspection.scheduled_date}",
                f"Inspector: {inspection.inspector or 'TBD'}",
                f"Inspection ID: {inspection.id}",
                "",
                _outcome_line(outcome, f"📱 Reminder sent to {project.contact}"),
            ]
        )

    async def send_whatsapp_update(self, args: dict[str, Any]) -> str:
        project = self._registry.get_project(_require_str(args, "projectId"))
        message = _require_str(args, "message")
        urgency = _require_enum(args, "urgency", Urgency, default=Urgency.MEDIUM)
        record = await self._notifier.dispatch(project, message, urgency)
        return (
            f'✅ Update sent to {record.target_contact}:\n"{message}"\n\n'
            f"Urgency: {urgency.value}\nSent at: {format_timestamp(record.dispatched_at)}"
        )

    async def send_group_message(self, args: dict[str, Any]) -> str:
        group_name = _require_str(args, "groupName")
        message = _require_str(args, "message")
        receipt = await self._gateway.send_to_group(group_name, message)
        return f'✅ Message sent to "{receipt.group_name}":\n\n"{message}"\n\n⏰ Sent at: {format_timestamp(receipt.sent_at)}'

    async def read_group_messages(self, args: dict[str, Any]) -> str:
        group_name = _require_str(args, "groupName")
        group, messages = await self._gateway.read_messages(group_name, _optional_int(args, "limit"))
        return format_message_batch(group.display_name, messages)

    async def list_groups(self, args: dict[str, Any]) -> str:
        return format_group_list(await self._gateway.list_groups())

    async def connection_status(self, args: dict[str, Any]) -> str:
        session = self._gateway.session
        state = session.current_state()
        lines = [f"Channel state: {state.value}"]
        if state is SessionState.PAIRING:
            if session.pairing_challenge:
                lines.append("A QR code is waiting to be scanned (see the server log).")
            else:
                lines.append("Restoring the saved session...")
        if session.last_error:
            lines.append(f"Last error: {session.last_error}")
        return "\n".join(lines)

    async def calculate_materials(self, args: dict[str, Any]) -> str:
        dimensions = args.get("dimensions")
        if not isinstance(dimensions, dict):
            raise ValidationFailure("dimensions must be an object with length, width and height")
        result = calculate_materials(_require_str(args, "structure"), dimensions)
        return json.dumps(result, indent=2, ensure_ascii=False)

    async def estimate_cost(self, args: dict[str, Any]) -> str:
        unit = _optional_str(args, "unit") or "m³"
        return estimate_cost(_require_str(args, "material"), args.get("quantity"), unit)

    async def compliance_check(self, args: dict[str, Any]) -> str:
        structure = _require_str(args, "structure")
        building_type = _require_str(args, "buildingType")
        dimensions = args.get("dimensions")
        if not isinstance(dimensions, dict):
            raise ValidationFailure("dimensions must be an object")
        violations = check_compliance(structure, dimensions, building_type)
        if not violations:
            return f"✅ COMPLIANT - All building codes satisfied for {building_type} construction"
        return "⚠️ VIOLATIONS FOUND:\n" + "\n".join(violations) + "\n\nConsult with local authorities!"


TOOL_NAMES = (
    "create_project",
    "track_progress",
    "schedule_inspection",
    "send_whatsapp_update",
    "send_group_message",
    "read_group_messages",
    "list_groups",
    "connection_status",
    "calculate_materials",
    "estimate_cost",
    "compliance_check",
)


def build_router(tools: SiteTools) -> ToolRouter:
    """Register every handler and freeze the router."""

    router = ToolRouter()
    for name in TOOL_NAMES:
        router.register(name, getattr(tools, name))
    router.freeze()
    return router
