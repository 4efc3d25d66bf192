"""Notification engine.

Explicit updates and automatic notifications (inspection scheduled, progress
milestone) share one primitive: resolve the contact, render the body, append a
NotificationRecord, then attempt delivery through the channel gateway.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Union

from core.addresses import parse_contact
from core.channel import ChannelGateway
from core.errors import SitewireError
from core.formatting import inspection_summary, milestone_summary, render_notification
from core.models import Inspection, NotificationRecord, Project, Urgency
from core.registry import Registry

LOGGER = logging.getLogger(__name__)

MILESTONE_STEP = 25


def is_milestone(completion: int) -> bool:
    """A milestone is any positive multiple of 25."""

    return completion > 0 and completion % MILESTONE_STEP == 0


@dataclass(frozen=True)
class NotificationOutcome:
    """Result of an automatic notification; failures never propagate."""

    record: Optional[NotificationRecord]
    error: Optional[SitewireError] = None

    @property
    def delivered(self) -> bool:
        return self.record is not None and self.error is None


class NotificationEngine:
    def __init__(self, registry: Registry, gateway: ChannelGateway) -> None:
        self._registry = registry
        self._gateway = gateway

    async def dispatch(self, project: Project, message: str, urgency: Urgency) -> NotificationRecord:
        """Render, log and deliver one notification to the project's contact.

        Raises the core error when the contact cannot be resolved or delivery
        fails. The record is appended before delivery is attempted.
        """

        target = await self._resolve_target(project.contact)
        dispatched_at = datetime.now(timezone.utc)
        record = NotificationRecord(
            project_id=project.id,
            target_contact=project.contact,
            rendered_body=render_notification(project.name, message, urgency, dispatched_at),
            urgency=urgency,
            dispatched_at=dispatched_at,
        )
        self._registry.append_notification(record)
        await self._gateway.send_to_target(target, record.rendered_body)
        LOGGER.info("Notification (%s) delivered to %s for %s", urgency.value, project.contact, project.id)
        return record

    async def notify_inspection(self, project: Project, inspection: Inspection) -> NotificationOutcome:
        return await self._automatic(project, inspection_summary(inspection), Urgency.MEDIUM)

    async def notify_progress(self, project: Project) -> Optional[NotificationOutcome]:
        """Send a milestone notification when the written completion is a milestone.

        Level-triggered: the same milestone written twice notifies twice.
        """

        if not is_milestone(project.completion_percent):
            return None
        message = milestone_summary(project.phase, project.completion_percent, project.notes)
        return await self._automatic(project, message, Urgency.LOW)

    async def _automatic(self, project: Project, message: str, urgency: Urgency) -> NotificationOutcome:
        before = len(self._registry.notifications)
        try:
            record = await self.dispatch(project, message, urgency)
        except SitewireError as exc:
            LOGGER.warning("Automatic notification for %s not delivered: %s", project.id, exc.message)
            logged = self._registry.notifications[before:]
            return NotificationOutcome(record=logged[-1] if logged else None, error=exc)
        return NotificationOutcome(record=record)

    async def _resolve_target(self, contact: str) -> Union[int, str]:
        address = parse_contact(contact)
        if address.is_group:
            group = await self._gateway.resolve_group(address.group_name)
            return group.id
        return address.target
