"""In-process registry of projects, inspections and notifications.

The registry is constructed once and injected into the tools; nothing here is
a module-level singleton. Projects go through a ProjectRepository so a durable
store can replace the in-memory one.
"""

from __future__ import annotations

import asyncio
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import Optional

from core.errors import ProjectNotFound
from core.models import Inspection, InspectionType, NotificationRecord, Phase, Project
from core.ports import ProjectRepository


class InMemoryProjectRepository:
    """Dict-backed ProjectRepository."""

    def __init__(self) -> None:
        self._projects: dict[str, Project] = {}

    def get(self, project_id: str) -> Optional[Project]:
        return self._projects.get(project_id)

    def put(self, project: Project) -> None:
        self._projects[project.id] = project

    def list(self) -> list[Project]:
        return list(self._projects.values())


def _new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


class Registry:
    """Owns domain state for one process."""

    def __init__(self, projects: Optional[ProjectRepository] = None) -> None:
        self._projects = projects if projects is not None else InMemoryProjectRepository()
        self._inspections: dict[str, Inspection] = {}
        self._notifications: list[NotificationRecord] = []
        self._locks: dict[str, asyncio.Lock] = {}

    def project_lock(self, project_id: str) -> asyncio.Lock:
        """Lock serializing mutations of one project.

        Raises ProjectNotFound for unknown ids, so no lock is kept for them.
        """

        self.get_project(project_id)
        return self._locks.setdefault(project_id, asyncio.Lock())

    def create_project(
        self,
        name: str,
        location: str,
        contact: str,
        timeline: Optional[str] = None,
        budget: Optional[float] = None,
    ) -> Project:
        now = datetime.now(timezone.utc)
        project = Project(
            id=_new_id("proj"),
            name=name,
            location=location,
            contact=contact,
            timeline=timeline,
            budget=budget,
            created_at=now,
            last_updated_at=now,
        )
        self._projects.put(project)
        return project

    def get_project(self, project_id: str) -> Project:
        project = self._projects.get(project_id)
        if project is None:
            raise ProjectNotFound(project_id)
        return project

    def list_projects(self) -> list[Project]:
        return self._projects.list()

    def update_progress(
        self, project_id: str, phase: Phase, completion: int, notes: Optional[str] = None
    ) -> Project:
        """Write phase and completion and return the project as written."""

        project = self.get_project(project_id)
        updated = replace(
            project,
            phase=phase,
            completion_percent=completion,
            notes=notes,
            last_updated_at=datetime.now(timezone.utc),
        )
        self._projects.put(updated)
        return updated

    def add_inspection(
        self,
        project_id: str,
        inspection_type: InspectionType,
        scheduled_date: str,
        inspector: Optional[str] = None,
    ) -> Inspection:
        self.get_project(project_id)
        inspection = Inspection(
            id=_new_id("insp"),
            project_id=project_id,
            type=inspection_type,
            scheduled_date=scheduled_date,
            inspector=inspector,
        )
        self._inspections[inspection.id] = inspection
        return inspection

    def inspections_for(self, project_id: str) -> list[Inspection]:
        return [item for item in self._inspections.values() if item.project_id == project_id]

    def append_notification(self, record: NotificationRecord) -> None:
        self._notifications.append(record)

    @property
    def notifications(self) -> tuple[NotificationRecord, ...]:
        return tuple(self._notifications)
