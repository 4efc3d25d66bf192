"""Ports (interfaces) used by the core.

Ports define the minimal contracts for the channel and storage adapters so
that the core can be reused with different backends.
"""

from __future__ import annotations

from typing import Optional, Protocol, Union

from core.models import Group, Project, RawMessage


class ChannelPort(Protocol):
    """Messaging channel operations required by the channel gateway."""

    async def list_groups(self) -> list[Group]:
        ...

    async def fetch_messages(self, group: Group, limit: int) -> list[RawMessage]:
        """Return up to ``limit`` records, newest first."""
        ...

    async def send_message(self, target: Union[int, str], body: str) -> None:
        ...


class ProjectRepository(Protocol):
    """Project storage used by the registry."""

    def get(self, project_id: str) -> Optional[Project]:
        ...

    def put(self, project: Project) -> None:
        ...

    def list(self) -> list[Project]:
        ...
