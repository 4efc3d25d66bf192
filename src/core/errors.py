"""Error taxonomy for the core.

Every error carries a human-readable message and an optional remediation hint.
The dispatch router renders both into the response envelope, so none of these
ever reach the transport as a fault.
"""

from __future__ import annotations

from typing import Iterable, Optional


class SitewireError(Exception):
    """Base class for errors the router renders to tool callers."""

    code = "error"

    def __init__(self, message: str, hint: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.hint = hint


class UnknownOperation(SitewireError):
    code = "unknown_operation"

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown tool: {name}")
        self.name = name


class ChannelNotReady(SitewireError):
    code = "channel_not_ready"

    def __init__(self, state: str, reason: Optional[str] = None, hint: Optional[str] = None) -> None:
        message = f"Messaging channel not connected (state: {state})"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, hint)
        self.state = state
        self.reason = reason


class GroupNotFound(SitewireError):
    code = "group_not_found"

    def __init__(self, name: str, available: Iterable[str]) -> None:
        self.name = name
        self.available = list(available)
        listing = ", ".join(self.available) if self.available else "(none)"
        super().__init__(
            f'Group "{name}" not found.',
            hint=(
                f"Available groups: {listing}\n\n"
                'Tip: Try using partial names (e.g., "family" instead of "Family Group 2024")'
            ),
        )


class AmbiguousGroup(SitewireError):
    code = "ambiguous_group"

    def __init__(self, name: str, matches: Iterable[str]) -> None:
        self.name = name
        self.matches = list(matches)
        super().__init__(
            f'Group "{name}" matches {len(self.matches)} groups.',
            hint=f"Matching groups: {', '.join(self.matches)}\n\nUse a more specific name.",
        )


class SendFailed(SitewireError):
    code = "send_failed"

    def __init__(self, reason: str) -> None:
        super().__init__(f"Error sending message: {reason}")
        self.reason = reason


class ProjectNotFound(SitewireError):
    code = "project_not_found"

    def __init__(self, project_id: str) -> None:
        super().__init__(f"Project {project_id} not found", hint="Create it first with create_project.")
        self.project_id = project_id


class ValidationFailure(SitewireError):
    code = "validation_failure"


class InvalidTransition(Exception):
    """Raised when the session state machine is driven along an illegal edge."""

    def __init__(self, current: str, target: str) -> None:
        super().__init__(f"Illegal session transition {current} -> {target}")
        self.current = current
        self.target = target
