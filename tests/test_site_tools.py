from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Any, Union

import pytest

from core.channel import ChannelGateway
from core.dispatch import ToolRouter
from core.errors import ProjectNotFound
from core.models import Envelope, Group, Phase, RawMessage, Urgency
from core.notifications import NotificationEngine, is_milestone
from core.registry import Registry
from core.session import Session
from core.tools import SiteTools, build_router


class FakeChannel:
    def __init__(self) -> None:
        self.groups = [Group(id=99, display_name="Riverside Site Team", member_count=8)]
        self.sent: list[tuple[Union[int, str], str]] = []
        self.calls = 0
        self.fail = False
        self.delay = 0.0

    async def list_groups(self) -> list[Group]:
        self.calls += 1
        return list(self.groups)

    async def fetch_messages(self, group: Group, limit: int) -> list[RawMessage]:
        self.calls += 1
        return [
            RawMessage(timestamp=datetime(2024, 1, 1, 9, tzinfo=timezone.utc), sender_id="5", body="on site"),
        ]

    async def send_message(self, target: Union[int, str], body: str) -> None:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise ConnectionError("network unreachable")
        self.sent.append((target, body))


class Harness:
    def __init__(self, ready: bool = True) -> None:
        self.session = Session()
        if ready:
            self.session.begin_pairing("code")
            self.session.mark_ready()
        self.channel = FakeChannel()
        self.registry = Registry()
        gateway = ChannelGateway(self.session, self.channel)
        self.router: ToolRouter = build_router(SiteTools(self.registry, gateway, NotificationEngine(self.registry, gateway)))

    def call(self, name: str, /, **arguments: Any) -> Envelope:
        return asyncio.run(self.router.dispatch(name, arguments))

    def call_together(self, *calls: tuple[str, dict[str, Any]]) -> list[Envelope]:
        async def _run() -> list[Envelope]:
            return list(await asyncio.gather(*(self.router.dispatch(name, args) for name, args in calls)))

        return asyncio.run(_run())

    def create_project(self, contact: str = "@foreman") -> str:
        project = self.registry.create_project(name="Riverside Tower", location="Dock 4", contact=contact)
        return project.id


def test_milestone_is_positive_multiple_of_25() -> None:
    assert [value for value in range(0, 101) if is_milestone(value)] == [25, 50, 75, 100]


def test_create_project_returns_identifier() -> None:
    harness = Harness()
    envelope = harness.call("create_project", name="Riverside Tower", location="Dock 4", contact="@foreman", budget=1200000)
    assert not envelope.is_error
    projects = harness.registry.list_projects()
    assert len(projects) == 1
    assert projects[0].id in envelope.text
    assert projects[0].phase is Phase.PLANNING
    assert projects[0].completion_percent == 0


def test_create_project_rejects_unusable_contact() -> None:
    envelope = Harness().call("create_project", name="X", location="Y", contact="@")
    assert envelope.is_error
    assert envelope.text.startswith("❌")


def test_repeated_milestone_notifies_twice() -> None:
    harness = Harness()
    project_id = harness.create_project()

    first = harness.call("track_progress", projectId=project_id, phase="structure", completion=25)
    second = harness.call("track_progress", projectId=project_id, phase="structure", completion=25)

    assert "Milestone notification sent" in first.text
    assert "Milestone notification sent" in second.text
    assert len(harness.registry.notifications) == 2
    assert all(record.urgency is Urgency.LOW for record in harness.registry.notifications)
    assert [target for target, _ in harness.channel.sent] == ["@foreman", "@foreman"]


def test_non_milestones_do_not_notify() -> None:
    harness = Harness()
    project_id = harness.create_project()

    harness.call("track_progress", projectId=project_id, phase="structure", completion=24)
    harness.call("track_progress", projectId=project_id, phase="structure", completion=0)

    assert harness.registry.notifications == ()
    assert harness.registry.get_project(project_id).completion_percent == 0


def test_milestone_body_reflects_written_values() -> None:
    harness = Harness()
    project_id = harness.create_project()
    harness.call("track_progress", projectId=project_id, phase="foundation", completion=50, notes="Rebar inspected")
    body = harness.registry.notifications[0].rendered_body
    assert "Riverside Tower" in body
    assert "Phase: foundation" in body
    assert "Progress: 50%" in body
    assert "Rebar inspected" in body
    assert "[LOW]" in body


def test_concurrent_progress_updates_are_serialized() -> None:
    harness = Harness()
    harness.channel.delay = 0.05
    project_id = harness.create_project()

    first, second = harness.call_together(
        ("track_progress", {"projectId": project_id, "phase": "structure", "completion": 25}),
        ("track_progress", {"projectId": project_id, "phase": "structure", "completion": 30}),
    )

    assert "Milestone notification sent" in first.text
    assert "Milestone" not in second.text
    records = harness.registry.notifications
    assert len(records) == 1
    assert records[0].urgency is Urgency.LOW
    assert "Progress: 25%" in records[0].rendered_body
    assert harness.registry.get_project(project_id).completion_percent == 30


def test_unknown_project_ids_leave_no_lock_behind() -> None:
    harness = Harness()
    for index in range(20):
        envelope = harness.call("track_progress", projectId=f"bogus_{index}", phase="structure", completion=25)
        assert envelope.is_error
    with pytest.raises(ProjectNotFound):
        harness.registry.project_lock("bogus_0")
    assert harness.registry._locks == {}


def test_schedule_inspection_always_notifies_once() -> None:
    harness = Harness()
    project_id = harness.create_project()
    envelope = harness.call("schedule_inspection", projectId=project_id, inspectionType="electrical", date="2024-03-01")

    assert not envelope.is_error
    assert len(harness.registry.notifications) == 1
    record = harness.registry.notifications[0]
    assert record.urgency is Urgency.MEDIUM
    assert "Type: electrical" in record.rendered_body
    assert "Inspector: TBD" in record.rendered_body
    assert len(harness.registry.inspections_for(project_id)) == 1


def test_schedule_inspection_for_missing_project() -> None:
    harness = Harness()
    envelope = harness.call("schedule_inspection", projectId="proj_missing", inspectionType="plumbing", date="2024-03-01")
    assert envelope.is_error
    assert "proj_missing not found" in envelope.text
    assert harness.registry.notifications == ()
    assert harness.channel.calls == 0


def test_notification_failure_does_not_roll_back_progress() -> None:
    harness = Harness()
    harness.channel.fail = True
    project_id = harness.create_project()

    envelope = harness.call("track_progress", projectId=project_id, phase="finishing", completion=100)

    assert not envelope.is_error
    assert "Notification not delivered" in envelope.text
    assert harness.registry.get_project(project_id).completion_percent == 100
    assert len(harness.registry.notifications) == 1


def test_inspection_committed_when_channel_not_ready() -> None:
    harness = Harness(ready=False)
    project_id = harness.create_project()
    envelope = harness.call("schedule_inspection", projectId=project_id, inspectionType="foundation", date="2024-03-01")
    assert not envelope.is_error
    assert "Notification not delivered" in envelope.text
    assert len(harness.registry.inspections_for(project_id)) == 1
    assert harness.channel.calls == 0


def test_group_contact_is_resolved_by_name() -> None:
    harness = Harness()
    project_id = harness.create_project(contact="group:riverside")
    harness.call("send_whatsapp_update", projectId=project_id, message="Crane arrives Monday", urgency="high")
    assert harness.channel.sent[0][0] == 99
    assert "[HIGH]" in harness.channel.sent[0][1]


def test_explicit_update_surfaces_send_failure() -> None:
    harness = Harness()
    harness.channel.fail = True
    project_id = harness.create_project()
    envelope = harness.call("send_whatsapp_update", projectId=project_id, message="Delay")
    assert envelope.is_error
    assert "network unreachable" in envelope.text


def test_explicit_update_defaults_to_medium() -> None:
    harness = Harness()
    project_id = harness.create_project()
    envelope = harness.call("send_whatsapp_update", projectId=project_id, message="Delay")
    assert not envelope.is_error
    assert harness.registry.notifications[0].urgency is Urgency.MEDIUM


def test_channel_tools_report_not_ready() -> None:
    harness = Harness(ready=False)
    for name, arguments in [
        ("list_groups", {}),
        ("read_group_messages", {"groupName": "riverside"}),
        ("send_group_message", {"groupName": "riverside", "message": "hi"}),
    ]:
        envelope = harness.call(name, **arguments)
        assert envelope.is_error
        assert "not connected" in envelope.text
    assert harness.channel.calls == 0


def test_list_and_read_groups() -> None:
    harness = Harness()
    listing = harness.call("list_groups")
    assert "Riverside Site Team (8 members)" in listing.text

    messages = harness.call("read_group_messages", groupName="RIVERSIDE", limit=5)
    assert "5: on site" in messages.text


def test_missing_group_lists_available_names() -> None:
    envelope = Harness().call("send_group_message", groupName="plumbers", message="hi")
    assert envelope.is_error
    assert "Available groups: Riverside Site Team" in envelope.text


def test_connection_status_reports_state() -> None:
    envelope = Harness(ready=False).call("connection_status")
    assert "unauthenticated" in envelope.text


def test_estimation_tools() -> None:
    harness = Harness()
    materials = harness.call("calculate_materials", structure="wall", dimensions={"length": 2, "width": 1, "height": 1})
    assert '"brick": 1000' in materials.text
    cost = harness.call("estimate_cost", material="steel", quantity=2)
    assert cost.text == "steel: 2 m³ = $1600.00"
    compliance = harness.call(
        "compliance_check", structure="tower", dimensions={"length": 1, "width": 1, "height": 40}, buildingType="commercial"
    )
    assert "VIOLATIONS FOUND" in compliance.text
