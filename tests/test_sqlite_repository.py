from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone

from adapters.sqlite_storage import SQLiteProjectRepository
from core.models import Phase, Project
from core.registry import Registry


def _project() -> Project:
    now = datetime(2024, 1, 1, tzinfo=timezone.utc)
    return Project(
        id="proj_abc",
        name="Riverside Tower",
        location="Dock 4",
        contact="@foreman",
        created_at=now,
        last_updated_at=now,
        budget=250000.0,
    )


def test_put_and_get_project(tmp_path) -> None:
    repository = SQLiteProjectRepository(str(tmp_path / "sitewire.db"))
    repository.init_db()

    repository.put(_project())
    loaded = repository.get("proj_abc")

    assert loaded == _project()
    assert repository.get("proj_missing") is None


def test_put_overwrites_progress(tmp_path) -> None:
    repository = SQLiteProjectRepository(str(tmp_path / "sitewire.db"))
    repository.init_db()
    repository.put(_project())

    repository.put(replace(_project(), phase=Phase.STRUCTURE, completion_percent=50, notes="Level 3 poured"))

    projects = repository.list()
    assert len(projects) == 1
    assert projects[0].phase is Phase.STRUCTURE
    assert projects[0].completion_percent == 50


def test_registry_survives_restart(tmp_path) -> None:
    path = str(tmp_path / "sitewire.db")
    first = SQLiteProjectRepository(path)
    first.init_db()
    project = Registry(first).create_project(name="Depot", location="North yard", contact="+15550100")

    second = SQLiteProjectRepository(path)
    second.init_db()
    assert Registry(second).get_project(project.id).name == "Depot"
