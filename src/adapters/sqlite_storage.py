"""SQLite storage adapter.

Implements the core ProjectRepository using a simple SQLite database so
projects survive restarts.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime
from typing import Optional

from core.models import Phase, Project


class SQLiteProjectRepository:
    """Thin SQLite wrapper that satisfies the ProjectRepository contract."""

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def init_db(self) -> None:
        """Create tables if they do not exist.

        Tables:
        - projects: one row per project, overwritten on every update
        """

        with self._connect() as conn:
            # Fields:
            # - id: proj_<hex> identifier (PRIMARY KEY)
            # - contact: channel address used for notifications
            # - phase / completion_percent: latest progress report
            # - created_at / last_updated_at: ISO-8601 UTC timestamps
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS projects (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    location TEXT NOT NULL,
                    contact TEXT NOT NULL,
                    timeline TEXT,
                    budget REAL,
                    phase TEXT NOT NULL,
                    completion_percent INTEGER NOT NULL,
                    notes TEXT,
                    created_at TIMESTAMP NOT NULL,
                    last_updated_at TIMESTAMP NOT NULL
                )
                """
            )

    def get(self, project_id: str) -> Optional[Project]:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM projects WHERE id = ?", (project_id,)).fetchone()
        return _row_to_project(row) if row else None

    def put(self, project: Project) -> None:
        """Upsert a project row."""

        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO projects (
                    id,
                    name,
                    location,
                    contact,
                    timeline,
                    budget,
                    phase,
                    completion_percent,
                    notes,
                    created_at,
                    last_updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    phase = excluded.phase,
                    completion_percent = excluded.completion_percent,
                    notes = excluded.notes,
                    last_updated_at = excluded.last_updated_at
                """,
                (
                    project.id,
                    project.name,
                    project.location,
                    project.contact,
                    project.timeline,
                    project.budget,
                    project.phase.value,
                    project.completion_percent,
                    project.notes,
                    project.created_at.isoformat(),
                    project.last_updated_at.isoformat(),
                ),
            )

    def list(self) -> list[Project]:
        with self._connect() as conn:
            rows = conn.execute("SELECT * FROM projects ORDER BY created_at").fetchall()
        return [_row_to_project(row) for row in rows]


def _row_to_project(row: sqlite3.Row) -> Project:
    return Project(
        id=row["id"],
        name=row["name"],
        location=row["location"],
        contact=row["contact"],
        timeline=row["timeline"],
        budget=row["budget"],
        phase=Phase(row["phase"]),
        completion_percent=int(row["completion_percent"]),
        notes=row["notes"],
        created_at=datetime.fromisoformat(row["created_at"]),
        last_updated_at=datetime.fromisoformat(row["last_updated_at"]),
    )
