# src/storage/sqlite_store.py — v1
"""SQLite-backed job store and audit log (JOB_STORE_BACKEND=sqlite).

Uses stdlib sqlite3. Jobs are stored as JSON documents next to an
indexed status column.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from toolfactory.jobs.models import ActorType, ArtifactKind, AuditEntry, Job, JobStatus
from toolfactory.storage.base_job_store import BaseAuditLog, BaseJobStore, JobNotFoundError

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS jobs (
    id TEXT PRIMARY KEY,
    status TEXT NOT NULL,
    data TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_jobs_status ON jobs(status);
CREATE TABLE IF NOT EXISTS artifacts (
    job_id TEXT NOT NULL,
    kind TEXT NOT NULL,
    content TEXT NOT NULL,
    PRIMARY KEY (job_id, kind)
);
CREATE TABLE IF NOT EXISTS audit_entries (
    seq INTEGER PRIMARY KEY AUTOINCREMENT,
    id TEXT NOT NULL UNIQUE,
    job_id TEXT NOT NULL,
    data TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_audit_job ON audit_entries(job_id);
"""


def _connect(db_path: Path | str) -> sqlite3.Connection:
    path = str(db_path)
    if path != ":memory:":
        resolved = Path(path).expanduser()
        resolved.parent.mkdir(parents=True, exist_ok=True)
        path = str(resolved)
    conn = sqlite3.connect(path)
    if path != ":memory:":
        conn.execute("PRAGMA journal_mode=WAL")
    conn.executescript(_SCHEMA)
    return conn


class SqliteJobStore(BaseJobStore):
    """SQLite job store. Each update is a single committed write."""

    def __init__(self, db_path: Path | str) -> None:
        self._conn = _connect(db_path)

    async def get_job(self, job_id: str) -> Job | None:
        row = self._conn.execute(
            "SELECT data FROM jobs WHERE id = ?", (job_id,)
        ).fetchone()
        if row is None:
            return None
        return Job.model_validate_json(row[0])

    async def create_job(self, fields: dict[str, Any]) -> Job:
        job = Job(**fields)
        self._write(job, insert=True)
        return job

    async def update_job(self, job_id: str, fields: dict[str, Any]) -> Job:
        current = await self.get_job(job_id)
        if current is None:
            raise JobNotFoundError(job_id)
        data = current.model_dump()
        data.update(fields)
        data["updated_at"] = datetime.now(timezone.utc)
        updated = Job.model_validate(data)
        self._write(updated, insert=False)
        return updated

    async def list_jobs(self, status: JobStatus | None = None) -> list[Job]:
        if status is None:
            rows = self._conn.execute("SELECT data FROM jobs").fetchall()
        else:
            rows = self._conn.execute(
                "SELECT data FROM jobs WHERE status = ?", (status.value,)
            ).fetchall()
        return [Job.model_validate_json(r[0]) for r in rows]

    async def save_artifact(self, job_id: str, kind: ArtifactKind, content: str) -> None:
        if await self.get_job(job_id) is None:
            raise JobNotFoundError(job_id)
        self._conn.execute(
            "INSERT OR REPLACE INTO artifacts (job_id, kind, content) VALUES (?, ?, ?)",
            (job_id, kind, content),
        )
        self._conn.commit()

    async def get_artifact(self, job_id: str, kind: ArtifactKind) -> str | None:
        row = self._conn.execute(
            "SELECT content FROM artifacts WHERE job_id = ? AND kind = ?",
            (job_id, kind),
        ).fetchone()
        return row[0] if row else None

    def close(self) -> None:
        self._conn.close()

    def _write(self, job: Job, insert: bool) -> None:
        sql = (
            "INSERT INTO jobs (id, status, data, updated_at) VALUES (?, ?, ?, ?)"
            if insert
            else "UPDATE jobs SET status = ?, data = ?, updated_at = ? WHERE id = ?"
        )
        payload = job.model_dump_json()
        updated = job.updated_at.isoformat()
        params = (
            (job.id, job.status.value, payload, updated)
            if insert
            else (job.status.value, payload, updated, job.id)
        )
        with self._conn:
            self._conn.execute(sql, params)


class SqliteAuditLog(BaseAuditLog):
    """SQLite audit log; entry order follows insertion order."""

    def __init__(self, db_path: Path | str) -> None:
        self._conn = _connect(db_path)

    async def append_audit_entry(
        self,
        job_id: str,
        from_status: JobStatus | None,
        to_status: JobStatus,
        actor: ActorType,
        reason: str | None = None,
    ) -> AuditEntry:
        entry = AuditEntry(
            job_id=job_id,
            from_status=from_status,
            to_status=to_status,
            actor=actor,
            reason=reason,
        )
        with self._conn:
            self._conn.execute(
                "INSERT INTO audit_entries (id, job_id, data) VALUES (?, ?, ?)",
                (entry.id, job_id, entry.model_dump_json()),
            )
        return entry

    async def list_entries(self, job_id: str) -> list[AuditEntry]:
        rows = self._conn.execute(
            "SELECT data FROM audit_entries WHERE job_id = ? ORDER BY seq", (job_id,)
        ).fetchall()
        return [AuditEntry.model_validate(json.loads(r[0])) for r in rows]

    def close(self) -> None:
        self._conn.close()
