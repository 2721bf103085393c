# src/storage/memory_store.py — v1
"""In-process job store and audit log (default backend, used by tests)."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from toolfactory.jobs.models import ActorType, ArtifactKind, AuditEntry, Job, JobStatus
from toolfactory.storage.base_job_store import BaseAuditLog, BaseJobStore, JobNotFoundError


class InMemoryJobStore(BaseJobStore):
    """Dict-backed job store. Returned jobs are copies."""

    def __init__(self) -> None:
        self._jobs: dict[str, Job] = {}
        self._artifacts: dict[tuple[str, str], str] = {}

    async def get_job(self, job_id: str) -> Job | None:
        job = self._jobs.get(job_id)
        return job.model_copy(deep=True) if job else None

    async def create_job(self, fields: dict[str, Any]) -> Job:
        job = Job(**fields)
        self._jobs[job.id] = job
        return job.model_copy(deep=True)

    async def update_job(self, job_id: str, fields: dict[str, Any]) -> Job:
        current = self._jobs.get(job_id)
        if current is None:
            raise JobNotFoundError(job_id)
        data = current.model_dump()
        data.update(fields)
        data["updated_at"] = datetime.now(timezone.utc)
        updated = Job.model_validate(data)
        self._jobs[job_id] = updated
        return updated.model_copy(deep=True)

    async def list_jobs(self, status: JobStatus | None = None) -> list[Job]:
        return [
            j.model_copy(deep=True)
            for j in self._jobs.values()
            if status is None or j.status == status
        ]

    async def save_artifact(self, job_id: str, kind: ArtifactKind, content: str) -> None:
        if job_id not in self._jobs:
            raise JobNotFoundError(job_id)
        self._artifacts[(job_id, kind)] = content

    async def get_artifact(self, job_id: str, kind: ArtifactKind) -> str | None:
        return self._artifacts.get((job_id, kind))


class InMemoryAuditLog(BaseAuditLog):
    """List-backed audit log."""

    def __init__(self) -> None:
        self._entries: list[AuditEntry] = []

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
        self._entries.append(entry)
        return entry

    async def list_entries(self, job_id: str) -> list[AuditEntry]:
        return [e for e in self._entries if e.job_id == job_id]
