# src/storage/base_job_store.py — v1
"""Abstract persistence and audit collaborators.

The core treats persistence as a plain record store: no query language,
no transactions across calls.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from toolfactory.jobs.models import ActorType, ArtifactKind, AuditEntry, Job, JobStatus


class JobNotFoundError(KeyError):
    """Raised when a job id is unknown to the store."""

    def __init__(self, job_id: str) -> None:
        self.job_id = job_id
        super().__init__(f"Job not found: {job_id}")


class BaseJobStore(ABC):
    """Record store for jobs and their artifacts."""

    @abstractmethod
    async def get_job(self, job_id: str) -> Job | None:
        """Return the job, or None if unknown."""

    @abstractmethod
    async def create_job(self, fields: dict[str, Any]) -> Job:
        """Create and persist a job from field values."""

    @abstractmethod
    async def update_job(self, job_id: str, fields: dict[str, Any]) -> Job:
        """Apply a partial update in one write and return the updated job.

        Raises:
            JobNotFoundError: If the job does not exist.
        """

    @abstractmethod
    async def list_jobs(self, status: JobStatus | None = None) -> list[Job]:
        """List jobs, optionally filtered by status."""

    @abstractmethod
    async def save_artifact(self, job_id: str, kind: ArtifactKind, content: str) -> None:
        """Store an artifact; the latest write of a kind replaces the previous one."""

    @abstractmethod
    async def get_artifact(self, job_id: str, kind: ArtifactKind) -> str | None:
        """Return the artifact content, or None."""


class BaseAuditLog(ABC):
    """Append-only log of state transitions."""

    @abstractmethod
    async def append_audit_entry(
        self,
        job_id: str,
        from_status: JobStatus | None,
        to_status: JobStatus,
        actor: ActorType,
        reason: str | None = None,
    ) -> AuditEntry:
        """Append one entry and return it."""

    @abstractmethod
    async def list_entries(self, job_id: str) -> list[AuditEntry]:
        """Entries for a job, oldest first."""

    async def latest_entry(self, job_id: str) -> AuditEntry | None:
        entries = await self.list_entries(job_id)
        return entries[-1] if entries else None
