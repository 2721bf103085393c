# src/api/models.py — v1
"""API-level models: JobOverview."""

from __future__ import annotations

from pydantic import BaseModel

from toolfactory.core.models import QAReport
from toolfactory.jobs.models import AuditEntry, Job, JobStatus


class JobOverview(BaseModel):
    """Everything an operator needs to explain a job's current state."""

    job_id: str
    slug: str
    status: JobStatus
    revision_count: int
    last_error: str | None = None
    qa_report: QAReport | None = None
    latest_audit: AuditEntry | None = None
    has_artifact: bool = False
    deployed_url: str | None = None

    @classmethod
    def from_job(
        cls, job: Job, latest_audit: AuditEntry | None, has_artifact: bool,
    ) -> JobOverview:
        return cls(
            job_id=job.id,
            slug=job.slug,
            status=job.status,
            revision_count=job.revision_count,
            last_error=job.last_error,
            qa_report=job.qa_report,
            latest_audit=latest_audit,
            has_artifact=has_artifact,
            deployed_url=job.deployed_url,
        )
