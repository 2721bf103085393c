# src/jobs/models.py — v1
"""Job lifecycle models: JobStatus, ActorType, Job, AuditEntry."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from toolfactory.core.models import QAReport


class JobStatus(str, Enum):
    PROCESSING = "PROCESSING"
    READY_FOR_REVIEW = "READY_FOR_REVIEW"
    QA_FAILED = "QA_FAILED"
    DEPLOYING = "DEPLOYING"
    DEPLOYED = "DEPLOYED"
    DEPLOY_FAILED = "DEPLOY_FAILED"
    REJECTED = "REJECTED"
    ESCALATED = "ESCALATED"


TERMINAL_STATUSES: frozenset[JobStatus] = frozenset(
    {JobStatus.DEPLOYED, JobStatus.REJECTED}
)


class ActorType(str, Enum):
    """Who caused a transition."""

    HUMAN = "human"
    SYSTEM = "system"
    FACTORY = "factory"  # the automated pipeline


ArtifactKind = Literal["html"]

ARTIFACT_HTML: ArtifactKind = "html"


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Job(BaseModel):
    """One submission's end-to-end lifecycle record.

    The generated artifact is stored separately (see BaseJobStore.save_artifact).
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    slug: str
    status: JobStatus = JobStatus.PROCESSING
    source_content: str
    revision_count: int = 0
    revision_notes: str | None = None
    qa_report: QAReport | None = None
    last_error: str | None = None
    deployed_url: str | None = None
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


class AuditEntry(BaseModel):
    """Immutable record of one state transition."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    job_id: str
    from_status: JobStatus | None
    to_status: JobStatus
    actor: ActorType
    reason: str | None = None
    created_at: datetime = Field(default_factory=_now)
