# src/jobs/state_machine.py — v1
"""Job lifecycle state machine — the single writer of a job's status.

Every transition:
  1. checks legality against VALID_TRANSITIONS and returns a failed
     TransitionResult when illegal (never raises for that case);
  2. persists the new status, plus any accompanying field updates, in
     one store write;
  3. appends exactly one AuditEntry attributing the actor.

Audit is observability: a failed audit append is logged and does not
undo the transition. Transitions for one job are serialized.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Literal

from toolfactory.jobs.models import (
    TERMINAL_STATUSES,
    ActorType,
    AuditEntry,
    Job,
    JobStatus,
)
from toolfactory.storage.base_job_store import BaseAuditLog, BaseJobStore

logger = logging.getLogger(__name__)

MAX_REASON_LENGTH = 1000

S = JobStatus

VALID_TRANSITIONS: dict[JobStatus, frozenset[JobStatus]] = {
    S.PROCESSING: frozenset({S.READY_FOR_REVIEW, S.QA_FAILED, S.ESCALATED}),
    S.READY_FOR_REVIEW: frozenset({S.DEPLOYING, S.REJECTED, S.PROCESSING, S.ESCALATED}),
    S.QA_FAILED: frozenset({S.PROCESSING, S.REJECTED, S.ESCALATED}),
    S.DEPLOYING: frozenset({S.DEPLOYED, S.READY_FOR_REVIEW, S.DEPLOY_FAILED, S.QA_FAILED}),
    S.DEPLOY_FAILED: frozenset({S.DEPLOYING, S.REJECTED}),
    S.ESCALATED: frozenset({S.REJECTED}),
    S.DEPLOYED: frozenset(),
    S.REJECTED: frozenset(),
}

TransitionErrorCode = Literal[
    "INVALID_TRANSITION",
    "JOB_NOT_FOUND",
    "REASON_TOO_LONG",
    "PERSISTENCE_ERROR",
]


def can_transition(from_status: JobStatus, to_status: JobStatus) -> bool:
    """Whether `from_status → to_status` is a legal move."""
    return to_status in VALID_TRANSITIONS.get(from_status, frozenset())


def describe_invalid_transition(from_status: JobStatus, to_status: JobStatus) -> str:
    """Operator-facing explanation of why a move is not allowed."""
    if from_status in TERMINAL_STATUSES:
        return (
            f"Status {from_status.value} is terminal and cannot transition "
            "to any other status"
        )
    allowed = sorted(s.value for s in VALID_TRANSITIONS.get(from_status, frozenset()))
    return (
        f"Invalid transition: {from_status.value} → {to_status.value}. "
        f"Allowed: {', '.join(allowed) or 'none'}"
    )


def check_expected_from(
    job: Job, to_status: JobStatus, expected_from: frozenset[JobStatus] | None,
) -> TransitionResult | None:
    """Failed result when `job` is not in one of `expected_from`, else None."""
    if expected_from is None or job.status in expected_from:
        return None
    allowed = ", ".join(sorted(s.value for s in expected_from))
    return TransitionResult.failure(
        "INVALID_TRANSITION",
        f"Cannot move to {to_status.value} from {job.status.value}. "
        f"Allowed from: {allowed}",
        job=job,
    )


@dataclass
class TransitionResult:
    """Outcome of a transition attempt."""

    success: bool
    job: Job | None = None
    audit_entry: AuditEntry | None = None
    error: str | None = None
    error_code: TransitionErrorCode | None = None

    @classmethod
    def failure(
        cls, code: TransitionErrorCode, error: str, job: Job | None = None
    ) -> TransitionResult:
        return cls(success=False, job=job, error=error, error_code=code)


class JobStateMachine:
    """Applies transitions to jobs held in a BaseJobStore.

    Args:
        job_store: Persistence collaborator.
        audit_log: Audit collaborator.
    """

    def __init__(self, job_store: BaseJobStore, audit_log: BaseAuditLog) -> None:
        self._store = job_store
        self._audit = audit_log
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}

    async def record_submission(self, job: Job, actor: ActorType) -> AuditEntry | None:
        """Audit the creation of a job (no prior status)."""
        return await self._append_audit(job.id, None, job.status, actor, "Job submitted")

    async def transition(
        self,
        job_id: str,
        to_status: JobStatus,
        actor: ActorType,
        reason: str | None = None,
        updates: dict[str, Any] | None = None,
        expected_from: frozenset[JobStatus] | None = None,
    ) -> TransitionResult:
        """Move a job to `to_status`.

        Args:
            job_id: Job to transition.
            to_status: Target status.
            actor: Who causes the transition.
            reason: Free-text notes recorded on the audit entry.
            updates: Extra job fields written together with the status.
            expected_from: If given, the current status must be one of these
                (narrower than the legal table, e.g. cancel only from
                PROCESSING or DEPLOYING).

        Returns:
            TransitionResult; on failure the job is left untouched.
        """
        if reason is not None and len(reason) > MAX_REASON_LENGTH:
            return TransitionResult.failure(
                "REASON_TOO_LONG",
                f"Notes must be {MAX_REASON_LENGTH} characters or fewer",
            )

        self._lock_users[job_id] = self._lock_users.get(job_id, 0) + 1
        try:
            async with self._lock_for(job_id):
                job = await self._store.get_job(job_id)
                if job is None:
                    return TransitionResult.failure("JOB_NOT_FOUND", f"Job not found: {job_id}")

                from_status = job.status
                mismatch = check_expected_from(job, to_status, expected_from)
                if mismatch is not None:
                    return mismatch
                if not can_transition(from_status, to_status):
                    error = describe_invalid_transition(from_status, to_status)
                    logger.info("Rejected transition for job %s: %s", job_id, error)
                    return TransitionResult.failure("INVALID_TRANSITION", error, job=job)

                fields = dict(updates or {})
                fields["status"] = to_status
                try:
                    updated = await self._store.update_job(job_id, fields)
                except Exception as exc:
                    logger.exception("Failed to persist transition for job %s", job_id)
                    return TransitionResult.failure("PERSISTENCE_ERROR", str(exc), job=job)

                entry = await self._append_audit(job_id, from_status, to_status, actor, reason)
        finally:
            self._release_lock(job_id)

        logger.info(
            "Job %s: %s → %s (actor=%s)",
            job_id, from_status.value, to_status.value, actor.value,
        )
        return TransitionResult(success=True, job=updated, audit_entry=entry)

    async def _append_audit(
        self,
        job_id: str,
        from_status: JobStatus | None,
        to_status: JobStatus,
        actor: ActorType,
        reason: str | None,
    ) -> AuditEntry | None:
        try:
            return await self._audit.append_audit_entry(
                job_id, from_status, to_status, actor, reason
            )
        except Exception:
            logger.exception(
                "Audit append failed for job %s (%s → %s)",
                job_id, from_status.value if from_status else None, to_status.value,
            )
            return None

    def _lock_for(self, job_id: str) -> asyncio.Lock:
        lock = self._locks.get(job_id)
        if lock is None:
            lock = self._locks[job_id] = asyncio.Lock()
        return lock

    def _release_lock(self, job_id: str) -> None:
        # Locks live only while a transition for the job is pending.
        users = self._lock_users[job_id] - 1
        if users:
            self._lock_users[job_id] = users
        else:
            del self._lock_users[job_id]
            self._locks.pop(job_id, None)
