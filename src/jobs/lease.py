# src/jobs/lease.py — v1
"""Per-job lease: at most one pipeline run in flight for a given job id."""

from __future__ import annotations

import asyncio
import logging
import uuid

logger = logging.getLogger(__name__)


class JobBusyError(Exception):
    """A pipeline run is already in flight for this job."""

    def __init__(self, job_id: str) -> None:
        self.job_id = job_id
        super().__init__(f"Job {job_id} already has a pipeline run in flight")


class JobLeaseRegistry:
    """Tracks which jobs hold a lease and the background task serving each."""

    def __init__(self) -> None:
        self._tokens: dict[str, str] = {}
        self._tasks: dict[str, asyncio.Task] = {}

    def acquire(self, job_id: str) -> str:
        """Take the lease for `job_id`.

        Returns:
            Lease token; pass it to release() so a stale holder cannot
            release a lease taken after its own was revoked.

        Raises:
            JobBusyError: If the lease is already held.
        """
        if job_id in self._tokens:
            raise JobBusyError(job_id)
        token = uuid.uuid4().hex
        self._tokens[job_id] = token
        logger.debug("Lease acquired for job %s", job_id)
        return token

    def release(self, job_id: str, token: str | None = None) -> None:
        """Release the lease (only if `token` still owns it, when given)."""
        if token is not None and self._tokens.get(job_id) != token:
            return
        self._tokens.pop(job_id, None)
        self._tasks.pop(job_id, None)
        logger.debug("Lease released for job %s", job_id)

    def is_held(self, job_id: str) -> bool:
        return job_id in self._tokens

    def attach_task(self, job_id: str, task: asyncio.Task) -> None:
        """Associate the background task serving a held lease."""
        self._tasks[job_id] = task

    def task_for(self, job_id: str) -> asyncio.Task | None:
        return self._tasks.get(job_id)

    def cancel(self, job_id: str) -> bool:
        """Cancel the in-flight task for `job_id` and revoke its lease.

        Returns:
            True if a running task was cancelled.
        """
        task = self._tasks.get(job_id)
        cancelled = False
        if task is not None and not task.done():
            task.cancel()
            cancelled = True
        self.release(job_id)
        return cancelled
