# src/jobs/stale_monitor.py — v1
"""Stale job monitor — recover jobs stuck in an in-flight status.

A job left in PROCESSING or DEPLOYING past its timeout (crashed worker,
lost deploy callback) is moved to a reviewable status:
  - PROCESSING → QA_FAILED
  - DEPLOYING  → READY_FOR_REVIEW when an artifact exists, else DEPLOY_FAILED

Jobs with a live lease are skipped. Each move goes through the state
machine with `expected_from`, so a job that advanced meanwhile is left
alone.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from toolfactory.jobs.lease import JobLeaseRegistry
from toolfactory.jobs.models import ARTIFACT_HTML, ActorType, JobStatus
from toolfactory.jobs.state_machine import JobStateMachine
from toolfactory.storage.base_job_store import BaseJobStore

logger = logging.getLogger(__name__)


@dataclass
class StaleCheckReport:
    """Result of one monitor sweep."""

    checked: int = 0
    recovered: list[str] = field(default_factory=list)
    skipped_leased: list[str] = field(default_factory=list)


class StaleJobMonitor:
    """Periodically recovers stuck jobs.

    Args:
        job_store: Persistence collaborator.
        state_machine: Transition authority.
        leases: Lease registry of the running factory (None = no lease checks).
        processing_timeout: Age after which PROCESSING is stale.
        deploying_timeout: Age after which DEPLOYING is stale.
        interval_s: Seconds between sweeps in run_forever.
    """

    def __init__(
        self,
        job_store: BaseJobStore,
        state_machine: JobStateMachine,
        leases: JobLeaseRegistry | None = None,
        processing_timeout: timedelta = timedelta(minutes=15),
        deploying_timeout: timedelta = timedelta(minutes=10),
        interval_s: float = 60.0,
    ) -> None:
        self._store = job_store
        self._machine = state_machine
        self._leases = leases
        self._interval_s = interval_s
        self._timeouts = {
            JobStatus.PROCESSING: processing_timeout,
            JobStatus.DEPLOYING: deploying_timeout,
        }

    async def check_once(self, now: datetime | None = None) -> StaleCheckReport:
        """Run one sweep over in-flight jobs."""
        now = now or datetime.now(timezone.utc)
        report = StaleCheckReport()

        for status, timeout in self._timeouts.items():
            for job in await self._store.list_jobs(status=status):
                report.checked += 1
                if now - job.updated_at < timeout:
                    continue
                if self._leases is not None and self._leases.is_held(job.id):
                    report.skipped_leased.append(job.id)
                    continue

                minutes = int((now - job.updated_at).total_seconds() // 60)
                if status is JobStatus.PROCESSING:
                    target = JobStatus.QA_FAILED
                    message = f"Processing timed out after {minutes} minutes"
                elif await self._store.get_artifact(job.id, ARTIFACT_HTML):
                    target = JobStatus.READY_FOR_REVIEW
                    message = f"Deploy timed out after {minutes} minutes"
                else:
                    target = JobStatus.DEPLOY_FAILED
                    message = f"Deploy timed out after {minutes} minutes"

                result = await self._machine.transition(
                    job.id,
                    target,
                    ActorType.SYSTEM,
                    reason=message,
                    updates={"last_error": message},
                    expected_from=frozenset({status}),
                )
                if result.success:
                    report.recovered.append(job.id)
                    logger.warning(
                        "Recovered stale job %s: %s → %s", job.id, status.value, target.value,
                    )
                else:
                    logger.info("Stale job %s not moved: %s", job.id, result.error)

        return report

    @property
    def interval_s(self) -> float:
        return self._interval_s

    async def run_forever(self, interval_s: float | None = None) -> None:
        """Sweep every `interval_s` seconds (default: the configured one) until cancelled."""
        if interval_s is None:
            interval_s = self._interval_s
        while True:
            try:
                await self.check_once()
            except Exception:
                logger.exception("Stale job sweep failed")
            await asyncio.sleep(interval_s)
