# src/api/facade.py — v1
"""Public API facade — submit course content, review, revise, deploy.

Usage:
    from toolfactory.api.facade import create_tool_factory
    factory = create_tool_factory()
    job_id = await factory.submit(content)
    await factory.wait_for_job(job_id)

Pipeline runs and deploys execute as background tasks. At most one is in
flight per job (see JobLeaseRegistry); a second trigger raises
JobBusyError. Human actions return a TransitionResult and never raise
for an illegal move.
"""

from __future__ import annotations

import asyncio
import logging
import re
import uuid
from datetime import timedelta
from typing import TYPE_CHECKING

from toolfactory.api.models import JobOverview
from toolfactory.config.settings import Settings
from toolfactory.jobs.lease import JobLeaseRegistry
from toolfactory.jobs.models import ARTIFACT_HTML, ActorType, AuditEntry, Job, JobStatus
from toolfactory.jobs.stale_monitor import StaleJobMonitor
from toolfactory.jobs.state_machine import (
    MAX_REASON_LENGTH,
    JobStateMachine,
    TransitionResult,
    check_expected_from,
)
from toolfactory.logging.context import clear_context, set_job_context
from toolfactory.pipeline.factory_pipeline import FactoryPipeline
from toolfactory.pipeline.revision import RevisionController

if TYPE_CHECKING:
    from toolfactory.deploy.base_deployer import BaseDeployer
    from toolfactory.llm.gateway import AIGateway
    from toolfactory.storage.base_job_store import BaseAuditLog, BaseJobStore
    from toolfactory.tracking.cost_tracker import CostTracker
    from toolfactory.tracking.models import JobCostSummary
    from toolfactory.validation.matching import LabelMatcher

logger = logging.getLogger(__name__)

CANCEL_REASON = "Cancelled by user"

_CANCELLABLE = frozenset({JobStatus.PROCESSING, JobStatus.DEPLOYING})
_REVISABLE = frozenset({JobStatus.READY_FOR_REVIEW, JobStatus.QA_FAILED})
_DEPLOYABLE = frozenset({JobStatus.READY_FOR_REVIEW, JobStatus.DEPLOY_FAILED})
_SLUG_CHARS = re.compile(r"[^a-z0-9]+")


class ToolFactory:
    """Job lifecycle operations over the factory pipeline.

    Args:
        gateway: AI gateway (checked before any job is created or re-run).
        job_store: Persistence collaborator.
        audit_log: Audit collaborator.
        settings: Application settings (defaults to Settings()).
        pipeline: Pipeline to run (built from gateway and settings if None).
        deployer: Publishes approved tools. None = deploy outcome is reported
            externally through complete_deploy / fail_deploy.
        leases: Lease registry (a private one if None).
        cost_tracker: Cost sink shared with the gateway, for cost_summary().
        matcher: Label matching strategy for validation.
    """

    def __init__(
        self,
        gateway: AIGateway,
        job_store: BaseJobStore,
        audit_log: BaseAuditLog,
        settings: Settings | None = None,
        pipeline: FactoryPipeline | None = None,
        deployer: BaseDeployer | None = None,
        leases: JobLeaseRegistry | None = None,
        cost_tracker: CostTracker | None = None,
        matcher: LabelMatcher | None = None,
    ) -> None:
        self._settings = settings or Settings()
        self._gateway = gateway
        self._store = job_store
        self._audit = audit_log
        self._machine = JobStateMachine(job_store, audit_log)
        self._pipeline = pipeline or FactoryPipeline(gateway, self._settings, matcher=matcher)
        self._deployer = deployer
        self._leases = leases or JobLeaseRegistry()
        self._cost_tracker = cost_tracker
        self._revisions = RevisionController(self._settings.max_revision_attempts)

    @property
    def state_machine(self) -> JobStateMachine:
        return self._machine

    @property
    def leases(self) -> JobLeaseRegistry:
        return self._leases

    # === SUBMISSION ===

    async def submit(self, source_content: str, slug: str | None = None) -> str:
        """Create a job and start its pipeline run in the background.

        Returns:
            The new job id.

        Raises:
            NoProviderAvailableError: If no AI provider is configured (no
                job is created).
            ValueError: If the content is blank.
        """
        self._gateway.ensure_configured()
        if not source_content.strip():
            raise ValueError("Source content is empty")

        job = await self._store.create_job({
            "slug": slug or make_slug(source_content),
            "source_content": source_content,
        })
        await self._machine.record_submission(job, ActorType.HUMAN)
        token = self._leases.acquire(job.id)
        self._start(job.id, self._run_job(job.id, token, source_content, None, None, 0))
        logger.info("Job submitted: %s (slug=%s)", job.id, job.slug)
        return job.id

    async def retry(self, job_id: str) -> TransitionResult:
        """Re-run the pipeline for a QA_FAILED job.

        The latest revision notes are kept, and the blocking findings of the
        failed run are sent to the builder as feedback.
        """
        job = await self._store.get_job(job_id)
        notes = job.revision_notes if job else None
        feedback = _qa_feedback(job) if job else []
        return await self._rerun(
            job_id, notes, "Retry requested", frozenset({JobStatus.QA_FAILED}),
            qa_feedback=feedback,
        )

    async def request_revision(self, job_id: str, notes: str) -> TransitionResult:
        """Send a reviewed job back through the pipeline with human notes.

        The notes are placed ahead of the source content in the generation
        request. Past the revision ceiling the job is escalated instead.
        """
        if not notes.strip():
            return TransitionResult.failure("INVALID_TRANSITION", "Revision notes are empty")
        return await self._rerun(job_id, notes.strip(), notes.strip(), _REVISABLE)

    async def _rerun(
        self,
        job_id: str,
        notes: str | None,
        reason: str,
        expected_from: frozenset[JobStatus],
        qa_feedback: list[str] | None = None,
    ) -> TransitionResult:
        self._gateway.ensure_configured()
        if len(reason) > MAX_REASON_LENGTH:
            return TransitionResult.failure(
                "REASON_TOO_LONG", f"Notes must be {MAX_REASON_LENGTH} characters or fewer",
            )
        # An illegal move is reported before the lease is taken.
        rejected = await self._precheck(job_id, JobStatus.PROCESSING, expected_from)
        if rejected is not None:
            return rejected

        token = self._leases.acquire(job_id)
        started = False
        try:
            job = await self._store.get_job(job_id)
            if job is None:
                return TransitionResult.failure("JOB_NOT_FOUND", f"Job not found: {job_id}")

            if job.status in expected_from:
                decision = self._revisions.evaluate(job)
                if decision.escalate:
                    return await self._machine.transition(
                        job_id, JobStatus.ESCALATED, ActorType.SYSTEM, reason=decision.reason,
                        updates={"last_error": decision.reason},
                    )

            prior = await self._store.get_artifact(job_id, ARTIFACT_HTML)
            attempt = job.revision_count + 1
            result = await self._machine.transition(
                job_id,
                JobStatus.PROCESSING,
                ActorType.HUMAN,
                reason=reason,
                updates={"revision_count": attempt, "revision_notes": notes, "last_error": None},
                expected_from=expected_from,
            )
            if not result.success:
                return result

            self._start(
                job_id, self._run_job(
                    job_id, token, job.source_content, notes, prior, attempt, qa_feedback,
                ),
            )
            started = True
            return result
        finally:
            if not started:
                self._leases.release(job_id, token)

    # === REVIEW ===

    async def approve(self, job_id: str) -> TransitionResult:
        """Approve a reviewed tool (or retry a failed deploy) and start deploying."""
        if self._deployer is None:
            return await self._machine.transition(
                job_id, JobStatus.DEPLOYING, ActorType.HUMAN,
                reason="Approved for deployment", expected_from=_DEPLOYABLE,
            )

        rejected = await self._precheck(job_id, JobStatus.DEPLOYING, _DEPLOYABLE)
        if rejected is not None:
            return rejected

        token = self._leases.acquire(job_id)
        started = False
        try:
            result = await self._machine.transition(
                job_id, JobStatus.DEPLOYING, ActorType.HUMAN,
                reason="Approved for deployment", expected_from=_DEPLOYABLE,
            )
            if result.success:
                self._start(job_id, self._run_deploy(job_id, token))
                started = True
            return result
        finally:
            if not started:
                self._leases.release(job_id, token)

    async def reject(self, job_id: str, reason: str) -> TransitionResult:
        """Reject a job permanently."""
        return await self._machine.transition(
            job_id, JobStatus.REJECTED, ActorType.HUMAN, reason=reason,
        )

    async def cancel(self, job_id: str) -> TransitionResult:
        """Stop an in-flight run or deploy.

        The job lands in READY_FOR_REVIEW when an artifact exists, else in
        QA_FAILED. The background task is cancelled and its lease revoked.
        """
        has_artifact = bool(await self._store.get_artifact(job_id, ARTIFACT_HTML))
        target = JobStatus.READY_FOR_REVIEW if has_artifact else JobStatus.QA_FAILED
        result = await self._machine.transition(
            job_id, target, ActorType.HUMAN, reason=CANCEL_REASON,
            updates={"last_error": CANCEL_REASON}, expected_from=_CANCELLABLE,
        )
        if result.success:
            cancelled = self._leases.cancel(job_id)
            logger.info("Job %s cancelled (task_cancelled=%s)", job_id, cancelled)
        return result

    # === DEPLOY OUTCOME ===

    async def complete_deploy(self, job_id: str, url: str) -> TransitionResult:
        """Record a successful deploy."""
        return await self._machine.transition(
            job_id, JobStatus.DEPLOYED, ActorType.SYSTEM, reason=f"Deployed to {url}",
            updates={"deployed_url": url, "last_error": None},
            expected_from=frozenset({JobStatus.DEPLOYING}),
        )

    async def fail_deploy(self, job_id: str, error: str) -> TransitionResult:
        """Record a failed deploy, falling back to review when an artifact exists."""
        has_artifact = bool(await self._store.get_artifact(job_id, ARTIFACT_HTML))
        target = JobStatus.READY_FOR_REVIEW if has_artifact else JobStatus.DEPLOY_FAILED
        return await self._machine.transition(
            job_id, target, ActorType.SYSTEM, reason=f"Deploy failed: {error}"[:MAX_REASON_LENGTH],
            updates={"last_error": error},
            expected_from=frozenset({JobStatus.DEPLOYING}),
        )

    async def _precheck(
        self, job_id: str, to_status: JobStatus, expected_from: frozenset[JobStatus],
    ) -> TransitionResult | None:
        job = await self._store.get_job(job_id)
        if job is None:
            return TransitionResult.failure("JOB_NOT_FOUND", f"Job not found: {job_id}")
        return check_expected_from(job, to_status, expected_from)

    # === QUERIES ===

    async def get_job(self, job_id: str) -> Job | None:
        return await self._store.get_job(job_id)

    async def get_artifact(self, job_id: str) -> str | None:
        return await self._store.get_artifact(job_id, ARTIFACT_HTML)

    async def get_audit_trail(self, job_id: str) -> list[AuditEntry]:
        return await self._audit.list_entries(job_id)

    async def describe_job(self, job_id: str) -> JobOverview | None:
        """Current status, QA report and latest audit entry of a job."""
        job = await self._store.get_job(job_id)
        if job is None:
            return None
        return JobOverview.from_job(
            job,
            latest_audit=await self._audit.latest_entry(job_id),
            has_artifact=bool(await self._store.get_artifact(job_id, ARTIFACT_HTML)),
        )

    def cost_summary(self, job_id: str) -> JobCostSummary | None:
        if self._cost_tracker is None:
            return None
        return self._cost_tracker.summary(job_id)

    def create_stale_monitor(self) -> StaleJobMonitor:
        """Stale job monitor sharing this factory's store, state machine and leases."""
        return StaleJobMonitor(
            self._store,
            self._machine,
            leases=self._leases,
            processing_timeout=timedelta(minutes=self._settings.stale_processing_minutes),
            deploying_timeout=timedelta(minutes=self._settings.stale_deploying_minutes),
            interval_s=self._settings.stale_check_interval_s,
        )

    async def wait_for_job(self, job_id: str) -> None:
        """Wait until the job's in-flight task (if any) has finished."""
        task = self._leases.task_for(job_id)
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)

    # === BACKGROUND TASKS ===

    def _start(self, job_id: str, coro) -> None:
        task = asyncio.create_task(coro, name=f"toolfactory-{job_id}")
        self._leases.attach_task(job_id, task)

    async def _run_job(
        self,
        job_id: str,
        token: str,
        source_content: str,
        notes: str | None,
        prior_artifact: str | None,
        attempt: int,
        qa_feedback: list[str] | None = None,
    ) -> None:
        set_job_context(job_id)
        try:
            result = await self._pipeline.run(
                job_id, source_content,
                revision_notes=notes, prior_artifact=prior_artifact, attempt=attempt,
                qa_feedback=qa_feedback,
            )
            if result.artifact_html:
                await self._store.save_artifact(job_id, ARTIFACT_HTML, result.artifact_html)

            target = JobStatus.READY_FOR_REVIEW if result.success else JobStatus.QA_FAILED
            await self._machine.transition(
                job_id,
                target,
                ActorType.FACTORY,
                reason=result.qa_report.summary[:MAX_REASON_LENGTH],
                updates={
                    "qa_report": result.qa_report,
                    "last_error": None if result.success else (
                        result.error or result.qa_report.summary
                    ),
                },
                expected_from=frozenset({JobStatus.PROCESSING}),
            )
        except asyncio.CancelledError:
            logger.info("Pipeline run cancelled for job %s", job_id)
            raise
        except Exception as exc:
            logger.exception("Pipeline run crashed for job %s", job_id)
            await self._machine.transition(
                job_id,
                JobStatus.QA_FAILED,
                ActorType.SYSTEM,
                reason=f"Pipeline error: {exc}"[:MAX_REASON_LENGTH],
                updates={"last_error": str(exc)},
                expected_from=frozenset({JobStatus.PROCESSING}),
            )
        finally:
            self._leases.release(job_id, token)
            clear_context()

    async def _run_deploy(self, job_id: str, token: str) -> None:
        set_job_context(job_id)
        try:
            job = await self._store.get_job(job_id)
            html = await self._store.get_artifact(job_id, ARTIFACT_HTML) or ""
            try:
                url = await self._deployer.deploy(job, html)
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                logger.warning("Deploy failed for job %s: %s", job_id, exc)
                await self.fail_deploy(job_id, str(exc))
            else:
                await self.complete_deploy(job_id, url)
        finally:
            self._leases.release(job_id, token)
            clear_context()


def _qa_feedback(job: Job) -> list[str]:
    if job.qa_report is None:
        return []
    return [
        f"[{f.code}] {f.message}" for f in job.qa_report.findings if f.severity == "error"
    ]


def make_slug(source_content: str, max_len: int = 48) -> str:
    """Slug from the first non-empty line of content plus a short unique suffix."""
    first_line = next((ln for ln in source_content.splitlines() if ln.strip()), "tool")
    base = _SLUG_CHARS.sub("-", first_line.lower()).strip("-")[:max_len].strip("-")
    return f"{base or 'tool'}-{uuid.uuid4().hex[:6]}"


def create_tool_factory(
    settings: Settings | None = None,
    gateway: AIGateway | None = None,
) -> ToolFactory:
    """Wire a ToolFactory from settings: gateway, stores, deployer, cost tracker."""
    from toolfactory.deploy.local_deployer import LocalDeployer
    from toolfactory.llm.client_factory import create_gateway
    from toolfactory.storage.store_factory import create_stores
    from toolfactory.tracking.cost_tracker import CostTracker

    settings = settings or Settings()
    tracker = CostTracker()
    gateway = gateway or create_gateway(settings, cost_tracker=tracker)
    job_store, audit_log = create_stores(settings)
    return ToolFactory(
        gateway,
        job_store,
        audit_log,
        settings=settings,
        deployer=LocalDeployer(settings.deploy_output_dir),
        cost_tracker=tracker,
    )
