# tests/unit/storage/test_unit_job_stores.py — v1
"""Contract tests run against every job store / audit log backend."""

from __future__ import annotations

import pytest

from toolfactory.core.models import QAReport
from toolfactory.jobs.models import ARTIFACT_HTML, ActorType, JobStatus
from toolfactory.storage.base_job_store import JobNotFoundError
from toolfactory.storage.memory_store import InMemoryAuditLog, InMemoryJobStore
from toolfactory.storage.sqlite_store import SqliteAuditLog, SqliteJobStore


@pytest.fixture(params=["memory", "sqlite"])
def job_store(request, tmp_path):
    if request.param == "memory":
        yield InMemoryJobStore()
    else:
        store = SqliteJobStore(tmp_path / "db" / "jobs.db")
        yield store
        store.close()


@pytest.fixture(params=["memory", "sqlite"])
def audit_log(request, tmp_path):
    if request.param == "memory":
        yield InMemoryAuditLog()
    else:
        log = SqliteAuditLog(tmp_path / "audit.db")
        yield log
        log.close()


def _fields(**extra):
    return {"slug": "cash-levers-abc123", "source_content": "Lever 1: Price", **extra}


class TestJobStoreContract:
    @pytest.mark.asyncio
    async def test_create_and_get(self, job_store):
        job = await job_store.create_job(_fields())
        fetched = await job_store.get_job(job.id)
        assert fetched.model_dump() == job.model_dump()
        assert fetched.status == JobStatus.PROCESSING
        assert fetched.revision_count == 0

    @pytest.mark.asyncio
    async def test_get_unknown(self, job_store):
        assert await job_store.get_job("nope") is None

    @pytest.mark.asyncio
    async def test_update_is_partial(self, job_store):
        job = await job_store.create_job(_fields())
        report = QAReport(passed=True, score=3, max_score=3, summary="ok")
        updated = await job_store.update_job(job.id, {
            "status": JobStatus.READY_FOR_REVIEW, "qa_report": report,
        })
        assert updated.status == JobStatus.READY_FOR_REVIEW
        assert updated.qa_report.score == 3
        assert updated.source_content == "Lever 1: Price"
        assert updated.updated_at >= job.updated_at

        fetched = await job_store.get_job(job.id)
        assert fetched.status == JobStatus.READY_FOR_REVIEW
        assert fetched.qa_report.summary == "ok"

    @pytest.mark.asyncio
    async def test_update_unknown(self, job_store):
        with pytest.raises(JobNotFoundError):
            await job_store.update_job("nope", {"last_error": "x"})

    @pytest.mark.asyncio
    async def test_list_by_status(self, job_store):
        a = await job_store.create_job(_fields())
        b = await job_store.create_job(_fields(status=JobStatus.QA_FAILED))
        assert {j.id for j in await job_store.list_jobs()} == {a.id, b.id}
        assert [j.id for j in await job_store.list_jobs(JobStatus.QA_FAILED)] == [b.id]

    @pytest.mark.asyncio
    async def test_artifact_latest_wins(self, job_store):
        job = await job_store.create_job(_fields())
        assert await job_store.get_artifact(job.id, ARTIFACT_HTML) is None
        await job_store.save_artifact(job.id, ARTIFACT_HTML, "<html>v1</html>")
        await job_store.save_artifact(job.id, ARTIFACT_HTML, "<html>v2</html>")
        assert await job_store.get_artifact(job.id, ARTIFACT_HTML) == "<html>v2</html>"

    @pytest.mark.asyncio
    async def test_artifact_for_unknown_job(self, job_store):
        with pytest.raises(JobNotFoundError):
            await job_store.save_artifact("nope", ARTIFACT_HTML, "<html></html>")


class TestAuditLogContract:
    @pytest.mark.asyncio
    async def test_append_and_order(self, audit_log):
        first = await audit_log.append_audit_entry(
            "j1", None, JobStatus.PROCESSING, ActorType.HUMAN, "Job submitted",
        )
        await audit_log.append_audit_entry("j2", None, JobStatus.PROCESSING, ActorType.HUMAN)
        second = await audit_log.append_audit_entry(
            "j1", JobStatus.PROCESSING, JobStatus.QA_FAILED, ActorType.FACTORY,
        )
        entries = await audit_log.list_entries("j1")
        assert [e.id for e in entries] == [first.id, second.id]
        assert entries[0].from_status is None
        assert entries[1].actor == ActorType.FACTORY
        assert (await audit_log.latest_entry("j1")).id == second.id

    @pytest.mark.asyncio
    async def test_empty(self, audit_log):
        assert await audit_log.list_entries("j1") == []
        assert await audit_log.latest_entry("j1") is None


class TestMemoryStoreIsolation:
    @pytest.mark.asyncio
    async def test_returned_jobs_are_copies(self):
        store = InMemoryJobStore()
        job = await store.create_job(_fields())
        job.last_error = "mutated"
        assert (await store.get_job(job.id)).last_error is None


class TestSqlitePersistence:
    @pytest.mark.asyncio
    async def test_survives_reopen(self, tmp_path):
        path = tmp_path / "jobs.db"
        store = SqliteJobStore(path)
        job = await store.create_job(_fields())
        await store.save_artifact(job.id, ARTIFACT_HTML, "<html></html>")
        store.close()

        reopened = SqliteJobStore(path)
        assert (await reopened.get_job(job.id)).slug == job.slug
        assert await reopened.get_artifact(job.id, ARTIFACT_HTML) == "<html></html>"
        reopened.close()

    @pytest.mark.asyncio
    async def test_in_memory_database(self):
        store = SqliteJobStore(":memory:")
        job = await store.create_job(_fields())
        assert (await store.get_job(job.id)).id == job.id
        store.close()
