# tests/unit/jobs/test_unit_lease.py — v1
"""Tests for jobs/lease.py."""

from __future__ import annotations

import asyncio

import pytest

from toolfactory.jobs.lease import JobBusyError, JobLeaseRegistry


class TestLease:
    def test_acquire_and_release(self):
        leases = JobLeaseRegistry()
        token = leases.acquire("j1")
        assert leases.is_held("j1")
        leases.release("j1", token)
        assert not leases.is_held("j1")

    def test_second_acquire_is_busy(self):
        leases = JobLeaseRegistry()
        leases.acquire("j1")
        with pytest.raises(JobBusyError) as exc_info:
            leases.acquire("j1")
        assert exc_info.value.job_id == "j1"
        leases.acquire("j2")

    def test_stale_token_cannot_release(self):
        leases = JobLeaseRegistry()
        old = leases.acquire("j1")
        leases.release("j1")
        new = leases.acquire("j1")
        assert old != new
        leases.release("j1", old)
        assert leases.is_held("j1")

    @pytest.mark.asyncio
    async def test_cancel_running_task(self):
        leases = JobLeaseRegistry()
        leases.acquire("j1")
        task = asyncio.create_task(asyncio.sleep(10))
        leases.attach_task("j1", task)
        assert leases.task_for("j1") is task

        assert leases.cancel("j1")
        with pytest.raises(asyncio.CancelledError):
            await task
        assert not leases.is_held("j1")
        assert leases.task_for("j1") is None

    def test_cancel_without_task(self):
        leases = JobLeaseRegistry()
        leases.acquire("j1")
        assert not leases.cancel("j1")
        assert not leases.is_held("j1")
