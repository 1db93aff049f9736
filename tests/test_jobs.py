"""Tests for the job registry, executor and scheduler."""

from __future__ import annotations

from datetime import date
from unittest.mock import AsyncMock, patch

import pytest

import app.jobs.definitions  # noqa: F401 - register jobs
from app.core.exceptions import JobError
from app.jobs import JobScheduler, execute_job, get_job
from app.jobs.registry import _registry, get_job_spec, list_job_names, register_job
from app.services.content_refresh import RefreshReport


@pytest.fixture
def temp_job():
    """Register a throwaway job and remove it afterwards."""
    names = []

    def _register(name, func, **kwargs):
        register_job(name, **kwargs)(func)
        names.append(name)
        return func

    yield _register
    for name in names:
        _registry.pop(name, None)


class TestRegistry:
    """Tests for job registration."""

    def test_content_daily_registered(self):
        spec = get_job_spec("content_daily")

        assert "content_daily" in list_job_names()
        assert spec.cron_setting == "content_refresh_cron"
        assert spec.description == "Refresh today's cached content for every supported asset."

    def test_unknown_job(self):
        assert get_job("nope") is None


class TestExecutor:
    """Tests for execute_job."""

    @pytest.mark.asyncio
    async def test_content_daily_returns_summary(self):
        report = RefreshReport(day=date(2026, 10, 19), assets=["bitcoin"])
        with patch("app.jobs.definitions.refresh_daily_content", AsyncMock(return_value=report)):
            message = await execute_job("content_daily")

        assert message == "Refreshed 1 assets for 2026-10-19"

    @pytest.mark.asyncio
    async def test_unknown_job_raises(self):
        with pytest.raises(JobError) as exc_info:
            await execute_job("nope")

        assert exc_info.value.error_code == "UNKNOWN_JOB"

    @pytest.mark.asyncio
    async def test_failure_is_wrapped(self, temp_job):
        async def broken():
            raise RuntimeError("boom")

        temp_job("broken", broken)

        with pytest.raises(JobError) as exc_info:
            await execute_job("broken")

        assert exc_info.value.error_code == "JOB_EXECUTION_FAILED"
        assert exc_info.value.details["job_name"] == "broken"

    @pytest.mark.asyncio
    async def test_sync_job(self, temp_job):
        temp_job("sync_job", lambda: "done")

        assert await execute_job("sync_job") == "done"


class TestScheduler:
    """Tests for cron scheduling."""

    @pytest.mark.asyncio
    async def test_start_schedules_content_daily(self):
        scheduler = JobScheduler()
        await scheduler.start()
        try:
            assert scheduler.running
            status = {job["id"]: job for job in scheduler.get_jobs_status()}
            assert "content_daily" in status
            assert scheduler.get_next_run_time("content_daily") is not None
        finally:
            await scheduler.stop()

        assert not scheduler.running

    @pytest.mark.asyncio
    async def test_disabled_scheduler_does_not_start(self, monkeypatch):
        from app.jobs import scheduler as scheduler_module

        monkeypatch.setattr(scheduler_module.settings, "scheduler_enabled", False)
        scheduler = JobScheduler()
        await scheduler.start()

        assert not scheduler.running

    @pytest.mark.asyncio
    async def test_invalid_cron_is_skipped(self, monkeypatch, temp_job):
        from app.jobs import scheduler as scheduler_module

        async def noop():
            return "ok"

        temp_job("bad_cron", noop, cron_setting="content_refresh_cron")
        monkeypatch.setattr(scheduler_module.settings, "content_refresh_cron", "not a cron")
        scheduler = JobScheduler()
        await scheduler.start()
        try:
            assert scheduler.get_next_run_time("bad_cron") is None
            assert scheduler.get_next_run_time("content_daily") is None
        finally:
            await scheduler.stop()

    @pytest.mark.asyncio
    async def test_run_job_now(self):
        scheduler = JobScheduler()
        with patch("app.jobs.scheduler.execute_job", AsyncMock(return_value="ok")) as run:
            assert await scheduler.run_job_now("content_daily") == "ok"
        run.assert_awaited_once_with("content_daily")

        with pytest.raises(JobError):
            await scheduler.run_job_now("nope")

    @pytest.mark.asyncio
    async def test_scheduled_run_swallows_job_errors(self):
        scheduler = JobScheduler()
        with patch(
            "app.jobs.scheduler.execute_job",
            AsyncMock(side_effect=JobError(message="failed")),
        ):
            await scheduler._run("content_daily")

    @pytest.mark.asyncio
    async def test_global_scheduler_lifecycle(self):
        from app.jobs import get_scheduler, start_scheduler, stop_scheduler

        scheduler = await start_scheduler()
        try:
            assert get_scheduler() is scheduler
            assert scheduler.running
        finally:
            await stop_scheduler()

        assert get_scheduler() is None
