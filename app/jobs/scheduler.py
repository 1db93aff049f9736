"""Job scheduler using APScheduler with async support."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from app.core.config import settings
from app.core.exceptions import JobError
from app.core.logging import get_logger, log_fields

from .executor import execute_job
from .registry import get_all_jobs, get_job


logger = get_logger("jobs.scheduler")

# Global scheduler instance
_scheduler: Optional["JobScheduler"] = None


class JobScheduler:
    """In-process cron scheduler for registered jobs."""

    def __init__(self):
        self._scheduler = AsyncIOScheduler(
            timezone=settings.scheduler_timezone,
            job_defaults={
                # A late or overlapping refresh runs once, not repeatedly
                "coalesce": True,
                "max_instances": 1,
                "misfire_grace_time": 300,
            },
        )
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Schedule registered jobs and start the scheduler."""
        if self._running:
            logger.warning("Scheduler already running")
            return

        if not settings.scheduler_enabled:
            logger.info("Scheduler disabled via SCHEDULER_ENABLED=false")
            return

        self._load_jobs()

        self._scheduler.start()
        self._running = True
        logger.info("Job scheduler started")

    async def stop(self) -> None:
        """Stop the scheduler."""
        if not self._running:
            return

        self._scheduler.shutdown(wait=False)
        self._running = False
        logger.info("Job scheduler stopped")

    def _load_jobs(self) -> None:
        """Add a cron trigger for every registered job that has a schedule."""
        for name, spec in get_all_jobs().items():
            if spec.cron_setting is None:
                continue
            cron_expr = getattr(settings, spec.cron_setting)
            try:
                trigger = CronTrigger.from_crontab(cron_expr, timezone=settings.scheduler_timezone)
            except ValueError as exc:
                logger.error(
                    f"Invalid cron for job {name}, not scheduled",
                    extra=log_fields(job=name, cron=cron_expr, reason=str(exc)),
                )
                continue

            self._scheduler.add_job(
                self._run,
                trigger=trigger,
                args=[name],
                id=name,
                name=spec.description or name,
                replace_existing=True,
            )
            logger.info(f"Scheduled job {name}", extra=log_fields(job=name, cron=cron_expr))

    async def _run(self, name: str) -> None:
        """Scheduler entry point; the executor already logged the traceback."""
        try:
            await execute_job(name)
        except JobError as exc:
            logger.warning(
                f"Scheduled run of {name} did not complete",
                extra=log_fields(job=name, error=exc.error_code),
            )

    async def run_job_now(self, name: str) -> str:
        """Manually trigger a job execution."""
        if get_job(name) is None:
            raise JobError(message=f"Unknown job: {name}", error_code="UNKNOWN_JOB")
        return await execute_job(name)

    def get_next_run_time(self, name: str) -> Optional[datetime]:
        job = self._scheduler.get_job(name)
        return job.next_run_time if job else None

    def get_jobs_status(self) -> list[dict]:
        """Scheduled jobs with their next fire time (ISO 8601 or None)."""
        return [
            {
                "id": job.id,
                "name": job.name,
                "next_run_time": job.next_run_time.isoformat() if job.next_run_time else None,
            }
            for job in self._scheduler.get_jobs()
        ]


def get_scheduler() -> Optional[JobScheduler]:
    """Get the global scheduler instance."""
    return _scheduler


async def start_scheduler() -> JobScheduler:
    """Start the global scheduler."""
    global _scheduler
    if _scheduler is None:
        _scheduler = JobScheduler()
    await _scheduler.start()
    return _scheduler


async def stop_scheduler() -> None:
    """Stop the global scheduler."""
    global _scheduler
    if _scheduler is not None:
        await _scheduler.stop()
        _scheduler = None
