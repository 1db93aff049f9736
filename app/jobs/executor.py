"""Job execution with timing and error wrapping."""

from __future__ import annotations

import inspect
import time

from app.core.exceptions import JobError
from app.core.logging import get_logger, log_fields

from .registry import get_job


logger = get_logger("jobs.executor")


async def execute_job(name: str) -> str:
    """Run a registered job and return its summary line.

    Sync and async job functions are both accepted. A falsy result is
    reported as ``"Completed"``.

    Raises:
        JobError: ``UNKNOWN_JOB`` for an unregistered name,
            ``JOB_EXECUTION_FAILED`` when the job raises.
    """
    job_func = get_job(name)
    if job_func is None:
        raise JobError(message=f"Unknown job: {name}", error_code="UNKNOWN_JOB")

    started = time.monotonic()
    try:
        result = await job_func() if inspect.iscoroutinefunction(job_func) else job_func()
    except Exception as exc:
        elapsed = round(time.monotonic() - started, 3)
        logger.exception(f"Job {name} failed", extra=log_fields(job=name, duration_seconds=elapsed))
        raise JobError(
            message=f"Job execution failed: {exc}",
            error_code="JOB_EXECUTION_FAILED",
            details={"job_name": name, "duration_seconds": elapsed},
        ) from exc

    summary = str(result) if result else "Completed"
    logger.info(
        f"Job {name} finished: {summary}",
        extra=log_fields(job=name, duration_seconds=round(time.monotonic() - started, 3)),
    )
    return summary
