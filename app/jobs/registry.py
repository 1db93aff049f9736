"""Job registry for mapping job names to functions and schedules."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from app.core.logging import get_logger


logger = get_logger("jobs.registry")


@dataclass(frozen=True)
class JobSpec:
    """A registered job: callable plus the settings attribute holding its cron."""

    name: str
    func: Callable
    cron_setting: str | None = None
    description: str = ""


# Global job registry
_registry: dict[str, JobSpec] = {}


def _first_line(doc: str | None) -> str:
    lines = (doc or "").strip().splitlines()
    return lines[0] if lines else ""


def register_job(
    name: str,
    *,
    cron_setting: str | None = None,
    description: str = "",
) -> Callable:
    """
    Decorator to register a job function.

    Usage:
        @register_job("content_daily", cron_setting="content_refresh_cron")
        async def content_daily_job() -> str:
            ...
    """

    def decorator(func: Callable) -> Callable:
        _registry[name] = JobSpec(
            name=name,
            func=func,
            cron_setting=cron_setting,
            description=description or _first_line(func.__doc__),
        )
        logger.debug(f"Registered job: {name}")
        return func

    return decorator


def get_job(name: str) -> Callable | None:
    """Get a registered job function by name."""
    spec = _registry.get(name)
    return spec.func if spec else None


def get_job_spec(name: str) -> JobSpec | None:
    return _registry.get(name)


def get_all_jobs() -> dict[str, JobSpec]:
    """Get all registered jobs."""
    return _registry.copy()


def list_job_names() -> list[str]:
    """List all registered job names."""
    return list(_registry.keys())
