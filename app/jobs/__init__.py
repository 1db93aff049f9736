"""Background job scheduler."""

from .scheduler import (
    JobScheduler,
    get_scheduler,
    start_scheduler,
    stop_scheduler,
)
from .registry import (
    JobSpec,
    register_job,
    get_job,
)
from .executor import execute_job


__all__ = [
    "JobScheduler",
    "JobSpec",
    "get_scheduler",
    "start_scheduler",
    "stop_scheduler",
    "register_job",
    "get_job",
    "execute_job",
]
