from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Callable, Optional

import structlog
from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler, BaseScheduler
from apscheduler.triggers.interval import IntervalTrigger

from core.port.scheduler import Scheduler

logger = structlog.stdlib.get_logger(__name__)


class LocalScheduler(Scheduler):
    """In-process APScheduler; jobs never overlap with themselves (``max_instances=1``)."""

    def __init__(self, scheduler: BaseScheduler) -> None:
        self.scheduler = scheduler
        self._jobs: dict[str, str] = {}

    def start(self) -> None:
        self.scheduler.start()

    def stop(self) -> None:
        self.scheduler.shutdown(wait=True)
        self._jobs.clear()

    def add_job(
        self,
        job_key: str,
        func: Callable[..., Any],
        interval_seconds: int,
        args: tuple = (),
        kwargs: Optional[dict] = None,
        job_name: Optional[str] = None,
        run_immediately: bool = False,
    ) -> str:
        if interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be positive, got {interval_seconds}")

        if job_key in self._jobs:
            self.remove_job(job_key)

        options: dict[str, Any] = {}
        if run_immediately:
            options["next_run_time"] = datetime.now(timezone.utc)

        job = self.scheduler.add_job(
            func=func,
            trigger=IntervalTrigger(seconds=interval_seconds),
            args=args,
            kwargs=kwargs or {},
            id=job_key,
            name=job_name or job_key,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
            **options,
        )

        self._jobs[job_key] = job.id
        logger.info(f"Scheduled job '{job_name or job_key}' every {interval_seconds}s")

        return job.id

    def remove_job(self, job_key: str) -> bool:
        job_id = self._jobs.pop(job_key, None)

        if job_id is None:
            return False

        try:
            self.scheduler.remove_job(job_id)
        except JobLookupError:
            logger.warning(f"Job '{job_key}' was already gone from the scheduler")
            return False

        return True

    def has_job(self, job_key: str) -> bool:
        return job_key in self._jobs

    def get_all_jobs(self) -> list[str]:
        return list(self._jobs)


@lru_cache
def get_local_scheduler() -> Scheduler:
    return LocalScheduler(AsyncIOScheduler(timezone=timezone.utc))
