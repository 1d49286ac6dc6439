from abc import ABC, abstractmethod
from typing import Callable, Optional


class Scheduler(ABC):
    """Runs recurring jobs in the application's event loop, keyed by a caller-chosen job key."""

    @abstractmethod
    def start(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def stop(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def add_job(
        self,
        job_key: str,
        func: Callable,
        interval_seconds: int,
        args: tuple = (),
        kwargs: Optional[dict] = None,
        job_name: Optional[str] = None,
        run_immediately: bool = False,
    ) -> str:
        """Register ``func``; an existing job with the same key is replaced."""
        raise NotImplementedError

    @abstractmethod
    def remove_job(self, job_key: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def has_job(self, job_key: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def get_all_jobs(self) -> list[str]:
        raise NotImplementedError
