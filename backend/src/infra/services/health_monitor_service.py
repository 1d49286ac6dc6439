import structlog

from core.port.scheduler import Scheduler
from use_cases.health.run_platform_health_checks_use_case import RunPlatformHealthChecksUseCase

logger = structlog.stdlib.get_logger(__name__)

HEALTH_CHECK_JOB_KEY = "platform_health_checks"


class HealthMonitorService:
    def __init__(
        self,
        check_interval_seconds: int,
        scheduler: Scheduler,
        run_checks_use_case: RunPlatformHealthChecksUseCase,
    ):
        self.CHECK_INTERVAL_SECONDS = check_interval_seconds
        self.scheduler = scheduler
        self.run_checks_use_case = run_checks_use_case

    def start(self) -> None:
        self.scheduler.add_job(
            job_key=HEALTH_CHECK_JOB_KEY,
            func=self._run_scheduled_checks,
            interval_seconds=self.CHECK_INTERVAL_SECONDS,
            job_name="Run platform health checks",
            run_immediately=True,
        )

        logger.info(f"Health monitor started (interval: {self.CHECK_INTERVAL_SECONDS}s)")

    def stop(self) -> None:
        if self.scheduler.remove_job(HEALTH_CHECK_JOB_KEY):
            logger.info("Health monitor stopped")

    async def _run_scheduled_checks(self) -> None:
        logger.debug("Running scheduled platform health checks")

        try:
            await self.run_checks_use_case.execute()
        except Exception as e:
            # a failed run must not kill the scheduler job; the next interval retries
            logger.exception(f"Scheduled platform health checks failed: {e}")
