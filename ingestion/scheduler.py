import logging
from datetime import datetime, timedelta, timezone
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.date import DateTrigger
from core.config import Settings
from core.exceptions import ETLException
from ingestion.runner import IngestionRunner

logger = logging.getLogger(__name__)


class IngestionScheduler:
    """Re-run reload cycles, waiting between them as long as each cycle asks"""

    JOB_ID = "registry_reload"

    def __init__(self, runner: IngestionRunner, settings: Settings):
        self.runner = runner
        self.settings = settings
        self.scheduler = AsyncIOScheduler()

    async def run_cycle_job(self) -> float:
        """Job to run one cycle and arm the next one"""
        logger.info("Scheduler: Starting reload cycle")
        delay = self.settings.CYCLE_SLEEP_HOURS * 3600

        try:
            result = await self.runner.run_cycle()
            delay = result.get("next_run_in", delay)
        except ETLException as e:
            logger.error(
                f"Scheduler: Reload cycle aborted - {e.message}",
                extra={"error_context": e.to_dict()}
            )
        except Exception as e:
            logger.exception(f"Scheduler: Reload cycle failed - {e}")

        self.schedule_next(delay)
        return delay

    def schedule_next(self, delay_seconds: float):
        run_date = datetime.now(timezone.utc) + timedelta(seconds=delay_seconds)
        self.scheduler.add_job(
            self.run_cycle_job,
            trigger=DateTrigger(run_date=run_date),
            id=self.JOB_ID,
            replace_existing=True
        )
        logger.info(f"Next reload cycle at {run_date.isoformat()}")

    def start(self):
        """Start the scheduler with an immediate first cycle"""
        self.schedule_next(0)
        self.scheduler.start()
        logger.info("Reload scheduler started")

    def stop(self):
        self.scheduler.shutdown()
        logger.info("Reload scheduler stopped")
