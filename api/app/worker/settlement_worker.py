"""
Settlement Worker

Background service that runs the monthly revenue distribution:
- Monthly: distribute the previous month's premium revenue to developers

Uses APScheduler for job scheduling.
"""
import asyncio
import logging
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker

from app.config import settings
from app.services.distribution_service import DuplicateRunError, run_monthly_distribution

logger = logging.getLogger('settlement_worker')


class SettlementWorker:
    """Background worker for settlement tasks."""

    def __init__(self, database_url: str | None = None):
        self.engine = create_async_engine(database_url or settings.database_url, echo=False)
        self.async_session = async_sessionmaker(
            self.engine, expire_on_commit=False
        )
        self.scheduler = AsyncIOScheduler(timezone='UTC')

    def schedule(self):
        """Register jobs on the scheduler."""
        self.scheduler.add_job(
            self._run_monthly_distribution,
            CronTrigger(
                day=settings.distribution_cron_day,
                hour=settings.distribution_cron_hour,
                minute=0,
                timezone='UTC',
            ),
            id='monthly_distribution',
            name='Monthly Revenue Distribution',
            replace_existing=True,
        )

    async def start(self):
        """Start the worker and scheduler."""
        logger.info('Starting Settlement Worker...')
        self.schedule()
        self.scheduler.start()
        logger.info('Scheduler started. Jobs:')
        for job in self.scheduler.get_jobs():
            logger.info(f'  - {job.name}: next run at {job.next_run_time}')

        # Keep running
        try:
            while True:
                await asyncio.sleep(60)
        except (KeyboardInterrupt, SystemExit, asyncio.CancelledError):
            logger.info('Shutting down...')
            self.scheduler.shutdown()
            await self.engine.dispose()

    async def _run_monthly_distribution(self, month: str | None = None):
        """Distribute the previous (or given) month."""
        logger.info(f'Running monthly distribution for {month or "previous month"}...')
        try:
            async with self.async_session() as session:
                result = await run_monthly_distribution(session, month)
                await session.commit()

            logger.info(f'Distribution result: {result}')
            return result
        except DuplicateRunError as e:
            # Already distributed, e.g. by an admin before the cron fired
            logger.warning(f'Skipping distribution: {e}')
            return None
        except Exception as e:
            logger.error(f'Monthly distribution failed: {e}', exc_info=True)
            raise

    async def run_once(self, month: str | None = None):
        """Run the distribution immediately (for testing and backfills)."""
        return await self._run_monthly_distribution(month)


async def main():
    """Entry point for the worker."""
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )
    worker = SettlementWorker()
    await worker.start()


if __name__ == '__main__':
    asyncio.run(main())
