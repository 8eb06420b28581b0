"""Monthly revenue distribution: orchestration and the atomic recorder.

One run per calendar month. A second run for the same month is rejected
with DuplicateRunError unless explicitly forced, in which case the previous
run's rows are deleted first (only while none of its payouts has started
moving money).
"""
import logging
from datetime import datetime
from sqlalchemy import select, delete, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.developer import Developer
from app.models.revenue import (
    DeveloperEarning, Revenue, Payout, PayoutStatus,
    RevenueDistributionLog, RunStatus,
)
from app.services.allocation_service import (
    DeveloperAllocation, WebsiteAllocation, allocate, summarize_developers,
)
from app.services.pool_service import EMPTY_POOL, RevenuePool, compute_pool
from app.services.settings_service import SettingsService
from app.services.usage_service import UsageAggregator, parse_month, previous_month

logger = logging.getLogger(__name__)

NO_ACTIVITY_NOTE = 'No premium usage recorded for this period'

# Payouts in these states have left the building; their month can't be recalculated
LOCKED_PAYOUT_STATUSES = (PayoutStatus.PROCESSING.value, PayoutStatus.COMPLETED.value)


class DuplicateRunError(Exception):
    """Raised when a month already has a distribution run."""
    pass


class PersistenceFailure(Exception):
    """Raised when writing a run fails. Nothing from the run is kept."""
    pass


class DistributionService:
    """Runs and records the monthly revenue distribution."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.settings = SettingsService(db)
        self.usage = UsageAggregator(db)

    async def get_run_log(self, month: str) -> RevenueDistributionLog | None:
        result = await self.db.execute(
            select(RevenueDistributionLog).where(RevenueDistributionLog.month == month)
        )
        return result.scalar_one_or_none()

    async def calculate_monthly_revenue(
        self,
        month: str | None = None,
        force: bool = False,
    ) -> RevenueDistributionLog:
        """Calculate and record the distribution for `month` (default: last month).

        Raises ValueError on a malformed month, DuplicateRunError when the month
        was already run (and `force` is off or its payouts are locked), and
        PersistenceFailure when the write fails.
        """
        month = month or previous_month()
        parse_month(month)

        superseded = await self._guard_duplicate(month, force)

        # Single snapshot for the whole run
        settings = await self.settings.get_settings()

        usage = await self.usage.aggregate_month(month)
        if not usage.has_activity:
            logger.info(f'No premium usage for {month}')
            return await self.record_run(month, EMPTY_POOL, [], [], notes=NO_ACTIVITY_NOTE)

        premium_users = await self.usage.count_premium_users()
        pool = compute_pool(premium_users, settings)

        website_allocations = allocate(
            usage.per_website,
            usage.total_premium_seconds,
            pool.distributable_cents,
            settings,
        )
        payment_details = await self._load_payment_details(
            {a.developer_id for a in website_allocations}
        )
        developer_allocations = summarize_developers(
            website_allocations, settings, payment_details,
        )

        notes = f'Processed on {datetime.utcnow().isoformat()}'
        if superseded:
            notes = f'Recalculated, superseding previous run. {notes}'

        return await self.record_run(
            month, pool, developer_allocations, website_allocations, notes=notes,
        )

    async def record_run(
        self,
        month: str,
        pool: RevenuePool,
        developer_allocations: list[DeveloperAllocation],
        website_allocations: list[WebsiteAllocation],
        notes: str | None = None,
    ) -> RevenueDistributionLog:
        """Write earnings, revenue, payouts and the run log in one transaction.

        The log row goes first so that a concurrent run for the same month
        fails on the unique month constraint before any earnings are written.
        """
        if await self.get_run_log(month):
            raise DuplicateRunError(f'Revenue already calculated for {month}')

        now = datetime.utcnow()
        log = RevenueDistributionLog(
            month=month,
            total_revenue=pool.total_revenue_cents,
            platform_fee=pool.platform_fee_cents,
            distributable=pool.distributable_cents,
            total_distributed=sum(a.amount_cents for a in website_allocations),
            developer_count=len(developer_allocations),
            status=RunStatus.COMPLETED.value,
            notes=notes,
            run_at=now,
        )

        try:
            self.db.add(log)
            await self.db.flush()
        except IntegrityError as e:
            await self.db.rollback()
            raise DuplicateRunError(f'Revenue already calculated for {month}') from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise PersistenceFailure(f'Failed to record run for {month}: {e}') from e

        try:
            for alloc in website_allocations:
                self.db.add(DeveloperEarning(
                    developer_id=alloc.developer_id,
                    website_id=alloc.website_id,
                    month=month,
                    amount=alloc.amount_cents,
                    premium_minutes=alloc.premium_minutes,
                    calculated_at=now,
                ))

            payout_count = 0
            for dev in developer_allocations:
                self.db.add(Revenue(
                    developer_id=dev.developer_id,
                    month=month,
                    amount=dev.amount_cents,
                    premium_minutes=dev.premium_minutes,
                    websites_count=dev.websites_count,
                    calculated_at=now,
                ))
                # Below-threshold balances are not carried into later months
                if dev.payout_eligible:
                    self.db.add(Payout(
                        developer_id=dev.developer_id,
                        amount=dev.amount_cents,
                        month=month,
                        status=PayoutStatus.PENDING.value,
                        payment_method=dev.payment_method,
                        notes=f'Automatic payout for {month}',
                        created_at=now,
                    ))
                    payout_count += 1

            await self.db.flush()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f'Recording run for {month} failed: {e}')
            raise PersistenceFailure(f'Failed to record run for {month}: {e}') from e

        logger.info(
            f'Distribution {month}: revenue={log.total_revenue} fee={log.platform_fee} '
            f'distributed={log.total_distributed} developers={log.developer_count} '
            f'payouts={payout_count}'
        )
        return log

    async def _guard_duplicate(self, month: str, force: bool) -> bool:
        """Refuse a repeat run, or clear the old one when forced. Returns True if cleared."""
        existing = await self.get_run_log(month)
        if not existing:
            return False
        if not force:
            raise DuplicateRunError(f'Revenue already calculated for {month}')

        locked = await self.db.scalar(
            select(func.count(Payout.id)).where(
                Payout.month == month,
                Payout.status.in_(LOCKED_PAYOUT_STATUSES),
            )
        )
        if locked:
            raise DuplicateRunError(
                f'Cannot recalculate {month}: {locked} payout(s) already processing or completed'
            )

        await self._purge_month(month)
        logger.warning(f'Superseding previous distribution run for {month}')
        return True

    async def _purge_month(self, month: str) -> None:
        for model in (DeveloperEarning, Revenue, Payout, RevenueDistributionLog):
            await self.db.execute(delete(model).where(model.month == month))
        await self.db.flush()

    async def _load_payment_details(self, developer_ids: set[int]) -> dict:
        if not developer_ids:
            return {}
        result = await self.db.execute(
            select(Developer.id, Developer.payment_details)
            .where(Developer.id.in_(developer_ids))
        )
        return {dev_id: details for dev_id, details in result.all()}


async def run_monthly_distribution(db: AsyncSession, month: str | None = None) -> dict:
    """Convenience function for the scheduler."""
    service = DistributionService(db)
    log = await service.calculate_monthly_revenue(month)
    return {
        'month': log.month,
        'total_revenue': log.total_revenue,
        'platform_fee': log.platform_fee,
        'total_distributed': log.total_distributed,
        'developer_count': log.developer_count,
        'status': log.status,
    }
