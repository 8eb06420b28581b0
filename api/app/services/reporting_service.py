"""Read-only views over distribution results for dashboards and admins."""
from datetime import datetime
from sqlalchemy import select, desc
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.developer import Developer, Website
from app.models.revenue import (
    DeveloperEarning, Revenue, Payout, PayoutStatus, RevenueDistributionLog,
)

FINAL_PAYOUT_STATUSES = (PayoutStatus.COMPLETED.value, PayoutStatus.FAILED.value)


class ReportingService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_developer_for_user(self, user_id: int) -> Developer | None:
        result = await self.db.execute(
            select(Developer).where(Developer.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def get_developer_earnings(
        self,
        developer_id: int,
        limit: int = 12,
        offset: int = 0,
    ) -> list[Revenue]:
        """Monthly totals, newest month first."""
        result = await self.db.execute(
            select(Revenue)
            .where(Revenue.developer_id == developer_id)
            .order_by(desc(Revenue.month))
            .limit(limit).offset(offset)
        )
        return list(result.scalars().all())

    async def get_developer_earnings_details(self, developer_id: int, month: str) -> list[dict]:
        """Per-website breakdown for one month, biggest earner first."""
        result = await self.db.execute(
            select(DeveloperEarning, Website)
            .join(Website, Website.id == DeveloperEarning.website_id)
            .where(
                DeveloperEarning.developer_id == developer_id,
                DeveloperEarning.month == month,
            )
            .order_by(desc(DeveloperEarning.amount), DeveloperEarning.website_id)
        )
        return [
            {
                'website_id': website.id,
                'website_name': website.name,
                'website_url': website.url,
                'premium_minutes': earning.premium_minutes,
                'amount': earning.amount,
                'calculated_at': earning.calculated_at,
            }
            for earning, website in result.all()
        ]

    async def get_developer_payouts(self, developer_id: int, limit: int = 10) -> list[Payout]:
        result = await self.db.execute(
            select(Payout)
            .where(Payout.developer_id == developer_id)
            .order_by(desc(Payout.created_at), desc(Payout.id))
            .limit(limit)
        )
        return list(result.scalars().all())

    async def get_platform_revenue_stats(self, months: int = 12) -> list[RevenueDistributionLog]:
        result = await self.db.execute(
            select(RevenueDistributionLog)
            .order_by(desc(RevenueDistributionLog.month))
            .limit(months)
        )
        return list(result.scalars().all())

    async def get_top_earning_developers(self, month: str, limit: int = 10) -> list[dict]:
        result = await self.db.execute(
            select(Revenue, Developer)
            .join(Developer, Developer.id == Revenue.developer_id)
            .where(Revenue.month == month)
            .order_by(desc(Revenue.amount), Revenue.developer_id)
            .limit(limit)
        )
        return [
            {
                'rank': rank,
                'developer_id': developer.id,
                'developer_name': developer.company_name,
                'amount': revenue.amount,
                'premium_minutes': revenue.premium_minutes,
                'websites_count': revenue.websites_count,
                'calculated_at': revenue.calculated_at,
            }
            for rank, (revenue, developer) in enumerate(result.all(), start=1)
        ]

    async def update_payout_status(
        self,
        payout_id: int,
        status: str,
        reference_id: str | None = None,
        notes: str | None = None,
    ) -> Payout | None:
        """Advance a payout on behalf of the external payment workflow."""
        valid = {s.value for s in PayoutStatus}
        if status not in valid:
            raise ValueError(f'Invalid payout status {status!r}')

        payout = await self.db.get(Payout, payout_id)
        if not payout:
            return None
        # Failed payouts may be retried; completed ones are final
        if payout.status == PayoutStatus.COMPLETED.value and status != payout.status:
            raise ValueError(f'Payout {payout_id} is already completed')

        payout.status = status
        if reference_id is not None:
            payout.reference_id = reference_id
        if notes is not None:
            payout.notes = notes
        if status in FINAL_PAYOUT_STATUSES:
            payout.processed_at = datetime.utcnow()

        await self.db.flush()
        return payout
