"""Premium usage aggregation over raw time-tracking samples.

Only time spent by subscribed users counts. Free users fund nothing, so
their time is excluded before any share is computed.
"""
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User
from app.models.developer import ApiKey, Website
from app.models.tracking import TimeTracking

MONTH_PATTERN = re.compile(r'^\d{4}-(0[1-9]|1[0-2])$')


def parse_month(month: str) -> tuple[int, int]:
    """'2024-03' -> (2024, 3). Raises ValueError on anything else."""
    if not isinstance(month, str) or not MONTH_PATTERN.match(month):
        raise ValueError(f'Invalid month {month!r}, must be YYYY-MM')
    year, mon = month.split('-')
    return int(year), int(mon)


def month_bounds(month: str) -> tuple[datetime, datetime]:
    """Half-open [start, end) window covering the calendar month."""
    year, mon = parse_month(month)
    start = datetime(year, mon, 1)
    end = datetime(year + 1, 1, 1) if mon == 12 else datetime(year, mon + 1, 1)
    return start, end


def previous_month(today: date | None = None) -> str:
    today = today or datetime.utcnow().date()
    if today.month == 1:
        return f'{today.year - 1}-12'
    return f'{today.year}-{today.month - 1:02d}'


@dataclass(frozen=True)
class WebsiteUsage:
    developer_id: int
    website_id: int
    website_name: str
    total_seconds: int


@dataclass
class UsageSummary:
    total_premium_seconds: int = 0
    per_website: list[WebsiteUsage] = field(default_factory=list)

    @property
    def has_activity(self) -> bool:
        return self.total_premium_seconds > 0


class UsageAggregator:
    """Sums premium engagement per (developer, website) for a time window."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _premium_filter(self, start: datetime, end: datetime) -> list:
        return [
            TimeTracking.date >= start,
            TimeTracking.date < end,
            User.is_subscribed == True,  # noqa: E712
        ]

    async def aggregate(self, start: datetime, end: datetime) -> UsageSummary:
        """Premium seconds overall and per website in [start, end)."""
        if end <= start:
            raise ValueError('Window end must be after start')

        # One statement, so the total and the per-website sums see the same rows.
        # Time on websites without an owning developer has no developer_id and
        # only counts towards the total.
        result = await self.db.execute(
            select(
                ApiKey.developer_id,
                TimeTracking.website_id,
                Website.name,
                func.sum(TimeTracking.duration).label('total_seconds'),
            )
            .join(User, User.id == TimeTracking.user_id)
            .outerjoin(Website, Website.id == TimeTracking.website_id)
            .outerjoin(ApiKey, ApiKey.id == Website.api_key_id)
            .where(*self._premium_filter(start, end))
            .group_by(ApiKey.developer_id, TimeTracking.website_id, Website.name)
        )
        rows = result.all()

        total = sum(int(seconds or 0) for _, _, _, seconds in rows)
        if total <= 0:
            return UsageSummary()

        per_website = sorted(
            (
                WebsiteUsage(
                    developer_id=developer_id,
                    website_id=website_id,
                    website_name=name,
                    total_seconds=int(seconds or 0),
                )
                for developer_id, website_id, name, seconds in rows
                if developer_id is not None
            ),
            key=lambda u: (u.developer_id, u.website_id),
        )
        return UsageSummary(total_premium_seconds=total, per_website=per_website)

    async def aggregate_month(self, month: str) -> UsageSummary:
        start, end = month_bounds(month)
        return await self.aggregate(start, end)

    async def count_premium_users(self) -> int:
        """Subscribed users right now, not as of the target month."""
        count = await self.db.scalar(
            select(func.count(User.id)).where(User.is_subscribed == True)  # noqa: E712
        )
        return int(count or 0)
