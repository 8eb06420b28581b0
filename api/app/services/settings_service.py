"""Revenue settings provider.

The distribution engine reads one immutable `RevenueSettings` snapshot per run.
Absence of a settings row is the default state, not an error.
"""
import logging
import math
from dataclasses import dataclass, asdict, replace, fields
from datetime import datetime
from decimal import Decimal
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.revenue import RevenueSettingsRow

logger = logging.getLogger(__name__)

PAYOUT_SCHEDULES = ('weekly', 'biweekly', 'monthly')

# Largest value a Numeric(5, 2) column holds
MAX_BONUS_MULTIPLIER = 999.99


class ConfigurationError(Exception):
    """Raised when a settings value is outside its valid bounds."""
    pass


@dataclass(frozen=True)
class RevenueSettings:
    """Snapshot of distribution parameters. Money in cents, thresholds in minutes."""
    platform_fee_percentage: float = 30.0
    developer_share: int = 70
    minimum_payout_amount: int = 1000        # $10.00
    payout_schedule: str = 'monthly'
    premium_subscription_price: int = 999    # $9.99
    high_performance_bonus_threshold: int = 120
    high_performance_bonus_multiplier: float = 1.5

    @classmethod
    def from_row(cls, row: RevenueSettingsRow) -> 'RevenueSettings':
        return cls(
            platform_fee_percentage=float(row.platform_fee_percentage),
            developer_share=row.developer_share,
            minimum_payout_amount=row.minimum_payout_amount,
            payout_schedule=row.payout_schedule,
            premium_subscription_price=row.premium_subscription_price,
            high_performance_bonus_threshold=row.high_performance_bonus_threshold,
            high_performance_bonus_multiplier=float(row.high_performance_bonus_multiplier),
        )

    def validate(self) -> None:
        """Raise ConfigurationError on the first out-of-range field."""
        for name in ('platform_fee_percentage', 'high_performance_bonus_multiplier'):
            value = getattr(self, name)
            if not math.isfinite(value):
                raise ConfigurationError(f'{name} must be a finite number, got {value}')
            # Stored as Numeric(5, 2)
            if Decimal(str(value)).as_tuple().exponent < -2:
                raise ConfigurationError(f'{name} allows at most two decimals, got {value}')
        for name in ('platform_fee_percentage', 'developer_share'):
            value = getattr(self, name)
            if not 0 <= value <= 100:
                raise ConfigurationError(f'{name} must be between 0 and 100, got {value}')
        for name in (
            'minimum_payout_amount',
            'premium_subscription_price',
            'high_performance_bonus_threshold',
        ):
            value = getattr(self, name)
            if value < 0:
                raise ConfigurationError(f'{name} must be >= 0, got {value}')
        if not 1 <= self.high_performance_bonus_multiplier <= MAX_BONUS_MULTIPLIER:
            raise ConfigurationError(
                f'high_performance_bonus_multiplier must be between 1 and {MAX_BONUS_MULTIPLIER}, '
                f'got {self.high_performance_bonus_multiplier}'
            )
        if self.payout_schedule not in PAYOUT_SCHEDULES:
            raise ConfigurationError(
                f'payout_schedule must be one of {", ".join(PAYOUT_SCHEDULES)}'
            )

    def merged(self, changes: dict) -> 'RevenueSettings':
        """Return a validated copy with `changes` applied."""
        known = {f.name for f in fields(self)}
        unknown = set(changes) - known
        if unknown:
            raise ConfigurationError(f'Unknown settings: {", ".join(sorted(unknown))}')
        updated = replace(self, **changes)
        updated.validate()
        return updated

    def to_dict(self) -> dict:
        return asdict(self)


DEFAULT_SETTINGS = RevenueSettings()


class SettingsService:
    """Reads and updates the singleton revenue settings row."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_row(self) -> RevenueSettingsRow | None:
        result = await self.db.execute(
            select(RevenueSettingsRow).order_by(RevenueSettingsRow.id).limit(1)
        )
        return result.scalar_one_or_none()

    async def get_settings(self) -> RevenueSettings:
        """Current settings, or the defaults when no row exists."""
        row = await self._get_row()
        if not row:
            return DEFAULT_SETTINGS
        return RevenueSettings.from_row(row)

    async def update_settings(self, changes: dict) -> RevenueSettings:
        """Validate a partial update against current settings and upsert it.

        Nothing is written if any field is out of bounds.
        """
        changes = {k: v for k, v in changes.items() if v is not None}
        row = await self._get_row()
        current = RevenueSettings.from_row(row) if row else DEFAULT_SETTINGS
        updated = current.merged(changes)

        if not row:
            row = RevenueSettingsRow()
            self.db.add(row)

        row.platform_fee_percentage = Decimal(str(updated.platform_fee_percentage))
        row.developer_share = updated.developer_share
        row.minimum_payout_amount = updated.minimum_payout_amount
        row.payout_schedule = updated.payout_schedule
        row.premium_subscription_price = updated.premium_subscription_price
        row.high_performance_bonus_threshold = updated.high_performance_bonus_threshold
        row.high_performance_bonus_multiplier = Decimal(
            str(updated.high_performance_bonus_multiplier)
        )
        row.updated_at = datetime.utcnow()
        await self.db.flush()

        logger.info(f'Revenue settings updated: {sorted(changes)}')
        return RevenueSettings.from_row(row)
