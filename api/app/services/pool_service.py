"""Subscription revenue pool: total, platform fee, distributable remainder."""
from dataclasses import dataclass
from decimal import Decimal, ROUND_FLOOR

from app.services.settings_service import RevenueSettings


@dataclass(frozen=True)
class RevenuePool:
    total_revenue_cents: int
    platform_fee_cents: int
    distributable_cents: int


EMPTY_POOL = RevenuePool(0, 0, 0)


def compute_pool(premium_user_count: int, settings: RevenueSettings) -> RevenuePool:
    """Split subscription revenue into the platform fee and the distributable pool.

    The fee percentage is authoritative; `developer_share` is informational and the
    distributable amount is whatever remains after the (floored) fee.
    """
    if premium_user_count < 0:
        raise ValueError('Premium user count cannot be negative')
    if not 0 <= settings.platform_fee_percentage <= 100:
        raise ValueError('Platform fee percentage must be between 0 and 100')
    if settings.premium_subscription_price < 0:
        raise ValueError('Premium subscription price cannot be negative')

    total = premium_user_count * settings.premium_subscription_price
    fee = int(
        (Decimal(total) * Decimal(str(settings.platform_fee_percentage)) / 100)
        .to_integral_value(rounding=ROUND_FLOOR)
    )
    return RevenuePool(
        total_revenue_cents=total,
        platform_fee_cents=fee,
        distributable_cents=total - fee,
    )
