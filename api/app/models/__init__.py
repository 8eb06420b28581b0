from app.models.user import User, SubscriptionType
from app.models.developer import Developer, ApiKey, Website
from app.models.tracking import TimeTracking
from app.models.revenue import (
    RevenueSettingsRow, DeveloperEarning, Revenue, Payout, PayoutStatus,
    PaymentMethod, RevenueDistributionLog, RunStatus,
)

__all__ = [
    'User',
    'SubscriptionType',
    'Developer',
    'ApiKey',
    'Website',
    'TimeTracking',
    'RevenueSettingsRow',
    'DeveloperEarning',
    'Revenue',
    'Payout',
    'PayoutStatus',
    'PaymentMethod',
    'RevenueDistributionLog',
    'RunStatus',
]
