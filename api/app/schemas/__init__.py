from app.schemas.revenue import (
    CalculateRevenueRequest,
    DistributionRunResponse,
    RevenueSettingsResponse,
    RevenueSettingsUpdate,
    MonthlyEarning,
    WebsiteEarning,
    PayoutResponse,
    PayoutStatusUpdate,
    TopDeveloper,
)

__all__ = [
    'CalculateRevenueRequest',
    'DistributionRunResponse',
    'RevenueSettingsResponse',
    'RevenueSettingsUpdate',
    'MonthlyEarning',
    'WebsiteEarning',
    'PayoutResponse',
    'PayoutStatusUpdate',
    'TopDeveloper',
]
