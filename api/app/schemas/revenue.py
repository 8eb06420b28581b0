from datetime import datetime
from pydantic import BaseModel, Field

MONTH_REGEX = r'^\d{4}-(0[1-9]|1[0-2])$'


class CalculateRevenueRequest(BaseModel):
    """Admin trigger. Month defaults to the previous calendar month."""
    month: str | None = Field(None, pattern=MONTH_REGEX)
    force: bool = False


class DistributionRunResponse(BaseModel):
    """One distribution run. All money in cents."""
    month: str
    total_revenue: int
    platform_fee: int
    distributable: int
    total_distributed: int
    developer_count: int
    status: str
    notes: str | None
    run_at: datetime

    class Config:
        from_attributes = True


class RevenueSettingsResponse(BaseModel):
    platform_fee_percentage: float
    developer_share: int
    minimum_payout_amount: int
    payout_schedule: str
    premium_subscription_price: int
    high_performance_bonus_threshold: int
    high_performance_bonus_multiplier: float

    class Config:
        from_attributes = True


class RevenueSettingsUpdate(BaseModel):
    """Partial settings update. Bounds are checked by the settings service."""
    platform_fee_percentage: float | None = None
    developer_share: int | None = None
    minimum_payout_amount: int | None = None
    payout_schedule: str | None = None
    premium_subscription_price: int | None = None
    high_performance_bonus_threshold: int | None = None
    high_performance_bonus_multiplier: float | None = None

    class Config:
        extra = 'forbid'


class MonthlyEarning(BaseModel):
    month: str
    amount: int
    premium_minutes: int
    websites_count: int
    calculated_at: datetime

    class Config:
        from_attributes = True


class WebsiteEarning(BaseModel):
    website_id: int
    website_name: str
    website_url: str
    premium_minutes: int
    amount: int
    calculated_at: datetime


class PayoutResponse(BaseModel):
    id: int
    developer_id: int
    amount: int
    month: str
    status: str
    payment_method: str
    reference_id: str | None
    notes: str | None
    created_at: datetime
    processed_at: datetime | None

    class Config:
        from_attributes = True


class PayoutStatusUpdate(BaseModel):
    status: str = Field(..., pattern=r'^(pending|processing|completed|failed)$')
    reference_id: str | None = Field(None, max_length=100)
    notes: str | None = Field(None, max_length=500)


class TopDeveloper(BaseModel):
    rank: int
    developer_id: int
    developer_name: str | None
    amount: int
    premium_minutes: int
    websites_count: int
    calculated_at: datetime
