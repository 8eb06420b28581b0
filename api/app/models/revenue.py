from datetime import datetime
from decimal import Decimal
from enum import Enum
from sqlalchemy import (
    String, Integer, BigInteger, Numeric, ForeignKey, DateTime, Index, UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.db.database import Base


class RevenueSettingsRow(Base):
    """Singleton row of admin-tunable distribution parameters."""

    __tablename__ = 'revenue_settings'

    id: Mapped[int] = mapped_column(primary_key=True)
    platform_fee_percentage: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=Decimal('30.00'))
    developer_share: Mapped[int] = mapped_column(Integer, default=70)
    minimum_payout_amount: Mapped[int] = mapped_column(BigInteger, default=1000)
    payout_schedule: Mapped[str] = mapped_column(String(20), default='monthly')
    premium_subscription_price: Mapped[int] = mapped_column(BigInteger, default=999)
    high_performance_bonus_threshold: Mapped[int] = mapped_column(Integer, default=120)
    high_performance_bonus_multiplier: Mapped[Decimal] = mapped_column(
        Numeric(5, 2), default=Decimal('1.50'),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow,
    )


class DeveloperEarning(Base):
    """Per developer x website x month earning. Append-only."""

    __tablename__ = 'developer_earnings'

    id: Mapped[int] = mapped_column(primary_key=True)
    developer_id: Mapped[int] = mapped_column(
        ForeignKey('developers.id', ondelete='CASCADE'), index=True,
    )
    website_id: Mapped[int] = mapped_column(ForeignKey('websites.id', ondelete='CASCADE'))
    month: Mapped[str] = mapped_column(String(7))

    # Cents
    amount: Mapped[int] = mapped_column(BigInteger, default=0)
    premium_minutes: Mapped[int] = mapped_column(Integer, default=0)
    calculated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint('developer_id', 'website_id', 'month', name='unique_earning_month'),
        Index('ix_developer_earnings_month', 'month'),
    )


class Revenue(Base):
    """Per developer x month total, summed from that month's earnings."""

    __tablename__ = 'revenue'

    id: Mapped[int] = mapped_column(primary_key=True)
    developer_id: Mapped[int] = mapped_column(
        ForeignKey('developers.id', ondelete='CASCADE'), index=True,
    )
    month: Mapped[str] = mapped_column(String(7))
    amount: Mapped[int] = mapped_column(BigInteger, default=0)
    premium_minutes: Mapped[int] = mapped_column(Integer, default=0)
    websites_count: Mapped[int] = mapped_column(Integer, default=0)
    calculated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint('developer_id', 'month', name='unique_revenue_month'),
        Index('ix_revenue_month', 'month'),
    )


class PayoutStatus(str, Enum):
    PENDING = 'pending'
    PROCESSING = 'processing'
    COMPLETED = 'completed'
    FAILED = 'failed'


class PaymentMethod(str, Enum):
    PAYPAL = 'paypal'
    BANK_TRANSFER = 'bank_transfer'


class Payout(Base):
    """Pending money movement. Status is advanced by the payment workflow only."""

    __tablename__ = 'payouts'

    id: Mapped[int] = mapped_column(primary_key=True)
    developer_id: Mapped[int] = mapped_column(
        ForeignKey('developers.id', ondelete='CASCADE'), index=True,
    )
    amount: Mapped[int] = mapped_column(BigInteger)
    month: Mapped[str] = mapped_column(String(7))
    status: Mapped[str] = mapped_column(String(20), default=PayoutStatus.PENDING.value)
    payment_method: Mapped[str] = mapped_column(
        String(30), default=PaymentMethod.BANK_TRANSFER.value,
    )
    reference_id: Mapped[str | None] = mapped_column(String(100), default=None)
    notes: Mapped[str | None] = mapped_column(String(500), default=None)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    processed_at: Mapped[datetime | None] = mapped_column(DateTime, default=None)

    __table_args__ = (
        UniqueConstraint('developer_id', 'month', name='unique_payout_month'),
        Index('ix_payout_status', 'status'),
    )


class RunStatus(str, Enum):
    COMPLETED = 'completed'
    FAILED = 'failed'


class RevenueDistributionLog(Base):
    """Audit row for one distribution run. One per month."""

    __tablename__ = 'revenue_distribution_logs'

    id: Mapped[int] = mapped_column(primary_key=True)
    month: Mapped[str] = mapped_column(String(7), unique=True, index=True)

    total_revenue: Mapped[int] = mapped_column(BigInteger, default=0)
    platform_fee: Mapped[int] = mapped_column(BigInteger, default=0)
    # Pool available after the fee
    distributable: Mapped[int] = mapped_column(BigInteger, default=0)
    # Sum of earnings actually written; may exceed `distributable` when bonuses apply
    total_distributed: Mapped[int] = mapped_column(BigInteger, default=0)

    developer_count: Mapped[int] = mapped_column(Integer, default=0)
    status: Mapped[str] = mapped_column(String(20), default=RunStatus.COMPLETED.value)
    notes: Mapped[str | None] = mapped_column(String(500), default=None)
    run_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
