"""revenue distribution schema

Revision ID: 0001a2b3c4d5
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001a2b3c4d5'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('username', sa.String(50), nullable=False),
        sa.Column('email', sa.String(255), nullable=True, unique=True),
        sa.Column('is_subscribed', sa.Boolean(), server_default='false', nullable=False),
        sa.Column('subscription_type', sa.String(20), server_default='free', nullable=False),
        sa.Column('is_admin', sa.Boolean(), server_default='false', nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_users_username', 'users', ['username'], unique=True)
    op.create_index('ix_users_is_subscribed', 'users', ['is_subscribed'])

    op.create_table(
        'developers',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('company_name', sa.String(200), nullable=True),
        sa.Column('payment_details', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        'api_keys',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('developer_id', sa.Integer(), sa.ForeignKey('developers.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('key', sa.String(64), nullable=False, unique=True),
        sa.Column('is_active', sa.Boolean(), server_default='true', nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_api_keys_developer_id', 'api_keys', ['developer_id'])

    op.create_table(
        'websites',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('api_key_id', sa.Integer(), sa.ForeignKey('api_keys.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('url', sa.String(500), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_websites_api_key_id', 'websites', ['api_key_id'])

    op.create_table(
        'time_tracking',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('website_id', sa.Integer(), sa.ForeignKey('websites.id', ondelete='CASCADE'), nullable=False),
        sa.Column('duration', sa.Integer(), nullable=False),
        sa.Column('path', sa.String(500), nullable=True),
        sa.Column('date', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint('duration >= 0', name='ck_time_tracking_duration'),
    )
    op.create_index('ix_time_tracking_date', 'time_tracking', ['date'])
    op.create_index('ix_time_tracking_website_date', 'time_tracking', ['website_id', 'date'])

    op.create_table(
        'revenue_settings',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('platform_fee_percentage', sa.Numeric(5, 2), server_default='30.00', nullable=False),
        sa.Column('developer_share', sa.Integer(), server_default='70', nullable=False),
        sa.Column('minimum_payout_amount', sa.BigInteger(), server_default='1000', nullable=False),
        sa.Column('payout_schedule', sa.String(20), server_default='monthly', nullable=False),
        sa.Column('premium_subscription_price', sa.BigInteger(), server_default='999', nullable=False),
        sa.Column('high_performance_bonus_threshold', sa.Integer(), server_default='120', nullable=False),
        sa.Column('high_performance_bonus_multiplier', sa.Numeric(5, 2), server_default='1.50', nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        'developer_earnings',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('developer_id', sa.Integer(), sa.ForeignKey('developers.id', ondelete='CASCADE'), nullable=False),
        sa.Column('website_id', sa.Integer(), sa.ForeignKey('websites.id', ondelete='CASCADE'), nullable=False),
        sa.Column('month', sa.String(7), nullable=False),
        sa.Column('amount', sa.BigInteger(), server_default='0', nullable=False),
        sa.Column('premium_minutes', sa.Integer(), server_default='0', nullable=False),
        sa.Column('calculated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('developer_id', 'website_id', 'month', name='unique_earning_month'),
    )
    op.create_index('ix_developer_earnings_developer_id', 'developer_earnings', ['developer_id'])
    op.create_index('ix_developer_earnings_month', 'developer_earnings', ['month'])

    op.create_table(
        'revenue',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('developer_id', sa.Integer(), sa.ForeignKey('developers.id', ondelete='CASCADE'), nullable=False),
        sa.Column('month', sa.String(7), nullable=False),
        sa.Column('amount', sa.BigInteger(), server_default='0', nullable=False),
        sa.Column('premium_minutes', sa.Integer(), server_default='0', nullable=False),
        sa.Column('websites_count', sa.Integer(), server_default='0', nullable=False),
        sa.Column('calculated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('developer_id', 'month', name='unique_revenue_month'),
    )
    op.create_index('ix_revenue_developer_id', 'revenue', ['developer_id'])
    op.create_index('ix_revenue_month', 'revenue', ['month'])

    op.create_table(
        'payouts',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('developer_id', sa.Integer(), sa.ForeignKey('developers.id', ondelete='CASCADE'), nullable=False),
        sa.Column('amount', sa.BigInteger(), nullable=False),
        sa.Column('month', sa.String(7), nullable=False),
        sa.Column('status', sa.String(20), server_default='pending', nullable=False),
        sa.Column('payment_method', sa.String(30), server_default='bank_transfer', nullable=False),
        sa.Column('reference_id', sa.String(100), nullable=True),
        sa.Column('notes', sa.String(500), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('processed_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('developer_id', 'month', name='unique_payout_month'),
    )
    op.create_index('ix_payouts_developer_id', 'payouts', ['developer_id'])
    op.create_index('ix_payout_status', 'payouts', ['status'])

    op.create_table(
        'revenue_distribution_logs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('month', sa.String(7), nullable=False),
        sa.Column('total_revenue', sa.BigInteger(), server_default='0', nullable=False),
        sa.Column('platform_fee', sa.BigInteger(), server_default='0', nullable=False),
        sa.Column('distributable', sa.BigInteger(), server_default='0', nullable=False),
        sa.Column('total_distributed', sa.BigInteger(), server_default='0', nullable=False),
        sa.Column('developer_count', sa.Integer(), server_default='0', nullable=False),
        sa.Column('status', sa.String(20), server_default='completed', nullable=False),
        sa.Column('notes', sa.String(500), nullable=True),
        sa.Column('run_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    # One run per month; concurrent runs lose on this constraint
    op.create_index('ix_revenue_distribution_logs_month', 'revenue_distribution_logs', ['month'], unique=True)


def downgrade() -> None:
    op.drop_index('ix_revenue_distribution_logs_month', 'revenue_distribution_logs')
    op.drop_table('revenue_distribution_logs')
    op.drop_index('ix_payout_status', 'payouts')
    op.drop_index('ix_payouts_developer_id', 'payouts')
    op.drop_table('payouts')
    op.drop_index('ix_revenue_month', 'revenue')
    op.drop_index('ix_revenue_developer_id', 'revenue')
    op.drop_table('revenue')
    op.drop_index('ix_developer_earnings_month', 'developer_earnings')
    op.drop_index('ix_developer_earnings_developer_id', 'developer_earnings')
    op.drop_table('developer_earnings')
    op.drop_table('revenue_settings')
    op.drop_index('ix_time_tracking_website_date', 'time_tracking')
    op.drop_index('ix_time_tracking_date', 'time_tracking')
    op.drop_table('time_tracking')
    op.drop_index('ix_websites_api_key_id', 'websites')
    op.drop_table('websites')
    op.drop_index('ix_api_keys_developer_id', 'api_keys')
    op.drop_table('api_keys')
    op.drop_table('developers')
    op.drop_index('ix_users_is_subscribed', 'users')
    op.drop_index('ix_users_username', 'users')
    op.drop_table('users')
