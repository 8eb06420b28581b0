"""Allocation engine: turns premium-time shares into per-website amounts.

Per website:
  premium_minutes = round(seconds / 60)
  share           = seconds / total_premium_seconds
  multiplier      = bonus_multiplier if premium_minutes >= bonus_threshold else 1
  base            = floor(distributable * share)
  amount          = floor(base * multiplier)

Each amount depends only on global totals, so iteration order never changes
an individual result. Output is sorted by (developer_id, website_id).

Bonuses are paid on top of the pool, not taken from other developers, so the
sum of amounts may exceed `distributable_cents`. That is intended policy and
must not be normalised away.
"""
import json
import logging
import math
from collections import defaultdict
from dataclasses import dataclass
from decimal import Decimal, ROUND_FLOOR, ROUND_HALF_UP
from typing import Any, Iterable

from app.models.revenue import PaymentMethod
from app.services.settings_service import RevenueSettings
from app.services.usage_service import WebsiteUsage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WebsiteAllocation:
    developer_id: int
    website_id: int
    website_name: str
    total_seconds: int
    premium_minutes: int
    percentage_of_total: float
    bonus_multiplier_applied: float
    base_amount_cents: int
    amount_cents: int


@dataclass(frozen=True)
class DeveloperAllocation:
    developer_id: int
    amount_cents: int
    premium_minutes: int
    websites_count: int
    payout_eligible: bool
    payment_method: str


def seconds_to_minutes(seconds: int) -> int:
    # Half-up; round() would use banker's rounding (150s -> 2)
    return int((Decimal(seconds) / 60).to_integral_value(rounding=ROUND_HALF_UP))


def _validate_inputs(
    per_website: list[WebsiteUsage],
    total_premium_seconds: int,
    distributable_cents: int,
    settings: RevenueSettings,
) -> None:
    if total_premium_seconds < 0:
        raise ValueError('Total premium seconds cannot be negative')
    if distributable_cents < 0:
        raise ValueError('Distributable amount cannot be negative')
    if not 0 <= settings.platform_fee_percentage <= 100:
        raise ValueError('Platform fee percentage must be between 0 and 100')
    if not 0 <= settings.developer_share <= 100:
        raise ValueError('Developer share must be between 0 and 100')
    multiplier = settings.high_performance_bonus_multiplier
    if not math.isfinite(multiplier) or multiplier < 1:
        raise ValueError('Bonus multiplier must be a finite number >= 1')
    if settings.high_performance_bonus_threshold < 0:
        raise ValueError('Bonus threshold cannot be negative')

    seen = set()
    for usage in per_website:
        if usage.total_seconds < 0:
            raise ValueError(f'Negative duration for website {usage.website_id}')
        if usage.total_seconds > total_premium_seconds:
            raise ValueError(
                f'Website {usage.website_id} has more premium time than the total'
            )
        key = (usage.developer_id, usage.website_id)
        if key in seen:
            raise ValueError(f'Duplicate usage entry for website {usage.website_id}')
        seen.add(key)

    if sum(u.total_seconds for u in per_website) > total_premium_seconds:
        raise ValueError('Per-website premium time exceeds the total')


def allocate(
    per_website: list[WebsiteUsage],
    total_premium_seconds: int,
    distributable_cents: int,
    settings: RevenueSettings,
) -> list[WebsiteAllocation]:
    """Allocate the distributable pool to websites by share of premium time.

    Rejects structurally invalid input with ValueError before computing anything.
    Zero total premium time is a valid outcome and yields an empty list.
    """
    _validate_inputs(per_website, total_premium_seconds, distributable_cents, settings)
    if total_premium_seconds == 0:
        return []

    multiplier = Decimal(str(settings.high_performance_bonus_multiplier))
    allocations = []
    for usage in sorted(per_website, key=lambda u: (u.developer_id, u.website_id)):
        if usage.total_seconds == 0:
            continue

        premium_minutes = seconds_to_minutes(usage.total_seconds)
        bonus = multiplier if premium_minutes >= settings.high_performance_bonus_threshold else Decimal(1)

        # Integer floor of distributable * (seconds / total), exact
        base = distributable_cents * usage.total_seconds // total_premium_seconds
        amount = int((Decimal(base) * bonus).to_integral_value(rounding=ROUND_FLOOR))

        allocations.append(WebsiteAllocation(
            developer_id=usage.developer_id,
            website_id=usage.website_id,
            website_name=usage.website_name,
            total_seconds=usage.total_seconds,
            premium_minutes=premium_minutes,
            percentage_of_total=usage.total_seconds / total_premium_seconds,
            bonus_multiplier_applied=float(bonus),
            base_amount_cents=base,
            amount_cents=amount,
        ))

    return allocations


def resolve_payment_method(payment_details: Any) -> str:
    """PayPal when the developer has a paypal entry, bank transfer otherwise."""
    if not payment_details:
        return PaymentMethod.BANK_TRANSFER.value

    details = payment_details
    if isinstance(details, str):
        try:
            details = json.loads(details)
        except ValueError:
            logger.warning('Unparsable payment details, defaulting to bank transfer')
            return PaymentMethod.BANK_TRANSFER.value

    if isinstance(details, dict) and details.get('paypal'):
        return PaymentMethod.PAYPAL.value
    return PaymentMethod.BANK_TRANSFER.value


def summarize_developers(
    allocations: Iterable[WebsiteAllocation],
    settings: RevenueSettings,
    payment_details: dict[int, Any] | None = None,
) -> list[DeveloperAllocation]:
    """Roll website allocations up to one total per developer, sorted by id."""
    payment_details = payment_details or {}
    amounts: dict[int, int] = defaultdict(int)
    minutes: dict[int, int] = defaultdict(int)
    websites: dict[int, set[int]] = defaultdict(set)

    for alloc in allocations:
        amounts[alloc.developer_id] += alloc.amount_cents
        minutes[alloc.developer_id] += alloc.premium_minutes
        if alloc.total_seconds > 0:
            websites[alloc.developer_id].add(alloc.website_id)

    return [
        DeveloperAllocation(
            developer_id=dev_id,
            amount_cents=amounts[dev_id],
            premium_minutes=minutes[dev_id],
            websites_count=len(websites[dev_id]),
            payout_eligible=amounts[dev_id] >= settings.minimum_payout_amount,
            payment_method=resolve_payment_method(payment_details.get(dev_id)),
        )
        for dev_id in sorted(amounts)
    ]
