"""Pure subscription rules.

Every function takes the evaluation instant explicitly (``now``) and falls
back to the wall clock only when it is omitted, so results depend on
nothing but their arguments. An absent subscription is a valid input.
"""

from __future__ import annotations

import math
from datetime import date, datetime, timedelta
from typing import Optional

from ..common.datetime_utils import add_months, end_of_day, now_local, start_of_day
from ..core.constants import DEFAULT_EXPIRING_THRESHOLD_DAYS, DEFAULT_PLAN_MONTHS, PLAN_MONTH_OPTIONS
from ..core.enums import SubscriptionStatus
from ..core.exceptions import ValidationError
from .model import Subscription

_DAY = timedelta(days=1)


def is_active(subscription: Optional[Subscription], *, now: Optional[datetime] = None) -> bool:
    if subscription is None:
        return False
    now = now or now_local()
    return subscription.status == SubscriptionStatus.ACTIVE and subscription.end_at >= now


def remaining_days(subscription: Optional[Subscription], *, now: Optional[datetime] = None) -> int:
    if subscription is None:
        return 0
    now = now or now_local()
    days = math.ceil((subscription.end_at - now) / _DAY)
    return max(0, days)


def is_expiring_soon(
    subscription: Optional[Subscription],
    threshold_days: int = DEFAULT_EXPIRING_THRESHOLD_DAYS,
    *,
    now: Optional[datetime] = None,
) -> bool:
    now = now or now_local()
    if not is_active(subscription, now=now):
        return False
    days = remaining_days(subscription, now=now)
    return 0 < days <= threshold_days


def require_plan_months(months) -> int:
    """Monthly plans are sold as 1, 3, 6 or 12 months."""
    try:
        value = int(months)
    except (TypeError, ValueError):
        raise ValidationError("Plan months must be a whole number")
    if value not in PLAN_MONTH_OPTIONS:
        options = ", ".join(str(m) for m in PLAN_MONTH_OPTIONS)
        raise ValidationError(f"Plan must be one of {options} months")
    return value


def require_date_range(start_date: date, end_date: date) -> None:
    if end_date < start_date:
        raise ValidationError("End date must be on or after start date")


def create_subscription(
    member_id: str,
    duration_months: int = DEFAULT_PLAN_MONTHS,
    *,
    start: Optional[datetime] = None,
    now: Optional[datetime] = None,
) -> Subscription:
    """Monthly plan: ``start`` plus N calendar months (end-of-month clamped)."""
    if int(duration_months) < 1:
        raise ValidationError("Duration must be at least one month")
    now = now or now_local()
    start = start or now
    return Subscription(
        member_id=member_id,
        start_at=start,
        end_at=add_months(start, int(duration_months)),
        status=SubscriptionStatus.ACTIVE,
        created_at=now,
    )


def create_daily_pass(member_id: str, *, now: Optional[datetime] = None) -> Subscription:
    """Valid for today only, until midnight."""
    now = now or now_local()
    return Subscription(
        member_id=member_id,
        start_at=now,
        end_at=end_of_day(now.date()),
        status=SubscriptionStatus.ACTIVE,
        created_at=now,
    )


def create_walk_in(
    member_id: str,
    *,
    start_date: date,
    end_date: date,
    now: Optional[datetime] = None,
) -> Subscription:
    """Explicit date range, both ends inclusive."""
    require_date_range(start_date, end_date)
    now = now or now_local()
    return Subscription(
        member_id=member_id,
        start_at=start_of_day(start_date),
        end_at=end_of_day(end_date),
        status=SubscriptionStatus.ACTIVE,
        created_at=now,
    )
