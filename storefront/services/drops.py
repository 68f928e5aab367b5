"""Drop display logic: countdown, stock indicator and drop state"""

import math
from datetime import datetime, timezone
from typing import Optional

from ..models.drop import Drop, DropState, TimeLeft, StockLevel, DropDisplay

LOW_STOCK_RATIO = 0.2
ALMOST_GONE_THRESHOLD = 3


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def calculate_time_left(target: datetime, now: Optional[datetime] = None) -> TimeLeft:
    """Split the time until target into days/hours/minutes/seconds"""
    now = _aware(now or datetime.now(timezone.utc))
    remaining = int((_aware(target) - now).total_seconds())
    if remaining <= 0:
        return TimeLeft()

    days, remaining = divmod(remaining, 86400)
    hours, remaining = divmod(remaining, 3600)
    minutes, seconds = divmod(remaining, 60)
    return TimeLeft(days=days, hours=hours, minutes=minutes, seconds=seconds)


def get_stock_level(quantity_available: int, quantity_sold: int) -> StockLevel:
    """
    Stock indicator values.

    Low stock is 20% or less of the release remaining; "almost gone" is
    three or fewer units. A release with nothing available counts as fully sold.
    """
    remaining = max(quantity_available - quantity_sold, 0)
    if quantity_available > 0:
        # halves round up
        percentage_sold = min(math.floor(quantity_sold / quantity_available * 100 + 0.5), 100)
    else:
        percentage_sold = 100

    return StockLevel(
        remaining=remaining,
        percentage_sold=percentage_sold,
        is_low_stock=remaining <= math.ceil(quantity_available * LOW_STOCK_RATIO),
        is_almost_gone=remaining <= ALMOST_GONE_THRESHOLD,
        sold_out=quantity_sold >= quantity_available,
    )


def get_drop_state(drop: Drop, now: Optional[datetime] = None) -> DropState:
    now = _aware(now or datetime.now(timezone.utc))

    if not drop.is_active:
        return DropState.ENDED
    if _aware(drop.starts_at) > now:
        return DropState.UPCOMING
    if drop.ends_at and _aware(drop.ends_at) <= now:
        return DropState.ENDED
    if drop.quantity_sold >= drop.quantity_available:
        return DropState.SOLD_OUT
    return DropState.LIVE


def countdown_target(drop: Drop, state: DropState) -> Optional[datetime]:
    """Upcoming drops count down to their start, live ones to their end"""
    if state == DropState.UPCOMING:
        return drop.starts_at
    if state in (DropState.LIVE, DropState.SOLD_OUT):
        return drop.ends_at
    return None


def describe_drop(drop: Drop, now: Optional[datetime] = None) -> DropDisplay:
    now = _aware(now or datetime.now(timezone.utc))
    state = get_drop_state(drop, now)
    target = countdown_target(drop, state)

    return DropDisplay(
        drop=drop,
        state=state,
        stock=get_stock_level(drop.quantity_available, drop.quantity_sold),
        countdown_target=target,
        time_left=calculate_time_left(target, now) if target else None,
    )
