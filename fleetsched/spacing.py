"""Minimum-separation policy between scheduled visits."""

from datetime import date
from typing import Iterable, Optional

from .calendar_rules import SUNDAY, add_days, days_between, next_allowed_day
from .errors import SchedulingExhausted


def violates_spacing(
    candidate: date, scheduled_dates: Iterable[date], min_separation_days: int
) -> bool:
    """
    True if any scheduled date is fewer than `min_separation_days` away.

    0 disables spacing; 1 only forbids two visits on the same day.
    """
    if min_separation_days <= 0:
        return False
    return any(days_between(candidate, s) < min_separation_days for s in scheduled_dates)


def find_next_spaced(
    candidate: date,
    scheduled_dates: Iterable[date],
    min_separation_days: int,
    disallowed_weekday: Optional[int] = SUNDAY,
    last_day: Optional[date] = None,
    vehicle_id: Optional[int] = None,
) -> date:
    """
    Advance `candidate` one day at a time until it is neither an off-day
    nor too close to a scheduled date.

    Raises SchedulingExhausted once past `last_day` (default: one year out).
    """
    scheduled = list(scheduled_dates)
    first = candidate
    if last_day is None:
        last_day = add_days(candidate, 365)
    while True:
        candidate = next_allowed_day(candidate, disallowed_weekday)
        if candidate > last_day:
            break
        if not violates_spacing(candidate, scheduled, min_separation_days):
            return candidate
        candidate = add_days(candidate, 1)
    raise SchedulingExhausted(vehicle_id, first, last_day)
