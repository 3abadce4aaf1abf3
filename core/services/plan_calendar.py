"""Calendar arithmetic for a race-anchored plan.

Plan weeks run Sunday to Saturday and are counted backwards from the Sunday
of race week, so week ``total_weeks`` is always race week. Days of the week
use 0=Sunday .. 6=Saturday.

Every comparison happens on ``datetime.date`` values. Anything carrying a
time of day goes through :func:`to_local_date` first, which is the one place
where timestamps are reduced to a local calendar day.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from core.config import get_settings
from core.errors import ValidationError

DAYS_PER_WEEK = 7

DateLike = Union[date, datetime, str]


def _resolve_zone(tz: Optional[str]) -> Optional[ZoneInfo]:
    name = tz if tz is not None else get_settings().timezone
    if not name:
        return None
    try:
        return ZoneInfo(name)
    except ZoneInfoNotFoundError as exc:
        raise ValidationError(f"Unknown timezone: {name}", field="timezone") from exc


def to_local_date(value: DateLike, tz: Optional[str] = None) -> date:
    """Reduce a user or webhook supplied value to a local calendar day.

    Date-only input is taken at face value (as if parsed at local noon, so no
    zone shift can move it). Naive datetimes are local wall-clock time. Aware
    datetimes are converted to ``tz`` (or the configured tracker zone, or the
    system zone) before the day is taken.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.date()
        return value.astimezone(_resolve_zone(tz)).date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValidationError("Date value is empty", field="date")
        try:
            if len(text) == 10:
                return date.fromisoformat(text)
            return to_local_date(datetime.fromisoformat(text.replace("Z", "+00:00")), tz)
        except ValueError as exc:
            raise ValidationError(f"Invalid date: {value!r}", field="date") from exc
    raise ValidationError(f"Unsupported date value: {value!r}", field="date")


def to_local_datetime(value: datetime, tz: Optional[str] = None) -> datetime:
    """Naive local wall-clock time for ``value`` (naive input is returned as-is)."""
    if value.tzinfo is None:
        return value
    return value.astimezone(_resolve_zone(tz)).replace(tzinfo=None)


def day_of_week(day: date) -> int:
    """Sunday-based weekday index (Sunday=0 .. Saturday=6)."""
    return (day.weekday() + 1) % DAYS_PER_WEEK


def sunday_of(day: date) -> date:
    """The Sunday that starts the calendar week containing ``day``."""
    return day - timedelta(days=day_of_week(day))


def weeks_until_race(race_date: date, today: Optional[date] = None) -> int:
    """Whole weeks between the Sunday of today's week and the Sunday of race week."""
    today = today or date.today()
    return (sunday_of(race_date) - sunday_of(today)).days // DAYS_PER_WEEK


def week_start_date(race_date: date, week_number: int, total_weeks: int) -> date:
    weeks_before_race = total_weeks - week_number
    return sunday_of(race_date) - timedelta(weeks=weeks_before_race)


def workout_date(race_date: date, week_number: int, dow: int, total_weeks: int) -> date:
    return week_start_date(race_date, week_number, total_weeks) + timedelta(days=dow)


def current_week_number(race_date: date, total_weeks: int, today: Optional[date] = None) -> int:
    """Plan week containing ``today``, clamped to ``[1, total_weeks]``."""
    current = total_weeks - weeks_until_race(race_date, today)
    return max(1, min(total_weeks, current))


def week_number_for_date(race_date: date, target: date, total_weeks: int) -> Optional[int]:
    """Scan the plan weeks for the one whose Sunday..Saturday span holds ``target``."""
    for week in range(1, total_weeks + 1):
        start = week_start_date(race_date, week, total_weeks)
        if start <= target < start + timedelta(days=DAYS_PER_WEEK):
            return week
    return None
