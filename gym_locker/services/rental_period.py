"""Calendar helpers for locker rental periods.

Dates travel as ``YYYY-MM-DD`` strings between the UI, the API and the
database, so every helper accepts either a ``date`` or such a string and
returns strings.
"""
from __future__ import annotations

import calendar
from datetime import date, datetime, timezone
from typing import Optional, Union

from gym_locker.config import BUSINESS_TZ


DateLike = Union[date, str]


def parse_ymd(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value).strip(), "%Y-%m-%d").date()
    except ValueError as exc:
        raise ValueError(f"Invalid date: {value!r} (expected YYYY-MM-DD).") from exc


def date_to_ymd(value: date) -> str:
    return value.strftime("%Y-%m-%d")


def today_local(now: Optional[datetime] = None) -> date:
    """Business-day date for ``now`` (defaults to the current instant)."""
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(BUSINESS_TZ).date()


def current_date(now: Optional[datetime] = None) -> str:
    return date_to_ymd(today_local(now))


def add_months(value: DateLike, months: int) -> str:
    start = parse_ymd(value)
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    # Clamp to month end: Jan 31 + 1 month is Feb 28/29, never Mar 3.
    last_day = calendar.monthrange(year, month)[1]
    return date_to_ymd(date(year, month, min(start.day, last_day)))


def months_between(start: DateLike, end: DateLike) -> int:
    # Day-of-month is ignored: Jan 31 -> Feb 1 counts as one month.
    start_date = parse_ymd(start)
    end_date = parse_ymd(end)
    return (end_date.year - start_date.year) * 12 + (end_date.month - start_date.month)
