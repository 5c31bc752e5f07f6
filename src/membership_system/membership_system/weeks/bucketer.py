"""Calendar/week bucketing.

A year's buckets are the weeks whose start day falls inside that year. The
first one begins on the first occurrence of the start day on or after
January 1; the last one may run into the next year. Every function here is
total: out-of-range input is clamped, never rejected.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Optional

from ..core.constants import DATE_LABEL_FORMAT
from ..core.enums import WeekStart
from .model import WeekBucket

WEEK = timedelta(days=7)


def first_week_start(year: int, start: WeekStart) -> date:
    jan1 = date(year, 1, 1)
    return jan1 + timedelta(days=(start.weekday - jan1.weekday()) % 7)


def week_start_for_date(d: date, start: WeekStart) -> date:
    """Start day of the week containing d (d itself if d is a start day)."""
    return d - timedelta(days=(d.weekday() - start.weekday) % 7)


def _bucket(week_number: int, week_start: date, start: WeekStart) -> WeekBucket:
    week_end = week_start + timedelta(days=6)
    label = f"W{week_number} ({week_start.strftime(DATE_LABEL_FORMAT)} - {week_end.strftime(DATE_LABEL_FORMAT)})"
    return WeekBucket(
        week_number=week_number,
        week_start=week_start,
        week_end=week_end,
        label=label,
        convention=start,
    )


def weeks_in_year(year: int, start: WeekStart = WeekStart.SUNDAY) -> list[WeekBucket]:
    out: list[WeekBucket] = []
    d = first_week_start(year, start)
    n = 1
    while d.year == year:
        out.append(_bucket(n, d, start))
        d += WEEK
        n += 1
    return out


def bucket_for_date(d: date, start: WeekStart = WeekStart.SUNDAY) -> WeekBucket:
    ws = week_start_for_date(d, start)
    n = (ws - first_week_start(ws.year, start)).days // 7 + 1
    return _bucket(n, ws, start)


def default_bucket(year: int, start: WeekStart, today: date) -> WeekBucket:
    """Bucket to preselect for `year`: the nearest non-future one.

    - today inside `year`: the bucket containing today
    - today after `year`: the year's last bucket
    - today before `year` (or before its first bucket): the first bucket
    """

    weeks = weeks_in_year(year, start)
    if today.year > year:
        return weeks[-1]
    if today.year < year or today < weeks[0].week_start:
        return weeks[0]
    return bucket_for_date(today, start)


def resolve_bucket(
    year: int,
    start: WeekStart,
    requested_start: Optional[date],
    today: date,
) -> WeekBucket:
    """Resolve a caller-requested bucket start against `year`'s buckets.

    An exact match wins. Otherwise the nearest earlier bucket of the same
    year is used; a date before all of them maps to the first bucket. Never
    returns another year's bucket.
    """

    if requested_start is None:
        return default_bucket(year, start, today)

    weeks = weeks_in_year(year, start)
    chosen = weeks[0]
    for w in weeks:
        if w.week_start > requested_start:
            break
        chosen = w
    return chosen


def days_in_week(bucket: WeekBucket) -> list[date]:
    return [bucket.week_start + timedelta(days=i) for i in range(7)]
