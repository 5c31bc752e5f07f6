from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from ..core.enums import WeekStart


@dataclass(frozen=True)
class WeekBucket:
    """A seven-day window anchored to a week-start day.

    Derived, never stored. Attributed to the year containing week_start.
    """

    week_number: int
    week_start: date
    week_end: date
    label: str
    convention: WeekStart = WeekStart.SUNDAY

    @property
    def year(self) -> int:
        return self.week_start.year

    def contains(self, d: date) -> bool:
        return self.week_start <= d <= self.week_end
