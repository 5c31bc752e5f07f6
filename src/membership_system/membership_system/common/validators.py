from __future__ import annotations

from typing import Iterable, Optional

from ..core.exceptions import ValidationError

MIN_YEAR = 1900
MAX_YEAR = 2200


def require_ids(values: Iterable[Optional[str]], field_name: str) -> list[str]:
    """Strip, drop blanks and de-duplicate while keeping the first-seen order."""

    out: list[str] = []
    for v in values:
        v = (v or "").strip()
        if v and v not in out:
            out.append(v)
    if not out:
        raise ValidationError(f"{field_name} is required")
    return out

def clamp_year(value: Optional[str], *, default: int) -> int:
    """Parse a year from a query string; bad input falls back to default."""

    try:
        year = int(value) if value is not None else default
    except ValueError:
        return default
    if year < MIN_YEAR or year > MAX_YEAR:
        return default
    return year
