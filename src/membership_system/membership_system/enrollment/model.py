from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional


@dataclass(frozen=True)
class EnrollmentPeriod:
    """One dated interval during which a member counts as a local member.

    join_date None: enrolled since before records began.
    leave_date None: still enrolled.
    """

    member_id: str
    period_no: int
    join_date: Optional[date] = None
    leave_date: Optional[date] = None
    is_uncertain: bool = False
    memo: Optional[str] = None


@dataclass(frozen=True)
class Member:
    """Domain entity: a person on the roster, as read for aggregation.

    `local_member_join_date` / `local_member_leave_date` are the legacy single
    pair, consulted only when the member has no enrollment periods.
    """

    member_id: str
    name: str = ""
    district_id: Optional[str] = None
    group_id: Optional[str] = None
    locality_id: Optional[str] = None
    is_local: bool = True
    local_member_join_date: Optional[date] = None
    local_member_leave_date: Optional[date] = None
    enrollment_periods: tuple[EnrollmentPeriod, ...] = field(default_factory=tuple)


class UncertaintyReason(str, Enum):
    FLAGGED_UNCERTAIN = "flagged_uncertain"
    UNKNOWN_FIRST_JOIN = "unknown_first_join"


@dataclass(frozen=True)
class EnrollmentReviewItem:
    """Row of the administrative enrollment review list."""

    member_id: str
    name: str
    reasons: frozenset[UncertaintyReason]
    periods: tuple[EnrollmentPeriod, ...]
