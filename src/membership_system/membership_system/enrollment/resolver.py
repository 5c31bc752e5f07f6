"""Enrollment period resolution.

A member with periods is enrolled on a date when any period contains it
(both ends inclusive). Without periods the legacy join/leave pair is used;
with neither the member is always enrolled. Overlapping periods are not an
error: the "any period" rule absorbs them.
"""

from __future__ import annotations

from datetime import date
from typing import Iterable, Optional

from .model import EnrollmentPeriod, Member, UncertaintyReason


def in_period(join: Optional[date], leave: Optional[date], d: date) -> bool:
    if join is not None and d < join:
        return False
    if leave is not None and d > leave:
        return False
    return True


def period_contains(period: EnrollmentPeriod, d: date) -> bool:
    # is_uncertain does not change containment; it only feeds the review list.
    return in_period(period.join_date, period.leave_date, d)


def is_enrolled_on(member: Member, d: date) -> bool:
    if member.enrollment_periods:
        return any(period_contains(p, d) for p in member.enrollment_periods)
    return in_period(member.local_member_join_date, member.local_member_leave_date, d)


def first_period(periods: Iterable[EnrollmentPeriod]) -> Optional[EnrollmentPeriod]:
    return min(periods, key=lambda p: p.period_no, default=None)


def uncertainty_reasons(member: Member) -> frozenset[UncertaintyReason]:
    reasons: set[UncertaintyReason] = set()
    if any(p.is_uncertain for p in member.enrollment_periods):
        reasons.add(UncertaintyReason.FLAGGED_UNCERTAIN)
    first = first_period(member.enrollment_periods)
    if first is not None and first.join_date is None:
        reasons.add(UncertaintyReason.UNKNOWN_FIRST_JOIN)
    return frozenset(reasons)


def has_uncertain_enrollment(member: Member) -> bool:
    return bool(uncertainty_reasons(member))
