from __future__ import annotations

import logging
from collections import defaultdict

from .model import EnrollmentPeriod, EnrollmentReviewItem, Member
from .repository import MemberRepository
from .resolver import uncertainty_reasons

logger = logging.getLogger(__name__)


class EnrollmentReviewService:
    """Use case: the administrative list of members whose enrollment is uncertain.

    A member is listed when any period is flagged uncertain or when the first
    period has no join date. This is a reporting feature; it never changes
    how enrollment is resolved.
    """

    def __init__(self, members: MemberRepository):
        self._members = members

    def _uncertain_member_ids(self) -> list[str]:
        by_member: dict[str, list[EnrollmentPeriod]] = defaultdict(list)
        for p in self._members.list_enrollment_periods():
            by_member[p.member_id].append(p)

        out = []
        for member_id, periods in by_member.items():
            candidate = Member(member_id=member_id, enrollment_periods=tuple(periods))
            if uncertainty_reasons(candidate):
                out.append(member_id)
        return out

    def count_uncertain(self) -> int:
        """Badge count for the sidebar."""
        return len(self._uncertain_member_ids())

    def list_uncertain(self) -> list[EnrollmentReviewItem]:
        ids = self._uncertain_member_ids()
        if not ids:
            return []

        items = []
        for m in self._members.list_members(ids):
            items.append(
                EnrollmentReviewItem(
                    member_id=m.member_id,
                    name=m.name,
                    reasons=uncertainty_reasons(m),
                    periods=tuple(sorted(m.enrollment_periods, key=lambda p: p.period_no)),
                )
            )
        items.sort(key=lambda i: (i.name, i.member_id))
        logger.info("enrollment review list: %d member(s)", len(items))
        return items
