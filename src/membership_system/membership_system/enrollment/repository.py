from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import EnrollmentPeriod, Member


class MemberRepository(Protocol):
    def list_members(self, member_ids: Optional[Sequence[str]] = None) -> Sequence[Member]:
        """Members with their enrollment periods attached.

        None means every member; an empty sequence means none.
        """

        raise NotImplementedError

    def list_enrollment_periods(self) -> Sequence[EnrollmentPeriod]:
        """All enrollment period rows, ordered by member then period_no."""

        raise NotImplementedError
