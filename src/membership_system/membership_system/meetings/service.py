from __future__ import annotations

import logging
from datetime import date
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import today_local
from ..common.validators import require_ids
from ..core.enums import Role, WeekStart
from ..core.exceptions import AuthorizationError, ValidationError
from ..weeks.bucketer import resolve_bucket, weeks_in_year
from . import detector
from .factory import IdentityKeyFactory
from .model import DuplicateAttendance, DuplicateGroupReport
from .repository import MeetingRepository

logger = logging.getLogger(__name__)


class MeetingDuplicateService:
    """Use case: administrative duplicate-meeting diagnostics and cleanup."""

    def __init__(
        self,
        meetings: MeetingRepository,
        *,
        factory: Optional[IdentityKeyFactory] = None,
        week_start: WeekStart = WeekStart.SUNDAY,
        today: Optional[Callable[[], date]] = None,
    ):
        self._meetings = meetings
        self._factory = factory or IdentityKeyFactory()
        self._week_start = week_start
        self._today = today or today_local

    def build_report(self) -> list[DuplicateGroupReport]:
        groups = detector.find_duplicate_groups(self._meetings.list_meetings(), self._factory)
        if not groups:
            return []

        ids = [mid for g in groups for mid in g.meeting_ids]
        links = list(self._meetings.list_attendance_links(meeting_ids=ids))

        reports = []
        for g in groups:
            counts = detector.count_dependents(g, links)
            reports.append(
                DuplicateGroupReport(
                    group=g,
                    dependent_counts=counts,
                    suggested_meeting_id=detector.suggest_deletion(g, counts),
                )
            )
        logger.info("duplicate meeting groups: %d", len(reports))
        return reports

    def find_duplicate_attendance(self, year: int, *, week_start_date: Optional[date] = None) -> list[DuplicateAttendance]:
        """Members attending several primary meetings in one week of `year`.

        week_start_date narrows the result to the bucket of `year` containing
        it; a date outside `year` maps to its first or last bucket.
        """

        weeks = weeks_in_year(year, self._week_start)
        meetings = self._meetings.list_meetings(start=weeks[0].week_start, end=weeks[-1].week_end)
        ids = [m.meeting_id for m in meetings]
        links = self._meetings.list_attendance_links(meeting_ids=ids) if ids else []

        found = detector.find_duplicate_attendance(meetings, links, self._week_start)
        if week_start_date is not None:
            bucket = resolve_bucket(year, self._week_start, week_start_date, self._today())
            found = [d for d in found if d.week_start == bucket.week_start]
        return found

    def delete_meetings(self, *, current_role: Role, meeting_ids: Sequence[str]) -> int:
        # Checked here, at call time, regardless of what the UI allowed.
        if current_role != Role.ADMIN:
            raise AuthorizationError("Not allowed")

        ids = require_ids(meeting_ids, "meeting_id")
        deleted = self._meetings.delete_meetings_with_attendance(meeting_ids=ids)
        if deleted == 0:
            raise ValidationError("Meeting not found")

        logger.info("deleted %d meeting(s) with their attendance rows", deleted)
        return deleted
