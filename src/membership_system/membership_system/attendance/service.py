from __future__ import annotations

import logging
from datetime import date
from typing import Callable, Optional, Sequence

from ..common.concurrency import chunked, fetch_all
from ..common.datetime_utils import today_local
from ..core.constants import DEFAULT_QUERY_TIMEOUT_SECONDS, READ_CHUNK_SIZE
from ..core.enums import SourceKind, WeekStart
from ..core.exceptions import StorageError, ValidationError
from ..enrollment.model import Member
from ..enrollment.repository import MemberRepository
from ..weeks.bucketer import bucket_for_date, weeks_in_year
from . import aggregator
from .model import (
    AttendanceEvent,
    AttendanceMatrix,
    MatrixOptions,
    MatrixScope,
    MemberOverview,
    WeekDetail,
    WeekSummary,
)
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

GATHERING_SOURCES = (SourceKind.PRIMARY, SourceKind.SECONDARY, SourceKind.PRAYER)


class AttendanceMatrixService:
    """Use case: per-member, per-week attendance matrix and yearly overview.

    Reads for each chunk of members run concurrently. A chunk whose reads fail
    is reported in `failed_member_ids`; other members are still aggregated.
    """

    def __init__(
        self,
        members: MemberRepository,
        attendance: AttendanceRepository,
        *,
        chunk_size: int = READ_CHUNK_SIZE,
        timeout: float = DEFAULT_QUERY_TIMEOUT_SECONDS,
        today: Optional[Callable[[], date]] = None,
    ):
        self._members = members
        self._attendance = attendance
        self._chunk_size = max(int(chunk_size), 1)
        self._timeout = float(timeout)
        self._today = today or today_local

    @staticmethod
    def _year_range(year: int, week_start: WeekStart) -> tuple[date, date]:
        weeks = weeks_in_year(year, week_start)
        return weeks[0].week_start, weeks[-1].week_end

    def _load_events(self, member_ids: Sequence[str], start: date, end: date) -> list[AttendanceEvent]:
        tasks: dict = {
            s.value: (lambda s=s: self._attendance.list_events(source=s, member_ids=member_ids, start=start, end=end))
            for s in GATHERING_SOURCES
        }
        tasks[SourceKind.DISPATCH.value] = lambda: self._attendance.list_dispatch_records(
            member_ids=member_ids, start=start, end=end
        )
        results = fetch_all(tasks, timeout=self._timeout)

        events: list[AttendanceEvent] = []
        for s in GATHERING_SOURCES:
            events.extend(results[s.value])
        events.extend(aggregator.dispatch_events(results[SourceKind.DISPATCH.value]))
        return events

    def _read_population(
        self,
        members: Sequence[Member],
        start: date,
        end: date,
    ) -> tuple[list[AttendanceEvent], list[str]]:
        events: list[AttendanceEvent] = []
        failed: list[str] = []
        for ids in chunked([m.member_id for m in members], self._chunk_size):
            try:
                events.extend(self._load_events(ids, start, end))
            except StorageError as e:
                logger.warning("attendance read failed for %d member(s): %s", len(ids), e)
                failed.extend(ids)
        return events, failed

    def _members_in_scope(self, scope: Optional[MatrixScope]) -> list[Member]:
        members = list(self._members.list_members(None))
        if scope is None:
            return members
        return [m for m in members if aggregator.in_local_scope(m, scope)]

    def build_matrix(
        self,
        member_ids: Optional[Sequence[str]],
        year: int,
        options: Optional[MatrixOptions] = None,
    ) -> AttendanceMatrix:
        """Matrix for the given members (None: everyone) over `year`.

        Local-only filtering happens before any event read, on the members'
        current assignment.
        """

        options = options or MatrixOptions()
        members = list(self._members.list_members(member_ids))
        if options.local_only:
            members = [m for m in members if aggregator.in_local_scope(m, options.scope)]

        start, end = self._year_range(year, options.week_start)
        district_ids = sorted({m.district_id for m in members if m.district_id})
        district_lists = self._attendance.list_district_entries(district_ids=district_ids)

        events, failed = self._read_population(members, start, end)
        matrix = aggregator.build_matrix(
            members,
            events,
            year,
            options,
            district_lists=district_lists,
            failed_member_ids=failed,
        )
        logger.debug(
            "matrix year=%s members=%d failed=%d", year, len(matrix.members), len(matrix.failed_member_ids)
        )
        return matrix

    def _get_member(self, member_id: str, scope: Optional[MatrixScope] = None) -> Member:
        found = list(self._members.list_members([member_id]))
        # Out of scope answers exactly like an unknown id.
        if not found or (scope is not None and not aggregator.in_local_scope(found[0], scope)):
            raise ValidationError("Member not found")
        return found[0]

    def build_member_matrix(
        self,
        member_id: str,
        year: int,
        *,
        week_start: WeekStart = WeekStart.SUNDAY,
        scope: Optional[MatrixScope] = None,
    ) -> AttendanceMatrix:
        member = self._get_member(member_id, scope)
        start, end = self._year_range(year, week_start)
        events = self._load_events([member.member_id], start, end)
        return aggregator.build_matrix([member], events, year, MatrixOptions(week_start=week_start))

    def build_overview(
        self,
        member_id: str,
        year: int,
        *,
        week_start: WeekStart = WeekStart.SUNDAY,
        scope: Optional[MatrixScope] = None,
    ) -> MemberOverview:
        member = self._get_member(member_id, scope)
        start, end = self._year_range(year, week_start)
        events = self._load_events([member.member_id], start, end)
        return aggregator.build_overview(member, events, year, self._today(), week_start)

    def build_weekly_summary(
        self,
        year: int,
        scope: Optional[MatrixScope] = None,
        *,
        local_members_only: bool = True,
        week_start: WeekStart = WeekStart.MONDAY,
    ) -> list[WeekSummary]:
        members = self._members_in_scope(scope)
        start, end = self._year_range(year, week_start)
        events, failed = self._read_population(members, start, end)
        if failed:
            # Counts would silently be too low.
            raise StorageError("weekly attendance read failed", operation="weekly_summary")
        return aggregator.build_weekly_summary(
            members,
            events,
            year,
            MatrixOptions(week_start=week_start),
            local_members_only=local_members_only,
        )

    def week_detail(
        self,
        day: date,
        scope: Optional[MatrixScope] = None,
        *,
        local_members_only: bool = True,
        week_start: WeekStart = WeekStart.MONDAY,
    ) -> WeekDetail:
        members = self._members_in_scope(scope)
        bucket = bucket_for_date(day, week_start)
        events, failed = self._read_population(members, bucket.week_start, bucket.week_end)
        if failed:
            raise StorageError("weekly attendance read failed", operation="week_detail")
        return aggregator.week_detail(
            members,
            events,
            day,
            MatrixOptions(week_start=week_start),
            local_members_only=local_members_only,
        )
