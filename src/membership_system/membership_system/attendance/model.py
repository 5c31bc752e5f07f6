from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Mapping, Optional

from ..core.enums import DispatchType, MemberTier, SourceKind, WeekStart
from ..weeks.model import WeekBucket

COUNTED_SOURCES = (SourceKind.PRAYER, SourceKind.PRIMARY, SourceKind.SECONDARY)
ALL_SOURCES = (SourceKind.PRAYER, SourceKind.PRIMARY, SourceKind.SECONDARY, SourceKind.DISPATCH)


@dataclass(frozen=True)
class AttendanceEvent:
    """One attendance-like fact for a member.

    PRIMARY rows carry the meeting's event_date; SECONDARY/PRAYER rows carry
    the reporting week_start; DISPATCH rows carry both.
    """

    member_id: str
    source: SourceKind
    event_date: Optional[date] = None
    week_start: Optional[date] = None
    attended: bool = True
    memo: Optional[str] = None
    updated_at: Optional[datetime] = None

    @property
    def anchor_date(self) -> Optional[date]:
        return self.event_date or self.week_start


@dataclass(frozen=True)
class DispatchRecord:
    """Outreach/visitation record (organic dispatch)."""

    member_id: str
    week_start: Optional[date]
    dispatch_type: Optional[DispatchType] = None
    dispatch_date: Optional[date] = None
    memo: Optional[str] = None
    visitor_ids: tuple[str, ...] = ()
    updated_at: Optional[datetime] = None

    @property
    def is_complete(self) -> bool:
        return (
            self.dispatch_type is not None
            and self.dispatch_date is not None
            and bool((self.memo or "").strip())
        )

    def to_event(self) -> AttendanceEvent:
        return AttendanceEvent(
            member_id=self.member_id,
            source=SourceKind.DISPATCH,
            event_date=self.dispatch_date,
            week_start=self.week_start,
            attended=True,
            memo=(self.memo or "").strip() or None,
            updated_at=self.updated_at,
        )


@dataclass(frozen=True)
class DistrictListEntry:
    district_id: str
    member_id: str
    tier: MemberTier


@dataclass(frozen=True)
class MatrixScope:
    """Requested scope for local-only filtering. None fields do not constrain.

    district_ids is the set of districts the caller may see; an empty set
    admits nobody.
    """

    locality_id: Optional[str] = None
    district_id: Optional[str] = None
    group_id: Optional[str] = None
    district_ids: Optional[frozenset[str]] = None


@dataclass(frozen=True)
class MatrixOptions:
    week_start: WeekStart = WeekStart.SUNDAY
    enrolled_only: bool = False
    local_only: bool = False
    scope: MatrixScope = field(default_factory=MatrixScope)


@dataclass(frozen=True)
class MatrixCell:
    attended: bool
    memo: Optional[str] = None


@dataclass(frozen=True)
class MemberMatrix:
    """Per-member rows of the matrix.

    per_source holds every week_start of the year; memos is sparse.
    """

    member_id: str
    name: str
    district_id: Optional[str]
    is_local: bool
    tier: MemberTier
    per_source: Mapping[SourceKind, Mapping[date, bool]]
    memos: Mapping[SourceKind, Mapping[date, str]]

    def cell(self, source: SourceKind, week_start: date) -> MatrixCell:
        return MatrixCell(
            attended=bool(self.per_source.get(source, {}).get(week_start, False)),
            memo=self.memos.get(source, {}).get(week_start),
        )

    @property
    def has_activity(self) -> bool:
        return any(flag for weeks in self.per_source.values() for flag in weeks.values())


@dataclass(frozen=True)
class AttendanceMatrix:
    year: int
    weeks: tuple[WeekBucket, ...]
    members: tuple[MemberMatrix, ...]
    failed_member_ids: tuple[str, ...] = ()

    def for_member(self, member_id: str) -> Optional[MemberMatrix]:
        for m in self.members:
            if m.member_id == member_id:
                return m
        return None


@dataclass(frozen=True)
class MemberOverview:
    member_id: str
    year: int
    attended_counts: Mapping[SourceKind, int]
    weeks_in_scope_count: int
    dispatch_count: int
    period_label: str

    def rate(self, source: SourceKind) -> Optional[int]:
        """Attendance percentage over in-scope weeks, None when there are none."""
        if self.weeks_in_scope_count == 0:
            return None
        return round(self.attended_counts.get(source, 0) * 100 / self.weeks_in_scope_count)


@dataclass(frozen=True)
class WeekSummary:
    """One row of the weekly list: distinct attending members per source."""

    week: WeekBucket
    counts: Mapping[SourceKind, int]


@dataclass(frozen=True)
class WeekAttendee:
    member_id: str
    name: str


@dataclass(frozen=True)
class WeekDetail:
    week: WeekBucket
    attendees: Mapping[SourceKind, tuple[WeekAttendee, ...]]
