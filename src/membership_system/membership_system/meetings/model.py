from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Mapping, Optional

from ..core.enums import MeetingType


@dataclass(frozen=True)
class MeetingRecord:
    """Domain entity: one recorded meeting (primary gathering or small group)."""

    meeting_id: str
    event_date: date
    meeting_type: MeetingType
    district_id: Optional[str] = None
    locality_id: Optional[str] = None
    group_id: Optional[str] = None
    created_at: Optional[datetime] = None
    name: Optional[str] = None


@dataclass(frozen=True)
class AttendanceLink:
    """A dependent attendance row hanging off a meeting."""

    meeting_id: str
    member_id: str


class MatchedBy(str, Enum):
    BY_DISTRICT = "by_district"
    BY_LOCALITY = "by_locality"
    BY_GROUP = "by_group"
    UNSCOPED = "unscoped"


@dataclass(frozen=True)
class IdentityDecision:
    key: str
    matched_by: MatchedBy


@dataclass(frozen=True)
class DuplicateGroup:
    identity_key: str
    meeting_type: MeetingType
    matched_by: MatchedBy
    records: tuple[MeetingRecord, ...]

    @property
    def event_date(self) -> date:
        return self.records[0].event_date

    @property
    def meeting_ids(self) -> tuple[str, ...]:
        return tuple(r.meeting_id for r in self.records)


@dataclass(frozen=True)
class DuplicateGroupReport:
    """Read-model for the diagnostic view: a group plus its deletion hints."""

    group: DuplicateGroup
    dependent_counts: Mapping[str, int]
    suggested_meeting_id: str


@dataclass(frozen=True)
class DuplicateAttendance:
    """A member marked present at more than one primary meeting in one week."""

    member_id: str
    week_start: date
    meeting_ids: tuple[str, ...]
