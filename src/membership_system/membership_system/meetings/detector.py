"""Duplicate meeting detection.

Classifies and counts only; deleting a meeting is a separate, authorized
action of the caller.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import datetime
from typing import Iterable, Mapping, Optional, Sequence

from ..core.enums import MeetingType, WeekStart
from ..weeks.bucketer import week_start_for_date
from .factory import IdentityKeyFactory
from .model import AttendanceLink, DuplicateAttendance, DuplicateGroup, IdentityDecision, MeetingRecord


def identity_key(record: MeetingRecord, factory: Optional[IdentityKeyFactory] = None) -> IdentityDecision:
    factory = factory or IdentityKeyFactory()
    return factory.for_meeting_type(record.meeting_type).key_for(record)


def _created_order(record: MeetingRecord):
    # Oldest first; rows without created_at go last.
    return (record.created_at is None, record.created_at or datetime.min, record.meeting_id)


def find_duplicate_groups(
    records: Iterable[MeetingRecord],
    factory: Optional[IdentityKeyFactory] = None,
) -> list[DuplicateGroup]:
    """Groups of two or more meetings sharing an identity key, newest date first."""

    factory = factory or IdentityKeyFactory()
    buckets: dict[tuple[MeetingType, str], list[MeetingRecord]] = defaultdict(list)
    decisions: dict[tuple[MeetingType, str], IdentityDecision] = {}

    for r in records:
        decision = identity_key(r, factory)
        k = (r.meeting_type, decision.key)
        buckets[k].append(r)
        decisions.setdefault(k, decision)

    groups = [
        DuplicateGroup(
            identity_key=key,
            meeting_type=meeting_type,
            matched_by=decisions[(meeting_type, key)].matched_by,
            records=tuple(sorted(rows, key=_created_order)),
        )
        for (meeting_type, key), rows in buckets.items()
        if len(rows) > 1
    ]
    groups.sort(key=lambda g: (g.identity_key, g.meeting_type.value))
    groups.sort(key=lambda g: g.event_date, reverse=True)
    return groups


def count_dependents(group: DuplicateGroup, links: Iterable[AttendanceLink]) -> dict[str, int]:
    counts = dict.fromkeys(group.meeting_ids, 0)
    for link in links:
        if link.meeting_id in counts:
            counts[link.meeting_id] += 1
    return counts


def suggest_deletion(group: DuplicateGroup, counts: Mapping[str, int]) -> str:
    """The emptiest meeting of the group; among equals, the most recently created."""

    newest_first = sorted(group.records, key=lambda r: r.created_at or datetime.min, reverse=True)
    best = min(newest_first, key=lambda r: counts.get(r.meeting_id, 0))
    return best.meeting_id


def find_duplicate_attendance(
    meetings: Sequence[MeetingRecord],
    links: Iterable[AttendanceLink],
    week_start: WeekStart = WeekStart.SUNDAY,
) -> list[DuplicateAttendance]:
    """Members recorded at more than one primary meeting within a single week."""

    week_of = {
        m.meeting_id: week_start_for_date(m.event_date, week_start)
        for m in meetings
        if m.meeting_type == MeetingType.PRIMARY
    }

    seen: dict[tuple, list[str]] = defaultdict(list)
    for link in links:
        ws = week_of.get(link.meeting_id)
        if ws is None:
            continue
        ids = seen[(link.member_id, ws)]
        if link.meeting_id not in ids:
            ids.append(link.meeting_id)

    out = [
        DuplicateAttendance(member_id=member_id, week_start=ws, meeting_ids=tuple(sorted(ids)))
        for (member_id, ws), ids in seen.items()
        if len(ids) > 1
    ]
    out.sort(key=lambda d: d.member_id)
    out.sort(key=lambda d: d.week_start, reverse=True)
    return out
