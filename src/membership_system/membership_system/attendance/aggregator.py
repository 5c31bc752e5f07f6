"""Attendance matrix aggregation.

Pure functions over already-fetched rows. Four sources are bucketed into the
weeks of one year under one week-start convention:

- a cell is True when at least one attended event of that source lands in
  the bucket; missing data is simply False
- enrolled-only drops PRAYER/PRIMARY/SECONDARY facts for weeks in which the
  member is not enrolled on the week start; DISPATCH is exempt
- local-only drops members whose *current* assignment differs from the
  requested scope, once, at query time (not per historical week)

Inputs are never mutated.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime
from typing import Iterable, Mapping, Optional, Sequence

from ..core.constants import ALL_DISTRICTS, DATE_LABEL_FORMAT, EMPTY_PERIOD_LABEL
from ..core.enums import MemberTier, SourceKind, WeekStart
from ..enrollment.model import Member
from ..enrollment.resolver import is_enrolled_on
from ..weeks.bucketer import bucket_for_date, week_start_for_date, weeks_in_year
from ..weeks.model import WeekBucket
from .model import (
    ALL_SOURCES,
    COUNTED_SOURCES,
    AttendanceEvent,
    AttendanceMatrix,
    DispatchRecord,
    DistrictListEntry,
    MatrixOptions,
    MatrixScope,
    MemberMatrix,
    MemberOverview,
    WeekAttendee,
    WeekDetail,
    WeekSummary,
)

TIER_PRECEDENCE = (MemberTier.REGULAR, MemberTier.SEMI, MemberTier.POOL)

TierIndex = Mapping[str, Mapping[MemberTier, frozenset]]


def dispatch_events(records: Iterable[DispatchRecord]) -> list[AttendanceEvent]:
    """Only complete dispatch records (type, date and memo filled in) count."""
    return [r.to_event() for r in records if r.is_complete]


def select_memo(events: Iterable[AttendanceEvent]) -> Optional[str]:
    """Most recently edited non-empty memo; tie-break on the latest event date."""

    best: Optional[AttendanceEvent] = None
    best_key = None
    for e in events:
        memo = (e.memo or "").strip()
        if not memo:
            continue
        key = (e.updated_at or datetime.min, e.anchor_date or date.min)
        if best is None or key > best_key:
            best, best_key = e, key
    return (best.memo or "").strip() if best else None


def in_local_scope(member: Member, scope: MatrixScope) -> bool:
    # Current assignment only; transfers during the year are not replayed.
    if scope.locality_id is not None and member.locality_id != scope.locality_id:
        return False
    if scope.district_id not in (None, ALL_DISTRICTS) and member.district_id != scope.district_id:
        return False
    if scope.group_id is not None and member.group_id != scope.group_id:
        return False
    if scope.district_ids is not None and member.district_id not in scope.district_ids:
        return False
    return True


def build_tier_index(entries: Iterable[DistrictListEntry]) -> TierIndex:
    raw: dict[str, dict[MemberTier, set]] = defaultdict(lambda: defaultdict(set))
    for e in entries:
        raw[e.district_id][e.tier].add(e.member_id)
    return {d: {t: frozenset(ids) for t, ids in tiers.items()} for d, tiers in raw.items()}


def tier_for(member: Member, index: TierIndex) -> MemberTier:
    if not member.district_id:
        return MemberTier.SEMI
    tiers = index.get(member.district_id, {})
    for tier in TIER_PRECEDENCE:
        if member.member_id in tiers.get(tier, ()):
            return tier
    return MemberTier.SEMI


def group_events_by_member(events: Iterable[AttendanceEvent]) -> dict[str, list[AttendanceEvent]]:
    out: dict[str, list[AttendanceEvent]] = defaultdict(list)
    for e in events:
        out[e.member_id].append(e)
    return out


def build_member_row(
    member: Member,
    events: Iterable[AttendanceEvent],
    weeks: Sequence[WeekBucket],
    options: MatrixOptions,
    tier: MemberTier = MemberTier.SEMI,
) -> MemberMatrix:
    week_starts = [w.week_start for w in weeks]
    known = set(week_starts)
    enrolled = {ws: is_enrolled_on(member, ws) for ws in week_starts} if options.enrolled_only else None

    per_source = {s: dict.fromkeys(week_starts, False) for s in ALL_SOURCES}
    memo_events: dict[SourceKind, dict[date, list[AttendanceEvent]]] = {s: defaultdict(list) for s in ALL_SOURCES}

    for e in events:
        anchor = e.anchor_date
        if anchor is None:
            continue
        ws = week_start_for_date(anchor, options.week_start)
        if ws not in known:
            continue
        if enrolled is not None and e.source is not SourceKind.DISPATCH and not enrolled[ws]:
            continue
        if e.attended:
            per_source[e.source][ws] = True
        if (e.memo or "").strip():
            memo_events[e.source][ws].append(e)

    memos: dict[SourceKind, dict[date, str]] = {}
    for s, by_week in memo_events.items():
        memos[s] = {}
        for ws, evts in by_week.items():
            memo = select_memo(evts)
            if memo:
                memos[s][ws] = memo

    return MemberMatrix(
        member_id=member.member_id,
        name=member.name,
        district_id=member.district_id,
        is_local=member.is_local,
        tier=tier,
        per_source=per_source,
        memos=memos,
    )


def build_matrix(
    members: Sequence[Member],
    events: Iterable[AttendanceEvent],
    year: int,
    options: Optional[MatrixOptions] = None,
    *,
    district_lists: Iterable[DistrictListEntry] = (),
    failed_member_ids: Iterable[str] = (),
) -> AttendanceMatrix:
    options = options or MatrixOptions()
    weeks = weeks_in_year(year, options.week_start)
    failed = tuple(dict.fromkeys(failed_member_ids))
    skip = set(failed)

    by_member = group_events_by_member(events)
    tiers = build_tier_index(district_lists)

    rows = []
    for m in members:
        if m.member_id in skip:
            continue
        if options.local_only and not in_local_scope(m, options.scope):
            continue
        rows.append(build_member_row(m, by_member.get(m.member_id, ()), weeks, options, tier_for(m, tiers)))

    return AttendanceMatrix(year=year, weeks=tuple(weeks), members=tuple(rows), failed_member_ids=failed)


def members_with_activity(matrix: AttendanceMatrix) -> tuple[MemberMatrix, ...]:
    """Rows with at least one attended cell in any source."""
    return tuple(m for m in matrix.members if m.has_activity)


def period_label(weeks: Sequence[WeekBucket]) -> str:
    if not weeks:
        return EMPTY_PERIOD_LABEL
    return f"{weeks[0].week_start.strftime(DATE_LABEL_FORMAT)} - {weeks[-1].week_end.strftime(DATE_LABEL_FORMAT)}"


def build_overview(
    member: Member,
    events: Iterable[AttendanceEvent],
    year: int,
    today: date,
    week_start: WeekStart = WeekStart.SUNDAY,
) -> MemberOverview:
    """Per-member yearly summary used for attendance rates.

    In-scope weeks: start not after today and member enrolled on the start.
    Dispatch weeks are counted over the whole year regardless of enrollment.
    """

    weeks = weeks_in_year(year, week_start)
    row = build_member_row(member, events, weeks, MatrixOptions(week_start=week_start, enrolled_only=True))

    in_scope = [w for w in weeks if w.week_start <= today and is_enrolled_on(member, w.week_start)]
    counts = {s: sum(1 for w in in_scope if row.per_source[s][w.week_start]) for s in COUNTED_SOURCES}
    dispatch_count = sum(1 for attended in row.per_source[SourceKind.DISPATCH].values() if attended)

    return MemberOverview(
        member_id=member.member_id,
        year=year,
        attended_counts=counts,
        weeks_in_scope_count=len(in_scope),
        dispatch_count=dispatch_count,
        period_label=period_label(in_scope),
    )


def _weekly_population(members: Iterable[Member], local_members_only: bool) -> list[Member]:
    return [m for m in members if m.is_local or not local_members_only]


def build_weekly_summary(
    members: Sequence[Member],
    events: Iterable[AttendanceEvent],
    year: int,
    options: Optional[MatrixOptions] = None,
    *,
    local_members_only: bool = False,
) -> list[WeekSummary]:
    """Weekly list: per bucket, how many members attended each source.

    Monday-start by default, as small-group and dispatch reporting is.
    local_members_only keeps members flagged is_local.
    """

    options = options or MatrixOptions(week_start=WeekStart.MONDAY)
    matrix = build_matrix(_weekly_population(members, local_members_only), events, year, options)
    return [
        WeekSummary(
            week=w,
            counts={s: sum(1 for row in matrix.members if row.per_source[s][w.week_start]) for s in ALL_SOURCES},
        )
        for w in matrix.weeks
    ]


def week_detail(
    members: Sequence[Member],
    events: Iterable[AttendanceEvent],
    day: date,
    options: Optional[MatrixOptions] = None,
    *,
    local_members_only: bool = False,
) -> WeekDetail:
    """Who attended each source in the bucket containing `day`, by name."""

    options = options or MatrixOptions(week_start=WeekStart.MONDAY)
    week = bucket_for_date(day, options.week_start)
    by_member = group_events_by_member(events)

    attendees: dict[SourceKind, list[WeekAttendee]] = {s: [] for s in ALL_SOURCES}
    for m in _weekly_population(members, local_members_only):
        if options.local_only and not in_local_scope(m, options.scope):
            continue
        row = build_member_row(m, by_member.get(m.member_id, ()), [week], options)
        for s in ALL_SOURCES:
            if row.per_source[s][week.week_start]:
                attendees[s].append(WeekAttendee(member_id=m.member_id, name=m.name))

    return WeekDetail(
        week=week,
        attendees={s: tuple(sorted(people, key=lambda a: (a.name, a.member_id))) for s, people in attendees.items()},
    )
