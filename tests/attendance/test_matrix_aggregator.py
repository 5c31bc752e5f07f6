from datetime import date, datetime

from src.membership_system.membership_system.attendance.aggregator import (
    build_matrix,
    build_overview,
    build_weekly_summary,
    dispatch_events,
    in_local_scope,
    members_with_activity,
    period_label,
    select_memo,
    week_detail,
)
from src.membership_system.membership_system.attendance.model import (
    ALL_SOURCES,
    AttendanceEvent,
    DispatchRecord,
    DistrictListEntry,
    MatrixOptions,
    MatrixScope,
)
from src.membership_system.membership_system.core.enums import DispatchType, MemberTier, SourceKind, WeekStart
from src.membership_system.membership_system.enrollment.model import EnrollmentPeriod, Member


def _member(member_id="m1", **kwargs):
    kwargs.setdefault("name", member_id.upper())
    return Member(member_id=member_id, **kwargs)


def _primary(member_id, day, **kwargs):
    return AttendanceEvent(member_id=member_id, source=SourceKind.PRIMARY, event_date=day, **kwargs)


def test_zero_events_gives_full_week_list_all_false():
    matrix = build_matrix([_member()], [], 2024)

    assert len(matrix.weeks) == 52
    row = matrix.for_member("m1")
    for s in ALL_SOURCES:
        assert set(row.per_source[s]) == {w.week_start for w in matrix.weeks}
        assert not any(row.per_source[s].values())
    assert all(not memos for memos in row.memos.values())
    assert matrix.failed_member_ids == ()


def test_zero_events_overview_counts_weeks_up_to_today():
    ov = build_overview(_member(), [], 2024, today=date(2024, 2, 1))

    # Sundays 01/07, 01/14, 01/21, 01/28
    assert ov.weeks_in_scope_count == 4
    assert all(n == 0 for n in ov.attended_counts.values())
    assert ov.dispatch_count == 0
    assert ov.period_label == "2024/01/07 - 2024/02/03"
    assert ov.rate(SourceKind.PRIMARY) == 0


def test_cells_bucket_by_event_date_or_week_start():
    events = [
        _primary("m1", date(2024, 5, 8)),
        # small group rows carry a Monday week_start; re-bucketed under the Sunday convention
        AttendanceEvent(member_id="m1", source=SourceKind.SECONDARY, week_start=date(2024, 5, 6)),
        AttendanceEvent(member_id="m1", source=SourceKind.PRAYER, week_start=date(2024, 5, 12), attended=False),
    ]
    row = build_matrix([_member()], events, 2024).for_member("m1")

    assert row.per_source[SourceKind.PRIMARY][date(2024, 5, 5)] is True
    assert row.per_source[SourceKind.SECONDARY][date(2024, 5, 5)] is True
    assert row.per_source[SourceKind.PRAYER][date(2024, 5, 12)] is False
    assert row.cell(SourceKind.PRIMARY, date(2024, 5, 12)).attended is False


def test_events_outside_the_year_are_ignored():
    events = [_primary("m1", date(2024, 1, 3)), _primary("m1", date(2025, 1, 5))]
    row = build_matrix([_member()], events, 2024).for_member("m1")

    assert not any(row.per_source[SourceKind.PRIMARY].values())


def test_monday_convention_matrix():
    events = [_primary("m1", date(2024, 1, 1))]
    matrix = build_matrix([_member()], events, 2024, MatrixOptions(week_start=WeekStart.MONDAY))

    assert matrix.weeks[0].week_start == date(2024, 1, 1)
    assert matrix.for_member("m1").per_source[SourceKind.PRIMARY][date(2024, 1, 1)] is True


def test_memo_prefers_latest_edit_then_latest_date():
    older_edit = _primary("m1", date(2024, 5, 9), memo="first", updated_at=datetime(2024, 5, 9, 10, 0))
    newer_edit = _primary("m1", date(2024, 5, 6), memo="second", updated_at=datetime(2024, 5, 10, 8, 0))
    blank = _primary("m1", date(2024, 5, 11), memo="   ", updated_at=datetime(2024, 6, 1, 0, 0))

    assert select_memo([older_edit, newer_edit, blank]) == "second"

    same_edit_early = _primary("m1", date(2024, 5, 6), memo="early", updated_at=datetime(2024, 5, 10, 8, 0))
    same_edit_late = _primary("m1", date(2024, 5, 9), memo="late", updated_at=datetime(2024, 5, 10, 8, 0))
    assert select_memo([same_edit_late, same_edit_early]) == "late"
    assert select_memo([blank]) is None


def test_memos_are_sparse_per_week():
    events = [
        _primary("m1", date(2024, 5, 8), memo="  came late ", updated_at=datetime(2024, 5, 8, 12, 0)),
        _primary("m1", date(2024, 5, 15)),
    ]
    row = build_matrix([_member()], events, 2024).for_member("m1")

    assert row.memos[SourceKind.PRIMARY] == {date(2024, 5, 5): "came late"}
    assert row.cell(SourceKind.PRIMARY, date(2024, 5, 5)).memo == "came late"


def test_enrolled_only_forces_false_outside_enrollment_but_not_dispatch():
    member = _member(enrollment_periods=(EnrollmentPeriod("m1", 1, date(2024, 3, 1), None),))
    events = [
        _primary("m1", date(2024, 2, 11)),
        _primary("m1", date(2024, 3, 3)),
        AttendanceEvent(member_id="m1", source=SourceKind.DISPATCH, event_date=date(2024, 2, 12), week_start=date(2024, 2, 12)),
    ]

    plain = build_matrix([member], events, 2024).for_member("m1")
    assert plain.per_source[SourceKind.PRIMARY][date(2024, 2, 11)] is True

    enrolled = build_matrix([member], events, 2024, MatrixOptions(enrolled_only=True)).for_member("m1")
    assert enrolled.per_source[SourceKind.PRIMARY][date(2024, 2, 11)] is False
    assert enrolled.per_source[SourceKind.PRIMARY][date(2024, 3, 3)] is True
    assert enrolled.per_source[SourceKind.DISPATCH][date(2024, 2, 11)] is True


def test_local_only_uses_current_assignment():
    # Attended in D1 all spring, then moved to D2. Filtering by D1 drops the
    # member entirely because only the current district is considered.
    moved = _member("m1", district_id="D2", locality_id="L1")
    stayed = _member("m2", district_id="D1", locality_id="L1")
    events = [_primary("m1", date(2024, 3, 3)), _primary("m2", date(2024, 3, 3))]

    options = MatrixOptions(local_only=True, scope=MatrixScope(locality_id="L1", district_id="D1"))
    matrix = build_matrix([moved, stayed], events, 2024, options)

    assert [m.member_id for m in matrix.members] == ["m2"]


def test_local_only_all_districts_does_not_constrain_district():
    members = [_member("m1", district_id="D1", locality_id="L1"), _member("m2", district_id="D9", locality_id="L2")]
    options = MatrixOptions(local_only=True, scope=MatrixScope(locality_id="L1", district_id="__all__"))

    assert [m.member_id for m in build_matrix(members, [], 2024, options).members] == ["m1"]


def test_build_matrix_is_idempotent_and_does_not_mutate_inputs():
    members = [_member("m1"), _member("m2")]
    events = [_primary("m1", date(2024, 5, 8), memo="x"), _primary("m2", date(2024, 7, 3))]
    events_before = list(events)

    first = build_matrix(members, events, 2024)
    second = build_matrix(members, events, 2024)

    assert first == second
    assert events == events_before


def test_incomplete_dispatch_records_are_dropped():
    complete = DispatchRecord(
        member_id="m1",
        week_start=date(2024, 5, 6),
        dispatch_type=DispatchType.PHONE,
        dispatch_date=date(2024, 5, 7),
        memo="called",
    )
    no_memo = DispatchRecord(
        member_id="m1",
        week_start=date(2024, 5, 13),
        dispatch_type=DispatchType.MESSAGE,
        dispatch_date=date(2024, 5, 14),
        memo=" ",
    )
    no_type = DispatchRecord(member_id="m1", week_start=date(2024, 5, 20), dispatch_date=date(2024, 5, 21), memo="x")

    events = dispatch_events([complete, no_memo, no_type])
    assert len(events) == 1
    assert events[0].source == SourceKind.DISPATCH
    assert events[0].memo == "called"


def test_tier_from_district_lists_with_default_semi():
    members = [
        _member("m1", district_id="D1"),
        _member("m2", district_id="D1"),
        _member("m3", district_id="D1"),
        _member("m4"),
    ]
    lists = [
        DistrictListEntry("D1", "m1", MemberTier.POOL),
        DistrictListEntry("D1", "m1", MemberTier.REGULAR),
        DistrictListEntry("D1", "m2", MemberTier.POOL),
        DistrictListEntry("D2", "m3", MemberTier.REGULAR),
    ]
    matrix = build_matrix(members, [], 2024, district_lists=lists)

    assert [m.tier for m in matrix.members] == [MemberTier.REGULAR, MemberTier.POOL, MemberTier.SEMI, MemberTier.SEMI]


def test_members_with_activity():
    matrix = build_matrix([_member("m1"), _member("m2")], [_primary("m2", date(2024, 5, 8))], 2024)

    assert [m.member_id for m in members_with_activity(matrix)] == ["m2"]


def test_failed_members_are_reported_not_aggregated():
    matrix = build_matrix([_member("m1"), _member("m2")], [], 2024, failed_member_ids=["m2", "m2"])

    assert [m.member_id for m in matrix.members] == ["m1"]
    assert matrix.failed_member_ids == ("m2",)


def test_overview_counts_only_enrolled_weeks_and_dispatch_over_whole_year():
    member = _member(enrollment_periods=(EnrollmentPeriod("m1", 1, date(2024, 3, 1), date(2024, 3, 31)),))
    events = [
        _primary("m1", date(2024, 2, 11)),
        _primary("m1", date(2024, 3, 3)),
        _primary("m1", date(2024, 3, 10)),
        AttendanceEvent(member_id="m1", source=SourceKind.DISPATCH, event_date=date(2024, 6, 4), week_start=date(2024, 6, 3)),
    ]
    ov = build_overview(member, events, 2024, today=date(2024, 12, 31))

    # Sundays in March 2024: 3, 10, 17, 24, 31
    assert ov.weeks_in_scope_count == 5
    assert ov.attended_counts[SourceKind.PRIMARY] == 2
    assert ov.dispatch_count == 1
    assert ov.period_label == "2024/03/03 - 2024/04/06"
    assert ov.rate(SourceKind.PRIMARY) == 40


def test_overview_without_in_scope_weeks():
    member = _member(enrollment_periods=(EnrollmentPeriod("m1", 1, date(2025, 1, 1), None),))
    ov = build_overview(member, [], 2024, today=date(2024, 6, 1))

    assert ov.weeks_in_scope_count == 0
    assert ov.period_label == "-"
    assert ov.rate(SourceKind.PRIMARY) is None


def test_period_label_empty():
    assert period_label([]) == "-"


def test_scope_district_set_limits_members():
    scope = MatrixScope(locality_id="L1", district_ids=frozenset({"D1"}))

    assert in_local_scope(_member(district_id="D1", locality_id="L1"), scope)
    assert not in_local_scope(_member(district_id="D2", locality_id="L1"), scope)
    assert not in_local_scope(_member(district_id="D1", locality_id="L1"), MatrixScope(district_ids=frozenset()))


def test_weekly_summary_counts_distinct_members_per_monday_week():
    members = [_member("m1"), _member("m2"), _member("m3", is_local=False)]
    events = [
        _primary("m1", date(2024, 5, 8)),
        _primary("m1", date(2024, 5, 9)),
        _primary("m2", date(2024, 5, 12)),
        _primary("m3", date(2024, 5, 7)),
        AttendanceEvent(member_id="m2", source=SourceKind.PRAYER, week_start=date(2024, 5, 6)),
    ]

    summary = build_weekly_summary(members, events, 2024)

    assert summary[0].week.week_start == date(2024, 1, 1)
    row = next(r for r in summary if r.week.week_start == date(2024, 5, 6))
    assert row.counts[SourceKind.PRIMARY] == 3
    assert row.counts[SourceKind.PRAYER] == 1
    assert row.counts[SourceKind.SECONDARY] == 0

    local = build_weekly_summary(members, events, 2024, local_members_only=True)
    row = next(r for r in local if r.week.week_start == date(2024, 5, 6))
    assert row.counts[SourceKind.PRIMARY] == 2


def test_week_detail_names_attendees_of_the_containing_week():
    members = [_member("m1", name="Sato"), _member("m2", name="Abe"), _member("m3", name="Ito")]
    events = [
        _primary("m1", date(2024, 5, 8)),
        _primary("m2", date(2024, 5, 6)),
        _primary("m3", date(2024, 5, 13)),
        _primary("m3", date(2024, 5, 9), attended=False),
    ]

    detail = week_detail(members, events, date(2024, 5, 10))

    assert detail.week.week_start == date(2024, 5, 6)
    assert [a.name for a in detail.attendees[SourceKind.PRIMARY]] == ["Abe", "Sato"]
    assert detail.attendees[SourceKind.DISPATCH] == ()
