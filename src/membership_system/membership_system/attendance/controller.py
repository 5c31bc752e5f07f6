from __future__ import annotations

from flask import Flask, jsonify, request

from ..access.model import ScopeContext
from ..common.datetime_utils import coerce_date, today_local
from ..common.validators import clamp_year
from ..common.web import current_user_id, login_required, query_flag
from ..container import Container
from ..core.enums import WeekStart
from ..core.exceptions import ValidationError
from ..weeks.bucketer import days_in_week
from . import aggregator
from .model import ALL_SOURCES, AttendanceMatrix, MatrixOptions, MatrixScope, MemberMatrix


def _week_start_arg(value, default: WeekStart = WeekStart.SUNDAY) -> WeekStart:
    try:
        return WeekStart((value or default.value).lower())
    except ValueError:
        raise ValidationError("week_start must be 'sunday' or 'monday'")


def visible_scope(ctx: ScopeContext, *, narrow_to_district: bool = False, group_id=None) -> MatrixScope:
    """Members the caller may see: the effective locality, limited to the
    districts in scope unless the role sees all districts of it.
    """

    if ctx.locality_id is None:
        return MatrixScope(district_ids=frozenset())
    allowed = None if ctx.can_see_all_districts else frozenset(d.district_id for d in ctx.districts_in_scope)
    return MatrixScope(
        locality_id=ctx.locality_id,
        district_id=ctx.district_id if narrow_to_district else None,
        group_id=group_id,
        district_ids=allowed,
    )


def _row_json(row: MemberMatrix, matrix: AttendanceMatrix) -> dict:
    return {
        "member_id": row.member_id,
        "name": row.name,
        "district_id": row.district_id,
        "is_local": row.is_local,
        "tier": row.tier.value,
        # One flag per week, aligned with "weeks".
        "sources": {s.value: [bool(row.per_source[s][w.week_start]) for w in matrix.weeks] for s in ALL_SOURCES},
        "memos": {
            s.value: {ws.isoformat(): memo for ws, memo in row.memos.get(s, {}).items()}
            for s in ALL_SOURCES
            if row.memos.get(s)
        },
    }


def _week_json(w) -> dict:
    return {
        "number": w.week_number,
        "start": w.week_start.isoformat(),
        "end": w.week_end.isoformat(),
        "label": w.label,
    }


def _matrix_json(matrix: AttendanceMatrix, rows) -> dict:
    return {
        "success": True,
        "year": matrix.year,
        "weeks": [_week_json(w) for w in matrix.weeks],
        "members": [_row_json(r, matrix) for r in rows],
        "failed_member_ids": list(matrix.failed_member_ids),
    }


def register(app: Flask, container: Container) -> None:
    def _context() -> ScopeContext:
        return container.access_service.build_context(
            current_user_id(),
            requested_locality_id=request.args.get("locality_id") or None,
            requested_district_id=request.args.get("district_id") or None,
        )

    @app.route("/api/members/<member_id>/matrix", methods=["GET"], endpoint="api_member_matrix")
    @login_required
    def api_member_matrix(member_id: str):
        year = clamp_year(request.args.get("year"), default=today_local().year)
        matrix = container.attendance_matrix_service.build_member_matrix(
            member_id,
            year,
            week_start=_week_start_arg(request.args.get("week_start")),
            scope=visible_scope(_context()),
        )
        return jsonify(_matrix_json(matrix, matrix.members))

    @app.route("/api/members/<member_id>/overview", methods=["GET"], endpoint="api_member_overview")
    @login_required
    def api_member_overview(member_id: str):
        year = clamp_year(request.args.get("year"), default=today_local().year)
        ov = container.attendance_matrix_service.build_overview(
            member_id,
            year,
            week_start=_week_start_arg(request.args.get("week_start")),
            scope=visible_scope(_context()),
        )
        return jsonify(
            {
                "success": True,
                "member_id": ov.member_id,
                "year": ov.year,
                "weeks_in_scope_count": ov.weeks_in_scope_count,
                "dispatch_count": ov.dispatch_count,
                "period_label": ov.period_label,
                "attended": {s.value: n for s, n in ov.attended_counts.items()},
                "rates": {s.value: ov.rate(s) for s in ov.attended_counts},
            }
        )

    @app.route("/api/attendance/matrix", methods=["GET"], endpoint="api_attendance_matrix")
    @login_required
    def api_attendance_matrix():
        """Population matrix inside the caller's effective scope.

        local_only (default on) narrows to the effective district; off widens
        to every district the caller may see in the locality. active_only
        keeps members with at least one attended week.
        """

        year = clamp_year(request.args.get("year"), default=today_local().year)
        ctx = _context()
        if ctx.locality_id is None:
            return jsonify({"success": True, "year": year, "weeks": [], "members": [], "failed_member_ids": []})

        scope = visible_scope(
            ctx,
            narrow_to_district=query_flag(request.args.get("local_only", "1")),
            group_id=request.args.get("group_id") or None,
        )
        options = MatrixOptions(
            week_start=_week_start_arg(request.args.get("week_start")),
            enrolled_only=query_flag(request.args.get("enrolled_only")),
            local_only=True,
            scope=scope,
        )
        matrix = container.attendance_matrix_service.build_matrix(None, year, options)

        rows = matrix.members
        if query_flag(request.args.get("active_only")):
            rows = aggregator.members_with_activity(matrix)
        return jsonify(_matrix_json(matrix, rows))

    @app.route("/api/attendance/weekly", methods=["GET"], endpoint="api_attendance_weekly")
    @login_required
    def api_attendance_weekly():
        """Weekly list for the caller's locality (Monday weeks by default)."""

        year = clamp_year(request.args.get("year"), default=today_local().year)
        summary = container.attendance_matrix_service.build_weekly_summary(
            year,
            visible_scope(_context()),
            local_members_only=query_flag(request.args.get("local_only", "1")),
            week_start=_week_start_arg(request.args.get("week_start"), WeekStart.MONDAY),
        )
        return jsonify(
            {
                "success": True,
                "year": year,
                "weeks": [
                    dict(_week_json(row.week), counts={s.value: n for s, n in row.counts.items()})
                    for row in summary
                ],
            }
        )

    @app.route("/api/attendance/weekly/<week_start>", methods=["GET"], endpoint="api_attendance_week_detail")
    @login_required
    def api_attendance_week_detail(week_start: str):
        day = coerce_date(week_start)
        if day is None:
            raise ValidationError("week_start must be YYYY-MM-DD")

        detail = container.attendance_matrix_service.week_detail(
            day,
            visible_scope(_context()),
            local_members_only=query_flag(request.args.get("local_only", "1")),
            week_start=_week_start_arg(request.args.get("convention"), WeekStart.MONDAY),
        )
        return jsonify(
            {
                "success": True,
                "week": _week_json(detail.week),
                "days": [d.isoformat() for d in days_in_week(detail.week)],
                "attendees": {
                    s.value: [{"member_id": a.member_id, "name": a.name} for a in people]
                    for s, people in detail.attendees.items()
                },
            }
        )
