from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import coerce_date, today_local
from ..common.validators import clamp_year
from ..common.web import current_user_id, login_required
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import AuthorizationError


def register(app: Flask, container: Container) -> None:
    def _require_admin() -> None:
        role = container.access_service.current_role(current_user_id())
        if role != Role.ADMIN:
            raise AuthorizationError("Not allowed")

    @app.route("/api/admin/meeting-duplicates", methods=["GET"], endpoint="api_meeting_duplicates")
    @login_required
    def api_meeting_duplicates():
        _require_admin()
        reports = container.meeting_duplicate_service.build_report()
        return jsonify(
            {
                "success": True,
                "groups": [
                    {
                        "identity_key": r.group.identity_key,
                        "meeting_type": r.group.meeting_type.value,
                        "matched_by": r.group.matched_by.value,
                        "event_date": r.group.event_date.isoformat(),
                        "suggested_meeting_id": r.suggested_meeting_id,
                        "meetings": [
                            {
                                "id": m.meeting_id,
                                "name": m.name,
                                "district_id": m.district_id,
                                "locality_id": m.locality_id,
                                "group_id": m.group_id,
                                "created_at": m.created_at.isoformat() if m.created_at else None,
                                "attendance_count": r.dependent_counts.get(m.meeting_id, 0),
                            }
                            for m in r.group.records
                        ],
                    }
                    for r in reports
                ],
            }
        )

    @app.route("/api/admin/meeting-duplicates/attendance", methods=["GET"], endpoint="api_duplicate_attendance")
    @login_required
    def api_duplicate_attendance():
        _require_admin()
        year = clamp_year(request.args.get("year"), default=today_local().year)
        found = container.meeting_duplicate_service.find_duplicate_attendance(
            year, week_start_date=coerce_date(request.args.get("week_start"))
        )
        return jsonify(
            {
                "success": True,
                "year": year,
                "duplicates": [
                    {"member_id": d.member_id, "week_start": d.week_start.isoformat(), "meeting_ids": list(d.meeting_ids)}
                    for d in found
                ],
            }
        )

    @app.route("/api/admin/meeting-duplicates/delete", methods=["POST"], endpoint="api_meeting_duplicates_delete")
    @login_required
    def api_meeting_duplicates_delete():
        data = request.get_json(silent=True) or {}
        ids = data.get("meeting_ids") or []
        if isinstance(ids, str):
            ids = [ids]

        # The service re-checks the role; nothing is deleted for non-admins.
        deleted = container.meeting_duplicate_service.delete_meetings(
            current_role=container.access_service.current_role(current_user_id()),
            meeting_ids=[str(i) for i in ids],
        )
        return jsonify({"success": True, "deleted": deleted})
