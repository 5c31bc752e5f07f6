from __future__ import annotations

from flask import Flask, jsonify

from ..common.web import current_user_id, login_required
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import AuthorizationError


def register(app: Flask, container: Container) -> None:
    def _require_admin() -> None:
        if container.access_service.current_role(current_user_id()) != Role.ADMIN:
            raise AuthorizationError("Not allowed")

    @app.route("/api/admin/enrollment-uncertain/count", methods=["GET"], endpoint="api_enrollment_uncertain_count")
    @login_required
    def api_enrollment_uncertain_count():
        _require_admin()
        return jsonify({"success": True, "count": container.enrollment_review_service.count_uncertain()})

    @app.route("/api/admin/enrollment-uncertain", methods=["GET"], endpoint="api_enrollment_uncertain")
    @login_required
    def api_enrollment_uncertain():
        _require_admin()

        items = container.enrollment_review_service.list_uncertain()
        return jsonify(
            {
                "success": True,
                "count": len(items),
                "members": [
                    {
                        "member_id": i.member_id,
                        "name": i.name,
                        "reasons": sorted(r.value for r in i.reasons),
                        "periods": [
                            {
                                "period_no": p.period_no,
                                "join_date": p.join_date.isoformat() if p.join_date else None,
                                "leave_date": p.leave_date.isoformat() if p.leave_date else None,
                                "is_uncertain": p.is_uncertain,
                                "memo": p.memo,
                            }
                            for p in i.periods
                        ],
                    }
                    for i in items
                ],
            }
        )
