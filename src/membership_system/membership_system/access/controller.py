from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.web import current_user_id, login_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/scope", methods=["GET"], endpoint="api_scope")
    @login_required
    def api_scope():
        ctx = container.access_service.build_context(
            current_user_id(),
            requested_locality_id=request.args.get("locality_id") or None,
            requested_district_id=request.args.get("district_id") or None,
        )
        sections = container.access_service.locality_sections(ctx)
        return jsonify(
            {
                "success": True,
                "role": ctx.role.value,
                "locality_id": ctx.locality_id,
                "locality_source": ctx.locality.source.value,
                "district_id": ctx.district_id,
                "district_source": ctx.district.source.value,
                "can_see_all_districts": ctx.can_see_all_districts,
                "districts": [{"id": d.district_id, "name": d.name} for d in ctx.districts_in_scope],
                "areas": [
                    {
                        "id": a.area_id,
                        "name": a.name,
                        "prefectures": [
                            {
                                "id": p.prefecture_id,
                                "name": p.name,
                                "localities": [{"id": l.locality_id, "name": l.name} for l in p.localities],
                            }
                            for p in a.prefectures
                        ],
                    }
                    for a in sections
                ],
            }
        )
