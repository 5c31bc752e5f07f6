from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..core.enums import GlobalRole, LocalRole, Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Area, District, Locality, Prefecture, UserAccessProfile
from .repository import AccessRepository

logger = logging.getLogger(__name__)


def _ids(rows, column: str) -> frozenset[str]:
    return frozenset(str(r[column]) for r in rows if r.get(column) is not None)


class MySQLAccessRepository(AccessRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_profile(self, user_id: str) -> Optional[UserAccessProfile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, role, global_role, main_district_id, home_locality_id
                FROM profiles
                WHERE id = %s
                """,
                (user_id,),
            )
            row = fetchone(cur)
            if not row:
                return None

            cur.execute("SELECT district_id FROM reporter_districts WHERE user_id = %s", (user_id,))
            reporter_rows = fetchall(cur)
            cur.execute("SELECT locality_id FROM user_localities WHERE user_id = %s", (user_id,))
            locality_rows = fetchall(cur)
            cur.execute("SELECT area_id FROM user_areas WHERE user_id = %s", (user_id,))
            area_rows = fetchall(cur)
            cur.execute("SELECT locality_id, role FROM local_roles WHERE user_id = %s", (user_id,))
            local_role_rows = fetchall(cur)

        local_roles = {}
        for r in local_role_rows:
            try:
                local_roles[str(r["locality_id"])] = LocalRole(r["role"])
            except ValueError:
                logger.warning("ignoring unknown local role %r for user %s", r.get("role"), user_id)

        try:
            role = Role(row.get("role") or Role.VIEWER.value)
        except ValueError:
            logger.warning("unknown role %r for user %s, treating as viewer", row.get("role"), user_id)
            role = Role.VIEWER

        global_role = None
        if row.get("global_role"):
            try:
                global_role = GlobalRole(row["global_role"])
            except ValueError:
                logger.warning("ignoring unknown global role %r for user %s", row.get("global_role"), user_id)

        return UserAccessProfile(
            user_id=str(row["id"]),
            role=role,
            global_role=global_role,
            local_roles=local_roles,
            accessible_locality_ids=_ids(locality_rows, "locality_id"),
            area_ids=_ids(area_rows, "area_id"),
            home_locality_id=row.get("home_locality_id"),
            main_district_id=row.get("main_district_id"),
            reporter_district_ids=_ids(reporter_rows, "district_id"),
        )

    def list_localities(self) -> Sequence[Locality]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, name, area_id, prefecture_id FROM localities ORDER BY name")
            return [
                Locality(
                    locality_id=str(r["id"]),
                    name=r.get("name") or "",
                    area_id=r.get("area_id"),
                    prefecture_id=r.get("prefecture_id"),
                )
                for r in fetchall(cur)
            ]

    def list_districts(self) -> Sequence[District]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, name, locality_id FROM districts ORDER BY name")
            return [
                District(district_id=str(r["id"]), name=r.get("name") or "", locality_id=str(r["locality_id"]))
                for r in fetchall(cur)
            ]

    def list_areas(self) -> Sequence[Area]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, name FROM areas ORDER BY name")
            return [Area(area_id=str(r["id"]), name=r.get("name") or "") for r in fetchall(cur)]

    def list_prefectures(self) -> Sequence[Prefecture]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, name, area_id FROM prefectures ORDER BY name")
            return [
                Prefecture(prefecture_id=str(r["id"]), name=r.get("name") or "", area_id=r.get("area_id"))
                for r in fetchall(cur)
            ]
