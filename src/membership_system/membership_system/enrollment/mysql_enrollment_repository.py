from __future__ import annotations

from collections import defaultdict
from typing import Any, Dict, Optional, Sequence

from ..common.datetime_utils import coerce_date
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, in_clause
from .model import EnrollmentPeriod, Member
from .repository import MemberRepository


def _period_from_row(r: Dict[str, Any]) -> EnrollmentPeriod:
    return EnrollmentPeriod(
        member_id=str(r["member_id"]),
        period_no=int(r["period_no"]),
        join_date=coerce_date(r.get("join_date")),
        leave_date=coerce_date(r.get("leave_date")),
        is_uncertain=bool(r.get("is_uncertain")),
        memo=r.get("memo"),
    )


class MySQLMemberRepository(MemberRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_members(self, member_ids: Optional[Sequence[str]] = None) -> Sequence[Member]:
        if member_ids is not None and not member_ids:
            return []

        where = ""
        params: tuple = ()
        if member_ids is not None:
            where = f"WHERE m.id IN ({in_clause(member_ids)})"
            params = tuple(member_ids)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT m.id, m.name, m.district_id, m.group_id, d.locality_id, m.is_local,
                       m.local_member_join_date, m.local_member_leave_date
                FROM members m
                LEFT JOIN districts d ON d.id = m.district_id
                {where}
                ORDER BY m.name
                """,
                params,
            )
            member_rows = fetchall(cur)

            cur.execute(
                f"""
                SELECT p.member_id, p.period_no, p.join_date, p.leave_date, p.is_uncertain, p.memo
                FROM member_local_enrollment_periods p
                {where.replace("m.id", "p.member_id")}
                ORDER BY p.member_id, p.period_no
                """,
                params,
            )
            period_rows = fetchall(cur)

        periods_by_member: dict[str, list[EnrollmentPeriod]] = defaultdict(list)
        for r in period_rows:
            p = _period_from_row(r)
            periods_by_member[p.member_id].append(p)

        return [
            Member(
                member_id=str(r["id"]),
                name=r.get("name") or "",
                district_id=r.get("district_id"),
                group_id=r.get("group_id"),
                locality_id=r.get("locality_id"),
                is_local=bool(r.get("is_local")),
                local_member_join_date=coerce_date(r.get("local_member_join_date")),
                local_member_leave_date=coerce_date(r.get("local_member_leave_date")),
                enrollment_periods=tuple(periods_by_member.get(str(r["id"]), ())),
            )
            for r in member_rows
        ]

    def list_enrollment_periods(self) -> Sequence[EnrollmentPeriod]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT member_id, period_no, join_date, leave_date, is_uncertain, memo
                FROM member_local_enrollment_periods
                ORDER BY member_id, period_no
                """
            )
            return [_period_from_row(r) for r in fetchall(cur)]
