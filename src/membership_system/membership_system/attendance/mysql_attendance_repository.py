from __future__ import annotations

from datetime import date
from typing import Sequence

from ..common.datetime_utils import coerce_date
from ..core.enums import DispatchType, MemberTier, SourceKind
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, in_clause
from .model import AttendanceEvent, DispatchRecord, DistrictListEntry
from .repository import AttendanceRepository

# source -> (SELECT ... FROM ... JOIN ..., date column used for the range)
_SOURCE_QUERIES = {
    SourceKind.PRIMARY: (
        """
        SELECT a.member_id, m.event_date AS event_date, NULL AS week_start,
               a.attended, a.memo, a.updated_at
        FROM attendance_records a
        JOIN meetings m ON m.id = a.meeting_id
        WHERE m.meeting_type = 'main'
        """,
        "m.event_date",
    ),
    SourceKind.SECONDARY: (
        """
        SELECT a.member_id, NULL AS event_date, r.week_start AS week_start,
               a.attended, a.memo, a.updated_at
        FROM group_meeting_attendance a
        JOIN group_meeting_records r ON r.id = a.group_meeting_record_id
        WHERE 1=1
        """,
        "r.week_start",
    ),
    SourceKind.PRAYER: (
        """
        SELECT a.member_id, NULL AS event_date, r.week_start AS week_start,
               a.attended, a.memo, a.updated_at
        FROM prayer_meeting_attendance a
        JOIN prayer_meeting_records r ON r.id = a.prayer_meeting_record_id
        WHERE 1=1
        """,
        "r.week_start",
    ),
}

_TIER_TABLES = {
    MemberTier.REGULAR: "district_regular_list",
    MemberTier.SEMI: "district_semi_regular_list",
    MemberTier.POOL: "district_pool_list",
}


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_events(
        self,
        *,
        source: SourceKind,
        member_ids: Sequence[str],
        start: date,
        end: date,
    ) -> Sequence[AttendanceEvent]:
        if source not in _SOURCE_QUERIES:
            raise ValueError(f"Unsupported attendance source: {source!r}")
        if not member_ids:
            return []

        base_sql, date_col = _SOURCE_QUERIES[source]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                {base_sql}
                  AND a.member_id IN ({in_clause(member_ids)})
                  AND {date_col} BETWEEN %s AND %s
                """,
                (*member_ids, start, end),
            )
            rows = fetchall(cur)

        return [
            AttendanceEvent(
                member_id=str(r["member_id"]),
                source=source,
                event_date=coerce_date(r.get("event_date")),
                week_start=coerce_date(r.get("week_start")),
                # NULL attended means "recorded", same as the reporting screens
                attended=r.get("attended") is None or bool(r.get("attended")),
                memo=r.get("memo"),
                updated_at=r.get("updated_at"),
            )
            for r in rows
        ]

    def list_dispatch_records(self, *, member_ids: Sequence[str], start: date, end: date) -> Sequence[DispatchRecord]:
        if not member_ids:
            return []

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT member_id, week_start, dispatch_type, dispatch_date, dispatch_memo, visitor_ids, updated_at
                FROM organic_dispatch_records
                WHERE member_id IN ({in_clause(member_ids)})
                  AND week_start BETWEEN %s AND %s
                """,
                (*member_ids, start, end),
            )
            rows = fetchall(cur)

        out = []
        for r in rows:
            raw_type = r.get("dispatch_type")
            try:
                dispatch_type = DispatchType(raw_type) if raw_type else None
            except ValueError:
                dispatch_type = None
            visitors = r.get("visitor_ids") or ""
            out.append(
                DispatchRecord(
                    member_id=str(r["member_id"]),
                    week_start=coerce_date(r.get("week_start")),
                    dispatch_type=dispatch_type,
                    dispatch_date=coerce_date(r.get("dispatch_date")),
                    memo=r.get("dispatch_memo"),
                    visitor_ids=tuple(v for v in str(visitors).split(",") if v),
                    updated_at=r.get("updated_at"),
                )
            )
        return out

    def list_district_entries(self, *, district_ids: Sequence[str]) -> Sequence[DistrictListEntry]:
        if not district_ids:
            return []

        out: list[DistrictListEntry] = []
        with db_cursor(self._conn_factory) as (_, cur):
            for tier, table in _TIER_TABLES.items():
                cur.execute(
                    f"SELECT district_id, member_id FROM {table} WHERE district_id IN ({in_clause(district_ids)})",
                    tuple(district_ids),
                )
                out.extend(
                    DistrictListEntry(district_id=str(r["district_id"]), member_id=str(r["member_id"]), tier=tier)
                    for r in fetchall(cur)
                )
        return out
