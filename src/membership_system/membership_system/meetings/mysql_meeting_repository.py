from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..common.datetime_utils import coerce_date
from ..core.enums import MeetingType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, in_clause
from .model import AttendanceLink, MeetingRecord
from .repository import MeetingRepository


class MySQLMeetingRepository(MeetingRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_meetings(self, *, start: Optional[date] = None, end: Optional[date] = None) -> Sequence[MeetingRecord]:
        clauses = []
        params: list = []
        if start is not None:
            clauses.append("event_date >= %s")
            params.append(start)
        if end is not None:
            clauses.append("event_date <= %s")
            params.append(end)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT id, event_date, meeting_type, name, district_id, locality_id, group_id, created_at
                FROM meetings
                {where}
                ORDER BY event_date DESC, created_at ASC
                """,
                tuple(params),
            )
            rows = fetchall(cur)

        out = []
        for r in rows:
            event_date = coerce_date(r.get("event_date"))
            if event_date is None:
                continue
            out.append(
                MeetingRecord(
                    meeting_id=str(r["id"]),
                    event_date=event_date,
                    meeting_type=MeetingType(r["meeting_type"]),
                    district_id=r.get("district_id"),
                    locality_id=r.get("locality_id"),
                    group_id=r.get("group_id"),
                    created_at=r.get("created_at"),
                    name=r.get("name"),
                )
            )
        return out

    def list_attendance_links(self, *, meeting_ids: Sequence[str]) -> Sequence[AttendanceLink]:
        if not meeting_ids:
            return []

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT meeting_id, member_id FROM attendance_records WHERE meeting_id IN ({in_clause(meeting_ids)})",
                tuple(meeting_ids),
            )
            return [
                AttendanceLink(meeting_id=str(r["meeting_id"]), member_id=str(r["member_id"]))
                for r in fetchall(cur)
            ]

    def delete_meetings_with_attendance(self, *, meeting_ids: Sequence[str]) -> int:
        if not meeting_ids:
            return 0

        # Same cursor/connection: db_cursor commits both statements or rolls both back.
        with db_cursor(self._conn_factory) as (_, cur):
            params = tuple(meeting_ids)
            cur.execute(f"DELETE FROM attendance_records WHERE meeting_id IN ({in_clause(meeting_ids)})", params)
            cur.execute(f"DELETE FROM meetings WHERE id IN ({in_clause(meeting_ids)})", params)
            return int(cur.rowcount)
