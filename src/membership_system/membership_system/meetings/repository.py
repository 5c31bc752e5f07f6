from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import AttendanceLink, MeetingRecord


class MeetingRepository(Protocol):
    def list_meetings(self, *, start: Optional[date] = None, end: Optional[date] = None) -> Sequence[MeetingRecord]:
        """All meetings (unscoped), optionally bounded by event_date."""

        raise NotImplementedError

    def list_attendance_links(self, *, meeting_ids: Sequence[str]) -> Sequence[AttendanceLink]:
        raise NotImplementedError

    def delete_meetings_with_attendance(self, *, meeting_ids: Sequence[str]) -> int:
        """Delete the meetings and their attendance rows in one transaction.

        Returns the number of meetings deleted. All or nothing.
        """

        raise NotImplementedError
