from __future__ import annotations

from datetime import date
from typing import Protocol, Sequence

from ..core.enums import SourceKind
from .model import AttendanceEvent, DispatchRecord, DistrictListEntry


class AttendanceRepository(Protocol):
    def list_events(
        self,
        *,
        source: SourceKind,
        member_ids: Sequence[str],
        start: date,
        end: date,
    ) -> Sequence[AttendanceEvent]:
        """Attendance rows of one gathering source (PRIMARY, SECONDARY or PRAYER).

        start/end bound the meeting date (PRIMARY) or the week_start (others).
        """

        raise NotImplementedError

    def list_dispatch_records(self, *, member_ids: Sequence[str], start: date, end: date) -> Sequence[DispatchRecord]:
        raise NotImplementedError

    def list_district_entries(self, *, district_ids: Sequence[str]) -> Sequence[DistrictListEntry]:
        """Regular / semi-regular / pool list rows for the given districts."""

        raise NotImplementedError
