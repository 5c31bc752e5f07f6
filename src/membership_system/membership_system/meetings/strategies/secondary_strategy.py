from __future__ import annotations

from ..model import IdentityDecision, MatchedBy, MeetingRecord
from .base import IdentityKeyStrategy


class SecondaryMeetingKeyStrategy(IdentityKeyStrategy):
    """Small-group meetings: date + group."""

    def key_for(self, record: MeetingRecord) -> IdentityDecision:
        day = record.event_date.isoformat()
        if record.group_id:
            return IdentityDecision(key=f"{day}|{record.group_id}", matched_by=MatchedBy.BY_GROUP)
        return IdentityDecision(key=f"{day}|", matched_by=MatchedBy.UNSCOPED)
