from __future__ import annotations

from ..model import IdentityDecision, MatchedBy, MeetingRecord
from .base import IdentityKeyStrategy


class PrimaryMeetingKeyStrategy(IdentityKeyStrategy):
    """Primary gatherings are identified by date + district, else date + locality.

    Only the meaningful scope takes part: a locality_id filled in on one copy
    but not the other must not split a duplicate pair.
    """

    def key_for(self, record: MeetingRecord) -> IdentityDecision:
        day = record.event_date.isoformat()
        if record.district_id:
            return IdentityDecision(key=f"{day}|{record.district_id}", matched_by=MatchedBy.BY_DISTRICT)
        if record.locality_id:
            return IdentityDecision(key=f"{day}|locality:{record.locality_id}", matched_by=MatchedBy.BY_LOCALITY)
        return IdentityDecision(key=f"{day}|locality:", matched_by=MatchedBy.UNSCOPED)
