from __future__ import annotations

from dataclasses import dataclass, field

from ..core.enums import MeetingType
from .strategies.base import IdentityKeyStrategy
from .strategies.primary_strategy import PrimaryMeetingKeyStrategy
from .strategies.secondary_strategy import SecondaryMeetingKeyStrategy


@dataclass
class IdentityKeyFactory:
    """Factory Pattern: choose the identity key strategy per meeting type."""

    primary: IdentityKeyStrategy = field(default_factory=PrimaryMeetingKeyStrategy)
    secondary: IdentityKeyStrategy = field(default_factory=SecondaryMeetingKeyStrategy)

    def for_meeting_type(self, meeting_type: MeetingType) -> IdentityKeyStrategy:
        if meeting_type == MeetingType.PRIMARY:
            return self.primary
        return self.secondary
