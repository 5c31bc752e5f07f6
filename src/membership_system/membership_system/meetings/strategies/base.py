from __future__ import annotations

from abc import ABC, abstractmethod

from ..model import IdentityDecision, MeetingRecord


class IdentityKeyStrategy(ABC):
    """Strategy Pattern: encapsulate how a meeting's identity key is built."""

    @abstractmethod
    def key_for(self, record: MeetingRecord) -> IdentityDecision:
        raise NotImplementedError
