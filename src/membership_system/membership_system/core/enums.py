from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Per-profile role used for district visibility and admin actions."""

    ADMIN = "admin"
    CO_ADMIN = "co_admin"
    REPORTER = "reporter"
    VIEWER = "viewer"


class GlobalRole(str, Enum):
    """Cross-locality role (profiles.global_role). None means local roles only."""

    ADMIN = "admin"
    NATIONAL_VIEWER = "national_viewer"
    REGIONAL_VIEWER = "regional_viewer"


class LocalRole(str, Enum):
    """Role granted inside a single locality."""

    LOCAL_ADMIN = "local_admin"
    LOCAL_REPORTER = "local_reporter"
    LOCAL_VIEWER = "local_viewer"


class WeekStart(str, Enum):
    """Week-start convention for bucketing dates into weeks."""

    SUNDAY = "sunday"
    MONDAY = "monday"

    @property
    def weekday(self) -> int:
        # date.weekday(): Monday == 0 ... Sunday == 6
        return 6 if self is WeekStart.SUNDAY else 0


class SourceKind(str, Enum):
    """The four independent attendance-like sources merged into the matrix."""

    PRAYER = "prayer"
    PRIMARY = "main"
    SECONDARY = "group"
    DISPATCH = "dispatch"


class MeetingType(str, Enum):
    PRIMARY = "main"
    SECONDARY = "group"


class DispatchType(str, Enum):
    MESSAGE = "message"
    PHONE = "phone"
    IN_PERSON = "in_person"


class MemberTier(str, Enum):
    """District list membership shown next to each matrix row."""

    REGULAR = "regular"
    SEMI = "semi"
    POOL = "pool"
