from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional

from ..core.enums import GlobalRole, LocalRole, Role


@dataclass(frozen=True)
class UserAccessProfile:
    """Everything the scope resolver needs to know about the current user.

    `local_roles` maps locality_id to the role granted inside that locality.
    `accessible_locality_ids` are the explicit grants (user_localities).
    """

    user_id: str
    role: Role = Role.VIEWER
    global_role: Optional[GlobalRole] = None
    local_roles: Mapping[str, LocalRole] = field(default_factory=dict)
    accessible_locality_ids: frozenset[str] = frozenset()
    area_ids: frozenset[str] = frozenset()
    home_locality_id: Optional[str] = None
    main_district_id: Optional[str] = None
    reporter_district_ids: frozenset[str] = frozenset()


@dataclass(frozen=True)
class Locality:
    locality_id: str
    name: str
    area_id: Optional[str] = None
    prefecture_id: Optional[str] = None


@dataclass(frozen=True)
class District:
    district_id: str
    name: str
    locality_id: str


@dataclass(frozen=True)
class Area:
    area_id: str
    name: str


@dataclass(frozen=True)
class Prefecture:
    prefecture_id: str
    name: str
    area_id: Optional[str] = None


class ScopeSource(str, Enum):
    EXPLICIT = "explicit"
    PROFILE_HOME = "profile_home"
    FIRST_ACCESSIBLE = "first_accessible"
    NONE = "none"


@dataclass(frozen=True)
class LocalityDecision:
    locality_id: Optional[str]
    source: ScopeSource


class DistrictSource(str, Enum):
    EXPLICIT = "explicit"
    ALL_DISTRICTS = "all_districts"
    DEFAULT = "default"


@dataclass(frozen=True)
class DistrictDecision:
    district_id: Optional[str]
    source: DistrictSource


@dataclass(frozen=True)
class PrefectureSection:
    prefecture_id: Optional[str]
    name: str
    localities: tuple[Locality, ...]


@dataclass(frozen=True)
class AreaSection:
    """One heading of the locality switcher: an area and its prefectures."""

    area_id: Optional[str]
    name: str
    prefectures: tuple[PrefectureSection, ...]


@dataclass(frozen=True)
class ScopeContext:
    """Resolved per-request scope, passed explicitly into later calls."""

    user_id: str
    role: Role
    locality: LocalityDecision
    district: DistrictDecision
    accessible_localities: tuple[Locality, ...]
    districts_in_scope: tuple[District, ...]

    @property
    def locality_id(self) -> Optional[str]:
        return self.locality.locality_id

    @property
    def district_id(self) -> Optional[str]:
        return self.district.district_id

    @property
    def can_see_all_districts(self) -> bool:
        return self.role in (Role.ADMIN, Role.CO_ADMIN, Role.REPORTER)
