"""Access scope resolution.

Pure functions: given a user's profile and the reference rows, decide which
single locality and district the request operates on. Inaccessible requested
values are replaced, never rejected.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Iterable, Optional, Sequence

from ..core.constants import ALL_DISTRICTS
from ..core.enums import GlobalRole, LocalRole, Role
from .model import (
    Area,
    AreaSection,
    District,
    DistrictDecision,
    DistrictSource,
    Locality,
    LocalityDecision,
    Prefecture,
    PrefectureSection,
    ScopeSource,
    UserAccessProfile,
)

logger = logging.getLogger(__name__)

OTHER_SECTION_NAME = "Other"

_LOCAL_ROLE_TO_ROLE = {
    LocalRole.LOCAL_ADMIN: Role.ADMIN,
    LocalRole.LOCAL_REPORTER: Role.REPORTER,
    LocalRole.LOCAL_VIEWER: Role.VIEWER,
}

_ALL_DISTRICT_ROLES = (Role.ADMIN, Role.CO_ADMIN, Role.REPORTER)


def _by_name(localities: Iterable[Locality]) -> list[Locality]:
    return sorted(localities, key=lambda l: (l.name, l.locality_id))


def accessible_localities(profile: UserAccessProfile, all_localities: Iterable[Locality]) -> list[Locality]:
    all_localities = list(all_localities)
    if profile.global_role in (GlobalRole.ADMIN, GlobalRole.NATIONAL_VIEWER):
        return _by_name(all_localities)

    allowed = set(profile.accessible_locality_ids) | set(profile.local_roles)
    if profile.global_role == GlobalRole.REGIONAL_VIEWER:
        return _by_name(l for l in all_localities if l.locality_id in allowed or l.area_id in profile.area_ids)
    return _by_name(l for l in all_localities if l.locality_id in allowed)


def home_locality_id(profile: UserAccessProfile, districts: Iterable[District]) -> Optional[str]:
    """Explicit home locality, else the locality of the main district."""

    if profile.home_locality_id:
        return profile.home_locality_id
    if profile.main_district_id:
        for d in districts:
            if d.district_id == profile.main_district_id:
                return d.locality_id
    return None


def effective_locality(
    profile: UserAccessProfile,
    accessible: Sequence[Locality],
    requested_locality_id: Optional[str],
    districts: Iterable[District] = (),
) -> LocalityDecision:
    ids = {l.locality_id for l in accessible}

    if requested_locality_id:
        if requested_locality_id in ids:
            return LocalityDecision(requested_locality_id, ScopeSource.EXPLICIT)
        logger.debug("requested locality %s not accessible for user %s", requested_locality_id, profile.user_id)

    home = home_locality_id(profile, districts)
    if home and home in ids:
        return LocalityDecision(home, ScopeSource.PROFILE_HOME)

    if accessible:
        return LocalityDecision(_by_name(accessible)[0].locality_id, ScopeSource.FIRST_ACCESSIBLE)
    return LocalityDecision(None, ScopeSource.NONE)


def effective_role(profile: UserAccessProfile, locality_id: Optional[str]) -> Role:
    if profile.global_role == GlobalRole.ADMIN:
        return Role.ADMIN
    local = profile.local_roles.get(locality_id) if locality_id else None
    if local is not None:
        return _LOCAL_ROLE_TO_ROLE[LocalRole(local)]
    return profile.role


def can_see_all_districts(role: Role) -> bool:
    return role in _ALL_DISTRICT_ROLES


def districts_in_scope(
    profile: UserAccessProfile,
    locality_id: Optional[str],
    districts: Iterable[District],
) -> list[District]:
    if not locality_id:
        return []

    in_locality = sorted(
        (d for d in districts if d.locality_id == locality_id),
        key=lambda d: (d.name, d.district_id),
    )
    if can_see_all_districts(effective_role(profile, locality_id)):
        return in_locality

    own = set(profile.reporter_district_ids)
    if profile.main_district_id:
        own.add(profile.main_district_id)
    return [d for d in in_locality if d.district_id in own]


def default_district_id(
    profile: UserAccessProfile,
    in_scope: Sequence[District],
    allow_all: bool,
) -> Optional[str]:
    if allow_all:
        return ALL_DISTRICTS
    ids = [d.district_id for d in in_scope]
    if profile.main_district_id in ids:
        return profile.main_district_id
    return ids[0] if ids else None


def effective_district(
    requested_district_id: Optional[str],
    in_scope: Sequence[District],
    default_id: Optional[str],
    allow_all: bool,
) -> DistrictDecision:
    if requested_district_id == ALL_DISTRICTS and allow_all:
        return DistrictDecision(ALL_DISTRICTS, DistrictSource.ALL_DISTRICTS)
    if requested_district_id and requested_district_id in {d.district_id for d in in_scope}:
        return DistrictDecision(requested_district_id, DistrictSource.EXPLICIT)

    if requested_district_id:
        logger.debug("requested district %s replaced by default", requested_district_id)
    if default_id == ALL_DISTRICTS:
        return DistrictDecision(ALL_DISTRICTS, DistrictSource.ALL_DISTRICTS)
    return DistrictDecision(default_id, DistrictSource.DEFAULT)


def group_localities_by_area(
    localities: Iterable[Locality],
    areas: Iterable[Area],
    prefectures: Iterable[Prefecture],
) -> list[AreaSection]:
    """Area -> prefecture -> locality sections, each level ordered by name.

    Localities without an area (or prefecture) land in a trailing "Other"
    section.
    """

    area_names = {a.area_id: a.name for a in areas}
    pref_by_id = {p.prefecture_id: p for p in prefectures}

    tree: dict = defaultdict(lambda: defaultdict(list))
    for loc in localities:
        pref = pref_by_id.get(loc.prefecture_id) if loc.prefecture_id else None
        area_id = loc.area_id or (pref.area_id if pref else None)
        if area_id not in area_names:
            area_id = None
        tree[area_id][pref.prefecture_id if pref else None].append(loc)

    def _section_order(key: Optional[str], names: dict):
        return (key is None, names.get(key, ""), key or "")

    pref_names = {pid: p.name for pid, p in pref_by_id.items()}
    sections = []
    for area_id in sorted(tree, key=lambda k: _section_order(k, area_names)):
        prefs = tree[area_id]
        sections.append(
            AreaSection(
                area_id=area_id,
                name=area_names.get(area_id, OTHER_SECTION_NAME),
                prefectures=tuple(
                    PrefectureSection(
                        prefecture_id=pid,
                        name=pref_names.get(pid, OTHER_SECTION_NAME),
                        localities=tuple(_by_name(prefs[pid])),
                    )
                    for pid in sorted(prefs, key=lambda k: _section_order(k, pref_names))
                ),
            )
        )
    return sections
