from src.membership_system.membership_system.access.model import (
    Area,
    District,
    DistrictSource,
    Locality,
    Prefecture,
    ScopeSource,
    UserAccessProfile,
)
from src.membership_system.membership_system.access.resolver import (
    accessible_localities,
    default_district_id,
    districts_in_scope,
    effective_district,
    effective_locality,
    effective_role,
    group_localities_by_area,
)
from src.membership_system.membership_system.core.enums import GlobalRole, LocalRole, Role

LOCALITIES = [
    Locality("L1", "Kobe", area_id="A1", prefecture_id="P1"),
    Locality("L2", "Akashi", area_id="A1", prefecture_id="P1"),
    Locality("L3", "Osaka", area_id="A2", prefecture_id="P2"),
    Locality("L4", "Nara", prefecture_id="P3"),
]

DISTRICTS = [
    District("D1", "East", "L1"),
    District("D2", "West", "L1"),
    District("D3", "North", "L2"),
]


def test_home_locality_precedes_first_accessible():
    profile = UserAccessProfile(user_id="u1", home_locality_id="L1", accessible_locality_ids=frozenset({"L1", "L2"}))
    accessible = accessible_localities(profile, LOCALITIES)

    decision = effective_locality(profile, accessible, None, DISTRICTS)

    assert decision.locality_id == "L1"
    assert decision.source == ScopeSource.PROFILE_HOME


def test_explicit_request_overrides_home():
    profile = UserAccessProfile(user_id="u1", home_locality_id="L1", accessible_locality_ids=frozenset({"L1", "L2"}))
    accessible = accessible_localities(profile, LOCALITIES)

    decision = effective_locality(profile, accessible, "L2", DISTRICTS)

    assert decision.locality_id == "L2"
    assert decision.source == ScopeSource.EXPLICIT


def test_inaccessible_request_is_replaced_silently():
    profile = UserAccessProfile(user_id="u1", home_locality_id="L1", accessible_locality_ids=frozenset({"L1", "L2"}))
    accessible = accessible_localities(profile, LOCALITIES)

    decision = effective_locality(profile, accessible, "L3", DISTRICTS)

    assert decision.locality_id == "L1"
    assert decision.source == ScopeSource.PROFILE_HOME


def test_home_falls_back_to_main_district_locality_then_first_by_name():
    via_district = UserAccessProfile(user_id="u1", main_district_id="D3", accessible_locality_ids=frozenset({"L1", "L2"}))
    decision = effective_locality(via_district, accessible_localities(via_district, LOCALITIES), None, DISTRICTS)
    assert (decision.locality_id, decision.source) == ("L2", ScopeSource.PROFILE_HOME)

    no_home = UserAccessProfile(user_id="u2", accessible_locality_ids=frozenset({"L1", "L2"}))
    decision = effective_locality(no_home, accessible_localities(no_home, LOCALITIES), None, DISTRICTS)
    # Akashi sorts before Kobe
    assert (decision.locality_id, decision.source) == ("L2", ScopeSource.FIRST_ACCESSIBLE)

    nothing = UserAccessProfile(user_id="u3")
    decision = effective_locality(nothing, accessible_localities(nothing, LOCALITIES), "L1", DISTRICTS)
    assert (decision.locality_id, decision.source) == (None, ScopeSource.NONE)


def test_accessible_localities_by_global_role():
    national = UserAccessProfile(user_id="u", global_role=GlobalRole.NATIONAL_VIEWER)
    assert [l.locality_id for l in accessible_localities(national, LOCALITIES)] == ["L2", "L1", "L4", "L3"]

    regional = UserAccessProfile(user_id="u", global_role=GlobalRole.REGIONAL_VIEWER, area_ids=frozenset({"A2"}))
    assert [l.locality_id for l in accessible_localities(regional, LOCALITIES)] == ["L3"]

    local = UserAccessProfile(user_id="u", local_roles={"L4": LocalRole.LOCAL_VIEWER})
    assert [l.locality_id for l in accessible_localities(local, LOCALITIES)] == ["L4"]


def test_effective_role():
    profile = UserAccessProfile(
        user_id="u",
        role=Role.VIEWER,
        local_roles={"L1": LocalRole.LOCAL_ADMIN, "L2": LocalRole.LOCAL_REPORTER},
    )
    assert effective_role(profile, "L1") == Role.ADMIN
    assert effective_role(profile, "L2") == Role.REPORTER
    assert effective_role(profile, "L3") == Role.VIEWER
    assert effective_role(profile, None) == Role.VIEWER

    global_admin = UserAccessProfile(user_id="g", role=Role.VIEWER, global_role=GlobalRole.ADMIN)
    assert effective_role(global_admin, None) == Role.ADMIN


def test_districts_in_scope_by_role():
    reporter = UserAccessProfile(user_id="u", role=Role.REPORTER)
    assert [d.district_id for d in districts_in_scope(reporter, "L1", DISTRICTS)] == ["D1", "D2"]

    viewer = UserAccessProfile(user_id="u", role=Role.VIEWER, main_district_id="D2", reporter_district_ids=frozenset({"D3"}))
    assert [d.district_id for d in districts_in_scope(viewer, "L1", DISTRICTS)] == ["D2"]
    assert [d.district_id for d in districts_in_scope(viewer, "L2", DISTRICTS)] == ["D3"]
    assert districts_in_scope(viewer, None, DISTRICTS) == []


def test_default_district():
    viewer = UserAccessProfile(user_id="u", main_district_id="D2")
    in_scope = [DISTRICTS[0], DISTRICTS[1]]

    assert default_district_id(viewer, in_scope, allow_all=True) == "__all__"
    assert default_district_id(viewer, in_scope, allow_all=False) == "D2"
    assert default_district_id(UserAccessProfile(user_id="x"), in_scope, allow_all=False) == "D1"
    assert default_district_id(viewer, [], allow_all=False) is None


def test_effective_district():
    in_scope = [DISTRICTS[0], DISTRICTS[1]]

    explicit = effective_district("D2", in_scope, "D1", allow_all=False)
    assert (explicit.district_id, explicit.source) == ("D2", DistrictSource.EXPLICIT)

    replaced = effective_district("D3", in_scope, "D1", allow_all=False)
    assert (replaced.district_id, replaced.source) == ("D1", DistrictSource.DEFAULT)

    aggregate = effective_district("__all__", in_scope, "D1", allow_all=True)
    assert (aggregate.district_id, aggregate.source) == ("__all__", DistrictSource.ALL_DISTRICTS)

    not_allowed = effective_district("__all__", in_scope, "D1", allow_all=False)
    assert (not_allowed.district_id, not_allowed.source) == ("D1", DistrictSource.DEFAULT)

    default_all = effective_district(None, in_scope, "__all__", allow_all=True)
    assert default_all.source == DistrictSource.ALL_DISTRICTS


def test_group_localities_by_area():
    areas = [Area("A1", "Kinki West"), Area("A2", "Kinki East")]
    prefectures = [Prefecture("P1", "Hyogo", "A1"), Prefecture("P2", "Osaka", "A2"), Prefecture("P3", "Nara")]

    sections = group_localities_by_area(LOCALITIES, areas, prefectures)

    assert [s.name for s in sections] == ["Kinki East", "Kinki West", "Other"]
    west = sections[1]
    assert [p.name for p in west.prefectures] == ["Hyogo"]
    assert [l.locality_id for l in west.prefectures[0].localities] == ["L2", "L1"]
    other = sections[2]
    assert other.area_id is None
    assert [p.name for p in other.prefectures] == ["Nara"]
