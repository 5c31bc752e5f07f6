from src.membership_system.membership_system.access.model import (
    Area,
    District,
    DistrictSource,
    Locality,
    Prefecture,
    ScopeSource,
    UserAccessProfile,
)
from src.membership_system.membership_system.access.service import AccessScopeService
from src.membership_system.membership_system.core.enums import GlobalRole, LocalRole, Role


class FakeAccessRepo:
    def __init__(self, profiles):
        self._profiles = {p.user_id: p for p in profiles}
        self.profile_reads = 0

    def get_profile(self, user_id):
        self.profile_reads += 1
        return self._profiles.get(user_id)

    def list_localities(self):
        return [
            Locality("L1", "Kobe", area_id="A1", prefecture_id="P1"),
            Locality("L2", "Akashi", area_id="A1", prefecture_id="P1"),
            Locality("L3", "Osaka", area_id="A2", prefecture_id="P2"),
        ]

    def list_districts(self):
        return [District("D1", "East", "L1"), District("D2", "West", "L1"), District("D3", "North", "L2")]

    def list_areas(self):
        return [Area("A1", "West"), Area("A2", "East")]

    def list_prefectures(self):
        return [Prefecture("P1", "Hyogo", "A1"), Prefecture("P2", "Osaka", "A2")]


def _service():
    return AccessScopeService(
        FakeAccessRepo(
            [
                UserAccessProfile(
                    user_id="viewer",
                    role=Role.VIEWER,
                    home_locality_id="L1",
                    main_district_id="D2",
                    accessible_locality_ids=frozenset({"L1", "L2"}),
                ),
                UserAccessProfile(
                    user_id="local-admin",
                    role=Role.VIEWER,
                    main_district_id="D1",
                    local_roles={"L1": LocalRole.LOCAL_ADMIN},
                ),
                UserAccessProfile(user_id="global", global_role=GlobalRole.ADMIN),
            ]
        )
    )


def test_viewer_defaults_to_home_and_main_district():
    ctx = _service().build_context("viewer")

    assert ctx.locality_id == "L1"
    assert ctx.locality.source == ScopeSource.PROFILE_HOME
    assert ctx.role == Role.VIEWER
    assert not ctx.can_see_all_districts
    assert [d.district_id for d in ctx.districts_in_scope] == ["D2"]
    assert ctx.district_id == "D2"


def test_viewer_requests_out_of_scope_values():
    ctx = _service().build_context("viewer", requested_locality_id="L3", requested_district_id="D1")

    assert ctx.locality_id == "L1"
    assert ctx.district_id == "D2"
    assert ctx.district.source == DistrictSource.DEFAULT


def test_local_admin_sees_all_districts_of_their_locality():
    ctx = _service().build_context("local-admin", requested_district_id="D2")

    assert ctx.locality_id == "L1"
    assert ctx.role == Role.ADMIN
    assert [d.district_id for d in ctx.districts_in_scope] == ["D1", "D2"]
    assert ctx.district_id == "D2"
    assert ctx.district.source == DistrictSource.EXPLICIT

    aggregate = _service().build_context("local-admin")
    assert aggregate.district_id == "__all__"
    assert aggregate.district.source == DistrictSource.ALL_DISTRICTS


def test_unknown_user_gets_empty_scope():
    ctx = _service().build_context("nobody", requested_locality_id="L1")

    assert ctx.locality_id is None
    assert ctx.locality.source == ScopeSource.NONE
    assert ctx.districts_in_scope == ()
    assert ctx.district_id is None


def test_current_role_ignores_local_roles():
    service = _service()

    assert service.current_role("local-admin") == Role.VIEWER
    assert service.current_role("global") == Role.ADMIN
    assert service.current_role("nobody") == Role.VIEWER


def test_locality_sections_only_cover_accessible_localities():
    service = _service()
    ctx = service.build_context("viewer")

    sections = service.locality_sections(ctx)

    assert [s.name for s in sections] == ["West"]
    assert [l.locality_id for l in sections[0].prefectures[0].localities] == ["L2", "L1"]
