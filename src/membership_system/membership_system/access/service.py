from __future__ import annotations

import logging
from typing import Optional

from ..common.concurrency import fetch_all
from ..core.constants import DEFAULT_QUERY_TIMEOUT_SECONDS
from ..core.enums import Role
from . import resolver
from .model import AreaSection, ScopeContext, ScopeSource, UserAccessProfile
from .repository import AccessRepository

logger = logging.getLogger(__name__)


class AccessScopeService:
    """Use case: resolve the locality/district a request operates on.

    The profile and reference rows are read once, concurrently, and the
    resulting ScopeContext is handed to the caller. Nothing is cached here.
    """

    def __init__(self, access: AccessRepository, *, timeout: float = DEFAULT_QUERY_TIMEOUT_SECONDS):
        self._access = access
        self._timeout = float(timeout)

    def _load(self, user_id: str) -> dict:
        return fetch_all(
            {
                "profile": lambda: self._access.get_profile(user_id),
                "localities": self._access.list_localities,
                "districts": self._access.list_districts,
            },
            timeout=self._timeout,
        )

    def build_context(
        self,
        user_id: str,
        requested_locality_id: Optional[str] = None,
        requested_district_id: Optional[str] = None,
    ) -> ScopeContext:
        data = self._load(user_id)
        profile = data["profile"]
        if profile is None:
            # Unknown user: no grants, resolves to an empty scope.
            logger.info("no access profile for user %s", user_id)
            profile = UserAccessProfile(user_id=user_id)

        districts = list(data["districts"])
        accessible = resolver.accessible_localities(profile, data["localities"])
        locality = resolver.effective_locality(profile, accessible, requested_locality_id, districts)
        if requested_locality_id and locality.source != ScopeSource.EXPLICIT:
            logger.info("user %s: locality request substituted (%s)", user_id, locality.source.value)

        role = resolver.effective_role(profile, locality.locality_id)
        allow_all = resolver.can_see_all_districts(role)
        in_scope = resolver.districts_in_scope(profile, locality.locality_id, districts)
        default_id = resolver.default_district_id(profile, in_scope, allow_all)
        district = resolver.effective_district(requested_district_id, in_scope, default_id, allow_all)

        return ScopeContext(
            user_id=profile.user_id,
            role=role,
            locality=locality,
            district=district,
            accessible_localities=tuple(accessible),
            districts_in_scope=tuple(in_scope),
        )

    def current_role(self, user_id: str) -> Role:
        """Locality-independent role used for administrative actions."""

        profile = self._access.get_profile(user_id)
        if profile is None:
            return Role.VIEWER
        return resolver.effective_role(profile, None)

    def locality_sections(self, context: ScopeContext) -> list[AreaSection]:
        """Locality switcher sections for the localities the context may see."""

        data = fetch_all(
            {"areas": self._access.list_areas, "prefectures": self._access.list_prefectures},
            timeout=self._timeout,
        )
        return resolver.group_localities_by_area(context.accessible_localities, data["areas"], data["prefectures"])
