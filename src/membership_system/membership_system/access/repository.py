from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Area, District, Locality, Prefecture, UserAccessProfile


class AccessRepository(Protocol):
    def get_profile(self, user_id: str) -> Optional[UserAccessProfile]:
        """Profile with its grants (localities, areas, local roles, reporter districts)."""

        raise NotImplementedError

    def list_localities(self) -> Sequence[Locality]:
        raise NotImplementedError

    def list_districts(self) -> Sequence[District]:
        raise NotImplementedError

    def list_areas(self) -> Sequence[Area]:
        raise NotImplementedError

    def list_prefectures(self) -> Sequence[Prefecture]:
        raise NotImplementedError
