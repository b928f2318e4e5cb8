from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.core.ranking import RankedEntry, podium, rank_of, rank_profiles
from taskboard.crud.user_profile import list_non_manager_profiles

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class LeaderboardView:
    company_id: str
    entries: List[RankedEntry]

    @property
    def podium(self) -> List[RankedEntry]:
        return podium(self.entries)

    def rank_of(self, uid: str) -> Optional[int]:
        return rank_of(self.entries, uid)


class LeaderboardCache:
    """
    Per-tenant ranking, recomputed from scratch after invalidation.
    Anything that changes points (or who is ranked) must invalidate.

    Every invalidation bumps the tenant's generation. A view computed from a
    read that started before the bump is discarded instead of cached.
    """

    def __init__(self) -> None:
        self._views: Dict[str, LeaderboardView] = {}
        self._generations: Dict[str, int] = {}

    def get(self, company_id: str) -> Optional[LeaderboardView]:
        return self._views.get(company_id)

    def generation(self, company_id: str) -> int:
        return self._generations.get(company_id, 0)

    def put(self, view: LeaderboardView, generation: Optional[int] = None) -> bool:
        if generation is not None and generation != self.generation(view.company_id):
            log.debug("leaderboard_stale_view_dropped", company_id=view.company_id)
            return False
        self._views[view.company_id] = view
        return True

    def invalidate(self, company_id: str) -> None:
        self._generations[company_id] = self.generation(company_id) + 1
        if self._views.pop(company_id, None) is not None:
            log.debug("leaderboard_invalidated", company_id=company_id)

    def clear(self) -> None:
        self._views.clear()
        self._generations.clear()


leaderboard_cache = LeaderboardCache()


async def get_leaderboard(db: AsyncSession, company_id: str) -> LeaderboardView:
    view = leaderboard_cache.get(company_id)
    if view is None:
        generation = leaderboard_cache.generation(company_id)
        profiles = await list_non_manager_profiles(db, company_id)
        view = LeaderboardView(company_id=company_id, entries=rank_profiles(profiles))
        leaderboard_cache.put(view, generation)
    return view
