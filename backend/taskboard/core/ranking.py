from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

from taskboard.core.roles import Presence

PODIUM_SIZE = 3

_PRESENCE_SCORE = {
    Presence.AVAILABLE.value: 3,
    Presence.BUSY.value: 2,
}


@dataclass(frozen=True)
class RankedEntry:
    rank: int
    uid: str
    name: str
    total_earned: int


def points_of(profile: Any) -> int:
    return int(getattr(profile, "points_total_earned", None) or 0)


def rank_profiles(profiles: Sequence[Any]) -> List[RankedEntry]:
    """
    Stable descending sort by total points; equal scores keep fetch order.
    rank = 1 + number of profiles with strictly more points.
    """
    ordered = sorted(profiles, key=points_of, reverse=True)
    out: List[RankedEntry] = []
    for profile in ordered:
        pts = points_of(profile)
        rank = 1 + sum(1 for other in ordered if points_of(other) > pts)
        out.append(RankedEntry(rank=rank, uid=profile.uid, name=profile.name, total_earned=pts))
    return out


def podium(entries: Sequence[RankedEntry]) -> List[RankedEntry]:
    return list(entries[:PODIUM_SIZE])


def rank_of(entries: Sequence[RankedEntry], uid: str) -> Optional[int]:
    for entry in entries:
        if entry.uid == uid:
            return entry.rank
    return None


def presence_score(presence: str | None) -> int:
    return _PRESENCE_SCORE.get(presence or "", 1)


def sort_roster(profiles: Sequence[Any]) -> List[Any]:
    # available first, then busy, then everyone else
    return sorted(profiles, key=lambda p: presence_score(getattr(p, "presence", None)), reverse=True)
