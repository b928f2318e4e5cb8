from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel


class LeaderboardEntryOut(BaseModel):
    rank: int
    uid: str
    name: str
    total_earned: int

    model_config = {"from_attributes": True}


class LeaderboardOut(BaseModel):
    company_id: str
    entries: List[LeaderboardEntryOut]
    podium: List[LeaderboardEntryOut]
    my_rank: Optional[int] = None
