from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.api.deps.tenant import get_company_profile
from taskboard.db.session import get_db
from taskboard.models.user_profile import UserProfile
from taskboard.schemas.leaderboard import LeaderboardEntryOut, LeaderboardOut
from taskboard.services.leaderboard import get_leaderboard

router = APIRouter(prefix="/companies/{company_id}", tags=["leaderboard"])


@router.get("/leaderboard", response_model=LeaderboardOut)
async def leaderboard(
    company_id: str,
    db: AsyncSession = Depends(get_db),
    me: UserProfile = Depends(get_company_profile),
) -> LeaderboardOut:
    view = await get_leaderboard(db, company_id)
    return LeaderboardOut(
        company_id=company_id,
        entries=[LeaderboardEntryOut.model_validate(e) for e in view.entries],
        podium=[LeaderboardEntryOut.model_validate(e) for e in view.podium],
        my_rank=view.rank_of(me.uid),
    )
