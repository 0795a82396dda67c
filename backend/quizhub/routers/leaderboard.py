from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from .. import profiles
from ..database import get_session
from ..schemas import LeaderboardResponse

router = APIRouter(prefix="/leaderboard", tags=["leaderboard"])

DEFAULT_LIMIT = 10


@router.get("/top", response_model=LeaderboardResponse)
async def top_points(limit: int = Query(DEFAULT_LIMIT), session: AsyncSession = Depends(get_session)):
    """Profiles ranked by total points; limit <= 0 returns everyone"""
    ranked = await profiles.get_leaderboard(session, limit)
    return {"success": True, "leaderboard": ranked, "total": len(ranked)}


@router.get("/streaks", response_model=LeaderboardResponse)
async def top_streaks(limit: int = Query(DEFAULT_LIMIT), session: AsyncSession = Depends(get_session)):
    """Profiles ranked by current streak; limit <= 0 returns everyone"""
    ranked = await profiles.get_streak_leaderboard(session, limit)
    return {"success": True, "leaderboard": ranked, "total": len(ranked)}
