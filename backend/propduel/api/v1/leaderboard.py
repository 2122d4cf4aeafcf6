from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from propduel.api.deps import get_current_user
from propduel.config import settings
from propduel.database import get_session
from propduel.models.user import User
from propduel.schemas.leaderboard import LeaderboardEntryResponse
from propduel.services.leaderboard_service import LeaderboardEntry, get_leaderboard, get_user_rank

router = APIRouter(prefix="/leaderboard", tags=["leaderboard"])


def _serialize_entry(entry: LeaderboardEntry) -> LeaderboardEntryResponse:
    return LeaderboardEntryResponse(
        id=entry.id,
        username=entry.username,
        wins=entry.wins,
        losses=entry.losses,
        total_picks=entry.total_picks,
        win_rate=entry.win_rate_pct,
        streak=entry.streak,
        rank=entry.rank,
    )


@router.get("", response_model=list[LeaderboardEntryResponse])
async def leaderboard(
    limit: int = Query(default=settings.leaderboard_default_limit, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    sort: str = Query(default="win_rate"),
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> list[LeaderboardEntryResponse]:
    entries = await get_leaderboard(session, limit=limit, offset=offset, sort=sort)
    return [_serialize_entry(e) for e in entries]


@router.get("/my-rank", response_model=LeaderboardEntryResponse)
async def my_rank(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> LeaderboardEntryResponse:
    return _serialize_entry(await get_user_rank(session, user.id))
