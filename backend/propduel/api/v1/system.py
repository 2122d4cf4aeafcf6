from datetime import UTC, datetime

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from propduel.database import get_session
from propduel.models.custom_bet import CustomBet
from propduel.models.user import User

router = APIRouter(prefix="/system", tags=["system"])


@router.get("/health")
async def health(session: AsyncSession = Depends(get_session)) -> dict[str, str | int]:
    user_count = int((await session.scalar(select(func.count(User.id)))) or 0)
    bet_count = int((await session.scalar(select(func.count(CustomBet.id)))) or 0)
    return {
        "status": "ok",
        "timestamp": datetime.now(UTC).isoformat(),
        "user_count": user_count,
        "custom_bet_count": bet_count,
    }
