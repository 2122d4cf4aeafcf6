import uuid

from pydantic import BaseModel


class LeaderboardEntryResponse(BaseModel):
    id: uuid.UUID
    username: str
    wins: int
    losses: int
    total_picks: int
    win_rate: float
    streak: int
    rank: int
