from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel


class CustomBetCreateRequest(BaseModel):
    player: Any = None
    stat: Any = None
    line: Any = None
    pick_type: Any = None


class ParticipantResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    username: str
    pick_type: str
    outcome: str | None
    joined_at: datetime


class CustomBetResponse(BaseModel):
    id: uuid.UUID
    creator_id: uuid.UUID
    creator_username: str
    player: str
    stat: str
    line: float
    creator_pick_type: str
    status: str
    outcome: str | None
    share_url: str
    participants: list[ParticipantResponse]
    created_at: datetime
    updated_at: datetime


class UserCustomBetResponse(CustomBetResponse):
    is_creator: bool
    my_pick: str | None
    my_outcome: str | None


class JoinBetResponse(BaseModel):
    message: str
    your_pick: str
    creator_pick: str
    outcome: str
    your_result: str
    bet: CustomBetResponse


class DeclineBetResponse(BaseModel):
    message: str
    bet: CustomBetResponse


class ResolveBetResponse(BaseModel):
    message: str
    outcome: str
    participants_count: int
    bet: CustomBetResponse


class RetrofitResponse(BaseModel):
    message: str
    scanned: int
    repaired: int
    skipped: int
