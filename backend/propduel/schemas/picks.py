import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel


class PickCreateRequest(BaseModel):
    projection_id: Any = None
    pick_type: Any = None
    player_name: Any = None
    stat_type: Any = None
    line_score: Any = None
    player_image_url: str | None = None


class PickResponse(BaseModel):
    id: uuid.UUID
    projection_id: str
    pick_type: str
    player_name: str
    player_image_url: str | None = None
    stat_type: str
    line_score: float
    outcome: str | None
    is_resolved: bool
    resolved_at: datetime | None = None
    created_at: datetime


class PickResolveResponse(BaseModel):
    message: str
    outcome: str
    pick: PickResponse


class ResolveAllResponse(BaseModel):
    message: str
    resolved: int
    wins: int
    losses: int
    pending: int
