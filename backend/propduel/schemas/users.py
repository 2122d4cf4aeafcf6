import uuid
from datetime import datetime

from pydantic import BaseModel


class UserCreateRequest(BaseModel):
    username: str


class UserResponse(BaseModel):
    id: uuid.UUID
    username: str
    wins: int
    losses: int
    created_at: datetime
