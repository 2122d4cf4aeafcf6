from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from propduel.api.deps import get_current_user
from propduel.database import get_session
from propduel.models.user import User
from propduel.schemas.users import UserCreateRequest, UserResponse
from propduel.services.user_service import get_or_create_user, get_user

router = APIRouter(prefix="/users", tags=["users"])


def _serialize_user(user: User) -> UserResponse:
    return UserResponse(id=user.id, username=user.username, wins=user.wins, losses=user.losses, created_at=user.created_at)


@router.post("", response_model=UserResponse, status_code=201)
async def register_user(
    request: UserCreateRequest,
    response: Response,
    session: AsyncSession = Depends(get_session),
) -> UserResponse:
    user, created = await get_or_create_user(session, request.username)
    if not created:
        response.status_code = 200
    return _serialize_user(user)


@router.get("/me", response_model=UserResponse)
async def me(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> UserResponse:
    return _serialize_user(await get_user(session, user.id))
