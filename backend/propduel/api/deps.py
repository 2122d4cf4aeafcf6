from __future__ import annotations

import uuid

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import APIKeyHeader
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from propduel.data_providers.prizepicks import PrizePicksClient
from propduel.database import get_session
from propduel.models.user import User
from propduel.services.bet_lifecycle import OutcomeSource
from propduel.services.outcomes import generate_outcome
from propduel.services.projection_cache import ProjectionCache

USER_ID_HEADER = APIKeyHeader(name="X-User-Id", auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "X-User-Id"},
    )


async def get_current_user(
    raw_user_id: str | None = Security(USER_ID_HEADER),
    session: AsyncSession = Depends(get_session),
) -> User:
    if not raw_user_id:
        raise _unauthorized("User not authenticated")
    try:
        user_id = uuid.UUID(raw_user_id)
    except ValueError:
        raise _unauthorized("Invalid user id") from None
    user = await session.scalar(select(User).where(User.id == user_id))
    if user is None:
        raise _unauthorized("User not authenticated")
    return user


def get_outcome_generator() -> OutcomeSource:
    return generate_outcome


def get_projection_cache(request: Request) -> ProjectionCache:
    return request.app.state.projection_cache


def get_projection_client(request: Request) -> PrizePicksClient:
    return request.app.state.projection_client
