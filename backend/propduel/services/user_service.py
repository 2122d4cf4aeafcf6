from __future__ import annotations

import logging
import uuid

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from propduel.database import utcnow
from propduel.errors import NotFoundError, ValidationError
from propduel.models.enums import Outcome
from propduel.models.user import User

logger = logging.getLogger(__name__)

MAX_USERNAME_LENGTH = 50


async def get_user(session: AsyncSession, user_id: uuid.UUID) -> User:
    user = await session.scalar(select(User).where(User.id == user_id).execution_options(populate_existing=True))
    if user is None:
        raise NotFoundError("User not found")
    return user


async def get_or_create_user(session: AsyncSession, username: object) -> tuple[User, bool]:
    if not isinstance(username, str) or not username.strip():
        raise ValidationError("Username is required")
    username = username.strip()
    if len(username) > MAX_USERNAME_LENGTH:
        raise ValidationError(f"Username must be at most {MAX_USERNAME_LENGTH} characters")

    existing = await session.scalar(select(User).where(User.username == username))
    if existing is not None:
        return existing, False

    user = User(username=username, wins=0, losses=0)
    session.add(user)
    try:
        await session.commit()
    except IntegrityError:
        # another request registered the same name first
        await session.rollback()
        existing = await session.scalar(select(User).where(User.username == username))
        if existing is None:
            raise
        return existing, False
    logger.info("user created: user_id=%s username=%s", user.id, username)
    return user, True


async def record_result(session: AsyncSession, user_id: uuid.UUID, outcome: Outcome) -> None:
    if outcome == Outcome.WIN:
        values = {"wins": User.wins + 1}
    elif outcome == Outcome.LOSS:
        values = {"losses": User.losses + 1}
    else:
        raise ValueError(f"cannot record a {outcome.value} result")
    values["updated_at"] = utcnow()
    result = await session.execute(
        update(User).where(User.id == user_id).values(**values).execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise NotFoundError("User not found")
