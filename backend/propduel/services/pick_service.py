from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from propduel.database import utcnow
from propduel.errors import ConflictError, NotFoundError, ValidationError
from propduel.models.enums import Outcome
from propduel.models.pick import Pick
from propduel.services import user_service
from propduel.services.outcomes import generate_outcome
from propduel.utils.validation import coerce_line, coerce_pick_type, is_blank

logger = logging.getLogger(__name__)


@dataclass
class PickResolution:
    pick: Pick
    outcome: Outcome


async def upsert_pick(
    session: AsyncSession,
    user_id: uuid.UUID,
    projection_id: object,
    pick_type: object,
    player_name: object,
    stat_type: object,
    line_score: object,
    player_image_url: str | None = None,
) -> tuple[Pick, bool]:
    if any(is_blank(v) for v in (projection_id, pick_type, player_name, stat_type, line_score)):
        raise ValidationError("All pick fields are required")
    if not all(isinstance(v, str) for v in (projection_id, player_name, stat_type)):
        raise ValidationError("Projection, player and stat must be text")
    pick_value = coerce_pick_type(pick_type).value
    line = coerce_line(line_score, "line score")

    try:
        pick = await session.scalar(select(Pick).where(Pick.user_id == user_id, Pick.projection_id == projection_id))
        created = pick is None
        if pick is None:
            pick = Pick(user_id=user_id, projection_id=projection_id, is_resolved=False)
            session.add(pick)
        elif pick.is_resolved:
            raise ValidationError("Pick is already resolved")
        pick.pick_type = pick_value
        pick.player_name = player_name.strip()
        pick.stat_type = stat_type.strip()
        pick.line_score = line
        pick.player_image_url = player_image_url
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    return pick, created


async def list_picks(session: AsyncSession, user_id: uuid.UUID) -> list[Pick]:
    rows = await session.scalars(select(Pick).where(Pick.user_id == user_id).order_by(Pick.created_at.desc()))
    return list(rows.all())


async def _settle(session: AsyncSession, pick: Pick, outcome: Outcome) -> bool:
    """Mark an unresolved pick decided; False when another request got there first."""
    result = await session.execute(
        update(Pick)
        .where(Pick.id == pick.id, Pick.is_resolved.is_(False))
        .values(outcome=outcome.value, is_resolved=True, resolved_at=utcnow())
    )
    if result.rowcount != 1:
        return False
    await user_service.record_result(session, pick.user_id, outcome)
    return True


async def resolve_pick(
    session: AsyncSession,
    pick_id: uuid.UUID,
    user_id: uuid.UUID,
    generate: Callable[[], Outcome] = generate_outcome,
) -> PickResolution:
    try:
        pick = await session.scalar(select(Pick).where(Pick.id == pick_id, Pick.user_id == user_id))
        if pick is None:
            raise NotFoundError("Pick not found")
        if pick.is_resolved:
            raise ValidationError("Pick is already resolved")

        outcome = generate()
        if outcome != Outcome.TBD and not await _settle(session, pick, outcome):
            raise ConflictError("Pick was resolved by another request")
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    await session.refresh(pick)
    logger.info("pick resolved: pick_id=%s user_id=%s outcome=%s", pick_id, user_id, outcome.value)
    return PickResolution(pick=pick, outcome=outcome)


async def resolve_all_picks(
    session: AsyncSession,
    user_id: uuid.UUID,
    generate: Callable[[], Outcome] = generate_outcome,
) -> dict[str, int]:
    wins = losses = pending = 0
    try:
        picks = (await session.scalars(select(Pick).where(Pick.user_id == user_id, Pick.is_resolved.is_(False)))).all()
        for pick in picks:
            outcome = generate()
            if outcome == Outcome.TBD:
                pending += 1
            elif await _settle(session, pick, outcome):
                if outcome == Outcome.WIN:
                    wins += 1
                else:
                    losses += 1
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info("picks resolved in bulk: user_id=%s wins=%s losses=%s pending=%s", user_id, wins, losses, pending)
    return {"resolved": wins + losses, "wins": wins, "losses": losses, "pending": pending}
