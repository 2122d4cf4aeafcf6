"""Persistence for custom bets and their participants.

Status changes go through ``transition_status``, a conditional UPDATE keyed on
the expected current status. A caller that loses a race sees ``ConflictError``
instead of overwriting the winner. The (bet, user) unique constraint on
participants is the second guard: each insert runs in its own savepoint, so a
duplicate rolls back only that row and surfaces as ``ConflictError``.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass

from sqlalchemy import or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from propduel.database import utcnow
from propduel.errors import ConflictError, NotFoundError, ValidationError
from propduel.models.custom_bet import CustomBet, CustomBetParticipant
from propduel.models.enums import BetStatus, Outcome, PickType
from propduel.services.outcomes import personal_outcome_or_pending
from propduel.utils.validation import coerce_line, coerce_pick_type, is_blank

ALLOWED_TRANSITIONS: dict[BetStatus, frozenset[BetStatus]] = {
    BetStatus.PENDING: frozenset({BetStatus.ACCEPTED, BetStatus.DECLINED}),
    # ACCEPTED -> ACCEPTED records a TBD roll
    BetStatus.ACCEPTED: frozenset({BetStatus.ACCEPTED, BetStatus.COMPLETED}),
    BetStatus.DECLINED: frozenset(),
    BetStatus.COMPLETED: frozenset(),
}


@dataclass
class UserBetView:
    bet: CustomBet
    is_creator: bool
    my_pick: PickType | None
    my_outcome: Outcome | None

    @property
    def creator_username(self) -> str:
        return self.bet.creator.username if self.bet.creator is not None else ""


def _with_participants(stmt):
    return stmt.options(
        selectinload(CustomBet.creator),
        selectinload(CustomBet.participants).selectinload(CustomBetParticipant.user),
    ).execution_options(populate_existing=True)


async def create_bet(
    session: AsyncSession,
    creator_id: uuid.UUID,
    player: object,
    stat: object,
    line: object,
    pick_type: object,
) -> CustomBet:
    if any(is_blank(v) for v in (player, stat, line, pick_type)):
        raise ValidationError("Player, stat, line, and pick type are required")
    if not isinstance(player, str) or not isinstance(stat, str):
        raise ValidationError("Player and stat must be text")
    pick = coerce_pick_type(pick_type)
    bet = CustomBet(
        creator_id=creator_id,
        player=player.strip(),
        stat=stat.strip(),
        line=coerce_line(line),
        creator_pick_type=pick.value,
        status=BetStatus.PENDING.value,
    )
    session.add(bet)
    await session.flush()
    await add_participant(session, bet.id, creator_id, pick)
    return bet


async def get_bet(session: AsyncSession, bet_id: uuid.UUID) -> CustomBet:
    bet = await session.scalar(_with_participants(select(CustomBet).where(CustomBet.id == bet_id)))
    if bet is None:
        raise NotFoundError("Bet not found")
    return bet


async def list_bets_for_user(session: AsyncSession, user_id: uuid.UUID) -> list[UserBetView]:
    joined = select(CustomBetParticipant.bet_id).where(CustomBetParticipant.user_id == user_id)
    bets = (
        await session.scalars(
            _with_participants(
                select(CustomBet)
                .where(or_(CustomBet.creator_id == user_id, CustomBet.id.in_(joined)))
                .order_by(CustomBet.created_at.desc())
            )
        )
    ).all()
    return [view_for_user(bet, user_id) for bet in bets]


def view_for_user(bet: CustomBet, user_id: uuid.UUID) -> UserBetView:
    is_creator = bet.creator_id == user_id
    mine = next((p for p in bet.participants if p.user_id == user_id), None)
    if mine is not None:
        my_pick = PickType(mine.pick_type)
        my_outcome = Outcome(mine.outcome) if mine.outcome else None
    elif is_creator:
        # legacy bets may lack the creator row; derive from the bet itself
        my_pick = PickType(bet.creator_pick_type)
        my_outcome = personal_outcome_or_pending(bet.outcome, my_pick)
    else:
        my_pick = my_outcome = None
    return UserBetView(bet=bet, is_creator=is_creator, my_pick=my_pick, my_outcome=my_outcome)


async def transition_status(
    session: AsyncSession,
    bet_id: uuid.UUID,
    from_status: BetStatus,
    to_status: BetStatus,
    outcome: Outcome | None = None,
) -> None:
    if to_status not in ALLOWED_TRANSITIONS[from_status]:
        raise ValidationError(f"Cannot move bet from {from_status.value} to {to_status.value}")

    values: dict = {"status": to_status.value, "updated_at": utcnow()}
    if outcome is not None:
        values["outcome"] = outcome.value
    result = await session.execute(
        update(CustomBet)
        .where(CustomBet.id == bet_id, CustomBet.status == from_status.value)
        .values(**values)
    )
    if result.rowcount != 1:
        raise ConflictError(f"Bet is no longer {from_status.value}")


async def get_participant(session: AsyncSession, bet_id: uuid.UUID, user_id: uuid.UUID) -> CustomBetParticipant | None:
    return await session.scalar(
        select(CustomBetParticipant).where(CustomBetParticipant.bet_id == bet_id, CustomBetParticipant.user_id == user_id)
    )


async def list_participants(session: AsyncSession, bet_id: uuid.UUID) -> list[CustomBetParticipant]:
    rows = await session.scalars(
        select(CustomBetParticipant)
        .where(CustomBetParticipant.bet_id == bet_id)
        .order_by(CustomBetParticipant.joined_at)
        .execution_options(populate_existing=True)
    )
    return list(rows.all())


async def add_participant(
    session: AsyncSession,
    bet_id: uuid.UUID,
    user_id: uuid.UUID,
    pick_type: PickType,
    outcome: Outcome | None = None,
) -> CustomBetParticipant:
    participant = CustomBetParticipant(
        bet_id=bet_id,
        user_id=user_id,
        pick_type=pick_type.value,
        outcome=outcome.value if outcome is not None else None,
    )
    try:
        async with session.begin_nested():
            session.add(participant)
    except IntegrityError as exc:
        raise ConflictError("User is already a participant in this bet") from exc
    return participant


async def set_participant_outcome(session: AsyncSession, participant_id: uuid.UUID, outcome: Outcome) -> None:
    await session.execute(
        update(CustomBetParticipant)
        .where(CustomBetParticipant.id == participant_id)
        .values(outcome=outcome.value)
    )
