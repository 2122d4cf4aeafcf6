"""Custom bet lifecycle: create, join, decline, resolve, retrofit.

Each public function is one transaction. Joining resolves the bet in the same
request: the PENDING -> ACCEPTED conditional update admits exactly one joiner,
then the outcome is rolled and applied to both participants before commit.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from propduel.errors import AuthorizationError, ConflictError, ValidationError
from propduel.models.custom_bet import CustomBet, CustomBetParticipant
from propduel.models.enums import BetStatus, Outcome, PickType
from propduel.services import bet_store, user_service
from propduel.services.outcomes import derive_personal_outcome, generate_outcome, opposite_pick, personal_outcome_or_pending

logger = logging.getLogger(__name__)

OutcomeSource = Callable[[], Outcome]

RESOLVABLE_STATUSES = (BetStatus.ACCEPTED.value, BetStatus.COMPLETED.value)


@dataclass
class JoinResult:
    bet: CustomBet
    your_pick: PickType
    creator_pick: PickType
    outcome: Outcome
    your_result: Outcome


@dataclass
class ResolveResult:
    bet: CustomBet
    outcome: Outcome
    participants_count: int


@dataclass
class RetrofitReport:
    scanned: int
    repaired: int

    @property
    def skipped(self) -> int:
        return self.scanned - self.repaired


@asynccontextmanager
async def _transaction(session: AsyncSession) -> AsyncIterator[None]:
    try:
        yield
        await session.commit()
    except Exception:
        await session.rollback()
        raise


async def create_custom_bet(
    session: AsyncSession,
    creator_id: uuid.UUID,
    player: object,
    stat: object,
    line: object,
    pick_type: object,
) -> CustomBet:
    async with _transaction(session):
        bet = await bet_store.create_bet(session, creator_id, player, stat, line, pick_type)
    logger.info(
        "custom bet created: bet_id=%s creator_id=%s player=%s stat=%s line=%s pick=%s",
        bet.id,
        creator_id,
        bet.player,
        bet.stat,
        bet.line,
        bet.creator_pick_type,
    )
    return await bet_store.get_bet(session, bet.id)


async def _ensure_creator_participant(session: AsyncSession, bet: CustomBet) -> None:
    if await bet_store.get_participant(session, bet.id, bet.creator_id) is not None:
        return
    logger.info("back-filling creator participant: bet_id=%s creator_id=%s", bet.id, bet.creator_id)
    await bet_store.add_participant(session, bet.id, bet.creator_id, PickType(bet.creator_pick_type))


def _check_head_to_head(bet_id: uuid.UUID, participants: list[CustomBetParticipant]) -> None:
    picks = {p.pick_type for p in participants}
    if len(participants) != 2 or picks != {PickType.OVER.value, PickType.UNDER.value}:
        raise ConflictError(f"Bet {bet_id} does not have exactly two opposing participants")


async def apply_outcome(session: AsyncSession, bet_id: uuid.UUID, outcome: Outcome) -> list[CustomBetParticipant]:
    """Record ``outcome`` on an ACCEPTED bet and on both of its participants.

    TBD keeps the bet ACCEPTED and leaves every user's record untouched. WIN
    (OVER correct) or LOSS (UNDER correct) completes the bet and adds exactly
    one win or loss to each participant.
    """
    participants = await bet_store.list_participants(session, bet_id)
    _check_head_to_head(bet_id, participants)

    if outcome == Outcome.TBD:
        await bet_store.transition_status(session, bet_id, BetStatus.ACCEPTED, BetStatus.ACCEPTED, outcome=Outcome.TBD)
        for participant in participants:
            await bet_store.set_participant_outcome(session, participant.id, Outcome.TBD)
        return participants

    await bet_store.transition_status(session, bet_id, BetStatus.ACCEPTED, BetStatus.COMPLETED, outcome=outcome)
    for participant in participants:
        personal = derive_personal_outcome(outcome, participant.pick_type)
        await bet_store.set_participant_outcome(session, participant.id, personal)
        await user_service.record_result(session, participant.user_id, personal)
    return participants


async def join_bet(
    session: AsyncSession,
    bet_id: uuid.UUID,
    user_id: uuid.UUID,
    generate: OutcomeSource = generate_outcome,
) -> JoinResult:
    async with _transaction(session):
        bet = await bet_store.get_bet(session, bet_id)
        if bet.creator_id != user_id and await bet_store.get_participant(session, bet_id, user_id) is not None:
            raise ConflictError("You have already joined this bet")
        if bet.status != BetStatus.PENDING.value:
            raise ValidationError("Bet is no longer available to join")
        if bet.creator_id == user_id:
            raise AuthorizationError("Cannot join your own bet")

        creator_pick = PickType(bet.creator_pick_type)
        joiner_pick = opposite_pick(creator_pick)

        await bet_store.transition_status(session, bet_id, BetStatus.PENDING, BetStatus.ACCEPTED)
        await _ensure_creator_participant(session, bet)
        await bet_store.add_participant(session, bet_id, user_id, joiner_pick)

        outcome = generate()
        await apply_outcome(session, bet_id, outcome)

    logger.info("custom bet joined: bet_id=%s user_id=%s pick=%s outcome=%s", bet_id, user_id, joiner_pick.value, outcome.value)
    return JoinResult(
        bet=await bet_store.get_bet(session, bet_id),
        your_pick=joiner_pick,
        creator_pick=creator_pick,
        outcome=outcome,
        your_result=personal_outcome_or_pending(outcome, joiner_pick),
    )


async def decline_bet(session: AsyncSession, bet_id: uuid.UUID, user_id: uuid.UUID) -> CustomBet:
    async with _transaction(session):
        bet = await bet_store.get_bet(session, bet_id)
        if bet.status != BetStatus.PENDING.value:
            raise ValidationError("Bet is no longer pending")
        await bet_store.transition_status(session, bet_id, BetStatus.PENDING, BetStatus.DECLINED)
    logger.info("custom bet declined: bet_id=%s user_id=%s", bet_id, user_id)
    return await bet_store.get_bet(session, bet_id)


async def resolve_bet(
    session: AsyncSession,
    bet_id: uuid.UUID,
    user_id: uuid.UUID,
    generate: OutcomeSource = generate_outcome,
) -> ResolveResult:
    async with _transaction(session):
        bet = await bet_store.get_bet(session, bet_id)
        if bet.creator_id != user_id and all(p.user_id != user_id for p in bet.participants):
            raise AuthorizationError("Only the creator or a participant can resolve this bet")
        if bet.status != BetStatus.ACCEPTED.value:
            raise ValidationError("Bet must be accepted to resolve")

        await _ensure_creator_participant(session, bet)
        outcome = generate()
        participants = await apply_outcome(session, bet_id, outcome)

    logger.info("custom bet resolved: bet_id=%s outcome=%s participants=%s", bet_id, outcome.value, len(participants))
    return ResolveResult(
        bet=await bet_store.get_bet(session, bet_id),
        outcome=outcome,
        participants_count=len(participants),
    )


async def retrofit_creator_participants(session: AsyncSession) -> RetrofitReport:
    """Add the missing creator participant row to legacy accepted/completed bets.

    The creator's personal outcome is back-derived from the stored bet outcome.
    Bets that already have the row are skipped, so running this twice is a no-op
    the second time.
    """
    has_creator_row = (
        select(CustomBetParticipant.id)
        .where(CustomBetParticipant.bet_id == CustomBet.id, CustomBetParticipant.user_id == CustomBet.creator_id)
        .exists()
    )
    async with _transaction(session):
        scanned = int(
            await session.scalar(select(func.count(CustomBet.id)).where(CustomBet.status.in_(RESOLVABLE_STATUSES))) or 0
        )
        bets = (
            await session.scalars(select(CustomBet).where(CustomBet.status.in_(RESOLVABLE_STATUSES), ~has_creator_row))
        ).all()
        logger.info("retrofit scan: accepted_or_completed=%s missing_creator_row=%s", scanned, len(bets))
        repaired = 0
        for bet in bets:
            bet_id = bet.id
            pick = PickType(bet.creator_pick_type)
            try:
                await bet_store.add_participant(
                    session, bet_id, bet.creator_id, pick, outcome=personal_outcome_or_pending(bet.outcome, pick)
                )
            except ConflictError:
                # back-filled by a concurrent join or resolve since the scan
                logger.info("retrofit skipped bet: bet_id=%s reason=creator_row_exists", bet_id)
                continue
            repaired += 1

    report = RetrofitReport(scanned=scanned, repaired=repaired)
    logger.info("retrofit complete: repaired=%s skipped=%s", report.repaired, report.skipped)
    return report
