from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from propduel.api.deps import get_current_user, get_outcome_generator
from propduel.config import share_url_for
from propduel.database import get_session
from propduel.models.custom_bet import CustomBet
from propduel.models.enums import Outcome
from propduel.models.user import User
from propduel.schemas.custom_bets import (
    CustomBetCreateRequest,
    CustomBetResponse,
    DeclineBetResponse,
    JoinBetResponse,
    ParticipantResponse,
    ResolveBetResponse,
    RetrofitResponse,
    UserCustomBetResponse,
)
from propduel.services import bet_lifecycle, bet_store
from propduel.services.bet_lifecycle import OutcomeSource

router = APIRouter(prefix="/custom-bets", tags=["custom-bets"])


def _serialize_bet(bet: CustomBet) -> CustomBetResponse:
    return CustomBetResponse(
        id=bet.id,
        creator_id=bet.creator_id,
        creator_username=bet.creator.username if bet.creator else "",
        player=bet.player,
        stat=bet.stat,
        line=bet.line,
        creator_pick_type=bet.creator_pick_type,
        status=bet.status,
        outcome=bet.outcome,
        share_url=share_url_for(bet.id),
        participants=[
            ParticipantResponse(
                id=p.id,
                user_id=p.user_id,
                username=p.user.username if p.user else "",
                pick_type=p.pick_type,
                outcome=p.outcome,
                joined_at=p.joined_at,
            )
            for p in bet.participants
        ],
        created_at=bet.created_at,
        updated_at=bet.updated_at,
    )


@router.post("", response_model=CustomBetResponse, status_code=201)
async def create_custom_bet(
    request: CustomBetCreateRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> CustomBetResponse:
    bet = await bet_lifecycle.create_custom_bet(
        session, user.id, request.player, request.stat, request.line, request.pick_type
    )
    return _serialize_bet(bet)


@router.get("", response_model=list[UserCustomBetResponse])
async def list_my_custom_bets(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> list[UserCustomBetResponse]:
    views = await bet_store.list_bets_for_user(session, user.id)
    return [
        UserCustomBetResponse(
            **_serialize_bet(view.bet).model_dump(),
            is_creator=view.is_creator,
            my_pick=view.my_pick.value if view.my_pick else None,
            my_outcome=view.my_outcome.value if view.my_outcome else None,
        )
        for view in views
    ]


@router.post("/retrofit", response_model=RetrofitResponse)
async def retrofit_creator_participants(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> RetrofitResponse:
    report = await bet_lifecycle.retrofit_creator_participants(session)
    return RetrofitResponse(
        message=f"Retrofitted {report.repaired} bets",
        scanned=report.scanned,
        repaired=report.repaired,
        skipped=report.skipped,
    )


@router.get("/{bet_id}", response_model=CustomBetResponse)
async def get_custom_bet(bet_id: uuid.UUID, session: AsyncSession = Depends(get_session)) -> CustomBetResponse:
    return _serialize_bet(await bet_store.get_bet(session, bet_id))


async def _join(bet_id: uuid.UUID, user: User, session: AsyncSession, generate: OutcomeSource) -> JoinBetResponse:
    result = await bet_lifecycle.join_bet(session, bet_id, user.id, generate)
    return JoinBetResponse(
        message="Successfully joined the bet",
        your_pick=result.your_pick.value,
        creator_pick=result.creator_pick.value,
        outcome=result.outcome.value,
        your_result=result.your_result.value,
        bet=_serialize_bet(result.bet),
    )


@router.post("/{bet_id}/join", response_model=JoinBetResponse)
async def join_custom_bet(
    bet_id: uuid.UUID,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
    generate: OutcomeSource = Depends(get_outcome_generator),
) -> JoinBetResponse:
    return await _join(bet_id, user, session, generate)


@router.post("/{bet_id}/accept", response_model=JoinBetResponse)
async def accept_custom_bet(
    bet_id: uuid.UUID,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
    generate: OutcomeSource = Depends(get_outcome_generator),
) -> JoinBetResponse:
    return await _join(bet_id, user, session, generate)


@router.post("/{bet_id}/decline", response_model=DeclineBetResponse)
async def decline_custom_bet(
    bet_id: uuid.UUID,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> DeclineBetResponse:
    bet = await bet_lifecycle.decline_bet(session, bet_id, user.id)
    return DeclineBetResponse(message="Bet declined successfully", bet=_serialize_bet(bet))


@router.post("/{bet_id}/resolve", response_model=ResolveBetResponse)
async def resolve_custom_bet(
    bet_id: uuid.UUID,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
    generate: OutcomeSource = Depends(get_outcome_generator),
) -> ResolveBetResponse:
    result = await bet_lifecycle.resolve_bet(session, bet_id, user.id, generate)
    return ResolveBetResponse(
        message="Bet outcome is still pending" if result.outcome == Outcome.TBD else "Bet resolved successfully",
        outcome=result.outcome.value,
        participants_count=result.participants_count,
        bet=_serialize_bet(result.bet),
    )
