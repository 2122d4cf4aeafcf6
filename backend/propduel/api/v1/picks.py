from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from propduel.api.deps import get_current_user, get_outcome_generator
from propduel.database import get_session
from propduel.models.enums import Outcome
from propduel.models.pick import Pick
from propduel.models.user import User
from propduel.schemas.picks import PickCreateRequest, PickResolveResponse, PickResponse, ResolveAllResponse
from propduel.services import pick_service
from propduel.services.bet_lifecycle import OutcomeSource

router = APIRouter(prefix="/picks", tags=["picks"])


def _serialize_pick(pick: Pick) -> PickResponse:
    return PickResponse(
        id=pick.id,
        projection_id=pick.projection_id,
        pick_type=pick.pick_type,
        player_name=pick.player_name,
        player_image_url=pick.player_image_url,
        stat_type=pick.stat_type,
        line_score=pick.line_score,
        outcome=pick.outcome,
        is_resolved=pick.is_resolved,
        resolved_at=pick.resolved_at,
        created_at=pick.created_at,
    )


@router.post("", response_model=PickResponse, status_code=201)
async def create_pick(
    request: PickCreateRequest,
    response: Response,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> PickResponse:
    pick, created = await pick_service.upsert_pick(
        session,
        user.id,
        projection_id=request.projection_id,
        pick_type=request.pick_type,
        player_name=request.player_name,
        stat_type=request.stat_type,
        line_score=request.line_score,
        player_image_url=request.player_image_url,
    )
    if not created:
        response.status_code = 200
    return _serialize_pick(pick)


@router.get("", response_model=list[PickResponse])
async def list_my_picks(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> list[PickResponse]:
    return [_serialize_pick(p) for p in await pick_service.list_picks(session, user.id)]


@router.post("/resolve-all", response_model=ResolveAllResponse)
async def resolve_all_picks(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
    generate: OutcomeSource = Depends(get_outcome_generator),
) -> ResolveAllResponse:
    summary = await pick_service.resolve_all_picks(session, user.id, generate)
    return ResolveAllResponse(message="Picks resolved", **summary)


@router.post("/{pick_id}/resolve", response_model=PickResolveResponse)
async def resolve_pick(
    pick_id: uuid.UUID,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
    generate: OutcomeSource = Depends(get_outcome_generator),
) -> PickResolveResponse:
    result = await pick_service.resolve_pick(session, pick_id, user.id, generate)
    return PickResolveResponse(
        message="Pick outcome is still pending" if result.outcome == Outcome.TBD else "Pick resolved successfully",
        outcome=result.outcome.value,
        pick=_serialize_pick(result.pick),
    )
