from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from propduel.api.deps import get_current_user, get_projection_cache, get_projection_client
from propduel.data_providers.prizepicks import PrizePicksClient
from propduel.database import get_session
from propduel.models.user import User
from propduel.schemas.projections import PaginationResponse, ProjectionPageResponse, ProjectionResponse
from propduel.services.projection_cache import ProjectionCache, get_projection_page

router = APIRouter(prefix="/projections", tags=["projections"])


@router.get("", response_model=ProjectionPageResponse)
async def list_projections(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
    cache: ProjectionCache = Depends(get_projection_cache),
    client: PrizePicksClient = Depends(get_projection_client),
) -> ProjectionPageResponse:
    result = await get_projection_page(session, cache, client.fetch_projections, user.id, page=page, limit=limit)
    return ProjectionPageResponse(
        projections=[
            ProjectionResponse(
                id=p.id,
                player_id=p.player_id,
                player_name=p.player_name,
                player_image_url=p.player_image_url,
                stat_type=p.stat_type,
                line_score=p.line_score,
                pick=pick,
            )
            for p, pick in result.projections
        ],
        pagination=PaginationResponse(
            page=result.page,
            limit=result.limit,
            total=result.total,
            total_pages=result.total_pages,
            has_more=result.has_more,
        ),
    )
