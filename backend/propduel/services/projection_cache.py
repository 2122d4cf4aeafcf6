from __future__ import annotations

import asyncio
import logging
import math
import time
import uuid
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from propduel.data_providers.prizepicks import Projection
from propduel.errors import UpstreamError
from propduel.models.pick import Pick

logger = logging.getLogger(__name__)


@dataclass
class CachedProjections:
    payload: list[Projection]
    fetched_at: float


class ProjectionCache:
    """Read-through cache for the projections board.

    Serves the cached payload while it is younger than ``ttl_seconds``,
    otherwise refetches. A failed refetch falls back to the stale payload;
    with nothing cached the upstream error propagates.
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self.entry: CachedProjections | None = None
        self._lock = asyncio.Lock()

    def is_fresh(self) -> bool:
        return self.entry is not None and (self.clock() - self.entry.fetched_at) < self.ttl_seconds

    async def get(self, fetch: Callable[[], Awaitable[list[Projection]]]) -> list[Projection]:
        if self.is_fresh():
            return self.entry.payload
        async with self._lock:
            if self.is_fresh():
                return self.entry.payload
            try:
                payload = await fetch()
            except UpstreamError as exc:
                if self.entry is None:
                    raise
                logger.warning(
                    "projection refresh failed; serving stale payload: age_seconds=%.0f error=%s",
                    self.clock() - self.entry.fetched_at,
                    exc,
                )
                return self.entry.payload
            self.entry = CachedProjections(payload=payload, fetched_at=self.clock())
            logger.info("projection cache refreshed: projections=%s", len(payload))
            return payload


@dataclass
class ProjectionPage:
    projections: list[tuple[Projection, str | None]]
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    @property
    def has_more(self) -> bool:
        return self.page * self.limit < self.total


async def get_projection_page(
    session: AsyncSession,
    cache: ProjectionCache,
    fetch: Callable[[], Awaitable[list[Projection]]],
    user_id: uuid.UUID | None,
    page: int = 1,
    limit: int = 20,
) -> ProjectionPage:
    projections = await cache.get(fetch)
    offset = (page - 1) * limit
    window = projections[offset : offset + limit]

    picks: dict[str, str] = {}
    if user_id is not None and window:
        rows = await session.execute(
            select(Pick.projection_id, Pick.pick_type).where(
                Pick.user_id == user_id, Pick.projection_id.in_([p.id for p in window])
            )
        )
        picks = {row.projection_id: row.pick_type for row in rows}

    return ProjectionPage(
        projections=[(p, picks.get(p.id)) for p in window],
        page=page,
        limit=limit,
        total=len(projections),
    )
