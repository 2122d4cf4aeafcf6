from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx

from propduel.config import settings
from propduel.errors import UpstreamError

BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/118.0.0.0 Safari/537.36"
    ),
    "Accept": "application/json, text/plain, */*",
    "Referer": "https://www.prizepicks.com/",
    "Origin": "https://www.prizepicks.com",
    "Accept-Language": "en-US,en;q=0.9",
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
}


@dataclass
class Projection:
    id: str
    player_id: str
    player_name: str
    player_image_url: str | None
    stat_type: str
    line_score: float


def parse_projections(payload: dict[str, Any]) -> list[Projection]:
    players: dict[str, dict[str, Any]] = {}
    for item in payload.get("included") or []:
        if item.get("type") != "new_player":
            continue
        attributes = item.get("attributes") or {}
        players[str(item["id"])] = {
            "name": attributes.get("name") or "Unknown Player",
            "image_url": attributes.get("image_url") or attributes.get("image"),
        }

    out: list[Projection] = []
    for item in payload.get("data") or []:
        attributes = item.get("attributes") or {}
        player_id = str(item["relationships"]["new_player"]["data"]["id"])
        player = players.get(player_id, {"name": "Unknown Player", "image_url": None})
        out.append(
            Projection(
                id=str(item["id"]),
                player_id=player_id,
                player_name=player["name"],
                player_image_url=player["image_url"],
                stat_type=attributes.get("stat_type") or "",
                line_score=float(attributes["line_score"]),
            )
        )
    return out


class PrizePicksClient:
    def __init__(
        self,
        url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url or settings.projections_url
        self.timeout = timeout if timeout is not None else settings.projections_timeout_seconds
        self.transport = transport

    async def fetch_projections(self) -> list[Projection]:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, headers=BROWSER_HEADERS, transport=self.transport) as client:
                response = await client.get(self.url)
                response.raise_for_status()
                return parse_projections(response.json())
        except httpx.HTTPStatusError as exc:
            raise UpstreamError(f"Projections feed returned {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise UpstreamError("Projections feed unavailable") from exc
        except (KeyError, TypeError, ValueError) as exc:
            raise UpstreamError("Projections feed returned an unexpected payload") from exc
