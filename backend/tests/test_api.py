from __future__ import annotations

import uuid
from contextlib import asynccontextmanager
from types import SimpleNamespace

import httpx

from propduel.api.deps import get_outcome_generator, get_projection_cache, get_projection_client
from propduel.data_providers.prizepicks import Projection
from propduel.database import get_session
from propduel.main import app
from propduel.models.enums import Outcome
from propduel.services.projection_cache import ProjectionCache


@asynccontextmanager
async def _client(factory, generate=None, projections=None):
    async def override_session():
        async with factory() as session:
            yield session

    async def fetch() -> list[Projection]:
        return list(projections or [])

    cache = ProjectionCache(ttl_seconds=300)
    app.dependency_overrides[get_session] = override_session
    app.dependency_overrides[get_outcome_generator] = lambda: generate
    app.dependency_overrides[get_projection_cache] = lambda: cache
    app.dependency_overrides[get_projection_client] = lambda: SimpleNamespace(fetch_projections=fetch)
    try:
        async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as client:
            yield client
    finally:
        app.dependency_overrides.clear()


async def _register(client: httpx.AsyncClient, username: str) -> dict[str, str]:
    response = await client.post("/api/v1/users", json={"username": username})
    assert response.status_code in (200, 201)
    return {"X-User-Id": response.json()["id"]}


def test_register_is_idempotent_and_identity_is_required(run_db) -> None:
    async def scenario(factory) -> None:
        async with _client(factory) as client:
            created = await client.post("/api/v1/users", json={"username": "alice"})
            again = await client.post("/api/v1/users", json={"username": " alice "})
            assert created.status_code == 201
            assert again.status_code == 200
            assert again.json()["id"] == created.json()["id"]

            blank = await client.post("/api/v1/users", json={"username": "   "})
            assert blank.status_code == 400

            assert (await client.get("/api/v1/users/me")).status_code == 401
            assert (await client.get("/api/v1/users/me", headers={"X-User-Id": "not-a-uuid"})).status_code == 401
            unknown = await client.get("/api/v1/users/me", headers={"X-User-Id": str(uuid.uuid4())})
            assert unknown.status_code == 401

            me = await client.get("/api/v1/users/me", headers={"X-User-Id": created.json()["id"]})
            assert me.status_code == 200
            assert me.json()["username"] == "alice"
            assert (me.json()["wins"], me.json()["losses"]) == (0, 0)

    run_db(scenario)


def test_custom_bet_flow_over_http(run_db, scripted) -> None:
    async def scenario(factory) -> None:
        outcomes = scripted([Outcome.WIN])
        async with _client(factory, generate=outcomes) as client:
            alice = await _register(client, "alice")
            bob = await _register(client, "bob")

            bad = await client.post(
                "/api/v1/custom-bets",
                json={"player": "LeBron James", "stat": "Points", "line": "lots", "pick_type": "OVER"},
                headers=alice,
            )
            assert bad.status_code == 400
            assert bad.json()["detail"] == "Line must be a number"

            created = await client.post(
                "/api/v1/custom-bets",
                json={"player": "LeBron James", "stat": "Points", "line": 25.5, "pick_type": "OVER"},
                headers=alice,
            )
            assert created.status_code == 201
            bet = created.json()
            assert bet["status"] == "PENDING"
            assert bet["creator_username"] == "alice"
            assert bet["share_url"].endswith(f"/custom-bets/{bet['id']}")
            assert len(bet["participants"]) == 1

            own = await client.post(f"/api/v1/custom-bets/{bet['id']}/join", headers=alice)
            assert own.status_code == 400
            assert own.json()["detail"] == "Cannot join your own bet"

            joined = await client.post(f"/api/v1/custom-bets/{bet['id']}/join", headers=bob)
            assert joined.status_code == 200
            body = joined.json()
            assert (body["your_pick"], body["creator_pick"]) == ("UNDER", "OVER")
            assert (body["outcome"], body["your_result"]) == ("WIN", "LOSS")
            assert body["bet"]["status"] == "COMPLETED"
            assert len(body["bet"]["participants"]) == 2

            twice = await client.post(f"/api/v1/custom-bets/{bet['id']}/accept", headers=bob)
            assert twice.status_code == 400
            assert twice.json()["detail"] == "You have already joined this bet"

            missing = await client.post(f"/api/v1/custom-bets/{uuid.uuid4()}/join", headers=bob)
            assert missing.status_code == 404

            public = await client.get(f"/api/v1/custom-bets/{bet['id']}")
            assert public.status_code == 200
            assert public.json()["outcome"] == "WIN"

            (mine,) = (await client.get("/api/v1/custom-bets", headers=alice)).json()
            assert (mine["is_creator"], mine["my_pick"], mine["my_outcome"]) == (True, "OVER", "WIN")

            board = (await client.get("/api/v1/leaderboard", headers=alice)).json()
            assert [(row["username"], row["rank"], row["win_rate"], row["streak"]) for row in board] == [
                ("alice", 1, 100.0, 1),
                ("bob", 2, 0.0, -1),
            ]
            rank = (await client.get("/api/v1/leaderboard/my-rank", headers=bob)).json()
            assert (rank["rank"], rank["losses"]) == (2, 1)

            bad_sort = await client.get("/api/v1/leaderboard", params={"sort": "luck"}, headers=alice)
            assert bad_sort.status_code == 400

            health = (await client.get("/api/v1/system/health")).json()
            assert (health["status"], health["user_count"], health["custom_bet_count"]) == ("ok", 2, 1)

    run_db(scenario)


def test_decline_and_resolve_over_http(run_db, scripted) -> None:
    async def scenario(factory) -> None:
        outcomes = scripted([Outcome.TBD, Outcome.TBD, Outcome.LOSS])
        async with _client(factory, generate=outcomes) as client:
            alice = await _register(client, "alice")
            bob = await _register(client, "bob")
            payload = {"player": "Nikola Jokic", "stat": "Assists", "line": 9.5, "pick_type": "UNDER"}

            declined_id = (await client.post("/api/v1/custom-bets", json=payload, headers=alice)).json()["id"]
            declined = await client.post(f"/api/v1/custom-bets/{declined_id}/decline", headers=bob)
            assert declined.status_code == 200
            assert declined.json()["bet"]["status"] == "DECLINED"
            late = await client.post(f"/api/v1/custom-bets/{declined_id}/join", headers=bob)
            assert late.json()["detail"] == "Bet is no longer available to join"

            bet_id = (await client.post("/api/v1/custom-bets", json=payload, headers=alice)).json()["id"]
            joined = (await client.post(f"/api/v1/custom-bets/{bet_id}/join", headers=bob)).json()
            assert (joined["outcome"], joined["your_result"], joined["bet"]["status"]) == ("TBD", "TBD", "ACCEPTED")

            pending = (await client.post(f"/api/v1/custom-bets/{bet_id}/resolve", headers=alice)).json()
            assert pending["message"] == "Bet outcome is still pending"

            resolved = (await client.post(f"/api/v1/custom-bets/{bet_id}/resolve", headers=bob)).json()
            assert resolved["message"] == "Bet resolved successfully"
            assert (resolved["outcome"], resolved["participants_count"]) == ("LOSS", 2)
            by_user = {p["username"]: p["outcome"] for p in resolved["bet"]["participants"]}
            assert by_user == {"alice": "WIN", "bob": "LOSS"}

            again = await client.post(f"/api/v1/custom-bets/{bet_id}/resolve", headers=bob)
            assert again.status_code == 400

            retrofit = (await client.post("/api/v1/custom-bets/retrofit", headers=alice)).json()
            assert (retrofit["scanned"], retrofit["repaired"], retrofit["skipped"]) == (1, 0, 1)

    run_db(scenario)


def test_picks_and_projections_over_http(run_db, scripted) -> None:
    async def scenario(factory) -> None:
        outcomes = scripted([Outcome.WIN, Outcome.LOSS])
        feed = [
            Projection(
                id=str(n),
                player_id=f"p{n}",
                player_name=f"Player {n}",
                player_image_url=None,
                stat_type="Points",
                line_score=20.5,
            )
            for n in range(1, 4)
        ]
        async with _client(factory, generate=outcomes, projections=feed) as client:
            alice = await _register(client, "alice")
            pick = {"projection_id": "2", "pick_type": "OVER", "player_name": "Player 2", "stat_type": "Points", "line_score": 20.5}

            created = await client.post("/api/v1/picks", json=pick, headers=alice)
            assert created.status_code == 201
            updated = await client.post("/api/v1/picks", json={**pick, "pick_type": "UNDER"}, headers=alice)
            assert updated.status_code == 200
            assert updated.json()["id"] == created.json()["id"]

            incomplete = await client.post("/api/v1/picks", json={"projection_id": "3"}, headers=alice)
            assert incomplete.status_code == 400

            page = (await client.get("/api/v1/projections", params={"limit": 2}, headers=alice)).json()
            assert [(p["id"], p["pick"]) for p in page["projections"]] == [("1", None), ("2", "UNDER")]
            assert page["pagination"] == {"page": 1, "limit": 2, "total": 3, "total_pages": 2, "has_more": True}

            resolved = (await client.post(f"/api/v1/picks/{created.json()['id']}/resolve", headers=alice)).json()
            assert resolved["outcome"] == "WIN"
            assert resolved["pick"]["is_resolved"] is True

            await client.post("/api/v1/picks", json={**pick, "projection_id": "3"}, headers=alice)
            summary = (await client.post("/api/v1/picks/resolve-all", headers=alice)).json()
            assert (summary["resolved"], summary["wins"], summary["losses"], summary["pending"]) == (1, 0, 1, 0)

            me = (await client.get("/api/v1/users/me", headers=alice)).json()
            assert (me["wins"], me["losses"]) == (1, 1)

    run_db(scenario)
