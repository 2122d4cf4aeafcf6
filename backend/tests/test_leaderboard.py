from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta

import pytest

from propduel.errors import NotFoundError, ValidationError
from propduel.models.custom_bet import CustomBet, CustomBetParticipant
from propduel.models.enums import Outcome
from propduel.models.pick import Pick
from propduel.models.user import User
from propduel.services.leaderboard_service import (
    LeaderboardEntry,
    compute_streak,
    get_leaderboard,
    get_user_rank,
    get_user_streak,
    rank_users,
    sort_entries,
    win_rate,
)


def _entry(username: str, wins: int, losses: int, streak: int = 0) -> LeaderboardEntry:
    return LeaderboardEntry(id=uuid.uuid4(), username=username, wins=wins, losses=losses, rank=0, streak=streak)


def test_win_rate_handles_empty_record() -> None:
    assert win_rate(0, 0) == 0.0
    assert win_rate(3, 2) == pytest.approx(0.6)
    assert _entry("a", 2, 1).win_rate_pct == 66.7


@pytest.mark.parametrize(
    "history, expected",
    [
        ([Outcome.WIN, Outcome.WIN, Outcome.LOSS], 2),
        ([Outcome.LOSS, Outcome.LOSS, Outcome.WIN], -2),
        (["TBD", "WIN"], 1),
        ([None, Outcome.TBD], 0),
        ([], 0),
    ],
)
def test_compute_streak(history, expected) -> None:
    assert compute_streak(history) == expected


def test_rank_orders_by_rate_then_wins() -> None:
    users = [
        User(id=uuid.uuid4(), username="even", wins=2, losses=2),
        User(id=uuid.uuid4(), username="small", wins=1, losses=1),
        User(id=uuid.uuid4(), username="best", wins=3, losses=2),
    ]
    ranked = rank_users(users)
    assert [(e.username, e.rank) for e in ranked] == [("best", 1), ("even", 2), ("small", 3)]


def test_sort_entries_by_secondary_keys() -> None:
    entries = [_entry("a", 5, 5, streak=-1), _entry("b", 2, 0, streak=2), _entry("c", 9, 1, streak=1)]
    assert [e.username for e in sort_entries(entries, "win_rate")] == ["b", "c", "a"]
    assert [e.username for e in sort_entries(entries, "streak")] == ["b", "c", "a"]
    assert [e.username for e in sort_entries(entries, "total_picks")] == ["c", "a", "b"]
    assert [e.username for e in sort_entries(entries, "wins")] == ["c", "a", "b"]
    with pytest.raises(ValidationError):
        sort_entries(entries, "luck")


def test_leaderboard_excludes_users_without_picks(run_db) -> None:
    async def scenario(factory) -> None:
        async with factory() as session:
            session.add_all(
                [
                    User(username="alice", wins=3, losses=2),
                    User(username="bob", wins=2, losses=2),
                    User(username="carol", wins=0, losses=0),
                    User(username="dave", wins=1, losses=1),
                ]
            )
            await session.commit()

            board = await get_leaderboard(session, limit=10)
            assert [(e.username, e.rank) for e in board] == [("alice", 1), ("bob", 2), ("dave", 3)]
            assert board[0].win_rate_pct == 60.0
            assert board[0].total_picks == 5

            page = await get_leaderboard(session, limit=1, offset=1)
            assert [e.username for e in page] == ["bob"]

            with pytest.raises(ValidationError):
                await get_leaderboard(session, sort="luck")

    run_db(scenario)


def test_my_rank_covers_users_without_picks(run_db) -> None:
    async def scenario(factory) -> None:
        async with factory() as session:
            alice = User(username="alice", wins=1, losses=0)
            carol = User(username="carol", wins=0, losses=0)
            session.add_all([alice, carol])
            await session.commit()

            entry = await get_user_rank(session, carol.id)
            assert (entry.rank, entry.win_rate_pct, entry.streak) == (2, 0.0, 0)
            assert (await get_user_rank(session, alice.id)).rank == 1

            with pytest.raises(NotFoundError):
                await get_user_rank(session, uuid.uuid4())

    run_db(scenario)


def test_streak_merges_picks_and_custom_bets(run_db) -> None:
    async def scenario(factory) -> None:
        async with factory() as session:
            alice = User(username="alice", wins=3, losses=1)
            bob = User(username="bob", wins=1, losses=3)
            session.add_all([alice, bob])
            await session.flush()

            start = datetime(2024, 3, 1, tzinfo=UTC)

            def pick(n: int, outcome: str | None) -> Pick:
                return Pick(
                    user_id=alice.id,
                    projection_id=f"proj-{n}",
                    pick_type="OVER",
                    player_name="Devin Booker",
                    stat_type="Points",
                    line_score=24.5,
                    outcome=outcome,
                    is_resolved=outcome is not None,
                    resolved_at=start + timedelta(hours=n) if outcome else None,
                    created_at=start + timedelta(hours=n),
                )

            session.add_all([pick(0, "LOSS"), pick(1, "WIN"), pick(3, "WIN"), pick(4, None)])
            bet = CustomBet(
                creator_id=alice.id,
                player="Kevin Durant",
                stat="Points",
                line=27.5,
                creator_pick_type="OVER",
                status="COMPLETED",
                outcome="WIN",
                created_at=start + timedelta(hours=2),
            )
            session.add(bet)
            await session.flush()
            session.add_all(
                [
                    CustomBetParticipant(bet_id=bet.id, user_id=alice.id, pick_type="OVER", outcome="WIN"),
                    CustomBetParticipant(bet_id=bet.id, user_id=bob.id, pick_type="UNDER", outcome="LOSS"),
                ]
            )
            await session.commit()

            # newest first: WIN (pick 3), WIN (bet), WIN (pick 1), LOSS (pick 0)
            assert await get_user_streak(session, alice.id) == 3
            assert await get_user_streak(session, bob.id) == -1

            board = await get_leaderboard(session, sort="streak")
            assert [(e.username, e.streak) for e in board] == [("alice", 3), ("bob", -1)]

    run_db(scenario)
