from __future__ import annotations

import uuid
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from propduel.errors import NotFoundError, ValidationError
from propduel.models.custom_bet import CustomBet, CustomBetParticipant
from propduel.models.enums import Outcome
from propduel.models.pick import Pick
from propduel.models.user import User

SORT_KEYS = ("win_rate", "streak", "total_picks", "wins")
DECIDED = (Outcome.WIN.value, Outcome.LOSS.value)


@dataclass
class LeaderboardEntry:
    id: uuid.UUID
    username: str
    wins: int
    losses: int
    rank: int
    streak: int = 0

    @property
    def total_picks(self) -> int:
        return self.wins + self.losses

    @property
    def win_rate(self) -> float:
        return win_rate(self.wins, self.losses)

    @property
    def win_rate_pct(self) -> float:
        return round(self.win_rate * 100.0, 1)


def win_rate(wins: int, losses: int) -> float:
    decided = wins + losses
    return wins / decided if decided > 0 else 0.0


def rank_users(users: Iterable[User]) -> list[LeaderboardEntry]:
    ordered = sorted(users, key=lambda u: (-win_rate(u.wins, u.losses), -u.wins, u.username))
    return [
        LeaderboardEntry(id=u.id, username=u.username, wins=u.wins, losses=u.losses, rank=position)
        for position, u in enumerate(ordered, start=1)
    ]


def sort_entries(entries: Iterable[LeaderboardEntry], key: str = "win_rate") -> list[LeaderboardEntry]:
    if key not in SORT_KEYS:
        raise ValidationError(f"Sort must be one of: {', '.join(SORT_KEYS)}")
    if key == "win_rate":
        return sorted(entries, key=lambda e: (-e.win_rate, -e.wins))
    return sorted(entries, key=lambda e: (-getattr(e, key), -e.win_rate))


def compute_streak(outcomes_newest_first: Iterable[Outcome | str | None]) -> int:
    """Signed length of the run ending at the most recent decided result.

    +n for n straight wins, -n for n straight losses, 0 with no history.
    TBD and missing outcomes are not part of the history.
    """
    decided = [Outcome(o) for o in outcomes_newest_first if o is not None and Outcome(o) != Outcome.TBD]
    if not decided:
        return 0
    latest = decided[0]
    step = 1 if latest == Outcome.WIN else -1
    streak = 0
    for outcome in decided:
        if outcome != latest:
            break
        streak += step
    return streak


def _as_utc(value: datetime) -> datetime:
    return value.replace(tzinfo=UTC) if value.tzinfo is None else value


async def get_user_streak(session: AsyncSession, user_id: uuid.UUID) -> int:
    picks = (
        await session.execute(
            select(Pick.outcome, Pick.created_at).where(
                Pick.user_id == user_id, Pick.is_resolved.is_(True), Pick.outcome.in_(DECIDED)
            )
        )
    ).all()
    bets = (
        await session.execute(
            select(CustomBetParticipant.outcome, CustomBet.created_at)
            .join(CustomBet, CustomBetParticipant.bet_id == CustomBet.id)
            .where(CustomBetParticipant.user_id == user_id, CustomBetParticipant.outcome.in_(DECIDED))
        )
    ).all()
    history = sorted([*picks, *bets], key=lambda row: _as_utc(row.created_at), reverse=True)
    return compute_streak(row.outcome for row in history)


async def _attach_streaks(session: AsyncSession, entries: list[LeaderboardEntry]) -> None:
    for entry in entries:
        entry.streak = await get_user_streak(session, entry.id)


async def get_leaderboard(
    session: AsyncSession,
    limit: int = 50,
    offset: int = 0,
    sort: str = "win_rate",
) -> list[LeaderboardEntry]:
    if sort not in SORT_KEYS:
        raise ValidationError(f"Sort must be one of: {', '.join(SORT_KEYS)}")
    users = (
        await session.scalars(
            select(User).where((User.wins + User.losses) > 0).execution_options(populate_existing=True)
        )
    ).all()
    entries = rank_users(users)

    if sort == "streak":
        await _attach_streaks(session, entries)
        return sort_entries(entries, sort)[offset : offset + limit]

    page = sort_entries(entries, sort)[offset : offset + limit]
    await _attach_streaks(session, page)
    return page


async def get_user_rank(session: AsyncSession, user_id: uuid.UUID) -> LeaderboardEntry:
    users = (await session.scalars(select(User).execution_options(populate_existing=True))).all()
    entry = next((e for e in rank_users(users) if e.id == user_id), None)
    if entry is None:
        raise NotFoundError("User not found")
    entry.streak = await get_user_streak(session, user_id)
    return entry
