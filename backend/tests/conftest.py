from __future__ import annotations

import asyncio
import importlib.util
from collections.abc import Awaitable, Callable, Iterable

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import propduel.models  # noqa: F401
from propduel.database import Base
from propduel.models.enums import Outcome

Scenario = Callable[[async_sessionmaker[AsyncSession]], Awaitable[None]]


class ScriptedOutcomes:
    """Outcome source that replays a fixed sequence."""

    def __init__(self, outcomes: Iterable[Outcome | str]) -> None:
        self.remaining = [Outcome(o) for o in outcomes]
        self.calls = 0

    def __call__(self) -> Outcome:
        self.calls += 1
        return self.remaining.pop(0)


async def _with_database(scenario: Scenario, url: str = "sqlite+aiosqlite:///:memory:", **engine_kwargs) -> None:
    engine = create_async_engine(url, **engine_kwargs)
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        await scenario(session_factory)
    finally:
        await engine.dispose()


@pytest.fixture
def run_db() -> Callable[[Scenario], None]:
    if importlib.util.find_spec("aiosqlite") is None:
        pytest.skip("aiosqlite not available in this environment")

    def _run(scenario: Scenario) -> None:
        asyncio.run(_with_database(scenario, poolclass=StaticPool))

    return _run


@pytest.fixture
def run_file_db(tmp_path) -> Callable[[Scenario], None]:
    """Like ``run_db`` but on a file, so separate sessions get separate connections."""
    if importlib.util.find_spec("aiosqlite") is None:
        pytest.skip("aiosqlite not available in this environment")

    def _run(scenario: Scenario) -> None:
        asyncio.run(_with_database(scenario, f"sqlite+aiosqlite:///{tmp_path / 'propduel.db'}"))

    return _run


@pytest.fixture
def scripted() -> type[ScriptedOutcomes]:
    return ScriptedOutcomes
