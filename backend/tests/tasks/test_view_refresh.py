"""
Tests for the periodic materialized view refresh.

The loop tests use a stubbed refresh and a tiny interval; the refresh itself is
exercised against the database in the refresh_once tests.
"""
import asyncio
import logging
from collections.abc import Callable
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from models.bookmark_view import BookmarkView
from tasks import view_refresh
from tasks.view_refresh import DEFAULT_REFRESH_INTERVAL_SECONDS, ViewRefreshScheduler
from tests.factories import POST_ID_2020, POST_ID_2022, create_bookmark


def make_fake_session_factory() -> MagicMock:
    """A callable returning an async context manager that yields a mock session."""
    factory = MagicMock()
    factory.return_value.__aenter__.return_value = AsyncMock()
    factory.return_value.__aexit__.return_value = None
    return factory


async def wait_until(condition: Callable[[], bool], timeout: float = 2.0) -> None:
    """Poll until condition() holds, failing the test after timeout seconds."""
    async with asyncio.timeout(timeout):
        while not condition():
            await asyncio.sleep(0.005)


def test__default_interval_is_five_minutes() -> None:
    assert DEFAULT_REFRESH_INTERVAL_SECONDS == 300


@pytest.mark.parametrize("interval", [0, -1])
def test__rejects_non_positive_interval(interval: float) -> None:
    with pytest.raises(ValueError, match="interval_seconds"):
        ViewRefreshScheduler(make_fake_session_factory(), interval_seconds=interval)


# =============================================================================
# refresh_once
# =============================================================================


async def test__refresh_once__rebuilds_view(
    db_session: AsyncSession,
    session_factory: async_sessionmaker[AsyncSession],
) -> None:
    await create_bookmark(db_session, POST_ID_2020)
    await create_bookmark(db_session, POST_ID_2022, archived=True)
    await db_session.commit()

    scheduler = ViewRefreshScheduler(session_factory)
    assert await scheduler.refresh_once() is True

    count = (await db_session.execute(select(func.count()).select_from(BookmarkView))).scalar_one()
    assert count == 2
    assert scheduler.refresh_count == 1
    assert scheduler.failure_count == 0


async def test__refresh_once__failure_is_logged_not_raised(
    monkeypatch: pytest.MonkeyPatch,
    caplog: pytest.LogCaptureFixture,
) -> None:
    monkeypatch.setattr(
        view_refresh, "refresh_bookmark_view", AsyncMock(side_effect=RuntimeError("lock timeout")),
    )
    scheduler = ViewRefreshScheduler(make_fake_session_factory())

    with caplog.at_level(logging.ERROR, logger="tasks.view_refresh"):
        assert await scheduler.refresh_once() is False

    assert scheduler.failure_count == 1
    assert scheduler.refresh_count == 0
    assert "Error refreshing materialized view" in caplog.text
    assert "lock timeout" in caplog.text


# =============================================================================
# Background loop
# =============================================================================


async def test__loop__refreshes_every_interval(monkeypatch: pytest.MonkeyPatch) -> None:
    refresh = AsyncMock()
    monkeypatch.setattr(view_refresh, "refresh_bookmark_view", refresh)
    scheduler = ViewRefreshScheduler(make_fake_session_factory(), interval_seconds=0.01)

    scheduler.start()
    try:
        await wait_until(lambda: scheduler.refresh_count >= 3)
    finally:
        await scheduler.stop()

    assert refresh.await_count >= 3


async def test__loop__does_not_refresh_before_first_interval(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    refresh = AsyncMock()
    monkeypatch.setattr(view_refresh, "refresh_bookmark_view", refresh)
    scheduler = ViewRefreshScheduler(make_fake_session_factory(), interval_seconds=3600)

    scheduler.start()
    await asyncio.sleep(0.05)
    await scheduler.stop()

    refresh.assert_not_awaited()


async def test__loop__keeps_running_after_failures(monkeypatch: pytest.MonkeyPatch) -> None:
    refresh = AsyncMock(side_effect=RuntimeError("boom"))
    monkeypatch.setattr(view_refresh, "refresh_bookmark_view", refresh)
    scheduler = ViewRefreshScheduler(make_fake_session_factory(), interval_seconds=0.01)

    scheduler.start()
    try:
        await wait_until(lambda: scheduler.failure_count >= 3)
        assert scheduler.is_running

        # Recovers once the refresh starts succeeding again
        refresh.side_effect = None
        await wait_until(lambda: scheduler.refresh_count >= 1)
    finally:
        await scheduler.stop()


async def test__stop__interrupts_wait_promptly(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(view_refresh, "refresh_bookmark_view", AsyncMock())
    scheduler = ViewRefreshScheduler(make_fake_session_factory(), interval_seconds=3600)

    scheduler.start()
    assert scheduler.is_running

    async with asyncio.timeout(1):
        await scheduler.stop()
    assert not scheduler.is_running


async def test__start__is_idempotent(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(view_refresh, "refresh_bookmark_view", AsyncMock())
    scheduler = ViewRefreshScheduler(make_fake_session_factory(), interval_seconds=3600)

    scheduler.start()
    first_task = scheduler._task
    scheduler.start()
    assert scheduler._task is first_task

    await scheduler.stop()


async def test__stop__without_start_is_noop() -> None:
    scheduler = ViewRefreshScheduler(make_fake_session_factory())
    await scheduler.stop()
    assert not scheduler.is_running


async def test__restart_after_stop(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(view_refresh, "refresh_bookmark_view", AsyncMock())
    scheduler = ViewRefreshScheduler(make_fake_session_factory(), interval_seconds=0.01)

    scheduler.start()
    await scheduler.stop()
    scheduler.start()
    try:
        await wait_until(lambda: scheduler.refresh_count >= 1)
    finally:
        await scheduler.stop()
