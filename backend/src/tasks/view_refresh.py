"""
Background refresh of the bookmark_views materialized view.

The API process starts one ViewRefreshScheduler at startup and stops it at
shutdown. Every interval it rebuilds the view; a failed rebuild is logged and
simply retried on the next tick.

The refresh runs in its own session, outside any request transaction, and is
not coordinated with imports beyond what PostgreSQL's locking provides.

Usage (one-off refresh):
    python -m tasks.view_refresh
"""
import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from services.bookmark_view_service import refresh_bookmark_view

logger = logging.getLogger(__name__)

DEFAULT_REFRESH_INTERVAL_SECONDS = 300.0


class ViewRefreshScheduler:
    """Periodically rebuilds the bookmark_views materialized view."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        interval_seconds: float = DEFAULT_REFRESH_INTERVAL_SECONDS,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be positive, got {interval_seconds}")
        self._session_factory = session_factory
        self._interval = interval_seconds
        self._stop_event = asyncio.Event()
        self._task: asyncio.Task[None] | None = None
        self.refresh_count = 0
        self.failure_count = 0

    @property
    def is_running(self) -> bool:
        """Whether the background loop is active."""
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the background loop. Calling it again while running is a no-op."""
        if self.is_running:
            return
        self._stop_event.clear()
        self._task = asyncio.create_task(self._run(), name="bookmark-view-refresh")
        logger.info("View refresh scheduler started (interval=%ss)", self._interval)

    async def stop(self) -> None:
        """Signal the loop to exit and wait for it, letting an in-flight refresh finish."""
        if self._task is None:
            return
        self._stop_event.set()
        await self._task
        self._task = None
        logger.info("View refresh scheduler stopped")

    async def refresh_once(self) -> bool:
        """
        Rebuild the view once.

        Returns:
            True on success, False if the refresh failed (the error is logged).
        """
        try:
            async with self._session_factory() as session:
                await refresh_bookmark_view(session)
                await session.commit()
        except Exception:
            self.failure_count += 1
            logger.exception("Error refreshing materialized view")
            return False
        self.refresh_count += 1
        logger.debug("Refreshed materialized view")
        return True

    async def _run(self) -> None:
        while True:
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self._interval)
            except TimeoutError:
                await self.refresh_once()
            else:
                return


async def run_refresh() -> bool:
    """Refresh the view once using the application's session factory."""
    from db.session import async_session_factory

    return await ViewRefreshScheduler(async_session_factory).refresh_once()


def main() -> None:
    """Entry point for running a single refresh as a script."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    if not asyncio.run(run_refresh()):
        raise SystemExit(1)


if __name__ == "__main__":
    main()
