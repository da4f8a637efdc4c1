from __future__ import annotations

import asyncio
import contextlib
import logging

from .errors import TrendwireError
from .services.news import NewsService

logger = logging.getLogger(__name__)


class RefreshScheduler:
    """Calls ``fetch_and_curate`` on a fixed interval in the background."""

    def __init__(
        self,
        service: NewsService,
        interval_seconds: float,
        run_immediately: bool = True,
    ) -> None:
        self.service = service
        self.interval_seconds = interval_seconds
        self.run_immediately = run_immediately
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        if self.interval_seconds <= 0 and not self.run_immediately:
            logger.info("Scheduled refresh disabled")
            return
        self._task = asyncio.create_task(self._loop(), name="trendwire-refresh")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None

    async def _loop(self) -> None:
        if self.run_immediately:
            await self.refresh_once()
        if self.interval_seconds <= 0:
            return
        logger.info("Refreshing news every %ss", self.interval_seconds)
        while True:
            await asyncio.sleep(self.interval_seconds)
            await self.refresh_once()

    async def refresh_once(self) -> None:
        logger.info("Scheduled news update started")
        try:
            articles = await self.service.fetch_and_curate()
        except TrendwireError as exc:
            logger.error("Scheduled news update failed: %s", exc)
            return
        except Exception:
            # keep the timer alive; the next tick gets a fresh run
            logger.exception("Scheduled news update crashed")
            return
        logger.info("Scheduled news update served %d articles", len(articles))
