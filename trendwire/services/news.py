from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

import httpx

from ..config import Settings, get_settings
from ..errors import CacheEmptyError, NoCandidatesError
from ..models.news import Article
from .curator import Curator
from .dedupe import dedupe
from .feeds import FeedFetcher
from .ranking import ChatCompletionRanker
from .state import FetchState

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class NewsService:
    """Fetch, dedupe, curate and cache news from the configured feeds.

    Runs are single-flight: ``fetch_and_curate`` holds a lock for the whole
    run, so a slower run can never overwrite the result of a newer one.
    """

    settings: Settings | None = None
    client: httpx.AsyncClient | None = None
    state: FetchState = field(default_factory=FetchState)
    fetcher: FeedFetcher | None = None
    curator: Curator | None = None
    _run_lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.settings is None:
            self.settings = get_settings()
        if self.fetcher is None:
            self.fetcher = FeedFetcher(settings=self.settings, client=self.client)
        if self.curator is None:
            ranker = ChatCompletionRanker(settings=self.settings, client=self.client)
            self.curator = Curator(ranker=ranker, settings=self.settings)

    @property
    def is_running(self) -> bool:
        return self._run_lock.locked()

    async def fetch_and_curate(self) -> list[Article]:
        """Run the pipeline once and return what should be served.

        Serves the previous result when this run finds nothing; raises
        CacheEmptyError only when there is no previous result either.
        """
        async with self._run_lock:
            try:
                return await self._run()
            except NoCandidatesError as exc:
                snapshot = self.state.read()
                if snapshot.is_empty:
                    raise CacheEmptyError(
                        "No news articles available and nothing cached"
                    ) from exc
                logger.warning(
                    "%s; serving %d cached articles from %s",
                    exc,
                    len(snapshot.articles),
                    snapshot.fetched_at.isoformat() if snapshot.fetched_at else "never",
                )
                return list(snapshot.articles)

    def get_cached_articles(self) -> list[Article]:
        return list(self.state.read().articles)

    def get_last_fetch_time(self) -> datetime | None:
        return self.state.read().fetched_at

    async def fetch_all(self) -> list[Article]:
        """Fetch every configured feed concurrently and merge in feed order."""
        sources = list(self.settings.feed_urls)
        logger.info("Fetching %d feeds", len(sources))
        results = await asyncio.gather(
            *(self.fetcher.fetch(url) for url in sources), return_exceptions=True
        )
        merged: list[Article] = []
        for url, result in zip(sources, results, strict=True):
            if isinstance(result, BaseException):
                logger.warning("Feed %s failed unexpectedly: %r", url, result)
                continue
            merged.extend(result)
        return merged

    async def _run(self) -> list[Article]:
        merged = await self.fetch_all()
        candidates = dedupe(merged)
        if not candidates:
            raise NoCandidatesError(
                f"No articles from {len(self.settings.feed_urls)} feeds"
            )
        logger.info(
            "Curating %d unique articles (%d fetched)", len(candidates), len(merged)
        )

        curated = await self.curator.curate(candidates)
        self.state.replace(curated, datetime.now(timezone.utc))
        logger.info("Cached %d curated articles", len(curated))
        return curated
