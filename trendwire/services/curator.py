from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from ..config import Settings, get_settings
from ..errors import RankingServiceError
from ..models.news import Article, CandidateSummary
from .ranking import ChatCompletionRanker, Ranker

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Curator:
    """Picks the top articles with the ranking service, newest first."""

    ranker: Ranker | None = None
    settings: Settings | None = None

    def __post_init__(self) -> None:
        if self.settings is None:
            self.settings = get_settings()
        if self.ranker is None:
            self.ranker = ChatCompletionRanker(settings=self.settings)

    async def curate(self, articles: Sequence[Article]) -> list[Article]:
        articles = list(articles)
        if not articles:
            return []
        limit = self.settings.curated_limit
        candidates = articles[: self.settings.candidate_limit]

        try:
            indices = await asyncio.wait_for(
                self.ranker.rank(self.summarize(candidates)),
                timeout=self.settings.ranking_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "Ranking timed out after %ss, falling back to newest articles",
                self.settings.ranking_timeout,
            )
            return newest(articles, limit)
        except RankingServiceError as exc:
            logger.warning("Ranking failed (%s), falling back to newest articles", exc)
            return newest(articles, limit)
        except Exception:
            logger.exception("Ranker crashed, falling back to newest articles")
            return newest(articles, limit)

        selected = self._select(articles, indices, window=len(candidates))
        logger.info(
            "Curated %d articles from %d candidates", len(selected), len(articles)
        )
        return selected

    def summarize(self, candidates: Sequence[Article]) -> list[CandidateSummary]:
        cutoff = self.settings.description_limit
        return [
            CandidateSummary(
                index=index,
                title=article.title,
                description=(article.description or "")[:cutoff],
                source=article.source or "Unknown",
            )
            for index, article in enumerate(candidates)
        ]

    def _select(
        self, articles: list[Article], indices: Sequence[int], window: int
    ) -> list[Article]:
        limit = self.settings.curated_limit
        chosen: list[int] = []
        seen: set[int] = set()
        for index in indices:
            if not 0 <= index < window or index in seen:
                continue
            chosen.append(index)
            seen.add(index)
            if len(chosen) >= limit:
                break

        if len(chosen) < limit:
            remaining = [i for i in range(len(articles)) if i not in seen]
            remaining.sort(key=lambda i: articles[i].published_at, reverse=True)
            chosen.extend(remaining[: limit - len(chosen)])

        return newest([articles[i] for i in chosen], limit)


def newest(articles: Sequence[Article], limit: int) -> list[Article]:
    """Stable newest-first ordering, truncated to ``limit``."""
    return sorted(articles, key=lambda article: article.published_at, reverse=True)[
        :limit
    ]
