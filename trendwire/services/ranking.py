from __future__ import annotations

import json
import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Protocol

import httpx

from ..config import Settings, get_settings
from ..errors import RankingServiceError
from ..http_client import get_http_client
from ..models.news import CandidateSummary

logger = logging.getLogger(__name__)

INDEX_ARRAY_PATTERN = re.compile(r"\[[\d\s,]+\]")
INTEGER_PATTERN = re.compile(r"\d+")

RANKING_PROMPT = """You are a news curator for a technology business owner. \
Analyze the following news articles and return the top {count} most relevant \
and TRENDING articles about technology and business.

Focus on TRENDING and VIRAL content:
- Stories gaining traction on social media
- Viral tech and business news
- Breaking news that is going viral
- Major tech industry developments
- Business news making waves online

Return ONLY a JSON array of indices (0-based) of the top {count} articles, \
sorted by trending relevance. Format: [0, 5, 12, ...]

Articles:
{articles}

Return only the JSON array, nothing else."""


class Ranker(Protocol):
    async def rank(self, candidates: Sequence[CandidateSummary]) -> list[int]:
        """Return candidate indices, best first, or raise RankingServiceError."""
        ...


def parse_ranked_indices(content: str, limit: int = 30) -> list[int]:
    """Pull an index list out of a free-text ranking response.

    Prefers the first bracketed integer array; otherwise takes the first
    ``limit`` integers found anywhere in the text. Raises RankingServiceError
    when the text holds no integers at all.
    """
    match = INDEX_ARRAY_PATTERN.search(content)
    if match:
        try:
            parsed = json.loads(match.group(0))
        except ValueError:
            logger.debug("Bracketed index list is not valid JSON: %s", match.group(0))
        else:
            return [int(value) for value in parsed]

    numbers = INTEGER_PATTERN.findall(content)
    if not numbers:
        raise RankingServiceError(f"no indices in ranking response: {content[:200]!r}")
    return [int(value) for value in numbers[:limit]]


def build_prompt(candidates: Sequence[CandidateSummary], count: int) -> str:
    payload = [candidate.model_dump() for candidate in candidates]
    return RANKING_PROMPT.format(
        count=count,
        articles=json.dumps(payload, indent=2, ensure_ascii=False),
    )


@dataclass(slots=True)
class ChatCompletionRanker:
    """Ranks candidates through an OpenAI-compatible chat completions API."""

    settings: Settings | None = None
    client: httpx.AsyncClient | None = None

    def __post_init__(self) -> None:
        if self.settings is None:
            self.settings = get_settings()

    async def rank(self, candidates: Sequence[CandidateSummary]) -> list[int]:
        if not self.settings.ranking_api_key:
            raise RankingServiceError("ranking API key is not configured")

        content = await self._complete(
            build_prompt(candidates, self.settings.curated_limit)
        )
        return parse_ranked_indices(content, limit=self.settings.curated_limit)

    async def _complete(self, prompt: str) -> str:
        client = self.client or await get_http_client(self.settings)
        url = f"{str(self.settings.ranking_base_url).rstrip('/')}/chat/completions"
        body = {
            "model": self.settings.ranking_model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": self.settings.ranking_temperature,
            "max_tokens": self.settings.ranking_max_tokens,
        }
        headers = {"Authorization": f"Bearer {self.settings.ranking_api_key}"}
        try:
            response = await client.post(
                url,
                json=body,
                headers=headers,
                timeout=self.settings.ranking_timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as exc:
            raise RankingServiceError(
                f"ranking service returned {exc.response.status_code}: "
                f"{exc.response.text[:200]}"
            ) from exc
        except httpx.HTTPError as exc:
            raise RankingServiceError(
                f"ranking request failed: {str(exc) or exc.__class__.__name__}"
            ) from exc
        except ValueError as exc:
            raise RankingServiceError("ranking response is not JSON") from exc
        return _message_content(payload)


def _message_content(payload: Any) -> str:
    try:
        content = payload["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as exc:
        raise RankingServiceError("ranking response has no message content") from exc
    if not isinstance(content, str):
        raise RankingServiceError("ranking response content is not text")
    return content.strip()
