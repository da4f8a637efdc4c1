from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

from ..models.news import Article


@dataclass(frozen=True, slots=True)
class FetchSnapshot:
    articles: tuple[Article, ...] = ()
    fetched_at: datetime | None = None

    @property
    def is_empty(self) -> bool:
        return not self.articles


class FetchState:
    """Last curated article list and the time it was produced.

    Both values live in one immutable snapshot, so a reader never sees the
    articles of one run paired with the timestamp of another. ``replace`` is
    the only mutation.
    """

    __slots__ = ("_snapshot",)

    def __init__(self) -> None:
        self._snapshot = FetchSnapshot()

    def replace(self, articles: Sequence[Article], fetched_at: datetime) -> None:
        self._snapshot = FetchSnapshot(articles=tuple(articles), fetched_at=fetched_at)

    def read(self) -> FetchSnapshot:
        return self._snapshot

    def is_empty(self) -> bool:
        return self._snapshot.is_empty

    def clear(self) -> None:
        self._snapshot = FetchSnapshot()
