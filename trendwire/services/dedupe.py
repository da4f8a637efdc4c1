from __future__ import annotations

from collections.abc import Iterable

from ..models.news import Article


def dedupe(articles: Iterable[Article]) -> list[Article]:
    """Drop repeated articles, keeping the first one seen.

    Two articles are the same when their trimmed, case-folded title and url
    both match. Articles without a title or url are dropped outright.
    """
    seen: set[tuple[str, str]] = set()
    unique: list[Article] = []
    for article in articles:
        title_key = (article.title or "").strip().casefold()
        url_key = (article.url or "").strip().casefold()
        if not title_key or not url_key:
            continue
        key = (title_key, url_key)
        if key in seen:
            continue
        seen.add(key)
        unique.append(article)
    return unique
