from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import httpx
from bs4 import BeautifulSoup, Tag
from dateutil import parser as date_parser

from ..config import Settings, get_settings
from ..errors import SourceFetchError
from ..http_client import get_http_client
from ..models.news import Article

logger = logging.getLogger(__name__)

MEDIA_NS = "http://search.yahoo.com/mrss/"
CONTENT_NS = "http://purl.org/rss/1.0/modules/content/"
DC_NS = "http://purl.org/dc/elements/1.1/"
RDF_NS = "http://www.w3.org/1999/02/22-rdf-syntax-ns#"
UNKNOWN_SOURCE = "Unknown Source"

# Abbreviations dateutil cannot resolve on its own
TZINFOS = {
    "EST": timezone(timedelta(hours=-5)),
    "EDT": timezone(timedelta(hours=-4)),
    "CST": timezone(timedelta(hours=-6)),
    "CDT": timezone(timedelta(hours=-5)),
    "MST": timezone(timedelta(hours=-7)),
    "MDT": timezone(timedelta(hours=-6)),
    "PST": timezone(timedelta(hours=-8)),
    "PDT": timezone(timedelta(hours=-7)),
    "GMT": timezone.utc,
    "UTC": timezone.utc,
}

FEED_ACCEPT = (
    "application/rss+xml, application/atom+xml, application/xml;q=0.9, */*;q=0.8"
)


@dataclass(slots=True)
class FeedFetcher:
    settings: Settings | None = None
    client: httpx.AsyncClient | None = None

    def __post_init__(self) -> None:
        if self.settings is None:
            self.settings = get_settings()

    async def fetch(self, source_url: str) -> list[Article]:
        """Fetch one feed; any failure yields an empty list."""
        timeout = self.settings.feed_timeout
        try:
            return await asyncio.wait_for(self._fetch_feed(source_url), timeout=timeout)
        except asyncio.TimeoutError:
            error = SourceFetchError(source_url, f"timed out after {timeout}s")
        except SourceFetchError as exc:
            error = exc
        except Exception as exc:
            error = SourceFetchError(source_url, f"{exc.__class__.__name__}: {exc}")
        logger.warning("Skipping feed %s", error)
        return []

    async def _fetch_feed(self, source_url: str) -> list[Article]:
        client = self.client or await get_http_client(self.settings)
        try:
            response = await client.get(source_url, headers={"Accept": FEED_ACCEPT})
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise SourceFetchError(
                source_url, str(exc) or exc.__class__.__name__
            ) from exc
        articles = parse_feed(
            response.content,
            fetched_at=datetime.now(timezone.utc),
            source_url=source_url,
        )
        logger.info("Fetched %d articles from %s", len(articles), source_url)
        return articles


def parse_feed(
    content: bytes | str, fetched_at: datetime, source_url: str = ""
) -> list[Article]:
    """Normalize an RSS 1.0, RSS 2.0 or Atom document into presentable articles."""
    soup = BeautifulSoup(content, "xml")
    channel = soup.find(_matcher("channel")) or soup.find(_matcher("feed"))
    if channel is None:
        raise SourceFetchError(source_url, "not an RSS or Atom document")

    # RSS 1.0 keeps its items next to the channel under rdf:RDF
    container = channel
    if channel.parent is not None and channel.parent.namespace == RDF_NS:
        container = channel.parent

    source = _text(_find(channel, "title")) or UNKNOWN_SOURCE
    articles: list[Article] = []
    for entry in container.find_all(["item", "entry"], recursive=False):
        if entry.prefix:
            continue
        article = _build_article(entry, source, fetched_at)
        if article.is_presentable():
            articles.append(article)
    return articles


def _build_article(entry: Tag, source: str, fetched_at: datetime) -> Article:
    raw_description = (
        _text(_find(entry, "encoded", CONTENT_NS))
        or _text(_find(entry, "content"))
        or _text(_find(entry, "description"))
        or _text(_find(entry, "summary"))
    )
    published = (
        _text(_find(entry, "pubDate"))
        or _text(_find(entry, "published"))
        or _text(_find(entry, "updated"))
        or _text(_find(entry, "date", DC_NS))
    )
    return Article(
        title=_text(_find(entry, "title")),
        url=_entry_link(entry),
        description=_plain_text(raw_description),
        published_at=_parse_datetime(published) or fetched_at,
        source=source,
        image_url=_extract_image(entry),
    )


def _extract_image(entry: Tag) -> str | None:
    # media:content, then media:thumbnail, then an image enclosure
    for name in ("content", "thumbnail"):
        media = _find(entry, name, MEDIA_NS, recursive=True)
        if media is not None and media.get("url"):
            return media["url"].strip()

    enclosure = _find(entry, "enclosure")
    if enclosure is not None and _is_image(enclosure.get("type")):
        url = enclosure.get("url")
        if url:
            return url.strip()

    for link in entry.find_all(_matcher("link"), recursive=False):
        if link.get("rel") == "enclosure" and _is_image(link.get("type")):
            href = link.get("href")
            if href:
                return href.strip()
    return None


def _entry_link(entry: Tag) -> str:
    for link in entry.find_all(_matcher("link"), recursive=False):
        href = link.get("href")
        if href:
            if link.get("rel", "alternate") == "alternate":
                return href.strip()
            continue
        text = link.get_text(strip=True)
        if text:
            return text
    return ""


def _is_image(mime_type: str | None) -> bool:
    return bool(mime_type) and mime_type.strip().lower().startswith("image/")


def _matcher(name: str, namespace: str | None = None) -> Callable[[Tag], bool]:
    # Unprefixed elements only, unless a namespace is asked for
    def matches(tag: Tag) -> bool:
        if tag.name != name:
            return False
        if namespace is None:
            return not tag.prefix
        return tag.namespace == namespace

    return matches


def _find(
    parent: Tag, name: str, namespace: str | None = None, recursive: bool = False
) -> Tag | None:
    return parent.find(_matcher(name, namespace), recursive=recursive)


def _text(tag: Tag | None) -> str:
    if tag is None:
        return ""
    return tag.get_text(" ", strip=True)


def _plain_text(value: str) -> str:
    if not value:
        return ""
    if "<" not in value:
        return value
    return BeautifulSoup(value, "lxml").get_text(" ", strip=True)


def _parse_datetime(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        parsed = date_parser.parse(value, tzinfos=TZINFOS)
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)
    except (ValueError, TypeError, OverflowError):
        return None
