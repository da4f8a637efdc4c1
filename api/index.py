from __future__ import annotations

import logging
from datetime import datetime

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import ORJSONResponse
from mangum import Mangum

from trendwire.config import get_settings
from trendwire.errors import CacheEmptyError
from trendwire.http_client import get_http_client, shutdown_http_client
from trendwire.models.news import Article, NewsSnapshot
from trendwire.scheduler import RefreshScheduler
from trendwire.services import NewsService

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="Trendwire News API",
    version="0.1.0",
    description=(
        "Trending technology and business news, pulled from RSS and Atom feeds "
        "and curated by a ranking service."
    ),
    default_response_class=ORJSONResponse,
)


def get_news_service(request: Request) -> NewsService:
    service = getattr(request.app.state, "news_service", None)
    if service is None:
        # serverless invocations may skip startup events
        service = NewsService(settings=settings)
        request.app.state.news_service = service
    return service


def _snapshot(
    articles: list[Article], fetched_at: datetime | None, message: str
) -> NewsSnapshot:
    return NewsSnapshot(
        articles=articles,
        count=len(articles),
        last_fetch_time=fetched_at,
        message=message,
    )


@app.get("/health", tags=["system"])
async def healthcheck(service: NewsService = Depends(get_news_service)) -> dict:
    last_fetch = service.get_last_fetch_time()
    return {
        "status": "ok",
        "last_fetch_time": last_fetch.isoformat() if last_fetch else None,
        "cached_articles": len(service.get_cached_articles()),
        "refreshing": service.is_running,
    }


@app.get("/api/news", tags=["news"], response_model=NewsSnapshot)
async def cached_news(service: NewsService = Depends(get_news_service)):
    articles = service.get_cached_articles()
    message = (
        "News retrieved successfully"
        if articles
        else "No news available. Please trigger a refresh."
    )
    return _snapshot(articles, service.get_last_fetch_time(), message)


@app.api_route(
    "/api/refresh", methods=["GET", "POST"], tags=["news"], response_model=NewsSnapshot
)
async def refresh_news(service: NewsService = Depends(get_news_service)):
    try:
        articles = await service.fetch_and_curate()
    except CacheEmptyError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    return _snapshot(
        articles,
        service.get_last_fetch_time(),
        f"Fetched {len(articles)} articles.",
    )


@app.on_event("startup")
async def on_startup() -> None:
    client = await get_http_client(settings)
    service = NewsService(settings=settings, client=client)
    scheduler = RefreshScheduler(
        service,
        interval_seconds=settings.refresh_interval_seconds,
        run_immediately=settings.refresh_on_startup,
    )
    app.state.news_service = service
    app.state.scheduler = scheduler
    scheduler.start()


@app.on_event("shutdown")
async def on_shutdown() -> None:
    scheduler: RefreshScheduler | None = getattr(app.state, "scheduler", None)
    if scheduler is not None:
        await scheduler.stop()
    service: NewsService | None = getattr(app.state, "news_service", None)
    if service is not None:
        service.state.clear()
    await shutdown_http_client()


handler = Mangum(app)
