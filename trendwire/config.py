from functools import lru_cache
from pydantic import Field, HttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_FEED_URLS = [
    "https://techcrunch.com/feed/",
    "https://www.theverge.com/rss/index.xml",
    "https://arstechnica.com/feed/",
    "https://www.wired.com/feed/rss",
    "https://feeds.feedburner.com/oreilly/radar",
    "https://www.bloomberg.com/feed/topics/technology",
    "https://feeds.reuters.com/reuters/businessNews",
    "https://www.cnbc.com/id/100003114/device/rss/rss.html",
    "https://feeds.feedburner.com/entrepreneur/latest",
    "https://www.forbes.com/real-time/feed2/",
]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="", extra="ignore", populate_by_name=True
    )

    http_timeout: float = Field(10.0, gt=0, alias="HTTP_TIMEOUT")
    http_max_connections: int = Field(20, ge=1, alias="HTTP_MAX_CONNECTIONS")
    http_max_keepalive: int = Field(10, ge=1, alias="HTTP_MAX_KEEPALIVE")
    http_user_agent: str = Field(
        "Trendwire/0.1 (+https://example.com; contact=admin@example.com)",
        alias="HTTP_USER_AGENT",
    )

    feed_urls: list[str] = Field(
        default_factory=lambda: list(DEFAULT_FEED_URLS), alias="FEED_URLS"
    )
    feed_timeout: float = Field(15.0, gt=0, alias="FEED_TIMEOUT")

    ranking_base_url: HttpUrl = Field(
        "https://api.deepseek.com/v1", alias="RANKING_BASE_URL"
    )
    ranking_api_key: str | None = Field(default=None, alias="RANKING_API_KEY")
    ranking_model: str = Field("deepseek-chat", alias="RANKING_MODEL")
    ranking_temperature: float = Field(0.3, ge=0, le=2, alias="RANKING_TEMPERATURE")
    ranking_max_tokens: int = Field(500, ge=1, alias="RANKING_MAX_TOKENS")
    ranking_timeout: float = Field(30.0, gt=0, alias="RANKING_TIMEOUT")

    candidate_limit: int = Field(100, ge=1, alias="CANDIDATE_LIMIT")
    curated_limit: int = Field(30, ge=1, alias="CURATED_LIMIT")
    description_limit: int = Field(300, ge=0, alias="DESCRIPTION_LIMIT")

    refresh_interval_seconds: float = Field(
        12 * 60 * 60, ge=0, alias="REFRESH_INTERVAL_SECONDS"
    )
    refresh_on_startup: bool = Field(True, alias="REFRESH_ON_STARTUP")

    log_level: str = Field("INFO", alias="LOG_LEVEL")


@lru_cache
def get_settings() -> Settings:
    return Settings()
