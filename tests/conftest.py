import pytest

from trendwire.config import Settings


@pytest.fixture
def settings() -> Settings:
    return Settings(
        feed_urls=["https://feeds.example/a.xml", "https://feeds.example/b.xml"],
        ranking_api_key="test-key",
        ranking_timeout=1.0,
        feed_timeout=1.0,
        refresh_interval_seconds=0,
        refresh_on_startup=False,
    )
