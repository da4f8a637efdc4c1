from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator

REMOVED_TITLE = "[Removed]"
MIN_TITLE_LENGTH = 10


class Article(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str = Field(description="Article headline")
    url: str = Field(description="Link to the article")
    description: str = Field(default="", description="Plain-text teaser")
    published_at: datetime = Field(
        description="Publication timestamp in UTC, or fetch time if the feed omits it"
    )
    source: str = Field(default="Unknown Source", description="Feed title")
    image_url: str | None = Field(default=None, description="Lead image if the feed has one")

    @field_validator("published_at")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def is_presentable(self) -> bool:
        """Whether the article may enter the pipeline at all."""
        return (
            bool(self.title)
            and bool(self.url)
            and self.title != REMOVED_TITLE
            and len(self.title) > MIN_TITLE_LENGTH
        )


class CandidateSummary(BaseModel):
    index: int = Field(description="Position in the candidate window")
    title: str
    description: str = ""
    source: str


class NewsSnapshot(BaseModel):
    articles: list[Article] = Field(default_factory=list)
    count: int = Field(description="Number of articles in the snapshot")
    last_fetch_time: datetime | None = Field(
        default=None, description="UTC timestamp of the last successful curation"
    )
    message: str = ""
