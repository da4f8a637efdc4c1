class TrendwireError(Exception):
    """Base class for pipeline errors."""


class SourceFetchError(TrendwireError):
    """A single feed source could not be fetched or parsed."""

    def __init__(self, source_url: str, reason: str) -> None:
        super().__init__(f"{source_url}: {reason}")
        self.source_url = source_url
        self.reason = reason


class RankingServiceError(TrendwireError):
    """The ranking service failed or returned nothing usable."""


class NoCandidatesError(TrendwireError):
    """A pipeline run ended with no articles to curate."""


class CacheEmptyError(TrendwireError):
    """A run produced nothing and there is no cached result to serve."""
