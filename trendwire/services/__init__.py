from .curator import Curator
from .dedupe import dedupe
from .feeds import FeedFetcher
from .news import NewsService
from .ranking import ChatCompletionRanker, Ranker
from .state import FetchSnapshot, FetchState

__all__ = [
    "ChatCompletionRanker",
    "Curator",
    "FeedFetcher",
    "FetchSnapshot",
    "FetchState",
    "NewsService",
    "Ranker",
    "dedupe",
]
