import json

import httpx
import pytest
import respx

from trendwire.config import Settings
from trendwire.errors import RankingServiceError
from trendwire.models.news import CandidateSummary
from trendwire.services.ranking import ChatCompletionRanker, parse_ranked_indices

COMPLETIONS_URL = "https://api.deepseek.com/v1/chat/completions"

CANDIDATES = [
    CandidateSummary(index=0, title="First candidate headline", description="a", source="A"),
    CandidateSummary(index=1, title="Second candidate headline", description="b", source="B"),
]


def _completion(content: str) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


@pytest.mark.parametrize(
    ("content", "expected"),
    [
        ("[3, 7, 12]", [3, 7, 12]),
        ("Here are the picks:\n[4,1, 0]\nEnjoy!", [4, 1, 0]),
        ("Top stories are 5, 9 and 14.", [5, 9, 14]),
        ("[1,,2] and also 8", [1, 2, 8]),
        ("[ ]", []),
    ],
)
def test_parse_ranked_indices(content: str, expected: list[int]) -> None:
    assert parse_ranked_indices(content) == expected


def test_parse_ranked_indices_caps_loose_numbers() -> None:
    content = " ".join(str(number) for number in range(45))

    assert parse_ranked_indices(content, limit=30) == list(range(30))


def test_parse_ranked_indices_without_numbers_fails() -> None:
    with pytest.raises(RankingServiceError):
        parse_ranked_indices("I cannot help with that.")


@pytest.mark.asyncio
async def test_ranker_posts_chat_completion(settings) -> None:
    async with httpx.AsyncClient() as client:
        ranker = ChatCompletionRanker(settings=settings, client=client)
        with respx.mock(assert_all_called=True) as mock:
            route = mock.post(COMPLETIONS_URL).respond(
                200, json=_completion("  [1, 0]  ")
            )
            indices = await ranker.rank(CANDIDATES)

    assert indices == [1, 0]
    request = route.calls.last.request
    assert request.headers["Authorization"] == "Bearer test-key"
    body = json.loads(request.content)
    assert body["model"] == "deepseek-chat"
    assert body["temperature"] == pytest.approx(0.3)
    assert body["max_tokens"] == 500
    assert len(body["messages"]) == 1
    prompt = body["messages"][0]["content"]
    assert body["messages"][0]["role"] == "user"
    assert "Second candidate headline" in prompt
    assert "JSON array" in prompt


@pytest.mark.asyncio
async def test_ranker_without_api_key_fails_before_calling_out() -> None:
    settings = Settings(ranking_api_key=None)
    async with httpx.AsyncClient() as client:
        ranker = ChatCompletionRanker(settings=settings, client=client)
        with respx.mock(assert_all_called=False) as mock:
            route = mock.post(COMPLETIONS_URL).respond(200, json=_completion("[0]"))
            with pytest.raises(RankingServiceError):
                await ranker.rank(CANDIDATES)

    assert not route.called


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(401, json={"error": "invalid api key"}),
        httpx.Response(200, text="<html>gateway</html>"),
        httpx.Response(200, json={"choices": []}),
        httpx.Response(200, json=_completion("I cannot help with that.")),
    ],
)
async def test_ranker_failures_raise_ranking_error(settings, response) -> None:
    async with httpx.AsyncClient() as client:
        ranker = ChatCompletionRanker(settings=settings, client=client)
        with respx.mock(assert_all_called=True) as mock:
            mock.post(COMPLETIONS_URL).mock(return_value=response)
            with pytest.raises(RankingServiceError):
                await ranker.rank(CANDIDATES)


@pytest.mark.asyncio
async def test_ranker_network_error_raises_ranking_error(settings) -> None:
    async with httpx.AsyncClient() as client:
        ranker = ChatCompletionRanker(settings=settings, client=client)
        with respx.mock(assert_all_called=True) as mock:
            mock.post(COMPLETIONS_URL).mock(side_effect=httpx.ConnectTimeout("down"))
            with pytest.raises(RankingServiceError):
                await ranker.rank(CANDIDATES)
