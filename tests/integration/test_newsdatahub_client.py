import asyncio

import pytest

from core.config import Config
from core.exceptions import HttpStatusError, MissingCredentialsError, NetworkError, UpstreamUnavailableError
from core.http_client import FetchResponse
from core.sources import NewsDataHubClient, NewsQueryParams
from core.sources.tier import TIER_DEVELOPER, TIER_FREE

PAGE_PAYLOAD = {
    "total_results": 2,
    "per_page": 2,
    "next_cursor": "next-page",
    "data": [
        {"id": "a1", "title": "Chip plant opens", "source_title": "Reuters",
         "pub_date": "2025-10-10T09:00:00Z", "keywords": ["chips"],
         "source": {"id": "reuters", "country": "GB", "political_leaning": "center"}},
        {"id": "a2", "title": "Export rules", "source_title": "AP", "pub_date": "2025-10-10T10:00:00Z"},
    ],
}


class FakeHttpClient:
    def __init__(self, responses=None, error=None):
        self.responses = list(responses or [])
        self.error = error
        self.requests = []

    async def fetch_json_with_headers(self, url, headers=None):
        self.requests.append((url, headers))
        if self.error is not None:
            raise self.error
        return self.responses.pop(0)

    async def fetch_json(self, url, headers=None):
        response = await self.fetch_json_with_headers(url, headers)
        return response.data


def run(coroutine):
    return asyncio.run(coroutine)


def test_get_news_parses_page_and_sends_key(config, cache):
    """Test URL, auth header, parsing and tier detection for one page."""
    http = FakeHttpClient([FetchResponse(PAGE_PAYLOAD, {"x-quota-limit": "10000"})])
    client = NewsDataHubClient(http, cache, config)

    response = run(client.get_news(NewsQueryParams(q="chips", language="en", end_date="2025-10-10")))

    url, headers = http.requests[0]
    assert url.startswith("https://api.test/v1/news?")
    assert "q=chips" in url and "language=en" in url
    assert headers == {"X-API-Key": "test-news-key-9876"}
    assert [article.id for article in response.data] == ["a1", "a2"]
    assert response.data[0].source.country == "GB"
    assert response.next_cursor == "next-page"
    assert response.api_tier == TIER_DEVELOPER


def test_get_news_detects_free_tier(config, cache):
    http = FakeHttpClient([FetchResponse(PAGE_PAYLOAD, {"x-quota-limit": "100", "x-quota-type": "daily"})])
    client = NewsDataHubClient(http, cache, config)

    assert run(client.get_news(NewsQueryParams(q="chips"))).api_tier == TIER_FREE


def test_get_news_is_cached(config, cache):
    """Test that an identical page request is served from the cache."""
    http = FakeHttpClient([FetchResponse(PAGE_PAYLOAD, {})])
    client = NewsDataHubClient(http, cache, config)
    params = NewsQueryParams(q="chips", end_date="2025-10-10")

    first = run(client.get_news(params))
    second = run(client.get_news(NewsQueryParams(q="chips", end_date="2025-10-10")))

    assert second is first
    assert len(http.requests) == 1


def test_missing_key_fails_before_network(cache):
    """Test that credentials are checked before any request."""
    http = FakeHttpClient([FetchResponse(PAGE_PAYLOAD, {})])
    client = NewsDataHubClient(http, cache, Config())

    with pytest.raises(MissingCredentialsError):
        run(client.get_news(NewsQueryParams(q="chips")))

    assert http.requests == []


def test_transient_failure_becomes_upstream_unavailable(config, cache):
    """Test that exhausted transient failures surface as a friendly error."""
    http = FakeHttpClient(error=HttpStatusError(503, "https://api.test/v1/news", "busy"))
    client = NewsDataHubClient(http, cache, config)

    with pytest.raises(UpstreamUnavailableError) as excinfo:
        run(client.get_news(NewsQueryParams(q="chips")))

    assert "temporarily unavailable" in str(excinfo.value)
    assert len(cache) == 0


@pytest.mark.parametrize("error", [
    HttpStatusError(401, "https://api.test/v1/news", "unauthorized"),
    NetworkError("payload_error", "https://api.test/v1/news"),
])
def test_permanent_failure_propagates_unchanged(config, cache, error):
    client = NewsDataHubClient(FakeHttpClient(error=error), cache, config)

    with pytest.raises(type(error)):
        run(client.get_news(NewsQueryParams(q="chips")))


def test_get_related_builds_url_and_caches(config, cache):
    """Test the related-articles endpoint and its cache."""
    payload = {"related_to": {"id": "a/1"}, "data": [{"id": "r1", "title": "Related"}]}
    http = FakeHttpClient([FetchResponse(payload, {})])
    client = NewsDataHubClient(http, cache, config)

    first = run(client.get_related("a/1"))
    second = run(client.get_related("a/1"))

    assert http.requests[0][0] == "https://api.test/v1/news/a%2F1/related?per_page=5"
    assert first.count == 1
    assert second is first
