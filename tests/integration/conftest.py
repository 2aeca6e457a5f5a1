import sys
from pathlib import Path
from typing import Dict, List, Optional

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[2]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

# Also add the project root to handle absolute imports
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from core.cache import TTLCache  # noqa: E402
from core.config import Config, IntegrationConfig, NewsApiConfig  # noqa: E402
from core.exceptions import HttpStatusError  # noqa: E402
from core.models import (  # noqa: E402
    Article,
    NewsResponse,
    RelatedArticlesResponse,
    Sentiment,
    SourceMetadata,
)
from core.sources.base import ArticleSource, NewsQueryParams  # noqa: E402

CONFIG_ENV_VARS = [
    "NEWSDATAHUB_API_KEY", "NEWSDATAHUB_BASE_URL", "OPENAI_API_KEY", "OPENAI_MODEL",
    "OPENAI_TEMPERATURE", "CACHE_TTL_HISTORICAL", "CACHE_TTL_CURRENT_DAY", "NEWS_PAGE_SIZE",
    "MAX_PAGINATION_LOOPS", "REQUEST_TIMEOUT", "LOG_LEVEL", "VERBOSE_LOGGING",
    "RETRY_MAX_RETRIES", "RETRY_BACKOFF_MULTIPLIER", "MIN_ARTICLES_FOR_ENTITIES",
]


class FakeClock:
    def __init__(self, start: float = 1_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeArticleSource(ArticleSource):
    """Serves scripted pages in order and records every request."""

    def __init__(self, pages: Optional[List[NewsResponse]] = None) -> None:
        self.pages: List[NewsResponse] = list(pages or [])
        self.calls: List[NewsQueryParams] = []
        self.related: Dict[str, List[Article]] = {}
        self.related_calls: List[str] = []
        self.failing_related: set = set()
        self.fail_with: Optional[Exception] = None

    async def get_news(self, params: NewsQueryParams) -> NewsResponse:
        self.calls.append(params)
        if self.fail_with is not None:
            raise self.fail_with
        index = len(self.calls) - 1
        if index < len(self.pages):
            return self.pages[index]
        return NewsResponse(data=[], next_cursor=None, api_tier="developer")

    async def get_related(self, article_id: str, per_page: int = 5,
                          fields: Optional[str] = None) -> RelatedArticlesResponse:
        self.related_calls.append(article_id)
        if article_id in self.failing_related:
            raise HttpStatusError(404, f"https://api.test/v1/news/{article_id}/related", "not found")
        data = self.related.get(article_id, [])
        return RelatedArticlesResponse(related_to={"id": article_id}, count=len(data), data=data)


class FakeLLMClient:
    def __init__(self, responses: Optional[List[str]] = None, error: Optional[Exception] = None) -> None:
        self.responses = list(responses or [])
        self.error = error
        self.calls: List[List[Dict[str, str]]] = []

    async def generate_chat_completion(self, messages: List[Dict[str, str]]) -> str:
        self.calls.append(messages)
        if self.error is not None:
            raise self.error
        return self.responses.pop(0) if self.responses else "Generated text"


def build_article(title: str,
                  article_id: Optional[str] = None,
                  pub_date: str = "2025-10-10T12:00:00Z",
                  country: Optional[str] = None,
                  leaning: Optional[str] = None,
                  sentiment: Optional[Dict[str, float]] = None,
                  keywords: Optional[List[str]] = None,
                  topics: Optional[List[str]] = None,
                  source_title: str = "Example News",
                  description: str = "") -> Article:
    source = None
    if country is not None or leaning is not None:
        source = SourceMetadata(id=source_title.lower().replace(" ", "-"), country=country, political_leaning=leaning)
    return Article(
        id=article_id if article_id is not None else f"id-{title.lower().replace(' ', '-')}",
        title=title,
        source_title=source_title,
        article_link=f"https://news.example.com/{title.lower().replace(' ', '-')}",
        description=description,
        pub_date=pub_date,
        language="en",
        keywords=keywords,
        topics=topics,
        sentiment=Sentiment(**sentiment) if sentiment is not None else None,
        source=source,
    )


def page(articles: List[Article], next_cursor: Optional[str] = None, api_tier: str = "developer") -> NewsResponse:
    return NewsResponse(data=list(articles), total_results=len(articles), per_page=len(articles),
                        next_cursor=next_cursor, api_tier=api_tier)


@pytest.fixture
def make_article():
    return build_article


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock) -> TTLCache:
    return TTLCache(now=clock)


@pytest.fixture
def config() -> Config:
    return Config(
        news_api=NewsApiConfig(base_url="https://api.test", api_key="test-news-key-9876"),
        integrations=IntegrationConfig(openai_api_key="sk-test-1234"),
    )


@pytest.fixture
def fake_source_factory():
    def _factory(pages: Optional[List[NewsResponse]] = None) -> FakeArticleSource:
        return FakeArticleSource(pages)

    return _factory


@pytest.fixture
def fake_llm_factory():
    def _factory(responses: Optional[List[str]] = None, error: Optional[Exception] = None) -> FakeLLMClient:
        return FakeLLMClient(responses, error)

    return _factory


@pytest.fixture
def clean_env(monkeypatch):
    """Environment without any configuration variables set; restored afterwards."""
    for name in CONFIG_ENV_VARS:
        # setenv records the original value, so writes made later by the test are undone too
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    return monkeypatch


@pytest.fixture
def make_page():
    return page
