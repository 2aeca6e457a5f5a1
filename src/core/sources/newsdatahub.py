#!/usr/bin/env python3
"""
NewsDataHub article source.

Cursor-paginated article search plus related-article lookups, both cached
in the shared TTL cache. Requests go through the retry-guarded JSON client.
"""

import logging
from typing import Optional
from urllib.parse import quote

from .base import ArticleSource, NewsQueryParams
from .tier import detect_api_tier
from ..cache import TTLCache
from ..cache_keys import news_key, related_key
from ..config import Config
from ..date_utils import calculate_cache_ttl
from ..exceptions import SourceError, UpstreamUnavailableError
from ..http_client import JsonHttpClient
from ..models import NewsResponse, RelatedArticlesResponse
from ..query_utils import build_query_string

logger = logging.getLogger(__name__)


class NewsDataHubClient(ArticleSource):
    """Article source backed by the NewsDataHub REST API."""

    def __init__(self, http_client: JsonHttpClient, cache: TTLCache, config: Config):
        """
        Initialize NewsDataHub client.

        Args:
            http_client: Open JSON HTTP client (already entered)
            cache: Shared process cache
            config: Application configuration
        """
        self.http_client = http_client
        self.cache = cache
        self.config = config
        self.base_url = config.news_api.base_url.rstrip('/')

    def _auth_headers(self):
        return {'X-API-Key': self.config.news_api.api_key or ''}

    async def get_news(self, params: NewsQueryParams) -> NewsResponse:
        """
        Fetch one page of articles, served from cache when possible.

        Credentials are checked before the cache or the network are touched.
        The page is cached with the short TTL when it ends today and the long
        TTL otherwise.
        """
        self.config.require_credentials()

        query = params.to_dict()
        cache_key = news_key(query)

        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.debug(f"News cache hit for cursor={params.cursor or 'first'}")
            return cached

        url = f"{self.base_url}/v1/news{build_query_string(query)}"
        try:
            response = await self.http_client.fetch_json_with_headers(url, self._auth_headers())
        except SourceError as e:
            if e.is_transient:
                raise UpstreamUnavailableError('News search', e) from e
            raise

        payload = response.data if isinstance(response.data, dict) else {}
        news = NewsResponse.from_dict(payload)
        news.api_tier = detect_api_tier(response.headers, news.data)

        ttl = calculate_cache_ttl(
            params.end_date,
            self.config.cache.ttl_current_day_seconds,
            self.config.cache.ttl_historical_seconds,
        )
        self.cache.set(cache_key, news, ttl)

        logger.debug(f"Fetched {len(news.data)} articles (tier={news.api_tier}, "
                     f"next_cursor={'yes' if news.next_cursor else 'no'})")
        return news

    async def get_related(self, article_id: str, per_page: int = 5,
                          fields: Optional[str] = None) -> RelatedArticlesResponse:
        """Fetch related articles; results keep the long TTL."""
        self.config.require_credentials()

        cache_key = related_key(article_id, per_page, fields)
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        query_string = build_query_string({'per_page': per_page, 'fields': fields})
        url = f"{self.base_url}/v1/news/{quote(str(article_id), safe='')}/related{query_string}"
        payload = await self.http_client.fetch_json(url, self._auth_headers())

        related = RelatedArticlesResponse.from_dict(payload if isinstance(payload, dict) else {})
        self.cache.set(cache_key, related, self.config.cache.ttl_historical_seconds)
        return related
