#!/usr/bin/env python3
"""
Topic article fetcher.

Drives an article source across cursor pages, merges the pages,
deduplicates by title and strips free-tier placeholder data. Fetch
failures propagate unchanged; retries happen only in the HTTP layer.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import List, Optional

from .cache import TTLCache
from .cache_keys import articles_key, processed_key
from .config import FetchConfig
from .deduplication import deduplicate_articles, deduplicate_with_result
from .exceptions import SourceError
from .models import Article
from .query_utils import clamp_language, normalize_search_query, upper_country
from .sources.base import ArticleSource, NewsQueryParams, DEFAULT_ARTICLE_FIELDS, DEFAULT_MEDIA_TYPES
from .sources.tier import TIER_FREE, sanitize_articles_for_tier

logger = logging.getLogger(__name__)

UNKNOWN_COUNTRY_CODE = 'ZZ'


@dataclass
class FetchArticlesResult:
    """Deduplicated articles plus the tier seen on the first page."""
    articles: List[Article] = field(default_factory=list)
    api_tier: Optional[str] = None
    pages_fetched: int = 0
    truncated: bool = False


def filter_articles_by_country(articles: List[Article], country: str) -> List[Article]:
    """Keep articles whose source country matches (case-insensitive, missing = ZZ)."""
    wanted = country.upper()
    return [
        article for article in articles
        if ((article.source.country if article.source else None) or UNKNOWN_COUNTRY_CODE).upper() == wanted
    ]


class TopicArticleFetcher:
    """Fetches the complete, deduplicated article set for a topic window."""

    def __init__(self, source: ArticleSource, cache: TTLCache, config: Optional[FetchConfig] = None):
        """
        Initialize fetcher.

        Args:
            source: Article source returning one cursor page per call
            cache: Shared process cache (read for cached article lists)
            config: Pagination and related-article settings
        """
        self.source = source
        self.cache = cache
        self.config = config or FetchConfig()

    async def fetch_all_topic_articles_with_tier(self,
                                                 topic: str,
                                                 start_date: str,
                                                 end_date: str,
                                                 country: Optional[str] = None,
                                                 language: Optional[str] = None,
                                                 max_loops: Optional[int] = None) -> FetchArticlesResult:
        """
        Fetch every page for a topic and return deduplicated, sanitized articles.

        Pagination stops when the cursor runs out or after ``max_loops``
        pages; hitting the cap truncates silently (logged as a warning).

        Args:
            topic: Search query; curly quotes are normalized once here
            start_date: First day (YYYY-MM-DD)
            end_date: Last day (YYYY-MM-DD)
            country: Optional source country filter
            language: Optional language filter
            max_loops: Page cap (default from config)

        Returns:
            FetchArticlesResult with articles in first-seen order

        Raises:
            SourceError: If any page fetch fails after HTTP retries
        """
        max_loops = max_loops if max_loops is not None else self.config.max_pagination_loops
        normalized_topic = normalize_search_query(topic)

        cursor: Optional[str] = None
        all_articles: List[Article] = []
        detected_tier: Optional[str] = None
        pages = 0
        truncated = False

        while True:
            response = await self.source.get_news(NewsQueryParams(
                q=normalized_topic,
                start_date=start_date,
                end_date=end_date,
                language=clamp_language(language),
                country=upper_country(country),
                per_page=self.config.page_size,
                cursor=cursor,
                media_type=DEFAULT_MEDIA_TYPES,
                fields=DEFAULT_ARTICLE_FIELDS,
            ))

            # Tier is constant for a query; only the first page decides it
            if pages == 0:
                detected_tier = response.api_tier

            all_articles.extend(response.data)
            cursor = response.next_cursor or None
            pages += 1

            if not cursor:
                break
            if pages >= max_loops:
                truncated = True
                logger.warning(f"Stopped paginating '{normalized_topic}' after {pages} pages; "
                               f"remaining results were skipped")
                break

        deduplicated, dedup_result = deduplicate_with_result(all_articles)
        if dedup_result.duplicates_found:
            logger.info(f"Deduplicated articles: {dedup_result.original_count} -> "
                        f"{dedup_result.unique_count} (removed {dedup_result.duplicates_found}, "
                        f"{dedup_result.duplicate_rate:.1f}%)")

        articles = sanitize_articles_for_tier(deduplicated, detected_tier)
        if detected_tier == TIER_FREE:
            logger.info(f"Free tier detected - sanitized fields on {len(articles)} articles for '{normalized_topic}'")

        return FetchArticlesResult(
            articles=articles,
            api_tier=detected_tier,
            pages_fetched=pages,
            truncated=truncated,
        )

    async def fetch_all_topic_articles(self,
                                       topic: str,
                                       start_date: str,
                                       end_date: str,
                                       country: Optional[str] = None,
                                       language: Optional[str] = None,
                                       max_loops: Optional[int] = None) -> List[Article]:
        """Same as fetch_all_topic_articles_with_tier, articles only."""
        result = await self.fetch_all_topic_articles_with_tier(
            topic, start_date, end_date, country=country, language=language, max_loops=max_loops
        )
        return result.articles

    async def get_cached_or_fetch_articles_with_tier(self,
                                                     topic: str,
                                                     start_date: str,
                                                     end_date: str,
                                                     language: Optional[str] = None) -> FetchArticlesResult:
        """
        Reuse the article list cached by a topic analysis, fetching on a miss.

        A hit takes its tier from the analysis record cached next to the
        list. A miss is not written back; the analysis owns the articles: entry.
        """
        cached = self.cache.get(articles_key(topic, start_date, end_date, language))
        if cached is not None:
            record = self.cache.get(processed_key(topic, start_date, end_date, language))
            logger.info(f"Using {len(cached)} cached articles for '{normalize_search_query(topic)}'")
            return FetchArticlesResult(articles=cached, api_tier=getattr(record, 'api_tier', None))

        logger.info(f"Articles not in cache, fetching '{normalize_search_query(topic)}' "
                    f"{start_date}..{end_date}")
        return await self.fetch_all_topic_articles_with_tier(topic, start_date, end_date, language=language)

    async def get_cached_or_fetch_articles(self,
                                           topic: str,
                                           start_date: str,
                                           end_date: str,
                                           language: Optional[str] = None) -> List[Article]:
        result = await self.get_cached_or_fetch_articles_with_tier(topic, start_date, end_date, language)
        return result.articles

    async def search_articles_with_tier(self,
                                        topic: str,
                                        start_date: str,
                                        end_date: str,
                                        country: Optional[str] = None,
                                        language: Optional[str] = None,
                                        pad_with_related: bool = True) -> FetchArticlesResult:
        """
        Search a topic window, padding thin results with related articles.

        When fewer than ``min_articles_before_related`` (but at least one)
        articles come back, related articles for the first
        ``max_related_lookups`` results are merged in, then the whole set is
        deduplicated and sanitized for the tier again. A failed related
        lookup contributes nothing.
        """
        result = await self.fetch_all_topic_articles_with_tier(
            topic, start_date, end_date, country=country, language=language
        )
        articles = result.articles

        if not pad_with_related or not 0 < len(articles) < self.config.min_articles_before_related:
            return result

        related: List[Article] = []
        for article in articles[:self.config.max_related_lookups]:
            if not article.id:
                continue
            try:
                response = await self.source.get_related(article.id)
            except SourceError as e:
                logger.warning(f"Related articles lookup failed for {article.id}: {e}")
                continue
            related.extend(response.data)

        if not related:
            return result

        padded = sanitize_articles_for_tier(deduplicate_articles(articles + related), result.api_tier)
        logger.info(f"Padded {len(articles)} articles with related coverage -> {len(padded)}")
        return replace(result, articles=padded)

    async def search_articles(self,
                              topic: str,
                              start_date: str,
                              end_date: str,
                              country: Optional[str] = None,
                              language: Optional[str] = None,
                              pad_with_related: bool = True) -> List[Article]:
        """Same as search_articles_with_tier, articles only."""
        result = await self.search_articles_with_tier(
            topic, start_date, end_date, country=country, language=language, pad_with_related=pad_with_related
        )
        return result.articles
