#!/usr/bin/env python3
"""
Topic coverage analysis.

Combines the article fetcher, the aggregation functions and entity
extraction into one cached AnalysisRecord per (topic, date range, language).
"""

import logging
from typing import Optional

from . import aggregation
from .entities import EntityExtractor
from ..cache import TTLCache
from ..cache_keys import articles_key, processed_key
from ..config import Config
from ..date_utils import calculate_cache_ttl
from ..models import AnalysisRecord
from ..topic_fetcher import TopicArticleFetcher

logger = logging.getLogger(__name__)


class TopicAnalysisService:
    """Produces and caches coverage analytics for a topic window."""

    def __init__(self,
                 cache: TTLCache,
                 fetcher: TopicArticleFetcher,
                 entity_extractor: EntityExtractor,
                 config: Config):
        """
        Initialize topic analysis service.

        Args:
            cache: Shared process cache
            fetcher: Paginated, deduplicating article fetcher
            entity_extractor: Degrading LLM entity extraction
            config: Application configuration
        """
        self.cache = cache
        self.fetcher = fetcher
        self.entity_extractor = entity_extractor
        self.config = config

    async def analyze_topic_coverage(self,
                                     topic: str,
                                     start_date: str,
                                     end_date: str,
                                     language: Optional[str] = None) -> AnalysisRecord:
        """
        Analyze news coverage for a topic over a date range.

        A cached record is returned without any network activity. On a miss
        the full article set is fetched, cached separately under the
        articles: namespace, aggregated and cached with a TTL chosen by
        whether ``end_date`` is today.

        Args:
            topic: Search query (quote style does not matter)
            start_date: First day (YYYY-MM-DD)
            end_date: Last day (YYYY-MM-DD)
            language: Optional language filter

        Returns:
            AnalysisRecord for the window

        Raises:
            SourceError: If fetching fails; nothing is cached in that case
            ConfigurationError: If credentials are missing
        """
        cache_key = processed_key(topic, start_date, end_date, language)
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.info(f"Returning cached analysis for '{topic}' {start_date}..{end_date}")
            return cached

        result = await self.fetcher.fetch_all_topic_articles_with_tier(
            topic, start_date, end_date, language=language
        )
        articles = result.articles

        cache_ttl = calculate_cache_ttl(
            end_date,
            self.config.cache.ttl_current_day_seconds,
            self.config.cache.ttl_historical_seconds,
        )
        # Country drill-downs filter this list instead of re-fetching
        self.cache.set(articles_key(topic, start_date, end_date, language), articles, cache_ttl)

        app = self.config.app
        top_entities = await self.entity_extractor.extract_top_entities(
            topic, start_date, end_date, language, articles
        )

        record = AnalysisRecord(
            topic=topic,
            start_date=start_date,
            end_date=end_date,
            total_mentions=len(articles),
            mentions_by_day=aggregation.aggregate_mentions_by_day(articles),
            sentiment_average=aggregation.calculate_average_sentiment(articles),
            political_leaning_distribution=aggregation.aggregate_political_leaning(articles),
            top_entities=top_entities,
            top_keywords=aggregation.aggregate_top_keywords(articles, app.top_keywords_limit),
            top_sources=aggregation.aggregate_top_sources(articles, app.top_sources_limit),
            geographic_distribution=aggregation.aggregate_geographic_distribution(articles),
            top_articles=aggregation.select_representative_articles(articles, app.representative_articles_limit),
            api_tier=result.api_tier,
        )

        self.cache.set(cache_key, record, cache_ttl)
        logger.info(f"Analyzed '{topic}' {start_date}..{end_date}: {record.total_mentions} articles "
                    f"(tier={record.api_tier})")
        return record
