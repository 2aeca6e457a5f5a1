#!/usr/bin/env python3
"""
LLM-generated coverage reports and context explanations.

Both outputs are cached only after a successful completion. Unlike entity
extraction, failures here propagate to the caller.
"""

import logging
from typing import List, Optional

from .prompts import build_context_messages, build_report_messages
from .topic_analysis import TopicAnalysisService
from ..cache import TTLCache
from ..cache_keys import article_identity_key, explain_key, report_key
from ..config import Config
from ..date_utils import calculate_cache_ttl
from ..models import Article, ReportResult

logger = logging.getLogger(__name__)


class ReportService:
    """Generates and caches narrative reports."""

    def __init__(self, cache: TTLCache, analysis_service: TopicAnalysisService, llm_client, config: Config):
        self.cache = cache
        self.analysis_service = analysis_service
        self.llm_client = llm_client
        self.config = config

    def _ttl_for(self, date_string: Optional[str]) -> int:
        return calculate_cache_ttl(
            date_string,
            self.config.cache.ttl_current_day_seconds,
            self.config.cache.ttl_historical_seconds,
        )

    async def generate_report(self,
                              topic: str,
                              start_date: str,
                              end_date: str,
                              language: Optional[str] = None) -> ReportResult:
        """
        Full coverage report for a topic window.

        Raises:
            MissingCredentialsError: If API keys are missing (before any network call)
            SourceError / LLMError: If analysis or generation fails
        """
        cache_key = report_key(topic, start_date, end_date, language)
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.info(f"Returning cached report for '{topic}'")
            return ReportResult(text=cached, cached=True)

        self.config.require_credentials()

        record = await self.analysis_service.analyze_topic_coverage(topic, start_date, end_date, language)
        text = await self.llm_client.generate_chat_completion(build_report_messages(record))

        self.cache.set(cache_key, text, self._ttl_for(end_date))
        return ReportResult(text=text, cached=False)

    async def explain_context(self,
                              context: str,
                              topic: str,
                              articles: List[Article],
                              date: Optional[str] = None,
                              country: Optional[str] = None,
                              api_tier: Optional[str] = None) -> ReportResult:
        """
        Explain a coverage spike, a country's coverage or a deep-dive sample.

        Args:
            context: One of 'spike', 'geo', 'deep_dive'
            topic: Topic the articles were found for
            articles: Articles to explain (the prompt uses the first 20)
            date: Day being explained, if any
            country: Country being explained, if any
            api_tier: Tier the articles were fetched under

        Raises:
            ValueError: Unknown context
        """
        cache_key = explain_key(context, topic, date, country, article_identity_key(articles))
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.info(f"Returning cached {context} explanation for '{topic}'")
            return ReportResult(text=cached, cached=True)

        self.config.require_credentials()

        messages = build_context_messages(context, topic, articles, date, country, api_tier)
        text = await self.llm_client.generate_chat_completion(messages)

        self.cache.set(cache_key, text, self._ttl_for(date))
        return ReportResult(text=text, cached=False)
