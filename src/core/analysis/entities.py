#!/usr/bin/env python3
"""
Named entity extraction over a topic's coverage.

Asks the LLM for the most mentioned organizations, people and locations.
Any call or parse failure degrades to empty lists; only successful
extractions are cached.
"""

import json
import logging
import re
from typing import Any, List, Optional

from .prompts import build_entity_messages
from ..cache import TTLCache
from ..cache_keys import entities_key
from ..config import Config
from ..date_utils import calculate_cache_ttl
from ..exceptions import ResponseParseError
from ..models import Article, TopEntities

logger = logging.getLogger(__name__)

MAX_ENTITIES_PER_CATEGORY = 10

_CODE_FENCE_START = re.compile(r'^```(?:json)?\s*')
_CODE_FENCE_END = re.compile(r'\s*```$')


def _string_items(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value[:MAX_ENTITIES_PER_CATEGORY] if isinstance(item, str)]


def parse_entities_response(response: str) -> TopEntities:
    """
    Parse the LLM's JSON answer, tolerating markdown code fences.

    Raises:
        ResponseParseError: If the text is not a JSON object
    """
    text = response.strip()
    if text.startswith('```'):
        text = _CODE_FENCE_END.sub('', _CODE_FENCE_START.sub('', text))

    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as e:
        raise ResponseParseError('entity extraction response', e, response)

    if not isinstance(parsed, dict):
        raise ResponseParseError('entity extraction response',
                                 TypeError(f"expected object, got {type(parsed).__name__}"), response)

    return TopEntities(
        organizations=_string_items(parsed.get('organizations')),
        people=_string_items(parsed.get('people')),
        locations=_string_items(parsed.get('locations')),
    )


class EntityExtractor:
    """Cached, failure-tolerant entity extraction."""

    def __init__(self, llm_client, cache: TTLCache, config: Config):
        """
        Initialize entity extractor.

        Args:
            llm_client: Object with async generate_chat_completion(messages) -> str,
                or None when no LLM is configured
            cache: Shared process cache
            config: Application configuration
        """
        self.llm_client = llm_client
        self.cache = cache
        self.config = config

    async def extract_top_entities(self,
                                   topic: str,
                                   start_date: str,
                                   end_date: str,
                                   language: Optional[str],
                                   articles: List[Article]) -> TopEntities:
        """
        Extract top entities for a topic window.

        Returns empty lists without calling the LLM when there are too few
        articles or no LLM client.
        """
        if len(articles) < self.config.app.min_articles_for_entities:
            logger.info(f"Insufficient articles for entity extraction ({len(articles)}) for '{topic}'")
            return TopEntities()

        if self.llm_client is None:
            logger.warning("Entity extraction skipped: no LLM client configured")
            return TopEntities()

        cache_key = entities_key(topic, start_date, end_date, language, len(articles))
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.info(f"Returning cached entities for '{topic}'")
            return cached

        sample = articles[:self.config.app.max_articles_for_entities]
        try:
            logger.info(f"Extracting entities via LLM for '{topic}' ({len(articles)} articles)")
            response = await self.llm_client.generate_chat_completion(build_entity_messages(topic, sample))
            entities = parse_entities_response(response)
        except Exception as e:
            logger.error(f"Failed to extract entities for '{topic}': {e}")
            return TopEntities()

        ttl = calculate_cache_ttl(
            end_date,
            self.config.cache.ttl_current_day_seconds,
            self.config.cache.ttl_historical_seconds,
        )
        self.cache.set(cache_key, entities, ttl)

        logger.info(f"Extracted entities for '{topic}': {len(entities.organizations)} organizations, "
                    f"{len(entities.people)} people, {len(entities.locations)} locations")
        return entities
