#!/usr/bin/env python3
"""
API tier detection and tier-based article sanitization.

The free tier is recognized from the quota headers. When the headers are
inconclusive, article content is scanned for the placeholder text the API
puts in place of gated fields. That fallback depends on the upstream wording
and breaks silently if it changes.
"""

import logging
from dataclasses import replace
from typing import Iterable, List, Mapping, Optional

from ..models import Article, SourceMetadata

logger = logging.getLogger(__name__)

TIER_FREE = 'free'
TIER_DEVELOPER = 'developer'

FREE_TIER_QUOTA_LIMIT = '100'
FREE_TIER_QUOTA_TYPE = 'daily'

# Text the API substitutes for fields the current plan cannot see
UNAVAILABLE_PLACEHOLDER = 'Available on Developer plan and higher'


def _contains_placeholder(values: Optional[List[str]]) -> bool:
    return bool(values) and UNAVAILABLE_PLACEHOLDER in values


def detect_api_tier(headers: Mapping[str, str], articles: Optional[Iterable[Article]] = None) -> str:
    """
    Detect the subscription tier from response headers, then from content.

    Args:
        headers: Response headers with lowercased names
        articles: Articles from the same response, scanned for placeholders

    Returns:
        'free' or 'developer'
    """
    quota_limit = headers.get('x-quota-limit')
    quota_type = headers.get('x-quota-type')

    if quota_limit == FREE_TIER_QUOTA_LIMIT and quota_type == FREE_TIER_QUOTA_TYPE:
        return TIER_FREE

    for article in articles or []:
        if _contains_placeholder(article.topics) or _contains_placeholder(article.keywords):
            logger.debug("Tier detected from placeholder content, quota headers were inconclusive")
            return TIER_FREE

    return TIER_DEVELOPER


def sanitize_article_for_tier(article: Article) -> Article:
    """
    Return a copy of the article without free-tier placeholder data.

    Placeholder topic/keyword lists and empty sentiment are dropped; source
    metadata without a political leaning is reduced to its country.
    """
    changes = {}

    if _contains_placeholder(article.topics):
        changes['topics'] = None
    if _contains_placeholder(article.keywords):
        changes['keywords'] = None

    if article.sentiment is not None and article.sentiment.is_empty():
        changes['sentiment'] = None

    source = article.source
    if source is not None and not source.political_leaning:
        changes['source'] = SourceMetadata(country=source.country) if source.country else None

    if not changes:
        return article
    return replace(article, **changes)


def sanitize_articles_for_tier(articles: Iterable[Article], api_tier: Optional[str]) -> List[Article]:
    """Sanitize every article when the tier is free; otherwise return them unchanged."""
    if api_tier != TIER_FREE:
        return list(articles)
    return [sanitize_article_for_tier(article) for article in articles]
