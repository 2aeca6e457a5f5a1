#!/usr/bin/env python3
"""
Article sources for topic searches.
"""

from .base import ArticleSource, NewsQueryParams
from .newsdatahub import NewsDataHubClient
from .tier import TIER_FREE, TIER_DEVELOPER, detect_api_tier, sanitize_articles_for_tier

__all__ = [
    'ArticleSource', 'NewsQueryParams', 'NewsDataHubClient',
    'TIER_FREE', 'TIER_DEVELOPER', 'detect_api_tier', 'sanitize_articles_for_tier',
]
