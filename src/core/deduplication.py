#!/usr/bin/env python3
"""
Deduplication module for news articles

Removes repeated articles from a merged result set. Two articles are
duplicates when their titles match after lowercasing and trimming; the
first occurrence wins and the relative order of survivors is preserved.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Tuple

from .models import Article

logger = logging.getLogger(__name__)


def normalize_title(title: str) -> str:
    """Dedup key for a title."""
    return (title or '').lower().strip()


@dataclass
class DeduplicationResult:
    """Counts from one deduplication pass."""
    original_count: int = 0
    unique_count: int = 0
    duplicates_found: int = 0
    untitled_dropped: int = 0

    @property
    def duplicate_rate(self) -> float:
        """Duplicate rate as percentage."""
        if self.original_count == 0:
            return 0.0
        return (self.duplicates_found / self.original_count) * 100


def deduplicate_with_result(articles: Iterable[Article]) -> Tuple[List[Article], DeduplicationResult]:
    """
    Remove duplicate articles, keeping the first article seen for each title.

    Args:
        articles: Articles in fetch order

    Returns:
        Tuple of (unique_articles, deduplication_result)
    """
    result = DeduplicationResult()
    seen = set()
    unique_articles = []

    for article in articles:
        result.original_count += 1
        key = normalize_title(article.title)
        if not key:
            result.untitled_dropped += 1
            continue
        if key in seen:
            result.duplicates_found += 1
            continue
        seen.add(key)
        unique_articles.append(article)

    result.unique_count = len(unique_articles)
    if result.duplicates_found or result.untitled_dropped:
        logger.debug(
            f"Deduplication: {result.original_count} -> {result.unique_count} "
            f"({result.duplicates_found} duplicates, {result.untitled_dropped} untitled)"
        )
    return unique_articles, result


def deduplicate_articles(articles: Iterable[Article]) -> List[Article]:
    """Remove duplicate articles by normalized title, preserving order."""
    unique_articles, _ = deduplicate_with_result(articles)
    return unique_articles
