#!/usr/bin/env python3
"""
Base classes for article sources.

Defines the abstract interface the pagination pipeline talks to, so the
HTTP-backed client can be swapped for a fake in tests.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, asdict
from typing import Dict, Any, Optional

from ..models import NewsResponse, RelatedArticlesResponse

# Fields requested for every article search page
DEFAULT_ARTICLE_FIELDS = (
    'title,source_title,source_link,article_link,description,topics,keywords,'
    'pub_date,creator,content,media_url,media_type,language,sentiment,source'
)

DEFAULT_MEDIA_TYPES = 'digital_native,newspaper,magazine,mainstream_news,specialty_news'


@dataclass
class NewsQueryParams:
    """Search parameters for one page of articles."""
    q: Optional[str] = None
    country: Optional[str] = None
    topic: Optional[str] = None
    language: Optional[str] = None
    source: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    per_page: Optional[int] = None
    cursor: Optional[str] = None
    political_leaning: Optional[str] = None
    source_type: Optional[str] = None
    exclude_topic: Optional[str] = None
    fields: Optional[str] = None
    media_type: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Parameters with None values dropped."""
        return {key: value for key, value in asdict(self).items() if value is not None}


class ArticleSource(ABC):
    """
    Abstract base class for article search providers.

    Implementations return one cursor page per call; following cursors is
    the caller's job.
    """

    @abstractmethod
    async def get_news(self, params: NewsQueryParams) -> NewsResponse:
        """
        Fetch one page of articles.

        Args:
            params: Search parameters (query, dates, filters, cursor)

        Returns:
            NewsResponse with the page's articles, next cursor and detected tier

        Raises:
            ConfigurationError: If credentials are missing
            SourceError: If fetching fails
        """
        pass

    @abstractmethod
    async def get_related(self, article_id: str, per_page: int = 5,
                          fields: Optional[str] = None) -> RelatedArticlesResponse:
        """
        Fetch articles related to a single article.

        Args:
            article_id: Upstream article id
            per_page: Maximum related articles to return
            fields: Optional comma-separated field list
        """
        pass
