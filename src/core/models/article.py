#!/usr/bin/env python3
"""
Article data model.

Represents a news article as returned by the article search API, plus the
page envelopes the API wraps articles in. Articles are immutable once
fetched; transformations return new copies.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


def _optional_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _string_list(value: Any) -> Optional[List[str]]:
    if not isinstance(value, list):
        return None
    return [item for item in value if isinstance(item, str)]


@dataclass(frozen=True)
class Sentiment:
    """Sentiment fractions; any of them may be missing."""
    pos: Optional[float] = None
    neg: Optional[float] = None
    neu: Optional[float] = None

    def is_empty(self) -> bool:
        return self.pos is None and self.neg is None and self.neu is None

    def to_dict(self) -> Dict[str, float]:
        return {key: value for key, value in
                (('pos', self.pos), ('neg', self.neg), ('neu', self.neu))
                if value is not None}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional['Sentiment']:
        if not isinstance(data, dict):
            return None
        return cls(
            pos=_optional_float(data.get('pos')),
            neg=_optional_float(data.get('neg')),
            neu=_optional_float(data.get('neu')),
        )


@dataclass(frozen=True)
class SourceMetadata:
    """Metadata about the publishing source."""
    id: Optional[str] = None
    country: Optional[str] = None  # 2-letter ISO
    political_leaning: Optional[str] = None
    reliability_score: Optional[float] = None
    type: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {key: value for key, value in (
            ('id', self.id),
            ('country', self.country),
            ('political_leaning', self.political_leaning),
            ('reliability_score', self.reliability_score),
            ('type', self.type),
        ) if value is not None}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional['SourceMetadata']:
        if not isinstance(data, dict):
            return None
        return cls(
            id=data.get('id'),
            country=data.get('country'),
            political_leaning=data.get('political_leaning'),
            reliability_score=_optional_float(data.get('reliability_score')),
            type=data.get('type'),
        )


@dataclass(frozen=True)
class Article:
    """
    A single news article.

    ``pub_date`` is kept as the upstream ISO string; aggregation parses it
    when it needs a calendar day.
    """
    id: str
    title: str
    source_title: str = ""
    article_link: str = ""
    description: str = ""
    pub_date: str = ""
    language: str = ""
    source_link: Optional[str] = None
    keywords: Optional[List[str]] = None
    topics: Optional[List[str]] = None
    creator: Optional[str] = None
    content: Optional[str] = None
    media_url: Optional[str] = None
    media_type: Optional[str] = None
    sentiment: Optional[Sentiment] = None
    source: Optional[SourceMetadata] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the upstream JSON shape."""
        data: Dict[str, Any] = {
            'id': self.id,
            'title': self.title,
            'source_title': self.source_title,
            'article_link': self.article_link,
            'description': self.description,
            'pub_date': self.pub_date,
            'language': self.language,
        }
        optional = {
            'source_link': self.source_link,
            'keywords': list(self.keywords) if self.keywords is not None else None,
            'topics': list(self.topics) if self.topics is not None else None,
            'creator': self.creator,
            'content': self.content,
            'media_url': self.media_url,
            'media_type': self.media_type,
            'sentiment': self.sentiment.to_dict() if self.sentiment is not None else None,
            'source': self.source.to_dict() if self.source is not None else None,
        }
        data.update({key: value for key, value in optional.items() if value is not None})
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Article':
        """Create Article from an upstream JSON object."""
        return cls(
            id=str(data.get('id') or ''),
            title=data.get('title') or '',
            source_title=data.get('source_title') or '',
            article_link=data.get('article_link') or '',
            description=data.get('description') or '',
            pub_date=data.get('pub_date') or '',
            language=data.get('language') or '',
            source_link=data.get('source_link'),
            keywords=_string_list(data.get('keywords')),
            topics=_string_list(data.get('topics')),
            creator=data.get('creator'),
            content=data.get('content'),
            media_url=data.get('media_url'),
            media_type=data.get('media_type'),
            sentiment=Sentiment.from_dict(data.get('sentiment')),
            source=SourceMetadata.from_dict(data.get('source')),
        )

    def __repr__(self):
        return f"Article(id='{self.id}', title='{self.title[:50]}', source='{self.source_title}')"


@dataclass
class NewsResponse:
    """One page of article search results."""
    data: List[Article] = field(default_factory=list)
    total_results: int = 0
    per_page: int = 0
    next_cursor: Optional[str] = None
    api_tier: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: Dict[str, Any], api_tier: Optional[str] = None) -> 'NewsResponse':
        return cls(
            data=[Article.from_dict(item) for item in payload.get('data') or [] if isinstance(item, dict)],
            total_results=int(payload.get('total_results') or 0),
            per_page=int(payload.get('per_page') or 0),
            next_cursor=payload.get('next_cursor') or None,
            api_tier=api_tier,
        )


@dataclass
class RelatedArticlesResponse:
    """Articles related to a single article."""
    related_to: Dict[str, Any] = field(default_factory=dict)
    count: int = 0
    data: List[Article] = field(default_factory=list)

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> 'RelatedArticlesResponse':
        data = [Article.from_dict(item) for item in payload.get('data') or [] if isinstance(item, dict)]
        return cls(
            related_to=payload.get('related_to') or {},
            count=int(payload.get('count') or len(data)),
            data=data,
        )
