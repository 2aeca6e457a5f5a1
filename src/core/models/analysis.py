#!/usr/bin/env python3
"""
Analysis result data models.

Contains the aggregate record produced for one (topic, date range, language)
request and the smaller shapes it is built from.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class SentimentAverage:
    positive: float
    neutral: float
    negative: float

    def to_dict(self) -> Dict[str, float]:
        return {'positive': self.positive, 'neutral': self.neutral, 'negative': self.negative}


@dataclass(frozen=True)
class LeaningCount:
    leaning: str
    count: int
    share: float  # fraction of all articles (0-1)


@dataclass(frozen=True)
class KeywordCount:
    keyword: str
    count: int


@dataclass(frozen=True)
class SourceCount:
    source: str
    count: int


@dataclass(frozen=True)
class CountryCount:
    country: str
    count: int


@dataclass(frozen=True)
class ArticleSummary:
    """Compact article projection used as narrative input for reports."""
    title: str
    description: str
    source: str
    published_date: str
    sentiment: float  # positive minus negative
    article_url: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'title': self.title,
            'description': self.description,
            'source': self.source,
            'publishedDate': self.published_date,
            'sentiment': self.sentiment,
            'articleUrl': self.article_url,
        }


@dataclass
class TopEntities:
    """Named entities extracted from coverage."""
    organizations: List[str] = field(default_factory=list)
    people: List[str] = field(default_factory=list)
    locations: List[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.organizations or self.people or self.locations)

    def to_dict(self) -> Dict[str, List[str]]:
        return {
            'organizations': list(self.organizations),
            'people': list(self.people),
            'locations': list(self.locations),
        }


@dataclass
class AnalysisRecord:
    """
    Aggregated coverage analytics for one topic over a date range.

    Everything except ``top_entities`` is a pure function of the
    deduplicated article set.
    """
    topic: str
    start_date: str
    end_date: str
    total_mentions: int
    mentions_by_day: Dict[str, int]
    sentiment_average: SentimentAverage
    political_leaning_distribution: List[LeaningCount]
    top_entities: TopEntities
    top_keywords: List[KeywordCount]
    top_sources: List[SourceCount]
    geographic_distribution: List[CountryCount]
    top_articles: List[ArticleSummary]
    api_tier: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON shape consumed by report and UI layers."""
        return {
            'topic': self.topic,
            'totalMentions': self.total_mentions,
            'dateRange': {'start': self.start_date, 'end': self.end_date},
            'sentimentAverage': self.sentiment_average.to_dict(),
            'politicalLeaningDistribution': [
                {'leaning': item.leaning, 'count': item.count, 'share': item.share}
                for item in self.political_leaning_distribution
            ],
            'topEntities': self.top_entities.to_dict(),
            'topKeywords': [{'keyword': item.keyword, 'count': item.count} for item in self.top_keywords],
            'mentionsByDay': dict(self.mentions_by_day),
            'topSources': [{'source': item.source, 'count': item.count} for item in self.top_sources],
            'geographicDistribution': [
                {'country': item.country, 'count': item.count} for item in self.geographic_distribution
            ],
            'topArticles': [item.to_dict() for item in self.top_articles],
            'apiTier': self.api_tier,
        }


@dataclass
class ReportResult:
    """Generated LLM text and whether it came from cache."""
    text: str
    cached: bool = False
