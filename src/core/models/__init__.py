#!/usr/bin/env python3
"""
Core data models for topic coverage analysis.

Contains all data structures used throughout the application.
"""

from .article import Article, Sentiment, SourceMetadata, NewsResponse, RelatedArticlesResponse
from .analysis import (
    AnalysisRecord,
    ArticleSummary,
    CountryCount,
    KeywordCount,
    LeaningCount,
    ReportResult,
    SentimentAverage,
    SourceCount,
    TopEntities,
)

__all__ = [
    'Article', 'Sentiment', 'SourceMetadata', 'NewsResponse', 'RelatedArticlesResponse',
    'AnalysisRecord', 'ArticleSummary', 'CountryCount', 'KeywordCount', 'LeaningCount',
    'ReportResult', 'SentimentAverage', 'SourceCount', 'TopEntities',
]
