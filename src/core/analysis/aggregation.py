#!/usr/bin/env python3
"""
Coverage aggregation.

Pure functions over a deduplicated article list: no I/O, no caching. Each
function is independent of the others and deterministic for a given input
order; ties in frequency rankings keep first-seen order.
"""

from collections import Counter
from typing import Dict, List, Optional

from ..date_utils import format_date_key, parse_timestamp
from ..models import (
    Article,
    ArticleSummary,
    CountryCount,
    KeywordCount,
    LeaningCount,
    SentimentAverage,
    SourceCount,
)

TOP_SOURCES_LIMIT = 10
REPRESENTATIVE_ARTICLES_LIMIT = 20
SENTIMENT_PRECISION = 3
SHARE_PRECISION = 4

UNKNOWN_COUNTRY_CODE = 'ZZ'
UNKNOWN_SOURCE_NAME = 'Unknown'

NONPARTISAN = 'nonpartisan'
POLITICAL_LEANINGS = (
    'left', 'center_left', 'center', 'center_right', 'right',
    'far_left', 'far_right', NONPARTISAN,
)


def _ranked(counter: Counter) -> List[tuple]:
    # Counter preserves insertion order and sorted() is stable
    return sorted(counter.items(), key=lambda item: item[1], reverse=True)


def aggregate_mentions_by_day(articles: List[Article]) -> Dict[str, int]:
    """
    Count articles per UTC calendar day.

    Only observed days appear; keys are ordered ascending. Articles whose
    publish date cannot be parsed are not counted.
    """
    counts: Counter = Counter()
    for article in articles:
        day = format_date_key(article.pub_date)
        if day is not None:
            counts[day] += 1
    return {day: counts[day] for day in sorted(counts)}


def _has_sentiment(article: Article) -> bool:
    return article.sentiment is not None and not article.sentiment.is_empty()


def calculate_average_sentiment(articles: List[Article]) -> SentimentAverage:
    """
    Average positive/neutral/negative across articles that carry sentiment.

    Missing components count as 0. With no sentiment data at all the result
    is fully neutral (0, 1, 0).
    """
    positive_sum = negative_sum = neutral_sum = 0.0
    sentiment_count = 0

    for article in articles:
        if not _has_sentiment(article):
            continue
        sentiment = article.sentiment
        positive_sum += sentiment.pos or 0.0
        negative_sum += sentiment.neg or 0.0
        neutral_sum += sentiment.neu or 0.0
        sentiment_count += 1

    if sentiment_count == 0:
        return SentimentAverage(positive=0.0, neutral=1.0, negative=0.0)

    return SentimentAverage(
        positive=round(positive_sum / sentiment_count, SENTIMENT_PRECISION),
        neutral=round(neutral_sum / sentiment_count, SENTIMENT_PRECISION),
        negative=round(negative_sum / sentiment_count, SENTIMENT_PRECISION),
    )


def _leaning_for(article: Article) -> str:
    leaning = article.source.political_leaning if article.source else None
    if leaning not in POLITICAL_LEANINGS:
        return NONPARTISAN
    return leaning


def aggregate_political_leaning(articles: List[Article]) -> List[LeaningCount]:
    """
    Political leaning distribution over the fixed eight categories.

    Every category is present. Missing or unrecognized leanings count as
    nonpartisan. Shares are relative to all articles.
    """
    counts: Counter = Counter({leaning: 0 for leaning in POLITICAL_LEANINGS})
    for article in articles:
        counts[_leaning_for(article)] += 1

    total = len(articles) or 1
    return [
        LeaningCount(leaning=leaning, count=count, share=round(count / total, SHARE_PRECISION))
        for leaning, count in _ranked(counts)
    ]


def aggregate_top_keywords(articles: List[Article], limit: int = 10) -> List[KeywordCount]:
    """Most frequent keywords after lowercasing and trimming."""
    counts: Counter = Counter()
    for article in articles:
        for keyword in article.keywords or []:
            normalized = keyword.lower().strip()
            if normalized:
                counts[normalized] += 1
    return [KeywordCount(keyword=keyword, count=count) for keyword, count in _ranked(counts)[:limit]]


def _source_name(article: Article) -> str:
    return article.source_title or (article.source.id if article.source else None) or UNKNOWN_SOURCE_NAME


def aggregate_top_sources(articles: List[Article], limit: int = TOP_SOURCES_LIMIT) -> List[SourceCount]:
    counts: Counter = Counter(_source_name(article) for article in articles)
    return [SourceCount(source=source, count=count) for source, count in _ranked(counts)[:limit]]


def aggregate_geographic_distribution(articles: List[Article]) -> List[CountryCount]:
    """Article count per source country, unknown countries grouped under ZZ."""
    counts: Counter = Counter(
        (article.source.country if article.source else None) or UNKNOWN_COUNTRY_CODE
        for article in articles
    )
    return [CountryCount(country=country, count=count) for country, count in _ranked(counts)]


def _recency_key(article: Article):
    published = parse_timestamp(article.pub_date)
    if published is None:
        return (0, 0.0)
    return (1, published.timestamp())


def summarize_article(article: Article) -> ArticleSummary:
    sentiment = article.sentiment
    score = ((sentiment.pos or 0.0) - (sentiment.neg or 0.0)) if sentiment else 0.0
    return ArticleSummary(
        title=article.title,
        description=article.description,
        source=article.source_title,
        published_date=article.pub_date,
        sentiment=score,
        article_url=article.article_link,
    )


def select_representative_articles(articles: List[Article],
                                   limit: int = REPRESENTATIVE_ARTICLES_LIMIT) -> List[ArticleSummary]:
    """
    Newest articles first, projected to summaries.

    Articles without a parseable date sort after dated ones.
    """
    ordered = sorted(articles, key=_recency_key, reverse=True)
    return [summarize_article(article) for article in ordered[:limit]]


def sentiment_label(score: float, threshold: float = 0.05) -> str:
    """Positive/negative/neutral label for a pos-minus-neg score."""
    if score > threshold:
        return 'positive'
    if score < -threshold:
        return 'negative'
    return 'neutral'


def peak_day(mentions_by_day: Dict[str, int]) -> Optional[str]:
    """Day with the most mentions (earliest on ties), or None."""
    if not mentions_by_day:
        return None
    # max() keeps the first maximum; keys are ascending
    return max(mentions_by_day.items(), key=lambda item: item[1])[0]
