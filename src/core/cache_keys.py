#!/usr/bin/env python3
"""
Cache key construction.

Every key written to the shared cache is built here so that namespaces
never collide and semantically identical requests always map to the same
key. Keys are a namespace tag followed by colon-joined parameters in a
fixed order; topics are normalized for quote style first.

Namespaces:
    news:        one page of article search results
    related:     related-articles lookup
    articles:    full deduplicated article list for a topic window
    processed:   aggregated analysis record
    entities:    LLM entity extraction output
    ai:report:   generated coverage report
    ai:<context>: generated context explanation
"""

import json
from typing import Any, Dict, Iterable, Optional

from .query_utils import normalize_search_query

# Field order used when serializing search parameters into a news: key
NEWS_QUERY_FIELD_ORDER = (
    'q', 'country', 'topic', 'language', 'source', 'start_date', 'end_date',
    'per_page', 'cursor', 'political_leaning', 'source_type', 'exclude_topic',
    'fields', 'media_type',
)

EXPLAIN_CONTEXTS = ('spike', 'geo', 'deep_dive')


def _join(namespace: str, *parts: Optional[Any]) -> str:
    return ':'.join([namespace] + ['' if part is None else str(part) for part in parts])


def news_key(params: Dict[str, Any]) -> str:
    """Key for one search page; None fields are dropped, order is fixed."""
    ordered = {name: params[name] for name in NEWS_QUERY_FIELD_ORDER if params.get(name) is not None}
    extra = sorted(name for name in params if name not in NEWS_QUERY_FIELD_ORDER and params[name] is not None)
    ordered.update((name, params[name]) for name in extra)
    return 'news:' + json.dumps(ordered, separators=(',', ':'), ensure_ascii=False)


def related_key(article_id: str, per_page: int, fields: Optional[str] = None) -> str:
    return _join('related', article_id, per_page, fields or '')


def articles_key(topic: str, start_date: str, end_date: str, language: Optional[str] = None) -> str:
    return _join('articles', normalize_search_query(topic), start_date, end_date, language or '')


def processed_key(topic: str, start_date: str, end_date: str, language: Optional[str] = None) -> str:
    return _join('processed', normalize_search_query(topic), start_date, end_date, language or '')


def entities_key(topic: str, start_date: str, end_date: str, language: Optional[str], article_count: int) -> str:
    return _join('entities', normalize_search_query(topic), start_date, end_date, language or '', article_count)


def report_key(topic: str, start_date: str, end_date: str, language: Optional[str] = None) -> str:
    return _join('ai:report', normalize_search_query(topic), start_date, end_date, language or '')


def explain_key(context: str, topic: str, date: Optional[str], country: Optional[str], article_key: str) -> str:
    # 'report' would land in the ai:report: namespace
    if context not in EXPLAIN_CONTEXTS:
        raise ValueError(f"Unknown explanation context '{context}'. Expected one of: {', '.join(EXPLAIN_CONTEXTS)}")
    return _join(f'ai:{context}', normalize_search_query(topic), date or '', country or '', article_key)


def article_identity_key(articles: Iterable[Any]) -> str:
    """Comma-joined article ids (falling back to titles) for explain keys."""
    identities = []
    for article in articles:
        if isinstance(article, dict):
            identities.append(str(article.get('id') or article.get('title') or ''))
        else:
            identities.append(str(getattr(article, 'id', '') or getattr(article, 'title', '')))
    return ','.join(identities)
