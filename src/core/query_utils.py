#!/usr/bin/env python3
"""
Query normalization and URL query string helpers.
"""

import re
from typing import Any, Dict, Optional
from urllib.parse import urlencode

_CURLY_DOUBLE_QUOTES = re.compile('[“”]')
_CURLY_SINGLE_QUOTES = re.compile('[‘’]')


def normalize_search_query(query: str) -> str:
    """
    Replace smart/curly quotes with straight quotes and trim.

    Text editors often auto-convert quotes; the upstream API rejects mixed
    quote styles, and cache keys must not depend on them either.

    Examples:
        normalize_search_query('“quantum computing”') -> '"quantum computing"'
    """
    query = _CURLY_DOUBLE_QUOTES.sub('"', query)
    query = _CURLY_SINGLE_QUOTES.sub("'", query)
    return query.strip()


def build_query_string(params: Dict[str, Any]) -> str:
    """
    Convert parameters into a URL query string.

    None values are skipped and list/tuple values are repeated once per item.

    Returns:
        Query string with a leading '?', or '' when nothing remains
    """
    pairs = []
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            pairs.extend((key, str(item)) for item in value)
        else:
            pairs.append((key, str(value)))

    if not pairs:
        return ''
    return '?' + urlencode(pairs)


def clamp_language(language: Optional[str]) -> Optional[str]:
    if not language:
        return None
    return language.lower()


def upper_country(country: Optional[str]) -> Optional[str]:
    if not country:
        return None
    return country.upper()
