#!/usr/bin/env python3
"""
Date helpers: UTC day keys, default date windows and cache TTL selection.
"""

import logging
from datetime import datetime, timedelta, date
from typing import Optional, Tuple

import pytz
from dateutil import parser as date_parser

logger = logging.getLogger(__name__)

DATE_FORMAT = '%Y-%m-%d'


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO-ish timestamp into an aware UTC datetime.

    Naive timestamps are assumed to be UTC. Returns None when unparseable.
    """
    if not value:
        return None
    try:
        dt = date_parser.parse(value)
    except (ValueError, OverflowError) as e:
        logger.debug(f"Failed to parse timestamp '{value}': {e}")
        return None

    if dt.tzinfo is None:
        dt = pytz.utc.localize(dt)
    return dt.astimezone(pytz.utc)


def format_date_key(value: Optional[str]) -> Optional[str]:
    """
    Format a timestamp as its UTC calendar day (YYYY-MM-DD).

    Examples:
        format_date_key("2024-01-15T23:30:00-05:00") -> "2024-01-16"
    """
    dt = parse_timestamp(value)
    if dt is None:
        return None
    return dt.strftime(DATE_FORMAT)


def utc_today() -> date:
    return datetime.now(pytz.utc).date()


def is_date_today(date_string: str) -> bool:
    """Check whether a YYYY-MM-DD string names the current UTC day."""
    try:
        target = datetime.strptime(date_string, DATE_FORMAT).date()
    except ValueError:
        return False
    return target == utc_today()


def calculate_cache_ttl(date_string: Optional[str], ttl_current_day: int, ttl_historical: int) -> int:
    """
    Pick the cache TTL for data ending on the given date.

    Current-day data keeps changing, so it gets the short TTL; anything
    historical (or undated) gets the long one.
    """
    if not date_string:
        return ttl_historical
    return ttl_current_day if is_date_today(date_string) else ttl_historical


def last_n_days(days: int = 7) -> Tuple[str, str]:
    """Inclusive (start, end) window of N days ending today (UTC)."""
    end = utc_today()
    start = end - timedelta(days=days - 1)
    return start.strftime(DATE_FORMAT), end.strftime(DATE_FORMAT)


def window_around(date_string: str, days: int = 1) -> Tuple[str, str]:
    """(start, end) window of +/- N days around a YYYY-MM-DD date."""
    center = datetime.strptime(date_string, DATE_FORMAT).date()
    return (
        (center - timedelta(days=days)).strftime(DATE_FORMAT),
        (center + timedelta(days=days)).strftime(DATE_FORMAT),
    )
