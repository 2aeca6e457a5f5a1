#!/usr/bin/env python3
"""
Topic command endpoints: coverage analysis and article retrieval.
"""

import logging
from argparse import Namespace

from .base import BaseCommand, EXIT_OK
from core.date_utils import window_around
from core.topic_fetcher import filter_articles_by_country

logger = logging.getLogger(__name__)


class TopicCommand(BaseCommand):
    """Analyze topic coverage and list the articles behind it."""

    SUBCOMMANDS = ('analyze', 'articles', 'search')

    def execute(self, subcommand: str, args: Namespace) -> int:
        """Execute topic subcommand."""
        try:
            if subcommand == "analyze":
                return self.run_async(self.analyze(args))
            elif subcommand == "articles":
                return self.run_async(self.articles(args))
            elif subcommand == "search":
                return self.run_async(self.search(args))
            else:
                available = ", ".join(self.get_available_subcommands())
                self.logger.error(f"Unknown subcommand '{subcommand}'. Available: {available}")
                return 1

        except Exception as e:
            return self.handle_error(e, f"topic {subcommand}")

    async def analyze(self, args: Namespace) -> int:
        """Aggregate coverage analytics for a topic window."""
        start_date, end_date = self.resolve_dates(args)
        async with self.services() as services:
            record = await services.analysis.analyze_topic_coverage(
                args.topic, start_date, end_date, args.language
            )
        self.print_json(record.to_dict())
        return EXIT_OK

    async def articles(self, args: Namespace) -> int:
        """Articles for a topic window, optionally for one source country."""
        start_date, end_date = self.resolve_dates(args)
        async with self.services() as services:
            articles = await services.fetcher.get_cached_or_fetch_articles(
                args.topic, start_date, end_date, args.language
            )
        if args.country:
            articles = filter_articles_by_country(articles, args.country)

        self.print_json({
            'topic': args.topic,
            'country': args.country,
            'count': len(articles),
            'articles': [article.to_dict() for article in articles],
        })
        return EXIT_OK

    async def search(self, args: Namespace) -> int:
        """Search a single day (+/- 1) or a date range, padding thin results."""
        if args.date:
            start_date, end_date = window_around(args.date, days=1)
        else:
            start_date, end_date = self.resolve_dates(args)

        async with self.services() as services:
            articles = await services.fetcher.search_articles(
                args.topic, start_date, end_date,
                country=args.country,
                language=args.language,
                pad_with_related=not args.no_related,
            )

        self.print_json({
            'topic': args.topic,
            'dateRange': {'start': start_date, 'end': end_date},
            'count': len(articles),
            'articles': [article.to_dict() for article in articles],
        })
        return EXIT_OK
