#!/usr/bin/env python3
"""
Report command endpoints: LLM coverage reports and context explanations.
"""

import logging
from argparse import Namespace

from .base import BaseCommand, EXIT_OK
from core.date_utils import window_around
from core.topic_fetcher import filter_articles_by_country

logger = logging.getLogger(__name__)


class ReportCommand(BaseCommand):
    """Generate narrative coverage reports."""

    SUBCOMMANDS = ('generate', 'explain')

    def execute(self, subcommand: str, args: Namespace) -> int:
        """Execute report subcommand."""
        try:
            if subcommand == "generate":
                return self.run_async(self.generate(args))
            elif subcommand == "explain":
                return self.run_async(self.explain(args))
            else:
                available = ", ".join(self.get_available_subcommands())
                self.logger.error(f"Unknown subcommand '{subcommand}'. Available: {available}")
                return 1

        except Exception as e:
            return self.handle_error(e, f"report {subcommand}")

    async def generate(self, args: Namespace) -> int:
        """Full report for a topic window."""
        start_date, end_date = self.resolve_dates(args)
        async with self.services() as services:
            result = await services.reports.generate_report(args.topic, start_date, end_date, args.language)

        self.print_json({'report': result.text, 'cached': result.cached})
        return EXIT_OK

    async def explain(self, args: Namespace) -> int:
        """
        Explain a spike day, a country's coverage or the whole window.

        spike uses the articles within one day of --date (padded with related
        coverage when thin); geo and deep_dive reuse the analysis article list.
        """
        if args.context == 'spike' and not args.date:
            self.logger.error("--date is required for the spike context")
            return 1
        if args.context == 'geo' and not args.country:
            self.logger.error("--country is required for the geo context")
            return 1

        async with self.services() as services:
            if args.context == 'spike':
                start_date, end_date = window_around(args.date, days=1)
                fetched = await services.fetcher.search_articles_with_tier(
                    args.topic, start_date, end_date, country=args.country, language=args.language
                )
                articles = fetched.articles
            else:
                start_date, end_date = self.resolve_dates(args)
                fetched = await services.fetcher.get_cached_or_fetch_articles_with_tier(
                    args.topic, start_date, end_date, args.language
                )
                articles = fetched.articles
                if args.country:
                    articles = filter_articles_by_country(articles, args.country)

            if not articles:
                self.print_json({'summary': None, 'cached': False, 'articles': 0})
                return EXIT_OK

            result = await services.reports.explain_context(
                args.context, args.topic, articles, date=args.date, country=args.country,
                api_tier=fetched.api_tier,
            )

        self.print_json({'summary': result.text, 'cached': result.cached, 'articles': len(articles)})
        return EXIT_OK
