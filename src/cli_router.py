#!/usr/bin/env python3
"""
CLI Router for topic coverage analysis.

Parses arguments and dispatches to the registered command classes.
"""

import argparse
import logging
import sys
from typing import Optional, List

from commands import get_command, COMMANDS
from core.config import get_config_manager
from core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def _add_date_range(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('--start-date', help='First day, YYYY-MM-DD (default: 6 days ago)')
    parser.add_argument('--end-date', help='Last day, YYYY-MM-DD (default: today, UTC)')


def _add_topic(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('--topic', required=True, help='Search query; quote phrases for exact matches')
    parser.add_argument('--language', default='en', help='Language filter (default: en)')


class CLIRouter:
    """
    CLI router for topic coverage commands.

    Command structure:
    - python run.py topic analyze --topic "semiconductors"
    - python run.py topic articles --topic "semiconductors" --country US
    - python run.py report generate --topic "semiconductors"
    - python run.py config show
    """

    def __init__(self, container=None):
        """Initialize CLI router."""
        self.container = container
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """Create the main argument parser."""
        parser = argparse.ArgumentParser(
            description="Topic coverage analytics over news search results",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog=self._get_examples_text()
        )

        subparsers = parser.add_subparsers(
            dest='command',
            help='Available commands',
            metavar='{command}'
        )

        self._add_topic_parser(subparsers)
        self._add_report_parser(subparsers)
        self._add_config_parser(subparsers)

        return parser

    def _add_topic_parser(self, subparsers):
        """Add topic command parser."""
        topic_parser = subparsers.add_parser('topic', help='Coverage analytics and articles for a topic')
        topic_subparsers = topic_parser.add_subparsers(
            dest='subcommand',
            help='Topic operations',
            metavar='{analyze,articles,search}'
        )

        analyze_parser = topic_subparsers.add_parser('analyze', help='Aggregate coverage analytics')
        _add_topic(analyze_parser)
        _add_date_range(analyze_parser)

        articles_parser = topic_subparsers.add_parser('articles', help='Articles behind an analysis, by country')
        _add_topic(articles_parser)
        _add_date_range(articles_parser)
        articles_parser.add_argument('--country', help='Two-letter source country code (ZZ = unknown)')

        search_parser = topic_subparsers.add_parser('search', help='Search articles, padding thin results')
        _add_topic(search_parser)
        _add_date_range(search_parser)
        search_parser.add_argument('--date', help='Search one day +/- 1 instead of a range')
        search_parser.add_argument('--country', help='Two-letter source country code')
        search_parser.add_argument('--no-related', action='store_true', help='Do not pad with related articles')

    def _add_report_parser(self, subparsers):
        """Add report command parser."""
        report_parser = subparsers.add_parser('report', help='LLM coverage reports')
        report_subparsers = report_parser.add_subparsers(
            dest='subcommand',
            help='Report operations',
            metavar='{generate,explain}'
        )

        generate_parser = report_subparsers.add_parser('generate', help='Full coverage report')
        _add_topic(generate_parser)
        _add_date_range(generate_parser)

        explain_parser = report_subparsers.add_parser('explain', help='Explain a spike, a country or the window')
        _add_topic(explain_parser)
        _add_date_range(explain_parser)
        explain_parser.add_argument('--context', choices=['spike', 'geo', 'deep_dive'], default='deep_dive',
                                    help='What to explain (default: deep_dive)')
        explain_parser.add_argument('--date', help='Spike day, YYYY-MM-DD')
        explain_parser.add_argument('--country', help='Two-letter source country code')

    def _add_config_parser(self, subparsers):
        """Add config command parser."""
        config_parser = subparsers.add_parser('config', help='Configuration inspection')
        config_subparsers = config_parser.add_subparsers(
            dest='subcommand',
            help='Config operations',
            metavar='{show}'
        )
        show_parser = config_subparsers.add_parser('show', help='Show configuration (secrets redacted)')
        show_parser.add_argument('--strict', action='store_true', help='Exit 2 when credentials are missing')

    def _get_examples_text(self) -> str:
        """Get examples text for help."""
        return """
Examples:
  python run.py topic analyze --topic "semiconductors" --start-date 2025-10-01 --end-date 2025-10-16
  python run.py topic articles --topic "semiconductors" --country DE
  python run.py topic search --topic "chip export controls" --date 2025-10-10
  python run.py report generate --topic "semiconductors"
  python run.py report explain --context spike --topic "semiconductors" --date 2025-10-10
  python run.py config show

Exit codes: 0 ok, 1 error, 2 configuration error, 3 upstream unavailable
"""

    def route_command(self, args: Optional[List[str]] = None) -> int:
        """
        Route command to appropriate handler.

        Args:
            args: Command line arguments (uses sys.argv if None)

        Returns:
            Exit code
        """
        try:
            if args is None:
                args = sys.argv[1:]

            parsed_args = self.parser.parse_args(args)

            if not parsed_args.command:
                self.parser.print_help()
                return 1

            return self._handle_command(parsed_args)

        except SystemExit as e:
            # argparse calls sys.exit() on error or help
            return e.code if e.code is not None else 0

    def _handle_command(self, args: argparse.Namespace) -> int:
        """Handle command structure."""
        logger.debug(f"Handling command: {args.command}")

        if args.command not in COMMANDS:
            available = ', '.join(COMMANDS.keys())
            logger.error(f"Unknown command '{args.command}'. Available: {available}")
            return 1

        subcommand = getattr(args, 'subcommand', None)
        if not subcommand:
            logger.error(f"No subcommand specified for '{args.command}'")
            self.parser.print_usage()
            return 1

        command = get_command(args.command, self.container)
        return command.execute(subcommand, args)


def main(args: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Args:
        args: Command line arguments (uses sys.argv if None)

    Returns:
        Exit code
    """
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        get_config_manager().update_logging()
    except ConfigurationError as e:
        logger.error(str(e))
        return 2

    router = CLIRouter()
    return router.route_command(args)


if __name__ == '__main__':
    sys.exit(main())
