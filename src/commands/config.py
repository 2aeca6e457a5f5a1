#!/usr/bin/env python3
"""
Config command endpoints.
"""

from argparse import Namespace

from .base import BaseCommand, EXIT_OK, EXIT_CONFIGURATION
from core.config import get_config_manager


class ConfigCommand(BaseCommand):
    """Inspect effective configuration."""

    SUBCOMMANDS = ('show',)

    def execute(self, subcommand: str, args: Namespace) -> int:
        """Execute config subcommand."""
        try:
            if subcommand == "show":
                return self.show(args)
            else:
                available = ", ".join(self.get_available_subcommands())
                self.logger.error(f"Unknown subcommand '{subcommand}'. Available: {available}")
                return 1

        except Exception as e:
            return self.handle_error(e, f"config {subcommand}")

    def show(self, args: Namespace) -> int:
        """Print configuration with secrets redacted."""
        summary = get_config_manager().describe()
        self.print_json(summary)

        if summary['missing_credentials']:
            self.logger.warning(f"Missing credentials: {', '.join(summary['missing_credentials'])}")
            return EXIT_CONFIGURATION if getattr(args, 'strict', False) else EXIT_OK
        return EXIT_OK
