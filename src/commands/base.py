#!/usr/bin/env python3
"""
Base command class for the modular command architecture.

Provides common functionality and interface that all commands inherit.
Uses dependency injection for better testability and maintainability.
"""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from argparse import Namespace
from contextlib import asynccontextmanager
from typing import Any, List

from core.container import get_container, build_services
from core.date_utils import last_n_days
from core.exceptions import ConfigurationError, UpstreamUnavailableError, SourceError, LLMError

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_CONFIGURATION = 2
EXIT_UPSTREAM_UNAVAILABLE = 3


class BaseCommand(ABC):
    """
    Base class for all command endpoints.

    Provides configuration, the shared cache, session-scoped service wiring
    and error handling that all commands can use.
    """

    def __init__(self, container=None):
        """
        Initialize base command with dependency injection container.

        Args:
            container: Optional container instance. If None, uses global container.
        """
        self.logger = logging.getLogger(self.__class__.__name__)
        self._container = container or get_container()

    @property
    def config(self):
        """Get configuration from container."""
        return self._container.get('config')

    @property
    def cache(self):
        """Get the shared process cache from container."""
        return self._container.get('cache')

    @asynccontextmanager
    async def services(self):
        """Open an HTTP session and yield the wired service bundle."""
        async with self._container.get('http_client') as http_client:
            yield build_services(self._container, http_client)

    def run_async(self, coroutine) -> Any:
        return asyncio.run(coroutine)

    @staticmethod
    def resolve_dates(args: Namespace, default_days: int = 7):
        """Start/end dates from args, defaulting to the last N days."""
        default_start, default_end = last_n_days(default_days)
        return (getattr(args, 'start_date', None) or default_start,
                getattr(args, 'end_date', None) or default_end)

    @staticmethod
    def print_json(payload: Any) -> None:
        print(json.dumps(payload, indent=2, ensure_ascii=False))

    @abstractmethod
    def execute(self, subcommand: str, args: Namespace) -> int:
        """
        Execute the command with given subcommand and arguments.

        Args:
            subcommand: The specific action to perform
            args: Parsed command line arguments

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        pass

    SUBCOMMANDS: tuple = ()

    def get_available_subcommands(self) -> List[str]:
        """Get list of available subcommands for this command."""
        return list(self.SUBCOMMANDS)

    def handle_error(self, error: BaseException, context: str = "") -> int:
        """
        Standard error handling for commands.

        Args:
            error: The exception that occurred
            context: Additional context about where the error occurred

        Returns:
            Appropriate exit code
        """
        error_msg = f"{context}: {error}" if context else str(error)

        if isinstance(error, KeyboardInterrupt):
            self.logger.info("Command interrupted by user")
            return 130
        if isinstance(error, ConfigurationError):
            self.logger.error(error_msg)
            return EXIT_CONFIGURATION
        if isinstance(error, UpstreamUnavailableError):
            self.logger.error(error_msg)
            return EXIT_UPSTREAM_UNAVAILABLE
        if isinstance(error, (SourceError, LLMError)) and error.is_transient:
            self.logger.error(f"{error_msg} (temporarily unavailable, try again later)")
            return EXIT_UPSTREAM_UNAVAILABLE

        self.logger.error(error_msg, exc_info=True)
        return EXIT_ERROR
