#!/usr/bin/env python3
"""
Command endpoints for the topic coverage CLI.

Each top-level command is a BaseCommand subclass registered here.
"""

from typing import Dict, Type
from .base import BaseCommand
from .topic import TopicCommand
from .report import ReportCommand
from .config import ConfigCommand

# Command registry for easy extension
COMMANDS: Dict[str, Type[BaseCommand]] = {
    'topic': TopicCommand,
    'report': ReportCommand,
    'config': ConfigCommand,
}


def get_command(command_name: str, container=None) -> BaseCommand:
    """Get a command instance by name."""
    if command_name not in COMMANDS:
        available = ', '.join(COMMANDS.keys())
        raise ValueError(f"Unknown command '{command_name}'. Available: {available}")

    command_class = COMMANDS[command_name]
    return command_class(container)
