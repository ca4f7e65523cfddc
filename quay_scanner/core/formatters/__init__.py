"""
Output formatters for Quay Scanner.

Formatters turn the aggregated result set into text: a machine-readable JSON
dump or a human-readable per-image report.
"""

from .base import BaseFormatter
from .console import ConsoleFormatter
from .json import JsonFormatter


def get_all_formatters():
    """Get instances of all available formatters.

    Returns:
        Dictionary mapping output format names to instances
    """
    return {formatter.name: formatter for formatter in (ConsoleFormatter(), JsonFormatter())}


def get_formatter(name: str) -> BaseFormatter:
    """Get the formatter for an output format name.

    Raises:
        ValueError: If no formatter exists for ``name``
    """
    formatters = get_all_formatters()
    try:
        return formatters[name]
    except KeyError:
        raise ValueError(f"unknown output format '{name}'. Must be one of: {', '.join(sorted(formatters))}")


__all__ = [
    'BaseFormatter',
    'ConsoleFormatter',
    'JsonFormatter',
    'get_all_formatters',
    'get_formatter',
]
