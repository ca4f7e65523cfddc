"""
Formatter interface for Quay Scanner output.

A formatter receives the complete result set (image reference -> scan result)
once all images have been scanned and returns the text to write out.
"""

import abc
from typing import Any

from ..scanner.result import ResultSet


class BaseFormatter(abc.ABC):
    """Turns a result set into the text for one output format."""

    # Value accepted by --format
    name = "base"

    @abc.abstractmethod
    def format_results(self, results: ResultSet) -> str:
        """Render ``results``; implementations decide the ordering of images."""

    def sanitize_text(self, text: Any) -> str:
        """Convert an API value to display text with ``\\n`` line endings.

        Values from the Quay API may be missing (``None``) or carry Windows
        line endings in descriptions.
        """
        if text is None:
            return ""
        return "\n".join(str(text).splitlines())
