"""
JSON formatter for Quay Scanner.

Dumps the result set keyed by image reference, using the Quay wire field
names for report contents.
"""

import json
from .base import BaseFormatter
from ..scanner.result import ResultSet


class JsonFormatter(BaseFormatter):
    """Formatter for machine-readable JSON output."""

    name = "json"

    def format_results(self, results: ResultSet) -> str:
        """Format scan results as indented JSON.

        Args:
            results: Mapping of image reference to its scan result

        Returns:
            JSON object string keyed by image reference
        """
        output = {
            image_url: results[image_url].to_dict()
            for image_url in sorted(results)
        }
        return json.dumps(output, indent=2, ensure_ascii=False)
