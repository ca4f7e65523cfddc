"""
Console table formatter for Quay Scanner.

Renders one section per image, sorted by reference, with the vulnerabilities
of scanned images laid out as a table.
"""

import textwrap
from typing import Any, List

from tabulate import tabulate

from .base import BaseFormatter
from ..quay.models import VulnerabilityReport
from ..scanner.result import ImageScanResult, ResultSet

# Longest cell shown in the vulnerability table
MAX_CELL_LENGTH = 200
TRUNCATION_SUFFIX = "..."
SECTION_SEPARATOR = "=" * 80
INDENT = "  "

VULNERABILITY_HEADERS = ['CVE', 'Severity', 'Package', 'Version', 'Fixed By', 'Link']


def vulnerability_rows(report: VulnerabilityReport) -> List[List[str]]:
    """Flatten a report into one row per (feature, vulnerability) pair."""
    rows = []
    for feature in report.features:
        for vuln in feature.vulnerabilities:
            rows.append([
                vuln.name,
                vuln.severity,
                feature.name,
                feature.version,
                vuln.fixed_by or "N/A",
                vuln.link,
            ])
    return rows


class ConsoleFormatter(BaseFormatter):
    """Formatter for human-readable console output."""

    name = "human"

    def __init__(self, tablefmt: str = "simple"):
        self.tablefmt = tablefmt

    def format_results(self, results: ResultSet) -> str:
        """Format scan results as human-readable text.

        Args:
            results: Mapping of image reference to its scan result

        Returns:
            One report section per image, separated by a rule
        """
        if not results:
            return "No scan results to display.\n"

        sections = [self.format_result(results[image_url]) for image_url in sorted(results)]
        return f"\n{SECTION_SEPARATOR}\n".join(sections)

    def format_result(self, result: ImageScanResult) -> str:
        """Format the report section for a single image."""
        header = f"Scan Report for: {result.image_url}"
        lines = [header, "-" * len(header)]

        report = result.report
        if result.error:
            lines.append(f"{INDENT}Error: {self.sanitize_text(result.error)}")
        elif report is None:
            lines.append(f"{INDENT}Error: No report data available (internal error).")
        else:
            lines.append(f"{INDENT}Scan Status: {report.status}")
            if not report.is_scanned:
                lines.append(f"{INDENT}No detailed vulnerability data available (scan may be queued or failed).")
            elif not report.features:
                lines.append(f"{INDENT}No features with vulnerabilities found in the scan data.")
            else:
                rows = vulnerability_rows(report)
                if rows:
                    lines.append(textwrap.indent(self.format_table(VULNERABILITY_HEADERS, rows), INDENT))
                else:
                    lines.append(f"{INDENT}No vulnerabilities found for this image.")

        return "\n".join(lines) + "\n"

    def format_table(self, headers: List[str], rows: List[List[Any]]) -> str:
        """Lay out ``rows`` under ``headers`` with one line per row."""
        cells = [[self._sanitize_cell_for_console(value) for value in row] for row in rows]
        return tabulate(cells, headers=headers, tablefmt=self.tablefmt)

    def _sanitize_cell_for_console(self, cell: Any, max_length: int = MAX_CELL_LENGTH) -> str:
        # Tables need single-line cells; descriptions and links can be long
        flat = " ".join(self.sanitize_text(cell).split())
        if len(flat) <= max_length:
            return flat
        return flat[:max_length - len(TRUNCATION_SUFFIX)] + TRUNCATION_SUFFIX
