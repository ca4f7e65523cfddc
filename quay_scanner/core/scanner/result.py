"""Per-image scan results and the collector that aggregates them."""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..quay.models import VulnerabilityReport

__all__ = ["ImageScanResult", "ResultSet", "ResultCollector"]


@dataclass(frozen=True)
class ImageScanResult:
    """Outcome of scanning one requested image reference.

    Normally exactly one of ``report`` / ``error`` is set. A report may
    accompany an error when partial data was retrieved before the failure.
    """
    image_url: str
    report: Optional[VulnerabilityReport] = None
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None and self.report is not None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON shape used in rendered output."""
        data: Dict[str, Any] = {"imageUrl": self.image_url}
        if self.report is not None:
            data["report"] = self.report.to_dict()
        if self.error:
            data["error"] = self.error
        return data


# Image reference string -> result for that reference
ResultSet = Dict[str, ImageScanResult]


class ResultCollector:
    """Single-writer aggregation of results into a :data:`ResultSet`.

    Results are keyed by the original reference string. When the same
    reference was submitted more than once, the entry from the latest
    submission wins regardless of completion order.
    """

    def __init__(self) -> None:
        self._results: ResultSet = {}
        self._positions: Dict[str, int] = {}
        self.collected = 0

    def add(self, position: int, result: ImageScanResult) -> None:
        """Record ``result`` for the job submitted at ``position``."""
        self.collected += 1
        key = result.image_url
        if self._positions.get(key, -1) > position:
            return
        self._positions[key] = position
        self._results[key] = result

    @property
    def results(self) -> ResultSet:
        return dict(self._results)

    @property
    def failed_count(self) -> int:
        return sum(1 for r in self._results.values() if r.error)

    def __len__(self) -> int:
        return len(self._results)
