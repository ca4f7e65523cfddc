"""
Per-image scan task.

Strict three-step pipeline with early exit: parse the reference, resolve the
tag to a digest, fetch the vulnerability report. Failures are captured in the
returned result rather than raised, so one image never aborts a batch.
"""

import logging
from typing import Any

from ..image_ref import DEFAULT_REGISTRY_HOST, ParseError, parse_image_ref
from ..quay.exceptions import ClientError
from .result import ImageScanResult

logger = logging.getLogger(__name__)


def process_image(
    image_url: str,
    client: Any,
    registry_host: str = DEFAULT_REGISTRY_HOST,
    log: logging.Logger | None = None,
) -> ImageScanResult:
    """Scan a single image reference.

    Args:
        image_url: Raw image reference as requested by the user
        client: Object providing ``resolve_digest`` and ``fetch_vulnerabilities``
            (normally a :class:`~quay_scanner.core.quay.QuayClient`)
        registry_host: Registry host the reference must start with
        log: Logger to report progress on; defaults to this module's logger

    Returns:
        ImageScanResult carrying either the report or an error description
    """
    log = log or logger

    try:
        ref = parse_image_ref(image_url, registry_host)
    except ParseError as e:
        log.debug("Parsing %s failed: %s", image_url, e)
        return ImageScanResult(image_url=image_url, error=f"parsing failed: {e}")

    try:
        digest = client.resolve_digest(ref.repository, ref.tag)
    except ClientError as e:
        log.debug("Resolving %s failed: %s", image_url, e)
        return ImageScanResult(image_url=image_url, error=f"resolving image id failed: {e}")

    if not digest:
        return ImageScanResult(
            image_url=image_url,
            error=f"could not determine image id for tag '{ref.tag}' (tag might not exist)",
        )

    try:
        report = client.fetch_vulnerabilities(ref.repository, digest)
    except ClientError as e:
        log.debug("Fetching vulnerabilities for %s failed: %s", image_url, e)
        # Keep any partial report (e.g. a non-scanned status) alongside the error
        return ImageScanResult(
            image_url=image_url,
            report=e.report,
            error=f"fetching vulnerabilities failed: {e}",
        )

    log.debug("Fetched report for %s (status=%s)", image_url, report.status)
    return ImageScanResult(image_url=image_url, report=report)
