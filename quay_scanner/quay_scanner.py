#!/usr/bin/env python3
"""
Quay Scanner - vulnerability reports for container images hosted on Quay
"""

import sys
# Require Python 3.10+ for PEP 604 union types used in this codebase.
if sys.version_info < (3, 10):
    raise RuntimeError(
        f"Quay Scanner requires Python >= 3.10 but the current interpreter is {sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}.\n"
        "Please recreate the virtualenv with a suitable Python and reinstall dependencies.\n"
        "Example:\n  python3.10 -m venv .venv && source .venv/bin/activate && pip install -e .\n"
    )

import logging
from pathlib import Path
from typing import Sequence

from .version import __version__
from .core.config import Config, ConfigError, parse_cli_args, create_config_from_args
from .core.formatters import get_formatter
from .core.inputs import InputError, resolve_image_refs
from .core.quay import QuayClient, ClientConfigError
from .core.scanner import WorkerPool, ImageScanResult, ResultSet

# Configure logger (basicConfig will be applied in main)
logger = logging.getLogger(__name__)


class QuayScanner:
    """Main scanning orchestrator: owns the Quay client and runs the worker pool"""

    def __init__(self, config: Config, client: QuayClient | None = None):
        """
        Args:
            config: Application configuration
            client: Pre-built client; created from ``config`` when omitted

        Raises:
            ClientConfigError: If the client cannot be built from ``config``
        """
        self.config = config
        self.client = client if client is not None else self.create_client()

    def create_client(self) -> QuayClient:
        """Build the shared Quay client from configuration"""
        return QuayClient(
            base_url=self.config.api_base_url,
            token=self.config.token,
            timeout=self.config.timeout,
            user_agent=self.config.user_agent,
        )

    def scan(self, image_urls: Sequence[str]) -> ResultSet:
        """Scan all images concurrently and return results keyed by image reference"""
        logger.info("Starting vulnerability scan of %d image(s) with %d workers...", len(image_urls), self.config.workers)
        pool = WorkerPool(
            self.client,
            self.config.workers,
            registry_host=self.config.registry_host,
            log=logger,
            on_result=self._log_progress,
        )
        results = pool.run(image_urls)
        logger.info("Vulnerability scan finished.")
        return results

    @staticmethod
    def _log_progress(result: ImageScanResult, collected: int, total: int) -> None:
        if result.error:
            logger.info("[%d/%d] %s failed: %s", collected, total, result.image_url, result.error)
        else:
            logger.info("[%d/%d] %s scanned", collected, total, result.image_url)

    def render(self, results: ResultSet, output_format: str | None = None) -> str:
        """Render results with the configured (or given) output format"""
        output_format = output_format or self.config.output_format
        logger.info("Formatting output as %s...", output_format)
        return get_formatter(output_format).format_results(results)

    def save_results(self, content: str, output_path: str | None = None) -> Path | None:
        """Write rendered results to ``output_path``, or to stdout when not set"""
        if not output_path:
            sys.stdout.write(content)
            if not content.endswith("\n"):
                sys.stdout.write("\n")
            return None

        path = Path(output_path)
        # Ensure parent directory exists
        if path.parent and not path.parent.exists():
            path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            f.write(content)
            if not content.endswith("\n"):
                f.write("\n")
        logger.info(f"Results saved to: {path}")
        return path


def main(argv: Sequence[str] | None = None):
    """Main entry point"""
    parser = parse_cli_args()
    args = parser.parse_args(argv)
    # Configure basic logging here so importing the package doesn't
    # mutate global logging configuration unexpectedly.
    logging.basicConfig(
        level=logging.DEBUG if getattr(args, 'verbose', False) else logging.WARNING,
        format='%(asctime)s - %(levelname)s - %(message)s',
    )
    logger.debug("Quay Scanner %s, verbose logging enabled.", __version__)

    try:
        config = create_config_from_args(args)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        parser.print_usage(sys.stderr)
        sys.exit(1)

    try:
        image_urls = resolve_image_refs(config.get('image'), config.get('input_file'))
    except InputError as e:
        print(f"Error loading image references: {e}", file=sys.stderr)
        sys.exit(1)
    if not image_urls:
        print("Error: No image references specified or found in the input file.", file=sys.stderr)
        sys.exit(1)
    logger.info("Preparing to process %d image(s).", len(image_urls))

    try:
        scanner = QuayScanner(config)
    except ClientConfigError as e:
        print(f"Error creating Quay client: {e}", file=sys.stderr)
        sys.exit(1)

    results = scanner.scan(image_urls)

    try:
        scanner.save_results(scanner.render(results), config.get('output'))
    except OSError as e:
        print(f"Error writing output: {e}", file=sys.stderr)
        sys.exit(1)

    failed = sum(1 for r in results.values() if r.error)
    logger.info("Done. %d image(s) scanned, %d with errors.", len(results), failed)
    sys.exit(0)


if __name__ == '__main__':
    main()
