"""
Quay Scanner - Container image vulnerability reporting

Queries the Quay security API for one or more container images:
- Resolves each image tag to its manifest digest
- Fetches the vulnerability report for that digest
- Scans many images concurrently and reports per-image results

The module can be used as a standalone tool or as a library.
"""

from .quay_scanner import QuayScanner, main
from .core.config import load_config_from_env, Config
from .core.quay import QuayClient
from .core.scanner import WorkerPool, process_image, run_worker_pool
from .version import __version__

__author__ = "Quay Scanner contributors"

__all__ = [
    "QuayScanner",
    "QuayClient",
    "WorkerPool",
    "process_image",
    "run_worker_pool",
    "load_config_from_env",
    "main",
    "Config",
]

# For CLI entry point compatibility
def main_cli():
    """CLI entry point wrapper"""
    return main()
