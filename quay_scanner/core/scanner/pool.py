"""
Bounded concurrent scanning of many image references.

A work queue is preloaded with every reference and closed with one stop
marker per worker. Worker threads pull one reference at a time, run
:func:`process_image` and hand the result to a results queue. A single
collector thread drains exactly one result per submitted reference into the
result set; workers never touch the result set directly.
"""

import logging
import queue
import threading
from typing import Any, Callable, List, Sequence, Tuple

from ..image_ref import DEFAULT_REGISTRY_HOST
from .result import ImageScanResult, ResultCollector, ResultSet
from .task import process_image

logger = logging.getLogger(__name__)

DEFAULT_WORKERS = 5

# Closes the work queue; one is enqueued per worker
_STOP = object()

# Called from the collector thread as (result, collected_so_far, total)
ProgressHook = Callable[[ImageScanResult, int, int], None]


class WorkerPool:
    """Fixed pool of worker threads sharing one read-only Quay client."""

    def __init__(
        self,
        client: Any,
        worker_count: int = DEFAULT_WORKERS,
        registry_host: str = DEFAULT_REGISTRY_HOST,
        log: logging.Logger | None = None,
        on_result: ProgressHook | None = None,
        result_queue_size: int = 0,
    ):
        """Initialize the pool.

        Args:
            client: Shared client used by every task
            worker_count: Number of concurrent workers (must be >= 1)
            registry_host: Registry host image references must start with
            log: Logger for pool and task events; defaults to this module's logger
            on_result: Optional progress hook invoked for each collected result
            result_queue_size: Capacity of the results queue (0 = unbounded)

        Raises:
            ValueError: If ``worker_count`` is not a positive integer
        """
        if isinstance(worker_count, bool) or not isinstance(worker_count, int) or worker_count < 1:
            raise ValueError(f"worker count must be a positive integer, got {worker_count!r}")
        if result_queue_size < 0:
            raise ValueError(f"result queue size cannot be negative, got {result_queue_size!r}")
        self.client = client
        self.worker_count = worker_count
        self.registry_host = registry_host
        self.log = log or logger
        self.on_result = on_result
        self.result_queue_size = result_queue_size

    def run(self, image_urls: Sequence[str]) -> ResultSet:
        """Scan every reference and block until all results are collected.

        Returns:
            Mapping of reference string to its result, one entry per distinct
            reference
        """
        image_urls = list(image_urls)
        total = len(image_urls)
        if total == 0:
            self.log.debug("No images to scan")
            return {}

        # Extra workers would only ever see the stop marker
        num_workers = min(self.worker_count, total)

        jobs: "queue.Queue[Any]" = queue.Queue()
        for position, image_url in enumerate(image_urls):
            jobs.put((position, image_url))
        for _ in range(num_workers):
            jobs.put(_STOP)

        results: "queue.Queue[Tuple[int, ImageScanResult]]" = queue.Queue(maxsize=self.result_queue_size)
        collector = ResultCollector()

        collector_thread = threading.Thread(
            target=self._collect,
            args=(results, total, collector),
            name="quay-scanner-collector",
            daemon=True,
        )
        collector_thread.start()

        self.log.info("Starting %d workers for %d image(s)", num_workers, total)
        workers: List[threading.Thread] = []
        for worker_id in range(1, num_workers + 1):
            t = threading.Thread(
                target=self._worker,
                args=(worker_id, jobs, results),
                name=f"quay-scanner-worker-{worker_id}",
                daemon=True,
            )
            t.start()
            workers.append(t)

        for t in workers:
            t.join()
        self.log.debug("All workers finished processing")

        collector_thread.join()
        self.log.info(
            "Collected %d result(s) for %d image(s), %d failed",
            collector.collected, len(collector), collector.failed_count,
        )
        return collector.results

    def _worker(self, worker_id: int, jobs: "queue.Queue[Any]", results: "queue.Queue[Tuple[int, ImageScanResult]]") -> None:
        while True:
            job = jobs.get()
            if job is _STOP:
                break
            position, image_url = job
            self.log.debug("[Worker %d] Processing image: %s", worker_id, image_url)
            try:
                result = process_image(image_url, self.client, self.registry_host, log=self.log)
            except Exception as e:
                # Every submitted reference must yield exactly one result
                self.log.exception("[Worker %d] Unexpected error scanning %s", worker_id, image_url)
                result = ImageScanResult(image_url=image_url, error=f"unexpected error: {e}")
            results.put((position, result))
            self.log.debug("[Worker %d] Finished image: %s (error: %s)", worker_id, image_url, result.error is not None)
        self.log.debug("[Worker %d] Exiting", worker_id)

    def _collect(self, results: "queue.Queue[Tuple[int, ImageScanResult]]", total: int, collector: ResultCollector) -> None:
        for _ in range(total):
            position, result = results.get()
            collector.add(position, result)
            if self.on_result is not None:
                try:
                    self.on_result(result, collector.collected, total)
                except Exception:
                    self.log.exception("Progress hook failed for %s", result.image_url)
        self.log.debug("All results collected")


def run_worker_pool(
    image_urls: Sequence[str],
    client: Any,
    worker_count: int = DEFAULT_WORKERS,
    **kwargs: Any,
) -> ResultSet:
    """Scan ``image_urls`` with ``worker_count`` concurrent workers.

    Convenience wrapper around :class:`WorkerPool`; keyword arguments are
    passed to its constructor.
    """
    return WorkerPool(client, worker_count, **kwargs).run(image_urls)
