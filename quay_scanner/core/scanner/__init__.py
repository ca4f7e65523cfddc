# Scanner module: per-image task, worker pool and result aggregation
from .pool import WorkerPool, run_worker_pool, DEFAULT_WORKERS
from .result import ImageScanResult, ResultCollector, ResultSet
from .task import process_image

__all__ = [
    'WorkerPool',
    'run_worker_pool',
    'DEFAULT_WORKERS',
    'ImageScanResult',
    'ResultCollector',
    'ResultSet',
    'process_image',
]
