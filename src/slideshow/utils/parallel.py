"""
Worker Pools
============

Single responsibility: Bounded thread pools for per-image tasks.

Both parallel stages of the pipeline (metadata extraction and normalization)
spend their time in file I/O and in Pillow codecs that release the GIL, so
they run on threads.
"""

import os
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, List, Optional, TypeVar

from slideshow.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar('T')
R = TypeVar('R')

# Upper bound for I/O pools, matches ThreadPoolExecutor's own default
MAX_IO_WORKERS = 32


def get_optimal_workers(task_type: str = "io") -> int:
    """
    Worker count for a pool of the given kind.

    - "io": header reads and file moves, mostly waiting on disk;
      ``cpu_count + 4`` capped at 32
    - "cpu": full decodes and JPEG encodes; one worker per core

    Example:
        >>> get_optimal_workers("io")  # 8 cores
        12
    """
    cores = os.cpu_count() or 1

    if task_type == "cpu":
        return cores

    if task_type != "io":
        logger.warning(f"Unknown task_type '{task_type}', sizing as I/O bound")

    return min(MAX_IO_WORKERS, cores + 4)


def create_worker_pool(
    task_type: str = "io",
    max_workers: Optional[int] = None
) -> ThreadPoolExecutor:
    """
    Create a thread pool sized for ``task_type``, optionally capped.

    Use as a context manager so workers are joined on exit.
    """
    workers = get_optimal_workers(task_type)

    if max_workers is not None:
        workers = max(1, min(workers, max_workers))

    logger.debug(f"Starting {workers} {task_type} worker thread(s)")
    return ThreadPoolExecutor(max_workers=workers, thread_name_prefix='slideshow')


def map_ordered(
    func: Callable[[T], R],
    items: Iterable[T],
    max_workers: Optional[int] = None,
    task_type: str = "io"
) -> List[R]:
    """
    Apply ``func`` to every item concurrently, keeping input order.

    Results are positional: ``result[i] == func(items[i])`` whatever order the
    workers finish in. The first exception raised by ``func`` (in input order)
    propagates once all submitted work has settled; no partial list is returned.

    Args:
        func: Callable applied to each item
        items: Input items
        max_workers: Optional pool size cap
        task_type: Worker sizing strategy, see ``get_optimal_workers``

    Returns:
        List of results aligned with ``items``
    """
    items = list(items)
    if not items:
        return []

    # A single item gains nothing from a pool
    if len(items) == 1 or max_workers == 1:
        return [func(item) for item in items]

    with create_worker_pool(task_type, max_workers=min(len(items), max_workers or len(items))) as pool:
        futures = [pool.submit(func, item) for item in items]
        return [future.result() for future in futures]
