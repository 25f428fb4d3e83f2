"""Utility functions and helpers.

Logging, worker pools and external tool discovery.
"""

from .logging import setup_logger, get_logger
from .parallel import get_optimal_workers, create_worker_pool, map_ordered

__all__ = [
    "setup_logger",
    "get_logger",
    "get_optimal_workers",
    "create_worker_pool",
    "map_ordered",
]
