"""Logging context management for per-tile correlation."""

import time
from contextlib import contextmanager
from typing import Optional

from .structured_logger import dataset_context, get_logger, tile_context

logger = get_logger(__name__)


@contextmanager
def tile_scope(tile_id: Optional[str], dataset: Optional[str] = None):
    """Attach ``tile_id`` and ``dataset`` to every log record in scope.

    Example:
        with tile_scope('h21v06', 'LST_Day_1km'):
            logger.warning("Could not find water mask")
    """
    tile_token = tile_context.set(tile_id)
    dataset_token = dataset_context.set(dataset)
    try:
        yield
    finally:
        dataset_context.reset(dataset_token)
        tile_context.reset(tile_token)


@contextmanager
def timed_operation(name: str, **metrics):
    """Log the duration of the wrapped block as a performance record."""
    start_time = time.time()
    try:
        yield metrics
    finally:
        logger.log_performance(name, time.time() - start_time, **metrics)
