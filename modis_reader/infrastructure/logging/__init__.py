"""Structured logging infrastructure for tile reading."""

from .structured_logger import StructuredLogger, get_logger, tile_context, dataset_context
from .context import tile_scope, timed_operation
from .setup import setup_logging

__all__ = [
    'StructuredLogger',
    'get_logger',
    'tile_context',
    'dataset_context',
    'tile_scope',
    'timed_operation',
    'setup_logging',
]
