"""Structured logging with tile context propagation."""

import logging
import sys
import traceback
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

# Tile and dataset currently being read; set through ``tile_scope``
tile_context: ContextVar[Optional[str]] = ContextVar('tile_id', default=None)
dataset_context: ContextVar[Optional[str]] = ContextVar('dataset', default=None)


class StructuredLogger(logging.Logger):
    """Logger that attaches tile context and performance data to records.

    Every record gets a ``context`` dict (tile, dataset, logger name,
    timestamp plus caller-supplied fields), an optional ``performance`` dict
    and a ``traceback`` string when an exception is attached. Callers pass
    extra context fields as ``extra={'context': {...}}``.
    """

    def __init__(self, name: str):
        super().__init__(name)
        self._context_fields: Dict[str, Any] = {}

    def _base_context(self) -> Dict[str, Any]:
        fields = {
            'tile': tile_context.get(),
            'dataset': dataset_context.get(),
            'logger_name': self.name,
            'timestamp': datetime.now(timezone.utc).isoformat(),
        }
        fields.update(self._context_fields)
        return {key: value for key, value in fields.items() if value is not None}

    @staticmethod
    def _format_traceback(exc_info) -> Optional[str]:
        if isinstance(exc_info, BaseException):
            exc_info = (type(exc_info), exc_info, exc_info.__traceback__)
        elif not isinstance(exc_info, tuple):
            exc_info = sys.exc_info()
        if exc_info[0] is None:
            return None
        return ''.join(traceback.format_exception(*exc_info))

    def _log(self, level, msg, args, exc_info=None, extra=None, stack_info=False, **kwargs):
        extra = dict(extra) if isinstance(extra, dict) else {}
        context = self._base_context()
        context.update(extra.pop('context', None) or {})
        performance = extra.pop('performance', None)

        trace = extra.pop('traceback', None)
        if trace is None and exc_info:
            trace = self._format_traceback(exc_info)

        extra['context'] = context
        extra['performance'] = performance
        extra['traceback'] = trace
        # The traceback is rendered once, from ``record.traceback``
        super()._log(level, msg, args, exc_info=False, extra=extra,
                     stack_info=stack_info, **kwargs)

    def add_context(self, **fields):
        """Attach ``fields`` to every later record of this logger."""
        self._context_fields.update(fields)

    def clear_context(self):
        self._context_fields.clear()

    def log_performance(self, operation: str, duration: float, **metrics):
        """Log how long ``operation`` took.

        Args:
            operation: Operation name, e.g. ``gap_recovery``
            duration: Duration in seconds
            **metrics: Additional metrics; ``items_processed`` also yields a rate
        """
        performance = dict(metrics, operation=operation, duration_seconds=round(duration, 3))
        processed = metrics.get('items_processed')
        if processed is not None and duration > 0:
            performance['items_per_second'] = round(processed / duration, 2)

        self.info(f"Performance: {operation} completed in {duration:.3f}s",
                  extra={'performance': performance})


_loggers: Dict[str, StructuredLogger] = {}


def get_logger(name: str) -> StructuredLogger:
    """Return the structured logger registered under ``name``.

    Example:
        from modis_reader.infrastructure.logging import get_logger
        logger = get_logger(__name__)
    """
    cached = _loggers.get(name)
    if cached is not None:
        return cached

    previous_class = logging.getLoggerClass()
    logging.setLoggerClass(StructuredLogger)
    try:
        logger = logging.getLogger(name)
    finally:
        logging.setLoggerClass(previous_class)

    if not isinstance(logger, StructuredLogger):
        # A plain logger already holds this name in the manager
        logger = StructuredLogger(name)
        logger.parent = logging.getLogger()
    _loggers[name] = logger
    return logger
