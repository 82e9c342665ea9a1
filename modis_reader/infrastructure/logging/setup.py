"""Setup and configuration for the structured logging system."""

import logging
from typing import Optional

from .handlers import ConsoleHandler


def setup_logging(log_level: str = 'INFO',
                  show_context: bool = True,
                  use_colors: Optional[bool] = None,
                  stream=None) -> logging.Handler:
    """Route all records through a single console handler on the root logger.

    Args:
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        show_context: Whether to show the tile/dataset tag
        use_colors: Force color on/off (auto-detect if None)
        stream: Output stream (defaults to stderr)

    Returns:
        The installed console handler
    """
    level = logging.getLevelName(str(log_level).upper())
    if not isinstance(level, int):
        level = logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    console_handler = ConsoleHandler(
        stream=stream,
        use_colors=use_colors,
        show_context=show_context,
        level=level,
    )
    root_logger.addHandler(console_handler)
    return console_handler
