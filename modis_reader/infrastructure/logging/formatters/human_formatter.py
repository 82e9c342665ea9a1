"""Human-readable formatter for console output."""

import logging
from datetime import datetime
from typing import Any, Dict

# ANSI escape sequences per level
LEVEL_STYLES = {
    'DEBUG': '\033[36m',
    'INFO': '\033[0m',
    'WARNING': '\033[93m',
    'ERROR': '\033[91m',
    'CRITICAL': '\033[95m',
}
RESET = '\033[0m'
BOLD = '\033[1m'
DIM = '\033[2m'


class HumanFormatter(logging.Formatter):
    """Format records as one console line, tagged with the tile being read.

    Example output::

        2024-01-01 12:00:00 WARNING  [...reader] [tile:h21v06 | dataset:LST_Day_1km] Could not find water mask (missing_mask)
    """

    # Alias kept on the class so callers can look up level colors
    COLORS = LEVEL_STYLES

    def __init__(self, use_colors: bool = True, show_context: bool = True,
                 name_width: int = 20):
        """
        Args:
            use_colors: Whether to use ANSI colors
            show_context: Whether to show the tile/dataset tag
            name_width: Logger names longer than this are shortened
        """
        super().__init__()
        self.use_colors = use_colors
        self.show_context = show_context
        self.name_width = name_width

    def _colorize(self, text: str, style: str) -> str:
        if not self.use_colors or not text:
            return text
        return f"{style}{text}{RESET}"

    def format(self, record: logging.LogRecord) -> str:
        when = datetime.fromtimestamp(record.created).strftime('%Y-%m-%d %H:%M:%S')
        context = getattr(record, 'context', None) or {}

        fields = [
            self._colorize(when, DIM),
            self._colorize(f"{record.levelname:8}", LEVEL_STYLES.get(record.levelname, '')),
            self._colorize(f"[{self._shorten_logger_name(record.name)}]", DIM),
        ]
        if self.show_context:
            tag = self._format_context(context)
            if tag:
                fields.append(self._colorize(tag, BOLD))

        message = record.getMessage()
        if context.get('code'):
            message += f" ({context['code']})"
        fields.append(message)
        lines = [' '.join(fields)]

        performance = getattr(record, 'performance', None)
        if performance:
            summary = self._format_performance(performance)
            if summary:
                lines.append('  ' + self._colorize(f"Performance: {summary}", DIM))

        trace = getattr(record, 'traceback', None)
        if trace:
            lines.append(trace.rstrip('\n'))
        elif record.exc_info:
            lines.append(self.formatException(record.exc_info))

        return '\n'.join(lines)

    @staticmethod
    def _format_context(context: Dict[str, Any]) -> str:
        tags = [f"{key}:{context[key]}" for key in ('tile', 'dataset') if context.get(key)]
        return f"[{' | '.join(tags)}]" if tags else ''

    def _shorten_logger_name(self, name: str) -> str:
        width = self.name_width
        if len(name) <= width:
            return name
        last = name.rsplit('.', 1)[-1]
        if last != name and len(last) <= width - 3:
            return f"...{last}"
        return f"{name[:width - 3]}..."

    @staticmethod
    def _format_performance(performance: Dict[str, Any]) -> str:
        summary = []
        if 'duration_seconds' in performance:
            summary.append(f"{performance['duration_seconds']:.3f}s")
        if 'items_processed' in performance:
            summary.append(f"{performance['items_processed']} cells")
        if 'items_per_second' in performance:
            summary.append(f"{performance['items_per_second']:.1f} cells/s")
        return ' | '.join(summary)
