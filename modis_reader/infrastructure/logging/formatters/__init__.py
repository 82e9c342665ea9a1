"""Log formatters for console output."""

from .human_formatter import HumanFormatter

__all__ = ['HumanFormatter']
