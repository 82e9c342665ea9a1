"""Logging handlers for different output targets."""

from .console_handler import ConsoleHandler

__all__ = ['ConsoleHandler']
