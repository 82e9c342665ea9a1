"""Exceptions raised by the tile reader."""

from typing import Optional


class RasterError(Exception):
    """Base raster error."""
    def __init__(self, message: str, original_exception: Optional[Exception] = None):
        super().__init__(message)
        self.original_exception = original_exception


class MalformedGridError(RasterError):
    """Raised when a sample array does not match its declared grid shape."""
    pass


class UnsupportedElementTypeError(RasterError):
    """Raised when samples use an element type outside the supported set."""
    pass


class RasterReadError(RasterError):
    """Raised when a raster container cannot be opened or read."""
    pass


class UnknownProjectorError(RasterError):
    """Raised when a secondary projector identifier is not registered."""
    pass


class ConfigError(RasterError):
    """Raised when a configuration file cannot be parsed."""
    pass
