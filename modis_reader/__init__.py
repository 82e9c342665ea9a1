"""Read gridded MODIS tiles as geolocated point or cell records."""

__version__ = "0.1.0"
