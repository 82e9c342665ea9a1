# modis_reader/raster/loaders/__init__.py
"""Raster data loaders.

The GDAL-backed loaders are imported on first access so that the rest of
the package works where GDAL is not installed.
"""

from .base_loader import (
    BaseDatasetLoader, EventSeverity, LoadDiagnostics, LoaderEvent, LoadResult,
    EMPTY_CONTAINER, MISSING_DATASET, MISSING_MASK, MISSING_TILE, UNSIGNED_WIDENED,
)

_LAZY = {
    'HDFDatasetLoader': '.hdf_loader',
    'WaterMaskLoader': '.water_mask_loader',
    'WATER_MASK_DATASET': '.water_mask_loader',
}


def __getattr__(name):
    if name in _LAZY:
        import importlib
        module = importlib.import_module(_LAZY[name], __name__)
        return getattr(module, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    'BaseDatasetLoader',
    'EventSeverity',
    'LoadDiagnostics',
    'LoaderEvent',
    'LoadResult',
    'HDFDatasetLoader',
    'WaterMaskLoader',
    'WATER_MASK_DATASET',
    'EMPTY_CONTAINER',
    'MISSING_DATASET',
    'MISSING_MASK',
    'MISSING_TILE',
    'UNSIGNED_WIDENED',
]
