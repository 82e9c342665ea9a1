"""
Raster tile reading.

This module turns one gridded MODIS tile into geolocated records:
- In-memory tile and water mask model
- Gap recovery by horizontal interpolation
- Sinusoidal grid-to-geography projection
- Forward-only shape production
- Record reader tying loaders, recovery and production together

Loaders live in ``modis_reader.raster.loaders`` and need GDAL.
"""

from .dataset import GridDataset, SampleType, WaterMask, MODIS_WATER_MASK_SIDE, format_tile_identifier
from .shapes import PointShape, RectangleShape, ShapeKind, create_shape
from .projection import (
    GeoProjector, MercatorProjector,
    project_point, project_rectangle, project_shape,
)
from .recovery import GapRecoveryEngine, RecoveryStats
from .producer import ProducerState, RasterShapeProducer
from .reader import RasterRecordReader

__all__ = [
    'GridDataset',
    'SampleType',
    'WaterMask',
    'MODIS_WATER_MASK_SIDE',
    'format_tile_identifier',
    'PointShape',
    'RectangleShape',
    'ShapeKind',
    'create_shape',
    'GeoProjector',
    'MercatorProjector',
    'project_point',
    'project_rectangle',
    'project_shape',
    'GapRecoveryEngine',
    'RecoveryStats',
    'ProducerState',
    'RasterShapeProducer',
    'RasterRecordReader',
]
