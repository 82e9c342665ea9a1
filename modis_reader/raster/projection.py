# modis_reader/raster/projection.py
"""Grid-to-geography projection for the MODIS sinusoidal tile grid.

Tile ``(h, v)`` covers 10 degrees on each side. Row 0 sits on the tile's
northern edge and rows grow southward; columns grow eastward. Longitudes
are unprojected from sinusoidal space by dividing by the cosine of the
latitude, which blows up towards the poles. Longitudes computed there are
numerically valid but geographically meaningless.

All functions here are pure and safe to call from several threads.
"""

import math
from abc import ABC, abstractmethod
from typing import Tuple

from ..core.registry import projector_registry
from .dataset import TILE_SIZE_DEGREES
from .shapes import PointShape, RectangleShape, Shape, ShapeKind

# Web-Mercator is undefined at the poles
MERCATOR_MAX_LATITUDE = 85.05112878


def latitude(row: int, resolution: int, tile_v: int) -> float:
    """Latitude of the northern edge of ``row``."""
    return (90 - tile_v * TILE_SIZE_DEGREES) - row * TILE_SIZE_DEGREES / resolution


def raw_longitude(col: int, resolution: int, tile_h: int) -> float:
    """Sinusoidal x of the western edge of ``col``, in degrees."""
    return (tile_h * TILE_SIZE_DEGREES - 180) + col * TILE_SIZE_DEGREES / resolution


def unproject(x: float, lat: float) -> float:
    """Undo the sinusoidal scaling of x at latitude ``lat``."""
    return x / math.cos(lat * math.pi / 180)


def project_point(row: int, col: int, resolution: int,
                  tile_h: int, tile_v: int) -> Tuple[float, float]:
    """Map a grid cell to ``(lon, lat)``."""
    lat = latitude(row, resolution, tile_v)
    lon = unproject(raw_longitude(col, resolution, tile_h), lat)
    return lon, lat


def project_rectangle(row: int, col: int, resolution: int,
                      tile_h: int, tile_v: int) -> Tuple[float, float, float, float]:
    """Map a grid cell to its bounding rectangle ``(x1, y1, x2, y2)``.

    The cell is not axis-aligned after unprojection, so each of the four
    corners is unprojected with its own latitude and the x-extent is the
    min/max over all of them.
    """
    y2 = latitude(row, resolution, tile_v)
    y1 = latitude(row + 1, resolution, tile_v)
    west = raw_longitude(col, resolution, tile_h)
    east = raw_longitude(col + 1, resolution, tile_h)

    xs = (
        unproject(west, y1),
        unproject(west, y2),
        unproject(east, y1),
        unproject(east, y2),
    )
    return min(xs), y1, max(xs), y2


def project_shape(shape: Shape, row: int, col: int, resolution: int,
                  tile_h: int, tile_v: int) -> Shape:
    """Fill the coordinates of ``shape`` for the given cell in place."""
    if shape.kind is ShapeKind.POINT:
        shape.x, shape.y = project_point(row, col, resolution, tile_h, tile_v)
    elif shape.kind is ShapeKind.RECTANGLE:
        shape.x1, shape.y1, shape.x2, shape.y2 = project_rectangle(
            row, col, resolution, tile_h, tile_v
        )
    return shape


class GeoProjector(ABC):
    """Secondary projection applied to every shape after unprojection."""

    @abstractmethod
    def project(self, shape: Shape) -> None:
        """Mutate the coordinates of ``shape`` in place."""
        pass


@projector_registry.register("mercator")
class MercatorProjector(GeoProjector):
    """Projects lon/lat shapes onto Web-Mercator, expressed in degrees."""

    def project(self, shape: Shape) -> None:
        if isinstance(shape, PointShape):
            shape.y = self.mercator_y(shape.y)
        elif isinstance(shape, RectangleShape):
            shape.y1 = self.mercator_y(shape.y1)
            shape.y2 = self.mercator_y(shape.y2)

    @staticmethod
    def mercator_y(lat: float) -> float:
        lat = max(-MERCATOR_MAX_LATITUDE, min(MERCATOR_MAX_LATITUDE, lat))
        return math.degrees(math.log(math.tan(math.pi / 4 + math.radians(lat) / 2)))
