# modis_reader/raster/shapes.py
"""Output records produced for each tile cell."""

from dataclasses import dataclass
from enum import Enum
from typing import Union


class ShapeKind(Enum):
    """Geometry emitted for every cell of a production run."""
    POINT = "point"
    RECTANGLE = "rectangle"

    @classmethod
    def parse(cls, value: Union[str, 'ShapeKind']) -> 'ShapeKind':
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            valid = ', '.join(k.value for k in cls)
            raise ValueError(f"Unknown shape kind '{value}'. Expected one of: {valid}")


@dataclass
class PointShape:
    """Cell location as a single (lon, lat) point."""
    x: float = 0.0
    y: float = 0.0
    value: int = 0

    kind = ShapeKind.POINT

    def to_dict(self) -> dict:
        return {'x': self.x, 'y': self.y, 'value': self.value}


@dataclass
class RectangleShape:
    """Cell footprint as a lon/lat bounding rectangle."""
    x1: float = 0.0
    y1: float = 0.0
    x2: float = 0.0
    y2: float = 0.0
    value: int = 0

    kind = ShapeKind.RECTANGLE

    def to_dict(self) -> dict:
        return {
            'x1': self.x1, 'y1': self.y1,
            'x2': self.x2, 'y2': self.y2,
            'value': self.value,
        }


Shape = Union[PointShape, RectangleShape]


def create_shape(kind: Union[str, ShapeKind]) -> Shape:
    """Build an empty shape of the given kind."""
    kind = ShapeKind.parse(kind)
    if kind is ShapeKind.RECTANGLE:
        return RectangleShape()
    return PointShape()
