# modis_reader/raster/dataset.py
"""In-memory model of a single MODIS tile and its auxiliary water mask."""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

import numpy as np

from ..exceptions import MalformedGridError, UnsupportedElementTypeError

# Side length of the MODIS 250m land/water mask for one tile
MODIS_WATER_MASK_SIDE = 4800

# Degrees covered by one tile of the global sinusoidal grid
TILE_SIZE_DEGREES = 10


class SampleType(Enum):
    """Integer element types a tile may hold."""
    INT8 = np.dtype(np.int8)
    INT16 = np.dtype(np.int16)
    INT32 = np.dtype(np.int32)

    @property
    def dtype(self) -> np.dtype:
        return self.value

    @property
    def min_value(self) -> int:
        return int(np.iinfo(self.value).min)

    @property
    def max_value(self) -> int:
        return int(np.iinfo(self.value).max)

    @classmethod
    def from_dtype(cls, dtype) -> 'SampleType':
        """Map a numpy dtype onto a supported sample type."""
        dtype = np.dtype(dtype)
        for member in cls:
            if member.value == dtype:
                return member
        raise UnsupportedElementTypeError(
            f"Values of type {dtype} are not supported"
        )

    def clamp_round(self, values) -> np.ndarray:
        """Round half away from zero and clamp into this type's range."""
        values = np.asarray(values, dtype=np.float64)
        rounded = np.sign(values) * np.floor(np.abs(values) + 0.5)
        return np.clip(rounded, self.min_value, self.max_value).astype(self.dtype)


@dataclass(eq=False)
class GridDataset:
    """A square tile of integer samples on the MODIS sinusoidal grid.

    Samples are stored flat in row-major order so that
    ``samples[row * resolution + col]`` addresses one cell.
    """
    samples: np.ndarray
    resolution: int
    tile_h: int
    tile_v: int
    fill_value: Optional[int] = None
    valid_range: Optional[Tuple[int, int]] = None
    name: str = ""
    sample_type: SampleType = field(init=False)

    def __post_init__(self):
        if self.resolution <= 0:
            raise MalformedGridError(
                f"Resolution must be positive, got {self.resolution}"
            )

        samples = np.asarray(self.samples)
        if samples.ndim == 2:
            if samples.shape != (self.resolution, self.resolution):
                raise MalformedGridError(
                    f"Expected a {self.resolution}x{self.resolution} grid, "
                    f"got shape {samples.shape}"
                )
            samples = samples.reshape(-1)
        elif samples.ndim != 1:
            raise MalformedGridError(
                f"Samples must be 1-D or 2-D, got {samples.ndim} dimensions"
            )

        if samples.size != self.resolution * self.resolution:
            raise MalformedGridError(
                f"Expected {self.resolution * self.resolution} samples for "
                f"resolution {self.resolution}, got {samples.size}"
            )

        self.sample_type = SampleType.from_dtype(samples.dtype)
        self.samples = samples
        if self.fill_value is not None:
            self.fill_value = int(self.fill_value)

    @property
    def total_cells(self) -> int:
        return self.samples.size

    @property
    def has_fill_value(self) -> bool:
        return self.fill_value is not None

    @property
    def tile_identifier(self) -> str:
        return format_tile_identifier(self.tile_h, self.tile_v)

    @property
    def is_frozen(self) -> bool:
        return not self.samples.flags.writeable

    def row(self, y: int) -> np.ndarray:
        """Return a view of row ``y``; writes go straight to the samples."""
        start = y * self.resolution
        return self.samples[start:start + self.resolution]

    def value_at(self, row: int, col: int) -> int:
        return int(self.samples[row * self.resolution + col])

    def as_grid(self) -> np.ndarray:
        """2-D view of the samples, shape (resolution, resolution)."""
        return self.samples.reshape(self.resolution, self.resolution)

    def freeze(self) -> None:
        """Mark samples read-only once recovery is finished."""
        self.samples.flags.writeable = False


@dataclass(eq=False)
class WaterMask:
    """Land/water raster for one tile; a cell value of 1 means water."""
    bits: np.ndarray
    side: int = field(init=False)

    def __post_init__(self):
        bits = np.asarray(self.bits)
        if bits.ndim == 1:
            side = math.isqrt(bits.size)
            if side * side != bits.size:
                raise MalformedGridError(
                    f"Water mask of {bits.size} cells is not square"
                )
            bits = bits.reshape(side, side)
        if bits.ndim != 2 or bits.shape[0] != bits.shape[1]:
            raise MalformedGridError(
                f"Water mask must be a square grid, got shape {bits.shape}"
            )
        self.bits = bits
        self.side = bits.shape[0]

    def block_size(self, resolution: int) -> int:
        """Number of mask cells along one side of a dataset cell."""
        if resolution <= 0 or self.side % resolution != 0:
            raise MalformedGridError(
                f"Water mask side {self.side} is not a multiple of "
                f"dataset resolution {resolution}"
            )
        return self.side // resolution

    def water_counts(self, resolution: int) -> np.ndarray:
        """Count water cells inside the mask block covering each dataset cell."""
        block = self.block_size(resolution)
        water = (self.bits == 1).astype(np.int64)
        return water.reshape(resolution, block, resolution, block).sum(axis=(1, 3))

    def eligible_cells(self, resolution: int, threshold: float = 0.5) -> np.ndarray:
        """Cells whose block is not predominantly water.

        A cell is eligible when its water count stays strictly below
        ``threshold`` of the block area.
        """
        block = self.block_size(resolution)
        return self.water_counts(resolution) < threshold * block * block


def format_tile_identifier(tile_h: int, tile_v: int) -> str:
    """Tile identifier as used in MODIS file names, e.g. ``h21v06``."""
    return f"h{tile_h:02d}v{tile_v:02d}"
