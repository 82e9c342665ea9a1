# modis_reader/raster/producer.py
"""Forward-only production of shape records from a tile."""

from copy import copy
from enum import Enum
from typing import Iterator, Optional, Union
import logging

from .dataset import GridDataset, SampleType
from .projection import GeoProjector, project_shape
from .shapes import Shape, ShapeKind, create_shape

logger = logging.getLogger(__name__)


class ProducerState(Enum):
    READY = "ready"
    PRODUCING = "producing"
    EXHAUSTED = "exhausted"


class RasterShapeProducer:
    """Walks a tile cell by cell and emits one geolocated shape per cell.

    The producer owns its cursor; several producers may share one frozen
    dataset. A pass cannot be restarted: once a cell is emitted or skipped
    it is never revisited.
    """

    def __init__(self,
                 dataset: Optional[GridDataset],
                 shape_kind: Union[str, ShapeKind] = ShapeKind.POINT,
                 skip_fill_value: bool = False,
                 projector: Optional[GeoProjector] = None):
        """
        Args:
            dataset: Tile to read, or None when nothing could be loaded
            shape_kind: Geometry emitted for every record
            skip_fill_value: Drop cells holding the dataset's fill value
            projector: Optional secondary projector applied to every shape
        """
        self.dataset = dataset
        self.shape_kind = ShapeKind.parse(shape_kind)
        self.projector = projector
        self.position = 0
        self.state = ProducerState.READY

        if skip_fill_value and dataset is not None and not dataset.has_fill_value:
            logger.debug(f"Dataset '{dataset.name}' has no fill value; skip_fill_value disabled")
            skip_fill_value = False
        self.skip_fill_value = skip_fill_value

    @property
    def total_cells(self) -> int:
        return 0 if self.dataset is None else self.dataset.total_cells

    def create_shape(self) -> Shape:
        return create_shape(self.shape_kind)

    def produce_next(self, shape: Shape) -> bool:
        """Populate ``shape`` with the next record.

        Returns:
            True when a record was produced, False once the tile is exhausted
        """
        if shape.kind is not self.shape_kind:
            raise TypeError(
                f"Producer emits {self.shape_kind.value} shapes, got {type(shape).__name__}"
            )
        if self.dataset is None or self.state is ProducerState.EXHAUSTED:
            self.state = ProducerState.EXHAUSTED
            return False

        self.state = ProducerState.PRODUCING
        dataset = self.dataset
        resolution = dataset.resolution
        samples = dataset.samples
        SampleType.from_dtype(samples.dtype)  # rejects unsupported element types

        while self.position < dataset.total_cells:
            row, col = divmod(self.position, resolution)
            project_shape(shape, row, col, resolution, dataset.tile_h, dataset.tile_v)
            if self.projector is not None:
                self.projector.project(shape)

            shape.value = int(samples[self.position])
            self.position += 1
            if not self.skip_fill_value or shape.value != dataset.fill_value:
                return True

        self.state = ProducerState.EXHAUSTED
        return False

    def next_record(self) -> Optional[Shape]:
        """Return a fresh shape for the next record, or None when exhausted."""
        shape = self.create_shape()
        return shape if self.produce_next(shape) else None

    def progress(self) -> float:
        """Fraction of cells consumed, in [0, 1]."""
        total = self.total_cells
        return 0.0 if total == 0 else self.position / total

    def __iter__(self) -> Iterator[Shape]:
        shape = self.create_shape()
        while self.produce_next(shape):
            yield copy(shape)
