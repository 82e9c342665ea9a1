# modis_reader/raster/reader.py
"""Record reader turning one MODIS tile file into shape records."""

from pathlib import Path
from typing import Iterator, Optional, Tuple, Union

from ..config import Config
from ..core.registry import projector_registry
from ..exceptions import RasterReadError
from ..infrastructure.logging import get_logger, tile_scope, timed_operation
from .dataset import GridDataset, WaterMask
from .loaders.base_loader import BaseDatasetLoader, LoadDiagnostics, MISSING_MASK
from .producer import ProducerState, RasterShapeProducer
from .recovery import GapRecoveryEngine, RecoveryStats
from .shapes import Shape, ShapeKind

logger = get_logger(__name__)


class RasterRecordReader:
    """Reads one dataset of a tile and produces a shape per cell.

    On construction the configured dataset is loaded, gaps are recovered
    when ``gap_recovery.enabled`` is set, and the dataset is frozen.
    Records are then pulled with :meth:`next_record`, :meth:`produce_next`
    or by iterating over the reader.
    """

    def __init__(self,
                 file_path: Union[str, Path],
                 config: Optional[Config] = None,
                 dataset_loader: Optional[BaseDatasetLoader] = None,
                 mask_loader=None):
        """
        Args:
            file_path: Tile file to read
            config: Configuration (defaults plus config.yml when omitted)
            dataset_loader: Loader for the tile; GDAL-backed when omitted
            mask_loader: Loader with ``load(tile_h, tile_v)`` for the water
                mask; built from ``gap_recovery.water_mask_path`` when omitted
        """
        self.file_path = Path(file_path)
        self.config = config or Config()
        self.diagnostics = LoadDiagnostics()
        self.recovery_stats: Optional[RecoveryStats] = None
        self.water_mask: Optional[WaterMask] = None

        if dataset_loader is None:
            from .loaders.hdf_loader import HDFDatasetLoader
            dataset_loader = HDFDatasetLoader()
        self.dataset_loader = dataset_loader
        self._mask_loader = mask_loader

        if not self.dataset_loader.can_handle(self.file_path):
            raise RasterReadError(
                f"{type(self.dataset_loader).__name__} cannot read '{self.file_path.name}'"
            )

        dataset_name = self.config.get('reader.dataset_name')
        result = self.dataset_loader.load(self.file_path, dataset_name)
        self.diagnostics.extend(result.diagnostics)
        self.dataset: Optional[GridDataset] = result.dataset

        tile_id = self.dataset.tile_identifier if self.dataset is not None else None
        with tile_scope(tile_id, dataset_name):
            self._report(result.diagnostics)
            if self.dataset is not None:
                if self.config.get('gap_recovery.enabled', False):
                    self._recover_gaps(self.dataset)
                self.dataset.freeze()

        self.producer = RasterShapeProducer(
            self.dataset,
            shape_kind=self.config.get('reader.shape', ShapeKind.POINT),
            skip_fill_value=self.config.get('reader.skip_fill_value', False),
            projector=projector_registry.create(self.config.get('reader.projector')),
        )

    @property
    def mask_loader(self):
        if self._mask_loader is None:
            from .loaders.water_mask_loader import WaterMaskLoader
            self._mask_loader = WaterMaskLoader(
                self.config.get('gap_recovery.water_mask_path'),
                dataset_name=self.config.get('gap_recovery.water_mask_dataset', 'water_mask'),
            )
        return self._mask_loader

    def _report(self, diagnostics: LoadDiagnostics) -> None:
        for event in diagnostics.warnings:
            logger.warning(event.message, extra={'context': {'code': event.code}})

    def _load_mask(self, dataset: GridDataset) -> Tuple[Optional[WaterMask], LoadDiagnostics]:
        """Load the tile's mask; an unusable mask is reported and treated as missing."""
        try:
            mask, diagnostics = self.mask_loader.load(dataset.tile_h, dataset.tile_v)
        except RasterReadError as e:
            diagnostics = LoadDiagnostics()
            diagnostics.warn(MISSING_MASK, f"Could not read water mask: {e}")
            return None, diagnostics

        if mask is not None and (mask.side % dataset.resolution) != 0:
            diagnostics.warn(
                MISSING_MASK,
                f"Water mask side {mask.side} is not a multiple of "
                f"dataset resolution {dataset.resolution}"
            )
            return None, diagnostics
        return mask, diagnostics

    def _recover_gaps(self, dataset: GridDataset) -> None:
        mask, mask_diagnostics = self._load_mask(dataset)
        self.diagnostics.extend(mask_diagnostics)
        self._report(mask_diagnostics)
        self.water_mask = mask

        if mask is None and self.config.get('gap_recovery.require_mask', False):
            logger.warning("Gap recovery skipped: a water mask is required")
            return

        engine = GapRecoveryEngine(
            water_block_threshold=self.config.get('gap_recovery.water_block_threshold', 0.5)
        )
        with timed_operation('gap_recovery', items_processed=dataset.total_cells):
            self.recovery_stats = engine.recover(dataset, mask)
        logger.info(
            f"Recovered {self.recovery_stats.cells_recovered} cells "
            f"({'with' if mask is not None else 'without'} water mask)"
        )

    @property
    def shape_kind(self) -> ShapeKind:
        return self.producer.shape_kind

    @property
    def position(self) -> int:
        return self.producer.position

    def create_shape(self) -> Shape:
        return self.producer.create_shape()

    def produce_next(self, shape: Shape) -> bool:
        return self.producer.produce_next(shape)

    def next_record(self) -> Optional[Shape]:
        return self.producer.next_record()

    def progress(self) -> float:
        return self.producer.progress()

    def __iter__(self) -> Iterator[Shape]:
        return iter(self.producer)

    def close(self) -> None:
        # The container itself is closed right after loading
        self.producer.state = ProducerState.EXHAUSTED

    def __enter__(self) -> 'RasterRecordReader':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
