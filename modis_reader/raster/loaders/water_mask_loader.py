# modis_reader/raster/loaders/water_mask_loader.py
from pathlib import Path
from typing import Optional, Tuple, Union
import logging

from .base_loader import LoadDiagnostics, MISSING_MASK
from .hdf_loader import HDFDatasetLoader
from ..dataset import MODIS_WATER_MASK_SIDE, WaterMask, format_tile_identifier

logger = logging.getLogger(__name__)

WATER_MASK_DATASET = "water_mask"


class WaterMaskLoader:
    """Locates and reads the land/water mask of a tile.

    ``mask_path`` is either a directory holding one mask file per tile,
    matched by the ``hXXvYY`` identifier in the file name, or a single
    mask file used for every tile.
    """

    def __init__(self,
                 mask_path: Optional[Union[str, Path]],
                 dataset_name: str = WATER_MASK_DATASET,
                 loader: Optional[HDFDatasetLoader] = None):
        self.mask_path = Path(mask_path) if mask_path else None
        self.dataset_name = dataset_name
        self.loader = loader or HDFDatasetLoader()

    def find_mask_file(self, tile_id: str) -> Optional[Path]:
        if self.mask_path is None or not self.mask_path.exists():
            return None
        if self.mask_path.is_file():
            return self.mask_path
        matches = sorted(
            p for p in self.mask_path.iterdir()
            if p.is_file() and tile_id in p.name
        )
        return matches[0] if matches else None

    def load(self, tile_h: int, tile_v: int) -> Tuple[Optional[WaterMask], LoadDiagnostics]:
        """Load the mask for tile ``(tile_h, tile_v)``.

        Returns:
            The mask, or None when unavailable, with the diagnostics
            explaining why
        """
        diagnostics = LoadDiagnostics()
        tile_id = format_tile_identifier(tile_h, tile_v)

        if self.mask_path is None:
            diagnostics.warn(MISSING_MASK, "Could not find water mask files: no mask path configured")
            return None, diagnostics

        mask_file = self.find_mask_file(tile_id)
        if mask_file is None:
            diagnostics.warn(MISSING_MASK, f"Could not find water mask for tile '{tile_id}' in {self.mask_path}")
            return None, diagnostics

        bits = self.loader.read_named_array(mask_file, self.dataset_name)
        if bits is None:
            diagnostics.warn(
                MISSING_MASK,
                f"Water mask dataset {self.dataset_name} not found in file {mask_file}"
            )
            return None, diagnostics

        mask = WaterMask(bits)
        if mask.side != MODIS_WATER_MASK_SIDE:
            logger.debug(f"Water mask side {mask.side} differs from the MODIS reference {MODIS_WATER_MASK_SIDE}")
        logger.debug(f"Loaded {mask.side}x{mask.side} water mask for {tile_id} from {mask_file.name}")
        return mask, diagnostics
