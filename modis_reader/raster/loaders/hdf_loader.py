# modis_reader/raster/loaders/hdf_loader.py
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
import logging

import numpy as np
from osgeo import gdal

from .base_loader import (
    BaseDatasetLoader, LoadDiagnostics, LoadResult,
    EMPTY_CONTAINER, MISSING_DATASET, MISSING_TILE, UNSIGNED_WIDENED,
)
from ..dataset import GridDataset
from ...exceptions import RasterReadError, UnsupportedElementTypeError

logger = logging.getLogger(__name__)

gdal.UseExceptions()

# Unsigned samples are widened so every value keeps its meaning
_UNSIGNED_WIDENING = {
    np.dtype(np.uint8): np.dtype(np.int16),
    np.dtype(np.uint16): np.dtype(np.int32),
}

_TILE_PATTERN = re.compile(r'h(\d{2})v(\d{2})', re.IGNORECASE)


class DatasetCandidate:
    """One named raster inside a container: a sub-dataset or a band."""

    def __init__(self, name: str, locator: Any):
        self.name = name
        self.locator = locator

    def __repr__(self) -> str:
        return f"DatasetCandidate({self.name!r})"


class HDFDatasetLoader(BaseDatasetLoader):
    """Loads one named dataset of a MODIS tile through GDAL.

    Containers exposing sub-datasets (HDF4-EOS, HDF5, NetCDF) are searched
    by sub-dataset name; single rasters such as GeoTIFF are searched by
    band description.
    """

    SUFFIXES = ['.hdf', '.h4', '.hdf4', '.he4', '.h5', '.hdf5', '.nc', '.tif', '.tiff']

    def can_handle(self, file_path: Path) -> bool:
        return Path(file_path).suffix.lower() in self.SUFFIXES

    def _open_dataset(self, file_path: Path) -> gdal.Dataset:
        try:
            dataset = gdal.Open(str(file_path), gdal.GA_ReadOnly)
        except RuntimeError as e:
            raise RasterReadError(f"Error reading raster file '{file_path}'", e)
        if dataset is None:
            raise RasterReadError(f"Error reading raster file '{file_path}'")
        return dataset

    def _close_dataset(self, dataset: gdal.Dataset) -> None:
        # GDAL datasets are closed by dropping the reference
        del dataset

    def list_datasets(self, container: gdal.Dataset) -> List[DatasetCandidate]:
        """Named rasters available in ``container``, in file order."""
        subdatasets = container.GetSubDatasets()
        if subdatasets:
            return [
                DatasetCandidate(self._short_name(name), name)
                for name, _description in subdatasets
            ]
        return [
            DatasetCandidate(
                container.GetRasterBand(i).GetDescription() or f"band_{i}", i
            )
            for i in range(1, container.RasterCount + 1)
        ]

    @staticmethod
    def _short_name(subdataset_name: str) -> str:
        # e.g. HDF4_EOS:EOS_GRID:"f.hdf":MODIS_Grid_Daily_1km_LST:LST_Day_1km
        return re.split(r'[:/]', subdataset_name)[-1].strip('"')

    @staticmethod
    def find_dataset(candidates: List[DatasetCandidate],
                     dataset_name: str) -> Optional[DatasetCandidate]:
        """Case-insensitive lookup of ``dataset_name``."""
        wanted = dataset_name.lower()
        for candidate in candidates:
            if candidate.name.lower() == wanted:
                return candidate
        return None

    def load(self, file_path: Path, dataset_name: str) -> LoadResult:
        file_path = Path(file_path)
        diagnostics = LoadDiagnostics()

        with self.open(file_path) as container:
            candidates = self.list_datasets(container)
            if not candidates:
                diagnostics.warn(EMPTY_CONTAINER, f"No datasets found in file {file_path}")
                return LoadResult(None, diagnostics)

            match = self.find_dataset(candidates, dataset_name)
            if match is None:
                match = candidates[0]
                diagnostics.warn(
                    MISSING_DATASET,
                    f"Dataset {dataset_name} not found in file {file_path}; "
                    f"using {match.name}"
                )

            data, metadata, nodata = self._read_candidate(container, match)
            container_metadata = container.GetMetadata() or {}

        tile_h, tile_v = self._tile_indices(file_path, container_metadata, diagnostics)
        fill_value = self._parse_fill_value(metadata, nodata)
        valid_range = self._parse_valid_range(metadata)
        data = self._widen_unsigned(data, match.name, diagnostics)

        dataset = GridDataset(
            samples=data,
            resolution=data.shape[1],
            tile_h=tile_h,
            tile_v=tile_v,
            fill_value=fill_value,
            valid_range=valid_range,
            name=match.name,
        )
        logger.info(
            f"Loaded {match.name} from {file_path.name}: "
            f"{dataset.resolution}x{dataset.resolution} {data.dtype}, "
            f"tile {dataset.tile_identifier}, fill {fill_value}"
        )
        return LoadResult(dataset, diagnostics)

    def read_named_array(self, file_path: Path, dataset_name: str) -> Optional[np.ndarray]:
        """Read ``dataset_name`` as a 2-D array, or None if it is absent."""
        with self.open(Path(file_path)) as container:
            match = self.find_dataset(self.list_datasets(container), dataset_name)
            if match is None:
                return None
            data, _metadata, _nodata = self._read_candidate(container, match)
        return data

    def _read_candidate(self, container: gdal.Dataset,
                        candidate: DatasetCandidate) -> Tuple[np.ndarray, Dict[str, str], Optional[float]]:
        try:
            if isinstance(candidate.locator, str):
                subdataset = gdal.Open(candidate.locator, gdal.GA_ReadOnly)
                band = subdataset.GetRasterBand(1)
                metadata = {**(subdataset.GetMetadata() or {}), **(band.GetMetadata() or {})}
                data = band.ReadAsArray()
                nodata = band.GetNoDataValue()
                subdataset = None
            else:
                band = container.GetRasterBand(candidate.locator)
                metadata = {**(container.GetMetadata() or {}), **(band.GetMetadata() or {})}
                data = band.ReadAsArray()
                nodata = band.GetNoDataValue()
        except RuntimeError as e:
            raise RasterReadError(f"Failed to read dataset {candidate.name}", e)
        if data is None:
            raise RasterReadError(f"Failed to read dataset {candidate.name}")
        return data, metadata, nodata

    @staticmethod
    def _parse_fill_value(metadata: Dict[str, str], nodata: Optional[float]) -> Optional[int]:
        raw = metadata.get('_FillValue')
        if raw is not None:
            return int(float(raw.split(',')[0]))
        if nodata is not None:
            return int(nodata)
        return None

    @staticmethod
    def _parse_valid_range(metadata: Dict[str, str]) -> Optional[Tuple[int, int]]:
        raw = metadata.get('valid_range')
        if not raw:
            return None
        parts = [p for p in re.split(r'[,\s]+', raw.strip()) if p]
        if len(parts) < 2:
            return None
        low, high = int(float(parts[0])), int(float(parts[1]))
        if high < 0:
            # Unsigned 16-bit maximum stored as a signed value
            high += 65536
        return low, high

    @staticmethod
    def _tile_indices(file_path: Path, metadata: Dict[str, str],
                      diagnostics: LoadDiagnostics) -> Tuple[int, int]:
        if 'HORIZONTALTILENUMBER' in metadata and 'VERTICALTILENUMBER' in metadata:
            return int(metadata['HORIZONTALTILENUMBER']), int(metadata['VERTICALTILENUMBER'])

        match = _TILE_PATTERN.search(file_path.name)
        if match:
            return int(match.group(1)), int(match.group(2))

        diagnostics.warn(MISSING_TILE, f"No tile indices found for {file_path}; using h00v00")
        return 0, 0

    @staticmethod
    def _widen_unsigned(data: np.ndarray, name: str,
                        diagnostics: LoadDiagnostics) -> np.ndarray:
        widened = _UNSIGNED_WIDENING.get(data.dtype)
        if widened is not None:
            diagnostics.info(UNSIGNED_WIDENED, f"Widened {name} from {data.dtype} to {widened}")
            return data.astype(widened)
        if data.dtype.kind not in 'i':
            raise UnsupportedElementTypeError(
                f"Cannot read values of type {data.dtype} from {name}"
            )
        return data
