"""Shared fixtures for modis_reader tests."""

from pathlib import Path
from typing import Dict, Optional

import numpy as np
import pytest

from modis_reader.config import CONFIG_ENV_VAR
from modis_reader.raster.dataset import GridDataset

FILL = -1


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """Keep config discovery away from the developer's environment."""
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def make_dataset():
    """Factory building a GridDataset from a nested list of rows."""
    def _make(rows, fill_value: Optional[int] = FILL, dtype=np.int16,
              tile_h: int = 21, tile_v: int = 6, name: str = "LST_Day_1km") -> GridDataset:
        samples = np.array(rows, dtype=dtype)
        return GridDataset(
            samples=samples,
            resolution=samples.shape[0],
            tile_h=tile_h,
            tile_v=tile_v,
            fill_value=fill_value,
            name=name,
        )
    return _make


class RasterTestHelper:
    """Helper class for writing small test rasters with GDAL."""

    @staticmethod
    def write_raster(output_path: Path,
                     bands: Dict[str, np.ndarray],
                     gdal_type=None,
                     nodata: Optional[float] = None,
                     metadata: Optional[Dict[str, str]] = None,
                     band_metadata: Optional[Dict[str, str]] = None) -> Path:
        gdal = pytest.importorskip("osgeo.gdal")
        if gdal_type is None:
            gdal_type = gdal.GDT_Int16

        first = next(iter(bands.values()))
        height, width = first.shape
        driver = gdal.GetDriverByName('GTiff')
        dataset = driver.Create(str(output_path), width, height, len(bands), gdal_type)

        for index, (name, data) in enumerate(bands.items(), start=1):
            band = dataset.GetRasterBand(index)
            band.WriteArray(data)
            band.SetDescription(name)
            if nodata is not None:
                band.SetNoDataValue(nodata)
            for key, value in (band_metadata or {}).items():
                band.SetMetadataItem(key, value)

        if metadata:
            dataset.SetMetadata(metadata)

        dataset.FlushCache()
        dataset = None
        return output_path


@pytest.fixture
def raster_helper():
    return RasterTestHelper
