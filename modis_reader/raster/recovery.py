# modis_reader/raster/recovery.py
"""Recovery of no-data gaps by 1-D horizontal interpolation.

Each row is handled on its own. Runs of consecutive fill-valued cells are
located, and every run with at least one observed neighbour is filled:

- a run touching exactly one edge of the row copies its single neighbour;
- an interior run interpolates linearly between its two neighbours;
- a run spanning the whole row has no neighbour and stays as it is.

When a water mask is supplied, cells whose mask block is mostly water are
expected to be empty and keep their fill value. Such cells do not split a
run, so the values used for interpolation are always observed ones.
"""

from dataclasses import dataclass
from typing import Optional
import logging

import numpy as np

from .dataset import GridDataset, SampleType, WaterMask

logger = logging.getLogger(__name__)


@dataclass
class RecoveryStats:
    """Counters collected during one recovery pass."""
    rows_touched: int = 0
    cells_interpolated: int = 0
    cells_replicated: int = 0
    cells_masked: int = 0
    full_row_gaps: int = 0

    @property
    def cells_recovered(self) -> int:
        return self.cells_interpolated + self.cells_replicated


def find_runs(empty: np.ndarray) -> np.ndarray:
    """Return ``[x1, x2)`` bounds of every maximal run of True values.

    Args:
        empty: 1-D boolean array

    Returns:
        Integer array of shape (n_runs, 2)
    """
    padded = np.concatenate(([False], empty, [False])).astype(np.int8)
    edges = np.flatnonzero(np.diff(padded))
    return edges.reshape(-1, 2)


class GapRecoveryEngine:
    """Fills fill-valued cells of a tile in place."""

    def __init__(self, water_block_threshold: float = 0.5):
        """
        Args:
            water_block_threshold: Fraction of a mask block that must be water
                for the cell to be treated as expected no-data
        """
        self.water_block_threshold = water_block_threshold

    def recover(self, dataset: GridDataset,
                mask: Optional[WaterMask] = None) -> RecoveryStats:
        """Recover gaps of ``dataset`` row by row, left to right.

        Args:
            dataset: Tile to rewrite in place
            mask: Optional water mask; without it every fill-valued cell
                with a neighbour is recovered

        Returns:
            RecoveryStats for the pass
        """
        stats = RecoveryStats()
        if not dataset.has_fill_value:
            logger.debug(f"Dataset '{dataset.name}' has no fill value, nothing to recover")
            return stats
        if dataset.is_frozen:
            raise ValueError(f"Dataset '{dataset.name}' is frozen and cannot be recovered")

        sample_type = SampleType.from_dtype(dataset.samples.dtype)
        resolution = dataset.resolution
        eligible = None
        if mask is not None:
            eligible = mask.eligible_cells(resolution, self.water_block_threshold)

        for y in range(resolution):
            row = dataset.row(y)
            runs = find_runs(row == dataset.fill_value)
            if len(runs) == 0:
                continue

            row_eligible = eligible[y] if eligible is not None else None
            touched = False
            for x1, x2 in runs:
                touched |= self._recover_run(
                    row, int(x1), int(x2), resolution, sample_type, row_eligible, stats
                )
            if touched:
                stats.rows_touched += 1

        logger.debug(
            f"Recovered {stats.cells_recovered} cells in {stats.rows_touched} rows "
            f"({stats.cells_masked} masked, {stats.full_row_gaps} full-row gaps)"
        )
        return stats

    def _recover_run(self, row: np.ndarray, x1: int, x2: int, resolution: int,
                     sample_type: SampleType, row_eligible: Optional[np.ndarray],
                     stats: RecoveryStats) -> bool:
        if x1 == 0 and x2 == resolution:
            stats.full_row_gaps += 1
            return False

        targets = np.arange(x1, x2)
        if row_eligible is not None:
            keep = row_eligible[x1:x2]
            stats.cells_masked += int(np.count_nonzero(~keep))
            targets = targets[keep]
        if targets.size == 0:
            return False

        if x1 == 0 or x2 == resolution:
            # Only one neighbour lies inside the tile
            neighbour = x2 if x1 == 0 else x1 - 1
            row[targets] = row[neighbour]
            stats.cells_replicated += targets.size
        else:
            v1 = float(row[x1 - 1])
            v2 = float(row[x2])
            fraction = (targets - x1) / (x2 - x1)
            row[targets] = sample_type.clamp_round(v1 * (1.0 - fraction) + v2 * fraction)
            stats.cells_interpolated += targets.size
        return True
