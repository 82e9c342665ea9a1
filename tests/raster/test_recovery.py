# tests/raster/test_recovery.py
import numpy as np
import pytest

from modis_reader.exceptions import UnsupportedElementTypeError
from modis_reader.raster.dataset import WaterMask
from modis_reader.raster.recovery import GapRecoveryEngine, find_runs

F = -1


def mask_for(resolution, block, water_cells=(), partial=None):
    """Water mask where each listed (row, col) dataset cell is fully water.

    ``partial`` maps a cell to the number of water bits set in its block.
    """
    bits = np.zeros((resolution * block, resolution * block), dtype=np.uint8)
    for row, col in water_cells:
        bits[row * block:(row + 1) * block, col * block:(col + 1) * block] = 1
    for (row, col), count in (partial or {}).items():
        for index in range(count):
            r, c = divmod(index, block)
            bits[row * block + r, col * block + c] = 1
    return WaterMask(bits)


class TestFindRuns:
    """Test run detection on a single row."""

    def test_runs(self):
        empty = np.array([True, False, True, True, False, True])
        assert find_runs(empty).tolist() == [[0, 1], [2, 4], [5, 6]]

    def test_no_runs(self):
        assert find_runs(np.zeros(4, dtype=bool)).shape == (0, 2)

    def test_full_row(self):
        assert find_runs(np.ones(3, dtype=bool)).tolist() == [[0, 3]]


class TestInteriorRuns:
    """Interior runs interpolate between both neighbours."""

    def test_narrow_run(self, make_dataset):
        dataset = make_dataset([
            [10, F, 30, 1],
            [1, 1, 1, 1],
            [1, 1, 1, 1],
            [1, 1, 1, 1],
        ])
        stats = GapRecoveryEngine().recover(dataset)

        # f = 0 at the first cell of the run
        assert list(dataset.row(0)) == [10, 10, 30, 1]
        assert stats.cells_interpolated == 1

    def test_wide_run(self, make_dataset):
        rows = [[1] * 6 for _ in range(6)]
        rows[2] = [0, F, F, F, F, 100]
        dataset = make_dataset(rows)

        GapRecoveryEngine().recover(dataset)

        assert list(dataset.row(2)) == [0, 0, 25, 50, 75, 100]

    def test_interpolation_rounds_to_nearest(self, make_dataset):
        rows = [[1] * 5 for _ in range(5)]
        rows[0] = [0, F, F, F, 10]
        dataset = make_dataset(rows)

        GapRecoveryEngine().recover(dataset)

        # 0, 10/3 and 20/3
        assert list(dataset.row(0)) == [0, 0, 3, 7, 10]

    def test_interpolation_law(self, make_dataset):
        rows = [[5] * 8 for _ in range(8)]
        rows[4] = [3, 200, F, F, F, F, F, -40]
        dataset = make_dataset(rows)

        GapRecoveryEngine().recover(dataset)

        v1, v2, x1, x2 = 200, -40, 2, 7
        for offset in range(x1, x2):
            f = (offset - x1) / (x2 - x1)
            expected = v1 * (1 - f) + v2 * f
            assert dataset.value_at(4, offset) == int(np.sign(expected) * np.floor(abs(expected) + 0.5))

    def test_multiple_runs_in_one_row(self, make_dataset):
        rows = [[1] * 6 for _ in range(6)]
        rows[0] = [2, F, 4, F, F, 10]
        dataset = make_dataset(rows)

        stats = GapRecoveryEngine().recover(dataset)

        assert list(dataset.row(0)) == [2, 2, 4, 4, 7, 10]
        assert stats.rows_touched == 1

    def test_int32_samples(self, make_dataset):
        dataset = make_dataset([[100000, F], [F, 300000]], dtype=np.int32)
        GapRecoveryEngine().recover(dataset)
        assert dataset.as_grid().tolist() == [[100000, 100000], [300000, 300000]]


class TestBoundaryRuns:
    """Runs touching one edge copy their single neighbour."""

    def test_left_edge(self, make_dataset):
        dataset = make_dataset([
            [F, F, 7, 8],
            [1, 1, 1, 1],
            [1, 1, 1, 1],
            [1, 1, 1, 1],
        ])
        stats = GapRecoveryEngine().recover(dataset)

        assert list(dataset.row(0)) == [7, 7, 7, 8]
        assert stats.cells_replicated == 2

    def test_right_edge(self, make_dataset):
        dataset = make_dataset([
            [1, 1, 1, 1],
            [5, F, F, F],
            [1, 1, 1, 1],
            [1, 1, 1, 1],
        ])
        GapRecoveryEngine().recover(dataset)

        assert list(dataset.row(1)) == [5, 5, 5, 5]

    def test_full_row_is_left_alone(self, make_dataset):
        dataset = make_dataset([
            [F, F, F],
            [1, F, 3],
            [1, 2, 3],
        ])
        stats = GapRecoveryEngine().recover(dataset)

        assert list(dataset.row(0)) == [F, F, F]
        assert list(dataset.row(1)) == [1, 1, 3]
        assert stats.full_row_gaps == 1

    def test_rows_are_independent(self, make_dataset):
        dataset = make_dataset([
            [4, F],
            [F, 9],
        ])
        GapRecoveryEngine().recover(dataset)

        assert dataset.as_grid().tolist() == [[4, 4], [9, 9]]


class TestMaskedRecovery:
    """Water mask gating."""

    def test_entirely_water_tile_stays_empty(self, make_dataset):
        dataset = make_dataset([[F, F], [F, F]])
        mask = WaterMask(np.ones((2, 2), dtype=np.uint8))

        GapRecoveryEngine().recover(dataset, mask)

        assert dataset.as_grid().tolist() == [[F, F], [F, F]]

    def test_one_to_one_land_mask_recovers(self, make_dataset):
        dataset = make_dataset([[3, F], [1, 1]])
        mask = WaterMask(np.zeros((2, 2), dtype=np.uint8))

        GapRecoveryEngine().recover(dataset, mask)

        assert dataset.value_at(0, 1) == 3

    def test_water_cell_keeps_fill_without_splitting_run(self, make_dataset):
        rows = [[1] * 4 for _ in range(4)]
        rows[0] = [10, F, F, 40]
        dataset = make_dataset(rows)
        mask = mask_for(4, 2, water_cells=[(0, 1)])

        stats = GapRecoveryEngine().recover(dataset, mask)

        # Cell 2 still interpolates over the whole run [1, 3)
        assert list(dataset.row(0)) == [10, F, 25, 40]
        assert stats.cells_masked == 1

    def test_half_water_block_is_not_recovered(self, make_dataset):
        rows = [[1] * 4 for _ in range(4)]
        rows[1] = [6, F, F, 6]
        dataset = make_dataset(rows)
        mask = mask_for(4, 2, partial={(1, 1): 2, (1, 2): 1})

        GapRecoveryEngine().recover(dataset, mask)

        assert list(dataset.row(1)) == [6, F, 6, 6]

    def test_boundary_run_rechecks_each_cell(self, make_dataset):
        rows = [[1] * 4 for _ in range(4)]
        rows[3] = [F, F, F, 2]
        dataset = make_dataset(rows)
        mask = mask_for(4, 2, water_cells=[(3, 1)])

        GapRecoveryEngine().recover(dataset, mask)

        assert list(dataset.row(3)) == [2, F, 2, 2]

    def test_threshold_is_configurable(self, make_dataset):
        rows = [[1] * 2 for _ in range(2)]
        rows[0] = [8, F]
        dataset = make_dataset(rows)
        mask = mask_for(2, 2, partial={(0, 1): 1})

        GapRecoveryEngine(water_block_threshold=0.25).recover(dataset, mask)

        assert dataset.value_at(0, 1) == F


class TestRecoveryEdgeCases:

    def test_recovery_is_idempotent(self, make_dataset):
        dataset = make_dataset([
            [F, 2, F, 8],
            [3, F, F, 9],
            [1, 1, 1, F],
            [F, F, F, F],
        ])
        engine = GapRecoveryEngine()
        engine.recover(dataset)
        first_pass = dataset.samples.copy()

        stats = engine.recover(dataset)

        assert np.array_equal(dataset.samples, first_pass)
        assert stats.cells_recovered == 0

    def test_no_fill_value_is_a_no_op(self, make_dataset):
        dataset = make_dataset([[F, 1], [2, 3]], fill_value=None)
        stats = GapRecoveryEngine().recover(dataset)
        assert dataset.value_at(0, 0) == F
        assert stats.cells_recovered == 0

    def test_frozen_dataset_is_rejected(self, make_dataset):
        dataset = make_dataset([[F, 1], [2, 3]])
        dataset.freeze()
        with pytest.raises(ValueError):
            GapRecoveryEngine().recover(dataset)

    def test_unsupported_element_type_is_fatal(self, make_dataset):
        dataset = make_dataset([[F, 1], [2, 3]])
        dataset.samples = dataset.samples.astype(np.float32)
        with pytest.raises(UnsupportedElementTypeError):
            GapRecoveryEngine().recover(dataset)
