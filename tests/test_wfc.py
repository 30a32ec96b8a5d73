"""Tests for tilewave.model.wfc module."""

import logging
import math

import numpy as np
import pytest

from tilewave.enums import UnobservedAdjacencyPolicy
from tilewave.exceptions import EmptyModelError
from tilewave.model.sample_model import SampleModel
from tilewave.model.string_map import StringMap
from tilewave.model.wfc import WFC, GenerationResult, _GenerationRun


def _make_run(sample_text: str, width: int, height: int, policy=UnobservedAdjacencyPolicy.FORBID, seed: int = 0):
    """Creates a generation run for a sample without running it."""
    model = SampleModel(StringMap.from_text(sample_text))
    return _GenerationRun(model, width, height, np.random.default_rng(seed), policy)


# =============================================================================
# Generation
# =============================================================================

class TestGenerate:
    """Tests for WFC.generate() and WFC.generate_result()."""

    def test_dimensions_and_labels(self, island_wfc: WFC):
        string_map = island_wfc.generate(12, 7, random_seed=3)

        assert (string_map.width, string_map.height) == (12, 7)
        assert len(string_map) == 84
        assert set(string_map) <= {"W", "S", "G"}

    def test_same_seed_same_map(self, island_wfc: WFC):
        assert island_wfc.generate(10, 10, random_seed=1234) == island_wfc.generate(10, 10, random_seed=1234)

    def test_engine_is_reusable(self, island_sample: StringMap):
        """Test that earlier runs do not influence later runs of the same engine."""
        wfc = WFC(SampleModel(island_sample))
        first = wfc.generate(8, 8, random_seed=99)
        wfc.generate(5, 3, random_seed=1)

        assert WFC(SampleModel(island_sample)).generate(8, 8, random_seed=99) == first
        assert wfc.generate(8, 8, random_seed=99) == first

    def test_single_type_sample(self):
        wfc = WFC(SampleModel(StringMap.from_text("A;A\nA;A")))
        result = wfc.generate_result(5, 4, random_seed=0)

        assert list(result.string_map) == ["A"] * 20
        assert result.contradiction_cells == ()

    def test_single_cell(self, small_wfc: WFC):
        string_map = small_wfc.generate(1, 1, random_seed=5)

        assert (string_map.width, string_map.height) == (1, 1)
        assert string_map[0] in {"A", "B"}

    def test_small_sample_end_to_end(self, small_wfc: WFC):
        """Test a 4x4 map generated from the A;A / A;B sample."""
        string_map = small_wfc.generate(4, 4, random_seed=2024)

        assert (string_map.width, string_map.height) == (4, 4)
        assert len(string_map) == 16
        assert set(string_map) <= {"A", "B"}
        assert small_wfc.generate(4, 4, random_seed=2024) == string_map

    def test_relearned_catalog_is_subset(self, island_wfc: WFC):
        """Test that a model learned from a generated map only knows tile types of the original sample."""
        relearned_model = SampleModel(island_wfc.generate(20, 15, random_seed=3))

        assert set(relearned_model.tile_types) <= set(island_wfc.sample_model.tile_types)
        assert relearned_model.frequencies.sum() == pytest.approx(1.0)

    def test_numpy_integer_arguments(self, small_wfc: WFC):
        result = small_wfc.generate_result(np.int64(4), np.int32(3), random_seed=np.uint64(7))

        assert (result.string_map.width, result.string_map.height) == (4, 3)
        assert result.random_seed == 7
        assert result.string_map == small_wfc.generate(4, 3, random_seed=7)

    def test_result(self, island_wfc: WFC):
        result = island_wfc.generate_result(9, 6, random_seed=17)

        assert isinstance(result, GenerationResult)
        assert result.random_seed == 17
        assert result.wave_grid.as_array().shape == (6, 9, 3)
        for cell in result.wave_grid:
            assert sorted(cell) == [0.0, 0.0, 1.0]

    def test_result_matches_wave_grid(self, island_wfc: WFC):
        result = island_wfc.generate_result(7, 7, random_seed=8)
        tile_types = island_wfc.sample_model.tile_types

        assert list(result.string_map) == [tile_types[int(np.argmax(cell))] for cell in result.wave_grid]

    def test_wave_grid_is_frozen(self, small_wfc: WFC):
        result = small_wfc.generate_result(3, 3, random_seed=2)

        with pytest.raises(ValueError):
            result.wave_grid.set_cell(0, np.array([0.0, 1.0]))

    def test_default_seed_is_reported(self, small_wfc: WFC):
        result = small_wfc.generate_result(3, 3)

        assert isinstance(result.random_seed, int)
        assert small_wfc.generate(3, 3, result.random_seed) == result.string_map

    def test_from_file(self, island_sample_file):
        wfc = WFC.from_file(island_sample_file)

        assert wfc.sample_model.tile_types == ("W", "S", "G")
        assert wfc.unobserved_adjacency_policy == UnobservedAdjacencyPolicy.FORBID

    def test_logs(self, small_wfc: WFC, caplog):
        caplog.set_level(logging.DEBUG, logger="tilewave")
        small_wfc.generate(4, 4, random_seed=11)

        assert "Generating map of dimensions: 4x4 (seed 11)" in caplog.text
        assert "PHASE | COLLAPSE | START | 16 cells" in caplog.text
        assert "Generation successful!" in caplog.text


class TestGenerateErrors:
    """Tests for rejected generation requests."""

    def test_empty_model(self):
        wfc = WFC(SampleModel(StringMap.empty()))

        with pytest.raises(EmptyModelError, match="not learned any tile types"):
            wfc.generate(3, 3)

    def test_malformed_sample(self):
        """Test that a sample with ragged rows gives an engine that refuses to generate."""
        wfc = WFC(SampleModel(StringMap.from_text("A;B\nA")))

        with pytest.raises(EmptyModelError):
            wfc.generate(3, 3, random_seed=0)

    @pytest.mark.parametrize("width, height", [(0, 3), (3, -1), (2.5, 2), (True, 2)])
    def test_invalid_dimensions(self, small_wfc: WFC, width, height):
        with pytest.raises(ValueError):
            small_wfc.generate(width, height)

    @pytest.mark.parametrize("random_seed", [-5, -1, 2.0, True])
    def test_invalid_seed(self, small_wfc: WFC, random_seed):
        with pytest.raises(ValueError, match="random_seed must be a non-negative integer"):
            small_wfc.generate(4, 4, random_seed=random_seed)


# =============================================================================
# Contradictions
# =============================================================================

class TestContradictions:
    """Tests for contradiction recovery."""

    def test_unavoidable_contradiction_is_recovered(self, caplog):
        """Test that a sample without any vertical neighbors still generates a full grid."""
        wfc = WFC(SampleModel(StringMap.from_text("A;B")))
        caplog.set_level(logging.DEBUG, logger="tilewave")

        result = wfc.generate_result(2, 2, random_seed=4)

        assert len(result.string_map) == 4
        assert len(result.contradiction_cells) > 0
        assert "CONTRADICTION | cell=" in caplog.text
        assert "contradictions occurred and were reset to uniform" in caplog.text

    def test_ignore_policy_generates(self):
        wfc = WFC(SampleModel(StringMap.from_text("A;B")), UnobservedAdjacencyPolicy.IGNORE)
        string_map = wfc.generate(4, 3, random_seed=4)

        assert set(string_map) <= {"A", "B"}

    def test_forbid_resets_neighbor_to_uniform(self):
        run = _make_run("A;A;B", 3, 1)
        run._collapse_cell_at(0, 1)

        np.testing.assert_array_equal(run.wave_grid.get_cell(1), [0.5, 0.5])
        assert run.contradiction_cells == [1]
        assert run._queue.get_entropy(1) == pytest.approx(1.0)

    def test_ignore_leaves_neighbor_unchanged(self):
        run = _make_run("A;A;B", 3, 1, UnobservedAdjacencyPolicy.IGNORE)
        run._collapse_cell_at(0, 1)

        np.testing.assert_allclose(run.wave_grid.get_cell(1), [2 / 3, 1 / 3])
        assert run.contradiction_cells == []
        assert run._queue.get_entropy(1) == math.inf


# =============================================================================
# Run internals
# =============================================================================

class TestGenerationRun:
    """Tests for the steps of a single generation run."""

    def test_initial_state(self):
        run = _make_run("A;A\nA;B", 3, 2)

        assert len(run._queue) == 6
        assert run._queue.peek() == (math.inf, 0)
        for cell in run.wave_grid:
            np.testing.assert_allclose(cell, [0.75, 0.25])

    def test_collapse_propagates_to_neighbors(self):
        run = _make_run("A;A;B", 3, 1)
        run._collapse_cell_at(0, 0)

        expected_entropy = -(2 / 3 * math.log2(2 / 3) + 1 / 3 * math.log2(1 / 3))
        np.testing.assert_array_equal(run.wave_grid.get_cell(0), [1.0, 0.0])
        np.testing.assert_allclose(run.wave_grid.get_cell(1), [2 / 3, 1 / 3])
        np.testing.assert_allclose(run.wave_grid.get_cell(2), [2 / 3, 1 / 3])
        assert 0 not in run._queue
        entropy, cell_index = run._queue.peek()
        assert cell_index == 1
        assert entropy == pytest.approx(expected_entropy)

    def test_collapsed_neighbors_are_not_changed(self):
        run = _make_run("A;A;B", 3, 1)
        run._collapse_cell_at(1, 1)
        run._collapse_cell_at(0, 0)

        np.testing.assert_array_equal(run.wave_grid.get_cell(1), [0.0, 1.0])

    def test_seeding_below_ratio(self):
        run = _make_run("A;A\nA;B", 9, 9)
        run._seed_cells()

        assert len(run._queue) == 81

    def test_seeding_collapses_one_cell_per_ratio(self):
        run = _make_run("A;A\nA;B", 10, 9, seed=21)
        run._seed_cells()

        assert len(run._queue) == 89
        (seeded_index,) = [i for i in range(90) if i not in run._queue]
        assert sorted(run.wave_grid.get_cell(seeded_index)) == [0.0, 1.0]

    def test_run_collapses_every_cell(self):
        run = _make_run("A;A\nA;B", 12, 8, seed=6)
        run.run()

        assert len(run._queue) == 0
        for cell in run.wave_grid:
            assert sorted(cell) == [0.0, 1.0]
