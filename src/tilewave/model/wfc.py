"""Implements the core WFC algorithm on probability distributions learned from a sample grid."""

from __future__ import annotations

from dataclasses import dataclass
from numbers import Integral
import time
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np

from tilewave import constants
from tilewave.enums import UnobservedAdjacencyPolicy
from tilewave.exceptions import EmptyModelError, InvariantViolationError
from tilewave.logging_config import get_logger, log_contradiction, log_phase
from tilewave.model.entropy_queue import EntropyQueue
from tilewave.model.materializer import materialize
from tilewave.model.probability import combine_and_normalize, sample_index, shannon_entropy
from tilewave.model.sample_model import SampleModel
from tilewave.model.string_map import StringMap
from tilewave.model.wave_grid import WaveGrid

if TYPE_CHECKING:
    from numpy.random import Generator


logger = get_logger(__name__)


@dataclass(frozen=True)
class GenerationResult:
    """The output of a single generation run together with its diagnostics.

    Attributes:
        string_map: The generated grid of tile type labels.
        wave_grid: The final (read-only) cell distributions the grid was materialized from.
        random_seed: The seed the run was started with. Passing it again reproduces the same grid.
        contradiction_cells: The indices of the cells that were reset to a uniform distribution after a contradiction,
            in the order the contradictions occurred.
    """

    string_map: StringMap
    wave_grid: WaveGrid
    random_seed: int
    contradiction_cells: tuple[int, ...]


class WFC:
    """Generates tile maps that resemble a sample grid, using the Wave Function Collapse algorithm.

    The engine only holds the immutable sample model and its configuration. Every generation run creates its own wave
    grid, entropy queue and random generator, so one engine can serve any number of (even concurrent) runs.

    A run first collapses a small random fraction of the cells (weighted by the sample frequencies) to break the
    symmetry of the initial state. It then repeatedly collapses the cell with the lowest Shannon entropy (ties resolved
    by the lower cell index) to a tile type drawn from its current distribution, and multiplies the learned adjacency
    distributions of the chosen type into the distributions of the uncollapsed neighbor cells. A neighbor for which this
    product has no positive mass left (a contradiction) is reset to a uniform distribution.
    """

    # Tile types, their frequencies and their adjacency distributions, learned from the sample grid.
    _sample_model: SampleModel
    # How never observed (all-zero) adjacency distributions are applied during propagation.
    _unobserved_adjacency_policy: UnobservedAdjacencyPolicy

    def __init__(
        self,
        sample_model: SampleModel,
        unobserved_adjacency_policy: UnobservedAdjacencyPolicy = UnobservedAdjacencyPolicy.FORBID,
    ) -> None:
        """Initializes the engine.

        Args:
            sample_model: Tile types, their frequencies and their adjacency distributions, learned from the sample grid.
            unobserved_adjacency_policy: How never observed (all-zero) adjacency distributions are applied during
                propagation. Defaults to UnobservedAdjacencyPolicy.FORBID.
        """
        self._sample_model = sample_model
        self._unobserved_adjacency_policy = unobserved_adjacency_policy

    @classmethod
    def from_file(
        cls,
        file_path: Path | str,
        unobserved_adjacency_policy: UnobservedAdjacencyPolicy = UnobservedAdjacencyPolicy.FORBID,
    ) -> WFC:
        """Creates an engine from a sample grid stored in a text file."""
        return cls(SampleModel(StringMap.from_file(file_path)), unobserved_adjacency_policy)

    @property
    def sample_model(self) -> SampleModel:
        return self._sample_model

    @property
    def unobserved_adjacency_policy(self) -> UnobservedAdjacencyPolicy:
        return self._unobserved_adjacency_policy

    def generate(self, width: int, height: int, random_seed: int | None = None) -> StringMap:
        """Generates a new grid of the given dimensions.

        Args:
            width: The number of columns of the generated grid.
            height: The number of rows of the generated grid.
            random_seed: Non-negative seed for the random generator. Defaults to a seed derived from the wall clock.

        Returns:
            The generated grid, using only tile types of the sample.

        Raises:
            EmptyModelError: If the sample model has not learned any tile types.
            ValueError: If width or height is not a positive integer, or the random seed is negative.
            InvariantViolationError: If the internal state becomes inconsistent (a bug).
        """
        return self.generate_result(width, height, random_seed).string_map

    def generate_result(self, width: int, height: int, random_seed: int | None = None) -> GenerationResult:
        """Generates a new grid and returns it together with the diagnostics of the run.

        See 'generate()' for the arguments and the raised exceptions.
        """
        if self._sample_model.is_empty():
            raise EmptyModelError(
                "Cannot generate a map: the sample model has not learned any tile types. Check that the sample grid "
                "is not empty, that all of its rows have the same number of fields and that no field is empty."
            )
        for name, value in (("width", width), ("height", height)):
            if not _is_integer(value) or value <= 0:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")
        width, height = int(width), int(height)

        if random_seed is None:
            random_seed = time.time_ns()
        elif not _is_integer(random_seed) or random_seed < 0:
            raise ValueError(f"random_seed must be a non-negative integer, got {random_seed!r}")
        random_seed = int(random_seed)

        logger.info(f"Generating map of dimensions: {width}x{height} (seed {random_seed})")
        generation_run = _GenerationRun(
            self._sample_model, width, height, np.random.default_rng(random_seed), self._unobserved_adjacency_policy
        )
        generation_run.run()

        log_phase(logger, "MATERIALIZE", "START")
        string_map = materialize(generation_run.wave_grid, self._sample_model.tile_types)
        generation_run.wave_grid.freeze()

        contradiction_cells = tuple(generation_run.contradiction_cells)
        if contradiction_cells:
            logger.warning(f"{len(contradiction_cells)} contradictions occurred and were reset to uniform")
        logger.info("Generation successful!")

        return GenerationResult(string_map, generation_run.wave_grid, random_seed, contradiction_cells)


def _is_integer(value: object) -> bool:
    """Returns True for Python and numpy integers, but not for booleans."""
    return isinstance(value, Integral) and not isinstance(value, (bool, np.bool_))


class _GenerationRun:
    """The mutable state of a single generation run: wave grid, entropy queue and random generator."""

    wave_grid: WaveGrid
    # Cell indices reset to uniform after a contradiction, in order of occurrence.
    contradiction_cells: list[int]

    _sample_model: SampleModel
    _unobserved_adjacency_policy: UnobservedAdjacencyPolicy
    # Random generator used for choosing seed cells and tile types.
    _rng: Generator
    # One entry per uncollapsed cell, ordered by (entropy, cell index).
    _queue: EntropyQueue

    def __init__(
        self,
        sample_model: SampleModel,
        width: int,
        height: int,
        rng: Generator,
        unobserved_adjacency_policy: UnobservedAdjacencyPolicy,
    ) -> None:
        """Initializes every cell with the sample frequencies and enqueues it with the uninitialized entropy."""
        self._sample_model = sample_model
        self._unobserved_adjacency_policy = unobserved_adjacency_policy
        self._rng = rng

        self.wave_grid = WaveGrid(width, height, sample_model.frequencies)
        self._queue = EntropyQueue(self.wave_grid.cell_count, constants.UNINITIALIZED_ENTROPY)
        self.contradiction_cells = []

    def run(self) -> None:
        """Collapses every cell of the wave grid."""
        self._seed_cells()
        self._collapse_remaining_cells()

    def _seed_cells(self) -> None:
        """Collapses randomly chosen cells to types drawn from the sample frequencies."""
        cell_count = self.wave_grid.cell_count
        seed_count = cell_count // constants.SEEDING_CELL_RATIO_DIVISOR
        log_phase(logger, "SEEDING", "START", f"{seed_count} cells")

        for k in range(seed_count):
            if len(self._queue) != cell_count - k:
                raise InvariantViolationError(
                    f"_seed_cells: queue holds {len(self._queue)} cells, expected {cell_count - k}"
                )
            cell_index = self._queue.nth_cell_index(int(self._rng.integers(len(self._queue))))
            type_index = sample_index(self._sample_model.frequencies, self._rng.random())
            self._collapse_cell_at(cell_index, type_index)

    def _collapse_remaining_cells(self) -> None:
        """Collapses the remaining cells in order of lowest entropy."""
        iteration_count = len(self._queue)
        log_phase(logger, "COLLAPSE", "START", f"{iteration_count} cells")

        for _ in range(iteration_count):
            if not self._queue:
                raise InvariantViolationError("_collapse_remaining_cells: queue is empty before it should be")
            _, cell_index = self._queue.peek()
            type_index = sample_index(self.wave_grid.get_cell(cell_index), self._rng.random())
            self._collapse_cell_at(cell_index, type_index)

        if self._queue:
            raise InvariantViolationError(f"_collapse_remaining_cells: {len(self._queue)} cells left uncollapsed")

    def _collapse_cell_at(self, cell_index: int, type_index: int) -> None:
        """Collapses a cell to a tile type, propagates to its neighbors and dequeues it."""
        self.wave_grid.collapse(cell_index, type_index)
        self._queue.update(cell_index, shannon_entropy(self.wave_grid.get_cell(cell_index)))

        self._propagate(cell_index, type_index)

        removed_entropy = self._queue.remove(cell_index)
        if removed_entropy != 0:
            raise InvariantViolationError(
                f"_collapse_cell_at: collapsed cell {cell_index} dequeued with entropy {removed_entropy}"
            )

    def _propagate(self, cell_index: int, type_index: int) -> None:
        """Multiplies the adjacency distributions of a collapsed cell into its uncollapsed neighbors."""
        for direction, neighbor_index in self.wave_grid.neighbors(cell_index):
            # Only uncollapsed cells are still queued.
            if neighbor_index not in self._queue:
                continue

            expected = self._sample_model.adjacency[type_index, direction.value]
            if self._unobserved_adjacency_policy == UnobservedAdjacencyPolicy.IGNORE and not expected.any():
                continue

            new_probs, contradiction = combine_and_normalize(expected, self.wave_grid.get_cell(neighbor_index))
            if contradiction:
                self.contradiction_cells.append(neighbor_index)
                log_contradiction(
                    logger, neighbor_index, self._sample_model.tile_types[type_index], direction.name
                )

            self.wave_grid.set_cell(neighbor_index, new_probs)
            self._queue.update(neighbor_index, shannon_entropy(new_probs))
