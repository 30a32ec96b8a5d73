"""Learns tile type statistics from a sample grid for the WFC algorithm."""

from __future__ import annotations

from types import MappingProxyType
from typing import TYPE_CHECKING, Mapping

import numpy as np

from tilewave.enums import Direction
from tilewave.exceptions import InvariantViolationError
from tilewave.logging_config import get_logger
from tilewave.model.neighborhood import get_neighbors

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from tilewave.model.string_map import StringMap


logger = get_logger(__name__)


class SampleModel:
    """Immutable tile statistics learned from a sample grid.

    The model holds the catalog of distinct tile types found in the sample (in order of first occurrence), the relative
    frequency of each type, and for each type and each of the eight directions the distribution of the tile types
    observed next to it in that direction. All arrays are read-only, so a single model can safely be shared by any
    number of generation runs.

    Attributes:
        tile_types: The distinct tile type labels in order of their first occurrence in the sample.
        frequencies: The relative frequency of each tile type (same order as 'tile_types'), summing to 1.
        adjacency: Array of shape (type_count, 8, type_count): adjacency[t, d, u] is the probability of finding tile
            type u next to tile type t in direction d. Rows for type/direction pairs that never occurred are all zero.
    """

    tile_types: tuple[str, ...]
    frequencies: NDArray[np.double]
    adjacency: NDArray[np.double]

    # Maps each tile type label to its index in 'tile_types'.
    _type_indices: dict[str, int]

    def __init__(self, sample: StringMap) -> None:
        """Learns the catalog, the frequency table and the adjacency model from a sample grid.

        An empty sample results in an empty model, which refuses to generate maps.

        Args:
            sample: The grid the tile statistics are learned from.

        Raises:
            InvariantViolationError: If the number of labels in the sample does not match its dimensions.
        """
        if len(sample) != sample.width * sample.height:
            raise InvariantViolationError(
                f"SampleModel: sample holds {len(sample)} labels but is {sample.width}x{sample.height}"
            )

        self.tile_types = tuple(sample.get_types())
        self._type_indices = {tile_type: i for i, tile_type in enumerate(self.tile_types)}

        type_grid = np.array([self._type_indices[label] for label in sample], dtype=np.int_)

        self.frequencies = self._calculate_frequencies(type_grid)
        self.adjacency = self._calculate_adjacency(type_grid, sample.width, sample.height)
        self.frequencies.setflags(write=False)
        self.adjacency.setflags(write=False)

        if self.is_empty():
            logger.warning("Sample grid is empty, no tile types learned")
        else:
            logger.debug(
                f"Learned {self.type_count} tile types from a {sample.width}x{sample.height} sample: "
                f"{', '.join(self.tile_types)}"
            )

    @property
    def type_count(self) -> int:
        """The number of distinct tile types in the catalog."""
        return len(self.tile_types)

    @property
    def frequency_table(self) -> Mapping[str, float]:
        """A read-only mapping from each tile type label to its relative frequency."""
        return MappingProxyType(
            {tile_type: float(frequency) for tile_type, frequency in zip(self.tile_types, self.frequencies)}
        )

    def is_empty(self) -> bool:
        """Returns True if no tile types were learned."""
        return self.type_count == 0

    def get_type_index(self, tile_type: str) -> int:
        """Returns the catalog index of a tile type label.

        Raises:
            KeyError: If the label does not occur in the sample.
        """
        return self._type_indices[tile_type]

    def get_adjacency(self, tile_type: str, direction: Direction) -> NDArray[np.double]:
        """Returns the distribution of tile types found next to a tile type in a direction.

        Args:
            tile_type: The label of the tile type.
            direction: The direction, seen from a tile of the given type.

        Returns:
            A read-only vector over the catalog. It sums to 1 if any neighbor was observed in that direction, otherwise
                it is all zero.
        """
        return self.adjacency[self._type_indices[tile_type], direction.value]

    def _calculate_frequencies(self, type_grid: NDArray[np.int_]) -> NDArray[np.double]:
        """Counts each tile type and divides by the number of sample cells."""
        if len(type_grid) == 0:
            return np.zeros(0, dtype=np.double)
        counts = np.bincount(type_grid, minlength=self.type_count)
        return counts / len(type_grid)

    def _calculate_adjacency(self, type_grid: NDArray[np.int_], width: int, height: int) -> NDArray[np.double]:
        """Counts the neighbors of each tile type per direction and normalizes the counts."""
        neighbor_counts = np.zeros((self.type_count, len(Direction), self.type_count), dtype=np.double)

        for index, type_index in enumerate(type_grid):
            for direction, neighbor_index in get_neighbors(index, width, height):
                neighbor_counts[type_index, direction.value, type_grid[neighbor_index]] += 1

        # Type/direction pairs without any observed neighbor keep an all-zero distribution.
        sums = neighbor_counts.sum(axis=2, keepdims=True)
        return np.divide(neighbor_counts, sums, out=np.zeros_like(neighbor_counts), where=sums > 0)
