"""Contains the per-cell probability state ("wave function") of a generation run."""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterator

import numpy as np

from tilewave.exceptions import InvariantViolationError
from tilewave.model.neighborhood import get_neighbors

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from tilewave.enums import Direction


class WaveGrid:
    """Row-major grid of probability distributions over the tile type catalog.

    Every cell starts out as a copy of the prior distribution. Collapsing a cell sets its distribution to one-hot.

    Attributes:
        width: The number of columns of the grid.
        height: The number of rows of the grid.
    """

    width: int
    height: int

    # Array of shape (width * height, type_count) holding one distribution per cell.
    _probs: NDArray[np.double]

    def __init__(self, width: int, height: int, prior: NDArray[np.double]) -> None:
        """Initializes every cell with a copy of the prior distribution.

        Args:
            width: The number of columns of the grid.
            height: The number of rows of the grid.
            prior: The distribution every cell starts with.
        """
        self.width = width
        self.height = height
        self._probs = np.tile(np.asarray(prior, dtype=np.double), (width * height, 1))

    @property
    def cell_count(self) -> int:
        return self.width * self.height

    @property
    def type_count(self) -> int:
        return self._probs.shape[1]

    def get_cell(self, index: int) -> NDArray[np.double]:
        """Returns a read-only view of the distribution of a cell."""
        self._check_index(index)
        cell = self._probs[index]
        cell.setflags(write=False)
        return cell

    def set_cell(self, index: int, probs: NDArray[np.double]) -> None:
        """Replaces the distribution of a cell."""
        self._check_index(index)
        self._probs[index] = probs

    def collapse(self, index: int, type_index: int) -> None:
        """Sets the distribution of a cell to one-hot (1 for 'type_index', 0 elsewhere)."""
        self._check_index(index)
        if not 0 <= type_index < self.type_count:
            raise InvariantViolationError(f"WaveGrid.collapse: type index {type_index} out of range")
        self._probs[index] = 0.0
        self._probs[index, type_index] = 1.0

    def neighbors(self, index: int) -> Iterator[tuple[Direction, int]]:
        """Yields (direction, neighbor index) for all neighbors of a cell inside the grid."""
        return get_neighbors(index, self.width, self.height)

    def freeze(self) -> None:
        """Makes the grid read-only. Later attempts to modify a cell raise a ValueError."""
        self._probs.setflags(write=False)

    def as_array(self) -> NDArray[np.double]:
        """Returns a read-only (height, width, type_count) view of all cell distributions."""
        view = self._probs.reshape((self.height, self.width, self.type_count))
        view.setflags(write=False)
        return view

    def __iter__(self) -> Iterator[NDArray[np.double]]:
        for index in range(self.cell_count):
            yield self.get_cell(index)

    def __len__(self) -> int:
        return self.cell_count

    def _check_index(self, index: int) -> None:
        """Raises an InvariantViolationError for cell indices outside the grid."""
        if not 0 <= index < self.cell_count:
            raise InvariantViolationError(f"WaveGrid: cell index {index} >= cell count {self.cell_count}")
