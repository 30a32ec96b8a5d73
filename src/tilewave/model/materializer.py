"""Converts a collapsed wave grid into a grid of tile type labels."""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

import numpy as np

from tilewave.exceptions import InvariantViolationError
from tilewave.model.string_map import StringMap

if TYPE_CHECKING:
    from tilewave.model.wave_grid import WaveGrid


def materialize(wave_grid: WaveGrid, tile_types: Sequence[str]) -> StringMap:
    """Creates the output grid from the cell distributions of a wave grid.

    Each cell gets the label of its most probable tile type. When several types share the largest probability, the
    one with the lowest catalog index wins.

    Args:
        wave_grid: The wave grid of a finished generation run.
        tile_types: The tile type catalog the cell distributions refer to.

    Returns:
        A grid with the same dimensions as the wave grid.

    Raises:
        InvariantViolationError: If a selected type index lies outside the catalog.
    """
    string_map = StringMap(wave_grid.width, wave_grid.height)
    for cell in wave_grid:
        # argmax returns the first occurrence of the maximum.
        type_index = int(np.argmax(cell))
        if type_index >= len(tile_types):
            raise InvariantViolationError(
                f"materialize: type index {type_index} >= catalog size {len(tile_types)}"
            )
        string_map.push_back(tile_types[type_index])
    return string_map
