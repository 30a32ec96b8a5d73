"""Enumerates the neighbors of a cell in a row-major grid."""

from __future__ import annotations

from typing import Iterator

from tilewave.enums import Direction


def get_neighbors(index: int, width: int, height: int) -> Iterator[tuple[Direction, int]]:
    """Yields (direction, neighbor index) for every existing neighbor of a cell.

    Directions are visited in 'Direction' order. Neighbors outside the grid are skipped; the grid does not wrap around
    its edges.

    Args:
        index: The row-major index of the cell.
        width: The number of columns of the grid.
        height: The number of rows of the grid.
    """
    row, col = divmod(index, width)
    for direction in Direction:
        neighbor_row = row + direction.to_vector()[0]
        neighbor_col = col + direction.to_vector()[1]
        if 0 <= neighbor_row < height and 0 <= neighbor_col < width:
            yield direction, neighbor_row * width + neighbor_col
