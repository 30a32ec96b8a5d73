"""Contains all global enumeration classes used throughout the project."""

from __future__ import annotations

from enum import Enum


class Direction(Enum):
    """Defines the eight neighbor directions used for tile adjacency.

    The order of the members is significant: it is the order in which adjacency statistics are stored and in which
    neighbors are visited during propagation, so changing it changes the output generated for a fixed seed. The
    enumeration starts at 9 o'clock and rotates clockwise.
    """

    W = 0
    """West (left) neighbor."""
    NW = 1
    """North-west (upper left) neighbor."""
    N = 2
    """North (upper) neighbor."""
    NE = 3
    """North-east (upper right) neighbor."""
    E = 4
    """East (right) neighbor."""
    SE = 5
    """South-east (lower right) neighbor."""
    S = 6
    """South (lower) neighbor."""
    SW = 7
    """South-west (lower left) neighbor."""

    def to_vector(self) -> tuple[int, int]:
        """Returns the (row, col) offset for the direction."""
        match self:
            case Direction.W:
                return (0, -1)
            case Direction.NW:
                return (-1, -1)
            case Direction.N:
                return (-1, 0)
            case Direction.NE:
                return (-1, 1)
            case Direction.E:
                return (0, 1)
            case Direction.SE:
                return (1, 1)
            case Direction.S:
                return (1, 0)
            case Direction.SW:
                return (1, -1)


class UnobservedAdjacencyPolicy(Enum):
    """Defines how a never observed (all-zero) adjacency distribution is applied during propagation."""

    FORBID = "forbid"
    """The all-zero distribution is multiplied in like any other one (default). Usually causes a contradiction."""
    IGNORE = "ignore"
    """The all-zero distribution imposes no constraint; the neighbor cell is left unchanged."""
