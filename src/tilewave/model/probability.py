"""Probability helpers shared by the WFC engine: entropy, sampling and evidence combination."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from tilewave.exceptions import InvariantViolationError

if TYPE_CHECKING:
    from numpy.typing import NDArray


def shannon_entropy(probs: NDArray[np.double]) -> float:
    """Calculates the Shannon entropy H = -sum(p_i * log2(p_i)) of a distribution.

    Zero entries contribute exactly 0 to the sum, log2(0) is never evaluated.
    """
    possible_probs = probs[probs > 0]
    # Adding 0.0 turns the -0.0 of a one-hot distribution into 0.0.
    return float(-(possible_probs * np.log2(possible_probs)).sum()) + 0.0


def sample_index(probs: NDArray[np.double], draw: float) -> int:
    """Maps a uniform draw from [0, 1) to an index of the distribution (inverse-CDF sampling).

    Walks the distribution accumulating probability mass and returns the first index whose cumulative mass exceeds the
    draw. When rounding leaves the total mass slightly below the draw, the last index with a positive probability is
    returned.

    Args:
        probs: The distribution to sample from.
        draw: A value drawn uniformly from [0, 1).

    Returns:
        The sampled index.

    Raises:
        InvariantViolationError: If the distribution contains no positive probability.
    """
    cumulative = np.cumsum(probs)
    index = int(np.searchsorted(cumulative, draw, side="right"))
    if index < len(probs):
        return index

    possible_indices = np.flatnonzero(probs > 0)
    if len(possible_indices) == 0:
        raise InvariantViolationError(f"sample_index: no positive probability in {probs}. Bug in code?")
    return int(possible_indices[-1])


def combine_and_normalize(expected: NDArray[np.double], current: NDArray[np.double]) -> tuple[NDArray[np.double], bool]:
    """Multiplies two distributions element-wise and normalizes the product.

    Args:
        expected: The distribution predicted for a cell by a neighboring collapse.
        current: The current distribution of the cell.

    Returns:
        The normalized product, and whether a contradiction occurred. On a contradiction (the product has no positive
        mass) the returned distribution is uniform over all entries.

    Raises:
        InvariantViolationError: If the vectors differ in length or the result contains NaN values.
    """
    if expected.shape != current.shape:
        raise InvariantViolationError(
            f"combine_and_normalize: vectors not of same size ({expected.shape} vs {current.shape})"
        )

    product = expected * current
    total = product.sum()
    contradiction = bool(total <= 0)
    if contradiction:
        combined = np.full(len(product), 1.0 / len(product), dtype=np.double)
    else:
        combined = product / total

    if np.isnan(combined).any():
        raise InvariantViolationError(
            f"combine_and_normalize: NaN value in {expected} * {current} -> {combined}. Bug in code?"
        )
    return combined, contradiction
