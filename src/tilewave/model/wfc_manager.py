"""Contains the class that generates several maps in parallel worker processes."""

from __future__ import annotations

from multiprocessing import Pool
import random
from typing import TYPE_CHECKING

import psutil

from tilewave import constants
from tilewave.logging_config import get_logger

if TYPE_CHECKING:
    from tilewave.model.string_map import StringMap
    from tilewave.model.wfc import WFC


logger = get_logger(__name__)


class WFCManager:
    """Runs several independent generation runs of one WFC engine, distributed over worker processes.

    Every map gets its own seed, derived from a single batch seed, and every run builds its own working state, so the
    batch is reproducible regardless of how the runs are distributed over the workers.
    """

    # The engine whose sample model all maps are generated from.
    _wfc: WFC
    # Maximum number of concurrent worker processes (based on physical CPU count unless given explicitly).
    _max_worker_count: int

    def __init__(self, wfc: WFC, max_workers: int | None = None) -> None:
        """Initializes the WFC Manager.

        Args:
            wfc: The engine whose sample model all maps are generated from.
            max_workers: Maximum number of concurrent worker processes. Defaults to the number of physical CPUs.
        """
        if max_workers is not None and max_workers <= 0:
            raise ValueError(f"max_workers must be positive, got {max_workers}")

        self._wfc = wfc
        self._max_worker_count = max_workers if max_workers is not None else psutil.cpu_count(logical=False) or 1

    @property
    def max_worker_count(self) -> int:
        return self._max_worker_count

    def derive_seeds(self, count: int, random_seed: int | None = None) -> list[int]:
        """Derives one seed per map from a batch seed.

        Args:
            count: The number of seeds to derive.
            random_seed: The batch seed. Defaults to a random seed.

        Returns:
            'count' seeds in [0, constants.RANDOM_SEED_MAX].
        """
        if random_seed is None:
            random_seed = random.randint(0, constants.RANDOM_SEED_MAX)
        seed_generator = random.Random(random_seed)
        return [seed_generator.randint(0, constants.RANDOM_SEED_MAX) for _ in range(count)]

    def generate_maps(self, width: int, height: int, count: int, random_seed: int | None = None) -> list[StringMap]:
        """Generates several maps of the same dimensions.

        A single worker generates all maps in the calling process; with more workers a process pool is used.

        Args:
            width: The number of columns of each map.
            height: The number of rows of each map.
            count: The number of maps to generate.
            random_seed: The batch seed all per-map seeds are derived from. Defaults to a random seed.

        Returns:
            The generated maps, in the order of their derived seeds.
        """
        if count <= 0:
            raise ValueError(f"count must be positive, got {count}")

        seeds = self.derive_seeds(count, random_seed)
        worker_count = min(self._max_worker_count, count)
        logger.info(f"Generating {count} maps of dimensions {width}x{height} with {worker_count} workers")

        tasks = [(self._wfc, width, height, seed) for seed in seeds]
        if worker_count == 1:
            return [_generate_map(task) for task in tasks]

        with Pool(processes=worker_count) as pool:
            return pool.map(_generate_map, tasks)


def _generate_map(task: tuple[WFC, int, int, int]) -> StringMap:
    """Worker entry point: runs one generation."""
    wfc, width, height, random_seed = task
    return wfc.generate(width, height, random_seed)
