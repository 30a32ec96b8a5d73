"""Priority queue of uncollapsed cells, ordered by entropy."""

from __future__ import annotations

from dataclasses import dataclass, field
import heapq
from itertools import islice

from tilewave import constants
from tilewave.exceptions import InvariantViolationError


class EntropyQueue:
    """Indexed min-priority queue of (entropy, cell index) entries, one per uncollapsed cell.

    Entries are ordered by entropy first and by cell index second, so cells with equal entropy are always taken in
    row-major order. Changing the entropy of a cell or removing a cell takes O(log n): the superseded heap item is only
    flagged as removed and skipped once it reaches the top of the heap.
    """

    # Heap of items ordered by (entropy, cell index); may contain items flagged as removed.
    _heap: list[_HeapItem]
    # Maps the index of each queued cell to its live heap item. Keeps the cells in ascending index order.
    _entries: dict[int, _HeapItem]
    # Number of items in '_heap' that are flagged as removed.
    _removed_count: int

    def __init__(self, cell_count: int, initial_entropy: float = constants.UNINITIALIZED_ENTROPY) -> None:
        """Creates one entry per cell index in [0, cell_count), all keyed with the same entropy.

        Args:
            cell_count: The number of cells to enqueue.
            initial_entropy: The entropy of every initial entry. Defaults to the sentinel that sorts after every real
                entropy value.
        """
        # A list sorted by (entropy, cell index) already satisfies the heap invariant.
        self._heap = [_HeapItem(initial_entropy, cell_index) for cell_index in range(cell_count)]
        self._entries = {item._cell_index: item for item in self._heap}
        self._removed_count = 0

    def peek(self) -> tuple[float, int]:
        """Returns the (entropy, cell index) entry with the lowest entropy without removing it.

        Raises:
            InvariantViolationError: If the queue is empty.
        """
        self._discard_removed_top()
        if not self._heap:
            raise InvariantViolationError("EntropyQueue.peek: queue is empty")
        top = self._heap[0]
        return top._priority, top._cell_index

    def update(self, cell_index: int, entropy: float) -> None:
        """Changes the entropy of a queued cell.

        Raises:
            InvariantViolationError: If the cell is not queued.
        """
        old_item = self._get_item(cell_index)
        old_item._removed = True
        self._removed_count += 1

        new_item = _HeapItem(entropy, cell_index)
        self._entries[cell_index] = new_item
        heapq.heappush(self._heap, new_item)
        self._compact_if_needed()

    def remove(self, cell_index: int) -> float:
        """Removes a queued cell and returns the entropy it was queued with.

        Raises:
            InvariantViolationError: If the cell is not queued.
        """
        item = self._get_item(cell_index)
        del self._entries[cell_index]
        item._removed = True
        self._removed_count += 1
        self._compact_if_needed()
        return item._priority

    def get_entropy(self, cell_index: int) -> float:
        """Returns the current entropy of a queued cell."""
        return self._get_item(cell_index)._priority

    def nth_cell_index(self, position: int) -> int:
        """Returns the index of the queued cell at a position, counting queued cells in ascending index order.

        Raises:
            InvariantViolationError: If the position is outside [0, len(queue)).
        """
        if not 0 <= position < len(self._entries):
            raise InvariantViolationError(
                f"EntropyQueue.nth_cell_index: position {position} outside queue of size {len(self._entries)}"
            )
        return next(islice(self._entries, position, None))

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, cell_index: object) -> bool:
        return cell_index in self._entries

    def _get_item(self, cell_index: int) -> _HeapItem:
        """Returns the live heap item of a queued cell."""
        try:
            return self._entries[cell_index]
        except KeyError:
            raise InvariantViolationError(f"EntropyQueue: cell {cell_index} is not queued") from None

    def _discard_removed_top(self) -> None:
        """Pops items flagged as removed off the top of the heap."""
        while self._heap and self._heap[0]._removed:
            heapq.heappop(self._heap)
            self._removed_count -= 1

    def _compact_if_needed(self) -> None:
        """Rebuilds the heap once removed items outnumber the live ones."""
        if self._removed_count > len(self._entries):
            self._heap = [item for item in self._heap if not item._removed]
            heapq.heapify(self._heap)
            self._removed_count = 0


@dataclass(order=True)
class _HeapItem:
    """Dataclass storing a queued cell for the priority queue."""

    # The entropy of the cell.
    _priority: float
    # The index of the cell (tie-break for equal entropy).
    _cell_index: int
    # True once the item has been superseded by an update or removed.
    _removed: bool = field(default=False, compare=False)
