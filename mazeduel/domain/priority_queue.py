"""Priority queue for the A* frontier with insertion-order tie-breaking."""

import heapq
import itertools
from dataclasses import dataclass, field
from typing import List, Optional

from .types import Coord


@dataclass(order=True)
class PriorityItem:
    """
    Item in the priority queue.

    Comparison order:
    1. f_cost (lower is better)
    2. sequence (earlier insertion wins, so equal f pops first-in first-out)
    """
    f_cost: float
    sequence: int
    coord: Coord = field(compare=False)
    g_cost: float = field(compare=False, default=0.0)


class PriorityQueue:
    """
    Binary heap keyed by (f_cost, insertion sequence).

    A coordinate may be pushed more than once when a cheaper route to it is
    found; the search discards the stale copies when they surface.
    """

    def __init__(self):
        self._heap: List[PriorityItem] = []
        self._counter = itertools.count()

    def is_empty(self) -> bool:
        """Check if the queue is empty."""
        return not self._heap

    def size(self) -> int:
        """Number of entries, stale ones included."""
        return len(self._heap)

    def put(self, coord: Coord, f_cost: float, g_cost: float):
        """Push a coordinate with its f and g costs."""
        heapq.heappush(self._heap, PriorityItem(f_cost, next(self._counter), coord, g_cost))

    def get(self) -> Optional[PriorityItem]:
        """Remove and return the lowest entry, or None if empty."""
        if not self._heap:
            return None
        return heapq.heappop(self._heap)

    def peek(self) -> Optional[PriorityItem]:
        return self._heap[0] if self._heap else None

    def coords(self) -> List[Coord]:
        """Coordinates currently queued, for visualization."""
        return [item.coord for item in self._heap]

    def clear(self):
        """Remove all items from the queue."""
        self._heap.clear()
        self._counter = itertools.count()
