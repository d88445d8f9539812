"""
Frontier Containers

Every frontier supports push, pop, len, truth testing and non-consuming
iteration in pop order, so that `SearchSpace.stop` and `SearchSpace.output`
can inspect what is left without disturbing the search.
"""

from __future__ import annotations

import heapq
import itertools
import logging
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Iterator, List

logger = logging.getLogger(__name__)


class Frontier(ABC):
    @abstractmethod
    def pop(self):
        ...

    @abstractmethod
    def __len__(self) -> int:
        ...

    @abstractmethod
    def __iter__(self) -> Iterator:
        ...

    def __bool__(self) -> bool:
        return len(self) > 0

    def __repr__(self):
        return f"{type(self).__name__}({len(self)} nodes)"


class Stack(Frontier):
    """Last in, first out."""

    def __init__(self):
        self._items: List[Any] = []

    def push(self, node) -> None:
        self._items.append(node)

    def pop(self):
        return self._items.pop()

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator:
        return reversed(self._items)


class Queue(Frontier):
    """First in, first out."""

    def __init__(self):
        self._items: deque = deque()

    def push(self, node) -> None:
        self._items.append(node)

    def pop(self):
        return self._items.popleft()

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator:
        return iter(self._items)


@dataclass(order=True)
class _Entry:
    priority: float
    # Insertion counter: equal priorities pop first-in, first-out
    seq: int
    node: Any = field(compare=False)


class PriorityFrontier(Frontier):
    """Min-priority queue, FIFO among equal priorities."""

    def __init__(self):
        self._heap: List[_Entry] = []
        self._counter = itertools.count()

    def push(self, node, priority: float) -> None:
        heapq.heappush(self._heap, _Entry(priority, next(self._counter), node))

    def pop(self):
        return heapq.heappop(self._heap).node

    def peek_priority(self) -> float:
        return self._heap[0].priority

    def priorities(self) -> List[float]:
        """Priorities of the remaining nodes, in pop order."""
        return [entry.priority for entry in sorted(self._heap)]

    def __len__(self) -> int:
        return len(self._heap)

    def __iter__(self) -> Iterator:
        return (entry.node for entry in sorted(self._heap))


class BoundedPriorityFrontier(PriorityFrontier):
    """
    Min-priority queue holding at most `width` nodes.

    After every push the largest priorities are discarded for good; among
    equal priorities the most recently pushed node goes first.
    """

    def __init__(self, width: int):
        if width < 1:
            raise ValueError(f"Frontier width must be at least 1, got {width}")
        super().__init__()
        self.width = width
        self.n_discarded = 0

    def push(self, node, priority: float) -> None:
        super().push(node, priority)
        if len(self._heap) > self.width:
            n_drop = len(self._heap) - self.width
            # nsmallest returns a sorted list, which already satisfies the heap property
            self._heap = heapq.nsmallest(self.width, self._heap)
            self.n_discarded += n_drop
            logger.debug(
                f"Beam frontier full (width {self.width}): discarded {n_drop} node(s), "
                f"{self.n_discarded} so far"
            )
