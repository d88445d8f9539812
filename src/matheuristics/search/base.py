"""
Generic Tree Search

`search(strategy, space)` drives any tree exploration: the space knows how to
build a root, expand a node and decide when to stop; the strategy owns the
frontier and decides in which order nodes are expanded.

    root = strategy.new_root(space)
    frontier = strategy.new_frontier(); strategy.insert(frontier, space, root)
    while not space.stop(frontier) and frontier:
        node = frontier.pop()
        for child in strategy.expand(space, node):
            strategy.insert(frontier, space, child)
    return space.output(frontier)

Exceptions raised by the space propagate out of `search` unchanged.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Protocol, Sequence, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class SearchSpaceProtocol(Protocol):
    def new_root(self) -> Any: ...

    def children(self, node) -> Sequence[Any]: ...

    def stop(self, frontier) -> bool: ...

    def output(self, frontier) -> Any: ...


class SearchSpace(ABC):
    """
    Base class for search spaces.

    - new_root(): the node at depth 0.
    - children(node): recover the backend if needed, evaluate the node and
      return its children; an empty sequence prunes the node.
    - stop(frontier): queried before every dequeue, may update the space.
    - output(frontier): called once after the loop with what is left.
    """

    @abstractmethod
    def new_root(self):
        ...

    @abstractmethod
    def children(self, node) -> Sequence:
        ...

    def stop(self, frontier) -> bool:
        return False

    @abstractmethod
    def output(self, frontier):
        ...


class SearchStrategy(ABC):
    """Owns the frontier and the order in which nodes are expanded."""

    @abstractmethod
    def new_frontier(self):
        ...

    @abstractmethod
    def insert(self, frontier, space, node) -> None:
        ...

    def new_root(self, space):
        return space.new_root()

    def expand(self, space, node) -> Sequence:
        return space.children(node)

    def get_priority(self, space, node) -> float:
        raise NotImplementedError(
            f"{type(self).__name__} needs a priority: pass `priority=` or override get_priority"
        )

    def search(self, space):
        return search(self, space)


def search(strategy: SearchStrategy, space):
    """Explore `space` in the order imposed by `strategy` and return `space.output`."""
    logger.debug(f"Starting search with {strategy!r}")

    root = strategy.new_root(space)
    frontier = strategy.new_frontier()
    strategy.insert(frontier, space, root)

    n_expanded = 0
    while not space.stop(frontier) and frontier:
        node = frontier.pop()
        for child in strategy.expand(space, node):
            strategy.insert(frontier, space, child)
        n_expanded += 1

    logger.debug(
        f"Search finished: {n_expanded} nodes expanded, {len(frontier)} left in frontier"
    )
    return space.output(frontier)
