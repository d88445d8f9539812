from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from ..constants import DEFAULT_BEAM_WIDTH, DEFAULT_MAX_DISCREPANCY
from .base import SearchStrategy
from .frontier import BoundedPriorityFrontier, PriorityFrontier, Queue, Stack
from .node import LimitedDiscrepancyNode, unwrap_node

logger = logging.getLogger(__name__)


# =============================================================================
# Uninformed strategies
# =============================================================================


@dataclass
class DepthFirstSearchStrategy(SearchStrategy):
    """Children are pushed in the order produced, so the last one is expanded next."""

    def new_frontier(self) -> Stack:
        return Stack()

    def insert(self, frontier, space, node) -> None:
        frontier.push(node)


@dataclass
class BreadthFirstSearchStrategy(SearchStrategy):
    def new_frontier(self) -> Queue:
        return Queue()

    def insert(self, frontier, space, node) -> None:
        frontier.push(node)


# =============================================================================
# Priority strategies
# =============================================================================


@dataclass
class BestFirstSearchStrategy(SearchStrategy):
    """
    Expand the node with the smallest priority first.

    `priority(space, node) -> float` ranks nodes; a subclass may override
    `get_priority` instead. Maximizing callers negate their score. Nodes
    wrapped by limited discrepancy search are ranked on their inner node.
    """

    priority: Optional[Callable] = None

    def new_frontier(self) -> PriorityFrontier:
        return PriorityFrontier()

    def get_priority(self, space, node) -> float:
        if self.priority is None:
            return super().get_priority(space, node)
        return self.priority(space, node)

    def insert(self, frontier, space, node) -> None:
        frontier.push(node, self.get_priority(space, unwrap_node(node)))


@dataclass
class BeamSearchStrategy(BestFirstSearchStrategy):
    """Best-first search whose frontier never holds more than `width` nodes."""

    width: int = DEFAULT_BEAM_WIDTH

    def __post_init__(self):
        if self.width < 1:
            raise ValueError(f"Beam width must be at least 1, got {self.width}")

    def new_frontier(self) -> BoundedPriorityFrontier:
        return BoundedPriorityFrontier(self.width)


# =============================================================================
# Limited discrepancy
# =============================================================================


@dataclass
class LimitedDiscrepancySearchStrategy(SearchStrategy):
    """
    Restrict `inner` to nodes reachable with at most `max_discrepancy`
    discrepancies.

    Taking the r-th child produced by the space (r = 1 is the heuristic
    choice) costs r - 1 discrepancies. The root carries a budget of
    `max_discrepancy + 1`; a child of rank r gets `budget - r + 1` and is
    dropped when that falls to zero or below. Surviving children keep the
    order in which the space produced them.
    """

    inner: SearchStrategy = field(default_factory=DepthFirstSearchStrategy)
    max_discrepancy: int = DEFAULT_MAX_DISCREPANCY

    def __post_init__(self):
        if self.max_discrepancy < 0:
            raise ValueError(
                f"max_discrepancy must be non-negative, got {self.max_discrepancy}"
            )

    def new_frontier(self):
        return self.inner.new_frontier()

    def new_root(self, space) -> LimitedDiscrepancyNode:
        return LimitedDiscrepancyNode(
            self.inner.new_root(space), self.max_discrepancy + 1, self.max_discrepancy
        )

    def expand(self, space, node: LimitedDiscrepancyNode) -> Sequence[LimitedDiscrepancyNode]:
        kept: List[LimitedDiscrepancyNode] = []
        for rank, child in enumerate(self.inner.expand(space, node.inner_node), start=1):
            budget = node.budget - rank + 1
            if budget <= 0:
                # Later ranks only cost more
                break
            kept.append(LimitedDiscrepancyNode(child, budget, self.max_discrepancy))
        return kept

    def insert(self, frontier, space, node) -> None:
        self.inner.insert(frontier, space, node)

    def get_priority(self, space, node) -> float:
        return self.inner.get_priority(space, unwrap_node(node))
