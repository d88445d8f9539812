"""
Search Nodes and Statistics

Nodes are opaque to the search driver: a search space may use any object it
likes. `SearchNode` is the convenience record used when the space diffs a
backend, and `LimitedDiscrepancyNode` is the wrapper added by limited
discrepancy search around whatever node the inner space produces.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Optional

from ..state import ModelState


@dataclass
class SearchNode:
    """
    A node of a diff-driven search tree.

    `state` is the ModelState that recovers the node's formulation from any
    other node. `bound` is whatever the space uses to rank or prune the node
    (typically the parent's relaxation value until the node is evaluated).
    """

    node_id: int
    depth: int
    state: Optional[ModelState] = None
    bound: float = float("-inf")
    payload: Any = None


@dataclass
class SearchStats:
    """Counters a search space keeps while it is being searched."""

    nodes_evaluated: int = 0
    nodes_generated: int = 0
    nodes_pruned: int = 0
    max_depth: int = 0
    start_time: float = field(default_factory=time.time)

    def elapsed(self) -> float:
        return time.time() - self.start_time

    def record_children(self, depth: int, n_children: int) -> None:
        self.nodes_evaluated += 1
        self.nodes_generated += n_children
        if n_children == 0:
            self.nodes_pruned += 1
        self.max_depth = max(self.max_depth, depth)


@dataclass
class LimitedDiscrepancyNode:
    """Inner node plus the discrepancy budget left on its root path."""

    inner_node: Any
    budget: int
    max_discrepancy: int = field(default=0, repr=False)

    @property
    def discrepancy(self) -> int:
        """Discrepancies taken on the path from the root."""
        return self.max_discrepancy + 1 - self.budget


def unwrap_node(node):
    """Innermost node below any LimitedDiscrepancyNode wrappers."""
    while isinstance(node, LimitedDiscrepancyNode):
        node = node.inner_node
    return node
