from dataclasses import dataclass, field
from typing import Dict, List

import pytest

from matheuristics import Model
from matheuristics.search import SearchSpace


@dataclass(frozen=True)
class TreeNode:
    id: int
    depth: int


@dataclass
class TreeResult:
    visited: List[int]
    open_nodes: list
    n_evaluated: int


@dataclass
class TreeSpace(SearchSpace):
    """Complete tree with `n_children` children per node and sequential ids.

    Records the expansion order, the discrepancy of every generated node
    (child of rank r adds r - 1) and the largest frontier seen by `stop`.
    """

    n_children: int = 2
    node_limit: int = 6
    max_depth: int = 10
    visited: List[int] = field(default_factory=list)
    discrepancy: Dict[int, int] = field(default_factory=lambda: {1: 0})
    max_frontier: int = 0
    n_output_calls: int = 0
    last_id: int = 1

    def new_root(self):
        return TreeNode(1, 0)

    def children(self, node):
        self.visited.append(node.id)
        if node.depth + 1 > self.max_depth:
            return []
        kids = []
        for rank in range(1, self.n_children + 1):
            self.last_id += 1
            self.discrepancy[self.last_id] = self.discrepancy[node.id] + rank - 1
            kids.append(TreeNode(self.last_id, node.depth + 1))
        return kids

    def stop(self, frontier):
        self.max_frontier = max(self.max_frontier, len(frontier))
        return len(self.visited) >= self.node_limit

    def output(self, frontier):
        self.n_output_calls += 1
        return TreeResult(self.visited, list(frontier), len(self.visited))


@pytest.fixture
def tree_space():
    """Factory for mock search trees."""

    def make(**kwargs):
        return TreeSpace(**kwargs)

    return make


@pytest.fixture
def bounded_model():
    """One continuous variable `x >= 0` with a redundant row `x <= 8`."""
    model = Model("bounds")
    x = model.add_variable("x", lower=0.0)
    model.add_linear_constraint({x: 1.0}, "<=", 8.0)
    model.set_objective({x: 1.0})
    return model, x
