"""Branch-and-bound built from matheuristics' tree search and state diffing.

A single `Model` is kept in memory for the whole search. Every node only
stores the bound changes on its root path; moving from one node to the next
replays those changes instead of rebuilding the LP.

Run this module directly to solve the examples with every search strategy.
"""

from __future__ import annotations

import logging
import math

import matheuristics as mh
from matheuristics import Model
from matheuristics.constants import DEFAULT_INT_TOL, DEFAULT_NODE_LIMIT
from matheuristics.search import (
    BeamSearchStrategy,
    BestFirstSearchStrategy,
    BreadthFirstSearchStrategy,
    DepthFirstSearchStrategy,
    LimitedDiscrepancySearchStrategy,
    SearchNode,
    SearchSpace,
    SearchStats,
    search,
)
from matheuristics.state import DomainChangeDiff, DomainChangeTracker, ModelState, recover_state

logger = logging.getLogger(__name__)


class LPBranchAndBound(SearchSpace):
    """
    LP-based branch-and-bound for a maximization MILP.

    The integrality of the model is relaxed once at the root. Each node
    solves the LP relaxation, prunes against the incumbent, and branches on
    the most fractional variable with x <= floor(v) / x >= ceil(v).
    """

    def __init__(self, model: Model, node_limit: int = DEFAULT_NODE_LIMIT):
        self.model = model
        self.node_limit = node_limit
        self.stats = SearchStats()
        self.incumbent = -math.inf
        self.solution = None

        self.int_vars = [x for x in model.variables if model.is_integer(x) or model.is_binary(x)]
        self.tracker = DomainChangeTracker()
        self.helper = self.tracker.transform_model(model)
        self.original = ModelState([], [])
        self.relaxation = mh.relax_integrality(model, self.helper)
        recover_state(model, self.original, self.relaxation, self.helper)

        self.root_state = self.tracker.root_state(model)
        self.current = self.root_state
        self._last_id = 0

    def _node(self, depth, state, bound) -> SearchNode:
        self._last_id += 1
        return SearchNode(self._last_id, depth, state, bound)

    def new_root(self):
        return self._node(0, self.root_state, math.inf)

    def children(self, node):
        recover_state(self.model, self.current, node.state, self.helper)
        self.current = node.state

        result = self.model.optimize()
        if not result.has_solution or result.objective_value <= self.incumbent + 1e-9:
            self.stats.record_children(node.depth, 0)
            return []

        values = {x: self.model.value(x) for x in self.int_vars}
        x, frac = max(values.items(), key=lambda item: abs(item[1] - round(item[1])))
        if abs(frac - round(frac)) <= DEFAULT_INT_TOL:
            self.incumbent = result.objective_value
            self.solution = {v: self.model.value(v) for v in self.model.variables}
            logger.info(f"New incumbent {self.incumbent:.4f} at node {node.node_id}")
            self.stats.record_children(node.depth, 0)
            return []

        lower, upper = self.model.lower_bound(x), self.model.upper_bound(x)
        down = node.state.child(
            DomainChangeDiff.from_bounds(upper={x: math.floor(frac)}),
            DomainChangeDiff.from_bounds(upper={x: upper}),
        )
        up = node.state.child(
            DomainChangeDiff.from_bounds(lower={x: math.ceil(frac)}),
            DomainChangeDiff.from_bounds(lower={x: lower}),
        )
        kids = [
            self._node(node.depth + 1, down, result.objective_value),
            self._node(node.depth + 1, up, result.objective_value),
        ]
        self.stats.record_children(node.depth, len(kids))
        return kids

    def stop(self, frontier):
        return self.stats.nodes_evaluated >= self.node_limit

    def output(self, frontier):
        # Leave the model exactly as it was handed over
        recover_state(self.model, self.current, self.root_state, self.helper)
        recover_state(self.model, self.relaxation, self.original, self.helper)
        self.current = self.root_state
        return self.incumbent, self.solution


# =============================================================================
# Problems
# =============================================================================


def knapsack() -> Model:
    """
    maximize    10 a + 6 b + 14 c + 7 d + 3 e
    subject to  5 a + 3 b + 7 c + 4 d + 2 e <= 15
                a, b, c, d, e in {0, 1}
    """
    values = [10, 6, 14, 7, 3]
    weights = [5, 3, 7, 4, 2]
    model = Model("knapsack")
    xs = [model.add_variable(f"x{i}", lower=0, upper=1, binary=True) for i in range(len(values))]
    model.add_linear_constraint(dict(zip(xs, weights)), "<=", 15)
    model.set_objective(dict(zip(xs, values)), "max")
    return model


def integer_program() -> Model:
    """
    maximize    5 x + 4 y + 3 z
    subject to  2 x + 3 y +   z <= 5.5
                4 x +   y + 2 z <= 11.5
                3 x + 4 y + 2 z <= 8.5
                x, y, z in {0, ..., 10}
    """
    model = Model("integer program")
    x, y, z = (model.add_variable(n, lower=0, upper=10, integer=True) for n in "xyz")
    model.add_linear_constraint({x: 2, y: 3, z: 1}, "<=", 5.5)
    model.add_linear_constraint({x: 4, y: 1, z: 2}, "<=", 11.5)
    model.add_linear_constraint({x: 3, y: 4, z: 2}, "<=", 8.5)
    model.set_objective({x: 5, y: 4, z: 3}, "max")
    return model


def strategies():
    by_bound = lambda space, node: -node.bound  # noqa: E731
    return {
        "depth-first": DepthFirstSearchStrategy(),
        "breadth-first": BreadthFirstSearchStrategy(),
        "best-first": BestFirstSearchStrategy(priority=by_bound),
        "beam (width 3)": BeamSearchStrategy(priority=by_bound, width=3),
        "LDS (k = 1)": LimitedDiscrepancySearchStrategy(max_discrepancy=1),
    }


def run_all_examples():
    for build in (knapsack, integer_program):
        model = build()
        print("=" * 60)
        print(model)
        print("=" * 60)
        for name, strategy in strategies().items():
            space = LPBranchAndBound(model)
            value, solution = search(strategy, space)
            picked = {model.variable_name(v): round(s) for v, s in (solution or {}).items()}
            print(
                f"  {name:15s} value={value:8.3f}  nodes={space.stats.nodes_evaluated:3d}  "
                f"time={space.stats.elapsed():.3f}s  {picked}"
            )
        print()


if __name__ == "__main__":
    run_all_examples()
