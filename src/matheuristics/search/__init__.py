from .base import SearchSpace, SearchSpaceProtocol, SearchStrategy, search
from .frontier import BoundedPriorityFrontier, Frontier, PriorityFrontier, Queue, Stack
from .node import LimitedDiscrepancyNode, SearchNode, SearchStats, unwrap_node
from .strategies import (
    BeamSearchStrategy,
    BestFirstSearchStrategy,
    BreadthFirstSearchStrategy,
    DepthFirstSearchStrategy,
    LimitedDiscrepancySearchStrategy,
)

__all__ = [
    "BeamSearchStrategy",
    "BestFirstSearchStrategy",
    "BoundedPriorityFrontier",
    "BreadthFirstSearchStrategy",
    "DepthFirstSearchStrategy",
    "Frontier",
    "LimitedDiscrepancyNode",
    "LimitedDiscrepancySearchStrategy",
    "PriorityFrontier",
    "Queue",
    "SearchNode",
    "SearchSpace",
    "SearchSpaceProtocol",
    "SearchStats",
    "SearchStrategy",
    "Stack",
    "search",
    "unwrap_node",
]
