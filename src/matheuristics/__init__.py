__all__ = [
    "Model",
    "VariableIndex",
    "ConstraintIndex",
    "GreaterThan",
    "LessThan",
    "EqualTo",
    "Integer",
    "ZeroOne",
    "ConstraintKind",
    "ObjectiveSense",
    "HIGHS",
    "SLSQP",
    "SolverStatus",
    "ModelState",
    "DomainChangeTrackerHelper",
    "DomainChangeTracker",
    "DomainChangeDiff",
    "LowerBoundChange",
    "UpperBoundChange",
    "FixVarChangeTracker",
    "FixVarChangeDiff",
    "FixChange",
    "UnfixChange",
    "CutsTracker",
    "CutRhsChangeDiff",
    "CutRhsChange",
    "IntegralityStateTracker",
    "IntegralityChangeDiff",
    "IntegralityChange",
    "IntegralityChangeType",
    "apply_change",
    "merge_forward",
    "merge_backward",
    "recover_state",
    "relax_integrality",
    "SearchSpace",
    "SearchNode",
    "SearchStats",
    "LimitedDiscrepancyNode",
    "DepthFirstSearchStrategy",
    "BreadthFirstSearchStrategy",
    "BestFirstSearchStrategy",
    "BeamSearchStrategy",
    "LimitedDiscrepancySearchStrategy",
    "search",
]

from .constants import ConstraintKind, IntegralityChangeType, ObjectiveSense, Solver
from .sets import ConstraintIndex, EqualTo, GreaterThan, Integer, LessThan, VariableIndex, ZeroOne
from .model import Model
from .solvers import SolverStatus

HIGHS = Solver.HIGHS
SLSQP = Solver.SLSQP

from .state import (
    CutRhsChange,
    CutRhsChangeDiff,
    CutsTracker,
    DomainChangeDiff,
    DomainChangeTracker,
    DomainChangeTrackerHelper,
    FixChange,
    FixVarChangeDiff,
    FixVarChangeTracker,
    IntegralityChange,
    IntegralityChangeDiff,
    IntegralityStateTracker,
    LowerBoundChange,
    ModelState,
    UnfixChange,
    UpperBoundChange,
    apply_change,
    merge_backward,
    merge_forward,
    recover_state,
    relax_integrality,
)
from .search import (
    BeamSearchStrategy,
    BestFirstSearchStrategy,
    BreadthFirstSearchStrategy,
    DepthFirstSearchStrategy,
    LimitedDiscrepancyNode,
    LimitedDiscrepancySearchStrategy,
    SearchNode,
    SearchSpace,
    SearchStats,
    search,
)
