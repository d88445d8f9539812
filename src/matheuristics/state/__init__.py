from .base import (
    KIND_ORDER,
    AtomicChange,
    BackendProtocol,
    Diff,
    ModelState,
    StateTracker,
    apply_change,
    merge_backward,
    merge_forward,
    recover_state,
)
from .cut_rhs import CutRhsChange, CutRhsChangeDiff, CutsTracker
from .fixed_var import FixChange, FixVarChangeDiff, FixVarChangeTracker, UnfixChange
from .helper import DomainChangeTrackerHelper
from .integrality import (
    IntegralityChange,
    IntegralityChangeDiff,
    IntegralityStateTracker,
    relax_integrality,
)
from .var_bounds import (
    DomainChangeDiff,
    DomainChangeTracker,
    LowerBoundChange,
    UpperBoundChange,
)

__all__ = [
    "KIND_ORDER",
    "AtomicChange",
    "BackendProtocol",
    "CutRhsChange",
    "CutRhsChangeDiff",
    "CutsTracker",
    "Diff",
    "DomainChangeDiff",
    "DomainChangeTracker",
    "DomainChangeTrackerHelper",
    "FixChange",
    "FixVarChangeDiff",
    "FixVarChangeTracker",
    "IntegralityChange",
    "IntegralityChangeDiff",
    "IntegralityStateTracker",
    "LowerBoundChange",
    "ModelState",
    "StateTracker",
    "UnfixChange",
    "UpperBoundChange",
    "apply_change",
    "merge_backward",
    "merge_forward",
    "recover_state",
    "relax_integrality",
]
