from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Set

from ..constants import VARIABLE_KINDS, ConstraintKind
from ..sets import VariableIndex

logger = logging.getLogger(__name__)

K = ConstraintKind


@dataclass
class DomainChangeTrackerHelper:
    """Per-variable cache of the backend handles the trackers edit.

    Built once from the backend and then kept in sync by the atomic changes
    themselves; it must only be read or written while applying changes.
    `original_integer_vars` and `original_binary_vars` remember which
    variables were integral in the root formulation.
    """

    map_lb: Dict[VariableIndex, object] = field(default_factory=dict)
    map_ub: Dict[VariableIndex, object] = field(default_factory=dict)
    map_eq: Dict[VariableIndex, object] = field(default_factory=dict)
    map_integer: Dict[VariableIndex, object] = field(default_factory=dict)
    map_binary: Dict[VariableIndex, object] = field(default_factory=dict)
    original_integer_vars: Set[VariableIndex] = field(default_factory=set)
    original_binary_vars: Set[VariableIndex] = field(default_factory=set)

    @classmethod
    def from_backend(cls, backend) -> DomainChangeTrackerHelper:
        helper = cls()
        for kind in VARIABLE_KINDS:
            for handle in backend.list_constraints(kind):
                helper.register(kind, backend.get_constraint_function(handle), handle)
        logger.debug(
            f"Helper built: {len(helper.map_lb)} lower, {len(helper.map_ub)} upper, "
            f"{len(helper.map_eq)} fixed, {len(helper.map_integer)} integer, "
            f"{len(helper.map_binary)} binary"
        )
        return helper

    def handles(self, kind) -> Dict[VariableIndex, object]:
        kind = ConstraintKind(kind)
        if kind == K.LOWER_BOUND:
            return self.map_lb
        if kind == K.UPPER_BOUND:
            return self.map_ub
        if kind == K.FIXED:
            return self.map_eq
        if kind == K.INTEGER:
            return self.map_integer
        if kind == K.ZERO_ONE:
            return self.map_binary
        raise ValueError(f"No handle cache for constraint kind '{kind.value}'")

    def register(self, kind, var: VariableIndex, handle) -> None:
        kind = ConstraintKind(kind)
        self.handles(kind)[var] = handle
        if kind == K.INTEGER:
            self.original_integer_vars.add(var)
        elif kind == K.ZERO_ONE:
            self.original_binary_vars.add(var)
