from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass, field
from typing import Iterable, Mapping

from ..constants import ConstraintKind, IntegralityChangeType
from ..sets import GreaterThan, Integer, LessThan, VariableIndex, ZeroOne
from .base import AtomicChange, Diff, ModelState, StateTracker

logger = logging.getLogger(__name__)

K = ConstraintKind
T = IntegralityChangeType

_BINARY_CHANGES = (T.RELAX_BINARY, T.RESTRICT_BINARY)


@dataclass(frozen=True)
class IntegralityChange(AtomicChange):
    """Relax or restore the integer / binary requirement of `var`.

    Relaxing a variable that is not integral, or restoring one that already
    is, emits a RuntimeWarning and leaves the backend untouched.
    """

    var: VariableIndex
    change: IntegralityChangeType

    @property
    def key(self):
        family = K.ZERO_ONE if self.change in _BINARY_CHANGES else K.INTEGER
        return (self.var, family)

    def apply(self, backend, helper) -> None:
        if self.change == T.RELAX_INTEGER:
            self._relax(backend, helper.map_integer, "integer")
        elif self.change == T.RESTRICT_INTEGER:
            self._restrict(backend, helper.map_integer, K.INTEGER, Integer(), "integer")
        elif self.change == T.RELAX_BINARY:
            if self._relax(backend, helper.map_binary, "binary"):
                self._keep_unit_interval(backend, helper)
        else:
            self._restrict(backend, helper.map_binary, K.ZERO_ONE, ZeroOne(), "binary")

    def _relax(self, backend, handles, label: str) -> bool:
        handle = handles.pop(self.var, None)
        if handle is None:
            warnings.warn(f"Cannot relax {self.var}: it is not {label}", RuntimeWarning)
            return False
        backend.delete(handle)
        return True

    def _restrict(self, backend, handles, kind, constraint_set, label: str) -> None:
        if self.var in handles:
            warnings.warn(f"Cannot restrict {self.var}: it is already {label}", RuntimeWarning)
            return
        handles[self.var] = backend.add_constraint(kind, self.var, constraint_set)

    def _keep_unit_interval(self, backend, helper) -> None:
        # A relaxed binary still lives in [0, 1]
        if self.var in helper.map_eq:
            return
        lb = helper.map_lb.get(self.var)
        if lb is None:
            helper.map_lb[self.var] = backend.add_constraint(K.LOWER_BOUND, self.var, GreaterThan(0.0))
        elif backend.get_constraint_set(lb).lower < 0.0:
            backend.set_constraint_set(lb, GreaterThan(0.0))

        ub = helper.map_ub.get(self.var)
        if ub is None:
            helper.map_ub[self.var] = backend.add_constraint(K.UPPER_BOUND, self.var, LessThan(1.0))
        elif backend.get_constraint_set(ub).upper > 1.0:
            backend.set_constraint_set(ub, LessThan(1.0))


@dataclass(frozen=True)
class IntegralityChangeDiff(Diff):
    kind = "integrality"

    changes_by_var: Mapping[tuple, IntegralityChange] = field(default_factory=dict)

    @classmethod
    def from_changes(cls, changes: Iterable[IntegralityChange] = ()) -> IntegralityChangeDiff:
        return cls(cls._keyed(changes))


class IntegralityStateTracker(StateTracker):
    diff_type = IntegralityChangeDiff


def relax_integrality(backend, helper) -> ModelState:
    """State whose forward diff relaxes every integer and binary variable
    currently recorded in `helper`, and whose backward diff restores them.

    Nothing is applied here; pass the state to `recover_state` to take effect.

    Relaxing a binary creates missing [0, 1] bounds and tightens looser ones.
    Restoring only re-adds the binary constraint, so those bounds stay and
    `Model.snapshot()` after a relax/restore round trip can differ from the
    original for binaries that had no explicit or tighter bounds.
    """
    integer_vars = list(helper.map_integer)
    binary_vars = list(helper.map_binary)

    forward = IntegralityChangeDiff.from_changes(
        [IntegralityChange(var, T.RELAX_INTEGER) for var in integer_vars]
        + [IntegralityChange(var, T.RELAX_BINARY) for var in binary_vars]
    )
    backward = IntegralityChangeDiff.from_changes(
        [IntegralityChange(var, T.RESTRICT_INTEGER) for var in integer_vars]
        + [IntegralityChange(var, T.RESTRICT_BINARY) for var in binary_vars]
    )
    logger.debug(
        f"Relaxing integrality of {len(integer_vars)} integer and "
        f"{len(binary_vars)} binary variables"
    )
    return IntegralityStateTracker().new_state(forward, backward)
