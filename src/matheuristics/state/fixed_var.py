from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Mapping, Union

from ..constants import ConstraintKind
from ..sets import EqualTo, GreaterThan, LessThan, VariableIndex
from .base import AtomicChange, Diff, StateTracker

K = ConstraintKind


@dataclass(frozen=True)
class FixChange(AtomicChange):
    """Replace the bounds of `var` by the equality `var == value`."""

    var: VariableIndex
    value: float

    @property
    def key(self):
        return self.var

    def apply(self, backend, helper) -> None:
        if self.var in helper.map_eq:
            raise RuntimeError(f"Cannot fix {self.var}: the variable is already fixed")
        for handles in (helper.map_lb, helper.map_ub):
            handle = handles.pop(self.var, None)
            if handle is not None:
                backend.delete(handle)
        helper.map_eq[self.var] = backend.add_constraint(K.FIXED, self.var, EqualTo(self.value))


@dataclass(frozen=True)
class UnfixChange(AtomicChange):
    """Drop the equality on `var` (if any) and restore `lower <= var <= upper`."""

    var: VariableIndex
    lower: float
    upper: float

    @property
    def key(self):
        return self.var

    def apply(self, backend, helper) -> None:
        handle = helper.map_eq.pop(self.var, None)
        if handle is None:
            return
        backend.delete(handle)
        helper.map_lb[self.var] = backend.add_constraint(
            K.LOWER_BOUND, self.var, GreaterThan(self.lower)
        )
        helper.map_ub[self.var] = backend.add_constraint(
            K.UPPER_BOUND, self.var, LessThan(self.upper)
        )


@dataclass(frozen=True)
class FixVarChangeDiff(Diff):
    """Latest fixing or unfixing of each touched variable."""

    kind = "fix"

    changes_by_var: Mapping[VariableIndex, Union[FixChange, UnfixChange]] = field(
        default_factory=dict
    )

    @classmethod
    def from_changes(cls, changes: Iterable[Union[FixChange, UnfixChange]] = ()) -> FixVarChangeDiff:
        return cls(cls._keyed(changes))


class FixVarChangeTracker(StateTracker):
    diff_type = FixVarChangeDiff
