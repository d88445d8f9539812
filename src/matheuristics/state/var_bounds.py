from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional

from ..constants import ConstraintKind
from ..sets import GreaterThan, LessThan, VariableIndex
from .base import AtomicChange, Diff, StateTracker

K = ConstraintKind


def _check_not_fixed(var: VariableIndex, helper) -> None:
    if var in helper.map_eq:
        raise RuntimeError(f"Cannot change a bound of {var}: the variable is fixed")


@dataclass(frozen=True)
class LowerBoundChange(AtomicChange):
    var: VariableIndex
    lower: float

    @property
    def key(self):
        return self.var

    def apply(self, backend, helper) -> None:
        _check_not_fixed(self.var, helper)
        handle = helper.map_lb.get(self.var)
        if handle is None:
            helper.map_lb[self.var] = backend.add_constraint(
                K.LOWER_BOUND, self.var, GreaterThan(self.lower)
            )
        else:
            backend.set_constraint_set(handle, GreaterThan(self.lower))


@dataclass(frozen=True)
class UpperBoundChange(AtomicChange):
    var: VariableIndex
    upper: float

    @property
    def key(self):
        return self.var

    def apply(self, backend, helper) -> None:
        _check_not_fixed(self.var, helper)
        handle = helper.map_ub.get(self.var)
        if handle is None:
            helper.map_ub[self.var] = backend.add_constraint(
                K.UPPER_BOUND, self.var, LessThan(self.upper)
            )
        else:
            backend.set_constraint_set(handle, LessThan(self.upper))


@dataclass(frozen=True)
class DomainChangeDiff(Diff):
    """Latest lower and upper bound of every touched variable.

    Lower bounds are applied before upper bounds.
    """

    kind = "domain"

    lower_bounds: Mapping[VariableIndex, LowerBoundChange] = field(default_factory=dict)
    upper_bounds: Mapping[VariableIndex, UpperBoundChange] = field(default_factory=dict)

    @classmethod
    def from_changes(
        cls,
        lower: Iterable[LowerBoundChange] = (),
        upper: Iterable[UpperBoundChange] = (),
    ) -> DomainChangeDiff:
        return cls(cls._keyed(lower), cls._keyed(upper))

    @classmethod
    def from_bounds(
        cls,
        lower: Optional[Mapping[VariableIndex, float]] = None,
        upper: Optional[Mapping[VariableIndex, float]] = None,
    ) -> DomainChangeDiff:
        return cls(
            cls._keyed(LowerBoundChange(var, float(v)) for var, v in (lower or {}).items()),
            cls._keyed(UpperBoundChange(var, float(v)) for var, v in (upper or {}).items()),
        )


class DomainChangeTracker(StateTracker):
    diff_type = DomainChangeDiff
