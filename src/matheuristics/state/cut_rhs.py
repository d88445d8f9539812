from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional

from ..sets import ConstraintIndex
from .base import AtomicChange, Diff, StateTracker


@dataclass(frozen=True)
class CutRhsChange(AtomicChange):
    """Set the right-hand side of `row` to `rhs`, keeping the row's sense."""

    row: ConstraintIndex
    rhs: float

    @property
    def key(self):
        return self.row

    def apply(self, backend, helper) -> None:
        current = backend.get_constraint_set(self.row)
        backend.set_constraint_set(self.row, type(current)(self.rhs))


@dataclass(frozen=True)
class CutRhsChangeDiff(Diff):
    kind = "cut_rhs"

    cut_rhs: Mapping[ConstraintIndex, CutRhsChange] = field(default_factory=dict)

    @classmethod
    def from_changes(cls, changes: Iterable[CutRhsChange] = ()) -> CutRhsChangeDiff:
        return cls(cls._keyed(changes))

    @classmethod
    def from_rhs(cls, rhs: Optional[Mapping[ConstraintIndex, float]] = None) -> CutRhsChangeDiff:
        return cls(cls._keyed(CutRhsChange(row, float(v)) for row, v in (rhs or {}).items()))


class CutsTracker(StateTracker):
    diff_type = CutRhsChangeDiff
