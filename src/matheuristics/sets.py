"""
Constraint Sets and Model Indices

Scalar sets a constraint function can be restricted to, and the opaque
handles the reference backend hands out for variables and constraints.
"""

from __future__ import annotations

from dataclasses import dataclass

from .constants import ConstraintKind


@dataclass(frozen=True, order=True)
class VariableIndex:
    """Handle of a decision variable."""

    value: int

    def __repr__(self):
        return f"VariableIndex({self.value})"


@dataclass(frozen=True, order=True)
class ConstraintIndex:
    """Handle of a constraint; `value` is unique within a model."""

    kind: ConstraintKind
    value: int

    def __repr__(self):
        return f"ConstraintIndex({self.kind.value}, {self.value})"


@dataclass(frozen=True)
class GreaterThan:
    lower: float


@dataclass(frozen=True)
class LessThan:
    upper: float


@dataclass(frozen=True)
class EqualTo:
    value: float


@dataclass(frozen=True)
class Integer:
    pass


@dataclass(frozen=True)
class ZeroOne:
    pass


# Set type accepted by each constraint kind
KIND_SETS = {
    ConstraintKind.LOWER_BOUND: GreaterThan,
    ConstraintKind.UPPER_BOUND: LessThan,
    ConstraintKind.FIXED: EqualTo,
    ConstraintKind.INTEGER: Integer,
    ConstraintKind.ZERO_ONE: ZeroOne,
    ConstraintKind.AFFINE_GE: GreaterThan,
    ConstraintKind.AFFINE_LE: LessThan,
    ConstraintKind.AFFINE_EQ: EqualTo,
}


def set_value(constraint_set) -> float:
    """Scalar carried by a bound-like set (rhs of a row, value of a bound)."""
    if isinstance(constraint_set, GreaterThan):
        return constraint_set.lower
    if isinstance(constraint_set, LessThan):
        return constraint_set.upper
    if isinstance(constraint_set, EqualTo):
        return constraint_set.value
    raise TypeError(f"{type(constraint_set).__name__} carries no scalar value")
