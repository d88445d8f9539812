"""
In-memory Mathematical Program

`Model` is the reference backend for the state-diffing layer. It stores
variables, single-variable constraints (bounds, fixings, integrality) and
linear rows, and exposes the handful of primitives the trackers rely on:

- add_constraint(kind, target, set) -> handle
- delete(handle)
- set_constraint_set(handle, new_set) / get_constraint_set(handle)
- get_constraint_function(handle)
- list_constraints(kind) / list_entities(kind)

Bookkeeping follows MathOptInterface: a variable carries at most one lower
bound, one upper bound and one equality, and an equality cannot coexist with
either bound. All primitives are O(1) except the list_* scans.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Dict, List, Mapping, Optional, Tuple, Union

import autograd.numpy as np

from .constants import (
    AFFINE_KINDS,
    VARIABLE_KINDS,
    ConstraintKind,
    ObjectiveSense,
    Solver,
)
from .sets import (
    KIND_SETS,
    ConstraintIndex,
    GreaterThan,
    Integer,
    LessThan,
    VariableIndex,
    ZeroOne,
    set_value,
)
from .solvers import ProblemData, SolverResult, get_solver_backend

logger = logging.getLogger(__name__)

K = ConstraintKind

AffineFunction = Mapping[VariableIndex, float]

_SENSE_KINDS = {">=": K.AFFINE_GE, "<=": K.AFFINE_LE, "==": K.AFFINE_EQ}

# Constraint kinds that may not already be present on a variable
_CONFLICTS = {
    K.LOWER_BOUND: (K.LOWER_BOUND, K.FIXED),
    K.UPPER_BOUND: (K.UPPER_BOUND, K.FIXED),
    K.FIXED: (K.LOWER_BOUND, K.UPPER_BOUND, K.FIXED),
    K.INTEGER: (K.INTEGER,),
    K.ZERO_ONE: (K.ZERO_ONE,),
}


class Model:
    """A mixed-integer program held in memory."""

    def __init__(self, name: str = "model"):
        self.name = name
        self._variables: Dict[VariableIndex, str] = {}
        self._constraints: Dict[ConstraintIndex, Tuple[object, object]] = {}
        self._var_constraints: Dict[VariableIndex, Dict[ConstraintKind, ConstraintIndex]] = {}
        self._next_constraint_id = 1

        self._objective: Union[Dict[VariableIndex, float], Callable] = {}
        self._sense = ObjectiveSense.MIN

        self._result: Optional[SolverResult] = None
        self._result_columns: Dict[VariableIndex, int] = {}

    def __repr__(self):
        return (
            f"Model({self.name}, {len(self._variables)} variables, "
            f"{len(self._constraints)} constraints)"
        )

    # =========================================================================
    # Variables and rows
    # =========================================================================

    def add_variable(
        self,
        name: str | None = None,
        lower: float | None = None,
        upper: float | None = None,
        integer: bool = False,
        binary: bool = False,
    ) -> VariableIndex:
        var = VariableIndex(len(self._variables) + 1)
        self._variables[var] = name if name else f"x{var.value}"
        self._var_constraints[var] = {}

        if lower is not None:
            self.add_constraint(K.LOWER_BOUND, var, GreaterThan(float(lower)))
        if upper is not None:
            self.add_constraint(K.UPPER_BOUND, var, LessThan(float(upper)))
        if integer:
            self.add_constraint(K.INTEGER, var, Integer())
        if binary:
            self.add_constraint(K.ZERO_ONE, var, ZeroOne())
        return var

    @property
    def variables(self) -> List[VariableIndex]:
        return list(self._variables)

    def variable_name(self, var: VariableIndex) -> str:
        self._check_variable(var)
        return self._variables[var]

    def add_linear_constraint(
        self, coefficients: AffineFunction, sense: str, rhs: float
    ) -> ConstraintIndex:
        if sense not in _SENSE_KINDS:
            raise ValueError(f"Unknown constraint sense '{sense}', expected one of {list(_SENSE_KINDS)}")
        kind = _SENSE_KINDS[sense]
        return self.add_constraint(kind, coefficients, KIND_SETS[kind](float(rhs)))

    # =========================================================================
    # Backend primitives
    # =========================================================================

    def add_constraint(self, kind, target, constraint_set) -> ConstraintIndex:
        kind = ConstraintKind(kind)
        expected = KIND_SETS[kind]
        if not isinstance(constraint_set, expected):
            raise ValueError(
                f"A {kind.value} constraint needs a {expected.__name__} set, "
                f"got {type(constraint_set).__name__}"
            )

        if kind in VARIABLE_KINDS:
            self._check_variable(target)
            present = self._var_constraints[target]
            for other in _CONFLICTS[kind]:
                if other in present:
                    raise ValueError(
                        f"Cannot add a {kind.value} constraint on {target}: "
                        f"it already has a {other.value} constraint"
                    )
        else:
            target = {var: float(coef) for var, coef in target.items()}
            for var in target:
                self._check_variable(var)

        handle = ConstraintIndex(kind, self._next_constraint_id)
        self._next_constraint_id += 1
        self._constraints[handle] = (target, constraint_set)
        if kind in VARIABLE_KINDS:
            self._var_constraints[target][kind] = handle
        return handle

    def delete(self, handle: ConstraintIndex) -> None:
        target, _ = self._get(handle)
        del self._constraints[handle]
        if handle.kind in VARIABLE_KINDS:
            del self._var_constraints[target][handle.kind]

    def set_constraint_set(self, handle: ConstraintIndex, new_set) -> None:
        target, _ = self._get(handle)
        expected = KIND_SETS[handle.kind]
        if not isinstance(new_set, expected):
            raise ValueError(
                f"A {handle.kind.value} constraint needs a {expected.__name__} set, "
                f"got {type(new_set).__name__}"
            )
        self._constraints[handle] = (target, new_set)

    def get_constraint_set(self, handle: ConstraintIndex):
        return self._get(handle)[1]

    def get_constraint_function(self, handle: ConstraintIndex):
        target, _ = self._get(handle)
        if handle.kind in AFFINE_KINDS:
            return dict(target)
        return target

    def list_constraints(self, kind) -> List[ConstraintIndex]:
        kind = ConstraintKind(kind)
        return [handle for handle in self._constraints if handle.kind == kind]

    def list_entities(self, kind) -> list:
        """Identifiers constrained by `kind`: variables, or row handles for linear rows."""
        kind = ConstraintKind(kind)
        if kind in AFFINE_KINDS:
            return self.list_constraints(kind)
        return [self._constraints[handle][0] for handle in self.list_constraints(kind)]

    def is_valid(self, handle: ConstraintIndex) -> bool:
        return handle in self._constraints

    # =========================================================================
    # Queries
    # =========================================================================

    def has_lower_bound(self, var: VariableIndex) -> bool:
        return K.LOWER_BOUND in self._bucket(var)

    def has_upper_bound(self, var: VariableIndex) -> bool:
        return K.UPPER_BOUND in self._bucket(var)

    def lower_bound(self, var: VariableIndex) -> float:
        handle = self._bucket(var).get(K.LOWER_BOUND)
        return -np.inf if handle is None else self._constraints[handle][1].lower

    def upper_bound(self, var: VariableIndex) -> float:
        handle = self._bucket(var).get(K.UPPER_BOUND)
        return np.inf if handle is None else self._constraints[handle][1].upper

    def is_fixed(self, var: VariableIndex) -> bool:
        return K.FIXED in self._bucket(var)

    def fix_value(self, var: VariableIndex) -> Optional[float]:
        handle = self._bucket(var).get(K.FIXED)
        return None if handle is None else self._constraints[handle][1].value

    def is_integer(self, var: VariableIndex) -> bool:
        return K.INTEGER in self._bucket(var)

    def is_binary(self, var: VariableIndex) -> bool:
        return K.ZERO_ONE in self._bucket(var)

    def rhs(self, row: ConstraintIndex) -> float:
        return set_value(self.get_constraint_set(row))

    def snapshot(self) -> frozenset:
        """Handle-independent description of every constraint in the model.

        Two snapshots compare equal iff the models impose the same constraints,
        even if fixings and unfixings re-created bound constraints under new
        handles in between.
        """
        items = []
        for handle, (target, constraint_set) in self._constraints.items():
            ident = handle if handle.kind in AFFINE_KINDS else target
            items.append((handle.kind.value, ident, constraint_set))
        return frozenset(items)

    # =========================================================================
    # Objective and solve
    # =========================================================================

    def set_objective(
        self,
        objective: Union[AffineFunction, Callable],
        sense: ObjectiveSense | str = ObjectiveSense.MIN,
    ) -> None:
        """Set a linear objective (variable -> coefficient) or a callable of the
        column vector ordered as `self.variables`.

        Callables must be written with `autograd.numpy` so that gradients can
        be taken by the NLP backend.
        """
        if callable(objective):
            self._objective = objective
        else:
            for var in objective:
                self._check_variable(var)
            self._objective = {var: float(coef) for var, coef in objective.items()}
        self._sense = ObjectiveSense(sense)

    def to_problem_data(self) -> ProblemData:
        start_time = time.time()
        variables = self.variables
        column = {var: j for j, var in enumerate(variables)}
        n_vars = len(variables)

        lower = np.full(n_vars, -np.inf)
        upper = np.full(n_vars, np.inf)
        integrality = np.zeros(n_vars, dtype=int)

        for var, bucket in self._var_constraints.items():
            j = column[var]
            for kind, handle in bucket.items():
                constraint_set = self._constraints[handle][1]
                if kind == K.LOWER_BOUND:
                    lower[j] = max(lower[j], constraint_set.lower)
                elif kind == K.UPPER_BOUND:
                    upper[j] = min(upper[j], constraint_set.upper)
                elif kind == K.FIXED:
                    lower[j] = max(lower[j], constraint_set.value)
                    upper[j] = min(upper[j], constraint_set.value)
                elif kind == K.INTEGER:
                    integrality[j] = 1
                elif kind == K.ZERO_ONE:
                    integrality[j] = 1
                    lower[j] = max(lower[j], 0.0)
                    upper[j] = min(upper[j], 1.0)

        rows = [
            (handle, target, constraint_set)
            for handle, (target, constraint_set) in self._constraints.items()
            if handle.kind in AFFINE_KINDS
        ]
        A = np.zeros((len(rows), n_vars))
        row_lower = np.full(len(rows), -np.inf)
        row_upper = np.full(len(rows), np.inf)
        for i, (handle, coefficients, constraint_set) in enumerate(rows):
            for var, coef in coefficients.items():
                A[i, column[var]] += coef
            rhs = set_value(constraint_set)
            if handle.kind in (K.AFFINE_GE, K.AFFINE_EQ):
                row_lower[i] = rhs
            if handle.kind in (K.AFFINE_LE, K.AFFINE_EQ):
                row_upper[i] = rhs

        if callable(self._objective):
            objective = self._objective
        else:
            objective = np.zeros(n_vars)
            for var, coef in self._objective.items():
                objective[column[var]] = coef

        return ProblemData(
            variables=variables,
            lower=lower,
            upper=upper,
            integrality=integrality,
            A=A,
            row_lower=row_lower,
            row_upper=row_upper,
            objective=objective,
            sense=self._sense,
            setup_time=time.time() - start_time,
        )

    def optimize(
        self,
        solver: Solver | str = Solver.HIGHS,
        solver_options: Dict[str, object] | None = None,
    ) -> SolverResult:
        problem_data = self.to_problem_data()
        solver_name = solver.value if isinstance(solver, Solver) else str(solver)
        backend = get_solver_backend(solver_name)
        result = backend.solve(problem_data, solver_name, dict(solver_options or {}))

        self._result = result
        self._result_columns = {var: j for j, var in enumerate(problem_data.variables)}
        logger.debug(f"{self.name}: {solver_name} finished with status {result.status}")
        return result

    @property
    def result(self) -> Optional[SolverResult]:
        return self._result

    @property
    def objective_value(self) -> Optional[float]:
        return None if self._result is None else self._result.objective_value

    def value(self, var: VariableIndex) -> float:
        if self._result is None or not self._result.has_solution:
            raise RuntimeError(f"{self.name} has no primal solution available")
        return float(self._result.x[self._result_columns[var]])

    # =========================================================================
    # Internals
    # =========================================================================

    def _check_variable(self, var) -> None:
        if var not in self._variables:
            raise ValueError(f"{var!r} is not a variable of {self.name}")

    def _bucket(self, var: VariableIndex) -> Dict[ConstraintKind, ConstraintIndex]:
        self._check_variable(var)
        return self._var_constraints[var]

    def _get(self, handle: ConstraintIndex) -> Tuple[object, object]:
        if handle not in self._constraints:
            raise KeyError(f"{handle!r} is not a valid constraint of {self.name}")
        return self._constraints[handle]
