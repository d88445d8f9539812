from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Callable, Dict, List, Optional, Protocol, Sequence, Union

import autograd.numpy as anp  # type: ignore

from ..constants import ObjectiveSense
from ..sets import VariableIndex


ArrayLike = anp.ndarray


class SolverStatus(StrEnum):
    OPTIMAL = "optimal"
    SUBOPTIMAL = "suboptimal"
    INFEASIBLE = "infeasible"
    UNBOUNDED = "unbounded"
    MAX_ITERATIONS = "max_iterations"
    NUMERICAL_ERROR = "numerical_error"
    ERROR = "error"
    UNKNOWN = "unknown"


@dataclass
class ProblemData:
    """Dense snapshot of a model handed to a solver backend.

    Variable bounds are the intersection of bound, fixing and binary
    constraints; `integrality[j] == 1` marks an integral column. Linear rows
    are stored as `row_lower <= A x <= row_upper`.
    """

    variables: List[VariableIndex]
    lower: ArrayLike
    upper: ArrayLike
    integrality: ArrayLike
    A: ArrayLike
    row_lower: ArrayLike
    row_upper: ArrayLike
    objective: Union[ArrayLike, Callable[[ArrayLike], float]]
    sense: ObjectiveSense = ObjectiveSense.MIN
    setup_time: float = 0.0

    @property
    def n_vars(self) -> int:
        return len(self.variables)

    @property
    def is_linear(self) -> bool:
        return not callable(self.objective)

    @property
    def has_integers(self) -> bool:
        return bool(anp.any(self.integrality))

    def unpack(self, x: Sequence[float]) -> Dict[VariableIndex, float]:
        return {var: float(x[j]) for j, var in enumerate(self.variables)}


@dataclass
class SolverStats:
    solver_name: str
    solve_time: Optional[float] = None
    setup_time: Optional[float] = None
    num_iters: Optional[int] = None


@dataclass
class SolverResult:
    x: Optional[ArrayLike]
    status: SolverStatus
    stats: SolverStats
    objective_value: Optional[float] = None
    raw_result: Optional[object] = None

    @property
    def has_solution(self) -> bool:
        return self.x is not None and self.status in (
            SolverStatus.OPTIMAL,
            SolverStatus.SUBOPTIMAL,
        )


class SolverBackend(Protocol):
    def solve(
        self,
        problem_data: ProblemData,
        solver: str,
        solver_options: Dict[str, object],
    ) -> SolverResult:
        ...
