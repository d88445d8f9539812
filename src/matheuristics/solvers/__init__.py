"""
Solver Registry

Maps solver names to the backend that runs them. `Model.optimize` looks the
backend up by name, so extra backends only need to be registered here.
"""

from __future__ import annotations

import logging
from typing import Dict, List

from ..constants import Solver
from .base import (
    ProblemData,
    SolverBackend,
    SolverResult,
    SolverStats,
    SolverStatus,
)
from .scipy_backend import ScipyBackend

logger = logging.getLogger(__name__)


_scipy = ScipyBackend()
_SOLVER_BACKENDS: Dict[str, SolverBackend] = {
    name: _scipy for name in sorted(ScipyBackend.SUPPORTED_METHODS)
}


def registered_solvers() -> List[str]:
    return sorted(_SOLVER_BACKENDS)


def register_solver_backend(solver_name: str, backend: SolverBackend) -> None:
    """Make `backend` run `solver_name`, replacing any earlier registration."""
    previous = _SOLVER_BACKENDS.get(solver_name)
    if previous is not None and previous is not backend:
        logger.debug(
            f"Solver '{solver_name}' moves from {type(previous).__name__} "
            f"to {type(backend).__name__}"
        )
    _SOLVER_BACKENDS[solver_name] = backend


def get_solver_backend(solver: Solver | str) -> SolverBackend:
    name = solver.value if isinstance(solver, Solver) else str(solver)
    try:
        return _SOLVER_BACKENDS[name]
    except KeyError:
        raise ValueError(
            f"No solver backend registered for '{name}'; "
            f"available: {', '.join(registered_solvers())}"
        ) from None


__all__ = [
    "ProblemData",
    "ScipyBackend",
    "SolverBackend",
    "SolverResult",
    "SolverStats",
    "SolverStatus",
    "get_solver_backend",
    "register_solver_backend",
    "registered_solvers",
]
