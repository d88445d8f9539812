from __future__ import annotations

import logging
import time
from typing import Dict, List

import autograd.numpy as np  # type: ignore
from autograd import grad  # type: ignore
from scipy.optimize import Bounds, LinearConstraint, milp, minimize  # type: ignore

from ..constants import (
    DEFAULT_MILP_TIME_LIMIT,
    DEFAULT_NLP_FTOL,
    DEFAULT_NLP_MAXITER,
    ObjectiveSense,
    Solver,
)
from .base import ProblemData, SolverResult, SolverStats, SolverStatus

logger = logging.getLogger(__name__)


_MILP_STATUS = {
    0: SolverStatus.OPTIMAL,
    1: SolverStatus.MAX_ITERATIONS,
    2: SolverStatus.INFEASIBLE,
    3: SolverStatus.UNBOUNDED,
    4: SolverStatus.ERROR,
}


class ScipyBackend:
    SUPPORTED_METHODS = {Solver.HIGHS.value, Solver.SLSQP.value}

    def solve(
        self,
        problem_data: ProblemData,
        solver: str,
        solver_options: Dict[str, object],
    ) -> SolverResult:
        method = str(solver)
        if method not in self.SUPPORTED_METHODS:
            raise ValueError(f"Solver '{method}' is not supported by the SciPy backend")

        if not problem_data.is_linear and problem_data.has_integers:
            raise ValueError(
                "SciPy backend does not support integer decision variables "
                "with a nonlinear objective"
            )

        options = dict(solver_options)

        if np.any(problem_data.lower > problem_data.upper):
            # Crossed bounds come from branching; no need to call the solver
            return SolverResult(
                x=None,
                status=SolverStatus.INFEASIBLE,
                stats=SolverStats(
                    solver_name=method,
                    solve_time=0.0,
                    setup_time=problem_data.setup_time,
                ),
            )

        if method == Solver.HIGHS.value:
            if problem_data.is_linear:
                return self._solve_milp(problem_data, options)
            logger.info("Nonlinear objective: falling back from HiGHS to SLSQP")
            method = Solver.SLSQP.value

        return self._solve_nlp(problem_data, method, options)

    def _solve_milp(self, problem_data: ProblemData, options: Dict[str, object]) -> SolverResult:
        time_limit = float(options.pop("time_limit", DEFAULT_MILP_TIME_LIMIT))
        options.pop("int_tol", None)

        c = np.asarray(problem_data.objective, dtype=float)
        if problem_data.sense == ObjectiveSense.MAX:
            c = -c

        constraints = None
        if problem_data.A.shape[0] > 0:
            constraints = LinearConstraint(
                problem_data.A, problem_data.row_lower, problem_data.row_upper
            )

        start_time = time.time()
        result = milp(
            c=c,
            integrality=problem_data.integrality,
            bounds=Bounds(problem_data.lower, problem_data.upper),
            constraints=constraints,
            options={"time_limit": time_limit, **options},
        )
        solve_time = time.time() - start_time

        status = _MILP_STATUS.get(result.status, SolverStatus.UNKNOWN)
        if status == SolverStatus.MAX_ITERATIONS and result.x is not None:
            status = SolverStatus.SUBOPTIMAL
        if status not in (SolverStatus.OPTIMAL, SolverStatus.SUBOPTIMAL):
            logger.debug(f"HiGHS returned status {result.status}: {result.message}")

        objective_value = None
        if result.x is not None and result.fun is not None:
            objective_value = float(result.fun)
            if problem_data.sense == ObjectiveSense.MAX:
                objective_value = -objective_value

        stats = SolverStats(
            solver_name=Solver.HIGHS.value,
            solve_time=solve_time,
            setup_time=problem_data.setup_time,
            num_iters=getattr(result, "mip_node_count", None),
        )
        return SolverResult(
            x=result.x,
            status=status,
            stats=stats,
            objective_value=objective_value,
            raw_result=result,
        )

    def _solve_nlp(
        self, problem_data: ProblemData, method: str, options: Dict[str, object]
    ) -> SolverResult:
        maxiter = int(options.pop("maxiter", DEFAULT_NLP_MAXITER))
        ftol = float(options.pop("ftol", DEFAULT_NLP_FTOL))
        options.pop("time_limit", None)
        options.pop("int_tol", None)

        obj_func = self._build_objective(problem_data)
        gradient = grad(obj_func)
        cons = self._build_constraints(problem_data)

        bounds = [
            (
                float(lo) if np.isfinite(lo) else None,
                float(hi) if np.isfinite(hi) else None,
            )
            for lo, hi in zip(problem_data.lower, problem_data.upper)
        ]
        x0 = np.clip(np.zeros(problem_data.n_vars), problem_data.lower, problem_data.upper)

        start_time = time.time()
        result = minimize(
            obj_func,
            x0,
            jac=gradient,
            bounds=bounds,
            constraints=cons,
            method=method,
            options={"maxiter": maxiter, "ftol": ftol, **options},
        )
        solve_time = time.time() - start_time

        status = self._interpret_status(result)
        if status != SolverStatus.OPTIMAL:
            logger.debug(f"{method} returned status {result.status}: {result.message}")

        objective_value = float(result.fun)
        if problem_data.sense == ObjectiveSense.MAX:
            objective_value = -objective_value

        stats = SolverStats(
            solver_name=method,
            solve_time=solve_time,
            setup_time=problem_data.setup_time,
            num_iters=getattr(result, "nit", None),
        )
        return SolverResult(
            x=result.x,
            status=status,
            stats=stats,
            objective_value=objective_value,
            raw_result=result,
        )

    @staticmethod
    def _build_objective(problem_data: ProblemData):
        sign = -1.0 if problem_data.sense == ObjectiveSense.MAX else 1.0

        if problem_data.is_linear:
            c = np.asarray(problem_data.objective, dtype=float)

            def obj(x):
                return sign * np.dot(c, x)
        else:
            user_obj = problem_data.objective

            def obj(x):
                return sign * user_obj(x)

        return obj

    @staticmethod
    def _build_constraints(problem_data: ProblemData) -> List[Dict]:
        cons = []
        for i in range(problem_data.A.shape[0]):

            def make_con(a, rhs, flip):
                def con_fun(x):
                    return flip * (np.dot(a, x) - rhs)

                def con_jac(x):
                    return flip * a

                return con_fun, con_jac

            a = problem_data.A[i]
            lo = problem_data.row_lower[i]
            hi = problem_data.row_upper[i]
            if lo == hi:
                fun, jac = make_con(a, lo, 1.0)
                cons.append({"type": "eq", "fun": fun, "jac": jac})
                continue
            if np.isfinite(lo):
                fun, jac = make_con(a, lo, 1.0)
                cons.append({"type": "ineq", "fun": fun, "jac": jac})
            if np.isfinite(hi):
                fun, jac = make_con(a, hi, -1.0)
                cons.append({"type": "ineq", "fun": fun, "jac": jac})
        return cons

    @staticmethod
    def _interpret_status(result) -> SolverStatus:
        if result.success:
            return SolverStatus.OPTIMAL
        if result.status == 9:
            return SolverStatus.MAX_ITERATIONS
        if result.status == 4:
            # SLSQP: inequality constraints incompatible
            return SolverStatus.INFEASIBLE
        if result.status == 8:
            return SolverStatus.NUMERICAL_ERROR
        return SolverStatus.ERROR
