"""Convex QP solving through cvxpy.

Solves ``min 0.5 x'Qx + c'x  s.t.  A_ineq x <= b_ineq,  A_eq x == b_eq``
with the Clarabel interior-point backend and reports a status instead of
raising, so callers can attach keyframe context to failures.
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import cvxpy as cp
import numpy as np

from slung_load.errors import InfeasibleQPError, QPSolverError, UnboundedQPError

logger = logging.getLogger(__name__)

DEFAULT_SOLVER = cp.CLARABEL

_OPTIMAL = {cp.OPTIMAL, cp.OPTIMAL_INACCURATE}
_INFEASIBLE = {cp.INFEASIBLE, cp.INFEASIBLE_INACCURATE}
_UNBOUNDED = {cp.UNBOUNDED, cp.UNBOUNDED_INACCURATE}


class QPStatus(str, Enum):
    """Outcome of a QP solve."""

    OPTIMAL = "optimal"
    INFEASIBLE = "infeasible"
    UNBOUNDED = "unbounded"
    LIMIT_REACHED = "limit_reached"
    FAILED = "failed"


@dataclass
class QPSolution:
    """Result of a QP solve.

    Attributes:
        status: Solve outcome
        x: Solution vector, None unless status is OPTIMAL
        solve_time: Wall-clock solve time in seconds
        detail: Raw solver status or error text
    """

    status: QPStatus
    x: Optional[np.ndarray]
    solve_time: float
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.status == QPStatus.OPTIMAL


def _as_matrix(A: Optional[np.ndarray], width: int) -> Optional[np.ndarray]:
    if A is None:
        return None
    A = np.atleast_2d(np.asarray(A, dtype=float))
    if A.shape[0] == 0:
        return None
    if A.shape[1] != width:
        raise ValueError(f"Constraint matrix has {A.shape[1]} columns, expected {width}")
    return A


def solve_qp(
    Q: np.ndarray,
    c: Optional[np.ndarray] = None,
    A_ineq: Optional[np.ndarray] = None,
    b_ineq: Optional[np.ndarray] = None,
    A_eq: Optional[np.ndarray] = None,
    b_eq: Optional[np.ndarray] = None,
    time_limit: Optional[float] = None,
    solver: str = DEFAULT_SOLVER,
) -> QPSolution:
    """Solve a convex quadratic program.

    Args:
        Q: (N, N) symmetric positive-semidefinite Hessian
        c: Optional (N,) linear term
        A_ineq: Optional (p, N) inequality matrix
        b_ineq: Optional (p,) inequality bound
        A_eq: Optional (q, N) equality matrix
        b_eq: Optional (q,) equality target
        time_limit: Optional solver wall-clock limit in seconds
        solver: cvxpy solver name

    Returns:
        QPSolution with the solve status and solution vector

    Raises:
        ValueError: If matrix shapes are inconsistent
    """
    Q = np.asarray(Q, dtype=float)
    if Q.ndim != 2 or Q.shape[0] != Q.shape[1]:
        raise ValueError("Q must be a square matrix")
    num_vars = Q.shape[0]

    A_ineq = _as_matrix(A_ineq, num_vars)
    A_eq = _as_matrix(A_eq, num_vars)

    x = cp.Variable(num_vars)
    objective = 0.5 * cp.quad_form(x, cp.psd_wrap(0.5 * (Q + Q.T)))
    if c is not None:
        objective = objective + np.asarray(c, dtype=float) @ x

    constraints = []
    if A_eq is not None:
        constraints.append(A_eq @ x == np.asarray(b_eq, dtype=float).reshape(-1))
    if A_ineq is not None:
        constraints.append(A_ineq @ x <= np.asarray(b_ineq, dtype=float).reshape(-1))

    problem = cp.Problem(cp.Minimize(objective), constraints)

    solver_opts = {}
    if time_limit is not None and solver == cp.CLARABEL:
        solver_opts["time_limit"] = float(time_limit)

    logger.debug(
        f"Solving QP: {num_vars} variables, "
        f"{0 if A_eq is None else A_eq.shape[0]} equalities, "
        f"{0 if A_ineq is None else A_ineq.shape[0]} inequalities"
    )

    start_time = time.time()
    try:
        problem.solve(solver=solver, **solver_opts)
    except cp.SolverError as e:
        solve_time = time.time() - start_time
        logger.debug(f"QP solver error: {e}")
        return QPSolution(QPStatus.FAILED, None, solve_time, str(e))
    solve_time = time.time() - start_time

    status = problem.status
    logger.debug(f"QP status {status} in {solve_time:.4f}s")

    if status in _OPTIMAL and x.value is not None:
        return QPSolution(QPStatus.OPTIMAL, np.asarray(x.value).reshape(-1), solve_time, status)
    if status in _INFEASIBLE:
        return QPSolution(QPStatus.INFEASIBLE, None, solve_time, status)
    if status in _UNBOUNDED:
        return QPSolution(QPStatus.UNBOUNDED, None, solve_time, status)
    if status == cp.USER_LIMIT:
        return QPSolution(QPStatus.LIMIT_REACHED, None, solve_time, status)
    return QPSolution(QPStatus.FAILED, None, solve_time, str(status))


def require_solution(
    solution: QPSolution,
    keyframe_index: Optional[int] = None,
    mode=None,
) -> np.ndarray:
    """Return the solution vector or raise the matching typed error.

    Raises:
        InfeasibleQPError: If the constraints admit no solution
        UnboundedQPError: If the objective is unbounded
        QPSolverError: On any other solver failure, including timeouts
    """
    if solution.ok:
        return solution.x
    if solution.status == QPStatus.INFEASIBLE:
        raise InfeasibleQPError(
            "QP constraints are infeasible", keyframe_index=keyframe_index, mode=mode
        )
    if solution.status == QPStatus.UNBOUNDED:
        raise UnboundedQPError(
            "QP objective is unbounded", keyframe_index=keyframe_index, mode=mode
        )
    if solution.status == QPStatus.LIMIT_REACHED:
        raise QPSolverError(
            f"QP solver hit its limit after {solution.solve_time:.3f}s",
            keyframe_index=keyframe_index,
            mode=mode,
        )
    raise QPSolverError(
        f"QP solver failed: {solution.detail}", keyframe_index=keyframe_index, mode=mode
    )
