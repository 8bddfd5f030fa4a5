"""Minimum-derivative optimization of a taut-cable keyframe run.

While the cable is taut the load trajectory is planned directly: one QP
over all sub-segments of the run, with fixed-value constraints at the
keyframes and a non-negative terminal velocity so the load does not
overshoot when tension is lost.

Derivative continuity across interior keyframes is not enforced unless
``PlannerConfig.enforce_continuity`` is set, so a run with sparse interior
constraints may be discontinuous at those keyframes.
"""

import logging
from dataclasses import dataclass
from typing import List, Tuple

import numpy as np

from slung_load.config import PlannerConfig
from slung_load.errors import InfeasibleQPError, KeyframeError
from slung_load.trajectory.constraints import (
    continuity_constraints,
    fixed_constraints,
)
from slung_load.trajectory.polynomial import (
    cost_matrix,
    derivative_coefficients,
    regularize,
)
from slung_load.trajectory.qp_solver import require_solution, solve_qp
from slung_load.trajectory.types import HybridProblem, Mode, PolynomialSegment

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TautRunResult:
    """Solved taut run.

    Attributes:
        segments: Load segments, one per sub-segment of the run
        start_keyframe: First keyframe of the run
        end_keyframe: Last keyframe of the run
    """

    segments: Tuple[PolynomialSegment, ...]
    start_keyframe: int
    end_keyframe: int

    @property
    def terminal_segment(self) -> PolynomialSegment:
        return self.segments[-1]


def _block_cost(config: PlannerConfig, times: np.ndarray) -> np.ndarray:
    width = config.num_coefficients
    num_segments = times.shape[0] - 1
    Q = np.zeros((num_segments * width, num_segments * width))
    for j in range(num_segments):
        block = slice(j * width, (j + 1) * width)
        Q[block, block] = cost_matrix(
            config.order, config.derivative_order, times[j], times[j + 1]
        )
    return regularize(Q, config.regularization)


def _equality_constraints(
    config: PlannerConfig,
    desired: np.ndarray,
    times: np.ndarray,
) -> Tuple[np.ndarray, np.ndarray]:
    A_eq, b_eq = fixed_constraints(
        config.derivative_order, config.order, desired, times
    )
    if config.enforce_continuity:
        A_cont, b_cont = continuity_constraints(
            config.derivative_order, config.order, desired, times
        )
        A_eq = np.vstack([A_eq, A_cont])
        b_eq = np.concatenate([b_eq, b_cont])
    return A_eq, b_eq


def _terminal_velocity_bound(
    config: PlannerConfig,
    num_segments: int,
) -> Tuple[np.ndarray, np.ndarray]:
    """Velocity >= 0 at tau = 1 of the last block, written as -v <= 0."""
    width = config.num_coefficients
    A_ineq = np.zeros((1, num_segments * width))
    A_ineq[0, (num_segments - 1) * width:] = -derivative_coefficients(config.order, 1)[1]
    return A_ineq, np.zeros(1)


def optimize_taut_run(
    problem: HybridProblem,
    start: int,
    end: int,
    config: PlannerConfig,
    terminal_velocity_bound: bool = True,
) -> TautRunResult:
    """Optimize the load trajectory over keyframes ``start..end``.

    Args:
        problem: Keyframe input
        start: First keyframe of the run
        end: Last keyframe of the run
        config: Planner configuration
        terminal_velocity_bound: Constrain the terminal velocity to be
            non-negative (used when tension is lost at ``end``)

    Returns:
        TautRunResult with ``end - start`` load segments

    Raises:
        KeyframeError: If the run is empty
        InfeasibleQPError: If a sub-segment has non-positive duration or the
            constraints cannot be met
        UnboundedQPError: If the solver reports an unbounded objective
        QPSolverError: On any other solver failure
    """
    num_segments = end - start
    if num_segments < 1:
        raise KeyframeError(
            "Taut run must span at least one segment", keyframe_index=end, mode=Mode.TAUT
        )

    times = np.asarray(problem.keyframe_times[start:end + 1], dtype=float)
    desired = np.asarray(problem.desired_states[:config.derivative_order, start:end + 1])

    durations = np.diff(times)
    bad = np.flatnonzero(durations <= 0)
    if bad.size > 0:
        raise InfeasibleQPError(
            f"Segment duration {durations[bad[0]]} is not positive; "
            "cost and constraint matrices are singular",
            keyframe_index=start + int(bad[0]) + 1,
            mode=Mode.TAUT,
        )

    Q = _block_cost(config, times)
    A_eq, b_eq = _equality_constraints(config, desired, times)
    if terminal_velocity_bound:
        A_ineq, b_ineq = _terminal_velocity_bound(config, num_segments)
    else:
        A_ineq, b_ineq = None, None

    logger.debug(
        f"Taut run {start}->{end}: {num_segments} segments, "
        f"{Q.shape[0]} variables, {A_eq.shape[0]} equality constraints"
    )

    solution = solve_qp(
        Q,
        A_ineq=A_ineq,
        b_ineq=b_ineq,
        A_eq=A_eq,
        b_eq=b_eq,
        time_limit=config.solver_time_limit,
    )
    x = require_solution(solution, keyframe_index=end, mode=Mode.TAUT)

    width = config.num_coefficients
    segments: List[PolynomialSegment] = []
    for j in range(num_segments):
        segments.append(
            PolynomialSegment(
                coefficients=x[j * width:(j + 1) * width],
                mode=Mode.TAUT,
                start_keyframe=start + j,
                end_keyframe=start + j + 1,
                start_time=float(times[j]),
                end_time=float(times[j + 1]),
            )
        )

    return TautRunResult(
        segments=tuple(segments),
        start_keyframe=start,
        end_keyframe=end,
    )
