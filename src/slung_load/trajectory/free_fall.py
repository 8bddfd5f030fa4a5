"""Slack-cable transition: load free fall and quadrotor re-engagement.

When tension is lost at keyframe i the load leaves the end of the taut run
on a ballistic arc. The arc is written in closed form. The quadrotor gets a
single minimum-snap segment that starts one cable length above the load and
arrives at the re-engagement point with momentum-matched velocity.

Sign convention: the cable axis points up and gravity acts along -axis, so
the load follows ``x(t) = -1/2 g t^2 + v t + x`` in real time. Over a
keyframe interval of duration T this is ``-1/2 g T^2 tau^2 + v T tau + x``
in nondimensional time.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

from slung_load.config import PlannerConfig
from slung_load.errors import ComplexFlightTimeError, InfeasibleQPError, KeyframeError
from slung_load.trajectory.constraints import fixed_constraints
from slung_load.trajectory.polynomial import cost_matrix, regularize
from slung_load.trajectory.qp_solver import require_solution, solve_qp
from slung_load.trajectory.types import HybridProblem, Mode, PolynomialSegment

logger = logging.getLogger(__name__)

# Load state propagated to the quadrotor: position, velocity, acceleration, jerk
LOAD_STATE_DERIVATIVES = 4


@dataclass(frozen=True)
class FreeFallResult:
    """Outcome of one slack transition.

    Attributes:
        load_segment: Closed-form free-fall load segment
        quad_segment: Optimized quadrotor segment
        flight_time: Duration of the free fall (s)
        load_state: Load position..jerk when tension is lost
        load_velocity_before: Load velocity just before re-engagement
        quad_velocity_before: Quadrotor velocity just before re-engagement
    """

    load_segment: PolynomialSegment
    quad_segment: PolynomialSegment
    flight_time: float
    load_state: np.ndarray
    load_velocity_before: float
    quad_velocity_before: float


def flight_time(
    displacement: float,
    velocity: float,
    gravity: float,
    keyframe_index: Optional[int] = None,
) -> float:
    """Solve ``-1/2 g t^2 + v t - d = 0`` for the free-fall duration.

    The larger root is taken: with gravity along -axis it is the time the
    load crosses the target height while descending.

    Args:
        displacement: Target position minus release position
        velocity: Release velocity
        gravity: Gravitational acceleration (positive)
        keyframe_index: Keyframe reported on failure

    Returns:
        Flight time in seconds

    Raises:
        ComplexFlightTimeError: If both roots are complex or the larger root
            is not positive
    """
    discriminant = velocity**2 - 2.0 * gravity * displacement
    if discriminant < 0:
        raise ComplexFlightTimeError(
            f"Free fall cannot reach displacement {displacement:.6g} from "
            f"velocity {velocity:.6g} (discriminant {discriminant:.6g})",
            keyframe_index=keyframe_index,
            mode=Mode.SLACK,
        )

    t = (velocity + math.sqrt(discriminant)) / gravity
    if t <= 0:
        raise ComplexFlightTimeError(
            f"Free fall has no positive flight time (largest root {t:.6g})",
            keyframe_index=keyframe_index,
            mode=Mode.SLACK,
        )
    return t


def reengagement_velocity(
    load_velocity_after: float,
    load_velocity_before: float,
    load_mass: float,
    quad_mass: float,
) -> float:
    """Quadrotor velocity needed at re-engagement.

    Combines the desired post-reconnection load velocity with the load
    velocity at the end of the free fall through the load/quad mass ratio:
    ``((mL + mQ) v_plus + mL v_minus) / mQ``.
    """
    return (
        (load_mass + quad_mass) * load_velocity_after
        + load_mass * load_velocity_before
    ) / quad_mass


def free_fall_coefficients(
    order: int,
    gravity: float,
    position: float,
    velocity: float,
    duration: float = 1.0,
) -> np.ndarray:
    """Coefficients of the ballistic arc over a segment of real ``duration``.

    Real-time derivatives of the result are ``v`` at tau = 0 and ``-g``
    everywhere.
    """
    coefficients = np.zeros(order + 1)
    coefficients[-3:] = [
        -0.5 * gravity * duration**2,
        velocity * duration,
        position,
    ]
    return coefficients


def _quad_segment(
    config: PlannerConfig,
    initial_state: np.ndarray,
    terminal_position: float,
    terminal_velocity: float,
    times: np.ndarray,
    keyframe_index: int,
) -> np.ndarray:
    rows = config.quad_derivative_order
    desired = np.full((rows, 2), np.inf)
    desired[:LOAD_STATE_DERIVATIVES, 0] = initial_state
    desired[0, 1] = terminal_position
    desired[1, 1] = terminal_velocity

    Q = regularize(
        cost_matrix(
            config.quad_order, config.quad_derivative_order, times[0], times[1]
        ),
        config.regularization,
    )
    A_eq, b_eq = fixed_constraints(rows, config.quad_order, desired, times)

    solution = solve_qp(Q, A_eq=A_eq, b_eq=b_eq, time_limit=config.solver_time_limit)
    x = require_solution(solution, keyframe_index=keyframe_index, mode=Mode.SLACK)

    padded = np.zeros(config.num_coefficients)
    padded[config.order - config.quad_order:] = x
    return padded


def plan_free_fall(
    problem: HybridProblem,
    keyframe_index: int,
    terminal_segment: PolynomialSegment,
    config: PlannerConfig,
) -> FreeFallResult:
    """Plan the slack segment that starts at ``keyframe_index``.

    Args:
        problem: Keyframe input
        keyframe_index: Keyframe where tension is lost
        terminal_segment: Last load segment of the preceding taut run
        config: Planner configuration

    Returns:
        FreeFallResult with one load segment and one quadrotor segment

    Raises:
        KeyframeError: If there is no finite re-engagement keyframe
        ComplexFlightTimeError: If the free fall cannot reach the next keyframe
        InfeasibleQPError: If the quadrotor segment has zero duration or its
            boundary constraints conflict
        UnboundedQPError: If the solver reports an unbounded objective
        QPSolverError: On any other solver failure
    """
    if keyframe_index >= problem.last_index:
        raise KeyframeError(
            "Tension lost at the final keyframe; no re-engagement keyframe follows",
            keyframe_index=keyframe_index,
            mode=Mode.SLACK,
        )

    current = problem.keyframe(keyframe_index)
    target = problem.keyframe(keyframe_index + 1)
    if not np.isfinite(target.position):
        raise KeyframeError(
            "Re-engagement keyframe must have a finite desired position",
            keyframe_index=target.index,
            mode=Mode.SLACK,
        )

    times = np.array([current.time, target.time])
    if not times[1] > times[0]:
        raise InfeasibleQPError(
            "Quadrotor segment duration is not positive",
            keyframe_index=keyframe_index,
            mode=Mode.SLACK,
        )

    state = terminal_segment.evaluate(1.0, LOAD_STATE_DERIVATIVES - 1)
    position, velocity = float(state[0]), float(state[1])

    quad_initial = state.copy()
    quad_initial[0] += config.cable_length

    displacement = target.position - position
    t_flight = flight_time(displacement, velocity, config.gravity, keyframe_index)
    load_velocity_before = velocity - config.gravity * t_flight

    if np.isfinite(target.velocity):
        quad_velocity_before = reengagement_velocity(
            target.velocity,
            load_velocity_before,
            config.load_mass,
            config.quad_mass,
        )
    else:
        quad_velocity_before = float("inf")

    logger.debug(
        f"Free fall at keyframe {keyframe_index}: d={displacement:.4f}, "
        f"v={velocity:.4f}, t={t_flight:.4f}, v_minus={load_velocity_before:.4f}"
    )

    quad_coefficients = _quad_segment(
        config,
        quad_initial,
        target.position + config.cable_length,
        quad_velocity_before,
        times,
        keyframe_index,
    )

    segment_span = dict(
        mode=Mode.SLACK,
        start_keyframe=keyframe_index,
        end_keyframe=keyframe_index + 1,
        start_time=float(times[0]),
        end_time=float(times[1]),
    )
    load_segment = PolynomialSegment(
        coefficients=free_fall_coefficients(
            config.order,
            config.gravity,
            position,
            velocity,
            duration=float(times[1] - times[0]),
        ),
        **segment_span,
    )
    quad_segment = PolynomialSegment(coefficients=quad_coefficients, **segment_span)

    return FreeFallResult(
        load_segment=load_segment,
        quad_segment=quad_segment,
        flight_time=t_flight,
        load_state=state,
        load_velocity_before=load_velocity_before,
        quad_velocity_before=quad_velocity_before,
    )
