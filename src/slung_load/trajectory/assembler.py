"""Entry point for hybrid slung-load trajectory generation."""

import logging
from typing import Optional, Sequence

import numpy as np

from slung_load.config import PlannerConfig
from slung_load.errors import (
    DimensionalityError,
    KeyframeError,
    TrajectoryGenerationError,
)
from slung_load.trajectory.mode_machine import KeyframeSegmenter, TrajectoryAccumulator
from slung_load.trajectory.types import HybridProblem, TrajectoryOutput

logger = logging.getLogger(__name__)


def build_problem(
    keyframe_times: Sequence[float],
    desired_states: np.ndarray,
    desired_tension: Sequence[float],
    config: PlannerConfig,
    dimensions: int = 1,
) -> HybridProblem:
    """Validate raw keyframe input and bundle it into a HybridProblem.

    Args:
        keyframe_times: (m+1,) keyframe times
        desired_states: (r, m+1) desired states, or (r, m+1, 1);
            ``inf`` marks unconstrained entries
        desired_tension: (m+1,) desired tension per keyframe
        config: Planner configuration
        dimensions: Declared number of spatial dimensions

    Returns:
        HybridProblem

    Raises:
        DimensionalityError: If more than one spatial dimension is given
        KeyframeError: If shapes or values are invalid
    """
    if dimensions != 1:
        raise DimensionalityError(f"Expected a 1D problem, got {dimensions} dimensions")

    times = np.asarray(keyframe_times, dtype=float).reshape(-1)
    tension = np.asarray(desired_tension, dtype=float).reshape(-1)
    states = np.asarray(desired_states, dtype=float)

    if states.ndim == 3:
        if states.shape[2] != 1:
            raise DimensionalityError(
                f"Expected a 1D problem, got {states.shape[2]} dimensions"
            )
        states = states[:, :, 0]
    if states.ndim == 1:
        states = states.reshape(1, -1)
    if states.ndim != 2:
        raise KeyframeError(f"desired_states must be 2D, got shape {states.shape}")

    num_keyframes = times.shape[0]
    if num_keyframes < 2:
        raise KeyframeError("At least two keyframes are required")
    if tension.shape[0] != num_keyframes:
        raise KeyframeError(
            f"desired_tension has {tension.shape[0]} entries, expected {num_keyframes}"
        )
    if states.shape[1] != num_keyframes:
        raise KeyframeError(
            f"desired_states has {states.shape[1]} columns, expected {num_keyframes}"
        )
    if states.shape[0] < config.derivative_order:
        raise KeyframeError(
            f"desired_states has {states.shape[0]} rows, expected "
            f"{config.derivative_order} (one per derivative below the minimized one)"
        )
    states = states[:config.derivative_order]

    bad = _first_keyframe(~np.isfinite(times))
    if bad is not None:
        raise KeyframeError("keyframe_times must be finite", keyframe_index=bad)
    bad = _first_keyframe(~np.isfinite(tension))
    if bad is not None:
        raise KeyframeError("desired_tension must be finite", keyframe_index=bad)
    bad = _first_keyframe(np.isnan(states).any(axis=0))
    if bad is not None:
        raise KeyframeError(
            "desired_states must not contain NaN; use inf for unconstrained",
            keyframe_index=bad,
        )

    return HybridProblem(
        keyframe_times=times,
        desired_states=states,
        desired_tension=tension,
    )


def _first_keyframe(mask: np.ndarray) -> Optional[int]:
    """Index of the first keyframe flagged in ``mask``, or None."""
    flagged = np.flatnonzero(mask)
    if flagged.size == 0:
        return None
    return int(flagged[0])


def generate_hybrid_trajectory(
    keyframe_times: Sequence[float],
    desired_states: np.ndarray,
    desired_tension: Sequence[float],
    config: Optional[PlannerConfig] = None,
    dimensions: int = 1,
) -> TrajectoryOutput:
    """Generate a mode-annotated load and quadrotor trajectory.

    Args:
        keyframe_times: (m+1,) keyframe times
        desired_states: (r, m+1) desired load position and derivatives;
            ``inf`` marks unconstrained entries
        desired_tension: (m+1,) desired cable tension; zero starts free fall
        config: Planner configuration (defaults to ``PlannerConfig()``)
        dimensions: Declared number of spatial dimensions; must be 1

    Returns:
        TrajectoryOutput with parallel load and quadrotor segments

    Raises:
        TrajectoryGenerationError: Any failure; no partial trajectory is
            returned
    """
    if config is None:
        config = PlannerConfig()

    try:
        problem = build_problem(
            keyframe_times, desired_states, desired_tension, config, dimensions
        )
        logger.info(
            f"Generating hybrid trajectory over {problem.num_keyframes} keyframes "
            f"(order {config.order}, minimized derivative {config.derivative_order})"
        )
        accumulator = KeyframeSegmenter(problem, config).run(TrajectoryAccumulator())
    except TrajectoryGenerationError as e:
        logger.error(f"Trajectory generation failed: {e}")
        raise

    logger.info(
        f"Generated {accumulator.segment_count} segments with "
        f"{len(accumulator.mode_log)} mode switches"
    )

    return TrajectoryOutput(
        load_segments=tuple(accumulator.load_segments),
        quad_segments=tuple(accumulator.quad_segments),
        mode_log=tuple(accumulator.mode_log),
        segment_count=accumulator.segment_count,
        keyframe_times=problem.keyframe_times,
        flight_times=tuple(accumulator.flight_times),
    )
