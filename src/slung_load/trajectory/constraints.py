"""Equality constraint builders for piecewise polynomial QPs.

The decision vector stacks the coefficients of k segments,
``x = [c_0, c_1, ..., c_{k-1}]`` with n+1 entries each. Segment j spans
keyframes j and j+1. All constraints are expressed on real-time
derivatives, so each row is scaled by ``1 / T_j**d``.
"""

from typing import List, Tuple

import numpy as np

from slung_load.trajectory.polynomial import basis_row


def _check_inputs(
    derivative_order: int,
    desired_states: np.ndarray,
    segment_times: np.ndarray,
) -> Tuple[np.ndarray, np.ndarray, int]:
    desired_states = np.asarray(desired_states, dtype=float)
    segment_times = np.asarray(segment_times, dtype=float)

    if desired_states.ndim != 2:
        raise ValueError("desired_states must be a 2D (r, k+1) array")
    if desired_states.shape[0] < derivative_order:
        raise ValueError(
            f"desired_states has {desired_states.shape[0]} rows, "
            f"expected at least {derivative_order}"
        )
    if segment_times.shape != (desired_states.shape[1],):
        raise ValueError("segment_times must have one entry per keyframe")

    num_segments = segment_times.shape[0] - 1
    if num_segments < 1:
        raise ValueError("At least two keyframes are required")
    if np.any(np.diff(segment_times) <= 0):
        raise ValueError("segment_times must be strictly increasing")

    return desired_states, segment_times, num_segments


def _row(
    order: int,
    num_segments: int,
    segment: int,
    derivative: int,
    tau: float,
    duration: float,
) -> np.ndarray:
    row = np.zeros(num_segments * (order + 1))
    start = segment * (order + 1)
    row[start:start + order + 1] = basis_row(order, derivative, tau) / duration**derivative
    return row


def _stack(rows: List[np.ndarray], values: List[float], width: int):
    if not rows:
        return np.zeros((0, width)), np.zeros(0)
    return np.vstack(rows), np.asarray(values, dtype=float)


def fixed_constraints(
    derivative_order: int,
    order: int,
    desired_states: np.ndarray,
    segment_times: np.ndarray,
) -> Tuple[np.ndarray, np.ndarray]:
    """Build fixed-value constraints at keyframes.

    Every finite desired entry pins the derivative on each segment that
    touches the keyframe: the end of segment j-1 and the start of segment j.
    Non-finite entries are unconstrained and produce no row.

    Args:
        derivative_order: Number of derivative rows r considered (0..r-1)
        order: Polynomial order n
        desired_states: (r, k+1) desired states per keyframe
        segment_times: (k+1,) keyframe times

    Returns:
        Tuple (A, b) with A of shape (c, k * (n+1))
    """
    desired_states, segment_times, num_segments = _check_inputs(
        derivative_order, desired_states, segment_times
    )
    durations = np.diff(segment_times)
    width = num_segments * (order + 1)

    rows: List[np.ndarray] = []
    values: List[float] = []
    for keyframe in range(num_segments + 1):
        for derivative in range(derivative_order):
            value = desired_states[derivative, keyframe]
            if not np.isfinite(value):
                continue
            if keyframe > 0:
                rows.append(
                    _row(order, num_segments, keyframe - 1, derivative, 1.0,
                         durations[keyframe - 1])
                )
                values.append(value)
            if keyframe < num_segments:
                rows.append(
                    _row(order, num_segments, keyframe, derivative, 0.0,
                         durations[keyframe])
                )
                values.append(value)

    return _stack(rows, values, width)


def continuity_constraints(
    derivative_order: int,
    order: int,
    desired_states: np.ndarray,
    segment_times: np.ndarray,
) -> Tuple[np.ndarray, np.ndarray]:
    """Build derivative continuity constraints at interior keyframes.

    Entries already fixed by a finite desired value are skipped since both
    neighbouring segments are pinned to the same value.

    Args:
        derivative_order: Number of derivative rows r considered (0..r-1)
        order: Polynomial order n
        desired_states: (r, k+1) desired states per keyframe
        segment_times: (k+1,) keyframe times

    Returns:
        Tuple (A, b) with A of shape (c, k * (n+1)) and b all zeros
    """
    desired_states, segment_times, num_segments = _check_inputs(
        derivative_order, desired_states, segment_times
    )
    durations = np.diff(segment_times)
    width = num_segments * (order + 1)

    rows: List[np.ndarray] = []
    values: List[float] = []
    for keyframe in range(1, num_segments):
        for derivative in range(derivative_order):
            if np.isfinite(desired_states[derivative, keyframe]):
                continue
            end_of_previous = _row(
                order, num_segments, keyframe - 1, derivative, 1.0,
                durations[keyframe - 1],
            )
            start_of_next = _row(
                order, num_segments, keyframe, derivative, 0.0,
                durations[keyframe],
            )
            rows.append(end_of_previous - start_of_next)
            values.append(0.0)

    return _stack(rows, values, width)
