"""Data model for hybrid slung-load trajectories.

Segments are polynomials in nondimensional time tau in [0, 1] with
coefficients ordered highest degree first.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import NamedTuple, Sequence, Tuple

import numpy as np

from slung_load.trajectory.polynomial import evaluate_segment


class Mode(IntEnum):
    """Hybrid cable mode. Values match the legacy mode-log codes."""

    TAUT = 1
    SLACK = 2


def _frozen_array(values, dtype=float) -> np.ndarray:
    array = np.array(values, dtype=dtype, copy=True)
    array.setflags(write=False)
    return array


@dataclass(frozen=True)
class Keyframe:
    """Boundary conditions at a single keyframe.

    Attributes:
        index: Position of the keyframe in the input sequence
        time: Desired time of arrival (s)
        desired: Desired position and derivatives, orders 0..r-1;
            ``inf`` marks an unconstrained entry
        tension: Desired cable tension; zero triggers a slack transition
    """

    index: int
    time: float
    desired: np.ndarray
    tension: float

    @property
    def position(self) -> float:
        return float(self.desired[0])

    @property
    def velocity(self) -> float:
        """Desired velocity, ``inf`` when unconstrained or not specified."""
        if self.desired.shape[0] < 2:
            return float("inf")
        return float(self.desired[1])


@dataclass(frozen=True)
class HybridProblem:
    """Immutable keyframe input of one generation call.

    Attributes:
        keyframe_times: (m+1,) keyframe times
        desired_states: (r, m+1) desired states, ``inf`` = unconstrained
        desired_tension: (m+1,) desired cable tension
    """

    keyframe_times: np.ndarray
    desired_states: np.ndarray
    desired_tension: np.ndarray

    def __post_init__(self) -> None:
        object.__setattr__(self, "keyframe_times", _frozen_array(self.keyframe_times))
        object.__setattr__(self, "desired_states", _frozen_array(self.desired_states))
        object.__setattr__(
            self, "desired_tension", _frozen_array(self.desired_tension)
        )

    @property
    def num_keyframes(self) -> int:
        return int(self.keyframe_times.shape[0])

    @property
    def last_index(self) -> int:
        """Index m of the final keyframe."""
        return self.num_keyframes - 1

    def keyframe(self, index: int) -> Keyframe:
        return Keyframe(
            index=index,
            time=float(self.keyframe_times[index]),
            desired=self.desired_states[:, index],
            tension=float(self.desired_tension[index]),
        )

    def tension_lost(self, index: int, tolerance: float) -> bool:
        """Check whether the desired tension at a keyframe counts as zero."""
        return bool(abs(self.desired_tension[index]) <= tolerance)


@dataclass(frozen=True)
class PolynomialSegment:
    """One polynomial piece of the load or quadrotor trajectory.

    Attributes:
        coefficients: (n+1,) monomial coefficients, highest degree first
        mode: Hybrid mode that produced the segment
        start_keyframe: Keyframe index the segment starts at
        end_keyframe: Keyframe index the segment ends at
        start_time: Real time at tau = 0
        end_time: Real time at tau = 1
        active: False for the placeholder quadrotor entries of taut runs
    """

    coefficients: np.ndarray
    mode: Mode
    start_keyframe: int
    end_keyframe: int
    start_time: float
    end_time: float
    active: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "coefficients", _frozen_array(self.coefficients))

    @classmethod
    def inactive(
        cls,
        order: int,
        mode: Mode,
        start_keyframe: int,
        end_keyframe: int,
        start_time: float,
        end_time: float,
    ) -> "PolynomialSegment":
        """Create a marker for a span where this trajectory is not planned."""
        return cls(
            coefficients=np.zeros(order + 1),
            mode=mode,
            start_keyframe=start_keyframe,
            end_keyframe=end_keyframe,
            start_time=start_time,
            end_time=end_time,
            active=False,
        )

    @property
    def order(self) -> int:
        return int(self.coefficients.shape[0]) - 1

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time

    def evaluate(self, tau: float, max_derivative: int = 0) -> np.ndarray:
        """Evaluate the segment and its real-time derivatives at ``tau``."""
        return evaluate_segment(
            self.coefficients,
            tau,
            duration=self.duration,
            max_derivative=max_derivative,
        )


class ModeSwitchRecord(NamedTuple):
    """A logged mode switch: keyframe index, previous mode, new mode."""

    keyframe_index: int
    previous_mode: Mode
    new_mode: Mode


@dataclass(frozen=True)
class TrajectoryOutput:
    """Result of a hybrid trajectory generation call.

    Attributes:
        load_segments: Load polynomial per output segment
        quad_segments: Quadrotor polynomial per output segment; inactive
            markers during taut runs
        mode_log: Ordered mode switches
        segment_count: Number of output segments (mNew)
        keyframe_times: Input keyframe times, unmodified
        flight_times: Free-fall duration computed at each slack transition
    """

    load_segments: Tuple[PolynomialSegment, ...]
    quad_segments: Tuple[PolynomialSegment, ...]
    mode_log: Tuple[ModeSwitchRecord, ...]
    segment_count: int
    keyframe_times: np.ndarray
    flight_times: Tuple[float, ...] = field(default_factory=tuple)

    def load_coefficients(self) -> np.ndarray:
        """Stack load coefficients column-wise into an (n+1, mNew) array."""
        return _stack(self.load_segments)

    def quad_coefficients(self) -> np.ndarray:
        """Stack quadrotor coefficients column-wise into an (n+1, mNew) array."""
        return _stack(self.quad_segments)

    def mode_array(self) -> np.ndarray:
        """Mode log as an (a, 3) integer array of (keyframe, previous, new)."""
        if not self.mode_log:
            return np.zeros((0, 3), dtype=int)
        return np.array([tuple(record) for record in self.mode_log], dtype=int)


def _stack(segments: Sequence[PolynomialSegment]) -> np.ndarray:
    if not segments:
        return np.zeros((0, 0))
    return np.column_stack([segment.coefficients for segment in segments])
