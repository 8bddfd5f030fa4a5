"""Trajectory module for hybrid slung-load planning.

This module holds the planning pipeline:
- Polynomial basis, cost matrices and evaluation
- Boundary and continuity constraints
- QP solving
- Taut-run optimization
- Free-fall transitions
- The taut/slack mode state machine
"""

from slung_load.trajectory.assembler import build_problem, generate_hybrid_trajectory
from slung_load.trajectory.free_fall import FreeFallResult, flight_time, plan_free_fall
from slung_load.trajectory.mode_machine import (
    KeyframeSegmenter,
    SegmenterState,
    TrajectoryAccumulator,
)
from slung_load.trajectory.taut_optimizer import TautRunResult, optimize_taut_run
from slung_load.trajectory.types import (
    HybridProblem,
    Keyframe,
    Mode,
    ModeSwitchRecord,
    PolynomialSegment,
    TrajectoryOutput,
)

__all__ = [
    "HybridProblem",
    "Keyframe",
    "Mode",
    "ModeSwitchRecord",
    "PolynomialSegment",
    "TrajectoryOutput",
    "build_problem",
    "generate_hybrid_trajectory",
    "optimize_taut_run",
    "TautRunResult",
    "plan_free_fall",
    "flight_time",
    "FreeFallResult",
    "KeyframeSegmenter",
    "SegmenterState",
    "TrajectoryAccumulator",
]
