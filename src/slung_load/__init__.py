"""Hybrid taut/slack trajectory generation for a quadrotor slung load.

The load hangs from the quadrotor on a rigid-length cable. While the cable
is taut the load trajectory is optimized directly; when tension is lost the
load falls freely and the quadrotor is planned to re-engage the cable.
"""

from slung_load.config import PlannerConfig
from slung_load.errors import (
    ComplexFlightTimeError,
    DimensionalityError,
    InfeasibleQPError,
    KeyframeError,
    QPSolverError,
    TrajectoryGenerationError,
    UnboundedQPError,
)
from slung_load.trajectory.assembler import generate_hybrid_trajectory
from slung_load.trajectory.types import (
    Mode,
    ModeSwitchRecord,
    PolynomialSegment,
    TrajectoryOutput,
)

__version__ = "0.1.0"

__all__ = [
    "PlannerConfig",
    "generate_hybrid_trajectory",
    "Mode",
    "ModeSwitchRecord",
    "PolynomialSegment",
    "TrajectoryOutput",
    "TrajectoryGenerationError",
    "DimensionalityError",
    "KeyframeError",
    "QPSolverError",
    "InfeasibleQPError",
    "UnboundedQPError",
    "ComplexFlightTimeError",
]
