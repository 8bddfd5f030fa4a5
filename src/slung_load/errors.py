"""Error types raised by the trajectory generator.

Every error is fatal for a generation call: no partial trajectory is returned.
Errors carry the keyframe index and hybrid mode where they were detected.
"""

from typing import Optional


class TrajectoryGenerationError(Exception):
    """Base class for all trajectory generation failures.

    Attributes:
        keyframe_index: Keyframe at which the failure was detected, if known
        mode: Hybrid mode active at the failure, if known
    """

    def __init__(
        self,
        message: str,
        keyframe_index: Optional[int] = None,
        mode=None,
    ):
        self.message = message
        self.keyframe_index = keyframe_index
        self.mode = mode
        super().__init__(self._format())

    def _format(self) -> str:
        context = []
        if self.keyframe_index is not None:
            context.append(f"keyframe {self.keyframe_index}")
        if self.mode is not None:
            context.append(f"mode {getattr(self.mode, 'name', self.mode)}")
        if not context:
            return self.message
        return f"{self.message} ({', '.join(context)})"


class DimensionalityError(TrajectoryGenerationError):
    """Input declares more than one spatial dimension."""


class KeyframeError(TrajectoryGenerationError, ValueError):
    """Keyframe input is malformed or cannot drive the mode machine."""


class QPSolverError(TrajectoryGenerationError):
    """QP solver failed, hit its time limit, or returned no solution."""


class InfeasibleQPError(QPSolverError):
    """Segment constraints admit no feasible solution."""


class UnboundedQPError(QPSolverError):
    """Segment objective is unbounded below under its constraints."""


class ComplexFlightTimeError(TrajectoryGenerationError):
    """Free-fall flight-time equation has no physically valid root."""
