"""Planner configuration.

A single immutable value holds every tunable of a generation call. It is
built once by the caller and passed explicitly to each stage.
"""

from dataclasses import asdict, dataclass
from typing import Optional

DEFAULT_ORDER = 7
DEFAULT_DERIVATIVE_ORDER = 4
DEFAULT_GRAVITY = 9.8
DEFAULT_CABLE_LENGTH = 1.0
DEFAULT_LOAD_MASS = 0.1
DEFAULT_QUAD_MASS = 1.0

DEFAULT_QUAD_ORDER = 7
DEFAULT_QUAD_DERIVATIVE_ORDER = 4

# Relative Hessian diagonal weight; zero keeps the pure minimum-derivative cost
DEFAULT_REGULARIZATION = 0.0
DEFAULT_TENSION_TOLERANCE = 1e-9
DEFAULT_SOLVER_TIME_LIMIT = 10.0


@dataclass(frozen=True)
class PlannerConfig:
    """Configuration for hybrid trajectory generation.

    Attributes:
        order: Polynomial order n of every output segment
        derivative_order: Derivative r minimized in taut runs; also the
            number of rows of the desired-state matrix
        gravity: Gravitational acceleration (m/s^2), acting along -axis
        cable_length: Cable length (m); the quadrotor sits this far above the load
        load_mass: Load mass (kg)
        quad_mass: Quadrotor mass (kg)
        quad_order: Polynomial order of the slack-mode quadrotor segment
        quad_derivative_order: Derivative minimized for the quadrotor segment
        regularization: Diagonal weight added to every QP Hessian, relative
            to the mean diagonal of its cost matrix
        tension_tolerance: Tensions with magnitude at or below this count as zero
        solver_time_limit: Per-QP wall-clock limit in seconds (None disables)
        enforce_continuity: Add derivative continuity at interior keyframes of
            a taut run for entries the keyframe leaves unconstrained
    """

    order: int = DEFAULT_ORDER
    derivative_order: int = DEFAULT_DERIVATIVE_ORDER
    gravity: float = DEFAULT_GRAVITY
    cable_length: float = DEFAULT_CABLE_LENGTH
    load_mass: float = DEFAULT_LOAD_MASS
    quad_mass: float = DEFAULT_QUAD_MASS
    quad_order: int = DEFAULT_QUAD_ORDER
    quad_derivative_order: int = DEFAULT_QUAD_DERIVATIVE_ORDER
    regularization: float = DEFAULT_REGULARIZATION
    tension_tolerance: float = DEFAULT_TENSION_TOLERANCE
    solver_time_limit: Optional[float] = DEFAULT_SOLVER_TIME_LIMIT
    enforce_continuity: bool = False

    def __post_init__(self) -> None:
        if self.derivative_order < 1:
            raise ValueError("derivative_order must be at least 1")
        if self.order < self.derivative_order:
            raise ValueError(
                f"order ({self.order}) must be >= derivative_order "
                f"({self.derivative_order})"
            )
        if self.quad_derivative_order < 4:
            # Quadrotor boundary state is position through jerk
            raise ValueError("quad_derivative_order must be at least 4")
        if self.quad_order < self.quad_derivative_order:
            raise ValueError("quad_order must be >= quad_derivative_order")
        if self.order < self.quad_order:
            raise ValueError(
                f"order ({self.order}) must be >= quad_order ({self.quad_order}) "
                "so slack-mode quadrotor segments fit the output layout"
            )
        if self.gravity <= 0:
            raise ValueError("gravity must be positive")
        if self.cable_length < 0:
            raise ValueError("cable_length must be non-negative")
        if self.load_mass <= 0 or self.quad_mass <= 0:
            raise ValueError("load_mass and quad_mass must be positive")
        if self.regularization < 0:
            raise ValueError("regularization must be non-negative")
        if self.tension_tolerance < 0:
            raise ValueError("tension_tolerance must be non-negative")
        if self.solver_time_limit is not None and self.solver_time_limit <= 0:
            raise ValueError("solver_time_limit must be positive or None")

    @property
    def num_coefficients(self) -> int:
        """Coefficient count of every output segment."""
        return self.order + 1

    @classmethod
    def from_dict(cls, config: Optional[dict] = None) -> "PlannerConfig":
        """Build a configuration from a plain dictionary.

        Args:
            config: Optional dict; missing keys fall back to module defaults

        Returns:
            PlannerConfig instance

        Raises:
            ValueError: If a value is out of range or a key is unknown
        """
        if config is None:
            config = {}

        known = set(cls.__dataclass_fields__)
        unknown = set(config) - known
        if unknown:
            raise ValueError(f"Unknown planner config keys: {sorted(unknown)}")

        time_limit = config.get("solver_time_limit", DEFAULT_SOLVER_TIME_LIMIT)

        return cls(
            order=int(config.get("order", DEFAULT_ORDER)),
            derivative_order=int(
                config.get("derivative_order", DEFAULT_DERIVATIVE_ORDER)
            ),
            gravity=float(config.get("gravity", DEFAULT_GRAVITY)),
            cable_length=float(config.get("cable_length", DEFAULT_CABLE_LENGTH)),
            load_mass=float(config.get("load_mass", DEFAULT_LOAD_MASS)),
            quad_mass=float(config.get("quad_mass", DEFAULT_QUAD_MASS)),
            quad_order=int(config.get("quad_order", DEFAULT_QUAD_ORDER)),
            quad_derivative_order=int(
                config.get("quad_derivative_order", DEFAULT_QUAD_DERIVATIVE_ORDER)
            ),
            regularization=float(
                config.get("regularization", DEFAULT_REGULARIZATION)
            ),
            tension_tolerance=float(
                config.get("tension_tolerance", DEFAULT_TENSION_TOLERANCE)
            ),
            solver_time_limit=None if time_limit is None else float(time_limit),
            enforce_continuity=bool(config.get("enforce_continuity", False)),
        )

    def to_dict(self) -> dict:
        """Return the configuration as a plain dictionary."""
        return asdict(self)
