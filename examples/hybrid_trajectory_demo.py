"""Example script for hybrid slung-load trajectory generation.

This script plans a three-keyframe trajectory in which the cable goes slack
at the middle keyframe, then logs the resulting segments and mode switches.
"""

import logging
from pathlib import Path

import numpy as np

from slung_load import TrajectoryGenerationError, generate_hybrid_trajectory
from slung_load.config import PlannerConfig
from slung_load.utils.config_loader import load_planner_config
from slung_load.utils.logging_config import setup_logging

setup_logging(log_level=logging.INFO)
logger = logging.getLogger(__name__)


def main() -> None:
    """Main function for the hybrid trajectory demo."""
    config_path = Path(__file__).parent.parent / "configs" / "planner_config.yaml"

    if config_path.exists():
        config = load_planner_config(config_path)
    else:
        logger.warning(f"Config file not found: {config_path}. Using defaults.")
        config = PlannerConfig()

    inf = np.inf
    keyframe_times = [0.0, 1.0, 2.0]
    # Rows: position, velocity, acceleration, jerk
    desired_states = np.array([
        [0.0, 5.0, 10.0],
        [0.0, inf, 0.0],
        [0.0, inf, 0.0],
        [0.0, inf, 0.0],
    ])
    desired_tension = [1.0, 0.0, 1.0]

    try:
        result = generate_hybrid_trajectory(
            keyframe_times, desired_states, desired_tension, config
        )
    except TrajectoryGenerationError as e:
        logger.error(f"Planning failed: {e}")
        return

    for index, (load, quad) in enumerate(zip(result.load_segments, result.quad_segments)):
        logger.info(
            f"Segment {index} [{load.mode.name}] keyframes "
            f"{load.start_keyframe}->{load.end_keyframe}: "
            f"load start {load.evaluate(0.0)[0]:.3f}, "
            f"quad {'active' if quad.active else 'inactive'}"
        )
    for record in result.mode_log:
        logger.info(
            f"Keyframe {record.keyframe_index}: "
            f"{record.previous_mode.name} -> {record.new_mode.name}"
        )
    for flight in result.flight_times:
        logger.info(f"Free-fall duration: {flight:.3f}s")


if __name__ == "__main__":
    main()
