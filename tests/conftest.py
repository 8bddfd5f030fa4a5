"""Pytest configuration and shared fixtures."""

import numpy as np
import pytest

from slung_load.config import PlannerConfig

INF = np.inf


@pytest.fixture
def config():
    """Fixture providing the default planner configuration."""
    return PlannerConfig(
        order=7,
        derivative_order=4,
        gravity=9.8,
        cable_length=1.0,
        load_mass=0.1,
        quad_mass=1.0,
    )


@pytest.fixture
def scenario_a():
    """Three keyframes with tension lost at the middle one.

    Returns a (keyframe_times, desired_states, desired_tension) tuple.
    """
    keyframe_times = np.array([0.0, 1.0, 2.0])
    desired_states = np.array([
        [0.0, 5.0, 10.0],
        [0.0, INF, 0.0],
        [0.0, INF, 0.0],
        [0.0, INF, 0.0],
    ])
    desired_tension = np.array([1.0, 0.0, 1.0])
    return keyframe_times, desired_states, desired_tension


@pytest.fixture
def scenario_a_problem(scenario_a, config):
    """Scenario A bundled into a HybridProblem."""
    from slung_load.trajectory.assembler import build_problem

    return build_problem(*scenario_a, config)
