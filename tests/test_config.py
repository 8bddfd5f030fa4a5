"""Tests for planner configuration."""

import dataclasses

import pytest

from slung_load.config import (
    DEFAULT_ORDER,
    DEFAULT_TENSION_TOLERANCE,
    PlannerConfig,
)


def test_default_config():
    """Test default configuration values."""
    config = PlannerConfig()

    assert config.order == DEFAULT_ORDER
    assert config.derivative_order == 4
    assert config.num_coefficients == DEFAULT_ORDER + 1
    assert config.tension_tolerance == DEFAULT_TENSION_TOLERANCE
    assert config.enforce_continuity is False
    assert config.regularization == 0.0


def test_config_is_immutable():
    """Test that configuration cannot be changed after construction."""
    config = PlannerConfig()

    with pytest.raises(dataclasses.FrozenInstanceError):
        config.order = 9


@pytest.mark.parametrize(
    "kwargs",
    [
        {"order": 5},  # below quad_order
        {"derivative_order": 0},
        {"order": 7, "derivative_order": 8},
        {"gravity": 0.0},
        {"load_mass": -1.0},
        {"quad_mass": 0.0},
        {"cable_length": -0.5},
        {"solver_time_limit": 0.0},
        {"quad_derivative_order": 3},
    ],
)
def test_invalid_config(kwargs):
    """Test that out-of-range values are rejected."""
    with pytest.raises(ValueError):
        PlannerConfig(**kwargs)


def test_from_dict():
    """Test building configuration from a plain dictionary."""
    config = PlannerConfig.from_dict({
        "order": 9,
        "gravity": 9.81,
        "solver_time_limit": None,
        "enforce_continuity": True,
    })

    assert config.order == 9
    assert config.gravity == pytest.approx(9.81)
    assert config.solver_time_limit is None
    assert config.enforce_continuity is True
    # Unspecified keys fall back to defaults
    assert config.cable_length == PlannerConfig().cable_length


def test_from_dict_empty():
    """Test that an empty or missing dict gives the defaults."""
    assert PlannerConfig.from_dict(None) == PlannerConfig()
    assert PlannerConfig.from_dict({}) == PlannerConfig()


def test_from_dict_unknown_key():
    """Test that unknown keys are reported."""
    with pytest.raises(ValueError, match="orderr"):
        PlannerConfig.from_dict({"orderr": 7})


def test_to_dict_round_trip():
    """Test that to_dict output rebuilds the same configuration."""
    config = PlannerConfig(order=8, load_mass=0.2)

    assert PlannerConfig.from_dict(config.to_dict()) == config
