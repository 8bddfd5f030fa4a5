"""End-to-end tests for hybrid trajectory generation."""

import logging

import numpy as np
import pytest

from slung_load import (
    ComplexFlightTimeError,
    DimensionalityError,
    InfeasibleQPError,
    KeyframeError,
    Mode,
    PlannerConfig,
    QPSolverError,
    generate_hybrid_trajectory,
)

INF = np.inf
EPS = 1e-5


def _check_taut_boundaries(result, desired_states):
    """Check every finite desired value at the ends of each taut load segment."""
    rows = desired_states.shape[0]
    for segment in result.load_segments:
        if segment.mode != Mode.TAUT:
            continue
        for tau, keyframe in ((0.0, segment.start_keyframe), (1.0, segment.end_keyframe)):
            values = segment.evaluate(tau, rows - 1)
            for derivative in range(rows):
                desired = desired_states[derivative, keyframe]
                if np.isfinite(desired):
                    assert values[derivative] == pytest.approx(desired, abs=EPS)


def _check_release(result, config, slack_index=1):
    """Check the load arc and quadrotor against the release state in real time."""
    release = result.load_segments[slack_index - 1].evaluate(1.0, 3)
    load_arc = result.load_segments[slack_index]
    quad = result.quad_segments[slack_index]

    np.testing.assert_allclose(load_arc.evaluate(0.0, 1), release[:2], rtol=1e-6, atol=1e-6)
    for tau in np.linspace(0.0, 1.0, 5):
        assert load_arc.evaluate(tau, 2)[2] == pytest.approx(-config.gravity)

    expected = release.copy()
    expected[0] += config.cable_length
    np.testing.assert_allclose(quad.evaluate(0.0, 3), expected, atol=1e-4)


def _check_alternating(mode_log):
    new_modes = [record.new_mode for record in mode_log]
    assert all(a != b for a, b in zip(new_modes, new_modes[1:]))


def test_scenario_a(scenario_a, config):
    """Test tension loss at the middle of three keyframes."""
    times, states, tension = scenario_a

    result = generate_hybrid_trajectory(times, states, tension, config)

    assert result.segment_count == 3
    assert len(result.load_segments) == 3
    assert len(result.quad_segments) == 3
    assert [tuple(record) for record in result.mode_log] == [(1, 1, 2), (1, 2, 1)]
    assert np.all(np.isfinite(result.load_coefficients()))
    assert np.all(np.isfinite(result.quad_coefficients()))
    assert result.load_coefficients().shape == (config.order + 1, 3)
    np.testing.assert_array_equal(result.keyframe_times, times)
    np.testing.assert_array_equal(result.mode_array(), [[1, 1, 2], [1, 2, 1]])


def test_scenario_a_segment_layout(scenario_a, config):
    """Test segment modes and quadrotor placeholders."""
    result = generate_hybrid_trajectory(*scenario_a, config)

    assert [s.mode for s in result.load_segments] == [Mode.TAUT, Mode.SLACK, Mode.TAUT]
    assert [s.active for s in result.quad_segments] == [False, True, False]
    for placeholder in (result.quad_segments[0], result.quad_segments[2]):
        np.testing.assert_array_equal(placeholder.coefficients, 0.0)
    assert len(result.flight_times) == 1
    assert result.flight_times[0] > 0


def test_scenario_a_boundary_constraints(scenario_a, config):
    """Test that solved taut segments reproduce the desired keyframe values."""
    times, states, tension = scenario_a

    result = generate_hybrid_trajectory(times, states, tension, config)

    _check_taut_boundaries(result, states)
    release = result.load_segments[0].evaluate(1.0, 1)
    assert release[1] >= -EPS


def test_scenario_a_free_fall_segment(scenario_a, config):
    """Test the closed-form load arc and the quadrotor start state."""
    result = generate_hybrid_trajectory(*scenario_a, config)

    _check_release(result, config)


def test_free_fall_over_long_interval(scenario_a, config):
    """Test a slack transition whose keyframe interval is not one second."""
    _, states, tension = scenario_a
    times = np.array([0.0, 1.0, 3.0])

    result = generate_hybrid_trajectory(times, states, tension, config)

    assert result.segment_count == 3
    assert result.load_segments[1].duration == pytest.approx(2.0)
    _check_release(result, config)
    _check_taut_boundaries(result, states)
    landing = result.quad_segments[1].evaluate(1.0)[0]
    assert landing == pytest.approx(states[0, 2] + config.cable_length, abs=1e-4)



def test_scenario_b_complex_flight_time(scenario_a, config):
    """Test that an unreachable landing height fails at the release keyframe."""
    times, states, tension = scenario_a
    states = states.copy()
    states[0, 2] = 100.0

    with pytest.raises(ComplexFlightTimeError) as excinfo:
        generate_hybrid_trajectory(times, states, tension, config)

    assert excinfo.value.keyframe_index == 1


@pytest.mark.parametrize(
    "times",
    [
        [0.0, 1.0, 1.0],
        [0.0, 0.0, 1.0],
    ],
)
def test_scenario_c_identical_times(scenario_a, config, times):
    """Test that coincident keyframe times never yield a trajectory."""
    _, states, tension = scenario_a

    with pytest.raises(QPSolverError) as excinfo:
        generate_hybrid_trajectory(times, states, tension, config)

    assert isinstance(excinfo.value, InfeasibleQPError)


def test_two_slack_transitions(config):
    """Test segment accounting across two tension-loss events."""
    times = [0.0, 1.0, 2.0, 3.0, 4.0]
    states = np.array([
        [0.0, 5.0, 10.0, 15.0, 20.0],
        [0.0, INF, INF, 15.0, 0.0],
        [0.0, INF, INF, INF, 0.0],
        [0.0, INF, INF, INF, 0.0],
    ])
    tension = [1.0, 0.0, 1.0, 0.0, 1.0]

    result = generate_hybrid_trajectory(times, states, tension, config)

    # Runs: 0->1 (1), slack (1), 1->3 (2), slack (1), trailing 3->4 (1)
    assert result.segment_count == 6
    assert len(result.quad_segments) == result.segment_count
    assert [tuple(r) for r in result.mode_log] == [
        (1, 1, 2), (1, 2, 1), (3, 1, 2), (3, 2, 1),
    ]
    _check_alternating(result.mode_log)
    slack = [s for s in result.load_segments if s.mode == Mode.SLACK]
    assert len(slack) == len(result.flight_times) == 2
    _check_taut_boundaries(result, states)


def test_config_is_not_cached_between_calls(scenario_a):
    """Test that each call uses only the configuration it is given."""
    first = generate_hybrid_trajectory(*scenario_a, PlannerConfig(order=7))
    second = generate_hybrid_trajectory(*scenario_a, PlannerConfig(order=9))

    assert first.load_segments[0].coefficients.shape == (8,)
    assert second.load_segments[0].coefficients.shape == (10,)
    assert second.quad_segments[1].coefficients.shape == (10,)


def test_default_config(scenario_a):
    """Test generation with the default configuration."""
    result = generate_hybrid_trajectory(*scenario_a)

    assert result.segment_count == 3


def test_dimensionality_error(scenario_a, config):
    """Test that multi-dimensional input is rejected."""
    times, states, tension = scenario_a

    with pytest.raises(DimensionalityError):
        generate_hybrid_trajectory(times, states, tension, config, dimensions=3)

    stacked = np.stack([states, states], axis=2)
    with pytest.raises(DimensionalityError):
        generate_hybrid_trajectory(times, stacked, tension, config)


def test_single_dimension_axis_accepted(scenario_a, config):
    """Test that an explicit trailing dimension of one is accepted."""
    times, states, tension = scenario_a

    result = generate_hybrid_trajectory(times, states[:, :, np.newaxis], tension, config)

    assert result.segment_count == 3


@pytest.mark.parametrize(
    "times, states, tension",
    [
        ([0.0], np.zeros((4, 1)), [1.0]),
        ([0.0, 1.0], np.zeros((4, 2)), [1.0]),
        ([0.0, 1.0], np.zeros((4, 3)), [1.0, 1.0]),
        ([0.0, 1.0], np.zeros((2, 2)), [1.0, 1.0]),
        ([0.0, np.nan], np.zeros((4, 2)), [1.0, 1.0]),
        ([0.0, 1.0], np.full((4, 2), np.nan), [1.0, 1.0]),
    ],
)
def test_invalid_keyframes(config, times, states, tension):
    """Test input validation."""
    with pytest.raises(KeyframeError):
        generate_hybrid_trajectory(times, states, tension, config)


def test_failure_is_logged(scenario_a, config, caplog):
    """Test that a fatal error is logged before it propagates."""
    times, states, tension = scenario_a
    states = states.copy()
    states[0, 2] = 100.0

    with caplog.at_level(logging.ERROR, logger="slung_load"):
        with pytest.raises(ComplexFlightTimeError):
            generate_hybrid_trajectory(times, states, tension, config)

    assert "Trajectory generation failed" in caplog.text


def test_mode_switches_are_logged(scenario_a, config, caplog):
    """Test that mode switches are reported at INFO level."""
    with caplog.at_level(logging.INFO, logger="slung_load"):
        generate_hybrid_trajectory(*scenario_a, config)

    assert "TAUT -> SLACK" in caplog.text
    assert "SLACK -> TAUT" in caplog.text


@pytest.mark.parametrize(
    "times, states, tension, index",
    [
        ([0.0, 1.0, np.inf], np.zeros((4, 3)), [1.0, 1.0, 1.0], 2),
        ([0.0, 1.0, 2.0], np.zeros((4, 3)), [1.0, np.nan, 1.0], 1),
        ([0.0, 1.0, 2.0], np.array([[0.0, 1.0, 2.0]] * 3 + [[0.0, 0.0, np.nan]]), [1.0] * 3, 2),
    ],
)
def test_invalid_keyframe_is_identified(config, times, states, tension, index):
    """Test that validation errors name the first offending keyframe."""
    with pytest.raises(KeyframeError) as excinfo:
        generate_hybrid_trajectory(times, states, tension, config)

    assert excinfo.value.keyframe_index == index
    assert f"keyframe {index}" in str(excinfo.value)
