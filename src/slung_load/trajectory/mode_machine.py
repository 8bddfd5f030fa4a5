"""Taut/slack mode state machine over the keyframe sequence.

The machine starts taut at keyframe 0 and walks keyframes in order. A
keyframe whose desired tension is zero closes the current taut run,
triggers the free-fall transition there, and returns to taut at the same
keyframe. Any taut run still open after the last keyframe is closed by
``finish``.
"""

import logging
from dataclasses import dataclass, field
from typing import List

from slung_load.config import PlannerConfig
from slung_load.errors import KeyframeError
from slung_load.trajectory.free_fall import plan_free_fall
from slung_load.trajectory.taut_optimizer import optimize_taut_run
from slung_load.trajectory.types import (
    HybridProblem,
    Mode,
    ModeSwitchRecord,
    PolynomialSegment,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SegmenterState:
    """Current mode and the keyframe where the current run began."""

    mode: Mode = Mode.TAUT
    last_start: int = 0


@dataclass
class TrajectoryAccumulator:
    """Segments and mode switches collected while walking keyframes."""

    load_segments: List[PolynomialSegment] = field(default_factory=list)
    quad_segments: List[PolynomialSegment] = field(default_factory=list)
    mode_log: List[ModeSwitchRecord] = field(default_factory=list)
    flight_times: List[float] = field(default_factory=list)

    @property
    def segment_count(self) -> int:
        return len(self.load_segments)

    def add(self, load: PolynomialSegment, quad: PolynomialSegment) -> None:
        self.load_segments.append(load)
        self.quad_segments.append(quad)

    def switch(self, keyframe_index: int, previous: Mode, new: Mode) -> None:
        if self.mode_log and self.mode_log[-1].new_mode == new:
            raise RuntimeError(f"Mode log would repeat {new.name}")
        self.mode_log.append(ModeSwitchRecord(keyframe_index, previous, new))
        logger.info(f"Mode switch at keyframe {keyframe_index}: {previous.name} -> {new.name}")


class KeyframeSegmenter:
    """Drive taut and slack planning across a keyframe sequence."""

    def __init__(self, problem: HybridProblem, config: PlannerConfig):
        self.problem = problem
        self.config = config

    def run(self, accumulator: TrajectoryAccumulator) -> TrajectoryAccumulator:
        state = SegmenterState()
        for i in range(self.problem.num_keyframes):
            state = self.step(state, i, accumulator)
        self.finish(state, accumulator)
        return accumulator

    def step(
        self,
        state: SegmenterState,
        keyframe_index: int,
        accumulator: TrajectoryAccumulator,
    ) -> SegmenterState:
        """Process one keyframe and return the next state."""
        if state.mode == Mode.TAUT:
            if not self.problem.tension_lost(keyframe_index, self.config.tension_tolerance):
                return state
            state = self._taut_to_slack(state, keyframe_index, accumulator)

        return self._slack_to_taut(state, keyframe_index, accumulator)

    def finish(self, state: SegmenterState, accumulator: TrajectoryAccumulator) -> None:
        """Close a taut run that is still open after the last keyframe."""
        last = self.problem.last_index
        if state.mode != Mode.TAUT or last <= state.last_start:
            return
        logger.debug(f"Closing trailing taut run {state.last_start}->{last}")
        self._close_taut_run(state.last_start, last, accumulator, terminal_velocity_bound=False)

    def _close_taut_run(
        self,
        start: int,
        end: int,
        accumulator: TrajectoryAccumulator,
        terminal_velocity_bound: bool,
    ) -> None:
        run = optimize_taut_run(
            self.problem,
            start,
            end,
            self.config,
            terminal_velocity_bound=terminal_velocity_bound,
        )
        for segment in run.segments:
            accumulator.add(
                segment,
                PolynomialSegment.inactive(
                    self.config.order,
                    Mode.TAUT,
                    segment.start_keyframe,
                    segment.end_keyframe,
                    segment.start_time,
                    segment.end_time,
                ),
            )

    def _taut_to_slack(
        self,
        state: SegmenterState,
        keyframe_index: int,
        accumulator: TrajectoryAccumulator,
    ) -> SegmenterState:
        if keyframe_index <= state.last_start:
            raise KeyframeError(
                "Tension lost before any taut segment was planned",
                keyframe_index=keyframe_index,
                mode=Mode.TAUT,
            )
        self._close_taut_run(
            state.last_start, keyframe_index, accumulator, terminal_velocity_bound=True
        )
        accumulator.switch(keyframe_index, Mode.TAUT, Mode.SLACK)
        return SegmenterState(mode=Mode.SLACK, last_start=keyframe_index)

    def _slack_to_taut(
        self,
        state: SegmenterState,
        keyframe_index: int,
        accumulator: TrajectoryAccumulator,
    ) -> SegmenterState:
        result = plan_free_fall(
            self.problem,
            keyframe_index,
            accumulator.load_segments[-1],
            self.config,
        )
        accumulator.add(result.load_segment, result.quad_segment)
        accumulator.flight_times.append(result.flight_time)
        accumulator.switch(keyframe_index, Mode.SLACK, Mode.TAUT)
        return SegmenterState(mode=Mode.TAUT, last_start=keyframe_index)
