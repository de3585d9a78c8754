"""RunSession — lifecycle state machine for one run attempt.

::

    waiting ──start()──▶ running ──goal reached (auto-stop) / stop()──▶ finished

``finished`` is terminal: later samples, ticks and stops are dropped.
Elapsed time is always derived from the wall-clock delta against the start
timestamp, so it stays correct across process suspension.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from pacemaker.geo.distance import distance
from pacemaker.settings import DEFAULT_SETTINGS, RunSettings
from pacemaker.tracking.models import (
    CompletedRun,
    FeedbackCursor,
    PositionSample,
    RunGoal,
    RunMetrics,
    RunStatus,
    generate_run_id,
    iso_from_ms,
)
from pacemaker.tracking.validator import SampleValidator

_logger = logging.getLogger(__name__)


class SessionStateError(RuntimeError):
    """Raised on a lifecycle call that is illegal in the current state."""


def _now_ms() -> int:
    return int(time.time() * 1000)


class RunSession:
    """Owns the validated track, live metrics and feedback cursor of one run.

    Parameters
    ----------
    goal:
        Target distance and time.
    settings:
        Run settings; only ``auto_stop_on_goal`` is consulted here.
    validator:
        Sample acceptance predicate.  Defaults to :class:`SampleValidator`.
    _time_fn:
        Callable returning wall-clock milliseconds — injectable for testing.
    """

    def __init__(
        self,
        goal: RunGoal,
        settings: RunSettings | None = None,
        validator: SampleValidator | None = None,
        _time_fn: Callable[[], int] = _now_ms,
    ) -> None:
        self.goal = goal
        self.settings = settings or DEFAULT_SETTINGS
        self._validator = validator or SampleValidator()
        self._time_fn = _time_fn

        self.status = RunStatus.WAITING
        self.track: list[PositionSample] = []
        self.metrics = RunMetrics()
        self.cursor = FeedbackCursor()
        self.started_at_ms: int | None = None
        self.completed_run: CompletedRun | None = None
        self._callbacks: list[Callable[[CompletedRun], None]] = []

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        return self.status is RunStatus.RUNNING

    @property
    def is_finished(self) -> bool:
        return self.status is RunStatus.FINISHED

    @property
    def last_accepted(self) -> PositionSample | None:
        return self.track[-1] if self.track else None

    def register_callback(self, callback: Callable[[CompletedRun], None]) -> None:
        """Register *callback* to receive the :class:`CompletedRun` on finish."""
        self._callbacks.append(callback)

    def start(self, now_ms: int | None = None, initial_fix: PositionSample | None = None) -> None:
        """Transition ``waiting → running``.

        *initial_fix* is a best-effort position that anchors the track; it is
        validated like any other sample and may be None.

        Raises
        ------
        SessionStateError
            If the session is not waiting.
        """
        if self.status is not RunStatus.WAITING:
            raise SessionStateError(f"Cannot start a session that is {self.status.value}")

        self.started_at_ms = self._time_fn() if now_ms is None else now_ms
        self.track = []
        self.metrics = RunMetrics()
        self.cursor = FeedbackCursor()
        self.status = RunStatus.RUNNING
        _logger.info(
            "Run started: %.2f km in %.1f min (target pace %.2f min/km)",
            self.goal.distance_km,
            self.goal.time_min,
            self.goal.target_pace,
        )

        if initial_fix is not None:
            self.add_sample(initial_fix, self.started_at_ms)

    def add_sample(self, sample: PositionSample, now_ms: int | None = None) -> bool:
        """Validate *sample* and append it to the track.

        Returns True if the sample was accepted.  Ignored unless running.
        May finish the session when the goal distance is reached.
        """
        if not self.is_running:
            _logger.debug("Dropped sample at %d: session %s", sample.timestamp, self.status.value)
            return False

        previous = self.last_accepted
        reason = self._validator.reject_reason(sample, previous)
        if reason is not None:
            _logger.debug("Rejected sample at %d: %s", sample.timestamp, reason)
            return False

        added = distance(previous, sample) if previous is not None else 0.0
        self.track.append(sample)
        self.metrics = RunMetrics(
            distance_km=self.metrics.distance_km + added,
            elapsed_s=self._elapsed_at(self._time_fn() if now_ms is None else now_ms),
        )
        self._check_completion()
        return True

    def tick(self, now_ms: int | None = None) -> RunMetrics:
        """Recompute elapsed time from the wall clock.  Ignored unless running."""
        if self.is_running:
            now = self._time_fn() if now_ms is None else now_ms
            self.metrics = RunMetrics(
                distance_km=self.metrics.distance_km,
                elapsed_s=self._elapsed_at(now),
            )
        return self.metrics

    def stop(self, now_ms: int | None = None) -> CompletedRun | None:
        """Manually finish the run.

        Returns the :class:`CompletedRun`, or None if the session was not running.
        """
        if not self.is_running:
            _logger.debug("Ignored stop: session %s", self.status.value)
            return None
        self.tick(now_ms)
        return self._finish()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _elapsed_at(self, now_ms: int) -> int:
        assert self.started_at_ms is not None
        elapsed = max(0, (now_ms - self.started_at_ms) // 1000)
        return max(self.metrics.elapsed_s, int(elapsed))

    def _check_completion(self) -> None:
        if self.settings.auto_stop_on_goal and self.metrics.distance_km >= self.goal.distance_km:
            _logger.info("Goal distance reached: %.3f km", self.metrics.distance_km)
            self._finish()

    def _finish(self) -> CompletedRun:
        assert self.started_at_ms is not None
        self.status = RunStatus.FINISHED
        run = CompletedRun(
            id=generate_run_id(self.started_at_ms),
            date=iso_from_ms(self.started_at_ms),
            target_distance_km=self.goal.distance_km,
            target_time_min=self.goal.time_min,
            actual_distance_km=self.metrics.distance_km,
            actual_time_s=self.metrics.elapsed_s,
            average_pace=self.metrics.pace,
            completed_goal=self.metrics.distance_km >= self.goal.distance_km,
        )
        self.completed_run = run
        _logger.info(
            "Run finished: %.3f km in %d s (goal %s)",
            run.actual_distance_km,
            run.actual_time_s,
            "reached" if run.completed_goal else "not reached",
        )
        for cb in self._callbacks:
            cb(run)
        return run
