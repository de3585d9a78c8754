"""PacingEngine — connects the position stream, timer, session, feedback policy and speech."""

from __future__ import annotations

import logging
import random
import sqlite3
import time
from collections.abc import Callable

from pacemaker.geo.distance import format_duration
from pacemaker.geo.units import distance_for_display, format_pace_for_unit, unit_label
from pacemaker.pacing.event_stream import EventKind, RunEvent, RunEventStream
from pacemaker.pacing.policy import FeedbackEvent, FeedbackKind, PaceFeedbackPolicy
from pacemaker.settings import DEFAULT_SETTINGS, RunSettings
from pacemaker.tracking.models import CompletedRun, RunGoal, RunSnapshot
from pacemaker.tracking.recovery import BackgroundGapRecovery
from pacemaker.tracking.session import RunSession
from pacemaker.tts.engine import SpeechOptions

_logger = logging.getLogger(__name__)

CHECKPOINT_PITCH = 1.0


class PermissionDeniedError(RuntimeError):
    """Raised when foreground location permission is denied; the run cannot start."""


def _now_ms() -> int:
    return int(time.time() * 1000)


class PacingEngine:
    """Single-threaded session actor.

    Every mutation of the :class:`RunSession` happens inside :meth:`handle`,
    fed one :class:`RunEvent` at a time from the :class:`RunEventStream`.

    Parameters
    ----------
    goal:
        Target distance and time.
    position_service:
        Object with ``request_permissions()``, ``get_current_fix()``,
        ``start_stream()``, ``stop_stream()``, ``register_callback(cb)``,
        ``unregister_callback(cb)``, ``has_buffered_samples()`` and
        ``drain_buffered_samples()``.
    tts_engine:
        Object with ``speak(text, options)`` and ``stop()`` — either
        :class:`~pacemaker.tts.engine.Win32TTSEngine` or
        :class:`~pacemaker.tts.engine.NullTTSEngine`.
    settings:
        Run settings; defaults are used when None.
    history:
        Optional store with ``append(CompletedRun)``.
    stream:
        Event inbox; a 1 Hz :class:`RunEventStream` is created when None.
    rng:
        Random source for phrase selection.
    _time_fn:
        Callable returning wall-clock milliseconds — injectable for testing.
    """

    def __init__(
        self,
        goal: RunGoal,
        position_service,
        tts_engine,
        settings: RunSettings | None = None,
        history=None,
        stream: RunEventStream | None = None,
        rng: random.Random | None = None,
        _time_fn: Callable[[], int] = _now_ms,
    ) -> None:
        self._settings = settings or DEFAULT_SETTINGS
        self._positions = position_service
        self._tts = tts_engine
        self._history = history
        self._time_fn = _time_fn
        self._stream = stream or RunEventStream(_time_fn=_time_fn)
        self._policy = PaceFeedbackPolicy(self._settings, rng=rng)
        self._recovery = BackgroundGapRecovery(position_service)

        self.session = RunSession(goal, self._settings, _time_fn=_time_fn)
        self.session.register_callback(self._on_finished)

        self.degraded = False
        self._warnings: list[str] = []
        self._last_pace_text: str | None = None
        self._last_checkpoint_text: str | None = None
        self._listeners: list[Callable[[RunSnapshot], None]] = []

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Request permissions, take an initial fix and enter ``running``.

        Raises
        ------
        PermissionDeniedError
            If foreground location permission is denied.  The session stays
            ``waiting``.
        """
        perms = self._positions.request_permissions()
        if not perms.foreground:
            raise PermissionDeniedError("Location permission is required to track a run")
        if not perms.background:
            self.degraded = True
            self._warnings.append(
                "Background location denied; tracking may stop while the app is in the background"
            )
            _logger.warning("Background location permission denied; continuing degraded")

        try:
            fix = self._positions.get_current_fix()
        except Exception as exc:
            _logger.warning("Initial position fix failed: %s", exc)
            fix = None

        self.session.start(self._time_fn(), fix)
        self._positions.register_callback(self._stream.post_sample)
        self._positions.start_stream()
        self._stream.start()
        self._publish()

    def resume(self) -> None:
        """Notify the engine that the host process came back to the foreground."""
        self._stream.post_resume()

    def stop(self) -> None:
        """Request a manual stop; processed in order with other events."""
        self._stream.post_stop()

    def register_listener(self, listener: Callable[[RunSnapshot], None]) -> None:
        """Register *listener* to receive a :class:`RunSnapshot` after every update."""
        self._listeners.append(listener)

    # ------------------------------------------------------------------
    # Event processing
    # ------------------------------------------------------------------

    def tick(self, timeout: float = 0.0) -> int:
        """Process one event from the inbox.

        Returns the number of feedback messages fired (0 if no event was available).
        """
        event = self._stream.get_event(timeout=timeout)
        if event is None:
            return 0
        return len(self.handle(event))

    def drain(self) -> list[FeedbackEvent]:
        """Process every queued event; return all feedback fired."""
        fired: list[FeedbackEvent] = []
        while (event := self._stream.get_event(timeout=0.0)) is not None:
            fired.extend(self.handle(event))
        return fired

    def run(self, poll_s: float = 0.1) -> CompletedRun | None:
        """Process events until the session finishes; return the completed run."""
        while self.session.is_running:
            self.tick(timeout=poll_s)
        return self.session.completed_run

    def handle(self, event: RunEvent) -> list[FeedbackEvent]:
        """Apply *event* to the session and deliver any feedback that falls due."""
        session = self.session
        if not session.is_running:
            _logger.debug("Dropped %s event: session %s", event.kind.value, session.status.value)
            return []

        force_pace = False
        if event.kind is EventKind.SAMPLE and event.sample is not None:
            # Samples captured in the background must reach the track before any live one
            if self._positions.has_buffered_samples():
                self._recovery.resume(session, event.timestamp_ms)
            session.add_sample(event.sample, event.timestamp_ms)
        elif event.kind is EventKind.TICK:
            session.tick(event.timestamp_ms)
        elif event.kind is EventKind.RESUME:
            result = self._recovery.resume(session, event.timestamp_ms)
            force_pace = not result.finished
        elif event.kind is EventKind.STOP:
            session.stop(event.timestamp_ms)

        fired: list[FeedbackEvent] = []
        if session.is_running:
            fired = self._policy.evaluate(
                session.metrics, session.goal, session.cursor, force_pace=force_pace
            )
            for fb in fired:
                self._deliver(fb)

        self._publish()
        return fired

    def snapshot(self) -> RunSnapshot:
        """Return the current display snapshot."""
        session = self.session
        metrics = session.metrics
        unit = self._settings.distance_unit
        progress = min(100.0, metrics.distance_km / session.goal.distance_km * 100.0)
        shown = distance_for_display(metrics.distance_km, unit)
        return RunSnapshot(
            status=session.status,
            goal=session.goal,
            metrics=metrics,
            progress_pct=progress,
            distance_text=f"{shown:.2f} {unit_label(unit)}",
            elapsed_text=format_duration(metrics.elapsed_s),
            pace_text=format_pace_for_unit(metrics.pace, unit),
            unit=unit,
            pace_feedback=self._last_pace_text,
            checkpoint_feedback=self._last_checkpoint_text,
            warnings=tuple(self._warnings),
        )

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _deliver(self, event: FeedbackEvent) -> None:
        """Speak *event*, cutting off anything in flight.  Speech failures are skipped."""
        s = self._settings
        pitch = CHECKPOINT_PITCH if event.kind is FeedbackKind.CHECKPOINT else s.speech_pitch
        options = SpeechOptions(
            rate=s.speech_rate, pitch=pitch, volume=s.speech_volume, language=s.speech_language
        )
        if event.kind is FeedbackKind.CHECKPOINT:
            self._last_checkpoint_text = event.text
        else:
            self._last_pace_text = event.text
        _logger.info("Feedback (%s): %s", event.kind.value, event.text)
        try:
            self._tts.stop()
            self._tts.speak(event.text, options)
        except Exception as exc:
            _logger.warning("Speech output failed: %s", exc)

    def _on_finished(self, run: CompletedRun) -> None:
        self._stream.close()
        self._positions.stop_stream()
        self._positions.unregister_callback(self._stream.post_sample)
        if self._history is None:
            return
        try:
            self._history.append(run)
        except sqlite3.Error as exc:
            _logger.warning("Could not save run %s to history: %s", run.id, exc)

    def _publish(self) -> None:
        if not self._listeners:
            return
        snap = self.snapshot()
        for listener in self._listeners:
            try:
                listener(snap)
            except Exception as exc:
                _logger.warning("Snapshot listener %r failed: %s", listener, exc)
