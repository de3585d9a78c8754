"""Pace feedback policy — decides when to announce pace status and distance checkpoints."""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from enum import Enum

from pacemaker.geo.distance import format_duration
from pacemaker.geo.units import distance_for_display, unit_label_plural
from pacemaker.pacing.phrases import PHRASES, PaceStatus, pick_phrase
from pacemaker.settings import DEFAULT_SETTINGS, RunSettings
from pacemaker.tracking.models import FeedbackCursor, RunGoal, RunMetrics

ON_PACE_TOLERANCE = 0.1  # min/km


class FeedbackKind(str, Enum):
    PACE = "pace"
    CHECKPOINT = "checkpoint"


@dataclass(frozen=True)
class FeedbackEvent:
    """One announcement to be spoken and displayed."""

    kind: FeedbackKind
    text: str
    status: PaceStatus | None = None
    """Pace classification (pace events only)."""

    milestone_km: float | None = None
    """Checkpoint distance in km (checkpoint events only)."""


def classify_pace(current: float, target: float, tolerance: float = ON_PACE_TOLERANCE) -> PaceStatus:
    """Compare two paces in min/km.  A higher number is slower."""
    diff = current - target
    if abs(diff) < tolerance:
        return PaceStatus.ON_PACE
    return PaceStatus.BEHIND if diff > 0 else PaceStatus.AHEAD


def reached_checkpoint(distance_km: float, interval_km: float) -> float:
    """Return the largest multiple of *interval_km* not exceeding *distance_km*."""
    # round() absorbs float error such as 0.3 / 0.1 == 2.9999999999999996
    steps = math.floor(round(distance_km / interval_km, 9))
    return round(steps * interval_km, 6)


class PaceFeedbackPolicy:
    """Evaluates both feedback kinds against a session's :class:`FeedbackCursor`.

    Each kind fires at most once per threshold crossing; the cursor is
    advanced to the crossed value when it fires.

    Parameters
    ----------
    settings:
        Trigger mode, intervals, unit and pacemaker mode.
    rng:
        Random source for phrase selection — inject a seeded
        ``random.Random`` for deterministic tests.
    phrases:
        Phrase table, mode → status → phrases.
    """

    def __init__(
        self,
        settings: RunSettings | None = None,
        rng: random.Random | None = None,
        phrases: dict[str, dict[PaceStatus, tuple[str, ...]]] = PHRASES,
    ) -> None:
        self._settings = settings or DEFAULT_SETTINGS
        self._rng = rng or random.Random()
        self._phrases = phrases

    def evaluate(
        self,
        metrics: RunMetrics,
        goal: RunGoal,
        cursor: FeedbackCursor,
        force_pace: bool = False,
    ) -> list[FeedbackEvent]:
        """Return the feedback events due for *metrics*, advancing *cursor*.

        *force_pace* emits a pace event even if the interval has not elapsed
        (used right after a resume).  No pace event is produced while the
        pace is still undefined.
        """
        events: list[FeedbackEvent] = []

        pace_event = self._check_pace(metrics, goal, cursor, force_pace)
        if pace_event is not None:
            events.append(pace_event)

        checkpoint_event = self._check_checkpoint(metrics, cursor)
        if checkpoint_event is not None:
            events.append(checkpoint_event)

        return events

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _pace_due(self, metrics: RunMetrics, cursor: FeedbackCursor) -> bool:
        if self._settings.feedback_trigger_mode == "distance":
            gap = metrics.distance_km - cursor.last_distance_km
            # Same float guard as checkpoints: 0.5 km must count as 0.5 km
            return round(gap, 9) >= self._settings.feedback_distance_interval
        return metrics.elapsed_s - cursor.last_time_s >= self._settings.feedback_time_interval

    def _check_pace(
        self,
        metrics: RunMetrics,
        goal: RunGoal,
        cursor: FeedbackCursor,
        force: bool,
    ) -> FeedbackEvent | None:
        current = metrics.pace
        if current is None:
            return None
        if not force and not self._pace_due(metrics, cursor):
            return None

        if self._settings.feedback_trigger_mode == "distance":
            cursor.last_distance_km = metrics.distance_km
        else:
            cursor.last_time_s = metrics.elapsed_s

        status = classify_pace(current, goal.target_pace)
        text = pick_phrase(self._settings.pacemaker_mode, status, self._rng, self._phrases)
        return FeedbackEvent(kind=FeedbackKind.PACE, text=text, status=status)

    def _check_checkpoint(
        self, metrics: RunMetrics, cursor: FeedbackCursor
    ) -> FeedbackEvent | None:
        reached = reached_checkpoint(metrics.distance_km, self._settings.checkpoint_interval)
        if reached <= cursor.last_checkpoint_km:
            return None

        cursor.last_checkpoint_km = reached
        unit = self._settings.distance_unit
        shown = distance_for_display(reached, unit)
        text = (
            f"{shown:.1f} {unit_label_plural(unit)} completed! "
            f"Time elapsed: {format_duration(metrics.elapsed_s)}"
        )
        return FeedbackEvent(kind=FeedbackKind.CHECKPOINT, text=text, milestone_km=reached)
