"""Run tracking data models."""

from __future__ import annotations

import math
import random
import string
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum

from pacemaker.geo.distance import pace as compute_pace
from pacemaker.geo.units import DistanceUnit, distance_to_km


class GoalError(ValueError):
    """Raised when a target distance or time is missing, non-numeric or not positive."""


@dataclass(frozen=True)
class PositionSample:
    """A single raw position fix from the positioning service."""

    latitude: float
    """Degrees, [-90, 90]."""

    longitude: float
    """Degrees, [-180, 180]."""

    timestamp: int
    """Milliseconds since the Unix epoch."""

    accuracy: float | None = None
    """Estimated error radius in metres, or None when the platform does not report it."""

    def __post_init__(self) -> None:
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"latitude out of range: {self.latitude}")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"longitude out of range: {self.longitude}")


def _positive(value: object, name: str) -> float:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise GoalError(f"Missing target {name}")
    try:
        num = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise GoalError(f"Target {name} must be a number, got {value!r}") from exc
    if not math.isfinite(num) or num <= 0:
        raise GoalError(f"Target {name} must be greater than zero, got {value!r}")
    return num


@dataclass(frozen=True)
class RunGoal:
    """Target distance and time for one run."""

    distance_km: float
    time_min: float

    def __post_init__(self) -> None:
        _positive(self.distance_km, "distance")
        _positive(self.time_min, "time")

    @property
    def target_pace(self) -> float:
        """Target pace in minutes per km."""
        return self.time_min / self.distance_km

    @classmethod
    def parse(cls, distance: object, time_min: object, unit: DistanceUnit = "km") -> RunGoal:
        """Build a goal from user input (strings or numbers).

        *distance* is interpreted in *unit* and converted to km.

        Raises
        ------
        GoalError
            If either value is missing, non-numeric, non-finite, zero or negative.
        """
        dist = _positive(distance, "distance")
        minutes = _positive(time_min, "time")
        return cls(distance_km=distance_to_km(dist, unit), time_min=minutes)


class RunStatus(str, Enum):
    WAITING = "waiting"
    RUNNING = "running"
    FINISHED = "finished"


@dataclass(frozen=True)
class RunMetrics:
    """Live metrics, recomputed on every accepted sample or timer tick."""

    distance_km: float = 0.0
    elapsed_s: int = 0

    @property
    def pace(self) -> float | None:
        """Average pace in min/km, or None until distance and elapsed are both > 0."""
        return compute_pace(self.distance_km, self.elapsed_s)


@dataclass
class FeedbackCursor:
    """Threshold values at which each feedback kind last fired.

    Owned by a single session and advanced only by the feedback policy.
    """

    last_time_s: float = 0.0
    last_distance_km: float = 0.0
    last_checkpoint_km: float = 0.0


def generate_run_id(now_ms: int | None = None, rng: random.Random | None = None) -> str:
    """Return an id of the form ``<epoch ms>-<6 base36 chars>``."""
    if now_ms is None:
        now_ms = int(datetime.now(timezone.utc).timestamp() * 1000)
    rng = rng or random.Random()
    alphabet = string.digits + string.ascii_lowercase
    suffix = "".join(rng.choice(alphabet) for _ in range(6))
    return f"{now_ms}-{suffix}"


def iso_from_ms(timestamp_ms: int) -> str:
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc).isoformat()


@dataclass(frozen=True)
class CompletedRun:
    """History record produced exactly once per finished session."""

    id: str
    date: str
    """UTC ISO-8601 timestamp of the session start."""

    target_distance_km: float
    target_time_min: float
    actual_distance_km: float
    actual_time_s: int
    average_pace: float | None
    """Minutes per km, or None when no distance was covered."""

    completed_goal: bool

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> CompletedRun:
        return cls(
            id=str(data["id"]),
            date=str(data["date"]),
            target_distance_km=float(data["target_distance_km"]),
            target_time_min=float(data["target_time_min"]),
            actual_distance_km=float(data["actual_distance_km"]),
            actual_time_s=int(data["actual_time_s"]),
            average_pace=(
                None if data.get("average_pace") is None else float(data["average_pace"])
            ),
            completed_goal=bool(data["completed_goal"]),
        )


@dataclass(frozen=True)
class RunSnapshot:
    """Display snapshot emitted after every handled event."""

    status: RunStatus
    goal: RunGoal
    metrics: RunMetrics
    progress_pct: float
    """``distance / target * 100``, capped at 100."""

    distance_text: str
    elapsed_text: str
    pace_text: str
    unit: DistanceUnit = "km"
    pace_feedback: str | None = None
    checkpoint_feedback: str | None = None
    warnings: tuple[str, ...] = field(default_factory=tuple)
