"""User-tunable run settings (feedback cadence, units, voice)."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

FeedbackTriggerMode = Literal["time", "distance"]
PacemakerMode = Literal["Neutral", "Motivating", "Goggins"]


class RunSettings(BaseModel):
    """Settings read once at session start.

    Values outside the documented bounds raise ``pydantic.ValidationError``.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    feedback_trigger_mode: FeedbackTriggerMode = "time"
    feedback_time_interval: float = Field(default=30.0, ge=5.0)
    """Seconds between pace announcements in time mode."""

    feedback_distance_interval: float = Field(default=0.5, ge=0.1)
    """Kilometres between pace announcements in distance mode."""

    checkpoint_interval: float = Field(default=1.0, ge=0.1)
    """Kilometres between checkpoint announcements."""

    auto_stop_on_goal: bool = True
    distance_unit: Literal["km", "miles"] = "km"
    pacemaker_mode: PacemakerMode = "Neutral"

    speech_rate: float = Field(default=0.9, gt=0.0, le=2.0)
    speech_pitch: float = Field(default=1.2, gt=0.0, le=2.0)
    speech_volume: float = Field(default=1.0, ge=0.0, le=1.0)
    speech_language: str = "en-US"


DEFAULT_SETTINGS = RunSettings()
