"""Pydantic request/response schemas for the Web API."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel

from pacemaker.tracking.models import CompletedRun


class HealthResponse(BaseModel):
    status: str
    version: str


class RunRecord(BaseModel):
    id: str
    date: str
    target_distance_km: float
    target_time_min: float
    actual_distance_km: float
    actual_time_s: int
    average_pace: float | None
    completed_goal: bool
    elapsed_text: str
    pace_text: str

    @classmethod
    def from_run(cls, run: CompletedRun, elapsed_text: str, pace_text: str) -> RunRecord:
        return cls(**run.to_dict(), elapsed_text=elapsed_text, pace_text=pace_text)


class RunsResponse(BaseModel):
    unit: str
    runs: list[RunRecord]


class ClearResponse(BaseModel):
    removed: int


class GoalRequest(BaseModel):
    distance: float | str
    time_min: float | str
    unit: Literal["km", "miles"] = "km"


class GoalResponse(BaseModel):
    distance_km: float
    time_min: float
    target_pace: float
    target_pace_text: str
