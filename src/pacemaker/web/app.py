"""FastAPI Web application — run history review and settings."""

from __future__ import annotations

import os

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException
from fastapi.responses import RedirectResponse

from pacemaker import __version__
from pacemaker.geo.distance import format_duration
from pacemaker.geo.units import format_pace_for_unit
from pacemaker.settings import RunSettings
from pacemaker.storage.store import RunHistoryStorage, SettingsStore
from pacemaker.tracking.models import GoalError, RunGoal
from pacemaker.web.schemas import (
    ClearResponse,
    GoalRequest,
    GoalResponse,
    HealthResponse,
    RunRecord,
    RunsResponse,
)

load_dotenv()  # loads .env from project root; must run before env vars are consumed

app = FastAPI(title="Pacemaker", version=__version__)

_DEFAULT_DB = os.environ.get("PACEMAKER_DB", "pacemaker.db")


def _history(db_path: str | None = None) -> RunHistoryStorage:
    return RunHistoryStorage(db_path or _DEFAULT_DB)


def _settings_store(db_path: str | None = None) -> SettingsStore:
    return SettingsStore(db_path or _DEFAULT_DB)


def _unit(db: str | None) -> str:
    store = _settings_store(db)
    try:
        return store.get().distance_unit
    finally:
        store.close()


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@app.get("/")
def index():
    return RedirectResponse(url="/api/runs")


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(status="ok", version=__version__)


@app.get("/api/runs", response_model=RunsResponse)
def list_runs(db: str | None = None) -> RunsResponse:
    """Return the run history, newest first."""
    unit = _unit(db)
    storage = _history(db)
    try:
        runs = storage.list()
    finally:
        storage.close()
    return RunsResponse(
        unit=unit,
        runs=[
            RunRecord.from_run(
                r, format_duration(r.actual_time_s), format_pace_for_unit(r.average_pace, unit)
            )
            for r in runs
        ],
    )


@app.get("/api/runs/{run_id}", response_model=RunRecord)
def get_run(run_id: str, db: str | None = None) -> RunRecord:
    unit = _unit(db)
    storage = _history(db)
    try:
        run = storage.get(run_id)
    finally:
        storage.close()
    if run is None:
        raise HTTPException(status_code=404, detail="Run not found")
    return RunRecord.from_run(
        run, format_duration(run.actual_time_s), format_pace_for_unit(run.average_pace, unit)
    )


@app.delete("/api/runs/{run_id}", status_code=204)
def delete_run(run_id: str, db: str | None = None) -> None:
    storage = _history(db)
    try:
        removed = storage.remove(run_id)
    finally:
        storage.close()
    if not removed:
        raise HTTPException(status_code=404, detail="Run not found")


@app.delete("/api/runs", response_model=ClearResponse)
def clear_runs(db: str | None = None) -> ClearResponse:
    storage = _history(db)
    try:
        removed = storage.clear_all()
    finally:
        storage.close()
    return ClearResponse(removed=removed)


@app.get("/api/settings", response_model=RunSettings)
def get_settings(db: str | None = None) -> RunSettings:
    store = _settings_store(db)
    try:
        return store.get()
    finally:
        store.close()


@app.put("/api/settings", response_model=RunSettings)
def put_settings(settings: RunSettings, db: str | None = None) -> RunSettings:
    """Replace the stored settings.  Out-of-range values are rejected with 422."""
    store = _settings_store(db)
    try:
        store.set(settings)
    finally:
        store.close()
    return settings


@app.post("/api/goal", response_model=GoalResponse)
def validate_goal(req: GoalRequest) -> GoalResponse:
    """Validate a run goal and return its target pace."""
    try:
        goal = RunGoal.parse(req.distance, req.time_min, unit=req.unit)
    except GoalError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return GoalResponse(
        distance_km=goal.distance_km,
        time_min=goal.time_min,
        target_pace=goal.target_pace,
        target_pace_text=format_pace_for_unit(goal.target_pace, req.unit),
    )
