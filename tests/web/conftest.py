"""Shared fixtures for web tests."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from pacemaker.storage.store import RunHistoryStorage
from pacemaker.tracking.models import CompletedRun
from pacemaker.web.app import app


@pytest.fixture
def client():
    """FastAPI test client."""
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "web.db")


def make_run(run_id: str = "1700000000000-abc123", **overrides) -> CompletedRun:
    defaults = dict(
        id=run_id,
        date="2023-11-14T22:13:20+00:00",
        target_distance_km=5.0,
        target_time_min=25.0,
        actual_distance_km=5.0,
        actual_time_s=1500,
        average_pace=5.0,
        completed_goal=True,
    )
    defaults.update(overrides)
    return CompletedRun(**defaults)


def seed_runs(db_path: str, *runs: CompletedRun) -> None:
    storage = RunHistoryStorage(db_path)
    try:
        for run in runs:
            storage.append(run)
    finally:
        storage.close()
