"""Tests for RunHistoryStorage and SettingsStore."""

from __future__ import annotations

import sqlite3

import pytest

from pacemaker.settings import DEFAULT_SETTINGS, RunSettings
from pacemaker.storage.store import SETTINGS_KEY, RunHistoryStorage, SettingsStore
from pacemaker.tracking.models import CompletedRun


def make_run(run_id: str = "1700000000000-abc123", **overrides) -> CompletedRun:
    defaults = dict(
        id=run_id,
        date="2023-11-14T22:13:20+00:00",
        target_distance_km=5.0,
        target_time_min=25.0,
        actual_distance_km=5.02,
        actual_time_s=1490,
        average_pace=1490 / 60 / 5.02,
        completed_goal=True,
    )
    defaults.update(overrides)
    return CompletedRun(**defaults)


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "test_pacemaker.db")


@pytest.fixture
def history(db_path):
    s = RunHistoryStorage(db_path)
    yield s
    s.close()


@pytest.fixture
def settings_store(db_path):
    s = SettingsStore(db_path)
    yield s
    s.close()


# ---------------------------------------------------------------------------
# RunHistoryStorage
# ---------------------------------------------------------------------------


def test_empty_history(history):
    assert history.list() == []
    assert history.get("missing") is None


def test_append_and_get_round_trip(history):
    run = make_run()
    history.append(run)
    assert history.get(run.id) == run


def test_list_newest_first(history):
    for i in range(3):
        history.append(make_run(f"run-{i}"))
    assert [r.id for r in history.list()] == ["run-2", "run-1", "run-0"]


def test_duplicate_id_rejected(history):
    history.append(make_run("dup"))
    with pytest.raises(sqlite3.IntegrityError):
        history.append(make_run("dup"))
    assert len(history.list()) == 1


def test_none_pace_survives_storage(history):
    history.append(make_run("still", actual_distance_km=0.0, average_pace=None, completed_goal=False))
    assert history.get("still").average_pace is None


def test_remove(history):
    history.append(make_run("a"))
    history.append(make_run("b"))
    assert history.remove("a") is True
    assert history.remove("a") is False
    assert [r.id for r in history.list()] == ["b"]


def test_clear_all_returns_count(history):
    for i in range(4):
        history.append(make_run(f"run-{i}"))
    assert history.clear_all() == 4
    assert history.list() == []


def test_history_persists_across_connections(db_path):
    s = RunHistoryStorage(db_path)
    s.append(make_run("kept"))
    s.close()
    s = RunHistoryStorage(db_path)
    try:
        assert [r.id for r in s.list()] == ["kept"]
    finally:
        s.close()


def test_in_memory_database():
    s = RunHistoryStorage(":memory:")
    s.append(make_run())
    assert len(s.list()) == 1
    s.close()


# ---------------------------------------------------------------------------
# SettingsStore
# ---------------------------------------------------------------------------


def _store_raw(db_path: str, blob: str) -> None:
    RunHistoryStorage(db_path).close()  # creates the schema
    conn = sqlite3.connect(db_path)
    conn.execute(
        "INSERT OR REPLACE INTO settings (key, value) VALUES (?, ?)", (SETTINGS_KEY, blob)
    )
    conn.commit()
    conn.close()


def test_settings_default_when_empty(settings_store):
    assert settings_store.get() == DEFAULT_SETTINGS


def test_settings_round_trip(settings_store):
    custom = RunSettings(distance_unit="miles", pacemaker_mode="Goggins", feedback_time_interval=60)
    settings_store.set(custom)
    assert settings_store.get() == custom


def test_settings_partial_blob_merges_defaults(settings_store, db_path):
    _store_raw(db_path, '{"distance_unit": "miles"}')
    got = settings_store.get()
    assert got.distance_unit == "miles"
    assert got.feedback_time_interval == DEFAULT_SETTINGS.feedback_time_interval


@pytest.mark.parametrize("blob", ["not json", "[1, 2]", '{"feedback_time_interval": 1}'])
def test_settings_bad_blob_falls_back_to_defaults(settings_store, db_path, blob):
    _store_raw(db_path, blob)
    assert settings_store.get() == DEFAULT_SETTINGS


def test_history_and_settings_share_a_file(history, settings_store):
    history.append(make_run())
    settings_store.set(RunSettings(distance_unit="miles"))
    assert len(history.list()) == 1
    assert settings_store.get().distance_unit == "miles"


def test_settings_unreadable_database_falls_back_to_defaults(tmp_path):
    path = tmp_path / "corrupt.db"
    path.write_bytes(b"this is not a sqlite database" * 20)
    store = SettingsStore(str(path))
    try:
        assert store.get() == DEFAULT_SETTINGS
        with pytest.raises(sqlite3.DatabaseError):
            store.set(RunSettings(distance_unit="miles"))
    finally:
        store.close()
    store.close()
