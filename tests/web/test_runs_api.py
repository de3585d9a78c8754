"""/api/runs — list, fetch, delete and clear."""

from __future__ import annotations

from pacemaker.settings import RunSettings
from pacemaker.storage.store import SettingsStore
from tests.web.conftest import make_run, seed_runs


def test_list_empty(client, db_path):
    resp = client.get("/api/runs", params={"db": db_path})
    assert resp.status_code == 200
    assert resp.json() == {"unit": "km", "runs": []}


def test_list_newest_first_with_display_text(client, db_path):
    seed_runs(db_path, make_run("old"), make_run("new", actual_time_s=3725, average_pace=3725 / 60 / 5))
    data = client.get("/api/runs", params={"db": db_path}).json()
    assert [r["id"] for r in data["runs"]] == ["new", "old"]
    assert data["runs"][0]["elapsed_text"] == "1:02:05"
    assert data["runs"][1]["elapsed_text"] == "25:00"
    assert data["runs"][1]["pace_text"] == "5:00"


def test_list_uses_preferred_unit(client, db_path):
    store = SettingsStore(db_path)
    store.set(RunSettings(distance_unit="miles"))
    store.close()
    seed_runs(db_path, make_run())
    data = client.get("/api/runs", params={"db": db_path}).json()
    assert data["unit"] == "miles"
    assert data["runs"][0]["pace_text"] == "8:03"
    assert data["runs"][0]["actual_distance_km"] == 5.0


def test_get_run(client, db_path):
    seed_runs(db_path, make_run("r1"))
    resp = client.get("/api/runs/r1", params={"db": db_path})
    assert resp.status_code == 200
    assert resp.json()["completed_goal"] is True


def test_get_missing_run_404(client, db_path):
    resp = client.get("/api/runs/nope", params={"db": db_path})
    assert resp.status_code == 404


def test_delete_run(client, db_path):
    seed_runs(db_path, make_run("a"), make_run("b"))
    resp = client.delete("/api/runs/a", params={"db": db_path})
    assert resp.status_code == 204
    ids = [r["id"] for r in client.get("/api/runs", params={"db": db_path}).json()["runs"]]
    assert ids == ["b"]


def test_delete_missing_run_404(client, db_path):
    resp = client.delete("/api/runs/a", params={"db": db_path})
    assert resp.status_code == 404


def test_clear_runs(client, db_path):
    seed_runs(db_path, make_run("a"), make_run("b"), make_run("c"))
    resp = client.delete("/api/runs", params={"db": db_path})
    assert resp.status_code == 200
    assert resp.json() == {"removed": 3}
    assert client.get("/api/runs", params={"db": db_path}).json()["runs"] == []
