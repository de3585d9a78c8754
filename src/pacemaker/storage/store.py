"""SQLite persistence for completed runs and run settings.

Both stores keep opaque JSON blobs: one row per run in ``runs`` and one
row per key in ``settings``.  They can share a single database file.
"""

from __future__ import annotations

import json
import logging
import sqlite3

from pydantic import ValidationError

from pacemaker.settings import DEFAULT_SETTINGS, RunSettings
from pacemaker.tracking.models import CompletedRun

_logger = logging.getLogger(__name__)

SETTINGS_KEY = "run_settings"

_DDL = """
PRAGMA journal_mode = WAL;
PRAGMA synchronous  = NORMAL;

CREATE TABLE IF NOT EXISTS runs (
    seq      INTEGER PRIMARY KEY,
    id       TEXT    NOT NULL UNIQUE,
    date     TEXT    NOT NULL,
    run_json TEXT    NOT NULL
);

CREATE TABLE IF NOT EXISTS settings (
    key   TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""


def _connect(db_path: str) -> sqlite3.Connection:
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    try:
        for stmt in _DDL.strip().split(";"):
            stmt = stmt.strip()
            if stmt:
                conn.execute(stmt)
        conn.commit()
    except sqlite3.Error:
        conn.close()
        raise
    return conn


class RunHistoryStorage:
    """Append-only history of completed runs, listed newest first.

    Parameters
    ----------
    db_path:
        Path to the SQLite file.  Pass ``":memory:"`` for in-process testing.
    """

    def __init__(self, db_path: str = "pacemaker.db") -> None:
        self._conn = _connect(db_path)

    def append(self, run: CompletedRun) -> None:
        """Persist *run*.  Raises ``sqlite3.IntegrityError`` on a duplicate id."""
        self._conn.execute(
            "INSERT INTO runs (id, date, run_json) VALUES (?, ?, ?)",
            (run.id, run.date, json.dumps(run.to_dict())),
        )
        self._conn.commit()

    def list(self) -> list[CompletedRun]:
        """Return every stored run, most recently appended first."""
        rows = self._conn.execute("SELECT run_json FROM runs ORDER BY seq DESC").fetchall()
        return [CompletedRun.from_dict(json.loads(r["run_json"])) for r in rows]

    def get(self, run_id: str) -> CompletedRun | None:
        row = self._conn.execute(
            "SELECT run_json FROM runs WHERE id = ?", (run_id,)
        ).fetchone()
        return CompletedRun.from_dict(json.loads(row["run_json"])) if row else None

    def remove(self, run_id: str) -> bool:
        """Delete one run; return True if it existed."""
        cursor = self._conn.execute("DELETE FROM runs WHERE id = ?", (run_id,))
        self._conn.commit()
        return cursor.rowcount > 0

    def clear_all(self) -> int:
        """Delete every run; return how many were removed."""
        cursor = self._conn.execute("DELETE FROM runs")
        self._conn.commit()
        return cursor.rowcount

    def close(self) -> None:
        self._conn.close()


class SettingsStore:
    """Key-value store for :class:`RunSettings`.

    :meth:`get` never raises on a bad database or bad stored data: the
    failure is logged and the defaults are returned.  The connection is
    opened on first use.
    """

    def __init__(self, db_path: str = "pacemaker.db") -> None:
        self._db_path = db_path
        self._conn: sqlite3.Connection | None = None

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = _connect(self._db_path)
        return self._conn

    def get(self) -> RunSettings:
        """Return stored settings merged over the defaults."""
        try:
            row = self._connection().execute(
                "SELECT value FROM settings WHERE key = ?", (SETTINGS_KEY,)
            ).fetchone()
        except sqlite3.Error as exc:
            _logger.warning("Settings read failed, using defaults: %s", exc)
            return DEFAULT_SETTINGS
        if row is None:
            return DEFAULT_SETTINGS
        try:
            stored = json.loads(row["value"])
            return RunSettings.model_validate({**DEFAULT_SETTINGS.model_dump(), **stored})
        except (json.JSONDecodeError, TypeError, ValidationError) as exc:
            _logger.warning("Stored settings are invalid, using defaults: %s", exc)
            return DEFAULT_SETTINGS

    def set(self, settings: RunSettings) -> None:
        """Persist *settings*.  Raises ``sqlite3.Error`` if the database is unusable."""
        conn = self._connection()
        conn.execute(
            "INSERT OR REPLACE INTO settings (key, value) VALUES (?, ?)",
            (SETTINGS_KEY, settings.model_dump_json()),
        )
        conn.commit()

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None
