"""SQLite persistence for run history and settings."""

from pacemaker.storage.store import RunHistoryStorage, SettingsStore

__all__ = ["RunHistoryStorage", "SettingsStore"]
