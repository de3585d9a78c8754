"""HTTP API for run history and settings."""
