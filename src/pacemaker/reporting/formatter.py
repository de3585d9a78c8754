"""Markdown formatter for run history."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from pacemaker.geo.distance import format_duration
from pacemaker.geo.units import (
    DistanceUnit,
    distance_for_display,
    format_pace_for_unit,
    unit_label,
)
from pacemaker.tracking.models import CompletedRun


def _format_date(iso: str) -> str:
    try:
        return datetime.fromisoformat(iso).strftime("%b %d, %Y %H:%M")
    except ValueError:
        return iso


class HistoryFormatter:
    """Format completed runs as a Markdown table in the preferred unit."""

    def __init__(self, unit: DistanceUnit = "km") -> None:
        self._unit = unit

    def format_row(self, run: CompletedRun) -> str:
        unit = self._unit
        dist = distance_for_display(run.actual_distance_km, unit)
        target = distance_for_display(run.target_distance_km, unit)
        goal = "✓" if run.completed_goal else ""
        return (
            f"| {_format_date(run.date)} "
            f"| {dist:.2f} / {target:.2f} "
            f"| {format_duration(run.actual_time_s)} "
            f"| {format_pace_for_unit(run.average_pace, unit)} "
            f"| {goal} |"
        )

    def format(self, runs: list[CompletedRun]) -> str:
        """Return the full Markdown history as a string."""
        label = unit_label(self._unit)
        lines = ["# Run history", ""]
        if not runs:
            lines.append("No runs recorded yet.")
            return "\n".join(lines) + "\n"

        reached = sum(1 for r in runs if r.completed_goal)
        total_km = sum(r.actual_distance_km for r in runs)
        lines += [
            f"**Runs**: {len(runs)}  ",
            f"**Goals reached**: {reached}  ",
            f"**Total distance**: {distance_for_display(total_km, self._unit):.2f} {label}",
            "",
            f"| Date | Distance ({label}) | Time | Pace (/{label}) | Goal |",
            "|------|------|------|------|------|",
        ]
        lines += [self.format_row(r) for r in runs]
        return "\n".join(lines) + "\n"

    def write(self, runs: list[CompletedRun], path: str) -> None:
        """Write the formatted history to *path* (UTF-8)."""
        Path(path).write_text(self.format(runs), encoding="utf-8")
