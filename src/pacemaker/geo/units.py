"""Kilometre/mile conversion for display and goal entry."""

from __future__ import annotations

from typing import Literal

from pacemaker.geo.distance import format_pace

DistanceUnit = Literal["km", "miles"]

KM_TO_MILES = 0.621371
MILES_TO_KM = 1.60934


def km_to_miles(km: float) -> float:
    return km * KM_TO_MILES


def miles_to_km(miles: float) -> float:
    return miles * MILES_TO_KM


def distance_for_display(km: float, unit: DistanceUnit) -> float:
    """Convert an internal km value to the display unit."""
    return km_to_miles(km) if unit == "miles" else km


def distance_to_km(value: float, unit: DistanceUnit) -> float:
    """Convert a user-entered value in *unit* back to km."""
    return miles_to_km(value) if unit == "miles" else value


def format_pace_for_unit(pace_min_per_km: float | None, unit: DistanceUnit) -> str:
    """Format a min/km pace as min/km or min/mile depending on *unit*."""
    if pace_min_per_km is not None and unit == "miles":
        return format_pace(pace_min_per_km * MILES_TO_KM)
    return format_pace(pace_min_per_km)


def unit_label(unit: DistanceUnit) -> str:
    return "mi" if unit == "miles" else "km"


def unit_label_plural(unit: DistanceUnit) -> str:
    return "miles" if unit == "miles" else "kilometers"
