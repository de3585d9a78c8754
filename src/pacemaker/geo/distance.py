"""Haversine distance and pace arithmetic — pure functions, no state."""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import Protocol

EARTH_RADIUS_KM = 6371.0

PACE_PLACEHOLDER = "--:--"


class Coordinate(Protocol):
    """Anything with ``latitude`` / ``longitude`` in degrees."""

    latitude: float
    longitude: float


def distance(a: Coordinate, b: Coordinate) -> float:
    """Return the great-circle distance between *a* and *b* in kilometres.

    Uses the haversine formula on a spherical Earth of radius
    :data:`EARTH_RADIUS_KM`.  Symmetric, zero for identical points.
    """
    lat1 = math.radians(a.latitude)
    lat2 = math.radians(b.latitude)
    d_lat = lat2 - lat1
    d_lon = math.radians(b.longitude - a.longitude)

    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
    )
    # Float error can push h a hair outside [0, 1] for antipodal points
    h = min(1.0, max(0.0, h))
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def path_length(track: Sequence[Coordinate]) -> float:
    """Return the summed distance over consecutive pairs of *track* (km).

    Tracks with fewer than two points have length 0.
    """
    total = 0.0
    for prev, cur in zip(track, track[1:]):
        total += distance(prev, cur)
    return total


def pace(distance_km: float, elapsed_seconds: float) -> float | None:
    """Return average pace in minutes per km, or None until both operands are > 0."""
    if distance_km <= 0 or elapsed_seconds <= 0:
        return None
    return (elapsed_seconds / 60.0) / distance_km


def format_duration(seconds: float) -> str:
    """Render *seconds* as ``M:SS`` (under one hour) or ``H:MM:SS``."""
    total = max(0, math.floor(seconds))
    hours, rem = divmod(total, 3600)
    minutes, secs = divmod(rem, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def format_pace(pace_min_per_km: float | None) -> str:
    """Render a pace as ``M:SS``; an undefined pace renders as ``--:--``."""
    if pace_min_per_km is None or not math.isfinite(pace_min_per_km):
        return PACE_PLACEHOLDER
    minutes = math.floor(pace_min_per_km)
    secs = round((pace_min_per_km - minutes) * 60)
    if secs == 60:
        minutes += 1
        secs = 0
    return f"{minutes}:{secs:02d}"
