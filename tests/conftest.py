"""Shared helpers: synthetic tracks that move due north along a meridian.

Along a meridian the haversine distance is exactly ``R * dlat``, so a track
built with :func:`walk` covers ``step_m`` metres per sample.
"""

from __future__ import annotations

import math

from pacemaker.tracking.models import PositionSample

T0 = 1_700_000_000_000  # ms
METRE_DEG = math.degrees(1 / 6_371_000)
BASE_LAT = 47.0
BASE_LON = 8.0


def make_sample(
    north_m: float = 0.0,
    t_s: float = 0.0,
    accuracy: float | None = 5.0,
) -> PositionSample:
    return PositionSample(
        latitude=BASE_LAT + north_m * METRE_DEG,
        longitude=BASE_LON,
        timestamp=T0 + int(round(t_s * 1000)),
        accuracy=accuracy,
    )


def walk(
    n: int,
    step_m: float,
    dt_s: float,
    start_m: float = 0.0,
    start_s: float = 0.0,
) -> list[PositionSample]:
    """Return *n* samples, *step_m* metres and *dt_s* seconds apart."""
    return [make_sample(start_m + i * step_m, start_s + i * dt_s) for i in range(n)]


class FakeClock:
    """Wall clock in ms that tests move by hand."""

    def __init__(self, start_ms: int = T0) -> None:
        self.now_ms = start_ms

    def __call__(self) -> int:
        return self.now_ms

    def at(self, t_s: float) -> int:
        self.now_ms = T0 + int(round(t_s * 1000))
        return self.now_ms
