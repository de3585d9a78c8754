"""Geodesic distance, pace arithmetic and display formatting.

Public API
----------
distance            - haversine distance between two coordinates (km)
path_length         - cumulative distance along an ordered track (km)
pace                - average pace in min/km, or None
format_duration     - seconds → "M:SS" / "H:MM:SS"
format_pace         - min/km → "M:SS" / "--:--"
"""

from pacemaker.geo.distance import (
    EARTH_RADIUS_KM,
    distance,
    format_duration,
    format_pace,
    pace,
    path_length,
)
from pacemaker.geo.units import (
    DistanceUnit,
    distance_for_display,
    distance_to_km,
    format_pace_for_unit,
    km_to_miles,
    miles_to_km,
    unit_label,
    unit_label_plural,
)

__all__ = [
    "EARTH_RADIUS_KM",
    "DistanceUnit",
    "distance",
    "distance_for_display",
    "distance_to_km",
    "format_duration",
    "format_pace",
    "format_pace_for_unit",
    "km_to_miles",
    "miles_to_km",
    "pace",
    "path_length",
    "unit_label",
    "unit_label_plural",
]
