"""Kilometre/mile conversion helpers."""

from __future__ import annotations

import pytest

from pacemaker.geo.units import (
    distance_for_display,
    distance_to_km,
    format_pace_for_unit,
    km_to_miles,
    miles_to_km,
    unit_label,
    unit_label_plural,
)


def test_km_to_miles():
    assert km_to_miles(10.0) == pytest.approx(6.21371)


def test_miles_to_km():
    assert miles_to_km(1.0) == pytest.approx(1.60934)


def test_display_is_identity_in_km():
    assert distance_for_display(3.2, "km") == 3.2
    assert distance_to_km(3.2, "km") == 3.2


def test_display_converts_in_miles():
    assert distance_for_display(1.60934, "miles") == pytest.approx(1.0, rel=1e-4)
    assert distance_to_km(26.2, "miles") == pytest.approx(42.16, abs=0.01)


def test_pace_for_miles_is_slower_number():
    # 5:00 /km ≈ 8:03 /mile
    assert format_pace_for_unit(5.0, "km") == "5:00"
    assert format_pace_for_unit(5.0, "miles") == "8:03"


def test_pace_for_unit_placeholder():
    assert format_pace_for_unit(None, "miles") == "--:--"


def test_labels():
    assert unit_label("km") == "km"
    assert unit_label("miles") == "mi"
    assert unit_label_plural("km") == "kilometers"
    assert unit_label_plural("miles") == "miles"
