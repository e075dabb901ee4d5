"""Tests for map calculations."""

import pytest

from tripweave.api.models import Place
from tripweave.api.services.map_service import MapService


def _place(lat=None, lng=None):
    return Place(name="p", category="sight", lat=lat, lng=lng)


def test_calculate_bounds(multi_missing_plan, tokyo_plan):
    assert MapService.calculate_bounds(multi_missing_plan) == {
        "north": 34.985,
        "south": 34.985,
        "east": 135.758,
        "west": 135.758,
    }
    assert MapService.calculate_bounds(tokyo_plan)["north"] == 35.70


def test_bounds_empty_when_nothing_located(tokyo_plan):
    plan = tokyo_plan.model_copy(update={"days": tokyo_plan.days[:1]})
    assert MapService.calculate_bounds(plan) == {}


def test_coverage(multi_missing_plan):
    assert MapService.coverage(multi_missing_plan) == {"located": 1, "total": 4}


def test_haversine_known_distance():
    # Tokyo Station to Shinjuku Station is about 6 km
    km = MapService.haversine_km(_place(35.681, 139.767), _place(35.690, 139.700))
    assert km == pytest.approx(6.1, abs=0.3)


def test_haversine_needs_both_places_located():
    assert MapService.haversine_km(_place(35.0, 139.0), _place()) is None


@pytest.mark.parametrize("mode,expected", [("walk", 15), ("transit", 13), ("car", 7)])
def test_estimate_travel_minutes(mode, expected):
    assert MapService.estimate_travel_minutes(1.0, mode) == expected


def test_unknown_mode():
    with pytest.raises(ValueError):
        MapService.estimate_travel_minutes(1.0, "teleport")


def test_day_legs(multi_missing_plan):
    legs = MapService.day_legs(multi_missing_plan.days[1])
    assert legs == [{"from": "c", "to": "d", "km": None, "minutes": None}]


def test_validate_coordinates():
    assert MapService.validate_coordinates(35.0, 139.0)
    assert not MapService.validate_coordinates(95.0, 139.0)
