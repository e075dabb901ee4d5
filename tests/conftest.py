"""Shared fixtures: sample plans."""

import pytest

from tripweave.api.models import TripPlan


@pytest.fixture
def tokyo_plan_data():
    """Two days: one unlocated cafe, one already-located sight."""
    return {
        "title": "Tokyo weekend",
        "summary": ["Coffee and history"],
        "days": [
            {
                "date": "2025-04-01",
                "theme": "East side",
                "items": [
                    {
                        "id": "item-1",
                        "time": "09:00",
                        "place": {"name": "Blue Bottle Kiyosumi", "category": "cafe"},
                    }
                ],
            },
            {
                "date": "2025-04-02",
                "items": [
                    {
                        "id": "item-2",
                        "time": "10:00",
                        "place": {
                            "name": "Imperial Palace East Gardens",
                            "category": "sight",
                            "address": "Chiyoda City, Tokyo",
                            "lat": 35.70,
                            "lng": 139.75,
                        },
                        "locked": True,
                    }
                ],
            },
        ],
        "overallBudget": 50000,
    }


@pytest.fixture
def tokyo_plan(tokyo_plan_data):
    return TripPlan.model_validate(tokyo_plan_data)


@pytest.fixture
def multi_missing_plan():
    """Three unlocated items across two days plus one located item."""
    return TripPlan.model_validate({
        "title": "Kyoto",
        "days": [
            {
                "items": [
                    {"id": "a", "place": {"name": "Fushimi Inari", "category": "sight"}},
                    {"id": "b", "place": {"name": "Nishiki Market", "category": "food",
                                          "address": "Nakagyo Ward"}},
                ]
            },
            {
                "items": [
                    {"id": "c", "place": {"name": "Unknown Teahouse", "category": "cafe"}},
                    {"id": "d", "place": {"name": "Kyoto Station", "category": "transport",
                                          "lat": 34.985, "lng": 135.758}},
                ]
            },
        ],
    })
