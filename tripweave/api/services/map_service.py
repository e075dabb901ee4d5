# tripweave/api/services/map_service.py
"""Service layer for map-related calculations on plans."""

import math
from typing import Any, Dict, List, Optional

from tripweave.api.models import DayPlan, Place, TripPlan

EARTH_RADIUS_KM = 6371.0

# Conservative door-to-door speeds in km/h
SPEED_KMPH = {
    "walk": 4.0,
    "transit": 20.0,
    "car": 30.0,
}

# Fixed waiting / transfer / parking overhead in minutes
MODE_PENALTY_MIN = {
    "walk": 0,
    "transit": 10,
    "car": 5,
}


class MapService:
    """Handles coordinate checks, bounds and travel estimates."""

    @staticmethod
    def validate_coordinates(lat: float, lng: float) -> bool:
        """Validate that coordinates are within valid ranges.

        Args:
            lat: Latitude
            lng: Longitude

        Returns:
            True if valid, False otherwise
        """
        return -90 <= lat <= 90 and -180 <= lng <= 180

    @staticmethod
    def calculate_bounds(plan: TripPlan) -> Dict[str, float]:
        """Calculate the bounding box of all located places in a plan.

        Returns:
            Dictionary with north, south, east, west bounds, or {} if no
            place is located
        """
        lats = []
        lngs = []
        for _, _, item in plan.iter_items():
            if item.place.has_coordinates:
                lats.append(item.place.lat)
                lngs.append(item.place.lng)

        if not lats:
            return {}

        return {
            "north": max(lats),
            "south": min(lats),
            "east": max(lngs),
            "west": min(lngs),
        }

    @staticmethod
    def coverage(plan: TripPlan) -> Dict[str, int]:
        """Count located vs. total items, for "some places could not be located" messages."""
        total = 0
        located = 0
        for _, _, item in plan.iter_items():
            total += 1
            if item.place.has_coordinates:
                located += 1
        return {"located": located, "total": total}

    @staticmethod
    def haversine_km(a: Place, b: Place) -> Optional[float]:
        """Great-circle distance between two located places, None otherwise."""
        if not (a.has_coordinates and b.has_coordinates):
            return None
        lat1, lat2 = math.radians(a.lat), math.radians(b.lat)
        d_lat = lat2 - lat1
        d_lng = math.radians(b.lng - a.lng)
        h = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lng / 2) ** 2
        return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(h))

    @staticmethod
    def estimate_travel_minutes(distance_km: float, mode: str = "walk") -> int:
        """Estimate travel time based on distance and mode.

        Args:
            distance_km: Distance in kilometres
            mode: Travel mode (walk, transit, car)

        Returns:
            Estimated time in whole minutes
        """
        if mode not in SPEED_KMPH:
            raise ValueError(f"Unknown travel mode: {mode}")
        hours = distance_km / SPEED_KMPH[mode]
        return round(hours * 60 + MODE_PENALTY_MIN[mode])

    @staticmethod
    def day_legs(day: DayPlan, mode: str = "walk") -> List[Dict[str, Any]]:
        """Distance and time between consecutive items of a day.

        Legs touching an unlocated place carry ``None`` for both values.
        """
        legs = []
        for prev, nxt in zip(day.items, day.items[1:]):
            km = MapService.haversine_km(prev.place, nxt.place)
            legs.append({
                "from": prev.id,
                "to": nxt.id,
                "km": None if km is None else round(km, 2),
                "minutes": None if km is None else MapService.estimate_travel_minutes(km, mode),
            })
        return legs


# Export for use in other modules
__all__ = ["MapService"]
