"""Domain layer: plan models, geocoding, enrichment and generation."""

from .enrichment import enrich_plan_coordinates
from .geocoding import GeocodeResolver, GeocodeResult
from .ids import assign_item_ids
from .models import DayPlan, Place, TripInput, TripItem, TripPlan

__all__ = [
    "enrich_plan_coordinates",
    "assign_item_ids",
    "GeocodeResolver",
    "GeocodeResult",
    "Place",
    "TripItem",
    "DayPlan",
    "TripPlan",
    "TripInput",
]
