"""tripweave: itinerary drafting with coordinate enrichment."""

__version__ = "0.1.0"
