# tripweave/routes/__init__.py
from .geo import create_geo_blueprint
from .travel import create_travel_blueprint

__all__ = ["create_geo_blueprint", "create_travel_blueprint"]
