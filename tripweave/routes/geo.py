# tripweave/routes/geo.py
"""Geocoding routes: single lookups and batch resolution."""

import logging
from typing import Callable, List, Optional, Tuple

from flask import Blueprint, jsonify
from pydantic import Field

from tripweave.api.config import get_enrichment_config
from tripweave.api.enrichment import BatchRequestItem, LocalBatchResolver
from tripweave.api.geocoding import GeocodeResolver, get_resolver
from tripweave.api.models import PlanModel
from tripweave.routes.base import parse_body

logger = logging.getLogger(__name__)


class ResolveRequest(PlanModel):
    q: str = Field(min_length=1)
    # [lng, lat]
    proximity: Optional[Tuple[float, float]] = None
    language: Optional[str] = None


class BatchItemIn(PlanModel):
    id: str
    name: str
    address: Optional[str] = None


class BatchRequest(PlanModel):
    items: List[BatchItemIn] = Field(min_length=1)
    region_hint: Optional[str] = None
    language: Optional[str] = None


def create_geo_blueprint(resolver_factory: Optional[Callable[[], GeocodeResolver]] = None):
    """Create the geocoding blueprint.

    Args:
        resolver_factory: Returns the resolver to use; defaults to the
            process-wide one built from the environment

    Returns:
        Configured Flask Blueprint
    """
    resolver_factory = resolver_factory or get_resolver
    geo_bp = Blueprint("geo", __name__, url_prefix="/api/geo")

    @geo_bp.route("/resolve", methods=["POST"])
    def resolve():
        """Resolve one query; ``{"ok": false}`` when nothing matched."""
        body = parse_body(ResolveRequest)
        language = body.language or get_enrichment_config()["default_language"]
        result = resolver_factory().resolve(body.q, language=language, proximity=body.proximity)
        return jsonify(result.to_dict())

    @geo_bp.route("/batch", methods=["POST"])
    def batch():
        """Resolve many places; failed items map to an empty object."""
        body = parse_body(BatchRequest)
        language = body.language or get_enrichment_config()["default_language"]
        items = [BatchRequestItem(it.id, it.name, it.address) for it in body.items]
        response = LocalBatchResolver(resolver_factory()).resolve_batch(items, body.region_hint, language)
        return jsonify(response.to_dict())

    return geo_bp


__all__ = ["create_geo_blueprint"]
