# tripweave/routes/travel.py
"""Travel routes: generation, enrichment and plan edits."""

from typing import Literal, Optional

from flask import Blueprint, jsonify
from pydantic import Field

from tripweave.api.errors import PlanEditError
from tripweave.api.models import PlanModel, TripInput, TripItem, TripPlan
from tripweave.api.plan_ops import apply_alternative, move_item, replace_item, toggle_lock
from tripweave.api.services.itinerary_service import ItineraryService
from tripweave.api.services.map_service import MapService
from tripweave.routes.base import parse_body


class GenerateOptions(PlanModel):
    enrich: bool = True
    session_key: Optional[str] = None


class EnrichRequest(PlanModel):
    plan: TripPlan
    region_hint: Optional[str] = None
    language: Optional[str] = None


class ItemRequest(PlanModel):
    day_index: int = Field(ge=0)
    item: TripItem


class EditRequest(PlanModel):
    plan: TripPlan
    op: Literal["replace", "alternative", "toggle-lock", "move"]
    day_index: int = Field(ge=0)
    item_id: Optional[str] = None
    item: Optional[TripItem] = None
    old_index: Optional[int] = None
    new_index: Optional[int] = None


class LegsRequest(PlanModel):
    plan: TripPlan
    day_index: int = Field(ge=0)
    mode: Literal["walk", "transit", "car"] = "walk"


def _apply_edit(body: EditRequest) -> TripPlan:
    if body.op == "move":
        if body.old_index is None or body.new_index is None:
            raise PlanEditError("move needs oldIndex and newIndex")
        return move_item(body.plan, body.day_index, body.old_index, body.new_index)

    if not body.item_id:
        raise PlanEditError(f"{body.op} needs itemId")
    if body.op == "toggle-lock":
        return toggle_lock(body.plan, body.day_index, body.item_id)

    if body.item is None:
        raise PlanEditError(f"{body.op} needs item")
    if body.op == "replace":
        return replace_item(body.plan, body.day_index, body.item_id, body.item)
    return apply_alternative(body.plan, body.day_index, body.item_id, body.item)


def create_travel_blueprint(service: Optional[ItineraryService] = None):
    """Create and configure the travel blueprint.

    Args:
        service: Pipeline service; a default one is built when omitted

    Returns:
        Configured Flask Blueprint
    """
    service = service or ItineraryService()
    travel_bp = Blueprint("travel", __name__, url_prefix="/api")

    @travel_bp.route("/generate", methods=["POST"])
    def generate():
        """Generate a draft plan, assign ids and resolve coordinates."""
        trip_input = parse_body(TripInput)
        options = parse_body(GenerateOptions)
        prepared = service.generate(trip_input, enrich=options.enrich, session_key=options.session_key)
        return jsonify(prepared.to_dict())

    @travel_bp.route("/enrich", methods=["POST"])
    def enrich():
        """Assign ids and fill in missing coordinates for a caller-held plan."""
        body = parse_body(EnrichRequest)
        prepared = service.prepare_plan(body.plan, body.region_hint, body.language)
        return jsonify(prepared.to_dict())

    @travel_bp.route("/regenerate-item", methods=["POST"])
    def regenerate_item():
        body = parse_body(ItemRequest)
        item = service.regenerate_item(body.day_index, body.item)
        return jsonify({"item": item.to_dict()})

    @travel_bp.route("/items/alternatives", methods=["POST"])
    def alternatives():
        body = parse_body(ItemRequest)
        candidates = service.suggest_alternatives(body.day_index, body.item)
        return jsonify({"candidates": [c.to_dict() for c in candidates]})

    @travel_bp.route("/plan/edit", methods=["POST"])
    def edit_plan():
        """Apply one structural edit and return the new plan."""
        body = parse_body(EditRequest)
        return jsonify({"plan": _apply_edit(body).to_dict()})

    @travel_bp.route("/plan/legs", methods=["POST"])
    def plan_legs():
        body = parse_body(LegsRequest)
        if body.day_index >= len(body.plan.days):
            raise PlanEditError(f"Day index {body.day_index} out of range (plan has {len(body.plan.days)} days)")
        day = body.plan.days[body.day_index]
        return jsonify({
            "legs": MapService.day_legs(day, body.mode),
            "bounds": MapService.calculate_bounds(body.plan),
        })

    return travel_bp


__all__ = ["create_travel_blueprint"]
