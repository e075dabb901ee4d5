# tripweave/api/plan_ops.py
"""Structural edits on a plan: item swaps, lock toggles and reordering.

These are the user-driven counterparts to enrichment. Each returns a new
plan and leaves the input untouched.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Tuple

from tripweave.api.errors import PlanEditError
from tripweave.api.models import TripItem, TripPlan, validate_shape

logger = logging.getLogger(__name__)


def _locate(plan: TripPlan, day_index: int, item_id: str) -> int:
    if not 0 <= day_index < len(plan.days):
        raise PlanEditError(f"Day index {day_index} out of range (plan has {len(plan.days)} days)")
    for index, item in enumerate(plan.days[day_index].items):
        if item.id == item_id:
            return index
    raise PlanEditError(f"No item {item_id!r} on day {day_index}")


def _with_items(plan: TripPlan, day_index: int, items: Tuple[TripItem, ...]) -> TripPlan:
    days = list(plan.days)
    days[day_index] = days[day_index].model_copy(update={"items": items})
    return plan.model_copy(update={"days": tuple(days)})


def _update_item(plan: TripPlan, day_index: int, item_id: str, fn: Callable[[TripItem], TripItem]) -> TripPlan:
    index = _locate(plan, day_index, item_id)
    items = list(plan.days[day_index].items)
    items[index] = fn(items[index])
    return _with_items(plan, day_index, tuple(items))


def _coerce_item(replacement: Any) -> TripItem:
    if isinstance(replacement, TripItem):
        return replacement
    return validate_shape(TripItem, replacement, "Replacement item")


def replace_item(plan: TripPlan, day_index: int, item_id: str, replacement: Any) -> TripPlan:
    """Swap an item for a regenerated one. The slot keeps its id."""
    new_item = _coerce_item(replacement).model_copy(update={"id": item_id})
    logger.debug(f"Replacing item {item_id} on day {day_index} with '{new_item.place.name}'")
    return _update_item(plan, day_index, item_id, lambda _old: new_item)


def apply_alternative(plan: TripPlan, day_index: int, item_id: str, candidate: Any) -> TripPlan:
    """Swap an item for a suggested alternative; the result is unlocked."""
    new_item = _coerce_item(candidate).model_copy(update={"id": item_id, "locked": False})
    return _update_item(plan, day_index, item_id, lambda _old: new_item)


def toggle_lock(plan: TripPlan, day_index: int, item_id: str) -> TripPlan:
    return _update_item(plan, day_index, item_id, lambda it: it.model_copy(update={"locked": not it.locked}))


def move_item(plan: TripPlan, day_index: int, old_index: int, new_index: int) -> TripPlan:
    """Move an item within a day, shifting the items in between."""
    if not 0 <= day_index < len(plan.days):
        raise PlanEditError(f"Day index {day_index} out of range (plan has {len(plan.days)} days)")
    items = list(plan.days[day_index].items)
    for index in (old_index, new_index):
        if not 0 <= index < len(items):
            raise PlanEditError(f"Item index {index} out of range on day {day_index}")
    if old_index == new_index:
        return plan
    items.insert(new_index, items.pop(old_index))
    return _with_items(plan, day_index, tuple(items))


__all__ = ["replace_item", "apply_alternative", "toggle_lock", "move_item"]
