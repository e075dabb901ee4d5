# tripweave/api/ids.py
"""Stable identifiers for itinerary items.

Ids are unique within a process lifetime only. The fallback counter lives in
memory and restarts from zero with the process, so callers must never treat
an id as globally unique or persist it as a foreign key.
"""

from __future__ import annotations

import itertools
import logging
import threading
import uuid
from typing import Callable, Optional, Set

from tripweave.api.models import TripPlan

logger = logging.getLogger(__name__)

FALLBACK_PREFIX = "trip-item"


class ItemIdGenerator:
    """Hands out item ids, preferring random UUIDs over a counter."""

    def __init__(
        self,
        random_source: Optional[Callable[[], str]] = None,
        prefix: str = FALLBACK_PREFIX,
    ):
        self._random_source = random_source or (lambda: str(uuid.uuid4()))
        self._prefix = prefix
        self._counter = itertools.count()
        self._lock = threading.Lock()

    def _next_fallback(self) -> str:
        with self._lock:
            return f"{self._prefix}-{next(self._counter)}"

    def new_id(self) -> str:
        try:
            return self._random_source()
        except NotImplementedError:
            # uuid4 raises this when the OS has no randomness source
            logger.debug("No random source available, using counter id")
            return self._next_fallback()

    def new_unique_id(self, taken: Set[str]) -> str:
        """Return an id not present in ``taken``."""
        candidate = self.new_id()
        while not candidate or candidate in taken:
            candidate = self._next_fallback()
        return candidate


_default_generator = ItemIdGenerator()


def assign_item_ids(plan: TripPlan, generator: Optional[ItemIdGenerator] = None) -> TripPlan:
    """Return a plan in which every item has a non-empty id.

    Existing ids are never overwritten. The input plan is not modified; days
    whose items all had ids are reused as-is.

    Args:
        plan: Plan to process
        generator: Id source; defaults to the process-wide generator

    Returns:
        Equivalent plan with ids filled in
    """
    generator = generator or _default_generator
    taken = {item.id for _, _, item in plan.iter_items() if item.id}

    assigned = 0
    new_days = []
    for day in plan.days:
        if all(item.id for item in day.items):
            new_days.append(day)
            continue
        items = []
        for item in day.items:
            if not item.id:
                new_id = generator.new_unique_id(taken)
                taken.add(new_id)
                item = item.model_copy(update={"id": new_id})
                assigned += 1
            items.append(item)
        new_days.append(day.model_copy(update={"items": tuple(items)}))

    if not assigned:
        return plan

    logger.debug(f"Assigned {assigned} new item ids")
    return plan.model_copy(update={"days": tuple(new_days)})


def find_duplicate_ids(plan: TripPlan) -> Set[str]:
    """Return ids that appear on more than one item."""
    seen: Set[str] = set()
    duplicates: Set[str] = set()
    for _, _, item in plan.iter_items():
        if not item.id:
            continue
        if item.id in seen:
            duplicates.add(item.id)
        seen.add(item.id)
    return duplicates


__all__ = ["ItemIdGenerator", "assign_item_ids", "find_duplicate_ids", "FALLBACK_PREFIX"]
