# tripweave/api/services/itinerary_service.py
"""Service layer for plan generation and preparation."""

import itertools
import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from tripweave.api.enrichment import BatchBackend, enrich_plan_coordinates
from tripweave.api.errors import ConfigurationError
from tripweave.api.ids import ItemIdGenerator, assign_item_ids, find_duplicate_ids
from tripweave.api.llm import PlanGenerator
from tripweave.api.models import TripInput, TripItem, TripPlan
from tripweave.api.services.map_service import MapService

logger = logging.getLogger(__name__)


class RequestGenerations:
    """Tracks the newest request per plan key so stale results can be dropped.

    A regenerate supersedes any in-flight request for the same key; when the
    older request finishes, ``commit`` refuses it. Generation numbers are
    unique across keys, so a key can be forgotten once its newest request
    finishes. At most ``max_keys`` unfinished keys are tracked; the oldest is
    evicted first, and its request then commits as stale.
    """

    def __init__(self, max_keys: int = 1024):
        self._lock = threading.Lock()
        self._counter = itertools.count(1)
        self._latest: "OrderedDict[str, int]" = OrderedDict()
        self.max_keys = max_keys

    def __len__(self) -> int:
        with self._lock:
            return len(self._latest)

    def begin(self, key: str) -> int:
        with self._lock:
            generation = next(self._counter)
            self._latest[key] = generation
            self._latest.move_to_end(key)
            while len(self._latest) > self.max_keys:
                evicted, _ = self._latest.popitem(last=False)
                logger.debug(f"Evicted request tracking for {evicted}")
            return generation

    def is_current(self, key: str, generation: int) -> bool:
        with self._lock:
            return self._latest.get(key) == generation

    def commit(self, key: str, generation: int) -> bool:
        """Finish ``generation``; True if it was still the newest for ``key``."""
        with self._lock:
            if self._latest.get(key) != generation:
                return False
            del self._latest[key]
            return True

    def abandon(self, key: str, generation: int) -> None:
        """Forget a failed request unless a newer one has started."""
        with self._lock:
            if self._latest.get(key) == generation:
                del self._latest[key]


@dataclass
class PreparedPlan:
    """A plan ready for display, plus how much of it could be located."""

    plan: TripPlan
    located: int
    total: int
    warnings: List[str] = field(default_factory=list)
    stale: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "plan": self.plan.to_dict(),
            "coverage": {"located": self.located, "total": self.total},
            "warnings": self.warnings,
            "stale": self.stale,
        }


class ItineraryService:
    """Runs the generate -> validate -> assign ids -> enrich pipeline."""

    def __init__(
        self,
        generator: Optional[PlanGenerator] = None,
        backend: Optional[BatchBackend] = None,
        id_generator: Optional[ItemIdGenerator] = None,
        generations: Optional[RequestGenerations] = None,
    ):
        self._generator = generator
        self.backend = backend
        self.id_generator = id_generator
        self.generations = generations or RequestGenerations()

    @property
    def generator(self) -> PlanGenerator:
        if self._generator is None:
            self._generator = PlanGenerator()
        return self._generator

    def prepare_plan(
        self,
        plan: TripPlan,
        region_hint: Optional[str] = None,
        language: Optional[str] = None,
        enrich: bool = True,
    ) -> PreparedPlan:
        """Assign ids and, optionally, fill in missing coordinates.

        A missing geocoding credential does not fail the call: the plan is
        returned with ids only and a warning.
        """
        plan = assign_item_ids(plan, self.id_generator)
        warnings = []
        duplicates = find_duplicate_ids(plan)
        if duplicates:
            logger.warning(f"Plan reuses item ids: {', '.join(sorted(duplicates))}")
            warnings.append("DUPLICATE_ITEM_IDS")
        if enrich:
            try:
                plan = enrich_plan_coordinates(plan, region_hint, language, backend=self.backend)
            except ConfigurationError as e:
                logger.error(f"Skipping coordinate enrichment: {e}")
                warnings.append(e.code)

        counts = MapService.coverage(plan)
        if counts["located"] < counts["total"]:
            missing = counts["total"] - counts["located"]
            logger.info(f"{missing} of {counts['total']} places could not be located")
            warnings.append("SOME_PLACES_UNLOCATED")
        return PreparedPlan(plan=plan, warnings=warnings, **counts)

    def generate(
        self,
        trip_input: TripInput,
        enrich: bool = True,
        session_key: Optional[str] = None,
    ) -> PreparedPlan:
        """Generate a draft plan and prepare it.

        Args:
            trip_input: Traveller request
            enrich: Whether to resolve coordinates
            session_key: Optional key identifying the plan being (re)generated;
                a newer call for the same key marks this result stale

        Returns:
            PreparedPlan; ``stale`` is True if a newer request superseded this one
        """
        if not session_key:
            draft = self.generator.generate_trip_plan(trip_input)
            return self.prepare_plan(draft, trip_input.region_hint, trip_input.language, enrich)

        generation = self.generations.begin(session_key)
        try:
            draft = self.generator.generate_trip_plan(trip_input)
            # Superseded drafts skip geocoding
            if not self.generations.is_current(session_key, generation):
                enrich = False
            prepared = self.prepare_plan(draft, trip_input.region_hint, trip_input.language, enrich)
        except Exception:
            self.generations.abandon(session_key, generation)
            raise

        if not self.generations.commit(session_key, generation):
            logger.info(f"Discarding stale plan for {session_key} (generation {generation})")
            prepared.stale = True
        return prepared

    def regenerate_item(self, day_index: int, item: TripItem) -> TripItem:
        replacement = self.generator.regenerate_item(day_index, item)
        if item.id:
            replacement = replacement.model_copy(update={"id": item.id})
        return replacement

    def suggest_alternatives(self, day_index: int, item: TripItem) -> List[TripItem]:
        return self.generator.suggest_alternatives(day_index, item)


__all__ = ["ItineraryService", "PreparedPlan", "RequestGenerations"]
