# tripweave/api/enrichment.py
"""Batch coordinate enrichment for trip plans.

The flow is collect -> resolve -> merge:

* ``collect_missing`` finds items whose place has no coordinates.
* A batch backend resolves them, either in-process with a bounded thread
  pool (``LocalBatchResolver``) or through a remote ``/api/geo/batch``
  service (``RemoteBatchResolver``). Each item gets its own result slot
  keyed by item id, or by position for items without a usable id; one
  item failing never fails the batch.
* ``merge_coordinates`` writes the hits into a new plan. Items that were not
  collected are reused untouched, which is what makes enrichment idempotent.

If the backend cannot be reached at all the input plan is returned as-is.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Sequence, Set, Tuple

import requests
from pydantic import BaseModel, ConfigDict, ValidationError

from tripweave.api.config import get_enrichment_config
from tripweave.api.errors import BatchTransportError
from tripweave.api.geocoding import GeocodeResult, get_resolver
from tripweave.api.models import TripPlan

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchRequestItem:
    """One place to resolve, as sent to a batch backend."""

    id: str
    name: str
    address: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {"id": self.id, "name": self.name}
        if self.address:
            data["address"] = self.address
        return data


class BatchHit(BaseModel):
    """Per-id batch outcome. Missing lat or lng means unresolved."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    lat: Optional[float] = None
    lng: Optional[float] = None
    place_name: Optional[str] = None

    @property
    def resolved(self) -> bool:
        if self.lat is None or self.lng is None:
            return False
        return -90 <= self.lat <= 90 and -180 <= self.lng <= 180

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class BatchResponse(BaseModel):
    ok: bool = False
    result: Dict[str, BatchHit] = {}

    def to_dict(self) -> Dict[str, Any]:
        return {"ok": self.ok, "result": {k: v.to_dict() for k, v in self.result.items()}}


class Resolver(Protocol):
    def ensure_configured(self) -> None: ...

    def resolve(self, query: str, language: Optional[str] = None, proximity=None) -> GeocodeResult: ...


class BatchBackend(Protocol):
    def resolve_batch(
        self,
        items: Sequence[BatchRequestItem],
        region_hint: Optional[str] = None,
        language: Optional[str] = None,
    ) -> BatchResponse: ...


def build_query(name: str, address: Optional[str] = None, region_hint: Optional[str] = None) -> str:
    """Join name, address and region hint with single spaces, skipping blanks."""
    parts = (name, address, region_hint)
    return " ".join(p.strip() for p in parts if p and p.strip())


def _positional_key(day_index: int, item_index: int, taken: Set[str]) -> str:
    key = f"{day_index}:{item_index}"
    while key in taken:
        key = f"_{key}"
    return key


def collect_missing(plan: TripPlan) -> List[Tuple[int, int, BatchRequestItem]]:
    """Return ``(day_index, item_index, request)`` for every unlocated item.

    Requests are keyed by item id. An item with no id, or reusing an id
    already collected, is keyed by its ``day:index`` position instead, so
    every unlocated item gets its own result slot.
    """
    taken = {item.id for _, _, item in plan.iter_items() if item.id}
    collected = []
    seen: Set[str] = set()
    for day_index, item_index, item in plan.iter_items():
        if item.place.has_coordinates:
            continue
        if item.id and item.id not in seen:
            key = item.id
        else:
            key = _positional_key(day_index, item_index, taken | seen)
            logger.debug(f"Keying '{item.place.name}' by position {key}")
        seen.add(key)
        collected.append(
            (day_index, item_index, BatchRequestItem(key, item.place.name, item.place.address))
        )
    return collected


def parse_batch_payload(payload: Any) -> BatchResponse:
    """Leniently decode a batch endpoint body; a malformed entry is just unresolved."""
    if not isinstance(payload, dict) or payload.get("ok") is not True:
        return BatchResponse(ok=False)
    raw = payload.get("result")
    if not isinstance(raw, dict):
        return BatchResponse(ok=True)

    result = {}
    for item_id, entry in raw.items():
        try:
            result[str(item_id)] = BatchHit.model_validate(entry)
        except ValidationError:
            logger.debug(f"Ignoring malformed batch entry for {item_id}")
            result[str(item_id)] = BatchHit()
    return BatchResponse(ok=True, result=result)


class LocalBatchResolver:
    """Resolves a batch in-process with a bounded worker pool."""

    def __init__(self, resolver: Optional[Resolver] = None, max_workers: Optional[int] = None):
        self.resolver = resolver or get_resolver()
        self.max_workers = max_workers or get_enrichment_config()["max_concurrency"]

    def _resolve_one(self, item: BatchRequestItem, region_hint: Optional[str], language: Optional[str]) -> BatchHit:
        query = build_query(item.name, item.address, region_hint)
        try:
            result = self.resolver.resolve(query, language=language)
        except Exception as e:
            logger.warning(f"Failed to geocode '{query}': {e}")
            return BatchHit()
        if not result.resolved:
            return BatchHit()
        return BatchHit(lat=result.lat, lng=result.lng, place_name=result.display_name)

    def resolve_batch(
        self,
        items: Sequence[BatchRequestItem],
        region_hint: Optional[str] = None,
        language: Optional[str] = None,
    ) -> BatchResponse:
        """Resolve every item; raises only for a missing provider credential."""
        if not items:
            return BatchResponse(ok=True)
        self.resolver.ensure_configured()

        start_time = time.time()
        workers = min(self.max_workers, len(items))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="geocode") as pool:
            hits = list(pool.map(lambda it: self._resolve_one(it, region_hint, language), items))

        result = {item.id: hit for item, hit in zip(items, hits)}
        resolved = sum(1 for hit in hits if hit.resolved)
        duration = time.time() - start_time
        logger.info(f"Resolved {resolved}/{len(items)} places in {duration:.2f}s")
        return BatchResponse(ok=True, result=result)


class RemoteBatchResolver:
    """Delegates a batch to a remote ``/api/geo/batch`` endpoint."""

    def __init__(
        self,
        endpoint_url: str,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ):
        self.endpoint_url = endpoint_url
        # None means a short-lived session per batch
        self.session = session
        self.timeout = get_enrichment_config()["batch_timeout"] if timeout is None else timeout

    def _post(self, body: Dict[str, Any]) -> requests.Response:
        if self.session is not None:
            return self.session.post(self.endpoint_url, json=body, timeout=self.timeout)
        with requests.Session() as session:
            return session.post(self.endpoint_url, json=body, timeout=self.timeout)

    def resolve_batch(
        self,
        items: Sequence[BatchRequestItem],
        region_hint: Optional[str] = None,
        language: Optional[str] = None,
    ) -> BatchResponse:
        body: Dict[str, Any] = {"items": [item.to_dict() for item in items]}
        if region_hint:
            body["regionHint"] = region_hint
        if language:
            body["language"] = language

        try:
            response = self._post(body)
        except requests.RequestException as e:
            raise BatchTransportError(str(e)) from e
        if not response.ok:
            raise BatchTransportError(f"batch endpoint returned {response.status_code}")
        try:
            payload = response.json()
        except ValueError as e:
            raise BatchTransportError("batch endpoint returned non-JSON body") from e
        return parse_batch_payload(payload)


_backend: Optional[BatchBackend] = None
_backend_url: Optional[str] = None


def default_backend() -> BatchBackend:
    """Return the process-wide backend, rebuilt only if BATCH_ENDPOINT_URL changes."""
    global _backend, _backend_url
    url = get_enrichment_config()["batch_endpoint_url"]
    if _backend is None or url != _backend_url:
        _backend = RemoteBatchResolver(url) if url else LocalBatchResolver()
        _backend_url = url
    return _backend


def merge_coordinates(
    plan: TripPlan,
    collected: Sequence[Tuple[int, int, BatchRequestItem]],
    hits: Dict[str, BatchHit],
) -> TripPlan:
    """Write resolved coordinates into a new plan.

    Only collected positions are considered. An existing address is never
    replaced by the provider's display name.
    """
    updates: Dict[int, Dict[int, Any]] = {}
    for day_index, item_index, request in collected:
        hit = hits.get(request.id)
        if hit is None or not hit.resolved:
            continue
        item = plan.days[day_index].items[item_index]
        place = item.place
        address = place.address if place.address else (hit.place_name or place.address)
        new_place = place.model_copy(update={"lat": hit.lat, "lng": hit.lng, "address": address})
        updates.setdefault(day_index, {})[item_index] = item.model_copy(update={"place": new_place})

    if not updates:
        return plan

    days = list(plan.days)
    for day_index, replaced in updates.items():
        day = days[day_index]
        items = tuple(replaced.get(i, item) for i, item in enumerate(day.items))
        days[day_index] = day.model_copy(update={"items": items})
    return plan.model_copy(update={"days": tuple(days)})


def enrich_plan_coordinates(
    plan: TripPlan,
    region_hint: Optional[str] = None,
    language: Optional[str] = None,
    backend: Optional[BatchBackend] = None,
) -> TripPlan:
    """Fill in coordinates for items that lack them.

    Args:
        plan: Plan whose items already carry ids
        region_hint: Optional city/country qualifier appended to queries
        language: Language code for provider labels
        backend: Batch backend; defaults to the configured one

    Returns:
        A plan with every resolvable item located. The input plan itself
        when nothing was missing or the backend could not be reached.

    Raises:
        ConfigurationError: The geocoding credential is missing
    """
    collected = collect_missing(plan)
    if not collected:
        return plan

    language = language or get_enrichment_config()["default_language"]
    backend = backend or default_backend()
    logger.info(f"Batch geocoding {len(collected)} places...")

    try:
        response = backend.resolve_batch([req for _, _, req in collected], region_hint, language)
    except BatchTransportError as e:
        logger.error(f"Batch geocoding failed, leaving plan unchanged: {e}")
        return plan

    if not response.ok:
        logger.warning("Batch geocoding reported failure, leaving plan unchanged")
        return plan

    return merge_coordinates(plan, collected, response.result)


__all__ = [
    "BatchRequestItem",
    "BatchHit",
    "BatchResponse",
    "LocalBatchResolver",
    "RemoteBatchResolver",
    "build_query",
    "collect_missing",
    "parse_batch_payload",
    "merge_coordinates",
    "enrich_plan_coordinates",
    "default_backend",
]
