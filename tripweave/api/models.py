"""Shared data structures for trip plans.

Every model is frozen and ordered sequences are tuples, so a plan handed to
the enrichment pipeline can be shared freely: transformations build new
plans with ``model_copy`` and reuse the untouched days and items.

The wire format is camelCase JSON; snake_case field names are accepted too.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Iterator, Literal, Optional, Tuple, Type, TypeVar
from urllib.parse import urlparse

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from tripweave.api.errors import PlanShapeError

PlaceCategory = Literal["food", "sight", "activity", "cafe", "shop", "transport", "hotel"]


class PlanModel(BaseModel):
    """Base for all plan value objects."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        extra="ignore",
    )

    def to_dict(self) -> Dict[str, Any]:
        """Return the camelCase JSON-ready form, omitting unset optionals."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class Place(PlanModel):
    """A point of interest. Either fully located or fully unlocated."""

    name: str
    category: PlaceCategory
    address: Optional[str] = None
    lat: Optional[float] = Field(default=None, ge=-90, le=90)
    lng: Optional[float] = Field(default=None, ge=-180, le=180)
    estimated_cost: Optional[float] = Field(
        default=None,
        ge=0,
        validation_alias=AliasChoices("estimatedCost", "estimatedCostKRW", "estimated_cost"),
    )
    duration_minutes: Optional[int] = Field(
        default=None,
        ge=0,
        validation_alias=AliasChoices("durationMinutes", "durationMin", "duration_minutes"),
    )
    open_hours_note: Optional[str] = None
    notes: Optional[Tuple[str, ...]] = None
    image_url: Optional[str] = None

    @field_validator("image_url")
    @classmethod
    def _check_url(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError("imageUrl must be an absolute http(s) URL")
        return value

    @model_validator(mode="after")
    def _check_coordinates(self) -> "Place":
        if (self.lat is None) != (self.lng is None):
            raise ValueError("lat and lng must be given together")
        return self

    @property
    def has_coordinates(self) -> bool:
        return self.lat is not None and self.lng is not None


class TripItem(PlanModel):
    """A scheduled visit to a place within a day."""

    id: Optional[str] = None
    time: Optional[str] = None
    place: Place
    tips: Optional[str] = None
    # Advisory only: consumers must not auto-edit locked items.
    locked: bool = False


class DayPlan(PlanModel):
    date: Optional[str] = None
    theme: Optional[str] = None
    items: Tuple[TripItem, ...] = ()


class TripPlan(PlanModel):
    """The root aggregate handed back and forth between caller and pipeline."""

    title: str
    summary: Optional[Tuple[str, ...]] = None
    days: Tuple[DayPlan, ...] = ()
    overall_budget: Optional[float] = Field(
        default=None,
        validation_alias=AliasChoices("overallBudget", "overallBudgetKRW", "overall_budget"),
    )
    cautions: Optional[Tuple[str, ...]] = None

    def iter_items(self) -> Iterator[Tuple[int, int, TripItem]]:
        """Yield ``(day_index, item_index, item)`` in plan order."""
        for day_index, day in enumerate(self.days):
            for item_index, item in enumerate(day.items):
                yield day_index, item_index, item


class TripInput(PlanModel):
    """What the traveller asked for; drives draft generation."""

    origin: Optional[str] = None
    regions: Tuple[str, ...]
    start_date: Optional[str] = None
    days: int = Field(ge=1)
    travelers: int = Field(default=1, ge=1)
    budget_tier: Optional[Literal["low", "mid", "high"]] = None
    interests: Tuple[str, ...] = ()
    pace: Optional[Literal["relaxed", "balanced", "tight"]] = None
    dietary: Optional[Tuple[str, ...]] = None
    language: Optional[str] = None

    @property
    def region_hint(self) -> Optional[str]:
        hint = " ".join(r.strip() for r in self.regions if r.strip())
        return hint or None


M = TypeVar("M", bound=BaseModel)


def validate_shape(model: Type[M], data: Any, what: Optional[str] = None) -> M:
    """Validate ``data`` against ``model`` or raise ``PlanShapeError``."""
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        issues = json.loads(exc.json(include_url=False))
        raise PlanShapeError(what or model.__name__, issues) from exc


__all__ = [
    "PlaceCategory",
    "Place",
    "TripItem",
    "DayPlan",
    "TripPlan",
    "TripInput",
    "validate_shape",
]
