# tripweave/api/prompts.py
"""Prompt text for the chat model."""

from __future__ import annotations

from tripweave.api.models import TripInput, TripItem

PLACE_SHAPE = """{
  "name": string,
  "category": "food"|"sight"|"activity"|"cafe"|"shop"|"transport"|"hotel",
  "address"?: string,
  "lat"?: number,
  "lng"?: number,
  "estimatedCost"?: number,
  "durationMinutes"?: number,
  "openHoursNote"?: string,
  "notes"?: string[],
  "imageUrl"?: string
}"""

ITEM_SHAPE = f"""{{
  "time"?: string,
  "place": {PLACE_SHAPE},
  "tips"?: string
}}"""

SYSTEM_PROMPT = (
    "You are a meticulous trip planner that outputs STRICT JSON matching the requested shape. "
    "No markdown, no code fences, no comments, no trailing commas. "
    "Write in the requested language. "
    "Produce realistic day plans that cluster nearby places, with transport and cost notes. "
    "Only include lat/lng when you are confident; otherwise omit both."
)


def build_plan_prompt(trip_input: TripInput, default_language: str) -> str:
    dietary = ", ".join(trip_input.dietary or ()) or "none"
    return f"""Make a {trip_input.days}-day itinerary for: {", ".join(trip_input.regions)}.
Interests: {", ".join(trip_input.interests) or "anything"}. Pace: {trip_input.pace or "balanced"}.
Budget tier: {trip_input.budget_tier or "mid"}. Travelers: {trip_input.travelers}.
Dietary: {dietary}.
Language: {trip_input.language or default_language}.

Return JSON with shape:
{{
  "title": string,
  "summary": string[],
  "days": [
    {{ "date"?: string, "theme"?: string, "items": [{ITEM_SHAPE}] }}
  ],
  "overallBudget"?: number,
  "cautions"?: string[]
}}

Rules:
- Cluster nearby spots per day; minimize travel time.
- Add brief transit hints in notes.
- Estimate costs conservatively.
- If concrete hours are unknown, include a generic "check hours" caution."""


def build_regenerate_prompt(day_index: int, item: TripItem) -> str:
    return f"""Replace ONE itinerary block with a similar or better option.
Constraints:
- Keep category ({item.place.category}) and general theme similar.
- Prefer nearby alternatives to "{item.place.name}" in the same city/region.
- Provide coordinates (lat, lng) only if confidently known; otherwise omit.
Output strictly one JSON object with shape:
{ITEM_SHAPE}
Context: dayIndex={day_index}, replacing "{item.place.name}".
No commentary. Return only the JSON object."""


def build_alternatives_prompt(day_index: int, item: TripItem, count: int = 3) -> str:
    return f"""Suggest exactly {count} alternative itinerary items for "{item.place.name}" \
(category {item.place.category}) on dayIndex={day_index}, close to it and fitting the same time slot.
Return a JSON object {{"candidates": [...]}} where each candidate has shape:
{ITEM_SHAPE}
No commentary. JSON only."""
