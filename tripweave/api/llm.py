"""LLM helper functions for tripweave.

Generates draft plans, single-item replacements and alternatives via OpenAI
Chat Completions. Model output is parsed loosely, then validated against the
plan models; shape problems surface as ``PlanShapeError`` and everything
else (transport, empty or non-JSON output) as ``GenerationError``.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

import openai
from openai import OpenAI
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from tripweave.api.config import get_enrichment_config, get_llm_config, get_openai_api_key
from tripweave.api.errors import GenerationError
from tripweave.api.models import TripInput, TripItem, TripPlan, validate_shape
from tripweave.api.prompts import (
    SYSTEM_PROMPT,
    build_alternatives_prompt,
    build_plan_prompt,
    build_regenerate_prompt,
)

logger = logging.getLogger(__name__)

RETRYABLE_ERRORS = (openai.APIConnectionError, openai.RateLimitError, openai.InternalServerError)

# ---------------------------------------------------------------------------
# Response parsing helpers
# ---------------------------------------------------------------------------

def parse_json_loose(raw: Optional[str]) -> Any:
    """Parse model output, tolerating chatter around the JSON payload.

    Tries the whole text first, then the slice from the first ``{``/``[``
    to the last ``}``/``]``.
    """
    text = (raw or "").strip()
    if not text:
        raise GenerationError("EMPTY_RESPONSE")
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    starts = [i for i in (text.find("{"), text.find("[")) if i >= 0]
    end = max(text.rfind("}"), text.rfind("]"))
    if starts and end > min(starts):
        try:
            return json.loads(text[min(starts):end + 1])
        except json.JSONDecodeError:
            pass
    raise GenerationError("INVALID_JSON", sample=text[:400])


def parse_json_object(raw: Optional[str]) -> Dict[str, Any]:
    data = parse_json_loose(raw)
    if not isinstance(data, dict):
        raise GenerationError("NOT_OBJECT", sample=(raw or "")[:400])
    return data


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------

class PlanGenerator:
    """Talks to the chat model and returns validated plan objects."""

    def __init__(self, client: Optional[OpenAI] = None, model: Optional[str] = None,
                 temperature: Optional[float] = None):
        cfg = get_llm_config()
        self._client = client
        self.model = model or cfg["model"]
        self.temperature = cfg["temperature"] if temperature is None else temperature
        self.max_tokens = cfg["max_tokens"]
        self.default_language = get_enrichment_config()["default_language"]

    @property
    def client(self) -> OpenAI:
        if self._client is None:
            self._client = OpenAI(api_key=get_openai_api_key())
        return self._client

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type(RETRYABLE_ERRORS),
        reraise=True,
    )
    def _chat(self, messages: List[Dict[str, str]], temperature: float) -> Optional[str]:
        response = self.client.chat.completions.create(
            model=self.model,
            messages=messages,
            temperature=temperature,
            max_tokens=self.max_tokens,
            response_format={"type": "json_object"},
        )
        return response.choices[0].message.content

    def _complete(self, user_prompt: str, temperature: Optional[float] = None) -> str:
        messages = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": user_prompt},
        ]
        logger.debug(f"Calling OpenAI ChatCompletion: model={self.model}")
        try:
            content = self._chat(messages, self.temperature if temperature is None else temperature)
        except openai.OpenAIError as e:
            logger.error(f"Chat completion failed: {e}")
            raise GenerationError(str(e)) from e
        if not content or not content.strip():
            raise GenerationError("EMPTY_OR_UNREADABLE_RESPONSE")
        return content

    def generate_trip_plan(self, trip_input: TripInput) -> TripPlan:
        """Return a validated draft plan for ``trip_input`` (no ids, no enrichment)."""
        logger.info(f"Generating {trip_input.days}-day plan for {', '.join(trip_input.regions)}")
        content = self._complete(build_plan_prompt(trip_input, self.default_language))
        return validate_shape(TripPlan, parse_json_object(content), "Generated plan")

    def regenerate_item(self, day_index: int, item: TripItem) -> TripItem:
        """Return one replacement for ``item``; the caller splices it in."""
        content = self._complete(build_regenerate_prompt(day_index, item))
        return validate_shape(TripItem, parse_json_object(content), "Regenerated item")

    def suggest_alternatives(self, day_index: int, item: TripItem, count: int = 3) -> List[TripItem]:
        """Return alternative items; one malformed candidate rejects them all."""
        content = self._complete(build_alternatives_prompt(day_index, item, count), temperature=0.7)
        data = parse_json_loose(content)
        candidates = data.get("candidates") if isinstance(data, dict) else data
        if not isinstance(candidates, list):
            raise GenerationError("NO_CANDIDATES", sample=content[:400])
        return [validate_shape(TripItem, c, f"Alternative {i}") for i, c in enumerate(candidates)]


__all__ = ["PlanGenerator", "parse_json_loose", "parse_json_object"]
