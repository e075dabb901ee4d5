"""Tests for plan generation against a mocked chat client."""

import json
from unittest.mock import Mock

import openai
import pytest

from tripweave.api.errors import GenerationError, PlanShapeError
from tripweave.api.llm import PlanGenerator, parse_json_loose, parse_json_object
from tripweave.api.models import TripInput, TripItem

ITEM = {"time": "12:00", "place": {"name": "Tsukiji Outer Market", "category": "food"}}


def _generator(content=None, side_effect=None):
    client = Mock()
    completion = Mock()
    completion.choices = [Mock()]
    completion.choices[0].message.content = content
    client.chat.completions.create.return_value = completion
    client.chat.completions.create.side_effect = side_effect
    return PlanGenerator(client=client, model="test-model", temperature=0.2), client


class TestParseJsonLoose:

    def test_plain_json(self):
        assert parse_json_loose('{"a": 1}') == {"a": 1}

    def test_chatter_around_payload(self):
        raw = 'Sure! Here is your plan:\n```json\n{"title": "Trip"}\n```'
        assert parse_json_loose(raw) == {"title": "Trip"}

    def test_array_payload(self):
        assert parse_json_loose("candidates: [1, 2]") == [1, 2]

    @pytest.mark.parametrize("raw", [None, "", "   "])
    def test_empty(self, raw):
        with pytest.raises(GenerationError) as exc_info:
            parse_json_loose(raw)
        assert str(exc_info.value) == "EMPTY_RESPONSE"

    def test_garbage_keeps_sample(self):
        with pytest.raises(GenerationError) as exc_info:
            parse_json_loose("no json { here")
        assert str(exc_info.value) == "INVALID_JSON"
        assert exc_info.value.sample == "no json { here"

    def test_object_required(self):
        with pytest.raises(GenerationError):
            parse_json_object("[1, 2]")


class TestPlanGenerator:

    def test_generate_trip_plan(self):
        plan_json = json.dumps({"title": "Tokyo", "days": [{"items": [ITEM]}]})
        generator, client = _generator(plan_json)

        plan = generator.generate_trip_plan(TripInput(regions=("Tokyo",), days=1))

        assert plan.title == "Tokyo"
        assert plan.days[0].items[0].id is None
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "test-model"
        assert kwargs["temperature"] == 0.2
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["messages"][0]["role"] == "system"
        assert "Tokyo" in kwargs["messages"][1]["content"]

    def test_generated_plan_with_wrong_shape(self):
        generator, _ = _generator(json.dumps({"days": "tomorrow"}))
        with pytest.raises(PlanShapeError):
            generator.generate_trip_plan(TripInput(regions=("Tokyo",), days=1))

    def test_empty_content(self):
        generator, _ = _generator("")
        with pytest.raises(GenerationError) as exc_info:
            generator.regenerate_item(0, TripItem.model_validate(ITEM))
        assert str(exc_info.value) == "EMPTY_OR_UNREADABLE_RESPONSE"

    def test_client_error_becomes_generation_error(self):
        generator, _ = _generator(side_effect=openai.OpenAIError("invalid api key"))
        with pytest.raises(GenerationError) as exc_info:
            generator.regenerate_item(0, TripItem.model_validate(ITEM))
        assert "invalid api key" in str(exc_info.value)

    def test_regenerate_item(self):
        generator, _ = _generator(json.dumps(ITEM))
        item = generator.regenerate_item(1, TripItem.model_validate(ITEM))
        assert item.place.name == "Tsukiji Outer Market"

    def test_suggest_alternatives(self):
        payload = {"candidates": [ITEM, dict(ITEM, time="13:00")]}
        generator, client = _generator(json.dumps(payload))

        candidates = generator.suggest_alternatives(0, TripItem.model_validate(ITEM), count=2)

        assert [c.time for c in candidates] == ["12:00", "13:00"]
        assert client.chat.completions.create.call_args.kwargs["temperature"] == 0.7

    def test_alternatives_as_bare_list(self):
        generator, _ = _generator(json.dumps([ITEM]))
        assert len(generator.suggest_alternatives(0, TripItem.model_validate(ITEM))) == 1

    def test_alternatives_missing(self):
        generator, _ = _generator(json.dumps({"ideas": []}))
        with pytest.raises(GenerationError) as exc_info:
            generator.suggest_alternatives(0, TripItem.model_validate(ITEM))
        assert str(exc_info.value) == "NO_CANDIDATES"

    def test_one_bad_alternative_rejects_all(self):
        generator, _ = _generator(json.dumps({"candidates": [ITEM, {"place": "?"}]}))
        with pytest.raises(PlanShapeError):
            generator.suggest_alternatives(0, TripItem.model_validate(ITEM))
