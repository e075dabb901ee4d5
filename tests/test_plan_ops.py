"""Tests for structural plan edits."""

import pytest

from tripweave.api.errors import PlanEditError, PlanShapeError
from tripweave.api.models import TripItem
from tripweave.api.plan_ops import apply_alternative, move_item, replace_item, toggle_lock

REPLACEMENT = {
    "time": "09:30",
    "place": {"name": "Fukagawa Edo Museum", "category": "sight"},
    "tips": "Closed on the third Monday",
}


class TestReplaceItem:

    def test_keeps_slot_id(self, tokyo_plan):
        updated = replace_item(tokyo_plan, 0, "item-1", dict(REPLACEMENT, id="from-model"))

        item = updated.days[0].items[0]
        assert item.id == "item-1"
        assert item.place.name == "Fukagawa Edo Museum"
        assert tokyo_plan.days[0].items[0].place.name == "Blue Bottle Kiyosumi"

    def test_other_days_are_shared(self, tokyo_plan):
        updated = replace_item(tokyo_plan, 0, "item-1", REPLACEMENT)
        assert updated.days[1] is tokyo_plan.days[1]

    def test_accepts_model_instance(self, tokyo_plan):
        replacement = TripItem.model_validate(REPLACEMENT)
        updated = replace_item(tokyo_plan, 0, "item-1", replacement)
        assert updated.days[0].items[0].tips == "Closed on the third Monday"

    def test_bad_shape(self, tokyo_plan):
        with pytest.raises(PlanShapeError):
            replace_item(tokyo_plan, 0, "item-1", {"place": {"name": "No category"}})

    @pytest.mark.parametrize("day_index,item_id", [(5, "item-1"), (-1, "item-1"), (0, "item-2")])
    def test_unknown_position(self, tokyo_plan, day_index, item_id):
        with pytest.raises(PlanEditError):
            replace_item(tokyo_plan, day_index, item_id, REPLACEMENT)


class TestApplyAlternative:

    def test_result_is_unlocked(self, tokyo_plan):
        updated = apply_alternative(tokyo_plan, 1, "item-2", dict(REPLACEMENT, locked=True))
        item = updated.days[1].items[0]
        assert item.id == "item-2"
        assert item.locked is False


class TestToggleLock:

    def test_flips_and_flips_back(self, tokyo_plan):
        once = toggle_lock(tokyo_plan, 1, "item-2")
        assert once.days[1].items[0].locked is False
        twice = toggle_lock(once, 1, "item-2")
        assert twice == tokyo_plan


class TestMoveItem:

    def test_moves_within_day(self, multi_missing_plan):
        updated = move_item(multi_missing_plan, 1, 1, 0)
        assert [item.id for item in updated.days[1].items] == ["d", "c"]
        assert [item.id for item in multi_missing_plan.days[1].items] == ["c", "d"]

    def test_same_index_is_a_no_op(self, multi_missing_plan):
        assert move_item(multi_missing_plan, 0, 1, 1) is multi_missing_plan

    @pytest.mark.parametrize("day_index,old_index,new_index", [(2, 0, 1), (0, 2, 0), (0, 0, -1)])
    def test_out_of_range(self, multi_missing_plan, day_index, old_index, new_index):
        with pytest.raises(PlanEditError):
            move_item(multi_missing_plan, day_index, old_index, new_index)
