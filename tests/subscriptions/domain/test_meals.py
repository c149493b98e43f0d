"""Tests for meal plan parsing."""

import pytest
from subscriptions.order.meals import ALL_MEALS, decode_meals, encode_meals, parse_meal, parse_meals
from subscriptions.shared.errors import InvalidInput


class TestParseMeal:
    @pytest.mark.parametrize("value", ["Breakfast", "breakfast", "B", " b "])
    def test_breakfast_aliases(self, value):
        assert parse_meal(value) == "Breakfast"

    def test_unknown_slot(self):
        with pytest.raises(InvalidInput) as exc:
            parse_meal("Brunch", field="meal")
        assert exc.value.field == "meal"
        assert "meal" in exc.value.messages


class TestParseMeals:
    def test_returns_canonical_order(self):
        assert parse_meals(["Dinner", "Breakfast"]) == ["Breakfast", "Dinner"]

    def test_accepts_json_array(self):
        assert parse_meals('["Lunch", "Dinner"]') == ["Lunch", "Dinner"]

    def test_accepts_comma_separated_codes(self):
        assert parse_meals("B,L,D") == list(ALL_MEALS)

    def test_empty_plan_is_rejected(self):
        with pytest.raises(InvalidInput):
            parse_meals([])

    def test_empty_json_array_is_rejected(self):
        with pytest.raises(InvalidInput):
            parse_meals("[]")

    def test_duplicate_slot_is_rejected(self):
        with pytest.raises(InvalidInput):
            parse_meals(["Lunch", "L"])

    def test_malformed_json_is_rejected(self):
        with pytest.raises(InvalidInput):
            parse_meals('["Lunch",')


def test_encoded_plan_decodes_to_the_same_slots():
    assert decode_meals(encode_meals(["Breakfast", "Dinner"])) == ["Breakfast", "Dinner"]
