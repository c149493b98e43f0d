"""Meal slots, per-slot delivery statuses, and plan encoding."""

import json
from enum import Enum

from subscriptions.shared.errors import InvalidInput


class MealSlot(Enum):
    BREAKFAST = "Breakfast"
    LUNCH = "Lunch"
    DINNER = "Dinner"


class MealStatus(Enum):
    NOT_APPLICABLE = "NotApplicable"
    PACKED = "Packed"
    OUT_FOR_DELIVERY = "OutForDelivery"
    DELIVERED = "Delivered"
    ON_LEAVE = "OnLeave"


# Canonical slot order; plans and leave meal sets are always stored in it.
ALL_MEALS = (MealSlot.BREAKFAST.value, MealSlot.LUNCH.value, MealSlot.DINNER.value)

# Attendance field holding each slot's status
SLOT_FIELDS = {
    MealSlot.BREAKFAST.value: "breakfast",
    MealSlot.LUNCH.value: "lunch",
    MealSlot.DINNER.value: "dinner",
}

# Statuses a caller may set through attendance marking
MARKABLE_STATUSES = {
    MealStatus.PACKED.value,
    MealStatus.OUT_FOR_DELIVERY.value,
    MealStatus.DELIVERED.value,
}

# Short codes accepted on input ("B", "L", "D")
_ALIASES = {
    "b": MealSlot.BREAKFAST.value,
    "breakfast": MealSlot.BREAKFAST.value,
    "l": MealSlot.LUNCH.value,
    "lunch": MealSlot.LUNCH.value,
    "d": MealSlot.DINNER.value,
    "dinner": MealSlot.DINNER.value,
}


def parse_meal(value, field="plan") -> str:
    """Resolve a meal slot name or short code to its canonical value."""
    if isinstance(value, MealSlot):
        return value.value
    meal = _ALIASES.get(str(value).strip().lower()) if value is not None else None
    if meal is None:
        raise InvalidInput(f"Unknown meal slot: {value!r}", field=field)
    return meal


def parse_meals(values, field="plan") -> list[str]:
    """Validate a non-empty set of meal slots and return it in canonical order.

    Accepts a list, a JSON array string, or a comma separated string. Each slot
    may appear at most once.
    """
    if isinstance(values, str):
        text = values.strip()
        try:
            values = json.loads(text) if text.startswith("[") else [v for v in text.split(",") if v.strip()]
        except ValueError:
            raise InvalidInput(f"Malformed meal list: {text!r}", field=field) from None
    if not values:
        raise InvalidInput("At least one meal slot is required", field=field)

    meals = [parse_meal(v, field=field) for v in values]
    if len(set(meals)) != len(meals):
        raise InvalidInput("Each meal slot may be listed only once", field=field)
    return [m for m in ALL_MEALS if m in meals]


def encode_meals(meals) -> str:
    return json.dumps(list(meals))


def decode_meals(raw) -> list[str]:
    if not raw:
        return []
    return json.loads(raw) if isinstance(raw, str) else list(raw)
