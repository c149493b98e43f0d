"""Tests for plan/range edits of an existing order."""

from datetime import date

import pytest
from subscriptions.order.attendance import AttendanceLedger
from subscriptions.order.events import OrderEdited
from subscriptions.order.meals import MealStatus
from subscriptions.order.order import Order
from subscriptions.order.status import OrderStatus
from subscriptions.shared.errors import ConflictingLeave, InvalidInput, InvalidRange

ALL = ["Breakfast", "Lunch", "Dinner"]
TODAY = "2024-01-05"


def _make_order(plan=ALL):
    return Order.create("sub-001", plan, "2024-01-01", "2024-01-10", today=TODAY)


def _record(order, day):
    return next(a for a in order.attendances if a.day == date.fromisoformat(day))


def _snapshot(order):
    return {a.day: a.statuses() for a in order.attendances}


class TestRangeEdits:
    def test_extending_adds_packed_days_and_keeps_history(self):
        order = _make_order()
        order.edit(ALL, "2024-01-01", "2024-01-15", today=TODAY)

        assert order.period_end == date(2024, 1, 15)
        assert len(order.attendances) == 15
        assert set(_record(order, "2024-01-14").statuses().values()) == {MealStatus.PACKED.value}
        assert set(_record(order, "2024-01-02").statuses().values()) == {MealStatus.DELIVERED.value}

    def test_extending_backwards_never_assumes_delivery(self):
        order = _make_order()
        order.edit(ALL, "2023-12-30", "2024-01-10", today=TODAY)

        assert _record(order, "2023-12-30").lunch == MealStatus.PACKED.value

    def test_shrinking_drops_days_outside_the_range(self):
        order = _make_order()
        order.edit(ALL, "2024-01-03", "2024-01-08", today=TODAY)

        days = sorted(a.day for a in order.attendances)
        assert days[0] == date(2024, 1, 3)
        assert days[-1] == date(2024, 1, 8)
        assert len(days) == 6
        assert AttendanceLedger(TODAY).covers_period(order)

    def test_leaves_inside_the_new_range_survive(self):
        order = _make_order()
        order.add_leave("2024-01-06", "2024-01-07", ALL, today=TODAY)

        order.edit(ALL, "2024-01-02", "2024-01-12", today=TODAY)

        assert len(order.leaves) == 1
        assert set(_record(order, "2024-01-07").statuses().values()) == {MealStatus.ON_LEAVE.value}

    def test_shrink_that_orphans_a_leave_is_refused(self):
        order = _make_order()
        order.add_leave("2024-01-06", "2024-01-07", ALL, today=TODAY)
        before = _snapshot(order)

        with pytest.raises(ConflictingLeave) as exc:
            order.edit(ALL, "2024-01-01", "2024-01-06", today=TODAY)

        assert exc.value.kind == "conflicting_leave"
        assert order.period_end == date(2024, 1, 10)
        assert _snapshot(order) == before

    def test_status_is_recomputed(self):
        order = _make_order()
        order.edit(ALL, "2024-01-06", "2024-01-12", today=TODAY)
        assert order.status == OrderStatus.UPCOMING.value


class TestPlanEdits:
    def test_dropped_meal_becomes_not_applicable_everywhere(self):
        order = _make_order()
        order.edit(["Breakfast", "Lunch"], "2024-01-01", "2024-01-10", today=TODAY)

        assert order.meal_plan == ["Breakfast", "Lunch"]
        for day in ("2024-01-02", "2024-01-08"):
            assert _record(order, day).dinner == MealStatus.NOT_APPLICABLE.value
        assert _record(order, "2024-01-02").lunch == MealStatus.DELIVERED.value

    def test_added_meal_starts_packed(self):
        order = _make_order(plan=["Breakfast", "Lunch"])
        order.edit(ALL, "2024-01-01", "2024-01-10", today=TODAY)

        assert _record(order, "2024-01-08").dinner == MealStatus.PACKED.value

    def test_dropping_a_meal_a_leave_depends_on_is_refused(self):
        order = _make_order()
        order.add_leave("2024-01-06", "2024-01-07", ["Dinner"], today=TODAY)

        with pytest.raises(ConflictingLeave):
            order.edit(["Breakfast", "Lunch"], "2024-01-01", "2024-01-10", today=TODAY)

        assert order.meal_plan == ALL

    def test_empty_plan(self):
        with pytest.raises(InvalidInput):
            _make_order().edit([], "2024-01-01", "2024-01-10", today=TODAY)

    def test_start_after_end(self):
        with pytest.raises(InvalidRange):
            _make_order().edit(ALL, "2024-01-10", "2024-01-01", today=TODAY)


def test_event_is_raised():
    order = _make_order()
    order.edit(["Lunch"], "2024-01-03", "2024-01-12", today=TODAY)

    events = [e for e in order._events if isinstance(e, OrderEdited)]
    assert len(events) == 1
    event = events[0]
    assert event.previous_period_start == "2024-01-01"
    assert event.period_start == "2024-01-03"
    assert event.period_end == "2024-01-12"
    assert event.days_added == 2
    assert event.days_removed == 2
