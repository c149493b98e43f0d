"""Shared BDD fixtures and step definitions for the Subscriptions domain."""

from datetime import date

import pytest
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then
from subscriptions.order.events import (
    AttendanceMarked,
    LeaveAdded,
    LeaveRemoved,
    LeaveUpdated,
    OrderCreated,
    OrderEdited,
    OrderStatusChanged,
)
from subscriptions.order.order import Order
from subscriptions.shared.errors import (
    AlreadyDelivered,
    ConflictingLeave,
    InvalidInput,
    InvalidRange,
    InvalidTransition,
    LeaveCapExceeded,
    LeaveNotFound,
    OutOfRange,
    OverlappingLeave,
    UnknownDate,
)

# Map event name strings to classes for dynamic lookup in Then steps
_ORDER_EVENT_CLASSES = {
    "OrderCreated": OrderCreated,
    "LeaveAdded": LeaveAdded,
    "LeaveUpdated": LeaveUpdated,
    "LeaveRemoved": LeaveRemoved,
    "OrderEdited": OrderEdited,
    "AttendanceMarked": AttendanceMarked,
    "OrderStatusChanged": OrderStatusChanged,
}

_ERROR_KINDS = {
    cls.kind: cls
    for cls in (
        AlreadyDelivered,
        ConflictingLeave,
        InvalidInput,
        InvalidRange,
        InvalidTransition,
        LeaveCapExceeded,
        LeaveNotFound,
        OutOfRange,
        OverlappingLeave,
        UnknownDate,
    )
}


def _meals(text):
    return [m.strip() for m in text.split(",") if m.strip()]


def _record(order, day):
    return next(a for a in order.attendances if a.day == date.fromisoformat(day))


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def error():
    """Container for captured domain errors."""
    return {"exc": None}


@pytest.fixture()
def today():
    """Holder for the day the scenario runs on."""
    return {"day": "2024-01-05"}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('today is "{day}"'))
def today_is(today, day):
    today["day"] = day


@given(
    parsers.cfparse('an order from "{start}" to "{end}" for "{plan}"'),
    target_fixture="order",
)
def an_order(today, start, end, plan):
    order = Order.create("sub-001", _meals(plan), start, end, today=today["day"])
    order._events.clear()
    return order


@given(parsers.cfparse('a leave from "{start}" to "{end}" for "{meals}"'))
def a_leave(order, today, start, end, meals):
    order.add_leave(start, end, _meals(meals), today=today["day"])
    order._events.clear()


# ---------------------------------------------------------------------------
# Then steps (shared)
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the action fails with "{kind}"'))
def action_fails_with(error, kind):
    assert error["exc"] is not None, f"Expected {kind} but nothing was raised"
    assert isinstance(error["exc"], _ERROR_KINDS[kind])


@then("the action fails with a validation error")
def action_fails_with_validation_error(error):
    assert error["exc"] is not None, "Expected a validation error but none was raised"
    assert isinstance(error["exc"], ValidationError)


@then("the action succeeds")
def action_succeeds(error):
    assert error["exc"] is None, f"Unexpected error: {error['exc']}"


@then(parsers.cfparse('the order status is "{status}"'))
def order_status_is(order, status):
    assert order.status == status


@then(parsers.cfparse('the {meal} slot on "{day}" is "{status}"'))
def meal_status_on(order, meal, day, status):
    assert _record(order, day).status_of(meal) == status


@then(parsers.cfparse('every meal on "{day}" is "{status}"'))
def every_meal_on(order, day, status):
    assert set(_record(order, day).statuses().values()) == {status}


@then(parsers.cfparse("the order has {count:d} leave days"))
def order_leave_days(order, count):
    assert order.total_leave_days == count


@then(parsers.cfparse("the order has {count:d} attendance days"))
def order_attendance_days(order, count):
    assert len(order.attendances) == count


@then(parsers.cfparse("a {event_type} event is raised"))
def order_event_raised(order, event_type):
    event_cls = _ORDER_EVENT_CLASSES[event_type]
    assert any(
        isinstance(e, event_cls) for e in order._events
    ), f"No {event_type} event found. Events: {[type(e).__name__ for e in order._events]}"


@then("no events are raised")
def no_events_raised(order):
    assert order._events == []
