"""Domain events for the Order aggregate.

Dates travel as ISO-8601 strings and meal sets as JSON arrays so that events
serialise the same way across brokers and the event store.
"""

from protean.fields import Boolean, DateTime, Identifier, Integer, String, Text

from subscriptions.domain import subscriptions


@subscriptions.event(part_of="Order")
class OrderCreated:
    """A subscription order was created and its attendance ledger generated."""

    __version__ = 1

    order_id = Identifier(required=True)
    subscriber_id = Identifier(required=True)
    plan = Text(required=True)
    period_start = String(required=True, max_length=10)
    period_end = String(required=True, max_length=10)
    status = String(required=True, max_length=20)
    renewed_from = Identifier()
    created_at = DateTime(required=True)


@subscriptions.event(part_of="Order")
class LeaveAdded:
    """A leave was declared on an order."""

    __version__ = 1

    order_id = Identifier(required=True)
    leave_id = Identifier(required=True)
    start = String(required=True, max_length=10)
    end = String(required=True, max_length=10)
    affected_meals = Text(required=True)
    leave_day_count = Integer(required=True)
    full_days_off = Integer(default=0)


@subscriptions.event(part_of="Order")
class LeaveUpdated:
    """An existing leave was moved or its meals changed."""

    __version__ = 1

    order_id = Identifier(required=True)
    leave_id = Identifier(required=True)
    start = String(required=True, max_length=10)
    end = String(required=True, max_length=10)
    affected_meals = Text(required=True)
    leave_day_count = Integer(required=True)
    full_days_off = Integer(default=0)


@subscriptions.event(part_of="Order")
class LeaveRemoved:
    """A leave was withdrawn and its meals returned to the delivery schedule."""

    __version__ = 1

    order_id = Identifier(required=True)
    leave_id = Identifier(required=True)


@subscriptions.event(part_of="Order")
class OrderEdited:
    """The plan or period of an order was changed by an administrator."""

    __version__ = 1

    order_id = Identifier(required=True)
    previous_plan = Text(required=True)
    plan = Text(required=True)
    previous_period_start = String(required=True, max_length=10)
    previous_period_end = String(required=True, max_length=10)
    period_start = String(required=True, max_length=10)
    period_end = String(required=True, max_length=10)
    days_added = Integer(default=0)
    days_removed = Integer(default=0)


@subscriptions.event(part_of="Order")
class AttendanceMarked:
    """A delivery status was recorded for one meal on one day."""

    __version__ = 1

    order_id = Identifier(required=True)
    day = String(required=True, max_length=10)
    meal = String(required=True, max_length=20)
    previous_status = String(required=True, max_length=20)
    status = String(required=True, max_length=20)


@subscriptions.event(part_of="Order")
class OrderStatusChanged:
    """The order moved between Upcoming, Active, OnLeave and Expired."""

    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True, max_length=20)
    status = String(required=True, max_length=20)
    as_of = String(required=True, max_length=10)


@subscriptions.event(part_of="Order")
class AttendanceReconciled:
    """The attendance ledger was realigned with the order period."""

    __version__ = 1

    order_id = Identifier(required=True)
    days_added = Integer(default=0)
    days_removed = Integer(default=0)


@subscriptions.event(part_of="Order")
class OrderBilled:
    """The order was invoiced."""

    __version__ = 1

    order_id = Identifier(required=True)
    billed = Boolean(default=True)
    billed_at = DateTime(required=True)
