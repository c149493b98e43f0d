"""Attendance ledger: one record per calendar day of an order, one status per meal.

The ledger is derived from the order's plan and period and then maintained in
place as leaves come and go, deliveries are marked, and the order is edited.
Records for meals outside the plan are always ``NotApplicable``.
"""

from protean.fields import Date, String

from subscriptions.domain import subscriptions
from subscriptions.order.meals import (
    ALL_MEALS,
    MARKABLE_STATUSES,
    SLOT_FIELDS,
    MealStatus,
    parse_meal,
)
from subscriptions.shared.calendar import each_day, normalize
from subscriptions.shared.errors import AlreadyDelivered, InvalidTransition, UnknownDate

_NA = MealStatus.NOT_APPLICABLE.value
_PACKED = MealStatus.PACKED.value
_DELIVERED = MealStatus.DELIVERED.value
_ON_LEAVE = MealStatus.ON_LEAVE.value


@subscriptions.entity(part_of="Order")
class AttendanceDay:
    """Delivery record of one calendar day: a status for each meal slot."""

    day = Date(required=True)
    breakfast = String(choices=MealStatus, default=MealStatus.NOT_APPLICABLE.value)
    lunch = String(choices=MealStatus, default=MealStatus.NOT_APPLICABLE.value)
    dinner = String(choices=MealStatus, default=MealStatus.NOT_APPLICABLE.value)

    def status_of(self, meal):
        return getattr(self, SLOT_FIELDS[meal])

    def set_status(self, meal, status):
        setattr(self, SLOT_FIELDS[meal], status)

    def statuses(self):
        return {meal: self.status_of(meal) for meal in ALL_MEALS}


class AttendanceLedger:
    """Derives and maintains an order's attendance records.

    Args:
        today: The day the ledger considers "now". Days on or before it are
            treated as already served when an order is first initialised.
        meal_slots: The meal slots every record tracks.
    """

    def __init__(self, today, meal_slots=ALL_MEALS):
        self.today = normalize(today)
        self.meal_slots = tuple(meal_slots)

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    @staticmethod
    def index(order):
        return {normalize(record.day): record for record in order.attendances}

    def _new_day(self, day, plan, served):
        statuses = {}
        for meal in self.meal_slots:
            if meal not in plan:
                statuses[SLOT_FIELDS[meal]] = _NA
            elif served:
                statuses[SLOT_FIELDS[meal]] = _DELIVERED
            else:
                statuses[SLOT_FIELDS[meal]] = _PACKED
        return AttendanceDay(day=day, **statuses)

    def covers_period(self, order) -> bool:
        """True when records exist for exactly the days of the order period."""
        expected = set(each_day(order.period_start, order.period_end))
        days = [normalize(record.day) for record in order.attendances]
        return len(days) == len(expected) and set(days) == expected

    # -------------------------------------------------------------------
    # Ledger operations
    # -------------------------------------------------------------------
    def initialize(self, order):
        """Create a record for every day of the period.

        Plan meals start ``Packed``; on days up to and including today they are
        recorded as ``Delivered`` instead, acknowledging days that elapsed
        before the subscription was entered.
        """
        plan = order.meal_plan
        records = [self._new_day(day, plan, served=day <= self.today) for day in each_day(order.period_start, order.period_end)]
        order.add_attendances(records)
        return records

    def apply_leave(self, order, leave) -> int:
        """Put the leave's meals on leave for every day it spans.

        Only ``Packed`` slots move to ``OnLeave``: a meal that is out for
        delivery or delivered has already been dispatched, and a slot outside
        the plan stays ``NotApplicable``.

        Returns the number of days on which every plan meal is now on leave
        or not applicable.
        """
        plan = order.meal_plan
        meals = [meal for meal in leave.meals if meal in plan]
        records = self.index(order)

        full_days = 0
        for day in each_day(leave.start, leave.end):
            record = records.get(day)
            if record is None:
                continue
            for meal in meals:
                if record.status_of(meal) == _PACKED:
                    record.set_status(meal, _ON_LEAVE)
            if all(record.status_of(meal) in (_ON_LEAVE, _NA) for meal in plan):
                full_days += 1
        return full_days

    def revert_leave(self, order, leave):
        """Return every ``OnLeave`` slot touched by the leave to ``Packed``."""
        records = self.index(order)
        for day in each_day(leave.start, leave.end):
            record = records.get(day)
            if record is None:
                continue
            for meal in leave.meals:
                if record.status_of(meal) == _ON_LEAVE:
                    record.set_status(meal, _PACKED)

    def mark_delivery(self, order, day, meal, new_status):
        """Overwrite the status of a single (day, meal) slot.

        Returns the status the slot held before the change.
        """
        day = normalize(day)
        meal = parse_meal(meal, field="meal")
        new_status = new_status.value if isinstance(new_status, MealStatus) else new_status

        record = self.index(order).get(day)
        if record is None:
            raise UnknownDate(f"No attendance record for {day.isoformat()}")

        if new_status not in MARKABLE_STATUSES:
            raise InvalidTransition(f"Attendance cannot be set to {new_status!r}")

        if any(leave.covers(day, meal) for leave in order.leaves):
            raise InvalidTransition(f"{meal} on {day.isoformat()} is on leave")

        current = record.status_of(meal)
        if current == _NA:
            raise InvalidTransition(f"{meal} is not part of this order's plan")
        if current == _DELIVERED:
            raise AlreadyDelivered(f"{meal} on {day.isoformat()} is already delivered")

        record.set_status(meal, new_status)
        return current

    def prune_outside_range(self, order, new_start, new_end) -> int:
        """Drop records for days outside ``[new_start, new_end]``."""
        new_start, new_end = normalize(new_start), normalize(new_end)
        stale = [record for record in order.attendances if not new_start <= normalize(record.day) <= new_end]
        if stale:
            order.remove_attendances(stale)
        return len(stale)

    def extend_to_range(self, order, new_start, new_end, leaves) -> int:
        """Add records for missing days of the range, then re-apply open leaves.

        New days always start ``Packed``; only ``initialize`` records elapsed
        days as delivered.
        """
        plan = order.meal_plan
        existing = self.index(order)
        fresh = [self._new_day(day, plan, served=False) for day in each_day(new_start, new_end) if day not in existing]
        if fresh:
            order.add_attendances(fresh)

        for leave in leaves:
            if leave.end >= self.today:
                leave.full_days_off = self.apply_leave(order, leave)
        return len(fresh)

    def conform_to_plan(self, order, plan) -> int:
        """Align every record with a (new) plan.

        Meals dropped from the plan become ``NotApplicable`` on every day,
        delivered days included. Meals added to the plan start ``Packed``.
        """
        changed = 0
        for record in order.attendances:
            for meal in self.meal_slots:
                current = record.status_of(meal)
                if meal not in plan and current != _NA:
                    record.set_status(meal, _NA)
                    changed += 1
                elif meal in plan and current == _NA:
                    record.set_status(meal, _PACKED)
                    changed += 1
        return changed
