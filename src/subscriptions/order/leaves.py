"""Leave ledger: the customer's declared absences within an order period.

A leave covers an inclusive range of days and a subset of the order's plan
meals. Leaves of one order never share a (day, meal) pair, always lie inside
the order period, and together never exceed the leave-day cap.

Every operation validates completely before it touches the order, so a
rejected request leaves both the leave and attendance ledgers untouched.
"""

import structlog
from protean import atomic_change
from protean.fields import Date, Integer, Text

from subscriptions.domain import subscriptions
from subscriptions.order.meals import decode_meals, encode_meals, parse_meals
from subscriptions.shared.calendar import DayRange, days_between_inclusive, normalize
from subscriptions.shared.errors import (
    InvalidInput,
    LeaveCapExceeded,
    LeaveNotFound,
    OutOfRange,
    OverlappingLeave,
)

logger = structlog.get_logger(__name__)


@subscriptions.entity(part_of="Order")
class Leave:
    """A declared absence: no meals of ``affected_meals`` between start and end."""

    start = Date(required=True)
    end = Date(required=True)
    affected_meals = Text(required=True)  # JSON array of meal slots
    leave_day_count = Integer(required=True, min_value=1)  # Calendar days spanned
    full_days_off = Integer(default=0)  # Days with every plan meal off

    @property
    def meals(self):
        return decode_meals(self.affected_meals)

    @property
    def days(self):
        return DayRange(normalize(self.start), normalize(self.end))

    def covers(self, day, meal=None) -> bool:
        if not normalize(self.start) <= normalize(day) <= normalize(self.end):
            return False
        return meal is None or meal in self.meals

    def clashes_with(self, start, end, meals) -> bool:
        """True when the leave shares at least one day and one meal with the range."""
        if not self.days.overlaps(DayRange(start, end)):
            return False
        return bool(set(self.meals) & set(meals))


class LeaveLedger:
    """Validates and applies leave changes to an order.

    Args:
        cap: Maximum total leave days across all leaves of one order.
        attendance: The ``AttendanceLedger`` kept in step with every change.
    """

    def __init__(self, cap, attendance):
        self.cap = cap
        self.attendance = attendance

    @staticmethod
    def find(order, leave_id):
        leave = next((lv for lv in order.leaves if str(lv.id) == str(leave_id)), None)
        if leave is None:
            raise LeaveNotFound(f"Leave {leave_id} not found on order {order.id}")
        return leave

    def validate(self, order, start, end, meals=None, exclude=None):
        """Check a proposed leave against the order and its other leaves.

        Returns the normalised ``(start, end, meals, day_count)``.
        """
        start, end = normalize(start), normalize(end)
        day_count = days_between_inclusive(start, end)

        plan = order.meal_plan
        meals = parse_meals(meals, field="affected_meals") if meals is not None else list(plan)
        outside_plan = [m for m in meals if m not in plan]
        if outside_plan:
            raise InvalidInput(f"{', '.join(outside_plan)} not in the order plan", field="affected_meals")

        if start < order.period_start or end > order.period_end:
            raise OutOfRange(
                f"Leave {start.isoformat()}..{end.isoformat()} is outside the order period "
                f"{order.period_start.isoformat()}..{order.period_end.isoformat()}"
            )

        others = [lv for lv in order.leaves if exclude is None or str(lv.id) != str(exclude.id)]
        clash = next((lv for lv in others if lv.clashes_with(start, end, meals)), None)
        if clash is not None:
            raise OverlappingLeave(
                f"Overlaps leave {clash.id} ({normalize(clash.start).isoformat()}..{normalize(clash.end).isoformat()})"
            )

        used = sum(lv.leave_day_count for lv in others)
        if used + day_count > self.cap:
            raise LeaveCapExceeded(
                f"{used} leave days already taken; {day_count} more would exceed the cap of {self.cap}"
            )

        return start, end, meals, day_count

    def add(self, order, start, end, meals=None):
        start, end, meals, day_count = self.validate(order, start, end, meals)

        with atomic_change(order):
            leave = Leave(
                start=start,
                end=end,
                affected_meals=encode_meals(meals),
                leave_day_count=day_count,
            )
            order.add_leaves(leave)
            leave.full_days_off = self.attendance.apply_leave(order, leave)

        logger.info("Leave added", order_id=str(order.id), leave_id=str(leave.id), days=day_count)
        return leave

    def edit(self, order, leave_id, start, end, meals=None):
        leave = self.find(order, leave_id)
        start, end, meals, day_count = self.validate(order, start, end, meals, exclude=leave)

        with atomic_change(order):
            self.attendance.revert_leave(order, leave)
            leave.start = start
            leave.end = end
            leave.affected_meals = encode_meals(meals)
            leave.leave_day_count = day_count
            leave.full_days_off = self.attendance.apply_leave(order, leave)

        logger.info("Leave updated", order_id=str(order.id), leave_id=str(leave.id), days=day_count)
        return leave

    def remove(self, order, leave_id):
        leave = self.find(order, leave_id)

        with atomic_change(order):
            self.attendance.revert_leave(order, leave)
            order.remove_leaves(leave)

        logger.info("Leave removed", order_id=str(order.id), leave_id=str(leave.id))
        return leave
