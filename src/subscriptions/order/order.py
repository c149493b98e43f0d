"""Order aggregate (CQRS): one subscriber's meal subscription for a date range.

The Order owns its leaves and its per-day attendance records. Every change to
either goes through a method on this aggregate, which delegates the ledger
bookkeeping to ``LeaveLedger`` / ``AttendanceLedger`` and recomputes the
status before returning, so the aggregate is always saved in a consistent
state.

Status (recomputed from the calendar, never stored as history):
    Upcoming -> Active -> Expired, with OnLeave while today is inside a leave.
"""

from datetime import UTC, datetime

import structlog
from protean import atomic_change, invariant
from protean.fields import Boolean, Date, DateTime, HasMany, Identifier, Integer, String, Text

from subscriptions.domain import subscriptions
from subscriptions.order.attendance import AttendanceDay, AttendanceLedger
from subscriptions.order.events import (
    AttendanceMarked,
    AttendanceReconciled,
    LeaveAdded,
    LeaveRemoved,
    LeaveUpdated,
    OrderBilled,
    OrderCreated,
    OrderEdited,
    OrderStatusChanged,
)
from subscriptions.order.leaves import Leave, LeaveLedger
from subscriptions.order.meals import decode_meals, encode_meals, parse_meal, parse_meals
from subscriptions.order.status import OrderStatus, recompute
from subscriptions.shared.calendar import days_between_inclusive, normalize
from subscriptions.shared.config import DEFAULT_LEAVE_DAY_CAP
from subscriptions.shared.errors import (
    ConflictingLeave,
    InvalidInput,
    InvalidRange,
    LeaveCapExceeded,
    OutOfRange,
    OverlappingLeave,
)

logger = structlog.get_logger(__name__)


@subscriptions.aggregate
class Order:
    subscriber_id = Identifier(required=True)
    plan = Text(required=True)  # JSON array of meal slots, canonical order
    period_start = Date(required=True)
    period_end = Date(required=True)
    status = String(choices=OrderStatus, default=OrderStatus.UPCOMING.value)
    leaves = HasMany(Leave)
    attendances = HasMany(AttendanceDay)
    billed = Boolean(default=False)
    leave_day_cap = Integer(default=DEFAULT_LEAVE_DAY_CAP, min_value=0)
    renewed_from = Identifier()
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def period_must_not_run_backwards(self):
        if self.period_start and self.period_end and self.period_start > self.period_end:
            raise InvalidRange("Order period cannot end before it starts", field="period")

    @invariant.post
    def leaves_must_lie_within_period(self):
        for leave in self.leaves:
            if leave.start < self.period_start or leave.end > self.period_end:
                raise OutOfRange(f"Leave {leave.id} lies outside the order period")

    @invariant.post
    def leaves_must_not_share_a_day_and_meal(self):
        leaves = list(self.leaves)
        for i, first in enumerate(leaves):
            for second in leaves[i + 1 :]:
                if first.clashes_with(normalize(second.start), normalize(second.end), second.meals):
                    raise OverlappingLeave(f"Leaves {first.id} and {second.id} overlap")

    @invariant.post
    def leave_days_must_respect_cap(self):
        total = sum(leave.leave_day_count for leave in self.leaves)
        if total > self.leave_day_cap:
            raise LeaveCapExceeded(f"{total} leave days exceed the cap of {self.leave_day_cap}")

    @property
    def meal_plan(self):
        return decode_meals(self.plan)

    @property
    def total_leave_days(self):
        return sum(leave.leave_day_count for leave in self.leaves)

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        subscriber_id,
        plan,
        period_start,
        period_end,
        today,
        leave_day_cap=DEFAULT_LEAVE_DAY_CAP,
        renewed_from=None,
    ):
        """Create an order and generate its attendance ledger as of ``today``."""
        if not subscriber_id:
            raise InvalidInput("A subscriber is required", field="subscriber_id")

        meals = parse_meals(plan)
        start, end = normalize(period_start), normalize(period_end)
        days_between_inclusive(start, end)
        today = normalize(today)
        now = datetime.now(UTC)

        order = cls(
            subscriber_id=subscriber_id,
            plan=encode_meals(meals),
            period_start=start,
            period_end=end,
            status=recompute(start, end, [], today).value,
            leave_day_cap=leave_day_cap,
            renewed_from=renewed_from,
            created_at=now,
            updated_at=now,
        )
        AttendanceLedger(today).initialize(order)

        order.raise_(
            OrderCreated(
                order_id=order.id,
                subscriber_id=subscriber_id,
                plan=order.plan,
                period_start=start.isoformat(),
                period_end=end.isoformat(),
                status=order.status,
                renewed_from=renewed_from,
                created_at=now,
            )
        )
        return order

    def _leave_ledger(self, today):
        return LeaveLedger(self.leave_day_cap, AttendanceLedger(today))

    def _touch(self):
        self.updated_at = datetime.now(UTC)

    # -------------------------------------------------------------------
    # Leaves
    # -------------------------------------------------------------------
    def add_leave(self, start, end, meals, today):
        """Declare a leave; ``meals`` defaults to the whole plan."""
        leave = self._leave_ledger(today).add(self, start, end, meals)
        self._touch()

        self.raise_(
            LeaveAdded(
                order_id=self.id,
                leave_id=leave.id,
                start=leave.start.isoformat(),
                end=leave.end.isoformat(),
                affected_meals=leave.affected_meals,
                leave_day_count=leave.leave_day_count,
                full_days_off=leave.full_days_off,
            )
        )
        self.recompute_status(today)
        return leave

    def edit_leave(self, leave_id, start, end, meals, today):
        leave = self._leave_ledger(today).edit(self, leave_id, start, end, meals)
        self._touch()

        self.raise_(
            LeaveUpdated(
                order_id=self.id,
                leave_id=leave.id,
                start=leave.start.isoformat(),
                end=leave.end.isoformat(),
                affected_meals=leave.affected_meals,
                leave_day_count=leave.leave_day_count,
                full_days_off=leave.full_days_off,
            )
        )
        self.recompute_status(today)
        return leave

    def remove_leave(self, leave_id, today):
        leave = self._leave_ledger(today).remove(self, leave_id)
        self._touch()

        self.raise_(LeaveRemoved(order_id=self.id, leave_id=leave.id))
        self.recompute_status(today)
        return leave

    # -------------------------------------------------------------------
    # Attendance
    # -------------------------------------------------------------------
    def mark_delivery(self, day, meal, status, today):
        """Record a delivery status for one meal on one day."""
        ledger = AttendanceLedger(today)
        previous = ledger.mark_delivery(self, day, meal, status)
        self._touch()

        day, meal = normalize(day), parse_meal(meal, field="meal")
        record = ledger.index(self)[day]
        self.raise_(
            AttendanceMarked(
                order_id=self.id,
                day=day.isoformat(),
                meal=meal,
                previous_status=previous,
                status=record.status_of(meal),
            )
        )
        return record

    def reconcile_attendance(self, today) -> bool:
        """Restore one record per day of the period; report whether anything changed."""
        ledger = AttendanceLedger(today)
        if ledger.covers_period(self):
            return False

        with atomic_change(self):
            removed = ledger.prune_outside_range(self, self.period_start, self.period_end)
            added = ledger.extend_to_range(self, self.period_start, self.period_end, self.leaves)
        self._touch()

        logger.info("Attendance ledger reconciled", order_id=str(self.id), days_added=added, days_removed=removed)
        self.raise_(AttendanceReconciled(order_id=self.id, days_added=added, days_removed=removed))
        return True

    # -------------------------------------------------------------------
    # Plan / range editing
    # -------------------------------------------------------------------
    def edit(self, plan, period_start, period_end, today):
        """Change the plan and period, keeping recorded history where it survives.

        Leaves must already fit the new period and plan; an edit that would
        strand one is refused rather than silently truncating it.
        """
        meals = parse_meals(plan)
        start, end = normalize(period_start), normalize(period_end)
        days_between_inclusive(start, end)

        for leave in self.leaves:
            if leave.start < start or leave.end > end:
                raise ConflictingLeave(
                    f"Leave {leave.id} ({leave.start.isoformat()}..{leave.end.isoformat()}) "
                    f"falls outside {start.isoformat()}..{end.isoformat()}"
                )
            dropped = [m for m in leave.meals if m not in meals]
            if dropped:
                raise ConflictingLeave(f"Leave {leave.id} covers {', '.join(dropped)}, which the new plan drops")

        previous_plan, previous_start, previous_end = self.plan, self.period_start, self.period_end
        ledger = AttendanceLedger(today)

        with atomic_change(self):
            self.plan = encode_meals(meals)
            self.period_start = start
            self.period_end = end
            removed = ledger.prune_outside_range(self, start, end)
            ledger.conform_to_plan(self, meals)
            added = ledger.extend_to_range(self, start, end, self.leaves)
        self._touch()

        self.raise_(
            OrderEdited(
                order_id=self.id,
                previous_plan=previous_plan,
                plan=self.plan,
                previous_period_start=previous_start.isoformat(),
                previous_period_end=previous_end.isoformat(),
                period_start=start.isoformat(),
                period_end=end.isoformat(),
                days_added=added,
                days_removed=removed,
            )
        )
        self.recompute_status(today)

    # -------------------------------------------------------------------
    # Status and billing
    # -------------------------------------------------------------------
    def recompute_status(self, today) -> bool:
        """Bring ``status`` in line with the calendar; report whether it moved."""
        today = normalize(today)
        new_status = recompute(self.period_start, self.period_end, self.leaves, today)
        if new_status.value == self.status:
            return False

        previous = self.status
        self.status = new_status.value
        self._touch()

        self.raise_(
            OrderStatusChanged(
                order_id=self.id,
                previous_status=previous,
                status=self.status,
                as_of=today.isoformat(),
            )
        )
        return True

    def mark_billed(self) -> bool:
        if self.billed:
            return False

        now = datetime.now(UTC)
        self.billed = True
        self.updated_at = now
        self.raise_(OrderBilled(order_id=self.id, billed=True, billed_at=now))
        return True
