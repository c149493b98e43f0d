"""Order creation and renewal: commands and handler."""

from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from subscriptions.domain import subscriptions
from subscriptions.order.order import Order
from subscriptions.shared.calendar import ONE_DAY, days_between_inclusive, normalize
from subscriptions.shared.clock import today_or
from subscriptions.shared.config import leave_day_cap
from subscriptions.shared.errors import OverlappingOrder


@subscriptions.command(part_of="Order")
class CreateOrder:
    """Start a subscription for a subscriber over a date range and meal plan."""

    subscriber_id = Identifier(required=True)
    plan = Text(required=True)  # JSON array or comma separated meal slots
    period_start = String(required=True, max_length=32)
    period_end = String(required=True, max_length=32)
    as_of = String(max_length=32)  # Optional: defaults to the clock's today


@subscriptions.command(part_of="Order")
class RenewOrder:
    """Open the next subscription period for the subscriber of an existing order.

    The new period starts the day after the previous one ends and, unless
    given, lasts as long as the previous period and reuses its plan.
    """

    order_id = Identifier(required=True)
    plan = Text()
    period_start = String(max_length=32)
    period_end = String(max_length=32)
    as_of = String(max_length=32)


def _refuse_overlap(repo, subscriber_id, period_start, period_end):
    clashing = repo.find_overlapping(subscriber_id, period_start, period_end)
    if clashing:
        existing = clashing[0]
        raise OverlappingOrder(
            f"Subscriber {subscriber_id} already has order {existing.id} for "
            f"{existing.period_start.isoformat()}..{existing.period_end.isoformat()}"
        )


@subscriptions.command_handler(part_of=Order)
class OrderCreationHandler:
    @handle(CreateOrder)
    def create_order(self, command):
        repo = current_domain.repository_for(Order)
        days_between_inclusive(command.period_start, command.period_end)
        _refuse_overlap(repo, command.subscriber_id, command.period_start, command.period_end)

        order = Order.create(
            subscriber_id=command.subscriber_id,
            plan=command.plan,
            period_start=command.period_start,
            period_end=command.period_end,
            today=today_or(command.as_of),
            leave_day_cap=leave_day_cap(),
        )
        repo.add(order)
        return str(order.id)

    @handle(RenewOrder)
    def renew_order(self, command):
        repo = current_domain.repository_for(Order)
        previous = repo.get(command.order_id)

        start = normalize(command.period_start) if command.period_start else previous.period_end + ONE_DAY
        if command.period_end:
            end = normalize(command.period_end)
        else:
            end = start + (previous.period_end - previous.period_start)
        days_between_inclusive(start, end)
        _refuse_overlap(repo, previous.subscriber_id, start, end)

        order = Order.create(
            subscriber_id=previous.subscriber_id,
            plan=command.plan or previous.plan,
            period_start=start,
            period_end=end,
            today=today_or(command.as_of),
            leave_day_cap=leave_day_cap(),
            renewed_from=previous.id,
        )
        repo.add(order)
        return str(order.id)
