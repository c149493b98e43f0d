"""Plan/range editing: an administrator changes an order's plan or period."""

from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from subscriptions.domain import subscriptions
from subscriptions.order.order import Order
from subscriptions.shared.calendar import days_between_inclusive
from subscriptions.shared.clock import today_or
from subscriptions.shared.errors import OverlappingOrder


@subscriptions.command(part_of="Order")
class EditOrder:
    """Replace the plan and/or period; omitted values keep their current setting."""

    order_id = Identifier(required=True)
    plan = Text()
    period_start = String(max_length=32)
    period_end = String(max_length=32)
    as_of = String(max_length=32)


@subscriptions.command_handler(part_of=Order)
class EditOrderHandler:
    @handle(EditOrder)
    def edit_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)

        plan = command.plan or order.plan
        period_start = command.period_start or order.period_start
        period_end = command.period_end or order.period_end

        if command.period_start or command.period_end:
            days_between_inclusive(period_start, period_end)
            clashing = repo.find_overlapping(order.subscriber_id, period_start, period_end, exclude_id=order.id)
            if clashing:
                raise OverlappingOrder(f"Subscriber {order.subscriber_id} already has order {clashing[0].id} in that period")

        order.edit(plan, period_start, period_end, today=today_or(command.as_of))
        repo.add(order)
