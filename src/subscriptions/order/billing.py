"""Billing flag: set once the order has been invoiced elsewhere."""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from subscriptions.domain import subscriptions
from subscriptions.order.order import Order


@subscriptions.command(part_of="Order")
class MarkOrderBilled:
    order_id = Identifier(required=True)


@subscriptions.command_handler(part_of=Order)
class MarkOrderBilledHandler:
    @handle(MarkOrderBilled)
    def mark_order_billed(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        if order.mark_billed():
            repo.add(order)
