"""Leave management: add, edit and remove leaves on an order."""

from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from subscriptions.domain import subscriptions
from subscriptions.order.order import Order
from subscriptions.shared.clock import today_or


@subscriptions.command(part_of="Order")
class AddLeave:
    """Declare a leave; ``affected_meals`` defaults to the whole plan."""

    order_id = Identifier(required=True)
    start = String(required=True, max_length=32)
    end = String(required=True, max_length=32)
    affected_meals = Text()
    as_of = String(max_length=32)


@subscriptions.command(part_of="Order")
class EditLeave:
    order_id = Identifier(required=True)
    leave_id = Identifier(required=True)
    start = String(required=True, max_length=32)
    end = String(required=True, max_length=32)
    affected_meals = Text()
    as_of = String(max_length=32)


@subscriptions.command(part_of="Order")
class RemoveLeave:
    order_id = Identifier(required=True)
    leave_id = Identifier(required=True)
    as_of = String(max_length=32)


@subscriptions.command_handler(part_of=Order)
class LeaveManagementHandler:
    @handle(AddLeave)
    def add_leave(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        leave = order.add_leave(command.start, command.end, command.affected_meals or None, today=today_or(command.as_of))
        repo.add(order)
        return str(leave.id)

    @handle(EditLeave)
    def edit_leave(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.edit_leave(
            command.leave_id,
            command.start,
            command.end,
            command.affected_meals or None,
            today=today_or(command.as_of),
        )
        repo.add(order)

    @handle(RemoveLeave)
    def remove_leave(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.remove_leave(command.leave_id, today=today_or(command.as_of))
        repo.add(order)
