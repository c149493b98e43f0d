"""Attendance marking: record delivery progress for single meals or a whole round."""

import json

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from subscriptions.domain import subscriptions
from subscriptions.order.order import Order
from subscriptions.shared.clock import today_or
from subscriptions.shared.errors import InvalidInput

logger = structlog.get_logger(__name__)


@subscriptions.command(part_of="Order")
class MarkDelivery:
    """Set one meal of one day to Packed, OutForDelivery or Delivered."""

    order_id = Identifier(required=True)
    day = String(required=True, max_length=32)
    meal = String(required=True, max_length=20)
    status = String(required=True, max_length=20)
    as_of = String(max_length=32)


def _parse_changes(raw):
    try:
        changes = json.loads(raw) if isinstance(raw, str) else raw
    except ValueError:
        raise InvalidInput("changes must be a JSON array", field="changes") from None
    if not isinstance(changes, list) or not all(isinstance(c, dict) for c in changes):
        raise InvalidInput("changes must be a JSON array of objects", field="changes")
    return changes


@subscriptions.command_handler(part_of=Order)
class DeliveryHandler:
    @handle(MarkDelivery)
    def mark_delivery(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        record = order.mark_delivery(command.day, command.meal, command.status, today=today_or(command.as_of))
        repo.add(order)
        return record.statuses()


def mark_delivery_batch(day, changes, as_of=None) -> list[dict]:
    """Apply many attendance changes for one day, each independently.

    ``changes`` is a list (or JSON array) of ``{"order_id", "meal", "status"}``
    objects. Each change runs as its own top-level ``MarkDelivery`` command; a
    rejected change is reported in its outcome and leaves the others applied.
    """
    changes = _parse_changes(changes)

    outcomes = []
    for change in changes:
        outcome = {
            "order_id": str(change.get("order_id", "")),
            "meal": change.get("meal"),
            "status": change.get("status"),
            "ok": True,
            "error": None,
        }
        try:
            current_domain.process(
                MarkDelivery(
                    order_id=change.get("order_id"),
                    day=day,
                    meal=change.get("meal"),
                    status=change.get("status"),
                    as_of=as_of,
                ),
                asynchronous=False,
            )
        except (ValidationError, ObjectNotFoundError) as exc:
            outcome["ok"] = False
            outcome["error"] = str(exc)
            logger.warning(
                "Failed to mark attendance",
                order_id=outcome["order_id"],
                day=day,
                meal=outcome["meal"],
                error=str(exc),
            )
        outcomes.append(outcome)

    logger.info(
        "Attendance batch applied",
        day=day,
        changes=len(outcomes),
        failed=sum(1 for o in outcomes if not o["ok"]),
    )
    return outcomes
