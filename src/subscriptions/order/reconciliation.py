"""Daily reconciliation sweep: bring every order's status in line with the calendar.

Designed to be triggered once a day by the scheduler (``src/scheduler.py``),
on demand through ``src/manage.py reconcile`` or the maintenance API endpoint.
Order identities are read page by page and one ``ReconcileOrder`` command is
dispatched per order, so each order is loaded, updated and saved in its own
unit of work. A failure on one order is logged and counted; the sweep moves on
to the next. Re-running the sweep for the same day changes nothing.
"""

from dataclasses import dataclass, field
from datetime import date

import structlog
from protean import handle
from protean.fields import Boolean, Identifier, String
from protean.utils.globals import current_domain

from subscriptions.domain import subscriptions
from subscriptions.order.order import Order
from subscriptions.shared.clock import today_or
from subscriptions.shared.config import sweep_page_size
from subscriptions.utils.logging import add_context, clear_context

logger = structlog.get_logger(__name__)


@subscriptions.command(part_of="Order")
class ReconcileOrder:
    """Recompute one order's status and, optionally, repair its attendance ledger."""

    order_id = Identifier(required=True)
    as_of = String(max_length=32)
    reconcile_attendance = Boolean(default=False)


@dataclass
class SweepReport:
    """Outcome of one sweep run."""

    as_of: date
    examined: int = 0
    updated: int = 0
    failed: int = 0
    failed_order_ids: list[str] = field(default_factory=list)
    interrupted: bool = False

    def to_dict(self) -> dict:
        return {
            "as_of": self.as_of.isoformat(),
            "examined": self.examined,
            "updated": self.updated,
            "failed": self.failed,
            "failed_order_ids": list(self.failed_order_ids),
            "interrupted": self.interrupted,
        }


class ReconciliationSweep:
    """Walks every order, one page of identities at a time.

    Call it from the top level (CLI, scheduler, HTTP route), never from inside a
    command handler, so that each ``ReconcileOrder`` commits on its own.

    Args:
        as_of: The day to reconcile against; defaults to the configured clock.
        page_size: Identities fetched per page; defaults to ``sweep_page_size``.
        reconcile_attendance: Also restore one attendance record per period day.
        should_stop: Optional callable checked between orders; returning True
            ends the sweep early with ``interrupted`` set on the report.
    """

    def __init__(self, as_of=None, page_size=None, reconcile_attendance=True, should_stop=None):
        self.as_of = today_or(as_of)
        self.page_size = page_size or sweep_page_size()
        self.reconcile_attendance = reconcile_attendance
        self.should_stop = should_stop or (lambda: False)

    def _order_ids(self):
        repo = current_domain.repository_for(Order)
        offset = 0
        while True:
            ids = repo.page_of_ids(offset, self.page_size)
            yield from ids
            if len(ids) < self.page_size:
                return
            offset += self.page_size

    def run(self) -> SweepReport:
        add_context(sweep_as_of=self.as_of.isoformat())
        try:
            return self._run()
        finally:
            clear_context()

    def _run(self) -> SweepReport:
        report = SweepReport(as_of=self.as_of)
        logger.info("Starting reconciliation sweep", page_size=self.page_size)

        for order_id in self._order_ids():
            if self.should_stop():
                report.interrupted = True
                logger.warning("Reconciliation sweep interrupted", examined=report.examined)
                break

            report.examined += 1
            try:
                changed = current_domain.process(
                    ReconcileOrder(
                        order_id=order_id,
                        as_of=self.as_of.isoformat(),
                        reconcile_attendance=self.reconcile_attendance,
                    ),
                    asynchronous=False,
                )
            except Exception as exc:
                report.failed += 1
                report.failed_order_ids.append(order_id)
                logger.warning(
                    "Failed to reconcile order",
                    order_id=order_id,
                    error=str(exc),
                    error_type=type(exc).__name__,
                )
                continue

            if changed:
                report.updated += 1

        logger.info("Reconciliation sweep complete", **report.to_dict())
        return report


@subscriptions.command_handler(part_of=Order)
class ReconciliationHandler:
    @handle(ReconcileOrder)
    def reconcile_order(self, command):
        """Returns True when the order was changed and saved."""
        today = today_or(command.as_of)
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)

        changed = order.recompute_status(today)
        if command.reconcile_attendance:
            changed = order.reconcile_attendance(today) or changed

        if changed:
            repo.add(order)
            logger.info("Reconciled order", order_id=str(order.id), status=order.status, as_of=today.isoformat())
        return changed
