"""Subscriptions bounded context: meal subscription orders, leaves, and attendance.

Owns the lifecycle of a subscription order: the per-day, per-meal attendance
ledger, leave (vacation) periods nested inside the order, the status machine
driven by the calendar, and the daily reconciliation sweep.
"""

from protean.domain import Domain

from subscriptions.utils.logging import configure_logging, get_logger

configure_logging()

logger = get_logger(__name__)

subscriptions = Domain(name="subscriptions")
