"""Daily trigger for the reconciliation sweep.

Runs the sweep once a day at the configured UTC wall-clock time
(``sweep_time_utc`` in ``domain.toml``) on an APScheduler cron trigger.
Stopping the process (SIGINT / SIGTERM) lets the sweep finish the order it is
on and exit.

Usage:
    python src/scheduler.py                 # Run forever, once a day
    python src/scheduler.py --once          # Run one sweep now and exit
    python src/scheduler.py --at 02:30      # Override the configured time
"""

import argparse
import signal
import threading
from datetime import UTC, datetime, time

import structlog
from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.cron import CronTrigger

logger = structlog.get_logger(__name__)

SWEEP_JOB_ID = "reconciliation-sweep"


def _parse_time(value: str) -> time:
    hours, minutes = value.split(":")
    return time(int(hours), int(minutes), tzinfo=UTC)


def daily_trigger(at: time) -> CronTrigger:
    return CronTrigger(hour=at.hour, minute=at.minute, timezone="UTC")


class DailySweepScheduler:
    """Fires ``ReconciliationSweep`` once a day.

    A stop request ends the blocking loop and is passed to a running sweep as
    its ``should_stop`` callable, so the sweep halts between orders.
    """

    def __init__(self, domain, at: time):
        self.domain = domain
        self.at = at
        self._stop = threading.Event()
        self._scheduler = BlockingScheduler(timezone="UTC")
        self.job = self._scheduler.add_job(
            self.run_sweep,
            daily_trigger(at),
            id=SWEEP_JOB_ID,
            max_instances=1,
            coalesce=True,
            misfire_grace_time=3600,
        )

    def next_run(self, now: datetime | None = None) -> datetime:
        """When the sweep fires next, as seen from ``now`` (UTC)."""
        return self.job.trigger.get_next_fire_time(None, now or datetime.now(UTC))

    def stop(self, *_):
        self._stop.set()
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)

    def run_sweep(self):
        from subscriptions.order.reconciliation import ReconciliationSweep

        with self.domain.domain_context():
            return ReconciliationSweep(should_stop=self._stop.is_set).run()

    def start(self):
        logger.info("Scheduler started", sweep_time_utc=self.at.strftime("%H:%M"))
        self._scheduler.start()
        logger.info("Scheduler stopped")


def run(at_override=None, once=False):
    from subscriptions.domain import subscriptions
    from subscriptions.shared.config import sweep_time_utc

    subscriptions.init()
    with subscriptions.domain_context():
        at = _parse_time(at_override or sweep_time_utc())

    scheduler = DailySweepScheduler(subscriptions, at)
    if once:
        scheduler.run_sweep()
        return

    for sig in (signal.SIGINT, signal.SIGTERM):
        signal.signal(sig, scheduler.stop)
    scheduler.start()


def main():
    parser = argparse.ArgumentParser(description="MealStream daily reconciliation scheduler")
    parser.add_argument("--at", help="UTC time of day to run the sweep (HH:MM)")
    parser.add_argument("--once", action="store_true", help="Run a single sweep now and exit")
    args = parser.parse_args()

    run(args.at, args.once)


if __name__ == "__main__":
    main()
