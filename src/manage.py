"""MealStream management CLI.

Creates and drops the database schema and runs the reconciliation sweep on
demand, outside the daily schedule.

Usage:
    python src/manage.py setup-db                      # Create all tables
    python src/manage.py drop-db                       # Drop all tables
    python src/manage.py reconcile                     # Reconcile every order as of today
    python src/manage.py reconcile --as-of 2024-01-11  # ...or as of a given day
"""

import argparse
import json
import sys


def _domain():
    from subscriptions.domain import subscriptions

    subscriptions.init()
    return subscriptions


def setup_database():
    from subscriptions.utils.db import setup_db

    domain = _domain()
    print("Creating subscriptions database schema...")
    setup_db(domain)
    print("Done.")


def drop_database():
    from subscriptions.utils.db import drop_db

    domain = _domain()
    print("Dropping subscriptions database schema...")
    drop_db(domain)
    print("Done.")


def reconcile(as_of=None, page_size=None, reconcile_attendance=True):
    """Run the reconciliation sweep once and return its report."""
    from subscriptions.order.reconciliation import ReconciliationSweep

    domain = _domain()
    with domain.domain_context():
        report = ReconciliationSweep(
            as_of=as_of,
            page_size=page_size,
            reconcile_attendance=reconcile_attendance,
        ).run()
    print(json.dumps(report.to_dict(), indent=2))
    return report


def main():
    parser = argparse.ArgumentParser(description="MealStream management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    reconcile_parser = subparsers.add_parser("reconcile", help="Run the reconciliation sweep now")
    reconcile_parser.add_argument("--as-of", help="Day to reconcile against (YYYY-MM-DD, default: today UTC)")
    reconcile_parser.add_argument("--page-size", type=int, help="Orders fetched per page")
    reconcile_parser.add_argument(
        "--skip-attendance",
        action="store_true",
        help="Only recompute statuses; do not repair attendance ledgers",
    )

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    elif args.command == "reconcile":
        report = reconcile(args.as_of, args.page_size, not args.skip_attendance)
        sys.exit(1 if report.failed else 0)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
