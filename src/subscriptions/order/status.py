"""Order status machine.

The status is a pure function of the order period, its leaves, and the
current day. It keeps no memory of the previous state, so recomputing is
always safe and idempotent:

    today inside any leave      -> OnLeave
    today <  period_start       -> Upcoming
    start <= today <= end       -> Active
    today >  period_end         -> Expired
"""

from enum import Enum

from subscriptions.shared.calendar import normalize


class OrderStatus(Enum):
    UPCOMING = "Upcoming"
    ACTIVE = "Active"
    ON_LEAVE = "OnLeave"
    EXPIRED = "Expired"


def recompute(period_start, period_end, leaves, today) -> OrderStatus:
    today = normalize(today)
    if any(leave.start <= today <= leave.end for leave in leaves):
        return OrderStatus.ON_LEAVE
    if today < period_start:
        return OrderStatus.UPCOMING
    if today <= period_end:
        return OrderStatus.ACTIVE
    return OrderStatus.EXPIRED
