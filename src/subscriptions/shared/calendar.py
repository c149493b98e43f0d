"""Calendar helpers: whole-day normalisation and inclusive day ranges.

All day arithmetic in the subscriptions domain goes through these helpers.
Days are anchored to UTC midnight: aware datetimes are converted to UTC before
truncation and naive datetimes are taken to already be in UTC.
"""

from datetime import UTC, date, datetime, timedelta

from subscriptions.shared.errors import InvalidInput, InvalidRange

ONE_DAY = timedelta(days=1)


def normalize(value) -> date:
    """Truncate a date, datetime or ISO-8601 string to a calendar day (UTC)."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(UTC)
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            if len(text) == 10:
                return date.fromisoformat(text)
            return normalize(datetime.fromisoformat(text.replace("Z", "+00:00")))
        except ValueError:
            raise InvalidInput(f"Not a valid date: {value!r}", field="date") from None
    raise InvalidInput(f"Not a valid date: {value!r}", field="date")


def _check_range(start: date, end: date) -> None:
    if start > end:
        raise InvalidRange(f"Start date {start.isoformat()} is after end date {end.isoformat()}")


def days_between_inclusive(start, end) -> int:
    """Number of calendar days in ``[start, end]``, counting both ends."""
    start, end = normalize(start), normalize(end)
    _check_range(start, end)
    return (end - start).days + 1


class DayRange:
    """Finite, restartable sequence of consecutive days, inclusive of both ends."""

    def __init__(self, start: date, end: date):
        self.start = start
        self.end = end

    def __iter__(self):
        current = self.start
        while current <= self.end:
            yield current
            current += ONE_DAY

    def __len__(self):
        return (self.end - self.start).days + 1

    def __contains__(self, day):
        return self.start <= normalize(day) <= self.end

    def __repr__(self):
        return f"DayRange({self.start.isoformat()}, {self.end.isoformat()})"

    def overlaps(self, other: "DayRange") -> bool:
        return self.start <= other.end and other.start <= self.end


def each_day(start, end) -> DayRange:
    """Lazily iterate every day from ``start`` to ``end`` inclusive."""
    start, end = normalize(start), normalize(end)
    _check_range(start, end)
    return DayRange(start, end)
