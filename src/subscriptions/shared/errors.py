"""Error kinds raised by the subscription order lifecycle.

Every rejected operation carries a stable ``kind`` string and a human-readable
message. Messages are keyed by kind so that ``exc.messages`` reads as
``{"overlapping_leave": ["..."]}`` at the API boundary.

Validation failures subclass Protean's ``ValidationError`` (HTTP 400);
references to a day or leave that does not exist subclass
``ObjectNotFoundError`` (HTTP 404).
"""

from protean.exceptions import ObjectNotFoundError, ValidationError


class _KindedError:
    kind = "error"

    def __init__(self, message, field=None):
        self.message = message
        self.field = field
        super().__init__({field or self.kind: [message]})

    def __str__(self):
        return f"{self.kind}: {self.message}"


class InvalidInput(_KindedError, ValidationError):
    """Malformed or missing fields."""

    kind = "invalid_input"


class InvalidRange(_KindedError, ValidationError):
    """A date range whose start is after its end."""

    kind = "invalid_range"


class OutOfRange(_KindedError, ValidationError):
    """A leave that does not lie inside its order's period."""

    kind = "out_of_range"


class OverlappingLeave(_KindedError, ValidationError):
    """Two leaves share a day and an affected meal."""

    kind = "overlapping_leave"


class LeaveCapExceeded(_KindedError, ValidationError):
    """Total leave days of an order would exceed the configured cap."""

    kind = "leave_cap_exceeded"


class ConflictingLeave(_KindedError, ValidationError):
    """An order edit would orphan an existing leave."""

    kind = "conflicting_leave"


class OverlappingOrder(_KindedError, ValidationError):
    """A subscriber already has an order covering part of the period."""

    kind = "overlapping_order"


class InvalidTransition(_KindedError, ValidationError):
    """An attendance change that is not allowed, e.g. marking a leave day."""

    kind = "invalid_transition"


class AlreadyDelivered(_KindedError, ValidationError):
    """The meal was already delivered on that day."""

    kind = "already_delivered"


class UnknownDate(_KindedError, ObjectNotFoundError):
    """No attendance record exists for the requested day."""

    kind = "unknown_date"


class LeaveNotFound(_KindedError, ObjectNotFoundError):
    """The order has no leave with the requested identity."""

    kind = "not_found"
