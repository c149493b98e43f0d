"""BDD tests for leave management."""

from protean.exceptions import ObjectNotFoundError, ValidationError
from pytest_bdd import parsers, scenarios, when

scenarios("features/leave_management.feature")


def _meals(text):
    return [m.strip() for m in text.split(",") if m.strip()]


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('a leave is declared from "{start}" to "{end}" for "{meals}"'))
def declare_leave(order, today, error, start, end, meals):
    try:
        order.add_leave(start, end, _meals(meals), today=today["day"])
    except ValidationError as exc:
        error["exc"] = exc


@when("the leave is removed")
def remove_leave(order, today):
    order.remove_leave(order.leaves[0].id, today=today["day"])


@when(parsers.cfparse('the leave is moved to "{start}" to "{end}" for "{meals}"'))
def move_leave(order, today, error, start, end, meals):
    try:
        order.edit_leave(order.leaves[0].id, start, end, _meals(meals), today=today["day"])
    except (ValidationError, ObjectNotFoundError) as exc:
        error["exc"] = exc
