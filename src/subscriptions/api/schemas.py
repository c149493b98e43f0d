"""Pydantic request/response schemas for the Subscriptions API.

These are external contracts (anti-corruption layer), separate from
internal Protean commands. Dates are accepted as ISO-8601 strings and
validated by the domain, so malformed values surface as ``invalid_input``.
"""

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Order Request Schemas
# ---------------------------------------------------------------------------
class CreateOrderRequest(BaseModel):
    subscriber_id: str
    plan: list[str]
    period_start: str
    period_end: str
    as_of: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "subscriber_id": "sub-001",
                    "plan": ["Breakfast", "Lunch", "Dinner"],
                    "period_start": "2024-01-01",
                    "period_end": "2024-01-31",
                }
            ]
        }
    }


class RenewOrderRequest(BaseModel):
    plan: list[str] | None = None
    period_start: str | None = None
    period_end: str | None = None
    as_of: str | None = None


class EditOrderRequest(BaseModel):
    plan: list[str] | None = None
    period_start: str | None = None
    period_end: str | None = None
    as_of: str | None = None


# ---------------------------------------------------------------------------
# Leave Request Schemas
# ---------------------------------------------------------------------------
class LeaveRequest(BaseModel):
    start: str
    end: str
    affected_meals: list[str] | None = None
    as_of: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "start": "2024-01-06",
                    "end": "2024-01-07",
                    "affected_meals": ["Breakfast", "Lunch", "Dinner"],
                }
            ]
        }
    }


# ---------------------------------------------------------------------------
# Attendance Request Schemas
# ---------------------------------------------------------------------------
class MarkAttendanceRequest(BaseModel):
    day: str
    meal: str
    status: str
    as_of: str | None = None


class AttendanceChange(BaseModel):
    order_id: str
    meal: str
    status: str


class AttendanceBatchRequest(BaseModel):
    day: str
    changes: list[AttendanceChange] = Field(min_length=1)
    as_of: str | None = None


class ReconcileRequest(BaseModel):
    as_of: str | None = None
    reconcile_attendance: bool = True
    page_size: int | None = Field(default=None, ge=1)


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class OrderIdResponse(BaseModel):
    order_id: str


class LeaveIdResponse(BaseModel):
    leave_id: str


class StatusResponse(BaseModel):
    status: str = "ok"


class LeaveSchema(BaseModel):
    leave_id: str
    start: str
    end: str
    affected_meals: list[str]
    leave_day_count: int
    full_days_off: int


class AttendanceDaySchema(BaseModel):
    day: str
    breakfast: str
    lunch: str
    dinner: str


class OrderSnapshot(BaseModel):
    order_id: str
    subscriber_id: str
    plan: list[str]
    period_start: str
    period_end: str
    status: str
    billed: bool
    leave_day_cap: int
    total_leave_days: int
    renewed_from: str | None = None
    leaves: list[LeaveSchema]
    attendances: list[AttendanceDaySchema]

    @classmethod
    def from_order(cls, order) -> "OrderSnapshot":
        leaves = sorted(order.leaves, key=lambda lv: lv.start)
        attendances = sorted(order.attendances, key=lambda a: a.day)
        return cls(
            order_id=str(order.id),
            subscriber_id=str(order.subscriber_id),
            plan=order.meal_plan,
            period_start=order.period_start.isoformat(),
            period_end=order.period_end.isoformat(),
            status=order.status,
            billed=bool(order.billed),
            leave_day_cap=order.leave_day_cap,
            total_leave_days=order.total_leave_days,
            renewed_from=str(order.renewed_from) if order.renewed_from else None,
            leaves=[
                LeaveSchema(
                    leave_id=str(leave.id),
                    start=leave.start.isoformat(),
                    end=leave.end.isoformat(),
                    affected_meals=leave.meals,
                    leave_day_count=leave.leave_day_count,
                    full_days_off=leave.full_days_off or 0,
                )
                for leave in leaves
            ],
            attendances=[
                AttendanceDaySchema(
                    day=record.day.isoformat(),
                    breakfast=record.breakfast,
                    lunch=record.lunch,
                    dinner=record.dinner,
                )
                for record in attendances
            ],
        )


class AttendanceOutcome(BaseModel):
    order_id: str
    meal: str | None = None
    status: str | None = None
    ok: bool
    error: str | None = None


class AttendanceBatchResponse(BaseModel):
    day: str
    outcomes: list[AttendanceOutcome]


class SweepReportResponse(BaseModel):
    as_of: str
    examined: int
    updated: int
    failed: int
    failed_order_ids: list[str]
    interrupted: bool
