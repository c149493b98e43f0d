"""FastAPI routes for the Subscriptions domain: orders, leaves, attendance, maintenance."""

import json

from fastapi import APIRouter
from protean.utils.globals import current_domain

from subscriptions.api.schemas import (
    AttendanceBatchRequest,
    AttendanceBatchResponse,
    CreateOrderRequest,
    EditOrderRequest,
    LeaveIdResponse,
    LeaveRequest,
    MarkAttendanceRequest,
    OrderIdResponse,
    OrderSnapshot,
    ReconcileRequest,
    RenewOrderRequest,
    StatusResponse,
    SweepReportResponse,
)
from subscriptions.order.billing import MarkOrderBilled
from subscriptions.order.creation import CreateOrder, RenewOrder
from subscriptions.order.delivery import MarkDelivery, mark_delivery_batch
from subscriptions.order.editing import EditOrder
from subscriptions.order.leave_management import AddLeave, EditLeave, RemoveLeave
from subscriptions.order.order import Order
from subscriptions.order.reconciliation import ReconciliationSweep


def _meals(values):
    return json.dumps(values) if values is not None else None


def _snapshot(order_id) -> OrderSnapshot:
    order = current_domain.repository_for(Order).get(order_id)
    return OrderSnapshot.from_order(order)


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderIdResponse)
async def create_order(body: CreateOrderRequest) -> OrderIdResponse:
    command = CreateOrder(
        subscriber_id=body.subscriber_id,
        plan=_meals(body.plan),
        period_start=body.period_start,
        period_end=body.period_end,
        as_of=body.as_of,
    )
    result = current_domain.process(command, asynchronous=False)
    return OrderIdResponse(order_id=result)


@order_router.post("/{order_id}/renew", status_code=201, response_model=OrderIdResponse)
async def renew_order(order_id: str, body: RenewOrderRequest) -> OrderIdResponse:
    command = RenewOrder(
        order_id=order_id,
        plan=_meals(body.plan),
        period_start=body.period_start,
        period_end=body.period_end,
        as_of=body.as_of,
    )
    result = current_domain.process(command, asynchronous=False)
    return OrderIdResponse(order_id=result)


@order_router.get("/{order_id}", response_model=OrderSnapshot)
async def get_order(order_id: str) -> OrderSnapshot:
    return _snapshot(order_id)


@order_router.put("/{order_id}", response_model=OrderSnapshot)
async def edit_order(order_id: str, body: EditOrderRequest) -> OrderSnapshot:
    command = EditOrder(
        order_id=order_id,
        plan=_meals(body.plan),
        period_start=body.period_start,
        period_end=body.period_end,
        as_of=body.as_of,
    )
    current_domain.process(command, asynchronous=False)
    return _snapshot(order_id)


@order_router.post("/{order_id}/leaves", status_code=201, response_model=LeaveIdResponse)
async def add_leave(order_id: str, body: LeaveRequest) -> LeaveIdResponse:
    command = AddLeave(
        order_id=order_id,
        start=body.start,
        end=body.end,
        affected_meals=_meals(body.affected_meals),
        as_of=body.as_of,
    )
    result = current_domain.process(command, asynchronous=False)
    return LeaveIdResponse(leave_id=result)


@order_router.put("/{order_id}/leaves/{leave_id}", response_model=OrderSnapshot)
async def edit_leave(order_id: str, leave_id: str, body: LeaveRequest) -> OrderSnapshot:
    command = EditLeave(
        order_id=order_id,
        leave_id=leave_id,
        start=body.start,
        end=body.end,
        affected_meals=_meals(body.affected_meals),
        as_of=body.as_of,
    )
    current_domain.process(command, asynchronous=False)
    return _snapshot(order_id)


@order_router.delete("/{order_id}/leaves/{leave_id}", response_model=OrderSnapshot)
async def remove_leave(order_id: str, leave_id: str) -> OrderSnapshot:
    command = RemoveLeave(order_id=order_id, leave_id=leave_id)
    current_domain.process(command, asynchronous=False)
    return _snapshot(order_id)


@order_router.put("/{order_id}/attendance", response_model=OrderSnapshot)
async def mark_attendance(order_id: str, body: MarkAttendanceRequest) -> OrderSnapshot:
    command = MarkDelivery(
        order_id=order_id,
        day=body.day,
        meal=body.meal,
        status=body.status,
        as_of=body.as_of,
    )
    current_domain.process(command, asynchronous=False)
    return _snapshot(order_id)


@order_router.post("/{order_id}/billing", response_model=StatusResponse)
async def mark_billed(order_id: str) -> StatusResponse:
    current_domain.process(MarkOrderBilled(order_id=order_id), asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Attendance Router
# ---------------------------------------------------------------------------
attendance_router = APIRouter(prefix="/attendance", tags=["attendance"])


@attendance_router.post("/batch", response_model=AttendanceBatchResponse)
async def mark_attendance_batch(body: AttendanceBatchRequest) -> AttendanceBatchResponse:
    outcomes = mark_delivery_batch(
        body.day,
        [change.model_dump() for change in body.changes],
        as_of=body.as_of,
    )
    return AttendanceBatchResponse(day=body.day, outcomes=outcomes)


# ---------------------------------------------------------------------------
# Maintenance Router
# ---------------------------------------------------------------------------
maintenance_router = APIRouter(prefix="/maintenance", tags=["maintenance"])


@maintenance_router.post("/reconcile", response_model=SweepReportResponse)
async def run_reconciliation(body: ReconcileRequest | None = None) -> SweepReportResponse:
    """Run the daily reconciliation sweep now (for external schedulers and operators)."""
    body = body or ReconcileRequest()
    report = ReconciliationSweep(
        as_of=body.as_of,
        page_size=body.page_size,
        reconcile_attendance=body.reconcile_attendance,
    ).run()
    return SweepReportResponse(**report.to_dict())
