"""Subscriptions domain API package."""

from subscriptions.api.routes import attendance_router, maintenance_router, order_router

__all__ = ["order_router", "attendance_router", "maintenance_router"]
