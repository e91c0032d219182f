"""Order status transition helpers."""

from __future__ import annotations

from datetime import datetime

from console.core.errors import InvalidTransition
from console.models.order import TERMINAL_STATUSES, Order

ORDER_STATUSES: list[str] = ["pending", "preparing", "ready", "delivery", "completed", "cancelled"]

ALLOWED_TRANSITIONS: dict[str, set[str]] = {
    "pending": {"preparing", "cancelled"},
    "preparing": {"ready", "delivery", "cancelled"},
    "ready": {"completed", "cancelled"},
    "delivery": {"completed", "cancelled"},
    "completed": set(),
    "cancelled": set(),
}


def allowed_targets(order: Order) -> set[str]:
    """Return statuses reachable from the order's current status.

    ``preparing`` branches on the delivery type: delivery orders go out for
    delivery, pickup orders become ready at the counter.
    """
    targets = set(ALLOWED_TRANSITIONS.get(order.status, set()))
    if order.status == "preparing":
        targets.discard("ready" if order.delivery_type == "delivery" else "delivery")
    return targets


def next_status(order: Order) -> str | None:
    """Return the forward (non-cancel) status for the order, if any."""
    if order.status == "pending":
        return "preparing"
    if order.status == "preparing":
        return "delivery" if order.delivery_type == "delivery" else "ready"
    if order.status in {"ready", "delivery"}:
        return "completed"
    return None


def can_transition(order: Order, new: str) -> bool:
    """Return whether order can move from its current status to new."""
    return new in allowed_targets(order)


def validate_transition(order: Order, new_status: str) -> None:
    if new_status not in ORDER_STATUSES or not can_transition(order, new_status):
        raise InvalidTransition(order.status, new_status)


def apply_transition(order: Order, new_status: str, now: datetime) -> None:
    """Set status and bump ``updated_at``; no other fields are touched."""
    validate_transition(order, new_status)
    order.status = new_status
    order.updated_at = now


def mark_printed(order: Order, now: datetime) -> bool:
    """Finalize an order whose receipt was printed.

    Non-terminal orders are forced to ``completed``; returns whether the
    status changed.
    """
    order.printed_at = now
    if order.status in TERMINAL_STATUSES:
        return False
    order.status = "completed"
    order.updated_at = now
    return True
