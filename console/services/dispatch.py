"""Driver dispatch and delivery ETA logic."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import datetime, timedelta

from console.core.config import settings
from console.core.errors import InvalidTransition, ValidationError
from console.models.driver import Driver
from console.models.order import Order
from console.services.order_status import apply_transition
from console.utils.time import as_utc

logger = logging.getLogger(__name__)

LoadAdjuster = Callable[[Driver, int], None]


def clamp_eta_minutes(
    minutes: object,
    *,
    lower: int | None = None,
    upper: int | None = None,
) -> int:
    """Validate operator ETA input and clamp it to the configured range."""
    if isinstance(minutes, bool) or not isinstance(minutes, int):
        raise ValidationError("Estimated minutes must be a whole number")
    if minutes <= 0:
        raise ValidationError("Estimated minutes must be positive")
    lower = settings.delivery_min_minutes if lower is None else lower
    upper = settings.delivery_max_minutes if upper is None else upper
    return max(lower, min(upper, minutes))


def assignable_drivers(drivers: Iterable[Driver]) -> list[Driver]:
    """Drivers the operator may pick from, least loaded first."""
    candidates = [driver for driver in drivers if not driver.manually_offline]
    return sorted(candidates, key=lambda driver: (driver.active_deliveries, driver.name.lower(), driver.id))


def adjust_load(driver: Driver, delta: int) -> None:
    """Change the in-memory delivery load; it never drops below zero."""
    driver.active_deliveries = max(0, (driver.active_deliveries or 0) + delta)


def release_driver(driver: Driver, adjust: LoadAdjuster = adjust_load) -> None:
    if (driver.active_deliveries or 0) <= 0:
        logger.warning("[DISPATCH] Driver %s released with no active deliveries", driver.id)
    adjust(driver, -1)


def assign_driver(
    order: Order,
    driver: Driver | None,
    *,
    previous: Driver | None,
    now: datetime,
    adjust: LoadAdjuster = adjust_load,
) -> None:
    """Assign, reassign or (with ``driver=None``) unassign the order's driver.

    ``previous`` must be the driver currently referenced by the order. The
    order status is left untouched. ``adjust`` applies each load change; the
    Order Store passes one that updates the counter atomically in SQL.
    """
    if order.delivery_type != "delivery":
        raise ValidationError("Drivers can only be assigned to delivery orders")
    if order.is_terminal:
        raise ValidationError(f"Order is already {order.status}")
    current_id = previous.id if previous is not None else None
    if order.assigned_driver_id != current_id:
        raise ValidationError("Previous driver does not match the order assignment")
    if driver is not None and driver.manually_offline:
        raise ValidationError(f"Driver {driver.name} is offline")

    new_id = driver.id if driver is not None else None
    if new_id == current_id:
        return

    if previous is not None:
        release_driver(previous, adjust)
    if driver is not None:
        adjust(driver, 1)
    order.assigned_driver_id = new_id
    order.updated_at = now
    logger.info("[DISPATCH] Order %s driver %s -> %s", order.id, current_id, new_id)


def start_delivery(order: Order, estimated_minutes: object, now: datetime) -> int:
    """Stamp departure/ETA and move a preparing delivery order to ``delivery``.

    Returns the clamped minute value actually used.
    """
    minutes = clamp_eta_minutes(estimated_minutes)
    if order.delivery_type != "delivery":
        raise ValidationError("Pickup orders are not dispatched")
    if order.status != "preparing":
        raise InvalidTransition(order.status, "delivery")

    apply_transition(order, "delivery", now)
    order.delivery_departed_at = now
    order.estimated_delivery_time = now + timedelta(minutes=minutes)
    return minutes


def pickup_ready_at(order: Order, pickup_minutes: int | None = None) -> datetime | None:
    """Counter-ready estimate for pickup orders, derived on read and never stored."""
    if order.delivery_type != "pickup" or order.created_at is None:
        return None
    minutes = settings.pickup_minutes if pickup_minutes is None else pickup_minutes
    return as_utc(order.created_at) + timedelta(minutes=minutes)
