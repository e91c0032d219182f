"""Driver dispatch and ETA tests."""

from datetime import datetime, timedelta, timezone

import pytest

from console.core.errors import InvalidTransition, ValidationError
from console.models.driver import Driver
from console.models.order import Order
from console.services.dispatch import (
    assign_driver,
    assignable_drivers,
    clamp_eta_minutes,
    pickup_ready_at,
    release_driver,
    start_delivery,
)

NOW = datetime(2026, 10, 19, 18, 30, tzinfo=timezone.utc)


def _order(status: str = "preparing", delivery_type: str = "delivery") -> Order:
    return Order(
        id=7,
        customer_name="Nikos",
        status=status,
        delivery_type=delivery_type,
        payment_method="cash",
        payment_status="unpaid",
        created_at=datetime(2026, 10, 19, 18, 0, tzinfo=timezone.utc),
    )


def _driver(driver_id: int, name: str, *, offline: bool = False, load: int = 0) -> Driver:
    return Driver(id=driver_id, name=name, phone="0612345678", manually_offline=offline, active_deliveries=load)


def test_assign_reassign_and_unassign_keep_one_slot_per_order() -> None:
    order = _order()
    anna = _driver(1, "Anna")
    bram = _driver(2, "Bram")

    assign_driver(order, anna, previous=None, now=NOW)
    assert order.assigned_driver_id == 1
    assert (anna.active_deliveries, bram.active_deliveries) == (1, 0)
    assert anna.effective_status == "busy"

    assign_driver(order, bram, previous=anna, now=NOW)
    assert order.assigned_driver_id == 2
    assert (anna.active_deliveries, bram.active_deliveries) == (0, 1)
    assert anna.active_deliveries + bram.active_deliveries <= 1

    assign_driver(order, None, previous=bram, now=NOW)
    assert order.assigned_driver_id is None
    assert (anna.active_deliveries, bram.active_deliveries) == (0, 0)
    assert bram.effective_status == "available"


def test_assignment_does_not_change_order_status() -> None:
    order = _order(status="pending")

    assign_driver(order, _driver(1, "Anna"), previous=None, now=NOW)

    assert order.status == "pending"
    assert order.updated_at == NOW


def test_reassigning_same_driver_is_a_no_op() -> None:
    order = _order()
    anna = _driver(1, "Anna")
    assign_driver(order, anna, previous=None, now=NOW)

    assign_driver(order, anna, previous=anna, now=NOW)

    assert anna.active_deliveries == 1


def test_pickup_orders_cannot_get_a_driver() -> None:
    order = _order(delivery_type="pickup")
    anna = _driver(1, "Anna")

    with pytest.raises(ValidationError):
        assign_driver(order, anna, previous=None, now=NOW)
    assert anna.active_deliveries == 0


def test_offline_driver_is_rejected_by_assignment_itself() -> None:
    order = _order()
    offline = _driver(3, "Chris", offline=True)

    with pytest.raises(ValidationError):
        assign_driver(order, offline, previous=None, now=NOW)
    assert offline.active_deliveries == 0
    assert order.assigned_driver_id is None


def test_closed_orders_and_mismatched_previous_driver_are_rejected() -> None:
    closed = _order(status="completed")
    with pytest.raises(ValidationError):
        assign_driver(closed, _driver(1, "Anna"), previous=None, now=NOW)

    order = _order()
    order.assigned_driver_id = 1
    with pytest.raises(ValidationError):
        assign_driver(order, _driver(2, "Bram"), previous=None, now=NOW)


def test_offline_override_wins_over_load() -> None:
    driver = _driver(1, "Anna", offline=True, load=2)

    assert driver.effective_status == "offline"


def test_assignable_drivers_skip_offline_and_sort_by_load() -> None:
    drivers = [
        _driver(1, "Zoe", load=2),
        _driver(2, "Anna", load=0),
        _driver(3, "Chris", offline=True),
        _driver(4, "Bram", load=0),
    ]

    assert [driver.name for driver in assignable_drivers(drivers)] == ["Anna", "Bram", "Zoe"]


def test_release_never_goes_negative() -> None:
    driver = _driver(1, "Anna", load=0)

    release_driver(driver)

    assert driver.active_deliveries == 0


def test_start_delivery_sets_departure_and_eta() -> None:
    order = _order(status="preparing")

    used = start_delivery(order, 30, NOW)

    assert used == 30
    assert order.status == "delivery"
    assert order.delivery_departed_at == NOW
    assert order.estimated_delivery_time == order.delivery_departed_at + timedelta(minutes=30)


def test_start_delivery_clamps_minutes() -> None:
    order = _order(status="preparing")

    used = start_delivery(order, 500, NOW)

    assert used == 120
    assert order.estimated_delivery_time == NOW + timedelta(minutes=120)


@pytest.mark.parametrize("minutes", [0, -5, 12.5, "30", True, None])
def test_invalid_eta_minutes_are_rejected(minutes) -> None:
    with pytest.raises(ValidationError):
        clamp_eta_minutes(minutes)


def test_clamp_raises_small_values_to_lower_bound() -> None:
    assert clamp_eta_minutes(1) == 5
    assert clamp_eta_minutes(45) == 45
    assert clamp_eta_minutes(8, lower=10, upper=20) == 10


def test_start_delivery_requires_preparing_delivery_order() -> None:
    with pytest.raises(ValidationError):
        start_delivery(_order(delivery_type="pickup"), 30, NOW)

    pending = _order(status="pending")
    with pytest.raises(InvalidTransition):
        start_delivery(pending, 30, NOW)
    assert pending.delivery_departed_at is None
    assert pending.estimated_delivery_time is None


def test_pickup_ready_estimate_is_derived_from_created_at() -> None:
    pickup = _order(delivery_type="pickup")

    assert pickup_ready_at(pickup, 20) == datetime(2026, 10, 19, 18, 20, tzinfo=timezone.utc)
    assert pickup_ready_at(_order(delivery_type="delivery"), 20) is None


def test_pickup_ready_estimate_treats_naive_timestamps_as_utc() -> None:
    pickup = _order(delivery_type="pickup")
    pickup.created_at = datetime(2026, 10, 19, 18, 0)

    assert pickup_ready_at(pickup, 15) == datetime(2026, 10, 19, 18, 15, tzinfo=timezone.utc)
