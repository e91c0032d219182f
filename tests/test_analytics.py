"""Analytics aggregation tests."""

from datetime import date, datetime, timezone
from decimal import Decimal
from zoneinfo import ZoneInfo

import pytest
from pydantic import ValidationError as PydanticValidationError

from console.models.menu import MenuItem
from console.models.order import Order, OrderItem
from console.services.analytics import aggregate, inclusive_vat, peak, trend_days

TODAY = date(2026, 10, 19)
UTC = timezone.utc


def _order(
    order_id: int,
    *,
    status: str = "completed",
    payment_method: str = "card",
    payment_status: str = "paid",
    delivery_type: str = "pickup",
    delivery_fee: str = "0.00",
    created_at: datetime,
    items: list[tuple[str, str, int, int | None]],
) -> Order:
    order = Order(
        id=order_id,
        customer_name=f"Customer {order_id}",
        status=status,
        payment_method=payment_method,
        payment_status=payment_status,
        delivery_type=delivery_type,
        delivery_fee=Decimal(delivery_fee),
        created_at=created_at,
        items=[
            OrderItem(name=name, unit_price=Decimal(price), quantity=quantity, menu_item_id=menu_item_id)
            for name, price, quantity, menu_item_id in items
        ],
    )
    order.recalculate_totals()
    return order


def _catalog() -> list[MenuItem]:
    return [
        MenuItem(id=1, name="Gyros", category="Mains", price=Decimal("16.50"), is_active=True),
        MenuItem(id=4, name="Tzatziki", category="Starters", price=Decimal("6.50"), is_active=True),
    ]


def _orders() -> list[Order]:
    return [
        _order(
            1,
            delivery_type="delivery",
            delivery_fee="2.50",
            created_at=datetime(2026, 10, 19, 12, 15, tzinfo=UTC),
            items=[("Gyros", "16.50", 2, 1)],
        ),
        _order(
            2,
            payment_method="cash",
            payment_status="unpaid",
            created_at=datetime(2026, 10, 18, 18, 40, tzinfo=UTC),
            # Baklava (id 99) has been removed from the menu.
            items=[("Tzatziki", "6.50", 1, 4), ("Baklava", "6.00", 3, 99)],
        ),
        _order(
            3,
            payment_method="ideal",
            payment_status="failed",
            created_at=datetime(2026, 10, 19, 13, 0, tzinfo=UTC),
            items=[("Gyros", "16.50", 1, 1)],
        ),
        _order(
            4,
            status="preparing",
            payment_method="ideal",
            created_at=datetime(2026, 10, 19, 14, 0, tzinfo=UTC),
            items=[("Gyros", "16.50", 1, 1)],
        ),
        _order(
            5,
            status="pending",
            payment_status="unpaid",
            created_at=datetime(2026, 10, 19, 14, 5, tzinfo=UTC),
            items=[("Gyros", "16.50", 1, 1)],
        ),
        _order(
            6,
            payment_method="bancontact",
            created_at=datetime(2026, 9, 1, 19, 0, tzinfo=UTC),
            items=[("Tzatziki", "6.50", 2, 4)],
        ),
    ]


def test_inclusive_vat_splits_gross_amount() -> None:
    assert inclusive_vat(Decimal("109.00"), 9) == (Decimal("9.00"), Decimal("100.00"))
    assert inclusive_vat(Decimal("0"), 9) == (Decimal("0.00"), Decimal("0.00"))


def test_peak_hour_tie_goes_to_earliest_hour() -> None:
    hourly = [0] * 24
    hourly[3] = 7
    hourly[5] = 7
    hourly[1] = 2

    assert peak(hourly) == (3, 7)
    assert peak([0] * 24) == (0, 0)


def test_trend_window_lengths() -> None:
    assert trend_days("daily") == 7
    assert trend_days("weekly") == 7
    assert trend_days("monthly") == 30


def test_range_metrics_only_count_completed_accepted_orders() -> None:
    snapshot = aggregate(
        _orders(), _catalog(), today=TODAY, tz=UTC, start=date(2026, 10, 12), end=TODAY
    )

    assert snapshot.revenue == Decimal("60.00")
    assert snapshot.order_count == 2
    assert snapshot.avg_order_value == Decimal("30.00")
    assert snapshot.tax == Decimal("4.95")
    assert snapshot.net_revenue == Decimal("55.05")
    assert snapshot.total_dishes == 6
    assert snapshot.delivery_methods.delivery == 1
    assert snapshot.delivery_methods.pickup == 1
    assert snapshot.payment_methods.card == 1
    assert snapshot.payment_methods.cash == 1
    assert snapshot.payment_methods.ideal == 0
    assert snapshot.payment_methods.bancontact == 0


def test_deleted_menu_items_count_for_revenue_but_not_categories() -> None:
    snapshot = aggregate(
        _orders(), _catalog(), today=TODAY, tz=UTC, start=date(2026, 10, 12), end=TODAY
    )

    categories = {entry.category: entry.revenue for entry in snapshot.category_revenue}
    assert categories == {"Mains": Decimal("33.00"), "Starters": Decimal("6.50")}
    assert {entry.name: entry.quantity for entry in snapshot.item_counts}["Baklava"] == 3


def test_top_items_sorted_by_quantity_with_stable_ties() -> None:
    orders = [
        _order(
            1,
            created_at=datetime(2026, 10, 19, 12, 0, tzinfo=UTC),
            items=[
                ("Souvlaki", "12.00", 2, None),
                ("Pita", "2.00", 2, None),
                ("Feta", "5.00", 4, None),
                ("Olives", "4.00", 1, None),
                ("Moussaka", "15.00", 2, None),
                ("Salad", "7.00", 1, None),
            ],
        )
    ]

    snapshot = aggregate(orders, [], today=TODAY, tz=UTC)

    assert [item.name for item in snapshot.top_items] == ["Feta", "Souvlaki", "Pita", "Moussaka", "Olives"]


def test_hour_and_weekday_buckets_use_sunday_as_zero() -> None:
    snapshot = aggregate(
        _orders(), _catalog(), today=TODAY, tz=UTC, start=date(2026, 10, 12), end=TODAY
    )

    assert snapshot.hourly_orders[12] == 1
    assert snapshot.hourly_orders[18] == 1
    assert sum(snapshot.hourly_orders) == 2
    assert (snapshot.peak_hour, snapshot.peak_orders) == (12, 1)
    # 2026-10-18 is a Sunday, 2026-10-19 a Monday.
    assert snapshot.day_of_week == (1, 1, 0, 0, 0, 0, 0)


def test_yesterday_is_outside_a_today_only_range() -> None:
    orders = [
        _order(
            1,
            created_at=datetime(2026, 10, 18, 12, 0, tzinfo=UTC),
            items=[("Gyros", "16.50", 1, 1)],
        )
    ]

    snapshot = aggregate(orders, _catalog(), today=TODAY, tz=UTC, start=TODAY, end=TODAY)

    assert snapshot.revenue == Decimal("0.00")
    assert snapshot.order_count == 0
    assert snapshot.avg_order_value == Decimal("0.00")
    assert snapshot.active_count == 0


def test_all_time_includes_orders_outside_recent_window() -> None:
    snapshot = aggregate(_orders(), _catalog(), today=TODAY, tz=UTC)

    assert snapshot.range_start is None
    assert snapshot.order_count == 3
    assert snapshot.revenue == Decimal("73.00")
    assert snapshot.payment_methods.bancontact == 1


def test_active_count_ignores_range_and_unaccepted_orders() -> None:
    snapshot = aggregate(_orders(), _catalog(), today=TODAY, tz=UTC, start=TODAY, end=TODAY)

    assert snapshot.active_count == 1


def test_daily_trend_covers_trailing_days() -> None:
    daily = aggregate(_orders(), _catalog(), today=TODAY, tz=UTC, granularity="daily")
    monthly = aggregate(_orders(), _catalog(), today=TODAY, tz=UTC, granularity="monthly")

    assert len(daily.daily_revenue) == 7
    assert daily.daily_revenue[0].day == date(2026, 10, 13)
    assert daily.daily_revenue[-1].day == TODAY
    assert daily.daily_revenue[-1].revenue == Decimal("35.50")
    assert daily.daily_revenue[-2].revenue == Decimal("24.50")
    assert len(monthly.daily_revenue) == 30
    # 2026-09-01 is older than the monthly window.
    assert sum(entry.orders for entry in monthly.daily_revenue) == 2


def test_business_timezone_moves_late_orders_into_next_day() -> None:
    tz = ZoneInfo("Europe/Amsterdam")
    orders = [
        _order(
            1,
            created_at=datetime(2026, 10, 18, 22, 30, tzinfo=UTC),
            items=[("Gyros", "16.50", 1, 1)],
        )
    ]

    snapshot = aggregate(orders, _catalog(), today=TODAY, tz=tz, start=TODAY, end=TODAY)

    assert snapshot.order_count == 1
    assert snapshot.hourly_orders[0] == 1


def test_naive_timestamps_are_read_as_utc() -> None:
    orders = [
        _order(
            1,
            created_at=datetime(2026, 10, 19, 9, 0),
            items=[("Gyros", "16.50", 1, 1)],
        )
    ]

    snapshot = aggregate(orders, _catalog(), today=TODAY, tz=UTC, start=TODAY, end=TODAY)

    assert snapshot.order_count == 1
    assert snapshot.hourly_orders[9] == 1


def test_snapshot_is_immutable() -> None:
    snapshot = aggregate(_orders(), _catalog(), today=TODAY, tz=UTC)

    with pytest.raises(PydanticValidationError):
        snapshot.revenue = Decimal("1.00")
    assert isinstance(snapshot.hourly_orders, tuple)
