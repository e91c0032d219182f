"""Reduce the order collection into reporting metrics."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime, timedelta, tzinfo
from decimal import ROUND_HALF_UP, Decimal

from console.core.config import settings
from console.models.menu import MenuItem
from console.models.order import Order
from console.schemas.analytics import (
    AnalyticsSnapshot,
    CategoryRevenue,
    DailyRevenue,
    DeliveryMix,
    ItemCount,
    PaymentMix,
    ReportGranularity,
)
from console.utils.time import as_utc, local_day_window

CENTS = Decimal("0.01")
TOP_ITEMS_LIMIT = 5


def _money(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def _line_total(item) -> Decimal:
    return Decimal(item.unit_price or 0) * int(item.quantity or 0)


def trend_days(granularity: ReportGranularity) -> int:
    return 30 if granularity == "monthly" else 7


def inclusive_vat(revenue: Decimal, rate_percent: int | None = None) -> tuple[Decimal, Decimal]:
    """Split a tax-inclusive amount into ``(tax, net)``; tax = gross * rate / (100 + rate)."""
    rate = Decimal(settings.vat_rate_percent if rate_percent is None else rate_percent)
    tax = _money(revenue * rate / (Decimal(100) + rate))
    return tax, _money(revenue) - tax


def peak(hourly: list[int]) -> tuple[int, int]:
    """Busiest hour and its count; ties go to the earliest hour."""
    hour = max(range(len(hourly)), key=lambda index: hourly[index])
    return hour, hourly[hour]


def _local(order: Order, tz: tzinfo) -> datetime | None:
    if order.created_at is None:
        return None
    return as_utc(order.created_at).astimezone(tz)


def eligible_orders(
    orders: Iterable[Order],
    *,
    start: date | None,
    end: date | None,
    tz: tzinfo,
) -> list[Order]:
    """Completed, accepted orders, restricted to ``[start, end]`` when both are set."""
    accepted = [order for order in orders if order.is_accepted and order.status == "completed"]
    if start is None or end is None:
        return accepted

    window_start, window_end = local_day_window(start, end, tz)
    selected: list[Order] = []
    for order in accepted:
        created = _local(order, tz)
        if created is not None and window_start <= created <= window_end:
            selected.append(order)
    return selected


def daily_revenue(
    orders: Iterable[Order],
    *,
    today: date,
    days: int,
    tz: tzinfo,
) -> tuple[DailyRevenue, ...]:
    """Trailing per-day trend, independent of the selected reporting range."""
    buckets: dict[date, list[Order]] = {today - timedelta(days=offset): [] for offset in range(days - 1, -1, -1)}
    for order in orders:
        if not order.is_accepted or order.status != "completed":
            continue
        created = _local(order, tz)
        if created is not None and created.date() in buckets:
            buckets[created.date()].append(order)
    return tuple(
        DailyRevenue(
            day=day,
            revenue=_money(sum((Decimal(order.total or 0) for order in day_orders), Decimal("0"))),
            orders=len(day_orders),
        )
        for day, day_orders in buckets.items()
    )


def active_count(orders: Iterable[Order]) -> int:
    """In-flight accepted orders, always over the full collection."""
    return sum(1 for order in orders if order.is_accepted and not order.is_terminal)


def aggregate(
    orders: Iterable[Order],
    catalog: Iterable[MenuItem],
    *,
    today: date,
    tz: tzinfo,
    start: date | None = None,
    end: date | None = None,
    granularity: ReportGranularity = "daily",
) -> AnalyticsSnapshot:
    """Build an immutable analytics snapshot.

    Items whose catalog entry no longer exists still count towards revenue
    but are left out of the category breakdown.
    """
    orders = list(orders)
    categories: dict[int, str] = {item.id: item.category for item in catalog}
    eligible = eligible_orders(orders, start=start, end=end, tz=tz)

    revenue = sum((Decimal(order.total or 0) for order in eligible), Decimal("0"))
    order_count = len(eligible)
    avg_order_value = _money(revenue / order_count) if order_count else Decimal("0.00")
    tax, net_revenue = inclusive_vat(revenue)

    item_counts: dict[str, int] = {}
    category_revenue: dict[str, Decimal] = {}
    hourly = [0] * 24
    weekdays = [0] * 7
    delivery_mix = {"delivery": 0, "pickup": 0}
    payment_mix = {"card": 0, "cash": 0, "ideal": 0, "bancontact": 0}

    for order in eligible:
        for item in order.items:
            item_counts[item.name] = item_counts.get(item.name, 0) + int(item.quantity or 0)
            category = categories.get(item.menu_item_id) if item.menu_item_id is not None else None
            if category is not None:
                category_revenue[category] = category_revenue.get(category, Decimal("0")) + _line_total(item)

        created = _local(order, tz)
        if created is not None:
            hourly[created.hour] += 1
            # Sunday is bucket 0.
            weekdays[(created.weekday() + 1) % 7] += 1

        delivery_mix["delivery" if order.delivery_type == "delivery" else "pickup"] += 1
        if order.payment_method in payment_mix:
            payment_mix[order.payment_method] += 1

    ranked = sorted(item_counts.items(), key=lambda pair: pair[1], reverse=True)
    peak_hour, peak_orders = peak(hourly)

    return AnalyticsSnapshot(
        range_start=start,
        range_end=end,
        granularity=granularity,
        revenue=_money(revenue),
        order_count=order_count,
        avg_order_value=avg_order_value,
        tax=tax,
        net_revenue=net_revenue,
        total_dishes=sum(item_counts.values()),
        item_counts=tuple(ItemCount(name=name, quantity=quantity) for name, quantity in item_counts.items()),
        top_items=tuple(ItemCount(name=name, quantity=quantity) for name, quantity in ranked[:TOP_ITEMS_LIMIT]),
        category_revenue=tuple(
            CategoryRevenue(category=category, revenue=_money(amount)) for category, amount in category_revenue.items()
        ),
        hourly_orders=tuple(hourly),
        day_of_week=tuple(weekdays),
        delivery_methods=DeliveryMix(**delivery_mix),
        payment_methods=PaymentMix(**payment_mix),
        daily_revenue=daily_revenue(orders, today=today, days=trend_days(granularity), tz=tz),
        peak_hour=peak_hour,
        peak_orders=peak_orders,
        active_count=active_count(orders),
    )
