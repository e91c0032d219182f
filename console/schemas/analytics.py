"""Analytics snapshot schemas.

Snapshots are frozen and use tuples so chart layers can recompute and
discard them without holding on to shared mutable state.
"""

from datetime import date
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict

ReportGranularity = Literal["daily", "weekly", "monthly"]


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class ItemCount(_Frozen):
    name: str
    quantity: int


class CategoryRevenue(_Frozen):
    category: str
    revenue: Decimal


class DailyRevenue(_Frozen):
    day: date
    revenue: Decimal
    orders: int


class DeliveryMix(_Frozen):
    delivery: int = 0
    pickup: int = 0


class PaymentMix(_Frozen):
    card: int = 0
    cash: int = 0
    ideal: int = 0
    bancontact: int = 0


class AnalyticsSnapshot(_Frozen):
    """Revenue, tax and distribution metrics for one reporting window."""

    range_start: date | None
    range_end: date | None
    granularity: ReportGranularity
    revenue: Decimal
    order_count: int
    avg_order_value: Decimal
    tax: Decimal
    net_revenue: Decimal
    total_dishes: int
    item_counts: tuple[ItemCount, ...]
    top_items: tuple[ItemCount, ...]
    category_revenue: tuple[CategoryRevenue, ...]
    hourly_orders: tuple[int, ...]
    day_of_week: tuple[int, ...]
    delivery_methods: DeliveryMix
    payment_methods: PaymentMix
    daily_revenue: tuple[DailyRevenue, ...]
    peak_hour: int
    peak_orders: int
    active_count: int
