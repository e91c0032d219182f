"""Queue/history filtering for the order board."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Literal

from console.models.order import Order
from console.utils.time import as_utc

QueueView = Literal["active", "history", "all"]
SortKey = Literal["date", "amount"]


def _matches_search(order: Order, term: str) -> bool:
    if not term:
        return True
    needle = term.strip().lower()
    return (
        needle in (order.customer_name or "").lower()
        or needle in (order.order_number or "").lower()
        or needle in str(order.id)
    )


def order_queue(
    orders: Iterable[Order],
    *,
    search: str = "",
    view: QueueView = "active",
    status: str = "all",
    sort_by: SortKey = "date",
    descending: bool = True,
) -> list[Order]:
    """Return the accepted orders visible on the board for the given filters."""
    selected: list[Order] = []
    for order in orders:
        if not order.is_accepted:
            continue
        if view == "active" and order.is_terminal:
            continue
        if view == "history" and not order.is_terminal:
            continue
        if status != "all" and order.status != status:
            continue
        if not _matches_search(order, search):
            continue
        selected.append(order)

    if sort_by == "amount":
        selected.sort(key=lambda order: order.total, reverse=descending)
    else:
        selected.sort(key=lambda order: as_utc(order.created_at), reverse=descending)
    return selected
