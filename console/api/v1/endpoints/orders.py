"""Order board endpoints: queue, lifecycle transitions, dispatch and notes."""

import logging
from typing import Literal

from fastapi import APIRouter, Depends, Query, Response, status

from console.api.deps import get_preferences, get_store
from console.core.preferences import ConsolePreferences
from console.models.order import Order
from console.schemas.order import (
    DeliveryStart,
    DriverAssignment,
    OrderCreate,
    OrderRead,
    PaymentUpdate,
    StaffNoteCreate,
    StaffNoteRead,
    StatusUpdate,
)
from console.services.dispatch import pickup_ready_at
from console.services.order_queue import order_queue
from console.services.order_status import next_status
from console.services.order_store import OrderStore
from console.services.receipts import render_receipt_pdf

logger = logging.getLogger(__name__)

router: APIRouter = APIRouter()


def serialize_order(order: Order) -> OrderRead:
    return OrderRead.model_validate(order).model_copy(
        update={"pickup_ready_at": pickup_ready_at(order), "next_status": next_status(order)}
    )


@router.get("", response_model=list[OrderRead])
def list_orders(
    search: str = "",
    view: Literal["active", "history", "all"] = "active",
    status_filter: str = Query(default="all", alias="status"),
    sort_by: Literal["date", "amount"] = "date",
    descending: bool = True,
    store: OrderStore = Depends(get_store),
) -> list[OrderRead]:
    """Return accepted orders for the board, filtered and sorted."""
    orders = order_queue(
        store.list_orders(),
        search=search,
        view=view,
        status=status_filter,
        sort_by=sort_by,
        descending=descending,
    )
    return [serialize_order(order) for order in orders]


@router.post("", response_model=OrderRead, status_code=status.HTTP_201_CREATED)
def create_order(payload: OrderCreate, store: OrderStore = Depends(get_store)) -> OrderRead:
    """Intake hook for the ordering flow; new orders always start pending."""
    return serialize_order(store.create_order(payload))


@router.get("/{order_id}", response_model=OrderRead)
def get_order(order_id: int, store: OrderStore = Depends(get_store)) -> OrderRead:
    return serialize_order(store.get_order(order_id))


@router.post("/{order_id}/status", response_model=OrderRead)
def update_status(order_id: int, payload: StatusUpdate, store: OrderStore = Depends(get_store)) -> OrderRead:
    order = store.update_status(order_id, payload.status, expected_version=payload.expected_version)
    return serialize_order(order)


@router.post("/{order_id}/driver", response_model=OrderRead)
def assign_driver(order_id: int, payload: DriverAssignment, store: OrderStore = Depends(get_store)) -> OrderRead:
    order = store.assign_driver(order_id, payload.driver_id, expected_version=payload.expected_version)
    return serialize_order(order)


@router.post("/{order_id}/start-delivery", response_model=OrderRead)
def start_delivery(order_id: int, payload: DeliveryStart, store: OrderStore = Depends(get_store)) -> OrderRead:
    order = store.start_delivery(order_id, payload.estimated_minutes, expected_version=payload.expected_version)
    return serialize_order(order)


@router.post("/{order_id}/payment", response_model=OrderRead)
def update_payment(order_id: int, payload: PaymentUpdate, store: OrderStore = Depends(get_store)) -> OrderRead:
    order = store.update_payment_status(
        order_id,
        payload.status,
        payload.transaction_id,
        expected_version=payload.expected_version,
    )
    return serialize_order(order)


@router.post("/{order_id}/notes", response_model=StaffNoteRead, status_code=status.HTTP_201_CREATED)
def add_staff_note(
    order_id: int,
    payload: StaffNoteCreate,
    store: OrderStore = Depends(get_store),
    preferences: ConsolePreferences = Depends(get_preferences),
) -> StaffNoteRead:
    """Append a note signed by the given author or the console's staff name."""
    author = payload.author if payload.author is not None else preferences.staff_name
    return StaffNoteRead.model_validate(store.append_staff_note(order_id, payload.text, author))


@router.post("/{order_id}/print")
def print_receipt(order_id: int, store: OrderStore = Depends(get_store)) -> Response:
    """Render the receipt, then finalize the order as printed."""
    order = store.get_order(order_id)
    pdf_bytes = render_receipt_pdf(order)
    printed = store.mark_printed(order_id)
    logger.info("[PRINT] Receipt printed for order %s (status=%s)", printed.order_number, printed.status)
    filename = f"receipt_{printed.id}.pdf"
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"', "X-Order-Status": printed.status},
    )
