from datetime import datetime, timezone
from decimal import Decimal

import pytest

from console.models.order import Order, OrderItem, StaffNote
from console.services.receipts import format_eur, receipt_lines, render_receipt_pdf


def _sample_order(delivery_type: str = "delivery") -> Order:
    order = Order(
        id=12,
        order_number="#0012",
        customer_name="Zoë Jansen",
        customer_address="Prinsengracht 263",
        customer_notes="Geen ui",
        status="preparing",
        payment_method="ideal",
        payment_status="paid",
        delivery_type=delivery_type,
        delivery_fee=Decimal("2.50"),
        created_at=datetime(2026, 10, 19, 17, 45, tzinfo=timezone.utc),
        items=[
            OrderItem(name="Gyros", unit_price=Decimal("16.50"), quantity=2),
            OrderItem(name="Baklava", unit_price=Decimal("6.00"), quantity=1),
        ],
        staff_notes=[StaffNote(author="Maria", text="Extra napkins")],
    )
    order.recalculate_totals()
    return order


def test_format_eur() -> None:
    assert format_eur(Decimal("7.5")) == "€7.50"
    assert format_eur(None) == "€0.00"


def test_receipt_lines_include_delivery_fee_only_for_delivery() -> None:
    delivery_rows = receipt_lines(_sample_order())
    pickup_rows = receipt_lines(_sample_order(delivery_type="pickup"))

    assert delivery_rows[1] == ["Gyros", "2", "€33.00"]
    assert ["Delivery", "", "€2.50"] in delivery_rows
    assert delivery_rows[-1] == ["Total", "", "€41.50"]
    assert all(row[0] != "Delivery" for row in pickup_rows)
    assert pickup_rows[-1] == ["Total", "", "€39.00"]


def test_render_receipt_pdf_returns_pdf_bytes() -> None:
    pytest.importorskip("reportlab")

    payload = render_receipt_pdf(_sample_order())

    assert payload.startswith(b"%PDF")
