"""Kitchen/customer receipt rendering."""

from __future__ import annotations

from decimal import Decimal
from io import BytesIO
from typing import Any

from console.models.order import Order
from console.utils.pdf_fonts import register_pdf_font
from console.utils.time import as_utc, business_tz


def _reportlab():
    from reportlab.lib import colors
    from reportlab.lib.pagesizes import A6
    from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
    from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

    return {
        "colors": colors,
        "A6": A6,
        "ParagraphStyle": ParagraphStyle,
        "getSampleStyleSheet": getSampleStyleSheet,
        "Paragraph": Paragraph,
        "SimpleDocTemplate": SimpleDocTemplate,
        "Spacer": Spacer,
        "Table": Table,
        "TableStyle": TableStyle,
    }


def format_eur(value: Decimal | int | float | None) -> str:
    return f"€{Decimal(value or 0):.2f}"


def _build_styles() -> dict[str, Any]:
    font_name = register_pdf_font()
    rl = _reportlab()
    styles = rl["getSampleStyleSheet"]()
    return {
        "font_name": font_name,  # type: ignore[dict-item]
        "title": rl["ParagraphStyle"]("ReceiptTitle", parent=styles["Heading2"], fontName=font_name),
        "normal": rl["ParagraphStyle"]("ReceiptNormal", parent=styles["Normal"], fontName=font_name, fontSize=8),
    }


def receipt_lines(order: Order) -> list[list[str]]:
    """Item table rows plus the totals footer."""
    rows = [["Item", "Qty", "Amount"]]
    for item in order.items:
        rows.append([item.name, str(item.quantity), format_eur(item.line_total)])
    rows.append(["Subtotal", "", format_eur(order.subtotal)])
    if order.delivery_type == "delivery":
        rows.append(["Delivery", "", format_eur(order.delivery_fee)])
    rows.append(["Total", "", format_eur(order.total)])
    return rows


def render_receipt_pdf(order: Order) -> bytes:
    """Render one order as a small-format receipt PDF."""
    styles = _build_styles()
    rl = _reportlab()
    created = as_utc(order.created_at).astimezone(business_tz())

    story: list[Any] = [
        rl["Paragraph"](f"Order {order.order_number or order.id}", styles["title"]),
        rl["Paragraph"](created.strftime("%d-%m-%Y %H:%M"), styles["normal"]),
        rl["Paragraph"](f"Customer: {order.customer_name}", styles["normal"]),
        rl["Paragraph"](f"{order.delivery_type.capitalize()} • {order.payment_method} ({order.payment_status})", styles["normal"]),
    ]
    if order.delivery_type == "delivery" and order.customer_address:
        story.append(rl["Paragraph"](f"Address: {order.customer_address}", styles["normal"]))
    if order.customer_notes:
        story.append(rl["Paragraph"](f"Notes: {order.customer_notes}", styles["normal"]))
    story.append(rl["Spacer"](1, 6))

    table = rl["Table"](receipt_lines(order), colWidths=[150, 30, 60])
    table.setStyle(
        rl["TableStyle"](
            [
                ("LINEBELOW", (0, 0), (-1, 0), 0.5, rl["colors"].black),
                ("LINEABOVE", (0, -1), (-1, -1), 0.5, rl["colors"].black),
                ("FONTNAME", (0, 0), (-1, -1), styles["font_name"]),
                ("FONTSIZE", (0, 0), (-1, -1), 8),
                ("ALIGN", (1, 0), (-1, -1), "RIGHT"),
            ]
        )
    )
    story.append(table)

    if order.staff_notes:
        story.append(rl["Spacer"](1, 6))
        for note in order.staff_notes:
            story.append(rl["Paragraph"](f"{note.author}: {note.text}", styles["normal"]))

    buffer = BytesIO()
    rl["SimpleDocTemplate"](buffer, pagesize=rl["A6"], leftMargin=14, rightMargin=14, topMargin=14, bottomMargin=14).build(story)
    return buffer.getvalue()
