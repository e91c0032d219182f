"""Order models tracked by the operations console."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from console.db.base import Base

PAYMENT_STATUSES: tuple[str, ...] = ("unpaid", "pending", "paid", "failed", "refunded")
TERMINAL_STATUSES: frozenset[str] = frozenset({"completed", "cancelled"})


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Order(Base):
    """Customer order moving through the kitchen and dispatch lifecycle."""

    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(primary_key=True)
    order_number: Mapped[str | None] = mapped_column(String(16), nullable=True)
    customer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    customer_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    customer_phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    customer_address: Mapped[str | None] = mapped_column(String(255), nullable=True)
    customer_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending")
    payment_method: Mapped[str] = mapped_column(String(16), nullable=False)
    payment_status: Mapped[str] = mapped_column(String(16), nullable=False, default="unpaid")
    payment_transaction_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
    paid_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    delivery_type: Mapped[str] = mapped_column(String(16), nullable=False, default="pickup")
    delivery_fee: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0.00"))
    subtotal: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0.00"))
    total: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0.00"))
    assigned_driver_id: Mapped[int | None] = mapped_column(ForeignKey("drivers.id"), nullable=True)
    delivery_departed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    estimated_delivery_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    printed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    items: Mapped[list["OrderItem"]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
    )
    staff_notes: Mapped[list["StaffNote"]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="StaffNote.id",
    )

    __mapper_args__ = {"version_id_col": version}
    __table_args__ = (
        Index("ix_orders_status", "status"),
        Index("ix_orders_created_at", "created_at"),
    )

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def is_accepted(self) -> bool:
        """Paid online or paying cash; only these orders reach the kitchen queue."""
        return self.payment_status == "paid" or self.payment_method == "cash"

    def recalculate_totals(self) -> None:
        subtotal = sum((item.line_total for item in self.items), Decimal("0.00"))
        self.subtotal = subtotal
        fee = Decimal(self.delivery_fee or 0) if self.delivery_type == "delivery" else Decimal("0.00")
        self.total = subtotal + fee


class OrderItem(Base):
    """Snapshot of an ordered menu line."""

    __tablename__ = "order_items"

    id: Mapped[int] = mapped_column(primary_key=True)
    order_id: Mapped[int] = mapped_column(ForeignKey("orders.id"), nullable=False)
    # Catalog rows may be deleted later; the snapshot keeps the reference anyway.
    menu_item_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    special_instructions: Mapped[str | None] = mapped_column(Text, nullable=True)

    order: Mapped[Order] = relationship(back_populates="items")

    @property
    def line_total(self) -> Decimal:
        return Decimal(self.unit_price) * int(self.quantity)


class StaffNote(Base):
    """Append-only note left by staff on an order."""

    __tablename__ = "staff_notes"

    id: Mapped[int] = mapped_column(primary_key=True)
    order_id: Mapped[int] = mapped_column(ForeignKey("orders.id"), nullable=False)
    author: Mapped[str] = mapped_column(String(100), nullable=False)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)

    order: Mapped[Order] = relationship(back_populates="staff_notes")
