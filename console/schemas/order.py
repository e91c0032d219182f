"""Order API schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from console.core.config import settings

OrderStatus = Literal["pending", "preparing", "ready", "delivery", "completed", "cancelled"]
PaymentMethod = Literal["ideal", "card", "cash", "bancontact"]
PaymentStatus = Literal["unpaid", "pending", "paid", "failed", "refunded"]
DeliveryType = Literal["delivery", "pickup"]


class OrderItemCreate(BaseModel):
    """Single order line as submitted by the ordering flow."""

    name: str = Field(min_length=1)
    unit_price: Decimal = Field(ge=0)
    quantity: int = Field(default=1, ge=1)
    menu_item_id: int | None = None
    special_instructions: str | None = None


class OrderCreate(BaseModel):
    """New order entering the console in ``pending``."""

    customer_name: str = Field(min_length=1)
    customer_email: str | None = None
    customer_phone: str | None = None
    customer_address: str | None = None
    customer_notes: str | None = None
    order_number: str | None = None
    payment_method: PaymentMethod
    payment_status: PaymentStatus = "unpaid"
    delivery_type: DeliveryType = "pickup"
    delivery_fee: Decimal = Field(default=Decimal("0.00"), ge=0)
    items: list[OrderItemCreate] = Field(min_length=1)
    created_at: datetime | None = None


class StatusUpdate(BaseModel):
    status: OrderStatus
    expected_version: int | None = None


class DriverAssignment(BaseModel):
    driver_id: int | None = None
    expected_version: int | None = None


class DeliveryStart(BaseModel):
    estimated_minutes: int = settings.delivery_minutes
    expected_version: int | None = None


class PaymentUpdate(BaseModel):
    status: PaymentStatus
    transaction_id: str | None = None
    expected_version: int | None = None


class StaffNoteCreate(BaseModel):
    text: str
    author: str | None = None


class OrderItemRead(BaseModel):
    """Serialized order line."""

    id: int
    menu_item_id: int | None
    name: str
    unit_price: Decimal
    quantity: int
    special_instructions: str | None = None

    model_config = ConfigDict(from_attributes=True)


class StaffNoteRead(BaseModel):
    id: int
    author: str
    text: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class OrderRead(BaseModel):
    """Serialized order with derived pickup estimate."""

    id: int
    order_number: str | None
    customer_name: str
    customer_email: str | None
    customer_phone: str | None
    customer_address: str | None
    customer_notes: str | None
    status: str
    payment_method: str
    payment_status: str
    paid_at: datetime | None
    delivery_type: str
    delivery_fee: Decimal
    subtotal: Decimal
    total: Decimal
    assigned_driver_id: int | None
    delivery_departed_at: datetime | None
    estimated_delivery_time: datetime | None
    pickup_ready_at: datetime | None = None
    next_status: str | None = None
    printed_at: datetime | None
    created_at: datetime
    updated_at: datetime
    version: int
    items: list[OrderItemRead]
    staff_notes: list[StaffNoteRead]

    model_config = ConfigDict(from_attributes=True)
