"""Schema exports."""

from console.schemas.analytics import AnalyticsSnapshot
from console.schemas.driver import DriverCreate, DriverRead, DriverStatusUpdate, DriverUpdate
from console.schemas.menu import MenuItemCreate, MenuItemRead
from console.schemas.order import (
    DeliveryStart,
    DriverAssignment,
    OrderCreate,
    OrderItemCreate,
    OrderRead,
    PaymentUpdate,
    StaffNoteCreate,
    StaffNoteRead,
    StatusUpdate,
)

__all__ = [
    "AnalyticsSnapshot",
    "DeliveryStart",
    "DriverAssignment",
    "DriverCreate",
    "DriverRead",
    "DriverStatusUpdate",
    "DriverUpdate",
    "MenuItemCreate",
    "MenuItemRead",
    "OrderCreate",
    "OrderItemCreate",
    "OrderRead",
    "PaymentUpdate",
    "StaffNoteCreate",
    "StaffNoteRead",
    "StatusUpdate",
]
