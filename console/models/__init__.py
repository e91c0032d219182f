"""Application models package."""

from console.models.driver import Driver
from console.models.menu import MenuItem
from console.models.order import Order, OrderItem, StaffNote

__all__ = ["Driver", "MenuItem", "Order", "OrderItem", "StaffNote"]
