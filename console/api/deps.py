"""Request-scoped access to the console services held on app state."""

from fastapi import Request

from console.core.preferences import ConsolePreferences
from console.services.driver_registry import DriverRegistry
from console.services.intake_monitor import IntakeConsole
from console.services.order_store import OrderStore


def get_store(request: Request) -> OrderStore:
    return request.app.state.order_store


def get_drivers(request: Request) -> DriverRegistry:
    return request.app.state.driver_registry


def get_intake(request: Request) -> IntakeConsole:
    return request.app.state.intake


def get_preferences(request: Request) -> ConsolePreferences:
    return request.app.state.preferences
