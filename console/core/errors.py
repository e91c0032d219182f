"""Domain errors raised by the order lifecycle core."""

from __future__ import annotations


class ConsoleError(Exception):
    """Base class for errors surfaced to the console operator."""

    kind: str = "console_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidTransition(ConsoleError):
    """Raised when a status change is outside the allowed order graph."""

    kind = "invalid_transition"

    def __init__(self, current: str, target: str) -> None:
        super().__init__(f"Cannot move order from '{current}' to '{target}'")
        self.current = current
        self.target = target


class ValidationError(ConsoleError):
    """Raised for malformed operator input, rejected before any store call."""

    kind = "validation_error"


class StoreError(ConsoleError):
    """Raised when an Order Store or Driver Registry round-trip fails."""

    kind = "store_error"


class NotFoundError(StoreError):
    kind = "not_found"


class ConflictError(StoreError):
    """Raised when the caller's version token no longer matches the stored row."""

    kind = "conflict"
