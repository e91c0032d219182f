"""New-order notification channels.

Three channels fire together for every new order: an audible chime, an
OS-level (desktop) notification and an in-app toast. Channels only publish
events for the console front end to render; any of them may be unavailable
and the others still fire.
"""

from __future__ import annotations

import itertools
import logging
import threading
from abc import ABC, abstractmethod
from collections import OrderedDict, deque
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any

from console.core.preferences import ConsolePreferences
from console.models.order import Order
from console.utils.time import utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrderNotification:
    """Payload shared by all channels for one newly arrived order."""

    order_id: int
    order_number: str
    customer_name: str
    total: Decimal

    @classmethod
    def from_order(cls, order: Order) -> "OrderNotification":
        return cls(
            order_id=order.id,
            order_number=order.order_number or f"#{order.id}",
            customer_name=order.customer_name,
            total=Decimal(order.total or 0),
        )

    @property
    def title(self) -> str:
        return "New order!"

    @property
    def body(self) -> str:
        return f"Order {self.order_number}\nCustomer: {self.customer_name}\nAmount: €{self.total:.2f}"

    @property
    def toast_message(self) -> str:
        return f"New order {self.order_number} from {self.customer_name}"


class ConsoleEvents:
    """Bounded, sequence-numbered event feed polled by the console front end."""

    def __init__(self, maxlen: int = 200) -> None:
        self._events: deque[dict[str, Any]] = deque(maxlen=maxlen)
        self._sequence = itertools.count(1)
        self._lock = threading.Lock()

    def publish(self, event_type: str, **payload: Any) -> dict[str, Any]:
        with self._lock:
            event = {"seq": next(self._sequence), "type": event_type, **payload}
            self._events.append(event)
        return event

    def since(self, seq: int = 0) -> list[dict[str, Any]]:
        with self._lock:
            return [event for event in self._events if event["seq"] > seq]


@dataclass
class ConsoleView:
    """Which tab and order the operator is looking at."""

    active_tab: str = "dashboard"
    selected_order_id: int | None = None
    foreground_requests: int = 0

    def focus_order(self, order_id: int) -> None:
        self.foreground_requests += 1
        self.active_tab = "orders"
        self.selected_order_id = order_id


class NotificationChannel(ABC):
    """One way of telling the operator about a new order."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the channel name."""

    @abstractmethod
    def notify(self, notification: OrderNotification) -> None:
        """Announce a new order."""


class AudioAlert(NotificationChannel):
    def __init__(self, events: ConsoleEvents, preferences: ConsolePreferences) -> None:
        self._events = events
        self._preferences = preferences

    @property
    def name(self) -> str:
        return "audio"

    def notify(self, notification: OrderNotification) -> None:
        if not self._preferences.audio_enabled:
            return
        self._events.publish("chime", order_id=notification.order_id, frequency_hz=880, duration_ms=600)


@dataclass
class DesktopNotification:
    tag: int
    title: str
    body: str
    require_interaction: bool = True


class DesktopNotifier(NotificationChannel):
    """OS-level notifications, only when the operator granted permission."""

    def __init__(
        self,
        events: ConsoleEvents,
        view: ConsoleView,
        *,
        permission: str = "default",
        max_open: int = 20,
    ) -> None:
        self._events = events
        self._view = view
        self.permission = permission
        self.max_open = max_open
        self.open: OrderedDict[int, DesktopNotification] = OrderedDict()

    @property
    def name(self) -> str:
        return "desktop"

    def request_permission(self, requester: Callable[[], str] | None = None) -> str:
        """Ask once; an undecided permission stays undecided without a requester."""
        if self.permission == "default" and requester is not None:
            try:
                self.permission = requester()
            except Exception:
                logger.exception("[INTAKE] Notification permission request failed")
                self.permission = "denied"
        if self.permission != "granted":
            logger.info("[INTAKE] Desktop notifications unavailable (%s); using sound and toast", self.permission)
        return self.permission

    def notify(self, notification: OrderNotification) -> None:
        if self.permission != "granted":
            return
        desktop = DesktopNotification(tag=notification.order_id, title=notification.title, body=notification.body)
        self.open[desktop.tag] = desktop
        self.open.move_to_end(desktop.tag)
        while len(self.open) > self.max_open:
            self.open.popitem(last=False)
        self._events.publish("desktop_notification", tag=desktop.tag, title=desktop.title, body=desktop.body)

    def click(self, tag: int) -> bool:
        """Bring the console forward on the order queue with the order selected."""
        desktop = self.open.pop(tag, None)
        if desktop is None:
            return False
        self._view.focus_order(desktop.tag)
        return True


@dataclass(frozen=True)
class Toast:
    order_id: int
    message: str
    shown_at: datetime
    expires_at: datetime
    kind: str = "info"


@dataclass
class ToastBoard(NotificationChannel):
    """Single in-app toast; a newer arrival replaces the visible one."""

    schedule: Callable[[float, Callable[[], None]], Any]
    seconds: float = 5.0
    clock: Callable[[], datetime] = utcnow
    _toast: Toast | None = field(default=None, init=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False)

    @property
    def name(self) -> str:
        return "toast"

    def notify(self, notification: OrderNotification) -> None:
        now = self.clock()
        toast = Toast(
            order_id=notification.order_id,
            message=notification.toast_message,
            shown_at=now,
            expires_at=now + timedelta(seconds=self.seconds),
        )
        with self._lock:
            self._toast = toast
        self.schedule(self.seconds, lambda: self._expire(toast))

    def current(self) -> Toast | None:
        with self._lock:
            toast = self._toast
            if toast is not None and self.clock() >= toast.expires_at:
                self._toast = toast = None
            return toast

    def close(self) -> None:
        with self._lock:
            self._toast = None

    def _expire(self, toast: Toast) -> None:
        with self._lock:
            # Only clear the toast this timer was armed for.
            if self._toast is toast:
                self._toast = None
