"""Live intake monitor: detects newly arrived orders and raises notifications."""

from __future__ import annotations

import asyncio
import logging
import random
import threading
from collections import deque
from collections.abc import Callable, Iterable, Sequence
from datetime import datetime

from console.core.config import Settings
from console.core.preferences import ConsolePreferences
from console.models.order import Order
from console.services.notifications import (
    AudioAlert,
    ConsoleEvents,
    ConsoleView,
    DesktopNotifier,
    NotificationChannel,
    OrderNotification,
    ToastBoard,
)
from console.services.order_store import OrderStore
from console.utils.time import as_utc, utcnow

logger = logging.getLogger(__name__)

RECENT_NOTIFICATIONS = 100


class Timers:
    """Cancellable one-shot callbacks on the console's event loop.

    Safe to call from worker threads. Without a bound loop nothing is
    scheduled; timestamp checks still expire state lazily.
    """

    def __init__(self) -> None:
        self._loop: asyncio.AbstractEventLoop | None = None
        self._handles: set[asyncio.TimerHandle] = set()
        self._lock = threading.Lock()
        self._closed = False

    def bind(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop
        self._closed = False

    def call_later(self, delay: float, callback: Callable[[], None]) -> None:
        loop = self._loop
        if loop is None or self._closed or loop.is_closed():
            return
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is loop:
            self._arm(delay, callback)
        else:
            loop.call_soon_threadsafe(self._arm, delay, callback)

    def cancel_all(self) -> None:
        with self._lock:
            self._closed = True
            handles, self._handles = self._handles, set()
        for handle in handles:
            handle.cancel()

    @property
    def pending(self) -> int:
        with self._lock:
            return len(self._handles)

    def _arm(self, delay: float, callback: Callable[[], None]) -> None:
        with self._lock:
            if self._closed or self._loop is None:
                return
            handle: asyncio.TimerHandle | None = None

            def fire() -> None:
                with self._lock:
                    self._handles.discard(handle)
                callback()

            handle = self._loop.call_later(delay, fire)
            self._handles.add(handle)


class SimulatedSyncIndicator:
    """Presentation-only "live link" badge.

    Every tick there is a small chance of showing ``reconnecting`` for a
    couple of seconds. It never looks at the Order Store and says nothing
    about real connectivity.
    """

    def __init__(
        self,
        timers: Timers,
        *,
        interval: float = 15.0,
        probability: float = 0.05,
        recover_after: float = 2.0,
        rng: random.Random | None = None,
    ) -> None:
        self._timers = timers
        self.interval = interval
        self.probability = probability
        self.recover_after = recover_after
        self._rng = rng or random.Random()
        self.status = "connected"
        self._task: asyncio.Task | None = None

    def tick(self) -> str:
        if self._rng.random() < self.probability:
            self.status = "reconnecting"
            self._timers.call_later(self.recover_after, self._recover)
        return self.status

    def start(self) -> None:
        self.status = "connected"
        if self._task is None or self._task.done():
            self._task = asyncio.get_running_loop().create_task(self._run())

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            self.tick()

    def _recover(self) -> None:
        self.status = "connected"


class IntakeMonitor:
    """Notify exactly once per order id that was not seen before.

    The first observation only records a baseline. Afterwards every id that
    is new relative to all earlier observations fires every channel, so a
    burst of several orders yields one notification each. Change-feed
    events that arrive before the baseline are held and settled by
    :meth:`prime`.
    """

    def __init__(self, channels: Iterable[NotificationChannel]) -> None:
        self.channels: list[NotificationChannel] = list(channels)
        self._seen: set[int] | None = None
        self._early: dict[int, Order] = {}
        self._lock = threading.Lock()
        self.notified: deque[OrderNotification] = deque(maxlen=RECENT_NOTIFICATIONS)

    @property
    def primed(self) -> bool:
        return self._seen is not None

    def prime(self, orders: Iterable[Order], *, since: datetime | None = None) -> list[OrderNotification]:
        """Record the baseline and announce what arrived while it was taken.

        Orders created at or after ``since`` (the moment the change feed was
        subscribed) and orders reported early by the feed are not part of the
        baseline.
        """
        with self._lock:
            arrivals: dict[int, Order] = {}
            seen: set[int] = set()
            for order in orders:
                if since is not None and order.created_at is not None and as_utc(order.created_at) >= since:
                    arrivals[order.id] = order
                else:
                    seen.add(order.id)
            for order_id, order in self._early.items():
                if order_id not in seen:
                    arrivals.setdefault(order_id, order)
            self._early = {}
            seen.update(arrivals)
            self._seen = seen
        return [self._announce(order) for order in arrivals.values()]

    def observe(self, orders: Sequence[Order]) -> list[OrderNotification]:
        with self._lock:
            if self._seen is None:
                self._seen = {order.id for order in orders}
                self._early = {}
                return []
            arrivals = [order for order in orders if order.id not in self._seen]
            self._seen.update(order.id for order in arrivals)
        return [self._announce(order) for order in arrivals]

    def handle_change(self, order: Order) -> OrderNotification | None:
        """Order Store change-feed callback; updates to known orders are ignored."""
        with self._lock:
            if self._seen is None:
                logger.debug("[INTAKE] Holding change for order %s until baseline", order.id)
                self._early[order.id] = order
                return None
            if order.id in self._seen:
                return None
            self._seen.add(order.id)
        return self._announce(order)

    def _announce(self, order: Order) -> OrderNotification:
        notification = OrderNotification.from_order(order)
        logger.info("[INTAKE] New order %s from %s", notification.order_number, notification.customer_name)
        for channel in self.channels:
            try:
                channel.notify(notification)
            except Exception:
                logger.exception("[INTAKE] %s channel failed for order_id=%s", channel.name, notification.order_id)
        self.notified.append(notification)
        return notification


class IntakeConsole:
    """Wires the monitor, channels and timers for one open console.

    ``start`` must run on the event loop; ``close`` tears down every timer
    and the store subscription. In-flight store writes are not cancelled.
    """

    def __init__(
        self,
        store: OrderStore,
        settings: Settings,
        preferences: ConsolePreferences,
        *,
        rng: random.Random | None = None,
        permission_requester: Callable[[], str] | None = None,
    ) -> None:
        self.store = store
        self.preferences = preferences
        self.events = ConsoleEvents()
        self.view = ConsoleView()
        self.timers = Timers()
        self.desktop = DesktopNotifier(self.events, self.view, permission=settings.desktop_notifications)
        self.toasts = ToastBoard(schedule=self.timers.call_later, seconds=settings.toast_seconds)
        self.audio = AudioAlert(self.events, preferences)
        self.monitor = IntakeMonitor([self.audio, self.desktop, self.toasts])
        self.sync = SimulatedSyncIndicator(
            self.timers,
            interval=settings.health_check_seconds,
            probability=settings.reconnect_probability,
            recover_after=settings.reconnect_seconds,
            rng=rng,
        )
        self._permission_requester = permission_requester
        self._unsubscribe: Callable[[], None] | None = None

    async def start(self) -> None:
        self.timers.bind(asyncio.get_running_loop())
        self.desktop.request_permission(self._permission_requester)
        since = utcnow()
        self._unsubscribe = self.store.subscribe(self.monitor.handle_change)
        self.monitor.prime(self.store.list_orders(), since=since)
        self.sync.start()
        logger.info("[INTAKE] Monitor started")

    async def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        await self.sync.stop()
        self.timers.cancel_all()
        logger.info("[INTAKE] Monitor stopped")
