"""Order Store: persistence, change feed and atomic lifecycle mutations."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from datetime import datetime

from sqlalchemy import case, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload
from sqlalchemy.orm.exc import StaleDataError

from console.core.errors import ConflictError, ConsoleError, NotFoundError, StoreError, ValidationError
from console.db import session as db_session
from console.models.driver import Driver
from console.models.order import PAYMENT_STATUSES, Order, OrderItem, StaffNote
from console.schemas.order import OrderCreate
from console.services import dispatch
from console.services.driver_registry import DriverRegistry
from console.services.order_status import apply_transition, mark_printed
from console.utils.time import utcnow

logger = logging.getLogger(__name__)

OrderListener = Callable[[Order], None]


def _default_session() -> Session:
    return db_session.SessionLocal()


def _order_query():
    return select(Order).options(selectinload(Order.items), selectinload(Order.staff_notes))


class OrderStore:
    """Database-backed order collection.

    Every mutation runs under a per-order lock so a read-modify-write of one
    order is never interleaved with another from this process. Callers may
    pass ``expected_version``; a stale token raises :class:`ConflictError`.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session] | None = None,
        *,
        drivers: DriverRegistry | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._session_factory = session_factory or _default_session
        self._drivers = drivers
        self._clock = clock
        self._listeners: list[OrderListener] = []
        self._listeners_lock = threading.Lock()
        self._order_locks: dict[int, threading.Lock] = {}
        self._order_locks_guard = threading.Lock()

    # Reads

    def list_orders(self) -> list[Order]:
        """All orders, oldest first so the newest arrival is last."""
        try:
            with self._session_factory() as db:
                return list(db.scalars(_order_query().order_by(Order.created_at, Order.id)).all())
        except SQLAlchemyError as exc:
            logger.exception("[STORE] Listing orders failed")
            raise StoreError("Could not load orders") from exc

    def get_order(self, order_id: int) -> Order:
        try:
            with self._session_factory() as db:
                return self._load(db, order_id)
        except SQLAlchemyError as exc:
            logger.exception("[STORE] Loading order_id=%s failed", order_id)
            raise StoreError(f"Could not load order {order_id}") from exc

    # Writes

    def create_order(self, payload: OrderCreate) -> Order:
        now = self._clock()
        with self._session_factory() as db:
            try:
                order = Order(
                    order_number=payload.order_number,
                    customer_name=payload.customer_name,
                    customer_email=payload.customer_email,
                    customer_phone=payload.customer_phone,
                    customer_address=payload.customer_address,
                    customer_notes=payload.customer_notes,
                    status="pending",
                    payment_method=payload.payment_method,
                    payment_status=payload.payment_status,
                    paid_at=now if payload.payment_status == "paid" else None,
                    delivery_type=payload.delivery_type,
                    delivery_fee=payload.delivery_fee if payload.delivery_type == "delivery" else 0,
                    created_at=payload.created_at or now,
                    updated_at=payload.created_at or now,
                    items=[
                        OrderItem(
                            menu_item_id=item.menu_item_id,
                            name=item.name,
                            unit_price=item.unit_price,
                            quantity=item.quantity,
                            special_instructions=item.special_instructions,
                        )
                        for item in payload.items
                    ],
                )
                order.recalculate_totals()
                db.add(order)
                db.flush()
                if not order.order_number:
                    order.order_number = f"#{order.id:04d}"
                db.commit()
            except SQLAlchemyError as exc:
                db.rollback()
                logger.exception("[STORE] Creating order failed")
                raise StoreError("Could not create order") from exc
            created = self._load(db, order.id, refresh=True)
        logger.info("[STORE] Order %s created (%s, total=%s)", created.order_number, created.delivery_type, created.total)
        self._publish(created)
        return created

    def update_status(self, order_id: int, status: str, *, expected_version: int | None = None) -> Order:
        def apply(db: Session, order: Order) -> None:
            was_terminal = order.is_terminal
            apply_transition(order, status, self._clock())
            if order.is_terminal and not was_terminal:
                self._release_driver(db, order)

        return self._mutate(order_id, expected_version, apply)

    def assign_driver(self, order_id: int, driver_id: int | None, *, expected_version: int | None = None) -> Order:
        def apply(db: Session, order: Order) -> None:
            previous = self._load_driver(db, order.assigned_driver_id) if order.assigned_driver_id is not None else None
            driver = self._load_driver(db, driver_id) if driver_id is not None else None
            dispatch.assign_driver(order, driver, previous=previous, now=self._clock(), adjust=self._load_adjuster(db))

        return self._mutate(order_id, expected_version, apply)

    def start_delivery(self, order_id: int, estimated_minutes: int, *, expected_version: int | None = None) -> Order:
        # Malformed input never reaches the database.
        dispatch.clamp_eta_minutes(estimated_minutes)

        def apply(db: Session, order: Order) -> None:
            dispatch.start_delivery(order, estimated_minutes, self._clock())

        return self._mutate(order_id, expected_version, apply)

    def mark_printed(self, order_id: int, *, expected_version: int | None = None) -> Order:
        def apply(db: Session, order: Order) -> None:
            if mark_printed(order, self._clock()):
                self._release_driver(db, order)

        return self._mutate(order_id, expected_version, apply)

    def update_payment_status(
        self,
        order_id: int,
        status: str,
        transaction_id: str | None = None,
        *,
        expected_version: int | None = None,
    ) -> Order:
        if status not in PAYMENT_STATUSES:
            raise ValidationError(f"Unknown payment status '{status}'")

        def apply(db: Session, order: Order) -> None:
            now = self._clock()
            order.payment_status = status
            if status == "paid":
                order.paid_at = now
            if transaction_id:
                order.payment_transaction_id = transaction_id
            order.updated_at = now

        return self._mutate(order_id, expected_version, apply)

    def append_staff_note(self, order_id: int, text: str, author: str) -> StaffNote:
        text, author = (text or "").strip(), (author or "").strip()
        if not text:
            raise ValidationError("Note text is required")
        if not author:
            raise ValidationError("Staff name is required to add a note")

        note = StaffNote(text=text, author=author)

        def apply(db: Session, order: Order) -> None:
            now = self._clock()
            note.created_at = now
            order.staff_notes.append(note)
            order.updated_at = now

        updated = self._mutate(order_id, None, apply)
        return next(saved for saved in reversed(updated.staff_notes) if saved.id == note.id)

    # Change feed

    def subscribe(self, callback: OrderListener) -> Callable[[], None]:
        with self._listeners_lock:
            self._listeners.append(callback)

        def unsubscribe() -> None:
            with self._listeners_lock:
                if callback in self._listeners:
                    self._listeners.remove(callback)

        return unsubscribe

    def _publish(self, order: Order) -> None:
        with self._listeners_lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(order)
            except Exception:
                logger.exception("[STORE] Order listener failed for order_id=%s", order.id)

    # Internals

    def _lock_for(self, order_id: int) -> threading.Lock:
        with self._order_locks_guard:
            return self._order_locks.setdefault(order_id, threading.Lock())

    def _load(self, db: Session, order_id: int, *, refresh: bool = False) -> Order:
        query = _order_query().where(Order.id == order_id)
        if refresh:
            query = query.execution_options(populate_existing=True)
        order = db.scalars(query).one_or_none()
        if order is None:
            raise NotFoundError(f"Order {order_id} not found")
        return order

    def _load_driver(self, db: Session, driver_id: int) -> Driver:
        driver = db.get(Driver, driver_id)
        if driver is None:
            raise NotFoundError(f"Driver {driver_id} not found")
        return driver

    def _touched_drivers(self, db: Session) -> list[Driver]:
        return db.info.setdefault("touched_drivers", [])

    def _release_driver(self, db: Session, order: Order) -> None:
        if order.assigned_driver_id is None:
            return
        driver = db.get(Driver, order.assigned_driver_id)
        if driver is None:
            logger.warning("[DISPATCH] Order %s references missing driver %s", order.id, order.assigned_driver_id)
            return
        dispatch.release_driver(driver, self._load_adjuster(db))

    def _load_adjuster(self, db: Session) -> dispatch.LoadAdjuster:
        """Apply load changes as a single SQL UPDATE so concurrent orders sharing a driver never lose a count."""

        def adjust(driver: Driver, delta: int) -> None:
            shifted = Driver.active_deliveries + delta
            db.execute(
                update(Driver)
                .where(Driver.id == driver.id)
                .values(active_deliveries=case((shifted > 0, shifted), else_=0))
                .execution_options(synchronize_session=False)
            )
            self._touched_drivers(db).append(driver)

        return adjust

    def _mutate(self, order_id: int, expected_version: int | None, apply: Callable[[Session, Order], None]) -> Order:
        with self._lock_for(order_id):
            with self._session_factory() as db:
                try:
                    order = self._load(db, order_id)
                    if expected_version is not None and order.version != expected_version:
                        raise ConflictError(
                            f"Order {order_id} changed (expected version {expected_version}, found {order.version})"
                        )
                    apply(db, order)
                    db.commit()
                except ConsoleError:
                    db.rollback()
                    raise
                except StaleDataError as exc:
                    db.rollback()
                    raise ConflictError(f"Order {order_id} was modified concurrently") from exc
                except SQLAlchemyError as exc:
                    db.rollback()
                    logger.exception("[STORE] Update failed for order_id=%s", order_id)
                    raise StoreError(f"Could not update order {order_id}") from exc
                updated = self._load(db, order_id, refresh=True)
                touched = {driver.id: driver for driver in db.info.pop("touched_drivers", [])}
                drivers = [self._refresh_driver(db, driver) for driver in touched.values()]
        self._publish(updated)
        if self._drivers is not None:
            for driver in drivers:
                self._drivers.publish(driver)
        return updated

    def _refresh_driver(self, db: Session, driver: Driver) -> Driver:
        db.refresh(driver)
        return driver
