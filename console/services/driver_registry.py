"""Driver registry backed by the database."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from console.core.errors import ConsoleError, NotFoundError, StoreError, ValidationError
from console.db import session as db_session
from console.models.driver import Driver
from console.models.order import Order
from console.services.dispatch import assignable_drivers

logger = logging.getLogger(__name__)

DriverListener = Callable[[Driver], None]
EDITABLE_FIELDS: frozenset[str] = frozenset({"name", "phone"})


def _default_session() -> Session:
    return db_session.SessionLocal()


class DriverRegistry:
    """CRUD for drivers plus the operator-only offline toggle.

    ``active_deliveries`` is never written here; dispatch owns it.
    """

    def __init__(self, session_factory: Callable[[], Session] | None = None) -> None:
        self._session_factory = session_factory or _default_session
        self._listeners: list[DriverListener] = []
        self._listeners_lock = threading.Lock()

    def list(self) -> list[Driver]:
        with self._session_factory() as db:
            return list(db.scalars(select(Driver).order_by(Driver.name, Driver.id)).all())

    def get(self, driver_id: int) -> Driver:
        with self._session_factory() as db:
            return self._load(db, driver_id)

    def assignable(self) -> list[Driver]:
        return assignable_drivers(self.list())

    def create(self, name: str, phone: str) -> Driver:
        name, phone = (name or "").strip(), (phone or "").strip()
        if not name or not phone:
            raise ValidationError("Driver name and phone are required")
        return self._write(None, lambda db, _: self._insert(db, name, phone))

    def update(self, driver_id: int, fields: dict[str, Any]) -> Driver:
        unknown = set(fields) - EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Driver fields not editable: {', '.join(sorted(unknown))}")

        def apply(db: Session, driver: Driver) -> Driver:
            for key, value in fields.items():
                value = (value or "").strip()
                if not value:
                    raise ValidationError(f"Driver {key} cannot be empty")
                setattr(driver, key, value)
            return driver

        return self._write(driver_id, apply)

    def set_status(self, driver_id: int, status: str) -> Driver:
        """Toggle the operator override; ``busy`` is derived and cannot be set."""
        if status not in {"available", "offline"}:
            raise ValidationError(f"Driver status '{status}' cannot be set manually")

        def apply(db: Session, driver: Driver) -> Driver:
            driver.manually_offline = status == "offline"
            return driver

        return self._write(driver_id, apply)

    def remove(self, driver_id: int) -> None:
        """Delete an idle driver; closed orders that named them lose the reference."""

        def apply(db: Session, driver: Driver) -> Driver:
            if driver.active_deliveries > 0:
                raise ValidationError(f"Driver {driver.name} still has {driver.active_deliveries} active deliveries")
            db.execute(
                update(Order)
                .where(Order.assigned_driver_id == driver.id)
                .values(assigned_driver_id=None, version=Order.version + 1)
                .execution_options(synchronize_session=False)
            )
            db.delete(driver)
            return driver

        self._write(driver_id, apply, publish=False)
        logger.info("[DRIVERS] Driver %s removed", driver_id)

    def subscribe(self, callback: DriverListener) -> Callable[[], None]:
        with self._listeners_lock:
            self._listeners.append(callback)

        def unsubscribe() -> None:
            with self._listeners_lock:
                if callback in self._listeners:
                    self._listeners.remove(callback)

        return unsubscribe

    def publish(self, driver: Driver) -> None:
        with self._listeners_lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(driver)
            except Exception:
                logger.exception("[DRIVERS] Listener failed for driver_id=%s", driver.id)

    def _load(self, db: Session, driver_id: int) -> Driver:
        driver = db.get(Driver, driver_id)
        if driver is None:
            raise NotFoundError(f"Driver {driver_id} not found")
        return driver

    def _insert(self, db: Session, name: str, phone: str) -> Driver:
        driver = Driver(name=name, phone=phone, manually_offline=False, active_deliveries=0)
        db.add(driver)
        return driver

    def _write(
        self,
        driver_id: int | None,
        apply: Callable[[Session, Driver | None], Driver],
        *,
        publish: bool = True,
    ) -> Driver:
        with self._session_factory() as db:
            try:
                driver = self._load(db, driver_id) if driver_id is not None else None
                result = apply(db, driver)
                db.commit()
            except ConsoleError:
                db.rollback()
                raise
            except SQLAlchemyError as exc:
                db.rollback()
                logger.exception("[DRIVERS] Write failed for driver_id=%s", driver_id)
                raise StoreError("Driver registry update failed") from exc
            if publish:
                db.refresh(result)
        if publish:
            self.publish(result)
        return result
