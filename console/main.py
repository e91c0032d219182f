"""FastAPI entrypoint for the order operations console."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from console.api.v1.api import api_router
from console.core.config import settings
from console.core.errors import (
    ConflictError,
    ConsoleError,
    InvalidTransition,
    NotFoundError,
    StoreError,
    ValidationError,
)
from console.core.preferences import ConsolePreferences
from console.db import session as db_session
from console.db.base import Base
from console.db.seed import ensure_seed_menu
from console.services.driver_registry import DriverRegistry
from console.services.intake_monitor import IntakeConsole
from console.services.order_store import OrderStore

logger = logging.getLogger(__name__)

ERROR_STATUS_CODES: list[tuple[type[ConsoleError], int]] = [
    (NotFoundError, 404),
    (ConflictError, 409),
    (StoreError, 503),
    (InvalidTransition, 409),
    (ValidationError, 422),
]

app = FastAPI(title=settings.app_name, debug=settings.debug)
app.include_router(api_router, prefix="/api/v1")


def status_code_for(exc: ConsoleError) -> int:
    for error_type, status_code in ERROR_STATUS_CODES:
        if isinstance(exc, error_type):
            return status_code
    return 400


@app.exception_handler(ConsoleError)
async def console_error_handler(request: Request, exc: ConsoleError) -> JSONResponse:
    status_code = status_code_for(exc)
    if isinstance(exc, StoreError):
        logger.warning("[STORE] %s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=status_code, content={"detail": exc.message, "kind": exc.kind})


@app.on_event("startup")
async def startup() -> None:
    Base.metadata.create_all(bind=db_session.engine)
    with db_session.SessionLocal() as session:
        try:
            seeded = ensure_seed_menu(session)
            logger.info("[BOOTSTRAP] demo menu seeded: %s", "yes" if seeded else "no")
        except Exception:
            logger.exception("[BOOTSTRAP] Menu seed failed; continuing startup.")

    preferences = ConsolePreferences.from_settings(settings)
    drivers = DriverRegistry()
    store = OrderStore(drivers=drivers)
    intake = IntakeConsole(store, settings, preferences)

    app.state.preferences = preferences
    app.state.driver_registry = drivers
    app.state.order_store = store
    app.state.intake = intake
    await intake.start()


@app.on_event("shutdown")
async def shutdown() -> None:
    intake: IntakeConsole | None = getattr(app.state, "intake", None)
    if intake is not None:
        await intake.close()


@app.get("/health")
def health() -> dict[str, str]:
    """Liveness check; the sync badge is presentation-only and not reported here."""
    return {"status": "ok"}
