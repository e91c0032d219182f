"""Console state: notifications feed, toast, sync badge and operator preferences."""

from fastapi import APIRouter, Depends, HTTPException

from console.api.deps import get_intake, get_preferences
from console.core.preferences import ConsolePreferences
from console.schemas.console import ConsoleEventsRead, ConsoleStatus, PreferencesUpdate, ToastRead
from console.services.intake_monitor import IntakeConsole

router: APIRouter = APIRouter()


def _status(intake: IntakeConsole, preferences: ConsolePreferences) -> ConsoleStatus:
    toast = intake.toasts.current()
    return ConsoleStatus(
        sync_status=intake.sync.status,
        desktop_permission=intake.desktop.permission,
        active_tab=intake.view.active_tab,
        selected_order_id=intake.view.selected_order_id,
        toast=ToastRead.model_validate(toast) if toast is not None else None,
        audio_enabled=preferences.audio_enabled,
        staff_name=preferences.staff_name,
    )


@router.get("/status", response_model=ConsoleStatus)
def get_console_status(
    intake: IntakeConsole = Depends(get_intake),
    preferences: ConsolePreferences = Depends(get_preferences),
) -> ConsoleStatus:
    return _status(intake, preferences)


@router.get("/events", response_model=ConsoleEventsRead)
def get_console_events(after: int = 0, intake: IntakeConsole = Depends(get_intake)) -> ConsoleEventsRead:
    """Chimes and desktop notifications published after sequence ``after``."""
    return ConsoleEventsRead(events=intake.events.since(after))


@router.delete("/toast", status_code=204)
def dismiss_toast(intake: IntakeConsole = Depends(get_intake)) -> None:
    intake.toasts.close()


@router.post("/notifications/{tag}/click", response_model=ConsoleStatus)
def click_notification(
    tag: int,
    intake: IntakeConsole = Depends(get_intake),
    preferences: ConsolePreferences = Depends(get_preferences),
) -> ConsoleStatus:
    if not intake.desktop.click(tag):
        raise HTTPException(status_code=404, detail="Notification not found")
    return _status(intake, preferences)


@router.put("/preferences", response_model=ConsoleStatus)
def update_preferences(
    payload: PreferencesUpdate,
    intake: IntakeConsole = Depends(get_intake),
    preferences: ConsolePreferences = Depends(get_preferences),
) -> ConsoleStatus:
    if payload.staff_name is not None:
        preferences.staff_name = payload.staff_name.strip()
    if payload.audio_enabled is not None:
        preferences.audio_enabled = payload.audio_enabled
    return _status(intake, preferences)
